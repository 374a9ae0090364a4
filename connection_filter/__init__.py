__version__ = '0.1.0'

from .address import WILDCARD  # noqa: E402
from .address import Address  # noqa: E402
from .address import address_from_string  # noqa: E402
from .address import parse_address  # noqa: E402
from .address import parse_cidr  # noqa: E402
from .errors import FilterConfigError  # noqa: E402
from .holder import ConnectionFilters  # noqa: E402
from .holder import FilterTableHolder  # noqa: E402
from .matcher import Connection  # noqa: E402
from .matcher import is_blacklisted_connection  # noqa: E402
from .matcher import is_excluded_connection  # noqa: E402
from .ports import PortRule  # noqa: E402
from .ports import Protocol  # noqa: E402
from .table import FilterTable  # noqa: E402
from .table import parse_connection_filters  # noqa: E402

__all__ = (
    'WILDCARD',
    'Address',
    'address_from_string',
    'parse_address',
    'parse_cidr',
    'FilterConfigError',
    'ConnectionFilters',
    'FilterTableHolder',
    'Connection',
    'is_blacklisted_connection',
    'is_excluded_connection',
    'PortRule',
    'Protocol',
    'FilterTable',
    'parse_connection_filters',
)
