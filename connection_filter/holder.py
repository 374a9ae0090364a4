import logging
import threading
import typing

from .matcher import AddressLike
from .matcher import Connection
from .matcher import is_blacklisted_connection
from .matcher import is_excluded_connection
from .ports import Protocol
from .table import FilterTable
from .table import parse_connection_filters

__all__ = (
    'FilterTableHolder',
    'ConnectionFilters',
)


class FilterTableHolder:
    """Published filter table, replaced as a whole on reload

    Readers grab :attr:`table` once and keep using that snapshot,
    only writers take the lock.
    """

    def __init__(self, raw: typing.Optional[typing.Mapping] = None, name: str = 'filters'):
        self.name = name
        self.logger = logging.getLogger(f'connfilter.{name}')
        self._lock = threading.Lock()
        self._table = FilterTable.empty()

        if raw is not None:
            self.reload(raw)

    @property
    def table(self) -> FilterTable:
        return self._table

    def reload(self, raw: typing.Optional[typing.Mapping]) -> FilterTable:
        with self._lock:
            table = parse_connection_filters(raw)
            self._table = table

        self.logger.info(
            'Filters reloaded: %s entries, %s dropped',
            sum(1 for _ in table.entries()),
            len(table.dropped),
        )
        return table

    def is_blacklisted(self, address: AddressLike, port: int, protocol: Protocol) -> bool:
        return is_blacklisted_connection(self._table, address, port, protocol)


class ConnectionFilters:
    """Source and destination exclusion tables of the agent"""

    def __init__(self, source_excludes: typing.Optional[typing.Mapping] = None, dest_excludes=None):
        self.source = FilterTableHolder(source_excludes, name='source')
        self.dest = FilterTableHolder(dest_excludes, name='dest')

    @classmethod
    def from_model(cls, filters) -> 'ConnectionFilters':
        """:param filters: :class:`connection_filter.config.FiltersModel`-like object"""
        return cls(filters.source_excludes, filters.dest_excludes)

    def reload(self, filters):
        self.source.reload(filters.source_excludes)
        self.dest.reload(filters.dest_excludes)

    def is_excluded(self, conn: Connection) -> bool:
        return is_excluded_connection(self.source.table, self.dest.table, conn)
