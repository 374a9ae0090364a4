import enum
import logging
import typing
from collections.abc import Mapping
from types import MappingProxyType

from .address import WILDCARD
from .address import Address
from .address import parse_cidr
from .errors import FilterConfigError
from .errors import RejectedGlobalWildcard
from .ports import RulesType
from .ports import covers_everything
from .ports import parse_port_rules

__all__ = (
    'PatternKind',
    'FilterEntry',
    'CIDRBlock',
    'FilterTable',
    'parse_filter_entry',
    'parse_connection_filters',
)

logger = logging.getLogger('connfilter.table')


class PatternKind(enum.Enum):
    EXACT = 'exact'
    CIDR = 'cidr'
    WILDCARD = 'wildcard'


class FilterEntry(typing.NamedTuple):
    kind: PatternKind
    address: Address
    prefixlen: int
    rules: RulesType

    def __str__(self):
        if self.kind is PatternKind.CIDR:
            pattern = f'{self.address}/{self.prefixlen}'
        else:
            pattern = str(self.address)
        return '{}: [{}]'.format(pattern, ', '.join(str(rule) for rule in self.rules))


class CIDRBlock(typing.NamedTuple):
    network: Address
    prefixlen: int
    shift: int  #: host bits count, candidate matches when ``(network ^ candidate) >> shift == 0``
    rules: RulesType


DroppedType = typing.Tuple[typing.Tuple[typing.Any, FilterConfigError], ...]


class FilterTable(typing.NamedTuple):
    """Immutable lookup structure, safe to share between threads

    Build it with :func:`parse_connection_filters`, query it with
    :func:`connection_filter.matcher.is_blacklisted_connection`.
    """

    exact: typing.Mapping[Address, RulesType]
    cidrs: typing.Tuple[CIDRBlock, ...]
    wildcard: typing.Optional[RulesType]
    dropped: DroppedType = ()  #: ``(address pattern, reason)`` of every ignored config line

    @classmethod
    def empty(cls) -> 'FilterTable':
        return cls(exact=MappingProxyType({}), cidrs=(), wildcard=None)

    @property
    def is_empty(self) -> bool:
        return not self.exact and not self.cidrs and self.wildcard is None

    def entries(self) -> typing.Iterator[FilterEntry]:
        for address, rules in self.exact.items():
            yield FilterEntry(PatternKind.EXACT, address, address.width, rules)

        for block in self.cidrs:
            yield FilterEntry(PatternKind.CIDR, block.network, block.prefixlen, block.rules)

        if self.wildcard is not None:
            yield FilterEntry(PatternKind.WILDCARD, WILDCARD, 0, self.wildcard)


def parse_filter_entry(address_pattern, port_patterns) -> FilterEntry:
    """Validate one config line

    :raises FilterConfigError: the whole line must be ignored
    """
    address, prefixlen = parse_cidr(address_pattern)
    rules = parse_port_rules(port_patterns)

    if address.is_wildcard:
        if covers_everything(rules):
            raise RejectedGlobalWildcard(address_pattern)
        return FilterEntry(PatternKind.WILDCARD, WILDCARD, 0, rules)

    if prefixlen == address.width:
        return FilterEntry(PatternKind.EXACT, address, prefixlen, rules)

    return FilterEntry(PatternKind.CIDR, address, prefixlen, rules)


def _merge_rules(current: typing.Optional[RulesType], rules: RulesType) -> RulesType:
    if not current:
        return rules
    return tuple(dict.fromkeys(current + rules))


def parse_connection_filters(raw: typing.Optional[typing.Mapping[str, typing.Any]]) -> FilterTable:
    """Build a filter table from ``{address pattern: [port pattern, ...]}``

    Never fails: invalid lines are logged, recorded in ``FilterTable.dropped``
    and otherwise ignored. Lines resolving to the same address are merged.
    """
    if raw is None:
        return FilterTable.empty()

    if not isinstance(raw, Mapping):
        logger.warning('Connection filters expected to be a mapping, not %s. Ignored', type(raw).__name__)
        return FilterTable.empty()

    exact: typing.Dict[Address, RulesType] = {}
    cidrs: typing.Dict[typing.Tuple[Address, int], RulesType] = {}
    wildcard: typing.Optional[RulesType] = None
    dropped = []

    for address_pattern, port_patterns in raw.items():
        try:
            entry = parse_filter_entry(address_pattern, port_patterns)
        except FilterConfigError as exc:
            logger.warning('Filter %r: %r dropped: %s', address_pattern, port_patterns, exc)
            dropped.append((address_pattern, exc))
            continue

        if entry.kind is PatternKind.EXACT:
            exact[entry.address] = _merge_rules(exact.get(entry.address), entry.rules)
        elif entry.kind is PatternKind.CIDR:
            key = entry.address, entry.prefixlen
            cidrs[key] = _merge_rules(cidrs.get(key), entry.rules)
        else:
            wildcard = _merge_rules(wildcard, entry.rules)

    table = FilterTable(
        exact=MappingProxyType(exact),
        cidrs=tuple(
            CIDRBlock(network, prefixlen, network.width - prefixlen, rules)
            for (network, prefixlen), rules in cidrs.items()
        ),
        wildcard=wildcard,
        dropped=tuple(dropped),
    )

    logger.debug(
        'Filter table built: exact=%s cidr=%s wildcard=%s dropped=%s',
        len(table.exact),
        len(table.cidrs),
        table.wildcard is not None,
        len(table.dropped),
    )
    return table
