"""Hot path: called once per observed connection

Nothing here logs, locks or raises.
"""
import ipaddress
import typing

from .address import Address
from .address import address_from_string
from .ports import Protocol
from .ports import RulesType
from .table import FilterTable

__all__ = (
    'Connection',
    'rules_match',
    'is_blacklisted_connection',
    'is_excluded_connection',
)

AddressLike = typing.Union[Address, str, ipaddress.IPv4Address, ipaddress.IPv6Address, None]


class Connection(typing.NamedTuple):
    source: AddressLike
    dest: AddressLike
    sport: int
    dport: int
    protocol: Protocol


def _canonical(address: AddressLike) -> typing.Optional[Address]:
    if isinstance(address, Address):
        return address
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return Address.from_ip(address)
    return address_from_string(address)


def rules_match(rules: RulesType, port: int, protocol: Protocol) -> bool:
    for rule in rules:
        if rule.low <= port <= rule.high and (rule.protocol is Protocol.ANY or rule.protocol == protocol):
            return True
    return False


def is_blacklisted_connection(table: FilterTable, address: AddressLike, port: int, protocol: Protocol) -> bool:
    """Check exact addresses, then CIDR blocks, then the wildcard address

    An address that can't be parsed only reaches the wildcard rules.
    """
    address = _canonical(address)

    if address is not None and not address.is_wildcard:
        rules = table.exact.get(address)
        if rules is not None and rules_match(rules, port, protocol):
            return True

        version, value = address
        for block in table.cidrs:
            network = block.network
            if (
                network.version == version
                and (network.value ^ value) >> block.shift == 0
                and rules_match(block.rules, port, protocol)
            ):
                return True

    wildcard = table.wildcard
    return wildcard is not None and rules_match(wildcard, port, protocol)


def is_excluded_connection(
    source_table: typing.Optional[FilterTable],
    dest_table: typing.Optional[FilterTable],
    conn: Connection,
) -> bool:
    """Either side of the connection blacklisted by its own table"""
    if source_table is not None and is_blacklisted_connection(source_table, conn.source, conn.sport, conn.protocol):
        return True

    return dest_table is not None and is_blacklisted_connection(dest_table, conn.dest, conn.dport, conn.protocol)
