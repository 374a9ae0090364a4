"""Canonical host addresses for filter lookups

Both families collapse to ``(version, int)`` so that addresses hash, compare
and order the same way regardless of how they were written.
"""
import ipaddress
import re
import typing

from .errors import InvalidAddress

__all__ = (
    'Address',
    'WILDCARD',
    'WILDCARD_TOKEN',
    'parse_address',
    'parse_cidr',
    'address_from_string',
    'contains',
    'equals',
)

WILDCARD_TOKEN = '*'

_WIDTHS = {0: 0, 4: 32, 6: 128}
_DECIMAL = re.compile(r'[0-9]+')
_MAPPED_PREFIXLEN = 96  # ::ffff:0:0/96 holds IPv4-mapped addresses


class Address(typing.NamedTuple):
    version: int  #: 4, 6 or 0 for the wildcard
    value: int

    @classmethod
    def v4(cls, value: int) -> 'Address':
        return cls(4, value & 0xFFFFFFFF)

    @classmethod
    def v6(cls, high: int, low: int) -> 'Address':
        return cls(6, (high & 0xFFFFFFFFFFFFFFFF) << 64 | (low & 0xFFFFFFFFFFFFFFFF))

    @classmethod
    def from_ip(cls, ip: typing.Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> 'Address':
        if ip.version == 6 and ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped
        return cls(ip.version, int(ip))

    @property
    def width(self) -> int:
        return _WIDTHS[self.version]

    @property
    def is_wildcard(self) -> bool:
        return self.version == 0

    def masked(self, prefixlen: int) -> 'Address':
        """Clear every bit after the first ``prefixlen`` ones"""
        shift = self.width - prefixlen
        return Address(self.version, self.value >> shift << shift)

    def __str__(self):
        if self.version == 4:
            return str(ipaddress.IPv4Address(self.value))
        if self.version == 6:
            return str(ipaddress.IPv6Address(self.value))
        return WILDCARD_TOKEN


WILDCARD = Address(0, 0)


def _parse_ip(text: str) -> typing.Union[ipaddress.IPv4Address, ipaddress.IPv6Address]:
    if not text or '/' in text or _DECIMAL.fullmatch(text):
        raise InvalidAddress(text)

    try:
        return ipaddress.ip_address(text)
    except ValueError:
        raise InvalidAddress(text) from None


def parse_address(text) -> Address:
    """Parse dotted IPv4, IPv6 or ``*``

    :raises InvalidAddress: on empty, malformed or non-string input.
        Bare integers like ``"0"`` are rejected too, they are not addresses.
    """
    if not isinstance(text, str):
        raise InvalidAddress(text)

    text = text.strip()
    if text == WILDCARD_TOKEN:
        return WILDCARD

    return Address.from_ip(_parse_ip(text))


def parse_cidr(text) -> typing.Tuple[Address, int]:
    """Parse ``address[/prefixlen]``

    Without a prefix length the pattern is a single host (``/32`` or ``/128``).
    Host bits after the prefix are cleared: ``10.0.0.3/24`` is ``10.0.0.0/24``.
    The prefix length is checked against the family as written, then
    ``::ffff:a.b.c.d/n`` with ``n >= 96`` becomes ``a.b.c.d/(n - 96)``.
    Shorter mapped prefixes stay IPv6.
    """
    if not isinstance(text, str):
        raise InvalidAddress(text)

    host, sep, prefix = text.strip().partition('/')
    host = host.strip()

    if host == WILDCARD_TOKEN:
        if sep:
            raise InvalidAddress(text)
        return WILDCARD, 0

    ip = _parse_ip(host)

    if not sep:
        prefixlen = ip.max_prefixlen
    elif _DECIMAL.fullmatch(prefix):
        prefixlen = int(prefix)
        if prefixlen > ip.max_prefixlen:
            raise InvalidAddress(text, f'prefix length out of range [0, {ip.max_prefixlen}]')
    else:
        raise InvalidAddress(text)

    if ip.version == 6 and ip.ipv4_mapped is not None:
        if prefixlen >= _MAPPED_PREFIXLEN:
            address = Address(4, int(ip.ipv4_mapped))
            prefixlen -= _MAPPED_PREFIXLEN
        else:
            address = Address(6, int(ip))
    else:
        address = Address(ip.version, int(ip))

    return address.masked(prefixlen), prefixlen


def address_from_string(text) -> typing.Optional[Address]:
    """Same as :func:`parse_address`, but ``None`` instead of an exception"""
    try:
        return parse_address(text)
    except InvalidAddress:
        return None


def contains(prefix: Address, prefixlen: int, candidate: Address) -> bool:
    if prefix.version != candidate.version or prefix.is_wildcard:
        return False

    shift = prefix.width - prefixlen
    return (prefix.value ^ candidate.value) >> shift == 0


def equals(a: Address, b: Address) -> bool:
    return a.version == b.version and a.value == b.value
