import ipaddress

import pytest

from connection_filter.address import WILDCARD
from connection_filter.address import Address
from connection_filter.address import address_from_string
from connection_filter.address import contains
from connection_filter.address import equals
from connection_filter.address import parse_address
from connection_filter.address import parse_cidr
from connection_filter.errors import InvalidAddress


@pytest.mark.parametrize(
    'text, expected',
    [
        ('10.0.0.1', Address(4, 0x0A000001)),
        (' 10.0.0.1 ', Address(4, 0x0A000001)),
        ('::7f00:35:0:0', Address(6, 0x7F00_0035_0000_0000)),
        ('2001:db8::2:1', Address(6, int(ipaddress.IPv6Address('2001:db8::2:1')))),
        ('::ffff:10.0.0.1', Address(4, 0x0A000001)),
        ('*', WILDCARD),
    ],
)
def test_parse_address(text, expected):
    assert parse_address(text) == expected


@pytest.mark.parametrize(
    'text',
    ['', '   ', '123.ABCD', '0', '167772161', '10.0.0.0/24', '*/8', '10.0.0.256', '2001:db8::2::1', None, 42],
)
def test_parse_address_invalid(text):
    with pytest.raises(InvalidAddress):
        parse_address(text)


def test_numeric_address_does_not_alias_ipv6():
    """Bare numbers used to be converted to whatever address they encoded"""
    assert address_from_string('0') is None
    assert address_from_string('::7f00:35:0:0') is not None


def test_address_from_string():
    assert address_from_string('172.0.0.1') == Address(4, 0xAC000001)
    assert address_from_string('nope') is None
    assert address_from_string(None) is None


@pytest.mark.parametrize(
    'text, expected',
    [
        ('10.0.0.1', (Address(4, 0x0A000001), 32)),
        ('10.0.0.0/24', (Address(4, 0x0A000000), 24)),
        ('10.0.0.3/24', (Address(4, 0x0A000000), 24)),
        ('0.0.0.0/0', (Address(4, 0), 0)),
        ('2001:db8::2:1', (parse_address('2001:db8::2:1'), 128)),
        ('2001:db8::2:1/55', (parse_address('2001:db8::'), 55)),
        ('::ffff:10.0.0.9', (Address(4, 0x0A000009), 32)),
        ('::ffff:10.0.0.9/128', (Address(4, 0x0A000009), 32)),
        ('::ffff:10.0.0.9/120', (Address(4, 0x0A000000), 24)),
        ('::ffff:10.0.0.9/96', (Address(4, 0), 0)),
        ('::ffff:10.0.0.9/80', (Address(6, 0), 80)),  # shorter than the mapped block, stays IPv6
        ('*', (WILDCARD, 0)),
    ],
)
def test_parse_cidr(text, expected):
    assert parse_cidr(text) == expected


@pytest.mark.parametrize(
    'text',
    ['', '10.0.0.0/33', '::ffff:10.0.0.0/129', '2001:db8::/129', '10.0.0.0/', '10.0.0.0/x', '10.0.0.0/-1', '*/0'],
)
def test_parse_cidr_invalid(text):
    with pytest.raises(InvalidAddress):
        parse_cidr(text)


def test_contains():
    network, prefixlen = parse_cidr('10.0.0.0/24')
    assert contains(network, prefixlen, parse_address('10.0.0.5'))
    assert contains(network, prefixlen, parse_address('10.0.0.255'))
    assert not contains(network, prefixlen, parse_address('10.0.1.5'))

    network, prefixlen = parse_cidr('2001:db8::2:1/55')
    assert contains(network, prefixlen, parse_address('2001:db8::5:1'))
    assert not contains(network, prefixlen, parse_address('2001:db9::5:1'))


def test_contains_never_crosses_families():
    network, prefixlen = parse_cidr('0.0.0.0/0')
    assert contains(network, prefixlen, parse_address('192.168.1.1'))
    assert not contains(network, prefixlen, parse_address('::1'))
    assert not contains(network, prefixlen, WILDCARD)
    assert not contains(WILDCARD, 0, parse_address('192.168.1.1'))


def test_equals():
    assert equals(parse_address('10.0.0.1'), Address.v4(0x0A000001))
    assert equals(WILDCARD, parse_address('*'))
    assert not equals(Address(4, 1), Address(6, 1))
    assert not equals(WILDCARD, Address(4, 0))


def test_addresses_are_ordered_by_family_first():
    addresses = [parse_address('::1'), parse_address('10.0.0.1'), WILDCARD, parse_address('1.1.1.1')]
    assert [str(a) for a in sorted(addresses)] == ['*', '1.1.1.1', '10.0.0.1', '::1']


def test_raw_integer_constructors():
    assert Address.v4(0x0A000001) == parse_address('10.0.0.1')
    assert Address.v6(0x20010DB800000000, 0x0000000000020001) == parse_address('2001:db8::2:1')
    assert Address.from_ip(ipaddress.ip_address('::ffff:1.2.3.4')) == parse_address('1.2.3.4')
    assert str(Address.v6(0, 1)) == '::1'
