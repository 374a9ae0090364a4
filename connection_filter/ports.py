import enum
import re
import typing

from .errors import InvalidPortRange
from .errors import InvalidPortToken
from .errors import InvalidPortValue

__all__ = (
    'Protocol',
    'PortRule',
    'MAX_PORT',
    'FULL_RANGE',
    'parse_port_rule',
    'parse_port_rules',
    'covers_everything',
)

MAX_PORT = 65535

_DECIMAL = re.compile(r'[0-9]+')


class Protocol(str, enum.Enum):
    TCP = 'tcp'
    UDP = 'udp'
    ANY = 'any'  #: only inside configured rules, observed connections are always tcp or udp

    @classmethod
    def from_value(cls, value) -> 'Protocol':
        """Protocol of an observed connection: a member, its name in any case or an IANA protocol number

        :raises ValueError: unknown protocol or :attr:`ANY`, which is not a real transport
        """
        if isinstance(value, cls):
            protocol = value
        elif isinstance(value, int) and not isinstance(value, bool):
            try:
                protocol = _IANA_NUMBERS[value]
            except KeyError:
                raise ValueError(f'unknown protocol number: {value}') from None
        elif isinstance(value, str):
            protocol = cls(value.strip().lower())
        else:
            raise ValueError(f'unknown protocol: {value!r}')

        if protocol is cls.ANY:
            raise ValueError('observed connection protocol must be tcp or udp')
        return protocol


_IANA_NUMBERS = {6: Protocol.TCP, 17: Protocol.UDP}
_KEYWORDS = {'tcp': Protocol.TCP, 'udp': Protocol.UDP}


class PortRule(typing.NamedTuple):
    protocol: Protocol
    low: int
    high: int

    def matches(self, port: int, protocol: Protocol) -> bool:
        return self.low <= port <= self.high and (self.protocol is Protocol.ANY or self.protocol == protocol)

    def __str__(self):
        if self.low == 0 and self.high == MAX_PORT:
            ports = '*'
        elif self.low == self.high:
            ports = str(self.low)
        else:
            ports = f'{self.low}-{self.high}'

        if self.protocol is Protocol.ANY:
            return ports
        return f'{self.protocol.value} {ports}'


FULL_RANGE = PortRule(Protocol.ANY, 0, MAX_PORT)

RulesType = typing.Tuple[PortRule, ...]


def _parse_port(text: str, token) -> int:
    if not _DECIMAL.fullmatch(text):
        raise InvalidPortToken(token)

    # int() refuses huge digit strings, anything that long is out of range anyway
    if len(text.lstrip('0')) > len(str(MAX_PORT)):
        raise InvalidPortValue(token)

    port = int(text)
    if port > MAX_PORT:
        raise InvalidPortValue(token)
    return port


def parse_port_rule(token) -> PortRule:
    """Parse one port pattern: ``[tcp|udp] (port | low-high | *)``

    :raises InvalidPortToken: unrecognized shape
    :raises InvalidPortRange: ``low > high``
    :raises InvalidPortValue: port outside ``[0, 65535]``
    """
    if isinstance(token, int) and not isinstance(token, bool):
        # unquoted ports in YAML
        token = str(token)

    if not isinstance(token, str):
        raise InvalidPortToken(token)

    words = token.split()
    if len(words) == 1:
        protocol = Protocol.ANY
        ports = words[0]
    elif len(words) == 2:
        keyword, ports = words
        protocol = _KEYWORDS.get(keyword.lower())
        if protocol is None:
            raise InvalidPortToken(token)
    else:
        raise InvalidPortToken(token)

    if ports == '*':
        return PortRule(protocol, 0, MAX_PORT)

    bounds = ports.split('-')
    if len(bounds) == 1:
        port = _parse_port(bounds[0], token)
        return PortRule(protocol, port, port)

    if len(bounds) == 2:
        low = _parse_port(bounds[0], token)
        high = _parse_port(bounds[1], token)
        if low > high:
            raise InvalidPortRange(token)
        return PortRule(protocol, low, high)

    raise InvalidPortToken(token)


def parse_port_rules(tokens) -> RulesType:
    """Parse all port patterns of one address, all or nothing

    Duplicates are dropped, the order of first appearance is kept.
    A single scalar is treated as a one-item list, any other container
    than a list or tuple is :class:`InvalidPortToken`.
    """
    if isinstance(tokens, (str, int)):
        tokens = [tokens]
    elif not isinstance(tokens, (list, tuple)):
        raise InvalidPortToken(tokens)

    rules = [parse_port_rule(token) for token in tokens]

    if not rules:
        raise InvalidPortToken(tokens, 'no port patterns')

    return tuple(dict.fromkeys(rules))


def covers_everything(rules: typing.Iterable[PortRule]) -> bool:
    """True if ``rules`` match every port of both tcp and udp"""
    rules = list(rules)

    for protocol in (Protocol.TCP, Protocol.UDP):
        intervals = sorted((r.low, r.high) for r in rules if r.protocol is Protocol.ANY or r.protocol == protocol)

        next_port = 0
        for low, high in intervals:
            if low > next_port:
                break
            next_port = max(next_port, high + 1)

        if next_port <= MAX_PORT:
            return False

    return True
