__all__ = (
    'FilterConfigError',
    'InvalidAddress',
    'InvalidPortToken',
    'InvalidPortRange',
    'InvalidPortValue',
    'RejectedGlobalWildcard',
)


class FilterConfigError(ValueError):
    """Base class for a filter line that can't be honored

    Never leaves :func:`connection_filter.table.parse_connection_filters`,
    the builder catches it and drops the line.
    """

    reason = 'invalid filter configuration'

    def __init__(self, value, reason: str = None):
        self.value = value
        if reason is not None:
            self.reason = reason
        super().__init__(f'{self.reason}: {value!r}')


class InvalidAddress(FilterConfigError):
    reason = 'invalid address'


class InvalidPortToken(FilterConfigError):
    reason = 'invalid port pattern'


class InvalidPortRange(FilterConfigError):
    reason = 'invalid port range, low > high'


class InvalidPortValue(FilterConfigError):
    reason = 'port out of range [0, 65535]'


class RejectedGlobalWildcard(FilterConfigError):
    reason = 'wildcard address with wildcard ports would blacklist every connection'
