import logging

import pytest

from connection_filter import parse_connection_filters
from fixtures.config import *  # noqa: F401,F403


@pytest.fixture()
def source_filters():
    """Mixed valid/invalid lines, exact addresses and wildcard address"""
    return {
        '172.0.0.1': ['80', '10', '443'],
        '*': ['9000'],  # only port 9000
        '::7f00:35:0:0': ['443'],  # ipv6
        '10.0.0.10': ['3333', '*'],
        '10.0.0.25': ['30', 'ABCD'],  # invalid port
        '123.ABCD': ['*'],  # invalid address
        '172.0.0.2': ['80', '10', '443', '53361-53370', '100-100'],
        '::7f00:35:0:1': ['65536'],  # port out of range
        '10.0.0.11': ['3333', '*', '53361-53370'],
        '10.0.0.26': ['30', '53361-53360'],  # low > high
        '10.0.0.1': ['tcp *', '53361-53370'],
        '10.0.0.2': ['tcp 53361-53500', 'udp 119'],
    }


@pytest.fixture()
def dest_filters():
    """CIDR blocks of both families"""
    return {
        '10.0.0.0/24': ['8080', '8081', '10255'],
        '': ['1234'],  # invalid address
        '2001:db8::2:1': ['5001'],
        '2001:db8::2:1/55': ['80'],
        '*': ['*'],  # blacklists everything, rejected
        '2001:db8::2:2': ['3333 udp'],  # protocol after port
        '10.0.0.3/24': ['30-ABC'],  # invalid range
        '10.0.0.4': ['udp *', '*'],
        '2001:db8::2:2/55': ['8080-8082-8085'],  # too many range bounds
    }


@pytest.fixture()
def source_table(source_filters):
    return parse_connection_filters(source_filters)


@pytest.fixture()
def dest_table(dest_filters):
    return parse_connection_filters(dest_filters)


@pytest.fixture(autouse=True)
def _check_no_errors(caplog):
    yield
    for when in ('setup', 'call'):
        messages = [x.message for x in caplog.get_records(when) if x.levelno >= logging.ERROR]
        if messages:
            pytest.fail(f'error messages encountered during testing: {messages!r}')
