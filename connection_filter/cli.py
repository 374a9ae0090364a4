import pathlib

import click

from .address import address_from_string
from .matcher import is_blacklisted_connection
from .ports import Protocol
from .table import parse_connection_filters


def _load_filters(config_path: pathlib.Path = None):
    from . import config

    try:
        if config_path is None:
            return config.settings.filters
        return config.load_filters(config_path)
    except config.ConfigurationError as exc:
        raise click.ClickException(str(exc))


@click.group()
@click.option(
    '--config',
    'config_path',
    type=click.Path(dir_okay=False, path_type=pathlib.Path),
    default=None,
    help='Filters YAML file. Default: CONNFILTER_CONFIG_FILE setting',
)
@click.pass_context
def connfilter(ctx, config_path):
    """Connection filters toolbox"""
    ctx.obj = config_path


@connfilter.command()
@click.pass_context
def validate(ctx):
    """Show parsed filters and ignored lines

    Exit code is 1 if any line was ignored.
    """
    filters = _load_filters(ctx.obj)

    dropped = 0
    for direction, raw in (('source', filters.source_excludes), ('dest', filters.dest_excludes)):
        table = parse_connection_filters(raw)
        entries = list(table.entries())

        click.echo(f'{direction}: {len(entries)} entries, {len(table.dropped)} dropped')
        for entry in entries:
            click.echo(f'  {entry}')
        for address_pattern, exc in table.dropped:
            click.echo(f'  dropped {address_pattern!r}: {exc}')

        dropped += len(table.dropped)

    if dropped:
        ctx.exit(1)


@connfilter.command()
@click.argument('address')
@click.argument('port', type=click.IntRange(0, 65535))
@click.option('--protocol', type=click.Choice(['tcp', 'udp'], case_sensitive=False), default='tcp', show_default=True)
@click.option('--direction', type=click.Choice(['source', 'dest']), default='dest', show_default=True)
@click.pass_obj
def check(config_path, address, port, protocol, direction):
    """Tell whether a connection to/from ADDRESS:PORT is blacklisted"""
    filters = _load_filters(config_path)
    raw = filters.source_excludes if direction == 'source' else filters.dest_excludes

    if address_from_string(address) is None:
        click.echo(f'Not an IP address: {address!r}, only wildcard address rules apply', err=True)

    table = parse_connection_filters(raw)
    if is_blacklisted_connection(table, address, port, Protocol.from_value(protocol)):
        click.echo('blacklisted')
    else:
        click.echo('allowed')


if __name__ == '__main__':
    connfilter()
