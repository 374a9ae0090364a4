import logging
import pathlib
import typing

import sentry_sdk
import yaml
from cached_property import cached_property
from pydantic import AnyHttpUrl
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import ValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from sentry_sdk.integrations.logging import LoggingIntegration

from . import __version__
from .logging import setup_logging

__all__ = (
    'FiltersModel',
    'Settings',
    'ConfigurationError',
    'load_filters',
    'settings',
)

logger = logging.getLogger('connfilter.config')


class ConfigurationError(Exception):
    pass


# Address patterns and port patterns are kept as written,
# one broken line must not reject the whole file
RawFiltersType = typing.Dict[typing.Any, typing.Any]


class FiltersModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

    source_excludes: RawFiltersType = {}
    dest_excludes: RawFiltersType = {}

    @field_validator('source_excludes', 'dest_excludes', mode='before')
    @classmethod
    def _empty_section(cls, v):
        if v is None:
            return {}
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_prefix='CONNFILTER_',
        extra='ignore',
        ignored_types=(cached_property,),
    )

    sentry_dsn: typing.Optional[AnyHttpUrl] = None
    config_file: pathlib.Path = pathlib.Path('/etc/connfilter/filters.yaml')
    error_log: pathlib.Path = pathlib.Path('/dev/null')
    loglevel: str = 'INFO'

    @field_validator('loglevel')
    @classmethod
    def _check_loglevel(cls, v):
        from logging import _checkLevel  # noqa

        _checkLevel(v.upper())
        return v.upper()

    @cached_property
    def filters(self) -> FiltersModel:
        return load_filters(self.config_file)


def load_filters(path: pathlib.Path) -> FiltersModel:
    """Read ``source_excludes`` / ``dest_excludes`` from YAML file

    Missing file means no filters at all.
    """
    if not path.exists():
        logger.info('Filters config not found: %s', path.absolute().as_posix())
        return FiltersModel()

    if not path.is_file():
        raise ConfigurationError(f'Filters config expected to be a file: {path.absolute().as_posix()}')

    logger.info('Found filters config: %s', path.as_posix())
    with path.open() as fp:
        try:
            data = yaml.safe_load(fp)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f'Broken YAML in {path.as_posix()}: {exc}') from exc

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigurationError(f'Filters config expected to be a mapping: {path.as_posix()}')

    try:
        return FiltersModel.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f'Invalid filters config {path.as_posix()}: {exc}') from exc


def setup(settings_: Settings = None, reread: bool = False):
    global settings
    if settings_ is None or reread:
        logger.info('Re-read settings')
        settings_ = Settings()

    settings = settings_

    if settings.sentry_dsn:
        sentry_logging = LoggingIntegration(
            level=logging.DEBUG,  # Capture info and above as breadcrumbs
            event_level=logging.ERROR,  # Send errors as events
        )
        sentry_sdk.init(
            dsn=str(settings.sentry_dsn),
            integrations=[sentry_logging],
            release=__version__,
        )

    setup_logging(loglevel=settings.loglevel, error_filename=settings.error_log.as_posix())

    if settings.sentry_dsn:
        logger.debug('Sentry enabled')
    else:
        logger.debug('Sentry disabled')

    return settings


settings = Settings()

setup(settings)


def __getattr__(name):
    if name == 'filters':
        return settings.filters
    else:
        raise AttributeError(name)
