import logging.config
import logging.handlers
import os

_STREAMS = {'/dev/stderr': 'ext://sys.stderr', '/dev/stdout': 'ext://sys.stdout'}


class MakedirsRotatingFileHandler(logging.handlers.RotatingFileHandler):
    def _open(self):
        os.makedirs(os.path.dirname(self.baseFilename), exist_ok=True)
        return super()._open()


def get_file_handler_opts(filename: str, level: str):
    if filename == '/dev/null':
        return {
            'class': 'logging.NullHandler',
            'level': level,
        }

    stream = _STREAMS.get(filename.rstrip('/'))
    if stream is not None:
        return {
            'class': 'logging.StreamHandler',
            'stream': stream,
            'level': level,
            'formatter': 'verbose',
        }

    return {
        'class': MakedirsRotatingFileHandler.__module__ + '.' + MakedirsRotatingFileHandler.__qualname__,
        'maxBytes': 1024 * 1024,
        'backupCount': 3,
        'level': level,
        'formatter': 'verbose',
        'filename': filename,
    }


def setup_logging(loglevel=logging.INFO, error_filename: str = None):
    """Console gets ``loglevel`` and above, ``error_filename`` errors only

    Console logs go to stderr, stdout is left to CLI output.
    """
    if error_filename is None:
        error_filename = '/dev/null'

    # fmt: off
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'verbose': {
                    'format': '%(asctime)s [%(levelname)s] [%(name)s] %(message)s',
                },
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'stream': 'ext://sys.stderr',
                    'level': loglevel,
                    'formatter': 'verbose',
                },
                'error_file': get_file_handler_opts(error_filename, 'ERROR'),
            },
            'loggers': {
                '': {'handlers': ['console', 'error_file'], 'level': 'DEBUG', 'propagate': False},
                'connfilter': {'level': 'DEBUG', 'propagate': True},
            },
        }
    )
    # fmt: on
