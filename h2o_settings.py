""" settings for the h2o command wrapper, read from environment """

import logging
import os
from dataclasses import dataclass
from typing import Optional

BASE_URL = 'http://localhost:54321/3/{endpoint}'
POLL_INTERVAL = 1.0
DEFAULT_PORT = 54321


@dataclass(frozen=True)
class Settings:
    """ connection, polling and server launch settings """

    base_url: str = BASE_URL
    poll_interval: float = POLL_INTERVAL
    job_timeout: Optional[float] = None
    request_timeout: Optional[float] = None
    jar: str = 'h2o.jar'
    port: int = DEFAULT_PORT
    java: str = 'java'


def _number(environ, name, cast, default):
    raw = environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f'{name} must be a number, got: {raw!r}') from None


def load_settings(environ=None) -> Settings:
    """ build Settings from H2O_* environment variables """
    environ = os.environ if environ is None else environ
    return Settings(
        base_url=environ.get('H2O_BASE_URL') or BASE_URL,
        poll_interval=_number(environ, 'H2O_POLL_INTERVAL', float, POLL_INTERVAL),
        job_timeout=_number(environ, 'H2O_JOB_TIMEOUT', float, None),
        request_timeout=_number(environ, 'H2O_REQUEST_TIMEOUT', float, None),
        jar=environ.get('H2O_JAR') or 'h2o.jar',
        port=_number(environ, 'H2O_PORT', int, DEFAULT_PORT),
        java=environ.get('H2O_JAVA') or 'java',
    )


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    )
