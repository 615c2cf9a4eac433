from .config import config, JobConfig
from .db import db, session_scope
from .logging_setup import logger, get_logger
from .exceptions import (
    NewsvendorError, ConfigError, SchemaMismatchError, NotFoundError,
    DataIntegrityError, DatabaseError, ReportingError, BatchProcessError
)

__all__ = [
    'config',
    'JobConfig',
    'db',
    'session_scope',
    'logger',
    'get_logger',
    'NewsvendorError',
    'ConfigError',
    'SchemaMismatchError',
    'NotFoundError',
    'DataIntegrityError',
    'DatabaseError',
    'ReportingError',
    'BatchProcessError'
]
