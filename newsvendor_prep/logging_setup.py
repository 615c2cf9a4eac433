import logging
import logging.handlers
from datetime import datetime
from pathlib import Path

from newsvendor_prep.config import config

class Logger:
    """Logging manager for the newsvendor preparation job.

    Every named logger gets a rotating file in the configured log directory
    and, when enabled, console output. Module loggers obtained through
    logging.getLogger propagate to the root logger's console handler.
    """

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger if not already initialized."""
        if self._initialized:
            return

        self.configure()
        self._initialized = True

    def configure(self):
        """Apply the [LOGGING] settings of the loaded configuration."""
        self._log_config = config.log_config
        self._log_dir = Path(self._log_config['directory'])
        self._log_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(self._level())
        _replace_handlers(root_logger, [self._console_handler()] if self._log_config['console_output'] else [])

        for name, named_logger in self._loggers.items():
            self._attach(name, named_logger)

    def reconfigure(self):
        """Re-read the logging settings after the configuration file changed."""
        self.configure()
        logging.getLogger(__name__).debug(f"Logging reconfigured to {self._log_dir}")

    @property
    def log_dir(self):
        return self._log_dir

    def _level(self):
        level_name = self._log_config['level'].upper()
        return getattr(logging, level_name, logging.INFO)

    def _formatter(self):
        return logging.Formatter(self._log_config['format'])

    def _console_handler(self):
        handler = logging.StreamHandler()
        handler.setFormatter(self._formatter())
        return handler

    def _file_handler(self, name):
        handler = logging.handlers.RotatingFileHandler(
            self._log_dir / f"{name}.log",
            maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
            backupCount=self._log_config['backup_count']
        )
        handler.setFormatter(self._formatter())
        return handler

    def _attach(self, name, named_logger):
        handlers = [self._file_handler(name)]
        if self._log_config['console_output']:
            handlers.append(self._console_handler())

        named_logger.setLevel(self._level())
        _replace_handlers(named_logger, handlers)
        # Own handlers only, or console lines would print twice
        named_logger.propagate = False

    def get_logger(self, name):
        """Get a logger with the specified name.

        Args:
            name: Name of the logger

        Returns:
            Configured logger instance
        """
        if name not in self._loggers:
            named_logger = logging.getLogger(name)
            self._attach(name, named_logger)
            self._loggers[name] = named_logger
        return self._loggers[name]

    def set_level(self, level):
        """Change the level of every logger handed out so far."""
        logging.getLogger().setLevel(level)
        for named_logger in self._loggers.values():
            named_logger.setLevel(level)

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception together with its traceback.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        text = f"{message}: {exception}" if message else str(exception)
        self.get_logger(logger_name).error(text, exc_info=exception)

    def batch_start_log(self, process_name, additional_info=None):
        """Log the start of a batch process.

        Args:
            process_name: Name of the batch process
            additional_info: Optional additional information

        Returns:
            Dictionary with batch process logging information
        """
        batch_logger = self.get_logger('batch')

        batch_logger.info(f"Starting batch process: {process_name}")
        if additional_info:
            batch_logger.info(f"Process info: {additional_info}")

        return {
            'process_name': process_name,
            'start_time': datetime.now(),
            'additional_info': additional_info
        }

    def batch_end_log(self, log_info, success=True, result_info=None):
        """Log the end of a batch process with its duration."""
        batch_logger = self.get_logger('batch')
        end_time = datetime.now()
        process_name = log_info.get('process_name', 'Unknown')

        if success:
            batch_logger.info(f"Completed batch process: {process_name}")
        else:
            batch_logger.error(f"Failed batch process: {process_name}")

        batch_logger.info(f"Process duration: {end_time - log_info.get('start_time', end_time)}")
        if result_info:
            batch_logger.info(f"Process results: {result_info}")

def _replace_handlers(target, handlers):
    for handler in target.handlers[:]:
        target.removeHandler(handler)
        handler.close()
    for handler in handlers:
        target.addHandler(handler)

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
