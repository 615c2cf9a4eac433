import os
import configparser
from dataclasses import dataclass, fields
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from newsvendor_prep.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path('config') / 'settings.ini'


@dataclass(frozen=True)
class JobConfig:
    """Settings fixed at job start and passed into the job entry point."""
    
    supplier_id: str
    period_length: int = 7
    window_start: Optional[date] = None
    input_root: Path = Path('data/input')
    output_root: Path = Path('data/output')
    suppliers_path: str = 'suppliers/*.csv'
    product_suppliers_path: str = 'product_supplier/*.csv'
    product_storage_path: str = 'product_storage/*.csv'
    demand_forecast_path: str = 'demand_forecasts/*/demand_forecast_*.csv'
    forecast_timestamp_format: str = '%Y-%m-%d_%H-%M-%S'
    output_suffix: str = 'newsvendor'
    write_script: bool = True
    script_name: str = 'export_script.sql'
    validate_invariants: bool = True
    database_url: Optional[str] = None
    
    def __post_init__(self):
        if not self.supplier_id or not str(self.supplier_id).strip():
            raise ConfigError("Target supplier ID is required", code='SUPPLIER_ID')
        object.__setattr__(self, 'supplier_id', str(self.supplier_id).strip())
        
        try:
            period_length = int(self.period_length)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid period length: {self.period_length!r}", code='PERIOD_LENGTH')
        if period_length < 1:
            raise ConfigError(
                f"Period length must be at least 1 day, got {period_length}",
                code='PERIOD_LENGTH'
            )
        object.__setattr__(self, 'period_length', period_length)
        
        window_start = self.window_start
        if window_start is None:
            window_start = date.today()
        elif isinstance(window_start, datetime):
            window_start = window_start.date()
        elif isinstance(window_start, str):
            try:
                window_start = datetime.strptime(window_start, '%Y-%m-%d').date()
            except ValueError:
                raise ConfigError(f"Invalid window start date: {window_start!r}", code='WINDOW_START')
        object.__setattr__(self, 'window_start', window_start)
        
        object.__setattr__(self, 'input_root', Path(self.input_root))
        object.__setattr__(self, 'output_root', Path(self.output_root))
        
        if not self.output_suffix:
            raise ConfigError("Output suffix must not be empty", code='OUTPUT_SUFFIX')
        
        if not self.database_url:
            object.__setattr__(self, 'database_url', None)
    
    def input_path(self, pattern: str) -> str:
        """Resolve an input pattern against the input root."""
        if Path(pattern).is_absolute():
            return str(pattern)
        return str(self.input_root / pattern)
    
    def to_dict(self):
        """Convert the job configuration to a dictionary for logging."""
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}


class Config:
    """Configuration manager for the newsvendor preparation job."""
    
    _instance = None
    
    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance
    
    def __init__(self):
        """Initialize the configuration if not already initialized."""
        if self._initialized:
            return
        
        self.load(os.environ.get('NEWSVENDOR_CONFIG', DEFAULT_CONFIG_PATH))
        self._initialized = True
    
    def load(self, config_path):
        """Load configuration from the given file, creating defaults if missing.
        
        Args:
            config_path: Path to the settings file
        """
        self._config_path = Path(config_path)
        self._config_dir = self._config_path.parent
        self._config = configparser.ConfigParser(interpolation=None)
        
        # Create config directory if it doesn't exist
        if not self._config_dir.exists():
            self._config_dir.mkdir(parents=True)
        
        # Load config or create default
        if self._config_path.exists():
            self._config.read(self._config_path)
        else:
            self._create_default_config()
    
    def _create_default_config(self):
        """Create default configuration file."""
        self._config['JOB'] = {
            'supplier_id': '',
            'period_length': '7',
            'window_start': '',
            'input_root': 'data/input',
            'output_root': 'data/output',
            'suppliers_path': 'suppliers/*.csv',
            'product_suppliers_path': 'product_supplier/*.csv',
            'product_storage_path': 'product_storage/*.csv',
            'demand_forecast_path': 'demand_forecasts/*/demand_forecast_*.csv',
            'forecast_timestamp_format': '%Y-%m-%d_%H-%M-%S',
            'output_suffix': 'newsvendor',
            'write_script': 'True',
            'script_name': 'export_script.sql',
            'validate_invariants': 'True'
        }
        
        self._config['DATABASE'] = {
            'url': '',
            'echo': 'False'
        }
        
        self._config['LOGGING'] = {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'directory': 'logs',
            'max_size_mb': '10',
            'backup_count': '5',
            'console_output': 'True'
        }
        
        self._save_config()
    
    def _save_config(self):
        """Save configuration to file."""
        with open(self._config_path, 'w') as configfile:
            self._config.write(configfile)
    
    @property
    def path(self):
        """Path of the loaded settings file."""
        return self._config_path
    
    def get(self, section, key, default=None):
        """Get configuration value."""
        try:
            return self._config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return default
    
    def get_int(self, section, key, default=None):
        """Get configuration value as integer."""
        try:
            return self._config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default
    
    def get_boolean(self, section, key, default=None):
        """Get configuration value as boolean."""
        try:
            return self._config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default
    
    def job_config(self, **overrides):
        """Build the job configuration from the [JOB] and [DATABASE] sections.
        
        Args:
            **overrides: Values that take precedence over the settings file
                (None values are ignored)
            
        Returns:
            Validated JobConfig
        """
        values = {
            'supplier_id': self.get('JOB', 'supplier_id', ''),
            'period_length': self.get('JOB', 'period_length', '7'),
            'window_start': self.get('JOB', 'window_start', '') or None,
            'input_root': self.get('JOB', 'input_root', 'data/input'),
            'output_root': self.get('JOB', 'output_root', 'data/output'),
            'suppliers_path': self.get('JOB', 'suppliers_path', JobConfig.suppliers_path),
            'product_suppliers_path': self.get('JOB', 'product_suppliers_path', JobConfig.product_suppliers_path),
            'product_storage_path': self.get('JOB', 'product_storage_path', JobConfig.product_storage_path),
            'demand_forecast_path': self.get('JOB', 'demand_forecast_path', JobConfig.demand_forecast_path),
            'forecast_timestamp_format': self.get('JOB', 'forecast_timestamp_format', JobConfig.forecast_timestamp_format),
            'output_suffix': self.get('JOB', 'output_suffix', JobConfig.output_suffix),
            'write_script': self.get_boolean('JOB', 'write_script', True),
            'script_name': self.get('JOB', 'script_name', JobConfig.script_name),
            'validate_invariants': self.get_boolean('JOB', 'validate_invariants', True),
            'database_url': self.get('DATABASE', 'url', '') or None,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return JobConfig(**values)
    
    @property
    def database_config(self):
        """Get database configuration."""
        return {
            'url': self.get('DATABASE', 'url', '') or None,
            'echo': self.get_boolean('DATABASE', 'echo', False)
        }
    
    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True)
        }

# Global config instance
config = Config()
