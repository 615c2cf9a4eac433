from .date_utils import parse_timestamp, parse_forecast_date, convert_to_date, forecast_window
from .validation import validate_catalogs

__all__ = [
    'parse_timestamp',
    'parse_forecast_date',
    'convert_to_date',
    'forecast_window',
    'validate_catalogs'
]
