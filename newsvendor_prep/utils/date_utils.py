# newsvendor_prep/utils/date_utils.py
from datetime import date, datetime, timedelta
from typing import Tuple, Union

from newsvendor_prep.exceptions import ConfigError

TIMESTAMP_FORMATS = (
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d',
    '%m/%d/%Y %H:%M:%S',
    '%m/%d/%Y',
)

def parse_timestamp(value: str) -> datetime:
    """Parse a forecast horizon timestamp from an input file field.
    
    Args:
        value: Raw field value
        
    Returns:
        Parsed datetime
        
    Raises:
        ValueError if no accepted format matches
    """
    value = value.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized timestamp: {value!r}")

def parse_forecast_date(raw: str, timestamp_format: str) -> datetime:
    """Parse the issuance timestamp encoded in a forecast file name."""
    return datetime.strptime(raw, timestamp_format)

def convert_to_date(value: Union[date, datetime, str]) -> date:
    """Convert a date, datetime or ISO string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, '%Y-%m-%d').date()

def forecast_window(window_start: Union[date, datetime, str], period_length: int) -> Tuple[date, date]:
    """Get the inclusive calendar-day window of a planning period.
    
    A period of N days covers offsets 0..N-1 from the start date.
    
    Args:
        window_start: First day of the period
        period_length: Period length in days
        
    Returns:
        Tuple with first and last day of the period
    """
    if period_length < 1:
        raise ConfigError(
            f"Period length must be at least 1 day, got {period_length}",
            code='PERIOD_LENGTH'
        )
    start = convert_to_date(window_start)
    return start, start + timedelta(days=period_length - 1)
