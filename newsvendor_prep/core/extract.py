# newsvendor_prep/core/extract.py
import csv
import glob
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pandas as pd

from newsvendor_prep.config import JobConfig
from newsvendor_prep.core.schemas import (
    SUPPLIER_SCHEMA, PRODUCT_SUPPLIER_SCHEMA, PRODUCT_STORAGE_SCHEMA,
    DEMAND_FORECAST_SCHEMA, column_names
)
from newsvendor_prep.exceptions import ConfigError, NotFoundError, SchemaMismatchError
from newsvendor_prep.utils.date_utils import parse_forecast_date

logger = logging.getLogger(__name__)

@dataclass
class InputTables:
    """Typed contents of the four input catalogs."""
    suppliers: pd.DataFrame
    product_suppliers: pd.DataFrame
    product_storage: pd.DataFrame
    demand: pd.DataFrame

def expand_pattern(pattern: str) -> List[Path]:
    """List the files matching a glob pattern in sorted order.
    
    Raises:
        NotFoundError if nothing matches
    """
    paths = sorted(Path(match) for match in glob.glob(str(pattern), recursive=True))
    paths = [path for path in paths if path.is_file()]
    if not paths:
        raise NotFoundError(
            f"No input files match {pattern}",
            code='NO_INPUT_FILES',
            details={'pattern': str(pattern)}
        )
    return paths

def read_rows(path: Path, schema) -> List[tuple]:
    """Read and convert the data rows of one delimited file.
    
    The first row is a header and is skipped, as are blank lines.
    
    Raises:
        SchemaMismatchError on undecodable bytes, malformed CSV,
        wrong field counts or unconvertible values
    """
    records = []
    with open(path, newline='', encoding='utf-8-sig') as handle:
        reader = csv.reader(handle)
        try:
            next(reader, None)
            for row in reader:
                if not row or all(not field.strip() for field in row):
                    continue
                records.append(_convert_row(path, reader.line_num, row, schema))
        except UnicodeDecodeError as e:
            line = _undecodable_line(path)
            raise SchemaMismatchError(
                f"{path}:{line}: not valid UTF-8 ({e.reason})",
                code='ENCODING',
                details={'path': str(path), 'line': line}
            )
        except csv.Error as e:
            raise SchemaMismatchError(
                f"{path}:{reader.line_num}: malformed CSV ({e})",
                code='CSV_FORMAT',
                details={'path': str(path), 'line': reader.line_num}
            )
    
    logger.debug(f"Read {len(records)} rows from {path}")
    return records

def _undecodable_line(path: Path):
    with open(path, 'rb') as handle:
        for number, raw in enumerate(handle, start=1):
            try:
                raw.decode('utf-8')
            except UnicodeDecodeError:
                return number
    return None

def _convert_row(path: Path, line: int, row: List[str], schema) -> tuple:
    if len(row) != len(schema):
        raise SchemaMismatchError(
            f"{path}:{line}: expected {len(schema)} fields, got {len(row)}",
            code='FIELD_COUNT',
            details={'path': str(path), 'line': line, 'fields': len(row)}
        )
    
    values = []
    for column, field in zip(schema, row):
        try:
            values.append(column.convert(field))
        except ValueError:
            raise SchemaMismatchError(
                f"{path}:{line}: invalid value {field!r} for column {column.name}",
                code='FIELD_TYPE',
                details={'path': str(path), 'line': line, 'column': column.name}
            )
    return tuple(values)

def to_frame(records: List[tuple], schema) -> pd.DataFrame:
    """Build a DataFrame with the schema's column order and dtypes."""
    frame = pd.DataFrame.from_records(records, columns=column_names(schema))
    for column in schema:
        if column.dtype == 'datetime64[ns]':
            frame[column.name] = pd.to_datetime(frame[column.name])
        else:
            frame[column.name] = frame[column.name].astype(column.dtype)
    return frame

def read_table(pattern: str, schema) -> pd.DataFrame:
    """Read every file matching the pattern into one typed table.
    
    Args:
        pattern: Glob pattern of the input files
        schema: Ordered column schema
        
    Returns:
        DataFrame with one row per data line
    """
    records = []
    for path in expand_pattern(pattern):
        records.extend(read_rows(path, schema))
    return to_frame(records, schema)

def _split_name_pattern(pattern: str):
    name_pattern = Path(pattern).name
    if name_pattern.count('*') != 1:
        raise ConfigError(
            f"Forecast file pattern must contain exactly one '*' in its file name: {pattern}",
            code='FORECAST_PATTERN'
        )
    prefix, suffix = name_pattern.split('*')
    return prefix, suffix

def forecast_token(path: Path, pattern: str) -> str:
    """Get the part of a forecast file name matched by the pattern's wildcard.

    Args:
        path: Matched file path
        pattern: Glob pattern whose file-name part holds exactly one '*'

    Returns:
        Raw timestamp token
    """
    prefix, suffix = _split_name_pattern(pattern)
    name = Path(path).name
    return name[len(prefix):len(name) - len(suffix)]

def read_demand_forecasts(pattern: str, timestamp_format: str) -> pd.DataFrame:
    """Read the demand forecast logs, tagging rows with their issuance time.

    Each file's ForecastDate is parsed from its name; the raw token is kept
    in ForecastDateRaw.
    """
    _split_name_pattern(pattern)

    frames = []
    for path in expand_pattern(pattern):
        raw = forecast_token(path, pattern)
        try:
            forecast_date = parse_forecast_date(raw, timestamp_format)
        except ValueError:
            raise SchemaMismatchError(
                f"{path}: cannot parse forecast date {raw!r} with format {timestamp_format!r}",
                code='FORECAST_DATE',
                details={'path': str(path), 'token': raw}
            )
        
        frame = to_frame(read_rows(path, DEMAND_FORECAST_SCHEMA), DEMAND_FORECAST_SCHEMA)
        frame['ForecastDate'] = pd.Timestamp(forecast_date)
        frame['ForecastDateRaw'] = raw
        frames.append(frame)
    
    demand = pd.concat(frames, ignore_index=True)
    demand['ForecastDate'] = pd.to_datetime(demand['ForecastDate'])
    demand['ForecastDateRaw'] = demand['ForecastDateRaw'].astype(object)
    return demand

def extract_all(job_config: JobConfig) -> InputTables:
    """Load the four input catalogs of a job run."""
    suppliers = read_table(job_config.input_path(job_config.suppliers_path), SUPPLIER_SCHEMA)
    product_suppliers = read_table(
        job_config.input_path(job_config.product_suppliers_path), PRODUCT_SUPPLIER_SCHEMA
    )
    product_storage = read_table(
        job_config.input_path(job_config.product_storage_path), PRODUCT_STORAGE_SCHEMA
    )
    demand = read_demand_forecasts(
        job_config.input_path(job_config.demand_forecast_path),
        job_config.forecast_timestamp_format
    )
    
    logger.info(
        f"Extracted {len(suppliers)} suppliers, {len(product_suppliers)} product-supplier links, "
        f"{len(product_storage)} storage rows, {len(demand)} forecast rows"
    )
    
    return InputTables(
        suppliers=suppliers,
        product_suppliers=product_suppliers,
        product_storage=product_storage,
        demand=demand
    )
