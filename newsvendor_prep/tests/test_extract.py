"""
Unit tests for reading the input catalogs.
"""
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from newsvendor_prep.core.extract import (
    read_table, read_demand_forecasts, forecast_token, extract_all
)
from newsvendor_prep.core.schemas import (
    SUPPLIER_SCHEMA, PRODUCT_SUPPLIER_SCHEMA, PRODUCT_STORAGE_SCHEMA, DEMAND_FORECAST_SCHEMA,
    column_names
)
from newsvendor_prep.exceptions import ConfigError, NotFoundError, SchemaMismatchError
from newsvendor_prep.tests.fixtures import (
    PRODUCT_SUPPLIERS, PRODUCT_STORAGE, write_csv, write_catalogs, make_job_config
)

class TestReadTable(unittest.TestCase):
    """Test cases for typed table extraction."""
    
    def setUp(self):
        """Set up a temporary input directory."""
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
    
    def tearDown(self):
        self._tmp.cleanup()
    
    def test_reads_typed_rows_and_skips_header(self):
        """Test that rows are converted to the schema types."""
        write_csv(self.root / 'links.csv', column_names(PRODUCT_SUPPLIER_SCHEMA), PRODUCT_SUPPLIERS)
        
        links = read_table(str(self.root / '*.csv'), PRODUCT_SUPPLIER_SCHEMA)
        
        self.assertEqual(len(links), len(PRODUCT_SUPPLIERS))
        self.assertEqual(list(links.columns), column_names(PRODUCT_SUPPLIER_SCHEMA))
        self.assertEqual(links.loc[0, 'StoreID'], 'S1')
        self.assertEqual(links.loc[0, 'PurchaseCost'], 3.0)
        self.assertEqual(links['PurchaseCostBudget'].dtype.kind, 'f')
    
    def test_identifiers_stay_text(self):
        """Test that numeric-looking identifiers keep leading zeros."""
        rows = [['007', 'W1', '0042', '0.5', '10', '0', '100']]
        write_csv(self.root / 'storage.csv', column_names(PRODUCT_STORAGE_SCHEMA), rows)
        
        storage = read_table(str(self.root / 'storage.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(storage.loc[0, 'StoreID'], '007')
        self.assertEqual(storage.loc[0, 'ProductID'], '0042')
    
    def test_blank_lines_are_ignored(self):
        """Test that blank lines between rows are skipped."""
        path = self.root / 'storage.csv'
        header = ','.join(column_names(PRODUCT_STORAGE_SCHEMA))
        path.write_text(header + '\n' + ','.join(PRODUCT_STORAGE[0]) + '\n\n' + ','.join(PRODUCT_STORAGE[1]) + '\n')
        
        storage = read_table(str(path), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(len(storage), 2)
    
    def test_multiple_files_are_concatenated_in_path_order(self):
        """Test that all matching files are read in sorted order."""
        header = column_names(PRODUCT_STORAGE_SCHEMA)
        write_csv(self.root / 'b.csv', header, [PRODUCT_STORAGE[1]])
        write_csv(self.root / 'a.csv', header, [PRODUCT_STORAGE[0]])
        
        storage = read_table(str(self.root / '*.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(storage['ProductID'].tolist(), ['P1', 'P2'])
    
    def test_header_only_file_gives_empty_typed_table(self):
        """Test that a file without data rows yields an empty table."""
        write_csv(self.root / 'storage.csv', column_names(PRODUCT_STORAGE_SCHEMA), [])
        
        storage = read_table(str(self.root / 'storage.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertTrue(storage.empty)
        self.assertEqual(list(storage.columns), column_names(PRODUCT_STORAGE_SCHEMA))
        self.assertEqual(storage['StorageCost'].dtype.kind, 'f')
    
    def test_field_count_mismatch(self):
        """Test that a short row raises SchemaMismatchError."""
        rows = [PRODUCT_STORAGE[0], ['S1', 'W1', 'P2', '0.6']]
        write_csv(self.root / 'storage.csv', column_names(PRODUCT_STORAGE_SCHEMA), rows)
        
        with self.assertRaises(SchemaMismatchError) as ctx:
            read_table(str(self.root / 'storage.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(ctx.exception.code, 'FIELD_COUNT')
        self.assertEqual(ctx.exception.details['line'], 3)
    
    def test_field_type_mismatch(self):
        """Test that a non-numeric cost raises SchemaMismatchError."""
        rows = [['S1', 'W1', 'P1', 'cheap', '10', '0', '100']]
        write_csv(self.root / 'storage.csv', column_names(PRODUCT_STORAGE_SCHEMA), rows)
        
        with self.assertRaises(SchemaMismatchError) as ctx:
            read_table(str(self.root / 'storage.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(ctx.exception.code, 'FIELD_TYPE')
        self.assertEqual(ctx.exception.details['column'], 'StorageCost')
    
    def test_undecodable_bytes(self):
        """Test that bytes which are not UTF-8 raise SchemaMismatchError."""
        path = self.root / 'storage.csv'
        header = ','.join(column_names(PRODUCT_STORAGE_SCHEMA)).encode('utf-8')
        path.write_bytes(
            header + b'\n'
            + ','.join(PRODUCT_STORAGE[0]).encode('utf-8') + b'\n'
            + b'S1,W1,P\xff\xfe2,0.6,12.0,0,200\n'
        )
        
        with self.assertRaises(SchemaMismatchError) as ctx:
            read_table(str(path), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(ctx.exception.code, 'ENCODING')
        self.assertEqual(ctx.exception.details['path'], str(path))
        self.assertEqual(ctx.exception.details['line'], 3)
    
    def test_malformed_csv(self):
        """Test that a field over the csv size limit raises SchemaMismatchError."""
        rows = [['S1', 'W1', 'P1', '0.5', '10.0', '0', '9' * 200000]]
        write_csv(self.root / 'storage.csv', column_names(PRODUCT_STORAGE_SCHEMA), rows)
        
        with self.assertRaises(SchemaMismatchError) as ctx:
            read_table(str(self.root / 'storage.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(ctx.exception.code, 'CSV_FORMAT')
    
    def test_control_character_in_text_column(self):
        """Test that control characters in identifiers are rejected."""
        rows = [['S1', 'W1', 'P\x011', '0.5', '10.0', '0', '200']]
        write_csv(self.root / 'storage.csv', column_names(PRODUCT_STORAGE_SCHEMA), rows)
        
        with self.assertRaises(SchemaMismatchError) as ctx:
            read_table(str(self.root / 'storage.csv'), PRODUCT_STORAGE_SCHEMA)
        
        self.assertEqual(ctx.exception.code, 'FIELD_TYPE')
        self.assertEqual(ctx.exception.details['column'], 'ProductID')
    
    def test_nul_in_text_column(self):
        """Test that a NUL byte in a name is rejected."""
        path = self.root / 'suppliers.csv'
        header = ','.join(column_names(SUPPLIER_SCHEMA))
        path.write_text(header + '\n2,Ac\x00me,1.5,5,500,10,5000\n')
        
        with self.assertRaises(SchemaMismatchError):
            read_table(str(self.root / 'suppliers.csv'), SUPPLIER_SCHEMA)

    def test_no_matching_files(self):
        """Test that an unmatched pattern raises NotFoundError."""
        with self.assertRaises(NotFoundError):
            read_table(str(self.root / 'missing' / '*.csv'), PRODUCT_STORAGE_SCHEMA)

class TestReadDemandForecasts(unittest.TestCase):
    """Test cases for demand forecast extraction."""
    
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.header = column_names(DEMAND_FORECAST_SCHEMA)
        self.pattern = str(self.root / '*' / 'demand_forecast_*.csv')
    
    def tearDown(self):
        self._tmp.cleanup()
    
    def test_forecast_date_comes_from_file_name(self):
        """Test that ForecastDate is parsed from the wildcard part of the name."""
        write_csv(
            self.root / '2024-01-01' / 'demand_forecast_2024-01-01_06-30-00.csv',
            self.header,
            [['S1', 'P1', '2024-01-10', '10', 'normal', '2.0', '0.9']]
        )
        
        demand = read_demand_forecasts(self.pattern, '%Y-%m-%d_%H-%M-%S')
        
        self.assertEqual(len(demand), 1)
        self.assertEqual(demand.loc[0, 'ForecastDate'], datetime(2024, 1, 1, 6, 30))
        self.assertEqual(demand.loc[0, 'ForecastDateRaw'], '2024-01-01_06-30-00')
        self.assertEqual(demand.loc[0, 'Timestamp'], datetime(2024, 1, 10))
        self.assertEqual(demand.loc[0, 'PredictedDemand'], 10.0)
    
    def test_timestamp_formats(self):
        """Test the accepted horizon timestamp formats."""
        rows = [
            ['S1', 'P1', '2024-01-10 12:00:00', '1', 'normal', '1', '1'],
            ['S1', 'P1', '2024-01-11T08:15:00', '1', 'normal', '1', '1'],
            ['S1', 'P1', '01/12/2024', '1', 'normal', '1', '1'],
        ]
        write_csv(self.root / 'd' / 'demand_forecast_2024-01-01_00-00-00.csv', self.header, rows)
        
        demand = read_demand_forecasts(self.pattern, '%Y-%m-%d_%H-%M-%S')
        
        self.assertEqual(
            demand['Timestamp'].tolist(),
            [datetime(2024, 1, 10, 12), datetime(2024, 1, 11, 8, 15), datetime(2024, 1, 12)]
        )
    
    def test_bad_timestamp_in_row(self):
        """Test that an unparsable horizon timestamp raises SchemaMismatchError."""
        write_csv(
            self.root / 'd' / 'demand_forecast_2024-01-01_00-00-00.csv',
            self.header,
            [['S1', 'P1', 'next week', '1', 'normal', '1', '1']]
        )
        
        with self.assertRaises(SchemaMismatchError):
            read_demand_forecasts(self.pattern, '%Y-%m-%d_%H-%M-%S')
    
    def test_unparsable_file_name(self):
        """Test that a file name without a valid timestamp raises SchemaMismatchError."""
        write_csv(self.root / 'd' / 'demand_forecast_latest.csv', self.header, [])
        
        with self.assertRaises(SchemaMismatchError) as ctx:
            read_demand_forecasts(self.pattern, '%Y-%m-%d_%H-%M-%S')
        
        self.assertEqual(ctx.exception.code, 'FORECAST_DATE')
    
    def test_pattern_needs_single_wildcard_in_file_name(self):
        """Test that an ambiguous file-name pattern is a configuration error."""
        with self.assertRaises(ConfigError):
            read_demand_forecasts(str(self.root / 'demand_*_*.csv'), '%Y')
        with self.assertRaises(ConfigError):
            read_demand_forecasts(str(self.root / '*' / 'demand.csv'), '%Y')
    
    def test_no_forecast_files(self):
        """Test that missing forecast logs raise NotFoundError."""
        with self.assertRaises(NotFoundError):
            read_demand_forecasts(self.pattern, '%Y-%m-%d_%H-%M-%S')
    
    def test_forecast_token(self):
        """Test extraction of the wildcard token from a file name."""
        token = forecast_token(Path('/x/2024/demand_forecast_20240102.csv'), '/x/*/demand_forecast_*.csv')
        self.assertEqual(token, '20240102')

class TestExtractAll(unittest.TestCase):
    """Test cases for loading every catalog of a job run."""
    
    def test_extract_all(self):
        """Test that all four catalogs are loaded from the input root."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            job_config = make_job_config(tmp_dir)
            write_catalogs(job_config.input_root)
            
            inputs = extract_all(job_config)
            
            self.assertEqual(len(inputs.suppliers), 2)
            self.assertEqual(len(inputs.product_suppliers), 4)
            self.assertEqual(len(inputs.product_storage), 4)
            self.assertEqual(len(inputs.demand), 7)
            self.assertEqual(sorted(inputs.demand['ForecastDateRaw'].unique()),
                             ['2024-01-01_00-00-00', '2024-01-02_00-00-00'])

if __name__ == '__main__':
    unittest.main()
