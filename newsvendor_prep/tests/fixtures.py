"""Helpers writing small input catalogs for the test cases."""
import csv
from pathlib import Path

from newsvendor_prep.config import JobConfig
from newsvendor_prep.core.schemas import (
    SUPPLIER_SCHEMA, PRODUCT_SUPPLIER_SCHEMA, PRODUCT_STORAGE_SCHEMA,
    DEMAND_FORECAST_SCHEMA, column_names
)

SUPPLIERS = [
    ['2', 'Acme Tools', '1.5', '5', '500', '10', '5000'],
    ['3', 'Bolt Supply', '2.0', '1', '100', '5', '800'],
]

# StoreID, SupplierID, ProductID, LeadTime, MinOrderQty, MaxOrderQty, Multiplier,
# PurchaseCost, BackorderCost, ShippingCost, PurchaseCostBudget, OrderingFrequency, ServiceLevel
PRODUCT_SUPPLIERS = [
    ['S1', '2', 'P1', '2', '0', '100', '1', '3.0', '1.0', '0.5', '1000', '7', '0.95'],
    ['S1', '2', 'P2', '2', '0', '100', '1', '4.0', '1.0', '0.5', '1000', '7', '0.95'],
    ['S2', '2', 'P1', '3', '0', '50', '1', '3.5', '1.0', '0.5', '500', '7', '0.9'],
    ['S3', '3', 'P9', '1', '0', '20', '1', '9.0', '2.0', '1.0', '200', '7', '0.9'],
]

# StoreID, StorageID, ProductID, StorageCost, MissedSaleCost, MinInventorySize, MaxInventorySize
PRODUCT_STORAGE = [
    ['S1', 'W1', 'P1', '0.5', '10.0', '0', '200'],
    ['S1', 'W1', 'P2', '0.6', '12.0', '0', '200'],
    ['S2', 'W2', 'P1', '0.5', '11.0', '0', '100'],
    ['S3', 'W3', 'P9', '1.0', '5.0', '0', '50'],
]

# StoreID, ProductID, Timestamp, PredictedDemand, DistributionName, Variance, Probability
FORECASTS = {
    '2024-01-01_00-00-00': [
        ['S1', 'P1', '2024-01-10', '10', 'normal', '2.0', '0.9'],
        ['S2', 'P1', '2024-01-10', '7', 'normal', '1.0', '0.9'],
    ],
    '2024-01-02_00-00-00': [
        ['S1', 'P1', '2024-01-10', '20', 'normal', '2.0', '0.9'],
        ['S1', 'P2', '2024-01-10', '5', 'normal', '1.0', '0.9'],
        ['S1', 'P2', '2024-01-16 18:00:00', '3', 'normal', '1.0', '0.9'],
        ['S1', 'P2', '2024-01-17', '100', 'normal', '1.0', '0.9'],
        ['S3', 'P9', '2024-01-11', '4', 'normal', '1.0', '0.9'],
    ],
}

def write_csv(path, header, rows):
    """Write a delimited file with a header row."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', newline='') as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        writer.writerows(rows)
    return path

def write_catalogs(
    input_root,
    suppliers=SUPPLIERS,
    product_suppliers=PRODUCT_SUPPLIERS,
    product_storage=PRODUCT_STORAGE,
    forecasts=FORECASTS
):
    """Write a complete set of input catalogs under input_root."""
    input_root = Path(input_root)
    write_csv(input_root / 'suppliers' / 'suppliers.csv', column_names(SUPPLIER_SCHEMA), suppliers)
    write_csv(
        input_root / 'product_supplier' / 'product_supplier.csv',
        column_names(PRODUCT_SUPPLIER_SCHEMA),
        product_suppliers
    )
    write_csv(
        input_root / 'product_storage' / 'product_storage.csv',
        column_names(PRODUCT_STORAGE_SCHEMA),
        product_storage
    )
    for token, rows in forecasts.items():
        write_csv(
            input_root / 'demand_forecasts' / token[:10] / f'demand_forecast_{token}.csv',
            column_names(DEMAND_FORECAST_SCHEMA),
            rows
        )
    return input_root

def make_job_config(tmp_dir, **overrides):
    """Build a job configuration rooted in a temporary directory."""
    values = {
        'supplier_id': '2',
        'period_length': 7,
        'window_start': '2024-01-10',
        'input_root': Path(tmp_dir) / 'input',
        'output_root': Path(tmp_dir) / 'output',
    }
    values.update(overrides)
    return JobConfig(**values)
