# newsvendor_prep/core/schemas.py
"""Column schemas of the delimited input catalogs and the derived tables."""
import re
from collections import namedtuple

from newsvendor_prep.utils.date_utils import parse_timestamp

Column = namedtuple('Column', ['name', 'convert', 'dtype'])

CONTROL_CHARACTERS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

def _text(value):
    if CONTROL_CHARACTERS.search(value):
        raise ValueError(f"control character in {value!r}")
    return value.strip()

def _number(value):
    return float(value)

def text(name):
    return Column(name, _text, object)

def number(name):
    return Column(name, _number, 'float64')

def timestamp(name):
    return Column(name, parse_timestamp, 'datetime64[ns]')

SUPPLIER_SCHEMA = [
    text('SupplierID'),
    text('Name'),
    number('ShippingCost'),
    number('MinVol'),
    number('MaxVol'),
    number('FixedOrderSize'),
    number('PurchaseCostBudget'),
]

PRODUCT_SUPPLIER_SCHEMA = [
    text('StoreID'),
    text('SupplierID'),
    text('ProductID'),
    number('LeadTime'),
    number('MinOrderQty'),
    number('MaxOrderQty'),
    number('Multiplier'),
    number('PurchaseCost'),
    number('BackorderCost'),
    number('ShippingCost'),
    number('PurchaseCostBudget'),
    number('OrderingFrequency'),
    number('ServiceLevel'),
]

PRODUCT_STORAGE_SCHEMA = [
    text('StoreID'),
    text('StorageID'),
    text('ProductID'),
    number('StorageCost'),
    number('MissedSaleCost'),
    number('MinInventorySize'),
    number('MaxInventorySize'),
]

# ForecastDate is not a file column; it is taken from the file name.
DEMAND_FORECAST_SCHEMA = [
    text('StoreID'),
    text('ProductID'),
    timestamp('Timestamp'),
    number('PredictedDemand'),
    text('DistributionName'),
    number('Variance'),
    number('Probability'),
]

STORE_PRODUCT_COLUMNS = ['StoreID', 'ProductID']
PURCHASE_BUDGET_COLUMNS = ['StoreID', 'PurchaseCostBudget']
DEMAND_COSTS_COLUMNS = [
    'StoreID', 'ProductID', 'AggregatedDemand', 'StorageCost', 'PurchaseCost', 'MissedSaleCost'
]

def column_names(schema):
    return [column.name for column in schema]
