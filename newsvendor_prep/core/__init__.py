from .extract import InputTables, read_table, read_demand_forecasts, extract_all
from .joins import (
    restrict_to_supplier, purchase_budget, latest_forecast_per_item,
    demand_in_window, join_costs
)
from .aggregate import DerivedTables, aggregate_demand_costs, build_derived_tables

__all__ = [
    'InputTables',
    'read_table',
    'read_demand_forecasts',
    'extract_all',
    'restrict_to_supplier',
    'purchase_budget',
    'latest_forecast_per_item',
    'demand_in_window',
    'join_costs',
    'DerivedTables',
    'aggregate_demand_costs',
    'build_derived_tables'
]
