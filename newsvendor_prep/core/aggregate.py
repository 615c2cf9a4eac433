# newsvendor_prep/core/aggregate.py
import logging
from dataclasses import dataclass
from datetime import date
from typing import List

import pandas as pd

from newsvendor_prep.config import JobConfig
from newsvendor_prep.core.extract import InputTables
from newsvendor_prep.core.joins import (
    restrict_to_supplier, purchase_budget, latest_forecast_per_item,
    demand_in_window, join_costs
)
from newsvendor_prep.utils.date_utils import forecast_window
from newsvendor_prep.utils.validation import validate_catalogs

logger = logging.getLogger(__name__)

@dataclass
class DerivedTables:
    """Tables handed from the aggregation stage to the report stage."""
    stores: List[str]
    store_products: pd.DataFrame
    purchase_budget: pd.DataFrame
    demand_costs: pd.DataFrame
    window_start: date
    window_end: date

def aggregate_demand_costs(
    demand: pd.DataFrame,
    storage: pd.DataFrame,
    links: pd.DataFrame,
    supplier_id: str,
    window_start: date,
    period_length: int
) -> pd.DataFrame:
    """Compute the DemandCosts rows of one supplier for one planning period.
    
    Args:
        demand: Demand forecast rows
        storage: Product storage table
        links: Product-supplier link table
        supplier_id: Target supplier ID
        window_start: First day of the period
        period_length: Period length in days
        
    Returns:
        DemandCosts DataFrame sorted by store and product
    """
    start, end = forecast_window(window_start, period_length)
    latest = latest_forecast_per_item(demand)
    totals = demand_in_window(demand, latest, start, end)
    supplier_links = links.loc[links['SupplierID'] == supplier_id]
    return join_costs(totals, storage, supplier_links)

def build_derived_tables(inputs: InputTables, job_config: JobConfig) -> DerivedTables:
    """Build every derived table of a job run from the extracted inputs."""
    supplier_id = job_config.supplier_id
    links = inputs.product_suppliers
    
    if job_config.validate_invariants:
        validate_catalogs(links, inputs.product_storage, supplier_id)
    
    if supplier_id not in set(inputs.suppliers['SupplierID']):
        logger.warning(f"Supplier {supplier_id} is not listed in the suppliers catalog")
    
    start, end = forecast_window(job_config.window_start, job_config.period_length)
    
    store_products = restrict_to_supplier(links, supplier_id)
    budgets = purchase_budget(links, supplier_id)
    demand_costs = aggregate_demand_costs(
        inputs.demand,
        inputs.product_storage,
        links,
        supplier_id,
        start,
        job_config.period_length
    )
    stores = sorted(links['StoreID'].unique().tolist())
    
    logger.info(
        f"Supplier {supplier_id}, window {start} to {end}: {len(stores)} stores, "
        f"{len(store_products)} store products, {len(budgets)} budgets, "
        f"{len(demand_costs)} demand cost rows"
    )
    
    return DerivedTables(
        stores=stores,
        store_products=store_products,
        purchase_budget=budgets,
        demand_costs=demand_costs,
        window_start=start,
        window_end=end
    )
