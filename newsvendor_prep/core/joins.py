# newsvendor_prep/core/joins.py
"""Supplier restriction, latest-issuance selection and cost joins.

All functions are pure: they take DataFrames and return new, sorted
DataFrames. Empty inputs give empty outputs with the expected columns.
"""
import logging
from datetime import date
from typing import Union

import pandas as pd

from newsvendor_prep.core.schemas import (
    STORE_PRODUCT_COLUMNS, PURCHASE_BUDGET_COLUMNS, DEMAND_COSTS_COLUMNS
)

logger = logging.getLogger(__name__)

KEY_COLUMNS = ['StoreID', 'ProductID']
ISSUANCE_COLUMNS = KEY_COLUMNS + ['ForecastDate', 'ForecastDateRaw']

def restrict_to_supplier(links: pd.DataFrame, supplier_id: str) -> pd.DataFrame:
    """Get the (StoreID, ProductID) catalog supplied by one supplier.
    
    Args:
        links: Product-supplier link table
        supplier_id: Target supplier ID
        
    Returns:
        Distinct StoreProduct rows sorted by store and product
    """
    selected = links.loc[links['SupplierID'] == supplier_id, STORE_PRODUCT_COLUMNS]
    selected = selected.drop_duplicates()
    return selected.sort_values(STORE_PRODUCT_COLUMNS).reset_index(drop=True)

def purchase_budget(links: pd.DataFrame, supplier_id: str) -> pd.DataFrame:
    """Get the purchase cost budget of every store the supplier serves.
    
    The first budget listed for a store is used.
    """
    selected = links.loc[links['SupplierID'] == supplier_id, PURCHASE_BUDGET_COLUMNS]
    selected = selected.drop_duplicates(subset=['StoreID'], keep='first')
    return selected.sort_values('StoreID', kind='mergesort').reset_index(drop=True)

def latest_forecast_per_item(demand: pd.DataFrame) -> pd.DataFrame:
    """Get the most recent forecast issuance of each (StoreID, ProductID).
    
    Issuances are ordered by ForecastDate; equal dates are ordered by the
    raw file-name token, so the lexicographically largest one wins.
    
    Args:
        demand: Demand forecast rows with ForecastDate and ForecastDateRaw
        
    Returns:
        One row per item with columns StoreID, ProductID, ForecastDate, ForecastDateRaw
    """
    issuances = demand[ISSUANCE_COLUMNS].drop_duplicates()
    issuances = issuances.sort_values(ISSUANCE_COLUMNS, kind='mergesort')
    latest = issuances.groupby(KEY_COLUMNS, sort=True).tail(1)
    return latest.sort_values(KEY_COLUMNS).reset_index(drop=True)

def demand_in_window(
    demand: pd.DataFrame,
    latest: pd.DataFrame,
    window_start: Union[date, pd.Timestamp],
    window_end: Union[date, pd.Timestamp]
) -> pd.DataFrame:
    """Sum the predicted demand of each item's latest issuance over a window.
    
    A row counts when the calendar day of its Timestamp lies in
    [window_start, window_end], both ends included.
    
    Args:
        demand: Demand forecast rows
        latest: Output of latest_forecast_per_item
        window_start: First day of the window
        window_end: Last day of the window
        
    Returns:
        DataFrame with columns StoreID, ProductID, AggregatedDemand
    """
    start = pd.Timestamp(window_start).normalize()
    end = pd.Timestamp(window_end).normalize()
    
    days = demand['Timestamp'].dt.normalize()
    in_window = demand.loc[(days >= start) & (days <= end)]
    
    current = in_window.merge(latest[ISSUANCE_COLUMNS], on=ISSUANCE_COLUMNS, how='inner')
    totals = current.groupby(KEY_COLUMNS, as_index=False, sort=True)['PredictedDemand'].sum()
    totals = totals.rename(columns={'PredictedDemand': 'AggregatedDemand'})
    
    logger.debug(f"Aggregated demand for {len(totals)} items between {start.date()} and {end.date()}")
    return totals[KEY_COLUMNS + ['AggregatedDemand']].reset_index(drop=True)

def join_costs(
    demand_totals: pd.DataFrame,
    storage: pd.DataFrame,
    product_suppliers: pd.DataFrame
) -> pd.DataFrame:
    """Attach storage, missed-sale and purchase costs to aggregated demand.
    
    Inner joins on (StoreID, ProductID): items without a storage row or a
    product-supplier row are dropped.
    """
    costs = demand_totals.merge(
        storage[KEY_COLUMNS + ['StorageCost', 'MissedSaleCost']],
        on=KEY_COLUMNS,
        how='inner'
    )
    costs = costs.merge(
        product_suppliers[KEY_COLUMNS + ['PurchaseCost']],
        on=KEY_COLUMNS,
        how='inner'
    )
    
    dropped = len(demand_totals) - len(costs)
    if dropped > 0:
        logger.info(f"{dropped} items without storage or purchase costs dropped from demand costs")
    
    return costs[DEMAND_COSTS_COLUMNS].sort_values(KEY_COLUMNS).reset_index(drop=True)
