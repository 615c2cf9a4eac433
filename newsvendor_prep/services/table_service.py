# newsvendor_prep/services/table_service.py
import logging
from typing import Dict

import pandas as pd
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from newsvendor_prep.core.aggregate import DerivedTables
from newsvendor_prep.core.schemas import DEMAND_COSTS_COLUMNS
from newsvendor_prep.exceptions import DatabaseError
from newsvendor_prep.models import StoreProduct, PurchaseBudget, DemandCost

logger = logging.getLogger(__name__)

class TableService:
    """Service for materializing the derived tables in a database."""
    
    def __init__(self, session: Session):
        """Initialize the table service.
        
        Args:
            session: Database session
        """
        self.session = session
    
    def materialize(self, derived: DerivedTables) -> Dict[str, int]:
        """Replace the contents of the derived tables.
        
        Args:
            derived: Derived tables of the job run
            
        Returns:
            Dictionary with inserted row counts per table
        """
        try:
            for model in (StoreProduct, PurchaseBudget, DemandCost):
                self.session.execute(delete(model))
            
            self.session.add_all(
                StoreProduct(store_id=row.StoreID, product_id=row.ProductID)
                for row in derived.store_products.itertuples(index=False)
            )
            self.session.add_all(
                PurchaseBudget(store_id=row.StoreID, purchase_cost_budget=float(row.PurchaseCostBudget))
                for row in derived.purchase_budget.itertuples(index=False)
            )
            self.session.add_all(
                DemandCost(
                    store_id=row.StoreID,
                    product_id=row.ProductID,
                    aggregated_demand=float(row.AggregatedDemand),
                    storage_cost=float(row.StorageCost),
                    purchase_cost=float(row.PurchaseCost),
                    missed_sale_cost=float(row.MissedSaleCost)
                )
                for row in derived.demand_costs.itertuples(index=False)
            )
            self.session.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error materializing derived tables: {str(e)}", code='MATERIALIZE')
        
        counts = {
            StoreProduct.__tablename__: len(derived.store_products),
            PurchaseBudget.__tablename__: len(derived.purchase_budget),
            DemandCost.__tablename__: len(derived.demand_costs),
        }
        logger.info(f"Materialized derived tables: {counts}")
        return counts
    
    def load_demand_costs(self) -> pd.DataFrame:
        """Read the materialized demand costs back, sorted by store and product."""
        rows = self.session.execute(
            select(DemandCost).order_by(DemandCost.store_id, DemandCost.product_id)
        ).scalars().all()
        return pd.DataFrame.from_records(
            [
                (row.store_id, row.product_id, row.aggregated_demand,
                 row.storage_cost, row.purchase_cost, row.missed_sale_cost)
                for row in rows
            ],
            columns=DEMAND_COSTS_COLUMNS
        )
