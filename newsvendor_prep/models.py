# newsvendor_prep/models.py
from sqlalchemy import Column, Float, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class StoreProduct(Base):
    """Store catalog restricted to the target supplier."""
    __tablename__ = 'store_product'
    
    store_id = Column('StoreID', String(64), primary_key=True)
    product_id = Column('ProductID', String(64), primary_key=True)
    
    def __repr__(self):
        return f"<StoreProduct(store_id='{self.store_id}', product_id='{self.product_id}')>"

class PurchaseBudget(Base):
    """Purchase cost budget of a store supplied by the target supplier."""
    __tablename__ = 'purchase_budget'
    
    store_id = Column('StoreID', String(64), primary_key=True)
    purchase_cost_budget = Column('PurchaseCostBudget', Float, nullable=False)
    
    def __repr__(self):
        return f"<PurchaseBudget(store_id='{self.store_id}', budget={self.purchase_cost_budget})>"

class DemandCost(Base):
    """Aggregated demand and unit costs of one store product.
    
    Input row of the downstream newsvendor optimization.
    """
    __tablename__ = 'demand_costs'
    
    store_id = Column('StoreID', String(64), primary_key=True)
    product_id = Column('ProductID', String(64), primary_key=True)
    aggregated_demand = Column('AggregatedDemand', Float, nullable=False, default=0.0)
    storage_cost = Column('StorageCost', Float, nullable=False)
    purchase_cost = Column('PurchaseCost', Float, nullable=False)
    missed_sale_cost = Column('MissedSaleCost', Float, nullable=False)
    
    def __repr__(self):
        return (f"<DemandCost(store_id='{self.store_id}', product_id='{self.product_id}', "
                f"demand={self.aggregated_demand})>")
