# newsvendor_prep/services/report_service.py
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pandas as pd
from sqlalchemy import select
from sqlalchemy.dialects import sqlite

from newsvendor_prep.config import JobConfig
from newsvendor_prep.core.aggregate import DerivedTables
from newsvendor_prep.exceptions import ReportingError
from newsvendor_prep.models import StoreProduct, PurchaseBudget, DemandCost

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ExportSpec:
    """One kind of per-store export file."""
    ordinal: int
    tag: str
    columns: Tuple[str, ...]
    header: bool
    
    def file_name(self, suffix: str, store_id: str) -> str:
        """File name following <ordinal>_<tag>_<suffix>_<StoreID>.csv."""
        return f"{self.ordinal}_{self.tag}_{suffix}_{store_id}.csv"

PRODUCT_LIST = ExportSpec(1, 'productlist', ('ProductID',), True)
PURCHASE_BUDGET = ExportSpec(2, 'purchasebudget', ('PurchaseCostBudget',), False)
DEMAND_COSTS = ExportSpec(
    3, 'demandcosts',
    ('ProductID', 'Demand', 'StorageCost', 'PurchaseCost', 'MissedSaleCost'),
    True
)

EXPORTS = (PRODUCT_LIST, PURCHASE_BUDGET, DEMAND_COSTS)

@dataclass
class StoreExport:
    """A single planned export: which rows go to which file."""
    spec: ExportSpec
    store_id: str
    path: Path
    rows: pd.DataFrame

def _product_list_query(store_id):
    return (
        select(StoreProduct.product_id)
        .where(StoreProduct.store_id == store_id)
        .order_by(StoreProduct.product_id)
    )

def _purchase_budget_query(store_id):
    return (
        select(PurchaseBudget.purchase_cost_budget)
        .where(PurchaseBudget.store_id == store_id)
    )

def _demand_costs_query(store_id):
    return (
        select(
            DemandCost.product_id,
            DemandCost.aggregated_demand.label('Demand'),
            DemandCost.storage_cost,
            DemandCost.purchase_cost,
            DemandCost.missed_sale_cost
        )
        .where(DemandCost.store_id == store_id)
        .order_by(DemandCost.product_id)
    )

EXPORT_QUERIES: Dict[str, Callable] = {
    PRODUCT_LIST.tag: _product_list_query,
    PURCHASE_BUDGET.tag: _purchase_budget_query,
    DEMAND_COSTS.tag: _demand_costs_query,
}

class ReportService:
    """Service for building and writing the per-store exports."""
    
    def __init__(self, job_config: JobConfig):
        """Initialize the report service.
        
        Args:
            job_config: Job configuration
        """
        self.job_config = job_config
        self.output_root = Path(job_config.output_root)
    
    def export_path(self, spec: ExportSpec, store_id: str) -> Path:
        """Get the output path of one store export."""
        if not store_id or '/' in store_id or '\\' in store_id or store_id in ('.', '..'):
            raise ReportingError(
                f"Store ID {store_id!r} cannot be used in an output file name",
                code='STORE_ID'
            )
        return self.output_root / spec.file_name(self.job_config.output_suffix, store_id)
    
    def build_plan(self, derived: DerivedTables) -> List[StoreExport]:
        """Build the ordered list of exports for every store.
        
        Every store in the link table gets all three exports, even when the
        target supplier does not serve it.
        
        Args:
            derived: Derived tables of the job run
            
        Returns:
            List of StoreExport, ordered by store then ordinal
        """
        products = dict(tuple(derived.store_products.groupby('StoreID', sort=True)))
        budgets = dict(tuple(derived.purchase_budget.groupby('StoreID', sort=True)))
        costs = dict(tuple(derived.demand_costs.groupby('StoreID', sort=True)))
        
        empty_products = derived.store_products.iloc[0:0]
        empty_budgets = derived.purchase_budget.iloc[0:0]
        empty_costs = derived.demand_costs.iloc[0:0]
        
        plan = []
        for store_id in derived.stores:
            product_rows = products.get(store_id, empty_products)
            product_rows = product_rows.sort_values('ProductID')[list(PRODUCT_LIST.columns)]
            
            budget_rows = budgets.get(store_id, empty_budgets)[list(PURCHASE_BUDGET.columns)]
            
            cost_rows = costs.get(store_id, empty_costs).rename(columns={'AggregatedDemand': 'Demand'})
            cost_rows = cost_rows.sort_values('ProductID')[list(DEMAND_COSTS.columns)]
            
            for spec, rows in (
                (PRODUCT_LIST, product_rows),
                (PURCHASE_BUDGET, budget_rows),
                (DEMAND_COSTS, cost_rows),
            ):
                plan.append(StoreExport(
                    spec=spec,
                    store_id=store_id,
                    path=self.export_path(spec, store_id),
                    rows=rows.reset_index(drop=True)
                ))
        
        logger.info(f"Planned {len(plan)} exports for {len(derived.stores)} stores")
        return plan
    
    def script_path(self) -> Path:
        """Get the output path of the export script."""
        return self.output_root / self.job_config.script_name
    
    def _check_targets(self, targets: List[Path]) -> None:
        for target in targets:
            if target.exists() and not target.is_file():
                raise ReportingError(
                    f"Cannot replace {target}: it is not a regular file",
                    code='WRITE_EXPORT',
                    details={'path': str(target)}
                )
    
    def stage_exports(self, plan: List[StoreExport], include_script: bool = False) -> Path:
        """Write every planned export into a staging directory.
        
        The staging directory is a sibling of the output root so files can
        be moved into place with a rename. Nothing is left behind on failure.
        
        Args:
            plan: Planned exports
            include_script: Whether to stage the export script as well
            
        Returns:
            Path of the staging directory
        """
        targets = [export.path for export in plan]
        if include_script:
            targets.append(self.script_path())
        self._check_targets(targets)
        
        root = self.output_root.resolve()
        try:
            root.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=f".{root.name}.staging-", dir=root.parent))
        except OSError as e:
            raise ReportingError(
                f"Error creating staging directory next to {self.output_root}: {str(e)}",
                code='WRITE_EXPORT'
            )
        
        try:
            for export in plan:
                export.rows.to_csv(
                    staging / export.path.name,
                    index=False,
                    header=export.spec.header,
                    lineterminator='\n'
                )
                logger.debug(f"Staged {len(export.rows)} rows for {export.path}")
            
            if include_script:
                with open(staging / self.job_config.script_name, 'w', newline='\n') as handle:
                    handle.write(self.render_script(plan))
        except OSError as e:
            self.discard(staging)
            raise ReportingError(
                f"Error writing exports to {staging}: {str(e)}",
                code='WRITE_EXPORT'
            )
        
        return staging
    
    def publish(self, staging: Path) -> List[Path]:
        """Move staged files into the output root and remove the staging directory.
        
        Returns:
            List of published paths sorted by name
        """
        names = sorted(path.name for path in staging.iterdir())
        targets = [self.output_root / name for name in names]
        self._check_targets(targets)
        
        try:
            self.output_root.mkdir(parents=True, exist_ok=True)
            for name, target in zip(names, targets):
                os.replace(staging / name, target)
        except OSError as e:
            raise ReportingError(
                f"Error publishing exports to {self.output_root}: {str(e)}",
                code='PUBLISH_EXPORT'
            )
        finally:
            self.discard(staging)
        
        logger.info(f"Published {len(targets)} files to {self.output_root}")
        return targets
    
    def discard(self, staging: Path) -> None:
        """Remove a staging directory and whatever is left in it."""
        shutil.rmtree(staging, ignore_errors=True)
    
    def write_exports(self, plan: List[StoreExport], include_script: bool = False) -> List[Path]:
        """Stage and publish every planned export, replacing earlier runs.
        
        Returns:
            List of written paths sorted by name
        """
        staging = self.stage_exports(plan, include_script=include_script)
        return self.publish(staging)
    
    def render_script(self, plan: List[StoreExport]) -> str:
        """Render the plan as literal SQL statements over the materialized tables.
        
        Each statement selects one store's rows and is preceded by the
        file it is meant to be written to.
        """
        lines = [
            f"-- Newsvendor exports for supplier {self.job_config.supplier_id}",
            "",
        ]
        dialect = sqlite.dialect()
        for export in plan:
            query = EXPORT_QUERIES[export.spec.tag](export.store_id)
            statement = query.compile(dialect=dialect, compile_kwargs={'literal_binds': True})
            header = 'WITH HEADER' if export.spec.header else 'WITHOUT HEADER'
            lines.append(f"-- OUTPUT TO '{export.path.as_posix()}' {header}")
            lines.append(f"{statement};")
            lines.append("")
        return "\n".join(lines)
