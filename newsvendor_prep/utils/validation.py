from typing import Dict, List

import pandas as pd

from newsvendor_prep.exceptions import DataIntegrityError

KEY_COLUMNS = ['StoreID', 'ProductID']

def _key_list(frame: pd.DataFrame, columns: List[str]) -> List[str]:
    return ['/'.join(str(value) for value in row) for row in frame[columns].itertuples(index=False)]

def find_catalog_violations(
    links: pd.DataFrame,
    storage: pd.DataFrame,
    supplier_id: str
) -> Dict[str, List[str]]:
    """Check the catalog invariants the cost join relies on.
    
    Args:
        links: Product-supplier link table
        storage: Product storage table
        supplier_id: Target supplier ID
        
    Returns:
        Dictionary of violation kind to offending keys (empty if valid)
    """
    errors = {}
    
    supplier_counts = links.groupby(KEY_COLUMNS)['SupplierID'].nunique()
    multi_supplier = supplier_counts[supplier_counts > 1].reset_index()
    if not multi_supplier.empty:
        errors['multiple_suppliers'] = _key_list(multi_supplier, KEY_COLUMNS)

    supplier_links = links[links['SupplierID'] == supplier_id]
    duplicated_links = supplier_links[supplier_links.duplicated(KEY_COLUMNS, keep='first')]
    if not duplicated_links.empty:
        errors['duplicate_links'] = sorted(set(_key_list(duplicated_links, KEY_COLUMNS)))

    duplicated = storage[storage.duplicated(KEY_COLUMNS, keep='first')]
    if not duplicated.empty:
        errors['duplicate_storage'] = sorted(set(_key_list(duplicated, KEY_COLUMNS)))
    
    budget_counts = supplier_links.groupby('StoreID')['PurchaseCostBudget'].nunique()
    multi_budget = budget_counts[budget_counts > 1]
    if not multi_budget.empty:
        errors['multiple_budgets'] = [str(store_id) for store_id in multi_budget.index]
    
    return errors

def validate_catalogs(links: pd.DataFrame, storage: pd.DataFrame, supplier_id: str) -> None:
    """Raise DataIntegrityError if any catalog invariant is violated."""
    errors = find_catalog_violations(links, storage, supplier_id)
    if errors:
        summary = ', '.join(f"{kind}: {len(keys)}" for kind, keys in sorted(errors.items()))
        raise DataIntegrityError(
            f"Catalog invariants violated ({summary})",
            code='CATALOG_INVARIANT',
            details=errors
        )
