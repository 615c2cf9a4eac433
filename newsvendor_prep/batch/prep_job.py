# newsvendor_prep/batch/prep_job.py
from datetime import datetime
from typing import Dict

from newsvendor_prep.config import JobConfig
from newsvendor_prep.core.aggregate import DerivedTables, build_derived_tables
from newsvendor_prep.core.extract import InputTables, extract_all
from newsvendor_prep.db import db, session_scope
from newsvendor_prep.exceptions import NewsvendorError, BatchProcessError
from newsvendor_prep.logging_setup import logger as log_manager, get_logger, log_exception
from newsvendor_prep.services.report_service import ReportService
from newsvendor_prep.services.table_service import TableService

logger = get_logger('prep_job')

def extract_inputs(job_config: JobConfig) -> InputTables:
    """Read the four input catalogs."""
    logger.info(f"Extracting inputs from {job_config.input_root}")
    return extract_all(job_config)

def prepare_tables(inputs: InputTables, job_config: JobConfig) -> DerivedTables:
    """Filter, join and aggregate the inputs into the derived tables."""
    logger.info(f"Preparing derived tables for supplier {job_config.supplier_id}")
    return build_derived_tables(inputs, job_config)

def materialize_tables(session, derived: DerivedTables) -> Dict:
    """Replace the derived tables' rows inside the caller's transaction."""
    logger.info("Materializing derived tables")
    counts = TableService(session).materialize(derived)
    return {
        'success': True,
        'row_counts': counts
    }

def write_reports(derived: DerivedTables, job_config: JobConfig) -> Dict:
    """Write the per-store exports, the export script and the derived tables.
    
    Exports are staged first. When a database is configured, the derived
    tables are replaced and the staged files published inside one
    transaction, so a failed publish rolls the tables back.
    """
    logger.info(f"Writing per-store exports to {job_config.output_root}")
    
    report_service = ReportService(job_config)
    plan = report_service.build_plan(derived)
    staging = report_service.stage_exports(plan, include_script=job_config.write_script)
    
    results = {}
    try:
        if job_config.database_url:
            db.initialize(job_config.database_url)
            db.create_all_tables()
            with session_scope() as session:
                results['materialize_tables'] = materialize_tables(session, derived)
                written = report_service.publish(staging)
        else:
            written = report_service.publish(staging)
    finally:
        report_service.discard(staging)
    
    results['write_reports'] = {
        'success': True,
        'stores': len(derived.stores),
        'files_written': len(written),
        'script_path': str(report_service.script_path()) if job_config.write_script else None
    }
    return results

def run_prep_job(job_config: JobConfig) -> Dict:
    """Run the newsvendor data preparation job.
    
    Every stage must succeed before any output is written; a failure in
    any stage ends the run.
    
    Args:
        job_config: Job configuration
        
    Returns:
        Dictionary with job results
    """
    log_info = log_manager.batch_start_log('newsvendor_prep', job_config.to_dict())
    start_time = datetime.now()
    
    results = {
        'start_time': start_time,
        'end_time': None,
        'duration': None,
        'supplier_id': job_config.supplier_id,
        'processes': {}
    }
    
    try:
        logger.info("# Step 1: Extract inputs")
        inputs = extract_inputs(job_config)
        
        logger.info("# Step 2: Filter, join and aggregate")
        derived = prepare_tables(inputs, job_config)
        results['window_start'] = derived.window_start
        results['window_end'] = derived.window_end
        results['processes']['prepare_tables'] = {
            'success': True,
            'store_products': len(derived.store_products),
            'purchase_budgets': len(derived.purchase_budget),
            'demand_costs': len(derived.demand_costs)
        }
        
        logger.info("# Step 3: Write per-store exports and materialize derived tables")
        results['processes'].update(write_reports(derived, job_config))
        
        results['success'] = True
    
    except NewsvendorError as e:
        log_exception('prep_job', e, "Error during newsvendor preparation job")
        results['success'] = False
        results['error'] = str(e)
        results['error_type'] = e.__class__.__name__
        results['error_details'] = e.to_dict()
    
    except Exception as e:
        error = BatchProcessError(f"Unexpected error: {str(e)}", code='UNEXPECTED')
        log_exception('prep_job', e, "Unexpected error during newsvendor preparation job")
        results['success'] = False
        results['error'] = str(error)
        results['error_type'] = error.__class__.__name__
        results['error_details'] = error.to_dict()
    
    results['end_time'] = datetime.now()
    results['duration'] = results['end_time'] - start_time
    
    log_manager.batch_end_log(
        log_info,
        success=results['success'],
        result_info=results['processes'] if results['success'] else results.get('error')
    )
    return results
