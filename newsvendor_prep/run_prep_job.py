#!/usr/bin/env python
# run_prep_job.py - Script to run the newsvendor data preparation job

import sys
import logging
import argparse

from newsvendor_prep.batch.prep_job import run_prep_job
from newsvendor_prep.config import config
from newsvendor_prep.exceptions import ConfigError
from newsvendor_prep.logging_setup import logger as log_manager, get_logger

def build_parser():
    """Build the command line argument parser."""
    parser = argparse.ArgumentParser(
        description='Prepare per-store newsvendor inputs for one supplier'
    )
    parser.add_argument('--supplier', '-s', help='Target supplier ID')
    parser.add_argument('--period-length', '-p', type=int, help='Planning period length in days')
    parser.add_argument('--start-date', '-d', help='First day of the planning period (YYYY-MM-DD)')
    parser.add_argument('--input-root', '-i', help='Root directory of the input catalogs')
    parser.add_argument('--output-root', '-o', help='Directory receiving the per-store exports')
    parser.add_argument('--database-url', help='Materialize the derived tables in this database')
    parser.add_argument('--no-script', action='store_true', help='Do not write the export script')
    parser.add_argument('--config', '-c', help='Path to an alternative settings file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    return parser

def main(argv=None):
    """Run the newsvendor data preparation job."""
    args = build_parser().parse_args(argv)
    
    if args.config:
        config.load(args.config)
        log_manager.reconfigure()
    
    if args.verbose:
        log_manager.set_level(logging.DEBUG)
    
    logger = get_logger('prep_job_runner')
    logger.info("Starting newsvendor preparation job runner...")
    
    try:
        job_config = config.job_config(
            supplier_id=args.supplier,
            period_length=args.period_length,
            window_start=args.start_date,
            input_root=args.input_root,
            output_root=args.output_root,
            database_url=args.database_url,
            write_script=False if args.no_script else None
        )
    except ConfigError as e:
        logger.error(f"Invalid configuration: {str(e)}")
        return 1
    
    results = run_prep_job(job_config)
    
    if results.get('success', False):
        logger.info(f"Preparation job completed successfully")
        logger.info(f"Duration: {results.get('duration')}")
        
        for process_name, process_result in results.get('processes', {}).items():
            logger.info(f"Process '{process_name}': {process_result}")
        
        return 0
    
    logger.error(f"Preparation job failed: {results.get('error', 'Unknown error')}")
    return 1

if __name__ == "__main__":
    sys.exit(main())
