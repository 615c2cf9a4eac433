# newsvendor_prep/batch/__init__.py
from .prep_job import run_prep_job

__all__ = [
    'run_prep_job'
]
