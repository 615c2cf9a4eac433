from .report_service import ReportService
from .table_service import TableService

__all__ = [
    'ReportService',
    'TableService'
]
