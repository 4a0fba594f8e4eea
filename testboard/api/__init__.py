from .app import create_app
from .dependencies import provide_db_session, provide_repo, provide_results_service
from .pagination import OffsetPagination, provide_offset_pagination

__all__ = [
    'OffsetPagination',
    'create_app',
    'provide_db_session',
    'provide_offset_pagination',
    'provide_repo',
    'provide_results_service',
]
