from .base_repo import BaseRepository, paginate, transaction

__all__ = ['BaseRepository', 'paginate', 'transaction']
