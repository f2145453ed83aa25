from . import create, delete, export, get

__all__ = ['create', 'delete', 'export', 'get']
