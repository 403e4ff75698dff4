from .access import access_bp
from .admin import admin_bp
from .collections import collections_bp
from .orders import orders_bp


__all__ = [
    'access_bp',
    'admin_bp',
    'collections_bp',
    'orders_bp',
]
