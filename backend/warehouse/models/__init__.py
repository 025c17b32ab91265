from .auth import User
from .inventory import Item
from .sales import Sale

__all__ = [
    'User',
    'Item',
    'Sale',
]
