from .auth import User
from .shops import Shop
from .catalog import Category, Item
from .orders import Order, OrderLine

__all__ = [
    'User',
    'Shop',
    'Category', 'Item',
    'Order', 'OrderLine',
]
