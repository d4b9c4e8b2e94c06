from pantry.models.user import User
from pantry.models.product import Product
from pantry.models.order import Order
from pantry.models.order_item import OrderItem
from pantry.models.transaction import Transaction

# add ALL models here
