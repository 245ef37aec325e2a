from app.models.user import User
from app.models.book import Book
from app.models.cart import CartItem
from app.models.order import Order
from app.models.order_item import OrderItem

# add ALL models here
