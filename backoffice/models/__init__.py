from backoffice.models.user import User
from backoffice.models.restaurant import Restaurant
from backoffice.models.product_key import ProductKey
