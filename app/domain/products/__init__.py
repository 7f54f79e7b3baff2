# Products domain module
from app.domain.products.models import Product

__all__ = ["Product"]
