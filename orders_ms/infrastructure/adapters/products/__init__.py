from .product_service_client import VALIDATE_PRODUCTS, ProductServiceClient

__all__ = ["ProductServiceClient", "VALIDATE_PRODUCTS"]
