"""Database models package."""
from dairycart.db.models.product import Product
from dairycart.db.models.product_option import ProductOption, ProductOptionValue
from dairycart.db.models.product_root import ProductRoot
from dairycart.db.models.product_variant_bridge import ProductVariantBridge
from dairycart.db.models.webhook import Webhook, WebhookExecutionLog

__all__ = [
    "Product",
    "ProductOption",
    "ProductOptionValue",
    "ProductRoot",
    "ProductVariantBridge",
    "Webhook",
    "WebhookExecutionLog",
]
