from .order_lifecycle import (
    ORDER_STATUS_TRANSITIONS,
    OrderLifecycleService,
    validate_status_transition,
)
from .rating_gate import RatingGate, validate_stars
from .catalog import (
    ProductCatalogService,
    create_suggested_price,
    like_product,
    suggested_price_for,
)

__all__ = [
    'ORDER_STATUS_TRANSITIONS',
    'OrderLifecycleService',
    'validate_status_transition',
    'RatingGate',
    'validate_stars',
    'ProductCatalogService',
    'create_suggested_price',
    'like_product',
    'suggested_price_for',
]
