"""
Marketplace domain errors.

Every error carries a user-facing message; views turn them into
``Response({'error': ...}, status=...)``.
"""


class MarketplaceError(Exception):
    """Base class for marketplace errors."""
    default_message = "The marketplace request could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Cart

class OutOfStockError(MarketplaceError):
    default_message = "This product is out of stock."


class CartLineNotFoundError(MarketplaceError):
    default_message = "This product is not in your cart."


# Orders

class EmptyCartError(MarketplaceError):
    default_message = "Your cart is empty."


class OrderNotFoundError(MarketplaceError):
    default_message = "Order not found."


class OrderPermissionError(MarketplaceError):
    default_message = "You are not allowed to change this order."


class InvalidOrderTransitionError(MarketplaceError):
    """Raised when an order is not in a status that allows the transition."""
    default_message = "This order can no longer be changed."


class PartialCheckoutError(MarketplaceError):
    """
    Raised when checkout stops part way.

    ``created_orders`` were written and are kept; ``failed_line`` is the cart
    line whose order could not be created. The cart is left untouched.
    """
    default_message = "Checkout failed part way; some orders were placed."

    def __init__(self, created_orders, failed_line, message=None):
        self.created_orders = list(created_orders)
        self.failed_line = failed_line
        super().__init__(message)


# Ratings

class MissingRatingError(MarketplaceError):
    default_message = "Please select a rating."


class InvalidRatingError(MarketplaceError):
    default_message = "Ratings must be between 1 and 5 stars."


class RatingPermissionError(MarketplaceError):
    default_message = "You can only rate your own orders."


class RatingNotAllowedError(MarketplaceError):
    default_message = "Only delivered orders can be rated."


class DuplicateRatingError(MarketplaceError):
    default_message = "This order has already been rated."


# Catalog

class DuplicateSuggestedPriceError(MarketplaceError):
    default_message = "A suggested price for this product already exists."


class DuplicateLikeError(MarketplaceError):
    default_message = "You have already liked this product."


class CatalogPermissionError(MarketplaceError):
    default_message = "You are not allowed to change this product."


ERROR_STATUS_CODES = {
    OutOfStockError: 400,
    CartLineNotFoundError: 404,
    EmptyCartError: 400,
    OrderNotFoundError: 404,
    OrderPermissionError: 403,
    InvalidOrderTransitionError: 409,
    PartialCheckoutError: 502,
    MissingRatingError: 400,
    InvalidRatingError: 400,
    RatingPermissionError: 403,
    RatingNotAllowedError: 409,
    DuplicateRatingError: 409,
    DuplicateSuggestedPriceError: 400,
    DuplicateLikeError: 409,
    CatalogPermissionError: 403,
}


def status_code_for(error):
    """HTTP status for a marketplace error; 400 for anything unlisted."""
    for error_class in type(error).__mro__:
        if error_class in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_class]
    return 400
