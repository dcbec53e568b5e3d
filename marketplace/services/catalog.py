"""
Product catalog operations: listings, community likes and suggested prices.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from accounts.policies import ProductPolicy
from core.image_host_service import CloudinaryImageService
from ..exceptions import (
    DuplicateLikeError,
    DuplicateSuggestedPriceError,
    CatalogPermissionError,
)
from ..models import Product, ProductLike, SuggestedPrice

logger = logging.getLogger(__name__)


class ProductCatalogService:
    """
    Listing management for one farmer.

    Image files are uploaded to the image host first; the product row only
    stores the returned URL.
    """

    def __init__(self, user, image_service=None):
        self.user = user
        self.image_service = image_service or CloudinaryImageService()

    def create_product(self, data, image=None):
        """
        Create a listing owned by the current farmer.

        Raises:
            CatalogPermissionError: the user may not list products
            ImageUploadError: the image could not be uploaded
        """
        if not ProductPolicy.can_create(self.user):
            raise CatalogPermissionError("Only active farmers can list products.")

        if image is not None:
            data = dict(data, image_url=self.image_service.upload_image(image))

        product = Product.objects.create(
            seller=self.user,
            seller_name=self.user.get_display_name(),
            **data
        )

        logger.info(f"{self.user.email} listed product {product.name} ({product.pk})")
        return product

    def update_product(self, product, data, image=None):
        if not ProductPolicy.can_edit(self.user, product):
            raise CatalogPermissionError("Only active farmers can edit their own products.")

        if image is not None:
            data = dict(data, image_url=self.image_service.upload_image(image))

        for field, value in data.items():
            setattr(product, field, value)
        product.save()

        return product


def like_product(user, product):
    """
    Record a farmer's like and bump the product's counter.

    Each farmer can like a product once; the counter is incremented in the
    database so concurrent likes are not lost.

    Raises:
        CatalogPermissionError: the user may not like this product
        DuplicateLikeError: the user already liked it
    """
    if not ProductPolicy.can_like(user, product):
        raise CatalogPermissionError("Farmers can only like other farmers' products.")

    try:
        with transaction.atomic():
            ProductLike.objects.create(user=user, product=product)
            Product.objects.filter(pk=product.pk).update(likes=F('likes') + 1)
    except IntegrityError:
        raise DuplicateLikeError()

    product.refresh_from_db(fields=['likes'])
    return product


def suggested_price_for(product_name):
    """Suggested price for an exact (case-sensitive) product name, or None."""
    suggestion = SuggestedPrice.objects.filter(product_name=product_name).first()
    return suggestion.suggested_price if suggestion else None


def create_suggested_price(product_name, suggested_price):
    """
    Raises:
        DuplicateSuggestedPriceError: a price for this product name exists
    """
    if SuggestedPrice.objects.filter(product_name=product_name).exists():
        raise DuplicateSuggestedPriceError()

    try:
        with transaction.atomic():
            return SuggestedPrice.objects.create(
                product_name=product_name,
                suggested_price=suggested_price
            )
    except IntegrityError:
        raise DuplicateSuggestedPriceError()
