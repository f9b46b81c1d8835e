"""
Category and product operations for one store's catalog.

Every mutation checks the permission engine against the store id from the
request path before looking anything up, so an unauthorized caller gets the
same denial whether or not the target exists.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import RestrictedError
from rest_framework import serializers

from common.utils import normalize_key
from core.exceptions import AlreadyExists, CategoryNotFound, ProductNotFound, ResourceInUse
from core.permissions import require_permission
from stores.services import get_store

from .models import Category, Product

logger = logging.getLogger(__name__)


def _normalize_slug(slug):
    slug = normalize_key(slug)
    if not slug:
        raise serializers.ValidationError({"slug": "Slug cannot be empty."})
    return slug


def _save_unique(instance, message):
    try:
        with transaction.atomic():
            instance.save()
    except IntegrityError as exc:
        logger.warning("Uniqueness violation saving %s: %s", instance.__class__.__name__, exc)
        raise AlreadyExists(message) from exc


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def list_categories(store_id):
    get_store(store_id)
    return Category.objects.for_store(store_id)


def get_category(store_id, category_id):
    category = Category.objects.for_store(store_id).select_related("store").filter(pk=category_id).first()
    if category is None:
        raise CategoryNotFound()
    return category


def get_category_by_slug(store_id, slug):
    category = Category.objects.with_slug(store_id, slug).select_related("store").first()
    if category is None:
        raise CategoryNotFound()
    return category


def category_slug_exists(store_id, slug):
    return Category.objects.with_slug(store_id, slug).exists()


def create_category(principal, store_id, *, name, slug):
    require_permission(principal, store_id)
    store = get_store(store_id)
    slug = _normalize_slug(slug)
    if category_slug_exists(store.pk, slug):
        raise AlreadyExists(f"A category with slug '{slug}' already exists in this store.")

    category = Category(store=store, name=name, slug=slug)
    _save_unique(category, f"A category with slug '{slug}' already exists in this store.")
    logger.info("Created category %s in store %s", category.pk, store.pk)
    return category


def update_category(principal, store_id, category_id, *, name=None, slug=None):
    require_permission(principal, store_id)
    category = get_category(store_id, category_id)

    if name:
        category.name = name
    if slug:
        slug = _normalize_slug(slug)
        if slug != category.slug:
            if category_slug_exists(store_id, slug):
                raise AlreadyExists(f"A category with slug '{slug}' already exists in this store.")
            category.slug = slug

    _save_unique(category, f"A category with slug '{category.slug}' already exists in this store.")
    return category


def delete_category(principal, store_id, category_id):
    """Rejected while products still reference the category."""
    require_permission(principal, store_id)
    category = get_category(store_id, category_id)
    if category.has_products():
        raise ResourceInUse("The category still has products.")
    try:
        with transaction.atomic():
            category.delete()
    except RestrictedError as exc:
        raise ResourceInUse("The category still has products.") from exc
    logger.info("Deleted category %s from store %s", category_id, store_id)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def list_products(store_id):
    get_store(store_id)
    return Product.objects.for_store(store_id).select_related("category")


def get_product(store_id, product_id):
    product = (
        Product.objects.for_store(store_id)
        .select_related("store", "category")
        .filter(pk=product_id)
        .first()
    )
    if product is None:
        raise ProductNotFound()
    return product


def get_product_by_slug(store_id, slug):
    product = Product.objects.with_slug(store_id, slug).select_related("store", "category").first()
    if product is None:
        raise ProductNotFound()
    return product


def product_slug_exists(store_id, slug):
    return Product.objects.with_slug(store_id, slug).exists()


def _category_in_store(store_id, category_id):
    """A category from another store reads as missing here."""
    category = Category.objects.for_store(store_id).filter(pk=category_id).first()
    if category is None:
        raise serializers.ValidationError({"category_id": "Category not found in this store."})
    return category


def create_product(
    principal,
    store_id,
    *,
    category_id,
    name,
    slug,
    price,
    description="",
    attributes=None,
    images=None,
    is_visible=True,
):
    """The product's store is always taken from its category."""
    require_permission(principal, store_id)
    get_store(store_id)
    category = _category_in_store(store_id, category_id)
    slug = _normalize_slug(slug)
    if product_slug_exists(category.store_id, slug):
        raise AlreadyExists(f"A product with slug '{slug}' already exists in this store.")

    product = Product(
        store_id=category.store_id,
        category=category,
        name=name,
        slug=slug,
        price=price,
        description=description or "",
        attributes=attributes,
        images=images or [],
        is_visible=is_visible,
    )
    _save_unique(product, f"A product with slug '{slug}' already exists in this store.")
    logger.info("Created product %s in store %s", product.pk, product.store_id)
    return product


_PRODUCT_FIELDS = ("name", "price", "description", "attributes", "images", "is_visible")


def update_product(principal, store_id, product_id, **changes):
    """Partial update. Moving to another category keeps the product in this store."""
    require_permission(principal, store_id)
    product = get_product(store_id, product_id)

    category_id = changes.pop("category_id", None)
    if category_id is not None and category_id != product.category_id:
        product.category = _category_in_store(store_id, category_id)

    slug = changes.pop("slug", None)
    if slug:
        slug = _normalize_slug(slug)
        if slug != product.slug:
            if product_slug_exists(store_id, slug):
                raise AlreadyExists(f"A product with slug '{slug}' already exists in this store.")
            product.slug = slug

    for field in _PRODUCT_FIELDS:
        if field in changes:
            setattr(product, field, changes[field])
    if product.images is None:
        product.images = []

    _save_unique(product, f"A product with slug '{product.slug}' already exists in this store.")
    return product


def set_visibility(principal, store_id, product_id, is_visible):
    require_permission(principal, store_id)
    product = get_product(store_id, product_id)
    product.is_visible = is_visible
    product.save(update_fields=["is_visible", "updated_at"])
    logger.info("Product %s visibility set to %s", product.pk, is_visible)
    return product


def delete_product(principal, store_id, product_id):
    require_permission(principal, store_id)
    product = get_product(store_id, product_id)
    product.delete()
    logger.info("Deleted product %s from store %s", product_id, store_id)
