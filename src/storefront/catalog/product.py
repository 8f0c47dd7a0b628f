"""Product aggregate root with its purchasable Variants.

Variants are owned entities addressed by their generated identifier, which
stays stable for the life of the product. The price range, total stock and a
lower-cased search text are denormalized onto the product so that catalog
listings can filter and sort with plain queries.
"""

import json
import re
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.domain import storefront
from storefront.errors import DuplicateSku, InsufficientStock, VariantNotFound

_IMAGE_URL = re.compile(r"^https?://\S+$", re.IGNORECASE)


def _dump_list(values):
    return json.dumps([str(v).strip() for v in values or [] if str(v).strip()])


@storefront.entity(part_of="Product")
class Variant:
    """A purchasable option of a product, such as one size/colour combination."""

    name = String(required=True, max_length=100)
    sku = String(required=True, max_length=64)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    attributes = Text()  # JSON object: {"size": "M", "color": "Red"}

    @property
    def attribute_map(self):
        return json.loads(self.attributes) if self.attributes else {}

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "stock": self.stock,
            "attributes": self.attribute_map,
        }


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = Text(required=True)
    category = String(required=True, max_length=100)
    brand = String(required=True, max_length=100)
    images = Text()  # JSON array of image URLs
    tags = Text()  # JSON array of tag strings
    is_active = Boolean(default=True)
    variants = HasMany(Variant)

    # Denormalized for listing queries
    min_price = Float(default=0.0)
    max_price = Float(default=0.0)
    total_stock = Integer(default=0)
    search_text = Text()

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def must_have_at_least_one_variant(self):
        if not self.variants:
            raise ValidationError({"variants": ["A product needs at least one variant"]})

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku.upper() for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique"]})

    @invariant.post
    def images_must_be_web_urls(self):
        for url in self.image_urls:
            if not _IMAGE_URL.match(url):
                raise ValidationError({"images": [f"Image '{url}' must be an http(s) URL"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, description, category, brand, variants, images=None, tags=None, is_active=True):
        """Create a product with its initial variants.

        Args:
            variants: List of dicts with name, sku, price, stock and optional attributes.
        """
        now = datetime.now(UTC)
        product = cls(
            name=name.strip(),
            description=description.strip(),
            category=category.strip(),
            brand=brand.strip(),
            images=_dump_list(images),
            tags=_dump_list(tags),
            is_active=is_active,
            variants=[cls._build_variant(**data) for data in variants or []],
            created_at=now,
            updated_at=now,
        )
        product._refresh_summary()
        return product

    @staticmethod
    def _build_variant(name, sku, price, stock=0, attributes=None):
        return Variant(
            name=name.strip(),
            sku=sku.strip().upper(),
            price=round(float(price), 2),
            stock=stock,
            attributes=json.dumps({str(k): str(v) for k, v in attributes.items()}) if attributes else None,
        )

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def image_urls(self):
        return json.loads(self.images) if self.images else []

    @property
    def tag_list(self):
        return json.loads(self.tags) if self.tags else []

    @property
    def available_variants(self):
        return [v for v in self.variants if v.stock > 0]

    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def get_variant(self, variant_id):
        variant = self.find_variant(variant_id)
        if variant is None:
            raise VariantNotFound({"variant_id": [f"Variant {variant_id} not found on product {self.name}"]})
        return variant

    def is_in_stock(self, variant_id, quantity=1):
        variant = self.find_variant(variant_id)
        return variant is not None and variant.stock >= quantity

    # -------------------------------------------------------------------
    # Catalog maintenance
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply a partial update of the descriptive fields."""
        allowed = {"name", "description", "category", "brand", "images", "tags"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError({field: ["Field cannot be updated"] for field in sorted(unknown)})

        with atomic_change(self):
            for field, value in changes.items():
                if value is None:
                    continue
                if field in ("images", "tags"):
                    value = _dump_list(value)
                elif isinstance(value, str):
                    value = value.strip()
                setattr(self, field, value)
            self._refresh_summary()
            self.updated_at = datetime.now(UTC)

    def add_variant(self, name, sku, price, stock=0, attributes=None):
        variant = self._build_variant(name=name, sku=sku, price=price, stock=stock, attributes=attributes)
        if any(v.sku == variant.sku for v in self.variants):
            raise DuplicateSku({"sku": [f"SKU {variant.sku} already exists on this product"]})
        with atomic_change(self):
            self.add_variants(variant)
            self._refresh_summary()
            self.updated_at = datetime.now(UTC)
        return variant

    def restock(self, variant_id, quantity):
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be a positive integer"]})
        variant = self.get_variant(variant_id)
        with atomic_change(self):
            variant.stock += quantity
            self._refresh_summary()
            self.updated_at = datetime.now(UTC)

    def decrement_stock(self, variant_id, quantity):
        """Take ``quantity`` units out of a variant's stock.

        Re-checks sufficiency against the stock held by this instance, so a
        decrement can never drive stock below zero.
        """
        variant = self.get_variant(variant_id)
        if variant.stock < quantity:
            raise InsufficientStock(
                {
                    "items": [
                        f"Insufficient stock for {self.name} - {variant.name}. "
                        f"Available: {variant.stock}, requested: {quantity}"
                    ]
                }
            )
        with atomic_change(self):
            variant.stock -= quantity
            self._refresh_summary()
            self.updated_at = datetime.now(UTC)

    def activate(self):
        self.is_active = True
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)

    def _refresh_summary(self):
        prices = [v.price for v in self.variants]
        self.min_price = min(prices) if prices else 0.0
        self.max_price = max(prices) if prices else 0.0
        self.total_stock = sum(v.stock for v in self.variants)
        self.search_text = " ".join([self.name or "", self.description or "", *self.tag_list]).lower()

    def to_summary(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "images": self.image_urls,
            "tags": self.tag_list,
            "is_active": self.is_active,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "total_stock": self.total_stock,
            "created_at": self.created_at,
        }

    def to_dict(self):
        return {
            **self.to_summary(),
            "variants": [v.to_dict() for v in self.variants],
            "available_variants": [v.to_dict() for v in self.available_variants],
            "updated_at": self.updated_at,
        }
