"""Catalog management — commands and handler.

Creating products, adding variants, restocking, and toggling visibility.
SKUs are unique across the whole catalog, which only the handler can check.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import DuplicateSku
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=200)
    description = Text(required=True)
    category = String(required=True, max_length=100)
    brand = String(required=True, max_length=100)
    images = Text()  # JSON array of URLs
    tags = Text()  # JSON array of strings
    variants = Text(required=True)  # JSON: list of {name, sku, price, stock, attributes}
    is_active = Boolean(default=True)


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    description = Text()
    category = String(max_length=100)
    brand = String(max_length=100)
    images = Text()
    tags = Text()


@storefront.command(part_of="Product")
class AddVariant:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    sku = String(required=True, max_length=64)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    attributes = Text()  # JSON object


@storefront.command(part_of="Product")
class RestockVariant:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


def _ensure_unique_skus(skus):
    repo = current_domain.repository_for(Product)
    seen = set()
    for sku in skus:
        normalized = sku.strip().upper()
        if normalized in seen or repo.sku_exists(normalized):
            raise DuplicateSku({"sku": [f"SKU {normalized} already exists"]})
        seen.add(normalized)


@storefront.command_handler(part_of=Product)
class ManageCatalogHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        variants = _loads(command.variants) or []
        _ensure_unique_skus(v["sku"] for v in variants)

        product = Product.create(
            name=command.name,
            description=command.description,
            category=command.category,
            brand=command.brand,
            images=_loads(command.images),
            tags=_loads(command.tags),
            variants=variants,
            is_active=command.is_active if command.is_active is not None else True,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_created", product_id=str(product.id), variant_count=len(variants))
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            category=command.category,
            brand=command.brand,
            images=_loads(command.images),
            tags=_loads(command.tags),
        )
        repo.add(product)

    @handle(AddVariant)
    def add_variant(self, command):
        _ensure_unique_skus([command.sku])
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            name=command.name,
            sku=command.sku,
            price=command.price,
            stock=command.stock or 0,
            attributes=_loads(command.attributes),
        )
        repo.add(product)
        return str(variant.id)

    @handle(RestockVariant)
    def restock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restock(command.variant_id, command.quantity)
        repo.add(product)

    @handle(ActivateProduct)
    def activate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)
