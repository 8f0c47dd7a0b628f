"""Cart line management — commands and handler.

Before a line is added or grown, the handler checks that the product is
active, that the variant exists and that live stock covers the resulting
line quantity. After every change an applied promo is re-priced.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.promos import refresh_promo
from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import InsufficientStock, ProductUnavailable


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    token = String(required=True, max_length=64)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItemQuantity:
    token = String(required=True, max_length=64)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True)  # Zero or less removes the line


@storefront.command(part_of="ShoppingCart")
class RemoveCartItem:
    token = String(required=True, max_length=64)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)


def _purchasable_variant(product_id, variant_id, quantity):
    """Return ``(product, variant)`` if ``quantity`` units can be sold right now."""
    product = current_domain.repository_for(Product).find(product_id)
    if product is None or not product.is_active:
        raise ProductUnavailable({"product_id": [f"Product {product_id} not found or inactive"]})

    variant = product.get_variant(variant_id)
    if variant.stock < quantity:
        raise InsufficientStock(
            {
                "quantity": [
                    f"Insufficient stock for {product.name} - {variant.name}. "
                    f"Available: {variant.stock}, requested: {quantity}"
                ]
            }
        )
    return product, variant


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_active_cart(command.token)

        existing = cart.find_item(command.product_id, command.variant_id)
        resulting_quantity = command.quantity + (existing.quantity if existing else 0)
        product, variant = _purchasable_variant(command.product_id, command.variant_id, resulting_quantity)

        cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
            price=variant.price,
            product_name=product.name,
            variant_name=variant.name,
            sku=variant.sku,
        )
        refresh_promo(cart)
        repo.add(cart)
        return cart.snapshot()

    @handle(UpdateCartItemQuantity)
    def update_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_active_cart(command.token)

        if command.quantity > 0 and cart.find_item(command.product_id, command.variant_id) is not None:
            _purchasable_variant(command.product_id, command.variant_id, command.quantity)

        cart.update_quantity(command.product_id, command.variant_id, command.quantity)
        refresh_promo(cart)
        repo.add(cart)
        return cart.snapshot()

    @handle(RemoveCartItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_active_cart(command.token)
        cart.remove_item(command.product_id, command.variant_id)
        refresh_promo(cart)
        repo.add(cart)
        return cart.snapshot()
