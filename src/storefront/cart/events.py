"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """Units of a product variant were added to a cart."""

    cart_id = Identifier(required=True)
    token = String(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemQuantityChanged:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartPromoApplied:
    """A promo code was applied and its discount recorded on the cart."""

    cart_id = Identifier(required=True)
    promo_code = String(required=True)
    discount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartPromoRemoved:
    cart_id = Identifier(required=True)
    promo_code = String(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """The cart was emptied, usually because its content became an order."""

    cart_id = Identifier(required=True)
    token = String(required=True)
