"""Application tests for cart commands."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.utils.globals import current_domain
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import RemoveCartItem, UpdateCartItemQuantity
from storefront.cart.management import ClearCart, CreateOrGetCart, PurgeExpiredCarts
from storefront.cart.promos import ApplyPromoToCart, RemovePromoFromCart
from storefront.catalog.management import DeactivateProduct
from storefront.errors import CartNotFound, InsufficientStock, InvalidPromo, ItemNotFound, ProductUnavailable, VariantNotFound


def _cart(token):
    return current_domain.repository_for(ShoppingCart).find_by_token(token)


def _expire(token):
    repo = current_domain.repository_for(ShoppingCart)
    cart = repo.find_by_token(token)
    cart.expires_at = datetime.now(UTC) - timedelta(minutes=1)
    repo.add(cart)


class TestCreateOrGet:
    def test_new_cart_gets_a_token(self, new_cart):
        token = new_cart()
        assert token.startswith("cart_")
        assert _cart(token) is not None

    def test_existing_token_returns_same_cart(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        add_to_cart(token, make_product())
        snapshot = current_domain.process(CreateOrGetCart(token=token), asynchronous=False)
        assert snapshot["token"] == token
        assert len(snapshot["items"]) == 1

    def test_unknown_token_creates_cart_with_that_token(self, new_cart):
        assert new_cart("cart_client_supplied") == "cart_client_supplied"

    def test_expired_cart_starts_over(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        add_to_cart(token, make_product())
        _expire(token)

        snapshot = current_domain.process(CreateOrGetCart(token=token), asynchronous=False)
        assert snapshot["items"] == []
        assert not _cart(token).is_expired()


class TestAddToCart:
    def test_add_snapshots_price_and_names(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product(name="Desk Lamp")
        snapshot = add_to_cart(token, product, quantity=2)

        line = snapshot["items"][0]
        assert line["product_name"] == "Desk Lamp"
        assert line["price"] == 25.0
        assert line["sku"] == product.variants[0].sku
        assert snapshot["subtotal"] == 50.0

    def test_repeated_add_merges(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product()
        add_to_cart(token, product, quantity=2)
        snapshot = add_to_cart(token, product, quantity=3)
        assert len(snapshot["items"]) == 1
        assert snapshot["items"][0]["quantity"] == 5

    def test_merged_quantity_must_be_in_stock(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product()
        add_to_cart(token, product, quantity=8)
        with pytest.raises(InsufficientStock):
            add_to_cart(token, product, quantity=3)
        assert _cart(token).items[0].quantity == 8

    def test_inactive_product_cannot_be_added(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product()
        current_domain.process(DeactivateProduct(product_id=product.id), asynchronous=False)
        with pytest.raises(ProductUnavailable):
            add_to_cart(token, product)

    def test_unknown_variant_cannot_be_added(self, new_cart, make_product):
        from storefront.cart.items import AddToCart

        token = new_cart()
        product = make_product()
        with pytest.raises(VariantNotFound):
            current_domain.process(
                AddToCart(token=token, product_id=product.id, variant_id="nope", quantity=1),
                asynchronous=False,
            )

    def test_expired_cart_is_not_found(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        _expire(token)
        with pytest.raises(CartNotFound):
            add_to_cart(token, make_product())

    def test_unknown_cart_is_not_found(self, make_product, add_to_cart):
        with pytest.raises(CartNotFound):
            add_to_cart("cart_missing", make_product())


class TestUpdateAndRemove:
    def test_update_quantity(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product()
        add_to_cart(token, product)
        variant = product.variants[0]
        snapshot = current_domain.process(
            UpdateCartItemQuantity(token=token, product_id=product.id, variant_id=variant.id, quantity=4),
            asynchronous=False,
        )
        assert snapshot["items"][0]["quantity"] == 4
        assert snapshot["subtotal"] == 100.0

    def test_update_beyond_stock(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product()
        add_to_cart(token, product)
        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartItemQuantity(
                    token=token, product_id=product.id, variant_id=product.variants[0].id, quantity=11
                ),
                asynchronous=False,
            )

    def test_update_to_zero_removes(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        product = make_product()
        add_to_cart(token, product)
        snapshot = current_domain.process(
            UpdateCartItemQuantity(token=token, product_id=product.id, variant_id=product.variants[0].id, quantity=0),
            asynchronous=False,
        )
        assert snapshot["items"] == []

    def test_update_missing_line(self, new_cart):
        token = new_cart()
        with pytest.raises(ItemNotFound):
            current_domain.process(
                UpdateCartItemQuantity(token=token, product_id="p", variant_id="v", quantity=2),
                asynchronous=False,
            )

    def test_remove_missing_line_is_a_no_op(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        add_to_cart(token, make_product())
        snapshot = current_domain.process(
            RemoveCartItem(token=token, product_id="p", variant_id="v"), asynchronous=False
        )
        assert len(snapshot["items"]) == 1

    def test_clear_cart(self, new_cart, make_product, add_to_cart, make_promo):
        make_promo(code="SAVE20")
        token = new_cart()
        add_to_cart(token, make_product(), quantity=2)
        current_domain.process(ApplyPromoToCart(token=token, code="save20"), asynchronous=False)

        snapshot = current_domain.process(ClearCart(token=token), asynchronous=False)
        assert snapshot["items"] == []
        assert snapshot["promo_code"] is None
        assert snapshot["total"] == 0.0


class TestCartPromo:
    def test_apply_promo(self, new_cart, make_product, add_to_cart, make_promo):
        make_promo(code="SAVE20", value=20.0)
        token = new_cart()
        add_to_cart(token, make_product(), quantity=4)
        snapshot = current_domain.process(ApplyPromoToCart(token=token, code="save20"), asynchronous=False)
        assert snapshot["promo_code"] == "SAVE20"
        assert snapshot["discount"] == 20.0
        assert snapshot["total"] == 80.0

    def test_unknown_promo_is_rejected(self, new_cart, make_product, add_to_cart):
        token = new_cart()
        add_to_cart(token, make_product())
        with pytest.raises(InvalidPromo):
            current_domain.process(ApplyPromoToCart(token=token, code="NOPE"), asynchronous=False)
        assert _cart(token).promo_code is None

    def test_promo_below_minimum_is_rejected(self, new_cart, make_product, add_to_cart, make_promo):
        make_promo(code="BIG50", min_order_amount=50.0)
        token = new_cart()
        add_to_cart(token, make_product())
        with pytest.raises(InvalidPromo):
            current_domain.process(ApplyPromoToCart(token=token, code="BIG50"), asynchronous=False)

    def test_discount_follows_cart_changes(self, new_cart, make_product, add_to_cart, make_promo):
        make_promo(code="SAVE20", value=20.0)
        token = new_cart()
        product = make_product()
        add_to_cart(token, product, quantity=2)
        current_domain.process(ApplyPromoToCart(token=token, code="SAVE20"), asynchronous=False)

        snapshot = add_to_cart(token, product, quantity=2)
        assert snapshot["discount"] == 20.0
        assert snapshot["total"] == 80.0

    def test_promo_dropped_when_cart_falls_below_minimum(self, new_cart, make_product, add_to_cart, make_promo):
        make_promo(code="BIG50", min_order_amount=50.0)
        token = new_cart()
        product = make_product()
        add_to_cart(token, product, quantity=2)
        current_domain.process(ApplyPromoToCart(token=token, code="BIG50"), asynchronous=False)

        snapshot = current_domain.process(
            UpdateCartItemQuantity(token=token, product_id=product.id, variant_id=product.variants[0].id, quantity=1),
            asynchronous=False,
        )
        assert snapshot["promo_code"] is None
        assert snapshot["discount"] == 0.0

    def test_remove_promo(self, new_cart, make_product, add_to_cart, make_promo):
        make_promo(code="SAVE20")
        token = new_cart()
        add_to_cart(token, make_product())
        current_domain.process(ApplyPromoToCart(token=token, code="SAVE20"), asynchronous=False)
        snapshot = current_domain.process(RemovePromoFromCart(token=token), asynchronous=False)
        assert snapshot["promo_code"] is None
        assert snapshot["total"] == snapshot["subtotal"]


class TestPurge:
    def test_purge_removes_only_expired_carts(self, new_cart):
        live = new_cart()
        stale = new_cart()
        _expire(stale)

        purged = current_domain.process(PurgeExpiredCarts(), asynchronous=False)
        assert purged == 1
        assert _cart(stale) is None
        assert _cart(live) is not None
