"""Cart lifecycle — creating carts, clearing them and purging expired ones."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class CreateOrGetCart:
    """Return the live cart for a token, issuing a token when none is given."""

    token = String(max_length=64)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    token = String(required=True, max_length=64)


@storefront.command(part_of="ShoppingCart")
class PurgeExpiredCarts:
    pass


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateOrGetCart)
    def create_or_get(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_by_token(command.token)

        if cart is None:
            cart = ShoppingCart.create(token=command.token)
            repo.add(cart)
            logger.info("cart_created", token=cart.token)
        elif cart.is_expired():
            # An expired cart is gone as far as the shopper is concerned
            cart.restart()
            repo.add(cart)
            logger.info("cart_restarted", token=cart.token)

        return cart.snapshot()

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_active_cart(command.token)
        snapshot = cart.clear()
        repo.add(cart)
        return snapshot

    @handle(PurgeExpiredCarts)
    def purge_expired(self, _command):
        repo = current_domain.repository_for(ShoppingCart)
        expired = repo.find_expired()
        for cart in expired:
            repo._dao.delete(cart)
        logger.info("expired_carts_purged", count=len(expired))
        return len(expired)
