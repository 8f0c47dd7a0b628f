"""Order aggregate — the immutable record of a committed cart.

Line items, subtotal, discount and total are captured once at checkout and
never re-derived. Afterwards only the fulfilment status, the payment status,
the tracking number and the notes change.

Status moves forward only:

    pending → confirmed → shipped → delivered
    pending/confirmed → cancelled

Payment status moves independently:

    pending → paid | failed
    failed → pending | paid
    paid → refunded

Setting the current status again is allowed, so tracking numbers and notes
can be attached without a transition.
"""

import re
import secrets
import string
import time
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.errors import InvalidTransition
from storefront.order.events import OrderPlaced, OrderStatusChanged, PaymentStatusChanged

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"


_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}


def generate_order_number():
    """Order numbers look like ``ORD-1718000000000-X7K2Q``."""
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(5))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def _parse_enum(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError({field: [f"'{value}' is not one of: {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Customer:
    email = String(required=True, max_length=254)
    first_name = String(required=True, max_length=50)
    last_name = String(required=True, max_length=50)
    phone = String(max_length=20)

    @invariant.post
    def email_must_be_well_formed(self):
        if self.email and not _EMAIL.match(self.email):
            raise ValidationError({"email": [f"'{self.email}' is not a valid email address"]})


@storefront.value_object(part_of="Order")
class Address:
    """A shipping or billing address captured at checkout time."""

    street = String(required=True, max_length=200)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    variant_name = String(required=True, max_length=100)
    sku = String(required=True, max_length=64)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    @property
    def line_total(self):
        return round(self.price * self.quantity, 2)

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "variant_id": str(self.variant_id),
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "sku": self.sku,
            "price": self.price,
            "quantity": self.quantity,
            "line_total": self.line_total,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=32, unique=True)
    cart_id = Identifier(required=True)
    customer = ValueObject(Customer, required=True)
    contact_email = String(required=True, max_length=254)  # Lower-cased copy for lookups
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address, required=True)
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    promo_code = String(max_length=20)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    tracking_number = String(max_length=100)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order needs at least one item"]})

    @invariant.post
    def totals_must_be_consistent(self):
        if self.discount is not None and self.subtotal is not None and self.discount > self.subtotal:
            raise ValidationError({"discount": ["Discount cannot exceed the subtotal"]})
        if self.total is not None and abs(self.total - round(self.subtotal - (self.discount or 0.0), 2)) > 0.005:
            raise ValidationError({"total": ["Total must equal subtotal minus discount"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        cart,
        customer,
        shipping_address,
        payment_method,
        discount=0.0,
        billing_address=None,
        promo_code=None,
        notes=None,
    ):
        """Snapshot ``cart`` into a new pending order.

        Args:
            cart: The ShoppingCart being committed; its lines and subtotal are copied.
            customer: Dict with email, first_name, last_name and optional phone.
            shipping_address: Dict with street, city, state, zip_code, country.
            billing_address: Same shape; defaults to the shipping address.
            discount: Authoritative discount computed at commit time.
        """
        _parse_enum(PaymentMethod, payment_method, "payment_method")

        now = datetime.now(UTC)
        subtotal = cart.subtotal
        discount = round(min(max(discount or 0.0, 0.0), subtotal), 2)

        order = cls(
            order_number=generate_order_number(),
            cart_id=str(cart.id),
            customer=Customer(**customer),
            contact_email=customer["email"].strip().lower(),
            shipping_address=Address(**shipping_address),
            billing_address=Address(**(billing_address or shipping_address)),
            items=[
                OrderItem(
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    product_name=item.product_name,
                    variant_name=item.variant_name,
                    sku=item.sku,
                    price=item.price,
                    quantity=item.quantity,
                )
                for item in cart.items
            ],
            subtotal=subtotal,
            discount=discount,
            total=round(subtotal - discount, 2),
            promo_code=promo_code,
            status=OrderStatus.PENDING.value,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_email=order.contact_email,
                item_count=sum(item.quantity for item in order.items),
                subtotal=order.subtotal,
                discount=order.discount,
                total=order.total,
                promo_code=promo_code,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def set_status(self, status, tracking_number=None, notes=None):
        current = OrderStatus(self.status)
        target = _parse_enum(OrderStatus, status, "status")
        if target != current and target not in _STATUS_TRANSITIONS[current]:
            raise InvalidTransition(
                {"status": [f"Cannot move order {self.order_number} from {current.value} to {target.value}"]}
            )

        self.status = target.value
        if tracking_number is not None:
            self.tracking_number = tracking_number
        if notes is not None:
            self.notes = notes
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )

    def set_payment_status(self, payment_status):
        current = PaymentStatus(self.payment_status)
        target = _parse_enum(PaymentStatus, payment_status, "payment_status")
        if target == current:
            return
        if target not in _PAYMENT_TRANSITIONS[current]:
            raise InvalidTransition(
                {
                    "payment_status": [
                        f"Cannot move payment of order {self.order_number} from {current.value} to {target.value}"
                    ]
                }
            )

        self.payment_status = target.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                total=self.total,
                placed_at=self.created_at,
                changed_at=now,
            )
        )

    def to_dict(self):
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "cart_id": str(self.cart_id),
            "customer": self.customer.to_dict(),
            "shipping_address": self.shipping_address.to_dict(),
            "billing_address": self.billing_address.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "total": self.total,
            "promo_code": self.promo_code,
            "status": self.status,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "tracking_number": self.tracking_number,
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
