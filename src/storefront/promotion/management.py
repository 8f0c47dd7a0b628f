"""Promo code administration — commands and handler."""

import json

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import DuplicatePromoCode
from storefront.promotion.promo_code import PromoCode
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="PromoCode")
class CreatePromoCode:
    code = String(required=True, max_length=20)
    description = String(max_length=200)
    discount_type = String(required=True, max_length=20)
    value = Float(required=True)
    max_discount = Float()
    min_order_amount = Float()
    valid_from = DateTime(required=True)
    valid_to = DateTime(required=True)
    max_uses = Integer()
    is_active = Boolean(default=True)


@storefront.command(part_of="PromoCode")
class UpdatePromoCode:
    promo_id = Identifier(required=True)
    changes = Text(required=True)  # JSON object of the fields being changed


@storefront.command(part_of="PromoCode")
class DeletePromoCode:
    promo_id = Identifier(required=True)


@storefront.command_handler(part_of=PromoCode)
class ManagePromoCodesHandler:
    @handle(CreatePromoCode)
    def create_promo_code(self, command):
        repo = current_domain.repository_for(PromoCode)
        if repo.find_by_code(command.code) is not None:
            raise DuplicatePromoCode({"code": [f"Promo code {command.code.strip().upper()} already exists"]})

        promo = PromoCode.create(
            code=command.code,
            description=command.description,
            discount_type=command.discount_type,
            value=command.value,
            max_discount=command.max_discount,
            min_order_amount=command.min_order_amount,
            valid_from=command.valid_from,
            valid_to=command.valid_to,
            max_uses=command.max_uses,
            is_active=command.is_active if command.is_active is not None else True,
        )
        repo.add(promo)
        logger.info("promo_code_created", code=promo.code, discount_type=promo.discount_type)
        return str(promo.id)

    @handle(UpdatePromoCode)
    def update_promo_code(self, command):
        changes = json.loads(command.changes) if isinstance(command.changes, str) else command.changes
        repo = current_domain.repository_for(PromoCode)
        promo = repo.get_promo(command.promo_id)
        promo.update(**changes)
        repo.add(promo)

    @handle(DeletePromoCode)
    def delete_promo_code(self, command):
        repo = current_domain.repository_for(PromoCode)
        promo = repo.get_promo(command.promo_id)
        repo._dao.delete(promo)
        logger.info("promo_code_deleted", code=promo.code)
