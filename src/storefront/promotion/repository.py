"""Lookups and reporting queries over promo codes."""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import PromoCodeNotFound
from storefront.promotion.promo_code import DiscountType, PromoCode, normalize_code
from storefront.utils.queries import paginate, scan

_SORT_FIELDS = {"created_at", "code", "valid_to", "used_count", "value"}


@storefront.repository(part_of=PromoCode)
class PromoCodeRepository:
    def find_by_code(self, code) -> PromoCode | None:
        return self._dao.query.filter(code=normalize_code(code)).all().first

    def get_promo(self, promo_id) -> PromoCode:
        try:
            return self.get(promo_id)
        except ObjectNotFoundError:
            raise PromoCodeNotFound({"promo_id": [f"Promo code {promo_id} not found"]}) from None

    def list_codes(self, page, limit, is_active=None, discount_type=None, sort_by="created_at", sort_order="desc"):
        query = self._dao.query
        if is_active is not None:
            query = query.filter(is_active=is_active)
        if discount_type:
            query = query.filter(discount_type=discount_type)
        sort_field = sort_by if sort_by in _SORT_FIELDS else "created_at"
        return paginate(query, page, limit, sort_field, sort_order)

    def analytics(self, now=None) -> dict:
        now = now or datetime.now(UTC)
        total = active = total_usage = 0
        by_type = {kind.value: {"count": 0, "usage": 0} for kind in DiscountType}

        for promo in scan(self._dao.query):
            total += 1
            active += 1 if promo.is_active and not promo.is_expired(now) else 0
            total_usage += promo.used_count or 0
            by_type[promo.discount_type]["count"] += 1
            by_type[promo.discount_type]["usage"] += promo.used_count or 0

        return {
            "total_promo_codes": total,
            "active_promo_codes": active,
            "total_usage": total_usage,
            "average_usage": round(total_usage / total, 2) if total else 0.0,
            "by_type": by_type,
        }
