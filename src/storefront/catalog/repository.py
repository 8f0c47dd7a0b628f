"""Catalog queries over the Product aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import ProductNotFound
from storefront.utils.queries import paginate, scan

_SORT_FIELDS = {
    "name": "name",
    "price": "min_price",
    "created_at": "created_at",
}


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id) -> Product | None:
        try:
            return self.get(product_id)
        except ObjectNotFoundError:
            return None

    def get_active(self, product_id) -> Product:
        """Load a product that shoppers may see, or raise ``ProductNotFound``."""
        product = self.find(product_id)
        if product is None or not product.is_active:
            raise ProductNotFound({"product_id": [f"Product {product_id} not found"]})
        return product

    def sku_exists(self, sku: str) -> bool:
        sku = sku.strip().upper()
        return any(v.sku == sku for product in scan(self._dao.query) for v in product.variants)

    def list_active(
        self,
        page,
        limit,
        category=None,
        brand=None,
        search=None,
        min_price=None,
        max_price=None,
        sort_by="created_at",
        sort_order="desc",
    ):
        query = self._dao.query.filter(is_active=True)
        if category:
            query = query.filter(category__iexact=category)
        if brand:
            query = query.filter(brand__iexact=brand)
        if search:
            query = query.filter(search_text__contains=search.strip().lower())
        # A product matches a price range when any of its variants does
        if min_price is not None:
            query = query.filter(max_price__gte=min_price)
        if max_price is not None:
            query = query.filter(min_price__lte=max_price)

        return paginate(query, page, limit, _SORT_FIELDS.get(sort_by, "created_at"), sort_order)

    def categories(self) -> list[str]:
        return sorted({p.category for p in scan(self._dao.query.filter(is_active=True))})

    def brands(self) -> list[str]:
        return sorted({p.brand for p in scan(self._dao.query.filter(is_active=True))})
