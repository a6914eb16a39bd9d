"""
Product catalog, used to label aggregated stock with a name and category.
"""

from typing import Any, Dict, List, Optional, Union

from inventory_tracker.core.models import Product
from inventory_tracker.database.store import LedgerStore, PRODUCTS_KEY
from inventory_tracker.utils.exceptions import ValidationError
from inventory_tracker.utils.logger import get_logger


logger = get_logger(__name__)


class ProductCatalog:

    def __init__(self, store: LedgerStore):
        self.store = store

    def list_products(self) -> List[Product]:
        return [Product.from_dict(item) for item in self.store.load(PRODUCTS_KEY, [])]

    def get_product_for_sku(self, sku: str) -> Optional[Product]:
        """Exact SKU match, ignoring case."""
        wanted = sku.strip().lower()
        return next((p for p in self.list_products() if p.sku.lower() == wanted), None)

    def upsert_product(self, product: Union[Product, Dict[str, Any]]) -> Product:
        """Insert a product, or replace the one with the same SKU."""
        if isinstance(product, dict):
            product = Product.from_dict(product)

        if not product.sku.strip():
            raise ValidationError("Product SKU cannot be empty", field="sku")
        if not product.name.strip():
            raise ValidationError("Product name cannot be empty", field="name", value=product.sku)

        raw, version = self.store.load_versioned(PRODUCTS_KEY, [])
        products = [Product.from_dict(item) for item in raw]

        wanted = product.sku.lower()
        position = next((i for i, p in enumerate(products) if p.sku.lower() == wanted), None)
        if position is None:
            products.append(product)
        else:
            products[position] = product

        self.store.save(PRODUCTS_KEY, [p.to_dict() for p in products], expected_version=version)
        logger.info(f"{'Added' if position is None else 'Updated'} product {product.sku}")
        return product
