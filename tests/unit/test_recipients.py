"""
Unit tests for RecipientDirectory and ProductCatalog
"""
import pytest

from inventory_tracker.core.models import Product
from inventory_tracker.services.catalog import ProductCatalog
from inventory_tracker.services.recipients import RecipientDirectory
from inventory_tracker.utils.exceptions import NotFoundError, ValidationError


class TestRecipientDirectory:
    """Test recipient CRUD"""

    @pytest.fixture
    def directory(self, memory_store):
        return RecipientDirectory(memory_store)

    def test_add_and_get(self, directory):
        recipient = directory.add("  Store A  ", email="a@example.com")

        assert recipient.name == "Store A"
        assert directory.get(recipient.id).email == "a@example.com"
        assert recipient.created_at is not None

    def test_name_is_required(self, directory):
        with pytest.raises(ValidationError):
            directory.add("   ")

    def test_find_by_name_ignores_case(self, directory):
        recipient = directory.add("Store A")

        assert directory.find_by_name("STORE a").id == recipient.id
        assert directory.find_by_name("Store B") is None

    def test_update(self, directory):
        recipient = directory.add("Store A")

        updated = directory.update(recipient.id, {"phone": "0812", "ignored": "x"})

        assert updated.phone == "0812"
        assert directory.get(recipient.id).phone == "0812"

    def test_update_cannot_blank_the_name(self, directory):
        recipient = directory.add("Store A")

        with pytest.raises(ValidationError):
            directory.update(recipient.id, {"name": ""})

    def test_delete(self, directory):
        recipient = directory.add("Store A")
        directory.delete(recipient.id)

        with pytest.raises(NotFoundError):
            directory.get(recipient.id)
        with pytest.raises(NotFoundError):
            directory.delete(recipient.id)


class TestProductCatalog:
    """Test catalog lookups"""

    def test_upsert_and_lookup(self, memory_store):
        catalog = ProductCatalog(memory_store)
        catalog.upsert_product(Product(sku="SHOE-001-BLK", name="Trail Runner", category="running"))
        catalog.upsert_product({"sku": "shoe-001-blk", "name": "Trail Runner II"})

        assert len(catalog.list_products()) == 1
        product = catalog.get_product_for_sku("Shoe-001-Blk")
        assert product.name == "Trail Runner II"
        assert product.category == "uncategorized"
        assert catalog.get_product_for_sku("SHOE-002") is None

    def test_rejects_blank_name(self, memory_store):
        with pytest.raises(ValidationError):
            ProductCatalog(memory_store).upsert_product(Product(sku="A-1-B", name=" "))
