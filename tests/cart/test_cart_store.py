from decimal import Decimal
import json

import pytest

from eesha.cart.domain.storage import StorageException
from eesha.cart.infrastructure.storage import InMemoryKeyValueStorage
from eesha.cart.models import LineItem
from eesha.cart.service import CartStore
from eesha.core.config import settings
from eesha.core.exceptions import ErrorCode


class FailingStorage(InMemoryKeyValueStorage):
    """Stockage dont l'écriture échoue tant que `fail_writes` est vrai."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = True

    def set(self, key, value):
        if self.fail_writes:
            raise StorageException("quota dépassé")
        super().set(key, value)

    def delete(self, key):
        if self.fail_writes:
            raise StorageException("quota dépassé")
        super().delete(key)


def test_add_items_recomputes_summary(cart, silk_saree, silk_scarf):
    """Panier de référence: 130 / 26 / 0 / 156."""
    cart.add_item(silk_saree)
    result = cart.add_item(silk_scarf)

    assert result.ok is True
    summary = result.value
    assert summary.item_count == 3
    assert summary.subtotal == Decimal("130.00")
    assert summary.vat_amount == Decimal("26.00")
    assert summary.shipping_amount == Decimal("0.00")
    assert summary.total == Decimal("156.00")
    assert cart.summary == summary


def test_add_same_variant_merges_quantity(cart, silk_saree):
    cart.add_item(silk_saree)
    cart.add_item(silk_saree.model_copy(update={"quantity": 1, "unit_price": Decimal("45.00")}))

    assert len(cart) == 1
    assert cart.get_quantity("V1") == 3
    # Le premier prix est conservé
    assert cart.items[0].unit_price == Decimal("50.00")
    assert cart.summary.subtotal == Decimal("150.00")


def test_add_item_from_mapping(cart):
    result = cart.add_item({"variant_id": "V9", "unit_price": "12.50", "quantity": 2, "name": "Étole"})
    assert result.ok is True
    assert "V9" in cart
    assert cart.summary.subtotal == Decimal("25.00")
    # Sous le seuil: livraison facturée
    assert cart.summary.shipping_amount == Decimal("10.00")
    assert cart.summary.total == Decimal("40.00")


@pytest.mark.parametrize("payload", [
    {"variant_id": "V1", "unit_price": "10.00", "quantity": 0},
    {"variant_id": "V1", "unit_price": "-1.00", "quantity": 1},
    {"variant_id": "", "unit_price": "10.00", "quantity": 1},
    {"unit_price": "10.00", "quantity": 1},
])
def test_add_invalid_item_is_rejected(cart, storage, payload):
    result = cart.add_item(payload)
    assert result.ok is False
    assert result.error == ErrorCode.VALIDATION
    assert cart.is_empty
    assert storage.get(settings.CART_STORAGE_KEY) is None


def test_update_quantity_and_zero_removes(cart, silk_saree, silk_scarf):
    cart.add_item(silk_saree)
    cart.add_item(silk_scarf)

    cart.update_quantity("V1", 5)
    assert cart.get_quantity("V1") == 5
    assert cart.summary.subtotal == Decimal("280.00")

    result = cart.update_quantity("V1", 0)
    assert result.ok is True
    assert "V1" not in cart
    assert cart.summary.subtotal == Decimal("30.00")


def test_update_quantity_rejects_non_integer(cart, silk_saree):
    cart.add_item(silk_saree)
    for bad in (1.5, "3", True):
        result = cart.update_quantity("V1", bad)
        assert result.ok is False
        assert result.error == ErrorCode.VALIDATION
    assert cart.get_quantity("V1") == 2


def test_update_or_remove_absent_variant_is_noop(cart, storage, silk_saree):
    cart.add_item(silk_saree)
    before = storage.get(settings.CART_STORAGE_KEY)

    assert cart.update_quantity("ABSENT", 3).ok is True
    assert cart.remove_item("ABSENT").ok is True
    assert storage.get(settings.CART_STORAGE_KEY) == before
    assert len(cart) == 1


def test_clear_empties_cart_and_storage(cart, storage, silk_saree):
    cart.add_item(silk_saree)
    result = cart.clear()

    assert result.ok is True
    assert cart.is_empty
    assert result.value.item_count == 0
    assert result.value.total == Decimal("0.00")
    assert storage.get(settings.CART_STORAGE_KEY) is None


def test_persisted_payload_contains_items_only(cart, storage, silk_saree):
    cart.add_item(silk_saree)
    payload = json.loads(storage.get(settings.CART_STORAGE_KEY))

    assert isinstance(payload, list)
    assert payload[0]["variant_id"] == "V1"
    assert payload[0]["quantity"] == 2
    assert "total" not in payload[0]


def test_load_recomputes_totals_and_ignores_stored_ones(policy, silk_saree):
    forged = {
        "items": [silk_saree.model_dump(mode="json"), silk_saree.model_dump(mode="json")],
        "subtotal": 1,
        "total": 1,
    }
    storage = InMemoryKeyValueStorage({settings.CART_STORAGE_KEY: json.dumps(forged)})
    cart = CartStore(storage=storage, policy=policy)

    result = cart.load()

    assert result.ok is True
    # Doublons fusionnés
    assert len(cart) == 1
    assert cart.get_quantity("V1") == 4
    assert cart.summary.subtotal == Decimal("200.00")
    assert cart.summary.total == Decimal("240.00")


def test_load_corrupt_payload_resets_cart(policy):
    storage = InMemoryKeyValueStorage({settings.CART_STORAGE_KEY: "{pas du json"})
    cart = CartStore(storage=storage, policy=policy)

    result = cart.load()

    assert result.ok is False
    assert result.error == ErrorCode.PERSISTENCE
    assert result.message == settings.CART_ERROR_MSG
    assert cart.is_empty


def test_load_missing_key_gives_empty_summary(cart):
    result = cart.load()
    assert result.ok is True
    assert result.value.item_count == 0
    assert result.value.shipping_amount == Decimal("0.00")


def test_load_storage_read_failure(policy, mocker):
    storage = InMemoryKeyValueStorage()
    mocker.patch.object(storage, "get", side_effect=StorageException("lecture impossible"))
    cart = CartStore(storage=storage, policy=policy)

    result = cart.load()

    assert result.ok is False
    assert result.error == ErrorCode.PERSISTENCE


def test_write_failure_keeps_memory_state_and_flush_retries(policy, silk_saree):
    storage = FailingStorage()
    cart = CartStore(storage=storage, policy=policy)

    result = cart.add_item(silk_saree)

    assert result.ok is False
    assert result.error == ErrorCode.PERSISTENCE
    assert result.message == settings.CART_ERROR_MSG
    # La mutation est conservée en mémoire
    assert cart.get_quantity("V1") == 2
    assert result.value.subtotal == Decimal("100.00")
    assert cart.has_pending_write is True

    storage.fail_writes = False
    flushed = cart.flush()

    assert flushed.ok is True
    assert cart.has_pending_write is False
    assert json.loads(storage.get(settings.CART_STORAGE_KEY))[0]["variant_id"] == "V1"


def test_flush_without_pending_write_is_noop(cart, storage, mocker):
    spy = mocker.spy(storage, "set")
    assert cart.flush().ok is True
    spy.assert_not_called()


def test_cart_survives_reload(storage, policy, silk_saree, silk_scarf):
    first = CartStore(storage=storage, policy=policy)
    first.add_item(silk_saree)
    first.add_item(silk_scarf)

    second = CartStore(storage=storage, policy=policy)
    second.load()

    assert second.items == first.items
    assert second.summary == first.summary


def test_line_item_total():
    item = LineItem(variant_id="V1", unit_price=Decimal("19.99"), quantity=3)
    assert item.line_total == Decimal("59.97")


def test_merge_is_idempotent_across_interleaved_adds(cart, silk_scarf):
    """N ajouts unitaires de la même variante, entrecoupés d'autres variantes: une seule ligne de quantité N."""
    unit = LineItem(variant_id="V1", name="Saree en soie", unit_price=Decimal("50.00"), quantity=1)
    for i in range(7):
        cart.add_item(unit)
        cart.add_item(LineItem(variant_id=f"X{i}", unit_price=Decimal("1.00"), quantity=1))
    cart.add_item(silk_scarf)

    assert [item.variant_id for item in cart.items].count("V1") == 1
    assert cart.get_quantity("V1") == 7
    assert len(cart) == 9
    assert cart.summary.item_count == 15
    assert cart.summary.subtotal == Decimal("387.00")


def test_negative_quantity_removes_line(cart, silk_saree, silk_scarf):
    cart.add_item(silk_saree)
    cart.add_item(silk_scarf)

    result = cart.update_quantity("V1", -3)

    assert result.ok is True
    assert "V1" not in cart
    assert result.value.item_count == 1


def test_zero_quantity_on_single_line_empties_summary(cart, storage):
    cart.add_item(LineItem(variant_id="V1", unit_price=Decimal("50.00"), quantity=3))

    result = cart.update_quantity("V1", 0)

    assert result.ok is True
    assert cart.is_empty
    assert result.value.item_count == 0
    assert result.value.subtotal == Decimal("0.00")
    assert result.value.total == Decimal("0.00")
    assert storage.get(settings.CART_STORAGE_KEY) is None


def test_out_of_range_quantity_leaves_cart_unchanged(cart, storage, silk_saree, silk_scarf):
    cart.add_item(silk_saree)
    cart.add_item(silk_scarf)
    before_items = cart.items
    before_summary = cart.summary
    before_payload = storage.get(settings.CART_STORAGE_KEY)

    result = cart.update_quantity("V1", 10**30)

    assert result.ok is False
    assert result.error == ErrorCode.VALIDATION
    assert result.value == before_summary
    assert cart.items == before_items
    assert cart.get_quantity("V1") == 2
    assert cart.summary.total == Decimal("156.00")
    assert storage.get(settings.CART_STORAGE_KEY) == before_payload


def test_out_of_range_merge_leaves_cart_unchanged(cart, silk_saree):
    cart.add_item(silk_saree)

    result = cart.add_item(silk_saree.model_copy(update={"quantity": 10**30}))

    assert result.ok is False
    assert result.error == ErrorCode.VALIDATION
    assert cart.get_quantity("V1") == 2
    assert cart.summary.subtotal == Decimal("100.00")


def test_load_out_of_range_payload_resets_cart(policy, silk_saree):
    entry = silk_saree.model_dump(mode="json")
    entry["quantity"] = 10**30
    storage = InMemoryKeyValueStorage({settings.CART_STORAGE_KEY: json.dumps([entry])})
    cart = CartStore(storage=storage, policy=policy)

    result = cart.load()

    assert result.ok is False
    assert result.error == ErrorCode.PERSISTENCE
    assert cart.is_empty
    assert cart.summary.item_count == 0
