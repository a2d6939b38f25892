from datetime import datetime
from decimal import Decimal

import pytest

from checkout_service.errors import ValidationError
from checkout_service.line_items import (
    build_from_items,
    build_legacy,
    format_price,
    round_quantity,
    usable_items,
)
from checkout_service.models import ItemRequest


def test_legacy_item_shape():
    [item] = build_legacy("Mesh", {"panelCount": 4, "timestamp": "x"}, 1250)

    assert item.title == "Mesh Quote Order"
    assert item.price == "1250.00"
    assert item.quantity == 1
    assert item.requires_shipping is False
    assert item.taxable is True

    names = [p.name for p in item.properties]
    assert names == ["Calculator Type", "Panel Count", "Quote Date"]
    assert item.properties[0].value == "Mesh"
    datetime.fromisoformat(item.properties[-1].value)


def test_legacy_defaults_without_calculator_type():
    [item] = build_legacy(None, {}, "99.5")

    assert item.title == "Calculator Quote Order"
    assert item.price == "99.50"
    assert item.properties[0].value == "Calculator Order"


@pytest.mark.parametrize("price", [-5, 0, "abc", None, float("nan"), float("inf"), True])
def test_legacy_rejects_unusable_price(price):
    with pytest.raises(ValidationError):
        build_legacy("Mesh", {}, price)


def test_format_price_rounds_half_up():
    assert format_price(10.005) == "10.01"
    assert format_price(1250) == "1250.00"


def test_round_quantity():
    assert round_quantity(2.7) == 3
    assert round_quantity(2.5) == 3
    assert round_quantity(2.4) == 2
    assert round_quantity(0.2) == 1


def test_usable_items_filters_and_trims():
    items = [
        ItemRequest(handle=" mesh ", quantity=2),
        ItemRequest(handle="   ", quantity=1),
        ItemRequest(handle="binder-kit", quantity=0),
        ItemRequest(handle="binder-kit", quantity=-1),
        ItemRequest(handle="binder-kit", quantity="lots"),
        ItemRequest(handle=None, quantity=3),
        ItemRequest(handle="binder-kit", quantity="4"),
    ]
    usable = usable_items(items)

    assert [(i.handle, i.quantity) for i in usable] == [("mesh", 2.0), ("binder-kit", 4.0)]


def test_build_from_items_rounds_quantity(resolver):
    [item] = build_from_items([ItemRequest(handle="mesh", quantity=2.7)], resolver)

    assert item.variant_id == 111
    assert item.quantity == 3


def test_build_from_items_preserves_order_and_skips_invalid(resolver, catalog):
    items = build_from_items([
        ItemRequest(handle="binder-kit", quantity=1),
        ItemRequest(handle="", quantity=5),
        ItemRequest(handle="mesh", quantity=2),
    ], resolver)

    assert [i.variant_id for i in items] == [222, 111]
    assert catalog.calls == ["binder-kit", "mesh"]


def test_build_from_items_all_filtered_returns_empty(resolver, catalog):
    assert build_from_items([ItemRequest(handle="mesh", quantity=0)], resolver) == []
    assert catalog.calls == []


def test_format_price_beyond_default_precision():
    assert format_price(1e30) == "1" + "0" * 30 + ".00"
    assert format_price(Decimal("99999999999999999999999999.995")) == "100000000000000000000000000.00"
