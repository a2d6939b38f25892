from checkout_service.formatting import (
    calculator_properties,
    format_label,
    serialize_calculator_data,
)


def test_format_label_camel_case():
    assert format_label("binderKits") == "Binder Kits"


def test_format_label_snake_case():
    assert format_label("total_cost") == "Total Cost"


def test_format_label_mixed_and_padded():
    assert format_label("  shipping_zoneName ") == "Shipping Zone Name"


def test_format_label_lowercases_word_tails():
    assert format_label("SQFT_total") == "S Q F T Total"


def test_format_label_empty():
    assert format_label("") == ""


def test_calculator_properties_skip_reserved_keys():
    props = calculator_properties({
        "timestamp": "2024-01-01",
        "calculator": "mesh",
        "panelCount": 12,
        "addons": ["a", "b"],
    })
    assert [(p.name, p.value) for p in props] == [
        ("Panel Count", "12"),
        ("Addons", "['a', 'b']"),
    ]


def test_serialize_calculator_data_handles_unserializable_values():
    text = serialize_calculator_data({"when": object})
    assert '"when"' in text
