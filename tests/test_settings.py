import pytest

from fields import FieldMap
from settings import Settings


def test_from_env(monkeypatch):
    monkeypatch.setenv("CART_GLOBAL_DISCOUNT", "12.5")
    monkeypatch.setenv("CART_GLOBAL_TAX_RATE", "8")
    monkeypatch.setenv("CART_FIRE_EVENTS", "yes")
    monkeypatch.setenv("ADMIN_API_KEY", "secret")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = Settings.from_env()
    assert settings.global_discount == 12.5
    assert settings.global_tax_rate == 8
    assert settings.fire_events is True
    assert settings.admin_api_key == "secret"
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_from_env_defaults(monkeypatch):
    for name in ("CART_GLOBAL_DISCOUNT", "CART_GLOBAL_TAX_RATE", "CART_FIRE_EVENTS", "ADMIN_API_KEY", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()
    assert settings.global_discount == 0
    assert settings.fire_events is False
    assert settings.admin_api_key is None
    assert settings.cors_origins == ["http://127.0.0.1:5500"]


def test_bad_number(monkeypatch):
    monkeypatch.setenv("CART_GLOBAL_DISCOUNT", "ten")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_field_map_accessors():
    fields = FieldMap({"price": "amount", "note": "gift", "weight": "1.5", "wrap": 1})
    assert fields.price_field == "amount"
    assert fields.quantity_field == "quantity"
    assert fields.get_float("weight") == 1.5
    assert fields.get_bool("wrap") is True
    assert fields.get_bool("missing") is False
    assert fields.get("missing", "x") == "x"
    assert "note" in fields
    assert fields.as_dict()["note"] == "gift"


def test_field_map_rejects_blank_names():
    with pytest.raises(ValueError):
        FieldMap({"": "x"})
