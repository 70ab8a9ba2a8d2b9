"""Catalog pick lists, custom fields and the invoice counter."""

from __future__ import annotations

import pytest

from tinshop.database.repositories import SettingsRepo
from tinshop.utils.errors import ValidationFailure


def test_add_rename_remove_option(shop_settings, store):
    assert shop_settings.add_option("brands", " PHP ") == ["PHP"]
    shop_settings.add_option("brands", "KDS")
    assert shop_settings.rename_option("brands", "KDS", "KDS Steel") == ["PHP", "KDS Steel"]
    assert shop_settings.remove_option("brands", "PHP") is True
    assert shop_settings.remove_option("brands", "PHP") is False
    assert SettingsRepo(store).get().brands == ["KDS Steel"]


def test_duplicate_and_empty_options_are_rejected(shop_settings):
    shop_settings.add_option("colors", "Red")
    with pytest.raises(ValidationFailure):
        shop_settings.add_option("colors", "Red")
    with pytest.raises(ValidationFailure):
        shop_settings.add_option("colors", "  ")
    shop_settings.add_option("colors", "Blue")
    with pytest.raises(ValidationFailure):
        shop_settings.rename_option("colors", "Blue", "Red")
    with pytest.raises(ValidationFailure):
        shop_settings.rename_option("colors", "Green", "Teal")
    assert shop_settings.options("colors") == ["Red", "Blue"]


def test_move_option(shop_settings):
    for t in ("0.32mm", "0.36mm", "0.42mm"):
        shop_settings.add_option("thicknesses", t)
    assert shop_settings.move_option("thicknesses", 2, 0) == ["0.42mm", "0.32mm", "0.36mm"]
    with pytest.raises(ValidationFailure):
        shop_settings.move_option("thicknesses", 0, 3)


def test_product_types_list(shop_settings, store):
    shop_settings.add_option("productTypes", "Tin")
    assert SettingsRepo(store).get().to_dict()["productTypes"] == ["Tin"]


def test_custom_field_lifecycle(shop_settings, store):
    fld = shop_settings.add_custom_field("Grade")
    assert fld["id"].startswith("custom_")
    assert shop_settings.add_option(fld["id"], "A") == ["A"]
    shop_settings.add_option(fld["id"], "B")
    assert shop_settings.options(fld["id"]) == ["A", "B"]

    assert shop_settings.remove_custom_field(fld["id"]) is True
    assert shop_settings.remove_custom_field(fld["id"]) is False
    assert SettingsRepo(store).get().custom_fields == []
    with pytest.raises(ValidationFailure):
        shop_settings.options(fld["id"])


def test_unknown_list(shop_settings):
    with pytest.raises(ValidationFailure):
        shop_settings.add_option("sizes", "Large")


def test_next_invoice_id(shop_settings, store):
    shop_settings.set_next_invoice_id(5000)
    assert SettingsRepo(store).reserve_invoice_id() == "5000"
    with pytest.raises(ValidationFailure):
        shop_settings.set_next_invoice_id(0)
    with pytest.raises(ValidationFailure):
        shop_settings.set_next_invoice_id(12.5)


def test_settings_changes_signal(shop_settings):
    seen = []
    shop_settings.settings_changed.connect(lambda: seen.append(1))
    shop_settings.add_option("brands", "PHP")
    shop_settings.remove_option("brands", "missing")
    assert seen == [1]
