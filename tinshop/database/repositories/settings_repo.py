from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ...constants import CATALOG_LISTS, FIRST_INVOICE_ID, KEY_SETTINGS
from ...utils.errors import ValidationFailure
from ...utils.helpers import new_id
from ...utils.validators import is_whole_number, non_empty
from .document_store import DocumentStore

# stored key -> StoreSettings attribute
_CATALOG_ATTRS = dict(zip(CATALOG_LISTS, ("brands", "colors", "thicknesses", "product_types")))


@dataclass
class StoreSettings:
    brands: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    thicknesses: List[str] = field(default_factory=list)
    product_types: List[str] = field(default_factory=list)
    custom_fields: List[Dict] = field(default_factory=list)
    next_invoice_id: int = FIRST_INVOICE_ID

    def to_dict(self) -> Dict:
        return {
            "brands": list(self.brands),
            "colors": list(self.colors),
            "thicknesses": list(self.thicknesses),
            "productTypes": list(self.product_types),
            "customFields": list(self.custom_fields),
            "nextInvoiceId": self.next_invoice_id,
        }

    @classmethod
    def from_dict(cls, d: Dict | None) -> "StoreSettings":
        d = d or {}
        return cls(
            brands=list(d.get("brands") or []),
            colors=list(d.get("colors") or []),
            thicknesses=list(d.get("thicknesses") or []),
            product_types=list(d.get("productTypes") or []),
            custom_fields=list(d.get("customFields") or []),
            next_invoice_id=int(d.get("nextInvoiceId") or FIRST_INVOICE_ID),
        )


class SettingsRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    def get(self) -> StoreSettings:
        return StoreSettings.from_dict(self.store.load(KEY_SETTINGS, {}))

    def save(self, settings: StoreSettings) -> None:
        self.store.save(KEY_SETTINGS, settings.to_dict())

    def reserve_invoice_id(self) -> str:
        """
        Return the next invoice number and advance the counter.

        Not safe against a second process writing the same store; call it
        inside the DocumentStore transaction that saves the sale.
        """
        settings = self.get()
        invoice_id = str(settings.next_invoice_id)
        settings.next_invoice_id += 1
        self.save(settings)
        return invoice_id

    def set_next_invoice_id(self, value: int) -> None:
        if not is_whole_number(value) or int(value) <= 0:
            raise ValidationFailure("Next invoice number must be a positive whole number.")
        settings = self.get()
        settings.next_invoice_id = int(value)
        self.save(settings)

    # ---------------------------- catalog lists ----------------------------
    # `category` is one of CATALOG_LISTS or the id of a custom field.

    def options(self, category: str) -> List[str]:
        return list(self._options_ref(self.get(), category))

    def _options_ref(self, settings: StoreSettings, category: str) -> List[str]:
        attr = _CATALOG_ATTRS.get(category)
        if attr is not None:
            return getattr(settings, attr)
        fld = next((f for f in settings.custom_fields if f.get("id") == category), None)
        if fld is None:
            raise ValidationFailure(f"Unknown option list: {category}")
        return fld.setdefault("options", [])

    def add_option(self, category: str, value: str) -> List[str]:
        if not non_empty(value):
            raise ValidationFailure("Option cannot be empty.")
        value = value.strip()
        settings = self.get()
        opts = self._options_ref(settings, category)
        if value in opts:
            raise ValidationFailure(f"'{value}' is already in the list.")
        opts.append(value)
        self.save(settings)
        return list(opts)

    def rename_option(self, category: str, old: str, new: str) -> List[str]:
        """Existing products keep the old text; only the pick list changes."""
        if not non_empty(new):
            raise ValidationFailure("Option cannot be empty.")
        new = new.strip()
        settings = self.get()
        opts = self._options_ref(settings, category)
        if old not in opts:
            raise ValidationFailure(f"'{old}' is not in the list.")
        if new != old:
            if new in opts:
                raise ValidationFailure(f"'{new}' is already in the list.")
            opts[opts.index(old)] = new
            self.save(settings)
        return list(opts)

    def remove_option(self, category: str, value: str) -> bool:
        settings = self.get()
        opts = self._options_ref(settings, category)
        if value not in opts:
            return False
        opts.remove(value)
        self.save(settings)
        return True

    def move_option(self, category: str, from_index: int, to_index: int) -> List[str]:
        settings = self.get()
        opts = self._options_ref(settings, category)
        if not (0 <= from_index < len(opts) and 0 <= to_index < len(opts)):
            raise ValidationFailure("Option position out of range.")
        opts.insert(to_index, opts.pop(from_index))
        self.save(settings)
        return list(opts)

    def add_custom_field(self, name: str) -> Dict:
        if not non_empty(name):
            raise ValidationFailure("Field name cannot be empty.")
        settings = self.get()
        fld = {"id": f"custom_{new_id()}", "name": name.strip(), "options": []}
        settings.custom_fields.append(fld)
        self.save(settings)
        return dict(fld)

    def remove_custom_field(self, field_id: str) -> bool:
        settings = self.get()
        kept = [f for f in settings.custom_fields if f.get("id") != field_id]
        if len(kept) == len(settings.custom_fields):
            return False
        settings.custom_fields = kept
        self.save(settings)
        return True
