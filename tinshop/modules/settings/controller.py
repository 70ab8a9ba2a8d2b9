# tinshop/modules/settings/controller.py
from __future__ import annotations

import sqlite3
from typing import Dict, List

from PySide6.QtCore import Signal

from ..base_module import BaseModule
from ...database.repositories.settings_repo import SettingsRepo, StoreSettings


class SettingsController(BaseModule):
    """Pick lists offered when creating products, and the invoice counter."""

    settings_changed = Signal()

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None = None):
        super().__init__(conn, current_user)
        self.repo = SettingsRepo(self.store)

    def settings(self) -> StoreSettings:
        return self.repo.get()

    def options(self, category: str) -> List[str]:
        return self.repo.options(category)

    def add_option(self, category: str, value: str) -> List[str]:
        with self.store.transaction():
            opts = self.repo.add_option(category, value)
            self._audit("Add Option", f"{category}: {value.strip()}")
        self.settings_changed.emit()
        return opts

    def rename_option(self, category: str, old: str, new: str) -> List[str]:
        with self.store.transaction():
            opts = self.repo.rename_option(category, old, new)
            self._audit("Rename Option", f"{category}: {old} -> {new.strip()}")
        self.settings_changed.emit()
        return opts

    def remove_option(self, category: str, value: str) -> bool:
        with self.store.transaction():
            removed = self.repo.remove_option(category, value)
            if removed:
                self._audit("Remove Option", f"{category}: {value}")
        if removed:
            self.settings_changed.emit()
        return removed

    def move_option(self, category: str, from_index: int, to_index: int) -> List[str]:
        with self.store.transaction():
            opts = self.repo.move_option(category, from_index, to_index)
        self.settings_changed.emit()
        return opts

    def add_custom_field(self, name: str) -> Dict:
        with self.store.transaction():
            fld = self.repo.add_custom_field(name)
            self._audit("Add Field", fld["name"])
        self.settings_changed.emit()
        return fld

    def remove_custom_field(self, field_id: str) -> bool:
        with self.store.transaction():
            removed = self.repo.remove_custom_field(field_id)
            if removed:
                self._audit("Remove Field", field_id)
        if removed:
            self.settings_changed.emit()
        return removed

    def set_next_invoice_id(self, value: int) -> None:
        with self.store.transaction():
            self.repo.set_next_invoice_id(value)
            self._audit("Invoice Counter", str(value))
        self.settings_changed.emit()
