# tinshop/modules/settings/__init__.py

from .controller import SettingsController

__all__ = ["SettingsController"]
