# tinshop/modules/payroll/__init__.py

from .controller import PayrollController
from .model import EmployeesTableModel

__all__ = [
    "PayrollController",
    "EmployeesTableModel",
]
