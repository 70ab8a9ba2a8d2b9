# tinshop/modules/payroll/controller.py
from __future__ import annotations

import logging
import sqlite3
from typing import Dict, List

from PySide6.QtCore import Signal

from ..base_module import BaseModule
from ...constants import PAYMENT_ADVANCE, PAYMENT_SALARY
from ...database.repositories.expenses_repo import ExpensesRepo
from ...database.repositories.payroll_repo import (
    AttendanceRecord,
    Employee,
    PayrollRepo,
    SalaryRecord,
)
from ...utils.errors import ValidationFailure

_log = logging.getLogger(__name__)

_PAYMENT_LABELS = {PAYMENT_SALARY: "Salary", PAYMENT_ADVANCE: "Advance"}


class PayrollController(BaseModule):
    """
    Staff list, salary / advance payments and attendance.

    A payment is also booked as a 'salary' expense dated the day it was paid,
    in the same transaction, so profit and loss picks it up.
    """

    payroll_changed = Signal()

    def __init__(self, conn: sqlite3.Connection, current_user: dict | None = None):
        super().__init__(conn, current_user)
        self.repo = PayrollRepo(self.store)
        self.expenses = ExpensesRepo(self.store)

    # ---------------------------- employees ----------------------------

    def employees(self) -> List[Employee]:
        return self.repo.list_employees()

    def add_employee(
        self,
        *,
        name: str,
        base_salary: float,
        phone: str = "",
        designation: str = "",
    ) -> Employee:
        with self.store.transaction():
            emp = self.repo.add_employee(
                name=name, base_salary=base_salary, phone=phone, designation=designation
            )
            self._audit("Add Employee", f"{emp.name} ({emp.designation})")
        _log.info("Added employee %s", emp.name)
        self.payroll_changed.emit()
        return emp

    def delete_employee(self, employee_id: str) -> bool:
        emp = self.repo.get_employee(employee_id)
        if emp is None:
            return False
        with self.store.transaction():
            self.repo.delete_employee(employee_id)
            self._audit("Delete Employee", emp.name)
        self.payroll_changed.emit()
        return True

    # ---------------------------- payments ----------------------------

    def pay(
        self,
        employee_id: str,
        *,
        amount: float,
        kind: str = PAYMENT_ADVANCE,
        day: str | None = None,
        note: str = "",
    ) -> SalaryRecord:
        with self.store.transaction():
            rec = self.repo.record_payment(employee_id, amount=amount, kind=kind, day=day, note=note)
            self.expenses.add(
                reason=f"{_PAYMENT_LABELS[rec.type]} - {rec.employee_name}",
                amount=rec.amount,
                category="salary",
                added_by=self.user_name or None,
                timestamp=rec.date,
            )
            self._audit("Salary Payment", f"{rec.employee_name}: {rec.type} {rec.amount:.2f}")
        _log.info("Paid %s %.2f to %s", rec.type, rec.amount, rec.employee_name)
        self.payroll_changed.emit()
        return rec

    def history(self, employee_id: str) -> List[SalaryRecord]:
        return self.repo.list_salary_records(employee_id)

    def balance(self, employee_id: str) -> Dict:
        return self.repo.balance(employee_id)

    # ---------------------------- attendance ----------------------------

    def mark_attendance(self, employee_id: str, status: str, day: str | None = None) -> AttendanceRecord:
        with self.store.transaction():
            rec = self.repo.mark_attendance(employee_id, status, day)
        self.payroll_changed.emit()
        return rec

    def monthly_attendance(self, employee_id: str, year: int, month: int) -> Dict:
        if not 1 <= int(month) <= 12:
            raise ValidationFailure("Month must be between 1 and 12.")
        return self.repo.monthly_attendance(employee_id, year, month)

    def employee_rows(self) -> List[Dict]:
        """One row per employee for the staff table."""
        rows = []
        for e in self.repo.list_employees():
            bal = self.repo.balance(e.id)
            last = bal["last_payment"]
            rows.append({
                "id": e.id,
                "name": e.name,
                "designation": e.designation,
                "phone": e.phone,
                "base_salary": e.base_salary,
                "total_advance": bal["total_advance"],
                "total_salary": bal["total_salary"],
                "last_payment": last.date if last else "",
            })
        return rows
