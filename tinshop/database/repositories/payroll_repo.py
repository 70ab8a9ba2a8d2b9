from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List

from ...constants import (
    ATTENDANCE_ABSENT,
    ATTENDANCE_LATE,
    ATTENDANCE_STATUSES,
    DEFAULT_DESIGNATION,
    KEY_ATTENDANCE,
    KEY_EMPLOYEES,
    KEY_SALARY_RECORDS,
    PAYMENT_ADVANCE,
    PAYMENT_SALARY,
    SALARY_PAYMENT_TYPES,
)
from ...utils.errors import ValidationFailure
from ...utils.helpers import new_id, now_str, today_str
from ...utils.validators import is_strictly_positive_number, non_empty
from .document_store import DocumentStore


@dataclass
class Employee:
    id: str
    name: str
    phone: str
    designation: str
    base_salary: float
    joined_date: str

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "designation": self.designation,
            "baseSalary": self.base_salary,
            "joinedDate": self.joined_date,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Employee":
        return cls(
            id=str(d["id"]),
            name=d.get("name") or "",
            phone=d.get("phone") or "",
            designation=d.get("designation") or DEFAULT_DESIGNATION,
            base_salary=float(d.get("baseSalary") or 0.0),
            joined_date=str(d.get("joinedDate") or ""),
        )


@dataclass
class SalaryRecord:
    id: str
    employee_id: str
    employee_name: str
    amount: float
    type: str  # 'salary' | 'advance'
    for_month: str
    for_year: int
    date: str
    note: str = ""

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "amount": self.amount,
            "type": self.type,
            "forMonth": self.for_month,
            "forYear": self.for_year,
            "date": self.date,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "SalaryRecord":
        return cls(
            id=str(d["id"]),
            employee_id=str(d.get("employeeId") or ""),
            employee_name=d.get("employeeName") or "",
            amount=float(d.get("amount") or 0.0),
            type=d.get("type") or PAYMENT_SALARY,
            for_month=d.get("forMonth") or "",
            for_year=int(d.get("forYear") or 0),
            date=str(d.get("date") or ""),
            note=d.get("note") or "",
        )


@dataclass
class AttendanceRecord:
    id: str
    employee_id: str
    date: str  # YYYY-MM-DD
    status: str
    timestamp: str

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "date": self.date,
            "status": self.status,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "AttendanceRecord":
        return cls(
            id=str(d.get("id") or ""),
            employee_id=str(d.get("employeeId") or ""),
            date=str(d.get("date") or ""),
            status=d.get("status") or "",
            timestamp=str(d.get("timestamp") or ""),
        )


def _parse_day(day: str) -> date:
    try:
        return date.fromisoformat(day)
    except (TypeError, ValueError) as e:
        raise ValidationFailure(f"Invalid date: {day!r} (expected YYYY-MM-DD).") from e


class PayrollRepo:
    """
    Staff, salary / advance payments and daily attendance.

    Three documents: employees, salary records (append-only) and attendance
    (one row per employee per day, a later mark replaces the earlier one).
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------------------- employees ----------------------------

    def list_employees(self) -> List[Employee]:
        return [Employee.from_dict(d) for d in self.store.load(KEY_EMPLOYEES, [])]

    def get_employee(self, employee_id: str) -> Employee | None:
        return next((e for e in self.list_employees() if e.id == employee_id), None)

    def add_employee(
        self,
        *,
        name: str,
        base_salary: float,
        phone: str = "",
        designation: str = "",
    ) -> Employee:
        if not non_empty(name):
            raise ValidationFailure("Employee name cannot be empty.")
        if not is_strictly_positive_number(base_salary):
            raise ValidationFailure("Base salary must be greater than zero.")

        emp = Employee(
            id=new_id(),
            name=name.strip(),
            phone=(phone or "").strip(),
            designation=(designation or "").strip() or DEFAULT_DESIGNATION,
            base_salary=float(base_salary),
            joined_date=today_str(),
        )
        rows = self.store.load(KEY_EMPLOYEES, [])
        rows.append(emp.to_dict())
        self.store.save(KEY_EMPLOYEES, rows)
        return emp

    def update_employee(self, emp: Employee) -> None:
        rows = self.store.load(KEY_EMPLOYEES, [])
        idx = next((i for i, r in enumerate(rows) if str(r.get("id")) == emp.id), None)
        if idx is None:
            raise ValidationFailure("Employee not found.")
        rows[idx] = emp.to_dict()
        self.store.save(KEY_EMPLOYEES, rows)

    def delete_employee(self, employee_id: str) -> bool:
        """Salary and attendance history stay on record."""
        rows = self.store.load(KEY_EMPLOYEES, [])
        kept = [r for r in rows if str(r.get("id")) != employee_id]
        if len(kept) == len(rows):
            return False
        self.store.save(KEY_EMPLOYEES, kept)
        return True

    # ---------------------------- payments ----------------------------

    def list_salary_records(self, employee_id: str | None = None) -> List[SalaryRecord]:
        """Newest payment first."""
        recs = [SalaryRecord.from_dict(d) for d in self.store.load(KEY_SALARY_RECORDS, [])]
        if employee_id is not None:
            recs = [r for r in recs if r.employee_id == employee_id]
        return sorted(recs, key=lambda r: r.date, reverse=True)

    def record_payment(
        self,
        employee_id: str,
        *,
        amount: float,
        kind: str = PAYMENT_ADVANCE,
        day: str | None = None,
        note: str = "",
    ) -> SalaryRecord:
        emp = self.get_employee(employee_id)
        if emp is None:
            raise ValidationFailure("Employee not found.")
        if not is_strictly_positive_number(amount):
            raise ValidationFailure("Payment amount must be greater than zero.")
        if kind not in SALARY_PAYMENT_TYPES:
            raise ValidationFailure(f"Unknown payment type: {kind}")
        paid_on = _parse_day(day or today_str())

        rec = SalaryRecord(
            id=new_id(),
            employee_id=emp.id,
            employee_name=emp.name,
            amount=float(amount),
            type=kind,
            for_month=paid_on.strftime("%B"),
            for_year=paid_on.year,
            date=paid_on.isoformat(),
            note=(note or "").strip(),
        )
        rows = self.store.load(KEY_SALARY_RECORDS, [])
        rows.append(rec.to_dict())
        self.store.save(KEY_SALARY_RECORDS, rows)
        return rec

    def balance(self, employee_id: str) -> Dict:
        """
        Returns {'total_advance': float, 'total_salary': float,
                 'last_payment': SalaryRecord | None}
        """
        recs = self.list_salary_records(employee_id)
        return {
            "total_advance": sum(r.amount for r in recs if r.type == PAYMENT_ADVANCE),
            "total_salary": sum(r.amount for r in recs if r.type == PAYMENT_SALARY),
            "last_payment": recs[0] if recs else None,
        }

    # ---------------------------- attendance ----------------------------

    def list_attendance(self) -> List[AttendanceRecord]:
        return [AttendanceRecord.from_dict(d) for d in self.store.load(KEY_ATTENDANCE, [])]

    def mark_attendance(self, employee_id: str, status: str, day: str | None = None) -> AttendanceRecord:
        if status not in ATTENDANCE_STATUSES:
            raise ValidationFailure(f"Unknown attendance status: {status}")
        if self.get_employee(employee_id) is None:
            raise ValidationFailure("Employee not found.")
        day = _parse_day(day or today_str()).isoformat()

        rec = AttendanceRecord(
            id=f"{employee_id}_{day}",
            employee_id=employee_id,
            date=day,
            status=status,
            timestamp=now_str(),
        )
        rows = self.store.load(KEY_ATTENDANCE, [])
        idx = next(
            (i for i, r in enumerate(rows) if r.get("employeeId") == employee_id and r.get("date") == day),
            None,
        )
        if idx is None:
            rows.append(rec.to_dict())
        else:
            rows[idx] = rec.to_dict()
        self.store.save(KEY_ATTENDANCE, rows)
        return rec

    def attendance_status(self, employee_id: str, day: str) -> str | None:
        """Status marked for that day, or None when nothing was marked."""
        rec = next(
            (a for a in self.list_attendance() if a.employee_id == employee_id and a.date == day),
            None,
        )
        return rec.status if rec else None

    def monthly_attendance(self, employee_id: str, year: int, month: int) -> Dict:
        """
        Absent and late counts for one calendar month (unmarked days count
        as present).

        Returns {'absent': int, 'late': int, 'records': [AttendanceRecord]}
        """
        prefix = f"{int(year):04d}-{int(month):02d}"
        recs = [
            a for a in self.list_attendance()
            if a.employee_id == employee_id and a.date.startswith(prefix)
        ]
        return {
            "absent": sum(1 for a in recs if a.status == ATTENDANCE_ABSENT),
            "late": sum(1 for a in recs if a.status == ATTENDANCE_LATE),
            "records": sorted(recs, key=lambda a: a.date),
        }
