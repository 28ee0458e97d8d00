from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.base import utcnow
from src.db.models.security import User
from src.db.models.staff import Attendance, LeaveRequest, SalaryPayment, Staff
from src.repositories.staff import (
    AttendanceRepository,
    LeaveRequestRepository,
    SalaryPaymentRepository,
    StaffRepository,
    StaffScheduleRepository,
)
from src.services.audit import AuditService, snapshot
from src.services.base import (
    BaseService,
    ConflictError,
    DomainValidationError,
    NotFoundError,
    as_utc,
    money,
    to_decimal,
)

logger = logging.getLogger(__name__)

STANDARD_DAY_HOURS = Decimal("8")
HOURS = Decimal("0.01")
LEAVE_STATUSES = ("pending", "approved", "rejected")


# PUBLIC_INTERFACE
def worked_hours(
    clock_in: datetime,
    clock_out: datetime,
    break_start: Optional[datetime] = None,
    break_end: Optional[datetime] = None,
) -> tuple[Decimal, Decimal]:
    """
    Return (total_hours, overtime_hours) for a shift.

    The break is subtracted when both ends are known; hours beyond the
    standard 8-hour day are overtime.
    """
    start, end = as_utc(clock_in), as_utc(clock_out)
    if end < start:
        raise DomainValidationError("Clock-out is before clock-in")
    seconds = (end - start).total_seconds()
    if break_start is not None and break_end is not None:
        seconds -= max((as_utc(break_end) - as_utc(break_start)).total_seconds(), 0)
    total = (Decimal(str(max(seconds, 0))) / Decimal("3600")).quantize(HOURS, rounding=ROUND_HALF_UP)
    overtime = max(total - STANDARD_DAY_HOURS, Decimal("0")).quantize(HOURS)
    return total, overtime


# PUBLIC_INTERFACE
def compute_net_pay(
    basic_salary: Any,
    overtime_pay: Any = 0,
    bonus: Any = 0,
    allowances: Any = 0,
    deductions: Any = 0,
    tax: Any = 0,
) -> Decimal:
    """Net pay = basic + overtime + bonus + allowances - deductions - tax."""
    return money(
        to_decimal(basic_salary)
        + to_decimal(overtime_pay)
        + to_decimal(bonus)
        + to_decimal(allowances)
        - to_decimal(deductions)
        - to_decimal(tax)
    )


# PUBLIC_INTERFACE
def leave_days(start: date, end: date) -> int:
    """Inclusive day count of a leave period."""
    if end < start:
        raise DomainValidationError("end_date must not be before start_date")
    return (end - start).days + 1


class StaffService(BaseService):
    """Employees, attendance, payroll, leave and shift schedules."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.staff_repo = StaffRepository(session)
        self.attendance_repo = AttendanceRepository(session)
        self.salary_repo = SalaryPaymentRepository(session)
        self.leave_repo = LeaveRequestRepository(session)
        self.schedule_repo = StaffScheduleRepository(session)
        self.audit = AuditService(session)

    # Staff
    # PUBLIC_INTERFACE
    async def get_staff(self, staff_id: int) -> Staff:
        staff = await self.staff_repo.get(staff_id)
        if staff is None:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return staff

    # PUBLIC_INTERFACE
    async def create_staff(self, values: dict[str, Any], *, user: Optional[User] = None) -> Staff:
        if await self.staff_repo.get_by_code(values["staff_code"]) is not None:
            raise ConflictError(f"Staff code '{values['staff_code']}' already exists")
        staff = await self.staff_repo.create(values, commit=False)
        await self.audit.record(
            user=user, action="CREATE", resource="staff", resource_id=staff.id, new_values=snapshot(staff)
        )
        await self.session.commit()
        return await self.get_staff(staff.id)

    # PUBLIC_INTERFACE
    async def update_staff(self, staff_id: int, values: dict[str, Any], *, user: Optional[User] = None) -> Staff:
        staff = await self.get_staff(staff_id)
        code = values.get("staff_code")
        if code and code != staff.staff_code and await self.staff_repo.get_by_code(code) is not None:
            raise ConflictError(f"Staff code '{code}' already exists")
        old = snapshot(staff)
        await self.staff_repo.update(staff, values, commit=False)
        await self.audit.record(
            user=user,
            action="UPDATE",
            resource="staff",
            resource_id=staff_id,
            old_values=old,
            new_values=snapshot(staff),
        )
        await self.session.commit()
        return await self.get_staff(staff_id)

    # PUBLIC_INTERFACE
    async def delete_staff(self, staff_id: int, *, user: Optional[User] = None) -> None:
        staff = await self.get_staff(staff_id)
        old = snapshot(staff)
        await self.staff_repo.delete(staff, commit=False)
        await self.audit.record(user=user, action="DELETE", resource="staff", resource_id=staff_id, old_values=old)
        await self.session.commit()

    # Attendance
    # PUBLIC_INTERFACE
    async def get_attendance(self, attendance_id: int) -> Attendance:
        record = await self.attendance_repo.get(attendance_id)
        if record is None:
            raise NotFoundError(f"Attendance record {attendance_id} not found")
        return record

    # PUBLIC_INTERFACE
    async def save_attendance(
        self, values: dict[str, Any], attendance_id: Optional[int] = None, *, user: Optional[User] = None
    ) -> Attendance:
        """Create or edit an attendance record; hours are derived when both clock times are set."""
        if attendance_id is None:
            await self.get_staff(values["staff_id"])
            record = None
            merged = dict(values)
        else:
            record = await self.get_attendance(attendance_id)
            merged = {
                "clock_in": record.clock_in,
                "clock_out": record.clock_out,
                "break_start": record.break_start,
                "break_end": record.break_end,
                **values,
            }
        data = dict(values)
        if merged.get("clock_in") and merged.get("clock_out"):
            data["total_hours"], data["overtime_hours"] = worked_hours(
                merged["clock_in"], merged["clock_out"], merged.get("break_start"), merged.get("break_end")
            )
        if user is not None and "approved_by" not in data and record is not None:
            data["approved_by"] = user.id
        try:
            if record is None:
                record = await self.attendance_repo.create(data, commit=False)
            else:
                await self.attendance_repo.update(record, data, commit=False)
            record_id = record.id
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("An attendance record already exists for this staff member and day")
        return await self.get_attendance(record_id)

    # PUBLIC_INTERFACE
    async def clock_in(self, staff_id: int, *, at: Optional[datetime] = None, notes: Optional[str] = None) -> Attendance:
        """Open today's attendance record; only one clock-in per day."""
        await self.get_staff(staff_id)
        now = at or utcnow()
        existing = await self.attendance_repo.get_for_day(staff_id, now.date())
        if existing is not None and existing.clock_in is not None:
            raise ConflictError("Staff member already clocked in today")
        if existing is not None:
            return await self.attendance_repo.update(existing, {"clock_in": now, "status": "present"})
        return await self.attendance_repo.create(
            {"staff_id": staff_id, "work_date": now.date(), "clock_in": now, "status": "present", "notes": notes}
        )

    # PUBLIC_INTERFACE
    async def clock_out(self, staff_id: int, *, at: Optional[datetime] = None) -> Attendance:
        """Close today's attendance record and compute hours and overtime."""
        now = at or utcnow()
        record = await self.attendance_repo.get_for_day(staff_id, now.date())
        if record is None or record.clock_in is None:
            raise DomainValidationError("Staff member has not clocked in today")
        if record.clock_out is not None:
            raise ConflictError("Staff member already clocked out today")
        total, overtime = worked_hours(record.clock_in, now, record.break_start, record.break_end)
        return await self.attendance_repo.update(
            record, {"clock_out": now, "total_hours": total, "overtime_hours": overtime}
        )

    # Payroll
    # PUBLIC_INTERFACE
    async def create_salary_payment(self, values: dict[str, Any], *, user: Optional[User] = None) -> SalaryPayment:
        """Record a salary payment; net pay is derived when not supplied."""
        await self.get_staff(values["staff_id"])
        data = dict(values)
        if data["pay_period_end"] < data["pay_period_start"]:
            raise DomainValidationError("pay_period_end must not be before pay_period_start")
        if data.get("net_pay") is None:
            data["net_pay"] = compute_net_pay(
                data["basic_salary"],
                data.get("overtime_pay"),
                data.get("bonus"),
                data.get("allowances"),
                data.get("deductions"),
                data.get("tax"),
            )
        data["processed_by"] = user.id if user else None
        payment = await self.salary_repo.create(data, commit=False)
        await self.audit.record(
            user=user, action="CREATE", resource="salary_payments", resource_id=payment.id, new_values=snapshot(payment)
        )
        await self.session.commit()
        return (await self.salary_repo.get(payment.id))  # type: ignore[return-value]

    # PUBLIC_INTERFACE
    async def update_salary_payment(self, payment_id: int, values: dict[str, Any]) -> SalaryPayment:
        payment = await self.salary_repo.get(payment_id)
        if payment is None:
            raise NotFoundError(f"Salary payment {payment_id} not found")
        data = dict(values)
        money_fields = ("basic_salary", "overtime_pay", "bonus", "allowances", "deductions", "tax")
        if "net_pay" not in data and any(f in data for f in money_fields):
            current = {f: getattr(payment, f) for f in money_fields}
            current.update({f: data[f] for f in money_fields if f in data})
            data["net_pay"] = compute_net_pay(**current)
        return await self.salary_repo.update(payment, data)

    # Leave
    # PUBLIC_INTERFACE
    async def create_leave_request(self, values: dict[str, Any]) -> LeaveRequest:
        await self.get_staff(values["staff_id"])
        data = dict(values)
        data["total_days"] = leave_days(data["start_date"], data["end_date"])
        data["status"] = "pending"
        return await self.leave_repo.create(data)

    # PUBLIC_INTERFACE
    async def update_leave_request(
        self, leave_id: int, values: dict[str, Any], *, user: Optional[User] = None
    ) -> LeaveRequest:
        """Edit or review a leave request; a status change records the reviewer."""
        leave = await self.leave_repo.get(leave_id)
        if leave is None:
            raise NotFoundError(f"Leave request {leave_id} not found")
        data = dict(values)
        if "status" in data:
            if data["status"] not in LEAVE_STATUSES:
                raise DomainValidationError(f"Invalid leave status '{data['status']}'")
            if data["status"] != leave.status:
                data["reviewed_by"] = user.id if user else None
                data["reviewed_at"] = utcnow()
        start = data.get("start_date", leave.start_date)
        end = data.get("end_date", leave.end_date)
        if "start_date" in data or "end_date" in data:
            data["total_days"] = leave_days(start, end)
        return await self.leave_repo.update(leave, data)

    # Schedules
    # PUBLIC_INTERFACE
    async def create_schedule(self, values: dict[str, Any], *, user: Optional[User] = None):
        await self.get_staff(values["staff_id"])
        if values["shift_end"] <= values["shift_start"]:
            raise DomainValidationError("shift_end must be after shift_start")
        return await self.schedule_repo.create({**values, "created_by": user.id if user else None})

    # PUBLIC_INTERFACE
    async def update_schedule(self, schedule_id: int, values: dict[str, Any]):
        schedule = await self.schedule_repo.get(schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        start = values.get("shift_start", schedule.shift_start)
        end = values.get("shift_end", schedule.shift_end)
        if end <= start:
            raise DomainValidationError("shift_end must be after shift_start")
        return await self.schedule_repo.update(schedule, values)
