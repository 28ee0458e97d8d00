from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select

from src.db.models.staff import Attendance, LeaveRequest, SalaryPayment, Staff, StaffSchedule
from .base import CrudRepository


class StaffRepository(CrudRepository[Staff]):
    """Repository for employees."""

    model = Staff
    default_order = Staff.last_name

    async def get_by_code(self, staff_code: str) -> Optional[Staff]:
        stmt = select(Staff).where(Staff.staff_code == staff_code)
        return await self.scalar_one_or_none(stmt)

    async def list_staff(
        self, *, status: Optional[str] = None, department: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[Staff]:
        filters = []
        if status:
            filters.append(Staff.status == status)
        if department:
            filters.append(Staff.department == department)
        return await self.list(limit=limit, offset=offset, filters=filters)


class AttendanceRepository(CrudRepository[Attendance]):
    """Repository for attendance records."""

    model = Attendance
    default_order = Attendance.work_date.desc()

    async def get_for_day(self, staff_id: int, work_date: date) -> Optional[Attendance]:
        stmt = select(Attendance).where(Attendance.staff_id == staff_id, Attendance.work_date == work_date)
        return await self.scalar_one_or_none(stmt)

    async def list_attendance(
        self,
        *,
        staff_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Attendance]:
        filters = []
        if staff_id is not None:
            filters.append(Attendance.staff_id == staff_id)
        if start:
            filters.append(Attendance.work_date >= start)
        if end:
            filters.append(Attendance.work_date <= end)
        return await self.list(limit=limit, offset=offset, filters=filters)


class SalaryPaymentRepository(CrudRepository[SalaryPayment]):
    """Repository for payroll payments."""

    model = SalaryPayment
    default_order = SalaryPayment.pay_period_end.desc()


class LeaveRequestRepository(CrudRepository[LeaveRequest]):
    """Repository for leave requests."""

    model = LeaveRequest
    default_order = LeaveRequest.start_date.desc()


class StaffScheduleRepository(CrudRepository[StaffSchedule]):
    """Repository for staff shifts."""

    model = StaffSchedule
    default_order = StaffSchedule.shift_date
