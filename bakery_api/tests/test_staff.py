"""Attendance hours, payroll and leave."""
from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from src.services.base import ConflictError, DomainValidationError
from src.services.staff import StaffService, compute_net_pay, leave_days, worked_hours

UTC = timezone.utc


def _at(hour, minute=0, day=1):
    return datetime(2024, 5, day, hour, minute, tzinfo=UTC)


def test_worked_hours_with_break_and_overtime():
    total, overtime = worked_hours(_at(7), _at(17, 30), _at(12), _at(12, 30))

    assert total == Decimal("10.00")
    assert overtime == Decimal("2.00")


def test_worked_hours_without_overtime():
    total, overtime = worked_hours(_at(9), _at(13, 15))

    assert total == Decimal("4.25")
    assert overtime == Decimal("0.00")


def test_worked_hours_accepts_naive_values_as_utc():
    total, _ = worked_hours(datetime(2024, 5, 1, 9), _at(10))

    assert total == Decimal("1.00")


def test_clock_out_before_clock_in_is_rejected():
    with pytest.raises(DomainValidationError):
        worked_hours(_at(10), _at(9))


def test_net_pay():
    assert compute_net_pay(3000, 150, 200, 100, 50, "420.50") == Decimal("2979.50")
    assert compute_net_pay("1800") == Decimal("1800.00")


def test_leave_days_inclusive():
    assert leave_days(date(2024, 6, 3), date(2024, 6, 7)) == 5
    assert leave_days(date(2024, 6, 3), date(2024, 6, 3)) == 1
    with pytest.raises(DomainValidationError):
        leave_days(date(2024, 6, 7), date(2024, 6, 3))


# =============================================================================
# SERVICE
# =============================================================================

async def _employee(session, code="EMP-001"):
    return await StaffService(session).create_staff(
        {
            "staff_code": code,
            "first_name": "Maria",
            "last_name": "Lopez",
            "hire_date": date(2023, 1, 9),
            "position": "Baker",
            "department": "Production",
            "hourly_rate": Decimal("15.00"),
        }
    )


async def test_duplicate_staff_code_conflicts(session):
    await _employee(session)

    with pytest.raises(ConflictError):
        await _employee(session)


async def test_clock_in_and_out_computes_hours(session):
    service = StaffService(session)
    employee = await _employee(session)

    await service.clock_in(employee.id, at=_at(6))
    with pytest.raises(ConflictError):
        await service.clock_in(employee.id, at=_at(7))

    record = await service.clock_out(employee.id, at=_at(15, 30))

    assert record.work_date == date(2024, 5, 1)
    assert float(record.total_hours) == 9.5
    assert float(record.overtime_hours) == 1.5


async def test_clock_out_without_clock_in(session):
    employee = await _employee(session)

    with pytest.raises(DomainValidationError):
        await StaffService(session).clock_out(employee.id, at=_at(15))


async def test_salary_payment_derives_net_pay(session, users):
    employee = await _employee(session)

    payment = await StaffService(session).create_salary_payment(
        {
            "staff_id": employee.id,
            "pay_period_start": date(2024, 5, 1),
            "pay_period_end": date(2024, 5, 31),
            "basic_salary": Decimal("2500"),
            "bonus": Decimal("100"),
            "tax": Decimal("300"),
        },
        user=users["manager"],
    )

    assert float(payment.net_pay) == 2300.0
    assert payment.processed_by == users["manager"].id


async def test_leave_review_records_reviewer(session, users):
    service = StaffService(session)
    employee = await _employee(session)
    leave = await service.create_leave_request(
        {
            "staff_id": employee.id,
            "leave_type": "vacation",
            "start_date": date(2024, 7, 1),
            "end_date": date(2024, 7, 5),
        }
    )
    assert leave.total_days == 5
    assert leave.status == "pending"

    reviewed = await service.update_leave_request(leave.id, {"status": "approved"}, user=users["admin"])

    assert reviewed.status == "approved"
    assert reviewed.reviewed_by == users["admin"].id
    assert reviewed.reviewed_at is not None


async def test_schedule_end_must_follow_start(session):
    employee = await _employee(session)

    with pytest.raises(DomainValidationError):
        await StaffService(session).create_schedule(
            {"staff_id": employee.id, "shift_date": date(2024, 5, 2), "shift_start": time(14), "shift_end": time(9)}
        )
