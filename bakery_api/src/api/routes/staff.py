from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.staff import (
    AttendanceRepository,
    LeaveRequestRepository,
    SalaryPaymentRepository,
    StaffRepository,
    StaffScheduleRepository,
)
from src.schemas.staff import (
    AttendanceCreate,
    AttendanceRead,
    AttendanceUpdate,
    ClockRequest,
    LeaveRequestCreate,
    LeaveRequestRead,
    LeaveRequestUpdate,
    SalaryPaymentCreate,
    SalaryPaymentRead,
    SalaryPaymentUpdate,
    StaffCreate,
    StaffRead,
    StaffScheduleCreate,
    StaffScheduleRead,
    StaffScheduleUpdate,
    StaffUpdate,
)
from src.services.staff import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])

read_staff = require_permission("staff", "read")
write_staff = require_permission("staff", "write")


async def _delete_or_404(repo, entity_id: int, label: str) -> None:
    entity = await repo.get(entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    await repo.delete(entity)


# Attendance

# PUBLIC_INTERFACE
@router.get(
    "/attendance",
    response_model=List[AttendanceRead],
    summary="List attendance",
    dependencies=[Depends(read_staff)],
)
async def list_attendance(
    session: AsyncSession = Depends(get_async_session),
    staff_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[AttendanceRead]:
    items = await AttendanceRepository(session).list_attendance(
        staff_id=staff_id, start=start_date, end=end_date, limit=limit, offset=offset
    )
    return [AttendanceRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/attendance",
    response_model=AttendanceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record attendance",
    description="Hours and overtime are computed when both clock times are given.",
)
async def create_attendance(
    payload: AttendanceCreate,
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> AttendanceRead:
    return AttendanceRead.model_validate(await StaffService(session).save_attendance(payload.model_dump(), user=user))


# PUBLIC_INTERFACE
@router.post("/attendance/clock-in", response_model=AttendanceRead, summary="Clock in")
async def clock_in(
    payload: ClockRequest,
    _: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> AttendanceRead:
    return AttendanceRead.model_validate(await StaffService(session).clock_in(payload.staff_id, notes=payload.notes))


# PUBLIC_INTERFACE
@router.post("/attendance/clock-out", response_model=AttendanceRead, summary="Clock out")
async def clock_out(
    payload: ClockRequest,
    _: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> AttendanceRead:
    return AttendanceRead.model_validate(await StaffService(session).clock_out(payload.staff_id))


# PUBLIC_INTERFACE
@router.put("/attendance/{attendance_id}", response_model=AttendanceRead, summary="Update attendance")
async def update_attendance(
    payload: AttendanceUpdate,
    attendance_id: int = Path(...),
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> AttendanceRead:
    record = await StaffService(session).save_attendance(
        payload.model_dump(exclude_unset=True), attendance_id, user=user
    )
    return AttendanceRead.model_validate(record)


# PUBLIC_INTERFACE
@router.delete(
    "/attendance/{attendance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete attendance",
    dependencies=[Depends(write_staff)],
)
async def delete_attendance(attendance_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _delete_or_404(AttendanceRepository(session), attendance_id, "Attendance record")


# Payroll

# PUBLIC_INTERFACE
@router.get(
    "/salaries",
    response_model=List[SalaryPaymentRead],
    summary="List salary payments",
    dependencies=[Depends(read_staff)],
)
async def list_salaries(
    session: AsyncSession = Depends(get_async_session),
    staff_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[SalaryPaymentRead]:
    repo = SalaryPaymentRepository(session)
    filters = [repo.model.staff_id == staff_id] if staff_id is not None else []
    items = await repo.list(limit=limit, offset=offset, filters=filters)
    return [SalaryPaymentRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/salaries",
    response_model=SalaryPaymentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record salary payment",
    description="Net pay defaults to basic + overtime + bonus + allowances - deductions - tax.",
)
async def create_salary(
    payload: SalaryPaymentCreate,
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> SalaryPaymentRead:
    payment = await StaffService(session).create_salary_payment(payload.model_dump(), user=user)
    return SalaryPaymentRead.model_validate(payment)


# PUBLIC_INTERFACE
@router.put(
    "/salaries/{payment_id}",
    response_model=SalaryPaymentRead,
    summary="Update salary payment",
    dependencies=[Depends(write_staff)],
)
async def update_salary(
    payload: SalaryPaymentUpdate,
    payment_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> SalaryPaymentRead:
    payment = await StaffService(session).update_salary_payment(payment_id, payload.model_dump(exclude_unset=True))
    return SalaryPaymentRead.model_validate(payment)


# PUBLIC_INTERFACE
@router.delete(
    "/salaries/{payment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete salary payment",
    dependencies=[Depends(write_staff)],
)
async def delete_salary(payment_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _delete_or_404(SalaryPaymentRepository(session), payment_id, "Salary payment")


# Leave

# PUBLIC_INTERFACE
@router.get(
    "/leave-requests",
    response_model=List[LeaveRequestRead],
    summary="List leave requests",
    dependencies=[Depends(read_staff)],
)
async def list_leave_requests(
    session: AsyncSession = Depends(get_async_session),
    staff_id: Optional[int] = Query(None),
    status_: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[LeaveRequestRead]:
    repo = LeaveRequestRepository(session)
    filters = []
    if staff_id is not None:
        filters.append(repo.model.staff_id == staff_id)
    if status_:
        filters.append(repo.model.status == status_)
    items = await repo.list(limit=limit, offset=offset, filters=filters)
    return [LeaveRequestRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/leave-requests",
    response_model=LeaveRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit leave request",
    dependencies=[Depends(write_staff)],
)
async def create_leave_request(
    payload: LeaveRequestCreate, session: AsyncSession = Depends(get_async_session)
) -> LeaveRequestRead:
    return LeaveRequestRead.model_validate(await StaffService(session).create_leave_request(payload.model_dump()))


# PUBLIC_INTERFACE
@router.put(
    "/leave-requests/{leave_id}",
    response_model=LeaveRequestRead,
    summary="Update or review leave request",
    description="Setting status to approved or rejected records the reviewer and review time.",
)
async def update_leave_request(
    payload: LeaveRequestUpdate,
    leave_id: int = Path(...),
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> LeaveRequestRead:
    leave = await StaffService(session).update_leave_request(
        leave_id, payload.model_dump(exclude_unset=True), user=user
    )
    return LeaveRequestRead.model_validate(leave)


# PUBLIC_INTERFACE
@router.delete(
    "/leave-requests/{leave_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete leave request",
    dependencies=[Depends(write_staff)],
)
async def delete_leave_request(leave_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _delete_or_404(LeaveRequestRepository(session), leave_id, "Leave request")


# Shift schedules

# PUBLIC_INTERFACE
@router.get(
    "/schedules",
    response_model=List[StaffScheduleRead],
    summary="List shift schedules",
    dependencies=[Depends(read_staff)],
)
async def list_schedules(
    session: AsyncSession = Depends(get_async_session),
    staff_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[StaffScheduleRead]:
    repo = StaffScheduleRepository(session)
    filters = []
    if staff_id is not None:
        filters.append(repo.model.staff_id == staff_id)
    if start_date:
        filters.append(repo.model.shift_date >= start_date)
    if end_date:
        filters.append(repo.model.shift_date <= end_date)
    items = await repo.list(limit=limit, offset=offset, filters=filters)
    return [StaffScheduleRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/schedules",
    response_model=StaffScheduleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create shift",
)
async def create_schedule(
    payload: StaffScheduleCreate,
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> StaffScheduleRead:
    return StaffScheduleRead.model_validate(await StaffService(session).create_schedule(payload.model_dump(), user=user))


# PUBLIC_INTERFACE
@router.put(
    "/schedules/{schedule_id}",
    response_model=StaffScheduleRead,
    summary="Update shift",
    dependencies=[Depends(write_staff)],
)
async def update_schedule(
    payload: StaffScheduleUpdate,
    schedule_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> StaffScheduleRead:
    updated = await StaffService(session).update_schedule(schedule_id, payload.model_dump(exclude_unset=True))
    return StaffScheduleRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/schedules/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete shift",
    dependencies=[Depends(write_staff)],
)
async def delete_schedule(schedule_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _delete_or_404(StaffScheduleRepository(session), schedule_id, "Schedule")


# Employees (declared last so the literal sub-paths above match first)

# PUBLIC_INTERFACE
@router.get("", response_model=List[StaffRead], summary="List staff", dependencies=[Depends(read_staff)])
async def list_staff(
    session: AsyncSession = Depends(get_async_session),
    status_: Optional[str] = Query(None, alias="status"),
    department: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[StaffRead]:
    items = await StaffRepository(session).list_staff(
        status=status_, department=department, limit=limit, offset=offset
    )
    return [StaffRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post("", response_model=StaffRead, status_code=status.HTTP_201_CREATED, summary="Create staff member")
async def create_staff(
    payload: StaffCreate,
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> StaffRead:
    return StaffRead.model_validate(await StaffService(session).create_staff(payload.model_dump(), user=user))


# PUBLIC_INTERFACE
@router.get("/{staff_id}", response_model=StaffRead, summary="Get staff member", dependencies=[Depends(read_staff)])
async def get_staff(staff_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> StaffRead:
    return StaffRead.model_validate(await StaffService(session).get_staff(staff_id))


# PUBLIC_INTERFACE
@router.put("/{staff_id}", response_model=StaffRead, summary="Update staff member")
async def update_staff(
    payload: StaffUpdate,
    staff_id: int = Path(...),
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> StaffRead:
    updated = await StaffService(session).update_staff(staff_id, payload.model_dump(exclude_unset=True), user=user)
    return StaffRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete staff member")
async def delete_staff(
    staff_id: int = Path(...),
    user: User = Depends(write_staff),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await StaffService(session).delete_staff(staff_id, user=user)
