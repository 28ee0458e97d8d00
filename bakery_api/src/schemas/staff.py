from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import ORMModel, PartialUpdate


class StaffRead(ORMModel):
    staff_code: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    hire_date: date
    position: str
    department: str
    employment_type: str
    salary: Optional[float] = None
    hourly_rate: Optional[float] = None
    bank_account: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    documents: Optional[List[Any]] = None
    notes: Optional[str] = None
    status: str
    termination_date: Optional[date] = None
    termination_reason: Optional[str] = None


class StaffCreate(BaseModel):
    staff_code: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    hire_date: date
    position: str
    department: str
    employment_type: str = "full_time"
    salary: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    bank_account: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    documents: Optional[List[Any]] = None
    notes: Optional[str] = None
    status: str = "active"


class StaffUpdate(PartialUpdate):
    NOT_NULL = ("staff_code", "first_name", "last_name", "hire_date", "position", "department", "employment_type", "status")

    staff_code: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    hire_date: Optional[date] = None
    position: Optional[str] = None
    department: Optional[str] = None
    employment_type: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    bank_account: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    documents: Optional[List[Any]] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    termination_date: Optional[date] = None
    termination_reason: Optional[str] = None


class AttendanceRead(ORMModel):
    staff_id: int
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    status: str
    notes: Optional[str] = None
    approved_by: Optional[int] = None


class AttendanceCreate(BaseModel):
    staff_id: int
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: str = "present"
    notes: Optional[str] = None


class AttendanceUpdate(PartialUpdate):
    NOT_NULL = ("status",)

    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class ClockRequest(BaseModel):
    staff_id: int
    notes: Optional[str] = None


class SalaryPaymentRead(ORMModel):
    staff_id: int
    pay_period_start: date
    pay_period_end: date
    basic_salary: float
    overtime_pay: float
    bonus: float
    allowances: float
    deductions: float
    tax: float
    net_pay: float
    payment_date: Optional[date] = None
    payment_method: str
    status: str
    notes: Optional[str] = None
    processed_by: Optional[int] = None


class SalaryPaymentCreate(BaseModel):
    """Net pay is derived from the components when omitted."""
    staff_id: int
    pay_period_start: date
    pay_period_end: date
    basic_salary: float = Field(..., ge=0)
    overtime_pay: float = Field(0, ge=0)
    bonus: float = Field(0, ge=0)
    allowances: float = Field(0, ge=0)
    deductions: float = Field(0, ge=0)
    tax: float = Field(0, ge=0)
    net_pay: Optional[float] = None
    payment_date: Optional[date] = None
    payment_method: str = "bank_transfer"
    status: str = "pending"
    notes: Optional[str] = None


class SalaryPaymentUpdate(PartialUpdate):
    NOT_NULL = ("basic_salary", "overtime_pay", "bonus", "allowances", "deductions", "tax", "net_pay", "payment_method", "status")

    basic_salary: Optional[float] = Field(None, ge=0)
    overtime_pay: Optional[float] = Field(None, ge=0)
    bonus: Optional[float] = Field(None, ge=0)
    allowances: Optional[float] = Field(None, ge=0)
    deductions: Optional[float] = Field(None, ge=0)
    tax: Optional[float] = Field(None, ge=0)
    net_pay: Optional[float] = None
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class LeaveRequestRead(ORMModel):
    staff_id: int
    leave_type: str
    start_date: date
    end_date: date
    total_days: int
    reason: Optional[str] = None
    status: str
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None


class LeaveRequestCreate(BaseModel):
    staff_id: int
    leave_type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None


class LeaveRequestUpdate(PartialUpdate):
    """Edit dates or review (approve / reject) a request."""
    NOT_NULL = ("leave_type", "start_date", "end_date", "status")

    leave_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    status: Optional[Literal["pending", "approved", "rejected"]] = None
    review_comments: Optional[str] = None


class StaffScheduleRead(ORMModel):
    staff_id: int
    shift_date: date
    shift_start: time
    shift_end: time
    position: Optional[str] = None
    department: Optional[str] = None
    is_recurring: bool
    recurring_pattern: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None


class StaffScheduleCreate(BaseModel):
    staff_id: int
    shift_date: date
    shift_start: time
    shift_end: time
    position: Optional[str] = None
    department: Optional[str] = None
    is_recurring: bool = False
    recurring_pattern: Optional[Literal["weekly", "biweekly", "monthly"]] = None
    notes: Optional[str] = None


class StaffScheduleUpdate(PartialUpdate):
    NOT_NULL = ("shift_date", "shift_start", "shift_end", "is_recurring")

    shift_date: Optional[date] = None
    shift_start: Optional[time] = None
    shift_end: Optional[time] = None
    position: Optional[str] = None
    department: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[Literal["weekly", "biweekly", "monthly"]] = None
    notes: Optional[str] = None
