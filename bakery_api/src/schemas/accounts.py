from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import ORMModel, PartialUpdate


class CustomerRead(ORMModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    opening_balance: float
    current_balance: float
    total_orders: int
    total_spent: float
    is_active: bool


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    opening_balance: float = 0
    is_active: bool = True


class CustomerUpdate(PartialUpdate):
    """Changing the opening balance replays the customer's ledger."""
    NOT_NULL = ("name", "opening_balance", "is_active")

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    opening_balance: Optional[float] = None
    is_active: Optional[bool] = None


PartyType = Literal["supplier", "creditor", "both"]


class PartyRead(ORMModel):
    name: str
    type: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    opening_balance: float
    current_balance: float
    is_active: bool


class PartyCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: PartyType = "supplier"
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    opening_balance: float = 0
    is_active: bool = True


class PartyUpdate(PartialUpdate):
    NOT_NULL = ("name", "type", "opening_balance", "is_active")

    name: Optional[str] = Field(None, min_length=1)
    type: Optional[PartyType] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None
    opening_balance: Optional[float] = None
    is_active: Optional[bool] = None


TransactionType = Literal["sale", "purchase", "payment_received", "payment_sent", "adjustment"]


class LedgerTransactionRead(ORMModel):
    """Posting with the balance after it."""
    entity_type: str
    entity_id: int
    transaction_date: date
    description: str
    reference_number: Optional[str] = None
    debit_amount: float
    credit_amount: float
    running_balance: float
    transaction_type: str
    related_order_id: Optional[int] = None
    related_purchase_id: Optional[int] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None


class LedgerTransactionCreate(BaseModel):
    entity_type: str = Field(..., description="customer or party")
    entity_id: int
    transaction_date: date
    description: str = Field(..., min_length=1)
    reference_number: Optional[str] = None
    debit_amount: float = Field(0, ge=0)
    credit_amount: float = Field(0, ge=0)
    transaction_type: TransactionType
    related_order_id: Optional[int] = None
    related_purchase_id: Optional[int] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class LedgerTransactionUpdate(PartialUpdate):
    NOT_NULL = ("transaction_date", "description", "debit_amount", "credit_amount", "transaction_type")

    transaction_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1)
    reference_number: Optional[str] = None
    debit_amount: Optional[float] = Field(None, ge=0)
    credit_amount: Optional[float] = Field(None, ge=0)
    transaction_type: Optional[TransactionType] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class LedgerView(BaseModel):
    """An account with its full posting history."""
    entity_type: str
    entity_id: int
    name: str
    opening_balance: float
    current_balance: float
    transactions: List[LedgerTransactionRead] = Field(default_factory=list)


class LedgerSummary(BaseModel):
    entity_type: str
    entity_id: int
    name: str
    opening_balance: float
    total_debit: float
    total_credit: float
    current_balance: float
    transaction_count: int
