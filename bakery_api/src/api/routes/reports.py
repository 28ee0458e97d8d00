from __future__ import annotations

import io
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

import pandas as pd
from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.inventory import InventoryItem
from src.db.models.sales import Order
from src.db.models.security import AuditLog
from src.db.models.staff import SalaryPayment, Staff
from src.db.session import get_async_session
from src.services.base import DomainValidationError
from src.services.dashboard import day_bounds
from src.services.ledger import LedgerService

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


def _export_dataframe(
    df: pd.DataFrame,
    filename_base: str,
    export_format: str,
) -> StreamingResponse:
    """
    Convert DataFrame to the requested format and return a StreamingResponse.

    Supported formats:
      - csv: text/csv
      - xlsx: application/vnd.openxmlformats-officedocument.spreadsheetml.sheet
      - pdf: application/pdf (simple tabular rendering)
    """
    export_format = (export_format or "csv").lower()

    if export_format in ("xlsx", "excel"):
        # Excel cannot store timezone-aware datetimes.
        for col in df.columns:
            if isinstance(df[col].dtype, pd.DatetimeTZDtype):
                df[col] = df[col].dt.tz_localize(None)
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        headers = {
            "Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'
        }
        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers=headers,
        )

    if export_format == "pdf":
        # Render a simple table using reportlab
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import letter, landscape
        from reportlab.lib.styles import getSampleStyleSheet
        from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18)
        elements: list = []
        styles = getSampleStyleSheet()
        generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        elements.append(Paragraph(f"{filename_base.replace('_', ' ').title()} ({generated})", styles["Title"]))

        data = [list(df.columns)] + df.astype(str).values.tolist()
        table = Table(data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#8B4513")),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ]
            )
        )
        elements.append(table)
        doc.build(elements)
        buffer.seek(0)
        headers = {
            "Content-Disposition": f'attachment; filename="{filename_base}.pdf"'
        }
        return StreamingResponse(buffer, media_type="application/pdf", headers=headers)

    # Default: CSV
    text = io.StringIO()
    df.to_csv(text, index=False)
    headers = {
        "Content-Disposition": f'attachment; filename="{filename_base}.csv"'
    }
    return StreamingResponse(io.BytesIO(text.getvalue().encode("utf-8")), media_type="text/csv", headers=headers)


async def _fetch_all(session: AsyncSession, stmt: Select) -> Sequence:
    """Execute a select and return list of row tuples."""
    res = await session.execute(stmt)
    return list(res.all())


def _period(start_date: Optional[date], end_date: Optional[date]) -> tuple[date, date]:
    end = end_date or date.today()
    start = start_date or end - timedelta(days=29)
    if end < start:
        raise DomainValidationError("end_date must not be before start_date")
    return start, end


def _num(value) -> Optional[float]:
    return float(value) if value is not None else None


# PUBLIC_INTERFACE
@router.get(
    "/sales",
    summary="Sales report",
    description="Exports orders created in the date range (default: last 30 days), including cancelled ones.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_permission("reports", "read"))],
)
async def sales_report(
    session: AsyncSession = Depends(get_async_session),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[str] = Query(None, description="Filter by order status"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    start, end = _period(start_date, end_date)
    lower, upper = day_bounds(start, end)
    stmt = (
        select(
            Order.order_number,
            Order.created_at,
            Order.customer_name,
            Order.customer_email,
            Order.status,
            Order.source,
            Order.payment_method,
            Order.delivery_date,
            Order.total_amount,
        )
        .where(Order.created_at >= lower, Order.created_at < upper)
        .order_by(Order.created_at)
    )
    if status:
        stmt = stmt.where(Order.status == status)

    rows = await _fetch_all(session, stmt)
    columns = [
        "order_number",
        "created_at",
        "customer_name",
        "customer_email",
        "status",
        "source",
        "payment_method",
        "delivery_date",
        "total_amount",
    ]
    data = [dict(zip(columns, row)) for row in rows]
    for record in data:
        record["total_amount"] = _num(record["total_amount"])
    df = pd.DataFrame(data, columns=columns)
    return _export_dataframe(df, f"sales_{start.isoformat()}_{end.isoformat()}", format)


# PUBLIC_INTERFACE
@router.get(
    "/inventory-valuation",
    summary="Inventory valuation report",
    description="Exports every inventory item with stock on hand valued at its cost per unit.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_permission("reports", "read"))],
)
async def inventory_valuation_report(
    session: AsyncSession = Depends(get_async_session),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    """
    Generate an Inventory Valuation report.

    valuation = current_stock * cost_per_unit; items at or below their
    minimum level are flagged.
    """
    stmt = select(
        InventoryItem.inv_code,
        InventoryItem.name,
        InventoryItem.unit,
        InventoryItem.current_stock,
        InventoryItem.min_level,
        InventoryItem.cost_per_unit,
        InventoryItem.supplier,
        InventoryItem.last_restocked,
    ).order_by(InventoryItem.name)

    rows = await _fetch_all(session, stmt)
    data = []
    for inv_code, name, unit, stock, min_level, cost, supplier, last_restocked in rows:
        qty = float(stock or 0)
        price = float(cost or 0)
        data.append(
            {
                "inv_code": inv_code,
                "name": name,
                "unit": unit,
                "current_stock": qty,
                "min_level": _num(min_level),
                "cost_per_unit": price,
                "valuation": round(qty * price, 2),
                "is_low_stock": stock is not None and min_level is not None and stock <= min_level,
                "supplier": supplier,
                "last_restocked": last_restocked,
            }
        )
    df = pd.DataFrame(data, columns=[
        "inv_code",
        "name",
        "unit",
        "current_stock",
        "min_level",
        "cost_per_unit",
        "valuation",
        "is_low_stock",
        "supplier",
        "last_restocked",
    ])
    return _export_dataframe(df, "inventory_valuation", format)


# PUBLIC_INTERFACE
@router.get(
    "/ledger/{entity_type}/{entity_id}",
    summary="Ledger statement",
    description="Exports a customer or party statement: opening balance row followed by every posting.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_permission("reports", "read"))],
)
async def ledger_statement(
    session: AsyncSession = Depends(get_async_session),
    entity_type: str = Path(..., description="customer or party"),
    entity_id: int = Path(...),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    entity, postings = await LedgerService(session).get_ledger(entity_type, entity_id)
    data = [
        {
            "date": None,
            "description": "Opening balance",
            "reference_number": None,
            "transaction_type": None,
            "debit": None,
            "credit": None,
            "balance": _num(entity.opening_balance),
        }
    ]
    for p in postings:
        data.append(
            {
                "date": p.transaction_date,
                "description": p.description,
                "reference_number": p.reference_number,
                "transaction_type": p.transaction_type,
                "debit": _num(p.debit_amount),
                "credit": _num(p.credit_amount),
                "balance": _num(p.running_balance),
            }
        )
    df = pd.DataFrame(data, columns=[
        "date",
        "description",
        "reference_number",
        "transaction_type",
        "debit",
        "credit",
        "balance",
    ])
    safe_name = "".join(c if c.isalnum() else "_" for c in entity.name).strip("_").lower() or str(entity_id)
    return _export_dataframe(df, f"ledger_{entity_type}_{safe_name}", format)


# PUBLIC_INTERFACE
@router.get(
    "/payroll",
    summary="Payroll report",
    description="Exports salary payments whose pay period ends in the date range.",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_permission("reports", "read"))],
)
async def payroll_report(
    session: AsyncSession = Depends(get_async_session),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    start, end = _period(start_date, end_date)
    stmt = (
        select(
            Staff.staff_code,
            Staff.first_name,
            Staff.last_name,
            Staff.department,
            SalaryPayment.pay_period_start,
            SalaryPayment.pay_period_end,
            SalaryPayment.basic_salary,
            SalaryPayment.overtime_pay,
            SalaryPayment.bonus,
            SalaryPayment.allowances,
            SalaryPayment.deductions,
            SalaryPayment.tax,
            SalaryPayment.net_pay,
            SalaryPayment.status,
            SalaryPayment.payment_date,
        )
        .join(Staff, Staff.id == SalaryPayment.staff_id)
        .where(SalaryPayment.pay_period_end >= start, SalaryPayment.pay_period_end <= end)
        .order_by(SalaryPayment.pay_period_end, Staff.last_name)
    )
    rows = await _fetch_all(session, stmt)
    data = []
    for (
        staff_code,
        first_name,
        last_name,
        department,
        period_start,
        period_end,
        basic,
        overtime,
        bonus,
        allowances,
        deductions,
        tax,
        net_pay,
        pay_status,
        payment_date,
    ) in rows:
        data.append(
            {
                "staff_code": staff_code,
                "name": f"{first_name} {last_name}",
                "department": department,
                "pay_period_start": period_start,
                "pay_period_end": period_end,
                "basic_salary": _num(basic),
                "overtime_pay": _num(overtime),
                "bonus": _num(bonus),
                "allowances": _num(allowances),
                "deductions": _num(deductions),
                "tax": _num(tax),
                "net_pay": _num(net_pay),
                "status": pay_status,
                "payment_date": payment_date,
            }
        )
    df = pd.DataFrame(data, columns=[
        "staff_code",
        "name",
        "department",
        "pay_period_start",
        "pay_period_end",
        "basic_salary",
        "overtime_pay",
        "bonus",
        "allowances",
        "deductions",
        "tax",
        "net_pay",
        "status",
        "payment_date",
    ])
    return _export_dataframe(df, f"payroll_{start.isoformat()}_{end.isoformat()}", format)


# PUBLIC_INTERFACE
@router.get(
    "/audit-logs",
    summary="Audit log export",
    response_description="File stream (CSV/XLSX/PDF)",
    dependencies=[Depends(require_permission("admin", "read"))],
)
async def audit_log_report(
    session: AsyncSession = Depends(get_async_session),
    resource: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    stmt = select(
        AuditLog.timestamp,
        AuditLog.user_email,
        AuditLog.action,
        AuditLog.resource,
        AuditLog.resource_id,
        AuditLog.status,
        AuditLog.ip_address,
        AuditLog.correlation_id,
    ).order_by(AuditLog.timestamp.desc())
    if resource:
        stmt = stmt.where(AuditLog.resource == resource)
    if start:
        stmt = stmt.where(AuditLog.timestamp >= start)
    if end:
        stmt = stmt.where(AuditLog.timestamp <= end)

    columns = [
        "timestamp",
        "user_email",
        "action",
        "resource",
        "resource_id",
        "status",
        "ip_address",
        "correlation_id",
    ]
    rows = await _fetch_all(session, stmt)
    df = pd.DataFrame([dict(zip(columns, row)) for row in rows], columns=columns)
    return _export_dataframe(df, "audit_logs", format)
