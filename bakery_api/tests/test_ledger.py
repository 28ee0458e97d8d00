"""Ledger balance replay and the ledger service against a real session."""
from datetime import date
from decimal import Decimal

import pytest

from src.services.accounts import AccountService
from src.services.base import NotFoundError
from src.services.ledger import LedgerService, compute_running_balances


# =============================================================================
# BALANCE REPLAY
# =============================================================================

def test_running_balance_starts_from_opening():
    replay = compute_running_balances("100.00", [(50, 0), (0, 30), (10.10, 0)])

    assert replay.running_balances == [Decimal("150.00"), Decimal("120.00"), Decimal("130.10")]
    assert replay.closing_balance == Decimal("130.10")


def test_empty_history_keeps_opening_balance():
    replay = compute_running_balances(Decimal("42.5"), [])

    assert replay.running_balances == []
    assert replay.closing_balance == Decimal("42.50")


def test_balance_can_go_negative():
    replay = compute_running_balances(0, [(0, "75.25")])

    assert replay.closing_balance == Decimal("-75.25")


# =============================================================================
# SERVICE
# =============================================================================

async def _customer(session, opening="0"):
    return await AccountService(session).create("customer", {"name": "Cafe Luna", "opening_balance": opening})


def _posting(entity_id, day, debit=0, credit=0, type_="sale"):
    return {
        "entity_type": "customer",
        "entity_id": entity_id,
        "transaction_date": day,
        "description": f"{type_} on {day.isoformat()}",
        "debit_amount": debit,
        "credit_amount": credit,
        "transaction_type": type_,
    }


async def test_postings_update_customer_balance(session):
    customer = await _customer(session, "100")
    ledger = LedgerService(session)

    await ledger.create_transaction(_posting(customer.id, date(2024, 3, 1), debit=250))
    await ledger.create_transaction(
        _posting(customer.id, date(2024, 3, 5), credit=200, type_="payment_received")
    )

    entity, postings = await ledger.get_ledger("customer", customer.id)
    assert [float(p.running_balance) for p in postings] == [350.0, 150.0]
    assert float(entity.current_balance) == 150.0


async def test_backdated_posting_replays_history(session):
    customer = await _customer(session)
    ledger = LedgerService(session)

    await ledger.create_transaction(_posting(customer.id, date(2024, 3, 10), debit=100))
    await ledger.create_transaction(_posting(customer.id, date(2024, 3, 1), debit=40))

    _, postings = await ledger.get_ledger("customer", customer.id)
    assert [p.transaction_date for p in postings] == [date(2024, 3, 1), date(2024, 3, 10)]
    assert [float(p.running_balance) for p in postings] == [40.0, 140.0]


async def test_update_and_delete_rebalance(session):
    customer = await _customer(session)
    ledger = LedgerService(session)

    first = await ledger.create_transaction(_posting(customer.id, date(2024, 1, 1), debit=100))
    second = await ledger.create_transaction(_posting(customer.id, date(2024, 1, 2), debit=50))

    await ledger.update_transaction(first.id, {"debit_amount": 60})
    summary = await ledger.summary("customer", customer.id)
    assert float(summary["current_balance"]) == 110.0
    assert summary["transaction_count"] == 2

    await ledger.delete_transaction(second.id)
    summary = await ledger.summary("customer", customer.id)
    assert float(summary["current_balance"]) == 60.0
    assert float(summary["total_debit"]) == 60.0


async def test_opening_balance_change_replays(session):
    customer = await _customer(session, "10")
    ledger = LedgerService(session)
    await ledger.create_transaction(_posting(customer.id, date(2024, 2, 1), debit=5))

    closing = await ledger.set_opening_balance("customer", customer.id, 20)

    assert closing == Decimal("25.00")


async def test_posting_for_missing_entity_is_not_found(session):
    with pytest.raises(NotFoundError):
        await LedgerService(session).create_transaction(_posting(999, date(2024, 1, 1), debit=1))
