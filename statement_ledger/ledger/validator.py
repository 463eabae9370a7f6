"""Validates raw statement JSON (model output or persisted record) into typed records.

This is the ingestion boundary for both the inference service and restored
snapshots: anything that does not look like the statement kind it is claimed
to be is rejected here instead of leaking duck-typed dicts into the store.
"""

from typing import Any

from statement_ledger.ledger.exceptions import StatementValidationError
from statement_ledger.ledger.models import (
    UNKNOWN_INSTITUTION,
    BankStatement,
    CreditCardStatement,
    DocumentKind,
    LineItem,
    StatementPeriod,
    StatementRecord,
)
from statement_ledger.ledger.numbers import parse_lenient_number

_MAX_LINE_ITEMS = 2000

_SHAPE_FIELDS: dict[DocumentKind, tuple[str, ...]] = {
    DocumentKind.CREDIT_CARD: ("transactions", "rewards", "totalAmount"),
    DocumentKind.BANK_STATEMENT: ("withdrawals", "deposits", "endingBalance"),
}


def validate_and_build(data: Any, kind: DocumentKind) -> StatementRecord:
    """Validate raw parsed JSON and build the statement variant for *kind*.

    Raises:
        StatementValidationError: on any shape violation.
    """
    if not isinstance(data, dict):
        raise StatementValidationError("Statement record must be an object")
    _require_shape(data, kind)

    institution = _optional_str(data, "bankName", "institutionName") or UNKNOWN_INSTITUTION
    statement_date = _optional_str(data, "statementDate")
    bill_hash = _optional_str(data, "billHash")

    if kind is DocumentKind.CREDIT_CARD:
        return CreditCardStatement(
            institution_name=institution,
            statement_date=statement_date,
            bill_hash=bill_hash,
            transactions=_build_items(data.get("transactions"), "transactions"),
            rewards=_build_items(data.get("rewards"), "rewards"),
            total_amount=_number_or_zero(data.get("totalAmount"), "totalAmount"),
        )
    return BankStatement(
        institution_name=institution,
        statement_date=statement_date,
        bill_hash=bill_hash,
        withdrawals=_build_items(data.get("withdrawals"), "withdrawals"),
        deposits=_build_items(data.get("deposits"), "deposits"),
        ending_balance=_number_or_zero(data.get("endingBalance"), "endingBalance"),
        account_number=_optional_str(data, "accountNumber"),
        account_name=_optional_str(data, "accountName"),
        statement_period=_build_period(data.get("statementPeriod")),
    )


def record_to_dict(record: StatementRecord) -> dict[str, Any]:
    """Serialize a record back to the wire shape accepted by validate_and_build."""
    payload: dict[str, Any] = {
        "bankName": record.institution_name,
        "billHash": record.bill_hash,
        "statementDate": record.statement_date,
    }
    if isinstance(record, CreditCardStatement):
        payload["totalAmount"] = record.total_amount
        payload["transactions"] = [_item_to_dict(i, foreign=True) for i in record.transactions]
        payload["rewards"] = [_item_to_dict(i) for i in record.rewards]
        return payload
    payload["accountNumber"] = record.account_number
    payload["accountName"] = record.account_name
    if record.statement_period is not None:
        payload["statementPeriod"] = {
            "startDate": record.statement_period.start_date,
            "endDate": record.statement_period.end_date,
        }
    payload["endingBalance"] = record.ending_balance
    payload["withdrawals"] = [_item_to_dict(i) for i in record.withdrawals]
    payload["deposits"] = [_item_to_dict(i) for i in record.deposits]
    return payload


def _require_shape(data: dict[str, Any], kind: DocumentKind) -> None:
    if any(name in data for name in _SHAPE_FIELDS[kind]):
        return
    other = next(k for k in _SHAPE_FIELDS if k is not kind)
    if any(name in data for name in _SHAPE_FIELDS[other]):
        raise StatementValidationError(
            f"Record looks like a {other} statement, expected {kind}"
        )
    raise StatementValidationError(
        f"Record has none of the {kind} fields: {list(_SHAPE_FIELDS[kind])}"
    )


def _optional_str(data: dict[str, Any], *names: str) -> str | None:
    for name in names:
        value = data.get(name)
        if value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if not isinstance(value, str):
            raise StatementValidationError(f"'{name}' must be a string or null")
        if value.strip():
            return value.strip()
    return None


def _number_or_zero(raw: Any, name: str) -> float:
    if raw is None:
        return 0.0
    value = parse_lenient_number(raw)
    if value is None:
        raise StatementValidationError(f"'{name}' must be a number, got {raw!r}")
    return value


def _build_items(raw: Any, array_name: str) -> list[LineItem]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise StatementValidationError(f"'{array_name}' must be a list")
    if len(raw) > _MAX_LINE_ITEMS:
        raise StatementValidationError(
            f"Too many {array_name}: {len(raw)} (max {_MAX_LINE_ITEMS})"
        )
    return [_build_item(item, array_name, i) for i, item in enumerate(raw)]


def _build_item(raw: Any, array_name: str, index: int) -> LineItem:
    if not isinstance(raw, dict):
        raise StatementValidationError(f"{array_name}[{index}] must be an object")
    date = raw.get("date")
    description = raw.get("description")
    category = raw.get("category")
    currency = raw.get("foreignCurrency")
    for name, value in (
        ("date", date),
        ("description", description),
        ("category", category),
        ("foreignCurrency", currency),
    ):
        if value is not None and not isinstance(value, str):
            raise StatementValidationError(
                f"{array_name}[{index}]: '{name}' must be a string or null"
            )
    # null amount means the statement shows no converted local-currency value
    return LineItem(
        date=date or "",
        description=description or "",
        amount=parse_lenient_number(raw.get("amount")),
        category=category,
        foreign_amount=parse_lenient_number(raw.get("foreignAmount")),
        foreign_currency=currency,
    )


def _build_period(raw: Any) -> StatementPeriod | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise StatementValidationError("'statementPeriod' must be an object or null")
    return StatementPeriod(
        start_date=_optional_str(raw, "startDate"),
        end_date=_optional_str(raw, "endDate"),
    )


def _item_to_dict(item: LineItem, foreign: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "date": item.date,
        "description": item.description,
        "amount": item.amount,
    }
    if item.category is not None:
        payload["category"] = item.category
    if foreign:
        payload["foreignAmount"] = item.foreign_amount
        payload["foreignCurrency"] = item.foreign_currency
    return payload
