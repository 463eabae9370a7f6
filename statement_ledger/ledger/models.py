from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import ClassVar, NamedTuple

from statement_ledger.ledger.exceptions import InvalidTransitionError


class DocumentKind(StrEnum):
    """Kind of statement a session handles; the value is the snapshot section key."""

    CREDIT_CARD = "creditCard"
    BANK_STATEMENT = "bankStatement"


class EntryStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


ALLOWED_TRANSITIONS: dict[EntryStatus, frozenset[EntryStatus]] = {
    EntryStatus.PENDING: frozenset({EntryStatus.PROCESSING}),
    EntryStatus.PROCESSING: frozenset({EntryStatus.SUCCESS, EntryStatus.ERROR}),
    EntryStatus.SUCCESS: frozenset({EntryStatus.ERROR}),
    EntryStatus.ERROR: frozenset({EntryStatus.PENDING}),
}

OTHER_CATEGORY = "other"

SPENDING_CATEGORIES: tuple[str, ...] = (
    "dining",
    "transportation",
    "shopping",
    "household",
    "entertainment",
    "healthcare",
    "bills",
    OTHER_CATEGORY,
)

WITHDRAWAL_CATEGORIES: tuple[str, ...] = (
    *SPENDING_CATEGORIES[:-1],
    "cash_withdrawal",
    "transfer_out",
    OTHER_CATEGORY,
)

DEPOSIT_CATEGORIES: tuple[str, ...] = (
    "salary",
    "transfer_in",
    "cash_deposit",
    "interest",
    "investment_income",
    OTHER_CATEGORY,
)

UNKNOWN_INSTITUTION = "Unknown institution"
MANUAL_DESCRIPTION = "Manual entry"
UNKNOWN_PERIOD = "unknown"
# id and billHash prefix of entries that hold hand-entered line items only
MANUAL_ID_PREFIX = "manual-"


@dataclass
class LineItem:
    """One transaction row of a statement; mutable because users edit it in place."""

    date: str = ""
    description: str = ""
    amount: float | None = 0.0
    category: str | None = None
    foreign_amount: float | None = None
    foreign_currency: str | None = None


@dataclass
class StatementPeriod:
    start_date: str | None = None
    end_date: str | None = None


@dataclass
class CreditCardStatement:
    """Credit-card statement: purchases, rewards/rebates and the amount due."""

    kind: ClassVar[DocumentKind] = DocumentKind.CREDIT_CARD
    line_item_arrays: ClassVar[tuple[str, ...]] = ("transactions", "rewards")

    institution_name: str = UNKNOWN_INSTITUTION
    statement_date: str | None = None
    bill_hash: str | None = None
    transactions: list[LineItem] = field(default_factory=list)
    rewards: list[LineItem] = field(default_factory=list)
    total_amount: float = 0.0


@dataclass
class BankStatement:
    """Bank-account statement: withdrawals, deposits and the closing balance."""

    kind: ClassVar[DocumentKind] = DocumentKind.BANK_STATEMENT
    line_item_arrays: ClassVar[tuple[str, ...]] = ("withdrawals", "deposits")

    institution_name: str = UNKNOWN_INSTITUTION
    statement_date: str | None = None
    bill_hash: str | None = None
    withdrawals: list[LineItem] = field(default_factory=list)
    deposits: list[LineItem] = field(default_factory=list)
    ending_balance: float = 0.0
    account_number: str | None = None
    account_name: str | None = None
    statement_period: StatementPeriod | None = None

    @property
    def is_manual(self) -> bool:
        """True for the holder of hand-entered rows; its balance is not a real one."""
        return bool(self.bill_hash and self.bill_hash.startswith(MANUAL_ID_PREFIX))


StatementRecord = CreditCardStatement | BankStatement

RECORD_TYPES: dict[DocumentKind, type[CreditCardStatement] | type[BankStatement]] = {
    DocumentKind.CREDIT_CARD: CreditCardStatement,
    DocumentKind.BANK_STATEMENT: BankStatement,
}


def line_item_arrays(kind: DocumentKind) -> tuple[str, ...]:
    return RECORD_TYPES[kind].line_item_arrays


class LineItemKey(NamedTuple):
    """Address of one line item: owning entry, array name, position in that array."""

    entry_id: str
    array_name: str
    position: int


@dataclass(frozen=True)
class DocumentSource:
    """Raw document handle: in-memory bytes or a path read lazily by FileLoader."""

    name: str
    path: Path | None = None
    data: bytes | None = None


@dataclass
class DocumentEntry:
    """One uploaded (or restored, or synthetic) document tracked by the store."""

    id: str
    source: DocumentSource
    status: EntryStatus = EntryStatus.PENDING
    fingerprint: str | None = None
    result: StatementRecord | None = None
    is_from_persisted_snapshot: bool = False
    error_message: str = ""

    @property
    def display_name(self) -> str:
        return self.source.name

    def transition(self, status: EntryStatus) -> None:
        """Move to *status*, enforcing the pending/processing/success/error machine."""
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Entry {self.id}: cannot move from {self.status} to {status}"
            )
        self.status = status
