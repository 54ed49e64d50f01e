"""Bulk transaction import from CSV or JSON files."""

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from bankledger.database.base import Database
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_admin
from bankledger.domain.entities import TRANSACTION_TYPES, DEPOSIT
from bankledger.domain.errors import DomainError, ValidationError, account_not_found, invalid_choice
from bankledger.domain.ledger import LedgerService
from bankledger.domain.notifications import NotificationEmitter
from bankledger.utils.amount_parser import positive_amount
from bankledger.utils.date_parser import parse_datetime

logger = logging.getLogger(__name__)

TEMPLATE_CSV = "\n".join(
    [
        "account_id,amount,description,transaction_type,created_at",
        "1,100.00,Initial deposit,deposit,2024-01-15",
        ",50.00,ATM withdrawal,withdrawal,2024-01-16",
        ",250.00,Transfer from savings,transfer,2024-01-17",
    ]
) + "\n"

# Accepted spellings of each column, first match wins
COLUMN_ALIASES = {
    "account_id": ("account_id", "accountid"),
    "amount": ("amount",),
    "description": ("description", "desc"),
    "transaction_type": ("transaction_type", "type"),
    "created_at": ("created_at", "date"),
}


@dataclass(frozen=True)
class ImportRow:
    """One unvalidated row from an upload. Values are kept as text."""

    row_number: int
    account_id: Optional[str]
    amount: Optional[str]
    description: Optional[str]
    transaction_type: str
    created_at: Optional[str]


@dataclass(frozen=True)
class RowError:
    """A problem with one uploaded row."""

    row_number: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_number} ({self.field}): {self.message}"


@dataclass
class ImportResult:
    """Outcome of an import run."""

    processed: int = 0
    errors: list[RowError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        text = f"Processed {self.processed} transactions successfully"
        if self.errors:
            text += f", {len(self.errors)} failed"
        return text


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _row_from_mapping(row_number: int, record: dict[str, Any], default_account_id: Optional[int]) -> ImportRow:
    record = {str(k).strip().lower(): v for k, v in record.items() if k is not None}

    def pick(column: str) -> Optional[str]:
        for alias in COLUMN_ALIASES[column]:
            value = _text(record.get(alias))
            if value is not None:
                return value
        return None

    account_id = pick("account_id")
    if account_id is None and default_account_id is not None:
        account_id = str(default_account_id)

    return ImportRow(
        row_number=row_number,
        account_id=account_id,
        amount=pick("amount"),
        description=pick("description"),
        transaction_type=(pick("transaction_type") or DEPOSIT).lower(),
        created_at=pick("created_at"),
    )


class TransactionImportService:
    """Service for applying many transactions from one upload."""

    def __init__(
        self,
        db: Database,
        actor: Optional[Actor] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        """Initialize import service.

        Args:
            db: Database instance
            actor: Identity the operations run as (defaults to the system operator)
            emitter: Notification emitter shared with the ledger
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR
        self.ledger = LedgerService(db, actor=self.actor, emitter=emitter)

    def parse_csv(self, text: str, default_account_id: Optional[int] = None) -> list[ImportRow]:
        """Parse CSV text with a header line. Row numbers count the header as row 1.

        Raises:
            ValidationError: If the text has no header or no amount column
        """
        reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
        if not reader.fieldnames:
            raise ValidationError("CSV file has no columns")
        headers = {name.strip().lower() for name in reader.fieldnames if name}
        if "amount" not in headers:
            raise ValidationError("CSV file missing required column: amount")

        rows = []
        for row_number, record in enumerate(reader, start=2):
            if not any(_text(v) for v in record.values() if not isinstance(v, list)):
                continue
            rows.append(_row_from_mapping(row_number, record, default_account_id))
        return rows

    def parse_json(self, text: str, default_account_id: Optional[int] = None) -> list[ImportRow]:
        """Parse a JSON object or array of objects. Row numbers start at 1.

        Raises:
            ValidationError: If the text is not JSON or holds non-objects
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON format: {e}") from e

        records = data if isinstance(data, list) else [data]
        rows = []
        for row_number, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                raise ValidationError(f"Row {row_number}: expected an object, got {type(record).__name__}")
            rows.append(_row_from_mapping(row_number, record, default_account_id))
        return rows

    def validate_row(self, row: ImportRow) -> tuple[list[RowError], Optional[dict[str, Any]]]:
        """Check one row.

        Returns:
            (errors, ledger arguments); arguments are None when errors is non-empty
        """
        errors = []
        kwargs: dict[str, Any] = {}

        if row.account_id is None:
            errors.append(RowError(row.row_number, "account_id",
                                   "Account ID is required. Either specify it in the file or pass a default account."))
        else:
            try:
                kwargs["account_id"] = int(row.account_id)
            except ValueError:
                errors.append(RowError(row.row_number, "account_id", f"Invalid account ID '{row.account_id}'"))
            else:
                if self.db.get_account(kwargs["account_id"]) is None:
                    errors.append(RowError(row.row_number, "account_id", account_not_found(kwargs["account_id"])))

        try:
            kwargs["amount"] = positive_amount(row.amount)
        except ValidationError as e:
            errors.append(RowError(row.row_number, "amount", str(e)))

        if row.description is None:
            errors.append(RowError(row.row_number, "description", "Description is required"))
        kwargs["description"] = row.description

        if row.transaction_type not in TRANSACTION_TYPES:
            errors.append(RowError(row.row_number, "transaction_type",
                                   invalid_choice("transaction type", row.transaction_type, TRANSACTION_TYPES)))
        kwargs["transaction_type"] = row.transaction_type

        kwargs["occurred_at"] = None
        if row.created_at is not None:
            try:
                kwargs["occurred_at"] = parse_datetime(row.created_at)
            except ValueError:
                errors.append(RowError(row.row_number, "created_at", "Invalid date format"))

        return errors, (None if errors else kwargs)

    def validate_rows(self, rows: list[ImportRow]) -> list[RowError]:
        """Return every validation error across rows."""
        errors = []
        for row in rows:
            errors.extend(self.validate_row(row)[0])
        return errors

    def import_rows(self, rows: list[ImportRow]) -> ImportResult:
        """Apply rows one at a time through the ledger.

        Invalid rows and rows the ledger rejects are reported; the run
        continues with the next row.
        """
        require_admin(self.actor, "import transactions")
        result = ImportResult()
        for row in rows:
            errors, kwargs = self.validate_row(row)
            if errors:
                result.errors.extend(errors)
                continue
            try:
                self.ledger.apply_transaction(**kwargs)
            except DomainError as e:
                result.errors.append(RowError(row.row_number, "transaction", str(e)))
                continue
            result.processed += 1

        logger.info("Import finished: %s", result.message)
        return result

    def load_file(self, path: str | Path, default_account_id: Optional[int] = None) -> list[ImportRow]:
        """Parse a .csv, .txt or .json upload into rows.

        Raises:
            ValidationError: If the suffix is not supported
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in (".csv", ".txt", ".json"):
            raise ValidationError("Please upload a CSV, JSON, or TXT file")
        if not path.exists():
            raise FileNotFoundError(f"Import file not found: {path}")

        text = path.read_text(encoding="utf-8-sig")
        if suffix == ".json":
            return self.parse_json(text, default_account_id)
        return self.parse_csv(text, default_account_id)

    def import_file(self, path: str | Path, default_account_id: Optional[int] = None) -> ImportResult:
        """Parse and apply an upload file."""
        return self.import_rows(self.load_file(path, default_account_id))
