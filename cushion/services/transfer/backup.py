"""
JSON backup export and import.

Document shape (camelCase, indented):

    {
      "expenses": {"2024-03-05": [{...transaction...}], ...},
      "financialProfile": {...profile...}
    }

Older exports hold only the bare log, without the wrapper; both forms are
accepted on import. Import is all-or-nothing: one bad record rejects the
whole document.
"""

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional
from uuid import uuid4

from pydantic import ValidationError

from cushion.models.profile import FinancialProfile
from cushion.models.transaction import Transaction, TransactionLog, log_to_records

LOG_KEY = "expenses"
PROFILE_KEY = "financialProfile"


class BackupFormatError(Exception):
    """Backup document is not valid JSON or holds invalid records."""
    pass


@dataclass
class BackupContents:
    """What an imported backup holds. profile is None for bare-log backups."""

    log: TransactionLog
    profile: Optional[FinancialProfile] = None

    @property
    def transaction_count(self) -> int:
        return sum(len(txs) for txs in self.log.values())


def backup_filename(today: Optional[date] = None) -> str:
    return f"finanzas_backup_{(today or date.today()).isoformat()}.json"


def export_backup(log: TransactionLog, profile: FinancialProfile) -> str:
    """Serialize the whole ledger to a backup document."""
    document = {
        LOG_KEY: log_to_records(log),
        PROFILE_KEY: profile.to_record(),
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def _parse_log(raw: Any, user_id: str) -> TransactionLog:
    if not isinstance(raw, dict):
        raise BackupFormatError("Transaction log must be an object keyed by date")

    log: TransactionLog = {}
    for key, records in raw.items():
        if not isinstance(records, list):
            raise BackupFormatError(f"Entries for {key} must be a list")
        for record in records:
            if not isinstance(record, dict):
                raise BackupFormatError(f"Invalid transaction record under {key}")
            record = dict(record)
            if not record.get("id"):
                record["id"] = str(uuid4())
            if not record.get("userId") and not record.get("user_id"):
                record["userId"] = user_id
            # The day key is authoritative when the record has no date
            record.setdefault("date", key)
            try:
                transaction = Transaction.model_validate(record)
            except ValidationError as e:
                raise BackupFormatError(f"Invalid transaction under {key}: {e}")
            log.setdefault(transaction.date_key, []).append(transaction)
    return log


def import_backup(text: str, user_id: str = "") -> BackupContents:
    """
    Parse a backup document.

    Transactions missing an id get a fresh one; those missing a user id
    are assigned to `user_id`.

    Raises:
        BackupFormatError: On malformed JSON or any invalid record
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupFormatError(f"Backup is not valid JSON: {e}")

    if not isinstance(document, dict):
        raise BackupFormatError("Backup must be a JSON object")

    if LOG_KEY in document:
        log = _parse_log(document[LOG_KEY], user_id)
        profile = None
        if document.get(PROFILE_KEY) is not None:
            try:
                profile = FinancialProfile.model_validate(document[PROFILE_KEY])
            except ValidationError as e:
                raise BackupFormatError(f"Invalid financial profile: {e}")
        return BackupContents(log=log, profile=profile)

    # Legacy export: the document is the log itself
    return BackupContents(log=_parse_log(document, user_id))
