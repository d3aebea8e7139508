"""Moving ledger data in and out: JSON backups and the spreadsheet plan"""

from cushion.services.transfer.backup import (
    BackupContents,
    BackupFormatError,
    backup_filename,
    export_backup,
    import_backup,
)
from cushion.services.transfer.plan_sheet import (
    GoogleSheetsPlanReader,
    PlanColumns,
    PlanImport,
    PlanImportError,
    apply_plan,
    parse_plan_rows,
)

__all__ = [
    "BackupContents",
    "BackupFormatError",
    "backup_filename",
    "export_backup",
    "import_backup",
    "GoogleSheetsPlanReader",
    "PlanColumns",
    "PlanImport",
    "PlanImportError",
    "apply_plan",
    "parse_plan_rows",
]
