"""
Monthly Plan Import

Reads a user's financial plan from a spreadsheet: one header row, then one
row per month labelled "<Month name> <year>" (e.g. "March 2024"). The row
for the current month provides salary, savings target, starting cash and
per-category budgets.

The header row does not have to be the first row; plans often start with a
title block, so the first `plan_header_scan_rows` rows are searched.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import gspread

from cushion.config import get_settings
from cushion.models.profile import FinancialProfile
from cushion.services.storage.google_sheets import GoogleSheetsClient
from cushion.services.storage.interface import StorageError
from cushion.utils.numbers import parse_number_or_zero

MAX_LISTED_MONTHS = 10

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class PlanImportError(Exception):
    """The plan sheet has no header row or no row for the requested month."""
    pass


def _default_budget_columns() -> dict[str, str]:
    return {
        "Comidas": "Comidas",
        "Planes": "Planes",
        "Regalos": "Regalos",
        "Suscripciones": "Suscripciones",
        "Caprichos": "Caprichos",
        "Otros": "Otros",
    }


@dataclass
class PlanColumns:
    """Header labels of the plan sheet."""

    month: str = ""
    salary: str = "Ingreso (€)"
    savings: str = "Ahorro (€)"
    cash: list[str] = field(
        default_factory=lambda: ["Dinero Cartera Flexible", "Dinero para viajes"]
    )
    budgets: dict[str, str] = field(default_factory=_default_budget_columns)

    def __post_init__(self):
        if not self.month:
            self.month = get_settings().app.plan_month_column


@dataclass
class PlanImport:
    """Values read from one month row of the plan."""

    month_label: str
    monthly_salary: float = 0.0
    savings_target: float = 0.0
    initial_base: float = 0.0
    budgets: dict[str, float] = field(default_factory=dict)


def month_label(today: date) -> str:
    return f"{MONTH_NAMES[today.month - 1]} {today.year}"


def _normalize(cell) -> str:
    return str(cell).strip().lower() if cell is not None else ""


def _find_header(rows: list[list], label: str, scan_rows: int) -> Optional[int]:
    wanted = label.strip().lower()
    for index, row in enumerate(rows[:scan_rows]):
        if any(_normalize(cell) == wanted for cell in row):
            return index
    return None


def parse_plan_rows(
    rows: list[list],
    today: Optional[date] = None,
    columns: Optional[PlanColumns] = None,
) -> PlanImport:
    """
    Extract the plan values for the month containing `today`.

    Blank or non-numeric cells read as 0; "979,44" reads as 979.44.
    Columns missing from the header read as 0 too.

    Raises:
        PlanImportError: No header row, or no row for the month
    """
    today = today or date.today()
    columns = columns or PlanColumns()
    scan_rows = get_settings().app.plan_header_scan_rows

    header_index = _find_header(rows, columns.month, scan_rows)
    if header_index is None:
        raise PlanImportError(
            f"Could not find a '{columns.month}' header in the first {scan_rows} rows"
        )

    header = [_normalize(cell) for cell in rows[header_index]]
    positions = {name: i for i, name in reversed(list(enumerate(header))) if name}
    month_pos = positions[columns.month.strip().lower()]

    def cell(row: list, label: str) -> float:
        pos = positions.get(label.strip().lower())
        if pos is None or pos >= len(row):
            return 0.0
        return parse_number_or_zero(row[pos])

    wanted = month_label(today).lower()
    found = []
    for row in rows[header_index + 1:]:
        if month_pos >= len(row):
            continue
        value = _normalize(row[month_pos])
        if not value:
            continue
        if value != wanted:
            found.append(str(row[month_pos]).strip())
            continue

        return PlanImport(
            month_label=month_label(today),
            monthly_salary=cell(row, columns.salary),
            savings_target=cell(row, columns.savings),
            initial_base=sum(cell(row, label) for label in columns.cash),
            budgets={
                category: cell(row, label)
                for category, label in columns.budgets.items()
            },
        )

    listed = ", ".join(found[:MAX_LISTED_MONTHS]) or "none"
    raise PlanImportError(
        f"No row for '{month_label(today)}' in the plan. Months found: {listed}"
    )


def apply_plan(profile: FinancialProfile, plan: PlanImport) -> FinancialProfile:
    """Return a copy of the profile with the plan values merged in."""
    budgets = dict(profile.budgets)
    budgets.update(plan.budgets)
    return profile.model_copy(update={
        "monthly_salary": plan.monthly_salary,
        "savings_target": plan.savings_target,
        "initial_base": plan.initial_base,
        "budgets": budgets,
    })


class GoogleSheetsPlanReader:
    """Fetches the raw plan rows from the plan worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def read_rows(self) -> list[list]:
        sheet = self._client.get_plan_sheet()
        try:
            return sheet.get_all_values()
        except gspread.exceptions.APIError as e:
            raise StorageError(f"Failed to read plan sheet: {e}") from e
