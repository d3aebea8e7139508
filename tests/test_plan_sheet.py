"""Tests for the spreadsheet plan import."""

from datetime import date
from unittest.mock import MagicMock

import gspread
import pytest

from cushion.models.profile import FinancialProfile
from cushion.services.storage import StorageError
from cushion.services.transfer.plan_sheet import (
    GoogleSheetsPlanReader,
    PlanColumns,
    PlanImportError,
    apply_plan,
    parse_plan_rows,
)

HEADER = [
    "Month", "Ingreso (€)", "Ahorro (€)", "Dinero Cartera Flexible", "Dinero para viajes",
    "Comidas", "Planes", "Regalos", "Suscripciones", "Caprichos", "Otros",
]

ROWS = [
    ["Financial plan 2024"],
    [],
    HEADER,
    ["February 2024", "1900", "300", "", "", "", "", "", "", "", ""],
    ["March 2024", "2000", "400,5", "150", "50,25", "200", "100", "", "abc", "30", "20"],
]


class TestParsePlan:
    """Tests for parse_plan_rows."""

    def test_reads_current_month(self):
        plan = parse_plan_rows(ROWS, date(2024, 3, 12))
        assert plan.month_label == "March 2024"
        assert plan.monthly_salary == 2000
        assert plan.savings_target == 400.5
        assert plan.initial_base == 200.25
        assert plan.budgets == {
            "Comidas": 200,
            "Planes": 100,
            "Regalos": 0,
            "Suscripciones": 0,
            "Caprichos": 30,
            "Otros": 20,
        }

    def test_month_match_is_case_insensitive(self):
        rows = [HEADER, ["MARCH 2024", "10"]]
        assert parse_plan_rows(rows, date(2024, 3, 1)).monthly_salary == 10

    def test_short_row_reads_missing_cells_as_zero(self):
        rows = [HEADER, ["March 2024", "10"]]
        plan = parse_plan_rows(rows, date(2024, 3, 1))
        assert plan.savings_target == 0
        assert plan.budgets["Otros"] == 0

    def test_no_header(self):
        with pytest.raises(PlanImportError, match="Month"):
            parse_plan_rows([["a", "b"], ["c"]], date(2024, 3, 1))

    def test_header_beyond_scan_window(self):
        rows = [[]] * 25 + [HEADER, ["March 2024", "1"]]
        with pytest.raises(PlanImportError):
            parse_plan_rows(rows, date(2024, 3, 1))

    def test_missing_month_lists_found_months(self):
        with pytest.raises(PlanImportError, match="February 2024, March 2024"):
            parse_plan_rows(ROWS, date(2024, 5, 1))

    def test_found_months_capped_at_ten(self):
        rows = [HEADER] + [[f"Month {i}"] for i in range(15)]
        with pytest.raises(PlanImportError) as exc:
            parse_plan_rows(rows, date(2024, 3, 1))
        assert "Month 9" in str(exc.value)
        assert "Month 10" not in str(exc.value)

    def test_custom_columns(self):
        columns = PlanColumns(month="Mes", salary="Nómina", cash=[], budgets={"Comidas": "Comida"})
        rows = [["Mes", "Nómina", "Comida"], ["March 2024", "1000", "90"]]
        plan = parse_plan_rows(rows, date(2024, 3, 1), columns)
        assert plan.monthly_salary == 1000
        assert plan.initial_base == 0
        assert plan.budgets == {"Comidas": 90}


class TestApplyPlan:
    """Tests for apply_plan and the sheet reader."""

    def test_merges_into_profile(self):
        profile = FinancialProfile(payday=25, budgets={"Comidas": 10, "Gimnasio": 40})
        updated = apply_plan(profile, parse_plan_rows(ROWS, date(2024, 3, 12)))
        assert updated.monthly_salary == 2000
        assert updated.payday == 25
        assert updated.budgets["Comidas"] == 200
        assert updated.budgets["Gimnasio"] == 40
        assert profile.budgets["Comidas"] == 10

    def test_reader_fetches_all_values(self):
        client = MagicMock()
        client.get_plan_sheet.return_value.get_all_values.return_value = ROWS
        assert GoogleSheetsPlanReader(client).read_rows() == ROWS

    def test_reader_wraps_api_errors(self):
        response = MagicMock()
        response.json.return_value = {
            "error": {"code": 500, "message": "backend error", "status": "INTERNAL"}
        }
        client = MagicMock()
        client.get_plan_sheet.return_value.get_all_values.side_effect = (
            gspread.exceptions.APIError(response)
        )
        with pytest.raises(StorageError):
            GoogleSheetsPlanReader(client).read_rows()
