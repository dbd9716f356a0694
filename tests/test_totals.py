"""Tests for the payroll totals calculator."""

from decimal import Decimal

from hr_payroll.calculators.totals import TotalsCalculator
from hr_payroll.models import PayrollRecord


class TestTotalsCalculator:
    """Test earnings/deductions totals and net pay."""

    def test_worked_example(self):
        """Basic wage plus HRA less PF and professional tax."""
        totals = TotalsCalculator.compute(
            {"basic_wage": 30000, "house_rent_allowance": 12000},
            {"pf_employee": 3600, "professional_tax": 200},
        )

        assert totals.earnings_total == Decimal("42000")
        assert totals.deductions_total == Decimal("3800")
        assert totals.net_pay == Decimal("38200")

    def test_net_pay_is_exact_difference(self):
        """Net pay equals sum(earnings) - sum(deductions) without rounding."""
        earnings = {"basic_wage": Decimal("1234.567"), "overtime": Decimal("0.003")}
        deductions = {"income_tax": Decimal("100.1")}

        totals = TotalsCalculator.compute(earnings, deductions)

        assert totals.net_pay == Decimal("1234.567") + Decimal("0.003") - Decimal("100.1")

    def test_empty_maps_give_zero(self):
        totals = TotalsCalculator.compute({}, {})

        assert totals.earnings_total == 0
        assert totals.deductions_total == 0
        assert totals.net_pay == 0

    def test_none_maps_and_values_count_as_zero(self):
        totals = TotalsCalculator.compute(None, {"pf_employee": None, "income_tax": 50})

        assert totals.earnings_total == 0
        assert totals.deductions_total == Decimal("50")
        assert totals.net_pay == Decimal("-50")

    def test_negative_values_are_summed(self):
        totals = TotalsCalculator.compute({"basic_wage": 1000, "gratuity": -200}, {})

        assert totals.earnings_total == Decimal("800")

    def test_floats_are_converted_exactly(self):
        """Floats go through their string form so 0.1 stays 0.1."""
        totals = TotalsCalculator.compute({"overtime": 0.1, "gratuity": 0.2}, {})

        assert totals.earnings_total == Decimal("0.3")

    def test_idempotent(self):
        earnings = {"basic_wage": 25000, "medical_allowance": 1500}
        deductions = {"pf_employee": 3000}

        assert TotalsCalculator.compute(earnings, deductions) == TotalsCalculator.compute(
            earnings, deductions
        )

    def test_ctc_and_in_hand_aliases(self):
        totals = TotalsCalculator.compute({"basic_wage": 500}, {"income_tax": 50})

        assert totals.ctc == totals.earnings_total
        assert totals.in_hand_salary == totals.net_pay

    def test_apply_to_record(self):
        """Derived columns are written from the record's field values."""
        record = PayrollRecord(month="March", year=2024)
        record.basic_wage = Decimal("30000")
        record.house_rent_allowance = Decimal("12000")
        record.pf_employee = Decimal("3600")
        record.professional_tax = Decimal("200")

        totals = TotalsCalculator.apply_to_record(record)

        assert totals.net_pay == Decimal("38200")
        assert record.total_earnings == Decimal("42000")
        assert record.total_deductions == Decimal("3800")
        assert record.ctc == Decimal("42000")
        assert record.in_hand_salary == Decimal("38200")
