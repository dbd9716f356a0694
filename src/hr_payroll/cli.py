"""HR payroll command line interface.

Usage:
    hr-payroll generate --month March --year 2024 [--structure-id ID]
    hr-payroll disburse --month March --year 2024 [--csv out.csv] [--pdf out.pdf]
    hr-payroll calculate --structure-id S --employee-id E
    hr-payroll serve
"""

from __future__ import annotations

import argparse
import sys
from decimal import Decimal
from pathlib import Path
from typing import Callable
from uuid import UUID

from hr_payroll.client import HrPayrollClient, HrPayrollClientError, SessionContext
from hr_payroll.config import get_settings
from hr_payroll.reporting import render_csv, render_pdf


class HrPayrollCli:
    """Command line front end for the payroll API."""

    def __init__(self, client_factory: Callable[[argparse.Namespace], HrPayrollClient] | None = None):
        self.parser = self._build_parser()
        self._client_factory = client_factory or self._default_client

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        settings = get_settings()
        parser = argparse.ArgumentParser(
            prog="hr-payroll",
            description="HR payroll operations",
        )
        parser.add_argument(
            "--base-url",
            default=settings.api_base_url,
            help="API base URL (default: $API_BASE_URL)",
        )
        parser.add_argument(
            "--token",
            default=settings.api_token,
            help="Bearer token (default: $API_TOKEN)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # generate command
        generate = subparsers.add_parser(
            "generate",
            help="Generate payrolls for every eligible employee",
        )
        generate.add_argument("--month", required=True, help="Month name, e.g. March")
        generate.add_argument("--year", type=int, required=True)
        generate.add_argument(
            "--structure-id",
            type=UUID,
            help="Salary structure to apply instead of the default template",
        )

        # disburse command
        disburse = subparsers.add_parser(
            "disburse",
            help="Pay out a month's unpaid payrolls",
        )
        disburse.add_argument("--month", required=True, help="Month name, e.g. March")
        disburse.add_argument("--year", type=int, required=True)
        disburse.add_argument("--csv", type=Path, help="Write the results as CSV")
        disburse.add_argument("--pdf", type=Path, help="Write the results as PDF")

        # calculate command
        calculate = subparsers.add_parser(
            "calculate",
            help="Preview a salary structure for an employee",
        )
        calculate.add_argument("--structure-id", type=UUID, required=True)
        calculate.add_argument("--employee-id", type=UUID, required=True)
        calculate.add_argument("--overtime-hours", type=Decimal)
        calculate.add_argument("--hourly-rate", type=Decimal)

        # serve command
        subparsers.add_parser("serve", help="Run the API server")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        if parsed.command == "serve":
            return self._cmd_serve(parsed)

        # Dispatch to command handler
        handlers: dict[str, Callable[[HrPayrollClient, argparse.Namespace], int]] = {
            "generate": self._cmd_generate,
            "disburse": self._cmd_disburse,
            "calculate": self._cmd_calculate,
        }
        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            with self._client_factory(parsed) as client:
                return handler(client, parsed)
        except HrPayrollClientError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    @staticmethod
    def _default_client(args: argparse.Namespace) -> HrPayrollClient:
        return HrPayrollClient(
            SessionContext(base_url=args.base_url, token=args.token),
            timeout=get_settings().http_timeout,
        )

    def _cmd_generate(self, client: HrPayrollClient, args: argparse.Namespace) -> int:
        """Bulk-generate payrolls."""
        result = client.generate_bulk(args.month, args.year, structure_id=args.structure_id)
        print(f"Payroll generation for {result.month} {result.year}")
        print(f"  Created: {result.created}")
        print(f"  Skipped: {result.skipped}")
        return 0

    def _cmd_disburse(self, client: HrPayrollClient, args: argparse.Namespace) -> int:
        """Disburse payrolls and optionally write reports."""
        result = client.disburse(args.month, args.year)
        print(f"Disbursement for {result.month} {result.year}")
        print(f"  Total:  {result.total}")
        print(f"  Paid:   {result.paid}")
        print(f"  Failed: {result.failed}")
        for item in result.results:
            detail = item.reference or item.error or "-"
            print(f"  {item.employee_name:<30} {item.amount:>12} {item.status:<8} {detail}")

        rows = [item.model_dump() for item in result.results]
        if args.csv:
            args.csv.write_text(render_csv(rows), encoding="utf-8")
            print(f"\nCSV written to {args.csv}")
        if args.pdf:
            summary = {"total": result.total, "paid": result.paid, "failed": result.failed}
            args.pdf.write_bytes(render_pdf(rows, result.month, result.year, summary))
            print(f"PDF written to {args.pdf}")
        return 0

    def _cmd_calculate(self, client: HrPayrollClient, args: argparse.Namespace) -> int:
        """Print a salary preview."""
        preview = client.calculate_salary(
            args.structure_id,
            args.employee_id,
            overtime_hours=args.overtime_hours,
            hourly_rate=args.hourly_rate,
        )
        salary = preview.calculated_salary
        print(f"{preview.employee.name} - {preview.structure_name}")
        print("\nEarnings:")
        for name, amount in salary.earnings.items():
            print(f"  {name:<24} {amount:>12}")
        print("\nDeductions:")
        for name, amount in salary.deductions.items():
            print(f"  {name:<24} {amount:>12}")
        print()
        print(f"  {'Total earnings':<24} {salary.total_earnings:>12}")
        print(f"  {'Total deductions':<24} {salary.total_deductions:>12}")
        print(f"  {'Net salary':<24} {salary.net_salary:>12}")
        return 0

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        """Run the API with uvicorn."""
        from hr_payroll.__main__ import main as serve

        serve()
        return 0


def main() -> None:
    """CLI entry point."""
    cli = HrPayrollCli()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
