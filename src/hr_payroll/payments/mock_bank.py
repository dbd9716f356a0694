"""Mock bank provider for local development and testing.

Replace with a real bank API adapter for production payouts.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from hr_payroll.payments.base import Beneficiary, TransferResult

MISSING_BANK_DETAILS = "Missing bank details (accountNo, ifsc, accountName, bankName)"
INVALID_AMOUNT = "Invalid payout amount"


class MockBankProvider:
    """Bank provider that validates input and settles instantly."""

    provider_name = "mock-bank"

    def __init__(self, default_currency: str = "INR"):
        self.default_currency = default_currency
        # Successful transfers by reference
        self.transfers: dict[str, tuple[Decimal, Beneficiary]] = {}

    def transfer(
        self,
        amount: Decimal,
        beneficiary: Beneficiary,
        currency: str | None = None,
    ) -> TransferResult:
        """Transfer amount (mock implementation)."""
        currency = currency or self.default_currency

        if not beneficiary.is_complete():
            return TransferResult(
                success=False,
                provider=self.provider_name,
                currency=currency,
                error=MISSING_BANK_DETAILS,
            )
        if amount is None or amount <= 0:
            return TransferResult(
                success=False,
                provider=self.provider_name,
                currency=currency,
                error=INVALID_AMOUNT,
            )

        reference = f"MOCK-{uuid.uuid4().hex[:12].upper()}"
        self.transfers[reference] = (amount, beneficiary)
        return TransferResult(
            success=True,
            provider=self.provider_name,
            currency=currency,
            reference=reference,
        )
