"""Base protocol and types for bank transfer providers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol


@dataclass(frozen=True)
class Beneficiary:
    """Bank details of the payee."""

    account_name: str | None
    account_no: str | None
    ifsc: str | None
    bank_name: str | None

    def is_complete(self) -> bool:
        """All four bank fields are present."""
        return all((self.account_no, self.ifsc, self.account_name, self.bank_name))


@dataclass(frozen=True)
class TransferResult:
    """Result of a single payout attempt."""

    success: bool
    provider: str
    currency: str
    reference: str | None = None
    error: str | None = None


class BankTransferProvider(Protocol):
    """Protocol for payout providers.

    The disbursement service calls transfer once per payroll record and
    records whatever comes back. Providers report failure through the
    result rather than by raising.
    """

    provider_name: str

    def transfer(
        self,
        amount: Decimal,
        beneficiary: Beneficiary,
        currency: str | None = None,
    ) -> TransferResult:
        """Pay amount into the beneficiary's account."""
        ...
