"""Payout providers."""

from hr_payroll.payments.base import BankTransferProvider, Beneficiary, TransferResult
from hr_payroll.payments.mock_bank import MockBankProvider

__all__ = [
    "BankTransferProvider",
    "Beneficiary",
    "TransferResult",
    "MockBankProvider",
]
