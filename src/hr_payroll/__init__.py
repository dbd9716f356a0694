"""HR payroll service: payroll records, salary structures, disbursement and ID cards."""

__version__ = "0.1.0"
