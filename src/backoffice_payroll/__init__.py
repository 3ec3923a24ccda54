"""Back-office payroll: payroll runs, line item calculation and run totals."""

__version__ = "0.1.0"
