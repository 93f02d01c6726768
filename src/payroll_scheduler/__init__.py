"""Payroll scheduler: employee pay runs, statutory holidays and paystub scheduling."""

__version__ = "0.1.0"
