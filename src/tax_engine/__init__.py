"""Point-of-sale tax and payroll tax-reporting calculation engine."""

__version__ = "0.1.0"
