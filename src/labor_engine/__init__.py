"""Labor compliance rule engine and payroll calculation for minor and adult workers."""

__version__ = "0.1.0"
