"""Driver payroll timesheets organized by fiscal month."""

__version__ = "0.1.0"
