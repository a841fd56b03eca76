"""
Paytrack Kernel

Shared foundation for the shift pay and withholding engines:
- Typed, coded exceptions
- Structured JSON logging
- Deterministic clock and tax-year utilities
- Decimal-only money and hours rounding
- SQLAlchemy base, engine and column types
"""

__version__ = "0.1.0"
