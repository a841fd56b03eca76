"""
Module: paytrack_kernel.db.types
Responsibility: Annotated column aliases shared by every ORM model so that
    amounts, rates, hours and labels are declared with identical precision.
Architecture position: Kernel > DB.  MUST NOT import from modules or engines.

Invariants enforced:
    - No floats in any column.  Amounts and hours use Numeric(38, 9);
      multipliers and tax coefficients use Numeric(38, 18) so that
      published coefficients such as 0.3477 or 247.1154 round-trip exactly.
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import Numeric, String

# Monetary amount: 38 digits, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Multipliers and bracket coefficients
Rate = Annotated[Decimal, Numeric(38, 18)]

# Fractional hours
Hours = Annotated[Decimal, Numeric(38, 9)]

# Australian financial year label, e.g. "2024-25"
TaxYearLabel = Annotated[str, String(7)]

# HH:MM time-of-day ("24:00" allowed as an end bound)
TimeOfDay = Annotated[str, String(5)]

# Short identifier strings (scales, statuses, types)
ShortCode = Annotated[str, String(50)]

# Long text for names and descriptions
LongText = Annotated[str, String(4000)]
