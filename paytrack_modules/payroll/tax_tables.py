"""Database-backed tax reference tables.

``TaxTableRepository`` reads and writes the PAYG coefficient, STSL rate
and tax rate configuration rows, producing the same immutable
``TaxTables`` value the YAML loader builds, so either source can feed
``PayPeriodService``.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from paytrack_kernel.logging_config import get_logger
from paytrack_modules.payroll.models import TaxTables
from paytrack_modules.payroll.orm import (
    StslRateModel,
    TaxCoefficientModel,
    TaxRateConfigModel,
)

logger = get_logger("modules.payroll.tax_tables")


class TaxTableRepository:
    """Load and replace stored tax tables, one tax year at a time."""

    def __init__(self, session: Session):
        self._session = session

    def load(self) -> TaxTables:
        coefficients = self._session.scalars(
            select(TaxCoefficientModel).order_by(
                TaxCoefficientModel.tax_year,
                TaxCoefficientModel.scale,
                TaxCoefficientModel.earnings_from,
            )
        )
        stsl_rates = self._session.scalars(
            select(StslRateModel).order_by(
                StslRateModel.tax_year, StslRateModel.scale, StslRateModel.earnings_from,
            )
        )
        configs = self._session.scalars(
            select(TaxRateConfigModel).order_by(TaxRateConfigModel.tax_year)
        )
        tables = TaxTables(
            coefficients=tuple(m.to_dto() for m in coefficients),
            stsl_rates=tuple(m.to_dto() for m in stsl_rates),
            rate_configs=tuple(m.to_dto() for m in configs),
        )
        logger.debug(
            "tax_tables_loaded",
            extra={
                "source": "database",
                "tax_years": list(tables.tax_years),
                "coefficient_count": len(tables.coefficients),
                "stsl_rate_count": len(tables.stsl_rates),
            },
        )
        return tables

    def save(self, tables: TaxTables) -> None:
        """
        Store ``tables``, replacing every row of the tax years they cover.

        Years not present in ``tables`` are left untouched.
        """
        years = (
            {c.tax_year for c in tables.coefficients}
            | {r.tax_year for r in tables.stsl_rates}
            | {c.tax_year for c in tables.rate_configs}
        )
        with self._session.begin_nested():
            for model in (TaxCoefficientModel, StslRateModel, TaxRateConfigModel):
                self._session.execute(delete(model).where(model.tax_year.in_(years)))
            self._session.add_all(TaxCoefficientModel.from_dto(c) for c in tables.coefficients)
            self._session.add_all(StslRateModel.from_dto(r) for r in tables.stsl_rates)
            self._session.add_all(TaxRateConfigModel.from_dto(c) for c in tables.rate_configs)
            self._session.flush()

        logger.info(
            "tax_tables_saved",
            extra={
                "tax_years": sorted(years),
                "coefficient_count": len(tables.coefficients),
                "stsl_rate_count": len(tables.stsl_rates),
            },
        )
