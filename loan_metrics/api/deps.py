"""FastAPI dependency injection."""

from functools import lru_cache

from loan_metrics.config import settings
from loan_metrics.engine.precision import CalculatorContext


@lru_cache
def get_calculator_context() -> CalculatorContext:
    return CalculatorContext.from_settings(settings)
