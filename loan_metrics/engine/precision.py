"""Decimal arithmetic context for the calculators.

Every public engine function takes a ``CalculatorContext`` and evaluates inside
``decimal.localcontext``; the process-wide decimal context is never modified.
"""

import decimal
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from loan_metrics.engine.errors import InvalidInputError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")

# Inputs at or above 10**31 are rejected before any arithmetic.
MAX_MAGNITUDE = 30

_ROUNDING_MODES = {
    name: getattr(decimal, name)
    for name in (
        "ROUND_HALF_UP",
        "ROUND_HALF_EVEN",
        "ROUND_HALF_DOWN",
        "ROUND_UP",
        "ROUND_DOWN",
        "ROUND_CEILING",
        "ROUND_FLOOR",
        "ROUND_05UP",
    )
}


@dataclass(frozen=True)
class CalculatorContext:
    precision: int = 28
    rounding: str = ROUND_HALF_UP
    max_annual_rate_percent: Decimal = Decimal("100")
    min_dscr: Decimal = Decimal("1.00")
    standard_dscr: Decimal = Decimal("1.25")
    balance_tolerance: Decimal = Decimal("1.00")

    def __post_init__(self):
        if self.rounding not in _ROUNDING_MODES.values():
            raise ValueError(f"Unknown rounding mode: {self.rounding}")
        if self.precision < 1:
            raise ValueError("precision must be positive")

    def decimal_context(self) -> decimal.Context:
        return decimal.Context(prec=self.precision, rounding=self.rounding)

    @classmethod
    def from_settings(cls, settings) -> "CalculatorContext":
        rounding = _ROUNDING_MODES.get(settings.rounding.upper())
        if rounding is None:
            raise ValueError(f"Unknown rounding mode: {settings.rounding}")
        return cls(
            precision=settings.decimal_precision,
            rounding=rounding,
            max_annual_rate_percent=settings.max_annual_rate_percent,
            min_dscr=settings.min_dscr,
            standard_dscr=settings.standard_dscr,
            balance_tolerance=settings.balance_tolerance,
        )


DEFAULT_CONTEXT = CalculatorContext()


def to_decimal(value, field: str, default: Decimal | None = None) -> Decimal:
    """Coerce a caller-supplied number to a finite Decimal.

    ``None`` (and blank strings) become ``default`` when one is given,
    otherwise the value counts as missing. Floats go through ``str()`` so the
    shortest repr is used rather than the binary expansion.
    """
    if isinstance(value, str):
        value = value.strip().replace(",", "").replace("$", "")
        if value == "":
            value = None
    if value is None:
        if default is not None:
            return default
        raise InvalidInputError(field, "value is required")
    if isinstance(value, bool):
        raise InvalidInputError(field, "expected a number, got a boolean")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise InvalidInputError(field, f"not a number: {value!r}") from None
    else:
        raise InvalidInputError(field, f"unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise InvalidInputError(field, "must be finite")
    if result and result.adjusted() > MAX_MAGNITUDE:
        raise InvalidInputError(field, "value too large")
    return result


def _two_places(value: Decimal, ctx: CalculatorContext, field: str) -> Decimal:
    try:
        return value.quantize(TWO_PLACES, rounding=ctx.rounding)
    except InvalidOperation:
        # more digits than the context precision can hold
        raise InvalidInputError(field, "value too large") from None


def money(value: Decimal, ctx: CalculatorContext = DEFAULT_CONTEXT, field: str = "amount") -> Decimal:
    """Round a monetary amount to cents."""
    return _two_places(value, ctx, field)


def ratio(value: Decimal, ctx: CalculatorContext = DEFAULT_CONTEXT, field: str = "ratio") -> Decimal:
    """Round a ratio or percentage to two decimal places."""
    return _two_places(value, ctx, field)
