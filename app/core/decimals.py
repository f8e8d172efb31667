"""
Exact decimal values for money and fuel volume.

Amounts travel as strings on the wire and never pass through binary floats in
arithmetic. All operations run in a dedicated high-precision context so no
digits are lost to the default 28-digit precision. The context traps every
rounding signal, so an operation that cannot be carried out exactly raises
instead of returning an approximation.
"""
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ROUND_HALF_EVEN,
    Rounded,
)
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

DECIMAL_CONTEXT = Context(
    prec=100,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact, Rounded],
)

# Request amounts (quantity, price) are bounded so that any product of two of
# them, and that product at either operand's scale, fits well inside the context
MAX_INTEGER_DIGITS = 15
MAX_FRACTION_DIGITS = 12


class DecimalParseError(ValueError):
    """Raised when a value cannot be read as a finite decimal"""


def parse_decimal(value: Any) -> Decimal:
    """Read a finite decimal from a string, int, Decimal or JSON number.

    Floats are read through their shortest repr so that a JSON ``10.5`` becomes
    ``Decimal("10.5")`` and not its binary expansion.
    """
    if isinstance(value, bool):
        raise DecimalParseError("Boolean is not a decimal value")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise DecimalParseError("Empty decimal value")
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise DecimalParseError(f"Malformed decimal value: {value!r}") from e
    else:
        raise DecimalParseError(f"Unsupported decimal value type: {type(value).__name__}")

    if not result.is_finite():
        raise DecimalParseError(f"Decimal value must be finite: {value!r}")
    return result


def parse_amount(value: Any) -> Decimal:
    """Parse a request amount and check it against the digit bounds"""
    result = parse_decimal(value)
    exponent = result.as_tuple().exponent
    fraction_digits = -exponent if exponent < 0 else 0
    integer_digits = max(result.adjusted() + 1, 0) if result else 0
    if integer_digits > MAX_INTEGER_DIGITS:
        raise DecimalParseError(
            f"At most {MAX_INTEGER_DIGITS} digits are allowed before the decimal point"
        )
    if fraction_digits > MAX_FRACTION_DIGITS:
        raise DecimalParseError(
            f"At most {MAX_FRACTION_DIGITS} digits are allowed after the decimal point"
        )
    return result


def format_decimal(value: Decimal) -> str:
    """Exact fixed-point text, scale preserved (``Decimal("10000.00")`` -> ``"10000.00"``)"""
    return format(value, "f")


def add(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.add(a, b)


def subtract(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.subtract(a, b)


def multiply(a: Decimal, b: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.multiply(a, b)


def divide(a: Decimal, b: Decimal) -> Decimal:
    """Divide in the decimal context.

    A zero divisor raises ZeroDivisionError; a quotient that does not terminate
    within the context precision raises decimal.Inexact.
    """
    if b == 0:
        raise ZeroDivisionError("Decimal division by zero")
    return DECIMAL_CONTEXT.divide(a, b)


def _scale(value: Decimal) -> int:
    exponent = value.as_tuple().exponent
    return -exponent if exponent < 0 else 0


def line_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """Exact ``quantity * unit_price``.

    When the exact product only carries trailing zeros past the unit price's
    scale it is shown at that scale (10.5 x 10000.00 = 105000.00); otherwise
    the full-scale product is kept. Products too large for the context raise a
    decimal signal (an ArithmeticError) rather than losing digits.
    """
    product = multiply(quantity, unit_price)
    scale = _scale(unit_price)
    # Rescale by editing the digit tuple; a context quantize would signal Rounded
    sign, digits, exponent = product.as_tuple()
    extra = -exponent - scale
    if extra > 0:
        if any(digits[-extra:]):
            return product
        rescaled = Decimal((sign, digits[:-extra] or (0,), -scale))
    else:
        rescaled = Decimal((sign, digits + (0,) * -extra, -scale))
    # plus() applies the context: more digits than its precision raises Rounded
    return DECIMAL_CONTEXT.plus(rescaled)


# Pydantic field type: accepts strings and JSON numbers, serialises as a JSON string
DecimalStr = Annotated[
    Decimal,
    BeforeValidator(parse_decimal),
    PlainSerializer(format_decimal, return_type=str, when_used="json"),
]

# Same wire format, with the digit bounds applied; used for client-supplied amounts
AmountStr = Annotated[
    Decimal,
    BeforeValidator(parse_amount),
    PlainSerializer(format_decimal, return_type=str, when_used="json"),
]
