"""
Currency conversion boundary.

Every aggregation takes a converter ``convert(amount, from_code, to_code)``
as an explicit argument.  :class:`RateTable` is the concrete converter the
HTTP layer builds from the ``rates`` object posted with a request.

Contract
--------
* identity when ``from_code == to_code`` (no rate lookup at all);
* :class:`~splitly.errors.UnknownCurrencyError` for a code without a
  usable (present, non-zero) rate; a ``NaN`` or infinite rate is rejected
  with :class:`ValueError` when the table is built;
* results are plain :class:`~decimal.Decimal` values, never rounded.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Protocol

from splitly.errors import ConversionError, UnknownCurrencyError
from splitly.utils.money import ZERO, as_decimal, to_decimal


class Converter(Protocol):
    def __call__(self, amount: Decimal, from_code: str, to_code: str) -> Decimal: ...


class RateTable:
    """
    Exchange rates quoted as units of each currency per one *reference* unit.

    >>> table = RateTable({"EUR": "0.9", "JPY": "150"})
    >>> table.convert(Decimal("100"), "USD", "EUR")
    Decimal('90.0')
    """

    def __init__(self, rates: Mapping[str, Any], reference: str = "USD") -> None:
        self.reference = reference
        self._rates: Dict[str, Decimal] = {
            code.upper(): to_decimal(value) for code, value in rates.items()
        }
        self._rates.setdefault(reference, Decimal("1"))

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self._usable(code.upper())

    def __call__(self, amount: Decimal, from_code: str, to_code: str) -> Decimal:
        return self.convert(amount, from_code, to_code)

    def _usable(self, code: str) -> bool:
        rate = self._rates.get(code)
        return rate is not None and rate != ZERO

    def _lookup(self, code: str) -> Decimal:
        if not isinstance(code, str) or not self._usable(code.upper()):
            raise UnknownCurrencyError(str(code))
        return self._rates[code.upper()]

    def rate(self, from_code: str, to_code: str) -> Decimal:
        """Multiplier taking an amount in *from_code* to *to_code*."""
        if from_code == to_code:
            return Decimal("1")
        return self._lookup(to_code) / self._lookup(from_code)

    def convert(self, amount: Decimal, from_code: str, to_code: str) -> Decimal:
        if from_code == to_code:
            return amount
        # Through the reference currency.
        return amount / self._lookup(from_code) * self._lookup(to_code)


def checked_convert(
    convert: Converter,
    amount: Decimal,
    from_code: str,
    to_code: str,
) -> Decimal:
    """
    Call *convert* and reject a non-finite result.

    Callers may supply any converter; a ``NaN`` or infinite result is turned
    into :class:`~splitly.errors.ConversionError` instead of leaking into a
    monetary total.  Exceptions raised by *convert* propagate untouched.
    """
    result = as_decimal(convert(amount, from_code, to_code))
    if not result.is_finite():
        raise ConversionError(
            f"Converting {amount} {from_code} to {to_code} produced {result}."
        )
    return result
