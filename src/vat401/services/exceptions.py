from __future__ import annotations


class Vat401Error(Exception):
    """Base class for filing errors. *field* names the offending input, if any."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidPeriodError(Vat401Error, ValueError):
    """Bi-month, month or year outside the range the authority accepts."""


class MediaEncodingError(Vat401Error, ValueError):
    """An invoice cannot be encoded into a 401 media record as given."""


class UnknownTaxCodeError(Vat401Error, KeyError):
    """A tax code referenced by an invoice is missing from the tax-code table."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class NegativeAmountError(Vat401Error, ValueError):
    """A monetary amount below zero reached tax aggregation."""
