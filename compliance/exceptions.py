"""Errors raised by the compliance services."""


class ComplianceError(Exception):
    """Base class for VAT / FAF compliance errors."""


class VATCalculationError(ComplianceError, ValueError):
    """Amount or tax code rejected by the VAT calculator."""


class FAFExportError(ComplianceError):
    """A revenue-stream query failed; the whole export is aborted."""

    def __init__(self, stream: str, message: str):
        self.stream = stream
        super().__init__(f"{stream}: {message}")
