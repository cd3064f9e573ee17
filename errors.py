# errors.py


class InvoiceError(Exception):
    """Base class for every error raised by the invoice pipeline."""


class ValidationError(InvoiceError):
    """
    Raised by the form layer before the core runs (missing names,
    malformed email, non-positive quantity or rate).
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class LayoutOverflowError(InvoiceError):
    """
    An atomic element (one word, one table row) does not fit the usable
    page width/height even on its own. The layout engine catches this and
    clips the element.
    """

    def __init__(self, kind: str, detail: str, page_index: int = 0):
        super().__init__(f"{kind} overflow on page {page_index + 1}: {detail}")
        self.kind = kind
        self.detail = detail
        self.page_index = page_index


class DeliveryError(InvoiceError):
    """Delivery of an already rendered artifact failed (disk or SMTP)."""

    def __init__(self, message: str, file_name: str = ""):
        super().__init__(message)
        self.file_name = file_name
        # Set by pdf_service.generate_and_deliver so delivery can be retried
        self.result = None
