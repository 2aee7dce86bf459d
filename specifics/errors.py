"""
Exceptions raised across the service.
"""


class SchemaError(ValueError):
    """The aspect definition set is malformed and cannot be reconciled."""


class EbayApiError(RuntimeError):
    """An eBay OAuth or Taxonomy call failed."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class AnalysisError(RuntimeError):
    """The vision model gave no usable analysis of the photos."""
