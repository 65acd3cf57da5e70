"""Exceptions raised while reconciling records."""

class ReconciliationError(Exception):
    """Base class for reconciliation errors."""

class MissingFieldError(ReconciliationError):
    """A record lacks a field needed to match it. The record is skipped."""

    def __init__(self, field: str, source: str = 'record'):
        self.field = field
        self.source = source
        super().__init__(f"{source} is missing required field '{field}'")

class MalformedInputError(ReconciliationError, TypeError):
    """A record source is not an iterable of mappings."""
