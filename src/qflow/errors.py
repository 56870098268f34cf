"""
Error taxonomy for qflow.

Every error here is a programmer or data error raised at the call site.
None of them is caught or retried inside the package.

Validation failures are NOT errors. They are data (a list of
ValidationIssue objects) that the Questionnaire inspects to decide
whether to advance.
"""


class QflowError(Exception):
    """Base class for all qflow errors."""
    pass


class ConstructionError(QflowError, ValueError):
    """Raised when a definition is missing a required field or is ambiguous."""
    pass


class NotFoundError(QflowError, LookupError):
    """Raised when a counter or item lookup by name/id fails."""
    pass


class UnknownItemIdError(NotFoundError):
    """Raised when next-item resolution yields an id not in the item list."""
    pass


class NoSourceError(QflowError):
    """Raised when a counter mutation has no explicit source and no current item."""
    pass


class NoCurrentItemError(QflowError):
    """Raised when forward navigation is requested on a completed questionnaire."""
    pass


class InvalidAccessError(QflowError):
    """Raised when Item.answer is read on an item without exactly one answer."""
    pass
