"""
Custom exceptions for the document store.
"""


class DocStoreError(Exception):
    """Base class for all document store errors."""


class InvalidArgumentError(DocStoreError, TypeError):
    """
    Raised when an argument has the wrong shape or type.

    Always raised before any file is touched, so the failed call has
    no partial effect.
    """

    def __init__(self, argument: str, expected: str, actual: object):
        """
        Initialize argument error.

        Args:
            argument: Name of the offending argument.
            expected: Human readable description of the accepted shape.
            actual: The value that was passed.
        """
        self.argument = argument
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Argument of {argument} must be {expected}, got {type(actual).__name__}"
        )


class InvalidDocumentError(InvalidArgumentError):
    """Raised when a document (or a batch of documents) is not a plain object."""


class InvalidQueryError(InvalidArgumentError):
    """Raised when a query or projection is not a plain object."""


class InvalidIndexSpecificationError(InvalidArgumentError):
    """Raised when an index specification is malformed."""


class InvalidNameError(DocStoreError, ValueError):
    """Raised when a database or collection name fails validation."""

    def __init__(self, kind: str, name: object, reason: str):
        self.kind = kind
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid {kind} name {name!r}: {reason}")


class InvalidIdentifierError(DocStoreError, ValueError):
    """Raised when an object id is not a 24 character lowercase hex string."""

    def __init__(self, value: object, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid object id {value!r}: {reason}")
