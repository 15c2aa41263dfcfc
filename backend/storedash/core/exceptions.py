"""
Domain exceptions.

Validation failures and ownership mismatches are deliberately folded into
the not-found branch so callers cannot discover records in other stores.
"""


class StoreDashError(Exception):
    """Base class for all domain errors."""


class NotFoundError(StoreDashError):
    """Requested record is absent or not visible in the current store context."""


class OrderNotFoundError(NotFoundError):
    def __init__(self, message: str = "Order not found") -> None:
        super().__init__(message)


class StoreNotFoundError(NotFoundError):
    def __init__(self, message: str = "Store not found") -> None:
        super().__init__(message)


class ValidationError(NotFoundError):
    """A required identifier is missing."""


class BackendError(StoreDashError):
    """The document backend failed (network, query, or timeout)."""


class DocumentMissingError(StoreDashError):
    """An update targeted a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id} does not exist")
        self.collection = collection
        self.doc_id = doc_id


class OrderParseError(StoreDashError):
    """A backend record cannot be represented as an Order."""

    def __init__(self, doc_id: str, reason: str) -> None:
        super().__init__(f"Order {doc_id} is malformed: {reason}")
        self.doc_id = doc_id
        self.reason = reason


class ProductNotFoundError(NotFoundError):
    def __init__(self, message: str = "Product not found") -> None:
        super().__init__(message)


class CollectionNotFoundError(NotFoundError):
    def __init__(self, message: str = "Collection not found") -> None:
        super().__init__(message)


class InvalidChangeError(StoreDashError):
    """A write would leave a record in an invalid state."""
