"""
Errors raised by the object gateway.

Two kinds matter to callers: the request was bad (never retry), or the
storage service / local filesystem failed (original cause is chained).
"""


class ObjectGatewayError(Exception):
    """Base class for all gateway errors."""
    pass


class InvalidArgumentError(ObjectGatewayError):
    """Raised when caller-supplied input is malformed or violates a precondition."""
    pass


class StorageOperationFailed(ObjectGatewayError):
    """Raised when the storage service or local file I/O fails."""
    pass


class ObjectNotFoundError(StorageOperationFailed):
    """Raised when the storage service reports the bucket or object absent."""
    pass
