"""Custom exception hierarchy for postcorpus.

Every error raised across the service boundary is a ``CorpusError`` with one
of five kinds. Storage-engine exceptions never escape; repositories translate
them first (see ``repositories.base.translate_storage_errors``).
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Coarse error classes the transport layer maps to its own statuses."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CORRUPT = "corrupt"
    VALIDATION = "validation"
    UNAVAILABLE = "unavailable"
    # Raised by the identity collaborator, not by the core.
    UNAUTHORIZED = "unauthorized"


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Post errors
    POST_NOT_FOUND = "POST_NOT_FOUND"
    SLUG_CONFLICT = "SLUG_CONFLICT"
    OWNERSHIP_CONFLICT = "OWNERSHIP_CONFLICT"
    TAG_NOT_FOUND = "TAG_NOT_FOUND"

    # Version store errors
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    CORRUPT_CONTENT = "CORRUPT_CONTENT"

    # Category errors
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    CATEGORY_CONFLICT = "CATEGORY_CONFLICT"
    CATEGORY_CYCLE = "CATEGORY_CYCLE"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Storage availability
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"


class CorpusError(Exception):
    """
    Base exception for all postcorpus errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - Error kind from the taxonomy
    - Suggested HTTP status code for the transport layer
    - Optional additional details
    """

    kind: ErrorKind = ErrorKind.UNAVAILABLE

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, kind, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details
        }


class PostNotFoundError(CorpusError):
    """Post unknown, or not owned by the caller."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, ref: str):
        super().__init__(
            f"Post not found: {ref}",
            ErrorCode.POST_NOT_FOUND,
            status_code=404,
            details={"ref": ref}
        )


class VersionNotFoundError(CorpusError):
    """No version with this hash under the namespace path."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, namespace_path: str, content_hash: str):
        super().__init__(
            f"Version not found: {content_hash}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"path": namespace_path, "hash": content_hash}
        )


class TagNotFoundError(CorpusError):
    """The post does not carry this tag."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, post_uuid: str, tag: str):
        super().__init__(
            f"Tag not found on post: {tag}",
            ErrorCode.TAG_NOT_FOUND,
            status_code=404,
            details={"uuid": post_uuid, "tag": tag}
        )


class CategoryNotFoundError(CorpusError):
    """Category does not exist for the owner."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str):
        super().__init__(
            f"Category not found: {name}",
            ErrorCode.CATEGORY_NOT_FOUND,
            status_code=404,
            details={"name": name}
        )


class OwnershipConflictError(CorpusError):
    """The post exists but belongs to a different owner."""

    kind = ErrorKind.CONFLICT

    def __init__(self, post_uuid: str, owner_id: str):
        super().__init__(
            f"Post {post_uuid} is not owned by {owner_id}",
            ErrorCode.OWNERSHIP_CONFLICT,
            status_code=409,
            details={"uuid": post_uuid, "owner_id": owner_id}
        )


class SlugConflictError(CorpusError):
    """Another post of the same owner already uses this slug."""

    kind = ErrorKind.CONFLICT

    def __init__(self, slug: str):
        super().__init__(
            f"Slug already in use: {slug}",
            ErrorCode.SLUG_CONFLICT,
            status_code=409,
            details={"slug": slug}
        )


class CategoryConflictError(CorpusError):
    """Category name taken, or category still referenced."""

    kind = ErrorKind.CONFLICT

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(
            message or f"Category already exists: {name}",
            ErrorCode.CATEGORY_CONFLICT,
            status_code=409,
            details={"name": name}
        )


class CorruptContentError(CorpusError):
    """Stored payload does not match its content hash, or a pointer dangles.

    Never repaired automatically; requires out-of-band intervention.
    """

    kind = ErrorKind.CORRUPT

    def __init__(self, namespace_path: str, content_hash: str, reason: str = "payload does not match its hash"):
        super().__init__(
            f"Corrupt content at {namespace_path}@{content_hash}: {reason}",
            ErrorCode.CORRUPT_CONTENT,
            status_code=500,
            details={"path": namespace_path, "hash": content_hash}
        )


class CategoryCycleError(CorpusError):
    """Category parent links loop back on themselves."""

    kind = ErrorKind.CORRUPT

    def __init__(self, owner_id: str, name: str):
        super().__init__(
            f"Category hierarchy contains a cycle at: {name}",
            ErrorCode.CATEGORY_CYCLE,
            status_code=500,
            details={"owner_id": owner_id, "name": name}
        )


class ValidationError(CorpusError):
    """Validation failed for user input."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class UnavailableError(CorpusError):
    """Backing store transiently unreachable. The only retryable kind."""

    kind = ErrorKind.UNAVAILABLE

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = type(original_error).__name__

        super().__init__(
            message,
            ErrorCode.STORAGE_UNAVAILABLE,
            status_code=503,
            details=details
        )


class AuthenticationError(CorpusError):
    """Request lacks valid authentication credentials."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )
