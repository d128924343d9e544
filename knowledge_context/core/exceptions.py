"""
Exception hierarchy for the knowledge pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgePipelineException(Exception):
    """Base exception for all knowledge pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgePipelineException):
    """Raised when input validation fails. No partial work is performed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(KnowledgePipelineException):
    """Raised when a referenced resource does not exist."""

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Resource kind (document, knowledge base, ...)
            resource_id: Identifier that failed to resolve
            details: Additional context
        """
        details = details or {}
        details[f"{resource.replace(' ', '_')}_id"] = str(resource_id)
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found: {resource_id}", details)


class DocumentNotFoundError(NotFoundError):
    """Raised when a knowledge document cannot be found."""

    def __init__(self, document_id: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__("document", document_id, details)


class KnowledgeBaseNotFoundError(NotFoundError):
    """Raised when a knowledge base scope cannot be found."""

    def __init__(self, knowledge_base_id: Any, details: dict[str, Any] | None = None) -> None:
        super().__init__("knowledge base", knowledge_base_id, details)


class DocumentProcessingError(KnowledgePipelineException):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class ChunkingError(DocumentProcessingError):
    """Raised when a document cannot be split into chunks."""

    pass


class EmbeddingError(DocumentProcessingError):
    """Raised when the embedding provider fails or returns unusable vectors."""

    pass


class VectorStoreError(KnowledgePipelineException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (search_chunks, search_nodes)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class CacheError(KnowledgePipelineException):
    """Raised when the shared cache cannot be reached (non-critical)."""

    pass


class TaskDispatchError(KnowledgePipelineException):
    """Raised when a background task cannot be submitted to the broker."""

    pass
