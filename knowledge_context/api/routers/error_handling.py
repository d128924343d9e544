"""
Pipeline error handling utilities.

Provides a decorator for consistent error handling across knowledge,
embedding and context endpoints.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from knowledge_context.core.exceptions import (
    CacheError,
    EmbeddingError,
    KnowledgePipelineException,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_pipeline_errors(func: F) -> F:
    """
    Decorator to transform pipeline exceptions into HTTPExceptions.

    This centralizes:
    - Logging of errors with context (endpoint, error details)
    - Mapping domain exceptions to HTTP status codes
    - Ensuring uniform error response formats
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        endpoint = func.__name__
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except ValidationError as e:
            logger.warning(
                "Invalid request",
                extra={"endpoint": endpoint, "error": e.message, "details": e.details},
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except NotFoundError as e:
            logger.warning(
                "Resource not found",
                extra={"endpoint": endpoint, "error": e.message, "details": e.details},
            )
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except EmbeddingError as e:
            logger.error(
                "Embedding provider failure",
                extra={"endpoint": endpoint, "error": e.message, "details": e.details},
            )
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

        except CacheError as e:
            logger.error(
                "Cache unavailable",
                extra={"endpoint": endpoint, "error": e.message},
            )
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

        except KnowledgePipelineException as e:
            logger.exception(
                "Pipeline operation failed",
                extra={"endpoint": endpoint, "error": e.message, "details": e.details},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred: {e.message}",
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure",
                extra={"endpoint": endpoint, "error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred: {str(e)}",
            )

    return wrapper  # type: ignore
