from fastapi import HTTPException

from ..exceptions import (
    ConfigurationError,
    ConversationClosedError,
    ConversationNotFoundError,
    OpenAIAPIError,
    OpenAIRateLimitError,
)


def handle_error(error: Exception) -> HTTPException:
    """Handle application errors and return appropriate HTTP exceptions."""
    if isinstance(error, HTTPException):
        return error
    elif isinstance(error, ConversationNotFoundError):
        return HTTPException(
            status_code=404,
            detail="Conversation not found"
        )
    elif isinstance(error, ConversationClosedError):
        return HTTPException(
            status_code=409,
            detail="Conversation is closed"
        )
    elif isinstance(error, OpenAIRateLimitError):
        return HTTPException(
            status_code=429,
            detail="Rate limit exceeded"
        )
    elif isinstance(error, OpenAIAPIError):
        return HTTPException(
            status_code=502,
            detail="Model provider error"
        )
    elif isinstance(error, ConfigurationError):
        return HTTPException(
            status_code=503,
            detail="Service is not configured"
        )
    elif isinstance(error, ValueError):
        return HTTPException(
            status_code=422,
            detail=str(error)
        )
    else:
        return HTTPException(
            status_code=500,
            detail="Unexpected error"
        )


def validate_content(content) -> None:
    """Validate a user message."""
    if not content or not isinstance(content, str) or not content.strip():
        raise HTTPException(
            status_code=422,
            detail="Message cannot be empty"
        )
