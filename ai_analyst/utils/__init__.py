"""
Utils package initialization.
"""
from .error_handling import handle_error, validate_content

__all__ = [
    'handle_error',
    'validate_content'
]
