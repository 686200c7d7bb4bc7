"""
User-Friendly Error Handler.

Converts collaborator and page errors into short notification messages.
"""

from typing import Dict, Optional
import logging

from .exceptions import PageLoadError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to add item to cart"


def format_user_friendly_error(
    error: Exception,
    context: str = "general",
    technical_details: Optional[str] = None
) -> Dict:
    """
    Convert technical error to user-friendly message.

    Args:
        error: The exception that occurred
        context: Where it occurred (e.g. "storage", "page")
        technical_details: Additional technical information

    Returns:
        {
            "message": str,      # text for the notification sink
            "kind": str,         # notification kind ("error" / "info")
            "technical": str,
            "can_retry": bool
        }
    """
    error_str = str(error)

    result = None
    for error_type, friendly_error in TYPE_MAPPINGS:
        if isinstance(error, error_type):
            result = dict(friendly_error)
            break
    if result is None:
        for pattern, friendly_error in ERROR_MAPPINGS.items():
            if pattern.lower() in error_str.lower():
                result = dict(friendly_error)
                break

    if result is None:
        result = {
            "message": DEFAULT_FAILURE_MESSAGE,
            "kind": "error",
            "can_retry": True,
        }
    result["technical"] = technical_details or error_str
    logger.debug(f"[{context}] mapped error to: {result['message']}")
    return result


# Exception type -> user-friendly info
TYPE_MAPPINGS = [
    (StorageError, {
        "message": DEFAULT_FAILURE_MESSAGE,
        "kind": "error",
        "can_retry": True,
    }),
    (PageLoadError, {
        "message": "Could not read this page",
        "kind": "error",
        "can_retry": True,
    }),
]

# Error text pattern -> user-friendly info
ERROR_MAPPINGS = {
    "quota": {
        "message": "Cart storage is full, remove some items",
        "kind": "error",
        "can_retry": False,
    },
    "timeout": {
        "message": "The page took too long to respond",
        "kind": "error",
        "can_retry": True,
    },
}
