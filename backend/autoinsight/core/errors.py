"""
Analysis exceptions and user-facing error messages.
"""
from typing import Dict, Optional


class AnalysisError(Exception):
    """Base class for errors raised by the analysis engine."""


class EmptyDatasetError(AnalysisError):
    """Raised when profiling is requested for a dataset without rows."""


class DatasetTooLargeError(AnalysisError):
    """Raised when a dataset exceeds the configured row limit."""


class CollaboratorError(AnalysisError):
    """Raised by a narrative collaborator on network, timeout or service failure."""


# Error codes
class ErrorCodes:
    EMPTY_DATASET = "EMPTY_DATASET"
    DATASET_TOO_LARGE = "DATASET_TOO_LARGE"
    DATASET_NOT_FOUND = "DATASET_NOT_FOUND"
    INVALID_DATASET = "INVALID_DATASET"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.EMPTY_DATASET: {
        "message": "There is nothing to analyze yet",
        "detail": "The dataset you sent has no rows, so we couldn't build a profile, charts or insights.",
        "suggestion": "Send at least one record. Each record should map column names to values."
    },
    ErrorCodes.DATASET_TOO_LARGE: {
        "message": "That dataset is a bit too large",
        "detail": "The dataset has more rows than we analyze in a single request.",
        "suggestion": "Try a representative sample of your rows. Most patterns show up in a few thousand records."
    },
    ErrorCodes.DATASET_NOT_FOUND: {
        "message": "We couldn't find that analysis",
        "detail": "The dataset you asked to refresh is no longer cached, or the id is wrong.",
        "suggestion": "Run the analysis again to get a fresh dataset id."
    },
    ErrorCodes.INVALID_DATASET: {
        "message": "We couldn't read those records",
        "detail": "Every record must be an object mapping column names to scalar values.",
        "suggestion": "Check that the request body looks like {\"rows\": [{\"column\": value, ...}, ...]}."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Whoa there! Slow down a bit",
        "detail": "You're sending analyses faster than we can keep up! We limit requests to keep the service fast for everyone.",
        "suggestion": "Wait about a minute and try again. Cached analyses can still be refreshed."
    },
    ErrorCodes.TIMEOUT: {
        "message": "This is taking longer than expected",
        "detail": "The analysis did not finish within the request time limit.",
        "suggestion": "Try a smaller sample of your data, or split it and analyze the parts separately."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting. Don't worry - it's not your fault!",
        "suggestion": "Give it another try in a moment. If the problem keeps happening, try a different dataset."
    }
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with code, message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response
