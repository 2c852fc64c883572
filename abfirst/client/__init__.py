"""Client - transport and assignment resolution"""
from .http import AbTestsHttpClient, FetchError, Ok, Err, Result
from .assignments import AssignmentClient, is_preview_query

__all__ = [
    "AbTestsHttpClient",
    "FetchError",
    "Ok",
    "Err",
    "Result",
    "AssignmentClient",
    "is_preview_query",
]
