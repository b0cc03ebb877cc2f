"""
Failure classification for a single provider's outcome inside a batch.
Used for structured logging and metrics labels; never changes control flow.
"""
from enum import Enum


class FailureType(str, Enum):
    PROVIDER_FAILURE = "provider_failure"  # provider returned success=False
    UNEXPECTED_FAULT = "unexpected_fault"  # provider raised despite its contract
    TIMEOUT = "timeout"  # batch deadline passed before the provider settled


UNEXPECTED_ERROR_MESSAGE = "Unexpected error occurred"


def timeout_message(seconds: float) -> str:
    return f"Generation timed out after {seconds:g}s"
