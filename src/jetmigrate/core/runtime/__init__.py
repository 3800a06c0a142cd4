"""Runtime helpers for the command line entry point."""

from .cli_errors import (
    CONFIG_ERROR,
    EXIT_FAILURE,
    INTERNAL_ERROR,
    LISTING_ERROR,
    CliFailure,
    fail,
    failure_for,
)

__all__ = [
    "CONFIG_ERROR",
    "EXIT_FAILURE",
    "INTERNAL_ERROR",
    "LISTING_ERROR",
    "CliFailure",
    "fail",
    "failure_for",
]
