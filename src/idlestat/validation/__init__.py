"""
Validation and error handling for the idlestat package.

This module provides the engine's exception hierarchy and input validation
with consistent error reporting across the application.
"""

from .exceptions import (
    AllocationFailure,
    ErrorSeverity,
    IdlestatError,
    InconsistentBaseline,
    MalformedTopologyError,
    StructuralInputError,
    TraceFormatError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
)

from .validators import (
    validate_display_flags,
    validate_enum_choice,
    validate_filename,
    validate_positive_integer,
)

__all__ = [
    # Exceptions
    "AllocationFailure",
    "ErrorSeverity",
    "IdlestatError",
    "InconsistentBaseline",
    "MalformedTopologyError",
    "StructuralInputError",
    "TraceFormatError",
    "ValidationError",
    # Handlers
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_file_error",
    # Validators
    "validate_display_flags",
    "validate_enum_choice",
    "validate_filename",
    "validate_positive_integer",
]
