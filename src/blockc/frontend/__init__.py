"""Frontend package - type inference and validation of block trees."""

from .type_inference import (
    arithmetic_compatible,
    build_variable_type_map,
    comparison_compatible,
    infer_value_type,
)
from .validate import (
    ValidationError,
    ValidationResult,
    Validator,
    has_validation_errors,
    validate_blocks,
    variable_error,
)
