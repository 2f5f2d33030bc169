from .errors import ValidationError, ValidationIssue
from .resource_validation import validate_resource, warn_on_invalid_resource

__all__ = ["ValidationError", "ValidationIssue", "validate_resource", "warn_on_invalid_resource"]
