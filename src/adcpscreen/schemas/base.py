"""Base Pydantic model with strict defaults for adcpscreen configs.

All config schemas inherit from this base to ensure consistent
validation behavior across parameter, user, CLI, internal and
per-configuration option models.
"""

from pydantic import BaseModel, ConfigDict


class ScreenBaseModel(BaseModel):
    """Base model for all adcpscreen configuration schemas.

    Enforces strict validation:
    - No extra fields allowed
    - Validates assignments after initialization
    - Stores enum values rather than members
    - Strips whitespace from strings
    """

    model_config = ConfigDict(
        extra='forbid',           # Reject unknown fields
        validate_assignment=True, # Validate on field mutation
        use_enum_values=True,     # Convert enums to values
        str_strip_whitespace=True,# Strip whitespace from strings
    )
