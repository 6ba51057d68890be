# schemaflow/validation/property.py

from functools import lru_cache
from typing import Any, List, Optional
import re

from schemaflow.core.models import PropertySchema, PropertyType, ValidationError, ValueKind, kind_of
from schemaflow.utils.logger import get_logger

logger = get_logger("validation")

# Type tags with no rule of their own: any present value passes.
PASS_THROUGH_TYPES = {PropertyType.OBJECT.value, PropertyType.SELECT.value, PropertyType.MULTISELECT.value}


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as e:
        logger.warning("Invalid pattern %r in property schema: %s", pattern, e)
        return None


def matches_pattern(pattern: Any, value: str) -> bool:
    """
    Full-string match. A pattern that does not compile never matches,
    so a broken schema fails validation instead of silently passing.
    """
    if not isinstance(pattern, str):
        return False
    rx = _compile(pattern)
    return rx is not None and rx.fullmatch(value) is not None


def display(v: Any) -> str:
    """Render a constraint value for messages (1.0 -> '1', True -> 'true')."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if v is None:
        return ""
    return str(v)


def validate_property(name: str, value: Any, schema: PropertySchema) -> List[ValidationError]:
    """
    Check one value against one property schema.

    Constraint fields that do not apply to the schema's type are ignored.
    All errors are collected; array items are reported as `name[i]`.
    """
    errors: List[ValidationError] = []
    kind = kind_of(value)
    ptype = schema.type

    if ptype == PropertyType.STRING.value:
        if kind is not ValueKind.STRING:
            errors.append(ValidationError(name, "Must be a string", value))
            return errors
        if schema.pattern and not matches_pattern(schema.pattern, value):
            errors.append(ValidationError(name, "Does not match required pattern", value))
        if schema.enum is not None and value not in schema.enum:
            allowed = ", ".join(display(v) for v in schema.enum)
            errors.append(ValidationError(name, f"Must be one of: {allowed}", value))

    elif ptype == PropertyType.NUMBER.value:
        if kind is not ValueKind.NUMBER:
            errors.append(ValidationError(name, "Must be a number", value))
            return errors
        if kind_of(schema.minimum) is ValueKind.NUMBER and value < schema.minimum:
            errors.append(ValidationError(name, f"Must be >= {display(schema.minimum)}", value))
        if kind_of(schema.maximum) is ValueKind.NUMBER and value > schema.maximum:
            errors.append(ValidationError(name, f"Must be <= {display(schema.maximum)}", value))

    elif ptype == PropertyType.BOOLEAN.value:
        if kind is not ValueKind.BOOLEAN:
            errors.append(ValidationError(name, "Must be a boolean", value))

    elif ptype == PropertyType.ARRAY.value:
        if kind is not ValueKind.ARRAY:
            errors.append(ValidationError(name, "Must be an array", value))
            return errors
        if schema.items is not None:
            for index, item in enumerate(value):
                errors.extend(validate_property(f"{name}[{index}]", item, schema.items))

    elif ptype in PASS_THROUGH_TYPES:
        # Known gap: no deep validation for object/select/multiselect values.
        pass

    # Unknown type tags carry no rules.
    return errors
