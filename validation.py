from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


@dataclass
class ValidationSuccess(Generic[M]):
    value: M


@dataclass
class ValidationFailure:
    errors: List[Dict[str, Any]] = field(default_factory=list)


ValidationOutcome = Union[ValidationSuccess[M], ValidationFailure]


def _error_entry(error: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "field": ".".join(str(part) for part in error.get("loc", ())),
        "message": error.get("msg", ""),
        "type": error.get("type", ""),
    }


def validate(model: Type[M], payload: Any) -> ValidationOutcome:
    """
    Validate a raw JSON payload against ``model``.

    The pydantic error never leaves this function: callers branch on the
    returned ``ValidationSuccess`` / ``ValidationFailure``.
    """
    if not isinstance(payload, dict):
        return ValidationFailure(
            errors=[{"field": "", "message": "Expected a JSON object", "type": "object_type"}]
        )

    try:
        return ValidationSuccess(value=model.model_validate(payload))
    except ValidationError as e:
        return ValidationFailure(errors=[_error_entry(err) for err in e.errors()])
