# ---
# File: app/backend/schema.py
# Purpose: Strict parsing of backend responses into canonical models.
#          Lists must be JSON arrays and single resources JSON objects;
#          anything else raises BackendSchemaError instead of defaulting.
# ---

from typing import List

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from app.core.errors import BackendSchemaError


def parse_list(model, payload, resource: str) -> list:
    if not isinstance(payload, list):
        raise BackendSchemaError(
            f"Expected a JSON array of {resource}, got {type(payload).__name__}"
        )
    try:
        return TypeAdapter(List[model]).validate_python(payload)
    except PydanticValidationError as exc:
        raise BackendSchemaError(f"Invalid {resource} list from backend: {exc}") from exc


def parse_item(model, payload, resource: str):
    if not isinstance(payload, dict):
        raise BackendSchemaError(
            f"Expected a JSON object for {resource}, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise BackendSchemaError(f"Invalid {resource} from backend: {exc}") from exc
