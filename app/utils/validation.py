import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple, Type, Union
from pydantic import BaseModel, ValidationError

MIN_PASSWORD_LENGTH = 6

# field name, or (field name, pydantic error type), to the message reported for it
ErrorMessages = Dict[Union[str, Tuple[str, str]], str]

def collect_errors(model: Type[BaseModel], payload, messages: ErrorMessages) -> Tuple[Optional[BaseModel], List[str], Set[str]]:
    """Validate ``payload`` against ``model`` without raising.

    Returns the parsed model (None when anything failed), one message per
    failing field in field declaration order, and the names of the failing
    fields so callers can skip database checks on values that are malformed.
    """
    try:
        return model.model_validate(payload), [], set()
    except ValidationError as exc:
        errors: List[str] = []
        failed: Set[str] = set()
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            failed.add(field)
            message = messages.get((field, error["type"])) or messages.get(field) or error["msg"]
            if message not in errors:
                errors.append(message)
        return None, errors, failed

def canonical_uuid(value) -> str:
    return str(uuid.UUID(str(value)))

def parse_iso_datetime(value) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; aware values are normalised to naive UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
