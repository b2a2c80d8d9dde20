"""Document validation with a full violation report.

`validate_document(schema, payload)` checks a JSON-like payload against one
of the request schemas and returns every violation, not just the first.
Each violation carries a dotted field path (`details[0].units[1].unitNumber`)
and a readable message. The HTTP layer turns the same list into the
`details` of a 400 ErrorResponse.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ValidationError


@dataclass(frozen=True)
class Violation:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def format_location(loc: Sequence[Any]) -> str:
    """("details", 0, "quantity") → "details[0].quantity"."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def violations_from_errors(errors: Iterable[dict], strip_prefix: tuple = ()) -> list[Violation]:
    """Convert pydantic error dicts into violations.

    `strip_prefix` drops leading location parts such as FastAPI's "body".
    """
    result = []
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if strip_prefix and loc[: len(strip_prefix)] == strip_prefix:
            loc = loc[len(strip_prefix):]
        result.append(Violation(path=format_location(loc), message=error["msg"]))
    return result


def validate_document(schema: type[BaseModel], payload: Any) -> list[Violation]:
    """Return all violations of `payload` against `schema` (empty when valid)."""
    try:
        schema.model_validate(payload)
    except ValidationError as exc:
        return violations_from_errors(exc.errors())
    return []
