from datetime import datetime, timezone
from typing import Annotated, Any, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Naive UTC timestamp, the form both storage backends hand back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CamelModel(BaseModel):
    """JSON uses camelCase (projectId, imageData, createdAt); Python uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def reject_null(v: Any) -> Any:
    # Only runs for values that were supplied; omitted fields keep their default
    if v is None:
        raise ValueError("must not be null")
    return v


def reject_blank(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        raise ValueError("must not be blank")
    return v


T = TypeVar("T")

# Upper bound of a 32-bit signed INTEGER primary key
MAX_ID = 2**31 - 1

RecordId = Annotated[int, Field(gt=0, le=MAX_ID)]

NonBlankStr = Annotated[str, Field(min_length=1), AfterValidator(reject_blank)]

# Optional in the partial-update sense: may be omitted, may not be sent as null
Omittable = Annotated[Optional[T], AfterValidator(reject_null)]
