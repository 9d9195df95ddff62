from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# Dates are stored naive, in UTC; an offset on input is converted, not dropped
UtcDateTime = Annotated[datetime, AfterValidator(_as_naive_utc)]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
        "str_strip_whitespace": True,
    }
