"""Shared schema base.

JSON keys are camelCase on the wire; Python attributes stay snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

_ANY = TypeAdapter(Any)


def to_jsonable(value: Any) -> Any:
    """JSON-safe form of models, lists of models and public user views."""
    return _ANY.dump_python(value, mode="json", by_alias=True)


class ApiModel(BaseModel):
    """Base for every request/response model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """Dump with camelCase keys and JSON-safe values (UUIDs, datetimes)."""
        return self.model_dump(mode="json", by_alias=True)
