"""Base pydantic model for request/response bodies.

Python attributes are snake_case; the JSON wire format is camelCase
(`birthDate`, `expirationDate`, `userId`). Both spellings are accepted on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_cache(self) -> dict[str, Any]:
        """JSON-safe dict in wire format, as stored in the projection cache."""
        return self.model_dump(mode="json", by_alias=True)
