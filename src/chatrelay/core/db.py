from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pymongo.asynchronous.cursor import AsyncCursor


class MongoModel(BaseModel):
    """Document stored with a UUID `_id`, exposed to clients as `id`.

    The Mongo client is configured with the standard UUID representation, so
    ids round-trip as native UUID values.
    """

    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Dump for insertion, with `id` renamed to `_id`."""
        data = self.model_dump()
        data["_id"] = data.pop("id")
        return data

    @classmethod
    def from_doc(cls, doc: dict[str, Any] | None) -> Self | None:
        """Validate a `find_one` result, passing through a missing document as None."""
        return cls.model_validate(doc) if doc is not None else None

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        return [cls.model_validate(item) async for item in cursor]
