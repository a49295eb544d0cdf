"""Base class for entities: mutable, identified by `id`, validated on assignment."""

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """An object with identity that outlives changes to its attributes."""

    model_config = ConfigDict(validate_assignment=True)
