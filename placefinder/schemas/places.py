import uuid

from pydantic import BaseModel, Field


class Place(BaseModel):
    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    address: str
    rating: float | None = Field(default=None, ge=1.0, le=5.0)
    open_now: bool | None = None  # None: unknown
    distance_km: float | None = Field(default=None, ge=0.0)
