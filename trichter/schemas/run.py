from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RunDataSchema(BaseModel):
    duration: float
    rate: float
    volume: float

    model_config = ConfigDict(from_attributes=True)


class CreateRunRequest(BaseModel):
    duration: float = Field(gt=0)
    rate: float = Field(gt=0)
    volume: float = Field(gt=0)
    user_id: str | None = Field(default=None, alias="userId", max_length=120)
    image: str | None = Field(default=None, max_length=500)

    model_config = ConfigDict(populate_by_name=True)


class UpdateRunUserRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1, max_length=120)

    model_config = ConfigDict(populate_by_name=True)


class RunResponse(BaseModel):
    id: UUID
    data: RunDataSchema
    image: str
    user_id: str | None = Field(serialization_alias="userId")
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)
