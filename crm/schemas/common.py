"""Shared response envelope schemas."""

from datetime import datetime
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base for schemas exchanged as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope shared by every endpoint."""

    success: bool = True
    data: DataT | None = None
    message: str | None = None


class HealthStatus(BaseModel):
    """Reachability of each datastore."""

    status: Literal["healthy", "unhealthy"]
    mongodb: bool
    postgresql: bool
    timestamp: datetime
