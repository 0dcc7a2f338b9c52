from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class Source(BaseModel):
    name: str = Field(description="Provider name")
    url: Optional[str] = Field(default=None, description="Source URL")


class ToolEnvelope(BaseModel):
    data: Any = Field(description="Operation result data")
    sources: List[Source] = Field(default_factory=list, description="Data sources used")
    fetched_at: datetime = Field(description="When data was fetched")
    cached: bool = Field(default=False, description="Whether result was served from cache")
    latency_ms: Optional[int] = Field(default=None, description="Operation latency in milliseconds")
    warnings: List[str] = Field(default_factory=list, description="Any warnings or issues")

    @property
    def ok(self) -> bool:
        return self.data is not None

    class Config:
        arbitrary_types_allowed = True
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }
