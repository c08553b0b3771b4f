from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .match import NormalizedMatch


class MatchesResponse(BaseModel):
    """Body of a successful ``GET /{gender}/{date}``."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    gender: str
    live: List[NormalizedMatch] = []
    upcoming: List[NormalizedMatch] = []
    completed: List[NormalizedMatch] = []
    last_updated: str = Field(..., alias="lastUpdated")

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    """Error body; server errors also echo the request and empty buckets."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    message: Optional[str] = None
    date: Optional[str] = None
    gender: Optional[str] = None
    live: Optional[List[NormalizedMatch]] = None
    upcoming: Optional[List[NormalizedMatch]] = None
    completed: Optional[List[NormalizedMatch]] = None
    last_updated: Optional[str] = Field(None, alias="lastUpdated")

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
