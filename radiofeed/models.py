from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Country(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str
    code: str = Field(alias="iso_3166_1")


class Station(BaseModel):
    """One directory entry. Only id, name and url are mandatory upstream."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str = Field(alias="stationuuid")
    name: str
    url: str
    url_resolved: str = ""
    favicon: str = ""
    tags: str = ""
    bitrate: int = 0
    hls: int = 0

    # The directory sends null for a handful of optional fields on older records.
    @field_validator("url_resolved", "favicon", "tags", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("bitrate", "hls", mode="before")
    @classmethod
    def none_to_zero(cls, value):
        return 0 if value is None else value


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    display_name: str
    members: List[Station]


class SourceKind(str, Enum):
    PROGRESSIVE = "progressive"
    HLS = "hls"


class StreamDescriptor(BaseModel):
    """What a station entry hands to the player before anything is fetched."""

    model_config = ConfigDict(frozen=True)

    url: str
    kind: SourceKind = SourceKind.PROGRESSIVE
    bitrate_label: Optional[str] = None


class PlayableSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    kind: SourceKind
    bitrate_label: Optional[str] = None
    live: bool = True
