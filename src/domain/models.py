from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, ConfigDict

RAW_SOURCE_FIELD = "rawSourceBase64"


class PageData(BaseModel):
    """
    Metadata record produced for a single documentation page during a generation pass.
    The source attacher augments it in place with an encoded copy of the page source.
    """
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    relative_path: str = Field(..., min_length=1, description="Logical path of the page relative to the content root")
    title: Optional[str] = Field(default=None, description="Page title, when the generator supplies one")
    frontmatter: Dict[str, Any] = Field(default_factory=dict, description="Frontmatter passed through from the generator")
    raw_source_base64: Optional[str] = Field(
        default=None,
        alias=RAW_SOURCE_FIELD,
        description="Base64 text of the page's original source bytes; unset when no source file exists",
    )

    def to_payload(self) -> Dict[str, Any]:
        # Unset fields are omitted rather than emitted as null or "".
        return self.model_dump(by_alias=True, exclude_none=True)


class StarMetric(BaseModel):
    """
    Immutable star count for a repository as seen by the metric provider.
    A count of None means the provider could not tell.
    """
    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., description="owner/name of the repository")
    count: Optional[int] = Field(default=None, ge=0, description="Total number of stargazers, if known")
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the provider obtained the value",
    )

    @property
    def is_displayable(self) -> bool:
        # Zero and unknown are both treated as "do not show".
        return bool(self.count)

    @classmethod
    def unknown(cls, repository: str) -> "StarMetric":
        return cls(repository=repository, count=None)


class VideoState(str, Enum):
    PAUSED = "paused"
    PLAYING = "playing"
