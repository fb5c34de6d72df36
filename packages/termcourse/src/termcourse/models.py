"""
Forum payload models.

Only the fields the renderer reads are declared; everything else in the API
JSON is ignored.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

LIKE_ACTION_ID = 2


class PostAction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    count: int = 0
    acted: bool = False
    can_act: bool = False


class Post(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    username: str = ""
    raw: str = ""
    post_number: int = 0
    actions_summary: list[PostAction] = Field(default_factory=list)

    @field_validator("username", "raw", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def liked(self) -> bool:
        return any(a.id == LIKE_ACTION_ID and a.acted for a in self.actions_summary)


class TopicSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""
    posts_count: int = 0

    @property
    def replies(self) -> int:
        return max(self.posts_count - 1, 0)


class Topic(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""
    posts: list[Post] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Topic":
        """Build from a /t/{id}.json payload (posts under post_stream)."""
        stream = data.get("post_stream") or {}
        return cls.model_validate({**data, "posts": stream.get("posts") or []})


def topics_from_list(data: dict[str, Any]) -> list[TopicSummary]:
    """Parse the topics of a /latest.json style payload."""
    topics = (data.get("topic_list") or {}).get("topics") or []
    return [TopicSummary.model_validate(t) for t in topics]
