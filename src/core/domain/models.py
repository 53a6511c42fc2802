"""Domain models (Pydantic v2).

Resource records (posts, pages, categories, media) stay plain dicts: the
client only reads a handful of their keys and passes the rest through.
The models here describe what the client *synthesizes* itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

Record = dict[str, Any]


class ImageDescriptor(BaseModel):
    """Image derived from a WordPress media item.

    Attached to posts/pages under the `image` key (as a dict) and returned
    by the image listings.
    """

    model_config = ConfigDict(extra="ignore")

    id: int | None = Field(
        default=None,
        description="Media id (None for the empty descriptor).",
    )
    url: str = Field(
        default="",
        description="Full-size image URL.",
    )
    title: str = Field(
        default="",
        description="Rendered media title.",
    )
    alt: str = Field(
        default="",
        description="Alternative text.",
    )
    caption: str = Field(
        default="",
        description="Caption without <p> markup, or the origin of a quoted source link.",
    )

    @classmethod
    def empty(cls) -> "ImageDescriptor":
        """Descriptor used when a media item cannot be resolved."""

        return cls()

    def is_empty(self) -> bool:
        return self.id is None and not self.url


@dataclass
class ApiPage:
    """One page of a REST collection plus the pagination headers."""

    records: list[Record] = field(default_factory=list)
    total: int | None = None
    total_pages: int | None = None
