"""Data models for the Instagram publish pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from socials_publisher.constants import GRAPH_API_VERSION_DEFAULT


class TagPosition(BaseModel):
    """Optional tag coordinates, both in the 0-1 range."""

    x: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    y: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class UserTag(TagPosition):
    """A user tag. Entries without a username are dropped on submit."""

    username: Optional[str] = None


class ProductTag(TagPosition):
    """A product tag. Entries without a product_id are dropped on submit."""

    product_id: Optional[str] = None


def _unwrap_collection(value: Any, key: str) -> Any:
    """Accept both ``[...]`` and the ``{key: [...]}`` collection shape."""
    if value is None:
        return []
    if isinstance(value, dict):
        return value.get(key) or []
    return value


class AdditionalFields(BaseModel):
    """Optional fields sent with the container creation request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    alt_text: str = Field(default="", alias="altText")
    location_id: Optional[str] = Field(default=None, alias="locationId")
    user_tags: list[UserTag] = Field(default_factory=list, alias="userTags")
    product_tags: list[ProductTag] = Field(default_factory=list, alias="productTags")
    trial_reel_graduation_strategy: Optional[str] = Field(
        default=None, alias="trialReelGraduationStrategy"
    )

    @field_validator("user_tags", "product_tags", mode="before")
    @classmethod
    def _unwrap(cls, value: Any) -> Any:
        return _unwrap_collection(value, "tag")


class CarouselMediaItem(BaseModel):
    """One child of a carousel. ``media_type`` is "image" or "video"."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    media_type: str = Field(default="image", alias="mediaType")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    video_url: Optional[str] = Field(default=None, alias="videoUrl")


class PublishItem(BaseModel):
    """Parameters for one input item.

    Built from a raw mapping (batch file entry, API payload). Both snake_case
    names and the camelCase names used by workflow tools are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    resource: str
    operation: str = "publish"
    node: str = ""
    graph_api_version: str = Field(default=GRAPH_API_VERSION_DEFAULT, alias="graphApiVersion")
    caption: str = ""
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    additional_fields: AdditionalFields = Field(
        default_factory=AdditionalFields, alias="additionalFields"
    )
    carousel_media: list[CarouselMediaItem] = Field(default_factory=list, alias="carouselMedia")

    @field_validator("carousel_media", mode="before")
    @classmethod
    def _unwrap_media(cls, value: Any) -> Any:
        return _unwrap_collection(value, "mediaItem")


@dataclass(frozen=True)
class MediaContainer:
    """A created, not yet published, media container."""

    creation_id: str
    resource: str


@dataclass
class ItemError:
    """Structured per-item failure delivered in place of a publish response.

    ``to_json`` flattens the platform error object (message, code,
    error_subcode, fbtrace_id...) to the top level so the output matches what
    the Graph API returned.
    """

    kind: str
    message: str
    status_code: Optional[int] = None
    platform_error_fields: dict[str, Any] = field(default_factory=dict)
    headers: Optional[dict[str, Any]] = None
    creation_id: Optional[str] = None
    note: Optional[str] = None
    response: Any = None
    last_status: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        """Convert to the JSON object emitted for the item."""
        data: dict[str, Any] = {"kind": self.kind}
        if self.platform_error_fields:
            if self.status_code is not None:
                data["status_code"] = self.status_code
            data.update(self.platform_error_fields)
            data.setdefault("message", self.message)
            if self.headers:
                data["headers"] = self.headers
        else:
            data["error"] = self.message
            if self.status_code is not None:
                data["status_code"] = self.status_code
        if self.response is not None:
            data["response"] = self.response
        if self.last_status is not None:
            data["last_status"] = self.last_status
        if self.creation_id is not None:
            data["creation_id"] = self.creation_id
        if self.note is not None:
            data["note"] = self.note
        data.update(self.extra)
        return data


@dataclass
class ItemResult:
    """One output entry, tagged with the index of the input item it came from."""

    json: dict[str, Any]
    item_index: int
    error: Optional[ItemError] = field(default=None, compare=False, repr=False)

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"json": self.json, "item_index": self.item_index}
