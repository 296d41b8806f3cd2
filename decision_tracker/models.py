"""Pydantic models for request/response validation."""

from datetime import datetime, timezone
from typing import Annotated, Iterable, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

ItemType = Literal["pro", "con"]
Leaning = Literal["Yes", "No", "Neutral"]


def compute_leaning(items: Iterable) -> Leaning:
    """Derive the display leaning from the current pro/con items.

    Works on anything with a ``type`` attribute, so ORM rows and response
    models can both be passed in.
    """
    pros = cons = 0
    for item in items:
        if item.type == "pro":
            pros += 1
        elif item.type == "con":
            cons += 1
    if pros > cons:
        return "Yes"
    if cons > pros:
        return "No"
    return "Neutral"


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


RequiredText = Annotated[str, AfterValidator(_strip_required)]
OptionalText = Annotated[Optional[str], AfterValidator(_strip_optional)]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class SuggestionRequest(BaseModel):
    title: str
    description: Optional[str] = None


class ProsConsResponse(BaseModel):
    pros: list[str] = Field(description="3-5 reasons in favour of the decision")
    cons: list[str] = Field(description="3-5 reasons against the decision")


class WebSearchRequest(BaseModel):
    query: RequiredText


class WebSearchResponse(BaseModel):
    content: str
    related_questions: list[str] = []


class ProfileCreate(BaseModel):
    display_name: OptionalText = None


class ProfileUpdate(ProfileCreate):
    pass


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    display_name: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class DecisionCreate(BaseModel):
    title: RequiredText
    description: OptionalText = None


class DecisionUpdate(BaseModel):
    title: Optional[RequiredText] = None
    description: OptionalText = None


class ItemCreate(BaseModel):
    content: RequiredText
    type: ItemType


class DecisionItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    decision_id: str
    content: str
    type: ItemType
    created_at: UtcDatetime


class DecisionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    items: list[DecisionItemOut] = []

    @property
    def pros(self) -> list[DecisionItemOut]:
        return [item for item in self.items if item.type == "pro"]

    @property
    def cons(self) -> list[DecisionItemOut]:
        return [item for item in self.items if item.type == "con"]

    def to_json(self):
        """Serialize with the derived counts and leaning attached."""
        data = self.model_dump(mode="json")
        data["pro_count"] = len(self.pros)
        data["con_count"] = len(self.cons)
        data["leaning"] = compute_leaning(self.items)
        return data


class SuggestionsOut(BaseModel):
    added: list[DecisionItemOut]


def clean_suggestions(contents, item_type):
    """Validate model-suggested items like manual ones, skipping blank strings."""
    return [
        ItemCreate(content=content, type=item_type).content
        for content in contents
        if not (isinstance(content, str) and not content.strip())
    ]
