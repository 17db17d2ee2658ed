from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints, field_validator

from app.models import ArticleGenre


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be an integer, not a boolean")
    return value


def _date_to_str(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]
# Dates are stored as text; datetime/date values are rendered as ISO-8601.
DateStr = Annotated[str, BeforeValidator(_date_to_str)]
# Booleans are not identifiers, even though lax int parsing would accept them.
UserId = Annotated[int, BeforeValidator(_reject_bool)]


# --- Article ---

class ArticleCreate(BaseModel):
    """
    Shape accepted when creating an article.

    Unknown keys are dropped.  ``article_id`` is accepted but the stored
    row always gets the identifier generated by the database.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    article_id: int | None = None
    article_image_url: str | None = None
    article_title: NonEmptyStr
    article_subtitle: str | None = None
    article_date: DateStr = Field(default_factory=_now_iso)
    user_id: UserId
    article_text: NonEmptyStr
    article_genre: ArticleGenre


class ArticleUpdate(BaseModel):
    """
    Updatable subset of an article.  Any other key, including ``user_id``
    and ``article_id``, is rejected.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    article_image_url: str | None = None
    article_title: NonEmptyStr | None = None
    article_subtitle: str | None = None
    article_date: DateStr | None = None
    article_text: NonEmptyStr | None = None
    article_genre: ArticleGenre | None = None

    @field_validator("article_title", "article_date", "article_text", "article_genre")
    @classmethod
    def reject_null(cls, value):
        # Defaults are not validated, so this only fires for an explicit null.
        if value is None:
            raise ValueError("may not be null")
        return value


def validate_article_create(data: Mapping[str, Any] | ArticleCreate) -> ArticleCreate:
    """Validate *data* as a new article; raises ``pydantic.ValidationError``."""
    if isinstance(data, ArticleCreate):
        return data
    return ArticleCreate.model_validate(data)


def validate_article_update(data: Mapping[str, Any] | ArticleUpdate) -> ArticleUpdate:
    """Validate *data* as a partial article update; raises ``pydantic.ValidationError``."""
    if isinstance(data, ArticleUpdate):
        return data
    return ArticleUpdate.model_validate(data)
