from __future__ import annotations

import enum
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ArticleGenre(str, enum.Enum):
    """Fixed set of article genres (exact, case-sensitive values)."""

    BUSINESS = "Business"
    ENTERTAINMENT = "Entertainment"
    TRAVEL = "Travel"
    TECHNOLOGY = "Technology"
    LIFESTYLE_AND_ART = "Lifestyle and Art"
    FOOD_AND_HEALTH = "Food and Health"


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    user_avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(Base):
    __tablename__ = "articles"

    __table_args__ = (
        # Author feed / bulk delete by owner
        Index("ix_articles_user_id_article_id", "user_id", "article_id"),
        CheckConstraint(
            "article_genre IN ({})".format(", ".join(f"'{g.value}'" for g in ArticleGenre)),
            name="ck_articles_genre",
        ),
    )

    article_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    article_title: Mapped[str] = mapped_column(Text, nullable=False)
    article_subtitle: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    article_date: Mapped[str] = mapped_column(Text, nullable=False)
    article_text: Mapped[str] = mapped_column(Text, nullable=False)
    article_genre: Mapped[str] = mapped_column(String(50), nullable=False)

    # Foreign key; set once at creation
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.user_id"), nullable=False, index=True
    )
