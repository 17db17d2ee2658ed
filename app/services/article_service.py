"""
Article service: validation and persistence for the Article aggregate.

Design notes
------------
- Reads select plain columns (never ORM entities) so results always
  reflect the stored rows, including rows changed by the Core
  UPDATE/DELETE statements below that bypass the identity map.
- ``get_articles`` joins the owning user's ``username`` and
  ``user_avatar_url``; ``get_articles_by_user_id`` does not.
- Input is validated before the session is touched: a rejected payload
  raises ``pydantic.ValidationError`` listing every violation and issues
  no SQL at all.  Identifiers go through ``parse_id`` for the same reason.
- Service functions flush but do not commit; the transaction boundary is
  owned by the caller (see ``app.database.session_scope``).
- Store errors are not caught here.
"""
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import apply_partial_update
from app.dependencies import parse_id
from app.models import Article, User
from app.schemas import ArticleCreate, ArticleUpdate, validate_article_create, validate_article_update

logger = logging.getLogger(__name__)

_articles = Article.__table__


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

def _enriched_articles_query():
    """SELECT every article column plus the owner's display fields."""
    return (
        select(_articles, User.username, User.user_avatar_url)
        .join(User, User.user_id == _articles.c.user_id)
        .order_by(_articles.c.article_id)
    )


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_articles(
    db: AsyncSession, article_id: int | str | None = None
) -> dict | list[dict] | None:
    """
    Return one article or all articles, each enriched with the author's
    ``username`` and ``user_avatar_url``.

    With *article_id*: the matching article dict, or None when it does not
    exist.  Without: a list of every article in insertion order.
    """
    q = _enriched_articles_query()
    if article_id is not None:
        q = q.where(_articles.c.article_id == parse_id(article_id, "article_id"))
        row = (await db.execute(q)).mappings().first()
        return dict(row) if row is not None else None

    result = await db.execute(q)
    return [dict(row) for row in result.mappings().all()]


async def get_articles_by_user_id(db: AsyncSession, user_id: int | str) -> list[dict]:
    """Return the articles owned by *user_id* (no author fields), oldest first."""
    q = (
        select(_articles)
        .where(_articles.c.user_id == parse_id(user_id, "user_id"))
        .order_by(_articles.c.article_id)
    )
    result = await db.execute(q)
    return [dict(row) for row in result.mappings().all()]


async def create_article(db: AsyncSession, data: Mapping[str, Any] | ArticleCreate) -> dict:
    """
    Validate *data*, insert it and return the validated fields together
    with the ``article_id`` generated by the database.

    Raises ``pydantic.ValidationError`` (all violations, nothing written)
    when *data* does not describe a valid article.  Unknown keys are
    dropped and any supplied ``article_id`` is ignored.
    """
    try:
        new_article = validate_article_create(data)
    except ValidationError as exc:
        logger.debug("Rejected new article: %d violation(s)", exc.error_count())
        raise

    article = Article(
        article_image_url=new_article.article_image_url,
        article_title=new_article.article_title,
        article_subtitle=new_article.article_subtitle,
        article_date=new_article.article_date,
        user_id=new_article.user_id,
        article_text=new_article.article_text,
        article_genre=new_article.article_genre,
    )
    db.add(article)
    await db.flush()

    logger.info("Created article %d for user %d", article.article_id, article.user_id)
    result = new_article.model_dump()
    result["article_id"] = article.article_id
    return result


async def update_article(
    db: AsyncSession, article_id: int | str, data: Mapping[str, Any] | ArticleUpdate
) -> bool:
    """
    Apply the fields present in *data* to the article *article_id*.

    Only ``ArticleUpdate`` fields can be changed; anything else (notably
    ``user_id``) makes validation fail with ``pydantic.ValidationError``
    before the database is touched.

    Returns True when the stored row changed.  A missing article, an empty
    payload, or a payload whose values already match the row returns False.
    """
    article_id = parse_id(article_id, "article_id")
    try:
        changes = validate_article_update(data)
    except ValidationError as exc:
        logger.debug("Rejected update of article %d: %d violation(s)", article_id, exc.error_count())
        raise

    changed = await apply_partial_update(db, Article, changes, article_id)
    if changed:
        logger.info(
            "Updated article %d (%s)",
            article_id,
            ", ".join(sorted(changes.model_fields_set)),
        )
    else:
        logger.debug("Update of article %d changed nothing", article_id)
    return changed > 0


async def delete_article(db: AsyncSession, article_id: int | str) -> bool:
    """
    Delete the article identified by *article_id*.

    Returns True on success, False when the article does not exist.
    """
    article_id = parse_id(article_id, "article_id")
    result = await db.execute(
        delete(Article)
        .where(Article.article_id == article_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info("Deleted article %d", article_id)
    return result.rowcount > 0


async def delete_articles_by_user_id(db: AsyncSession, user_id: int | str) -> bool:
    """
    Delete every article owned by *user_id*.

    Returns True when at least one article was removed.
    """
    user_id = parse_id(user_id, "user_id")
    result = await db.execute(
        delete(Article)
        .where(Article.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info("Deleted %d article(s) of user %d", result.rowcount, user_id)
    return result.rowcount > 0
