"""Database seeder for local development."""
import asyncio
import argparse
import logging
import random
import time
from datetime import datetime, timezone, timedelta

from app.database import engine, session_scope, Base
from app.logging_config import setup_logging
from app.models import ArticleGenre, User
from app.services import article_service

TOPICS = ["markets", "festivals", "islands", "compilers", "ceramics", "fermentation",
          "startups", "cinema", "railways", "robotics", "gardening", "nutrition"]


async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_articles = 50 if small else 5000

    print(f"Seeding: {num_users} users, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with session_scope() as session:
        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:04d}",
                user_avatar_url=f"https://avatars.example.com/user_{i:04d}.png",
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        genres = list(ArticleGenre)
        for i in range(num_articles):
            topic = random.choice(TOPICS)
            written = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
            await article_service.create_article(session, {
                "article_title": f"Article {i}: notes on {topic}",
                "article_subtitle": f"A short field report about {topic}." if random.random() > 0.3 else None,
                "article_image_url": f"https://images.example.com/{topic}/{i}.jpg" if random.random() > 0.5 else None,
                "article_date": written,
                "article_text": f"This is the full text of article {i} about {topic}. " * 20,
                "article_genre": random.choice(genres).value,
                "user_id": random.choice(users).user_id,
            })
            if (i + 1) % 500 == 0:
                print(f"  {i + 1} articles created")

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users}")
    print(f"  Articles: {num_articles}")


def main():
    parser = argparse.ArgumentParser(description="Seed the articles database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (50 articles)")
    args = parser.parse_args()
    setup_logging()
    # Per-article INFO lines would drown the progress output.
    logging.getLogger("app.services").setLevel(logging.WARNING)
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
