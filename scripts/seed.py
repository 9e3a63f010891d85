"""Out-of-band administration: seed a newsdesk database or promote an account.

Role changes are deliberately absent from the public operation surface;
this script is the only way to make someone an admin.

    python scripts/seed.py --admin-email editor@example.com --admin-password s3cret!
    python scripts/seed.py --promote reader@example.com
"""
import argparse
import asyncio
import logging
import random
import sys
import time
from datetime import timedelta

from newsdesk.database import Base, async_session, engine
from newsdesk.derivations import (
    DEFAULT_AUTHOR,
    DEFAULT_FEATURED_IMAGE,
    default_avatar_url,
    profile_defaults,
    read_time,
    utcnow,
)
from newsdesk.models import Category, Role
from newsdesk.security import hash_password
from newsdesk.services import article_service, user_service

logger = logging.getLogger("newsdesk.seed")

TAGS = ["election", "court", "budget", "schools", "clinic", "festival",
        "league", "housing", "climate", "labour", "music", "film"]

PARAGRAPH = (
    "Community reporters spent the week following the story from the council "
    "chamber to the neighbourhoods it affects, speaking with residents, "
    "officials and organisers about what comes next. "
)


async def create_admin(session, email: str, password: str):
    now = utcnow()
    admin = await user_service.create_user(session, {
        "first_name": "Admin",
        "last_name": "User",
        "email": email.strip().lower(),
        "password_hash": hash_password(password),
        "avatar": default_avatar_url("Admin", "User"),
        "role": Role.ADMIN,
        "email_verified": True,
        "created_at": now,
        "updated_at": now,
        "last_login": None,
    })
    await user_service.create_profile(session, profile_defaults(admin.id, now))
    return admin


async def seed(admin_email: str, admin_password: str, num_articles: int, reset: bool):
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        if await user_service.find_user_by_email(session, admin_email) is None:
            await create_admin(session, admin_email, admin_password)
            logger.info("Created admin %s", admin_email)

        categories = list(Category)
        for i in range(num_articles):
            published = utcnow() - timedelta(days=random.randint(0, 90))
            content = PARAGRAPH * random.randint(5, 120)
            category = random.choice(categories)
            await article_service.create_article(session, {
                "title": f"{category.value.title()} briefing #{i + 1}",
                "excerpt": f"What changed this week in {category.value} and why it matters.",
                "content": content,
                "category": category,
                "author": DEFAULT_AUTHOR,
                "featured_image": DEFAULT_FEATURED_IMAGE,
                "tags": random.sample(TAGS, k=random.randint(1, 3)),
                "views": 0,
                "read_time": read_time(content),
                "is_featured": i < 5,
                "is_published": random.random() > 0.1,
                "published_at": published,
                "created_at": published,
                "updated_at": published,
            })
        await session.commit()

    logger.info("Seeded %d articles in %.1fs", num_articles, time.perf_counter() - start)


async def promote(email: str) -> bool:
    async with async_session() as session:
        user = await user_service.find_user_by_email(session, email)
        if user is None:
            logger.error("No account registered for %s", email)
            return False
        await user_service.set_role(session, user, Role.ADMIN, utcnow())
        await session.commit()
    return True


def main():
    parser = argparse.ArgumentParser(description="Seed the newsdesk database or promote an account")
    parser.add_argument("--admin-email", default="admin@newsdesk.local")
    parser.add_argument("--admin-password", default="change-me")
    parser.add_argument("--articles", type=int, default=24, help="Number of sample articles")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    parser.add_argument("--promote", metavar="EMAIL", help="Make an existing account an admin and exit")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.promote:
        sys.exit(0 if asyncio.run(promote(args.promote)) else 1)
    asyncio.run(seed(args.admin_email, args.admin_password, args.articles, args.reset))


if __name__ == "__main__":
    main()
