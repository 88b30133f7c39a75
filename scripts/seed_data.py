#!/usr/bin/env python3
"""
Seed script - writes a realistic event dataset straight into the store.

Creates:
  • 10 users, signups spread over the last --days days
  • 5 posts per user (50 total)
  • 0-6 likes and 0-3 comments per post, timestamped after the post

Run against the configured database (MYSQL_* / DATABASE_URL_OVERRIDE):
  python scripts/seed_data.py --days 30 --seed 42

Then open the dashboard:
  curl -s 'http://localhost:8000/api/analytics/dashboard' | python3 -m json.tool
"""
import argparse
import asyncio
import random
from datetime import datetime, timedelta

from admin_api.database import AsyncSessionLocal, engine, init_db
from admin_api.models import Comment, Like, Post, User


BASE_USERS = [
    "alice_ai", "bob_builder", "carol_codes", "dave_designs", "eve_engineer",
    "frank_feeds", "grace_graphs", "henry_hpc", "iris_infra", "jack_ml",
]

SAMPLE_POSTS = [
    "Just shipped a new feature to production 🚀 Zero downtime deploys are beautiful.",
    "Summer collection launch is live - tell us your favourite piece!",
    "Behind the scenes of our latest photo shoot.",
    "Customer success story: how a small bakery tripled its reach.",
    "Product tutorial series, part 3: scheduling posts.",
    "Team building event recap. Bowling is harder than it looks.",
    "Grafana dashboards are the first thing I build for any new service.",
    "Engagement is up 14% week over week. Thanks, everyone!",
    "",
]

SAMPLE_COMMENTS = ["Love this!", "So true.", "Great post 👏", "Following for more.", "+1"]


def _after(start: datetime, now: datetime) -> datetime:
    """Random instant between start and now."""
    span = max((now - start).total_seconds(), 1)
    return start + timedelta(seconds=random.uniform(0, span))


async def seed(days: int) -> None:
    await init_db()
    now = datetime.utcnow()
    horizon = now - timedelta(days=days)

    async with AsyncSessionLocal() as session:
        # ── Users ─────────────────────────────────────────────────────────
        print("Creating users...")
        users = [
            User(username=name, email=f"{name}@example.com", created_at=_after(horizon, now))
            for name in BASE_USERS
        ]
        session.add_all(users)
        await session.flush()
        print(f"  ✓ {len(users)} users")

        # ── Posts ─────────────────────────────────────────────────────────
        print("\nCreating posts...")
        posts = []
        for user in users:
            for _ in range(5):
                posts.append(
                    Post(
                        user_id=user.id,
                        content=random.choice(SAMPLE_POSTS),
                        created_at=_after(user.created_at, now),
                    )
                )
        session.add_all(posts)
        await session.flush()
        print(f"  ✓ {len(posts)} posts")

        # ── Likes & comments ──────────────────────────────────────────────
        print("\nAdding engagement...")
        likes = comments = 0
        for post in posts:
            for user in random.sample(users, k=random.randint(0, 6)):
                session.add(Like(user_id=user.id, post_id=post.id, created_at=_after(post.created_at, now)))
                likes += 1
            for _ in range(random.randint(0, 3)):
                session.add(
                    Comment(
                        post_id=post.id,
                        user_id=random.choice(users).id,
                        content=random.choice(SAMPLE_COMMENTS),
                        created_at=_after(post.created_at, now),
                    )
                )
                comments += 1
        await session.commit()
        print(f"  ✓ {likes} likes, {comments} comments")

    await engine.dispose()
    print("\nSeed complete!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the analytics event store")
    parser.add_argument("--days", type=int, default=30, help="Spread events over this many days")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible dataset")
    args = parser.parse_args()
    random.seed(args.seed)
    asyncio.run(seed(args.days))
