#!/usr/bin/env python
"""Populate a local database with a demo channel and viewer.

Inserts two accounts, one published video owned by the channel and a
subscription between them. Media URLs point at the fake media host, so no
Cloudinary credentials are needed. Rows that already exist are left alone,
and the script exits early unless VIDSHARE_ENV is local or test.

Usage:
    DATABASE_URL=... python scripts/seed_dev.py
"""

import os
import sys

SEED_PASSWORD = "password123"

CHANNEL_USER_ID = "00000000-0000-4000-8000-000000000001"
VIEWER_USER_ID = "00000000-0000-4000-8000-000000000002"
DEMO_VIDEO_ID = "00000000-0000-4000-8000-000000000101"
DEMO_SUBSCRIPTION_ID = "00000000-0000-4000-8000-000000000201"

FAKE_MEDIA_BASE = "https://res.cloudinary.test/fake"


def main():
    # local and test only
    vidshare_env = os.getenv("VIDSHARE_ENV", "local")
    if vidshare_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in VIDSHARE_ENV={vidshare_env}")
        sys.exit(1)

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from sqlalchemy import create_engine, text

    from vidshare.auth.passwords import hash_password

    engine = create_engine(database_url)
    password_hash = hash_password(SEED_PASSWORD)

    users = [
        (CHANNEL_USER_ID, "demochannel", "channel@example.com", "Demo Channel"),
        (VIEWER_USER_ID, "demoviewer", "viewer@example.com", "Demo Viewer"),
    ]

    with engine.connect() as conn:
        created = []
        for user_id, username, email, full_name in users:
            result = conn.execute(
                text("""
                    INSERT INTO users (id, username, email, full_name, avatar, password_hash)
                    VALUES (:id, :username, :email, :full_name, :avatar, :password_hash)
                    ON CONFLICT DO NOTHING
                    RETURNING id
                """),
                {
                    "id": user_id,
                    "username": username,
                    "email": email,
                    "full_name": full_name,
                    "avatar": f"{FAKE_MEDIA_BASE}/image/upload/vidshare/{username}.png",
                    "password_hash": password_hash,
                },
            )
            created.append((f"user {username}", result.fetchone() is not None))

        result = conn.execute(
            text("""
                INSERT INTO videos (id, owner_id, video_file, thumbnail, title, description,
                                    duration, views, is_published)
                VALUES (:id, :owner_id, :video_file, :thumbnail, 'Demo video',
                        'Seeded for local development', 12.5, 0, true)
                ON CONFLICT (id) DO NOTHING
                RETURNING id
            """),
            {
                "id": DEMO_VIDEO_ID,
                "owner_id": CHANNEL_USER_ID,
                "video_file": f"{FAKE_MEDIA_BASE}/video/upload/vidshare/demo.mp4",
                "thumbnail": f"{FAKE_MEDIA_BASE}/image/upload/vidshare/demo.png",
            },
        )
        created.append((f"video {DEMO_VIDEO_ID}", result.fetchone() is not None))

        result = conn.execute(
            text("""
                INSERT INTO subscriptions (id, subscriber_id, channel_id)
                VALUES (:id, :subscriber_id, :channel_id)
                ON CONFLICT DO NOTHING
                RETURNING id
            """),
            {
                "id": DEMO_SUBSCRIPTION_ID,
                "subscriber_id": VIEWER_USER_ID,
                "channel_id": CHANNEL_USER_ID,
            },
        )
        created.append(("subscription demoviewer -> demochannel", result.fetchone() is not None))

        conn.commit()

    db_display = database_url.split("@")[1] if "@" in database_url else database_url
    print(f"Database: {db_display}")
    print(f"VIDSHARE_ENV: {vidshare_env}")
    print()
    for label, was_created in created:
        print(f"{'✓ Created' if was_created else '• Exists'}: {label}")
    print()
    print(f"Log in as demochannel or demoviewer with password {SEED_PASSWORD!r}.")


if __name__ == "__main__":
    main()
