"""Root conftest — shared test configuration."""

import os

# Ensure tests never talk to a real database or pub/sub endpoint
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("PUBSUB_URL", "http://pubsub.test")
os.environ.setdefault("PUBSUB_SECRET", "test-secret")
