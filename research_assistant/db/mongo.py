"""MongoDB connection setup using Motor async driver."""

import os

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

# Configuration from environment variables with defaults
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "research_assistant")

# Global client instance
_client: AsyncIOMotorClient | None = None


async def get_database() -> AsyncIOMotorDatabase:
    """Get the database instance, creating client if needed."""
    global _client
    if _client is None:
        # Fail fast if MongoDB is unavailable
        _client = AsyncIOMotorClient(
            MONGODB_URL,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
        )
    return _client[DATABASE_NAME]


async def close_database() -> None:
    """Close the database connection."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def set_client(client: AsyncIOMotorClient | None) -> None:
    """Set the client instance (for testing)."""
    global _client
    _client = client


def parse_object_id(value: str) -> ObjectId | None:
    """Parse a hex string ID, returning None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
