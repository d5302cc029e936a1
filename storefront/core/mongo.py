"""MongoDB connection helper shared by repositories and migrations."""

from __future__ import annotations

import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from storefront.core.config import StorageConfig

LOGGER = logging.getLogger(__name__)


def connect_database(storage: StorageConfig) -> Database | None:
    """Return the configured database, or ``None`` when no URI is set.

    Connectivity is checked with a ping so that a wrong URI fails at
    startup instead of on the first request.
    """
    if not storage.mongo_uri:
        return None
    client: MongoClient = MongoClient(storage.mongo_uri, serverSelectionTimeoutMS=3000)
    try:
        client.admin.command("ping")
    except PyMongoError:
        LOGGER.exception("mongo_unreachable")
        client.close()
        raise
    return client[storage.mongo_db]
