"""
MongoDB persistence.

Provides the client factory (real or in-memory mock) and repositories.
"""

from .client import MongoConfig, MockMongoClient, create_mongo_client

__all__ = ["MongoConfig", "MockMongoClient", "create_mongo_client"]
