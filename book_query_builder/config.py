"""
Connection settings.

Values come from the environment (optionally a ``.env`` file):

- MONGO_URI: MongoDB connection URI
- MONGO_DATABASE: Database holding the books collection
- MONGO_COLLECTION: Collection name, ``books`` by default
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel

from book_query_builder.core.models import DEFAULT_COLLECTION

DEFAULT_MONGO_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE = "library"


class MongoSettings(BaseModel):
    """Where the books collection lives."""

    mongo_uri: str = DEFAULT_MONGO_URI
    database_name: str = DEFAULT_DATABASE
    collection_name: str = DEFAULT_COLLECTION

    @classmethod
    def from_env(cls) -> "MongoSettings":
        load_dotenv()
        return cls(
            mongo_uri=os.getenv("MONGO_URI", DEFAULT_MONGO_URI),
            database_name=os.getenv("MONGO_DATABASE", DEFAULT_DATABASE),
            collection_name=os.getenv("MONGO_COLLECTION", DEFAULT_COLLECTION),
        )
