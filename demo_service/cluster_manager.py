from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from config import MONGO_COMPRESSORS
from logger import logger

SERVER_TIMEOUT_MS = 5000
WRITE_CONCERN_TIMEOUT_MS = 5000


def client_options() -> dict:
    """Keyword options every demo client is created with."""
    return {
        "serverSelectionTimeoutMS": SERVER_TIMEOUT_MS,
        "w": "majority",
        "wTimeoutMS": WRITE_CONCERN_TIMEOUT_MS,
        "readConcernLevel": "majority",
        "retryWrites": True,
        "retryReads": True,
        "compressors": MONGO_COMPRESSORS,
    }


def connect_to_cluster(mongo_uri: str) -> MongoClient:
    """Create and test a MongoClient connection."""
    client = MongoClient(mongo_uri, **client_options())
    try:
        client.admin.command("ping")  # force connection test
    except ServerSelectionTimeoutError:
        client.close()
        raise ConnectionError("Connection timed out. Check your MongoDB URI and network.")
    except ConnectionFailure:
        client.close()
        raise ConnectionError("Failed to connect to MongoDB cluster")
    logger.info("Connected to MongoDB cluster")
    return client


def get_people_collection(
    client: MongoClient,
    database_name: str,
    collection_name: str,
) -> Collection:
    return client[database_name][collection_name]
