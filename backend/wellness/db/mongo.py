# wellness/db/mongo.py
import logging
import os
from pymongo import MongoClient
from .indexes import ensure_indexes

log = logging.getLogger(__name__)

_client = None
_db = None

TEST_DB_PREFIX = "wellness_test_"

def connect_to_mongo():
    """
    Connects to Mongo and creates indexes. Reads MONGO_URI and MONGO_DB from env.
    Called from the lifespan on startup; it is SYNCHRONOUS.
    """
    global _client, _db
    if _client:
        return _db

    uri = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
    dbname = os.environ.get("MONGO_DB", "wellness")

    _client = MongoClient(uri, uuidRepresentation="standard")
    _db = _client[dbname]
    ensure_indexes(_db)
    log.info("connected to mongo database %s", dbname)
    return _db


def disconnect_from_mongo():
    """
    Closes the connection. Test databases (wellness_test_*) are dropped first.
    """
    global _client, _db
    if _client:
        dbname = os.environ.get("MONGO_DB", "")
        if dbname.startswith(TEST_DB_PREFIX):
            _client.drop_database(dbname)
        _client.close()
    _client = None
    _db = None


def get_db():
    if _db is None:
        raise RuntimeError("MongoDB not initialised. Call connect_to_mongo() on startup.")
    return _db
