# wellness/db/indexes.py
"""
Index creation, run once at startup.
"""
from pymongo import ASCENDING, DESCENDING

def ensure_indexes(db) -> None:
    # users
    db["users"].create_index([("email", ASCENDING)], unique=True)

    # assessments: active history per owner, newest first
    db["assessments"].create_index(
        [("owner_id", ASCENDING), ("deleted", ASCENDING), ("created_at", DESCENDING)]
    )
