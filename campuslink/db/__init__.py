"""
Database module - SQL (accounts) and MongoDB (documents) connections.
"""
from campuslink.db.postgres import get_db_session, test_postgres_connection
from campuslink.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
