"""
Connection helpers: URI construction and a tested client per call.

Callers own the returned client and must close it in a ``finally`` block;
nothing here is pooled or shared between calls.
"""

from typing import Optional
from urllib.parse import quote_plus

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import MONGO_AUTH_SOURCE, MONGO_SERVER_SELECTION_TIMEOUT_MS
from errors import DatasourceConnectionError
from logger import logger
from models import ConnectionParams


def build_connection_uri(params: ConnectionParams, auth_source: Optional[str] = None) -> str:
    """Build ``mongodb://[user:pass@]host:port/db?authSource=...``.

    Credentials are percent-encoded and only included when both the
    username and the password are non-empty.
    """
    auth = ""
    if params.has_credentials:
        auth = f"{quote_plus(params.username)}:{quote_plus(params.password)}@"
    elif params.username or params.password:
        logger.warning(
            "Only one of username/password given for %s:%s, connecting without credentials",
            params.host, params.port,
        )

    source = auth_source or params.auth_source or MONGO_AUTH_SOURCE
    return (
        f"mongodb://{auth}{params.host}:{params.port}/{params.database_name}"
        f"?authSource={quote_plus(source)}"
    )


def connect_to_datasource(params: ConnectionParams) -> MongoClient:
    """Create a MongoClient and force a round trip so bad hosts or
    credentials fail here instead of on the first query."""
    uri = build_connection_uri(params)
    options = {}
    if MONGO_SERVER_SELECTION_TIMEOUT_MS is not None:
        options["serverSelectionTimeoutMS"] = MONGO_SERVER_SELECTION_TIMEOUT_MS

    client = None
    try:
        client = MongoClient(uri, **options)
        client.admin.command("ping")
        return client
    except PyMongoError as e:
        if client is not None:
            client.close()
        logger.error(
            "Could not connect to MongoDB at %s:%s/%s: %s",
            params.host, params.port, params.database_name, e,
        )
        raise DatasourceConnectionError(
            f"Failed to connect to MongoDB at {params.host}:{params.port}: {e}"
        ) from e
