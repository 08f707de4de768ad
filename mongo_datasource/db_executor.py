"""
Database executor: cursor-paginated record fetch with field mapping.

Pagination is keyed on the collection's identity field: each page is sorted
ascending on it and the next page starts strictly after the last identity
returned. One extra document is read past the page size to detect whether
another page exists; it is never returned.
"""

import json
import re
from typing import Any, Dict, List, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, PyMongoError

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from connection import connect_to_datasource
from errors import ConfigError, DatasourceConnectionError, QueryError
from field_mapper import map_document
from logger import logger
from models import ConnectionParams, DatasourceConfig, RecordPage

NATIVE_ID_FIELD = "_id"

_CANONICAL_INT = re.compile(r"-?(0|[1-9][0-9]*)", re.ASCII)


# ---------------------- HELPERS ----------------------


def resolve_datasource_config(raw: Union[str, Dict[str, Any], DatasourceConfig]) -> DatasourceConfig:
    """Accept a parsed object or a JSON string and validate its shape.

    Raises ``ConfigError`` for anything that is not a complete configuration.
    """
    if isinstance(raw, DatasourceConfig):
        return raw

    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse datasourceConfig: {e}") from e
    elif isinstance(raw, dict):
        parsed = raw
    else:
        raise ConfigError(
            "Failed to parse datasourceConfig: must be a valid JSON string or object"
        )

    if not isinstance(parsed, dict):
        raise ConfigError("Failed to parse datasourceConfig: expected a JSON object")

    db_config = parsed.get("dbConfig", parsed.get("db_config"))
    field_mappings = parsed.get("fieldMappings", parsed.get("field_mappings"))
    if not db_config or field_mappings is None:
        raise ConfigError(
            "Failed to parse datasourceConfig: missing required fields: dbConfig or fieldMappings"
        )

    try:
        return DatasourceConfig.model_validate(
            {"dbConfig": db_config, "fieldMappings": field_mappings}
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid datasourceConfig: {e}") from e


def decode_page_token(token: str, params: ConnectionParams) -> List[Any]:
    """Turn a page token back into the identity's native comparable value(s).

    An explicit ``identity_type`` yields exactly one value. With ``"auto"``
    the token's real type is unknown, so every plausible decoding is
    returned: an ``ObjectId`` for a 24-hex token on ``_id``, an ``int`` for
    a canonical integer, and always the raw string.
    """
    identity_type = params.identity_type

    if identity_type == "string":
        return [token]
    if identity_type == "objectId":
        try:
            return [ObjectId(token)]
        except (InvalidId, TypeError) as e:
            raise ConfigError(f"Invalid pageToken for ObjectId identity: {e}") from e
    if identity_type == "int":
        try:
            return [int(token)]
        except ValueError as e:
            raise ConfigError(f"Invalid pageToken for integer identity: {e}") from e

    candidates: List[Any] = []
    if params.identity_field == NATIVE_ID_FIELD and ObjectId.is_valid(token):
        candidates.append(ObjectId(token))
    if _CANONICAL_INT.fullmatch(token):
        candidates.append(int(token))
    candidates.append(token)
    return candidates


def build_cursor_filter(page_token: str, params: ConnectionParams) -> Dict[str, Any]:
    if not page_token:
        return {}
    field = params.identity_field
    candidates = decode_page_token(page_token, params)
    if len(candidates) == 1:
        return {field: {"$gt": candidates[0]}}
    # $gt only matches values of the same BSON type, so one branch per type.
    return {"$or": [{field: {"$gt": value}} for value in candidates]}


def _effective_page_size(max_page_size: int) -> int:
    try:
        size = int(max_page_size)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"maxPageSize must be an integer: {e}") from e
    if size < 1:
        raise ConfigError("maxPageSize must be at least 1")
    if size > MAX_PAGE_SIZE:
        logger.warning("maxPageSize %d capped to %d", size, MAX_PAGE_SIZE)
        size = MAX_PAGE_SIZE
    return size


# ---------------------- MAIN QUERY EXECUTOR ----------------------


def get_table_records(
    datasource_config: Union[str, Dict[str, Any], DatasourceConfig],
    page_token: str = "",
    max_page_size: int = DEFAULT_PAGE_SIZE,
) -> RecordPage:
    """Fetch one page of mapped records.

    Returns a ``RecordPage`` whose ``next_page_token`` is the stringified
    identity of the last record when ``has_more`` is set, else ``""``.

    Raises ``ConfigError``, ``DatasourceConnectionError`` or ``QueryError``.
    """
    config = resolve_datasource_config(datasource_config)
    params = config.db_config
    page_size = _effective_page_size(max_page_size)
    page_token = page_token or ""
    query = build_cursor_filter(page_token, params)

    client = connect_to_datasource(params)
    try:
        collection = client[params.database_name][params.table_name]
        cursor = (
            collection.find(query)
            .sort(params.identity_field, ASCENDING)
            .limit(page_size + 1)
        )
        documents: List[Dict[str, Any]] = list(cursor)
    except ConnectionFailure as e:
        logger.error("Lost connection while reading %s.%s: %s",
                     params.database_name, params.table_name, e)
        raise DatasourceConnectionError(f"Failed to get table records from MongoDB: {e}") from e
    except PyMongoError as e:
        logger.error("Record query on %s.%s failed: %s",
                     params.database_name, params.table_name, e)
        raise QueryError(f"Failed to get table records from MongoDB: {e}") from e
    finally:
        client.close()

    has_more = len(documents) > page_size
    records = [
        map_document(doc, config.field_mappings, params.identity_field)
        for doc in documents[:page_size]
    ]
    next_page_token = records[-1].primary_id if has_more else ""
    if has_more and not next_page_token:
        logger.error(
            "Document in %s.%s has no value for identity field %r, cannot continue paging",
            params.database_name, params.table_name, params.identity_field,
        )
        raise QueryError(
            f"Cannot paginate: last record has no value for identity field "
            f"'{params.identity_field}'"
        )

    logger.info(
        "Fetched %d records from %s.%s (has_more=%s, after=%r)",
        len(records), params.database_name, params.table_name, has_more, page_token,
    )
    return RecordPage(records=records, next_page_token=next_page_token, has_more=has_more)
