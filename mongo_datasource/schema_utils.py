"""
Schema utilities: sample a collection and infer its table schema.

Every sampled field is classified into a ``ValueCategory`` and the
categories seen across the sample are unified per field:

    - the first observation sets the category
    - ``NULL`` never overrides a concrete category, in either order
    - a later, different non-null category collapses the field to
      ``STRUCTURED`` (heterogeneous documents are reported as objects)

Fields are reported in the order they were first seen across the sample.
"""

from typing import Any, Dict, Iterable, List

from pymongo.errors import ConnectionFailure, PyMongoError

from config import SCHEMA_SAMPLE_SIZE
from connection import connect_to_datasource
from errors import DatasourceConnectionError, QueryError
from field_types import ValueCategory, classify_value, field_type_for_category
from logger import logger
from models import ConnectionParams, FieldDescriptor, SchemaDescriptor

NATIVE_ID_FIELD = "_id"
PRIMARY_FIELD_NAME = "id"


# ---------------------- TYPE UNIFICATION ----------------------


def unify_category(current: ValueCategory, observed: ValueCategory) -> ValueCategory:
    """Merge a newly observed category into the one already recorded."""
    if observed is ValueCategory.NULL or observed is current:
        return current
    if current is ValueCategory.NULL:
        return observed
    return ValueCategory.STRUCTURED


def unify_field_categories(documents: Iterable[Dict[str, Any]]) -> Dict[str, ValueCategory]:
    """Reduce sampled documents to ``{field_name: category}`` in first-seen order.

    The store's native ``_id`` key is never reported as a regular field.
    """
    categories: Dict[str, ValueCategory] = {}
    for doc in documents:
        for field_name, value in doc.items():
            if field_name == NATIVE_ID_FIELD:
                continue
            observed = classify_value(value)
            if field_name in categories:
                categories[field_name] = unify_category(categories[field_name], observed)
            else:
                categories[field_name] = observed
    return categories


def build_field_descriptors(
    categories: Dict[str, ValueCategory],
    identity_field: str = NATIVE_ID_FIELD,
) -> List[FieldDescriptor]:
    fields = []
    for index, (field_name, category) in enumerate(categories.items(), start=1):
        fields.append(FieldDescriptor(
            field_id=f"fid_{index}",
            field_name=field_name,
            field_type=field_type_for_category(category),
            is_primary=field_name in (PRIMARY_FIELD_NAME, identity_field),
        ))
    return fields


# ---------------------- SCHEMA SAMPLING ----------------------


def get_table_meta(
    params: ConnectionParams,
    sample_size: int = SCHEMA_SAMPLE_SIZE,
) -> SchemaDescriptor:
    """Sample up to *sample_size* documents from ``params.table_name`` and
    return its inferred ``SchemaDescriptor``.

    An empty collection yields a descriptor with no fields.

    Raises ``DatasourceConnectionError`` when the store cannot be reached and
    ``QueryError`` when the sample read fails.
    """
    client = connect_to_datasource(params)
    try:
        collection = client[params.database_name][params.table_name]
        docs = list(collection.find({}).limit(sample_size))
    except ConnectionFailure as e:
        logger.error("Lost connection while sampling %s.%s: %s",
                     params.database_name, params.table_name, e)
        raise DatasourceConnectionError(
            f"Failed to get table metadata from MongoDB: {e}"
        ) from e
    except PyMongoError as e:
        logger.error("Sampling %s.%s failed: %s", params.database_name, params.table_name, e)
        raise QueryError(f"Failed to get table metadata from MongoDB: {e}") from e
    finally:
        client.close()

    if not docs:
        logger.info("No documents in %s.%s, returning empty schema",
                    params.database_name, params.table_name)
        return SchemaDescriptor(table_name=params.table_name)

    categories = unify_field_categories(docs)
    fields = build_field_descriptors(categories, params.identity_field)

    logger.info(
        "Schema sampled %d docs from %s.%s: %d fields: %s",
        len(docs), params.database_name, params.table_name, len(fields),
        {name: category.value for name, category in categories.items()},
    )
    return SchemaDescriptor(table_name=params.table_name, fields=fields)
