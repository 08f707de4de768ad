"""
Data model shared by the schema and record operations.

Inputs accept both camelCase keys and the upper-case ``MONGODB_*`` keys that
datasource configurations are stored with. Outputs are dumped with
``model_dump(by_alias=True)`` so consumers receive camelCase keys.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from config import DEFAULT_IDENTITY_FIELD
from field_types import FieldType

IdentityType = Literal["auto", "objectId", "int", "string"]


# ---------------------- INPUT ----------------------


class ConnectionParams(BaseModel):
    """Where a single collection lives and how to authenticate against it.

    ``username`` and ``password`` are only used when both are non-empty;
    otherwise the connection is unauthenticated.
    """

    host: str = Field(validation_alias=AliasChoices("host", "MONGODB_HOST"))
    port: int = Field(gt=0, le=65535, validation_alias=AliasChoices("port", "MONGODB_PORT"))
    username: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("username", "MONGODB_USERNAME")
    )
    password: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("password", "MONGODB_PASSWORD")
    )
    database_name: str = Field(
        validation_alias=AliasChoices("databaseName", "database_name", "MONGODB_NAME")
    )
    table_name: str = Field(
        validation_alias=AliasChoices("tableName", "table_name", "TABLE_NAME")
    )
    auth_source: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("authSource", "auth_source")
    )
    identity_field: str = Field(
        default=DEFAULT_IDENTITY_FIELD,
        validation_alias=AliasChoices("identityField", "identity_field"),
    )
    identity_type: IdentityType = Field(
        default="auto", validation_alias=AliasChoices("identityType", "identity_type")
    )

    @field_validator("host", "database_name", "table_name", "identity_field")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)


class FieldMapping(BaseModel):
    """Caller-declared projection of one source field into a target field."""

    source_field_id: str = Field(
        validation_alias=AliasChoices("sourceFieldId", "source_field_id")
    )
    source_field_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("sourceFieldName", "source_field_name")
    )
    # Kept as a plain int: codes outside FieldType fall back to the default rule.
    target_field_type: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("targetFieldType", "target_field_type")
    )
    enabled: bool = False


class DatasourceConfig(BaseModel):
    db_config: ConnectionParams = Field(validation_alias=AliasChoices("dbConfig", "db_config"))
    field_mappings: List[FieldMapping] = Field(
        validation_alias=AliasChoices("fieldMappings", "field_mappings")
    )


# ---------------------- OUTPUT ----------------------


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    field_id: str = Field(serialization_alias="fieldId")
    field_name: str = Field(serialization_alias="fieldName")
    field_type: FieldType = Field(serialization_alias="fieldType")
    is_primary: bool = Field(default=False, serialization_alias="isPrimary")
    description: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict, serialization_alias="property")


class SchemaDescriptor(BaseModel):
    table_name: str = Field(serialization_alias="tableName")
    fields: List[FieldDescriptor] = Field(default_factory=list)


class Record(BaseModel):
    primary_id: str = Field(serialization_alias="primaryId")
    data: Dict[str, Any] = Field(default_factory=dict)


class RecordPage(BaseModel):
    records: List[Record] = Field(default_factory=list)
    next_page_token: str = Field(default="", serialization_alias="nextPageToken")
    has_more: bool = Field(default=False, serialization_alias="hasMore")
