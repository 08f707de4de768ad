"""
Failure taxonomy raised by the schema and record operations.

Every error carries a human-readable message that already includes the
underlying cause, and is raised ``from`` that cause so the chain survives.
``code`` is the non-zero value placed in the response envelope and
``status_code`` the HTTP status the API answers with.
"""


class DatasourceError(Exception):
    """Base class for every failure surfaced to the caller."""

    code = 500
    status_code = 500


class ConfigError(DatasourceError):
    """The datasource configuration is malformed or incomplete."""

    code = 400
    status_code = 400


class DatasourceConnectionError(DatasourceError):
    """The store could not be reached or refused authentication."""

    code = 502
    status_code = 502


class QueryError(DatasourceError):
    """A read failed after the connection was established."""

    code = 500
    status_code = 500
