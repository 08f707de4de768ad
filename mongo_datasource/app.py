"""
FastAPI service exposing a MongoDB collection as a table datasource.

Endpoints:
- ``POST /api/table_meta``: infer the table schema from sampled documents
- ``POST /api/records``: fetch one cursor-paginated page of mapped records
- ``GET  /meta.json``: serve the datasource's static metadata file
- ``GET  /health``: liveness check

Every API answer uses the ``{code, message, data}`` envelope; failures carry
a non-zero ``code`` and ``data: null``.
"""

import json
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import AliasChoices, BaseModel, Field

from config import CORS_ORIGINS, DEFAULT_PAGE_SIZE, HOST, META_JSON_PATH, PORT
from db_executor import get_table_records
from errors import DatasourceError
from logger import logger
from models import ConnectionParams
from response_formatter import error_response, success_response
from schema_utils import get_table_meta

VERSION = "1.0.0"

app = FastAPI(title="MongoDB Table Datasource", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ---------------------- REQUEST MODELS ----------------------


class RecordsRequest(BaseModel):
    # Validated by db_executor so a bad shape surfaces as a ConfigError.
    datasource_config: Any = Field(
        default=None,
        validation_alias=AliasChoices("datasourceConfig", "datasource_config"),
    )
    page_token: Optional[str] = Field(
        default="", validation_alias=AliasChoices("pageToken", "page_token")
    )
    max_page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        validation_alias=AliasChoices("maxPageSize", "max_page_size"),
        description="Records per page",
    )


# ---------------------- ERROR HANDLERS ----------------------


@app.exception_handler(DatasourceError)
async def handle_datasource_error(request: Request, exc: DatasourceError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, str(exc)),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    logger.warning("%s %s rejected: %s", request.method, request.url.path, problems)
    return JSONResponse(
        status_code=400,
        content=error_response(400, f"Invalid request body: {problems}"),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("%s %s crashed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content=error_response(500, f"Internal server error: {exc}"),
    )


# ---------------------- ENDPOINTS ----------------------


@app.get("/", response_class=PlainTextResponse)
def index():
    return "hello world"


@app.get("/meta.json")
def meta_json():
    try:
        with open(META_JSON_PATH, "r", encoding="utf-8") as fh:
            return JSONResponse(content=json.load(fh))
    except FileNotFoundError:
        logger.warning("meta.json not found at %s", META_JSON_PATH)
        return JSONResponse(
            status_code=404,
            content=error_response(404, f"meta.json not found at {META_JSON_PATH}"),
        )


@app.post("/api/table_meta")
def table_meta(params: ConnectionParams):
    logger.info("table_meta request for %s.%s", params.database_name, params.table_name)
    schema = get_table_meta(params)
    return success_response(schema)


@app.post("/api/records")
def table_records(request: RecordsRequest):
    logger.info(
        "records request (pageToken=%r, maxPageSize=%d)",
        request.page_token, request.max_page_size,
    )
    page = get_table_records(
        request.datasource_config,
        page_token=request.page_token or "",
        max_page_size=request.max_page_size,
    )
    return success_response(page)


@app.get("/health")
def health_check():
    return {"status": "ok", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
