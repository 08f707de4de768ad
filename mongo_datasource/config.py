import os
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


# ---- MongoDB connection ----
MONGO_AUTH_SOURCE = os.getenv("MONGO_AUTH_SOURCE", "admin")

# Unset means the driver's own default applies.
MONGO_SERVER_SELECTION_TIMEOUT_MS = _optional_int("MONGO_SERVER_SELECTION_TIMEOUT_MS")

# Key used for isPrimary detection and cursor pagination.
DEFAULT_IDENTITY_FIELD = os.getenv("DEFAULT_IDENTITY_FIELD", "_id")

# ---- Schema inference / paging ----
SCHEMA_SAMPLE_SIZE = int(os.getenv("SCHEMA_SAMPLE_SIZE", "10"))
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "100"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "1000"))

# ---- HTTP ----
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
META_JSON_PATH = os.getenv("META_JSON_PATH", "public/meta.json")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
