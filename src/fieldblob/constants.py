"""Constants for fieldblob."""

# Project marker directory
FIELDBLOB_DIR = ".fieldblob"

# Configuration files (inside FIELDBLOB_DIR)
CONFIG_FILE = "config.yaml"
DATABASE_FILE = "references.sqlite3"

# Reference table
REFERENCE_TABLE = "attachment_references"

# Fallback when the input's type cannot be narrowed down
DEFAULT_MIME_TYPE = "application/octet-stream"

# Environment overrides
DATABASE_PATH_ENV = "FIELDBLOB_DATABASE_PATH"
