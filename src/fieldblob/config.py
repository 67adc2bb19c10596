"""Project configuration: object store and reference gateway settings."""

import os
import tempfile
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .constants import DATABASE_FILE, DATABASE_PATH_ENV, FIELDBLOB_DIR
from .context import ProjectContext
from .policy import StoragePolicy


class DatabaseConfig(BaseModel):
    """Reference gateway configuration."""

    gateway: str = "sqlite"   # "sqlite" | "memory"
    path: str = f"{FIELDBLOB_DIR}/{DATABASE_FILE}"


class FieldBlobConfig(BaseModel):
    """Project configuration (stored in .fieldblob/config.yaml)."""

    storage: StoragePolicy = Field(default_factory=StoragePolicy)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    path_prefix: str = "original"  # Leading segment of generated storage paths

    def database_path(self, root: Path) -> Path:
        """Resolve the database file, honoring FIELDBLOB_DATABASE_PATH."""
        raw = os.environ.get(DATABASE_PATH_ENV) or self.database.path
        path = Path(raw)
        if not path.is_absolute():
            path = root / path
        return path


def _atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to file.

    Writes to a temp file in the same directory, fsyncs it and renames it
    over the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
        suffix=""
    ) as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        tmp_name = f.name

    os.replace(tmp_name, path)


def load_config(ctx: Optional[ProjectContext] = None) -> FieldBlobConfig:
    """Load project configuration.

    Raises:
        FileNotFoundError: If the project has no config file
    """
    if ctx is None:
        ctx = ProjectContext()

    if not ctx.config_path.exists():
        raise FileNotFoundError(f"Configuration not found at {ctx.config_path}")

    with ctx.config_path.open() as f:
        data = yaml.safe_load(f) or {}

    return FieldBlobConfig(**data)


def save_config(config: FieldBlobConfig, ctx: Optional[ProjectContext] = None) -> None:
    """Save project configuration atomically."""
    if ctx is None:
        ctx = ProjectContext.init()

    config_text = yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False)
    _atomic_write_text(ctx.config_path, config_text)
