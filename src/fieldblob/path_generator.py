"""Storage path generation for binary fields."""

import re
from pathlib import Path, PurePosixPath
from typing import Protocol

from .core import Field, VersionInfo
from .errors import InvalidInputError
from .hashing import compute_file_digest, short_digest

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class PathGenerator(Protocol):
    """Chooses the object store path for a field's pending input."""

    def get_storage_path_for_field(self, field: Field, version_info: VersionInfo) -> str:
        ...


def _safe_name(name: str) -> str:
    """Reduce a file name to a single safe path segment."""
    cleaned = _UNSAFE.sub("_", PurePosixPath(name.replace("\\", "/")).name).strip("._")
    return cleaned or "file"


class DigestPathGenerator:
    """
    Path layout: <prefix>/<field_id>/<version_no>-<language>/<sha256[:16]>/<file_name>

    The field/version/language segments keep paths apart per translation and
    version; the content digest keeps a re-upload of a different file under
    the same name from overwriting a blob another reference may still use.
    """

    def __init__(self, prefix: str = "original"):
        self.prefix = prefix.strip("/")

    def get_storage_path_for_field(self, field: Field, version_info: VersionInfo) -> str:
        data = field.external_data
        if data is None or not data.input_uri:
            raise InvalidInputError(f"Field {field.id} has no pending input to place")

        local = Path(data.input_uri)
        digest = short_digest(compute_file_digest(local))
        name = _safe_name(data.file_name or local.name)

        parts = [
            str(field.id),
            f"{version_info.version_no}-{field.language_code}",
            digest,
            name,
        ]
        if self.prefix:
            parts.insert(0, self.prefix)
        return "/".join(parts)
