"""Project context for managing paths and project discovery."""

from pathlib import Path
from typing import Optional

from .constants import CONFIG_FILE, FIELDBLOB_DIR


class ProjectContext:
    """Manages project root discovery and path resolution."""

    def __init__(self, start_path: Optional[Path] = None):
        """Initialize context by finding project root.

        Args:
            start_path: Path to start searching for project root
        """
        self.root = self._find_root(start_path or Path.cwd())
        if not self.root:
            raise ValueError(f"Not inside a fieldblob project (no {FIELDBLOB_DIR} found)")

    @classmethod
    def is_initialized(cls, path: Optional[Path] = None) -> bool:
        """Check if a specific directory is initialized (without traversing up)."""
        target = path or Path.cwd()
        return (target / FIELDBLOB_DIR).exists()

    @classmethod
    def init(cls, path: Optional[Path] = None) -> 'ProjectContext':
        """Initialize a new project at the given path."""
        target = path or Path.cwd()
        marker = target / FIELDBLOB_DIR
        marker.mkdir(parents=True, exist_ok=True)
        return cls(target)

    def _find_root(self, start: Path) -> Optional[Path]:
        """Walk up directory tree to find project root."""
        current = start.resolve()

        while current != current.parent:
            if (current / FIELDBLOB_DIR).exists():
                return current
            current = current.parent

        # Check root directory
        if (current / FIELDBLOB_DIR).exists():
            return current
        return None

    @property
    def storage_dir(self) -> Path:
        """Get the project metadata directory."""
        return self.root / FIELDBLOB_DIR

    @property
    def config_path(self) -> Path:
        """Get path to config file."""
        return self.storage_dir / CONFIG_FILE
