"""Artifact storage for downloads, with memory and disk backends."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Protocol, Tuple

import yaml

logger = logging.getLogger(__name__)


class ArtifactStorage(Protocol):
    """Protocol for artifact storage backends."""

    def save(self, key: str, value: Any) -> str:
        """Save value by key.

        Args:
            key: Storage key (e.g., "results/Layout-invoice.json", "pages/001")
            value: Value to save (bytes, dict or str depending on key type)

        Returns:
            Location of the saved artifact
        """
        ...

    def load(self, key: str, default: Any = None) -> Any:
        ...

    def exists(self, key: str) -> bool:
        ...


class MemoryStorage:
    """In-memory storage backend for tests and embedding."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        logger.info("Initialized MemoryStorage backend")

    def save(self, key: str, value: Any) -> str:
        self._data[key] = value
        logger.debug(f"MemoryStorage: saved key '{key}'")
        return key

    def load(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def exists(self, key: str) -> bool:
        return key in self._data


class DiskStorage:
    """File-based storage backend.

    Layout under the root directory:
        results/   downloaded analysis results (JSON)
        scripts/   generated analyze scripts (text)
        pages/     rendered page images (PNG)
        summary/   run summaries (YAML)
    """

    def __init__(self, root_dir: Path) -> None:
        """Initialize disk storage with directory structure.

        Args:
            root_dir: Root directory for artifacts
        """
        self.root_dir = Path(root_dir)
        self.results_dir = self.root_dir / "results"
        self.scripts_dir = self.root_dir / "scripts"
        self.pages_dir = self.root_dir / "pages"
        self.summary_dir = self.root_dir / "summary"

        for directory in [self.results_dir, self.scripts_dir, self.pages_dir, self.summary_dir]:
            directory.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initialized DiskStorage backend at {self.root_dir}")

    def _get_file_path(self, key: str) -> Tuple[Path, str]:
        """Parse key and determine file path and format.

        Returns:
            Tuple of (file_path, format) where format is "binary", "json", "text" or "yaml"
        """
        parts = key.split("/", 1)
        if len(parts) != 2:
            raise ValueError(f"Invalid key format: '{key}'. Expected 'type/name'")

        key_type, name = parts

        if key_type == "pages":
            return self.pages_dir / f"page_{name}.png", "binary"
        if key_type == "results":
            return self.results_dir / name, "json"
        if key_type == "scripts":
            return self.scripts_dir / name, "text"
        if key_type == "summary":
            return self.summary_dir / f"{name}.yaml", "yaml"
        raise ValueError(f"Unknown key type: '{key_type}'")

    def save(self, key: str, value: Any) -> str:
        file_path, format_type = self._get_file_path(key)

        try:
            if format_type == "binary":
                if not isinstance(value, bytes):
                    raise TypeError(f"Binary save requires bytes, got {type(value)}")
                file_path.write_bytes(value)

            elif format_type == "json":
                with file_path.open("w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False, indent=2)

            elif format_type == "text":
                file_path.write_text(value, encoding="utf-8")

            elif format_type == "yaml":
                with file_path.open("w", encoding="utf-8") as f:
                    yaml.safe_dump(value, f, allow_unicode=True, default_flow_style=False)

            logger.info(f"DiskStorage: saved key '{key}' to {file_path}")
            return str(file_path)

        except Exception as e:
            logger.error(f"DiskStorage: failed to save key '{key}': {e}")
            raise

    def load(self, key: str, default: Any = None) -> Any:
        file_path, format_type = self._get_file_path(key)

        if not file_path.exists():
            return default

        if format_type == "binary":
            return file_path.read_bytes()
        if format_type == "text":
            return file_path.read_text(encoding="utf-8")
        with file_path.open("r", encoding="utf-8") as f:
            if format_type == "json":
                return json.load(f)
            return yaml.safe_load(f)

    def exists(self, key: str) -> bool:
        file_path, _ = self._get_file_path(key)
        return file_path.exists()
