"""
In-memory store of the built dashboard bundle.
"""
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

ENTRY_DOCUMENT = "index.html"
DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(path: str) -> str:
    """Infer a MIME type from the file extension."""
    mime_type, _ = mimetypes.guess_type(path, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class AssetEntry:
    path: str
    data: bytes
    mime_type: str


class AssetStore:
    """
    Read-only mapping of relative path to asset.

    Paths are relative and always use forward slashes. Lookups are exact;
    there is no directory listing.
    """

    def __init__(self, entries: Optional[Dict[str, AssetEntry]] = None):
        self._entries: Dict[str, AssetEntry] = dict(entries or {})

    @classmethod
    def from_files(cls, files: Dict[str, bytes]) -> "AssetStore":
        """Build a store from {relative path: content}."""
        entries = {}
        for path, data in files.items():
            path = path.replace("\\", "/").lstrip("/")
            entries[path] = AssetEntry(path=path, data=bytes(data), mime_type=guess_mime_type(path))
        return cls(entries)

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "AssetStore":
        """Load every regular file below a directory."""
        root = Path(directory)
        if not root.is_dir():
            logger.warning(f"UI assets directory {root} not found, serving without a bundle")
            return cls()

        files = {}
        for file_path in sorted(root.rglob("*")):
            if file_path.is_file():
                files[file_path.relative_to(root).as_posix()] = file_path.read_bytes()

        store = cls.from_files(files)
        logger.info(f"Loaded {len(store)} UI assets from {root}")
        return store

    def get(self, path: str) -> Optional[AssetEntry]:
        return self._entries.get(path)

    @property
    def entry_document(self) -> Optional[AssetEntry]:
        """The SPA shell served for client-side routes."""
        return self._entries.get(ENTRY_DOCUMENT)

    def paths(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)
