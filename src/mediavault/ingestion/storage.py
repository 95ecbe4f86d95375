"""
mediavault.ingestion.storage

On-disk media storage.

Responsibilities:
- Lay out `<root>/<category-dir>/<generated>.<ext>` and an `.incoming` spool area.
- Place admitted bytes under a freshly generated name that never reuses an existing file.
- Remove stored objects, reporting (not raising) when they are already gone.

Category directories: IMAGE -> images, VIDEO -> media, PDF -> media.
"""

from __future__ import annotations

import secrets
import shutil
import time
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from mediavault.db.models import MediaCategory

CATEGORY_DIRS: dict[MediaCategory, str] = {
    MediaCategory.image: "images",
    MediaCategory.video: "media",
    MediaCategory.pdf: "media",
}
INCOMING_DIR = ".incoming"

_COPY_CHUNK = 1024 * 1024


class StorageNameExhausted(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class StoredObject:
    relative_path: str


def generate_name() -> str:
    # Millisecond timestamp plus 48 random bits; uniqueness is still enforced by O_EXCL.
    return f"{time.time_ns() // 1_000_000}-{secrets.token_hex(6)}"


class MediaStorage:
    def __init__(self, root: str | Path, *, name_attempts: int = 5) -> None:
        self._root = Path(root).resolve()
        self._name_attempts = name_attempts

    @property
    def root(self) -> Path:
        return self._root

    def ensure_layout(self) -> None:
        for name in {*CATEGORY_DIRS.values(), INCOMING_DIR}:
            (self._root / name).mkdir(parents=True, exist_ok=True)

    def incoming_path(self) -> Path:
        return self._root / INCOMING_DIR / uuid.uuid4().hex

    def resolve(self, relative_path: str) -> Path:
        path = (self._root / PurePosixPath(relative_path)).resolve()
        if not path.is_relative_to(self._root):
            raise ValueError(f"storage path escapes root: {relative_path}")
        return path

    def place(self, source: Path, *, category: MediaCategory, extension: str) -> StoredObject:
        """
        Copy `source` into the category directory under a new unique name, then
        delete `source`. Returns the path relative to the storage root.
        """

        directory = CATEGORY_DIRS[category]
        for _ in range(self._name_attempts):
            relative = f"{directory}/{generate_name()}.{extension}"
            target = self.resolve(relative)
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                # "xb" fails if the name exists, so concurrent uploads never share a file.
                out = target.open("xb")
            except FileExistsError:
                continue
            try:
                with out, source.open("rb") as src:
                    shutil.copyfileobj(src, out, _COPY_CHUNK)
            except BaseException:
                target.unlink(missing_ok=True)
                raise
            source.unlink(missing_ok=True)
            return StoredObject(relative_path=relative)

        raise StorageNameExhausted(f"no free storage name after {self._name_attempts} attempts")

    def discard(self, relative_path: str) -> bool:
        """
        Delete a stored object. Returns False if it was already missing.
        """

        try:
            self.resolve(relative_path).unlink()
        except FileNotFoundError:
            return False
        return True

    def exists(self, relative_path: str) -> bool:
        return self.resolve(relative_path).is_file()
