"""Directory-backed note blobs.

A note is a free-text blob stored as `<notes_dir>/<hash>`. The hash is allocated once when
the note is created and stays stable while the note is edited, so the tree file only needs
to record the hash. The store knows nothing about todos or the tree.
"""

from __future__ import annotations

import hashlib
import re
import secrets
import time
from pathlib import Path


_HASH_RE = re.compile(r"[0-9a-zA-Z]+")


class NoteStore:
    def __init__(self, notes_dir: Path) -> None:
        self.notes_dir = notes_dir

    def path_for(self, hash: str) -> Path:
        if not _HASH_RE.fullmatch(hash):
            raise ValueError(f"Invalid note hash: {hash!r}")
        return self.notes_dir / hash

    def new_hash(self) -> str:
        """Return a hash that has no blob in the store yet."""
        while True:
            seed = f"{time.time_ns()}-{secrets.token_hex(16)}".encode("utf-8")
            candidate = hashlib.sha1(seed).hexdigest()
            if not self.exists(candidate):
                return candidate

    def exists(self, hash: str) -> bool:
        return self.path_for(hash).is_file()

    def read(self, hash: str) -> str:
        path = self.path_for(hash)
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")

    def write(self, text: str, hash: str | None = None) -> str:
        """Write `text` under `hash` (allocating one when None) and return the hash."""
        if hash is None:
            hash = self.new_hash()
        path = self.path_for(hash)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return hash

    def delete(self, hash: str) -> None:
        self.path_for(hash).unlink(missing_ok=True)
