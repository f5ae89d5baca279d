import os
import secrets
import time
from pathlib import Path


def random_upload_name(extension: str) -> str:
    """``<epoch-ms>-<16 hex>.<ext>``; extension is lowercased, dot optional."""
    ext = extension.lower().lstrip(".") or "bin"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}.{ext}"


class FileSystemStore:
    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, name: str) -> Path:
        # Prevent traversal
        target = (self.base_path / name).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {name}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes and return the path relative to the store root."""
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        return target.relative_to(self.base_path).as_posix()

    def get(self, name: str) -> bytes:
        """Retrieve bytes by name. Raises FileNotFoundError."""
        target = self._safe_path(name)
        if not target.exists():
            raise FileNotFoundError(f"File not found: {name}")
        with open(target, "rb") as f:
            return f.read()

    def delete(self, name: str) -> None:
        target = self._safe_path(name)
        if target.exists():
            os.remove(target)
