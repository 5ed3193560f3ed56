from pathlib import Path


class FileSystemStore:
    """Flat directory of uploaded files, addressed by relative name."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _safe_path(self, name: str) -> Path:
        # Prevent traversal
        target = (self.base_path / name).resolve()
        if not target.is_relative_to(self.base_path) or target == self.base_path:
            raise ValueError(f"Path traversal attempt detected: {name}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes and return the name relative to the base directory."""
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return str(target.relative_to(self.base_path))

    def get(self, name: str) -> bytes:
        """Retrieve bytes by name. Raises FileNotFoundError."""
        target = self._safe_path(name)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {name}")
        return target.read_bytes()

    def exists(self, name: str) -> bool:
        return self._safe_path(name).is_file()

    def delete(self, name: str) -> bool:
        """Remove a file. Returns False if it did not exist."""
        target = self._safe_path(name)
        if not target.is_file():
            return False
        target.unlink()
        return True
