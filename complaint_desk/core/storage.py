"""Local filesystem storage for complaint attachments."""
import uuid
from pathlib import Path

from complaint_desk.config import settings


class StorageClient:
    """Stores files under UPLOAD_DIR. Paths handed out are relative to that root."""

    @classmethod
    def get_root(cls) -> Path:
        return Path(settings.UPLOAD_DIR).resolve()

    @classmethod
    def resolve(cls, path: str) -> Path:
        """
        Map a stored relative path to an absolute location under the root.

        Raises:
            ValueError: if the path escapes the upload root
        """
        root = cls.get_root()
        full_path = (root / path.lstrip("/")).resolve()
        if not full_path.is_relative_to(root):
            raise ValueError(f"Path outside upload root: {path}")
        return full_path

    @classmethod
    def upload(cls, content: bytes, path: str) -> str:
        """
        Write file content.

        Args:
            content: File content as bytes
            path: Relative storage path (e.g., "uploads/<complaint>/ab12cd.pdf")

        Returns:
            The relative path that was written
        """
        full_path = cls.resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)
        return path

    @classmethod
    def delete(cls, path: str) -> None:
        """
        Delete a stored file.

        Raises:
            FileNotFoundError: if the file is already gone
            OSError: on any other filesystem failure
        """
        cls.resolve(path).unlink()

    @classmethod
    def exists(cls, path: str) -> bool:
        try:
            return cls.resolve(path).is_file()
        except ValueError:
            return False

    @classmethod
    def generate_unique_filename(cls, original_filename: str, prefix: str = "") -> str:
        """
        Generate a unique filename to prevent collisions.

        Args:
            original_filename: Original file name
            prefix: Optional directory prefix (e.g., "uploads/<complaint id>")

        Returns:
            Unique filename with path
        """
        ext = ""
        if "." in original_filename:
            ext = "." + original_filename.rsplit(".", 1)[1].lower()

        unique_id = uuid.uuid4().hex[:12]

        if prefix:
            return f"{prefix}/{unique_id}{ext}"
        return f"{unique_id}{ext}"
