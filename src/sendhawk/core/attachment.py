# =============================================================================
# Attachment Model
# =============================================================================
# A file attached to an outgoing message: a filename and its bytes.
#
# Attachments are immutable once built. Content is either passed in directly
# or read from disk when the attachment is constructed, never later, so a
# message always serializes the bytes it was given.
# =============================================================================

import base64
import os
from dataclasses import dataclass
from pathlib import Path

from sendhawk.sanitize import default_text_sanitizer


@dataclass(frozen=True)
class Attachment:
    """
    Represents a file attached to an email message.

    Attributes:
        filename: Name shown to the recipient. Stored raw; read it through
                  get_filename() to get the header-safe (escaped) form.
        content: The raw file bytes.

    Example:
        >>> attachment = Attachment("report.pdf", b"%PDF-1.7 ...")
        >>> attachment.size
        12
    """
    filename: str
    content: bytes = b""

    def __post_init__(self) -> None:
        # bytearray/memoryview in, immutable bytes stored
        if not isinstance(self.content, bytes):
            object.__setattr__(self, "content", bytes(self.content))

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> "Attachment":
        """
        Read a file from disk into a new attachment.

        The filename is the last component of the path.

        Raises:
            OSError: If the file can't be read (e.g. FileNotFoundError).
        """
        file_path = Path(path)
        return cls(filename=file_path.name, content=file_path.read_bytes())

    @property
    def size(self) -> int:
        """Size of the content in bytes."""
        return len(self.content)

    @property
    def human_size(self) -> str:
        """
        Returns a human-readable file size.

        Examples:
            - 500 -> "500 B"
            - 1500 -> "1.5 KB"
            - 1500000 -> "1.4 MB"
        """
        size: float = self.size
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024:
                return f"{size:.1f} {unit}" if size != int(size) else f"{int(size)} {unit}"
            size /= 1024
        return f"{size:.1f} TB"

    def get_filename(self) -> str:
        """Filename escaped for use inside a Content-Disposition header."""
        return default_text_sanitizer().sanitize(self.filename)

    def get_raw_content(self) -> bytes:
        return self.content

    def get_base64_content(self) -> bytes:
        """Content as standard base64 bytes (empty content gives b"")."""
        if not self.content:
            return b""
        return base64.b64encode(self.content)

    def get_base64_string_content(self) -> str:
        return self.get_base64_content().decode("ascii")

    def to_dict(self) -> dict[str, str]:
        """JSON-friendly form: filename plus base64 content."""
        return {
            "filename": self.filename,
            "content": self.get_base64_string_content(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "Attachment":
        """
        Inverse of to_dict().

        Raises:
            binascii.Error: If the content isn't valid base64.
        """
        content = base64.b64decode(data.get("content", ""), validate=True)
        return cls(filename=data.get("filename", ""), content=content)

    def __repr__(self) -> str:
        return f"Attachment(filename={self.filename!r}, size={self.human_size})"
