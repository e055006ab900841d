"""Image files <-> data URLs stored on character records."""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from pathlib import Path

from birthdaybook.errors import PersistenceFailure, ValidationError

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def to_data_url(path: Path) -> str:
    """Read an image file and return a ``data:<mime>;base64,...`` string."""
    mime, _ = mimetypes.guess_type(path.name)
    if not mime or not mime.startswith("image/"):
        raise ValidationError("image", str(path), "not an image file")
    try:
        payload = path.read_bytes()
    except OSError as e:
        raise PersistenceFailure("read", path, e) from e
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def from_data_url(data_url: str) -> tuple[str, bytes]:
    """Decode a data URL back into ``(mime, bytes)``."""
    match = _DATA_URL.match(data_url or "")
    if not match:
        raise ValidationError("image", (data_url or "")[:32], "not a base64 data URL")
    try:
        return match.group("mime"), base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValidationError("image", (data_url or "")[:32], f"bad base64 payload: {e}") from e
