"""Avatar payload decoding and storage."""
from __future__ import annotations

import base64
import binascii
import json
import mimetypes
import re
import uuid
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from benglish.config import settings
from benglish.utils.exceptions import BadRequestError

DATA_URL_PATTERN = re.compile(r"^data:(.*?);base64,(.*)$", re.DOTALL)
BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/=\s]+$")
RAW_CONTENT_TYPES = ("image/", "application/octet-stream")
JPEG_MARKER = b"\xff\xd8"


@dataclass(slots=True)
class AvatarUpload:
    """Decoded avatar bytes, whatever shape the client sent them in."""

    data: bytes
    content_type: str


def _normalize_mime(value: str) -> str:
    value = value.strip().lower()
    # Some clients drop the slash: "imagejpeg"
    if value and "/" not in value and value.startswith("image"):
        value = f"image/{value[5:] or 'jpeg'}"
    return value


def _decode_base64(value: str) -> bytes:
    try:
        return base64.b64decode(re.sub(r"\s+", "", value), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BadRequestError("Invalid base64 data format") from exc


def decode_avatar_payload(body: bytes, content_type: str | None) -> AvatarUpload:
    """Turn a raw image body or a JSON ``{"avatarData": ...}`` body into bytes.

    ``avatarData`` may be a data URL or bare base64. A JSON string body is
    accepted in place of the object.
    """

    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type.startswith(RAW_CONTENT_TYPES):
        upload = AvatarUpload(data=body, content_type=content_type)
    else:
        try:
            parsed = json.loads(body) if body else None
        except ValueError as exc:
            raise BadRequestError("Avatar data is required") from exc
        avatar_data = parsed.get("avatarData") if isinstance(parsed, dict) else parsed
        if not isinstance(avatar_data, str) or not avatar_data.strip():
            raise BadRequestError("Avatar data is required")
        avatar_data = avatar_data.strip()

        match = DATA_URL_PATTERN.match(avatar_data)
        if match:
            mime = _normalize_mime(match.group(1)) or "application/octet-stream"
            upload = AvatarUpload(data=_decode_base64(match.group(2)), content_type=mime)
        elif BASE64_PATTERN.match(avatar_data):
            upload = AvatarUpload(
                data=_decode_base64(avatar_data), content_type="application/octet-stream"
            )
        else:
            raise BadRequestError("Invalid base64 data format")

    if not upload.data:
        raise BadRequestError("Avatar data is required")
    if len(upload.data) > settings.AVATAR_MAX_BYTES:
        raise BadRequestError("Avatar is too large")
    if upload.content_type == "image/jpeg" and not upload.data.startswith(JPEG_MARKER):
        # Strip junk some clients prepend before the JPEG start-of-image marker
        offset = upload.data.find(JPEG_MARKER)
        if offset > 0:
            upload.data = upload.data[offset:]
    return upload


class AvatarStorage:
    """Store avatars under ``MEDIA_ROOT/avatars`` and serve them from ``MEDIA_BASE_URL``."""

    folder = "avatars"

    def __init__(self, root: Path | None = None, base_url: str | None = None) -> None:
        self.root = Path(root or settings.MEDIA_ROOT)
        self.base_url = (base_url if base_url is not None else settings.MEDIA_BASE_URL).rstrip("/")

    def save(self, upload: AvatarUpload) -> str:
        extension = mimetypes.guess_extension(upload.content_type) or ".bin"
        name = f"{uuid.uuid4().hex}{extension}"
        target = self.root / self.folder / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(upload.data)
        logger.info("Stored avatar", path=str(target), size=len(upload.data))
        return f"{self.base_url}/{self.folder}/{name}"

    def delete(self, url: str | None) -> None:
        """Remove a previously stored avatar; URLs we did not issue are ignored."""

        prefix = f"{self.base_url}/{self.folder}/"
        if not url or not url.startswith(prefix):
            return
        target = self.root / self.folder / Path(url[len(prefix):]).name
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not delete old avatar", path=str(target), error=str(exc))
