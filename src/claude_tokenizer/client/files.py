"""File classification and image previews for uploads."""
from __future__ import annotations
import asyncio
import base64
import mimetypes
from pathlib import PurePath

from claude_tokenizer.common.catalog import ACCEPTED_FILE_TYPES
from claude_tokenizer.common.schema import FileKind

_TEXT_MARKERS = ("text", "javascript", "json", "html", "css")
_TEXT_SUFFIXES = (".md", ".csv")


def guess_media_type(name: str) -> str | None:
    return mimetypes.guess_type(name)[0]


def _kind_from_media_type(media_type: str, name: str) -> FileKind:
    mt = media_type.lower()
    if mt.startswith("image/"):
        return FileKind.IMAGE
    if mt == "application/pdf":
        return FileKind.PDF
    if any(marker in mt for marker in _TEXT_MARKERS) or name.lower().endswith(_TEXT_SUFFIXES):
        return FileKind.TEXT
    return FileKind.UNKNOWN


def _kind_from_suffix(name: str) -> FileKind:
    suffix = PurePath(name.lower()).suffix
    for kind, suffixes in ACCEPTED_FILE_TYPES.items():
        if suffix in suffixes:
            return FileKind(kind)
    return FileKind.UNKNOWN


def classify_file(name: str, media_type: str | None = None) -> FileKind:
    """
    Classify an upload as image, pdf, text or unknown.

    The declared media type decides first; the filename suffix is the fallback,
    then a media type guessed from the name.

    Args:
        name: File name as uploaded.
        media_type: Declared media type, if any.
    """
    if media_type:
        kind = _kind_from_media_type(media_type, name)
        if kind is not FileKind.UNKNOWN:
            return kind
    kind = _kind_from_suffix(name)
    if kind is not FileKind.UNKNOWN:
        return kind
    guessed = guess_media_type(name)
    if guessed:
        return _kind_from_media_type(guessed, name)
    return FileKind.UNKNOWN


async def make_preview(data: bytes, media_type: str | None) -> str:
    """Build a data: URL for an image, encoding off the event loop."""
    if not data:
        raise ValueError("image is empty")
    encoded = await asyncio.to_thread(base64.b64encode, data)
    return f"data:{media_type or 'image/jpeg'};base64,{encoded.decode('ascii')}"
