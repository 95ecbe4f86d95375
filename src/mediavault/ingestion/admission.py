"""
mediavault.ingestion.admission

Pre-persistence validation of uploaded files.

Responsibilities:
- Derive the media category from the declared MIME type.
- Check the filename extension against the allowed set.
- Apply the per-category size ceiling.
- Optionally check the leading bytes against the derived category.

Each candidate is judged on its own; `admit` returns one outcome per candidate
and leaves the batch policy (fail-fast or partial accept) to the caller. Checks
run in the order above and the first failure wins.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from mediavault.db.models import MediaCategory
from mediavault.errors import (
    AdmissionError,
    ContentMismatch,
    SizeExceeded,
    UnsupportedExtension,
    UnsupportedType,
)

MIB = 1024 * 1024
VIDEO_MAX_BYTES = 50 * MIB
DEFAULT_MAX_BYTES = 5 * MIB

ALLOWED_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "mp4", "mov", "avi", "mkv", "pdf"})

# Leading-byte kinds accepted for each category.
_CATEGORY_KINDS: dict[MediaCategory, frozenset[str]] = {
    MediaCategory.image: frozenset({"jpeg", "png", "gif"}),
    MediaCategory.video: frozenset({"isobmff", "avi", "matroska"}),
    MediaCategory.pdf: frozenset({"pdf"}),
}
_SNIFF_BYTES = 64


@dataclass(frozen=True, slots=True)
class UploadCandidate:
    original_name: str
    declared_mime_type: str | None
    byte_size: int
    temporary_location: Path


@dataclass(frozen=True, slots=True)
class AdmittedFile:
    candidate: UploadCandidate
    category: MediaCategory
    extension: str


@dataclass(frozen=True, slots=True)
class AdmissionOutcome:
    index: int
    candidate: UploadCandidate
    admitted: AdmittedFile | None = None
    error: AdmissionError | None = None


def derive_category(declared_mime_type: str | None) -> MediaCategory:
    mime = (declared_mime_type or "").split(";", 1)[0].strip().lower()
    if mime.startswith("image/"):
        return MediaCategory.image
    if mime.startswith("video/"):
        return MediaCategory.video
    if mime == "application/pdf":
        return MediaCategory.pdf
    raise UnsupportedType(f"Unsupported file type {declared_mime_type or '(none)'}")


def extract_extension(original_name: str) -> str:
    return os.path.splitext(original_name)[1].lower().lstrip(".")


def check_extension(original_name: str) -> str:
    extension = extract_extension(original_name)
    if extension not in ALLOWED_EXTENSIONS:
        shown = f".{extension}" if extension else "(none)"
        raise UnsupportedExtension(f"File extension {shown} is not allowed")
    return extension


def size_limit(category: MediaCategory) -> int:
    return VIDEO_MAX_BYTES if category == MediaCategory.video else DEFAULT_MAX_BYTES


def check_size(category: MediaCategory, byte_size: int) -> None:
    limit = size_limit(category)
    if byte_size > limit:
        raise SizeExceeded(
            f"File size exceeds the maximum limit of {limit // MIB}MB",
            limit=limit,
        )


def sniff_kind(head: bytes) -> str:
    """
    Classify a file by its leading bytes. Returns 'jpeg' | 'png' | 'gif' |
    'isobmff' (mp4/mov) | 'avi' | 'matroska' | 'pdf' | 'unknown'.
    """

    if head.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if head.startswith((b"GIF87a", b"GIF89a")):
        return "gif"
    if head[4:8] in (b"ftyp", b"moov", b"mdat", b"wide", b"free"):
        return "isobmff"
    if head.startswith(b"RIFF") and head[8:12] == b"AVI ":
        return "avi"
    if head.startswith(b"\x1a\x45\xdf\xa3"):
        return "matroska"
    if head.startswith(b"%PDF-"):
        return "pdf"
    return "unknown"


def check_content(category: MediaCategory, location: Path) -> None:
    with location.open("rb") as fh:
        head = fh.read(_SNIFF_BYTES)
    kind = sniff_kind(head)
    if kind not in _CATEGORY_KINDS[category]:
        raise ContentMismatch(f"File content ({kind}) does not match declared type {category.value}")


def validate(candidate: UploadCandidate, *, sniff_content: bool = False) -> AdmittedFile:
    category = derive_category(candidate.declared_mime_type)
    extension = check_extension(candidate.original_name)
    check_size(category, candidate.byte_size)
    if sniff_content:
        check_content(category, candidate.temporary_location)
    return AdmittedFile(candidate=candidate, category=category, extension=extension)


def admit(
    candidates: Sequence[UploadCandidate], *, sniff_content: bool = False
) -> list[AdmissionOutcome]:
    outcomes: list[AdmissionOutcome] = []
    for index, candidate in enumerate(candidates):
        try:
            admitted = validate(candidate, sniff_content=sniff_content)
        except AdmissionError as e:
            outcomes.append(AdmissionOutcome(index=index, candidate=candidate, error=e))
        else:
            outcomes.append(AdmissionOutcome(index=index, candidate=candidate, admitted=admitted))
    return outcomes
