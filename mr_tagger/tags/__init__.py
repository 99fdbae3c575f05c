"""
Tag backend adapters.

Each adapter reads and writes one tagging scheme using mutagen:
    - id3: ID3v2 tags in MP3 and AIFF files
    - mp4: iTunes-style "ilst" atoms in MP4 files
    - vorbis: Vorbis comments (and pictures) in FLAC and Ogg files

The adapter for a file is chosen from its extension alone, compared
case-insensitively.
"""

from pathlib import Path

from mr_tagger.core.config import TagsConfig
from mr_tagger.core.exceptions import UnsupportedFileTypeError
from mr_tagger.tags.base import TagBackend, TagKind, file_extension
from mr_tagger.tags.id3 import Id3Backend
from mr_tagger.tags.mp4 import Mp4Backend
from mr_tagger.tags.vorbis import VorbisBackend, VorbisTag

SUPPORTED_EXTENSIONS = (
    Id3Backend.EXTENSIONS | Mp4Backend.EXTENSIONS | VorbisBackend.EXTENSIONS
)


def backend_for_kind(kind: TagKind, config: TagsConfig | None = None) -> TagBackend:
    """Return a backend adapter for the given tag kind."""
    config = config or TagsConfig()
    if kind is TagKind.ID3:
        return Id3Backend()
    if kind is TagKind.MP4:
        return Mp4Backend(missing_tag_policy=config.mp4_missing_tag)
    return VorbisBackend()


def backend_for_path(path: Path, config: TagsConfig | None = None) -> TagBackend:
    """
    Select the backend adapter for a file from its extension.

    Args:
        path: Path of the audio file. Only the extension is inspected.
        config: Tag settings (MP4 missing-tag policy).

    Raises:
        UnsupportedFileTypeError: If no adapter handles the extension.
    """
    extension = file_extension(path)
    for backend_class in (Id3Backend, Mp4Backend, VorbisBackend):
        if extension in backend_class.EXTENSIONS:
            return backend_for_kind(backend_class.KIND, config)

    raise UnsupportedFileTypeError(
        f"Unsupported file type: {extension or '(no extension)'}",
        details={"file_path": str(path), "extension": extension}
    )


__all__ = [
    "TagKind",
    "TagBackend",
    "Id3Backend",
    "Mp4Backend",
    "VorbisBackend",
    "VorbisTag",
    "SUPPORTED_EXTENSIONS",
    "backend_for_kind",
    "backend_for_path",
]
