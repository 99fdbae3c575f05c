"""
Command surface of the metadata core.

Six operations over a Metadata value, independent of any UI:

    open_metadata(path)                          -> Metadata
    get_field_view(metadata)                     -> FieldView
    get_picture(metadata, index=None)            -> Picture | None
    remove_picture(metadata, index)
    set_picture(metadata, index, data, extension)
    save_metadata(metadata, path)

Usage:
    from mr_tagger.commands import open_metadata, get_field_view, save_metadata

    metadata = open_metadata(Path("song.mp3"))
    metadata.set_title("New title")
    save_metadata(metadata, Path("song.mp3"))
"""

from pathlib import Path

from mr_tagger.core.config import TagsConfig
from mr_tagger.core.logger import get_logger
from mr_tagger.metadata.artwork import get_picture, remove_picture, set_picture
from mr_tagger.metadata.facade import Metadata, wrap_tag
from mr_tagger.metadata.frames import project
from mr_tagger.metadata.models import FieldView
from mr_tagger.tags import backend_for_kind, backend_for_path

logger = get_logger(__name__)


def open_metadata(path: Path, config: TagsConfig | None = None) -> Metadata:
    """
    Read the tag of an audio file.

    A file without a tag yields an empty tag of the right kind.

    Args:
        path: Path to the audio file.
        config: Tag settings; defaults apply when None.

    Raises:
        UnsupportedFileTypeError: If the extension is not supported.
        ParseError: If the tag cannot be read.
    """
    path = Path(path)
    backend = backend_for_path(path, config)
    metadata = wrap_tag(backend.KIND, backend.load(path))
    logger.debug(f"Opened {path.name} ({backend.KIND.value})")
    return metadata


def get_field_view(metadata: Metadata) -> FieldView:
    """Take a snapshot of every canonical field plus the raw frames."""
    track_num, track_total = metadata.track()
    disc_num, disc_total = metadata.disc()
    return FieldView(
        title=metadata.title(),
        artists=tuple(metadata.artists()),
        album=metadata.album(),
        album_artists=tuple(metadata.album_artists()),
        composers=tuple(metadata.composers()),
        groupings=tuple(metadata.groupings()),
        genres=tuple(metadata.genres()),
        track_num=track_num,
        track_total=track_total,
        disc_num=disc_num,
        disc_total=disc_total,
        compilation=metadata.compilation(),
        bpm=metadata.bpm(),
        comments=tuple(metadata.comments()),
        frames=tuple(project(metadata)),
    )


def save_metadata(metadata: Metadata, path: Path) -> None:
    """
    Write a tag to the audio file at path.

    ID3 tags are always written as v2.4; MP4 and Vorbis tags use their
    native layout. The file must already exist and be of the tag's kind.

    Raises:
        SerializeError: If the file cannot be written.
    """
    path = Path(path)
    backend_for_kind(metadata.kind).save(metadata.tag, path)
    logger.info(f"Saved {path.name}")


__all__ = [
    "open_metadata",
    "get_field_view",
    "get_picture",
    "remove_picture",
    "set_picture",
    "save_metadata",
]
