"""
ID3v2 backend for MP3 and AIFF files.

MP3 files carry the ID3 tag at the start of the file, so the tag is read
and written with mutagen.id3.ID3 directly and the audio stream is never
touched. AIFF files keep the tag inside an IFF chunk; mutagen.aiff.AIFF
returns a tag object whose save() knows how to rewrite that chunk.

Tags are always written as ID3v2.4.
"""

from pathlib import Path

from mutagen import MutagenError
from mutagen.aiff import AIFF
from mutagen.id3 import ID3, Frame, ID3NoHeaderError

from mr_tagger.core.exceptions import ParseError, SerializeError
from mr_tagger.core.logger import get_logger
from mr_tagger.tags.base import TagBackend, TagKind, file_extension

logger = get_logger(__name__)


ID3_SAVE_VERSION = 4
AIFF_EXTENSIONS = frozenset({"aiff", "aif"})


def store_frames(tag: ID3, frame_id: str, frames: list[Frame]) -> None:
    """
    Replace every frame_id frame of tag with frames, keeping their order.

    mutagen keys APIC frames by description, so two pictures with the
    same description would replace each other. Here each frame gets its
    own key in memory and both are written to disk, where mutagen keeps
    them apart again on the next load.
    """
    tag.delall(frame_id)
    for position, frame in enumerate(frames):
        key = frame.HashKey
        if key in tag:
            logger.debug(
                f"Several {frame_id} frames share the key {key!r}; "
                f"keeping each of them under its own key"
            )
            key = f"{key}#{position}"
        tag[key] = frame


class Id3Backend(TagBackend):
    """Reads and writes ID3v2 tags."""

    KIND = TagKind.ID3
    EXTENSIONS = frozenset({"mp3"}) | AIFF_EXTENSIONS

    def load(self, path: Path) -> ID3:
        """
        Read the ID3 tag of an MP3 or AIFF file.

        Returns:
            The parsed tag, or an empty ID3 tag if the file has none.

        Raises:
            ParseError: If the tag exists but cannot be parsed, or the
                        file cannot be read.
        """
        try:
            if file_extension(path) in AIFF_EXTENSIONS:
                audio = AIFF(path)
                if audio.tags is None:
                    logger.debug(f"No ID3 chunk in {path.name}, starting with an empty tag")
                    audio.add_tags()
                return audio.tags
            return ID3(path)
        except ID3NoHeaderError:
            logger.debug(f"No ID3 tag in {path.name}, starting with an empty tag")
            return ID3()
        except (MutagenError, OSError) as e:
            logger.error(f"Failed to read ID3 tag from {path}: {e}")
            raise ParseError(
                f"Error reading tag for file {path}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

    def save(self, tag: ID3, path: Path) -> None:
        """
        Write the tag to path as ID3v2.4.

        Raises:
            SerializeError: If the file cannot be written.
        """
        try:
            tag.save(path, v2_version=ID3_SAVE_VERSION)
        except (MutagenError, OSError) as e:
            logger.error(f"Failed to write ID3 tag to {path}: {e}")
            raise SerializeError(
                f"Error saving file: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e
        logger.debug(f"ID3v2.4 tag written: {path.name}")
