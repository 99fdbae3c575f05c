"""
MP4/iTunes backend for M4A-family files.

The tag is the "ilst" atom tree, exposed by mutagen as MP4Tags: a mapping
from atom name (e.g. "\xa9nam") to a list of values. Track and disc
numbers are stored as (number, total) tuples and artwork as MP4Cover
values in the "covr" list.

Files without an "ilst" tree either start with an empty tag or are
rejected, depending on the tags.mp4_missing_tag setting.
"""

from pathlib import Path

from mutagen import MutagenError
from mutagen.mp4 import MP4, MP4Tags

from mr_tagger.core.config import MP4_MISSING_TAG_EMPTY, MP4_MISSING_TAG_ERROR
from mr_tagger.core.exceptions import ParseError, SerializeError
from mr_tagger.core.logger import get_logger
from mr_tagger.tags.base import TagBackend, TagKind

logger = get_logger(__name__)


class Mp4Backend(TagBackend):
    """Reads and writes MP4 "ilst" metadata."""

    KIND = TagKind.MP4
    EXTENSIONS = frozenset({"m4a", "mp4", "m4p", "m4b", "m4r", "m4v"})

    def __init__(self, missing_tag_policy: str = MP4_MISSING_TAG_EMPTY) -> None:
        """
        Args:
            missing_tag_policy: MP4_MISSING_TAG_EMPTY to substitute an empty
                                tag for files without metadata, or
                                MP4_MISSING_TAG_ERROR to refuse them.
        """
        self.missing_tag_policy = missing_tag_policy

    def load(self, path: Path) -> MP4Tags:
        """
        Read the metadata atoms of an MP4 file.

        Raises:
            ParseError: If the file is not a readable MP4 container, or it
                        has no metadata and the policy is MP4_MISSING_TAG_ERROR.
        """
        try:
            audio = MP4(path)
        except (MutagenError, OSError) as e:
            logger.error(f"Failed to read MP4 tag from {path}: {e}")
            raise ParseError(
                f"Error reading tag for file {path}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

        if audio.tags is None:
            if self.missing_tag_policy == MP4_MISSING_TAG_ERROR:
                logger.error(f"No MP4 tag in {path}")
                raise ParseError(
                    f"Error reading tag for file {path}: no tag found",
                    details={"file_path": str(path)}
                )
            logger.debug(f"No MP4 tag in {path.name}, starting with an empty tag")
            audio.add_tags()
        return audio.tags

    def save(self, tag: MP4Tags, path: Path) -> None:
        """
        Write the metadata atoms into the MP4 file at path.

        Raises:
            SerializeError: If the file cannot be written or is not MP4.
        """
        try:
            tag.save(path)
        except (MutagenError, OSError) as e:
            logger.error(f"Failed to write MP4 tag to {path}: {e}")
            raise SerializeError(
                f"Error saving file: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e
        logger.debug(f"MP4 tag written: {path.name}")
