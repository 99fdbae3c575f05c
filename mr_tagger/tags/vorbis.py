"""
Vorbis comment backend for FLAC and Ogg files.

A Vorbis comment block is an ordered list of (key, value) pairs with
case-insensitive keys. Artwork is kept next to the comments as a list of
FLAC picture structures: FLAC stores them in METADATA_BLOCK_PICTURE
metadata blocks, Ogg streams store them base64-encoded under the
METADATA_BLOCK_PICTURE comment key. VorbisTag hides that difference, so
callers always see comments and pictures as two separate lists.
"""

import base64
import binascii
from dataclasses import dataclass, field
from pathlib import Path

import mutagen
from mutagen import MutagenError
from mutagen._vorbis import VCommentDict
from mutagen.flac import FLAC, Picture
from mutagen.oggflac import OggFLAC
from mutagen.oggopus import OggOpus
from mutagen.oggspeex import OggSpeex
from mutagen.oggvorbis import OggVorbis

from mr_tagger.core.exceptions import ParseError, SerializeError
from mr_tagger.core.logger import get_logger
from mr_tagger.tags.base import TagBackend, TagKind, file_extension

logger = get_logger(__name__)


PICTURE_COMMENT_KEY = "METADATA_BLOCK_PICTURE"

# Extensions whose codec is known from the name alone
OGG_CODEC_CLASSES = {
    "opus": OggOpus,
    "spx": OggSpeex,
}

# Candidates tried for generic Ogg extensions (.ogg, .oga)
OGG_CANDIDATES = [OggVorbis, OggOpus, OggFLAC, OggSpeex]


@dataclass
class VorbisTag:
    """
    In-memory Vorbis comment tag.

    Attributes:
        comments: Ordered (key, value) comment pairs, without picture entries.
        pictures: Embedded pictures in file order.
    """

    comments: VCommentDict = field(default_factory=VCommentDict)
    pictures: list[Picture] = field(default_factory=list)


def pictures_from_comments(values: list[str]) -> list[Picture]:
    """
    Decode base64 METADATA_BLOCK_PICTURE comment values.

    Raises:
        ParseError: If a value is not valid base64 or not a picture block.
    """
    pictures = []
    for value in values:
        try:
            pictures.append(Picture(base64.b64decode(value)))
        except (binascii.Error, ValueError, MutagenError) as e:
            raise ParseError(
                f"Invalid embedded picture: {e}",
                details={"original_error": str(e)}
            ) from e
    return pictures


def pictures_to_comments(pictures: list[Picture]) -> list[str]:
    """Encode pictures as base64 METADATA_BLOCK_PICTURE comment values."""
    return [base64.b64encode(picture.write()).decode("ascii") for picture in pictures]


class VorbisBackend(TagBackend):
    """Reads and writes Vorbis comments in FLAC and Ogg containers."""

    KIND = TagKind.VORBIS
    EXTENSIONS = frozenset({"flac", "ogg", "oga", "opus", "spx"})

    def _open(self, path: Path):
        """
        Open the container at path with the matching mutagen class.

        Generic Ogg extensions are tried against every Ogg codec mutagen
        knows; a file that matches none of them raises MutagenError.
        """
        extension = file_extension(path)
        if extension == "flac":
            return FLAC(path)
        if extension in OGG_CODEC_CLASSES:
            return OGG_CODEC_CLASSES[extension](path)

        audio = mutagen.File(path, options=OGG_CANDIDATES)
        if audio is None:
            raise MutagenError(f"{path.name} is not a supported Ogg stream")
        return audio

    def load(self, path: Path) -> VorbisTag:
        """
        Read comments and pictures from a FLAC or Ogg file.

        Raises:
            ParseError: If the container or comment block is malformed.
        """
        try:
            audio = self._open(path)
        except (MutagenError, OSError) as e:
            logger.error(f"Failed to read Vorbis comments from {path}: {e}")
            raise ParseError(
                f"Error reading tag for file {path}: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e

        tag = VorbisTag()
        if audio.tags is None:
            logger.debug(f"No Vorbis comments in {path.name}, starting with an empty tag")
        else:
            tag.comments.vendor = audio.tags.vendor
            for key, value in audio.tags:
                if key.upper() == PICTURE_COMMENT_KEY:
                    tag.pictures.extend(pictures_from_comments([value]))
                else:
                    tag.comments.append((key, value))

        if isinstance(audio, FLAC):
            tag.pictures = list(audio.pictures) + tag.pictures
        return tag

    def save(self, tag: VorbisTag, path: Path) -> None:
        """
        Replace the comments and pictures of the file at path with tag.

        The target is re-read from disk so that save-as copies get the tag
        written into their own container structure.

        Raises:
            SerializeError: If the file cannot be opened or written.
        """
        try:
            audio = self._open(path)
            if audio.tags is None:
                audio.add_tags()

            audio.tags.clear()
            audio.tags.extend(tag.comments)

            if isinstance(audio, FLAC):
                audio.clear_pictures()
                for picture in tag.pictures:
                    audio.add_picture(picture)
            elif tag.pictures:
                audio.tags[PICTURE_COMMENT_KEY] = pictures_to_comments(tag.pictures)

            audio.save()
        except (MutagenError, OSError) as e:
            logger.error(f"Failed to write Vorbis comments to {path}: {e}")
            raise SerializeError(
                f"Error saving file: {e}",
                details={"file_path": str(path), "original_error": str(e)}
            ) from e
        logger.debug(f"Vorbis comments written: {path.name}")
