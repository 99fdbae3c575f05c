"""
Shared definitions for tag backend adapters.

A backend adapter turns a file path into an in-memory tag structure and
writes such a structure back to disk. There is exactly one adapter per
tagging scheme, and TagKind enumerates them: code that needs per-scheme
behaviour keys its dispatch tables on TagKind so a missing scheme is
easy to spot.
"""

import abc
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar


class TagKind(Enum):
    """The closed set of supported tagging schemes."""

    ID3 = "id3"
    MP4 = "mp4"
    VORBIS = "vorbis"


def file_extension(path: Path) -> str:
    """Return the lower-cased extension of path without the leading dot."""
    return path.suffix.lower().lstrip(".")


class TagBackend(abc.ABC):
    """
    Abstract base class for tag backend adapters.

    Subclasses declare which file extensions they handle and implement
    load() and save(). load() must substitute an empty tag when the file
    has no tag block and raise ParseError when the tag is malformed.
    save() must raise SerializeError on any write failure.
    """

    KIND: ClassVar[TagKind]
    EXTENSIONS: ClassVar[frozenset[str]] = frozenset()

    @abc.abstractmethod
    def load(self, path: Path) -> Any:
        """Parse the tag of the file at path."""
        raise NotImplementedError

    @abc.abstractmethod
    def save(self, tag: Any, path: Path) -> None:
        """Write tag into the file at path."""
        raise NotImplementedError
