"""
Data models returned by the metadata layer.

These are plain, format-independent value objects. Whatever tagging scheme
a file uses, callers only ever see Picture, Comment, Frame and FieldView.

Design Decisions:
    - All dataclasses are frozen (immutable): they are snapshots, and
      mutating one never changes the underlying tag
    - Number fields (track, disc, bpm) are strings; "" means "not set"
    - Multi-valued fields are tuples in tag order, duplicates kept
    - to_dict() produces JSON-friendly dicts for a UI layer

Usage:
    from mr_tagger.metadata.models import FieldView, Picture

    view = get_field_view(metadata)
    print(view.title, view.track_num, view.track_total)
"""

import base64
from dataclasses import asdict, dataclass, field
from typing import Any


# Display names of the ID3/FLAC picture type codes, indexed by code
PICTURE_TYPE_NAMES = (
    "Other",
    "Icon",
    "Other icon",
    "Front cover",
    "Back cover",
    "Leaflet",
    "Media",
    "Lead artist",
    "Artist",
    "Conductor",
    "Band",
    "Composer",
    "Lyricist",
    "Recording location",
    "During recording",
    "During performance",
    "Screen capture",
    "Bright fish",
    "Illustration",
    "Band logo",
    "Publisher logo",
)

PICTURE_TYPE_OTHER = 0
PICTURE_TYPE_FRONT_COVER = 3


def picture_type_name(code: int) -> str | None:
    """Return the display name of a picture type code, or None if unknown."""
    if 0 <= code < len(PICTURE_TYPE_NAMES):
        return PICTURE_TYPE_NAMES[code]
    return None


@dataclass(frozen=True)
class Picture:
    """
    One embedded picture, as read from a tag.

    Attributes:
        index: Position of the picture in the tag's picture list.
        total: Number of pictures in the tag.
        data: Raw image bytes.
        mime_type: MIME type string, e.g. "image/jpeg".
        description: Free-text description. None where the format has
                     no descriptions (MP4).
        picture_type: Display name of the picture type (see
                      PICTURE_TYPE_NAMES). None where the format has no
                      picture types (MP4).
    """

    index: int
    total: int
    data: bytes = field(repr=False)
    mime_type: str
    description: str | None = None
    picture_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dict with the image data base64-encoded."""
        return {
            "index": self.index,
            "total": self.total,
            "data": base64.b64encode(self.data).decode("ascii"),
            "mime_type": self.mime_type,
            "description": self.description,
            "picture_type": self.picture_type,
        }


@dataclass(frozen=True)
class Comment:
    """
    A comment entry.

    Only ID3 comments carry a language and a description; MP4 and
    Vorbis comments are text only and leave both as None.
    """

    text: str
    lang: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class Frame:
    """A raw (identifier, value) text frame from the frame projection."""

    id: str
    value: str


@dataclass(frozen=True)
class FieldView:
    """
    Snapshot of every canonical field of a tag.

    Attributes:
        title, album: Single text values, "" when missing.
        artists, album_artists, composers, groupings, genres: Multi-valued
            text fields in tag order.
        track_num, track_total, disc_num, disc_total: Parsed integers
            rendered as strings, "" when missing.
        compilation: True only when the tag explicitly flags a compilation.
        bpm: Beats per minute as stored, "" when missing.
        comments: All comment entries in tag order.
        frames: Raw frame projection (see metadata.frames).
    """

    title: str = ""
    artists: tuple[str, ...] = ()
    album: str = ""
    album_artists: tuple[str, ...] = ()
    composers: tuple[str, ...] = ()
    groupings: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()
    track_num: str = ""
    track_total: str = ""
    disc_num: str = ""
    disc_total: str = ""
    compilation: bool = False
    bpm: str = ""
    comments: tuple[Comment, ...] = ()
    frames: tuple[Frame, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict (tuples become lists)."""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, tuple):
                result[key] = list(value)
        return result
