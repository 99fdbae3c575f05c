"""
Unified field model over the three tagging schemes.

Metadata is a closed family of wrappers, one per TagKind, each holding the
backend tag it was created from. Every wrapper exposes the same accessors
and setters, so callers never branch on the tag format:

    metadata.title()                 -> "Song"
    metadata.artists()               -> ["Alice", "Bob"]
    metadata.track()                 -> ("3", "12")
    metadata.set_track("4", "12")
    metadata.set_field("genres", ["Rock", "Pop"])

Where the schemes disagree on storage:

    Field          ID3                  MP4                Vorbis
    title          TIT2                 \xa9nam            TITLE
    artists        TPE1 (NUL-split)     \xa9ART            ARTIST
    album          TALB                 \xa9alb            ALBUM
    album_artists  TPE2 (NUL-split)     aART               ALBUMARTIST
    composers      TCOM (NUL-split)     \xa9wrt            COMPOSER
    groupings      GRP1, legacy GP1     \xa9grp            GROUPING
    genres         TCON (NUL-split)     \xa9gen            GENRE
    track          TRCK "n/total"       trkn (n, total)    TRACKNUMBER + TRACKTOTAL
    disc           TPOS "n/total"       disk (n, total)    DISCNUMBER + DISCTOTAL
    compilation    TCMP or legacy TCP   cpil               COMPILATION
    bpm            TBPM                 tmpo               BPM
    comments       COMM frames          \xa9cmt            COMMENT

Number fields are strings: "" when missing, otherwise the parsed integer
rendered back to a string, so "03" reads as "3". Setting an empty value
(or an empty list) removes the field from the tag.
"""

import abc
from typing import Any, ClassVar

from mutagen.id3 import COMM, ID3, Encoding, Frames
from mutagen.mp4 import MP4Tags

from mr_tagger.core.exceptions import InvalidFieldValueError
from mr_tagger.metadata.models import Comment
from mr_tagger.tags.base import TagKind
from mr_tagger.tags.id3 import store_frames
from mr_tagger.tags.vorbis import VorbisTag


SINGLE_TEXT_FIELDS = ("title", "album")
MULTI_TEXT_FIELDS = ("artists", "album_artists", "composers", "groupings", "genres")
NUMBER_PAIR_FIELDS = {
    "track_num": ("track", 0),
    "track_total": ("track", 1),
    "disc_num": ("disc", 0),
    "disc_total": ("disc", 1),
}
WRITABLE_FIELDS = (
    SINGLE_TEXT_FIELDS
    + MULTI_TEXT_FIELDS
    + tuple(NUMBER_PAIR_FIELDS)
    + ("compilation", "bpm", "comments")
)

# MP4 stores track, disc and tempo numbers in 16 bits
MP4_MAX_NUMBER = 0xFFFF


def _is_number(value: str) -> bool:
    return value.isascii() and value.isdigit()


def normalize_number(value: str | None) -> str:
    """Render a stored number as its parsed integer, or "" if it is not one."""
    value = (value or "").strip()
    return str(int(value)) if _is_number(value) else ""


def parse_number_pair(value: str | None) -> tuple[str, str]:
    """Split "n/total" text into normalized (number, total) strings."""
    number, _, total = (value or "").partition("/")
    return normalize_number(number), normalize_number(total)


def check_number(field_name: str, value: str, maximum: int | None = None) -> str:
    """
    Validate a number written by a caller.

    Returns:
        The normalized number, or "" for an empty value.

    Raises:
        InvalidFieldValueError: If value is neither empty nor a whole
                                number within maximum.
    """
    if not isinstance(value, str):
        raise InvalidFieldValueError(
            f"{field_name} must be a string, got {type(value).__name__}",
            details={"field": field_name}
        )
    value = value.strip()
    if not value:
        return ""
    if not _is_number(value) or (maximum is not None and int(value) > maximum):
        raise InvalidFieldValueError(
            f"Invalid value for {field_name}: {value!r}",
            details={"field": field_name, "value": value}
        )
    return str(int(value))


class Metadata(abc.ABC):
    """
    Format-independent view of one backend tag.

    Subclasses implement every accessor and setter for their tag format.
    The wrapped tag is mutated in place; nothing reaches the disk until
    the tag is saved through its backend adapter.

    Attributes:
        kind: The tagging scheme of the wrapped tag.
        tag: The backend tag object.
    """

    kind: ClassVar[TagKind]

    def __init__(self, tag: Any) -> None:
        self.tag = tag

    def __repr__(self) -> str:
        return f"{type(self).__name__}(title={self.title()!r})"

    # Accessors

    @abc.abstractmethod
    def title(self) -> str: ...

    @abc.abstractmethod
    def artists(self) -> list[str]: ...

    @abc.abstractmethod
    def album(self) -> str: ...

    @abc.abstractmethod
    def album_artists(self) -> list[str]: ...

    @abc.abstractmethod
    def composers(self) -> list[str]: ...

    @abc.abstractmethod
    def groupings(self) -> list[str]: ...

    @abc.abstractmethod
    def genres(self) -> list[str]: ...

    @abc.abstractmethod
    def track(self) -> tuple[str, str]:
        """Return (track number, track total)."""

    @abc.abstractmethod
    def disc(self) -> tuple[str, str]:
        """Return (disc number, disc total)."""

    @abc.abstractmethod
    def compilation(self) -> bool: ...

    @abc.abstractmethod
    def bpm(self) -> str: ...

    @abc.abstractmethod
    def comments(self) -> list[Comment]: ...

    # Setters

    @abc.abstractmethod
    def set_title(self, value: str) -> None: ...

    @abc.abstractmethod
    def set_artists(self, values: list[str]) -> None: ...

    @abc.abstractmethod
    def set_album(self, value: str) -> None: ...

    @abc.abstractmethod
    def set_album_artists(self, values: list[str]) -> None: ...

    @abc.abstractmethod
    def set_composers(self, values: list[str]) -> None: ...

    @abc.abstractmethod
    def set_groupings(self, values: list[str]) -> None: ...

    @abc.abstractmethod
    def set_genres(self, values: list[str]) -> None: ...

    @abc.abstractmethod
    def set_track(self, number: str, total: str) -> None: ...

    @abc.abstractmethod
    def set_disc(self, number: str, total: str) -> None: ...

    @abc.abstractmethod
    def set_compilation(self, value: bool) -> None: ...

    @abc.abstractmethod
    def set_bpm(self, value: str) -> None: ...

    @abc.abstractmethod
    def set_comments(self, comments: list[Comment]) -> None: ...

    def set_field(self, name: str, value: Any) -> None:
        """
        Set one canonical field by name.

        Names and value types:
            - title, album: str
            - artists, album_artists, composers, groupings, genres: list of str
            - track_num, track_total, disc_num, disc_total, bpm: str
            - compilation: bool
            - comments: list of Comment

        track_num, track_total, disc_num and disc_total each write one half
        of a stored pair and keep the other half as the accessor reads it.
        A stored half that does not parse as a number reads as "" and is
        therefore dropped by the write.

        Raises:
            InvalidFieldValueError: If the name is unknown or the value has
                                    the wrong type or cannot be stored.
        """
        if name in SINGLE_TEXT_FIELDS:
            self._require(name, value, str)
            getattr(self, f"set_{name}")(value)
        elif name in MULTI_TEXT_FIELDS:
            self._require(name, value, (list, tuple))
            for item in value:
                self._require(name, item, str)
            getattr(self, f"set_{name}")(list(value))
        elif name in NUMBER_PAIR_FIELDS:
            pair_name, position = NUMBER_PAIR_FIELDS[name]
            pair = list(getattr(self, pair_name)())
            pair[position] = value
            getattr(self, f"set_{pair_name}")(*pair)
        elif name == "compilation":
            self._require(name, value, bool)
            self.set_compilation(value)
        elif name == "bpm":
            self.set_bpm(value)
        elif name == "comments":
            self._require(name, value, (list, tuple))
            for item in value:
                self._require(name, item, Comment)
            self.set_comments(list(value))
        else:
            raise InvalidFieldValueError(
                f"Unknown field: {name}",
                details={"field": name, "known_fields": list(WRITABLE_FIELDS)}
            )

    @staticmethod
    def _require(name: str, value: Any, expected: type | tuple[type, ...]) -> None:
        if not isinstance(value, expected):
            raise InvalidFieldValueError(
                f"Invalid value type for {name}: {type(value).__name__}",
                details={"field": name}
            )


class Id3Metadata(Metadata):
    """
    Field model over an ID3v2 tag.

    Multi-valued fields live in a single text frame; mutagen keeps the
    NUL-separated segments as a list, which is joined and split again
    here so that "Alice\\0Bob" always reads as ["Alice", "Bob"].
    """

    kind = TagKind.ID3
    tag: ID3

    def _text(self, frame_id: str) -> str | None:
        frame = self.tag.get(frame_id)
        if frame is None:
            return None
        return "\0".join(str(text) for text in frame.text)

    def _values(self, *frame_ids: str) -> list[str]:
        for frame_id in frame_ids:
            text = self._text(frame_id)
            if text is not None:
                return text.split("\0")
        return []

    def _set_text(self, frame_id: str, values: list[str]) -> None:
        self.tag.delall(frame_id)
        if values:
            self.tag.add(Frames[frame_id](encoding=Encoding.UTF8, text=list(values)))

    def title(self) -> str:
        return self._text("TIT2") or ""

    def artists(self) -> list[str]:
        return self._values("TPE1")

    def album(self) -> str:
        return self._text("TALB") or ""

    def album_artists(self) -> list[str]:
        return self._values("TPE2")

    def composers(self) -> list[str]:
        return self._values("TCOM")

    def groupings(self) -> list[str]:
        return self._values("GRP1", "GP1")

    def genres(self) -> list[str]:
        return self._values("TCON")

    def track(self) -> tuple[str, str]:
        return parse_number_pair(self._text("TRCK"))

    def disc(self) -> tuple[str, str]:
        return parse_number_pair(self._text("TPOS"))

    def compilation(self) -> bool:
        return any(self._text(frame_id) == "1" for frame_id in ("TCMP", "TCP"))

    def bpm(self) -> str:
        return self._text("TBPM") or ""

    def comments(self) -> list[Comment]:
        return [
            Comment(text="\0".join(frame.text), lang=frame.lang, description=frame.desc)
            for frame in self.tag.getall("COMM")
        ]

    def set_title(self, value: str) -> None:
        self._set_text("TIT2", [value] if value else [])

    def set_artists(self, values: list[str]) -> None:
        self._set_text("TPE1", values)

    def set_album(self, value: str) -> None:
        self._set_text("TALB", [value] if value else [])

    def set_album_artists(self, values: list[str]) -> None:
        self._set_text("TPE2", values)

    def set_composers(self, values: list[str]) -> None:
        self._set_text("TCOM", values)

    def set_groupings(self, values: list[str]) -> None:
        self.tag.delall("GP1")
        self._set_text("GRP1", values)

    def set_genres(self, values: list[str]) -> None:
        self._set_text("TCON", values)

    def _set_number_pair(self, frame_id: str, prefix: str, number: str, total: str) -> None:
        number = check_number(f"{prefix}_num", number)
        total = check_number(f"{prefix}_total", total)
        if total:
            self._set_text(frame_id, [f"{number}/{total}"])
        else:
            self._set_text(frame_id, [number] if number else [])

    def set_track(self, number: str, total: str) -> None:
        self._set_number_pair("TRCK", "track", number, total)

    def set_disc(self, number: str, total: str) -> None:
        self._set_number_pair("TPOS", "disc", number, total)

    def set_compilation(self, value: bool) -> None:
        self.tag.delall("TCP")
        self._set_text("TCMP", ["1"] if value else [])

    def set_bpm(self, value: str) -> None:
        value = check_number("bpm", value)
        self._set_text("TBPM", [value] if value else [])

    def set_comments(self, comments: list[Comment]) -> None:
        """
        Replace every COMM frame.

        Raises:
            InvalidFieldValueError: If a language is not a 3-letter code, or
                                    two comments share a language and
                                    description (ID3 allows one COMM frame
                                    per pair).
        """
        seen = set()
        for comment in comments:
            if comment.lang is not None and len(comment.lang) != 3:
                raise InvalidFieldValueError(
                    f"Comment language must be a 3-letter code, got {comment.lang!r}",
                    details={"field": "comments", "lang": comment.lang}
                )
            key = (comment.lang or "eng", comment.description or "")
            if key in seen:
                raise InvalidFieldValueError(
                    f"Duplicate comment for language {key[0]!r} and description {key[1]!r}",
                    details={"field": "comments", "lang": key[0], "description": key[1]}
                )
            seen.add(key)
        store_frames(self.tag, "COMM", [
            COMM(
                encoding=Encoding.UTF8,
                lang=comment.lang or "eng",
                desc=comment.description or "",
                text=comment.text.split("\0"),
            )
            for comment in comments
        ])


class Mp4Metadata(Metadata):
    """Field model over MP4 "ilst" atoms, which store lists natively."""

    kind = TagKind.MP4
    tag: MP4Tags

    TITLE = "\xa9nam"
    ARTIST = "\xa9ART"
    ALBUM = "\xa9alb"
    ALBUM_ARTIST = "aART"
    COMPOSER = "\xa9wrt"
    GROUPING = "\xa9grp"
    GENRE = "\xa9gen"
    TRACK = "trkn"
    DISC = "disk"
    COMPILATION = "cpil"
    BPM = "tmpo"
    COMMENT = "\xa9cmt"

    def _strings(self, key: str) -> list[str]:
        return [value for value in self.tag.get(key, []) if isinstance(value, str)]

    def _first(self, key: str) -> str:
        values = self._strings(key)
        return values[0] if values else ""

    def _pair(self, key: str) -> tuple[str, str]:
        values = self.tag.get(key)
        if not values:
            return "", ""
        number, total = values[0]
        return (str(number) if number else "", str(total) if total else "")

    def _delete(self, key: str) -> None:
        if key in self.tag:
            del self.tag[key]

    def _set_strings(self, key: str, values: list[str]) -> None:
        if values:
            self.tag[key] = list(values)
        else:
            self._delete(key)

    def title(self) -> str:
        return self._first(self.TITLE)

    def artists(self) -> list[str]:
        return self._strings(self.ARTIST)

    def album(self) -> str:
        return self._first(self.ALBUM)

    def album_artists(self) -> list[str]:
        return self._strings(self.ALBUM_ARTIST)

    def composers(self) -> list[str]:
        return self._strings(self.COMPOSER)

    def groupings(self) -> list[str]:
        return self._strings(self.GROUPING)

    def genres(self) -> list[str]:
        return self._strings(self.GENRE)

    def track(self) -> tuple[str, str]:
        return self._pair(self.TRACK)

    def disc(self) -> tuple[str, str]:
        return self._pair(self.DISC)

    def compilation(self) -> bool:
        return bool(self.tag.get(self.COMPILATION, False))

    def bpm(self) -> str:
        values = self.tag.get(self.BPM)
        return str(values[0]) if values else ""

    def comments(self) -> list[Comment]:
        return [Comment(text=value) for value in self._strings(self.COMMENT)]

    def set_title(self, value: str) -> None:
        self._set_strings(self.TITLE, [value] if value else [])

    def set_artists(self, values: list[str]) -> None:
        self._set_strings(self.ARTIST, values)

    def set_album(self, value: str) -> None:
        self._set_strings(self.ALBUM, [value] if value else [])

    def set_album_artists(self, values: list[str]) -> None:
        self._set_strings(self.ALBUM_ARTIST, values)

    def set_composers(self, values: list[str]) -> None:
        self._set_strings(self.COMPOSER, values)

    def set_groupings(self, values: list[str]) -> None:
        self._set_strings(self.GROUPING, values)

    def set_genres(self, values: list[str]) -> None:
        self._set_strings(self.GENRE, values)

    def _set_pair(self, key: str, prefix: str, number: str, total: str) -> None:
        number = check_number(f"{prefix}_num", number, MP4_MAX_NUMBER)
        total = check_number(f"{prefix}_total", total, MP4_MAX_NUMBER)
        if number or total:
            self.tag[key] = [(int(number or 0), int(total or 0))]
        else:
            self._delete(key)

    def set_track(self, number: str, total: str) -> None:
        self._set_pair(self.TRACK, "track", number, total)

    def set_disc(self, number: str, total: str) -> None:
        self._set_pair(self.DISC, "disc", number, total)

    def set_compilation(self, value: bool) -> None:
        if value:
            self.tag[self.COMPILATION] = True
        else:
            self._delete(self.COMPILATION)

    def set_bpm(self, value: str) -> None:
        value = check_number("bpm", value, MP4_MAX_NUMBER)
        if value:
            self.tag[self.BPM] = [int(value)]
        else:
            self._delete(self.BPM)

    def set_comments(self, comments: list[Comment]) -> None:
        self._set_strings(self.COMMENT, [comment.text for comment in comments])


class VorbisMetadata(Metadata):
    """
    Field model over Vorbis comments.

    Keys are case-insensitive and repeat for multi-valued fields. Totals
    are read from TRACKTOTAL/DISCTOTAL, then the older TOTALTRACKS/
    TOTALDISCS, then an "n/total" number value; they are always written
    as TRACKTOTAL/DISCTOTAL.
    """

    kind = TagKind.VORBIS
    tag: VorbisTag

    def _values(self, key: str) -> list[str]:
        return list(self.tag.comments.get(key, []))

    def _first(self, key: str) -> str:
        values = self._values(key)
        return values[0] if values else ""

    def _set_values(self, key: str, values: list[str]) -> None:
        if values:
            self.tag.comments[key] = list(values)
        elif key in self.tag.comments:
            del self.tag.comments[key]

    def _pair(self, number_key: str, total_keys: tuple[str, str]) -> tuple[str, str]:
        number, total = parse_number_pair(self._first(number_key))
        for total_key in total_keys:
            value = normalize_number(self._first(total_key))
            if value:
                return number, value
        return number, total

    def title(self) -> str:
        return self._first("TITLE")

    def artists(self) -> list[str]:
        return self._values("ARTIST")

    def album(self) -> str:
        return self._first("ALBUM")

    def album_artists(self) -> list[str]:
        return self._values("ALBUMARTIST")

    def composers(self) -> list[str]:
        return self._values("COMPOSER")

    def groupings(self) -> list[str]:
        return self._values("GROUPING")

    def genres(self) -> list[str]:
        return self._values("GENRE")

    def track(self) -> tuple[str, str]:
        return self._pair("TRACKNUMBER", ("TRACKTOTAL", "TOTALTRACKS"))

    def disc(self) -> tuple[str, str]:
        return self._pair("DISCNUMBER", ("DISCTOTAL", "TOTALDISCS"))

    def compilation(self) -> bool:
        return self._first("COMPILATION") == "1"

    def bpm(self) -> str:
        return self._first("BPM")

    def comments(self) -> list[Comment]:
        return [Comment(text=value) for value in self._values("COMMENT")]

    def set_title(self, value: str) -> None:
        self._set_values("TITLE", [value] if value else [])

    def set_artists(self, values: list[str]) -> None:
        self._set_values("ARTIST", values)

    def set_album(self, value: str) -> None:
        self._set_values("ALBUM", [value] if value else [])

    def set_album_artists(self, values: list[str]) -> None:
        self._set_values("ALBUMARTIST", values)

    def set_composers(self, values: list[str]) -> None:
        self._set_values("COMPOSER", values)

    def set_groupings(self, values: list[str]) -> None:
        self._set_values("GROUPING", values)

    def set_genres(self, values: list[str]) -> None:
        self._set_values("GENRE", values)

    def _set_pair(self, prefix: str, legacy_total_key: str, number: str, total: str) -> None:
        number = check_number(f"{prefix}_num", number)
        total = check_number(f"{prefix}_total", total)
        key = prefix.upper()
        self._set_values(f"{key}NUMBER", [number] if number else [])
        self._set_values(f"{key}TOTAL", [total] if total else [])
        self._set_values(legacy_total_key, [])

    def set_track(self, number: str, total: str) -> None:
        self._set_pair("track", "TOTALTRACKS", number, total)

    def set_disc(self, number: str, total: str) -> None:
        self._set_pair("disc", "TOTALDISCS", number, total)

    def set_compilation(self, value: bool) -> None:
        self._set_values("COMPILATION", ["1"] if value else [])

    def set_bpm(self, value: str) -> None:
        value = check_number("bpm", value)
        self._set_values("BPM", [value] if value else [])

    def set_comments(self, comments: list[Comment]) -> None:
        self._set_values("COMMENT", [comment.text for comment in comments])


METADATA_CLASSES: dict[TagKind, type[Metadata]] = {
    TagKind.ID3: Id3Metadata,
    TagKind.MP4: Mp4Metadata,
    TagKind.VORBIS: VorbisMetadata,
}


def wrap_tag(kind: TagKind, tag: Any) -> Metadata:
    """Wrap a backend tag in the Metadata class for its kind."""
    return METADATA_CLASSES[kind](tag)
