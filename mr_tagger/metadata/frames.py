"""
Raw frame projection.

Flattens a backend tag into ordered (identifier, value) text pairs, for a
"all frames" view next to the canonical fields. Only plain-text data is
projected:

    - ID3: every text frame except TXXX and COMM, values NUL-joined
    - MP4: every string value plus UTF-8 freeform ("----") values, one
      frame per value; covers, integers, tuples and booleans are skipped
    - Vorbis: every comment pair, keys upper-cased
"""

from collections.abc import Callable

from mutagen.id3 import COMM, ID3, TXXX, TextFrame
from mutagen.mp4 import AtomDataType, MP4FreeForm, MP4Tags

from mr_tagger.metadata.facade import Metadata
from mr_tagger.metadata.models import Frame
from mr_tagger.tags.base import TagKind
from mr_tagger.tags.vorbis import VorbisTag


def _project_id3(tag: ID3) -> list[Frame]:
    return [
        Frame(id=frame.FrameID, value="\0".join(str(text) for text in frame.text))
        for frame in tag.values()
        if isinstance(frame, TextFrame) and not isinstance(frame, (TXXX, COMM))
    ]


def _project_mp4(tag: MP4Tags) -> list[Frame]:
    frames = []
    for key, values in tag.items():
        if not isinstance(values, list):
            continue
        for value in values:
            if isinstance(value, MP4FreeForm):
                if value.dataformat != AtomDataType.UTF8:
                    continue
                try:
                    frames.append(Frame(id=key, value=bytes(value).decode("utf-8")))
                except UnicodeDecodeError:
                    continue
            elif isinstance(value, str):
                frames.append(Frame(id=key, value=value))
    return frames


def _project_vorbis(tag: VorbisTag) -> list[Frame]:
    return [Frame(id=key.upper(), value=value) for key, value in tag.comments]


PROJECTORS: dict[TagKind, Callable[..., list[Frame]]] = {
    TagKind.ID3: _project_id3,
    TagKind.MP4: _project_mp4,
    TagKind.VORBIS: _project_vorbis,
}


def project(metadata: Metadata) -> list[Frame]:
    """Return the plain-text frames of a tag in tag order."""
    return PROJECTORS[metadata.kind](metadata.tag)
