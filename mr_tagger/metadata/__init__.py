"""
Format-independent metadata layer.

Modules:
    - models: Picture, Comment, Frame and FieldView value objects
    - facade: Metadata wrappers with one accessor/setter set for all formats
    - frames: Raw (identifier, value) frame projection
    - artwork: Picture read, remove, replace and append
"""

from mr_tagger.metadata.artwork import get_picture, remove_picture, set_picture
from mr_tagger.metadata.facade import (
    Id3Metadata,
    Metadata,
    Mp4Metadata,
    VorbisMetadata,
    wrap_tag,
)
from mr_tagger.metadata.frames import project
from mr_tagger.metadata.models import Comment, FieldView, Frame, Picture

__all__ = [
    "Metadata",
    "Id3Metadata",
    "Mp4Metadata",
    "VorbisMetadata",
    "wrap_tag",
    "project",
    "get_picture",
    "remove_picture",
    "set_picture",
    "Comment",
    "FieldView",
    "Frame",
    "Picture",
]
