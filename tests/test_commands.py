"""Tests for the command surface: open, view, edit and save real files"""

from dataclasses import replace

import pytest
from mutagen.oggopus import OggOpus

from mr_tagger.commands import (
    get_field_view,
    get_picture,
    open_metadata,
    save_metadata,
    set_picture,
)
from mr_tagger.core.config import MP4_MISSING_TAG_ERROR, TagsConfig
from mr_tagger.core.exceptions import (
    InvalidFieldValueError,
    ParseError,
    UnsupportedFileTypeError,
)
from mr_tagger.metadata.facade import Id3Metadata, Mp4Metadata, VorbisMetadata
from mr_tagger.metadata.models import Comment
from mr_tagger.tags.vorbis import PICTURE_COMMENT_KEY


AUDIO_FILES = ["mp3_file", "aiff_file", "m4a_file", "flac_file", "opus_file", "ogg_file"]


def fill_fields(metadata):
    """Set every canonical field"""
    metadata.set_title("Song")
    metadata.set_artists(["Alice", "Bob", "Alice"])
    metadata.set_album("Album")
    metadata.set_album_artists(["Various"])
    metadata.set_composers(["Carol", "Dave"])
    metadata.set_groupings(["Live"])
    metadata.set_genres(["Rock", "Pop"])
    metadata.set_track("3", "12")
    metadata.set_disc("1", "2")
    metadata.set_compilation(True)
    metadata.set_bpm("120")
    metadata.set_comments([Comment(text="Nice", lang="eng", description="")])


class TestOpenMetadata:
    """Test opening files of each kind"""

    @pytest.mark.parametrize("fixture_name,metadata_class", [
        ("mp3_file", Id3Metadata),
        ("aiff_file", Id3Metadata),
        ("m4a_file", Mp4Metadata),
        ("flac_file", VorbisMetadata),
        ("opus_file", VorbisMetadata),
        ("ogg_file", VorbisMetadata),
    ])
    def test_kinds(self, request, fixture_name, metadata_class):
        """Test the metadata class follows the extension"""
        assert isinstance(open_metadata(request.getfixturevalue(fixture_name)), metadata_class)

    @pytest.mark.parametrize("fixture_name", AUDIO_FILES)
    def test_untagged_files_are_empty(self, request, fixture_name):
        """Test files without tags open with empty fields"""
        metadata = open_metadata(request.getfixturevalue(fixture_name))
        view = get_field_view(metadata)
        assert view.title == ""
        assert view.frames == ()
        assert get_picture(metadata) is None

    def test_strict_mp4_policy(self, m4a_file):
        """Test the strict policy refuses MP4 files without metadata"""
        with pytest.raises(ParseError):
            open_metadata(m4a_file, TagsConfig(mp4_missing_tag=MP4_MISSING_TAG_ERROR))

    def test_unsupported(self, temp_dir):
        """Test unsupported extensions fail at open"""
        path = temp_dir / "song.wav"
        path.write_bytes(b"RIFF")
        with pytest.raises(UnsupportedFileTypeError):
            open_metadata(path)


class TestRoundTrip:
    """Test every modelled field survives save and reopen"""

    @pytest.mark.parametrize("fixture_name", AUDIO_FILES)
    def test_fields_and_picture(self, request, fixture_name, png_bytes):
        """Test fields and a picture round-trip through each format"""
        path = request.getfixturevalue(fixture_name)
        metadata = open_metadata(path)
        fill_fields(metadata)
        set_picture(metadata, 0, png_bytes, "png")
        before = get_field_view(metadata)
        picture_before = get_picture(metadata, 0)

        save_metadata(metadata, path)
        reopened = open_metadata(path)
        after = get_field_view(reopened)

        assert replace(after, frames=()) == replace(before, frames=())
        assert sorted(after.frames, key=repr) == sorted(before.frames, key=repr)
        assert get_picture(reopened, 0) == picture_before

    @pytest.mark.parametrize("fixture_name", AUDIO_FILES)
    def test_picture_order(self, request, fixture_name, png_bytes, jpeg_bytes, bmp_bytes):
        """Test several pictures come back in the order they were added"""
        path = request.getfixturevalue(fixture_name)
        images = [(jpeg_bytes, "jpg"), (png_bytes, "png"), (bmp_bytes, "bmp")]
        metadata = open_metadata(path)
        for index, (data, extension) in enumerate(images):
            set_picture(metadata, index, data, extension)
        save_metadata(metadata, path)

        reopened = open_metadata(path)
        assert get_picture(reopened).total == 3
        assert [get_picture(reopened, index).data for index in range(3)] == [
            data for data, _ in images
        ]

    def test_ogg_pictures_stored_as_comments(self, opus_file, png_bytes):
        """Test Ogg pictures are written as base64 picture comments"""
        metadata = open_metadata(opus_file)
        metadata.set_title("Song")
        set_picture(metadata, 0, png_bytes, "png")
        save_metadata(metadata, opus_file)

        tags = OggOpus(opus_file).tags
        assert tags["TITLE"] == ["Song"]
        assert len(tags[PICTURE_COMMENT_KEY]) == 1
        assert get_field_view(open_metadata(opus_file)).frames == get_field_view(metadata).frames

    def test_id3_comments_on_disk(self, mp3_file):
        """Test comments with distinct descriptions survive save and reopen"""
        comments = [
            Comment(text="first", lang="eng", description=""),
            Comment(text="second", lang="eng", description="note"),
        ]
        metadata = open_metadata(mp3_file)
        metadata.set_comments(comments)
        with pytest.raises(InvalidFieldValueError):
            metadata.set_comments([
                Comment(text="a", lang="eng", description=""),
                Comment(text="b", lang="eng", description=""),
            ])
        save_metadata(metadata, mp3_file)

        reopened = open_metadata(mp3_file).comments()
        assert sorted(reopened, key=lambda comment: comment.description) == comments

    def test_id3_multi_values_on_disk(self, mp3_file):
        """Test multi-valued ID3 fields are one NUL-joined frame after save"""
        metadata = open_metadata(mp3_file)
        metadata.set_composers(["Alice", "Bob"])
        save_metadata(metadata, mp3_file)

        frames = get_field_view(open_metadata(mp3_file)).frames
        assert [frame.value for frame in frames if frame.id == "TCOM"] == ["Alice\u0000Bob"]

    def test_view_to_dict(self, flac_file):
        """Test the field view converts to plain lists and dicts"""
        metadata = open_metadata(flac_file)
        metadata.set_artists(["Alice"])
        view = get_field_view(metadata).to_dict()
        assert view["artists"] == ["Alice"]
        assert view["frames"] == [{"id": "ARTIST", "value": "Alice"}]
