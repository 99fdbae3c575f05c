"""Tests for the artwork manager"""

import pytest
from mutagen.flac import Picture as FlacPicture
from mutagen.id3 import APIC
from mutagen.mp4 import MP4Cover

from mr_tagger.core.exceptions import (
    IndexOutOfRangeError,
    InvalidImageError,
    UnsupportedImageTypeError,
    UnsupportedPictureMetadataError,
)
from mr_tagger.metadata.artwork import (
    PICTURE_LISTS,
    describe_image,
    get_picture,
    remove_picture,
    resolve_image_mime_type,
    set_picture,
)
from mr_tagger.tags.base import TagKind


def flac_picture(data=b"data", mime="image/png", picture_type=0, desc=""):
    picture = FlacPicture()
    picture.data = data
    picture.mime = mime
    picture.type = picture_type
    picture.desc = desc
    return picture


class TestImageTypes:
    """Test image extension handling"""

    @pytest.mark.parametrize("extension,mime_type", [
        ("jpg", "image/jpeg"),
        ("JPEG", "image/jpeg"),
        (".png", "image/png"),
        ("bmp", "image/bmp"),
    ])
    def test_allowed_extensions(self, extension, mime_type):
        """Test allowed extensions map to MIME types"""
        assert resolve_image_mime_type(extension) == mime_type

    @pytest.mark.parametrize("extension", ["gif", "tiff", "webp", ""])
    def test_rejected_extensions(self, extension):
        """Test other extensions are rejected"""
        with pytest.raises(UnsupportedImageTypeError):
            resolve_image_mime_type(extension)

    def test_registry_covers_all_kinds(self):
        """Test PICTURE_LISTS is exhaustive over TagKind"""
        assert set(PICTURE_LISTS) == set(TagKind)


class TestDescribeImage:
    """Test Pillow-derived picture properties"""

    def test_rgb_png(self, png_bytes):
        """Test width, height and depth of an RGB image"""
        assert describe_image(png_bytes) == (4, 3, 24, 0)

    def test_palette_png(self, palette_png_bytes):
        """Test palette images report their colour count"""
        width, height, depth, colors = describe_image(palette_png_bytes)
        assert (width, height, depth) == (4, 3, 8)
        assert colors > 0

    def test_undecodable(self):
        """Test garbage data is rejected"""
        with pytest.raises(InvalidImageError):
            describe_image(b"not an image")


class TestSetPicture:
    """Test replace and append on every kind"""

    def test_append_then_out_of_range(self, any_metadata, png_bytes):
        """Test index N appends and index N+1 fails"""
        set_picture(any_metadata, 0, png_bytes, "png")
        picture = get_picture(any_metadata, 0)
        assert picture.total == 1
        assert picture.data == png_bytes
        assert picture.mime_type == "image/png"

        with pytest.raises(IndexOutOfRangeError):
            set_picture(any_metadata, 2, png_bytes, "png")
        assert get_picture(any_metadata).total == 1

    def test_unsupported_extension_leaves_tag_unchanged(self, any_metadata, png_bytes):
        """Test a gif is rejected before any mutation"""
        set_picture(any_metadata, 0, png_bytes, "png")
        with pytest.raises(UnsupportedImageTypeError):
            set_picture(any_metadata, 0, png_bytes, "gif")
        with pytest.raises(UnsupportedImageTypeError):
            set_picture(any_metadata, 1, png_bytes, "gif")

        picture = get_picture(any_metadata, 0)
        assert picture.total == 1
        assert picture.mime_type == "image/png"

    def test_replace_changes_data(self, any_metadata, png_bytes, jpeg_bytes):
        """Test index < N replaces the picture in place"""
        set_picture(any_metadata, 0, png_bytes, "png")
        set_picture(any_metadata, 1, png_bytes, "png")
        set_picture(any_metadata, 0, jpeg_bytes, "jpg")

        first = get_picture(any_metadata, 0)
        assert first.total == 2
        assert first.data == jpeg_bytes
        assert first.mime_type == "image/jpeg"

    @pytest.mark.parametrize("fixture_name", ["id3_metadata", "vorbis_metadata"])
    def test_append_is_blank_other(self, request, fixture_name, png_bytes):
        """Test appended pictures get type Other and no description"""
        metadata = request.getfixturevalue(fixture_name)
        set_picture(metadata, 0, png_bytes, "png")
        set_picture(metadata, 1, png_bytes, "png")
        picture = get_picture(metadata, 1)
        assert picture.picture_type == "Other"
        assert picture.description == ""

    def test_id3_replace_keeps_type_and_description(self, id3_metadata, jpeg_bytes):
        """Test ID3 replace keeps picture type and description"""
        id3_metadata.tag.add(APIC(encoding=3, mime="image/png", type=3, desc="front", data=b"old"))
        set_picture(id3_metadata, 0, jpeg_bytes, "jpeg")

        picture = get_picture(id3_metadata, 0)
        assert picture.data == jpeg_bytes
        assert picture.picture_type == "Front cover"
        assert picture.description == "front"

    def test_vorbis_replace_keeps_type_and_description(self, vorbis_metadata, png_bytes):
        """Test Vorbis replace keeps picture type and description and measures the image"""
        vorbis_metadata.tag.pictures.append(flac_picture(picture_type=4, desc="back"))
        set_picture(vorbis_metadata, 0, png_bytes, "png")

        stored = vorbis_metadata.tag.pictures[0]
        assert stored.type == 4
        assert stored.desc == "back"
        assert (stored.width, stored.height, stored.depth) == (4, 3, 24)

    def test_vorbis_invalid_image(self, vorbis_metadata):
        """Test undecodable images are rejected for Vorbis before mutation"""
        with pytest.raises(InvalidImageError):
            set_picture(vorbis_metadata, 0, b"not an image", "png")
        assert vorbis_metadata.tag.pictures == []

    def test_mp4_format_codes(self, mp4_metadata, png_bytes, bmp_bytes, jpeg_bytes):
        """Test MP4 covers get the format code matching the extension"""
        set_picture(mp4_metadata, 0, jpeg_bytes, "jpg")
        set_picture(mp4_metadata, 1, png_bytes, "png")
        set_picture(mp4_metadata, 2, bmp_bytes, "bmp")

        formats = [cover.imageformat for cover in mp4_metadata.tag["covr"]]
        assert formats == [13, 14, 27]
        assert get_picture(mp4_metadata, 2).mime_type == "image/bmp"


class TestGetPicture:
    """Test picture selection"""

    def test_empty(self, any_metadata):
        """Test no pictures gives None for default and explicit index"""
        assert get_picture(any_metadata) is None
        assert get_picture(any_metadata, 0) is None

    def test_out_of_range(self, any_metadata, png_bytes):
        """Test an index past the end gives None"""
        set_picture(any_metadata, 0, png_bytes, "png")
        assert get_picture(any_metadata, 1) is None

    def test_default_prefers_front_cover(self, vorbis_metadata):
        """Test the default picture is the first front cover"""
        vorbis_metadata.tag.pictures.extend([
            flac_picture(data=b"other", picture_type=0),
            flac_picture(data=b"front", picture_type=3),
        ])
        picture = get_picture(vorbis_metadata)
        assert picture.index == 1
        assert picture.data == b"front"
        assert picture.picture_type == "Front cover"

    def test_default_without_front_cover(self, id3_metadata):
        """Test the default picture is index 0 without a front cover"""
        id3_metadata.tag.add(APIC(encoding=3, mime="image/png", type=4, desc="back", data=b"a"))
        assert get_picture(id3_metadata).index == 0

    def test_mp4_default_is_first(self, mp4_metadata):
        """Test MP4 pictures have no type and the default is index 0"""
        mp4_metadata.tag["covr"] = [MP4Cover(b"a"), MP4Cover(b"b", imageformat=MP4Cover.FORMAT_PNG)]
        picture = get_picture(mp4_metadata)
        assert picture.index == 0
        assert picture.total == 2
        assert picture.picture_type is None
        assert picture.description is None

    def test_id3_mime_verbatim(self, id3_metadata):
        """Test ID3 MIME strings are returned as stored"""
        id3_metadata.tag.add(APIC(encoding=3, mime="image/webp", type=3, desc="", data=b"a"))
        assert get_picture(id3_metadata).mime_type == "image/webp"

    def test_id3_unknown_type(self, id3_metadata):
        """Test unknown ID3 picture types are labelled, not rejected"""
        id3_metadata.tag.add(APIC(encoding=3, mime="image/png", type=42, desc="", data=b"a"))
        assert get_picture(id3_metadata).picture_type == "Undefined (42)"

    def test_vorbis_jpg_alias(self, vorbis_metadata):
        """Test the non-standard image/jpg MIME is accepted"""
        vorbis_metadata.tag.pictures.append(flac_picture(mime="image/jpg"))
        assert get_picture(vorbis_metadata).mime_type == "image/jpeg"

    @pytest.mark.parametrize("mime,picture_type", [
        ("", 3),
        ("image/webp", 3),
        ("image/png", 42),
    ])
    def test_vorbis_strict_metadata(self, vorbis_metadata, mime, picture_type):
        """Test missing or unknown Vorbis MIME types and type codes are errors"""
        vorbis_metadata.tag.pictures.append(flac_picture(mime=mime, picture_type=picture_type))
        with pytest.raises(UnsupportedPictureMetadataError):
            get_picture(vorbis_metadata)


class TestRemovePicture:
    """Test picture removal"""

    def test_remove_then_default_falls_back(self, id3_metadata, png_bytes):
        """Test removing the front cover makes the next picture the default"""
        id3_metadata.tag.add(APIC(encoding=3, mime="image/png", type=3, desc="front", data=b"f"))
        id3_metadata.tag.add(APIC(encoding=3, mime="image/png", type=4, desc="back", data=b"b"))

        remove_picture(id3_metadata, 0)
        picture = get_picture(id3_metadata)
        assert picture.index == 0
        assert picture.total == 1
        assert picture.description == "back"

    def test_remove_out_of_range(self, any_metadata, png_bytes):
        """Test removing index N fails"""
        set_picture(any_metadata, 0, png_bytes, "png")
        with pytest.raises(IndexOutOfRangeError):
            remove_picture(any_metadata, 1)

    def test_remove_all_mp4(self, mp4_metadata, png_bytes):
        """Test removing the last MP4 cover drops the covr atom"""
        set_picture(mp4_metadata, 0, png_bytes, "png")
        remove_picture(mp4_metadata, 0)
        assert "covr" not in mp4_metadata.tag

    def test_duplicate_id3_descriptions_kept(self, id3_metadata, png_bytes, jpeg_bytes):
        """Test two blank-description ID3 pictures both stay in memory"""
        set_picture(id3_metadata, 0, png_bytes, "png")
        set_picture(id3_metadata, 1, jpeg_bytes, "jpg")
        assert get_picture(id3_metadata, 0).data == png_bytes
        assert get_picture(id3_metadata, 1).data == jpeg_bytes

        remove_picture(id3_metadata, 0)
        assert get_picture(id3_metadata, 0).data == jpeg_bytes
