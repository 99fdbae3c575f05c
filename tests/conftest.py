"""Test configuration and fixtures"""

import struct
import tempfile
from io import BytesIO
from pathlib import Path

import pytest
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Tags
from mutagen.ogg import OggPage
from PIL import Image

from mr_tagger.metadata.facade import Id3Metadata, Mp4Metadata, VorbisMetadata
from mr_tagger.tags.vorbis import VorbisTag


def build_flac_bytes() -> bytes:
    """Smallest FLAC stream mutagen accepts: marker plus a last STREAMINFO block."""
    streaminfo = struct.pack(">HH", 4096, 4096)          # min/max block size
    streaminfo += b"\x00\x00\x00" + b"\x00\x00\x00"      # min/max frame size
    # 44100 Hz, 2 channels, 16 bits per sample, 0 samples
    streaminfo += struct.pack(">Q", (44100 << 44) | (1 << 41) | (15 << 36))
    streaminfo += b"\x00" * 16                           # MD5
    header = bytes([0x80]) + len(streaminfo).to_bytes(3, "big")
    return b"fLaC" + header + streaminfo


def build_m4a_bytes() -> bytes:
    """An ftyp atom and an empty moov atom: a valid MP4 without metadata."""
    ftyp = struct.pack(">I4s4sI4s", 20, b"ftyp", b"M4A ", 0, b"M4A ")
    moov = struct.pack(">I4s", 8, b"moov")
    return ftyp + moov


def build_opus_bytes() -> bytes:
    """Three Ogg pages: the OpusHead header, an empty OpusTags block and one audio packet."""
    # version 1, stereo, 312 samples pre-skip, 48 kHz input, no gain, mapping family 0
    head = b"OpusHead" + struct.pack("<BBHIhB", 1, 2, 312, 48000, 0, 0)
    vendor = b"mr-tagger tests"
    tags = b"OpusTags" + struct.pack("<I", len(vendor)) + vendor + struct.pack("<I", 0)

    pages = []
    for sequence, (packet, position) in enumerate([(head, 0), (tags, 0), (b"\xf8\xff\xfe", 48312)]):
        page = OggPage()
        page.serial = 1
        page.sequence = sequence
        page.position = position
        page.packets = [packet]
        pages.append(page)
    pages[0].first = True
    pages[-1].last = True
    return b"".join(page.write() for page in pages)


def build_aiff_bytes() -> bytes:
    """A FORM/AIFF container with a COMM chunk and an empty SSND chunk, no ID3 chunk."""
    sample_rate = b"\x40\x0e\xac\x44" + b"\x00" * 6    # 44100 as an 80-bit extended float
    comm = b"COMM" + struct.pack(">IhIh", 18, 2, 0, 16) + sample_rate
    ssnd = b"SSND" + struct.pack(">III", 8, 0, 0)
    body = b"AIFF" + comm + ssnd
    return b"FORM" + struct.pack(">I", len(body)) + body


def build_image_bytes(image_format: str, mode: str = "RGB", size=(4, 3)) -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color=0).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mp3_file(temp_dir):
    """MP3 file without any tag"""
    path = temp_dir / "song.mp3"
    path.write_bytes(b"\x00" * 256)
    return path


@pytest.fixture
def flac_file(temp_dir):
    """FLAC file without Vorbis comments or pictures"""
    path = temp_dir / "song.flac"
    path.write_bytes(build_flac_bytes())
    return path


@pytest.fixture
def m4a_file(temp_dir):
    """M4A file without an ilst atom tree"""
    path = temp_dir / "song.m4a"
    path.write_bytes(build_m4a_bytes())
    return path


@pytest.fixture
def opus_file(temp_dir):
    """Ogg Opus file with an empty comment block"""
    path = temp_dir / "song.opus"
    path.write_bytes(build_opus_bytes())
    return path


@pytest.fixture
def ogg_file(temp_dir):
    """Opus stream behind the generic .ogg extension"""
    path = temp_dir / "song.ogg"
    path.write_bytes(build_opus_bytes())
    return path


@pytest.fixture
def aiff_file(temp_dir):
    """AIFF file without an ID3 chunk"""
    path = temp_dir / "song.aiff"
    path.write_bytes(build_aiff_bytes())
    return path


@pytest.fixture
def png_bytes():
    return build_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return build_image_bytes("JPEG")


@pytest.fixture
def bmp_bytes():
    return build_image_bytes("BMP")


@pytest.fixture
def png_file(temp_dir, png_bytes):
    path = temp_dir / "cover.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def id3_metadata():
    """Empty in-memory ID3 metadata"""
    return Id3Metadata(ID3())


@pytest.fixture
def mp4_metadata():
    """Empty in-memory MP4 metadata"""
    return Mp4Metadata(MP4Tags())


@pytest.fixture
def vorbis_metadata():
    """Empty in-memory Vorbis metadata"""
    return VorbisMetadata(VorbisTag())


@pytest.fixture(params=["id3", "mp4", "vorbis"])
def any_metadata(request):
    """Empty in-memory metadata of each kind"""
    return request.getfixturevalue(f"{request.param}_metadata")


@pytest.fixture
def palette_png_bytes():
    return build_image_bytes("PNG", mode="P")
