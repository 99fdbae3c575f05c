"""
Artwork manager: uniform picture access over the three tag formats.

Every tag format keeps an ordered list of embedded pictures, but each
stores different picture metadata:

    - ID3: APIC frames with MIME string, picture type and description
    - MP4: "covr" values with an image-format code only
    - Vorbis: FLAC picture blocks with MIME, type, description and the
      image's width, height, colour depth and palette size

PictureList adapts one tag's list to a common interface. The module-level
functions implement the operations on top of it:

    get_picture(metadata, index=None)         -> Picture | None
    remove_picture(metadata, index)
    set_picture(metadata, index, data, extension)

set_picture() replaces the picture at index when index < N (keeping its
type and description where the format has them), appends a blank
"Other" picture when index == N, and fails otherwise. Every validation
happens before the tag is touched, so a failed call leaves it unchanged.
"""

import abc
from io import BytesIO
from typing import Any, ClassVar

from mutagen.flac import Picture as FlacPicture
from mutagen.id3 import APIC, ID3, Encoding, PictureType
from mutagen.mp4 import AtomDataType, MP4Cover, MP4Tags
from PIL import Image, UnidentifiedImageError

from mr_tagger.core.exceptions import (
    IndexOutOfRangeError,
    InvalidImageError,
    UnsupportedImageTypeError,
    UnsupportedPictureMetadataError,
)
from mr_tagger.core.logger import get_logger
from mr_tagger.metadata.facade import Metadata
from mr_tagger.metadata.models import (
    PICTURE_TYPE_FRONT_COVER,
    PICTURE_TYPE_OTHER,
    Picture,
    picture_type_name,
)
from mr_tagger.tags.base import TagKind
from mr_tagger.tags.id3 import store_frames
from mr_tagger.tags.vorbis import VorbisTag

logger = get_logger(__name__)


# Image file extensions accepted by set_picture(), and their MIME types
IMAGE_EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "bmp": "image/bmp",
}

MP4_FORMAT_MIME_TYPES = {
    MP4Cover.FORMAT_JPEG: "image/jpeg",
    MP4Cover.FORMAT_PNG: "image/png",
    AtomDataType.BMP: "image/bmp",
}
MIME_MP4_FORMATS = {mime: code for code, mime in MP4_FORMAT_MIME_TYPES.items()}

# MIME strings accepted in Vorbis picture blocks, mapped to their canonical form
VORBIS_MIME_TYPES = {
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/png": "image/png",
    "image/tiff": "image/tiff",
    "image/bmp": "image/bmp",
    "image/gif": "image/gif",
}

# Bits per band for Pillow modes that are not 8 bits per band
PILLOW_BAND_BITS = {
    "1": 1,
    "I": 32,
    "F": 32,
    "I;16": 16,
    "I;16B": 16,
    "I;16L": 16,
}


def resolve_image_mime_type(extension: str) -> str:
    """
    Map an image file extension to its MIME type.

    Args:
        extension: Extension with or without the leading dot, any case.

    Raises:
        UnsupportedImageTypeError: If the extension is not jpg, jpeg,
                                   png or bmp.
    """
    normalized = extension.lower().lstrip(".")
    mime_type = IMAGE_EXTENSION_MIME_TYPES.get(normalized)
    if mime_type is None:
        raise UnsupportedImageTypeError(
            f"Unsupported image type: {extension}",
            details={"extension": extension, "allowed": sorted(IMAGE_EXTENSION_MIME_TYPES)}
        )
    return mime_type


class PictureList(abc.ABC):
    """
    Ordered picture list of one tag.

    Subclasses read pictures out of the backend tag and write the whole
    list back after every mutation, so indices always follow tag order.
    """

    HAS_PICTURE_TYPES: ClassVar[bool] = True

    def __init__(self, tag: Any) -> None:
        self.tag = tag

    @abc.abstractmethod
    def _items(self) -> list[Any]:
        """Return the backend picture objects in order."""

    @abc.abstractmethod
    def _store(self, items: list[Any]) -> None:
        """Write the backend picture objects back to the tag."""

    @abc.abstractmethod
    def _to_picture(self, item: Any, index: int, total: int) -> Picture: ...

    @abc.abstractmethod
    def _build(self, data: bytes, mime_type: str, previous: Any | None) -> Any:
        """
        Build a backend picture object.

        previous is the picture being replaced, or None when appending.
        """

    def __len__(self) -> int:
        return len(self._items())

    def _type_code(self, item: Any) -> int | None:
        return None

    def front_cover_index(self) -> int | None:
        """Index of the first front cover, or None if there is none."""
        for index, item in enumerate(self._items()):
            if self._type_code(item) == PICTURE_TYPE_FRONT_COVER:
                return index
        return None

    def read(self, index: int) -> Picture:
        items = self._items()
        return self._to_picture(items[index], index, len(items))

    def remove(self, index: int) -> None:
        items = self._items()
        del items[index]
        self._store(items)

    def replace(self, index: int, data: bytes, mime_type: str) -> None:
        items = self._items()
        items[index] = self._build(data, mime_type, items[index])
        self._store(items)

    def append(self, data: bytes, mime_type: str) -> None:
        items = self._items()
        items.append(self._build(data, mime_type, None))
        self._store(items)


class Id3PictureList(PictureList):
    """APIC frames of an ID3 tag, stored with tags.id3.store_frames()."""

    tag: ID3

    def _items(self) -> list[APIC]:
        return self.tag.getall("APIC")

    def _store(self, items: list[APIC]) -> None:
        store_frames(self.tag, "APIC", items)

    def _type_code(self, item: APIC) -> int:
        return int(item.type)

    def _to_picture(self, item: APIC, index: int, total: int) -> Picture:
        code = int(item.type)
        return Picture(
            index=index,
            total=total,
            data=item.data,
            mime_type=item.mime,
            description=item.desc,
            picture_type=picture_type_name(code) or f"Undefined ({code})",
        )

    def _build(self, data: bytes, mime_type: str, previous: APIC | None) -> APIC:
        if previous is None:
            return APIC(
                encoding=Encoding.UTF8,
                mime=mime_type,
                type=PictureType.OTHER,
                desc="",
                data=data,
            )
        return APIC(
            encoding=previous.encoding,
            mime=mime_type,
            type=previous.type,
            desc=previous.desc,
            data=data,
        )


class Mp4PictureList(PictureList):
    """Cover art atoms ("covr") of an MP4 tag. No types or descriptions."""

    HAS_PICTURE_TYPES = False
    COVER = "covr"
    tag: MP4Tags

    def _items(self) -> list[MP4Cover]:
        return list(self.tag.get(self.COVER, []))

    def _store(self, items: list[MP4Cover]) -> None:
        if items:
            self.tag[self.COVER] = items
        elif self.COVER in self.tag:
            del self.tag[self.COVER]

    def _to_picture(self, item: MP4Cover, index: int, total: int) -> Picture:
        mime_type = MP4_FORMAT_MIME_TYPES.get(item.imageformat)
        if mime_type is None:
            raise UnsupportedPictureMetadataError(
                f"Unsupported cover format code: {item.imageformat}",
                details={"index": index, "format": item.imageformat}
            )
        return Picture(index=index, total=total, data=bytes(item), mime_type=mime_type)

    def _build(self, data: bytes, mime_type: str, previous: MP4Cover | None) -> MP4Cover:
        return MP4Cover(data, imageformat=MIME_MP4_FORMATS[mime_type])


class VorbisPictureList(PictureList):
    """FLAC picture blocks of a Vorbis tag."""

    tag: VorbisTag

    def _items(self) -> list[FlacPicture]:
        return list(self.tag.pictures)

    def _store(self, items: list[FlacPicture]) -> None:
        self.tag.pictures = items

    def _type_code(self, item: FlacPicture) -> int:
        return int(item.type)

    def _to_picture(self, item: FlacPicture, index: int, total: int) -> Picture:
        mime_type = VORBIS_MIME_TYPES.get((item.mime or "").lower())
        if mime_type is None:
            raise UnsupportedPictureMetadataError(
                f"Unsupported picture MIME type: {item.mime!r}",
                details={"index": index, "mime_type": item.mime}
            )
        type_name = picture_type_name(int(item.type))
        if type_name is None:
            raise UnsupportedPictureMetadataError(
                f"Unsupported picture type code: {item.type}",
                details={"index": index, "picture_type": int(item.type)}
            )
        return Picture(
            index=index,
            total=total,
            data=item.data,
            mime_type=mime_type,
            description=item.desc,
            picture_type=type_name,
        )

    def _build(self, data: bytes, mime_type: str, previous: FlacPicture | None) -> FlacPicture:
        picture = FlacPicture()
        picture.data = data
        picture.mime = mime_type
        picture.type = previous.type if previous is not None else PICTURE_TYPE_OTHER
        picture.desc = previous.desc if previous is not None else ""
        picture.width, picture.height, picture.depth, picture.colors = describe_image(data)
        return picture


def describe_image(data: bytes) -> tuple[int, int, int, int]:
    """
    Read the dimensions and colour information of an image.

    Returns:
        (width, height, bits per pixel, palette size); palette size is 0
        for images without a palette.

    Raises:
        InvalidImageError: If Pillow cannot decode the image.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            width, height = image.size
            band_bits = PILLOW_BAND_BITS.get(image.mode, 8)
            depth = band_bits * len(image.getbands())
            colors = 0
            if image.mode == "P":
                palette = image.getpalette() or []
                colors = len(palette) // 3
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidImageError(
            f"Could not decode image: {e}",
            details={"original_error": str(e)}
        ) from e
    return width, height, depth, colors


PICTURE_LISTS: dict[TagKind, type[PictureList]] = {
    TagKind.ID3: Id3PictureList,
    TagKind.MP4: Mp4PictureList,
    TagKind.VORBIS: VorbisPictureList,
}


def picture_list(metadata: Metadata) -> PictureList:
    """Return the picture list adapter for a metadata value."""
    return PICTURE_LISTS[metadata.kind](metadata.tag)


def _out_of_range(index: int, total: int, message: str) -> IndexOutOfRangeError:
    return IndexOutOfRangeError(message, details={"index": index, "total": total})


def get_picture(metadata: Metadata, index: int | None = None) -> Picture | None:
    """
    Read one embedded picture.

    Args:
        metadata: The tag to read from.
        index: Picture index, or None for the default picture: the first
               front cover where the format has picture types, otherwise
               the first picture.

    Returns:
        The picture, or None if the tag has no pictures or index is out
        of range.

    Raises:
        UnsupportedPictureMetadataError: If a Vorbis picture has an
                                         unknown MIME type or type code.
    """
    pictures = picture_list(metadata)
    total = len(pictures)
    if index is None:
        if total == 0:
            return None
        index = pictures.front_cover_index()
        if index is None:
            index = 0
    if index < 0 or index >= total:
        return None
    return pictures.read(index)


def remove_picture(metadata: Metadata, index: int) -> None:
    """
    Remove the picture at index. Later pictures shift down by one.

    Raises:
        IndexOutOfRangeError: If index is not a valid picture index.
    """
    pictures = picture_list(metadata)
    total = len(pictures)
    if index < 0 or index >= total:
        raise _out_of_range(index, total, "Image index out of range")
    pictures.remove(index)
    logger.debug(f"Removed picture {index} of {total}")


def set_picture(metadata: Metadata, index: int, data: bytes, extension: str) -> None:
    """
    Replace the picture at index, or append one when index equals the count.

    Args:
        metadata: The tag to modify.
        index: 0..N-1 to replace, N to append.
        data: Raw image bytes.
        extension: Extension of the image file (jpg, jpeg, png or bmp).

    Raises:
        UnsupportedImageTypeError: If the extension is not allowed.
        IndexOutOfRangeError: If index is greater than the picture count.
        InvalidImageError: If the image cannot be decoded (Vorbis only,
                           which records image dimensions).
    """
    mime_type = resolve_image_mime_type(extension)
    pictures = picture_list(metadata)
    total = len(pictures)
    if index < 0 or index > total:
        raise _out_of_range(index, total, "Index out of range")

    if index < total:
        pictures.replace(index, data, mime_type)
        logger.debug(f"Replaced picture {index} of {total} ({mime_type})")
    else:
        pictures.append(data, mime_type)
        logger.debug(f"Appended picture {index} ({mime_type})")
