"""
Exception classes for mr-tagger.

This module defines all custom exceptions used by the metadata core.
Each exception carries a human-readable message (shown to the user by
the surrounding application) and an optional details dictionary with
context for logging.

Exception Hierarchy:
    MrTaggerError (base)
        ConfigError - Configuration file issues
        UnsupportedFileTypeError - File extension has no tag backend
        ParseError - Malformed tag data (absent tags are NOT an error)
        SerializeError - Writing tags (or copying for save-as) failed
        IndexOutOfRangeError - Picture or open-file index outside valid range
        UnsupportedImageTypeError - Image extension not accepted for artwork
        InvalidImageError - Image bytes could not be decoded
        UnsupportedPictureMetadataError - Embedded picture with unknown MIME/type
        InvalidFieldValueError - Field value the backend cannot store
"""


class MrTaggerError(Exception):
    """
    Base exception for all mr-tagger errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every core failure with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g. file path, index).

    Example:
        try:
            metadata = open_metadata(path)
        except MrTaggerError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'file_path': Audio or image file involved in the error
                     - 'index': Picture or open-file index
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(MrTaggerError):
    """
    Raised when there's an issue with the configuration file.

    Common causes:
        - Explicitly requested config file not found
        - Invalid YAML syntax
        - Invalid field values (unknown log level, unknown mp4_missing_tag policy)
    """
    pass


class UnsupportedFileTypeError(MrTaggerError):
    """
    Raised at open time when the file extension maps to no tag backend.

    The core never falls back to content sniffing: an unknown extension
    is always fatal for the open operation.

    Example:
        raise UnsupportedFileTypeError(
            "Unsupported file type: wav",
            details={'file_path': '/music/song.wav', 'extension': 'wav'}
        )
    """
    pass


class ParseError(MrTaggerError):
    """
    Raised when a tag block exists but cannot be parsed.

    A file WITHOUT a tag block is not an error: the backend adapter
    substitutes an empty tag instead.

    Common causes:
        - Corrupted ID3 header or unsupported ID3 version
        - File is not a valid MP4/FLAC/Ogg container
        - File not readable
    """
    pass


class SerializeError(MrTaggerError):
    """
    Raised when writing tags to disk fails.

    Common causes:
        - Permission denied or disk full
        - Target file is not a valid container for the tag (save-as to a bad copy)
        - Copying the source file for save-as failed
    """
    pass


class IndexOutOfRangeError(MrTaggerError):
    """
    Raised when an index falls outside the valid range.

    For pictures, removal accepts 0..N-1 and setting accepts 0..N
    (N appends). For the open-file store, any index of an open item.
    """
    pass


class UnsupportedImageTypeError(MrTaggerError):
    """
    Raised when an image's file extension is not an accepted artwork type.

    Raised before any mutation happens, so the tag is left untouched.

    Example:
        raise UnsupportedImageTypeError(
            "Unsupported image type: gif",
            details={'extension': 'gif', 'allowed': ['bmp', 'jpeg', 'jpg', 'png']}
        )
    """
    pass


class InvalidImageError(MrTaggerError):
    """
    Raised when image bytes cannot be decoded.

    Vorbis picture blocks embed width, height and colour depth, so
    the image header has to be read before the picture can be stored.
    """
    pass


class UnsupportedPictureMetadataError(MrTaggerError):
    """
    Raised when reading a Vorbis picture whose MIME type is missing or
    unknown, or whose picture-type code is not defined.

    This is intentionally strict: a malformed embedded picture is surfaced
    rather than misrepresented to the caller.
    """
    pass


class InvalidFieldValueError(MrTaggerError):
    """
    Raised when a field value cannot be stored by the active backend.

    Example:
        raise InvalidFieldValueError(
            "BPM must be a whole number for MP4 files",
            details={'field': 'bpm', 'value': '120.5'}
        )
    """
    pass
