# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for provexif

This module defines the exceptions raised while extracting provenance
metadata. Every exception carries a severity so callers can tell a
fatal input problem from a degraded but usable result.

Copyright 2025 DNAi inc.
"""

from provexif.diagnostics import Severity


class ProvExifError(Exception):
    """
    Base exception for all provexif errors.

    All provexif exceptions inherit from this class, allowing
    catch-all error handling for any extraction-related errors.
    """
    severity = Severity.ERROR

    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class MetadataReadError(ProvExifError):
    """
    Raised when the input cannot be read as a JPEG carrying EXIF.

    Subclasses of this error abort the whole extraction; no record
    is produced.
    """
    pass


class NotAJpegError(MetadataReadError):
    """
    Raised when the buffer does not start with the JPEG SOI marker.

    This exception is raised when:
    - The file is empty or shorter than two bytes
    - The first two bytes are not 0xFF 0xD8
    """
    pass


class ExifBlockNotFoundError(MetadataReadError):
    """
    Raised when no APP1 segment carries an EXIF header.

    This exception is raised when:
    - The JPEG has no APP1 segment at all
    - APP1 segments exist but none starts with "Exif\\0\\0"
    - The segment is too short to hold a TIFF header
    """
    pass


class UnsupportedByteOrderError(MetadataReadError):
    """
    Raised when the TIFF header byte order is neither "II" nor "MM".
    """
    pass


class FieldSkipError(ProvExifError):
    """
    Raised when a single tag value cannot be decoded.

    The walker converts this into a warning diagnostic and leaves the
    field at its default value.
    """
    severity = Severity.WARNING


class MakerNotePipelineError(ProvExifError):
    """
    Raised when the HDR+ MakerNote pipeline has to be abandoned.

    The record built from the EXIF directories is still returned
    together with this error.
    """
    pass


class XMPNotFoundError(MakerNotePipelineError):
    """
    Raised when the XMP packet or the HdrPlusMakernote attribute is missing.

    This exception is raised when:
    - No standard XMP packet is present in the file
    - The HdrPlusMakernote attribute is absent or empty
    """
    pass


class Base64DecodeError(MakerNotePipelineError):
    """
    Raised when the HdrPlusMakernote attribute cannot be Base64-decoded.
    """
    pass


class CipherError(MakerNotePipelineError):
    """
    Raised when the decoded payload does not carry the HDRP magic.
    """
    pass


class DecompressionError(MakerNotePipelineError):
    """
    Raised when neither gzip nor raw DEFLATE recovers any bytes.
    """
    pass


class RecoveryWarning(ProvExifError):
    """
    Raised when a MakerNote was recovered from a truncated stream, or
    from a gzip stream that failed its header or checksum check.

    This is not a failure. The record is complete as far as the data
    allowed, and this warning tells the caller the result is degraded.
    """
    severity = Severity.WARNING


class MakerNoteParseError(ProvExifError):
    """
    Raised when a vendor parser recognized its magic but the structure
    that follows cannot be decoded.
    """
    severity = Severity.WARNING
