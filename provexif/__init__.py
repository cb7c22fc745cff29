# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
provexif - Forensic provenance extraction from JPEG EXIF

Reads the EXIF directories of a JPEG into a structured evidence record
(capture time, GPS, device, camera settings, authorship) and decodes
manufacturer MakerNotes, including the encrypted Google HDR+ MakerNote
carried in extended XMP.

Copyright 2025 DNAi inc.
"""

__version__ = "1.0.0"
__author__ = "DNAi inc."

from provexif.config import ExtractionConfig
from provexif.diagnostics import Diagnostic, Diagnostics, Severity
from provexif.evidence import EvidenceRecord, FieldValue, MakerNoteResult, ValueKind
from provexif.exceptions import (
    ProvExifError,
    MetadataReadError,
    NotAJpegError,
    ExifBlockNotFoundError,
    UnsupportedByteOrderError,
    FieldSkipError,
    MakerNotePipelineError,
    XMPNotFoundError,
    Base64DecodeError,
    CipherError,
    DecompressionError,
    RecoveryWarning,
    MakerNoteParseError,
)
from provexif.exif_parser import (
    ExifParser,
    ExtractionResult,
    extract_evidence,
    extract_exif_data,
    read_file,
)
from provexif.makernote_parser import MakerNoteVendorParser, register_vendor_parser

__all__ = [
    "ExtractionConfig",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "EvidenceRecord",
    "FieldValue",
    "MakerNoteResult",
    "ValueKind",
    "ProvExifError",
    "MetadataReadError",
    "NotAJpegError",
    "ExifBlockNotFoundError",
    "UnsupportedByteOrderError",
    "FieldSkipError",
    "MakerNotePipelineError",
    "XMPNotFoundError",
    "Base64DecodeError",
    "CipherError",
    "DecompressionError",
    "RecoveryWarning",
    "MakerNoteParseError",
    "ExifParser",
    "ExtractionResult",
    "extract_evidence",
    "extract_exif_data",
    "read_file",
    "MakerNoteVendorParser",
    "register_vendor_parser",
]
