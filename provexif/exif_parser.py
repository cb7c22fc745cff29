# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
EXIF provenance parser

This module locates the EXIF block of a JPEG, walks IFD0 and its EXIF
and GPS sub-IFDs into an EvidenceRecord, and runs the Google HDR+
MakerNote pipeline for images whose Software tag marks them as HDR+.

Copyright 2025 DNAi inc.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from provexif.byte_reader import TiffContext, ValueExtractor
from provexif.config import ExtractionConfig
from provexif.diagnostics import Diagnostics
from provexif.evidence import EvidenceRecord
from provexif.exceptions import (
    ExifBlockNotFoundError, MetadataReadError, NotAJpegError, ProvExifError,
    UnsupportedByteOrderError,
)
from provexif.ifd_walker import IFDWalker
from provexif.jpeg_segments import APP1, is_jpeg, iter_segments
from provexif.makernote_pipeline import HdrPlusMakerNoteDecoder
from provexif.tag_decoders import PrimaryTagTable

EXIF_HEADER = b'Exif\x00\x00'
# APP1 marker (2) + length (2) + "Exif\0\0" (6)
TIFF_HEADER_OFFSET = 10
TIFF_HEADER_SIZE = 8

BYTE_ORDERS = {
    b'II': '<',
    b'MM': '>',
}


@dataclass
class ExtractionResult:
    """
    Outcome of one extraction.

    Attributes:
        record: The evidence record, None only when the input was unusable
        error: Fatal input error, MakerNote pipeline failure or RecoveryWarning
        diagnostics: Everything noted along the way
    """
    record: Optional[EvidenceRecord] = None
    error: Optional[ProvExifError] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def ok(self) -> bool:
        """True when a record was produced, even if degraded."""
        return self.record is not None

    def to_dict(self, include_diagnostics: bool = True) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'record': self.record.to_dict() if self.record is not None else None,
            'error': None,
        }
        if self.error is not None:
            result['error'] = {
                'type': type(self.error).__name__,
                'message': self.error.message,
                'severity': self.error.severity.value,
            }
        if include_diagnostics:
            result['diagnostics'] = self.diagnostics.to_list()
        return result


class ExifParser:
    """
    Parser for EXIF provenance metadata in JPEG files.

    A parser instance handles one file; a fresh Diagnostics collector is
    created for it, so nothing is shared between files.
    """

    def __init__(self, file_path: Optional[str] = None, file_data: Optional[bytes] = None,
                 config: Optional[ExtractionConfig] = None):
        """
        Initialize the EXIF parser.

        Args:
            file_path: Path to the image file
            file_data: Raw file data (alternative to file_path)
            config: Extraction configuration (defaults when None)
        """
        self.file_path = file_path
        self.file_data = file_data
        self.config = config or ExtractionConfig()
        self.diagnostics = Diagnostics(source=file_path or "")

    def _load(self) -> bytes:
        if self.file_data is None:
            if not self.file_path:
                raise MetadataReadError("No file path or file data provided")
            with open(self.file_path, 'rb') as f:
                self.file_data = f.read()
        return self.file_data

    def find_exif_segment(self, data: bytes) -> int:
        """
        Return the offset of the APP1 marker that carries the EXIF header.

        Segments are followed by their declared lengths. If the segment
        chain is broken before an EXIF APP1 is reached, the bytes are
        scanned for an APP1 marker followed by the EXIF header.

        Raises:
            NotAJpegError: If data does not start with SOI
            ExifBlockNotFoundError: If no EXIF APP1 segment exists
        """
        if not is_jpeg(data):
            raise NotAJpegError("file is not a JPEG")

        for segment in iter_segments(data):
            if segment.marker != APP1:
                continue
            if data[segment.payload_start:segment.payload_start + len(EXIF_HEADER)] == EXIF_HEADER:
                return segment.offset

        needle = b'\xff' + bytes([APP1])
        position = data.find(needle, 2)
        while position != -1:
            header_start = position + 4
            if data[header_start:header_start + len(EXIF_HEADER)] == EXIF_HEADER:
                self.diagnostics.warning("EXIF APP1 segment found by scanning, segment chain is broken",
                                         offset=position)
                return position
            position = data.find(needle, position + 1)

        raise ExifBlockNotFoundError("cannot find EXIF block")

    def read_tiff_context(self, data: bytes, segment_offset: int) -> TiffContext:
        """
        Read the TIFF header that follows the EXIF header.

        Raises:
            ExifBlockNotFoundError: If the header is cut off
            UnsupportedByteOrderError: If the byte order is not II or MM
        """
        tiff_start = segment_offset + TIFF_HEADER_OFFSET
        if tiff_start + TIFF_HEADER_SIZE > len(data):
            raise ExifBlockNotFoundError("EXIF block is too short to hold a TIFF header")
        byte_order = data[tiff_start:tiff_start + 2]
        endian = BYTE_ORDERS.get(byte_order)
        if endian is None:
            raise UnsupportedByteOrderError(f"unsupported byte order {byte_order!r}")
        return TiffContext(tiff_start, endian)

    def parse(self) -> ExtractionResult:
        """
        Extract the evidence record.

        Returns:
            ExtractionResult; its error is set when the HDR+ MakerNote
            pipeline failed or recovered only part of the MakerNote

        Raises:
            MetadataReadError: If the input is not a JPEG with a readable EXIF block
        """
        data = self._load()
        segment_offset = self.find_exif_segment(data)
        context = self.read_tiff_context(data, segment_offset)
        self.diagnostics.debug(f"Detected {context.byte_order} byte order",
                               tiff_start=context.tiff_start)

        extractor = ValueExtractor(data, context)
        ifd0_offset = context.tiff_start + extractor.read_u32(context.tiff_start + 4)
        self.diagnostics.debug("First IFD located", offset=ifd0_offset)

        record = EvidenceRecord()
        walker = IFDWalker(extractor, self.diagnostics, self.config.max_ifd_depth)
        walker.walk(ifd0_offset, PrimaryTagTable(record, extractor, self.diagnostics, self.config))

        error = self._decode_hdrplus(data, record)
        return ExtractionResult(record, error, self.diagnostics)

    def _decode_hdrplus(self, data: bytes, record: EvidenceRecord) -> Optional[ProvExifError]:
        software = record.processing.software
        if not self.config.decode_hdrplus or not software.startswith(self.config.hdrplus_software_prefix):
            return None

        self.diagnostics.debug("HDR+ image, decoding MakerNote from extended XMP", software=software)
        decoder = HdrPlusMakerNoteDecoder(data, self.config, self.diagnostics)
        result, error = decoder.decode()
        if result is not None:
            record.image.makers_note = result
        return error

    def read(self) -> ExtractionResult:
        """
        Extract the evidence record without raising for unusable input.

        A fatal input error is returned in the result with no record.
        Errors opening file_path are not caught.
        """
        try:
            return self.parse()
        except MetadataReadError as e:
            self.diagnostics.add(e.severity, e.message)
            return ExtractionResult(None, e, self.diagnostics)


def extract_evidence(data: bytes, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
    """Extract the evidence record and diagnostics from JPEG bytes."""
    return ExifParser(file_data=data, config=config).read()


def extract_exif_data(data: bytes, config: Optional[ExtractionConfig] = None
                      ) -> Tuple[Optional[EvidenceRecord], Optional[ProvExifError]]:
    """
    Extract provenance metadata from JPEG bytes.

    Returns:
        (record, error):
        - (record, None) on success
        - (record, error) when the HDR+ MakerNote pipeline failed or was
          recovered from truncated data; the record is still populated
        - (None, error) when the input is not a JPEG with a readable EXIF block
    """
    result = extract_evidence(data, config)
    return result.record, result.error


def read_file(path: str, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
    """
    Extract provenance metadata from a JPEG file.

    Raises:
        OSError: If the file cannot be read
    """
    return ExifParser(file_path=path, config=config).read()
