# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Google HDR+ MakerNote pipeline

Pixel phones running HDR+ do not put their MakerNote in the EXIF
MakerNote tag. It is stored Base64-encoded in the HdrPlusMakernote
attribute of the extended XMP packet, encrypted and gzip-compressed.
This module runs the stages in order:

    XMP -> extended XMP -> Base64 -> HDRP cipher -> gzip -> protobuf

A stage that fails abandons the pipeline with a MakerNotePipelineError.
A stream or payload that is merely truncated is not a failure: whatever
was recovered is returned together with a RecoveryWarning.

Copyright 2025 DNAi inc.
"""

import base64
import binascii
from typing import Optional, Tuple

from provexif.config import ExtractionConfig
from provexif.diagnostics import Diagnostics
from provexif.evidence import MakerNoteResult
from provexif.exceptions import (
    Base64DecodeError, CipherError, MakerNotePipelineError, ProvExifError,
    RecoveryWarning, XMPNotFoundError,
)
from provexif.hdrp_cipher import decrypt_hdrp_bytes
from provexif.hdrplus_payload import decode_hdrplus_payload, project_fields
from provexif.stream_recovery import read_gzip_content
from provexif.xmp_parser import (
    XmpDocument, extract_extended_xmp, extract_xmp_packet, sanitize_base64,
)

HDRP_MAGIC = b'HDRP'
# Magic plus one separator byte
HDRP_HEADER_LENGTH = 5
HDRPLUS_MANUFACTURER = 'Google HDR+'


def decode_base64_payload(value: str) -> bytes:
    """
    Decode the sanitized HdrPlusMakernote attribute.

    Strict decoding is tried first. If it fails, the value is treated as
    unpadded Base64: every "=" is removed, a dangling final character
    that cannot form a byte is dropped, and the padding is recomputed.

    Raises:
        Base64DecodeError: If neither decoding succeeds
    """
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as strict_error:
        unpadded = value.replace('=', '')
        if len(unpadded) % 4 == 1:
            unpadded = unpadded[:-1]
        padded = unpadded + '=' * ((4 - len(unpadded) % 4) % 4)
        try:
            return base64.b64decode(padded)
        except binascii.Error as e:
            raise Base64DecodeError(
                f"Failed to decode HdrPlusMakernote with both encodings: {strict_error}; {e}")


class HdrPlusMakerNoteDecoder:
    """
    Runs the HDR+ MakerNote pipeline over a complete JPEG buffer.

    Args:
        file_data: The whole JPEG file
        config: Extraction configuration
        diagnostics: Collector that receives stage notes and warnings
    """

    def __init__(self, file_data: bytes, config: Optional[ExtractionConfig] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.file_data = file_data
        self.config = config or ExtractionConfig()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def decode(self) -> Tuple[Optional[MakerNoteResult], Optional[ProvExifError]]:
        """
        Run every stage.

        Returns:
            (result, error). result is None when the image has no extended
            XMP or a stage failed; error is the stage failure, or a
            RecoveryWarning when result was built from truncated data.
        """
        try:
            return self._run()
        except MakerNotePipelineError as e:
            self.diagnostics.add(e.severity, f"HDR+ MakerNote pipeline abandoned: {e.message}",
                                 stage=type(e).__name__)
            return None, e

    def locate_attribute(self) -> Optional[str]:
        """
        Find the raw HdrPlusMakernote attribute.

        Returns:
            The attribute text, or None when the standard packet declares
            no extended XMP

        Raises:
            XMPNotFoundError: If a packet or the attribute is missing
        """
        packet = XmpDocument(extract_xmp_packet(self.file_data))
        if packet.parse_error:
            self.diagnostics.debug(f"XMP packet is not well-formed XML: {packet.parse_error}")

        guid = packet.has_extended_xmp
        if not guid:
            self.diagnostics.info("XMP packet declares no extended XMP, no HDR+ MakerNote to decode")
            return None

        extended = XmpDocument(extract_extended_xmp(self.file_data, guid))
        attribute = extended.hdrplus_makernote
        if not attribute:
            raise XMPNotFoundError("HdrPlusMakernote attribute not found in extended XMP")
        return attribute

    def _run(self) -> Tuple[Optional[MakerNoteResult], Optional[ProvExifError]]:
        attribute = self.locate_attribute()
        if attribute is None:
            return None, None

        cleaned = sanitize_base64(attribute)
        self.diagnostics.debug("HdrPlusMakernote Base64 lengths",
                               raw=len(attribute), cleaned=len(cleaned))
        encrypted = decode_base64_payload(cleaned)

        if encrypted[:len(HDRP_MAGIC)] != HDRP_MAGIC:
            raise CipherError(f"HDRP header not found, payload starts with {encrypted[:4]!r}")
        self.diagnostics.debug("Found HDRP header", length=len(encrypted))

        decrypted = decrypt_hdrp_bytes(encrypted[HDRP_HEADER_LENGTH:])
        recovery = read_gzip_content(decrypted, self.config.inflate_chunk_size)
        payload = decode_hdrplus_payload(recovery.data)

        result = MakerNoteResult(
            raw=encrypted if self.config.keep_raw_makernote else b'',
            manufacturer=HDRPLUS_MANUFACTURER,
            parsed_fields=project_fields(payload.message),
        )

        problems = []
        if recovery.truncated:
            problems.append(f"{recovery.method} stream truncated after {len(recovery.data)} bytes"
                            + (f" ({recovery.error})" if recovery.error else ""))
        elif recovery.error:
            problems.append(f"gzip stream failed its integrity check, {recovery.method} output used"
                            f" ({recovery.error})")
        if payload.error:
            problems.append(f"payload incomplete, {payload.recovered_fields} fields recovered"
                            f" ({payload.error})")
        if not problems:
            self.diagnostics.info("Decoded HDR+ MakerNote", fields=len(result.parsed_fields))
            return result, None

        warning = RecoveryWarning("HDR+ MakerNote recovered from damaged data: " + "; ".join(problems))
        self.diagnostics.add(warning.severity, warning.message,
                             method=recovery.method, bytes=len(recovery.data))
        return result, warning
