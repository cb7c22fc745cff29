# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Apple MakerNote parser

Apple MakerNotes start with "Apple iOS\\0\\0\\x01", followed by a byte
order marker at bytes 12-13. There is no TIFF magic number and no IFD
pointer: the IFD starts at byte 14, and value offsets inside it are
relative to the start of the MakerNote rather than to a TIFF header.

Copyright 2025 DNAi inc.
"""

import logging
from typing import Dict, Optional

from provexif.byte_reader import IFD_ENTRY_SIZE, IFDEntry, TiffContext, ValueExtractor
from provexif.evidence import FieldValue
from provexif.exceptions import MakerNoteParseError
from provexif.makernote_parser import MakerNoteVendorParser

logger = logging.getLogger(__name__)

APPLE_PREFIX = b'Apple iOS\x00\x00\x01'
APPLE_BYTE_ORDER_OFFSET = 12
APPLE_IFD_OFFSET = 14
# prefix + byte order + magic + offset + entry count
APPLE_MIN_LENGTH = 22

HDR_IMAGE_TYPE_MAP = {
    3: 'HDR Image',
    4: 'Original Image',
}

IMAGE_CAPTURE_TYPE_MAP = {
    1: 'ProRAW',
    2: 'Portrait',
    10: 'Photo',
    11: 'Manual Focus',
    12: 'Scene',
}

CAMERA_TYPE_MAP = {
    0: 'Back Wide Angle',
    1: 'Back Normal',
    6: 'Front',
}

# Tags read as a signed 32-bit integer
INT32_TAGS = {
    0x0001: 'MakerNoteVersion',
    0x000f: 'OISMode',
    0x0019: 'ImageProcessingFlags',
    0x001f: 'PhotosAppFeatureFlags',
    0x0025: 'SceneFlags',
    0x002d: 'ColorTemperature',
    0x002f: 'FocusPosition',
    0x0038: 'AFMeasuredDepth',
    0x003d: 'AFConfidence',
}

UINT32_TAGS = {
    0x0005: 'AETarget',
    0x0006: 'AEAverage',
}

# Tags that hold 1 when set
FLAG_TAGS = {
    0x0004: 'AEStable',
    0x0007: 'AFStable',
}

STRING_TAGS = {
    0x000b: 'BurstUUID',
    0x0011: 'ContentIdentifier',
    0x0015: 'ImageUniqueID',
    0x001a: 'QualityHint',
    0x0020: 'ImageCaptureRequestID',
    0x002b: 'PhotoIdentifier',
}

SRATIONAL_TAGS = {
    0x001d: 'LuminanceNoiseAmplitude',
    0x0021: 'HDRHeadroom',
    0x0027: 'SignalToNoiseRatio',
    0x0030: 'HDRGain',
}

# (name, lookup, fallback) for enumerations stored as int32
ENUM_TAGS = {
    0x000a: ('HDRImageType', HDR_IMAGE_TYPE_MAP, 'Unknown'),
    0x0014: ('ImageCaptureType', IMAGE_CAPTURE_TYPE_MAP, 'Unknown Value'),
    0x002e: ('CameraType', CAMERA_TYPE_MAP, 'Unknown'),
}

# RunTime (0x0003) is a binary plist and 0x0017 is undocumented; both are skipped


def _to_int32(value: int) -> int:
    return value - 0x100000000 if value & 0x80000000 else value


class AppleMakerNoteParser(MakerNoteVendorParser):
    """Decoder for the Apple iOS MakerNote IFD."""
    manufacturer = 'Apple'

    def try_parse(self, raw: bytes) -> Optional[Dict[str, FieldValue]]:
        if len(raw) < APPLE_MIN_LENGTH or raw[:len(APPLE_PREFIX)] != APPLE_PREFIX:
            return None

        byte_order = raw[APPLE_BYTE_ORDER_OFFSET:APPLE_BYTE_ORDER_OFFSET + 2]
        if byte_order == b'II':
            endian = '<'
        elif byte_order == b'MM':
            endian = '>'
        else:
            raise MakerNoteParseError(f"unsupported byte order {byte_order!r}")

        extractor = ValueExtractor(raw, TiffContext(0, endian))
        entry_count = extractor.read_u16(APPLE_IFD_OFFSET)
        entries_start = APPLE_IFD_OFFSET + 2

        available = (len(raw) - entries_start) // IFD_ENTRY_SIZE
        if entry_count > available:
            logger.debug("Apple MakerNote declares %d entries, only %d fit", entry_count, available)
            entry_count = available

        parsed: Dict[str, FieldValue] = {}
        for index in range(entry_count):
            entry = extractor.read_entry(entries_start + index * IFD_ENTRY_SIZE)
            if entry is None:
                break
            self._decode_entry(extractor, entry, parsed)
        return parsed

    def _decode_entry(self, extractor: ValueExtractor, entry: IFDEntry,
                      parsed: Dict[str, FieldValue]) -> None:
        tag = entry.tag
        if tag in INT32_TAGS:
            parsed[INT32_TAGS[tag]] = FieldValue.integer(extractor.get_int32(entry))
        elif tag in UINT32_TAGS:
            parsed[UINT32_TAGS[tag]] = FieldValue.integer(extractor.get_uint32(entry))
        elif tag in FLAG_TAGS:
            parsed[FLAG_TAGS[tag]] = FieldValue.boolean(extractor.get_uint32(entry) == 1)
        elif tag in STRING_TAGS:
            parsed[STRING_TAGS[tag]] = FieldValue.string(extractor.get_string(entry))
        elif tag in SRATIONAL_TAGS:
            parsed[SRATIONAL_TAGS[tag]] = FieldValue.float_(extractor.get_rational(entry, 0, signed=True))
        elif tag in ENUM_TAGS:
            name, lookup, fallback = ENUM_TAGS[tag]
            parsed[name] = FieldValue.string(lookup.get(extractor.get_int32(entry), fallback))
        elif tag == 0x0008:
            vector = [extractor.get_rational(entry, i * 8, signed=True) for i in range(3)]
            parsed['AccelerationVector'] = FieldValue.float_array(vector)
        elif tag == 0x000c:
            near = extractor.get_rational(entry, 0, signed=True)
            far = extractor.get_rational(entry, 8, signed=True)
            parsed['FocusDistanceRange'] = FieldValue.string(f"{near:.2f} - {far:.2f} m")
        elif tag == 0x0023:
            values = extractor.get_uint32_array(entry, 2)
            if values is None:
                return
            focus_distance = _to_int32(values[0])
            packed = values[1]
            parsed['AFPerformance'] = FieldValue.string(
                f"{focus_distance} {(packed >> 28) & 0xF} {packed & 0xFFFFFFF}")
