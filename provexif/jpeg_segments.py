# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG segment scanner

Lists the marker segments that precede the compressed image data.

Copyright 2025 DNAi inc.
"""

import struct
from typing import Iterator, NamedTuple

SOI = 0xFFD8
APP1 = 0xE1
SOS = 0xDA
EOI = 0xD9


class JPEGSegment(NamedTuple):
    """
    One marker segment.

    offset is the position of the 0xFF marker byte; length is the
    big-endian segment length, which counts itself but not the marker.
    """
    marker: int
    offset: int
    length: int

    @property
    def payload_start(self) -> int:
        return self.offset + 4

    @property
    def end(self) -> int:
        return self.offset + 2 + self.length


def is_jpeg(data: bytes) -> bool:
    return len(data) >= 2 and struct.unpack('>H', data[0:2])[0] == SOI


def iter_segments(data: bytes) -> Iterator[JPEGSegment]:
    """
    Yield segments from after SOI up to start-of-scan or end-of-image.

    Fill bytes (0xFF 0xFF) and standalone markers are skipped. Scanning
    stops at the first segment that does not start with 0xFF or whose
    declared length is impossible.
    """
    if not is_jpeg(data):
        return
    i = 2
    while i + 1 < len(data):
        if data[i] != 0xFF:
            return
        marker = data[i + 1]
        if marker == 0xFF:
            i += 1
            continue
        if marker == 0x01 or 0xD0 <= marker <= 0xD7:
            i += 2
            continue
        if marker in (SOS, EOI):
            return
        if i + 4 > len(data):
            return
        length = struct.unpack('>H', data[i + 2:i + 4])[0]
        if length < 2:
            return
        yield JPEGSegment(marker, i, length)
        i += 2 + length
