# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
TIFF value extraction primitives

This module reads typed values out of a TIFF structure embedded in a
larger buffer. TIFF stores a value inside its 12-byte IFD entry when it
fits in four bytes; otherwise the entry holds an offset relative to the
TIFF header. Every accessor here is bounds-checked and returns a zero
value instead of raising, so one malformed entry never stops a walk.

Copyright 2025 DNAi inc.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

import chardet


class ExifTagType(IntEnum):
    """EXIF tag data types"""
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12


# EXIF tag sizes in bytes
TAG_SIZES = {
    ExifTagType.BYTE: 1,
    ExifTagType.ASCII: 1,
    ExifTagType.SHORT: 2,
    ExifTagType.LONG: 4,
    ExifTagType.RATIONAL: 8,
    ExifTagType.SBYTE: 1,
    ExifTagType.UNDEFINED: 1,
    ExifTagType.SSHORT: 2,
    ExifTagType.SLONG: 4,
    ExifTagType.SRATIONAL: 8,
    ExifTagType.FLOAT: 4,
    ExifTagType.DOUBLE: 8,
}

IFD_ENTRY_SIZE = 12

# UserComment character code prefixes (8 bytes each)
USER_COMMENT_ASCII = b'ASCII\x00\x00\x00'
USER_COMMENT_UNICODE = b'UNICODE\x00'
USER_COMMENT_JIS = b'JIS\x00\x00\x00\x00\x00'


def element_width(data_type: int) -> int:
    """Return the byte width of one element of a TIFF data type (1 if unknown)."""
    try:
        return TAG_SIZES[ExifTagType(data_type)]
    except ValueError:
        return 1


@dataclass(frozen=True)
class TiffContext:
    """
    Position and byte order of a TIFF header inside a buffer.

    Attributes:
        tiff_start: Absolute offset of the "II"/"MM" byte order marker
        endian: struct prefix, '<' for "II" and '>' for "MM"
    """
    tiff_start: int
    endian: str

    @property
    def byte_order(self) -> str:
        return 'II' if self.endian == '<' else 'MM'


@dataclass(frozen=True)
class IFDEntry:
    """
    One 12-byte IFD entry.

    entry_offset is the absolute position of the entry in the buffer;
    inline values live at entry_offset + 8.
    """
    tag: int
    data_type: int
    count: int
    value_offset: int
    entry_offset: int

    @property
    def byte_size(self) -> int:
        return self.count * element_width(self.data_type)

    @property
    def is_inline(self) -> bool:
        return self.byte_size <= 4

    @property
    def inline_offset(self) -> int:
        return self.entry_offset + 8


class ValueExtractor:
    """
    Bounds-safe reader for TIFF values.

    Args:
        data: Complete buffer (a JPEG file, or a MakerNote byte range)
        context: Where the TIFF header sits and which byte order it uses
    """

    def __init__(self, data: bytes, context: TiffContext):
        self.data = data
        self.context = context
        self.endian = context.endian
        self.tiff_start = context.tiff_start

    def _unpack(self, fmt: str, offset: int) -> Optional[tuple]:
        size = struct.calcsize(fmt)
        if offset < 0 or offset + size > len(self.data):
            return None
        return struct.unpack_from(fmt, self.data, offset)

    def _slice(self, offset: int, length: int) -> Optional[bytes]:
        if offset < 0 or length < 0 or offset + length > len(self.data):
            return None
        return self.data[offset:offset + length]

    def _value_position(self, entry: IFDEntry, size: int) -> int:
        if size <= 4:
            return entry.inline_offset
        return self.tiff_start + entry.value_offset

    def read_u16(self, offset: int) -> Optional[int]:
        value = self._unpack(f'{self.endian}H', offset)
        return value[0] if value else None

    def read_u32(self, offset: int) -> Optional[int]:
        value = self._unpack(f'{self.endian}I', offset)
        return value[0] if value else None

    def read_entry(self, offset: int) -> Optional[IFDEntry]:
        """Parse the 12-byte IFD entry at offset, or None if it is out of range."""
        values = self._unpack(f'{self.endian}HHII', offset)
        if values is None:
            return None
        tag, data_type, count, value_offset = values
        return IFDEntry(tag, data_type, count, value_offset, offset)

    def get_uint8(self, entry: IFDEntry) -> int:
        value = self._unpack('B', entry.inline_offset)
        return value[0] if value else 0

    def get_uint16(self, entry: IFDEntry) -> int:
        value = self._unpack(f'{self.endian}H', entry.inline_offset)
        return value[0] if value else 0

    def get_uint32(self, entry: IFDEntry) -> int:
        value = self._unpack(f'{self.endian}I', entry.inline_offset)
        return value[0] if value else 0

    def get_int32(self, entry: IFDEntry) -> int:
        value = self._unpack(f'{self.endian}i', entry.inline_offset)
        return value[0] if value else 0

    def get_string(self, entry: IFDEntry) -> str:
        """
        Read an ASCII value, inline when count <= 4, trailing NULs removed.

        Bytes that are not valid UTF-8 are replaced rather than dropped.
        """
        raw = self._slice(self._value_position(entry, entry.count), entry.count)
        if raw is None:
            return ""
        return raw.rstrip(b'\x00').decode('utf-8', errors='replace')

    def get_rational(self, entry: IFDEntry, nested_offset: int = 0, signed: bool = False) -> float:
        """
        Read a RATIONAL (or SRATIONAL when signed) stored at the entry's offset.

        Args:
            entry: IFD entry whose value_offset points at the rational array
            nested_offset: Byte offset inside that array (8 per element)
            signed: Interpret numerator and denominator as int32

        Returns:
            numerator / denominator, or 0.0 on a zero denominator or out-of-range read
        """
        fmt = f'{self.endian}ii' if signed else f'{self.endian}II'
        value = self._unpack(fmt, self.tiff_start + entry.value_offset + nested_offset)
        if value is None or value[1] == 0:
            return 0.0
        return value[0] / value[1]

    def get_rational_parts(self, entry: IFDEntry, nested_offset: int = 0) -> Tuple[int, int]:
        value = self._unpack(f'{self.endian}II', self.tiff_start + entry.value_offset + nested_offset)
        if value is None:
            return 0, 0
        return value[0], value[1]

    def get_gps_coordinate(self, entry: IFDEntry) -> float:
        """Combine the degrees, minutes and seconds rationals into decimal degrees."""
        degrees = self.get_rational(entry, 0)
        minutes = self.get_rational(entry, 8)
        seconds = self.get_rational(entry, 16)
        return degrees + (minutes / 60.0) + (seconds / 3600.0)

    def get_byte_array(self, entry: IFDEntry) -> bytes:
        """Raw bytes of an entry (count bytes, inline when count <= 4)."""
        raw = self._slice(self._value_position(entry, entry.count), entry.count)
        return raw if raw is not None else b''

    def get_uint8_array(self, entry: IFDEntry, length: int) -> List[int]:
        """Fixed-width inline bytes; short reads are zero-filled."""
        start = entry.inline_offset
        raw = self.data[start:start + length] if start >= 0 else b''
        return list(raw) + [0] * (length - len(raw))

    def get_uint32_array(self, entry: IFDEntry, length: int) -> Optional[List[int]]:
        """Offset-stored LONG array, or None if the array runs past the buffer."""
        value = self._unpack(f'{self.endian}{length}I', self.tiff_start + entry.value_offset)
        return list(value) if value is not None else None

    def get_utf16le_string(self, entry: IFDEntry) -> str:
        """
        Read a Windows XP* tag.

        These tags are UTF-16LE regardless of the TIFF byte order. Trailing
        NULs and whitespace are removed; unpaired surrogates are replaced.
        """
        raw = self._slice(self._value_position(entry, entry.count), entry.count)
        if not raw:
            return ""
        raw = raw[:len(raw) - (len(raw) % 2)]
        text = raw.decode('utf-16-le', errors='replace')
        return text.rstrip('\x00').strip()

    def get_version(self, entry: IFDEntry) -> str:
        """Format a 4-character version code, "0232" becomes "2.32"."""
        if entry.count != 4:
            return ""
        raw = self._slice(entry.inline_offset, 4)
        if raw is None:
            return ""
        chars = raw.decode('latin-1')
        return f"{chars[1]}.{chars[2]}{chars[3]}"

    def get_uint16_pair(self, entry: IFDEntry) -> Tuple[int, int]:
        """Two packed SHORT values, inline when they fit in four bytes."""
        if entry.count < 2:
            return 0, 0
        offset = self._value_position(entry, entry.count * 2)
        value = self._unpack(f'{self.endian}HH', offset)
        if value is None:
            return 0, 0
        return value[0], value[1]

    def get_user_comment(self, entry: IFDEntry) -> str:
        """
        Decode a UserComment.

        The first 8 bytes name the character code. ASCII and JIS are decoded
        directly, UNICODE follows the TIFF byte order, and an undefined code
        is guessed with chardet before falling back to UTF-8.
        """
        raw = self.get_byte_array(entry)
        if len(raw) <= 8:
            return ""
        prefix, body = raw[:8], raw[8:]
        if prefix == USER_COMMENT_UNICODE:
            body = body[:len(body) - (len(body) % 2)]
            codec = 'utf-16-le' if self.endian == '<' else 'utf-16-be'
            text = body.decode(codec, errors='replace')
        elif prefix == USER_COMMENT_JIS:
            text = body.decode('shift_jis', errors='replace')
        elif prefix == USER_COMMENT_ASCII:
            text = body.decode('ascii', errors='replace')
        else:
            text = _decode_undefined_text(body.rstrip(b'\x00'))
        return text.rstrip('\x00').strip()


def _decode_undefined_text(body: bytes) -> str:
    """Decode text with no declared character code."""
    if not body:
        return ""
    try:
        return body.decode('utf-8')
    except UnicodeDecodeError:
        pass
    guess = chardet.detect(body)
    encoding = guess.get('encoding')
    if encoding:
        try:
            return body.decode(encoding, errors='replace')
        except LookupError:
            pass
    return body.decode('utf-8', errors='replace')
