# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
XMP (Extensible Metadata Platform) locator and sanitizer

This module finds the standard and extended XMP packets in a JPEG by
scanning raw bytes, cleans the text so it can be parsed, and re-reads
selected attributes straight from the raw text. The HdrPlusMakernote
attribute holds Base64 data; an XML parser decodes entities inside
attribute values, which would corrupt any Base64 that happens to look
like an entity, so that attribute is always taken from the raw text.

Copyright 2025 DNAi inc.
"""

import re
import struct
import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional, Tuple

from provexif.exceptions import XMPNotFoundError
from provexif.jpeg_segments import APP1, iter_segments


XMP_HEADER = b'http://ns.adobe.com/xap/1.0/\x00'
XMP_EXTENSION_HEADER = b'http://ns.adobe.com/xmp/extension/\x00'
XMP_END = b'</x:xmpmeta>'
XMP_META_START = '<x:xmpmeta'

# GUID (32 hex chars) + full length (4) + chunk offset (4)
EXTENSION_GUID_LENGTH = 32
EXTENSION_CHUNK_HEADER = EXTENSION_GUID_LENGTH + 8

BASE64_ALPHABET = frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/=')

_EXTENSION_MARKER_RE = re.compile(r'http://ns\.adobe\.com/xmp/extension/\x00[A-F0-9]+')


def extract_xmp_packet(data: bytes) -> str:
    """
    Return the standard XMP packet that follows the xap/1.0 marker.

    The span runs from the end of the marker up to and including the
    first "</x:xmpmeta>" after it.

    Raises:
        XMPNotFoundError: If the marker or the closing tag is missing
    """
    start = data.find(XMP_HEADER)
    if start == -1:
        raise XMPNotFoundError("XMP block not found")
    end = data.find(XMP_END, start)
    if end == -1:
        raise XMPNotFoundError("XMP end tag not found")
    packet = data[start + len(XMP_HEADER):end + len(XMP_END)]
    return sanitize_xml_string(packet.decode('utf-8', errors='ignore'))


def extract_extended_xmp(data: bytes, guid: str) -> str:
    """
    Return the extended XMP packet identified by guid.

    Chunks carried in well-formed APP1 segments are put back together by
    their declared offsets. When no such segment is found, the bytes from
    the first extension marker to the closing tag are used instead and
    any interleaved segment headers are cleaned out of the text.

    Raises:
        XMPNotFoundError: If no extended XMP with this GUID exists
    """
    raw = _reassemble_extension_chunks(data, guid)
    if raw is None:
        raw = _scan_extension_span(data, guid)
    return clean_extended_text(raw)


def clean_extended_text(raw: bytes) -> str:
    """
    Decode extended XMP bytes into parseable text.

    Invalid UTF-8 is dropped, anything before "<x:xmpmeta" is cut,
    replacement characters are removed and the text is passed through
    sanitize_xml_string.
    """
    text = raw.decode('utf-8', errors='ignore')
    tag_start = text.find(XMP_META_START)
    if tag_start != -1:
        text = text[tag_start:]
    text = text.replace('\ufffd', '')
    return sanitize_xml_string(text)


def sanitize_xml_string(text: str) -> str:
    """
    Remove inline extension markers and XML-illegal control characters.

    Characters 0x00-0x08, 0x0B-0x0C and 0x0E-0x1F are dropped; tab,
    line feed and carriage return are kept.
    """
    text = _EXTENSION_MARKER_RE.sub('', text)
    return ''.join(c for c in text if c >= '\x20' or c in '\t\n\r')


def sanitize_base64(value: str) -> str:
    """
    Keep only Base64 alphabet characters and recompute the padding.

    Trailing "=" are removed and (4 - len % 4) % 4 are added back, so the
    result length is always a multiple of four. Applying it twice gives
    the same result as applying it once.
    """
    cleaned = ''.join(c for c in value if c in BASE64_ALPHABET).rstrip('=')
    return cleaned + '=' * ((4 - len(cleaned) % 4) % 4)


def extract_raw_attribute(text: str, name: str) -> str:
    """
    Read an attribute value straight from raw XML text, without entity decoding.

    An optional namespace prefix is accepted, so both HdrPlusMakernote="..."
    and hdrp:HdrPlusMakernote="..." match.
    """
    match = re.search(r'[a-zA-Z]*:?' + re.escape(name) + r'="([^"]*)"', text)
    return match.group(1) if match else ''


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1].split(':')[-1]


class XmpDocument:
    """
    Parsed rdf:Description attributes of an XMP packet.

    The packet is parsed with ElementTree; attributes are stored by local
    name. Raw attribute values are read from the original text on demand,
    so they are available even when the XML itself does not parse.
    """

    def __init__(self, text: str):
        """
        Args:
            text: Sanitized XMP text
        """
        self.text = text
        self.attributes: Dict[str, str] = {}
        self.parse_error: Optional[str] = None
        self._parse()

    def _parse(self) -> None:
        try:
            root = ET.fromstring(self.text)
        except ET.ParseError as e:
            self.parse_error = str(e)
            return

        for element in root.iter():
            if _local_name(element.tag) != 'Description':
                continue
            for key, value in element.attrib.items():
                self.attributes.setdefault(_local_name(key), value)
            for child in element:
                if len(child) == 0 and child.text and child.text.strip():
                    self.attributes.setdefault(_local_name(child.tag), child.text.strip())

    def get(self, name: str, default: str = '') -> str:
        return self.attributes.get(name, default)

    def raw_attribute(self, name: str) -> str:
        return extract_raw_attribute(self.text, name)

    @property
    def has_extended_xmp(self) -> str:
        """GUID of the extended packet, or "" when there is none."""
        value = self.get('HasExtendedXMP') or self.raw_attribute('HasExtendedXMP')
        return value.strip()

    @property
    def hdrplus_makernote(self) -> str:
        return self.raw_attribute('HdrPlusMakernote')


def _iter_app1_payloads(data: bytes) -> Iterator[bytes]:
    for segment in iter_segments(data):
        if segment.marker == APP1:
            yield data[segment.payload_start:segment.end]


def _reassemble_extension_chunks(data: bytes, guid: str) -> Optional[bytes]:
    prefix = XMP_EXTENSION_HEADER + guid.encode('ascii', errors='ignore')
    chunks: List[Tuple[int, bytes]] = []
    full_length = 0
    for payload in _iter_app1_payloads(data):
        if not payload.startswith(prefix):
            continue
        header_end = len(XMP_EXTENSION_HEADER) + EXTENSION_CHUNK_HEADER
        if len(payload) < header_end:
            continue
        declared_length, chunk_offset = struct.unpack_from('>II', payload, header_end - 8)
        full_length = max(full_length, declared_length)
        chunks.append((chunk_offset, payload[header_end:]))

    if not chunks:
        return None

    # Never allocate past what the chunks actually cover
    end = max(offset + len(chunk) for offset, chunk in chunks)
    buffer = bytearray(min(full_length, end) if full_length else end)
    for offset, chunk in sorted(chunks):
        if offset >= len(buffer):
            continue
        buffer[offset:offset + len(chunk)] = chunk[:len(buffer) - offset]
    return bytes(buffer)


def _scan_extension_span(data: bytes, guid: str) -> bytes:
    marker = XMP_EXTENSION_HEADER + guid.encode('ascii', errors='ignore') + b'\x00'
    start = data.find(marker)
    if start == -1:
        raise XMPNotFoundError("extended XMP data not found")
    end = data.find(XMP_END, start)
    if end == -1:
        raise XMPNotFoundError("extended XMP end tag not found")
    return data[start + len(marker):end + len(XMP_END)]
