# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Compressed stream recovery

Decrypted HDR+ payloads are gzip streams, and in real files they are
often cut short. Decompression here is incremental so that everything
inflated before a failure is kept. A gzip pass is tried first; if it
does not reach the end of the stream, the DEFLATE body is inflated raw
and the longer of the two outputs wins. A gzip checksum or header
failure is kept on the result even when raw DEFLATE completes.

Copyright 2025 DNAi inc.
"""

import struct
import zlib
from dataclasses import dataclass
from typing import List, Optional, Tuple

from provexif.exceptions import DecompressionError

GZIP_MAGIC = b'\x1f\x8b'
GZIP_WBITS = 16 + zlib.MAX_WBITS
RAW_DEFLATE_WBITS = -zlib.MAX_WBITS

# gzip header flags
FHCRC = 0x02
FEXTRA = 0x04
FNAME = 0x08
FCOMMENT = 0x10


@dataclass
class RecoveryResult:
    """
    Output of a recovery attempt.

    Attributes:
        data: Decompressed bytes (possibly partial)
        method: "gzip" or "deflate"
        complete: True when the stream ended normally
        error: Decompressor error message, if one stopped the stream; on a
            complete raw DEFLATE result, the gzip error that forced the fallback
    """
    data: bytes
    method: str
    complete: bool
    error: Optional[str] = None

    @property
    def truncated(self) -> bool:
        return not self.complete


def _replay_bytes(decompressor, chunk: bytes, output: bytearray) -> str:
    """Feed chunk one byte at a time, keeping output up to the failing byte."""
    for position in range(len(chunk)):
        try:
            output += decompressor.decompress(chunk[position:position + 1])
        except zlib.error as e:
            return str(e)
        if decompressor.eof:
            break
    return ''


def inflate_partial(data: bytes, wbits: int, chunk_size: int = 4096) -> Tuple[bytes, bool, Optional[str]]:
    """
    Inflate data incrementally, keeping output produced before any error.

    zlib discards everything a call would have produced when it raises,
    so each chunk is fed to a copy of the decompressor first. When a
    chunk fails, it is replayed byte by byte through the copy to recover
    the output that preceded the bad byte.

    Args:
        data: Compressed bytes
        wbits: zlib window bits selecting gzip, zlib or raw DEFLATE framing
        chunk_size: Bytes fed to the decompressor per step

    Returns:
        (output, reached end of stream, error message or None)
    """
    decompressor = zlib.decompressobj(wbits)
    output = bytearray()
    error = None
    for start in range(0, len(data), chunk_size):
        chunk = data[start:start + chunk_size]
        snapshot = decompressor.copy()
        try:
            output += decompressor.decompress(chunk)
        except zlib.error as e:
            error = _replay_bytes(snapshot, chunk, output) or str(e)
            decompressor = snapshot
            break
        if decompressor.eof:
            break
    if error is None and not decompressor.eof:
        try:
            output += decompressor.flush()
        except zlib.error as e:
            error = str(e)
    return bytes(output), decompressor.eof and error is None, error


def gzip_header_length(data: bytes) -> Optional[int]:
    """
    Length of a gzip member header, or None when it cannot be parsed.

    Optional FEXTRA, FNAME, FCOMMENT and FHCRC fields are skipped.
    """
    if len(data) < 10 or data[:2] != GZIP_MAGIC or data[2] != 8:
        return None
    flags = data[3]
    offset = 10
    if flags & FEXTRA:
        if offset + 2 > len(data):
            return None
        extra_length = struct.unpack('<H', data[offset:offset + 2])[0]
        offset += 2 + extra_length
    for flag in (FNAME, FCOMMENT):
        if flags & flag:
            end = data.find(b'\x00', offset)
            if end == -1:
                return None
            offset = end + 1
    if flags & FHCRC:
        offset += 2
    return offset if offset <= len(data) else None


def _deflate_candidates(data: bytes) -> List[bytes]:
    header_length = gzip_header_length(data)
    if header_length is not None:
        return [data[header_length:]]
    # Header unreadable: try the fixed 10-byte header and the bytes as-is
    return [data[10:], data]


def read_gzip_content(data: bytes, chunk_size: int = 4096) -> RecoveryResult:
    """
    Decompress a gzip payload, recovering what it can from damaged streams.

    The raw DEFLATE result replaces the gzip one when it is longer, or
    when it is as long and reached the end of the stream. If gzip failed
    with an error (a bad header or a failed CRC32/length check rather
    than a plain truncation), that error stays on the result so the
    caller can tell the payload did not pass its integrity check.

    Args:
        data: Decrypted payload bytes
        chunk_size: Bytes fed to the decompressor per step

    Returns:
        RecoveryResult; complete is False when the output is partial

    Raises:
        DecompressionError: If neither gzip nor raw DEFLATE produced any bytes
    """
    output, complete, gzip_error = inflate_partial(data, GZIP_WBITS, chunk_size)
    best = RecoveryResult(output, 'gzip', complete, gzip_error)
    if complete:
        return best

    for candidate in _deflate_candidates(data):
        if not candidate:
            continue
        output, complete, error = inflate_partial(candidate, RAW_DEFLATE_WBITS, chunk_size)
        longer = len(output) > len(best.data)
        if longer or (complete and not best.complete and len(output) == len(best.data)):
            if error is None and gzip_error:
                error = f"gzip: {gzip_error}"
            best = RecoveryResult(output, 'deflate', complete, error)

    if not best.data:
        raise DecompressionError(
            f"both gzip and raw inflate failed: {best.error or 'no data produced'}")
    return best
