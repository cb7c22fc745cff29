"""Tests for gzip decompression with partial recovery."""

import gzip
import zlib

import pytest

from provexif import DecompressionError
from provexif.stream_recovery import (
    GZIP_WBITS,
    gzip_header_length,
    inflate_partial,
    read_gzip_content,
)

PAYLOAD = b''.join(b'frame %04d exposure 1/120 iso 50\n' % i for i in range(400))


def gzip_with_bad_block(payload):
    """A gzip stream whose next block after a sync flush has an invalid type."""
    compressor = zlib.compressobj(6, zlib.DEFLATED, GZIP_WBITS)
    body = compressor.compress(payload) + compressor.flush(zlib.Z_SYNC_FLUSH)
    return body + b'\xff' * 32


class TestCompleteStreams:
    """Tests for streams that end normally."""

    def test_gzip(self):
        result = read_gzip_content(gzip.compress(PAYLOAD))
        assert result.data == PAYLOAD
        assert result.method == 'gzip'
        assert result.complete
        assert not result.truncated

    def test_small_chunks(self):
        result = read_gzip_content(gzip.compress(PAYLOAD), chunk_size=1)
        assert result.data == PAYLOAD
        assert result.complete

    def test_trailing_bytes_ignored(self):
        result = read_gzip_content(gzip.compress(PAYLOAD) + b'\x00' * 16)
        assert result.data == PAYLOAD
        assert result.complete


class TestDamagedStreams:
    """Tests for truncated and corrupted streams."""

    @pytest.mark.parametrize('compresslevel', [0, 6])
    def test_truncated_keeps_prefix(self, compresslevel):
        compressed = gzip.compress(PAYLOAD, compresslevel=compresslevel)
        result = read_gzip_content(compressed[:-10])
        assert result.data
        assert PAYLOAD.startswith(result.data)
        assert not result.complete
        assert result.truncated

    def test_truncated_mid_stream(self):
        compressed = gzip.compress(PAYLOAD, compresslevel=0)
        result = read_gzip_content(compressed[:len(compressed) // 2])
        assert 0 < len(result.data) < len(PAYLOAD)
        assert PAYLOAD.startswith(result.data)

    def test_corrupted_header_falls_back_to_deflate(self):
        compressed = bytearray(gzip.compress(PAYLOAD))
        compressed[0:2] = b'\x00\x00'
        result = read_gzip_content(bytes(compressed))
        assert result.method == 'deflate'
        assert result.data == PAYLOAD
        assert result.complete

    def test_corruption_in_first_chunk_keeps_output(self):
        data = gzip_with_bad_block(PAYLOAD)
        assert len(data) < 4096
        result = read_gzip_content(data)
        assert result.data == PAYLOAD
        assert not result.complete
        assert 'invalid block type' in result.error

    def test_checksum_failure_reported(self):
        compressed = bytearray(gzip.compress(PAYLOAD))
        # first byte of the CRC32 trailer
        compressed[-8] ^= 0xFF
        result = read_gzip_content(bytes(compressed))
        assert result.data == PAYLOAD
        assert result.method == 'deflate'
        assert result.complete
        assert 'incorrect data check' in result.error

    def test_garbage_raises(self):
        with pytest.raises(DecompressionError):
            read_gzip_content(b'\xff' * 64)

    def test_empty_raises(self):
        with pytest.raises(DecompressionError):
            read_gzip_content(b'')


class TestInflatePartial:
    """Tests for the incremental inflater."""

    def test_truncated_stored_block(self):
        compressed = gzip.compress(PAYLOAD, compresslevel=0)
        output, complete, error = inflate_partial(compressed[:200], GZIP_WBITS, 64)
        assert not complete
        assert error is None
        assert PAYLOAD.startswith(output)

    def test_error_mid_chunk_keeps_prefix(self):
        output, complete, error = inflate_partial(gzip_with_bad_block(PAYLOAD), GZIP_WBITS, 4096)
        assert output == PAYLOAD
        assert not complete
        assert error

    def test_raw_deflate(self):
        compressor = zlib.compressobj(6, zlib.DEFLATED, -zlib.MAX_WBITS)
        raw = compressor.compress(PAYLOAD) + compressor.flush()
        output, complete, error = inflate_partial(raw, -zlib.MAX_WBITS, 64)
        assert output == PAYLOAD
        assert complete
        assert error is None


class TestGzipHeader:
    """Tests for gzip header length parsing."""

    def test_plain(self):
        assert gzip_header_length(gzip.compress(b'x')) == 10

    def test_fname(self):
        header = b'\x1f\x8b\x08\x08' + b'\x00' * 6 + b'name.bin\x00'
        assert gzip_header_length(header + b'\x03\x00') == 19

    def test_fextra_and_fcomment(self):
        header = b'\x1f\x8b\x08\x14' + b'\x00' * 6 + b'\x03\x00abc' + b'note\x00'
        assert gzip_header_length(header) == 10 + 2 + 3 + 5

    def test_fhcrc(self):
        header = b'\x1f\x8b\x08\x02' + b'\x00' * 6 + b'\xab\xcd'
        assert gzip_header_length(header) == 12

    @pytest.mark.parametrize('data', [
        b'', b'\x1f\x8b\x08', b'\x00\x00\x08\x00' + b'\x00' * 6,
        b'\x1f\x8b\x07\x00' + b'\x00' * 6, b'\x1f\x8b\x08\x08' + b'\x00' * 6 + b'unterminated',
    ])
    def test_unparseable(self, data):
        assert gzip_header_length(data) is None
