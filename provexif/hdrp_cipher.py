# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Google HDR+ MakerNote cipher

The HDR+ MakerNote is XORed with a keystream from a 64-bit xorshift*
generator. The key is handled as two 32-bit halves and the multiply is
done on 16-bit limbs with explicit carry propagation, so every
intermediate value stays within 32 bits plus carries. The cipher is
symmetric: applying it twice returns the input.

Copyright 2025 DNAi inc.
"""

import struct
from typing import List, Tuple

HDRP_KEY = 0x2515606B4A7791CD
HDRP_MULTIPLIER = 0x2545F4914F6CDD1D

MASK32 = 0xFFFFFFFF

# Multiplier split into big-endian 16-bit limbs
_MULTIPLIER_LIMBS = (0x2545, 0xF491, 0x4F6C, 0xDD1D)


def multiply64(hi: int, lo: int) -> Tuple[int, int]:
    """
    Multiply the 64-bit value hi:lo by HDRP_MULTIPLIER modulo 2**64.

    Args:
        hi: Upper 32 bits
        lo: Lower 32 bits

    Returns:
        (hi, lo) of the low 64 bits of the product
    """
    a = ((hi >> 16) & 0xFFFF, hi & 0xFFFF, (lo >> 16) & 0xFFFF, lo & 0xFFFF)
    c: List[int] = [0] * 7
    for j in range(4):
        for k in range(4):
            c[j + k] += a[j] * _MULTIPLIER_LIMBS[k]

    # Carry from the least significant limb upwards; limbs 0-2 only
    # feed bits above 2**64 and are discarded
    for j in range(6, 2, -1):
        while c[j] > MASK32:
            c[j - 2] += 1
            c[j] -= 0x100000000
        c[j - 1] += c[j] >> 16
        c[j] &= 0xFFFF

    new_hi = ((c[3] << 16) + c[4]) & MASK32
    new_lo = ((c[5] << 16) + c[6]) & MASK32
    return new_hi, new_lo


def advance_key(hi: int, lo: int) -> Tuple[int, int]:
    """One xorshift* step on the key halves: shift 12, 25, 27, then multiply."""
    lo ^= ((lo >> 12) | ((hi & 0xFFF) << 20)) & MASK32
    hi ^= hi >> 12

    hi ^= (((hi & 0x7F) << 25) | (lo >> 7)) & MASK32
    lo ^= ((lo & 0x7F) << 25) & MASK32

    lo ^= ((lo >> 27) | ((hi & 0x7FFFFFF) << 5)) & MASK32
    hi ^= hi >> 27

    return multiply64(hi, lo)


def decrypt_hdrp_bytes(data: bytes) -> bytes:
    """
    Decrypt (or encrypt) an HDR+ MakerNote body.

    The input is zero-padded to a multiple of 8 bytes and read as
    little-endian 32-bit words. Each 8-byte block is XORed with the next
    key value, low half into the first word. The padding is removed from
    the result.

    Args:
        data: Bytes following the "HDRP" magic and its separator byte

    Returns:
        Decrypted bytes, same length as the input
    """
    pad = (8 - (len(data) % 8)) & 0x07
    padded = data + b'\x00' * pad
    word_count = len(padded) // 4
    words = list(struct.unpack(f'<{word_count}I', padded))

    hi, lo = HDRP_KEY >> 32, HDRP_KEY & MASK32
    for i in range(0, word_count, 2):
        hi, lo = advance_key(hi, lo)
        words[i] ^= lo
        words[i + 1] ^= hi

    decrypted = struct.pack(f'<{word_count}I', *words)
    if pad:
        decrypted = decrypted[:-pad]
    return decrypted
