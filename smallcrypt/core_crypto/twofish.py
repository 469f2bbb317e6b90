"""
Twofish Block Cipher (From Scratch)

Implements the Twofish block cipher (128-bit blocks; 128, 192 or 256-bit
keys) as submitted to the AES competition.

Components:
- Reed-Solomon encoding of the key into the S-vector (log/antilog tables)
- Key-dependent S-boxes combined with the MDS matrix: four 256-entry
  tables of 32-bit words, so the round function g is four lookups and XORs
- Subkey generation: 8 whitening and 32 round subkeys via the h-function
  and the pseudo-Hadamard transform
- Single-block encryption and decryption (16 rounds)

Note: Only the block primitive is provided. Encrypting a message one block
at a time with the same key (ECB) leaks patterns; callers must layer a mode
of operation on top.
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import Sequence, Tuple

from .twofish_tables import MDS_COLUMNS, Q0, Q1, RS_EXP, RS_LOG, RS_LOG_MATRIX


logger = logging.getLogger(__name__)

# Block size in bytes
BLOCK_BYTES = 16

# Supported key sizes in bytes (128, 192 and 256 bits)
KEY_SIZES = (16, 24, 32)

# Number of Feistel rounds
ROUNDS = 16

MASK_32 = 0xFFFFFFFF

_BLOCK_WORDS = struct.Struct('<4I')


def _rol(x: int, n: int) -> int:
    """Rotate a 32-bit word left by n bits."""
    return ((x << n) | (x >> (32 - n))) & MASK_32


def _ror(x: int, n: int) -> int:
    """Rotate a 32-bit word right by n bits."""
    return ((x >> n) | (x << (32 - n))) & MASK_32


def _rs_encode(chunk: Sequence[int]) -> Tuple[int, int, int, int]:
    """
    Multiply an 8-byte key chunk by the Reed-Solomon matrix.

    Products are taken in the log domain: RS_EXP[log a + log b]. Zero key
    bytes contribute nothing and have no logarithm.
    """
    s = [0, 0, 0, 0]
    for column, key_byte in enumerate(chunk):
        if key_byte:
            exp = RS_LOG[key_byte]
            for row in range(4):
                s[row] ^= RS_EXP[exp + RS_LOG_MATRIX[row][column]]
    return s[0], s[1], s[2], s[3]


def _h_bytes(x: int, material: Sequence[Sequence[int]]) -> Tuple[int, int, int, int]:
    """
    The q-permutation cascade of the h-function, applied to the word whose
    four bytes all equal x.

    Args:
        x: Input byte
        material: k 4-byte words L[0..k-1] (k = 2, 3 or 4)

    Returns:
        The four bytes fed to the MDS matrix
    """
    y0 = y1 = y2 = y3 = x
    if len(material) == 4:
        l = material[3]
        y0, y1, y2, y3 = Q1[y0] ^ l[0], Q0[y1] ^ l[1], Q0[y2] ^ l[2], Q1[y3] ^ l[3]
    if len(material) >= 3:
        l = material[2]
        y0, y1, y2, y3 = Q1[y0] ^ l[0], Q1[y1] ^ l[1], Q0[y2] ^ l[2], Q0[y3] ^ l[3]
    l0, l1 = material[0], material[1]
    return (
        Q1[Q0[Q0[y0] ^ l1[0]] ^ l0[0]],
        Q0[Q0[Q1[y1] ^ l1[1]] ^ l0[1]],
        Q1[Q1[Q0[y2] ^ l1[2]] ^ l0[2]],
        Q0[Q1[Q1[y3] ^ l1[3]] ^ l0[3]],
    )


def _h(x: int, material: Sequence[Sequence[int]]) -> int:
    """The full h-function: q cascade followed by the MDS multiply."""
    y0, y1, y2, y3 = _h_bytes(x, material)
    return (MDS_COLUMNS[0][y0] ^ MDS_COLUMNS[1][y1]
            ^ MDS_COLUMNS[2][y2] ^ MDS_COLUMNS[3][y3])


@dataclass(frozen=True)
class KeySchedule:
    """
    Key-dependent data for one Twofish key.

    Holds no key bytes. Two schedules derived from the same key compare
    equal.
    """
    key_bits: int
    sboxes: Tuple[Tuple[int, ...], ...] = field(repr=False)
    whitening: Tuple[int, ...] = field(repr=False)
    round_keys: Tuple[int, ...] = field(repr=False)


def expand_key(key: bytes) -> KeySchedule:
    """
    Derive the S-boxes and subkeys for a 16, 24 or 32-byte key.

    Args:
        key: Raw key bytes

    Returns:
        Immutable KeySchedule

    Raises:
        ValueError: If the key is not 16, 24 or 32 bytes

    Example:
        >>> schedule = expand_key(bytes(16))
        >>> len(schedule.round_keys)
        32
    """
    key = bytes(memoryview(key))
    if len(key) not in KEY_SIZES:
        raise ValueError(
            f"Twofish key must be 16, 24 or 32 bytes, got {len(key)} bytes"
        )

    k = len(key) // 8

    # Even and odd 32-bit key words
    me = [key[8 * i:8 * i + 4] for i in range(k)]
    mo = [key[8 * i + 4:8 * i + 8] for i in range(k)]

    # S-vector, last chunk first
    s_vector = [_rs_encode(key[8 * i:8 * i + 8]) for i in range(k)][::-1]

    columns = ([], [], [], [])
    for x in range(256):
        ys = _h_bytes(x, s_vector)
        for j in range(4):
            columns[j].append(MDS_COLUMNS[j][ys[j]])

    subkeys = []
    for i in range(0, 2 * (4 + ROUNDS), 2):
        a = _h(i, me)
        b = _rol(_h(i + 1, mo), 8)
        subkeys.append((a + b) & MASK_32)
        subkeys.append(_rol((a + 2 * b) & MASK_32, 9))

    logger.debug('Derived Twofish key schedule for a %d-bit key', len(key) * 8)
    return KeySchedule(
        key_bits=len(key) * 8,
        sboxes=tuple(tuple(column) for column in columns),
        whitening=tuple(subkeys[:8]),
        round_keys=tuple(subkeys[8:]),
    )


class Twofish:
    """
    A Twofish context: encrypts and decrypts single 16-byte blocks.

    The context is never modified after construction, so one instance may be
    shared between threads.

    Example:
        >>> cipher = Twofish.new128(bytes(16))
        >>> cipher.encrypt(bytes(16)).hex()
        '9f589f5cf6122c32b6bfec2f2ae8c35a'
    """

    __slots__ = ('_schedule',)

    def __init__(self, key: bytes):
        """
        Set up a context for a 128, 192 or 256-bit key.

        Args:
            key: 16, 24 or 32 key bytes (not retained)

        Raises:
            ValueError: If the key length is unsupported
        """
        self._schedule = expand_key(key)

    @classmethod
    def _sized(cls, key: bytes, size: int) -> 'Twofish':
        if len(key) != size:
            raise ValueError(
                f"Twofish-{size * 8} requires a {size}-byte key, got {len(key)} bytes"
            )
        return cls(key)

    @classmethod
    def new128(cls, key: bytes) -> 'Twofish':
        """Set up a context for a 128-bit (16-byte) key."""
        return cls._sized(key, 16)

    @classmethod
    def new192(cls, key: bytes) -> 'Twofish':
        """Set up a context for a 192-bit (24-byte) key."""
        return cls._sized(key, 24)

    @classmethod
    def new256(cls, key: bytes) -> 'Twofish':
        """Set up a context for a 256-bit (32-byte) key."""
        return cls._sized(key, 32)

    @property
    def schedule(self) -> KeySchedule:
        """The derived S-boxes and subkeys."""
        return self._schedule

    @property
    def key_bits(self) -> int:
        """Key size in bits."""
        return self._schedule.key_bits

    def _round_function(self, r0: int, r1: int, index: int) -> Tuple[int, int]:
        """
        The F function: g on both words, PHT, then two round subkeys.

        Returns:
            (F0, F1)
        """
        s0, s1, s2, s3 = self._schedule.sboxes
        t0 = (s0[r0 & 0xFF] ^ s1[(r0 >> 8) & 0xFF]
              ^ s2[(r0 >> 16) & 0xFF] ^ s3[r0 >> 24])
        r1 = _rol(r1, 8)
        t1 = (s0[r1 & 0xFF] ^ s1[(r1 >> 8) & 0xFF]
              ^ s2[(r1 >> 16) & 0xFF] ^ s3[r1 >> 24])
        k = self._schedule.round_keys
        return (t0 + t1 + k[index]) & MASK_32, (t0 + 2 * t1 + k[index + 1]) & MASK_32

    def _check_block(self, block: bytes) -> None:
        if len(block) != BLOCK_BYTES:
            raise ValueError(
                f"Twofish block must be {BLOCK_BYTES} bytes, got {len(block)} bytes"
            )

    def encrypt(self, block: bytes) -> bytes:
        """
        Encrypt a single 16-byte block.

        Args:
            block: 16 plaintext bytes

        Returns:
            16 ciphertext bytes

        Raises:
            ValueError: If the block is not 16 bytes
        """
        self._check_block(block)
        w = self._schedule.whitening
        r0, r1, r2, r3 = _BLOCK_WORDS.unpack(bytes(block))
        r0 ^= w[0]
        r1 ^= w[1]
        r2 ^= w[2]
        r3 ^= w[3]

        # Two rounds per pass; the halves swap roles instead of moving
        for index in range(0, 2 * ROUNDS, 4):
            f0, f1 = self._round_function(r0, r1, index)
            r2 = _ror(r2 ^ f0, 1)
            r3 = _rol(r3, 1) ^ f1
            f0, f1 = self._round_function(r2, r3, index + 2)
            r0 = _ror(r0 ^ f0, 1)
            r1 = _rol(r1, 1) ^ f1

        return _BLOCK_WORDS.pack(r2 ^ w[4], r3 ^ w[5], r0 ^ w[6], r1 ^ w[7])

    def decrypt(self, block: bytes) -> bytes:
        """
        Decrypt a single 16-byte block.

        Same tables and subkeys as encrypt(), rounds in reverse order with
        the rotations inverted.

        Args:
            block: 16 ciphertext bytes

        Returns:
            16 plaintext bytes

        Raises:
            ValueError: If the block is not 16 bytes
        """
        self._check_block(block)
        w = self._schedule.whitening
        r2, r3, r0, r1 = _BLOCK_WORDS.unpack(bytes(block))
        r2 ^= w[4]
        r3 ^= w[5]
        r0 ^= w[6]
        r1 ^= w[7]

        for index in range(2 * ROUNDS - 4, -1, -4):
            f0, f1 = self._round_function(r2, r3, index + 2)
            r0 = _rol(r0, 1) ^ f0
            r1 = _ror(r1 ^ f1, 1)
            f0, f1 = self._round_function(r0, r1, index)
            r2 = _rol(r2, 1) ^ f0
            r3 = _ror(r3 ^ f1, 1)

        return _BLOCK_WORDS.pack(r0 ^ w[0], r1 ^ w[1], r2 ^ w[2], r3 ^ w[3])

    def __repr__(self) -> str:
        return f"Twofish(key_bits={self.key_bits})"
