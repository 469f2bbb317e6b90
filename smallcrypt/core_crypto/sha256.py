"""
SHA-256 Hash Implementation (From Scratch)

Implements the SHA-256 cryptographic hash function as defined in FIPS 180-4,
without hashlib, in both unbuffered and buffered flavors.

Components:
- RawSHA256: compression engine fed whole 64-byte blocks
- BufferedSHA256: accepts input of any length, keeps a partial block
- sha256(): one-shot hash of a complete message
- Padding: 0x80 marker, zero fill, 64-bit big-endian bit length

Usage:
    Use sha256() when the whole message is already in memory, RawSHA256 when
    it is convenient to supply data in 64-byte blocks, and BufferedSHA256
    otherwise. Both accumulators are consumed by finish().
"""

import logging
import struct
from typing import List, Tuple


logger = logging.getLogger(__name__)

# Digest size in bytes (256 bits)
HASH_BYTES = 32

# Bytes consumed by one compression (512 bits)
BLOCK_BYTES = 64

# The bit length must fit the 64-bit length field
MAX_HASH_BYTES = 1 << 61

# Initial hash values: first 32 bits of fractional parts of square roots of first 8 primes
H_INITIAL = (
    0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
    0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19,
)

# Round constants: first 32 bits of fractional parts of cube roots of first 64 primes
K = (
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5,
    0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3,
    0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc,
    0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7,
    0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13,
    0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3,
    0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5,
    0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208,
    0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2,
)

# Mask for 32-bit arithmetic
MASK_32 = 0xFFFFFFFF

_BLOCK_WORDS = struct.Struct('>16I')
_DIGEST_WORDS = struct.Struct('>8I')


class HashLimitError(OverflowError):
    """Raised when an accumulator would pass the 2^61-byte ceiling."""
    pass


def _right_rotate(value: int, amount: int) -> int:
    """Right rotate a 32-bit integer by the specified amount."""
    return ((value >> amount) | (value << (32 - amount))) & MASK_32


def _ch(x: int, y: int, z: int) -> int:
    """Choice function: if x then y else z (bitwise)."""
    return (x & y) ^ (~x & z & MASK_32)


def _maj(x: int, y: int, z: int) -> int:
    """Majority function: majority vote of bits."""
    return (x & y) ^ (x & z) ^ (y & z)


def _sigma0(x: int) -> int:
    """Lowercase sigma 0: used in message schedule."""
    return _right_rotate(x, 7) ^ _right_rotate(x, 18) ^ (x >> 3)


def _sigma1(x: int) -> int:
    """Lowercase sigma 1: used in message schedule."""
    return _right_rotate(x, 17) ^ _right_rotate(x, 19) ^ (x >> 10)


def _big_sigma0(x: int) -> int:
    """Uppercase Sigma 0: used in compression."""
    return _right_rotate(x, 2) ^ _right_rotate(x, 13) ^ _right_rotate(x, 22)


def _big_sigma1(x: int) -> int:
    """Uppercase Sigma 1: used in compression."""
    return _right_rotate(x, 6) ^ _right_rotate(x, 11) ^ _right_rotate(x, 25)


def _create_message_schedule(block, offset: int = 0) -> List[int]:
    """
    Expand one 64-byte block into the 64-word message schedule.

    The first 16 words are the block read as big-endian integers. For i from
    16 to 63:
        W[i] = σ1(W[i-2]) + W[i-7] + σ0(W[i-15]) + W[i-16]
    """
    w = list(_BLOCK_WORDS.unpack_from(block, offset))
    for i in range(16, 64):
        s0 = _sigma0(w[i - 15])
        s1 = _sigma1(w[i - 2])
        w.append((w[i - 16] + s0 + w[i - 7] + s1) & MASK_32)
    return w


def _compress(state: Tuple[int, ...], w: List[int]) -> Tuple[int, ...]:
    """
    Perform 64 rounds of compression on the state.

    Args:
        state: Current hash state (8 32-bit words)
        w: Message schedule (64 32-bit words)

    Returns:
        Updated hash state
    """
    a, b, c, d, e, f, g, h = state

    for i in range(64):
        t1 = (h + _big_sigma1(e) + _ch(e, f, g) + K[i] + w[i]) & MASK_32
        t2 = (_big_sigma0(a) + _maj(a, b, c)) & MASK_32

        h = g
        g = f
        f = e
        e = (d + t1) & MASK_32
        d = c
        c = b
        b = a
        a = (t1 + t2) & MASK_32

    # Add compressed chunk to current hash value
    return tuple(
        (old + new) & MASK_32
        for old, new in zip(state, (a, b, c, d, e, f, g, h))
    )


def _check_limit(byte_count: int, extra: int) -> None:
    """Raise HashLimitError if hashing `extra` more bytes reaches the ceiling."""
    if byte_count + extra >= MAX_HASH_BYTES:
        logger.warning(
            'Refusing to hash past %d bytes (%d already hashed, %d offered)',
            MAX_HASH_BYTES, byte_count, extra,
        )
        raise HashLimitError(
            f"Cannot hash {MAX_HASH_BYTES} or more bytes with one accumulator"
        )


class RawSHA256:
    """
    Unbuffered SHA-256 state.

    update() only accepts whole 64-byte blocks; finish() accepts any length
    and produces the digest. The object cannot be used after finish().

    Example:
        >>> hasher = RawSHA256()
        >>> hasher.update(bytes(64))
        >>> len(hasher.finish(b"tail"))
        32
    """

    def __init__(self):
        """Start a new hash."""
        self._state = H_INITIAL
        self._byte_count = 0
        self._finished = False

    @property
    def byte_count(self) -> int:
        """Number of bytes compressed so far."""
        return self._byte_count

    def _ensure_open(self, method: str) -> None:
        if self._finished:
            raise RuntimeError(f"Cannot call {method}() after finish()")

    def _process(self, data) -> None:
        state = self._state
        for offset in range(0, len(data), BLOCK_BYTES):
            state = _compress(state, _create_message_schedule(data, offset))
        self._state = state

    def update(self, data) -> None:
        """
        Process some blocks of data.

        Args:
            data: Bytes-like object whose length is a multiple of 64

        Raises:
            ValueError: If the length is not a multiple of 64
            HashLimitError: If the accumulator would reach 2^61 bytes
            RuntimeError: If finish() has already been called
        """
        self._ensure_open('update')
        if len(data) % BLOCK_BYTES:
            raise ValueError(
                f"RawSHA256.update() needs a multiple of {BLOCK_BYTES} bytes, "
                f"got {len(data)}"
            )
        _check_limit(self._byte_count, len(data))
        self._process(data)
        self._byte_count += len(data)

    def finish(self, data=b'') -> bytes:
        """
        Process the remaining data and produce the finished hash.

        The input does not need to be a multiple of 64 bytes. The state is
        consumed: any further update() or finish() raises RuntimeError.

        Args:
            data: Final bytes of the message (any length)

        Returns:
            256-bit (32-byte) digest

        Raises:
            HashLimitError: If the message would reach 2^61 bytes
        """
        self._ensure_open('finish')
        _check_limit(self._byte_count, len(data))

        if len(data) >= BLOCK_BYTES:
            whole = len(data) - len(data) % BLOCK_BYTES
            self.update(data[:whole])
            data = data[whole:]

        bit_length = (self._byte_count + len(data)) << 3
        remainder = len(data)

        # Room for the 0x80 marker and the 8-byte length?
        if remainder > BLOCK_BYTES - 9:
            block = bytearray(BLOCK_BYTES * 2)
        else:
            block = bytearray(BLOCK_BYTES)
        block[:remainder] = data
        block[remainder] = 0x80
        block[-8:] = bit_length.to_bytes(8, byteorder='big')

        self._process(block)
        self._finished = True
        return _DIGEST_WORDS.pack(*self._state)

    def copy(self) -> 'RawSHA256':
        """Return an independent copy of the current state."""
        self._ensure_open('copy')
        other = RawSHA256()
        other._state = self._state
        other._byte_count = self._byte_count
        return other

    def __repr__(self) -> str:
        return "RawSHA256(...)"


class BufferedSHA256:
    """
    SHA-256 state with a one-block buffer, accepting input of any length.

    Example:
        >>> hasher = BufferedSHA256()
        >>> hasher.update(b"Here is a piece of text ")
        >>> hasher.update(b"that is not exactly 64 characters.")
        >>> digest = hasher.finish()
    """

    def __init__(self):
        """Start a new hash with an empty buffer."""
        self._inner = RawSHA256()
        self._buffer = bytearray()

    @property
    def byte_count(self) -> int:
        """Total bytes accepted so far, buffered ones included."""
        return self._inner.byte_count + len(self._buffer)

    @property
    def buffered(self) -> int:
        """Number of bytes waiting in the partial-block buffer."""
        return len(self._buffer)

    def update(self, data) -> None:
        """
        Process some data. Any amount of data may be provided.

        Raises:
            HashLimitError: If the accumulator would reach 2^61 bytes
            RuntimeError: If finish() has already been called
        """
        self._inner._ensure_open('update')
        _check_limit(self.byte_count, len(data))

        if self._buffer:
            needed = BLOCK_BYTES - len(self._buffer)
            if len(data) < needed:
                self._buffer += data
                return
            self._buffer += data[:needed]
            self._inner.update(self._buffer)
            self._buffer.clear()
            data = data[needed:]

        whole = len(data) - len(data) % BLOCK_BYTES
        if whole:
            self._inner.update(data[:whole])
        self._buffer += data[whole:]

    def finish(self, data=b'') -> bytes:
        """
        Process any remaining data and produce the finished hash.

        Args:
            data: Optional trailing bytes

        Returns:
            256-bit (32-byte) digest
        """
        self._inner._ensure_open('finish')
        if data:
            self.update(data)
        return self._inner.finish(bytes(self._buffer))

    def copy(self) -> 'BufferedSHA256':
        """Return an independent copy, buffer included."""
        other = BufferedSHA256()
        other._inner = self._inner.copy()
        other._buffer = bytearray(self._buffer)
        return other

    def __repr__(self) -> str:
        return "BufferedSHA256(...)"


def new() -> BufferedSHA256:
    """Start a new buffered SHA-256 computation."""
    return BufferedSHA256()


def sha256(data: bytes) -> bytes:
    """
    Compute the SHA-256 hash of the input data.

    RawSHA256.finish() handles input of any length, so no buffering is needed
    when the whole message is at hand.

    Args:
        data: Input bytes to hash

    Returns:
        256-bit (32-byte) digest as bytes

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return RawSHA256().finish(data)


def sha256_hex(data: bytes) -> str:
    """
    Compute SHA-256 hash and return as hexadecimal string.

    Args:
        data: Input bytes to hash

    Returns:
        64-character hexadecimal string
    """
    return sha256(data).hex()
