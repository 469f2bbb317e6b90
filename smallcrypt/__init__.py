"""
smallcrypt - SHA-256 and Twofish with a small, fixed footprint.

Only the primitives are provided: a hash and a single-block cipher. Modes of
operation, padding and key derivation are left to the caller.
"""

from .core_crypto.sha256 import (
    BLOCK_BYTES as SHA256_BLOCK_BYTES,
    HASH_BYTES,
    MAX_HASH_BYTES,
    BufferedSHA256,
    HashLimitError,
    RawSHA256,
    sha256,
    sha256_hex,
)
from .core_crypto.twofish import (
    BLOCK_BYTES as TWOFISH_BLOCK_BYTES,
    KEY_SIZES,
    KeySchedule,
    Twofish,
    expand_key,
)

__version__ = "1.0.0"

__all__ = [
    'BufferedSHA256',
    'HASH_BYTES',
    'HashLimitError',
    'KEY_SIZES',
    'KeySchedule',
    'MAX_HASH_BYTES',
    'RawSHA256',
    'SHA256_BLOCK_BYTES',
    'TWOFISH_BLOCK_BYTES',
    'Twofish',
    'expand_key',
    'sha256',
    'sha256_hex',
]
