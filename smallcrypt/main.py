"""
smallcrypt - Main Entry Point

Command line front end for the SHA-256 and Twofish primitives:
- selftest: run the published known-answer vectors
- hash: SHA-256 of a string or a file
- encrypt / decrypt: one Twofish block (ECB, no padding)
"""

import argparse
import logging
import sys
from typing import List, Optional

from .core_crypto.sha256 import BufferedSHA256, sha256_hex
from .core_crypto.twofish import Twofish


logger = logging.getLogger(__name__)

# Read size for hashing files
FILE_CHUNK_BYTES = 65536

# FIPS 180-2 examples
SHA256_VECTORS = [
    (b"", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
    (b"abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
    (b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq",
     "248d6a61d20638b8e5c026930c3e6039a33ce45964ff2167f6ecedd419db06c1"),
    (b"The quick brown fox jumps over the lazy dog",
     "d7a8fbb307d7809469ca9abcb0082e4f8d5651e46d3cdb762d02d0bf37c9e592"),
]

# Twofish paper, appendix A.1: (key, plaintext, ciphertext)
TWOFISH_VECTORS = [
    ("00000000000000000000000000000000",
     "00000000000000000000000000000000",
     "9f589f5cf6122c32b6bfec2f2ae8c35a"),
    ("0123456789abcdeffedcba98765432100011223344556677",
     "00000000000000000000000000000000",
     "cfd1d2e5a9be9cdf501f13b892bd2248"),
    ("0123456789abcdeffedcba987654321000112233445566778899aabbccddeeff",
     "00000000000000000000000000000000",
     "37527be0052334b89f0cfccae87cfa20"),
]


def run_selftest() -> bool:
    """
    Check every known-answer vector and print one line per check.

    Returns:
        True if all checks passed
    """
    print("smallcrypt self test")
    print("=" * 60)

    all_passed = True
    for data, expected in SHA256_VECTORS:
        passed = sha256_hex(data) == expected
        all_passed = all_passed and passed
        label = data[:24].decode() + ('...' if len(data) > 24 else '')
        print(f"  [{'PASS' if passed else 'FAIL'}] SHA-256({label!r})")

    for key_hex, plain_hex, cipher_hex in TWOFISH_VECTORS:
        cipher = Twofish(bytes.fromhex(key_hex))
        plaintext = bytes.fromhex(plain_hex)
        ciphertext = cipher.encrypt(plaintext)
        passed = (ciphertext.hex() == cipher_hex
                  and cipher.decrypt(ciphertext) == plaintext)
        all_passed = all_passed and passed
        print(f"  [{'PASS' if passed else 'FAIL'}] Twofish-{cipher.key_bits} encrypt/decrypt")

    print("=" * 60)
    print(f"Overall: {'All tests passed!' if all_passed else 'Some tests failed!'}")
    return all_passed


def hash_file(path: str) -> str:
    """SHA-256 hex digest of a file, read in chunks."""
    hasher = BufferedSHA256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(FILE_CHUNK_BYTES), b''):
            hasher.update(chunk)
    return hasher.finish().hex()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='smallcrypt',
        description='SHA-256 and Twofish block cipher primitives',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging',
    )
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('selftest', help='Run the known-answer tests')

    hash_parser = commands.add_parser('hash', help='Print the SHA-256 digest')
    hash_parser.add_argument('text', nargs='?', help='UTF-8 text to hash')
    hash_parser.add_argument('--file', help='Hash the contents of this file')

    for name in ('encrypt', 'decrypt'):
        block_parser = commands.add_parser(name, help=f'{name.capitalize()} one 16-byte block')
        block_parser.add_argument('key', help='16, 24 or 32-byte key as hex')
        block_parser.add_argument('block', help='16-byte block as hex')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for smallcrypt."""
    args = build_parser().parse_args(argv)

    logging.basicConfig()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == 'selftest':
        return 0 if run_selftest() else 1

    try:
        if args.command == 'hash':
            if args.file is not None:
                print(hash_file(args.file))
            else:
                print(sha256_hex((args.text or '').encode('utf-8')))
            return 0

        cipher = Twofish(bytes.fromhex(args.key))
        block = bytes.fromhex(args.block)
        if args.command == 'encrypt':
            print(cipher.encrypt(block).hex())
        else:
            print(cipher.decrypt(block).hex())
        return 0
    except (ValueError, OSError) as e:
        logger.error('%s: %s', type(e).__name__, e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
