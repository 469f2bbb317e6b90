"""
Unit tests for the Twofish block cipher.

Tests:
- Known-answer vectors for 128, 192 and 256-bit keys
- Encrypt/decrypt round trips
- Key schedule determinism and immutability
- Sharing one context between threads
"""

import dataclasses
import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from smallcrypt.core_crypto.twofish import (
    BLOCK_BYTES, KEY_SIZES, KeySchedule, Twofish, expand_key,
)


# (key, plaintext, ciphertext)
PAPER_VECTORS = [
    # Twofish paper, appendix A.1
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

ECB_TABLE_VECTORS = [
    # ecb_tbl.txt, I=1 for 192 and 256-bit keys
    ("000000000000000000000000000000000000000000000000",
     "00000000000000000000000000000000",
     "efa71f788965bd4453f860178fc19101"),
    ("0000000000000000000000000000000000000000000000000000000000000000",
     "00000000000000000000000000000000",
     "57ff739d4dc92c1bd7fc01700cc8216f"),
    # Later entries of the same tables
    ("9f589f5cf6122c32b6bfec2f2ae8c35a",
     "d491db16e7b1c39e86cb086b789f5419",
     "019f9809de1711858faac3a3ba20fbc3"),
    ("88b2b2706b105e36b446bb6d731a1e88efa71f788965bd44",
     "39da69d6ba4997d585b6dc073ca341b2",
     "182b02d81497ea45f9daacdc29193a65"),
    ("d43bb7556ea32e46f2a282b7d45b4e0d57ff739d4dc92c1bd7fc01700cc8216f",
     "90afe91bb288544f2c32dc239b2635e6",
     "6cb4561c40bf0a9705931cb6d408e7fa"),
]


class TestKnownAnswers:
    """Official Twofish test vectors."""

    @pytest.mark.parametrize("key_hex,plain_hex,cipher_hex", PAPER_VECTORS + ECB_TABLE_VECTORS)
    def test_encrypt(self, key_hex, plain_hex, cipher_hex):
        cipher = Twofish(bytes.fromhex(key_hex))
        assert cipher.encrypt(bytes.fromhex(plain_hex)).hex() == cipher_hex

    @pytest.mark.parametrize("key_hex,plain_hex,cipher_hex", PAPER_VECTORS + ECB_TABLE_VECTORS)
    def test_decrypt(self, key_hex, plain_hex, cipher_hex):
        cipher = Twofish(bytes.fromhex(key_hex))
        assert cipher.decrypt(bytes.fromhex(cipher_hex)).hex() == plain_hex

    def test_128_bit_chain(self):
        """ecb_tbl.txt chaining: next key = plaintext, next plaintext = ciphertext."""
        key = bytes(16)
        plaintext = bytes(16)
        results = []
        for _ in range(3):
            ciphertext = Twofish.new128(key).encrypt(plaintext)
            results.append(ciphertext.hex())
            key, plaintext = plaintext, ciphertext
        assert results == [
            "9f589f5cf6122c32b6bfec2f2ae8c35a",
            "d491db16e7b1c39e86cb086b789f5419",
            "019f9809de1711858faac3a3ba20fbc3",
        ]

    def test_sized_constructors_match_generic(self):
        key = bytes(range(32))
        assert Twofish.new128(key[:16]).schedule == Twofish(key[:16]).schedule
        assert Twofish.new192(key[:24]).schedule == Twofish(key[:24]).schedule
        assert Twofish.new256(key).schedule == Twofish(key).schedule


class TestRoundTrip:
    """decrypt(encrypt(p)) == p for every key size."""

    @pytest.mark.parametrize("key_size", KEY_SIZES)
    def test_random_blocks(self, key_size):
        rng = random.Random(key_size)
        for _ in range(10):
            key = bytes(rng.getrandbits(8) for _ in range(key_size))
            cipher = Twofish(key)
            for _ in range(5):
                block = bytes(rng.getrandbits(8) for _ in range(BLOCK_BYTES))
                ciphertext = cipher.encrypt(block)
                assert len(ciphertext) == BLOCK_BYTES
                assert ciphertext != block
                assert cipher.decrypt(ciphertext) == block

    def test_fresh_context_decrypts(self):
        """A second context built from the same key decrypts."""
        key = b"sixteen byte key"
        block = b"sixteen byte msg"
        assert Twofish(key).decrypt(Twofish(key).encrypt(block)) == block

    def test_accepts_bytearray_and_memoryview(self):
        key = bytes(range(24))
        block = bytes(range(16))
        expected = Twofish(key).encrypt(block)
        assert Twofish(bytearray(key)).encrypt(memoryview(block)) == expected


class TestKeySchedule:
    """Determinism and shape of the derived context."""

    @pytest.mark.parametrize("key_size", KEY_SIZES)
    def test_shape(self, key_size):
        schedule = expand_key(bytes(key_size))
        assert schedule.key_bits == key_size * 8
        assert len(schedule.sboxes) == 4
        assert all(len(table) == 256 for table in schedule.sboxes)
        assert len(schedule.whitening) == 8
        assert len(schedule.round_keys) == 32
        words = schedule.whitening + schedule.round_keys
        assert all(0 <= word <= 0xFFFFFFFF for word in words)

    def test_deterministic(self):
        """Key expansion should be deterministic."""
        key = bytes(range(32))
        assert expand_key(key) == expand_key(key)

    def test_different_keys_different_schedule(self):
        """Different keys should produce different schedules."""
        key1 = bytes(16)
        key2 = bytes([1] + [0] * 15)
        assert expand_key(key1) != expand_key(key2)

    def test_schedule_is_frozen(self):
        schedule = expand_key(bytes(16))
        with pytest.raises(dataclasses.FrozenInstanceError):
            schedule.whitening = ()
        assert isinstance(schedule.sboxes, tuple)
        assert all(isinstance(table, tuple) for table in schedule.sboxes)

    def test_context_has_no_key_attribute(self):
        cipher = Twofish(b"0123456789abcdef")
        with pytest.raises(AttributeError):
            cipher.key = b"0123456789abcdef"
        assert isinstance(cipher.schedule, KeySchedule)


class TestConcurrency:
    """A context is read-only and may be shared."""

    def test_shared_context_across_threads(self):
        cipher = Twofish(bytes(range(32)))
        blocks = [bytes([i]) * BLOCK_BYTES for i in range(64)]
        expected = [cipher.encrypt(block) for block in blocks]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(cipher.encrypt, blocks))
        assert results == expected
        with ThreadPoolExecutor(max_workers=8) as pool:
            assert list(pool.map(cipher.decrypt, results)) == blocks
