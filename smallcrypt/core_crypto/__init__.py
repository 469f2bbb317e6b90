# Core Cryptography Module
"""
Core cryptographic implementations including:
- SHA-256 hashing (raw, buffered and one-shot)
- Twofish block cipher (128/192/256-bit keys)
- Twofish constant tables
"""
