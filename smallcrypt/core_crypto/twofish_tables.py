"""
Twofish Constant Tables

Fixed data from the Twofish specification (Schneier et al., 1998):
- q0/q1: 8-bit permutations, each defined by four 4-bit t-boxes
- MDS: 4x4 maximum-distance-separable matrix over GF(2^8) mod 0x169
- RS: 4x8 Reed-Solomon matrix over GF(2^8) mod 0x14D

The 256-entry tables used by the key schedule are expanded from these
definitions once, when the module is imported, and stored as tuples.
"""

from typing import Sequence, Tuple


# Field polynomials
MDS_POLY = 0x169  # x^8 + x^6 + x^5 + x^3 + 1
RS_POLY = 0x14D   # x^8 + x^6 + x^3 + x^2 + 1

# t-boxes for q0 and q1 (section 4.3.5 of the Twofish paper)
Q0_T = (
    (0x8, 0x1, 0x7, 0xD, 0x6, 0xF, 0x3, 0x2, 0x0, 0xB, 0x5, 0x9, 0xE, 0xC, 0xA, 0x4),
    (0xE, 0xC, 0xB, 0x8, 0x1, 0x2, 0x3, 0x5, 0xF, 0x4, 0xA, 0x6, 0x7, 0x0, 0x9, 0xD),
    (0xB, 0xA, 0x5, 0xE, 0x6, 0xD, 0x9, 0x0, 0xC, 0x8, 0xF, 0x3, 0x2, 0x4, 0x7, 0x1),
    (0xD, 0x7, 0xF, 0x4, 0x1, 0x2, 0x6, 0xE, 0x9, 0xB, 0x3, 0x0, 0x8, 0x5, 0xC, 0xA),
)

Q1_T = (
    (0x2, 0x8, 0xB, 0xD, 0xF, 0x7, 0x6, 0xE, 0x3, 0x1, 0x9, 0x4, 0x0, 0xA, 0xC, 0x5),
    (0x1, 0xE, 0x2, 0xB, 0x4, 0xC, 0x3, 0x7, 0x6, 0xD, 0xA, 0x5, 0xF, 0x9, 0x0, 0x8),
    (0x4, 0xC, 0x7, 0x5, 0x1, 0x6, 0x9, 0xA, 0x0, 0xE, 0xD, 0x8, 0x2, 0xB, 0x3, 0xF),
    (0xB, 0x9, 0x5, 0x1, 0xC, 0x3, 0xD, 0xE, 0x6, 0x4, 0x7, 0xF, 0x2, 0x0, 0x8, 0xA),
)

MDS = (
    (0x01, 0xEF, 0x5B, 0x5B),
    (0x5B, 0xEF, 0xEF, 0x01),
    (0xEF, 0x5B, 0x01, 0xEF),
    (0xEF, 0x01, 0xEF, 0x5B),
)

RS = (
    (0x01, 0xA4, 0x55, 0x87, 0x5A, 0x58, 0xDB, 0x9E),
    (0xA4, 0x56, 0x82, 0xF3, 0x1E, 0xC6, 0x68, 0xE5),
    (0x02, 0xA1, 0xFC, 0xC1, 0x47, 0xAE, 0x3D, 0x19),
    (0xA4, 0x55, 0x87, 0x5A, 0x58, 0xDB, 0x9E, 0x03),
)


def _ror4(x: int, n: int) -> int:
    """Rotate a 4-bit value right by n bits."""
    return ((x >> n) | (x << (4 - n))) & 0xF


def _build_q(t: Sequence[Sequence[int]]) -> Tuple[int, ...]:
    """
    Expand a q-permutation from its t-boxes.

    Each input byte is split into nibbles a, b and mixed through two
    rounds of t-box lookups; the output is 16 * b + a.
    """
    table = []
    for x in range(256):
        a, b = x >> 4, x & 0xF
        a, b = a ^ b, a ^ _ror4(b, 1) ^ ((8 * a) & 0xF)
        a, b = t[0][a], t[1][b]
        a, b = a ^ b, a ^ _ror4(b, 1) ^ ((8 * a) & 0xF)
        a, b = t[2][a], t[3][b]
        table.append((b << 4) | a)
    return tuple(table)


def gf_mult(a: int, b: int, poly: int) -> int:
    """
    Multiply two elements of GF(2^8) modulo the given polynomial.

    Shift-and-add; only used to build tables at import time.
    """
    product = 0
    while b:
        if b & 1:
            product ^= a
        a <<= 1
        if a & 0x100:
            a ^= poly
        b >>= 1
    return product


def _build_rs_exp_log() -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """
    Antilog and log tables for GF(2^8) mod RS_POLY, generator x.

    The antilog table is doubled to 510 entries so that the sum of two logs
    can index it without a modulo.
    """
    exp = [0] * 510
    log = [0] * 256
    x = 1
    for i in range(255):
        exp[i] = exp[i + 255] = x
        log[x] = i
        x <<= 1
        if x & 0x100:
            x ^= RS_POLY
    return tuple(exp), tuple(log)


def _build_mds_columns() -> Tuple[Tuple[int, ...], ...]:
    """
    MDS_COLUMNS[j][y] is column j of the MDS matrix times y, packed as a
    little-endian 32-bit word (row r in byte r).
    """
    columns = []
    for j in range(4):
        column = []
        for y in range(256):
            word = 0
            for r in range(4):
                word |= gf_mult(MDS[r][j], y, MDS_POLY) << (8 * r)
            column.append(word)
        columns.append(tuple(column))
    return tuple(columns)


Q0 = _build_q(Q0_T)
Q1 = _build_q(Q1_T)

RS_EXP, RS_LOG = _build_rs_exp_log()

# RS matrix entries in log form (all are non-zero)
RS_LOG_MATRIX = tuple(tuple(RS_LOG[v] for v in row) for row in RS)

MDS_COLUMNS = _build_mds_columns()
