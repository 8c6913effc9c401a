"""
BN254 group operations backed by py_ecc.

Points are py_ecc optimized (homogeneous projective) tuples. This module
adds the pieces py_ecc leaves out: multi-scalar multiplication, coordinate
extraction and square roots for point decompression.
"""

from typing import Any, Optional, Sequence, Tuple

from py_ecc.optimized_bn128 import (FQ, FQ2, FQ12, G1, G2, Z1, Z2, add, b, b2,
                                    field_modulus, is_inf, is_on_curve,
                                    multiply, neg, normalize, pairing)

from .field import FIELD_MODULUS

# Types the backend understands (opaque tuples)
G1Point = Any
G2Point = Any

BASE_MODULUS = int(field_modulus)
HALF_BASE_MODULUS = (BASE_MODULUS - 1) // 2


def _int(c) -> int:
    return c if isinstance(c, int) else int(c.n)


def fq2_coeffs(value) -> Tuple[int, int]:
    c0, c1 = value.coeffs
    return _int(c0), _int(c1)


def g1_affine(point: G1Point) -> Tuple[int, int]:
    x, y = normalize(point)
    return _int(x), _int(y)


def g2_affine(point: G2Point) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    x, y = normalize(point)
    return fq2_coeffs(x), fq2_coeffs(y)


def g1_from_affine(x: int, y: int) -> G1Point:
    return (FQ(x), FQ(y), FQ(1))


def g2_from_affine(x: Tuple[int, int], y: Tuple[int, int]) -> G2Point:
    return (FQ2([x[0], x[1]]), FQ2([y[0], y[1]]), FQ2([1, 0]))


def g1_mul(scalar: int) -> G1Point:
    return scalar_mul(G1, scalar)


def g2_mul(scalar: int) -> G2Point:
    return scalar_mul(G2, scalar)


def scalar_mul(point, scalar: int):
    scalar %= FIELD_MODULUS
    if scalar == 0 or is_inf(point):
        return Z1 if isinstance(point[2], FQ) else Z2
    return multiply(point, scalar)


def multi_scalar_mul(points: Sequence, scalars: Sequence[int], zero):
    """Naive MSM; zero scalars and points at infinity are skipped"""
    if len(points) != len(scalars):
        raise ValueError(
            f"MSM length mismatch: {len(points)} points, {len(scalars)} scalars")
    acc = zero
    for point, scalar in zip(points, scalars):
        scalar %= FIELD_MODULUS
        if scalar == 0 or is_inf(point):
            continue
        acc = add(acc, multiply(point, scalar))
    return acc


def on_curve_g1(point: G1Point) -> bool:
    return is_on_curve(point, b)


def on_curve_g2(point: G2Point) -> bool:
    return is_on_curve(point, b2)


def in_g2(point: G2Point) -> bool:
    if not on_curve_g2(point):
        return False
    return is_inf(multiply(point, FIELD_MODULUS))


def pair(g1_point: G1Point, g2_point: G2Point) -> FQ12:
    return pairing(g2_point, g1_point)


def fq_sqrt(a: int) -> Optional[int]:
    """Square root in Fq (q = 3 mod 4)"""
    a %= BASE_MODULUS
    root = pow(a, (BASE_MODULUS + 1) // 4, BASE_MODULUS)
    if root * root % BASE_MODULUS != a:
        return None
    return root


def fq2_sqrt(a0: int, a1: int) -> Optional[Tuple[int, int]]:
    """Square root in Fq2 = Fq[u]/(u^2 + 1) via the norm map"""
    q = BASE_MODULUS
    a0 %= q
    a1 %= q

    if a1 == 0:
        root = fq_sqrt(a0)
        if root is not None:
            return root, 0
        # -1 is a non-residue, so a0 < 0 has root (s * u)
        root = fq_sqrt(-a0 % q)
        if root is not None:
            return 0, root
        return None

    norm_root = fq_sqrt(a0 * a0 + a1 * a1)
    if norm_root is None:
        return None

    half = (q + 1) // 2
    x0 = fq_sqrt((a0 + norm_root) * half)
    if x0 is None:
        x0 = fq_sqrt((a0 - norm_root) * half)
        if x0 is None:
            return None
    if x0 == 0:
        return None
    x1 = a1 * half % q * pow(x0, q - 2, q) % q

    if (x0 * x0 - x1 * x1) % q != a0 or 2 * x0 * x1 % q != a1:
        return None
    return x0, x1


def g2_curve_rhs(x: Tuple[int, int]) -> Tuple[int, int]:
    """x^3 + b' on the twist"""
    fx = FQ2([x[0], x[1]])
    return fq2_coeffs(fx ** 3 + b2)


def fq_is_larger(y: int) -> bool:
    """True if y is the lexicographically larger of {y, -y}"""
    return y > HALF_BASE_MODULUS


def fq2_is_larger(y: Tuple[int, int]) -> bool:
    # Fq2 orders by c1 first, then c0
    if y[1] != 0:
        return y[1] > HALF_BASE_MODULUS
    return y[0] > HALF_BASE_MODULUS


__all__ = [
    'G1', 'G2', 'Z1', 'Z2', 'FQ12', 'add', 'neg', 'is_inf',
    'G1Point', 'G2Point', 'BASE_MODULUS',
    'g1_affine', 'g2_affine', 'g1_from_affine', 'g2_from_affine',
    'g1_mul', 'g2_mul', 'scalar_mul', 'multi_scalar_mul',
    'on_curve_g1', 'on_curve_g2', 'in_g2', 'pair',
    'fq_sqrt', 'fq2_sqrt', 'g2_curve_rhs', 'fq_is_larger', 'fq2_is_larger',
]
