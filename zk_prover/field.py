"""
BN254 scalar field arithmetic.

Field elements are plain Python ints in ``[0, FIELD_MODULUS)`` inside the
proof system; ``FieldElement`` wraps them at the API boundary and owns the
canonical 32-byte little-endian encoding.
"""

import hashlib
import re
from dataclasses import dataclass
from typing import List, Union

from .errors import SerializationError

# BN254 scalar field prime (order of G1/G2)
FIELD_MODULUS = 21888242871839275222246405745257275088548364400416034343698204186575808495617

FIELD_BYTES = 32
TWO_ADICITY = 28
MULTIPLICATIVE_GENERATOR = 5

# Canonical hex form: exactly what to_hex emits
_CANONICAL_HEX = re.compile(r"[0-9a-f]{64}")


def fr(value: int) -> int:
    return value % FIELD_MODULUS


def fr_inv(value: int) -> int:
    if value % FIELD_MODULUS == 0:
        raise ZeroDivisionError("Zero has no inverse in Fr")
    return pow(value, FIELD_MODULUS - 2, FIELD_MODULUS)


def fr_to_bytes(value: int) -> bytes:
    return (value % FIELD_MODULUS).to_bytes(FIELD_BYTES, byteorder="little")


def fr_from_bytes(data: bytes) -> int:
    """Decode canonical bytes, rejecting truncated or out-of-range input"""
    if len(data) != FIELD_BYTES:
        raise SerializationError(
            f"Field element must be {FIELD_BYTES} bytes, got {len(data)}")
    value = int.from_bytes(data, byteorder="little")
    if value >= FIELD_MODULUS:
        raise SerializationError("Field element is not less than the modulus")
    return value


@dataclass(frozen=True)
class FieldElement:
    """Immutable element of the BN254 scalar field"""
    value: int

    def __post_init__(self):
        object.__setattr__(self, "value", self.value % FIELD_MODULUS)

    @classmethod
    def from_int(cls, value: int) -> "FieldElement":
        if value < 0:
            raise ValueError("Integer embedding expects a non-negative value")
        return cls(value)

    @classmethod
    def from_bytes(cls, data: bytes) -> "FieldElement":
        return cls(fr_from_bytes(data))

    @classmethod
    def from_hex(cls, text: str) -> "FieldElement":
        """Decode 64 lowercase hex digits; any other spelling is rejected"""
        if not isinstance(text, str) or not _CANONICAL_HEX.fullmatch(text):
            raise SerializationError(
                "Field element hex must be 64 lowercase hex digits")
        return cls.from_bytes(bytes.fromhex(text))

    def to_bytes(self) -> bytes:
        return fr_to_bytes(self.value)

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    def __add__(self, other: Union["FieldElement", int]) -> "FieldElement":
        return FieldElement(self.value + _as_int(other))

    __radd__ = __add__

    def __sub__(self, other: Union["FieldElement", int]) -> "FieldElement":
        return FieldElement(self.value - _as_int(other))

    def __mul__(self, other: Union["FieldElement", int]) -> "FieldElement":
        return FieldElement(self.value * _as_int(other))

    __rmul__ = __mul__

    def __neg__(self) -> "FieldElement":
        return FieldElement(-self.value)

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"FieldElement(0x{self.to_hex()})"


def _as_int(other: Union[FieldElement, int]) -> int:
    if isinstance(other, FieldElement):
        return other.value
    if isinstance(other, int):
        return other
    raise TypeError(f"Unsupported operand type: {type(other).__name__}")


def hash_to_field(data: bytes) -> FieldElement:
    """
    Map arbitrary bytes to Fr via SHA-256.

    The first 31 digest bytes are placed after a zero low byte and read
    little-endian, then reduced mod r. Must stay bit-identical between the
    witness path and the commitment recomputation.
    """
    digest = hashlib.sha256(data).digest()
    buf = b"\x00" + digest[:31]
    return FieldElement(int.from_bytes(buf, byteorder="little"))


# ============================================================================
# RADIX-2 EVALUATION DOMAIN
# ============================================================================


class EvaluationDomain:
    """Multiplicative subgroup of size 2^k used for the QAP"""

    def __init__(self, min_size: int):
        if min_size < 1:
            raise ValueError("Domain size must be positive")
        size = 1
        log_size = 0
        while size < min_size:
            size <<= 1
            log_size += 1
        if log_size > TWO_ADICITY:
            raise ValueError(f"Domain of size {size} exceeds field two-adicity")

        self.size = size
        self.log_size = log_size
        self.group_gen = pow(MULTIPLICATIVE_GENERATOR,
                             (FIELD_MODULUS - 1) // size, FIELD_MODULUS)
        self.group_gen_inv = fr_inv(self.group_gen)
        self.size_inv = fr_inv(size)

    def elements(self) -> List[int]:
        out = []
        acc = 1
        for _ in range(self.size):
            out.append(acc)
            acc = acc * self.group_gen % FIELD_MODULUS
        return out

    def evaluate_vanishing_polynomial(self, tau: int) -> int:
        """Z(tau) = tau^n - 1"""
        return (pow(tau, self.size, FIELD_MODULUS) - 1) % FIELD_MODULUS

    def evaluate_all_lagrange_coefficients(self, tau: int) -> List[int]:
        """L_i(tau) = Z(tau) * w^i / (n * (tau - w^i)) for every domain point"""
        z = self.evaluate_vanishing_polynomial(tau)
        if z == 0:
            raise ValueError("Evaluation point lies inside the domain")
        scale = z * self.size_inv % FIELD_MODULUS
        coeffs = []
        for w in self.elements():
            coeffs.append(scale * w % FIELD_MODULUS * fr_inv(tau - w) % FIELD_MODULUS)
        return coeffs

    def fft(self, coeffs: List[int]) -> List[int]:
        return _ntt(_pad(coeffs, self.size), self.group_gen)

    def ifft(self, evals: List[int]) -> List[int]:
        out = _ntt(_pad(evals, self.size), self.group_gen_inv)
        return [v * self.size_inv % FIELD_MODULUS for v in out]


def _pad(values: List[int], size: int) -> List[int]:
    if len(values) > size:
        raise ValueError(f"{len(values)} values do not fit a domain of {size}")
    return list(values) + [0] * (size - len(values))


def _ntt(values: List[int], root: int) -> List[int]:
    """Iterative Cooley-Tukey transform over Fr"""
    n = len(values)
    a = list(values)

    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            a[i], a[j] = a[j], a[i]

    length = 2
    while length <= n:
        w_len = pow(root, n // length, FIELD_MODULUS)
        half = length // 2
        for start in range(0, n, length):
            w = 1
            for k in range(start, start + half):
                u = a[k]
                v = a[k + half] * w % FIELD_MODULUS
                a[k] = (u + v) % FIELD_MODULUS
                a[k + half] = (u - v) % FIELD_MODULUS
                w = w * w_len % FIELD_MODULUS
        length <<= 1
    return a


def poly_mul(a: List[int], b: List[int]) -> List[int]:
    """Multiply coefficient vectors with a size-2n transform"""
    if not a or not b:
        return []
    domain = EvaluationDomain(len(a) + len(b) - 1)
    fa = domain.fft(a)
    fb = domain.fft(b)
    product = domain.ifft([x * y % FIELD_MODULUS for x, y in zip(fa, fb)])
    return product[:len(a) + len(b) - 1]


def divide_by_vanishing(coeffs: List[int], n: int):
    """
    Divide p(X) by X^n - 1.

    Returns (quotient, remainder) where the remainder has n coefficients.
    """
    rem = list(coeffs) + [0] * max(0, n - len(coeffs))
    quotient = [0] * max(0, len(rem) - n)
    for i in range(len(rem) - 1, n - 1, -1):
        c = rem[i]
        if c:
            quotient[i - n] = c
            rem[i - n] = (rem[i - n] + c) % FIELD_MODULUS
            rem[i] = 0
    return quotient, rem[:n]
