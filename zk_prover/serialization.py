"""
Canonical compressed encoding for curve points, vectors and field elements.

Layout follows the arkworks ``CanonicalSerialize`` compressed form:
coordinates are little-endian, the two top bits of the last byte carry the
point flags and vectors carry a u64 little-endian length prefix.
"""

from typing import Callable, List, TypeVar

from .curve import (BASE_MODULUS, Z1, Z2, fq2_is_larger, fq2_sqrt, fq_is_larger,
                    fq_sqrt, g1_affine, g1_from_affine, g2_affine,
                    g2_curve_rhs, g2_from_affine, in_g2, is_inf)
from .errors import SerializationError

T = TypeVar("T")

G1_COMPRESSED_SIZE = 32
G2_COMPRESSED_SIZE = 64

Y_IS_NEGATIVE = 1 << 7
POINT_AT_INFINITY = 1 << 6
FLAG_MASK = Y_IS_NEGATIVE | POINT_AT_INFINITY

# Refuse absurd length prefixes before allocating
MAX_VECTOR_LENGTH = 1 << 24


class ByteReader:
    """Cursor over an immutable buffer that fails loudly on truncation"""

    def __init__(self, data: bytes):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise SerializationError(
                f"Expected bytes, got {type(data).__name__}")
        self._data = bytes(data)
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read(self, size: int) -> bytes:
        if size > self.remaining:
            raise SerializationError(
                f"Unexpected end of input: need {size} bytes, {self.remaining} left")
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def read_u64(self) -> int:
        return int.from_bytes(self.read(8), byteorder="little")

    def finish(self):
        if self.remaining:
            raise SerializationError(f"{self.remaining} trailing bytes")


def _split_flags(data: bytes):
    raw = bytearray(data)
    flags = raw[-1] & FLAG_MASK
    raw[-1] &= ~FLAG_MASK & 0xFF
    if flags == FLAG_MASK:
        raise SerializationError("Point flags are both set")
    return bytes(raw), flags


def _read_coordinate(data: bytes) -> int:
    value = int.from_bytes(data, byteorder="little")
    if value >= BASE_MODULUS:
        raise SerializationError("Coordinate is not less than the base modulus")
    return value


# ============================================================================
# G1 / G2
# ============================================================================


def g1_to_bytes(point) -> bytes:
    if is_inf(point):
        out = bytearray(G1_COMPRESSED_SIZE)
        out[-1] |= POINT_AT_INFINITY
        return bytes(out)

    x, y = g1_affine(point)
    out = bytearray(x.to_bytes(G1_COMPRESSED_SIZE, byteorder="little"))
    if fq_is_larger(y):
        out[-1] |= Y_IS_NEGATIVE
    return bytes(out)


def g1_from_bytes(data: bytes):
    if len(data) != G1_COMPRESSED_SIZE:
        raise SerializationError(
            f"G1 point must be {G1_COMPRESSED_SIZE} bytes, got {len(data)}")

    raw, flags = _split_flags(data)
    x = _read_coordinate(raw)

    if flags & POINT_AT_INFINITY:
        if x != 0:
            raise SerializationError("Non-canonical point at infinity")
        return Z1

    y = fq_sqrt(x * x * x + 3)
    if y is None:
        raise SerializationError("G1 point is not on the curve")
    if y == 0 and flags & Y_IS_NEGATIVE:
        raise SerializationError("Non-canonical G1 sign flag")
    if fq_is_larger(y) != bool(flags & Y_IS_NEGATIVE):
        y = BASE_MODULUS - y
    return g1_from_affine(x, y)


def g2_to_bytes(point) -> bytes:
    if is_inf(point):
        out = bytearray(G2_COMPRESSED_SIZE)
        out[-1] |= POINT_AT_INFINITY
        return bytes(out)

    (x0, x1), y = g2_affine(point)
    out = bytearray(x0.to_bytes(32, byteorder="little")
                    + x1.to_bytes(32, byteorder="little"))
    if fq2_is_larger(y):
        out[-1] |= Y_IS_NEGATIVE
    return bytes(out)


def g2_from_bytes(data: bytes, validate: bool = True):
    if len(data) != G2_COMPRESSED_SIZE:
        raise SerializationError(
            f"G2 point must be {G2_COMPRESSED_SIZE} bytes, got {len(data)}")

    raw, flags = _split_flags(data)
    x = (_read_coordinate(raw[:32]), _read_coordinate(raw[32:]))

    if flags & POINT_AT_INFINITY:
        if x != (0, 0):
            raise SerializationError("Non-canonical point at infinity")
        return Z2

    y = fq2_sqrt(*g2_curve_rhs(x))
    if y is None:
        raise SerializationError("G2 point is not on the curve")
    if y == (0, 0) and flags & Y_IS_NEGATIVE:
        raise SerializationError("Non-canonical G2 sign flag")
    if fq2_is_larger(y) != bool(flags & Y_IS_NEGATIVE):
        y = ((-y[0]) % BASE_MODULUS, (-y[1]) % BASE_MODULUS)

    point = g2_from_affine(x, y)
    if validate and not in_g2(point):
        raise SerializationError("G2 point is not in the prime-order subgroup")
    return point


# ============================================================================
# VECTORS
# ============================================================================


def write_vec(items: List[T], encode: Callable[[T], bytes]) -> bytes:
    out = [len(items).to_bytes(8, byteorder="little")]
    out.extend(encode(item) for item in items)
    return b"".join(out)


def read_vec(reader: ByteReader, size: int, decode: Callable[[bytes], T]) -> List[T]:
    length = reader.read_u64()
    if length > MAX_VECTOR_LENGTH or length * size > reader.remaining:
        raise SerializationError(
            f"Vector length {length} exceeds the remaining input")
    return [decode(reader.read(size)) for _ in range(length)]


def g1_read(reader: ByteReader):
    return g1_from_bytes(reader.read(G1_COMPRESSED_SIZE))


def g2_read(reader: ByteReader, validate: bool = True):
    return g2_from_bytes(reader.read(G2_COMPRESSED_SIZE), validate)


__all__ = [
    'ByteReader', 'G1_COMPRESSED_SIZE', 'G2_COMPRESSED_SIZE',
    'g1_to_bytes', 'g1_from_bytes', 'g2_to_bytes', 'g2_from_bytes',
    'g1_read', 'g2_read',
    'write_vec', 'read_vec',
]
