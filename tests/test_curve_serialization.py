import pytest

from zk_prover.curve import (BASE_MODULUS, G1, Z1, Z2, fq2_is_larger,
                             fq2_sqrt, fq_sqrt, g1_affine, g1_mul, g2_affine,
                             g2_curve_rhs, g2_from_affine, g2_mul, in_g2,
                             is_inf, neg)
from zk_prover.errors import SerializationError
from zk_prover.serialization import (POINT_AT_INFINITY, Y_IS_NEGATIVE,
                                     ByteReader, g1_from_bytes, g1_to_bytes,
                                     g2_from_bytes, g2_to_bytes, read_vec,
                                     write_vec)


def _non_subgroup_g2_bytes():
    """Encoding of a twist point outside the prime-order subgroup"""
    k = 1
    while True:
        x = (k, 1)
        y = fq2_sqrt(*g2_curve_rhs(x))
        if y is not None and not in_g2(g2_from_affine(x, y)):
            out = bytearray(x[0].to_bytes(32, "little") + x[1].to_bytes(32, "little"))
            if fq2_is_larger(y):
                out[-1] |= Y_IS_NEGATIVE
            return bytes(out)
        k += 1


class TestG1Encoding:

    def test_generator_vector(self):
        # G1 = (1, 2); 2 is the smaller root, so no sign flag
        assert g1_to_bytes(G1) == b"\x01" + bytes(31)

    @pytest.mark.parametrize("scalar", [1, 2, 12345, 2 ** 200 + 17])
    def test_round_trip(self, scalar):
        point = g1_mul(scalar)
        data = g1_to_bytes(point)
        assert len(data) == 32
        assert g1_affine(g1_from_bytes(data)) == g1_affine(point)

    def test_negation_flips_sign_flag(self):
        point = g1_mul(99)
        a = g1_to_bytes(point)
        b = g1_to_bytes(neg(point))
        assert a[:31] == b[:31]
        assert (a[-1] ^ b[-1]) == Y_IS_NEGATIVE

    def test_infinity(self):
        data = g1_to_bytes(Z1)
        assert data == bytes(31) + bytes([POINT_AT_INFINITY])
        assert is_inf(g1_from_bytes(data))

    def test_rejects_both_flags(self):
        data = bytes(31) + bytes([POINT_AT_INFINITY | Y_IS_NEGATIVE])
        with pytest.raises(SerializationError):
            g1_from_bytes(data)

    def test_rejects_coordinate_above_modulus(self):
        with pytest.raises(SerializationError):
            g1_from_bytes(BASE_MODULUS.to_bytes(32, "little"))

    def test_rejects_point_off_curve(self):
        x = 1
        while fq_sqrt(x ** 3 + 3) is not None:
            x += 1
        with pytest.raises(SerializationError):
            g1_from_bytes(x.to_bytes(32, "little"))

    def test_rejects_wrong_length(self):
        with pytest.raises(SerializationError):
            g1_from_bytes(bytes(31))


class TestG2Encoding:

    @pytest.mark.parametrize("scalar", [1, 7, 2 ** 128 + 3])
    def test_round_trip(self, scalar):
        point = g2_mul(scalar)
        data = g2_to_bytes(point)
        assert len(data) == 64
        assert g2_affine(g2_from_bytes(data)) == g2_affine(point)

    def test_infinity(self):
        data = g2_to_bytes(Z2)
        assert data[-1] == POINT_AT_INFINITY
        assert is_inf(g2_from_bytes(data))

    def test_subgroup_check(self):
        data = _non_subgroup_g2_bytes()
        with pytest.raises(SerializationError):
            g2_from_bytes(data)
        # Trusted input may skip the check
        point = g2_from_bytes(data, validate=False)
        assert not in_g2(point)


class TestByteReader:

    def test_truncated_input(self):
        reader = ByteReader(b"\x01\x02")
        with pytest.raises(SerializationError):
            reader.read(3)

    def test_trailing_bytes(self):
        reader = ByteReader(b"\x01\x02")
        reader.read(1)
        with pytest.raises(SerializationError):
            reader.finish()

    def test_vector_round_trip(self):
        points = [g1_mul(k) for k in (1, 2, 3)]
        data = write_vec(points, g1_to_bytes)
        assert data[:8] == (3).to_bytes(8, "little")

        reader = ByteReader(data)
        decoded = read_vec(reader, 32, g1_from_bytes)
        reader.finish()
        assert [g1_affine(p) for p in decoded] == [g1_affine(p) for p in points]

    def test_oversized_length_prefix(self):
        data = (2 ** 40).to_bytes(8, "little") + bytes(32)
        with pytest.raises(SerializationError):
            read_vec(ByteReader(data), 32, g1_from_bytes)
