import hashlib

import pytest

from zk_prover.errors import SerializationError
from zk_prover.field import (FIELD_MODULUS, EvaluationDomain, FieldElement,
                             divide_by_vanishing, fr_from_bytes, fr_to_bytes,
                             hash_to_field, poly_mul)


class TestFieldEncoding:

    def test_little_endian_encoding(self):
        assert fr_to_bytes(1) == b"\x01" + bytes(31)
        assert fr_to_bytes(256) == b"\x00\x01" + bytes(30)
        assert fr_from_bytes(fr_to_bytes(123456789)) == 123456789

    def test_rejects_non_canonical_value(self):
        data = FIELD_MODULUS.to_bytes(32, "little")
        with pytest.raises(SerializationError):
            fr_from_bytes(data)

    def test_rejects_wrong_length(self):
        with pytest.raises(SerializationError):
            fr_from_bytes(bytes(31))
        with pytest.raises(SerializationError):
            fr_from_bytes(bytes(33))

    def test_hex_round_trip(self):
        fe = FieldElement.from_int(3)
        assert fe.to_hex() == "03" + "00" * 31
        assert FieldElement.from_hex(fe.to_hex()) == fe

    def test_from_hex_rejects_garbage(self):
        with pytest.raises(SerializationError):
            FieldElement.from_hex("zz")
        with pytest.raises(SerializationError):
            FieldElement.from_hex("00" * 31)

    @pytest.mark.parametrize("rewrite", [
        str.upper,
        lambda h: " ".join(h[i:i + 2] for i in range(0, len(h), 2)),
        lambda h: "0x" + h,
        lambda h: " " + h,
        lambda h: h + "\n",
    ])
    def test_from_hex_requires_canonical_spelling(self, rewrite):
        fe = FieldElement.from_int(0xabcdef)
        assert FieldElement.from_hex(fe.to_hex()) == fe
        with pytest.raises(SerializationError):
            FieldElement.from_hex(rewrite(fe.to_hex()))

    def test_from_hex_rejects_non_string(self):
        with pytest.raises(SerializationError):
            FieldElement.from_hex(bytes(32))
        with pytest.raises(SerializationError):
            FieldElement.from_hex(None)


class TestFieldElement:

    def test_arithmetic_wraps_modulus(self):
        a = FieldElement.from_int(FIELD_MODULUS - 1)
        assert a + 1 == FieldElement(0)
        assert (FieldElement(0) - 1).value == FIELD_MODULUS - 1
        assert -FieldElement(1) == a
        assert FieldElement(3) * 4 == FieldElement(12)
        assert int(FieldElement(FIELD_MODULUS + 5)) == 5

    def test_negative_integers_are_rejected(self):
        with pytest.raises(ValueError):
            FieldElement.from_int(-1)

    def test_hash_to_field_layout(self):
        data = b"vote nonce"
        digest = hashlib.sha256(data).digest()
        expected = int.from_bytes(b"\x00" + digest[:31], "little") % FIELD_MODULUS
        assert hash_to_field(data).value == expected

    def test_hash_to_field_is_deterministic(self):
        assert hash_to_field(b"a") == hash_to_field(b"a")
        assert hash_to_field(b"a") != hash_to_field(b"b")


class TestEvaluationDomain:

    def test_size_rounds_up_to_power_of_two(self):
        domain = EvaluationDomain(134)
        assert domain.size == 256
        assert domain.log_size == 8
        assert pow(domain.group_gen, 256, FIELD_MODULUS) == 1
        assert pow(domain.group_gen, 128, FIELD_MODULUS) != 1

    def test_fft_evaluates_polynomial(self):
        domain = EvaluationDomain(4)
        coeffs = [1, 2, 3]
        evals = domain.fft(coeffs)
        for w, value in zip(domain.elements(), evals):
            assert value == (1 + 2 * w + 3 * w * w) % FIELD_MODULUS

    def test_ifft_inverts_fft(self):
        domain = EvaluationDomain(8)
        coeffs = [5, 0, 7, FIELD_MODULUS - 1, 9]
        assert domain.ifft(domain.fft(coeffs)) == coeffs + [0, 0, 0]

    def test_lagrange_coefficients_sum_to_one(self):
        domain = EvaluationDomain(16)
        coeffs = domain.evaluate_all_lagrange_coefficients(123456789)
        assert sum(coeffs) % FIELD_MODULUS == 1

    def test_lagrange_rejects_domain_point(self):
        domain = EvaluationDomain(4)
        with pytest.raises(ValueError):
            domain.evaluate_all_lagrange_coefficients(domain.group_gen)

    def test_poly_mul(self):
        # (1 + x)(1 - x) = 1 - x^2
        assert poly_mul([1, 1], [1, FIELD_MODULUS - 1]) == [1, 0, FIELD_MODULUS - 1]

    def test_divide_by_vanishing(self):
        vanishing = [FIELD_MODULUS - 1, 0, 0, 0, 1]  # X^4 - 1
        numerator = poly_mul([1, 2, 3], vanishing)

        quotient, remainder = divide_by_vanishing(numerator, 4)
        assert quotient == [1, 2, 3]
        assert remainder == [0, 0, 0, 0]

        numerator[0] = (numerator[0] + 5) % FIELD_MODULUS
        _, remainder = divide_by_vanishing(numerator, 4)
        assert remainder == [5, 0, 0, 0]
