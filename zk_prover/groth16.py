"""
Groth16 zk-SNARK over BN254.

Setup
-----
Draws the trapdoor (tau, alpha, beta, gamma, delta), reduces the R1CS to a
QAP over a radix-2 domain and publishes the evaluations in G1/G2. Whoever
runs setup learns the trapdoor and can forge proofs: this is a single-party
development setup, not a ceremony.

Verification equation
---------------------
    e(A, B) == e(alpha, beta) * e(vk_x, gamma) * e(C, delta)

with ``vk_x = IC_0 + sum(x_i * IC_i)`` over the public inputs.
"""

import logging
import time
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .circuit import AssignedCircuit, CircuitSpec, generate_constraints
from .curve import (FQ12, G1Point, G2Point, Z1, Z2, add, g1_mul, g2_mul,
                    multi_scalar_mul, neg, on_curve_g1, on_curve_g2, pair,
                    scalar_mul)
from .errors import (InvalidParametersError, ProofGenerationError,
                     SerializationError, VerificationError)
from .field import (FIELD_MODULUS, EvaluationDomain, divide_by_vanishing,
                    fr_inv, poly_mul)
from .r1cs import ConstraintSystem, R1CSMatrices, SynthesisMode
from .randomness import RandomnessProvider
from .serialization import (G1_COMPRESSED_SIZE, G2_COMPRESSED_SIZE, ByteReader,
                            g1_read, g1_to_bytes, g1_from_bytes, g2_read,
                            g2_to_bytes, g2_from_bytes, read_vec, write_vec)

logger = logging.getLogger(__name__)


# ============================================================================
# KEYS AND PROOFS
# ============================================================================


@dataclass(frozen=True, eq=False)
class VerifyingKey:
    alpha_g1: G1Point
    beta_g2: G2Point
    gamma_g2: G2Point
    delta_g2: G2Point
    gamma_abc_g1: Tuple[G1Point, ...]  # [IC0, IC1, ..., ICn]

    @property
    def num_public_inputs(self) -> int:
        return len(self.gamma_abc_g1) - 1

    def to_bytes(self) -> bytes:
        return b"".join([
            g1_to_bytes(self.alpha_g1),
            g2_to_bytes(self.beta_g2),
            g2_to_bytes(self.gamma_g2),
            g2_to_bytes(self.delta_g2),
            write_vec(list(self.gamma_abc_g1), g1_to_bytes),
        ])

    @classmethod
    def read(cls, reader: ByteReader, validate: bool = True) -> "VerifyingKey":
        alpha_g1 = g1_read(reader)
        beta_g2 = g2_read(reader, validate)
        gamma_g2 = g2_read(reader, validate)
        delta_g2 = g2_read(reader, validate)
        gamma_abc_g1 = read_vec(reader, G1_COMPRESSED_SIZE, g1_from_bytes)
        if not gamma_abc_g1:
            raise SerializationError("Verifying key has no input commitments")
        return cls(alpha_g1, beta_g2, gamma_g2, delta_g2, tuple(gamma_abc_g1))

    @classmethod
    def from_bytes(cls, data: bytes, validate: bool = True) -> "VerifyingKey":
        reader = ByteReader(data)
        vk = cls.read(reader, validate)
        reader.finish()
        return vk


@dataclass(frozen=True, eq=False)
class ProvingKey:
    vk: VerifyingKey
    beta_g1: G1Point
    delta_g1: G1Point
    a_query: Tuple[G1Point, ...]
    b_g1_query: Tuple[G1Point, ...]
    b_g2_query: Tuple[G2Point, ...]
    h_query: Tuple[G1Point, ...]
    l_query: Tuple[G1Point, ...]

    def to_bytes(self) -> bytes:
        return b"".join([
            self.vk.to_bytes(),
            g1_to_bytes(self.beta_g1),
            g1_to_bytes(self.delta_g1),
            write_vec(list(self.a_query), g1_to_bytes),
            write_vec(list(self.b_g1_query), g1_to_bytes),
            write_vec(list(self.b_g2_query), g2_to_bytes),
            write_vec(list(self.h_query), g1_to_bytes),
            write_vec(list(self.l_query), g1_to_bytes),
        ])

    @classmethod
    def from_bytes(cls, data: bytes, validate: bool = True) -> "ProvingKey":
        reader = ByteReader(data)
        vk = VerifyingKey.read(reader, validate)
        beta_g1 = g1_read(reader)
        delta_g1 = g1_read(reader)
        a_query = read_vec(reader, G1_COMPRESSED_SIZE, g1_from_bytes)
        b_g1_query = read_vec(reader, G1_COMPRESSED_SIZE, g1_from_bytes)
        b_g2_query = read_vec(reader, G2_COMPRESSED_SIZE,
                              lambda chunk: g2_from_bytes(chunk, validate))
        h_query = read_vec(reader, G1_COMPRESSED_SIZE, g1_from_bytes)
        l_query = read_vec(reader, G1_COMPRESSED_SIZE, g1_from_bytes)
        reader.finish()

        if not (len(a_query) == len(b_g1_query) == len(b_g2_query)):
            raise SerializationError("Proving key query lengths disagree")
        return cls(vk, beta_g1, delta_g1, tuple(a_query), tuple(b_g1_query),
                   tuple(b_g2_query), tuple(h_query), tuple(l_query))


@dataclass(frozen=True, eq=False)
class Proof:
    a: G1Point
    b: G2Point
    c: G1Point

    def to_bytes(self) -> bytes:
        return g1_to_bytes(self.a) + g2_to_bytes(self.b) + g1_to_bytes(self.c)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Proof":
        reader = ByteReader(data)
        a = g1_read(reader)
        b = g2_read(reader)
        c = g1_read(reader)
        reader.finish()
        return cls(a, b, c)


@dataclass(frozen=True, eq=False)
class PreparedVerifyingKey:
    """Verifying key with e(alpha, beta) precomputed"""
    vk: VerifyingKey
    alpha_g1_beta_g2: FQ12


# ============================================================================
# QAP REDUCTION
# ============================================================================


def _qap_domain(matrices: R1CSMatrices) -> EvaluationDomain:
    # One extra row per instance variable keeps the input polynomials
    # linearly independent.
    return EvaluationDomain(matrices.num_constraints + matrices.num_instance_variables)


def _evaluate_qap_at(matrices: R1CSMatrices, domain: EvaluationDomain,
                     tau: int) -> Tuple[List[int], List[int], List[int]]:
    lagrange = domain.evaluate_all_lagrange_coefficients(tau)
    n = matrices.num_variables
    u = [0] * n
    v = [0] * n
    w = [0] * n

    for i in range(matrices.num_constraints):
        li = lagrange[i]
        for col, coeff in matrices.a[i]:
            u[col] += li * coeff
        for col, coeff in matrices.b[i]:
            v[col] += li * coeff
        for col, coeff in matrices.c[i]:
            w[col] += li * coeff

    for k in range(matrices.num_instance_variables):
        u[k] += lagrange[matrices.num_constraints + k]

    return ([x % FIELD_MODULUS for x in u],
            [x % FIELD_MODULUS for x in v],
            [x % FIELD_MODULUS for x in w])


def _evaluate_rows(rows: List[List[Tuple[int, int]]], z: List[int]) -> List[int]:
    return [sum(coeff * z[col] for col, coeff in row) % FIELD_MODULUS for row in rows]


def _witness_map(matrices: R1CSMatrices, domain: EvaluationDomain,
                 z: List[int]) -> List[int]:
    """Coefficients of h(X) = (A(X) * B(X) - C(X)) / Z(X)"""
    num_inst = matrices.num_instance_variables
    a_evals = _evaluate_rows(matrices.a, z) + z[:num_inst]
    b_evals = _evaluate_rows(matrices.b, z)
    c_evals = _evaluate_rows(matrices.c, z)

    a_coeffs = domain.ifft(a_evals)
    b_coeffs = domain.ifft(b_evals)
    c_coeffs = domain.ifft(c_evals)

    numerator = poly_mul(a_coeffs, b_coeffs)
    for i, coeff in enumerate(c_coeffs):
        numerator[i] = (numerator[i] - coeff) % FIELD_MODULUS

    quotient, remainder = divide_by_vanishing(numerator, domain.size)
    if any(remainder):
        raise ProofGenerationError(
            "assignment does not satisfy the constraint system")
    return quotient + [0] * (domain.size - 1 - len(quotient))


# ============================================================================
# SETUP / PROVE / VERIFY
# ============================================================================


def generate_random_parameters(circuit: CircuitSpec,
                               rng: RandomnessProvider) -> ProvingKey:
    """Run the single-party trusted setup for the circuit's shape"""
    start_time = time.time()

    cs = ConstraintSystem(SynthesisMode.SETUP)
    generate_constraints(circuit, cs)
    matrices = cs.to_matrices()
    domain = _qap_domain(matrices)

    tau = rng.random_scalar()
    while domain.evaluate_vanishing_polynomial(tau) == 0:
        tau = rng.random_scalar()
    alpha = rng.random_scalar()
    beta = rng.random_scalar()
    gamma = rng.random_scalar()
    delta = rng.random_scalar()

    u, v, w = _evaluate_qap_at(matrices, domain, tau)
    gamma_inv = fr_inv(gamma)
    delta_inv = fr_inv(delta)
    num_inst = matrices.num_instance_variables

    combined = [(beta * u[i] + alpha * v[i] + w[i]) % FIELD_MODULUS
                for i in range(matrices.num_variables)]
    gamma_abc_g1 = tuple(g1_mul(x * gamma_inv) for x in combined[:num_inst])
    l_query = tuple(g1_mul(x * delta_inv) for x in combined[num_inst:])

    z_tau = domain.evaluate_vanishing_polynomial(tau)
    h_scalars = []
    power = z_tau * delta_inv % FIELD_MODULUS
    for _ in range(domain.size - 1):
        h_scalars.append(power)
        power = power * tau % FIELD_MODULUS
    h_query = tuple(g1_mul(x) for x in h_scalars)

    a_query = tuple(g1_mul(x) for x in u)
    b_g1_query = tuple(g1_mul(x) for x in v)
    b_g2_query = tuple(g2_mul(x) for x in v)

    vk = VerifyingKey(
        alpha_g1=g1_mul(alpha),
        beta_g2=g2_mul(beta),
        gamma_g2=g2_mul(gamma),
        delta_g2=g2_mul(delta),
        gamma_abc_g1=gamma_abc_g1,
    )
    pk = ProvingKey(
        vk=vk,
        beta_g1=g1_mul(beta),
        delta_g1=g1_mul(delta),
        a_query=a_query,
        b_g1_query=b_g1_query,
        b_g2_query=b_g2_query,
        h_query=h_query,
        l_query=l_query,
    )

    logger.info(
        f"Groth16 setup: {matrices.num_constraints} constraints, "
        f"domain {domain.size}, {time.time() - start_time:.3f}s")
    return pk


def _check_key_shape(pk: ProvingKey, matrices: R1CSMatrices,
                     domain: EvaluationDomain):
    expected = (
        len(pk.a_query) == matrices.num_variables
        and len(pk.b_g2_query) == matrices.num_variables
        and len(pk.l_query) == matrices.num_witness_variables
        and len(pk.h_query) == domain.size - 1
        and len(pk.vk.gamma_abc_g1) == matrices.num_instance_variables
    )
    if not expected:
        raise ProofGenerationError("proving key does not match the circuit shape")


def create_random_proof(circuit: AssignedCircuit, pk: ProvingKey,
                        rng: RandomnessProvider) -> Tuple[Proof, List[int]]:
    """
    Prove ``circuit`` against ``pk``.

    Returns the proof and the public inputs in allocation order.
    """
    start_time = time.time()

    cs = ConstraintSystem(SynthesisMode.PROVE)
    generate_constraints(circuit, cs)
    matrices = cs.to_matrices()
    domain = _qap_domain(matrices)
    _check_key_shape(pk, matrices, domain)

    z = cs.full_assignment()
    h = _witness_map(matrices, domain, z)

    r = rng.random_scalar()
    s = rng.random_scalar()
    vk = pk.vk

    a = add(vk.alpha_g1, multi_scalar_mul(pk.a_query, z, Z1))
    a = add(a, scalar_mul(pk.delta_g1, r))

    b = add(vk.beta_g2, multi_scalar_mul(pk.b_g2_query, z, Z2))
    b = add(b, scalar_mul(vk.delta_g2, s))

    b_g1 = add(pk.beta_g1, multi_scalar_mul(pk.b_g1_query, z, Z1))
    b_g1 = add(b_g1, scalar_mul(pk.delta_g1, s))

    c = multi_scalar_mul(pk.l_query, z[matrices.num_instance_variables:], Z1)
    c = add(c, multi_scalar_mul(pk.h_query, h, Z1))
    c = add(c, scalar_mul(a, s))
    c = add(c, scalar_mul(b_g1, r))
    c = add(c, neg(scalar_mul(pk.delta_g1, r * s)))

    logger.info(f"Groth16 proof created in {time.time() - start_time:.3f}s")
    return Proof(a, b, c), cs.public_inputs()


def prepare_verifying_key(vk: VerifyingKey) -> PreparedVerifyingKey:
    return PreparedVerifyingKey(vk=vk, alpha_g1_beta_g2=pair(vk.alpha_g1, vk.beta_g2))


def verify_proof(pvk: PreparedVerifyingKey, proof: Proof,
                 public_inputs: Sequence[int]) -> bool:
    vk = pvk.vk
    if len(public_inputs) != vk.num_public_inputs:
        raise InvalidParametersError(
            f"Expected {vk.num_public_inputs} public inputs, got {len(public_inputs)}")
    for x in public_inputs:
        if not 0 <= x < FIELD_MODULUS:
            raise InvalidParametersError("Public input is not a canonical field element")

    # Proofs decoded from bytes are always on the curve; hand-built ones may not be
    if not (on_curve_g1(proof.a) and on_curve_g2(proof.b) and on_curve_g1(proof.c)):
        raise VerificationError("proof point is not on the curve")

    vk_x = add(vk.gamma_abc_g1[0],
               multi_scalar_mul(vk.gamma_abc_g1[1:], list(public_inputs), Z1))
    lhs = pair(proof.a, proof.b)
    rhs = pvk.alpha_g1_beta_g2 * pair(vk_x, vk.gamma_g2) * pair(proof.c, vk.delta_g2)
    return lhs == rhs
