"""
Vote validity circuit.

Proves that a hidden choice lies in ``[0, max_choice)`` and opens the public
commitment, without revealing choice, nonce or voter.

Public inputs (allocation order):
    - commitment
    - max_choice

Private witnesses:
    - choice
    - nonce   (hashed to a field element)
    - voter   (hashed to a field element)

Constraints:
    1. choice < max_choice, compared as integers in [0, r)
    2. commitment == choice + H(nonce) + H(voter)

The commitment is an additive placeholder, not a collision-resistant
commitment scheme. It is kept bit-identical to the deployed prover so that
commitments stay interoperable; replacing it means changing this module and
``compute_commitment`` together.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .errors import SynthesisError
from .field import FieldElement, hash_to_field
from .r1cs import ConstraintSystem, LinearCombination, SynthesisMode

logger = logging.getLogger(__name__)

# Width of the range check. Fixes the circuit shape for every max_choice.
RANGE_BITS = 64

NONCE_SIZE = 32
VOTER_SIZE = 20


@dataclass(frozen=True)
class VoteWitness:
    """Private vote data; only lives for the duration of one proof"""
    choice: Optional[int]
    nonce: Optional[bytes]
    voter: Optional[bytes]

    def __repr__(self) -> str:
        return "VoteWitness(<redacted>)"


@dataclass(frozen=True)
class StructuralCircuit:
    """Circuit shape without witness values, used once for setup"""
    max_choice: int


@dataclass(frozen=True)
class AssignedCircuit:
    """Circuit with every witness and public value set, used per proof"""
    witness: VoteWitness
    max_choice: int


CircuitSpec = Union[StructuralCircuit, AssignedCircuit]


def new_without_witness(max_choice: int) -> StructuralCircuit:
    return StructuralCircuit(max_choice=max_choice)


def new_with_witness(choice: int, nonce: bytes, voter: bytes,
                     max_choice: int) -> AssignedCircuit:
    return AssignedCircuit(
        witness=VoteWitness(choice=choice, nonce=nonce, voter=voter),
        max_choice=max_choice,
    )


def compute_commitment(choice: int, nonce: bytes, voter: bytes) -> FieldElement:
    """Off-circuit commitment; must match the in-circuit sum exactly"""
    return FieldElement.from_int(choice) + hash_to_field(nonce) + hash_to_field(voter)


class _Values:
    """Lazy witness values; every accessor returns None when absent"""

    def __init__(self, witness: Optional[VoteWitness], max_choice: Optional[int]):
        self.witness = witness
        self._max_choice = max_choice

    def choice(self) -> Optional[int]:
        if self.witness is None or self.witness.choice is None:
            return None
        if self.witness.choice < 0:
            raise SynthesisError("choice must be a non-negative integer")
        return self.witness.choice

    def nonce(self) -> Optional[int]:
        if self.witness is None or self.witness.nonce is None:
            return None
        return hash_to_field(self.witness.nonce).value

    def voter(self) -> Optional[int]:
        if self.witness is None or self.witness.voter is None:
            return None
        return hash_to_field(self.witness.voter).value

    def commitment(self) -> Optional[int]:
        choice = self.choice()
        if choice is None or self.witness.nonce is None or self.witness.voter is None:
            return None
        return compute_commitment(choice, self.witness.nonce, self.witness.voter).value

    def max_choice(self) -> Optional[int]:
        return self._max_choice


def generate_constraints(circuit: CircuitSpec, cs: ConstraintSystem):
    """Allocate variables and enforce the vote constraints on ``cs``"""
    if isinstance(circuit, StructuralCircuit):
        values = _Values(None, circuit.max_choice)
    elif isinstance(circuit, AssignedCircuit):
        values = _Values(circuit.witness, circuit.max_choice)
    else:
        raise TypeError(f"Unknown circuit variant: {type(circuit).__name__}")

    # Private witnesses
    choice = cs.new_witness_variable(values.choice)
    nonce = cs.new_witness_variable(values.nonce)
    voter = cs.new_witness_variable(values.voter)

    # Public inputs
    commitment = cs.new_input_variable(values.commitment)
    max_choice = cs.new_input_variable(values.max_choice)

    # Constraint 1: choice < max_choice
    enforce_less_than(cs, choice, max_choice, RANGE_BITS)

    # Constraint 2: additive commitment recomputed in-circuit
    computed_commitment = choice + nonce + voter
    cs.enforce_equal(computed_commitment, commitment)


def enforce_bit_width(cs: ConstraintSystem, lc: LinearCombination, num_bits: int):
    """Constrain ``lc`` to a representative below 2^num_bits"""
    value = cs.value_of(lc)
    recomposed = LinearCombination.zero()
    for i in range(num_bits):
        bit = cs.new_witness_variable(lambda i=i: (value >> i) & 1)
        cs.enforce_boolean(bit)
        recomposed = recomposed + bit * (1 << i)
    cs.enforce_equal(recomposed, lc)


def enforce_less_than(cs: ConstraintSystem, lhs: LinearCombination,
                      rhs: LinearCombination, num_bits: int):
    """
    Enforce lhs < rhs over canonical representatives.

    lhs and (rhs - lhs - 1) are both bounded by 2^num_bits, so
    rhs = lhs + (rhs - lhs - 1) + 1 cannot wrap around the modulus.
    An out-of-range assignment leaves the decomposition unsatisfied.
    """
    enforce_bit_width(cs, lhs, num_bits)
    enforce_bit_width(cs, rhs - lhs - 1, num_bits)


def synthesize(circuit: CircuitSpec) -> ConstraintSystem:
    """Build a constraint system in the mode the circuit variant implies"""
    if isinstance(circuit, StructuralCircuit):
        cs = ConstraintSystem(SynthesisMode.SETUP)
    else:
        cs = ConstraintSystem(SynthesisMode.PROVE)
    generate_constraints(circuit, cs)
    logger.debug(f"Synthesized {cs.mode.value} circuit with "
                 f"{cs.num_constraints} constraints")
    return cs
