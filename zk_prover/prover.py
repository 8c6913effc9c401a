"""
Vote proof workflow: setup, key loading, proving and verification.

Keys are explicit immutable values. Nothing here keeps process-wide state,
so a single ``Prover`` can be shared read-only between worker threads, each
call drawing its own randomness.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .circuit import (NONCE_SIZE, VOTER_SIZE, compute_commitment,
                      new_with_witness, new_without_witness, synthesize)
from .errors import (InvalidChoiceError, InvalidParametersError,
                     ProofGenerationError)
from .field import FieldElement
from .groth16 import (PreparedVerifyingKey, Proof, ProvingKey, VerifyingKey,
                      create_random_proof, generate_random_parameters,
                      prepare_verifying_key, verify_proof)
from .randomness import RandomnessProvider, SystemRandomness
from .types import PUBLIC_INPUT_COUNT, VoteProof

logger = logging.getLogger(__name__)

U64_MAX = (1 << 64) - 1


@dataclass(frozen=True, eq=False)
class KeyPair:
    proving_key: ProvingKey
    verifying_key: VerifyingKey


def _check_u64(name: str, value: int):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParametersError(f"{name} must be an integer")
    if not 0 <= value <= U64_MAX:
        raise InvalidParametersError(f"{name} must fit in an unsigned 64-bit integer")


def _check_bytes(name: str, value: bytes, size: int) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidParametersError(f"{name} must be bytes")
    if len(value) != size:
        raise InvalidParametersError(f"{name} must be {size} bytes, got {len(value)}")
    return bytes(value)


def setup(max_choice: int, rng: Optional[RandomnessProvider] = None) -> KeyPair:
    """
    Single-party Groth16 setup for the vote circuit.

    Whoever runs this sees the setup trapdoor and could forge proofs.
    Suitable for development only; production needs an MPC ceremony.
    """
    _check_u64("max_choice", max_choice)
    rng = rng or SystemRandomness()

    logger.warning("Running single-party trusted setup; the setup randomness "
                   "is not discarded by a ceremony and can forge proofs")
    start_time = time.time()
    proving_key = generate_random_parameters(new_without_witness(max_choice), rng)
    logger.info(f"Setup for max_choice={max_choice} completed in "
                f"{time.time() - start_time:.3f}s")
    return KeyPair(proving_key=proving_key, verifying_key=proving_key.vk)


def load_keys(pk_bytes: bytes, vk_bytes: bytes, validate: bool = True) -> KeyPair:
    """Deserialize a key pair; the verifying key must match the proving key"""
    proving_key = ProvingKey.from_bytes(pk_bytes, validate=validate)
    verifying_key = VerifyingKey.from_bytes(vk_bytes, validate=validate)
    if proving_key.vk.to_bytes() != verifying_key.to_bytes():
        raise InvalidParametersError("verifying key does not belong to the proving key")
    logger.info(f"Loaded keys ({len(pk_bytes)} byte proving key, "
                f"{len(vk_bytes)} byte verifying key)")
    return KeyPair(proving_key=proving_key, verifying_key=verifying_key)


def prove_vote(proving_key: ProvingKey, choice: int, nonce: bytes, voter: bytes,
               max_choice: int, rng: Optional[RandomnessProvider] = None) -> VoteProof:
    """Prove that ``choice < max_choice`` and that it opens the commitment"""
    _check_u64("choice", choice)
    _check_u64("max_choice", max_choice)
    nonce = _check_bytes("nonce", nonce, NONCE_SIZE)
    voter = _check_bytes("voter", voter, VOTER_SIZE)
    # Fresh provider per call unless the caller injects one
    rng = rng or SystemRandomness()

    circuit = new_with_witness(choice, nonce, voter, max_choice)
    cs = synthesize(circuit)
    if not cs.is_satisfied():
        if choice >= max_choice:
            raise InvalidChoiceError(choice, max_choice)
        raise ProofGenerationError(
            f"constraint {cs.which_is_unsatisfied()} is not satisfied")

    proof, public_inputs = create_random_proof(circuit, proving_key, rng)

    commitment = compute_commitment(choice, nonce, voter)
    max_choice_fe = FieldElement.from_int(max_choice)
    if public_inputs != [commitment.value, max_choice_fe.value]:
        raise ProofGenerationError("circuit public inputs disagree with the commitment")

    return VoteProof(
        proof=proof.to_bytes(),
        public_inputs=[commitment.to_hex(), max_choice_fe.to_hex()],
    )


def verify_vote(pvk: PreparedVerifyingKey, vote_proof: VoteProof) -> bool:
    """
    Check a vote proof.

    Malformed bytes or hex raise ``SerializationError`` and a wrong input
    count raises ``InvalidParametersError``; only a well-formed proof that
    fails the pairing check returns False.
    """
    start_time = time.time()
    proof = Proof.from_bytes(vote_proof.proof)

    public_inputs = vote_proof.public_inputs
    if not isinstance(public_inputs, (list, tuple)):
        raise InvalidParametersError(
            f"public_inputs must be a list, got {type(public_inputs).__name__}")
    if len(public_inputs) != PUBLIC_INPUT_COUNT:
        raise InvalidParametersError(
            "Expected 2 public inputs (commitment, max_choice)")
    inputs = [FieldElement.from_hex(x).value for x in public_inputs]

    result = verify_proof(pvk, proof, inputs)
    logger.info(f"Vote proof {'valid' if result else 'INVALID'} "
                f"({time.time() - start_time:.3f}s)")
    return result


class Prover:
    """Holds one key pair and proves/verifies votes against it"""

    def __init__(self, key_pair: KeyPair):
        self.key_pair = key_pair
        self.prepared_verifying_key = prepare_verifying_key(key_pair.verifying_key)

    @classmethod
    def setup(cls, max_choice: int,
              rng: Optional[RandomnessProvider] = None) -> "Prover":
        return cls(setup(max_choice, rng))

    @classmethod
    def from_keys(cls, pk_bytes: bytes, vk_bytes: bytes,
                  validate: bool = True) -> "Prover":
        return cls(load_keys(pk_bytes, vk_bytes, validate))

    @property
    def verifying_key(self) -> VerifyingKey:
        return self.key_pair.verifying_key

    def prove_vote(self, choice: int, nonce: bytes, voter: bytes, max_choice: int,
                   rng: Optional[RandomnessProvider] = None) -> VoteProof:
        return prove_vote(self.key_pair.proving_key, choice, nonce, voter,
                          max_choice, rng)

    def verify_vote(self, proof: VoteProof) -> bool:
        return verify_vote(self.prepared_verifying_key, proof)

    def export_proving_key(self) -> bytes:
        return self.key_pair.proving_key.to_bytes()

    def export_verifying_key(self) -> bytes:
        return self.key_pair.verifying_key.to_bytes()
