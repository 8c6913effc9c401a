"""
Zero-Knowledge Vote Prover
Groth16 proofs over BN254 that a hidden vote choice is in range and matches
a public commitment
"""

from .circuit import (
    AssignedCircuit,
    StructuralCircuit,
    VoteWitness,
    compute_commitment,
)
from .errors import (
    ConstraintSystemError,
    InvalidChoiceError,
    InvalidCommitmentError,
    InvalidMerkleProofError,
    InvalidParametersError,
    ProofGenerationError,
    ProverError,
    SerializationError,
    SynthesisError,
    VerificationError,
)
from .field import FieldElement
from .prover import KeyPair, Prover, load_keys, prove_vote, setup, verify_vote
from .randomness import RandomnessProvider, SeededRandomness, SystemRandomness
from .types import EligibilityProof, MerklePath, VoteCommitment, VoteProof

__version__ = "0.1.0"

__all__ = [
    # Workflow
    'Prover',
    'KeyPair',
    'setup',
    'load_keys',
    'prove_vote',
    'verify_vote',

    # Circuit and data
    'StructuralCircuit',
    'AssignedCircuit',
    'VoteWitness',
    'compute_commitment',
    'FieldElement',
    'VoteProof',
    'VoteCommitment',
    'EligibilityProof',
    'MerklePath',

    # Randomness
    'RandomnessProvider',
    'SystemRandomness',
    'SeededRandomness',

    # Exceptions
    'ProverError',
    'SynthesisError',
    'ProofGenerationError',
    'VerificationError',
    'InvalidParametersError',
    'SerializationError',
    'InvalidChoiceError',
    'InvalidCommitmentError',
    'InvalidMerkleProofError',
    'ConstraintSystemError',
]
