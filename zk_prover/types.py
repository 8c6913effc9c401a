"""Wire types exchanged with the voting application"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .circuit import NONCE_SIZE, VOTER_SIZE, compute_commitment
from .errors import (InvalidCommitmentError, InvalidMerkleProofError,
                     InvalidParametersError, SerializationError)
from .field import FieldElement
from .randomness import RandomnessProvider, SystemRandomness

PUBLIC_INPUT_COUNT = 2


def parse_voter_address(address: str) -> bytes:
    """Decode a 0x-prefixed 20-byte voter address"""
    text = address[2:] if address.lower().startswith("0x") else address
    try:
        raw = bytes.fromhex(text)
    except ValueError as e:
        raise InvalidParametersError(f"voter address is not hex: {e}")
    if len(raw) != VOTER_SIZE:
        raise InvalidParametersError(
            f"voter address must be {VOTER_SIZE} bytes, got {len(raw)}")
    return raw


def parse_nonce(nonce_hex: str) -> bytes:
    text = nonce_hex[2:] if nonce_hex.lower().startswith("0x") else nonce_hex
    try:
        raw = bytes.fromhex(text)
    except ValueError as e:
        raise InvalidParametersError(f"nonce is not hex: {e}")
    if len(raw) != NONCE_SIZE:
        raise InvalidParametersError(
            f"nonce must be {NONCE_SIZE} bytes, got {len(raw)}")
    return raw


@dataclass
class VoteProof:
    """Groth16 proof plus hex-encoded public inputs (commitment, max_choice)"""
    proof: bytes
    public_inputs: List[str] = field(default_factory=list)

    @property
    def commitment(self) -> FieldElement:
        self._require_inputs()
        return FieldElement.from_hex(self.public_inputs[0])

    @property
    def max_choice(self) -> FieldElement:
        self._require_inputs()
        return FieldElement.from_hex(self.public_inputs[1])

    def _require_inputs(self):
        if (not isinstance(self.public_inputs, (list, tuple))
                or len(self.public_inputs) != PUBLIC_INPUT_COUNT):
            raise InvalidParametersError(
                "Expected 2 public inputs (commitment, max_choice)")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'proof': self.proof.hex(),
            'public_inputs': list(self.public_inputs),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoteProof":
        try:
            proof = bytes.fromhex(data['proof'])
            public_inputs = [str(x) for x in data['public_inputs']]
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Malformed vote proof: {e}")
        return cls(proof=proof, public_inputs=public_inputs)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, text: str) -> "VoteProof":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Malformed vote proof JSON: {e}")
        if not isinstance(data, dict):
            raise SerializationError("Vote proof JSON must be an object")
        return cls.from_dict(data)


@dataclass
class VoteCommitment:
    """Commitment together with its opening, kept by the voter until reveal"""
    commitment: str
    choice: int
    nonce: bytes
    voter: str

    @classmethod
    def create(cls, choice: int, voter: str, nonce: Optional[bytes] = None,
               rng: Optional[RandomnessProvider] = None) -> "VoteCommitment":
        """Commit to ``choice``, drawing a fresh nonce from ``rng`` if none is given"""
        voter_bytes = parse_voter_address(voter)
        if nonce is None:
            nonce = (rng or SystemRandomness()).random_bytes(NONCE_SIZE)
        elif len(nonce) != NONCE_SIZE:
            raise InvalidParametersError(
                f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        commitment = compute_commitment(choice, nonce, voter_bytes)
        return cls(commitment=commitment.to_hex(), choice=choice,
                   nonce=nonce, voter=voter)

    def verify_opening(self) -> bool:
        """Recompute the commitment from the revealed values"""
        expected = compute_commitment(
            self.choice, self.nonce, parse_voter_address(self.voter))
        return expected == FieldElement.from_hex(self.commitment)

    def check_opening(self):
        if not self.verify_opening():
            raise InvalidCommitmentError()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'commitment': self.commitment,
            'choice': self.choice,
            'nonce': self.nonce.hex(),
            'voter': self.voter,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoteCommitment":
        try:
            return cls(commitment=data['commitment'], choice=int(data['choice']),
                       nonce=parse_nonce(data['nonce']), voter=data['voter'])
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Malformed vote commitment: {e}")


# Eligibility types are placeholders: no circuit enforces them yet.


@dataclass
class EligibilityProof:
    proof: bytes
    public_inputs: List[str] = field(default_factory=list)  # [merkle_root]

    def to_dict(self) -> Dict[str, Any]:
        return {'proof': self.proof.hex(), 'public_inputs': list(self.public_inputs)}


@dataclass
class MerklePath:
    path: List[str] = field(default_factory=list)
    indices: List[bool] = field(default_factory=list)

    def validate(self):
        if len(self.path) != len(self.indices):
            raise InvalidMerkleProofError()

    def to_dict(self) -> Dict[str, Any]:
        return {'path': list(self.path), 'indices': list(self.indices)}
