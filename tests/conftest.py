"""
Shared fixtures. Trusted setup takes several seconds in pure Python, so a
single key pair is generated per session and reused read-only.
"""

import pytest

from zk_prover import Prover, SeededRandomness

MAX_CHOICE = 3
NONCE = bytes([42] * 32)
VOTER = bytes([1] * 20)


@pytest.fixture(scope="session")
def prover():
    return Prover.setup(MAX_CHOICE, rng=SeededRandomness(7))


@pytest.fixture(scope="session")
def valid_proof(prover):
    return prover.prove_vote(1, NONCE, VOTER, MAX_CHOICE,
                             rng=SeededRandomness(11))
