"""
Exception hierarchy for the vote prover.

Every failure is raised to the immediate caller as one of these types.
A well-formed proof that simply does not verify is reported as ``False``,
never as an exception.
"""


class ProverError(Exception):
    """Base exception for proof operations"""
    pass


class SynthesisError(ProverError):
    """Circuit synthesis failed (missing or malformed assignment)"""

    def __init__(self, message: str):
        super().__init__(f"Circuit synthesis error: {message}")


class ProofGenerationError(ProverError):
    """The proving algorithm could not produce a proof"""

    def __init__(self, message: str):
        super().__init__(f"Proof generation failed: {message}")


class VerificationError(ProverError):
    """The verification equation could not be evaluated"""

    def __init__(self, message: str = ""):
        text = "Proof verification failed"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class InvalidParametersError(ProverError):
    """Wrong count or shape of inputs"""

    def __init__(self, message: str):
        super().__init__(f"Invalid parameters: {message}")


class SerializationError(ProverError):
    """Malformed byte or hex encoding"""

    def __init__(self, message: str):
        super().__init__(f"Serialization error: {message}")


class InvalidChoiceError(ProverError):
    """Vote choice outside the declared range"""

    def __init__(self, choice: int, max_choice: int):
        self.choice = choice
        self.max_choice = max_choice
        super().__init__(f"Invalid choice: {choice} >= max {max_choice}")


class InvalidCommitmentError(ProverError):
    """Commitment does not open to the claimed values"""

    def __init__(self):
        super().__init__("Invalid commitment")


class InvalidMerkleProofError(ProverError):
    """Eligibility path is malformed"""

    def __init__(self):
        super().__init__("Invalid Merkle proof")


class ConstraintSystemError(ProverError):
    """Constraint system used outside its lifecycle"""

    def __init__(self, message: str):
        super().__init__(f"Constraint system error: {message}")
