import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from config.config import SystemConfig, load_config
from utils.utils import (PerformanceMonitor, create_performance_report,
                         format_bytes, setup_logging)
from zk_prover import (FieldElement, InvalidChoiceError, Prover, ProverError,
                       SystemRandomness, VoteProof)
from zk_prover.circuit import NONCE_SIZE, VOTER_SIZE

logger = logging.getLogger(__name__)


class VoteProverDemo:
    """Runs setup, proving and verification end to end for one config"""

    def __init__(self, config: SystemConfig):
        self.config = config
        self.performance_monitor = PerformanceMonitor()
        self.prover: Optional[Prover] = None
        self.rng = SystemRandomness()

        logger.info("Initialized vote prover demo")

    def run_setup(self) -> Prover:
        max_choice = self.config.prover_config.max_choice
        with self.performance_monitor.start_operation("setup"):
            prover = Prover.setup(max_choice)

        pk_bytes = prover.export_proving_key()
        vk_bytes = prover.export_verifying_key()
        print(f"  Proving key:   {format_bytes(len(pk_bytes))}")
        print(f"  Verifying key: {format_bytes(len(vk_bytes))}")

        # Reload through the wire format, as a separate verifier would
        with self.performance_monitor.start_operation("load_keys"):
            self.prover = Prover.from_keys(
                pk_bytes, vk_bytes,
                validate=self.config.prover_config.validate_keys_on_load)
        return self.prover

    def prove(self, choice: int) -> VoteProof:
        max_choice = self.config.prover_config.max_choice
        nonce = self.rng.random_bytes(NONCE_SIZE)
        voter = self.rng.random_bytes(VOTER_SIZE)

        with self.performance_monitor.start_operation("prove_vote"):
            vote_proof = self.prover.prove_vote(choice, nonce, voter, max_choice)

        if self.config.prover_config.verify_after_prove:
            with self.performance_monitor.start_operation("verify_vote"):
                if not self.prover.verify_vote(vote_proof):
                    raise ProverError("freshly generated proof did not verify")
        return vote_proof

    def verify(self, vote_proof: VoteProof) -> bool:
        with self.performance_monitor.start_operation("verify_vote"):
            return self.prover.verify_vote(vote_proof)

    def run(self, choice: int) -> Dict[str, Any]:
        results = {}

        print("\nRunning trusted setup...")
        self.run_setup()

        print(f"\nProving vote for choice {choice}...")
        vote_proof = self.prove(choice)
        print(f"  Commitment: {vote_proof.public_inputs[0]}")
        results['proof_valid'] = self.verify(vote_proof)

        # Same proof, different claimed bound
        tampered = VoteProof(
            proof=vote_proof.proof,
            public_inputs=[vote_proof.public_inputs[0],
                           FieldElement.from_int(99).to_hex()])
        results['tampered_rejected'] = not self.verify(tampered)

        out_of_range = self.config.prover_config.max_choice
        try:
            self.prove(out_of_range)
            results['out_of_range_rejected'] = False
        except InvalidChoiceError as e:
            logger.info(f"Out-of-range vote refused: {e}")
            results['out_of_range_rejected'] = True

        return results


def run_demo(config: SystemConfig, choice: int) -> bool:
    print("=" * 60)
    print("ZK VOTE PROVER DEMO")
    print("=" * 60)
    print(f"Curve: {config.prover_config.curve}, "
          f"max_choice: {config.prover_config.max_choice}")

    demo = VoteProverDemo(config)
    try:
        results = demo.run(choice)
    except ProverError as e:
        logger.error(f"Demo failed: {e}")
        print(f"\n Demo failed: {e}")
        return False

    print("\nChecks:")
    for check, passed in results.items():
        status = " PASSED" if passed else " FAILED"
        print(f"  {check}: {status}")

    print()
    print(create_performance_report(demo.performance_monitor))
    return all(results.values())


def main():
    parser = argparse.ArgumentParser(
        description='Zero-knowledge vote validity prover')
    parser.add_argument('--config', type=str,
                        default='config.yaml', help='Config file path')
    parser.add_argument('--max-choice', type=int, default=None,
                        help='Number of valid choices (overrides config)')
    parser.add_argument('--choice', type=int, default=1,
                        help='Choice to prove')
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])

    args = parser.parse_args()

    config = load_config(Path(args.config))
    if args.max_choice is not None:
        config.prover_config.max_choice = args.max_choice
    if args.log_level is not None:
        config.log_level = args.log_level

    setup_logging(config.log_level, log_dir=config.log_dir)

    success = run_demo(config, args.choice)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
