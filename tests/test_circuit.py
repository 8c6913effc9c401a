import pytest

from zk_prover.circuit import (RANGE_BITS, AssignedCircuit, StructuralCircuit,
                               VoteWitness, compute_commitment,
                               generate_constraints, new_with_witness,
                               new_without_witness, synthesize)
from zk_prover.errors import ConstraintSystemError, SynthesisError
from zk_prover.field import FIELD_MODULUS, FieldElement
from zk_prover.r1cs import (ONE, ConstraintSystem, LinearCombination,
                            SynthesisMode, Variable)

NONCE = bytes([42] * 32)
VOTER = bytes([1] * 20)

# Two 64-bit decompositions (bits + recomposition) and the commitment row
EXPECTED_CONSTRAINTS = 2 * (RANGE_BITS + 1) + 1


class TestVoteCircuit:

    def test_valid_vote_is_satisfied(self):
        cs = synthesize(new_with_witness(1, NONCE, VOTER, 3))
        assert cs.is_satisfied()
        assert cs.public_inputs() == [
            compute_commitment(1, NONCE, VOTER).value, 3]

    @pytest.mark.parametrize("choice", [0, 2])
    def test_range_boundaries_accepted(self, choice):
        cs = synthesize(new_with_witness(choice, NONCE, VOTER, 3))
        assert cs.is_satisfied()

    @pytest.mark.parametrize("choice", [3, 5, 2 ** 63])
    def test_out_of_range_choice_is_unsatisfied(self, choice):
        cs = synthesize(new_with_witness(choice, NONCE, VOTER, 3))
        assert not cs.is_satisfied()
        assert cs.which_is_unsatisfied() is not None

    def test_single_option_ballot(self):
        assert synthesize(new_with_witness(0, NONCE, VOTER, 1)).is_satisfied()
        assert not synthesize(new_with_witness(1, NONCE, VOTER, 1)).is_satisfied()

    def test_missing_witness_fails_synthesis(self):
        circuit = AssignedCircuit(
            witness=VoteWitness(choice=None, nonce=NONCE, voter=VOTER),
            max_choice=3)
        with pytest.raises(SynthesisError):
            synthesize(circuit)

    def test_shape_is_independent_of_assignment(self):
        structural = synthesize(new_without_witness(3))
        assigned = synthesize(new_with_witness(2, NONCE, VOTER, 3))
        other_bound = synthesize(new_with_witness(0, NONCE, VOTER, 10))

        assert structural.num_constraints == EXPECTED_CONSTRAINTS
        assert assigned.num_constraints == EXPECTED_CONSTRAINTS
        assert other_bound.num_constraints == EXPECTED_CONSTRAINTS
        assert structural.num_instance_variables == 3
        assert structural.num_witness_variables == assigned.num_witness_variables

    def test_setup_mode_has_no_assignment(self):
        cs = synthesize(new_without_witness(3))
        assert cs.is_in_setup_mode()
        with pytest.raises(ConstraintSystemError):
            cs.is_satisfied()
        with pytest.raises(ConstraintSystemError):
            cs.full_assignment()

    def test_unknown_variant_rejected(self):
        cs = ConstraintSystem(SynthesisMode.PROVE)
        with pytest.raises(TypeError):
            generate_constraints(object(), cs)

    def test_witness_repr_is_redacted(self):
        witness = VoteWitness(choice=2, nonce=NONCE, voter=VOTER)
        assert "42" not in repr(witness)
        assert "redacted" in repr(witness)

    def test_structural_circuit_value(self):
        assert new_without_witness(4) == StructuralCircuit(max_choice=4)


class TestCommitment:

    def test_deterministic(self):
        assert compute_commitment(1, NONCE, VOTER) == compute_commitment(1, NONCE, VOTER)

    def test_sensitive_to_every_input(self):
        base = compute_commitment(1, NONCE, VOTER)
        assert compute_commitment(2, NONCE, VOTER) != base
        assert compute_commitment(1, bytes(32), VOTER) != base
        assert compute_commitment(1, NONCE, bytes(20)) != base

    def test_additive_structure(self):
        # The placeholder commitment is linear in the choice
        delta = compute_commitment(2, NONCE, VOTER) - compute_commitment(1, NONCE, VOTER)
        assert delta == FieldElement(1)


class TestConstraintSystem:

    def test_linear_combination_arithmetic(self):
        x = Variable(is_instance=False, index=0)
        lc = LinearCombination.from_variable(x, 3) + 5 - LinearCombination.from_variable(x)
        assert lc.terms == {x: 2, ONE: 5}
        assert (lc * 2).terms == {x: 4, ONE: 10}
        assert (-lc).terms == {x: FIELD_MODULUS - 2, ONE: FIELD_MODULUS - 5}

    def test_multiplication_gate(self):
        cs = ConstraintSystem(SynthesisMode.PROVE)
        out = cs.new_input_variable(lambda: 12)
        a = cs.new_witness_variable(lambda: 3)
        b = cs.new_witness_variable(lambda: 4)
        cs.enforce_constraint(a, b, out)
        assert cs.is_satisfied()
        assert cs.full_assignment() == [1, 12, 3, 4]

        cs.enforce_constraint(a, a, out)
        assert cs.which_is_unsatisfied() == 1

    def test_matrices_put_instance_columns_first(self):
        cs = ConstraintSystem(SynthesisMode.PROVE)
        w = cs.new_witness_variable(lambda: 2)
        x = cs.new_input_variable(lambda: 2)
        cs.enforce_equal(w, x)

        matrices = cs.to_matrices()
        assert matrices.num_instance_variables == 2
        assert matrices.num_witness_variables == 1
        assert matrices.a == [[(2, 1)]]
        assert matrices.b == [[(0, 1)]]
        assert matrices.c == [[(1, 1)]]

    def test_missing_value_in_prove_mode(self):
        cs = ConstraintSystem(SynthesisMode.PROVE)
        with pytest.raises(SynthesisError):
            cs.new_witness_variable(lambda: None)
