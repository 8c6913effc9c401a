"""
Rank-1 constraint system over the BN254 scalar field.

Each constraint reads ``<A, z> * <B, z> = <C, z>`` where ``z`` is the full
assignment: the constant one, then public inputs in allocation order, then
private witnesses.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import ConstraintSystemError, SynthesisError
from .field import FIELD_MODULUS

logger = logging.getLogger(__name__)

ValueFn = Callable[[], Optional[int]]


class SynthesisMode(Enum):
    """Lifecycle of a constraint system"""
    SETUP = "setup"
    PROVE = "prove"


@dataclass(frozen=True)
class Variable:
    is_instance: bool
    index: int


ONE = Variable(is_instance=True, index=0)


class LinearCombination:
    """Sparse map from variables to field coefficients"""

    __slots__ = ("terms",)

    def __init__(self, terms: Optional[Dict[Variable, int]] = None):
        self.terms: Dict[Variable, int] = {}
        if terms:
            for var, coeff in terms.items():
                coeff %= FIELD_MODULUS
                if coeff:
                    self.terms[var] = coeff

    @classmethod
    def from_variable(cls, var: Variable, coeff: int = 1) -> "LinearCombination":
        return cls({var: coeff})

    @classmethod
    def constant(cls, value: int) -> "LinearCombination":
        return cls({ONE: value})

    @classmethod
    def zero(cls) -> "LinearCombination":
        return cls()

    def __add__(self, other: Union["LinearCombination", int]) -> "LinearCombination":
        other = _as_lc(other)
        terms = dict(self.terms)
        for var, coeff in other.terms.items():
            terms[var] = terms.get(var, 0) + coeff
        return LinearCombination(terms)

    __radd__ = __add__

    def __sub__(self, other: Union["LinearCombination", int]) -> "LinearCombination":
        return self + (-_as_lc(other))

    def __rsub__(self, other: Union["LinearCombination", int]) -> "LinearCombination":
        return _as_lc(other) - self

    def __neg__(self) -> "LinearCombination":
        return self * -1

    def __mul__(self, scalar: int) -> "LinearCombination":
        if not isinstance(scalar, int):
            raise TypeError("Linear combinations only scale by field constants")
        return LinearCombination({v: c * scalar for v, c in self.terms.items()})

    __rmul__ = __mul__

    def __repr__(self) -> str:
        parts = [f"{c}*{'x' if v.is_instance else 'w'}{v.index}"
                 for v, c in self.terms.items()]
        return "LC(" + " + ".join(parts) + ")"


def _as_lc(value: Union[LinearCombination, int]) -> LinearCombination:
    if isinstance(value, LinearCombination):
        return value
    if isinstance(value, int):
        return LinearCombination.constant(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a linear combination")


@dataclass
class R1CSMatrices:
    """Column-indexed sparse rows; instance columns precede witness columns"""
    num_instance_variables: int
    num_witness_variables: int
    a: List[List[Tuple[int, int]]] = field(default_factory=list)
    b: List[List[Tuple[int, int]]] = field(default_factory=list)
    c: List[List[Tuple[int, int]]] = field(default_factory=list)

    @property
    def num_constraints(self) -> int:
        return len(self.a)

    @property
    def num_variables(self) -> int:
        return self.num_instance_variables + self.num_witness_variables


class ConstraintSystem:
    """Collects variables and constraints during circuit synthesis"""

    def __init__(self, mode: SynthesisMode = SynthesisMode.PROVE):
        self.mode = mode
        self.num_instance_variables = 1
        self.num_witness_variables = 0
        self.instance_assignment: List[int] = [1]
        self.witness_assignment: List[int] = []
        self.constraints: List[Tuple[LinearCombination, LinearCombination, LinearCombination]] = []

    def is_in_setup_mode(self) -> bool:
        return self.mode is SynthesisMode.SETUP

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def _resolve(self, value_fn: ValueFn) -> Optional[int]:
        if self.is_in_setup_mode():
            return None
        value = value_fn()
        if value is None:
            raise SynthesisError("AssignmentMissing")
        return value % FIELD_MODULUS

    def new_input_variable(self, value_fn: ValueFn) -> LinearCombination:
        value = self._resolve(value_fn)
        var = Variable(is_instance=True, index=self.num_instance_variables)
        self.num_instance_variables += 1
        if value is not None:
            self.instance_assignment.append(value)
        return LinearCombination.from_variable(var)

    def new_witness_variable(self, value_fn: ValueFn) -> LinearCombination:
        value = self._resolve(value_fn)
        var = Variable(is_instance=False, index=self.num_witness_variables)
        self.num_witness_variables += 1
        if value is not None:
            self.witness_assignment.append(value)
        return LinearCombination.from_variable(var)

    def enforce_constraint(self, a: LinearCombination, b: LinearCombination,
                           c: LinearCombination):
        self.constraints.append((_as_lc(a), _as_lc(b), _as_lc(c)))

    def enforce_equal(self, left: LinearCombination, right: LinearCombination):
        self.enforce_constraint(left, LinearCombination.constant(1), right)

    def enforce_boolean(self, bit: LinearCombination):
        self.enforce_constraint(bit, bit - 1, LinearCombination.zero())

    def value_of(self, lc: LinearCombination) -> Optional[int]:
        """Evaluate under the current assignment; None while in setup mode"""
        if self.is_in_setup_mode():
            return None
        total = 0
        for var, coeff in lc.terms.items():
            if var.is_instance:
                total += coeff * self.instance_assignment[var.index]
            else:
                total += coeff * self.witness_assignment[var.index]
        return total % FIELD_MODULUS

    def which_is_unsatisfied(self) -> Optional[int]:
        """Index of the first violated constraint, or None"""
        if self.is_in_setup_mode():
            raise ConstraintSystemError(
                "Satisfiability is undefined without an assignment")
        for i, (a, b, c) in enumerate(self.constraints):
            lhs = self.value_of(a) * self.value_of(b) % FIELD_MODULUS
            if lhs != self.value_of(c):
                return i
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None

    def full_assignment(self) -> List[int]:
        if self.is_in_setup_mode():
            raise ConstraintSystemError("No assignment recorded in setup mode")
        return self.instance_assignment + self.witness_assignment

    def public_inputs(self) -> List[int]:
        """Instance assignment without the leading constant"""
        return self.full_assignment()[1:self.num_instance_variables]

    def to_matrices(self) -> R1CSMatrices:
        offset = self.num_instance_variables

        def row(lc: LinearCombination) -> List[Tuple[int, int]]:
            cols = []
            for var, coeff in lc.terms.items():
                col = var.index if var.is_instance else offset + var.index
                cols.append((col, coeff))
            cols.sort()
            return cols

        matrices = R1CSMatrices(
            num_instance_variables=self.num_instance_variables,
            num_witness_variables=self.num_witness_variables,
        )
        for a, b, c in self.constraints:
            matrices.a.append(row(a))
            matrices.b.append(row(b))
            matrices.c.append(row(c))

        logger.debug(
            f"R1CS: {matrices.num_constraints} constraints, "
            f"{matrices.num_instance_variables} instance / "
            f"{matrices.num_witness_variables} witness variables")
        return matrices
