"""Second-quantized operators as products of creation/annihilation actions."""

from enum import Enum
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple
import numpy as np

Ladder = Tuple[Hashable, bool]


class Statistics(Enum):
    """Exchange statistics of the particles an operator acts on."""
    FERMIONIC = "f"
    BOSONIC = "b"  # hardcore bosons, occupation 0/1


class FockTerm:
    """coeff * a_1 a_2 ... a_r where each a_i creates or annihilates one orbital.

    Attributes:
        coeff: Scalar coefficient
        ladders: Tuple of (orbital label, is_creation) in algebraic order,
            i.e. the rightmost action is applied first
        statistics: Fermionic (sign bookkeeping) or hardcore bosonic
    """

    __slots__ = ('coeff', 'ladders', 'statistics')

    def __init__(
        self,
        coeff: complex,
        ladders: Iterable[Ladder],
        statistics: Statistics = Statistics.FERMIONIC
    ):
        self.coeff = coeff
        self.ladders: Tuple[Ladder, ...] = tuple((label, bool(creation)) for label, creation in ladders)
        self.statistics = Statistics(statistics)

    @property
    def rank(self) -> int:
        return len(self.ladders)

    @property
    def labels(self) -> Tuple[Hashable, ...]:
        return tuple(label for label, _ in self.ladders)

    @property
    def iscreations(self) -> Tuple[bool, ...]:
        return tuple(creation for _, creation in self.ladders)

    @property
    def is_fermionic(self) -> bool:
        return self.statistics is Statistics.FERMIONIC

    def adjoint(self) -> 'FockTerm':
        """Hermitian conjugate: reversed order, creation <-> annihilation, conjugated coefficient."""
        ladders = [(label, not creation) for label, creation in reversed(self.ladders)]
        return FockTerm(np.conj(self.coeff), ladders, self.statistics)

    def __mul__(self, scalar: complex) -> 'FockTerm':
        if isinstance(scalar, FockTerm):
            if scalar.statistics is not self.statistics:
                raise ValueError("Cannot multiply terms with different statistics")
            return FockTerm(self.coeff * scalar.coeff, self.ladders + scalar.ladders, self.statistics)
        return FockTerm(self.coeff * scalar, self.ladders, self.statistics)

    def __rmul__(self, scalar: complex) -> 'FockTerm':
        return FockTerm(scalar * self.coeff, self.ladders, self.statistics)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FockTerm):
            return False
        return (self.coeff == other.coeff and
                self.ladders == other.ladders and
                self.statistics is other.statistics)

    def __hash__(self) -> int:
        return hash((self.coeff, self.ladders, self.statistics))

    def __repr__(self) -> str:
        body = " ".join(f"{label}{'†' if creation else ''}" for label, creation in self.ladders)
        return f"{self.coeff} * [{body}]"


class FockOperator:
    """Sum of FockTerms."""

    def __init__(self, terms: Iterable[FockTerm] = (), metadata: Optional[Dict[str, Any]] = None):
        self.terms: List[FockTerm] = list(terms)
        self.metadata = metadata or {}

    def num_terms(self) -> int:
        return len(self.terms)

    @property
    def dtype(self) -> np.dtype:
        """Natural scalar type of the coefficients."""
        if not self.terms:
            return np.dtype(float)
        return np.result_type(*[np.asarray(term.coeff) for term in self.terms])

    def adjoint(self) -> 'FockOperator':
        return FockOperator([term.adjoint() for term in self.terms], self.metadata.copy())

    def __iter__(self) -> Iterator[FockTerm]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __add__(self, other) -> 'FockOperator':
        if isinstance(other, FockTerm):
            return FockOperator(self.terms + [other], self.metadata.copy())
        if isinstance(other, FockOperator):
            return FockOperator(self.terms + other.terms, self.metadata.copy())
        return NotImplemented

    def __radd__(self, other) -> 'FockOperator':
        if isinstance(other, FockTerm):
            return FockOperator([other] + self.terms, self.metadata.copy())
        return NotImplemented

    def __repr__(self) -> str:
        return f"FockOperator({self.num_terms()} terms)"

    def __str__(self) -> str:
        return " + ".join(repr(term) for term in self.terms) or "0"


def creation(label: Hashable, coeff: complex = 1.0,
             statistics: Statistics = Statistics.FERMIONIC) -> FockTerm:
    return FockTerm(coeff, [(label, True)], statistics)


def annihilation(label: Hashable, coeff: complex = 1.0,
                 statistics: Statistics = Statistics.FERMIONIC) -> FockTerm:
    return FockTerm(coeff, [(label, False)], statistics)


def number(label: Hashable, coeff: complex = 1.0,
           statistics: Statistics = Statistics.FERMIONIC) -> FockTerm:
    """coeff * n_label = coeff * a†_label a_label."""
    return FockTerm(coeff, [(label, True), (label, False)], statistics)


def hopping(coeff: complex, i: Hashable, j: Hashable,
            statistics: Statistics = Statistics.FERMIONIC) -> FockTerm:
    """coeff * a†_i a_j."""
    return FockTerm(coeff, [(i, True), (j, False)], statistics)
