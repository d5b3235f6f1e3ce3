"""Conversion between FockOperator and OpenFermion FermionOperator."""

from typing import Callable, Dict, Hashable, Mapping, Optional
import openfermion as of

from qfock.core.operator import FockOperator, FockTerm, Statistics


def mode_table(n_modes: int) -> Dict[int, int]:
    """Orbital index table for integer mode labels: mode p -> orbital p + 1.

    With this table fermionic signs follow the Jordan-Wigner ordering used by
    OpenFermion.
    """
    return {mode: mode + 1 for mode in range(n_modes)}


def from_openfermion(
    fermion_operator: of.FermionOperator,
    label: Optional[Callable[[int], Hashable]] = None,
    statistics: Statistics = Statistics.FERMIONIC
) -> FockOperator:
    """Convert an OpenFermion FermionOperator.

    Args:
        fermion_operator: Terms like {((0, 1), (2, 0)): coeff} for coeff * a†_0 a_2
        label: Maps a mode integer to the label used in the FockOperator,
            identity by default
        statistics: Statistics assigned to every term
    """
    label = label or (lambda mode: mode)
    terms = []
    for of_term, coeff in fermion_operator.terms.items():
        ladders = [(label(mode), action == 1) for mode, action in of_term]
        terms.append(FockTerm(coeff, ladders, statistics))
    return FockOperator(terms)


def to_openfermion(
    op: FockOperator,
    table: Optional[Mapping[Hashable, int]] = None
) -> of.FermionOperator:
    """Convert to an OpenFermion FermionOperator.

    Labels are turned into modes through `table` (mode = orbital - 1) or must
    already be integer modes.
    """
    result = of.FermionOperator()
    for term in op:
        if not term.is_fermionic:
            raise ValueError(f"Only fermionic terms can be converted, got {term}")
        if table is None:
            of_term = tuple((int(label), int(creation)) for label, creation in term.ladders)
        else:
            of_term = tuple((table[label] - 1, int(creation)) for label, creation in term.ladders)
        result += of.FermionOperator(of_term, term.coeff)
    return result
