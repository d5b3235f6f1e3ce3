"""Combinatorial generation of sorted binary basis tables."""

import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import combinations, product
from typing import List, Sequence
import numpy as np

from qfock.core.basis import BinaryBasis, basistype

logger = logging.getLogger(__name__)


def _validate_orbitals(orbitals: Sequence[int]) -> List[int]:
    orbitals = [int(o) for o in orbitals]
    if len(set(orbitals)) != len(orbitals):
        raise ValueError(f"Orbitals must be distinct, got {orbitals}")
    if any(o < 1 for o in orbitals):
        raise ValueError(f"Orbital indices are 1-based, got {orbitals}")
    return orbitals


def _table_dtype(orbitals: Sequence[int], dtype):
    if dtype is not None:
        return basistype(dtype)
    return basistype(max(orbitals, default=0))


def unrestricted_table(orbitals: Sequence[int], dtype=None) -> np.ndarray:
    """All 2^n occupation patterns over the orbitals, sorted ascending."""
    orbitals = _validate_orbitals(orbitals)
    dtype = _table_dtype(orbitals, dtype)

    table = np.empty(2 ** len(orbitals), dtype=dtype)
    for i, poses in enumerate(product((False, True), repeat=len(orbitals))):
        basis = BinaryBasis.from_orbitals(orbitals, filter=lambda position: poses[position - 1])
        table[i] = basis.rep

    table.sort()
    logger.debug(f"Unrestricted table over {len(orbitals)} orbitals: {len(table)} bases")
    return table


def _combination_reps(head: List[int], tail: List[int], k: int) -> List[int]:
    """Reps of all k-subsets of `tail`, each joined with the orbitals in `head`."""
    base = BinaryBasis.from_orbitals(head)
    return [base.merge(BinaryBasis.from_orbitals(poses)).rep for poses in combinations(tail, k)]


def fixed_count_table(
    orbitals: Sequence[int],
    nparticle: int,
    dtype=None,
    n_workers: int = 1
) -> np.ndarray:
    """All C(n, k) configurations with exactly k occupied orbitals, sorted ascending.

    With n_workers > 1 the combinations are partitioned by their lowest-position
    orbital and generated on a thread pool; the merged table is re-sorted.
    """
    orbitals = _validate_orbitals(orbitals)
    dtype = _table_dtype(orbitals, dtype)
    nparticle = int(nparticle)
    if nparticle < 0:
        raise ValueError(f"Particle number must be non-negative, got {nparticle}")

    n = len(orbitals)
    if n_workers > 1 and 0 < nparticle <= n:
        # Every combination has a unique first position among the orbitals
        jobs = [([orbitals[i]], orbitals[i + 1:], nparticle - 1) for i in range(n - nparticle + 1)]
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            parts = list(executor.map(lambda job: _combination_reps(*job), jobs))
        reps = [rep for part in parts for rep in part]
    else:
        reps = _combination_reps([], orbitals, nparticle)

    table = np.array(reps, dtype=dtype)
    table.sort()
    logger.debug(f"Fixed-count table over {n} orbitals with {nparticle} particles: {len(table)} bases")
    return table
