"""CSC sparse matrix representation of Fock operators between two sectors."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Hashable, Mapping, Tuple, Union
import numpy as np
import scipy.sparse as sp

from qfock.core.basis import nbits, popcount
from qfock.core.operator import FockOperator, FockTerm
from qfock.core.sector import BinaryBases

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1 << 16


def _sequences(term: FockTerm, table: Mapping[Hashable, int], dtype: np.dtype) -> Tuple[Tuple[int, bool], ...]:
    """Orbital indices and creation flags in application order (rightmost action first)."""
    width = nbits(dtype)
    sequences = []
    for label, creation in reversed(term.ladders):
        orbital = table[label]
        if not 1 <= orbital <= width:
            raise IndexError(
                f"Orbital {orbital} of {label!r} is outside the {width} orbitals stored by the bra and ket bases"
            )
        sequences.append((orbital, creation))
    return tuple(sequences)


def _apply(
    reps: np.ndarray,
    sequences: Tuple[Tuple[int, bool], ...],
    fermionic: bool
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Apply the actions to every configuration at once.

    Returns the surviving mask, the final configurations and the number of
    fermionic exchanges accumulated along the way.
    """
    dtype = reps.dtype.type
    one = dtype(1)
    current = reps.copy()
    alive = np.ones(len(reps), dtype=bool)
    nsign = np.zeros(len(reps), dtype=np.int64)
    for orbital, creation in sequences:
        bit = one << dtype(orbital - 1)
        occupied = (current & bit) != 0
        alive &= occupied != creation
        if fermionic:
            nsign += popcount(current & (bit - one))
        current ^= bit
    return alive, current, nsign


def _term_chunk(
    term: FockTerm,
    sequences: Tuple[Tuple[int, bool], ...],
    bra: BinaryBases,
    ket: BinaryBases,
    start: int,
    stop: int,
    storage: np.dtype,
    dtype: np.dtype
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Columns, rows and values contributed by ket columns [start, stop)."""
    reps = ket.reps(start, stop).astype(storage, copy=False)
    alive, current, nsign = _apply(reps, sequences, term.is_fermionic)
    columns = np.nonzero(alive)[0]
    positions, found = bra.locate(current[columns])
    columns, rows, nsign = columns[found] + start, positions[found], nsign[columns[found]]
    coeff = np.asarray(term.coeff, dtype=dtype)
    data = np.where(nsign % 2 == 1, -coeff, coeff).astype(dtype, copy=False)
    return columns, rows, data


def _term_matrix(
    term: FockTerm,
    braket: Tuple[BinaryBases, BinaryBases],
    table: Mapping[Hashable, int],
    dtype: np.dtype,
    n_workers: int,
    chunk_size: int
) -> sp.csc_matrix:
    bra, ket = braket
    # Wide enough for configurations of either sector
    storage = np.promote_types(bra.dtype, ket.dtype)
    sequences = _sequences(term, table, storage)
    bounds = [(start, min(start + chunk_size, len(ket))) for start in range(0, len(ket), chunk_size)]

    def work(bound):
        return _term_chunk(term, sequences, bra, ket, bound[0], bound[1], storage, dtype)

    if n_workers > 1 and len(bounds) > 1:
        # Disjoint column ranges; map keeps them in order
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            chunks = list(executor.map(work, bounds))
    else:
        chunks = [work(bound) for bound in bounds]

    if chunks:
        columns = np.concatenate([c[0] for c in chunks])
        rows = np.concatenate([c[1] for c in chunks])
        data = np.concatenate([c[2] for c in chunks])
    else:
        columns = rows = np.zeros(0, dtype=np.int64)
        data = np.zeros(0, dtype=dtype)

    # At most one entry per column, already in column order
    indptr = np.zeros(len(ket) + 1, dtype=np.int64)
    indptr[1:] = np.cumsum(np.bincount(columns, minlength=len(ket)))
    return sp.csc_matrix((data, rows, indptr), shape=(len(bra), len(ket)))


def matrix(
    op: Union[FockTerm, FockOperator],
    braket: Tuple[BinaryBases, BinaryBases],
    table: Mapping[Hashable, int],
    dtype=None,
    n_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE
) -> sp.csc_matrix:
    """Sparse matrix of an operator from the ket sector to the bra sector.

    Args:
        op: A single term or a sum of terms
        braket: (bra sector, ket sector); rows follow the bra, columns the ket
        table: Maps every orbital label of the operator to its 1-based orbital index
        dtype: Scalar type of the entries, the operator's coefficient type by default
        n_workers: Threads over which the ket columns are split
        chunk_size: Number of ket columns processed per batch
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    bra, ket = braket

    if isinstance(op, FockTerm):
        dtype = np.asarray(op.coeff).dtype if dtype is None else np.dtype(dtype)
        return _term_matrix(op, braket, table, dtype, n_workers, chunk_size)

    dtype = op.dtype if dtype is None else np.dtype(dtype)
    result = sp.csc_matrix((len(bra), len(ket)), dtype=dtype)
    for term in op:
        result = result + _term_matrix(term, braket, table, dtype, n_workers, chunk_size)
    result = sp.csc_matrix(result)
    logger.debug(f"Assembled {op.num_terms()} terms into {result.shape} matrix with {result.nnz} nonzeros")
    return result
