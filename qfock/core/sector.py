"""Symmetry sectors of binary bases."""

import logging
from math import isnan
from typing import Iterator, Optional, Sequence, Tuple, Type, Union
import numpy as np

from qfock.core.basis import BinaryBasis, BinaryBasisRange, basistype
from qfock.core.exceptions import IncompatibleSectorsError, UndefinedQuantumNumberError
from qfock.core.quantum_numbers import AbelianNumber, ParticleNumber
from qfock.core.tables import fixed_count_table, unrestricted_table

logger = logging.getLogger(__name__)

Table = Union[np.ndarray, BinaryBasisRange]
Irreducible = Tuple[BinaryBasis, AbelianNumber]


def _orbital_list(orbitals: Union[int, Sequence[int]]) -> Sequence[int]:
    if isinstance(orbitals, (int, np.integer)):
        return range(1, int(orbitals) + 1)
    return sorted(int(o) for o in orbitals)


class BinaryBases:
    """A sector: sorted binary bases tagged by the quantum numbers of their orbital blocks.

    Attributes:
        id: Tuple of (orbital mask, quantum number), one entry per orbital block
        table: Sorted unsigned integer array, or a BinaryBasisRange
    """

    __slots__ = ('id', 'table')

    def __init__(self, id: Sequence[Irreducible], table: Table):
        self.id: Tuple[Irreducible, ...] = tuple(id)
        if not self.id:
            raise ValueError("A sector needs at least one (mask, quantum number) entry")
        self.table = table
        if not self.is_sorted():
            raise ValueError("Sector tables must be sorted ascending without duplicates")

    @classmethod
    def unrestricted(
        cls,
        orbitals: Union[int, Sequence[int]],
        qn_type: Type[AbelianNumber] = ParticleNumber,
        dtype=None
    ) -> 'BinaryBases':
        """Sector without particle-number conservation.

        An integer n covers orbitals 1..n and is stored as a range; an explicit
        orbital list is enumerated into a table.
        """
        irreducible = qn_type.unconstrained()
        if isinstance(orbitals, (int, np.integer)):
            n = int(orbitals)
            mask = BinaryBasis.from_orbitals(range(1, n + 1))
            table = BinaryBasisRange(0, 2 ** n - 1, dtype=basistype(n) if dtype is None else dtype)
            return cls([(mask, irreducible)], table)

        orbitals = _orbital_list(orbitals)
        mask = BinaryBasis.from_orbitals(orbitals)
        return cls([(mask, irreducible)], unrestricted_table(orbitals, dtype=dtype))

    @classmethod
    def fixed(
        cls,
        orbitals: Union[int, Sequence[int]],
        nparticle: int,
        qn_type: Type[AbelianNumber] = ParticleNumber,
        dtype=None,
        n_workers: int = 1,
        **labels
    ) -> 'BinaryBases':
        """Sector with exactly `nparticle` occupied orbitals.

        Extra keyword labels (e.g. Sz) fill the remaining quantum-number fields.
        """
        if isinstance(nparticle, (float, np.floating)) and isnan(nparticle):
            raise UndefinedQuantumNumberError("A fixed-count sector needs a defined particle number")
        orbitals = _orbital_list(orbitals)
        mask = BinaryBasis.from_orbitals(orbitals)
        irreducible = qn_type(N=nparticle, **labels)
        table = fixed_count_table(orbitals, nparticle, dtype=dtype, n_workers=n_workers)
        if len(table) == 0:
            logger.warning(f"Empty sector: {nparticle} particles on {len(orbitals)} orbitals")
        return cls([(mask, irreducible)], table)

    def __len__(self) -> int:
        return len(self.table)

    def __getitem__(self, i: int) -> BinaryBasis:
        if isinstance(self.table, BinaryBasisRange):
            return self.table[i]
        return BinaryBasis(int(self.table[i]))

    def __iter__(self) -> Iterator[BinaryBasis]:
        for i in range(len(self)):
            yield self[i]

    def is_sorted(self) -> bool:
        if isinstance(self.table, BinaryBasisRange):
            return self.table.is_sorted()
        return bool(np.all(self.table[1:] > self.table[:-1]))

    @property
    def dtype(self):
        return self.table.dtype if isinstance(self.table, BinaryBasisRange) else self.table.dtype.type

    @property
    def qn_type(self) -> Type[AbelianNumber]:
        return type(self.id[0][1])

    @property
    def quantum_number(self) -> AbelianNumber:
        """Group sum of the quantum numbers of all orbital blocks."""
        return sum(qn for _, qn in self.id)

    def reps(self, start: int = 0, stop: Optional[int] = None) -> np.ndarray:
        """Raw values at positions [start, stop)."""
        if isinstance(self.table, BinaryBasisRange):
            return self.table.reps(start, stop)
        return self.table[start:stop]

    def index(self, basis: Union[BinaryBasis, int]) -> int:
        """Position of the first table entry >= basis (0-based)."""
        rep = basis.rep if isinstance(basis, BinaryBasis) else int(basis)
        if isinstance(self.table, BinaryBasisRange):
            return self.table.index(rep)
        return int(np.searchsorted(self.table, rep, side='left'))

    def locate(self, reps: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Vectorised lookup: positions of `reps` and a mask of which were found."""
        reps = np.asarray(reps)
        if isinstance(self.table, BinaryBasisRange):
            positions = reps.astype(np.int64) - self.table.lo
            found = (positions >= 0) & (positions < len(self))
            return positions, found
        positions = np.searchsorted(self.table, reps, side='left')
        found = positions < len(self.table)
        found[found] = self.table[positions[found]] == reps[found]
        return positions, found

    def __contains__(self, basis: BinaryBasis) -> bool:
        i = self.index(basis)
        return 0 <= i < len(self) and self[i] == basis

    def direct_product(self, other: 'BinaryBases') -> 'BinaryBases':
        """Sector spanned by merging every basis of self with every basis of other."""
        if not productable(self, other):
            raise IncompatibleSectorsError(
                f"Sectors {self!r} and {other!r} cannot be direct producted"
            )
        dtype = np.promote_types(self.dtype, other.dtype)
        reps1 = self.reps().astype(dtype, copy=False)
        reps2 = other.reps().astype(dtype, copy=False)
        table = np.bitwise_or.outer(reps1, reps2).ravel()
        table.sort()
        id = sorted(self.id + other.id, key=lambda irr: irr[0].rep)
        return BinaryBases(id, table)

    def __matmul__(self, other: 'BinaryBases') -> 'BinaryBases':
        if not isinstance(other, BinaryBases):
            return NotImplemented
        return self.direct_product(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryBases):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return " ⊗ ".join(f"{{2^{mask.count()}: {qn!r}}}" for mask, qn in self.id)

    def __str__(self) -> str:
        return " ⊗ ".join(
            f"{{2^[{' '.join(map(str, mask.occupied_orbitals()))}]: {qn!r}}}" for mask, qn in self.id
        )


def productable(bs1: BinaryBases, bs2: BinaryBases) -> bool:
    """Whether two sectors act on disjoint orbitals with the same label type."""
    if bs1.qn_type is not bs2.qn_type:
        return False
    for mask1, _ in bs1.id:
        for mask2, _ in bs2.id:
            if mask1.rep & mask2.rep != 0:
                return False
    return True


def summable(bs1: BinaryBases, bs2: BinaryBases, strict: bool = False) -> bool:
    """Whether two sectors could be direct summed.

    Strictly, two sectors can be summed iff their bases do not intersect. That
    check is O(n log n) in the sector dimension and is only done when
    `strict=True`. Deciding it from the ids alone is a pure integer linear
    programming problem over orbital blocks and particle numbers which is not
    solved here, so by default the caller is responsible for disjointness.
    """
    if not strict:
        return True
    if bs1.qn_type is not bs2.qn_type:
        return False
    common = np.intersect1d(bs1.reps(), bs2.reps(), assume_unique=True)
    return len(common) == 0


def direct_sum(bs1: BinaryBases, bs2: BinaryBases, strict: bool = False) -> BinaryBases:
    """Union of two disjoint sectors with the same label type."""
    if bs1.qn_type is not bs2.qn_type or not summable(bs1, bs2, strict=strict):
        raise IncompatibleSectorsError(f"Sectors {bs1!r} and {bs2!r} cannot be direct summed")
    dtype = np.promote_types(bs1.dtype, bs2.dtype)
    table = np.concatenate([bs1.reps().astype(dtype), bs2.reps().astype(dtype)])
    table.sort()
    id = list(bs1.id) + [irr for irr in bs2.id if irr not in bs1.id]
    return BinaryBases(id, table)
