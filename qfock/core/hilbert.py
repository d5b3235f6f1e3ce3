"""Lattice Hilbert spaces of canonical fermions and the sectors they support."""

import logging
from dataclasses import dataclass
from typing import Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple
import numpy as np

from qfock.core.basis import BinaryBasis, basistype
from qfock.core.exceptions import UndefinedQuantumNumberError, UnsupportedSpinConfigurationError
from qfock.core.quantum_numbers import AbelianNumber, ParticleNumber, SpinfulParticle
from qfock.core.sector import BinaryBases

logger = logging.getLogger(__name__)

DEFAULT_METRIC = ("spin", "site", "orbital")


@dataclass(frozen=True, order=True)
class FockIndex:
    """Single-particle label: orbital `orbital` with spin projection `spin` on `site`."""
    site: Hashable
    orbital: int = 1
    spin: float = 0.5


@dataclass(frozen=True)
class Fock:
    """Local Fock space of one site."""
    norbital: int = 1
    nspin: int = 2

    def spins(self) -> Tuple[float, ...]:
        return tuple(-(self.nspin - 1) / 2 + k for k in range(self.nspin))


class Hilbert:
    """Mapping from sites to their local Fock spaces."""

    def __init__(self, spaces: Mapping[Hashable, Fock]):
        self.spaces: Dict[Hashable, Fock] = dict(spaces)

    @classmethod
    def uniform(cls, sites: Sequence[Hashable], norbital: int = 1, nspin: int = 2) -> 'Hilbert':
        return cls({site: Fock(norbital, nspin) for site in sites})

    def indices(self) -> Iterator[FockIndex]:
        """All single-particle labels."""
        for site, fock in self.spaces.items():
            for orbital in range(1, fock.norbital + 1):
                for spin in fock.spins():
                    yield FockIndex(site, orbital, spin)

    def __iter__(self) -> Iterator[FockIndex]:
        return self.indices()

    def __len__(self) -> int:
        return sum(fock.norbital * fock.nspin for fock in self.spaces.values())

    def __repr__(self) -> str:
        return f"Hilbert({len(self.spaces)} sites, {len(self)} orbitals)"


def orbital_table(hilbert: Hilbert, metric: Sequence[str] = DEFAULT_METRIC) -> Dict[FockIndex, int]:
    """Map every FockIndex to 1..n, ordered lexicographically by the `metric` fields."""
    indices = sorted(hilbert.indices(), key=lambda index: tuple(getattr(index, name) for name in metric))
    return {index: i for i, index in enumerate(indices, start=1)}


def _orbitals(hilbert: Hilbert, table: Mapping[FockIndex, int], spin: Optional[float] = None) -> List[int]:
    return sorted({table[index] for index in hilbert.indices() if spin is None or index.spin == spin})


def _as_count(value: float, name: str) -> int:
    if value < 0 or value != int(value):
        raise ValueError(f"{name} must be a non-negative integer, got {value}")
    return int(value)


def spin_sector(
    spindws: Sequence[int],
    spinups: Sequence[int],
    quantum_number: SpinfulParticle,
    dtype=None
) -> BinaryBases:
    """Sector of fixed Sz (and optionally fixed N) over explicit spin-down and spin-up orbitals."""
    if quantum_number.isnan('Sz'):
        raise UndefinedQuantumNumberError("Sector error: Sz is NaN")
    if dtype is None:
        dtype = basistype(max(list(spindws) + list(spinups), default=0))

    if quantum_number.isnan('N'):
        two_sz = quantum_number.Sz * 2
        if two_sz != int(two_sz):
            raise ValueError(f"2*Sz must be an integer, got {two_sz}")
        two_sz = int(two_sz)
        parts = []
        for nup in range(max(two_sz, 0), min(len(spindws) + two_sz, len(spinups)) + 1):
            ndw = nup - two_sz
            part = BinaryBases.fixed(spindws, ndw, SpinfulParticle, dtype=dtype, Sz=-ndw / 2) @ \
                BinaryBases.fixed(spinups, nup, SpinfulParticle, dtype=dtype, Sz=nup / 2)
            parts.append(part.table)
        table = np.concatenate(parts) if parts else np.empty(0, dtype=dtype)
        table.sort()
        mask = BinaryBasis.from_orbitals(list(spindws) + list(spinups))
        logger.debug(f"Spin sector Sz={quantum_number.Sz:g} with free N: {len(table)} bases")
        return BinaryBases([(mask, quantum_number)], table)

    ndw = _as_count(quantum_number.N / 2 - quantum_number.Sz, "Number of spin-down particles")
    nup = _as_count(quantum_number.N / 2 + quantum_number.Sz, "Number of spin-up particles")
    return BinaryBases.fixed(spindws, ndw, SpinfulParticle, dtype=dtype, Sz=-ndw / 2) @ \
        BinaryBases.fixed(spinups, nup, SpinfulParticle, dtype=dtype, Sz=nup / 2)


def build_sector(
    hilbert: Hilbert,
    quantum_number: Optional[AbelianNumber] = None,
    table: Optional[Mapping[FockIndex, int]] = None,
    dtype=None
) -> BinaryBases:
    """Binary bases of a Hilbert space restricted by a quantum number.

    Args:
        hilbert: Lattice Hilbert space
        quantum_number: None (no conservation), ParticleNumber or SpinfulParticle
        table: Orbital index table; defaults to orbital_table(hilbert)
        dtype: Storage type of the bases; defaults to the narrowest that fits
    """
    table = orbital_table(hilbert) if table is None else table
    orbitals = _orbitals(hilbert, table)

    if quantum_number is None:
        if orbitals == list(range(1, len(orbitals) + 1)):
            return BinaryBases.unrestricted(len(orbitals), dtype=dtype)
        return BinaryBases.unrestricted(orbitals, dtype=dtype)

    if isinstance(quantum_number, ParticleNumber):
        if quantum_number.isnan('N'):
            raise UndefinedQuantumNumberError("Sector error: particle number is NaN")
        return BinaryBases.fixed(orbitals, _as_count(quantum_number.N, "Particle number"), dtype=dtype)

    if isinstance(quantum_number, SpinfulParticle):
        if any(fock.nspin != 2 for fock in hilbert.spaces.values()):
            raise UnsupportedSpinConfigurationError("Sector error: only for spin-1/2 systems")
        spindws = _orbitals(hilbert, table, spin=-0.5)
        spinups = _orbitals(hilbert, table, spin=0.5)
        return spin_sector(spindws, spinups, quantum_number, dtype=dtype)

    raise TypeError(f"Unsupported quantum number type {type(quantum_number).__name__}")
