"""Core data structures for binary bases, sectors and Fock operators."""

from qfock.core.basis import BinaryBasis, BinaryBasisRange, basistype, popcount
from qfock.core.tables import unrestricted_table, fixed_count_table
from qfock.core.quantum_numbers import AbelianNumber, ParticleNumber, SpinfulParticle
from qfock.core.sector import BinaryBases, productable, summable, direct_sum
from qfock.core.exceptions import (
    SectorError,
    IncompatibleSectorsError,
    UndefinedQuantumNumberError,
    UnsupportedSpinConfigurationError,
)
from qfock.core.operator import (
    Statistics,
    FockTerm,
    FockOperator,
    creation,
    annihilation,
    number,
    hopping,
)
from qfock.core.hilbert import Fock, FockIndex, Hilbert, orbital_table, build_sector, spin_sector
from qfock.core.loaders import FockOperatorLoader, HDF5Loader, NPZLoader, FermiHubbardLoader

__all__ = [
    "BinaryBasis",
    "BinaryBasisRange",
    "basistype",
    "popcount",
    "unrestricted_table",
    "fixed_count_table",
    "AbelianNumber",
    "ParticleNumber",
    "SpinfulParticle",
    "BinaryBases",
    "productable",
    "summable",
    "direct_sum",
    "SectorError",
    "IncompatibleSectorsError",
    "UndefinedQuantumNumberError",
    "UnsupportedSpinConfigurationError",
    "Statistics",
    "FockTerm",
    "FockOperator",
    "creation",
    "annihilation",
    "number",
    "hopping",
    "Fock",
    "FockIndex",
    "Hilbert",
    "orbital_table",
    "build_sector",
    "spin_sector",
    "FockOperatorLoader",
    "HDF5Loader",
    "NPZLoader",
    "FermiHubbardLoader",
]
