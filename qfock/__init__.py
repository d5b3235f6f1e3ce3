"""qfock - Symmetry-resolved binary bases and sparse Fock operator matrices."""

__version__ = "0.1.0"

from qfock.core import BinaryBasis, BinaryBases, FockOperator, FockTerm
from qfock.assembly import matrix

__all__ = [
    "BinaryBasis",
    "BinaryBases",
    "FockOperator",
    "FockTerm",
    "matrix",
]
