"""Sparse matrix representations of Fock operators."""

from qfock.assembly.assembler import matrix, DEFAULT_CHUNK_SIZE

__all__ = [
    "matrix",
    "DEFAULT_CHUNK_SIZE",
]
