"""Converters between FockOperator and external libraries."""

from qfock.converters.openfermion_bridge import from_openfermion, to_openfermion, mode_table

__all__ = [
    "from_openfermion",
    "to_openfermion",
    "mode_table",
]
