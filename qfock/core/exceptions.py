"""Errors raised while building and combining sectors."""


class SectorError(ValueError):
    """Base class for invalid sector requests."""


class IncompatibleSectorsError(SectorError):
    """Two sectors claim a common orbital or carry different quantum-number types."""


class UndefinedQuantumNumberError(SectorError):
    """A conserved quantity required to build a sector is unconstrained (NaN)."""


class UnsupportedSpinConfigurationError(SectorError):
    """Spin-resolved sectors need every local space to be spin-1/2."""
