"""Abelian quantum numbers used to label sectors.

Each label is a frozen dataclass of float fields. Addition is field-wise and
NaN marks a quantity that is not conserved.
"""

from dataclasses import dataclass, fields as dataclass_fields
from math import isnan as _isnan, nan
from typing import Dict, Optional, Tuple


def _key(value: float):
    return None if _isnan(value) else value


@dataclass(frozen=True, eq=False)
class AbelianNumber:
    """Base class for conserved labels obeying group addition."""

    @classmethod
    def fields(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in dataclass_fields(cls))

    @classmethod
    def unconstrained(cls) -> 'AbelianNumber':
        """Label with every field set to NaN."""
        return cls(**{name: nan for name in cls.fields()})

    def values(self) -> Tuple[float, ...]:
        return tuple(getattr(self, name) for name in self.fields())

    def to_dict(self) -> Dict[str, float]:
        return dict(zip(self.fields(), self.values()))

    def isnan(self, field: Optional[str] = None) -> bool:
        """Whether the given field (or any field) is unconstrained."""
        if field is not None:
            return _isnan(getattr(self, field))
        return any(_isnan(v) for v in self.values())

    def __add__(self, other: 'AbelianNumber') -> 'AbelianNumber':
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(*(a + b for a, b in zip(self.values(), other.values())))

    def __radd__(self, other):
        # Allows sum() over labels
        if other == 0:
            return self
        return NotImplemented

    def __neg__(self) -> 'AbelianNumber':
        return type(self)(*(-v for v in self.values()))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return tuple(map(_key, self.values())) == tuple(map(_key, other.values()))

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + tuple(map(_key, self.values())))

    def __repr__(self) -> str:
        body = ", ".join(f"{name}={value:g}" for name, value in self.to_dict().items())
        return f"{type(self).__name__}({body})"


@dataclass(frozen=True, eq=False, repr=False)
class ParticleNumber(AbelianNumber):
    """Total particle number."""

    N: float = nan

    def __post_init__(self):
        object.__setattr__(self, 'N', float(self.N))


@dataclass(frozen=True, eq=False, repr=False)
class SpinfulParticle(AbelianNumber):
    """Total particle number and spin projection."""

    N: float = nan
    Sz: float = nan

    def __post_init__(self):
        object.__setattr__(self, 'N', float(self.N))
        object.__setattr__(self, 'Sz', float(self.Sz))
