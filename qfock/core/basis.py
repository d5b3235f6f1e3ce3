"""Binary representation of many-body occupation configurations.

A configuration of n single-particle orbitals is encoded as an unsigned
integer: bit k set <=> orbital k+1 occupied. Orbitals are 1-based.
"""

from typing import Callable, Iterable, Iterator, Optional
import numpy as np

_UNSIGNED = (np.uint8, np.uint16, np.uint32, np.uint64)

_M1 = np.uint64(0x5555555555555555)
_M2 = np.uint64(0x3333333333333333)
_M4 = np.uint64(0x0F0F0F0F0F0F0F0F)
_H01 = np.uint64(0x0101010101010101)


def basistype(arg) -> type:
    """Select the unsigned integer type used to store binary bases.

    An integer argument is the highest orbital index to be represented and
    selects the narrowest unsigned type with enough bits. A numpy integer
    dtype selects the unsigned type of the same width.
    """
    if isinstance(arg, (int, np.integer)) and not isinstance(arg, bool):
        n_bits = int(arg)
        if n_bits < 0:
            raise ValueError(f"Number of orbitals must be non-negative, got {n_bits}")
        for candidate in _UNSIGNED:
            if np.iinfo(candidate).bits >= n_bits:
                return candidate
        raise ValueError(f"At most 64 orbitals are supported, got {n_bits}")

    dtype = np.dtype(arg)
    if dtype.kind == 'u':
        return dtype.type
    if dtype.kind == 'i':
        return np.dtype(f"uint{dtype.itemsize * 8}").type
    raise TypeError(f"Cannot derive a basis type from {arg!r}")


def nbits(dtype) -> int:
    """Number of orbitals an unsigned dtype can hold."""
    return np.iinfo(dtype).bits


def popcount(reps: np.ndarray) -> np.ndarray:
    """Vectorised number of set bits of an array of unsigned integers."""
    v = np.asarray(reps).astype(np.uint64)
    v = v - ((v >> np.uint64(1)) & _M1)
    v = (v & _M2) + ((v >> np.uint64(2)) & _M2)
    v = (v + (v >> np.uint64(4))) & _M4
    return ((v * _H01) >> np.uint64(56)).astype(np.int64)


def _check_orbital(orbital: int) -> int:
    if orbital < 1:
        raise ValueError(f"Orbital indices are 1-based, got {orbital}")
    return int(orbital)


class BinaryBasis:
    """Occupation configuration stored as the bits of a non-negative integer.

    Attributes:
        rep: Integer whose bit k is set iff orbital k+1 is occupied
    """

    __slots__ = ('rep',)

    def __init__(self, rep: int):
        rep = int(rep)
        if rep < 0:
            raise ValueError(f"Binary basis representation must be non-negative, got {rep}")
        object.__setattr__(self, 'rep', rep)

    def __setattr__(self, name, value):
        raise AttributeError("BinaryBasis is immutable")

    @classmethod
    def from_orbitals(
        cls,
        orbitals: Iterable[int],
        filter: Optional[Callable[[int], bool]] = None
    ) -> 'BinaryBasis':
        """Create from occupied orbitals.

        filter(position) receives the 1-based position in `orbitals` and
        decides whether that orbital is actually set.
        """
        rep = 0
        for position, orbital in enumerate(orbitals, start=1):
            if filter is None or filter(position):
                rep |= 1 << (_check_orbital(orbital) - 1)
        return cls(rep)

    def occupy(self, orbital: int) -> 'BinaryBasis':
        """Return a new basis with the orbital occupied."""
        return BinaryBasis(self.rep | (1 << (_check_orbital(orbital) - 1)))

    def vacate(self, orbital: int) -> 'BinaryBasis':
        """Return a new basis with the orbital unoccupied."""
        return BinaryBasis(self.rep & ~(1 << (_check_orbital(orbital) - 1)))

    def is_occupied(self, orbital: int) -> bool:
        return (self.rep >> (_check_orbital(orbital) - 1)) & 1 == 1

    def is_vacant(self, orbital: int) -> bool:
        return not self.is_occupied(orbital)

    def count(self, start: Optional[int] = None, stop: Optional[int] = None) -> int:
        """Number of occupied orbitals, optionally within the inclusive range [start, stop]."""
        rep = self.rep
        if start is not None:
            rep >>= _check_orbital(start) - 1
            if stop is not None:
                width = stop - start + 1
                if width <= 0:
                    return 0
                rep &= (1 << width) - 1
        elif stop is not None:
            if stop < 1:
                return 0
            rep &= (1 << stop) - 1
        return bin(rep).count('1')

    def merge(self, other: 'BinaryBasis') -> 'BinaryBasis':
        """Direct product of two configurations on disjoint orbitals."""
        return BinaryBasis(self.rep | other.rep)

    def occupied_orbitals(self) -> Iterator[int]:
        """Lazily yield the occupied orbitals in ascending order."""
        rep = self.rep
        orbital = 0
        while rep > 0:
            orbital += 1
            if rep & 1:
                yield orbital
            rep >>= 1

    def __iter__(self) -> Iterator[int]:
        return self.occupied_orbitals()

    def __or__(self, other: 'BinaryBasis') -> 'BinaryBasis':
        if not isinstance(other, BinaryBasis):
            return NotImplemented
        return self.merge(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryBasis):
            return NotImplemented
        return self.rep == other.rep

    def __lt__(self, other: 'BinaryBasis') -> bool:
        if not isinstance(other, BinaryBasis):
            return NotImplemented
        return self.rep < other.rep

    def __le__(self, other: 'BinaryBasis') -> bool:
        if not isinstance(other, BinaryBasis):
            return NotImplemented
        return self.rep <= other.rep

    def __gt__(self, other: 'BinaryBasis') -> bool:
        if not isinstance(other, BinaryBasis):
            return NotImplemented
        return self.rep > other.rep

    def __ge__(self, other: 'BinaryBasis') -> bool:
        if not isinstance(other, BinaryBasis):
            return NotImplemented
        return self.rep >= other.rep

    def __hash__(self) -> int:
        return hash(self.rep)

    def __int__(self) -> int:
        return self.rep

    def __repr__(self) -> str:
        return format(self.rep, 'b')

    def __str__(self) -> str:
        return self.__repr__()


class BinaryBasisRange:
    """Contiguous closed range [lo, hi] of binary bases, never materialized."""

    __slots__ = ('lo', 'hi', 'dtype')

    def __init__(self, lo: int, hi: int, dtype=None):
        if lo < 0:
            raise ValueError(f"Range start must be non-negative, got {lo}")
        self.lo = int(lo)
        self.hi = int(hi)
        self.dtype = basistype(max(self.hi, 0).bit_length()) if dtype is None else basistype(dtype)
        if self.hi >= 1 << nbits(self.dtype):
            raise ValueError(f"Range end {self.hi} does not fit in {np.dtype(self.dtype).name}")

    def __len__(self) -> int:
        return max(self.hi - self.lo + 1, 0)

    def __getitem__(self, i: int) -> BinaryBasis:
        n = len(self)
        if i < 0:
            i += n
        if not 0 <= i < n:
            raise IndexError(f"Index {i} out of range for {n} bases")
        return BinaryBasis(self.lo + i)

    def __iter__(self) -> Iterator[BinaryBasis]:
        for rep in range(self.lo, self.hi + 1):
            yield BinaryBasis(rep)

    def is_sorted(self) -> bool:
        return True

    def reps(self, start: int = 0, stop: Optional[int] = None) -> np.ndarray:
        """Raw values at positions [start, stop), generated on demand."""
        stop = len(self) if stop is None else min(stop, len(self))
        return np.arange(self.lo + start, self.lo + stop, dtype=self.dtype)

    def index(self, rep: int) -> int:
        """Position of the first value >= rep, computed by offset."""
        return min(max(int(rep) - self.lo, 0), len(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryBasisRange):
            return NotImplemented
        return (self.lo, self.hi) == (other.lo, other.hi)

    def __hash__(self) -> int:
        return hash((self.lo, self.hi))

    def __repr__(self) -> str:
        return f"BinaryBasisRange({self.lo}, {self.hi})"
