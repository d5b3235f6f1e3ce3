"""Tables, sectors, quantum numbers and Hilbert-driven sector construction."""

import unittest
from itertools import product
from math import comb, isnan
import numpy as np

from qfock.core.basis import BinaryBasis, BinaryBasisRange, popcount
from qfock.core.exceptions import (
    IncompatibleSectorsError,
    UndefinedQuantumNumberError,
    UnsupportedSpinConfigurationError,
)
from qfock.core.hilbert import FockIndex, Hilbert, build_sector, orbital_table
from qfock.core.quantum_numbers import ParticleNumber, SpinfulParticle
from qfock.core.sector import BinaryBases, direct_sum, productable, summable
from qfock.core.tables import fixed_count_table, unrestricted_table


class TestTables(unittest.TestCase):

    def test_unrestricted(self):
        self.assertEqual(unrestricted_table([1, 2]).tolist(), [0b00, 0b01, 0b10, 0b11])
        table = unrestricted_table([2, 5])
        self.assertEqual(table.tolist(), [0, 0b00010, 0b10000, 0b10010])

    def test_fixed_count(self):
        self.assertEqual(fixed_count_table([1, 2], 1).tolist(), [0b01, 0b10])
        for n in range(7):
            for k in range(n + 1):
                table = fixed_count_table(range(1, n + 1), k)
                self.assertEqual(len(table), comb(n, k))
                self.assertTrue(np.all(popcount(table) == k))
                self.assertTrue(np.all(np.diff(table.astype(np.int64)) > 0))

    def test_fixed_count_parallel(self):
        serial = fixed_count_table(range(1, 11), 4)
        parallel = fixed_count_table(range(1, 11), 4, n_workers=3)
        np.testing.assert_array_equal(serial, parallel)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            fixed_count_table([1, 2], -1)
        with self.assertRaises(ValueError):
            fixed_count_table([1, 1], 1)
        self.assertEqual(len(fixed_count_table([1, 2], 3)), 0)

    def test_dtype(self):
        self.assertEqual(fixed_count_table([1, 9], 1).dtype, np.uint16)
        self.assertEqual(fixed_count_table([1, 2], 1, dtype=np.int32).dtype, np.uint32)


class TestQuantumNumbers(unittest.TestCase):

    def test_group_addition(self):
        self.assertEqual(ParticleNumber(1) + ParticleNumber(2), ParticleNumber(3))
        total = SpinfulParticle(N=1, Sz=-0.5) + SpinfulParticle(N=2, Sz=1.0)
        self.assertEqual(total, SpinfulParticle(3, 0.5))
        self.assertEqual(sum([ParticleNumber(1), ParticleNumber(4)]), ParticleNumber(5))
        with self.assertRaises(TypeError):
            ParticleNumber(1) + SpinfulParticle(1, 0.5)

    def test_unconstrained(self):
        qn = SpinfulParticle.unconstrained()
        self.assertTrue(qn.isnan())
        self.assertTrue(qn.isnan('Sz'))
        self.assertEqual(qn, SpinfulParticle())
        self.assertEqual(hash(qn), hash(SpinfulParticle()))
        self.assertTrue(SpinfulParticle(Sz=0.5).isnan('N'))
        self.assertFalse(SpinfulParticle(Sz=0.5).isnan('Sz'))
        self.assertTrue(isnan((ParticleNumber() + ParticleNumber(2)).N))

    def test_fields(self):
        self.assertEqual(SpinfulParticle.fields(), ('N', 'Sz'))
        self.assertEqual(SpinfulParticle(2, 0.0).to_dict(), {'N': 2.0, 'Sz': 0.0})
        self.assertEqual(repr(ParticleNumber(2)), "ParticleNumber(N=2)")


class TestBinaryBases(unittest.TestCase):

    def test_unrestricted(self):
        bs = BinaryBases.unrestricted(2)
        self.assertIsInstance(bs.table, BinaryBasisRange)
        self.assertEqual(len(bs), 4)
        self.assertEqual([b.rep for b in bs], [0, 1, 2, 3])
        for n in range(1, 6):
            bs = BinaryBases.unrestricted(n)
            self.assertEqual(len(bs), 2 ** n)
            self.assertEqual(bs.reps().tolist(), list(range(2 ** n)))
        self.assertTrue(bs.quantum_number.isnan())

        explicit = BinaryBases.unrestricted([1, 2])
        self.assertEqual(explicit.reps().tolist(), [0, 1, 2, 3])
        self.assertEqual(explicit, BinaryBases.unrestricted(2))

    def test_fixed(self):
        bs = BinaryBases.fixed(2, 1)
        self.assertEqual([b.rep for b in bs], [0b01, 0b10])
        self.assertEqual(bs.quantum_number, ParticleNumber(1))
        self.assertEqual(bs.id[0][0], BinaryBasis(0b11))
        bs = BinaryBases.fixed([1, 3, 4], 2, SpinfulParticle, Sz=1.0)
        self.assertEqual(bs.reps().tolist(), [0b0101, 0b1001, 0b1100])
        self.assertEqual(bs.quantum_number, SpinfulParticle(2, 1.0))

    def test_index(self):
        bs = BinaryBases.fixed(4, 2)
        for i, basis in enumerate(bs):
            self.assertEqual(bs.index(basis), i)
            self.assertIn(basis, bs)
        self.assertNotIn(BinaryBasis(0b111), bs)
        self.assertEqual(bs.index(BinaryBasis(0b0100)), 1)

        full = BinaryBases.unrestricted(3)
        self.assertEqual(full.index(BinaryBasis(5)), 5)

    def test_locate(self):
        bs = BinaryBases.fixed(3, 2)
        positions, found = bs.locate(np.array([0b011, 0b111, 0b110, 0b000], dtype=np.uint8))
        self.assertEqual(found.tolist(), [True, False, True, False])
        self.assertEqual(positions[found].tolist(), [0, 2])

        ranged = BinaryBases([(BinaryBasis(0b111), ParticleNumber())], BinaryBasisRange(4, 7))
        positions, found = ranged.locate(np.array([3, 4, 7, 8], dtype=np.uint8))
        self.assertEqual(found.tolist(), [False, True, True, False])
        self.assertEqual(positions[found].tolist(), [0, 3])
        self.assertEqual(ranged.index(BinaryBasis(6)), 2)
        self.assertEqual(ranged.index(BinaryBasis(1)), 0)
        self.assertEqual(ranged.index(BinaryBasis(9)), 4)
        self.assertNotIn(BinaryBasis(1), ranged)

    def test_fixed_needs_particle_number(self):
        with self.assertRaises(UndefinedQuantumNumberError):
            BinaryBases.fixed(3, float("nan"))
        with self.assertRaises(UndefinedQuantumNumberError):
            BinaryBases.fixed([1, 2], np.float64("nan"))

    def test_unsorted_table_rejected(self):
        mask = BinaryBasis(0b11)
        self.assertTrue(BinaryBases([(mask, ParticleNumber(1))], np.array([1, 2], dtype=np.uint8)).is_sorted())
        with self.assertRaises(ValueError):
            BinaryBases([(mask, ParticleNumber(1))], np.array([2, 1], dtype=np.uint8))
        with self.assertRaises(ValueError):
            BinaryBases([(mask, ParticleNumber(1))], np.array([1, 1], dtype=np.uint8))

    def test_direct_product(self):
        bs1 = BinaryBases.fixed([1, 2], 1)
        bs2 = BinaryBases.fixed([3, 4, 5], 2)
        bs = bs1 @ bs2
        self.assertEqual(len(bs), len(bs1) * len(bs2))
        self.assertEqual(bs.quantum_number, ParticleNumber(3))
        self.assertTrue(np.all(np.diff(bs.reps().astype(np.int64)) > 0))
        self.assertEqual(set(bs.reps().tolist()),
                         {a.rep | b.rep for a, b in product(bs1, bs2)})
        self.assertEqual([mask.rep for mask, _ in bs.id], [0b00011, 0b11100])

        # Commutative as a set of bases, associative
        np.testing.assert_array_equal((bs2 @ bs1).reps(), bs.reps())
        bs3 = BinaryBases.unrestricted([6, 7])
        np.testing.assert_array_equal(((bs1 @ bs2) @ bs3).reps(), (bs1 @ (bs2 @ bs3)).reps())

    def test_direct_product_with_range(self):
        bs = BinaryBases.unrestricted(2) @ BinaryBases.fixed([3, 4], 1)
        self.assertEqual(bs.reps().tolist(), [0b0100, 0b0101, 0b0110, 0b0111,
                                              0b1000, 0b1001, 0b1010, 0b1011])

    def test_productable(self):
        bs = BinaryBases.fixed(3, 1)
        self.assertFalse(productable(bs, bs))
        with self.assertRaises(IncompatibleSectorsError):
            bs @ bs
        other = BinaryBases.fixed([4, 5], 1, SpinfulParticle, Sz=0.5)
        self.assertFalse(productable(bs, other))
        with self.assertRaises(IncompatibleSectorsError):
            bs.direct_product(other)
        self.assertTrue(productable(bs, BinaryBases.fixed([4, 5], 1)))

    def test_summable(self):
        bs1 = BinaryBases.fixed(3, 1)
        bs2 = BinaryBases.fixed(3, 2)
        self.assertTrue(summable(bs1, bs1))
        self.assertFalse(summable(bs1, bs1, strict=True))
        self.assertTrue(summable(bs1, bs2, strict=True))

        bs = direct_sum(bs1, bs2)
        self.assertEqual(len(bs), 6)
        self.assertTrue(np.all(np.diff(bs.reps().astype(np.int64)) > 0))
        with self.assertRaises(IncompatibleSectorsError):
            direct_sum(bs1, bs1, strict=True)

    def test_equality_and_repr(self):
        self.assertEqual(BinaryBases.fixed(3, 1), BinaryBases.fixed([1, 2, 3], 1))
        self.assertNotEqual(BinaryBases.fixed(3, 1), BinaryBases.fixed(3, 2))
        bs = BinaryBases.fixed([1, 2], 1) @ BinaryBases.fixed([3], 1)
        self.assertEqual(repr(bs), "{2^2: ParticleNumber(N=1)} ⊗ {2^1: ParticleNumber(N=1)}")
        self.assertEqual(str(bs), "{2^[1 2]: ParticleNumber(N=1)} ⊗ {2^[3]: ParticleNumber(N=1)}")


class TestHilbertSectors(unittest.TestCase):

    def setUp(self):
        self.hilbert = Hilbert.uniform([0, 1], norbital=1, nspin=2)
        self.table = orbital_table(self.hilbert)

    def test_orbital_table(self):
        self.assertEqual(self.table[FockIndex(0, 1, -0.5)], 1)
        self.assertEqual(self.table[FockIndex(1, 1, -0.5)], 2)
        self.assertEqual(self.table[FockIndex(0, 1, 0.5)], 3)
        self.assertEqual(self.table[FockIndex(1, 1, 0.5)], 4)
        by_site = orbital_table(self.hilbert, metric=("site", "orbital", "spin"))
        self.assertEqual(by_site[FockIndex(0, 1, 0.5)], 2)

    def test_unrestricted(self):
        bs = build_sector(self.hilbert)
        self.assertEqual(len(bs), 16)
        self.assertIsInstance(bs.table, BinaryBasisRange)

    def test_particle_number(self):
        bs = build_sector(self.hilbert, ParticleNumber(2))
        self.assertEqual(len(bs), comb(4, 2))
        with self.assertRaises(UndefinedQuantumNumberError):
            build_sector(self.hilbert, ParticleNumber())

    def test_spinful_fixed(self):
        bs = build_sector(self.hilbert, SpinfulParticle(N=3, Sz=0.5))
        self.assertEqual(len(bs), comb(2, 1) * comb(2, 2))
        self.assertEqual(bs.quantum_number, SpinfulParticle(3, 0.5))
        for basis in bs:
            self.assertEqual(basis.count(1, 2), 1)
            self.assertEqual(basis.count(3, 4), 2)

    def test_spinful_free_particle_number(self):
        bs = build_sector(self.hilbert, SpinfulParticle(Sz=0))
        self.assertEqual(len(bs), 1 + 4 + 1)
        self.assertTrue(np.all(np.diff(bs.reps().astype(np.int64)) > 0))
        for basis in bs:
            self.assertEqual(basis.count(1, 2), basis.count(3, 4))
        self.assertEqual(bs.quantum_number, SpinfulParticle(Sz=0))

        bs = build_sector(self.hilbert, SpinfulParticle(Sz=1))
        self.assertEqual(len(bs), 1)
        self.assertEqual(bs[0], BinaryBasis(0b1100))

    def test_spinful_errors(self):
        with self.assertRaises(UndefinedQuantumNumberError):
            build_sector(self.hilbert, SpinfulParticle(N=2))
        spinless = Hilbert.uniform([0, 1], nspin=1)
        with self.assertRaises(UnsupportedSpinConfigurationError):
            build_sector(spinless, SpinfulParticle(N=1, Sz=0.5))
        with self.assertRaises(ValueError):
            build_sector(self.hilbert, SpinfulParticle(N=1, Sz=0))


if __name__ == "__main__":
    unittest.main()
