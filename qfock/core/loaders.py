"""Fock operator loaders for different sources."""

from abc import ABC, abstractmethod
import logging
from typing import Dict, Optional
import numpy as np
import openfermion as of

from qfock.core.hilbert import FockIndex, Hilbert, orbital_table
from qfock.core.operator import FockOperator
from qfock.converters.openfermion_bridge import from_openfermion, mode_table

logger = logging.getLogger(__name__)


class FockOperatorLoader(ABC):
    """Abstract base for operator loaders."""

    @abstractmethod
    def load(self) -> FockOperator:
        pass

    @abstractmethod
    def table(self) -> Dict:
        """Orbital index table for the labels of the loaded operator."""
        pass


def _compress(fermion_ham: of.FermionOperator, prune_tol: float, source: str) -> of.FermionOperator:
    """Drop negligible terms, logging what was removed."""
    n_before = len(fermion_ham.terms)
    removed = [(term, coeff) for term, coeff in fermion_ham.terms.items() if abs(coeff) <= prune_tol]
    fermion_ham.compress(abs_tol=prune_tol)

    if removed:
        logger.warning(f"Removed {len(removed)} term(s) with |coeff| <= {prune_tol} from {source}:")
        for term, coeff in removed[:5]:
            logger.warning(f"  {term}: {coeff}")
        if len(removed) > 5:
            logger.warning(f"  ... and {len(removed) - 5} more")

        removal_pct = 100 * len(removed) / n_before
        if removal_pct > 50.0:
            logger.error(
                f"Removed {removal_pct:.1f}% of terms from {source}! "
                f"Check the integrals or the pruning tolerance."
            )
    return fermion_ham


class _MolecularLoader(FockOperatorLoader):
    """Shared handling of spin-orbital molecular Hamiltonians."""

    def __init__(self, filepath: str, prune_tol: float = 1e-14):
        self.filepath = filepath
        self.prune_tol = prune_tol
        self.n_modes: Optional[int] = None

    def _finish(self, interaction_op: of.InteractionOperator, metadata: Dict) -> FockOperator:
        fermion_ham = of.get_fermion_operator(interaction_op)
        fermion_ham = _compress(fermion_ham, self.prune_tol, self.filepath)
        self.n_modes = interaction_op.n_qubits
        if not of.is_hermitian(fermion_ham):
            logger.warning(f"Hamiltonian loaded from {self.filepath} is not Hermitian")

        op = from_openfermion(fermion_ham)
        op.metadata = metadata
        op.metadata['n_modes'] = self.n_modes
        return op

    def table(self) -> Dict[int, int]:
        if self.n_modes is None:
            raise RuntimeError("Call load() before requesting the orbital table")
        return mode_table(self.n_modes)


class HDF5Loader(_MolecularLoader):
    """Load a Hamiltonian from an HDF5 file (OpenFermion MolecularData format)."""

    def load(self) -> FockOperator:
        mol_data = of.MolecularData(filename=self.filepath)
        metadata = {
            'source': 'HDF5',
            'filepath': self.filepath,
            'molecule': mol_data.name if hasattr(mol_data, 'name') else None,
            'n_electrons': mol_data.n_electrons if hasattr(mol_data, 'n_electrons') else None,
            'n_orbitals': mol_data.n_orbitals if hasattr(mol_data, 'n_orbitals') else None,
        }
        return self._finish(mol_data.get_molecular_hamiltonian(), metadata)


class NPZLoader(_MolecularLoader):
    """Load a Hamiltonian from an NPZ file with spatial molecular integrals."""

    def load(self) -> FockOperator:
        data = np.load(self.filepath)

        # Try multiple key formats
        ecore = data.get("ECORE", data.get("ecore", data.get("e_nuc")))
        if ecore is None:
            raise KeyError(f"Could not find core energy in {self.filepath}. Available keys: {list(data.keys())}")
        ecore = float(ecore)

        h1 = data.get("H1", data.get("h1"))
        h2 = data.get("H2", data.get("h2"))
        if h1 is None or h2 is None:
            raise KeyError(f"Could not find integrals in {self.filepath}. Available keys: {list(data.keys())}")

        norb = data.get("NORB", data.get("norb"))
        norb = h1.shape[0] if norb is None else int(norb)

        nelec = data.get("NELEC", data.get("nelec", data.get("nelectron")))
        if nelec is None:
            raise KeyError(f"Could not find electron count in {self.filepath}. Available keys: {list(data.keys())}")
        nelec = int(nelec)

        # Chemist-ordered (pq|rs) to OpenFermion's physicist ordering in spin orbitals
        h2_reordered = 0.5 * np.asarray(h2.transpose(0, 2, 3, 1), order="C")
        h1_spinorb, h2_spinorb = of.chem.molecular_data.spinorb_from_spatial(h1, h2_reordered)

        metadata = {
            'source': 'NPZ',
            'filepath': self.filepath,
            'n_orbitals': norb,
            'n_electrons': nelec,
            'ecore': ecore,
        }
        return self._finish(of.InteractionOperator(ecore, h1_spinorb, h2_spinorb), metadata)


class FermiHubbardLoader(FockOperatorLoader):
    """Generate the Fermi-Hubbard Hamiltonian on a rectangular lattice.

    Modes are relabelled as FockIndex(site, 1, spin) so that spin-resolved
    sectors can be built from hilbert().
    """

    def __init__(
        self,
        x_dimension: int,
        y_dimension: int,
        tunneling: float = 1.0,
        coulomb: float = 4.0,
        chemical_potential: float = 0.0,
        magnetic_field: float = 0.0,
        periodic: bool = True,
        spinless: bool = False,
    ):
        self.x_dimension = x_dimension
        self.y_dimension = y_dimension
        self.tunneling = tunneling
        self.coulomb = coulomb
        self.chemical_potential = chemical_potential
        self.magnetic_field = magnetic_field
        self.periodic = periodic
        self.spinless = spinless

    @property
    def n_sites(self) -> int:
        return self.x_dimension * self.y_dimension

    def label(self, mode: int) -> FockIndex:
        """FockIndex of an OpenFermion mode (spin-up modes are even)."""
        if self.spinless:
            return FockIndex(mode, 1, 0.0)
        return FockIndex(mode // 2, 1, 0.5 if mode % 2 == 0 else -0.5)

    def hilbert(self) -> Hilbert:
        return Hilbert.uniform(range(self.n_sites), norbital=1, nspin=1 if self.spinless else 2)

    def table(self) -> Dict[FockIndex, int]:
        return orbital_table(self.hilbert())

    def load(self) -> FockOperator:
        fermion_ham = of.fermi_hubbard(
            x_dimension=self.x_dimension,
            y_dimension=self.y_dimension,
            tunneling=self.tunneling,
            coulomb=self.coulomb,
            chemical_potential=self.chemical_potential,
            magnetic_field=self.magnetic_field,
            periodic=self.periodic,
            spinless=self.spinless,
        )

        op = from_openfermion(fermion_ham, label=self.label)
        op.metadata = {
            'source': 'FermiHubbard',
            'x_dimension': self.x_dimension,
            'y_dimension': self.y_dimension,
            'tunneling': self.tunneling,
            'coulomb': self.coulomb,
            'periodic': self.periodic,
            'spinless': self.spinless,
        }
        return op
