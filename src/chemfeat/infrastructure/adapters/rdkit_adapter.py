"""Adapter between chemfeat molecular graphs and RDKit molecules."""

import logging
from typing import Any, Dict, Optional

from rdkit import Chem

from ...core.domain.models.bond import BondOrder
from ...core.domain.models.molecular_graph import MolecularGraph
from ...core.errors import ParseError

logger = logging.getLogger(__name__)

_TO_RDKIT_BOND = {
    BondOrder.SINGLE: Chem.BondType.SINGLE,
    BondOrder.DOUBLE: Chem.BondType.DOUBLE,
    BondOrder.TRIPLE: Chem.BondType.TRIPLE,
}

_FROM_RDKIT_BOND = {rdkit_type: order for order, rdkit_type in _TO_RDKIT_BOND.items()}

_TO_RDKIT_CHIRALITY = {
    "CW": Chem.ChiralType.CHI_TETRAHEDRAL_CW,
    "CCW": Chem.ChiralType.CHI_TETRAHEDRAL_CCW,
}

_FROM_RDKIT_CHIRALITY = {
    rdkit_tag: parity for parity, rdkit_tag in _TO_RDKIT_CHIRALITY.items()
}


class RDKitAdapter:
    """Converts graphs to and from RDKit for SMILES and SD-file I/O."""

    def from_mol(
        self, mol: Chem.Mol, metadata: Optional[Dict[str, Any]] = None
    ) -> MolecularGraph:
        """
        Convert an RDKit molecule to a raw MolecularGraph.

        The molecule is kekulized so that aromaticity is left for the
        normalizer to derive. Hydrogens RDKit holds as counts become
        implicit hydrogen counts; hydrogens present as atoms stay atoms.
        Isotopes and tetrahedral parity are kept. Double-bond E/Z geometry
        is not carried into the graph.

        Args:
            mol: Sanitized RDKit molecule
            metadata: Properties to attach to the graph

        Returns:
            MolecularGraph at stage RAW

        Raises:
            ParseError: If the molecule cannot be kekulized or has bonds
                other than single, double and triple
        """
        mol = Chem.Mol(mol)
        try:
            Chem.Kekulize(mol, clearAromaticFlags=True)
        except Chem.rdchem.KekulizeException as e:
            raise ParseError(f"Cannot kekulize molecule: {e}") from e

        graph = MolecularGraph(metadata=metadata)
        for atom in mol.GetAtoms():
            graph.add_atom(
                atom.GetSymbol(),
                charge=atom.GetFormalCharge(),
                implicit_hydrogens=atom.GetTotalNumHs(),
                isotope=atom.GetIsotope(),
                chirality=_FROM_RDKIT_CHIRALITY.get(atom.GetChiralTag()),
            )
        for bond in mol.GetBonds():
            order = _FROM_RDKIT_BOND.get(bond.GetBondType())
            if order is None:
                raise ParseError(f"Unsupported bond type {bond.GetBondType()}")
            graph.add_bond(bond.GetBeginAtomIdx(), bond.GetEndAtomIdx(), order)
        return graph

    def parse_smiles(
        self, smiles: str, metadata: Optional[Dict[str, Any]] = None
    ) -> MolecularGraph:
        """Parse a SMILES string into a raw MolecularGraph."""
        mol = Chem.MolFromSmiles(smiles)
        if mol is None:
            raise ParseError(f"Invalid SMILES: {smiles!r}")
        return self.from_mol(mol, metadata)

    def _is_foldable_hydrogen(self, graph: MolecularGraph, atom_id: int) -> bool:
        atom = graph.atoms[atom_id]
        if not atom.is_hydrogen or atom.isotope or atom.charge:
            return False
        neighbors = graph.neighbors(atom_id)
        return len(neighbors) == 1 and not graph.atoms[neighbors[0]].is_hydrogen

    def to_mol(self, graph: MolecularGraph) -> Chem.Mol:
        """
        Build a sanitized RDKit molecule from the graph's Kekulé structure.

        Plain hydrogen atoms attached to heavy atoms are folded back into
        hydrogen counts, so explicit and implicit forms of the same molecule
        give the same RDKit molecule and heavy-atom bond order, which the
        tetrahedral parity refers to, is kept. Isotopic hydrogens stay atoms.

        Raises:
            ParseError: If RDKit rejects the structure (e.g. valence)
        """
        folded = {
            atom.index for atom in graph.atoms
            if self._is_foldable_hydrogen(graph, atom.index)
        }
        hydrogens = {atom.index: atom.implicit_hydrogens for atom in graph.atoms}
        for hydrogen in folded:
            hydrogens[graph.neighbors(hydrogen)[0]] += 1

        rwmol = Chem.RWMol()
        position = {}
        for atom in graph.atoms:
            if atom.index in folded:
                continue
            rd_atom = Chem.Atom(atom.element)
            rd_atom.SetFormalCharge(atom.charge)
            rd_atom.SetIsotope(atom.isotope)
            rd_atom.SetNumExplicitHs(hydrogens[atom.index])
            rd_atom.SetNoImplicit(True)
            if atom.chirality is not None:
                rd_atom.SetChiralTag(_TO_RDKIT_CHIRALITY[atom.chirality])
            position[atom.index] = rwmol.AddAtom(rd_atom)
        for bond in graph.bonds:
            if bond.atom1_id in folded or bond.atom2_id in folded:
                continue
            rwmol.AddBond(
                position[bond.atom1_id],
                position[bond.atom2_id],
                _TO_RDKIT_BOND[bond.order],
            )
        mol = rwmol.GetMol()
        try:
            Chem.SanitizeMol(mol)
        except Chem.rdchem.MolSanitizeException as e:
            raise ParseError(f"Cannot build a valid molecule: {e}") from e
        Chem.AssignStereochemistry(mol, cleanIt=True, force=True)
        return mol

    def canonicalize(self, graph: MolecularGraph, isomeric: bool = True) -> str:
        """
        Canonical SMILES, identical for any two graphs of the same molecule.

        Args:
            graph: Graph in any normalization stage
            isomeric: Keep isotopes and tetrahedral stereo (absolute SMILES);
                False gives the unique SMILES of the constitution only

        Returns:
            Canonical SMILES string
        """
        return Chem.MolToSmiles(
            self.to_mol(graph), isomericSmiles=isomeric, canonical=True
        )


_DEFAULT_ADAPTER = RDKitAdapter()


def canonicalize(graph: MolecularGraph, isomeric: bool = True) -> str:
    """Canonical SMILES of a graph (see ``RDKitAdapter.canonicalize``)."""
    return _DEFAULT_ADAPTER.canonicalize(graph, isomeric)


def parse_smiles(
    smiles: str, metadata: Optional[Dict[str, Any]] = None
) -> MolecularGraph:
    """Parse SMILES into a raw graph (see ``RDKitAdapter.parse_smiles``)."""
    return _DEFAULT_ADAPTER.parse_smiles(smiles, metadata)
