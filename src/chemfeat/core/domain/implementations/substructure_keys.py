"""Substructure-key fingerprint in the PubChem 881-bit layout.

The catalogue is an ordered tuple of key tests, one bit each:

* bits 0-114: element counts
* bits 115-262: ring counts by size and kind, then aromatic ring counts
* bits 263-326: bonded element pairs
* bits 327-712: SMARTS patterns (atom environments, then short paths)
* bits 713-880: pairs of substituents on six- and five-membered rings

In SMARTS patterns an uppercase element symbol matches that element
whatever its aromaticity; bond symbols carry the aromatic distinction.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from itertools import combinations_with_replacement
from typing import Any, FrozenSet, List, Set, Tuple

from rdkit import Chem

from ..models.bond import BondOrder
from ..models.fingerprint import Fingerprint
from ..models.molecular_graph import MolecularGraph
from ..models.normalization_stage import NormalizationStage
from .ring_perception import find_sssr, ring_bonds

_PERIODIC_TABLE = Chem.GetPeriodicTable()

_RDKIT_BOND_TYPES = {
    BondOrder.SINGLE: Chem.BondType.SINGLE,
    BondOrder.DOUBLE: Chem.BondType.DOUBLE,
    BondOrder.TRIPLE: Chem.BondType.TRIPLE,
}


@dataclass
class KeyContext:
    """Per-molecule facts shared by all key tests."""

    element_counts: Counter
    rings: List[Tuple[int, FrozenSet[str], bool, bool]]
    bonded_pairs: Set[Tuple[str, str]]
    target: Any


@dataclass(frozen=True)
class ElementCountKey:
    element: str
    minimum: int

    def evaluate(self, context: KeyContext) -> bool:
        return context.element_counts[self.element] >= self.minimum


RING_CATEGORIES = (
    "any",
    "saturated_carbon",
    "saturated_nitrogen",
    "saturated_hetero",
    "unsaturated_carbon",
    "unsaturated_nitrogen",
    "unsaturated_hetero",
)


def _ring_in_category(elements, saturated_or_aromatic, category) -> bool:
    if category == "any":
        return True
    saturation, composition = category.split("_")
    if (saturation == "saturated") != saturated_or_aromatic:
        return False
    if composition == "carbon":
        return elements == {"C"}
    if composition == "nitrogen":
        return "N" in elements
    return bool(elements - {"C"})


@dataclass(frozen=True)
class RingCountKey:
    """At least ``minimum`` rings of ``size`` in ``category``.

    Saturated categories also admit aromatic rings; unsaturated ones are
    non-aromatic rings with at least one multiple bond.
    """

    size: int
    category: str
    minimum: int

    def evaluate(self, context: KeyContext) -> bool:
        count = sum(
            1
            for size, elements, saturated, aromatic in context.rings
            if size == self.size
            and _ring_in_category(elements, saturated or aromatic, self.category)
        )
        return count >= self.minimum


@dataclass(frozen=True)
class AromaticRingKey:
    minimum: int
    hetero: bool = False

    def evaluate(self, context: KeyContext) -> bool:
        count = sum(
            1
            for _, elements, _, aromatic in context.rings
            if aromatic and (not self.hetero or elements - {"C"})
        )
        return count >= self.minimum


@dataclass(frozen=True)
class AtomPairKey:
    first: str
    second: str

    def evaluate(self, context: KeyContext) -> bool:
        return tuple(sorted((self.first, self.second))) in context.bonded_pairs


_SMARTS_TOKEN = re.compile(r"\[([^\]]*)\]|Cl|Br|[BCNOSPFI]")


def any_aromaticity(smarts: str) -> str:
    """Rewrite uppercase element symbols as atomic-number primitives."""

    def replace(match):
        symbol = match.group(1) if match.group(1) is not None else match.group(0)
        if not symbol[0].isupper():
            return match.group(0)
        return f"[#{_PERIODIC_TABLE.GetAtomicNumber(symbol)}]"

    return _SMARTS_TOKEN.sub(replace, smarts)


@dataclass(frozen=True)
class SmartsKey:
    smarts: str
    query: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        query = Chem.MolFromSmarts(any_aromaticity(self.smarts))
        if query is None:
            raise ValueError(f"Invalid key pattern {self.smarts!r}")
        object.__setattr__(self, "query", query)

    def evaluate(self, context: KeyContext) -> bool:
        return context.target.HasSubstructMatch(self.query)


# Section 1
ELEMENT_THRESHOLDS = (
    ("H", (4, 8, 16, 32)),
    ("Li", (1, 2)),
    ("B", (1, 2, 4)),
    ("C", (2, 4, 8, 16, 32)),
    ("N", (1, 2, 4, 8)),
    ("O", (1, 2, 4, 8, 16)),
    ("F", (1, 2, 4)),
    ("Na", (1, 2)),
    ("Si", (1, 2)),
    ("P", (1, 2, 4)),
    ("S", (1, 2, 4, 8)),
    ("Cl", (1, 2, 4, 8)),
    ("K", (1, 2)),
    ("Br", (1, 2, 4)),
    ("I", (1, 2, 4)),
) + tuple(
    (element, (1,))
    for element in (
        "Be Mg Al Ca Sc Ti V Cr Mn Fe Co Ni Cu Zn Ga Ge As Se Kr Rb Sr Y Zr "
        "Nb Mo Ru Rh Pd Ag Cd In Sn Sb Te Xe Cs Ba Lu Hf Ta W Re Os Ir Pt Au "
        "Hg Tl Pb Bi La Ce Pr Nd Pm Sm Eu Gd Tb Dy Ho Er Tm Yb Tc U"
    ).split()
)

# Section 2: ring size -> thresholds
RING_THRESHOLDS = (
    (3, (1, 2)),
    (4, (1, 2)),
    (5, (1, 2, 3, 4, 5)),
    (6, (1, 2, 3, 4, 5)),
    (7, (1, 2)),
    (8, (1, 2)),
    (9, (1,)),
    (10, (1,)),
)

# Section 3
ATOM_PAIRS = (
    "Li-H Li-Li Li-B Li-C Li-O Li-F Li-P Li-S Li-Cl "
    "B-H B-B B-C B-N B-O B-F B-Si B-P B-S B-Cl B-Br "
    "C-H C-C C-N C-O C-F C-Na C-Mg C-Al C-Si C-P C-S C-Cl C-As C-Se C-Br C-I "
    "N-H N-N N-O N-F N-Si N-P N-S N-Cl N-Br "
    "O-H O-O O-Mg O-Na O-Al O-Si O-P O-K "
    "F-P F-S Al-H Al-Cl Si-H Si-Si Si-Cl P-H P-P As-H As-As"
).split()

# Section 4: simple atom nearest neighbours
NEIGHBOR_PATTERNS = (
    "C(~Br)(~C)",
    "C(~Br)(~C)(~C)",
    "C(~Br)(~[#1])",
    "C(~Br)(:C)",
    "C(~Br)(:N)",
    "C(~C)(~C)",
    "C(~C)(~C)(~C)",
    "C(~C)(~C)(~C)(~C)",
    "C(~C)(~C)(~C)(~[#1])",
    "C(~C)(~C)(~C)(~N)",
    "C(~C)(~C)(~C)(~O)",
    "C(~C)(~C)(~[#1])(~N)",
    "C(~C)(~C)(~[#1])(~O)",
    "C(~C)(~C)(~N)",
    "C(~C)(~C)(~O)",
    "C(~C)(~Cl)",
    "C(~C)(~Cl)(~[#1])",
    "C(~C)(~[#1])",
    "C(~C)(~[#1])(~N)",
    "C(~C)(~[#1])(~O)",
    "C(~C)(~[#1])(~O)(~O)",
    "C(~C)(~[#1])(~P)",
    "C(~C)(~[#1])(~S)",
    "C(~C)(~I)",
    "C(~C)(~N)",
    "C(~C)(~O)",
    "C(~C)(~S)",
    "C(~C)(~[Si])",
    "C(~C)(:C)",
    "C(~C)(:C)(:C)",
    "C(~C)(:C)(:N)",
    "C(~C)(:N)",
    "C(~C)(:N)(:N)",
    "C(~Cl)(~Cl)",
    "C(~Cl)(~[#1])",
    "C(~Cl)(:C)",
    "C(~F)(~F)",
    "C(~F)(:C)",
    "C(~[#1])(~N)",
    "C(~[#1])(~O)",
    "C(~[#1])(~O)(~O)",
    "C(~[#1])(~S)",
    "C(~[#1])(~[Si])",
    "C(~[#1])(:C)",
    "C(~[#1])(:C)(:C)",
    "C(~[#1])(:C)(:N)",
    "C(~[#1])(:N)(:N)",
    "C(~I)(:C)",
    "C(~N)(:C)",
    "C(~O)(:C)",
    "C(:C)(:C)",
    "C(:C)(:C)(:C)",
    "C(:C)(:C)(:N)",
    "C(:C)(:N)",
    "C(:C)(:N)(:N)",
    "C(:N)(:N)",
    "N(~C)(~C)",
    "N(~C)(~C)(~C)",
    "N(~C)(~C)(~[#1])",
    "N(~C)(~[#1])",
    "N(~C)(~[#1])(~N)",
    "N(~C)(~O)",
    "N(~C)(:C)",
    "N(~C)(:C)(:C)",
    "N(~[#1])(~N)",
    "N(~[#1])(:C)",
    "N(~[#1])(:C)(:C)",
    "N(~O)(~O)",
    "N(~O)(:O)",
    "N(:C)(:C)",
    "N(:C)(:C)(:C)",
    "O(~C)(~C)",
    "O(~C)(~[#1])",
    "O(~C)(~P)",
    "O(~[#1])(~S)",
    "O(:C)(:C)",
    "P(~C)(~C)",
    "P(~O)(~O)",
    "S(~C)(~C)",
    "S(~C)(~[#1])",
    "S(~C)(~O)",
    "[Si](~C)(~C)",
    "C=C",
    "C#C",
    "C=N",
    "C#N",
    "C=O",
    "C=S",
    "N=N",
)

# Section 5: detailed atom neighbourhoods
NEIGHBORHOOD_PATTERNS = (
    "N=O",
    "N=P",
    "P=O",
    "P=P",
    "C(#C)(-C)",
    "C(#C)(-[#1])",
    "C(#N)(-C)",
    "C(-C)(-C)(=C)",
    "C(-C)(-C)(=N)",
    "C(-C)(-C)(=O)",
    "C(-C)(-Cl)(=O)",
    "C(-C)(-[#1])(=C)",
    "C(-C)(-[#1])(=N)",
    "C(-C)(-[#1])(=O)",
    "C(-C)(-N)(=C)",
    "C(-C)(-N)(=N)",
    "C(-C)(-N)(=O)",
    "C(-C)(-O)(=O)",
    "C(-C)(=C)",
    "C(-C)(=N)",
    "C(-C)(=O)",
    "C(-Cl)(=O)",
    "C(-[#1])(-N)(=C)",
    "C(-[#1])(=C)",
    "C(-[#1])(=N)",
    "C(-[#1])(=O)",
    "C(-N)(=C)",
    "C(-N)(=N)",
    "C(-N)(=O)",
    "C(-O)(=O)",
    "N(-C)(=C)",
    "N(-C)(=O)",
    "N(-O)(=O)",
    "P(-O)(=O)",
    "S(-C)(=O)",
    "S(-O)(=O)",
    "S(=O)(=O)",
    "C-C-C#C",
    "O-C-C=N",
    "O-C-C=O",
    "N:C-S-[#1]",
    "N-C-C=C",
    "O=S-C-C",
    "N#C-C=C",
)

# Section 6: short paths and small ring systems
PATH_PATTERNS = (
    "C=N-N-C",
    "O=S-C-N",
    "S-S-C:C",
    "C:C-C=C",
    "S:C:C:C",
    "C:N:C-C",
    "S-C:N:C",
    "S:C:C:N",
    "S-C=N-C",
    "C-O-C=C",
    "N-N-C:C",
    "S-C=N-[#1]",
    "S-C-S-C",
    "C:S:C-C",
    "O-S-C:C",
    "C:N-C:C",
    "N-S-C:C",
    "N-C:N:C",
    "N:C:C:N",
    "N-C:N:N",
    "N-C=N-C",
    "N-C=N-[#1]",
    "N-C-S-C",
    "C-C-C=C",
    "C-N:C-[#1]",
    "N-C:O:C",
    "O=C-C:C",
    "O=C-C:N",
    "C-N-C:C",
    "N:N-C-[#1]",
    "O-C:C-N",
    "O-C=C-C",
    "N-C:C-N",
    "C-S-C:C",
    "Cl-C:C-C",
    "N-C=C-[#1]",
    "Cl-C:C-[#1]",
    "N:C:N-C",
    "Cl-C:C-O",
    "C-C:N:C",
    "C-C-S-C",
    "S=C-N-C",
    "Br-C:C:C",
    "[#1]-N-N-[#1]",
    "S=C-N-[#1]",
    "C-[As]-O-[#1]",
    "S:C:C-[#1]",
    "O-N-C-C",
    "N-N-C-C",
    "[#1]-C=C-[#1]",
    "N-N-C-N",
    "O=C-N-N",
    "N=C-N-C",
    "C=C-C:C",
    "C:N-C-[#1]",
    "C-N-N-[#1]",
    "N:C:C-C",
    "C-C=C-C",
    "[As]-C:C-[#1]",
    "Cl-C:C-Cl",
    "C:C:N-[#1]",
    "[#1]-N-C-[#1]",
    "Cl-C-C-Cl",
    "N:C-C:C",
    "S-C:C-C",
    "S-C:C-[#1]",
    "S-C:C-N",
    "S-C:C-O",
    "O=C-C-C",
    "O=C-C-N",
    "O=C-C-O",
    "N=C-C-C",
    "N=C-C-[#1]",
    "C-N-C-[#1]",
    "O-C:C-C",
    "O-C:C-[#1]",
    "O-C:C-O",
    "N-C:C-C",
    "N-C:C-[#1]",
    "C-C-C:C",
    "C-C-C-C",
    "O-C-C-C",
    "O-C-C-O",
    "O-C-C-N",
    "N-C-C-N",
    "N-C-C-C",
    "Cl-C-C-C",
    "Br-C-C-C",
    "F-C-C-C",
    "I-C-C-C",
    "S-C-C-C",
    "S-C-C-N",
    "S-C-C-O",
    "P-C-C-C",
    "O-P-O-C",
    "O=P-O-C",
    "O=P-O-[#1]",
    "O=S-O-C",
    "O=S-O-[#1]",
    "O=S-N-C",
    "O=S-N-[#1]",
    "O=S-C:C",
    "O=N-C-C",
    "O=N-O-C",
    "O=C-O-C",
    "O=C-O-[#1]",
    "O=C-N-C",
    "O=C-N-[#1]",
    "O=C-C=C",
    "O=C-C=O",
    "O=C-C#N",
    "O=C-S-C",
    "S=C-S-C",
    "S=C-O-C",
    "N#C-C-C",
    "N#C-C:C",
    "N#C-N-C",
    "C#C-C-C",
    "C#C-C:C",
    "C=C-C=C",
    "C=C-C-C",
    "C=C-C-O",
    "C=C-C-N",
    "C=C-O-C",
    "C=C-N-C",
    "C=C-S-C",
    "C=N-O-C",
    "C=N-O-[#1]",
    "C=N-N-[#1]",
    "C=N-C:C",
    "N=N-C:C",
    "N=N-C-C",
    "N-N-N-C",
    "N-N=N-C",
    "Cl-C=C-C",
    "Br-C=C-C",
    "F-C-C-F",
    "F-C:C-C",
    "F-C:C-[#1]",
    "Br-C:C-[#1]",
    "I-C:C-[#1]",
    "C-C:C:C",
    "C-C:C-C",
    "O-C:C:C",
    "N-C:C:C",
    "N:C:N:C",
    "N:C-N-C",
    "N:C-N-[#1]",
    "N:C-O-C",
    "N:C-O-[#1]",
    "N:C-S-C",
    "N:N:C:C",
    "O:C:C:C",
    "O:C:C-C",
    "O:C:C-[#1]",
    "S:C:C-C",
    "C:C:C:C",
    "C:C-C:C",
    "C:C:C-[#1]",
    "[#1]-O-C:C",
    "[#1]-O-C-C",
    "[#1]-O-C=O",
    "[#1]-N-C:C",
    "[#1]-N-C=O",
    "[#1]-N-C=S",
    "[#1]-S-C-C",
    "[#1]-S-C:C",
    "[#1]-C-C-[#1]",
    "[#1]-C:C-[#1]",
    "[Si]-C-C-C",
    "[Si]-O-C-C",
    "[Si]-O-[Si]-C",
    "C-C-C-C-C",
    "O-C-C-C-C",
    "N-C-C-C-C",
    "O=C-C-C-C",
    "O=C-C-C=O",
    "O=C-N-C=O",
    "O=C-N-C-C",
    "O=C-O-C-C",
    "O=C-C-C-N",
    "O=C-C-N-C",
    "N-C-C-C-N",
    "O-C-C-C-O",
    "O-C-C-C-N",
    "N-C-C-O-C",
    "O-C-O-C-C",
    "C-O-C-C-O",
    "C-N-C-C-N",
    "C-C-N-C-C",
    "C-C-O-C-C",
    "C-C-S-C-C",
    "C=C-C=C-C",
    "C=C-C-C-C",
    "C-C=C-C-C",
    "C:C-C-C-C",
    "C:C-C-C:C",
    "C:C-O-C:C",
    "C:C-N-C:C",
    "C:C-S-C:C",
    "C:C-C=O",
    "C:C-N-C=O",
    "C:C-O-C=O",
    "C:C-S(=O)(=O)-N",
    "C-S(=O)(=O)-N",
    "C-S(=O)(=O)-O",
    "C-S(=O)(=O)-C",
    "C-P(=O)(-O)-O",
    "O-P(=O)(-O)-O",
    "C-C(=O)-C-C(=O)-C",
    "O=C-C=C-C",
    "O=C-C=C-N",
    "O=C-C=C-O",
    "N-C=C-C=O",
    "N-C(=N)-N",
    "N-C(=O)-N",
    "N-C(=S)-N",
    "N-C(=O)-O",
    "O-C(=O)-O",
    "C-C1-C-C1",
    "C-C1-C-C-C1",
    "C-C1-C-C-C-C1",
    "O-C1-C-C-C-C1",
    "N-C1-C-C-C-C1",
    "C-C:1:C:C:C:C:1",
    "O-C:1:C:C:C:C:1",
    "N-C:1:C:C:C:C:1",
    "C-N1-C-C-C-C1",
    "C-N1-C-C-C-C-C1",
    "C-N1-C-C-N-C-C1",
    "C-N1-C-C-O-C-C1",
    "C1-C-O-C-O1",
    "C1-C-O-C-C-O1",
    "C1-C-N-C-N1",
    "C1=C-N-C=C1",
    "C1=C-O-C=C1",
    "C1=C-S-C=C1",
    "O=C1-C-C-C-N1",
    "O=C1-C-C-C-O1",
    "O=C1-C-C-C-C1",
    "O=C1-C-C-C-C-C1",
    "O=C1-C=C-C(=O)-C=C1",
    "C:1:C:C:2:C(:C:1):C:C:C:2",
    "C:1:C:C:2:C(:C:1):N:C:C:2",
    "C:1:C:C:2:C(:C:1):C:C:N:2",
    "C:1:C:C:2:C(:C:1):N:C:N:2",
    "C:1:C:C:2:C(:C:1):O:C:C:2",
    "C:1:C:C:2:C(:C:1):S:C:C:2",
    "C:1:C:C:2:C(:C:1):N:C:C:C:2",
    "C:1:C:C:2:C(:C:1):C:C:C:C:2",
    "C:1:C:N:C:N:C:1",
    "C:1:N:C:N:C:1",
    "C:1:C:N:N:C:1",
)

# Section 7: disubstituted rings
RING_SUBSTITUENTS = ("C", "N", "O", "S", "Cl", "Br")
RING_TEMPLATES = (
    "{0}-c1ccc(-{1})cc1",
    "{0}-c1cc(-{1})ccc1",
    "{0}-c1c(-{1})cccc1",
    "{0}-C1-C-C-C(-{1})-C-C-1",
    "{0}-C1-C-C(-{1})-C-C-C-1",
    "{0}-C1-C(-{1})-C-C-C-C-1",
    "{0}-C1-C-C(-{1})-C-C-1",
    "{0}-C1-C(-{1})-C-C-C-1",
)


def _build_catalogue() -> tuple:
    keys = []
    for element, minimums in ELEMENT_THRESHOLDS:
        keys.extend(ElementCountKey(element, m) for m in minimums)
    for size, minimums in RING_THRESHOLDS:
        for minimum in minimums:
            keys.extend(RingCountKey(size, c, minimum) for c in RING_CATEGORIES)
    for minimum in (1, 2, 3, 4):
        keys.append(AromaticRingKey(minimum))
        keys.append(AromaticRingKey(minimum, hetero=True))
    keys.extend(AtomPairKey(*pair.split("-")) for pair in ATOM_PAIRS)
    for pattern in NEIGHBOR_PATTERNS + NEIGHBORHOOD_PATTERNS + PATH_PATTERNS:
        keys.append(SmartsKey(pattern))
    for template in RING_TEMPLATES:
        for first, second in combinations_with_replacement(RING_SUBSTITUENTS, 2):
            keys.append(SmartsKey(template.format(first, second)))
    return tuple(keys)


CATALOGUE = _build_catalogue()
FINGERPRINT_LENGTH = len(CATALOGUE)
AROMATIC_RING_BIT = next(
    i for i, key in enumerate(CATALOGUE) if key == AromaticRingKey(1)
)


def build_context(graph: MolecularGraph, target) -> KeyContext:
    """
    Gather the facts the key tests read.

    Args:
        graph: Normalized graph
        target: RDKit molecule mirroring the graph for SMARTS matching

    Returns:
        KeyContext for the molecule
    """
    element_counts = Counter(atom.element for atom in graph.atoms)
    rings = []
    for ring in find_sssr(graph):
        bonds = ring_bonds(graph, ring)
        elements = frozenset(graph.atoms[i].element for i in ring)
        aromatic = all(bond.aromatic for bond in bonds)
        saturated = all(
            bond.order == BondOrder.SINGLE and not bond.aromatic for bond in bonds
        )
        rings.append((len(ring), elements, saturated, aromatic))
    bonded_pairs = {
        tuple(sorted((graph.atoms[b.atom1_id].element, graph.atoms[b.atom2_id].element)))
        for b in graph.bonds
    }
    return KeyContext(element_counts, rings, bonded_pairs, target)


class SubstructureKeyFingerprinter:
    """Evaluates the key catalogue against a normalized graph."""

    kind = "substructure_keys"

    def __init__(self, catalogue: tuple = CATALOGUE):
        self.catalogue = catalogue

    @property
    def length(self) -> int:
        return len(self.catalogue)

    def _create_rdkit_mol(self, graph: MolecularGraph) -> Chem.Mol:
        """Mirror the graph atom for atom as an RDKit molecule.

        Hydrogens stay atoms and aromatic flags come from the graph, so the
        SMARTS tests see the state the normalizer produced rather than
        RDKit's own perception.
        """
        rwmol = Chem.RWMol()
        for atom in graph.atoms:
            rdatom = Chem.Atom(atom.element)
            rdatom.SetFormalCharge(atom.charge)
            rdatom.SetNoImplicit(True)
            rdatom.SetNumExplicitHs(atom.implicit_hydrogens)
            rdatom.SetIsAromatic(bool(atom.aromatic))
            rwmol.AddAtom(rdatom)

        for bond in graph.bonds:
            if bond.aromatic:
                count = rwmol.AddBond(bond.atom1_id, bond.atom2_id, Chem.BondType.AROMATIC)
                rwmol.GetBondWithIdx(count - 1).SetIsAromatic(True)
            else:
                rwmol.AddBond(bond.atom1_id, bond.atom2_id, _RDKIT_BOND_TYPES[bond.order])

        mol = rwmol.GetMol()
        mol.UpdatePropertyCache(strict=False)
        Chem.FastFindRings(mol)
        return mol

    def fingerprint(self, graph: MolecularGraph) -> Fingerprint:
        """
        Substructure-key fingerprint of a normalized graph.

        Args:
            graph: Graph at stage AROMATICITY_APPLIED

        Returns:
            Fingerprint with one bit per catalogue entry

        Raises:
            PreconditionViolation: If the graph is not fully normalized
        """
        graph.require_stage(
            NormalizationStage.AROMATICITY_APPLIED, "Substructure-key fingerprint"
        )
        context = build_context(graph, self._create_rdkit_mol(graph))
        bits = [i for i, key in enumerate(self.catalogue) if key.evaluate(context)]
        return Fingerprint.from_indices(bits, self.length, self.kind)
