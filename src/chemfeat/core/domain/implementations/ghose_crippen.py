"""Ghose-Crippen atom classification for group-contribution LogP and MR.

Atoms are sorted into the numbered Ghose-Crippen categories (C1-C44,
H46-H54, O56-O63, N66-N79, halogens 81-100, S106-S110, P115-P120) from
element, hybridization, aromaticity and the nature of their neighbours.
``R`` below denotes a neighbour bonded through carbon, ``X`` a heteroatom
neighbour.
"""

from typing import Dict, List, Tuple

from ...errors import UnsupportedAtomError
from ..models.bond import BondOrder
from ..models.molecular_graph import MolecularGraph

# category -> (LogP contribution, molar refractivity contribution)
CONTRIBUTIONS: Dict[int, Tuple[float, float]] = {
    1: (-1.5603, 2.968),
    2: (-1.012, 2.9116),
    3: (-0.6681, 2.8028),
    4: (-0.3698, 2.6205),
    5: (-1.788, 3.015),
    6: (-1.2486, 2.9244),
    7: (-1.0305, 2.6999),
    8: (-0.6805, 2.5498),
    9: (-0.3858, 2.3141),
    10: (0.7555, 2.1133),
    11: (-0.2849, 2.4729),
    12: (0.02, 2.3541),
    13: (0.7894, 2.0868),
    14: (1.6422, 1.9536),
    15: (-0.7866, 3.6125),
    16: (-0.3962, 3.4614),
    17: (0.0383, 3.2855),
    18: (-0.8051, 3.1832),
    19: (-0.2129, 3.1254),
    20: (0.2432, 2.9636),
    21: (0.4697, 3.7132),
    22: (0.2952, 3.0132),
    23: (0.0, 2.7845),
    24: (-0.3251, 3.3559),
    25: (0.1492, 3.2815),
    26: (0.1539, 3.0734),
    27: (0.0005, 3.1112),
    28: (0.2361, 3.0133),
    29: (0.3514, 2.8918),
    30: (0.1814, 2.9418),
    31: (0.0901, 2.8714),
    32: (0.5142, 2.7128),
    36: (-0.132, 3.0734),
    37: (-0.0244, 3.0734),
    38: (-0.2405, 2.9093),
    39: (-0.0909, 2.8413),
    40: (-0.1002, 2.6779),
    41: (0.4182, 2.6279),
    46: (0.7341, 0.8447),
    47: (0.6301, 0.8939),
    48: (0.518, 0.8001),
    50: (-0.1036, 0.8001),
    51: (0.5234, 0.8447),
    52: (0.6666, 0.8939),
    53: (0.5372, 0.8005),
    54: (0.6338, 0.832),
    56: (-0.3567, 1.6223),
    57: (-0.0127, 1.4713),
    58: (-0.0233, 1.7188),
    59: (-0.1541, 1.3999),
    60: (0.0324, 1.6005),
    61: (1.052, 1.8088),
    62: (-0.7941, 1.5908),
    63: (0.4165, 1.6322),
    66: (-0.5427, 2.6321),
    67: (-0.3168, 2.5813),
    68: (0.0132, 2.4531),
    69: (-0.3883, 2.8152),
    70: (-0.0389, 2.6911),
    71: (0.1087, 2.5728),
    72: (-0.5113, 2.5004),
    73: (0.1259, 2.7263),
    74: (0.1349, 2.3745),
    75: (-0.1624, 2.5216),
    76: (-2.0585, 3.0195),
    77: (-1.915, 2.9631),
    78: (0.4208, 2.8543),
    79: (-1.4439, 2.2452),
    81: (0.4797, 0.9926),
    82: (0.2358, 0.8712),
    83: (0.1029, 0.8371),
    84: (0.3566, 1.0006),
    85: (0.1988, 0.9226),
    86: (0.7443, 5.5549),
    87: (0.5337, 5.7244),
    88: (0.2996, 5.6419),
    89: (0.8155, 5.2931),
    90: (0.4856, 5.5139),
    91: (0.8888, 8.4185),
    92: (0.7452, 8.4466),
    93: (0.5034, 8.3219),
    94: (0.8995, 8.4124),
    95: (0.5946, 8.2803),
    96: (1.4201, 13.8857),
    97: (1.1472, 13.8204),
    98: (0.0, 13.7001),
    99: (0.7293, 13.6602),
    100: (0.7173, 13.7462),
    106: (-0.2868, 7.9823),
    107: (-0.1255, 7.9823),
    108: (-0.1293, 9.1136),
    109: (-0.0307, 6.7584),
    110: (-0.2868, 5.5937),
    115: (-0.4151, 5.5571),
    116: (-0.9359, 5.5152),
    117: (-0.1726, 6.836),
    118: (-0.7966, 10.0101),
    119: (0.6705, 5.2806),
    120: (-0.4801, 6.8742),
}

_HALOGEN_BASE = {"F": 81, "Cl": 86, "Br": 91, "I": 96}


def _is_hetero(graph: MolecularGraph, atom_id: int) -> bool:
    return graph.atoms[atom_id].element not in ("C", "H")


def _heavy_neighbors(graph: MolecularGraph, atom_id: int) -> List[int]:
    return [n for n in graph.neighbors(atom_id) if not graph.atoms[n].is_hydrogen]


def _double_partners(graph: MolecularGraph, atom_id: int) -> List[int]:
    return [
        bond.other(atom_id)
        for bond in graph.bonds_of(atom_id)
        if bond.order == BondOrder.DOUBLE and not bond.aromatic
    ]


def _has_triple(graph: MolecularGraph, atom_id: int) -> bool:
    return any(b.order == BondOrder.TRIPLE for b in graph.bonds_of(atom_id))


def _hybridization(graph: MolecularGraph, atom_id: int) -> str:
    if graph.atoms[atom_id].aromatic:
        return "sp2"
    orders = [bond.order for bond in graph.bonds_of(atom_id)]
    if BondOrder.TRIPLE in orders or orders.count(BondOrder.DOUBLE) >= 2:
        return "sp"
    if BondOrder.DOUBLE in orders:
        return "sp2"
    return "sp3"


def _is_acyl(graph: MolecularGraph, atom_id: int) -> bool:
    """Carbon carrying a non-aromatic double bond to a heteroatom."""
    return graph.atoms[atom_id].element == "C" and any(
        _is_hetero(graph, p) for p in _double_partners(graph, atom_id)
    )


def _classify_aromatic_carbon(graph: MolecularGraph, atom_id: int) -> int:
    ring_partners = []
    substituents = []
    for bond in graph.bonds_of(atom_id):
        partner = bond.other(atom_id)
        if bond.aromatic:
            ring_partners.append(partner)
        elif not graph.atoms[partner].is_hydrogen:
            substituents.append(partner)

    hetero_in_ring = min(2, sum(1 for p in ring_partners if _is_hetero(graph, p)))
    if substituents:
        substituent = "X" if _is_hetero(graph, substituents[0]) else "R"
    elif graph.hydrogen_count(atom_id):
        substituent = "H"
    else:
        # ring fusion atom
        substituent = "R"
    offset = {"H": 0, "R": 1, "X": 2}[substituent]
    return 24 + 3 * hetero_in_ring + offset


def _classify_carbon(graph: MolecularGraph, atom_id: int) -> int:
    if graph.atoms[atom_id].aromatic:
        return _classify_aromatic_carbon(graph, atom_id)

    heavy = _heavy_neighbors(graph, atom_id)
    hydrogens = graph.hydrogen_count(atom_id)

    if _has_triple(graph, atom_id):
        partner = next(
            b.other(atom_id)
            for b in graph.bonds_of(atom_id)
            if b.order == BondOrder.TRIPLE
        )
        if _is_hetero(graph, partner):
            return 40
        others = [n for n in heavy if n != partner]
        if not others:
            return 21
        return 23 if _is_hetero(graph, others[0]) else 22

    doubles = _double_partners(graph, atom_id)
    if len(doubles) >= 2:
        return 40 if all(_is_hetero(graph, p) for p in doubles) else 22

    if doubles:
        partner = doubles[0]
        others = [n for n in heavy if n != partner]
        hetero = sum(1 for n in others if _is_hetero(graph, n))
        if _is_hetero(graph, partner):
            if hetero >= 2:
                return 41
            if hetero == 1:
                return 40
            aryl = any(graph.atoms[n].aromatic for n in others)
            if hydrogens:
                return 37 if aryl else 36
            return 39 if aryl else 38
        if hydrogens >= 2:
            return 15
        if hydrogens == 1:
            return 18 if hetero else 16
        return {0: 17, 1: 19}.get(hetero, 20)

    hetero = sum(1 for n in heavy if _is_hetero(graph, n))
    if hydrogens >= 3:
        return 5 if hetero else 1
    if hydrogens == 2:
        return {0: 2, 1: 6}.get(hetero, 7)
    if hydrogens == 1:
        return {0: 3, 1: 8, 2: 9}.get(hetero, 10)
    return {0: 4, 1: 11, 2: 12, 3: 13}.get(hetero, 14)


def _classify_hydrogen(graph: MolecularGraph, atom_id: int) -> int:
    neighbors = graph.neighbors(atom_id)
    if not neighbors:
        return 46
    parent = neighbors[0]
    element = graph.atoms[parent].element

    if element == "C":
        hetero = sum(1 for n in graph.neighbors(parent) if _is_hetero(graph, n))
        hybridization = _hybridization(graph, parent)
        if hetero == 0:
            if hybridization == "sp3" and any(
                graph.atoms[n].aromatic or _is_acyl(graph, n) or _has_triple(graph, n)
                for n in _heavy_neighbors(graph, parent)
            ):
                return 51
            return 46
        if hybridization == "sp3":
            return {1: 52, 2: 53}.get(hetero, 54)
        return 53 if hetero == 1 else 54
    if element == "O":
        carbons = [n for n in _heavy_neighbors(graph, parent) if graph.atoms[n].element == "C"]
        if carbons and all(_hybridization(graph, c) == "sp3" for c in carbons):
            return 47
        return 50
    if element == "N":
        return 48
    return 50


def _classify_oxygen(graph: MolecularGraph, atom_id: int) -> int:
    atom = graph.atoms[atom_id]
    if atom.charge < 0:
        return 62
    doubles = _double_partners(graph, atom_id)
    if doubles:
        partner = graph.atoms[doubles[0]]
        return 61 if partner.element == "N" and partner.charge > 0 else 58
    if atom.charge > 0:
        return 61

    heavy = _heavy_neighbors(graph, atom_id)
    if graph.hydrogen_count(atom_id):
        if not heavy:
            return 56
        neighbor = heavy[0]
        if graph.atoms[neighbor].element == "C" and _hybridization(graph, neighbor) == "sp3":
            return 56
        return 57
    if any(graph.atoms[n].element == "O" for n in heavy):
        return 63
    if atom.aromatic:
        return 60
    if any(_is_acyl(graph, n) for n in heavy):
        return 60
    if any(graph.atoms[n].aromatic for n in heavy):
        return 60
    return 59


def _classify_nitrogen(graph: MolecularGraph, atom_id: int) -> int:
    atom = graph.atoms[atom_id]
    heavy = _heavy_neighbors(graph, atom_id)
    hydrogens = graph.hydrogen_count(atom_id)

    if atom.atom_type == "N.nitro":
        carbons = [n for n in heavy if graph.atoms[n].element == "C"]
        return 76 if carbons and graph.atoms[carbons[0]].aromatic else 77
    if atom.charge > 0:
        return 79
    if atom.aromatic:
        return 73 if hydrogens or len(heavy) >= 3 else 75
    if _has_triple(graph, atom_id):
        return 74
    doubles = _double_partners(graph, atom_id)
    if doubles:
        others = [n for n in heavy if n not in doubles]
        if _is_hetero(graph, doubles[0]) or any(_is_hetero(graph, n) for n in others):
            return 78
        if any(graph.atoms[n].aromatic for n in others):
            return 78
        return 74

    if atom.atom_type == "N.amide" or any(
        _is_hetero(graph, n) and _double_partners(graph, n) for n in heavy
    ):
        return 72
    aryl = sum(1 for n in heavy if graph.atoms[n].aromatic)
    hetero = sum(1 for n in heavy if _is_hetero(graph, n))
    if hydrogens >= 2:
        return 69 if aryl or hetero else 66
    if hydrogens == 1:
        if aryl >= 2:
            return 73
        return 70 if aryl else 67
    if aryl >= 2:
        return 73
    return 71 if aryl else 68


def _classify_halogen(graph: MolecularGraph, atom_id: int) -> int:
    base = _HALOGEN_BASE[graph.atoms[atom_id].element]
    heavy = _heavy_neighbors(graph, atom_id)
    if not heavy or graph.atoms[heavy[0]].element != "C":
        return base + 4
    parent = heavy[0]
    hetero = sum(1 for n in graph.neighbors(parent) if _is_hetero(graph, n))
    hybridization = _hybridization(graph, parent)
    if hybridization == "sp3":
        return base + {1: 0, 2: 1, 3: 2}.get(hetero, 4)
    if hybridization == "sp2" and hetero == 1:
        return base + 3
    return base + 4


def _classify_sulfur(graph: MolecularGraph, atom_id: int) -> int:
    atom = graph.atoms[atom_id]
    if atom.aromatic:
        return 107
    if atom.atom_type == "S.onyl":
        return 110
    if atom.atom_type == "S.inyl":
        return 109
    if atom.atom_type == "S.2":
        return 108
    if graph.hydrogen_count(atom_id) or atom.charge < 0:
        return 106
    return 107


def _classify_phosphorus(graph: MolecularGraph, atom_id: int) -> int:
    doubles = _double_partners(graph, atom_id)
    singles = [
        n
        for n in _heavy_neighbors(graph, atom_id)
        if n not in doubles
    ]
    hetero = sum(1 for n in singles if _is_hetero(graph, n))

    if not doubles:
        # PX3 phosphite, otherwise PR3 phosphine
        return 118 if singles and hetero == len(singles) else 119
    if not _is_hetero(graph, doubles[0]):
        # P=C ylid
        return 115
    if hetero >= 3:
        return 117
    if hetero == 2:
        return 120
    return 116


_CLASSIFIERS = {
    "C": _classify_carbon,
    "H": _classify_hydrogen,
    "O": _classify_oxygen,
    "N": _classify_nitrogen,
    "F": _classify_halogen,
    "Cl": _classify_halogen,
    "Br": _classify_halogen,
    "I": _classify_halogen,
    "S": _classify_sulfur,
    "P": _classify_phosphorus,
}


def classify_atom(graph: MolecularGraph, atom_id: int) -> int:
    """
    Ghose-Crippen category of one atom.

    Args:
        graph: Graph with explicit hydrogens, atom types and aromaticity
        atom_id: Atom to classify

    Returns:
        Category number, a key of ``CONTRIBUTIONS``

    Raises:
        UnsupportedAtomError: If the element has no Ghose-Crippen category
    """
    element = graph.atoms[atom_id].element
    classifier = _CLASSIFIERS.get(element)
    if classifier is None:
        raise UnsupportedAtomError(
            f"No Ghose-Crippen category for element {element} (atom {atom_id})"
        )
    return classifier(graph, atom_id)


def contributions(graph: MolecularGraph) -> Tuple[float, float]:
    """Summed LogP and molar refractivity over all atoms."""
    logp = refractivity = 0.0
    for atom in graph.atoms:
        category_logp, category_mr = CONTRIBUTIONS[classify_atom(graph, atom.index)]
        logp += category_logp
        refractivity += category_mr
    return logp, refractivity
