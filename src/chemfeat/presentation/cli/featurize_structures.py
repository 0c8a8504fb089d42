"""Command-line interface for molecular feature extraction."""

import argparse
import csv
import logging
import sys
from typing import Dict, List, Optional, TextIO

from tqdm import tqdm

from ...core.config import FeaturizationSettings
from ...core.errors import FeaturizationError
from ...core.services.descriptor_service import DescriptorKind
from ...core.services.featurization_service import FeatureRecord, FeaturizationService
from ...core.services.fingerprint_service import FingerprintKind
from ...infrastructure.adapters.rdkit_adapter import RDKitAdapter
from ...infrastructure.repositories.structure_repository import StructureRepository

logger = logging.getLogger(__name__)

DEFAULT_ID_PROPERTY = "COCONUT_ID"

STRUCTURE_COLUMNS = [
    "CanonicalSMILES",
    "UniqueSMILES",
    "MolecularWeight",
    "AtomCount",
    "ImplicitHydrogens",
    "AtomCountExplicitH",
]


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="Compute descriptors and fingerprints for molecules"
    )
    parser.add_argument("input", help="SD file (.sdf, .sd) or SMILES file (.smi)")
    parser.add_argument(
        "--output", help="CSV file for results (default: standard output)"
    )
    parser.add_argument(
        "--query", help="SMILES of a reference molecule for Tanimoto similarity"
    )
    parser.add_argument(
        "--radius", type=int, default=3, help="Circular fingerprint radius"
    )
    parser.add_argument(
        "--length", type=int, default=1024, help="Circular fingerprint length in bits"
    )
    parser.add_argument(
        "--workers", type=int, default=1, help="Number of worker processes"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop at the first unreadable record instead of skipping it",
    )
    parser.add_argument(
        "--id-property",
        default=DEFAULT_ID_PROPERTY,
        help="Record property copied to the output as the molecule identifier",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def record_columns(
    settings: FeaturizationSettings,
    with_query: bool,
    id_property: str = DEFAULT_ID_PROPERTY,
) -> List[str]:
    """CSV header for records produced with the given settings."""
    columns = ["Name", id_property] + STRUCTURE_COLUMNS
    for kind in settings.descriptors:
        columns.extend(kind.labels)
    columns.extend(kind.label for kind in settings.fingerprints)
    if with_query:
        columns.extend(f"Tanimoto_{kind.label}" for kind in settings.fingerprints)
    columns.append("Failures")
    return columns


def record_row(
    record: FeatureRecord, id_property: str = DEFAULT_ID_PROPERTY
) -> Dict[str, object]:
    row: Dict[str, object] = {
        "Name": record.name,
        id_property: record.metadata.get(id_property, ""),
        "CanonicalSMILES": record.canonical_smiles or "",
        "UniqueSMILES": record.unique_smiles or "",
        "MolecularWeight": (
            f"{record.molecular_weight:.4f}"
            if record.molecular_weight is not None
            else ""
        ),
        "AtomCount": record.atom_count,
        "ImplicitHydrogens": record.implicit_hydrogen_count,
        "AtomCountExplicitH": record.explicit_atom_count,
    }
    row.update(record.descriptors.values)
    for kind, fingerprint in record.fingerprints.items():
        row[kind.label] = " ".join(str(bit) for bit in fingerprint.on_bits())
    for kind, score in record.similarity.items():
        row[f"Tanimoto_{kind.label}"] = f"{score:.4f}"
    row["Failures"] = "; ".join(
        f"{name}: {message}" for name, message in sorted(record.failures.items())
    )
    return row


def write_records(
    records,
    handle: TextIO,
    settings: FeaturizationSettings,
    with_query: bool,
    id_property: str = DEFAULT_ID_PROPERTY,
) -> int:
    """Write records as CSV and return how many were written."""
    writer = csv.DictWriter(
        handle, fieldnames=record_columns(settings, with_query, id_property), restval=""
    )
    writer.writeheader()
    count = 0
    for record in records:
        writer.writerow(record_row(record, id_property))
        count += 1
    return count


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the featurization CLI."""
    parser = setup_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = FeaturizationSettings(
            circular_radius=args.radius,
            circular_length=args.length,
            skip_on_error=not args.strict,
            workers=args.workers,
            descriptors=tuple(DescriptorKind),
            fingerprints=tuple(FingerprintKind),
            query_smiles=args.query,
        )
    except ValueError as e:
        parser.error(str(e))

    adapter = RDKitAdapter()
    query = None
    if settings.query_smiles:
        try:
            query = adapter.parse_smiles(settings.query_smiles)
        except FeaturizationError as e:
            parser.error(f"Invalid query: {e}")

    try:
        repository = StructureRepository(args.input, skip_on_error=settings.skip_on_error)
    except FeaturizationError as e:
        parser.error(str(e))

    logger.debug("Settings: %s", settings.to_dict())
    service = FeaturizationService(settings, adapter.canonicalize, query)
    graphs = (graph for graph, _ in repository)
    records = tqdm(
        service.featurize_all(graphs, settings.workers),
        desc="Featurizing",
        unit="mol",
        disable=args.output is None,
    )

    try:
        if args.output:
            with open(args.output, "w", newline="") as handle:
                count = write_records(
                    records, handle, settings, query is not None, args.id_property
                )
        else:
            count = write_records(
                records, sys.stdout, settings, query is not None, args.id_property
            )
    except FeaturizationError as e:
        logger.error("Featurization stopped: %s", e)
        return 1

    logger.info("Featurized %d molecules from %s", count, args.input)
    return 0


if __name__ == "__main__":
    sys.exit(main())
