"""
CLI command entry points for dpe_matcher.

These functions are registered as console scripts in pyproject.toml.
Results are printed to stdout (plain text or --json); logs go to stderr.

Exit codes: 0 success, 1 upstream failure, 2 invalid input.
"""

import argparse
import json
import sys
from pathlib import Path

from dpe_matcher.domain.models import Coordinate, PropertyDescriptor
from dpe_matcher.errors import AcquisitionError, PreconditionError, UpstreamError
from dpe_matcher.matching.classifier import classify_exact_match
from dpe_matcher.proximity.ranker import find_nearby_certificates
from dpe_matcher.sources.normalization import is_department_code

EXIT_OK = 0
EXIT_UPSTREAM = 1
EXIT_INVALID = 2


def _department(value: str) -> str:
    value = value.strip().upper()
    if len(value) == 1 and value.isdigit():
        value = value.zfill(2)
    if not is_department_code(value):
        raise argparse.ArgumentTypeError(f"not a department code: {value!r}")
    return value


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    parser.add_argument("--log-dir", type=Path, help="Also write a debug log file here")


def build_classify_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dpe-classify",
        description="Find the DPE certificate of a cadastral property",
    )
    parser.add_argument("--department", "-d", type=_department, help="Department code (e.g. 75)")
    parser.add_argument("--commune", "-c", help="Commune name")
    parser.add_argument("--section", help="Cadastral section (e.g. AB)")
    parser.add_argument("--numero", help="Cadastral parcel number")
    parser.add_argument("--cadastral-id", help="Caller-side identifier, used in logs")
    _add_common_arguments(parser)
    return parser


def build_nearby_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dpe-nearby",
        description="List DPE certificates of a postal code, nearest first",
    )
    parser.add_argument("--postal-code", "-p", required=True, help="Postal code (e.g. 75001)")
    parser.add_argument("--lat", type=float, required=True, help="Target latitude")
    parser.add_argument("--lon", type=float, required=True, help="Target longitude")
    parser.add_argument("--limit", type=int, default=10, help="Number of results to show")
    _add_common_arguments(parser)
    return parser


def run_classify(argv: list[str] | None = None) -> int:
    """Entry point for dpe-classify command."""
    from dpe_matcher.cli.logging import setup_logging

    args = build_classify_parser().parse_args(argv)
    logger = setup_logging("dpe_classify", verbose=args.verbose, log_dir=args.log_dir)

    descriptor = PropertyDescriptor(
        department=args.department,
        commune=args.commune,
        section=args.section,
        numero=args.numero,
        cadastral_id=args.cadastral_id,
    )

    try:
        result = classify_exact_match(descriptor)
    except PreconditionError as e:
        logger.error(str(e))
        return EXIT_INVALID
    except AcquisitionError as e:
        logger.error(str(e))
        return EXIT_UPSTREAM

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return EXIT_OK

    if result.has_exact_match:
        match = result.match
        print(f"Exact match: {match.certificate_id}")
        print(f"  Address: {match.address or 'Unknown'}")
        print(f"  Energy: {match.energy_class or 'N/A'}  GHG: {match.ghg_class or 'N/A'}")
        if match.established_on:
            print(f"  Established: {match.established_on.isoformat()}")
    else:
        print(f"No exact match ({result.candidate_count} candidates searched)")

    if result.candidates:
        print(f"Qualified candidates ({len(result.candidates)}):")
        for candidate in result.candidates[:10]:
            record = candidate.record
            print(
                f"  {candidate.score:>3}/100  {record.certificate_id}  "
                f"{record.energy_class or '-'}  {record.address or 'Unknown'}"
            )
    reasons = result.diagnostics.disqualification_reasons
    if reasons:
        summary = ", ".join(f"{reason}: {count}" for reason, count in sorted(reasons.items()))
        print(f"Disqualified: {result.diagnostics.disqualified} ({summary})")
    return EXIT_OK


def run_nearby(argv: list[str] | None = None) -> int:
    """Entry point for dpe-nearby command."""
    from dpe_matcher.cli.logging import setup_logging

    args = build_nearby_parser().parse_args(argv)
    logger = setup_logging("dpe_nearby", verbose=args.verbose, log_dir=args.log_dir)

    if not (-90.0 <= args.lat <= 90.0 and -180.0 <= args.lon <= 180.0):
        logger.error(f"Invalid coordinate: {args.lat}, {args.lon}")
        return EXIT_INVALID

    try:
        result = find_nearby_certificates(args.postal_code, Coordinate(args.lat, args.lon))
    except UpstreamError as e:
        logger.error(str(e))
        return EXIT_UPSTREAM

    if args.json:
        print(json.dumps(result.to_dict(limit=args.limit), ensure_ascii=False, indent=2))
        return EXIT_OK

    print(result.describe())
    for candidate in result.ranked[: args.limit]:
        record = candidate.record
        print(
            f"  {candidate.distance_m:>8.0f} m  {record.certificate_id}  "
            f"{record.energy_class or '-'}  {record.address or 'Unknown'}"
        )
    if result.excluded:
        print(f"Excluded, no coordinates: {len(result.excluded)}")
    return EXIT_OK


def main_classify() -> None:
    sys.exit(run_classify())


def main_nearby() -> None:
    sys.exit(run_nearby())
