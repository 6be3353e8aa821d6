"""
Feature Switch CLI.

Command-line interface for stripping disabled features out of source files
at build time and for inspecting feature files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .config import load_features, load_strip_options
from .errors import FeatureSwitchError, source_not_found_error
from .flags import FeatureStore
from .strip import DIALECTS, merge_options, strip

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def setup_logging(verbose: bool = False):
    """Configure logging for CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def resolve_features(features_file: str) -> Dict[str, bool]:
    """Load and normalize a feature file into a plain feature set."""
    store = FeatureStore(load_features(features_file))
    return store.get_features()


def resolve_options(options_file: Optional[str], disabled_dialects: List[str]) -> Dict:
    """Build strip options from an optional file and --disable flags."""
    options = load_strip_options(options_file) if options_file else merge_options()
    for dialect in disabled_dialects:
        options[dialect]["enabled"] = False
    return options


def strip_sources(
    sources: List[str],
    features: Dict[str, bool],
    options: Dict,
    output: Optional[str] = None
) -> List[str]:
    """
    Strip each source file.

    With a single source, output is a file path; with several, a directory
    (mirroring source file names). Without output, results go to stdout.

    Returns:
        Paths written (empty when writing to stdout)
    """
    written = []
    for source in sources:
        source_path = Path(source)
        if not source_path.is_file():
            raise source_not_found_error(source)

        stripped = strip(source_path.read_text(encoding="utf-8"), features, options)

        if output is None:
            sys.stdout.write(stripped)
            continue

        if len(sources) == 1:
            target = Path(output)
        else:
            target = Path(output) / source_path.name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(stripped, encoding="utf-8")
        logger.info(f"Stripped {source_path} -> {target}")
        written.append(str(target))

    return written


def print_features(features: Dict[str, bool], as_json: bool = False):
    """Print a normalized feature set."""
    if as_json:
        print(json.dumps(features, indent=2, sort_keys=True))
        return

    width = max((len(name) for name in features), default=0)
    for name in sorted(features):
        state = "enabled" if features[name] else "disabled"
        print(f"{name.ljust(width)}  {state}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feature-switch",
        description="Strip disabled features from source files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Strip a single file to stdout
  feature-switch strip --features features.yaml src/app.js

  # Strip several files into a build directory
  feature-switch strip --features features.yaml -o build/ src/app.js src/index.html

  # Leave HTML attribute tagged elements alone
  feature-switch strip --features features.yaml --disable html_attributes index.html

  # Show the normalized feature set
  feature-switch show --features features.yaml --json
        """
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Strip command
    strip_parser = subparsers.add_parser("strip", help="Strip disabled features from sources")
    strip_parser.add_argument(
        "sources",
        nargs="+",
        help="Source files to strip"
    )
    strip_parser.add_argument(
        "--features", "-f",
        required=True,
        help="Feature file (YAML or JSON)"
    )
    strip_parser.add_argument(
        "--options",
        help="Strip options file (YAML or JSON)"
    )
    strip_parser.add_argument(
        "--disable",
        action="append",
        default=[],
        choices=DIALECTS,
        help="Dialect to skip (repeatable)"
    )
    strip_parser.add_argument(
        "--output", "-o",
        help="Output file, or directory when several sources are given"
    )

    # Show command
    show_parser = subparsers.add_parser("show", help="Show the normalized feature set")
    show_parser.add_argument(
        "--features", "-f",
        required=True,
        help="Feature file (YAML or JSON)"
    )
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Print as JSON"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        if args.command == "strip":
            features = resolve_features(args.features)
            options = resolve_options(args.options, args.disable)
            strip_sources(args.sources, features, options, args.output)

        elif args.command == "show":
            print_features(resolve_features(args.features), args.json)

        else:
            parser.print_help()

    except FeatureSwitchError as e:
        logger.debug(f"Command failed: {e.to_dict()}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
