# ============================================================================
# SOURCEFILE: cli.py
# RELPATH: bagkit/src/bagkit/cli.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Command-line interface: create, validate, info, package
# ============================================================================

"""Command-Line Interface for BagKit."""

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from bagkit.core import logging as bag_logging
from bagkit.core.bag import Bag
from bagkit.core.bag_info import BagInfo
from bagkit.core.config import BagConfig, ConfigManager, DEFAULT_CONFIG_FILE
from bagkit.core.exceptions import BagKitError
from bagkit.core.packager import ArchiveFormat, parse_format
from bagkit.core.validator import BagValidator

FORMAT_CHOICES = ["dir"] + [f.value for f in ArchiveFormat]


def _tag_value(text: str) -> Tuple[str, str]:
    tag, sep, value = text.partition("=")
    if not sep or not tag.strip():
        raise argparse.ArgumentTypeError(f"Expected TAG=VALUE, got '{text}'")
    return tag.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bagkit",
        description="BagKit - create, validate and package bags"
    )
    parser.add_argument("--config", type=Path, help="Configuration file (JSON)")
    parser.add_argument("--log-dir", type=Path, help="Write JSON session logs here")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on malformed manifest or bag-info lines")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # CREATE
    parser_create = subparsers.add_parser("create", help="Create a bag from payload files")
    parser_create.add_argument("destination", type=Path)
    parser_create.add_argument("source_paths", type=Path, nargs="+")
    parser_create.add_argument("--info", type=_tag_value, action="append", default=[],
                               metavar="TAG=VALUE")
    parser_create.add_argument("--algorithm")
    parser_create.add_argument("--format", choices=FORMAT_CHOICES, default="dir")
    parser_create.add_argument("--output", "-o", type=Path)

    # VALIDATE
    parser_validate = subparsers.add_parser("validate", help="Validate a bag")
    parser_validate.add_argument("bag", type=Path)
    parser_validate.add_argument("--complete-only", action="store_true",
                                 help="Skip checksum verification")

    # INFO
    parser_info = subparsers.add_parser("info", help="Show bag metadata")
    parser_info.add_argument("bag", type=Path)

    # PACKAGE
    parser_package = subparsers.add_parser("package", help="Validate and archive a bag")
    parser_package.add_argument("bag", type=Path)
    parser_package.add_argument("--format", choices=FORMAT_CHOICES, required=True)
    parser_package.add_argument("--output", "-o", type=Path)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    bag_logging.configure_utf8_logging()
    structured = None
    command = None

    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        command = args.command

        manager = ConfigManager(str(args.config) if args.config else DEFAULT_CONFIG_FILE)
        config = BagConfig.from_manager(manager)
        if args.strict:
            config = dataclasses.replace(config, strict_parsing=True)

        logging.basicConfig(level=str(manager.get("logging.level", "WARNING")).upper())

        log_dir = args.log_dir or manager.get("logging.log_dir")
        if log_dir:
            structured = bag_logging.new_session(str(log_dir))

        if command == "create":
            code = handle_create(args, config, structured)
        elif command == "validate":
            code = handle_validate(args, config, structured)
        elif command == "info":
            code = handle_info(args, config)
        elif command == "package":
            code = handle_package(args, config, structured)
        else:
            print(f"Unknown command: {command}", file=sys.stderr)
            code = 1

        sys.exit(code)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)

    except BagKitError as e:
        if structured is not None:
            structured.log_error(command or "", "", str(e), type(e).__name__,
                                 getattr(e, "path", None))
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _write_output(validated, fmt: str, output: Optional[Path]) -> Path:
    if fmt == "dir":
        destination = output / validated.bag.name if output else None
        return validated.to_dir(destination)
    return validated.package(parse_format(fmt), output)


def handle_create(args, config: BagConfig, structured) -> int:
    """Handler for create command."""
    for source in args.source_paths:
        if not source.exists():
            raise BagKitError(f"Source path not found: {source} (does not exist)")
    if args.destination.exists():
        raise BagKitError(f"Destination already exists: {args.destination}")

    if args.algorithm:
        config = dataclasses.replace(config, hash_algorithm=args.algorithm)

    info = BagInfo()
    for tag, value in args.info:
        info.add_metadata(tag, value)

    start = time.monotonic()
    if structured is not None:
        structured.log_operation_start("create", str(args.destination), str(args.output or ""))

    with Bag(args.destination, config=config, bag_info=info) as bag:
        print(f"Adding {len(args.source_paths)} path(s) to {bag.name}")
        bag.add_data(*args.source_paths)
        bag.complete()
        validated = BagValidator(config, structured).validate(bag)
        output = _write_output(validated, args.format, args.output)
        file_count = bag.payload.file_count()

    if structured is not None:
        structured.log_packaged(str(args.destination), str(output), args.format)
        structured.log_operation_complete("create", str(args.destination), str(output),
                                          file_count, _elapsed_ms(start))

    print(f"\nBag created: {output}")
    print(f"  Payload files: {file_count}")
    print(f"  Format: {args.format}")
    return 0


def handle_validate(args, config: BagConfig, structured) -> int:
    """Handler for validate command."""
    if not args.bag.exists():
        raise BagKitError(f"Bag not found: {args.bag}")

    if structured is not None:
        structured.log_operation_start("validate", str(args.bag))

    print(f"Validating: {args.bag}")
    with Bag(args.bag, config=config) as bag:
        result = BagValidator(config, structured).check(
            bag, verify_checksums=not args.complete_only
        )

    print("\n" + "=" * 60)
    print("VALIDATION REPORT")
    print("=" * 60)
    check = "complete" if args.complete_only else "valid"
    if result.ok:
        print(f"Status: ✓ {check.upper()}")
    else:
        print(f"Status: ✗ NOT {check.upper()}")
        print(f"Failure: {result.kind}"
              + (f" ({result.reason.value})" if result.reason else ""))
        print(f"  - {result.message}")
    print("=" * 60)

    return 0 if result.ok else 1


def handle_info(args, config: BagConfig) -> int:
    """Handler for info command."""
    if not args.bag.exists():
        raise BagKitError(f"Bag not found: {args.bag}")

    with Bag(args.bag, config=config) as bag:
        declaration = bag.declaration
        print(f"Bag: {bag.name}")
        if declaration is None:
            print("Declaration: missing")
        else:
            print(f"BagIt version: {declaration.version}")
            print(f"Tag file encoding: {declaration.encoding}")
        print(f"Hash algorithm: {bag.payload_manifest.hash_algorithm}")
        print(f"Payload-Oxum: {bag.get_payload_oxum()}")
        print(f"Manifest entries: {bag.payload_manifest.count_entries()}")
        if len(bag.bag_info):
            print("\nbag-info.txt:")
            for entry in bag.bag_info:
                print(f"  {entry}")
    return 0


def handle_package(args, config: BagConfig, structured) -> int:
    """Handler for package command."""
    if not args.bag.exists():
        raise BagKitError(f"Bag not found: {args.bag}")
    if args.format == "dir" and args.output is None and args.bag.is_dir():
        raise BagKitError("--output is required to package a bag directory as a directory")

    start = time.monotonic()
    if structured is not None:
        structured.log_operation_start("package", str(args.bag), str(args.output or ""))

    with Bag(args.bag, config=config) as bag:
        validated = BagValidator(config, structured).validate(bag)
        output = _write_output(validated, args.format, args.output)
        file_count = bag.payload.file_count()

    if structured is not None:
        structured.log_packaged(str(args.bag), str(output), args.format)
        structured.log_operation_complete("package", str(args.bag), str(output),
                                          file_count, _elapsed_ms(start))

    print(f"Bag packaged: {output}")
    return 0


if __name__ == "__main__":
    main()


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: core.bag, core.config, core.validator, core.logging
# TESTS: tests/integration/test_cli.py
# ============================================================================
