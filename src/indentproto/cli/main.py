# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the IndentProto command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from yachalk import chalk

from indentproto.compiler import TranslationError, dump_tokens, translate_text
from indentproto.config import ConfigError, TranslatorConfig, find_config, load_config

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the IndentProto CLI."""
    parser = argparse.ArgumentParser(
        prog="indentproto",
        description="Translate an indentation-based schema file into protobuf schema text.",
    )
    parser.add_argument(
        "input",
        help="Path to the schema DSL file to translate",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Configuration file (default: .indentproto.yaml next to the input, if present)",
    )
    parser.add_argument(
        "--dump-tokens",
        action="store_true",
        help="Print the token stream instead of translating",
    )
    parser.add_argument(
        "--threaded",
        action="store_true",
        help="Run the scanner in a separate producer thread",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug diagnostics to stderr",
    )

    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    sys.exit(_run(args))


# ################
# Implementation
# ################


def _error(message: str) -> None:
    print(f"{chalk.red('Error:')} {message}", file=sys.stderr)


def _run(args: argparse.Namespace) -> int:
    """Translate the input file and print the result to stdout."""
    input_path = Path(args.input)

    try:
        source = input_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _error(f"input file '{input_path}' does not exist.")
        return 1
    except OSError as exc:
        _error(f"cannot read input file '{input_path}': {exc}")
        return 1

    if args.dump_tokens:
        try:
            lines = list(dump_tokens(source))
        except TranslationError as exc:
            _error(f"{input_path}: {exc}")
            return 1
        for line in lines:
            print(line)
        return 0

    try:
        config = _load_config(args, input_path)
    except ConfigError as exc:
        _error(str(exc))
        return 1

    # Output is collected first so that a failed translation prints nothing.
    try:
        output = translate_text(source, config, threaded=args.threaded)
    except TranslationError as exc:
        _error(f"{input_path}: {exc}")
        return 1

    sys.stdout.write(output)
    return 0


def _load_config(args: argparse.Namespace, input_path: Path) -> TranslatorConfig:
    if args.config is not None:
        return load_config(Path(args.config))
    discovered = find_config(input_path)
    if discovered is not None:
        logger.debug("Using configuration %s", discovered)
        return load_config(discovered)
    return TranslatorConfig()
