"""Main CLI entry point for the xml-json command-line tool.

Provides conversion of XML files to JSON text, streaming of top-level
elements as newline-delimited JSON, path extraction and replacement, and
serialization of JSON back to XML.
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Union

from xml_json_converter import __version__
from xml_json_converter.api import XMLToJSONConverter
from xml_json_converter.shared.config import ConfigError, ParserConfig
from xml_json_converter.shared.errors import ConversionError
from xml_json_converter.shared.logging import get_logger
from xml_json_converter.tree.values import to_json_string

EXIT_OK = 0
EXIT_CONVERSION_ERROR = 1
EXIT_USAGE_ERROR = 2

STDIN_MARKER = "-"

# Options in a configuration file that cannot be expressed as JSON
UNSUPPORTED_CONFIG_FIELDS = ("xsi_type_converters",)

logger = get_logger(__name__, component="cli")


def load_config(config_path: Optional[Path], keep_strings: bool = False) -> ParserConfig:
    """Build the parser configuration from an optional JSON file and flags.

    The file holds a JSON object whose keys are ``ParserConfig`` field names.

    Raises:
        ConfigError: If the file is not a JSON object or names invalid fields
        OSError: If the file cannot be read
    """
    config = ParserConfig.original()
    if config_path is not None:
        with config_path.open(encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid configuration file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {config_path} must contain a JSON object")
        for name in UNSUPPORTED_CONFIG_FIELDS:
            if name in data:
                raise ConfigError(f"{name} cannot be set from a configuration file")
        config = config.override(**data)
    if keep_strings:
        config = config.override(keep_strings=True)
    return config


def _input(path: str) -> Union[Path, Any]:
    if path == STDIN_MARKER:
        return sys.stdin.buffer
    return Path(path)


def _load_json(text: str) -> Any:
    return json.loads(text, parse_float=Decimal)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-json",
        description="Convert between XML documents and JSON"
    )

    parser.add_argument("--version", action="version", version=__version__)

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    # Options shared by every command that parses XML
    parsing = argparse.ArgumentParser(add_help=False)
    parsing.add_argument(
        "--keep-strings",
        action="store_true",
        help="Keep attribute and text values as strings"
    )
    parsing.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON file with parser configuration"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser(
        "convert", parents=[parsing], help="Convert an XML file to JSON"
    )
    convert_parser.add_argument("file", help="XML file, or - for standard input")

    stream_parser = subparsers.add_parser(
        "stream", parents=[parsing],
        help="Write each top-level element as one line of JSON"
    )
    stream_parser.add_argument("file", help="XML file, or - for standard input")
    stream_parser.add_argument(
        "--limit",
        type=int,
        help="Stop after this many elements"
    )

    extract_parser = subparsers.add_parser(
        "extract", parents=[parsing], help="Extract the node at a path"
    )
    extract_parser.add_argument("file", help="XML file, or - for standard input")
    extract_parser.add_argument("path", help="Element path such as /catalog/book/0/title")

    replace_parser = subparsers.add_parser(
        "replace", parents=[parsing], help="Convert with the node at a path replaced"
    )
    replace_parser.add_argument("file", help="XML file, or - for standard input")
    replace_parser.add_argument("path", help="Element path such as /catalog/book/0/title")
    replace_parser.add_argument("replacement", help="Replacement value as JSON text")

    to_xml_parser = subparsers.add_parser("to-xml", help="Convert a JSON file to XML")
    to_xml_parser.add_argument("file", help="JSON file, or - for standard input")
    to_xml_parser.add_argument("--tag", help="Name of the element wrapping the output")

    return parser


def cmd_convert(args: argparse.Namespace, converter: XMLToJSONConverter) -> int:
    """Handle convert command."""
    print(to_json_string(converter.to_json(_input(args.file))))
    return EXIT_OK


def cmd_stream(args: argparse.Namespace, converter: XMLToJSONConverter) -> int:
    """Handle stream command."""
    stream = converter.to_json_stream(_input(args.file))
    if args.limit is not None:
        stream = stream.limit(args.limit)
    stream.for_each(lambda item: print(to_json_string(item)))
    return EXIT_OK


def cmd_extract(args: argparse.Namespace, converter: XMLToJSONConverter) -> int:
    """Handle extract command."""
    print(to_json_string(converter.extract(_input(args.file), args.path)))
    return EXIT_OK


def cmd_replace(args: argparse.Namespace, converter: XMLToJSONConverter) -> int:
    """Handle replace command."""
    replacement = _load_json(args.replacement)
    print(to_json_string(converter.replace(_input(args.file), args.path, replacement)))
    return EXIT_OK


def cmd_to_xml(args: argparse.Namespace, converter: XMLToJSONConverter) -> int:
    """Handle to-xml command."""
    if args.file == STDIN_MARKER:
        text = sys.stdin.read()
    else:
        text = Path(args.file).read_text(encoding="utf-8")
    try:
        value = _load_json(text)
    except json.JSONDecodeError as e:
        raise ConversionError(f"Invalid JSON input: {e}") from e
    print(converter.to_xml(value, args.tag))
    return EXIT_OK


COMMANDS = {
    "convert": cmd_convert,
    "stream": cmd_stream,
    "extract": cmd_extract,
    "replace": cmd_replace,
    "to-xml": cmd_to_xml,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help(sys.stderr)
        return EXIT_USAGE_ERROR

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        config = load_config(
            getattr(args, "config", None), getattr(args, "keep_strings", False)
        )
    except (ConfigError, OSError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    converter = XMLToJSONConverter(config)
    try:
        return COMMANDS[args.command](args, converter)
    except ValueError as e:
        # Invalid paths and malformed JSON arguments
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except (ConversionError, OSError) as e:
        logger.debug("Command failed", extra={"command": args.command})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONVERSION_ERROR
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
