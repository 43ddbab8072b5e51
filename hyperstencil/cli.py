from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from hyperstencil import __version__, config
from hyperstencil.errors import HyperstencilError
from hyperstencil.image_stencil import ImageStencilPlugin
from hyperstencil.logging_config import error_prefix, setup_logging

log = logging.getLogger(__name__)


class _Parser(argparse.ArgumentParser):
    # argument failures exit with 1, like every other failure
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _count(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer: {value!r}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="hyperstencil", description="A bespoke multichannel raw image utility")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug details")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    sub = parser.add_subparsers(dest="command", required=True)

    encode = sub.add_parser("encode", help="Encodes an RGB image into hyperstencil format")
    encode.add_argument("-l", "--layers", type=_count, required=True, help="The number of layers to encode")
    encode.add_argument("--header", action="store_true", help="Prefix the output with a stencil header")
    encode.add_argument("input", metavar="INPUT", help="The input file")
    encode.add_argument("output", metavar="OUTPUT", help="The output file")

    # -h is the height here, so help is --help only
    decode = sub.add_parser("decode", help="Decodes a hyperstencil file into an RGB image", add_help=False)
    decode.add_argument("--help", action="help", help="show this help message and exit")
    decode.add_argument("-l", "--layers", type=_count, required=True, help="The number of layers in the input file")
    decode.add_argument("-w", "--width", type=_count, required=True, help="The width of the image")
    decode.add_argument("-h", "--height", type=_count, required=True, help="The height of the image")
    decode.add_argument("--header", action="store_true", help="The input starts with a stencil header")
    decode.add_argument(
        "--legacy-wrap",
        action=argparse.BooleanOptionalAction,
        default=config.LEGACY_WRAP,
        help="Wrap source offsets modulo (length - 1) for files from older tools",
    )
    decode.add_argument("input", metavar="INPUT", help="The input file")
    decode.add_argument("output", metavar="OUTPUT", help="The output file")

    inspect = sub.add_parser("inspect", help="Reports how an image's bytes spread over the layers")
    inspect.add_argument("-l", "--layers", type=_count, required=True, help="The number of layers")
    inspect.add_argument("--export-dir", default=None, help="Write one PNG per layer into this directory")
    inspect.add_argument("input", metavar="INPUT", help="The input image")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "WARNING"
    else:
        level = config.LOG_LEVEL
    setup_logging(level, use_color=config.USE_COLOR)

    plugin = ImageStencilPlugin()
    try:
        if args.command == "encode":
            info = plugin.embed(args.input, args.output, args.layers, header=args.header)
            log.info("wrote %s (%d bytes)", info["outfile"], info["stencil_bytes"])
            return 0

        if args.command == "decode":
            info = plugin.extract(
                args.input, args.output, args.layers, args.width, args.height,
                header=args.header, legacy_wrap=args.legacy_wrap,
            )
            log.info("wrote %s (%dx%d)", info["outfile"], info["width"], info["height"])
            return 0

        report = plugin.analyze(args.input, args.layers, export_dir=args.export_dir)
        print(json.dumps(report, indent=2))
        return 0
    except HyperstencilError as e:
        print(f"{error_prefix(config.USE_COLOR)} {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
