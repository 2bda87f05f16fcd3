from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from mifcconv.config.api import ConfigError, load_options
from mifcconv.discovery.api import iter_input_paths
from mifcconv.errlog.api import error_chain
from mifcconv.pipeline.api import FAILED, FileResult, StreamingPipeline

logger = logging.getLogger("mifcconv")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mifcconv",
        description="Convert compound chip measurement tables into MIFC CSV files.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    conv = sub.add_parser(
        "convert",
        help="compound columnar CSV -> MIFC CSV, propagating stock/reservoir rows",
    )
    conv.add_argument("inputs", nargs="+", type=Path, metavar="INPUT",
                      help="compound CSV files or directories containing them")
    conv.add_argument("-a", "--append", default=None,
                      help='appended to the input file name for the output (default: "mifc")')
    conv.add_argument("-o", "--out-dir", type=Path, default=None,
                      help="directory in which output files are created")
    conv.add_argument("-t", "--term", dest="terms", action="append", default=None,
                      help="extra propagating chip id besides stock and reservoir (repeatable)")
    conv.add_argument("--normalize", action="store_true",
                      help="normalize values to ng/day/10^6 cells using the sample columns")
    conv.add_argument("--stdout", action="store_true",
                      help="write every conversion to stdout instead of files")
    _common(conv)

    norm = sub.add_parser(
        "normalize",
        help="MIFC + normalization workbook -> one normalized MIFC CSV per sheet",
    )
    norm.add_argument("inputs", nargs="+", type=Path, metavar="INPUT",
                      help="excel workbooks (.xlsx/.xlsm), CSV files or directories")
    norm.add_argument("-a", "--append", default=None,
                      help='appended to the output file name (default: "normalized")')
    norm.add_argument("-d", "-o", "--out-dir", type=Path, default=None,
                      help="directory to create output file(s) in")
    norm.add_argument("--stdout", action="store_true",
                      help="write normalized rows to stdout instead of files")
    _common(norm)
    return parser


def _common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-c", "--config", type=Path, default=None, help="JSON config file")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="more log output (-v info, -vv debug)")


def run(args: argparse.Namespace) -> List[FileResult]:
    if args.command == "convert":
        options = load_options(
            args.config,
            {
                "append": args.append,
                "out_dir": args.out_dir,
                "terms": args.terms,
                "normalize": args.normalize,
                "stdout": args.stdout,
            },
            default_append="mifc",
        )
        logger.debug("options: %s", options)
        pipeline = StreamingPipeline(options)
        return pipeline.convert_batch(iter_input_paths(args.inputs, kind="csv"))

    options = load_options(
        args.config,
        {"append": args.append, "out_dir": args.out_dir, "stdout": args.stdout},
        default_append="normalized",
    )
    logger.debug("options: %s", options)
    pipeline = StreamingPipeline(options)
    return pipeline.normalize_batch(iter_input_paths(args.inputs, kind="workbook"))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        results = run(args)
    except ConfigError as e:
        error_chain(logger, e)
        return 1

    for res in results:
        where = f" [{res.sheet}]" if res.sheet else ""
        logger.info("%s%s -> %s (%s)", res.input_path, where, res.output_path or "-", res.status)
    return 1 if any(r.status == FAILED for r in results) else 0
