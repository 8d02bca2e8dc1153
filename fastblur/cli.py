"""
Command line interface: blur a binary graymap file.

Usage::

    fastblur <input> <output> <threads> <box_count> <sigma>

threads: -1 = single thread, 0 = all hardware threads, n = n threads.
Exit code 0 on success, 1 on invalid parameters or I/O failures and 2 on
malformed arguments.
"""

from __future__ import annotations

import argparse
import logging
import sys

from fastblur.config import settings
from fastblur.errors import FastBlurError
from fastblur.filters import Benchmark, BenchmarkConfig, BlurConfig, blur
from fastblur.formats import read_pgm, write_pgm

logger = logging.getLogger("fastblur")

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser of the fastblur command."""
    parser = argparse.ArgumentParser(
        prog='fastblur',
        description='Blur an 8-bit binary graymap (P5) with a fast Gaussian approximation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s in.pgm out.pgm -1 1 2.0   # single thread, sigma 2
  %(prog)s in.pgm out.pgm 0 3 1.5    # all cores, radius for 3 boxes
  %(prog)s in.pgm out.pgm 4 1 5 --benchmark
"""
    )
    parser.add_argument('input', help='Input graymap file')
    parser.add_argument('output', help='Output graymap file')
    parser.add_argument(
        'threads',
        type=int,
        help='-1 = single thread, 0 = all hardware threads, n = n threads'
    )
    parser.add_argument('box_count', type=int, help='Number of boxes, >= 1')
    parser.add_argument('sigma', type=float, help='Standard deviation, > 0')
    parser.add_argument(
        '--log-level',
        default=settings.LOG_LEVEL,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        help=f'Logging level (default: {settings.LOG_LEVEL})'
    )
    parser.add_argument(
        '--benchmark',
        action='store_true',
        help='Compare sequential and parallel execution after writing the output'
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command line.

    :returns: The process exit code
    """
    try:
        config = BlurConfig(
            sigma=args.sigma,
            box_count=args.box_count,
            threads=args.threads,
        ).validate()
    except FastBlurError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    try:
        raster = read_pgm(args.input)
    except FastBlurError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    result = blur(raster, config.threads, config.box_count, config.sigma)

    try:
        write_pgm(args.output, result.raster)
    except FastBlurError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    if args.benchmark:
        thread_counts = sorted({-1, 0, config.threads})
        Benchmark.run(
            raster,
            config.sigma,
            config.box_count,
            BenchmarkConfig(thread_counts=thread_counts),
        ).print()

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT)
    logger.setLevel(args.log_level)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
