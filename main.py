#!/usr/bin/env python3
"""
WAV Batch Trimmer CLI
Cut PCM WAV files to the time ranges listed in a CSV job file.

Usage:
    python main.py --csv cuts.csv --from raw/ --to clips/
    python main.py --csv cuts.csv --from raw/ --to clips/ --max-error 0.5
    python main.py --csv cuts.csv --from raw/ --to clips/ --split-in-half
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from tqdm import tqdm

from application.dto.batch_dto import BatchResultDTO
from application.dto.config_dto import ColumnLayout, TrimConfig
from infrastructure.jobs.csv_job_source import CsvJobSource
from trimmer.batch import BatchScheduler
from trimmer.printer import OutputPrinter
from trimmer.utils import (
    DEFAULT_PARAMS,
    EXIT_INTERRUPTED,
    EXIT_JOBS_FAILED,
    EXIT_NO_JOB_FILE,
    EXIT_SUCCESS,
    validate_directory,
    validate_param_range,
)

logger = logging.getLogger("wav_trimmer")


def _threshold(value: float) -> Optional[float]:
    # Negative values mean "not configured"
    return None if value < 0 else value


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="wav-trimmer",
        description="Batch-trim PCM WAV files to time ranges from a CSV job file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Job file columns (defaults):
  0 source file | 1 start [s] | 2 end [s] | 3 output file
  4 diff error (optional) | 5 ratio (optional, ratio error = |1 - ratio|)

Exit codes:
  0 success | 1 one or more jobs failed | 3 job file missing | 130 interrupted
        """,
    )

    io_group = parser.add_argument_group("Input / Output")
    io_group.add_argument(
        "--csv",
        metavar="FILE",
        default="",
        help="CSV file containing cut arguments [src file, start [s], end [s], out file].",
    )
    io_group.add_argument("--from", dest="from_dir", default="", metavar="DIR",
                          help="Directory of source files.")
    io_group.add_argument("--to", dest="to_dir", default="", metavar="DIR",
                          help="Destination directory.")

    cut_group = parser.add_argument_group("Cut Parameters")
    cut_group.add_argument(
        "--offset-start",
        type=float,
        default=DEFAULT_PARAMS["offset_start"],
        metavar="SEC",
        help="Offset in seconds added to the start of every cut.",
    )
    cut_group.add_argument(
        "--offset-end",
        type=float,
        default=DEFAULT_PARAMS["offset_end"],
        metavar="SEC",
        help="Offset in seconds added to the end of every cut.",
    )
    cut_group.add_argument(
        "--split-in-half",
        action="store_true",
        help="Split each cut in half and write a_<out> and b_<out>.",
    )

    gate_group = parser.add_argument_group("Quality Gates")
    gate_group.add_argument(
        "--max-error",
        type=float,
        default=-1,
        metavar="ERR",
        help="Skip jobs whose diff error is above ERR (disabled when <= 0).",
    )
    gate_group.add_argument(
        "--max-ratio-error",
        type=float,
        default=-1,
        metavar="ERR",
        help="Skip jobs where abs(1 - ratio) is above ERR (disabled when <= 0).",
    )
    gate_group.add_argument(
        "--delete-source-error",
        type=float,
        default=-1,
        metavar="ERR",
        help="Delete successfully cut sources whose diff error is <= ERR.",
    )
    gate_group.add_argument(
        "--delete-source-ratio-error",
        type=float,
        default=-1,
        metavar="ERR",
        help="Delete successfully cut sources whose ratio error is <= ERR. "
             "Both delete thresholds must be set for deletion to happen.",
    )

    col_group = parser.add_argument_group("CSV Columns")
    defaults = ColumnLayout()
    col_group.add_argument("--src-file-index", type=int, default=defaults.source_file)
    col_group.add_argument("--start-s-index", type=int, default=defaults.start)
    col_group.add_argument("--end-s-index", type=int, default=defaults.end)
    col_group.add_argument("--out-file-index", type=int, default=defaults.out_file)
    col_group.add_argument("--error-index", type=int, default=defaults.diff_error)
    col_group.add_argument("--ratio-error-index", type=int, default=defaults.ratio_error)

    run_group = parser.add_argument_group("Run Options")
    run_group.add_argument(
        "--workers",
        type=int,
        default=int(DEFAULT_PARAMS["workers"]),
        metavar="N",
        help=f"Number of worker threads (default: {int(DEFAULT_PARAMS['workers'])}).",
    )
    run_group.add_argument(
        "--max-output-bytes",
        type=int,
        default=int(DEFAULT_PARAMS["max_output_bytes"]),
        metavar="BYTES",
        help="Largest output data chunk a single cut may produce "
             f"(default: {int(DEFAULT_PARAMS['max_output_bytes'])}).",
    )
    run_group.add_argument("--verbose", "-v", action="store_true",
                           help="Print every per-job error.")
    run_group.add_argument("--quiet", "-q", action="store_true",
                           help="Suppress all output except errors.")
    run_group.add_argument("--no-color", "-n", action="store_true",
                           help="Disable colored output (also auto-disabled when NO_COLOR is set).")

    return parser


def config_from_args(args: argparse.Namespace) -> TrimConfig:
    """Validate parsed arguments and freeze them into a TrimConfig."""
    validate_param_range(args.workers, "workers", 1, 256)
    validate_param_range(args.max_output_bytes, "max-output-bytes", 1, 2**32 - 1)
    for name in ("src_file_index", "start_s_index", "end_s_index",
                 "out_file_index", "error_index", "ratio_error_index"):
        validate_param_range(getattr(args, name), name.replace("_", "-"), 0, 1000)
    validate_directory(args.from_dir, "Source")
    validate_directory(args.to_dir, "Destination")

    return TrimConfig(
        source_dir=args.from_dir,
        dest_dir=args.to_dir,
        max_diff_error=_threshold(args.max_error),
        max_ratio_error=_threshold(args.max_ratio_error),
        offset_start=args.offset_start,
        offset_end=args.offset_end,
        delete_diff_error=_threshold(args.delete_source_error),
        delete_ratio_error=_threshold(args.delete_source_ratio_error),
        verbose=args.verbose,
        split_in_half=args.split_in_half,
        columns=ColumnLayout(
            source_file=args.src_file_index,
            start=args.start_s_index,
            end=args.end_s_index,
            out_file=args.out_file_index,
            diff_error=args.error_index,
            ratio_error=args.ratio_error_index,
        ),
        workers=args.workers,
        max_output_bytes=args.max_output_bytes,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    printer: OutputPrinter = OutputPrinter(quiet=args.quiet, no_color=args.no_color)

    try:
        jobs: CsvJobSource = CsvJobSource(args.csv)
    except (FileNotFoundError, ValueError) as exc:
        printer.error(str(exc))
        return EXIT_NO_JOB_FILE

    try:
        config: TrimConfig = config_from_args(args)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))
        return EXIT_JOBS_FAILED  # unreachable, parser.error exits

    printer.settings(
        "Started using:",
        {
            "max-error": str(config.max_diff_error),
            "max-ratio-error": str(config.max_ratio_error),
            "delete-source-error": str(config.delete_diff_error),
            "delete-source-ratio-error": str(config.delete_ratio_error),
            "workers": str(config.workers),
        },
    )
    logger.info("config: %s", config)

    scheduler: BatchScheduler = BatchScheduler(config)
    start_time: float = time.time()
    try:
        with tqdm(desc="Processing", unit="job", disable=args.quiet) as pbar:

            def cli_callback(finished: int, queued: int) -> None:
                pbar.total = queued
                pbar.update(1)

            batch: BatchResultDTO = scheduler.run(jobs, progress_callback=cli_callback)
    except KeyboardInterrupt:
        printer.warning("Trimming cancelled.", hint="Finished cuts were kept.")
        return EXIT_INTERRUPTED

    elapsed: float = time.time() - start_time
    details: dict[str, str] = {
        "Jobs": str(batch.total),
        "Cut": str(batch.done),
        "Skipped": str(batch.skipped),
        "Invalid": str(batch.invalid),
        "Failed": str(batch.failed),
        "Sources deleted": str(batch.deleted),
        "Time": f"{elapsed:.1f}s",
    }
    if jobs.malformed:
        details["Malformed rows"] = str(jobs.malformed)

    failures: int = batch.failed + batch.invalid + jobs.malformed
    if failures:
        printer.warning(
            f"Done with {failures} failed job(s).",
            hint="Re-run with --verbose to see every error.",
        )
        printer.success("Done", details)
        return EXIT_JOBS_FAILED

    printer.success("Done", details)
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
