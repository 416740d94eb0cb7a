"""Command-line interface for running the score pipeline.

Provides subcommands: `summary`, `export`, `load-scores`, and `watch`. Each
command is implemented as a `cmd_*` function that accepts an argparse
namespace.
"""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from esg_pipeline.config import get_settings
from esg_pipeline.logging_config import configure_logging
from esg_pipeline.db import get_client, get_db

# CLEAN
from esg_pipeline.clean.normalize import normalize_submissions

# GOLD
from esg_pipeline.aggregate.build_scores import format_score, summarize_by_company_year
from esg_pipeline.aggregate.export import write_year_summaries_csv
from esg_pipeline.aggregate.load_scores import SCORES_COLLECTION, load_company_scores

from esg_pipeline.models import CATEGORIES, ScoreReport
from esg_pipeline.pipeline import build_score_report, repository_from_settings
from esg_pipeline.refresh import ScoreRefresher

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _print_report(report: ScoreReport) -> None:
    """Print the year series and the overall summary as a plain table."""
    header = ["year", *CATEGORIES, "average"]
    print(" | ".join(f"{h:>13}" for h in header))
    for row in report.years:
        cells = [str(row.year), *(format_score(getattr(row, c)) for c in header[1:])]
        print(" | ".join(f"{c:>13}" for c in cells))

    o = report.overall
    cells = ["all", *(format_score(getattr(o, c)) for c in CATEGORIES), format_score(o.overall)]
    print(" | ".join(f"{c:>13}" for c in cells))


# --------------------------------------------------
# SUMMARY
# --------------------------------------------------
def cmd_summary(args: argparse.Namespace) -> None:
    """Print year-over-year and overall scores (or per-company scores).

    Args:
        args: argparse namespace with `by_company` and `partitions`.
    """
    s = get_settings()
    repo = repository_from_settings(s)

    if args.by_company:
        entries = normalize_submissions(repo.list_submissions())
        for row in summarize_by_company_year(entries):
            cells = [format_score(getattr(row, c)) for c in (*CATEGORIES, "overall")]
            print(f"{row.company_name} | {row.year} | " + " | ".join(cells))
        return

    _print_report(build_score_report(repo, npartitions=args.partitions))


# --------------------------------------------------
# EXPORT
# --------------------------------------------------
def cmd_export(args: argparse.Namespace) -> None:
    """Write the year-over-year series to a CSV file.

    Args:
        args: argparse namespace with `out` and `partitions`.
    """
    s = get_settings()
    report = build_score_report(repository_from_settings(s), npartitions=args.partitions)
    write_year_summaries_csv(report.years, Path(args.out))


# --------------------------------------------------
# LOAD SCORES
# --------------------------------------------------
def cmd_load_scores(_: argparse.Namespace) -> None:
    """Compute per-company/year scores and upsert them into `esg_scores`."""
    s = get_settings()
    entries = normalize_submissions(repository_from_settings(s).list_submissions())
    rows = summarize_by_company_year(entries)

    client = get_client(s.mongo_uri)
    db = get_db(client, s.mongo_db)
    written = load_company_scores(rows, db[SCORES_COLLECTION])
    client.close()

    log.info("esg_scores rows written=%d", written)


# --------------------------------------------------
# WATCH
# --------------------------------------------------
def cmd_watch(args: argparse.Namespace) -> None:
    """Re-run the pipeline every `ESG_POLL_SECONDS` and print each report.

    Args:
        args: argparse namespace with `max_runs`.
    """
    s = get_settings()
    refresher = ScoreRefresher(
        repository_from_settings(s),
        on_report=_print_report,
        interval_seconds=s.poll_seconds,
    )
    refresher.run(max_runs=args.max_runs)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="esg-pipeline")
    p.add_argument("--log-level", default=os.getenv("ESG_LOG_LEVEL", "INFO"))
    sub = p.add_subparsers(dest="cmd", required=True)

    p_summary = sub.add_parser("summary")
    p_summary.add_argument("--by-company", action="store_true")
    p_summary.add_argument("--partitions", type=int, default=1)

    p_export = sub.add_parser("export")
    p_export.add_argument("--out", default="reports/esg_scores_by_year.csv")
    p_export.add_argument("--partitions", type=int, default=1)

    sub.add_parser("load-scores")

    p_watch = sub.add_parser("watch")
    p_watch.add_argument("--max-runs", type=int, default=None)

    return p


def main() -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    args = build_parser().parse_args()
    configure_logging(Path("logs/pipeline.log"), level=args.log_level)

    if args.cmd == "summary":
        cmd_summary(args)
    elif args.cmd == "export":
        cmd_export(args)
    elif args.cmd == "load-scores":
        cmd_load_scores(args)
    elif args.cmd == "watch":
        cmd_watch(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
