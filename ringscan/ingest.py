#!/usr/bin/env python3
"""Scan a gigantic galaxy dump for ringed, landable, atmospheric worlds in empty systems."""

import argparse, logging, pathlib, sqlite3
from typing import Optional

from ringscan import storage
from ringscan.errors import RingscanError
from ringscan.json_worker.line_source import LineSource
from ringscan.json_worker.reassembler import ObjectReassembler
from ringscan.predicate import match_system
from ringscan.progress import IngestStats, ProgressReporter
from ringscan.shared.fragment_guard import FragmentGuard
from ringscan.shared.settings import DEFAULT_INPUT, IngestSettings, settings_from_env

logger = logging.getLogger(__name__)


def process(path: pathlib.Path, settings: IngestSettings,
            reporter: Optional[ProgressReporter] = None) -> IngestStats:
    """Run one full pass over ``path`` and persist every matching system."""
    source = LineSource(path, chunk_size=settings.chunk_size)
    structure = source.sniff_structure()
    if structure != 'array':
        logger.warning("%s does not start with a JSON array (detected %s)", path, structure)

    reporter = reporter or ProgressReporter(every=settings.report_every, precision=settings.rate_precision)
    reassembler = ObjectReassembler(FragmentGuard(settings.max_fragment_chars))
    stats = IngestStats()

    conn = storage.connect(settings.db_path)
    try:
        storage.ensure_schema(conn)
        writer = storage.BatchedWriter(conn, batch_size=settings.batch_size)
        writer.begin()

        for system in reassembler.records(source):
            stats.scanned += 1
            row = match_system(system)
            if row is None:
                continue
            writer.write(row)
            stats.matched += 1
            stats.batches = writer.batches_committed
            reporter.on_match(stats)

        writer.flush()
        stats.batches = writer.batches_committed
        storage.analyze(conn)
    except (RingscanError, sqlite3.Error, OSError, UnicodeDecodeError) as e:
        logger.error("ingest failed after %s records (%s matched): %s", stats.scanned, stats.matched, e)
        raise
    finally:
        conn.close()

    stats.stop()
    reporter.summary(stats)
    return stats


def build_arg_parser() -> argparse.ArgumentParser:
    env = settings_from_env()
    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("file", type=pathlib.Path, nargs="?", default=pathlib.Path(DEFAULT_INPUT))
    ap.add_argument("--db", type=pathlib.Path, default=env.db_path, help="SQLite output file")
    ap.add_argument("--batch-size", type=int, default=env.batch_size, help="rows per transaction")
    ap.add_argument("--report-every", type=int, default=env.report_every, help="log progress every N matches")
    ap.add_argument("--chunk-size", type=int, default=env.chunk_kb, help="read buffer size KB")
    ap.add_argument("--max-fragment-chars", type=int, default=env.max_fragment_chars,
                    help="abort when a single record grows past this many characters")
    ap.add_argument("--precision", type=int, default=env.rate_precision, help="decimals in match rate")
    ap.add_argument("--metrics-file", type=pathlib.Path, default=env.metrics_file,
                    help="write Prometheus textfile metrics here at the end of the run")
    ap.add_argument("--debug", action="store_true", default=env.debug)
    return ap


def cli(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in ("batch_size", "report_every", "chunk_size", "max_fragment_chars"):
        if getattr(args, name) < 1:
            raise SystemExit(f"--{name.replace('_', '-')} must be >= 1")
    if args.precision < 0:
        raise SystemExit("--precision must be >= 0")

    settings = IngestSettings(
        db_path=args.db,
        batch_size=args.batch_size,
        report_every=args.report_every,
        chunk_kb=args.chunk_size,
        max_fragment_chars=args.max_fragment_chars,
        rate_precision=args.precision,
        metrics_file=args.metrics_file,
        debug=args.debug,
    )
    reporter = ProgressReporter(every=settings.report_every, precision=settings.rate_precision)
    logger.info("Scanning %s into %s (batch size %s)", args.file, settings.db_path, settings.batch_size)
    process(args.file, settings, reporter)
    if settings.metrics_file:
        reporter.write_textfile(settings.metrics_file)


if __name__ == "__main__":
    cli()
