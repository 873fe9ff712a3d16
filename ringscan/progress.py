"""Run counters and the periodic progress report."""

import logging
import pathlib
import time
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, write_to_textfile

logger = logging.getLogger(__name__)


def match_rate(matched: int, scanned: int) -> float:
    """Percentage of scanned records that matched."""
    if not scanned:
        return 0.0
    return matched / scanned * 100


def format_rate(matched: int, scanned: int, precision: int = 3) -> str:
    return f"{match_rate(matched, scanned):.{precision}f}%"


class IngestStats:
    """Counters for one run, owned by the driver."""

    __slots__ = ('scanned', 'matched', 'batches', 'started', 'finished')

    def __init__(self):
        self.scanned = 0
        self.matched = 0
        self.batches = 0
        self.started = time.perf_counter()
        self.finished: Optional[float] = None

    @property
    def elapsed(self) -> float:
        end = self.finished if self.finished is not None else time.perf_counter()
        return end - self.started

    @property
    def rate(self) -> float:
        return match_rate(self.matched, self.scanned)

    def stop(self) -> None:
        self.finished = time.perf_counter()


class ProgressReporter:
    """Log a progress line every ``every`` matches and mirror counters to Prometheus.

    Prometheus counters are advanced in bulk when a report is emitted, never
    per record.
    """

    def __init__(self, every: int = 500, precision: int = 3, registry: Optional[CollectorRegistry] = None):
        if every < 1:
            raise ValueError("every must be >= 1")
        self.every = every
        self.precision = precision
        self.registry = registry if registry is not None else CollectorRegistry()
        self.scanned_total = Counter(
            "ringscan_records_scanned", "Systems decoded from the dump", registry=self.registry)
        self.matched_total = Counter(
            "ringscan_records_matched", "Systems persisted as matches", registry=self.registry)
        self.batches_total = Counter(
            "ringscan_batches_committed", "Write batches committed", registry=self.registry)
        self._published = (0, 0, 0)

    def on_match(self, stats: IngestStats) -> None:
        if stats.matched % self.every == 0:
            self.report(stats)

    def report(self, stats: IngestStats) -> None:
        logger.info("Progress - matched: %s, checked: %s, match rate: %s",
                    stats.matched, stats.scanned,
                    format_rate(stats.matched, stats.scanned, self.precision))
        self.publish(stats)

    def publish(self, stats: IngestStats) -> None:
        scanned, matched, batches = self._published
        self.scanned_total.inc(stats.scanned - scanned)
        self.matched_total.inc(stats.matched - matched)
        self.batches_total.inc(stats.batches - batches)
        self._published = (stats.scanned, stats.matched, stats.batches)

    def summary(self, stats: IngestStats) -> str:
        """Log and return the end-of-run summary."""
        self.publish(stats)
        elapsed = stats.elapsed
        throughput = stats.scanned / elapsed if elapsed > 0 else 0.0
        line = (f"Final - matched: {stats.matched}, checked: {stats.scanned}, "
                f"match rate: {format_rate(stats.matched, stats.scanned, self.precision)}, "
                f"time: {elapsed:.2f}s, rate: {throughput:.0f} systems/s")
        logger.info(line)
        return line

    def write_textfile(self, path: pathlib.Path) -> None:
        write_to_textfile(str(path), self.registry)
        logger.info("Metrics written to %s", path)
