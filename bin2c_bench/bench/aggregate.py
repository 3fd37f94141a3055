# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Throughput aggregation and the evaluation report.

Throughput per label is a ratio of sums:

    (sum of byte_count / 1e6) / (sum of elapsed_seconds)

not a mean of per-run rates. A label that was measured more often simply
contributes more bytes and more seconds, and one unusually fast tiny run
can't dominate the figure. Labels whose total elapsed time is zero have no
defined rate and are left out.

The report has one section per category, always in the same order: labels
that contain none of the compiler-tool markers first, then one section per
marker. Marker sections are filtered independently, so a label that contains
two markers shows up in both. Each section is sorted by throughput, slowest
first; equal rates keep the order the labels were first seen in.
"""

import math
from collections.abc import Iterable, Sequence
from typing import IO

from bin2c_bench.bench.models import BYTES_PER_MB, AggregateEntry, BenchmarkRecord, ReportSection
from bin2c_bench.config.schema import ReportConfig


def aggregate(records: Iterable[BenchmarkRecord]) -> list[AggregateEntry]:
    """
    Compute the throughput of every label, in first-seen order.

    Elapsed times are summed with math.fsum so the result does not depend on
    the order the records were stored in.
    """
    byte_totals: dict[str, int] = {}
    elapsed_by_label: dict[str, list[float]] = {}

    for record in records:
        byte_totals[record.label] = byte_totals.get(record.label, 0) + record.byte_count
        elapsed_by_label.setdefault(record.label, []).append(record.elapsed_seconds)

    entries: list[AggregateEntry] = []
    for label, total_bytes in byte_totals.items():
        total_seconds = math.fsum(elapsed_by_label[label])
        if total_seconds <= 0:
            continue
        entries.append(
            AggregateEntry(
                label=label,
                throughput_mb_per_s=(total_bytes / BYTES_PER_MB) / total_seconds,
            )
        )
    return entries


def categorize(label: str, markers: Sequence[str]) -> list[str]:
    """Markers contained in `label`, in marker order. Empty means baseline."""
    return [marker for marker in markers if marker in label]


def _ranked(entries: Iterable[AggregateEntry]) -> tuple[AggregateEntry, ...]:
    # sorted() is stable, which is what keeps ties in first-seen order.
    return tuple(sorted(entries, key=lambda entry: entry.throughput_mb_per_s))


def build_sections(entries: Sequence[AggregateEntry], markers: Sequence[str]) -> list[ReportSection]:
    """Split entries into the baseline section followed by one section per marker."""
    sections = [
        ReportSection(
            marker=None,
            entries=_ranked(e for e in entries if not categorize(e.label, markers)),
        )
    ]
    for marker in markers:
        sections.append(
            ReportSection(
                marker=marker,
                entries=_ranked(e for e in entries if marker in e.label),
            )
        )
    return sections


def render_report(sections: Sequence[ReportSection], unit: str = "MB/s") -> str:
    """
    Render sections as an aligned table.

    Columns are label (left aligned), throughput (right aligned) and unit.
    Sections are separated by one blank line, including empty ones, so a
    given section is always found at the same position.
    """
    rows = [
        (entry.label, f"{entry.throughput_mb_per_s:.2f}")
        for section in sections
        for entry in section.entries
    ]
    label_width = max((len(label) for label, _ in rows), default=0)
    value_width = max((len(value) for _, value in rows), default=0)

    lines: list[str] = []
    for index, section in enumerate(sections):
        if index > 0:
            lines.append("")
        for entry in section.entries:
            value = f"{entry.throughput_mb_per_s:.2f}"
            lines.append(f"{entry.label:<{label_width}}  {value:>{value_width}}  {unit}")
    return "\n".join(lines) + "\n"


def evaluate(records: Iterable[BenchmarkRecord], report_config: ReportConfig) -> str:
    """Aggregate, group, sort and render: the full report for a set of records."""
    entries = aggregate(records)
    sections = build_sections(entries, report_config.markers)
    return render_report(sections, report_config.unit)


def emit_report(
    records: Iterable[BenchmarkRecord],
    report_config: ReportConfig,
    stream: IO[str],
) -> str:
    """Write the report to `stream` (stderr in practice) and return it."""
    report = evaluate(records, report_config)
    stream.write(report)
    stream.flush()
    return report
