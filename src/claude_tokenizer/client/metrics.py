"""Metrics panel rendering."""
from __future__ import annotations
from dataclasses import dataclass

from claude_tokenizer.common.schema import FileKind, TokenResult

PLACEHOLDER = "—"
BUSY = "..."

_FILE_LABELS = {FileKind.IMAGE: "Image", FileKind.PDF: "PDF"}


@dataclass(frozen=True)
class MetricRow:
    label: str
    value: str


def format_count(value: int | None, is_processing: bool = False) -> str:
    if is_processing:
        return BUSY
    if value is None:
        return PLACEHOLDER
    return f"{value:,}"


def metric_rows(
    stats: TokenResult,
    *,
    is_processing: bool,
    file_kind: FileKind,
    model_name: str,
) -> list[MetricRow]:
    """
    Rows shown in the metrics panel, in display order.

    GPT-4o and Gemini rows only appear for text input; the file row only
    when the counts came from an uploaded file.

    Args:
        stats: Current counts.
        is_processing: Whether a request is in flight.
        file_kind: Kind of the selected file, TEXT when typing.
        model_name: Display name of the selected model.
    """
    file_name = stats.source_file_name
    rows = [MetricRow("Claude Tokens", format_count(stats.primary_tokens or 0, is_processing))]
    if file_kind is FileKind.TEXT or not file_name:
        rows.append(MetricRow("GPT-4o Tokens", format_count(stats.secondary_tokens, is_processing)))
        rows.append(MetricRow("Gemini Tokens", format_count(stats.tertiary_tokens, is_processing)))
    rows.append(MetricRow("Characters", format_count(stats.char_count, is_processing)))
    rows.append(MetricRow("Model", model_name))
    if file_name:
        rows.append(MetricRow(_FILE_LABELS.get(file_kind, "File"), file_name))
    return rows


def render_metrics(rows: list[MetricRow]) -> str:
    width = max(len(r.label) for r in rows)
    return "\n".join(f"{r.label.ljust(width)}  {r.value}" for r in rows)
