from __future__ import annotations

from claude_tokenizer.client.metrics import metric_rows, render_metrics
from claude_tokenizer.common.schema import FileKind, TokenResult


def _values(rows) -> dict[str, str]:  # noqa: ANN001
    return {r.label: r.value for r in rows}


def test_text_input_shows_all_estimates() -> None:
    stats = TokenResult(primary_tokens=1234, secondary_tokens=1100, tertiary_tokens=None, char_count=5678)
    rows = metric_rows(stats, is_processing=False, file_kind=FileKind.TEXT, model_name="Claude 3.7 Sonnet")
    assert _values(rows) == {
        "Claude Tokens": "1,234",
        "GPT-4o Tokens": "1,100",
        "Gemini Tokens": "—",
        "Characters": "5,678",
        "Model": "Claude 3.7 Sonnet",
    }


def test_missing_primary_renders_zero() -> None:
    rows = metric_rows(TokenResult(), is_processing=False, file_kind=FileKind.TEXT, model_name="m")
    assert _values(rows)["Claude Tokens"] == "0"


def test_image_hides_estimates_and_names_file() -> None:
    stats = TokenResult(primary_tokens=800, char_count=2048, source_file_name="cat.png")
    rows = metric_rows(stats, is_processing=False, file_kind=FileKind.IMAGE, model_name="m")
    assert [r.label for r in rows] == ["Claude Tokens", "Characters", "Model", "Image"]
    assert rows[-1].value == "cat.png"


def test_text_file_is_labelled_file() -> None:
    stats = TokenResult(primary_tokens=5, secondary_tokens=4, char_count=20, source_file_name="a.txt")
    rows = metric_rows(stats, is_processing=False, file_kind=FileKind.TEXT, model_name="m")
    assert "GPT-4o Tokens" in _values(rows)
    assert rows[-1].label == "File"


def test_processing_masks_numbers() -> None:
    rows = metric_rows(TokenResult(primary_tokens=9), is_processing=True, file_kind=FileKind.TEXT, model_name="m")
    values = _values(rows)
    assert values["Claude Tokens"] == "..."
    assert values["Characters"] == "..."
    assert values["Model"] == "m"


def test_render_aligns_labels() -> None:
    rows = metric_rows(TokenResult(primary_tokens=1), is_processing=False, file_kind=FileKind.TEXT, model_name="m")
    lines = render_metrics(rows).splitlines()
    assert lines[0] == "Claude Tokens  1"
    assert "Characters     0" in lines
