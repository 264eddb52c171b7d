import pytest

from ai_analyst.charts import ResponsePreprocessor, preprocess, try_eval_ratio
from ai_analyst.charts.preprocessor import (
    clean_candidate_text,
    evaluate_ratio_fields,
    find_object_spans,
    parse_candidate,
    strip_comments,
)
from ai_analyst.charts.exceptions import MalformedCandidateError


def _block(body: str) -> str:
    return f"```json\n{body}\n```"


def test_extracts_every_fenced_block_in_order():
    text = "\n".join([
        "Intro.",
        _block('{"type": "bar", "data": [{"a": "x", "b": 1}]}'),
        "Middle.",
        _block('{"type": "line", "data": [{"a": "y", "b": 2}]}'),
        _block('{"type": "pie", "data": [{"a": "z", "b": 3}]}'),
        "Outro."
    ])

    result = preprocess(text)

    assert [c["type"] for c in result.candidates] == ["bar", "line", "pie"]
    assert "```" not in result.prose
    assert '"type"' not in result.prose
    assert result.prose.startswith("Intro.")
    assert result.prose.endswith("Outro.")


def test_ratio_value_is_folded_to_decimal():
    result = preprocess(_block('{"type": "pie", "data": [{"name": "A", "value": 4/5}]}'))

    assert result.candidates[0]["data"][0]["value"] == pytest.approx(0.8)


def test_ratio_with_decimals_and_spaces():
    assert evaluate_ratio_fields('"value" : 1.5 / 3 }') == '"value" : 0.5 }'


def test_non_ratio_value_is_left_untouched():
    text = '{"data": [{"value": "x()"}]}'
    assert evaluate_ratio_fields(text) == text


def test_code_like_value_rejects_whole_candidate():
    body = '{"type": "bar", "data": [{"name": "A", "value": x()}]}'
    result = preprocess("Before\n" + _block(body) + "\nAfter")

    assert result.candidates == []
    assert len(result.failures) == 1
    assert "x()" not in result.prose
    assert result.prose == "Before\n\nAfter"


def test_chained_division_is_not_evaluated():
    text = '{"value": 4/5/2}'
    assert evaluate_ratio_fields(text) == text


@pytest.mark.parametrize("expr,expected", [
    ("4/5", 0.8),
    (" 10 / 4 ", 2.5),
    (".5/2", 0.25),
    ("3.0/1.5", 2.0),
])
def test_try_eval_ratio_accepts_two_literals(expr, expected):
    assert try_eval_ratio(expr) == pytest.approx(expected)


@pytest.mark.parametrize("expr", [
    "4/0",
    "4*5",
    "4/5/2",
    "__import__('os')",
    "1e3/2",
    "-4/5",
    "4..5/2",
    "",
])
def test_try_eval_ratio_rejects_everything_else(expr):
    assert try_eval_ratio(expr) is None


def test_comments_and_trailing_commas_are_cleaned():
    body = """{
  // chart suggestion
  "type": "bar", /* inline */
  "data": [
    {"region": "North", "sales": 100,},
    {"region": "South", "sales": 80},
  ],
}"""
    candidate = parse_candidate(body)

    assert candidate["type"] == "bar"
    assert len(candidate["data"]) == 2
    assert candidate["data"][0] == {"region": "North", "sales": 100}


def test_url_inside_string_survives_comment_stripping():
    result = preprocess(_block('{"type":"bar","title":"See https://x.io","data":[{"a":"x","b":1}]}'))

    assert result.failures == []
    assert result.candidates[0]["title"] == "See https://x.io"


def test_comment_markers_inside_strings_are_kept():
    text = '{"note": "a /* not a comment */ b", "escaped": "quote \\" // still text"} // real comment'

    assert strip_comments(text) == '{"note": "a /* not a comment */ b", "escaped": "quote \\" // still text"} '


def test_comments_outside_strings_are_removed():
    assert strip_comments('{"a": 1, /* x */ "b": 2} // tail\n') == '{"a": 1,  "b": 2} \n'


def test_clean_candidate_text_strips_trailing_commas():
    assert clean_candidate_text('[1, 2, ]') == '[1, 2 ]'
    assert clean_candidate_text('{"a": 1,\n}') == '{"a": 1\n}'


def test_non_standard_constants_are_rejected():
    with pytest.raises(MalformedCandidateError):
        parse_candidate('{"value": NaN}')


def test_bad_candidate_does_not_abort_siblings():
    text = "\n".join([
        _block('{"type": "bar", "data": [{"a": "x", "b": 1}]}'),
        _block('{"type": "line", "data": [ broken'),
        _block('{"type": "pie", "data": [{"a": "z", "b": 3}]}'),
    ])

    result = preprocess(text)

    assert [c["type"] for c in result.candidates] == ["bar", "pie"]
    assert len(result.failures) == 1
    assert result.prose == ""


def test_inline_objects_used_when_no_fenced_blocks():
    text = (
        'Here is a chart: {"type": "bar", "title": "T", "data": [{"k": "a", "v": 1}, {"k": "b", "v": 2}]} '
        'and that is all.'
    )

    result = preprocess(text)

    assert len(result.candidates) == 1
    assert result.candidates[0]["data"][1] == {"k": "b", "v": 2}
    assert result.prose == "Here is a chart:  and that is all."
    assert result.first_block is None


def test_inline_scan_skipped_when_fenced_block_present():
    text = _block('{"type": "bar", "data": [{"a": "x", "b": 1}]}') + '\n{"type": "pie", "data": [{"a": 1}]}'

    result = preprocess(text)

    assert len(result.candidates) == 1
    assert '{"type": "pie"' in result.prose


def test_find_object_spans_ignores_braces_inside_strings():
    text = 'x {"type": "bar", "title": "a } b", "data": [{"k": 1}]} y'
    spans = find_object_spans(text)

    assert len(spans) == 1
    start, end = spans[0]
    assert text[start:end].endswith("]}")


def test_find_object_spans_requires_both_markers():
    assert find_object_spans('{"type": "bar"} {"data": []}') == []


def test_first_block_is_kept_verbatim_even_when_invalid():
    broken = _block('{"type": "bar", "data": oops}')
    result = ResponsePreprocessor().preprocess("Text\n" + broken + "\n" + _block('{"type": "pie", "data": [{"a": 1}]}'))

    assert result.first_block == broken
    assert len(result.candidates) == 1


def test_blank_lines_are_collapsed_and_trimmed():
    result = preprocess("\n\nFirst\n\n\n\n\nSecond\n  \n\n  \nThird\n\n")

    assert result.prose == "First\n\nSecond\n\nThird"


def test_empty_and_none_text():
    assert preprocess("").prose == ""
    assert preprocess(None).candidates == []
