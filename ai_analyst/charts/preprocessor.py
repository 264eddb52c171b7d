"""
Response Preprocessor

Pulls chart candidates out of free-form model replies. Model output is
untrusted: blocks may carry comments, trailing commas or arithmetic, and any
single block may be broken without affecting its siblings.
"""

from typing import Any, List, Optional, Tuple
import json
import math
import re
import logging

from .models import CandidateFailure, PreprocessResult
from .exceptions import MalformedCandidateError

logger = logging.getLogger(__name__)

FENCED_BLOCK_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
FIRST_BLOCK_RE = re.compile(r"```json[\s\S]*?```", re.IGNORECASE)
TRAILING_COMMA_RE = re.compile(r",(\s*?[}\]])")
RATIO_FIELD_RE = re.compile(r'("value"\s*:\s*)([0-9.]+\s*/\s*[0-9.]+)(?=\s*(?:[,}\]]|$))')
RATIO_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*/\s*(\d+(?:\.\d+)?|\.\d+)\s*$")
BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n")

TYPE_MARKER = '"type"'
DATA_MARKER = '"data"'


def try_eval_ratio(text: str) -> Optional[float]:
    """
    Evaluate ``<number> / <number>`` and nothing else.

    Returns None when the text is any other shape, when the denominator is
    zero, or when the result is not finite.
    """
    match = RATIO_RE.match(text)
    if not match:
        return None
    numerator = float(match.group(1))
    denominator = float(match.group(2))
    if denominator == 0:
        return None
    value = numerator / denominator
    if not math.isfinite(value):
        return None
    return value


def evaluate_ratio_fields(text: str) -> str:
    """Replace ``"value": a / b`` with its decimal result."""
    def _replace(match: re.Match) -> str:
        value = try_eval_ratio(match.group(2))
        if value is None:
            return match.group(0)
        return f"{match.group(1)}{value!r}"

    return RATIO_FIELD_RE.sub(_replace, text)


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments that sit outside JSON strings."""
    out = []
    index = 0
    in_string = False
    escaped = False
    while index < len(text):
        char = text[index]
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
        elif text.startswith("//", index):
            end = text.find("\n", index)
            index = len(text) if end == -1 else end
            continue
        elif text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = len(text) if end == -1 else end + 2
            continue
        out.append(char)
        index += 1
    return "".join(out)


def clean_candidate_text(text: str) -> str:
    """Strip comments and trailing commas, then fold ratio values."""
    cleaned = strip_comments(text)
    cleaned = TRAILING_COMMA_RE.sub(r"\1", cleaned)
    return evaluate_ratio_fields(cleaned)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_candidate(text: str) -> Any:
    """
    Clean and strictly parse one candidate.

    Raises:
        MalformedCandidateError: If the cleaned text is not valid JSON
    """
    cleaned = clean_candidate_text(text)
    try:
        return json.loads(cleaned, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedCandidateError(str(e), source=text) from e


def _match_brace(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at ``start``, honouring JSON strings."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def find_object_spans(text: str) -> List[Tuple[int, int]]:
    """Balanced ``{...}`` spans mentioning both "type" and "data", outermost first."""
    spans = []
    index = 0
    while index < len(text):
        if text[index] != "{":
            index += 1
            continue
        end = _match_brace(text, index)
        if end is None:
            index += 1
            continue
        span = text[index:end + 1]
        if TYPE_MARKER in span and DATA_MARKER in span:
            spans.append((index, end + 1))
            index = end + 1
        else:
            index += 1
    return spans


class ResponsePreprocessor:
    """Extracts, sanitizes and parses structured blocks embedded in model text."""

    def preprocess(self, text: str) -> PreprocessResult:
        """
        Split a model reply into prose and parsed chart candidates.

        Args:
            text: Raw model reply

        Returns:
            PreprocessResult with cleaned prose, candidates in discovery order,
            per-candidate failures and the verbatim first fenced block
        """
        text = text or ""
        prose = text
        result = PreprocessResult(prose="")

        blocks = [(match.group(0), match.group(1)) for match in FENCED_BLOCK_RE.finditer(text)]
        if not blocks:
            blocks = [(text[start:end], text[start:end]) for start, end in find_object_spans(text)]
            if blocks:
                logger.debug(f"No fenced blocks; found {len(blocks)} inline object candidate(s)")

        for span, body in blocks:
            self._collect(body, result)
            prose = prose.replace(span, "", 1)

        first_block = FIRST_BLOCK_RE.search(text)
        result.first_block = first_block.group(0) if first_block else None
        result.prose = BLANK_LINES_RE.sub("\n\n", prose).strip()
        return result

    def _collect(self, body: str, result: PreprocessResult) -> None:
        try:
            result.candidates.append(parse_candidate(body))
        except MalformedCandidateError as e:
            logger.warning(f"Skipping malformed chart candidate: {e.reason}")
            result.failures.append(CandidateFailure(source=body, error=e.reason))


def preprocess(text: str) -> PreprocessResult:
    """Convenience wrapper around ResponsePreprocessor.preprocess."""
    return ResponsePreprocessor().preprocess(text)
