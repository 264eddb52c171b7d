"""
Markdown Table Transpiler

Finds pipe-delimited markdown tables in prose and returns them as structured
rows. Cell kinds are display hints only; cell text is never changed.
"""

from typing import Dict, List, Any
from enum import Enum
from dataclasses import dataclass, field
import re
import logging

logger = logging.getLogger(__name__)

TABLE_RE = re.compile(r"\|(.+)\|\n\|([-:\s|]+)\|\n((?:\|.+\|\n?)+)")
NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
CURRENCY_RE = re.compile(r"^\$")


class CellKind(str, Enum):
    """Advisory display classification of a table cell."""
    NUMERIC = "numeric"
    DATE = "date"
    CURRENCY = "currency"
    TEXT = "text"


def classify_cell(cell: str) -> CellKind:
    if NUMERIC_RE.match(cell):
        return CellKind.NUMERIC
    if CURRENCY_RE.match(cell):
        return CellKind.CURRENCY
    if DATE_RE.match(cell):
        return CellKind.DATE
    return CellKind.TEXT


def split_row(row: str) -> List[str]:
    """Split a pipe row, dropping the empty edge cells left by outer pipes."""
    cells = [cell.strip() for cell in row.split("|")]
    if cells and cells[0] == "":
        cells = cells[1:]
    if cells and cells[-1] == "":
        cells = cells[:-1]
    return cells


@dataclass
class MarkdownTable:
    """A table found in prose."""
    headers: List[str]
    rows: List[List[str]]
    cell_kinds: List[List[CellKind]] = field(default_factory=list)

    def alignment(self) -> List[List[str]]:
        """Per-cell text alignment hint: numbers and currency are right-aligned."""
        return [
            ["right" if kind in (CellKind.NUMERIC, CellKind.CURRENCY) else "left" for kind in row]
            for row in self.cell_kinds
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'headers': self.headers,
            'rows': self.rows,
            'cell_kinds': [[kind.value for kind in row] for row in self.cell_kinds]
        }


class TableMarkdownTranspiler:
    """Detects and structures markdown tables."""

    def extract_tables(self, text: str) -> List[MarkdownTable]:
        tables = []
        text = (text or "").replace("\r\n", "\n")
        for match in TABLE_RE.finditer(text):
            header_row, _separator, data_rows = match.groups()
            # the pattern already consumed the outer pipes of the header row
            headers = [cell.strip() for cell in header_row.split("|")]
            rows = [split_row(row) for row in data_rows.strip().split("\n") if row.strip()]
            tables.append(MarkdownTable(
                headers=headers,
                rows=rows,
                cell_kinds=[[classify_cell(cell) for cell in row] for row in rows]
            ))
        if tables:
            logger.debug(f"Extracted {len(tables)} markdown table(s)")
        return tables


def extract_tables(text: str) -> List[MarkdownTable]:
    return TableMarkdownTranspiler().extract_tables(text)
