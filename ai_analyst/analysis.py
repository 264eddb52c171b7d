"""
Analysis Context

Precomputed dataset statistics used by the analysis prompting strategy:
KPIs, hypotheses, top performers, totals and per-field summaries.
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
import logging

import pandas as pd

logger = logging.getLogger(__name__)

TOP_VALUES_LIMIT = 5


def _label(key: str) -> str:
    return key.replace("_", " ").upper()


@dataclass
class AnalysisContext:
    """Aggregate statistics available in memory for one file."""
    file_name: str
    category: Optional[str] = None
    kpis: Dict[str, Any] = field(default_factory=dict)
    hypothesis: List[str] = field(default_factory=list)
    high_performers: Dict[str, Any] = field(default_factory=dict)
    totals: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, analysis: Optional[Dict[str, Any]], summary: Optional[Dict[str, Any]] = None,
                     file_name: str = "your file") -> "AnalysisContext":
        """Build a context from the analysis service payload (``{"insights": {...}}``)."""
        insights = (analysis or {}).get("insights") or {}
        return cls(
            file_name=file_name,
            category=insights.get("category"),
            kpis=insights.get("kpis") or {},
            hypothesis=list(insights.get("hypothesis") or []),
            high_performers=insights.get("highPerformers") or {},
            totals=insights.get("totals") or {},
            summary=summary or {}
        )

    def format_analysis(self) -> str:
        """Render KPIs, hypotheses, top performers and totals as prompt text."""
        lines: List[str] = []

        if self.kpis:
            lines.append("Key Performance Indicators:")
            lines.extend(f"- {_label(key)}: {value}" for key, value in self.kpis.items())
            lines.append("")

        if self.hypothesis:
            lines.append("Analysis Hypothesis:")
            lines.extend(f"{index}. {hyp}" for index, hyp in enumerate(self.hypothesis, start=1))
            lines.append("")

        if self.high_performers:
            lines.append("Top Performers:")
            lines.extend(self._format_grouped_lists(self.high_performers))
            lines.append("")

        if self.totals:
            lines.append("Data Totals:")
            lines.extend(self._format_grouped_lists(self.totals))

        return "\n".join(lines).strip()

    def format_summary(self) -> str:
        """Render per-field summaries; empty string when there are none."""
        if not self.summary:
            return ""
        lines = ["**Data Summary:**"]
        for name, details in self.summary.items():
            details = details or {}
            kind = details.get("type")
            if kind == "numeric":
                text = ", ".join(
                    f"{stat}={details.get(stat)}" for stat in ("count", "min", "max", "mean", "median", "stddev")
                )
            elif kind == "categorical":
                text = f"unique_count={details.get('unique_count')}"
                if details.get("top_values"):
                    text += ", top_values=" + ", ".join(
                        f"{item.get('value')} ({item.get('count')})" for item in details["top_values"]
                    )
            elif kind == "boolean":
                text = ", ".join(f"{item.get('value')}: {item.get('count')}" for item in details.get("counts") or [])
            else:
                text = ""
            lines.append(f"- {name}: {text}")
        return "\n".join(lines)

    @staticmethod
    def _format_grouped_lists(groups: Dict[str, Any]) -> List[str]:
        lines = []
        for group, data in groups.items():
            if not isinstance(data, dict):
                continue
            lines.append(f"- {_label(group)}:")
            for key, values in data.items():
                if isinstance(values, list):
                    lines.append(f"  {key}: {', '.join(str(value) for value in values)}")
        return lines


def _native(value: Any) -> Any:
    """Convert pandas/numpy scalars to plain Python values."""
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float):
        return round(value, 4)
    return value


def summarize_records(records: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Compute per-field summaries for a record set.

    Numeric fields get count/min/max/mean/median/stddev (population),
    boolean fields get value counts, everything else is categorical with a
    unique count and the most frequent values.
    """
    if not records:
        return {}

    df = pd.DataFrame.from_records(records)
    summary: Dict[str, Dict[str, Any]] = {}

    for column in df.columns:
        series = df[column].dropna()
        if pd.api.types.is_bool_dtype(series):
            counts = series.value_counts()
            summary[column] = {
                "type": "boolean",
                "counts": [{"value": bool(value), "count": int(count)} for value, count in counts.items()]
            }
        elif pd.api.types.is_numeric_dtype(series) and len(series) > 0:
            summary[column] = {
                "type": "numeric",
                "count": int(series.count()),
                "min": _native(series.min()),
                "max": _native(series.max()),
                "mean": _native(series.mean()),
                "median": _native(series.median()),
                "stddev": _native(series.std(ddof=0))
            }
        else:
            values = series.astype(str)
            top = values.value_counts().head(TOP_VALUES_LIMIT)
            summary[column] = {
                "type": "categorical",
                "unique_count": int(values.nunique()),
                "top_values": [{"value": value, "count": int(count)} for value, count in top.items()]
            }

    logger.debug(f"Summarized {len(df)} records across {len(summary)} fields")
    return summary
