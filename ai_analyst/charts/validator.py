"""
Chart Spec Validator

Turns parsed candidates into ChartSpec objects. Unknown chart types are kept
as-is so the renderer can decide; only structurally unusable candidates are
rejected.
"""

from typing import Any, List, Mapping, Sequence
import logging

from .models import ChartSpec
from .exceptions import InvalidChartSpecError

logger = logging.getLogger(__name__)


class ChartSpecValidator:
    """Validates parsed candidates into render-ready chart descriptors."""

    def validate(self, candidate: Any) -> ChartSpec:
        """
        Validate a single parsed candidate.

        Args:
            candidate: Value produced by the preprocessor

        Returns:
            ChartSpec for the candidate

        Raises:
            InvalidChartSpecError: If the candidate has no usable data
        """
        if not isinstance(candidate, Mapping):
            raise InvalidChartSpecError(f"expected an object, got {type(candidate).__name__}")

        chart_type = candidate.get("type")
        chart_type = "" if chart_type is None else str(chart_type)

        data = candidate.get("data")
        if not isinstance(data, Sequence) or isinstance(data, (str, bytes)):
            raise InvalidChartSpecError("missing 'data' list", chart_type=chart_type)
        if len(data) == 0:
            raise InvalidChartSpecError("'data' is empty", chart_type=chart_type)
        if not all(isinstance(row, Mapping) for row in data):
            raise InvalidChartSpecError("'data' must only contain objects", chart_type=chart_type)
        if len(data[0]) == 0:
            raise InvalidChartSpecError("first record has no fields", chart_type=chart_type)

        return ChartSpec(
            type=chart_type,
            data=[dict(row) for row in data],
            title=self._optional_text(candidate.get("title")),
            description=self._optional_text(candidate.get("description"))
        )

    def validate_all(self, candidates: List[Any]) -> List[ChartSpec]:
        """Validate candidates in order, skipping the rejected ones."""
        specs = []
        for index, candidate in enumerate(candidates):
            try:
                spec = self.validate(candidate)
            except InvalidChartSpecError as e:
                logger.info(f"Rejected chart candidate #{index}: {e.reason}")
                continue
            if not spec.is_supported:
                logger.info(f"Keeping chart candidate #{index} with unsupported type '{spec.type}'")
            specs.append(spec)
        return specs

    @staticmethod
    def _optional_text(value: Any):
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)
