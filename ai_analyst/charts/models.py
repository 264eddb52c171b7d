"""
Chart Data Models

Internal data models for chart extraction: chart descriptors, role
assignments and preprocessing results. API models live in ai_analyst.models.
"""

from typing import Dict, List, Any, Optional, Union
from enum import Enum
from dataclasses import dataclass, field

Record = Dict[str, Any]


class ChartType(str, Enum):
    """Supported chart types."""
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class Resolved:
    """Category/value roles for bar, line, pie and area charts."""
    category_key: str
    value_key: str

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': 'resolved', 'category_key': self.category_key, 'value_key': self.value_key}


@dataclass(frozen=True)
class ResolvedScatter:
    """Numeric x/y roles for scatter charts."""
    x_key: str
    y_key: str

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': 'resolved_scatter', 'x_key': self.x_key, 'y_key': self.y_key}


@dataclass(frozen=True)
class InsufficientDimensionality:
    """The first record does not carry enough fields to place the chart."""

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': 'insufficient_dimensionality'}


RoleAssignment = Union[Resolved, ResolvedScatter, InsufficientDimensionality]


@dataclass
class ChartSpec:
    """A validated, render-ready chart descriptor."""
    type: str
    data: List[Record]
    title: Optional[str] = None
    description: Optional[str] = None
    roles: Optional[RoleAssignment] = None

    @property
    def is_supported(self) -> bool:
        """Whether the renderer knows this chart type."""
        return self.type in ChartType.values()

    @property
    def is_scatter(self) -> bool:
        return self.type == ChartType.SCATTER.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the external renderer."""
        return {
            'type': self.type,
            'title': self.title,
            'description': self.description,
            'data': self.data,
            'roles': self.roles.to_dict() if self.roles is not None else None
        }


@dataclass
class CandidateFailure:
    """A candidate span that could not be parsed."""
    source: str
    error: str


@dataclass
class PreprocessResult:
    """Prose with structured blocks removed, plus the parsed candidates."""
    prose: str
    candidates: List[Any] = field(default_factory=list)
    failures: List[CandidateFailure] = field(default_factory=list)
    first_block: Optional[str] = None
