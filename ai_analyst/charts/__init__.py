"""
Charts Package - Chart Extraction for the AI Analyst

This package turns free-form model replies into render-ready chart
descriptors while tolerating malformed or adversarial content.

Core Components:
- ResponsePreprocessor: Finds and parses structured blocks in model text
- ChartSpecValidator: Accepts or rejects parsed candidates
- infer_roles: Picks category/value/axis fields for rendering
- TableMarkdownTranspiler: Structures markdown tables found in prose

Usage:
    from ai_analyst.charts import ResponsePreprocessor, ChartSpecValidator, infer_roles_for_spec

    result = ResponsePreprocessor().preprocess(reply_text)
    specs = ChartSpecValidator().validate_all(result.candidates)
"""

from .preprocessor import ResponsePreprocessor, preprocess, try_eval_ratio
from .validator import ChartSpecValidator
from .roles import infer_roles, infer_roles_for_spec
from .tables import TableMarkdownTranspiler, MarkdownTable, CellKind, extract_tables
from .models import (
    ChartType,
    ChartSpec,
    PreprocessResult,
    CandidateFailure,
    Resolved,
    ResolvedScatter,
    InsufficientDimensionality,
    RoleAssignment,
)
from .exceptions import ChartExtractionError, MalformedCandidateError, InvalidChartSpecError

__all__ = [
    'ResponsePreprocessor',
    'preprocess',
    'try_eval_ratio',
    'ChartSpecValidator',
    'infer_roles',
    'infer_roles_for_spec',
    'TableMarkdownTranspiler',
    'MarkdownTable',
    'CellKind',
    'extract_tables',
    'ChartType',
    'ChartSpec',
    'PreprocessResult',
    'CandidateFailure',
    'Resolved',
    'ResolvedScatter',
    'InsufficientDimensionality',
    'RoleAssignment',
    'ChartExtractionError',
    'MalformedCandidateError',
    'InvalidChartSpecError'
]
