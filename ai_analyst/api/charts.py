"""
Chart API Endpoints

Stateless chart extraction: runs a model reply through the preprocessor,
validator, role inference and table transpiler without a conversation.
"""

from fastapi import APIRouter, HTTPException, status
import logging

from ..charts import (
    ChartSpecValidator,
    InsufficientDimensionality,
    ResponsePreprocessor,
    TableMarkdownTranspiler,
    infer_roles_for_spec,
)
from ..models import ExtractChartsRequest, ExtractChartsResponse

logger = logging.getLogger(__name__)

# Create router for chart endpoints
router = APIRouter(prefix="/charts", tags=["charts"])


@router.post("/extract", response_model=ExtractChartsResponse)
async def extract_charts(request: ExtractChartsRequest):
    """
    Extract render-ready charts and tables from model text.

    Charts whose roles cannot be resolved (scatter data with fewer than two
    numeric fields) are left out.
    """
    try:
        result = ResponsePreprocessor().preprocess(request.text)
        charts = []
        for spec in ChartSpecValidator().validate_all(result.candidates):
            spec.roles = infer_roles_for_spec(spec)
            if not isinstance(spec.roles, InsufficientDimensionality):
                charts.append(spec.to_dict())
        tables = TableMarkdownTranspiler().extract_tables(result.prose)

        return ExtractChartsResponse(
            content=result.prose,
            charts=charts,
            tables=[table.to_dict() for table in tables],
            malformed_candidates=len(result.failures),
            raw_json_block=result.first_block
        )
    except Exception as e:
        logger.error(f"Chart extraction error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Chart extraction failed"
        )
