import logging

from fastapi import APIRouter, HTTPException, Query, Request

from app.errors import EstimateError
from app.models.estimate import EstimateRequest, EstimateResponse
from app.services import presenter
from app.services.pipeline import build_pipeline
from app.services.submissions import gate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estimate", tags=["estimate"])


def client_key(request: Request) -> str:
    header = request.headers.get("x-client-id")
    if header:
        return header
    return request.client.host if request.client else "anonymous"


async def run_estimate(request: Request, address: str) -> EstimateResponse:
    """Run one submission through the pipeline, superseding older ones from the same client."""
    pipeline = build_pipeline()
    try:
        result = await gate.run(client_key(request), lambda: pipeline.run(address))
    except EstimateError as exc:
        logger.info("estimate failed kind=%s", exc.kind.value)
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return EstimateResponse(
        address=result.address,
        house=result.house,
        usage=result.usage,
        view=presenter.build_view(result),
    )


@router.get("", response_model=EstimateResponse)
async def estimate_get(
    request: Request,
    address: str = Query("", description="Free-text address or postal code"),
):
    """Estimate house size, windows and energy usage for an address."""
    return await run_estimate(request, address)


@router.post("", response_model=EstimateResponse)
async def estimate_post(request: Request, body: EstimateRequest):
    return await run_estimate(request, body.address)
