from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse

from app.api.estimate import client_key
from app.errors import EstimateError
from app.services import presenter
from app.services.pipeline import build_pipeline
from app.services.submissions import gate

router = APIRouter(tags=["page"])


@router.get("/", response_class=HTMLResponse)
async def form_page(
    request: Request,
    address: str | None = Query(None, description="Submitted address"),
):
    """The form; a submitted address renders results or the error below it."""
    if address is None:
        return HTMLResponse(presenter.render_html(None))

    pipeline = build_pipeline()
    try:
        result = await gate.run(client_key(request), lambda: pipeline.run(address))
    except EstimateError as exc:
        view = presenter.build_error_view(exc.message)
        return HTMLResponse(presenter.render_html(view, address), status_code=exc.status_code)

    return HTMLResponse(presenter.render_html(presenter.build_view(result), address))
