# mentor_portal/routers/frontend_router.py
from pathlib import Path
from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..services import QueryService
from ..dependencies.service_dependencies import get_query_service
from ..utils.response_enricher import ResponseEnricher
from ..exceptions import NotFoundError

router = APIRouter(tags=["frontend"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

@router.get("/query/{token}", response_class=HTMLResponse)
async def shared_query_page(request: Request, token: str, query_service: QueryService = Depends(get_query_service)):
    """Public page behind a query share link"""
    try:
        query = ResponseEnricher.shared_query_view(query_service.view_by_token(token))
    except NotFoundError as e:
        return templates.TemplateResponse(
            request, "query_view.html", {"title": "Query not found", "query": None, "error": str(e)}, status_code=404
        )
    return templates.TemplateResponse(
        request, "query_view.html", {"title": f"Query from {query['full_name']}", "query": query, "error": None}
    )
