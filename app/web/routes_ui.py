
from pathlib import Path
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session
from app.annotations.service import list_annotations
from app.articles.service import get_article
from app.auth.deps import get_db, get_identity
from app.auth.identity import Identity
from app.errors import ForbiddenError, NotFoundError
from app.web.render import render_markdown

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter(tags=["ui"])

@router.get("/article/{article_id}", response_class=HTMLResponse)
def article_detail(
    request: Request,
    article_id: str,
    db: Session = Depends(get_db),
    viewer: Identity = Depends(get_identity),
):
    try:
        article = get_article(db, article_id, viewer)
    except (NotFoundError, ForbiddenError) as e:
        return templates.TemplateResponse(
            request,
            "error.html",
            {"status_code": e.status_code, "message": e.detail},
            status_code=e.status_code,
        )

    annotations = list_annotations(db, article_id, viewer)
    return templates.TemplateResponse(
        request,
        "article.html",
        {
            "article": article,
            "rendered_md": render_markdown(article.content),
            "annotations": annotations,
            "viewer": viewer,
        },
    )
