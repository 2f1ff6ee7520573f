from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.annotations import service
from app.auth.deps import get_db, get_identity, require_auth
from app.auth.identity import Identity
from app.schemas.annotation import AnnotationCreate, AnnotationOut, AnnotationUpdate

router = APIRouter(prefix="/api", tags=["annotations"])


def _out(annotation, is_owner: bool) -> AnnotationOut:
    out = AnnotationOut.model_validate(annotation)
    out.is_owner = is_owner
    return out


@router.get("/articles/{article_id}/annotations", response_model=list[AnnotationOut])
def list_annotations(article_id: str, db: Session = Depends(get_db), viewer: Identity = Depends(get_identity)):
    return [_out(a, is_owner) for a, is_owner in service.list_annotations(db, article_id, viewer)]


@router.post(
    "/articles/{article_id}/annotations",
    response_model=AnnotationOut,
    status_code=status.HTTP_201_CREATED,
)
def create_annotation(
    article_id: str,
    body: AnnotationCreate,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
):
    annotation = service.create_annotation(
        db, article_id, user,
        body.selected_text, body.start_offset, body.end_offset, body.notes,
    )
    return _out(annotation, True)


@router.put("/annotations/{annotation_id}", response_model=AnnotationOut)
def update_annotation(
    annotation_id: str,
    body: AnnotationUpdate,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
):
    return _out(service.update_annotation(db, annotation_id, user, body.notes), True)


@router.delete("/annotations/{annotation_id}")
def delete_annotation(annotation_id: str, db: Session = Depends(get_db), user: Identity = Depends(require_auth)):
    renumbered = service.delete_annotation(db, annotation_id, user)
    return {"ok": True, "renumbered": renumbered}
