
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from app.articles import service
from app.auth.deps import get_db, get_identity, require_admin, require_auth
from app.auth.identity import Identity
from app.config import settings
from app.errors import PayloadTooLargeError, ValidationError
from app.schemas.article import ArticleCreate, ArticleOut

router = APIRouter(prefix="/api", tags=["articles"])

@router.get("/articles", response_model=list[ArticleOut])
def list_articles(db: Session = Depends(get_db), viewer: Identity = Depends(get_identity)):
    return service.list_articles(db, viewer)

@router.post("/articles", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
def create_article(body: ArticleCreate, db: Session = Depends(get_db), user: Identity = Depends(require_auth)):
    return service.create_article(db, user, body.title, body.content, body.is_private)

@router.post("/articles/upload", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
def upload_article(
    file: UploadFile | None = File(None),
    title: str | None = Form(None),
    is_private: bool = Form(True, alias="isPrivate"),
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
):
    if file is None or not file.filename:
        raise ValidationError("请选择文件")
    if not file.filename.lower().endswith(service.UPLOAD_EXTENSIONS):
        raise ValidationError("只支持 .txt 或 .md 文件")

    max_bytes = settings.max_upload_mb * 1024 * 1024
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise PayloadTooLargeError(f"{file.filename} 大于 {settings.max_upload_mb}MB")
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("文件必须是 UTF-8 编码的文本")
    if not text.strip():
        raise ValidationError("文件内容不能为空")

    return service.create_article_from_upload(db, user, file.filename, text, title, is_private)

@router.get("/articles/{article_id}", response_model=ArticleOut)
def get_article(article_id: str, db: Session = Depends(get_db), viewer: Identity = Depends(get_identity)):
    return service.get_article(db, article_id, viewer)

@router.delete("/articles/{article_id}")
def delete_article(article_id: str, db: Session = Depends(get_db), user: Identity = Depends(require_auth)):
    service.delete_article(db, article_id, user)
    return {"ok": True, "id": article_id}

@router.patch("/articles/{article_id}/publish", response_model=ArticleOut)
def publish_article(article_id: str, db: Session = Depends(get_db), user: Identity = Depends(require_auth)):
    return service.publish_article(db, article_id, user)

@router.get("/admin/articles", response_model=list[ArticleOut])
def admin_list_articles(db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    return service.list_all_articles(db)

@router.patch("/admin/articles/{article_id}/publish", response_model=ArticleOut)
def admin_publish_article(article_id: str, db: Session = Depends(get_db), admin: Identity = Depends(require_admin)):
    return service.admin_publish_article(db, article_id, admin)
