from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_actor
from schemas.report_card import ReportCardRequest
from services.pdf_service import PDFService
from services.report_card_service import ReportCardService

router = APIRouter(prefix="/pdf", tags=["PDF 생성"], dependencies=[Depends(require_actor)])


def get_pdf_service() -> PDFService:
    return PDFService()


def _content_disposition(filename: str) -> str:
    # 비ASCII 시험명 대비: ASCII 대체 이름 + RFC 5987 filename*
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


# ✅ [PDF] 학생 성적표 생성/다운로드
# - 학생/시험기간이 없으면 404, 조립/인코딩 실패는 500 (부분 PDF 없음)
@router.post("/report-card")
def generate_report_card(
    payload: ReportCardRequest,
    db: Session = Depends(get_db),
    pdf_service: PDFService = Depends(get_pdf_service),
):
    report = ReportCardService(db, pdf_service).generate(
        payload.student_id,
        payload.exam_period_id,
        term_label=payload.term_label,
        template_id=payload.template_id,
    )
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": _content_disposition(report.filename)},
    )


# ✅ [PREVIEW] PDF 생성 전 섹션 미리보기 (JSON)
@router.get("/report-card/preview/{student_id}/{exam_period_id}")
def preview_report_card(
    student_id: int,
    exam_period_id: int,
    term_label: Optional[str] = None,
    template_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    document = ReportCardService(db).preview(
        student_id, exam_period_id, term_label=term_label, template_id=template_id
    )
    return {"success": True, "data": document}
