"""
services/report_card_service.py

성적표 생성 진입점: ReportAssembler(조립) → PDFService(인코딩) → 파일명 제안.
- NotFoundError 는 그대로 전파 (요청 전체 실패, 404)
- 그 밖의 조립/인코딩 실패는 ArtifactGenerationError 하나로 묶음
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from schemas.report_card import ReportDocument
from services.errors import ArtifactGenerationError, GradeServiceError
from services.pdf_service import PDFService, suggested_filename
from services.report_assembler import ReportAssembler

logger = logging.getLogger(__name__)


@dataclass
class GeneratedReport:
    content: bytes
    filename: str
    media_type: str = "application/pdf"


class ReportCardService:
    def __init__(self, db: Session, pdf_service: Optional[PDFService] = None):
        self.db = db
        self.assembler = ReportAssembler(db)
        self.pdf_service = pdf_service or PDFService()

    def preview(self, student_id: int, exam_period_id: int, term_label: Optional[str] = None,
                template_id: Optional[int] = None) -> ReportDocument:
        return self._assemble(student_id, exam_period_id, term_label, template_id, None)

    def generate(self, student_id: int, exam_period_id: int, term_label: Optional[str] = None,
                 template_id: Optional[int] = None, generated_on: Optional[date] = None) -> GeneratedReport:
        document = self._assemble(student_id, exam_period_id, term_label, template_id, generated_on)
        content = self.pdf_service.encode(document)
        filename = suggested_filename(document.student_handle, document.exam_name, document.generated_date)
        logger.info(f"성적표 생성 완료: {filename} ({len(content)} bytes)")
        return GeneratedReport(content=content, filename=filename)

    def _assemble(self, student_id, exam_period_id, term_label, template_id, generated_on) -> ReportDocument:
        try:
            return self.assembler.assemble(
                student_id, exam_period_id,
                term_label=term_label, template_id=template_id, generated_on=generated_on,
            )
        except GradeServiceError:
            raise
        except Exception as e:
            logger.exception(f"성적표 조립 실패: student_id={student_id}, exam_period_id={exam_period_id}")
            raise ArtifactGenerationError(f"Error generating report card: {e}") from e
