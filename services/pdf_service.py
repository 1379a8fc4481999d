import logging
import re
from datetime import date
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.settings import settings
from schemas.report_card import ReportDocument
from services.errors import ArtifactGenerationError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def suggested_filename(student_handle: str, exam_name: str, on_date: date) -> str:
    """ReportCard_<학번>_<시험명(공백→_)>_<YYYY-MM-DD>.pdf"""
    exam_part = re.sub(r"\s+", "_", exam_name)
    return f"ReportCard_{student_handle}_{exam_part}_{on_date.isoformat()}.pdf"


class PDFService:
    def __init__(self, template_dir: Path = TEMPLATE_DIR, base_url: Optional[str] = None):
        # 템플릿 환경 설정
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )
        self.base_url = base_url or settings.WEASYPRINT_FONT_DIR

    def _render_template(self, template_name: str, data: dict) -> str:
        """템플릿을 렌더링하여 HTML 생성"""
        template = self.env.get_template(template_name)
        return template.render(**data)

    def _html_to_pdf(self, html_content: str) -> bytes:
        """HTML을 PDF로 변환 (페이지 나눔은 WeasyPrint 기본 동작에 맡김)"""
        import weasyprint  # 네이티브 라이브러리(pango) 로딩 실패도 인코딩 실패로 처리

        return weasyprint.HTML(string=html_content, base_url=self.base_url).write_pdf()

    def render_report_card_html(self, document: ReportDocument) -> str:
        return self._render_template("report_card.html", {"document": document})

    def encode(self, document: ReportDocument) -> bytes:
        """성적표 섹션 → PDF 바이트. 실패 시 ArtifactGenerationError 하나로 묶어서 던짐"""
        try:
            html = self.render_report_card_html(document)
            pdf = self._html_to_pdf(html)
        except Exception as e:
            logger.exception(f"성적표 PDF 인코딩 실패: student={document.student_handle}")
            raise ArtifactGenerationError(f"Error generating report card: {e}") from e
        if not pdf:
            raise ArtifactGenerationError("Error generating report card: empty document")
        return pdf
