"""
services/report_assembler.py

학생 1명 × 시험기간 1개의 성적을 모아 순서가 고정된 성적표 섹션 목록을 만든다.

순서:
  1) 표준 머리말  2) 템플릿 머리말(선택)  3) 학생 정보
  4) 성적 없음 안내  또는  5) 성적표 + 6) 요약
  7) 템플릿 꼬리말(선택)  8) 표준 꼬리말(작성일 + 서명란 2줄)

템플릿은 추가만 할 뿐 표준 내용을 대체하지 않는다.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from config.settings import settings
from models.exam_periods import ExamPeriod
from models.grades import Grade
from models.report_templates import ReportTemplate
from models.students import Student
from schemas.report_card import (
    FooterSection, GradeRow, GradesTableSection, HeaderSection, ReportDocument,
    StudentInfoSection, SummarySection, TextBlockSection,
)
from services import grade_calculator
from services.entity_lookup import EntityLookup

logger = logging.getLogger(__name__)

NO_GRADES_TEXT = "No grades available for this term."
CLASS_PLACEHOLDER = "Student"
SIGNATURE_LINES = [
    "Class Teacher Signature: ________________________",
    "Principal Signature: ________________________",
]


def format_date(value: date) -> str:
    """예: 19 October 2026"""
    return value.strftime("%d %B %Y")


def format_decimal(value: Optional[Decimal]) -> str:
    if value is None:
        return "N/A"
    return f"{Decimal(value).quantize(grade_calculator.TWO_PLACES, rounding=ROUND_HALF_UP)}"


def format_percent(value: Optional[Decimal]) -> str:
    if value is None:
        return "N/A"
    return f"{format_decimal(value)}%"


def _has_text(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


class ReportAssembler:
    def __init__(self, db: Session, institution_name: Optional[str] = None,
                 report_title: Optional[str] = None):
        self.db = db
        self.lookup = EntityLookup(db)
        self.institution_name = institution_name or settings.INSTITUTION_NAME
        self.report_title = report_title or settings.REPORT_TITLE

    def assemble(self, student_id: int, exam_period_id: int, term_label: Optional[str] = None,
                 template_id: Optional[int] = None, generated_on: Optional[date] = None) -> ReportDocument:
        # ✅ 학생/시험기간이 없으면 전체 요청 중단 (NotFoundError 전파)
        student = self.lookup.student(student_id)
        exam_period = self.lookup.exam_period(exam_period_id)
        template = self._resolve_template(template_id)
        today = generated_on or date.today()

        grades = self._fetch_grades(student_id, exam_period_id)
        logger.info(
            f"성적표 조립: student_id={student_id}, exam_period_id={exam_period_id}, "
            f"grades={len(grades)}, template_id={template_id}"
        )

        sections = [self._header(exam_period, term_label, today)]
        if template is not None and _has_text(template.header_text):
            sections.append(TextBlockSection(kind="template_header", text=template.header_text))
        sections.append(self._student_info(student))

        if not grades:
            sections.append(TextBlockSection(kind="placeholder", text=NO_GRADES_TEXT))
        else:
            sections.append(self._grades_table(grades))
            sections.append(self._summary(grades))

        if template is not None and _has_text(template.footer_text):
            sections.append(TextBlockSection(kind="template_footer", text=template.footer_text))
        sections.append(self._footer(today))

        return ReportDocument(
            student_handle=student.username,
            exam_name=exam_period.exam_name,
            generated_date=today,
            sections=sections,
        )

    # ==========================================================
    # [조회]
    # ==========================================================
    def _resolve_template(self, template_id: Optional[int]) -> Optional[ReportTemplate]:
        if template_id is None:
            return None
        template = self.lookup.template(template_id)
        if template is None:
            logger.warning(f"템플릿 없음, 표준 양식으로 생성: template_id={template_id}")
            return None
        if not template.is_active:
            logger.warning(f"비활성 템플릿, 표준 양식으로 생성: template_id={template_id}")
            return None
        return template

    def _fetch_grades(self, student_id: int, exam_period_id: int) -> List[Grade]:
        return (
            self.db.query(Grade)
            .options(joinedload(Grade.subject))
            .filter(Grade.student_id == student_id, Grade.exam_period_id == exam_period_id)
            .order_by(Grade.course_id, Grade.subject_id, Grade.id)
            .all()
        )

    # ==========================================================
    # [섹션 생성]
    # ==========================================================
    def _header(self, exam_period: ExamPeriod, term_label: Optional[str], today: date) -> HeaderSection:
        return HeaderSection(
            institution_name=self.institution_name,
            report_title=self.report_title,
            academic_year=exam_period.academic_year or "",
            term_label=term_label if term_label else exam_period.exam_name,
            generated_on=format_date(today),
        )

    @staticmethod
    def _student_info(student: Student) -> StudentInfoSection:
        return StudentInfoSection(rows=[
            ("Student ID", student.username),
            ("Full Name", student.full_name),
            ("Class/Grade", CLASS_PLACEHOLDER),
            ("Email", student.email if student.email else "N/A"),
        ])

    @staticmethod
    def _grades_table(grades: List[Grade]) -> GradesTableSection:
        return GradesTableSection(rows=[
            GradeRow(
                subject=g.subject.subject_name,
                marks_obtained=format_decimal(g.marks_obtained),
                total_marks=format_decimal(g.total_marks),
                percentage=format_percent(g.percentage),
                letter_grade=g.letter_grade or "",
                comments=g.comments or "",
            )
            for g in grades
        ])

    @staticmethod
    def _summary(grades: List[Grade]) -> SummarySection:
        percentages = [Decimal(g.percentage) for g in grades if g.percentage is not None]
        mean = sum(percentages, Decimal("0")) / len(percentages) if percentages else Decimal("0")
        return SummarySection(
            overall_average=format_percent(mean),
            passing=f"{sum(1 for g in grades if g.is_passing)}/{len(grades)}",
            excellent_count=sum(1 for g in grades if g.is_excellent),
            overall_performance=grade_calculator.performance_band(mean),
        )

    @staticmethod
    def _footer(today: date) -> FooterSection:
        return FooterSection(
            generated_line=f"This report was generated on {format_date(today)}",
            signature_lines=list(SIGNATURE_LINES),
        )
