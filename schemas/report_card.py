"""
schemas/report_card.py

- 성적표를 구성하는 섹션 타입 모음 (ReportAssembler → PDFService)
- kind 필드로 구분되는 discriminated union. 미리보기 API에서 JSON으로도 그대로 사용
"""

from datetime import date
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field


class HeaderSection(BaseModel):
    kind: Literal["header"] = "header"
    institution_name: str
    report_title: str
    academic_year: str
    term_label: str
    generated_on: str                       # 예: "19 October 2026"


class TextBlockSection(BaseModel):
    """템플릿 머리말/꼬리말, "성적 없음" 안내 등 단일 문단"""
    kind: Literal["template_header", "template_footer", "placeholder"]
    text: str


class StudentInfoSection(BaseModel):
    kind: Literal["student_info"] = "student_info"
    title: str = "STUDENT INFORMATION"
    rows: List[Tuple[str, str]]             # (라벨, 값)


class GradeRow(BaseModel):
    subject: str
    marks_obtained: str
    total_marks: str
    percentage: str                         # 예: "92.00%"
    letter_grade: str
    comments: str


class GradesTableSection(BaseModel):
    kind: Literal["grades_table"] = "grades_table"
    title: str = "ACADEMIC PERFORMANCE"
    columns: List[str] = Field(default_factory=lambda: [
        "Subject", "Marks Obtained", "Total Marks", "Percentage", "Letter Grade", "Comments",
    ])
    rows: List[GradeRow]


class SummarySection(BaseModel):
    kind: Literal["summary"] = "summary"
    title: str = "PERFORMANCE SUMMARY"
    overall_average: str                    # 예: "78.50%"
    passing: str                            # 예: "3/4"
    excellent_count: int
    overall_performance: str

    @property
    def rows(self) -> List[Tuple[str, str]]:
        return [
            ("Overall Average", self.overall_average),
            ("Passing Grades", self.passing),
            ("Excellent Grades (A)", str(self.excellent_count)),
            ("Overall Performance", self.overall_performance),
        ]


class FooterSection(BaseModel):
    kind: Literal["footer"] = "footer"
    generated_line: str
    signature_lines: List[str]


ReportSection = Annotated[
    Union[HeaderSection, TextBlockSection, StudentInfoSection,
          GradesTableSection, SummarySection, FooterSection],
    Field(discriminator="kind"),
]


class ReportDocument(BaseModel):
    """순서가 보장된 성적표 섹션 목록 + 파일명 산출용 메타"""
    student_handle: str
    exam_name: str
    generated_date: date
    sections: List[ReportSection]

    def kinds(self) -> List[str]:
        return [s.kind for s in self.sections]

    def find(self, kind: str) -> Optional[BaseModel]:
        return next((s for s in self.sections if s.kind == kind), None)


# ==========================================================
# [요청 스키마]
# ==========================================================
class ReportCardRequest(BaseModel):
    student_id: int                         # 학생 ID
    exam_period_id: int                     # 시험기간 ID
    term_label: Optional[str] = None        # 없으면 시험명 사용
    template_id: Optional[int] = None       # 머리말/꼬리말 템플릿 (선택)
