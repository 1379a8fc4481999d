from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.grades import GradeStatus

# ==========================================================
# [입력용 스키마]
# ==========================================================
class GradeEntry(BaseModel):
    """교사가 한 번에 제출하는 성적 입력 한 줄"""
    student_id: int                                   # 학생 ID
    subject_id: int                                   # 과목 ID
    marks_obtained: Optional[Decimal] = None          # 취득 점수 (생략 가능)
    total_marks: Optional[Decimal] = None             # 만점 (신규 행에서 생략 시 기본값 100)
    comments: Optional[str] = Field(default=None, max_length=500)

    model_config = ConfigDict(extra="ignore")


class BulkGradeRequest(BaseModel):
    course_id: int                                    # 과정 ID
    exam_period_id: int                               # 시험기간 ID
    # 항목은 원본 그대로 받아 서비스에서 한 줄씩 검증 (잘못된 항목만 skipped 처리)
    entries: List[Dict[str, Any]] = Field(default_factory=list)


# ==========================================================
# [출력용 스키마]
# ==========================================================
class GradeOut(BaseModel):
    id: int
    student_id: int
    course_id: int
    subject_id: int
    exam_period_id: int
    marks_obtained: Optional[Decimal] = None
    total_marks: Decimal
    percentage: Optional[Decimal] = None
    letter_grade: Optional[str] = None
    grade_point: Optional[Decimal] = None
    comments: Optional[str] = None
    status: Optional[GradeStatus] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SkippedEntryOut(BaseModel):
    index: int                                        # 요청 내 위치 (0부터)
    student_id: Optional[int] = None
    subject_id: Optional[int] = None
    error: str                                        # NOT_FOUND / INVALID_MARKS / PERSISTENCE_ERROR
    reason: str


class BulkSaveOut(BaseModel):
    submitted_count: int
    saved_count: int                                  # 성공 항목 수 (중복 항목 포함)
    saved_row_count: int                              # 실제 저장된 성적 행 수
    saved: List[GradeOut]
    skipped: List[SkippedEntryOut]


class GradeFormRow(BaseModel):
    """입력 화면 미리 채우기용 경량 행"""
    id: int
    student_id: int
    subject_id: int
    marks_obtained: Optional[Decimal] = None
    comments: Optional[str] = None
