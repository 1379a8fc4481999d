import enum

from sqlalchemy import Column, Date, Enum, Integer, String
from database.db import Base


class ExamStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"


class ExamPeriod(Base):
    __tablename__ = "exam_periods"  # 시험기간(학기/평가 구간) 테이블

    id = Column(Integer, primary_key=True, index=True)            # 시험기간 고유 ID (PK)
    exam_name = Column(String(255), nullable=False)              # 시험명 (예: First Term Exam)
    academic_year = Column(String(10))                           # 학년도 (예: 2025-2026)
    semester = Column(String(50))                                # 학기
    start_date = Column(Date, nullable=False)                    # 시작일
    end_date = Column(Date, nullable=False)                      # 종료일
    status = Column(Enum(ExamStatus, native_enum=False, length=20), default=ExamStatus.ACTIVE)

    @property
    def label(self) -> str:
        """학생 성적 화면의 그룹 키 (예: "Midterm (2025-2026)")"""
        return f"{self.exam_name} ({self.academic_year})"
