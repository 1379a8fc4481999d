import enum
from datetime import datetime

from sqlalchemy import (
    Column, DateTime, Enum, ForeignKey, Integer, Numeric, String,
    UniqueConstraint, event,
)
from sqlalchemy.orm import relationship

from database.db import Base
from models.courses import Course
from models.exam_periods import ExamPeriod
from models.students import Student
from models.subjects import Subject
from services import grade_calculator


class GradeStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"


class Grade(Base):
    __tablename__ = "grades"  # 과목별 성적 테이블

    # ✅ (학생, 과정, 과목, 시험기간) 조합당 한 행만 허용
    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", "subject_id", "exam_period_id",
            name="uq_grades_student_course_subject_exam",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)                               # 성적 고유 ID (PK)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    exam_period_id = Column(Integer, ForeignKey("exam_periods.id"), nullable=False, index=True)

    marks_obtained = Column(Numeric(5, 2))                                           # 취득 점수 (입력 전 NULL)
    total_marks = Column(Numeric(5, 2), nullable=False, default=100)                # 만점
    percentage = Column(Numeric(5, 2))                                               # 백분율 (자동 계산)
    letter_grade = Column(String(5))                                                 # 표시 등급 A~F (자동 계산)
    grade_point = Column(Numeric(3, 2))                                              # 평점 (자동 계산)
    comments = Column(String(500))                                                   # 교사 코멘트
    status = Column(Enum(GradeStatus, native_enum=False, length=20), default=GradeStatus.ACTIVE)

    created_by = Column(Integer, index=True)                                         # 최초 입력자 ID (한 번만 설정)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # ==========================================================
    # [관계 설정]
    # ==========================================================
    student = relationship(Student)
    course = relationship(Course)
    subject = relationship(Subject)
    exam_period = relationship(ExamPeriod)

    def __repr__(self):
        return (
            f"<Grade student={self.student_id} course={self.course_id} "
            f"subject={self.subject_id} exam={self.exam_period_id} "
            f"{self.marks_obtained}/{self.total_marks}>"
        )

    # ==========================================================
    # [파생 필드 계산]
    # ==========================================================
    def _stored_marks(self):
        # Numeric(5,2) 컬럼에 실제로 저장될 값
        return (
            grade_calculator.quantize_marks(self.marks_obtained),
            grade_calculator.quantize_marks(self.total_marks),
        )

    def is_valid_marks(self) -> bool:
        return grade_calculator.is_valid_marks(*self._stored_marks())

    def recalculate(self) -> bool:
        """
        점수가 유효할 때만 백분율/등급/평점을 다시 계산. 무효면 아무것도 덮어쓰지 않음.
        점수/만점은 저장 정밀도로 먼저 맞춘 뒤 계산 (저장값과 파생 필드 일치)
        """
        marks, total = self._stored_marks()
        if not grade_calculator.is_valid_marks(marks, total):
            return False
        self.marks_obtained = marks
        self.total_marks = total
        result = grade_calculator.calculate(marks, total)
        self.percentage = result.percentage
        self.letter_grade = result.letter_grade
        self.grade_point = result.grade_point
        return True

    # ==========================================================
    # [판정 헬퍼]
    # ==========================================================
    @property
    def is_passing(self) -> bool:
        return grade_calculator.is_passing(self.letter_grade)

    @property
    def is_excellent(self) -> bool:
        return grade_calculator.is_excellent(self.letter_grade)

    @property
    def is_good(self) -> bool:
        return grade_calculator.is_good(self.letter_grade)

    @property
    def is_average(self) -> bool:
        return grade_calculator.is_average(self.letter_grade)

    @property
    def is_below_average(self) -> bool:
        return grade_calculator.is_below_average(self.letter_grade)

    @property
    def is_failing(self) -> bool:
        return grade_calculator.is_failing(self.letter_grade)


# ✅ 저장/수정 직전에 항상 파생 필드 재계산
@event.listens_for(Grade, "before_insert")
@event.listens_for(Grade, "before_update")
def _recalculate_before_write(mapper, connection, target):
    target.recalculate()
