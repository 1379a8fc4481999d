"""
services/grade_calculator.py

- 원점수(marks_obtained / total_marks) → 백분율 → 등급(문자) → 평점 산출
- DB/세션에 의존하지 않는 순수 함수 모음 (모델과 성적표 조립에서 공용 사용)
- 등급 구간은 하나의 정렬된 테이블(GRADE_BANDS)로 관리
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, localcontext
from typing import Optional, Union

from services.errors import GradeValidationError

Number = Union[Decimal, int, float, str]

HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class GradeBand:
    lower_bound: Decimal     # 구간 하한 (이상)
    name: str                # 세부 구간 이름 (A+, A, A- ...)
    letter: str              # 화면/성적표에 표시되는 등급
    grade_point: Decimal     # 평점


# ✅ 하한 내림차순. 여러 세부 구간이 같은 표시 등급을 공유함
GRADE_BANDS = (
    GradeBand(Decimal("90"), "A+", "A", Decimal("4.00")),
    GradeBand(Decimal("80"), "A", "A", Decimal("3.75")),
    GradeBand(Decimal("75"), "A-", "A", Decimal("3.50")),
    GradeBand(Decimal("70"), "B+", "B", Decimal("3.25")),
    GradeBand(Decimal("65"), "B", "B", Decimal("3.00")),
    GradeBand(Decimal("60"), "B-", "B", Decimal("2.75")),
    GradeBand(Decimal("55"), "C+", "C", Decimal("2.50")),
    GradeBand(Decimal("50"), "C", "C", Decimal("2.25")),
    GradeBand(Decimal("45"), "C-", "C", Decimal("2.00")),
    GradeBand(Decimal("40"), "D", "D", Decimal("1.75")),
    GradeBand(Decimal("0"), "F", "F", Decimal("0.00")),
)

# ✅ 평균 백분율 → 종합 평가 문구
PERFORMANCE_BANDS = (
    (Decimal("90"), "Outstanding"),
    (Decimal("80"), "Excellent"),
    (Decimal("70"), "Good"),
    (Decimal("60"), "Satisfactory"),
    (Decimal("50"), "Needs Improvement"),
)
BELOW_EXPECTATIONS = "Below Expectations"


@dataclass(frozen=True)
class GradeResult:
    percentage: Decimal
    letter_grade: str
    grade_point: Decimal
    band: GradeBand


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """float 오차를 피하기 위해 문자열 경유로 Decimal 변환"""
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_marks(value: Optional[Number]) -> Optional[Decimal]:
    """점수/만점을 저장 정밀도(소수 둘째 자리, HALF_UP)로 맞춤. None 은 그대로"""
    value = to_decimal(value)
    if value is None:
        return None
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def is_valid_marks(marks_obtained: Optional[Number], total_marks: Optional[Number]) -> bool:
    marks = to_decimal(marks_obtained)
    total = to_decimal(total_marks)
    if marks is None or total is None:
        return False
    return marks >= 0 and total > 0 and marks <= total


def calculate_percentage(marks_obtained: Number, total_marks: Number) -> Decimal:
    """
    round(marks / total × 100, 2), HALF_UP.
    나눗셈은 내림(ROUND_DOWN)으로 28자리까지 계산한 뒤 한 번만 반올림하므로
    "비율 4자리 반올림 → ×100" 방식과 같은 결과를 냄.
    """
    marks = to_decimal(marks_obtained)
    total = to_decimal(total_marks)
    with localcontext() as ctx:
        ctx.rounding = ROUND_DOWN
        raw = marks * HUNDRED / total
    return raw.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def band_for(percentage: Number) -> GradeBand:
    pct = to_decimal(percentage)
    for band in GRADE_BANDS:
        if pct >= band.lower_bound:
            return band
    # 음수 백분율은 유효성 검사에서 걸러지지만 안전하게 F 처리
    return GRADE_BANDS[-1]


def calculate(marks_obtained: Optional[Number], total_marks: Optional[Number]) -> GradeResult:
    if not is_valid_marks(marks_obtained, total_marks):
        raise GradeValidationError(
            f"Invalid marks: {marks_obtained}/{total_marks}"
        )
    percentage = calculate_percentage(marks_obtained, total_marks)
    band = band_for(percentage)
    return GradeResult(
        percentage=percentage,
        letter_grade=band.letter,
        grade_point=band.grade_point,
        band=band,
    )


# ==========================================================
# 표시 등급 기준 판정 헬퍼
# ==========================================================

def is_passing(letter: Optional[str]) -> bool:
    return letter is not None and letter != "F"


def is_excellent(letter: Optional[str]) -> bool:
    return letter == "A"


def is_good(letter: Optional[str]) -> bool:
    return letter in ("A", "B")


def is_average(letter: Optional[str]) -> bool:
    return letter in ("B", "C")


def is_below_average(letter: Optional[str]) -> bool:
    return letter in ("C", "D")


def is_failing(letter: Optional[str]) -> bool:
    return letter == "F"


def performance_band(mean_percentage: Number) -> str:
    mean = to_decimal(mean_percentage)
    for lower_bound, label in PERFORMANCE_BANDS:
        if mean >= lower_bound:
            return label
    return BELOW_EXPECTATIONS
