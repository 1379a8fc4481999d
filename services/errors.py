"""
services/errors.py

성적/성적표 서브시스템 전용 예외 모음.
- middlewares/error_handler.py 에서 HTTP 상태코드로 매핑됩니다.
"""


class GradeServiceError(Exception):
    """서브시스템 공통 베이스 예외"""

    code = "GRADE_SERVICE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(GradeServiceError):
    """학생/과정/과목/시험기간/성적 등 식별자로 찾을 수 없음"""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found with ID: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class GradeValidationError(GradeServiceError):
    """점수 누락/범위 오류 (0 <= marks <= total, total > 0 위반)"""

    code = "INVALID_MARKS"


class PersistenceError(GradeServiceError):
    """단일 항목 저장 실패 (예: 유니크 제약 경합)"""

    code = "PERSISTENCE_ERROR"


class ArtifactGenerationError(GradeServiceError):
    """성적표 조립/인코딩 실패. 부분 결과는 반환하지 않음"""

    code = "ARTIFACT_GENERATION_FAILED"
