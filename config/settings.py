"""
config/settings.py

성적/성적표 API 전역 설정 (.env → Settings, pydantic-settings v2)
- DB 접속 URL 은 MySQL 부분 값으로 조립, DATABASE_URL_OVERRIDE 가 있으면 그것을 우선 사용
- 성적표 머리말 문구와 신규 성적 행의 기본 만점도 여기서 관리
"""

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ✅ 앱 기본 정보
    ENV: Literal["dev", "stage", "prod"] = "dev"
    APP_TITLE: str = "Report Card API"
    APP_DESCRIPTION: str = "성적 산출 및 성적표(PDF) 생성 백엔드 API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ✅ 교사/관리자 프론트엔드 주소 (.env 에서는 콤마 구분 문자열)
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # ✅ MySQL 접속 정보
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "school"
    DATABASE_URL_OVERRIDE: Optional[str] = None      # 예: sqlite:///./local.db

    # ✅ 내부 호출용 Bearer 토큰
    INTERNAL_API_TOKEN: str = "dev-internal-token"

    # ✅ 성적 입력 / 성적표 문구
    DEFAULT_TOTAL_MARKS: Decimal = Decimal("100")    # total_marks 생략 시 신규 행 만점
    INSTITUTION_NAME: str = "WEB-BASED SCHOOL MANAGEMENT SYSTEM"
    REPORT_TITLE: str = "ACADEMIC REPORT CARD"
    WEASYPRINT_FONT_DIR: Optional[str] = None        # 폰트/이미지 상대경로 기준 (WeasyPrint base_url)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @computed_field  # type: ignore[misc]
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


settings = Settings()
