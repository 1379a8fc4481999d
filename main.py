import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings

# ✅ 로그 레벨은 .env 의 LOG_LEVEL 로 제어, 외부 라이브러리 로그는 WARNING 이상만
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
for noisy in ("httpcore", "httpx", "sqlalchemy.engine", "fontTools", "weasyprint"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

from middlewares.error_handler import add_error_handlers
from middlewares.timing import TimingMiddleware
from routers import grades, pdf_reports

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TimingMiddleware)      # 응답 헤더 X-Latency-Ms
add_error_handlers(app)                   # 도메인 예외 → JSON 에러 응답

app.include_router(grades.router, prefix="/v1")          # 성적 일괄 입력/조회/삭제
app.include_router(pdf_reports.router, prefix="/v1")     # 성적표 미리보기/PDF


@app.get("/health")
def health_check():
    return {"status": "ok", "env": settings.ENV}


@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} v{settings.APP_VERSION}"}
