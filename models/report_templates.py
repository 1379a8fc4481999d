from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from database.db import Base

class ReportTemplate(Base):
    __tablename__ = "report_templates"  # 성적표 머리말/꼬리말 템플릿

    id = Column(Integer, primary_key=True, index=True)           # 템플릿 고유 ID
    template_name = Column(String(255), nullable=False)         # 템플릿 이름
    header_text = Column(Text)                                  # 표준 머리말 뒤에 추가되는 문구
    footer_text = Column(Text)                                  # 표준 꼬리말 앞에 추가되는 문구
    is_active = Column(Boolean, nullable=False, default=True)   # 사용 여부
    created_at = Column(DateTime, nullable=False, default=datetime.now)
