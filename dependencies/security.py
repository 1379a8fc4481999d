from dataclasses import dataclass
from typing import Optional, Annotated
from fastapi import Header, HTTPException
from config.settings import settings
import hmac

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]
ActorHeader = Annotated[Optional[int], Header(alias="X-Actor-Id")]


@dataclass
class Actor:
    id: Optional[int]               # 현재 조작 중인 교사/관리자 ID (created_by 기록용)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def require_actor(authorization: AuthHeader = None, actor_id: ActorHeader = None) -> Actor:
    """내부 토큰(Bearer) 확인 후 X-Actor-Id 헤더의 사용자 ID를 현재 조작자로 반환"""
    if not settings.INTERNAL_API_TOKEN:
        raise HTTPException(status_code=500, detail="Server token not configured")
    if not authorization:
        raise _unauthorized("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid Authorization header format")

    # 타이밍 안전 비교
    if not hmac.compare_digest(token.strip(), settings.INTERNAL_API_TOKEN):
        raise _unauthorized("Invalid token")

    return Actor(id=actor_id)
