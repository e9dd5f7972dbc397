"""
요청 본문(JSON)을 검증하는 Pydantic 모델입니다.
정의되지 않은 필드가 들어오면 서비스 호출 전에 거부합니다.
"""

from typing import Annotated, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from campaign_access.domain.permissions import RoleLevel


class RequestBody(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class CredentialsBody(BaseModel):
    # 비밀번호는 공백을 포함해 입력 그대로 받습니다.
    model_config = ConfigDict(extra="forbid")

    email: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3)]
    password: str = Field(min_length=1)


class TokenRequest(CredentialsBody):
    pass


class UserCreateRequest(CredentialsBody):
    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True)]] = None


class CampaignCreateRequest(RequestBody):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    visibility: Literal["private", "public"] = "private"


class CampaignUpdateRequest(RequestBody):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    visibility: Optional[Literal["private", "public"]] = None


class MemberAddRequest(RequestBody):
    email: str = Field(min_length=3)
    role: RoleLevel = RoleLevel.MEMBER


class MemberUpdateRequest(RequestBody):
    role: RoleLevel
