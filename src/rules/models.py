from typing import Literal

from pydantic import BaseModel, Field

from src.domain.policy import DEFAULT_WEB_LINK_BASE


class SessionCookieRules(BaseModel):
    name: str = "access_token"
    secure: bool = False
    http_only: bool = True
    same_site: Literal["lax", "strict", "none"] = "lax"


class SessionsRules(BaseModel):
    ttl_minutes: int = Field(default=60 * 24, gt=0)
    cookie: SessionCookieRules = Field(default_factory=SessionCookieRules)


class AuthRules(BaseModel):
    username_min_length: int = Field(default=3, ge=1)
    password_min_length: int = Field(default=6, ge=1)
    sessions: SessionsRules = Field(default_factory=SessionsRules)


class ProfileRules(BaseModel):
    web_link_base: str = DEFAULT_WEB_LINK_BASE


class RankingRules(BaseModel):
    default_limit: int = Field(default=5, ge=1)
    max_limit: int = Field(default=100, ge=1)


class CorsRules(BaseModel):
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5000", "http://127.0.0.1:5000"]
    )


class Rules(BaseModel):
    auth: AuthRules = Field(default_factory=AuthRules)
    profile: ProfileRules = Field(default_factory=ProfileRules)
    rankings: RankingRules = Field(default_factory=RankingRules)
    cors: CorsRules = Field(default_factory=CorsRules)
