"""Configuration schema models using Pydantic."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class AuthenticationMode(str, Enum):
    """Whether the handler answers requests that do not name it."""

    ACTIVE = "active"
    PASSIVE = "passive"


class CookieSecurePolicy(str, Enum):
    """How the cookie ``Secure`` attribute is decided."""

    ALWAYS = "always"
    NEVER = "never"
    SAME_AS_REQUEST = "same_as_request"


class SameSiteMode(str, Enum):
    """Values for the cookie ``SameSite`` attribute."""

    NONE = "none"
    LAX = "lax"
    STRICT = "strict"


class CookieAuthConfig(BaseModel):
    """Cookie authentication configuration."""

    authentication_type: str = Field(
        "Cookies", description="Name of this authentication scheme"
    )
    authentication_mode: AuthenticationMode = Field(
        AuthenticationMode.ACTIVE,
        description="Active handlers answer unnamed sign-outs and challenges",
    )
    cookie_name: Optional[str] = Field(
        None, description="Cookie name (defaults to .cookieauth.<authentication_type>)"
    )
    cookie_domain: Optional[str] = Field(None, description="Cookie Domain attribute")
    cookie_path: Optional[str] = Field(
        None, description="Cookie Path attribute (defaults to /)"
    )
    cookie_http_only: bool = Field(True, description="Set the HttpOnly attribute")
    cookie_secure: CookieSecurePolicy = Field(
        CookieSecurePolicy.SAME_AS_REQUEST, description="Secure attribute policy"
    )
    cookie_same_site: Optional[SameSiteMode] = Field(
        None, description="SameSite attribute, omitted when unset"
    )
    expire_time_span: timedelta = Field(
        timedelta(days=14), description="Lifetime of newly issued tickets"
    )
    sliding_expiration: bool = Field(
        True, description="Reissue tickets past the middle of their lifetime"
    )
    login_path: Optional[str] = Field(None, description="Path of the login endpoint")
    logout_path: Optional[str] = Field(None, description="Path of the logout endpoint")
    return_url_parameter: str = Field(
        "ReturnUrl", description="Query parameter carrying the return URL"
    )

    @field_validator("authentication_type", "return_url_parameter")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v

    @field_validator("login_path", "logout_path", "cookie_path")
    @classmethod
    def validate_path(cls, v):
        if v is None or v == "":
            return None
        if not v.startswith("/"):
            raise ValueError(f"Path must start with '/': {v!r}")
        return v

    @field_validator("expire_time_span")
    @classmethod
    def validate_expire_time_span(cls, v):
        if v <= timedelta(0):
            raise ValueError("expire_time_span must be positive")
        return v

    @model_validator(mode="after")
    def default_cookie_name(self):
        if not self.cookie_name:
            self.cookie_name = f".cookieauth.{self.authentication_type}"
        return self
