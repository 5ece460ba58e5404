"""
Authentication middleware - bypass mode for development, ID token validation in production.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from .jwt_auth import GOOGLE_ISSUER, JWTValidator, extract_bearer_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = {"/health", "/api/health"}


def _is_docker_environment() -> bool:
    """Detect if running inside a Docker container."""
    if Path("/.dockerenv").exists():
        return True
    if os.getenv("DOCKER_CONTAINER") == "true":
        return True
    try:
        with open("/proc/1/cgroup") as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass
    return False


class AuthUser:
    """Represents an authenticated user."""

    def __init__(self, first_name: str, last_name: str, email: str, roles: list[str] | None = None):
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.roles = roles or []

    @property
    def display_name(self) -> str:
        """Name written into ``updated_by`` and history entries."""
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> AuthUser:
        first = claims.get("given_name") or ""
        last = claims.get("family_name") or ""
        if not first and not last:
            first, _, last = (claims.get("name") or claims.get("email") or "").partition(" ")
        roles = claims.get("groups") or []
        if isinstance(roles, str):
            roles = [r.strip() for r in roles.split(",") if r.strip()]
        return cls(first_name=first, last_name=last, email=claims.get("email", ""), roles=list(roles))

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "roles": self.roles,
        }


DEV_USER = AuthUser(first_name="Dev", last_name="User", email="dev_user@example.com")


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling authentication.

    Supports two modes:
    - bypass: Always authenticate as the development user (development only)
    - production: Validate bearer ID tokens from the OIDC provider
    """

    def __init__(
        self,
        app: Any,
        auth_mode: str,
        client_id: str = "",
        issuer: str = GOOGLE_ISSUER,
        validator: JWTValidator | None = None,
    ):
        super().__init__(app)
        self.auth_mode = auth_mode.lower()

        if self.auth_mode not in ["bypass", "production"]:
            raise ValueError(f"Invalid AUTH_MODE: {auth_mode}. Must be bypass or production")

        # Security: Block bypass mode in Docker containers (production deployments)
        if self.auth_mode == "bypass" and _is_docker_environment():
            raise ValueError(
                "SECURITY ERROR: AUTH_MODE=bypass is not allowed in Docker containers. "
                "Docker deployments must use AUTH_MODE=production."
            )

        self.jwt_validator = validator
        if self.auth_mode == "production" and self.jwt_validator is None:
            if not client_id:
                raise ValueError("OIDC_CLIENT_ID must be set in production mode")
            self.jwt_validator = JWTValidator(issuer, audience=client_id)

        logger.info(f"Authentication middleware initialized in {self.auth_mode} mode")

    def _extract_user_from_jwt(self, request: Request) -> AuthUser | None:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if not token:
            logger.debug("No bearer token found in Authorization header")
            return None

        if self.jwt_validator is None:
            return None
        claims = self.jwt_validator.validate_token(token)
        if not claims:
            return None

        return AuthUser.from_claims(claims)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        if self.auth_mode == "bypass":
            user: AuthUser | None = DEV_USER
        else:
            user = self._extract_user_from_jwt(request)

        if not user:
            # Allow OPTIONS requests for CORS
            if request.method == "OPTIONS":
                return await call_next(request)

            logger.warning(f"Unauthenticated request to {request.url.path} in {self.auth_mode} mode")
            # BaseHTTPMiddleware turns raised HTTPExceptions into 500s
            return JSONResponse(status_code=401, content={"error": "Authentication required"})

        request.state.user = user
        logger.debug(f"Authenticated request from {user.email} to {request.url.path}")
        return await call_next(request)


def get_current_user(request: Request) -> AuthUser:
    """
    Dependency to get the current authenticated user.

    Usage:
        @router.post("/{flight_id}/assignments")
        async def add(user: AuthUser = Depends(get_current_user)):
            ...
    """
    if not hasattr(request.state, "user") or not request.state.user:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user: AuthUser = request.state.user
    return user
