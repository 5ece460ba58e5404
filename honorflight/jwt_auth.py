"""
JWT validation for OIDC ID tokens (Google by default).
"""

from __future__ import annotations

import logging
import time
from typing import Any, cast

import httpx
import jwt
from jwt import PyJWK
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

logger = logging.getLogger(__name__)

GOOGLE_ISSUER = "https://accounts.google.com"


class JWTValidator:
    """Validates ID tokens against the issuer's JWKS and the expected audience."""

    def __init__(self, issuer: str, audience: str, http_client: httpx.Client | None = None):
        self.issuer = issuer.rstrip("/")
        self.audience = audience
        self.jwks_uri: str | None = None
        self.jwks_cache: dict[str, Any] | None = None
        self.jwks_cache_time: float = 0
        self.jwks_cache_ttl = 3600  # 1 hour cache
        self._http = http_client or httpx.Client(timeout=10.0)

    def _discover_jwks_uri(self) -> str:
        """Discover JWKS URI from the OIDC discovery document."""
        if self.jwks_uri:
            return self.jwks_uri

        discovery_url = f"{self.issuer}/.well-known/openid-configuration"
        try:
            response = self._http.get(discovery_url)
            response.raise_for_status()
            self.jwks_uri = response.json().get("jwks_uri")
            if not self.jwks_uri:
                raise ValueError(f"No jwks_uri found in discovery document at {discovery_url}")
            logger.info(f"Discovered JWKS URI: {self.jwks_uri}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to discover JWKS URI from {self.issuer}: {type(e).__name__}: {e}")
            self.jwks_uri = f"{self.issuer}/.well-known/jwks.json"
            logger.warning(f"Using fallback JWKS URI: {self.jwks_uri}")
        return self.jwks_uri

    def _fetch_jwks(self) -> dict[str, Any]:
        current_time = time.time()
        if self.jwks_cache is not None and (current_time - self.jwks_cache_time) < self.jwks_cache_ttl:
            return self.jwks_cache

        try:
            response = self._http.get(self._discover_jwks_uri())
            response.raise_for_status()
            self.jwks_cache = cast(dict[str, Any], response.json())
            self.jwks_cache_time = current_time
            logger.debug(f"Fetched JWKS with {len(self.jwks_cache.get('keys', []))} keys")
            return self.jwks_cache
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch JWKS: {e}")
            if self.jwks_cache is not None:
                logger.warning("Using stale JWKS cache")
                return self.jwks_cache
            raise

    def _get_signing_key(self, token: str) -> Any:
        kid = jwt.get_unverified_header(token).get("kid")
        if not kid:
            logger.warning("No kid in token header")
            return None

        for key in self._fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return PyJWK.from_dict(key).key

        logger.warning(f"Key with kid '{kid}' not found in JWKS")
        return None

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """
        Validate an ID token and return its claims.

        Returns None for any token that is expired, malformed, signed by an
        unknown key, or issued for another audience.
        """
        try:
            signing_key = self._get_signing_key(token)
            if signing_key is None:
                return None

            claims = cast(
                dict[str, Any],
                jwt.decode(
                    token,
                    signing_key,
                    algorithms=["RS256"],
                    audience=self.audience,
                    issuer=self.issuer,
                    options={"verify_exp": True, "verify_iat": True, "verify_aud": True, "verify_iss": True},
                ),
            )
            logger.debug(f"Token validated successfully, sub: {claims.get('sub')}")
            return claims
        except ExpiredSignatureError:
            logger.warning("Token has expired")
            return None
        except InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Could not load signing keys: {e}")
            return None


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Extract bearer token from Authorization header."""
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
