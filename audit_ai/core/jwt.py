"""Supabase access-token verification (HS256 shared secret, PyJWT)."""

import jwt

from audit_ai.core.config import settings
from audit_ai.schemas.auth import JWTClaims
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class JWTVerifier:
    """Verifies signature, expiry, audience and issuer of Supabase tokens."""

    def __init__(self, supabase_url: str, jwt_secret: str = "", audience: str = "authenticated"):
        self.supabase_url = supabase_url.rstrip("/")
        self.expected_issuer = f"{self.supabase_url}/auth/v1"
        self.jwt_secret = jwt_secret
        self.audience = audience

        LOGGER.info(f"JWT verifier initialized for issuer: {self.expected_issuer}")

    async def verify_token(self, token: str) -> JWTClaims:
        """Verify and decode a Supabase JWT token.

        Args:
            token: JWT access token from Authorization header

        Returns:
            Decoded and validated JWT claims

        Raises:
            jwt.InvalidTokenError: If token is invalid, expired or misconfigured
        """
        if not self.jwt_secret:
            LOGGER.error("SUPABASE_JWT_SECRET is not configured")
            raise jwt.InvalidTokenError("Token verification is not configured")

        try:
            payload = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=["HS256"],
                audience=self.audience,
                issuer=self.expected_issuer,
                options={"require": ["sub", "email", "exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError as e:
            LOGGER.warning(f"Token expired: {e}")
            raise jwt.InvalidTokenError("Token has expired") from e
        except jwt.InvalidIssuerError as e:
            LOGGER.warning(f"Invalid issuer: {e}")
            raise jwt.InvalidTokenError("Invalid token issuer") from e
        except jwt.InvalidSignatureError as e:
            LOGGER.warning(f"Invalid signature: {e}")
            raise jwt.InvalidTokenError("Invalid token signature") from e

        try:
            claims = JWTClaims(**payload)
        except ValueError as e:
            raise jwt.InvalidTokenError(f"Malformed token claims: {e}") from e

        LOGGER.debug(f"Successfully verified token for user: {claims.sub}")
        return claims


jwt_verifier = JWTVerifier(
    supabase_url=settings.supabase_url,
    jwt_secret=settings.supabase_jwt_secret,
)
