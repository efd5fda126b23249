from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from config import ApplicationConfig
from src.app.services.token_issuer import ITokenIssuer
from src.libs.result import Error, Result, Return


class JwtTokenIssuer(ITokenIssuer):
    """
    HS256 JWT issuer for session and refresh tokens.

    Every token carries a random jti, so two tokens issued for the same
    claims within the same second are still distinct.
    """

    def __init__(
        self,
        secret: str = ApplicationConfig.JWT_SECRET,
        algorithm: str = ApplicationConfig.JWT_ALGORITHM,
    ):
        self.secret = secret
        self.algorithm = algorithm

    def issue(self, claims: dict, ttl: timedelta) -> str:
        """
        Sign claims into a token

        Args:
            claims: Payload values (must be JSON serializable)
            ttl: Token lifetime

        Returns:
            JWT token string
        """
        now = datetime.now(UTC)
        payload = {
            **claims,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Result[dict]:
        """
        Verify and decode a token

        Returns:
            Result with the decoded payload, or TOKEN_EXPIRED / INVALID_TOKEN
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))
        except JWTError:
            return Return.err(Error("INVALID_TOKEN", "Invalid token"))
        return Return.ok(payload)
