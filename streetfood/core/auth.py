"""
core/auth.py – TokenVerifier class.
Verify bearer JWT do identity provider bên ngoài phát hành. Service này
không phát token, chỉ decode + kiểm tra chữ ký, hạn, audience, issuer.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from jose import JWTError, jwt

from ..errors import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    uid:     str
    email:   Optional[str] = None
    name:    Optional[str] = None
    picture: Optional[str] = None


class TokenVerifier:
    """Decode JWT bằng python-jose."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience
        self._issuer = issuer

    def verify(self, token: str) -> AuthUser:
        if not self._secret:
            logger.error("AUTH_SECRET is not configured, rejecting token")
            raise UnauthorizedError("Unauthorized")
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as e:
            logger.warning("Token rejected: %s", e)
            raise UnauthorizedError("Unauthorized") from e

        uid = claims.get("sub") or claims.get("uid") or claims.get("user_id")
        if not uid:
            raise UnauthorizedError("Unauthorized")
        return AuthUser(
            uid=str(uid),
            email=claims.get("email"),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )
