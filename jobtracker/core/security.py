"""Security utilities: password hashing, JWT issue/verify, bearer identity."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import structlog
from jose import ExpiredSignatureError, JWTError, jwt

from jobtracker.core.exceptions import ExpiredTokenError, InvalidTokenError
from jobtracker.schemas.auth import TokenClaims

logger = structlog.get_logger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72

BEARER_SCHEME = "bearer"


class PasswordHasher:
    """Salted bcrypt hashing with a fixed work factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    @staticmethod
    def _encode(plaintext: str) -> bytes:
        return plaintext.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]

    def hash(self, plaintext: str) -> str:
        """Hash a password. Each call uses a fresh salt."""
        hashed = bcrypt.hashpw(self._encode(plaintext), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def compare(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash.

        Values that are not bcrypt hashes (users created through the
        unprotected add-user route keep their password as given) never match.
        """
        try:
            return bcrypt.checkpw(self._encode(plaintext), hashed.encode("utf-8"))
        except ValueError:
            return False


class TokenService:
    """Issue and verify signed, expiring access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=1),
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, username: str, email: str) -> str:
        """Create a JWT for this identity, expiring ``expires_delta`` from now."""
        now = datetime.now(timezone.utc)
        to_encode = {
            "username": username,
            "email": email,
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and verify a JWT.

        Raises:
            ExpiredTokenError: the token is past its expiration time
            InvalidTokenError: bad signature, malformed token or missing claims
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except JWTError as e:
            raise InvalidTokenError("Could not validate credentials") from e

        try:
            return TokenClaims(
                username=payload["username"],
                email=payload["email"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError("Token is missing required claims") from e


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Strip an optional ``Bearer`` scheme from an Authorization header value."""
    if not authorization:
        return None
    value = authorization.strip()
    scheme, _, credentials = value.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        value = credentials.strip()
    return value or None


def resolve_identity(
    authorization: Optional[str],
    token_service: TokenService,
) -> Optional[TokenClaims]:
    """Turn an Authorization header into an identity.

    Returns None for a missing header, malformed value, invalid or expired
    token. Never raises: callers treat None as unauthenticated.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None

    try:
        return token_service.verify(token)
    except InvalidTokenError as e:
        logger.debug("identity_resolution_failed", reason=e.message)
        return None
