"""Verification of federated identity (OIDC ID) tokens presented at registration."""
from typing import List, Optional, Sequence

import jwt

from event_analytics.core.config import settings
from event_analytics.core.exceptions import AuthTokenInvalid
from event_analytics.core.logging import get_logger

logger = get_logger(__name__)


class FederatedTokenVerifier:
    """Verifies ID tokens issued by a trusted identity provider (Google by default)."""

    def __init__(
        self,
        audience: Optional[str] = None,
        issuers: Optional[Sequence[str]] = None,
        jwks_url: Optional[str] = None,
        algorithms: Optional[List[str]] = None,
    ):
        """
        Initialize the verifier.

        Args:
            audience: Expected "aud" claim, i.e. our OAuth client id
            issuers: Trusted "iss" values
            jwks_url: URL of the issuer's JSON Web Key Set
            algorithms: Accepted signing algorithms (default: RS256)
        """
        self.audience = audience if audience is not None else settings.FEDERATED_CLIENT_ID
        self.issuers = list(issuers) if issuers is not None else settings.federated_issuers
        self.jwks_url = jwks_url if jwks_url is not None else settings.FEDERATED_JWKS_URL
        self.algorithms = algorithms or ["RS256"]
        self._jwks_client = None

    def _signing_key(self, token: str):
        if self._jwks_client is None:
            self._jwks_client = jwt.PyJWKClient(self.jwks_url)
        return self._jwks_client.get_signing_key_from_jwt(token).key

    def verify(self, token: str) -> str:
        """
        Verify a token and return its subject.

        Args:
            token: Encoded ID token

        Returns:
            The "sub" claim of the verified token

        Raises:
            AuthTokenInvalid: If the token cannot be verified for any reason
        """
        if not self.audience:
            logger.warning("Federated token supplied but FEDERATED_CLIENT_ID is not configured")
            raise AuthTokenInvalid("Federated login is not configured")

        try:
            claims = jwt.decode(
                token,
                self._signing_key(token),
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuers,
                options={"require": ["exp", "iss", "aud", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.warning(f"Federated token verification failed: {e}")
            raise AuthTokenInvalid("Invalid federated identity token") from e

        subject = claims.get("sub")
        if not subject:
            raise AuthTokenInvalid("Invalid federated identity token")
        return subject


_verifier: Optional[FederatedTokenVerifier] = None


def get_federated_verifier() -> FederatedTokenVerifier:
    """Get or create the verifier singleton"""
    global _verifier
    if _verifier is None:
        _verifier = FederatedTokenVerifier()
    return _verifier
