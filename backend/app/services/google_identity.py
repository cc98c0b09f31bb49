"""Google sign-in: resolve a Google access token to a local user."""
from dataclasses import dataclass
import logging

import httpx
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.models.user import User
from app.services.security import placeholder_password_hash

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


class IdentityProviderError(Exception):
    """Google rejected the token or could not be reached."""


@dataclass(frozen=True)
class GoogleProfile:
    sub: str
    email: str
    name: str | None = None
    email_verified: bool = False


class GoogleIdentityClient:
    """Exchanges Google OAuth access tokens for account profiles."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.client_id = settings.google_client_id
        self.userinfo_url = settings.google_userinfo_url
        self.timeout = settings.external_timeout_seconds
        self.transport = transport

    async def fetch_profile(self, access_token: str) -> GoogleProfile:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                if self.client_id:
                    await self._check_audience(client, access_token)
                response = await client.get(
                    self.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"Google userinfo request failed: {exc}") from exc
        except ValueError as exc:
            raise IdentityProviderError("Google returned a malformed profile") from exc

        sub = data.get("sub")
        email = data.get("email")
        if not sub or not email:
            raise IdentityProviderError("Google profile is missing sub or email")
        if not _is_true(data.get("email_verified")):
            # Accounts are linked by email, which must be verified
            raise IdentityProviderError("Google account email is not verified")

        return GoogleProfile(
            sub=str(sub),
            email=email.lower(),
            name=data.get("name"),
            email_verified=True,
        )

    async def _check_audience(self, client: httpx.AsyncClient, access_token: str) -> None:
        """Reject tokens that were issued to a different OAuth client."""
        response = await client.get(GOOGLE_TOKENINFO_URL, params={"access_token": access_token})
        response.raise_for_status()
        info = response.json()
        if self.client_id not in (info.get("aud"), info.get("azp")):
            raise IdentityProviderError("Google token was issued for another client")


def _is_true(value) -> bool:
    # tokeninfo-style payloads send "true" as a string
    return value is True or (isinstance(value, str) and value.lower() == "true")


def link_or_create_user(db: Session, profile: GoogleProfile) -> User:
    """Find the local account for a Google profile, linking or creating it.

    Only call this with a profile whose email Google has verified.
    """
    if not profile.email_verified:
        raise IdentityProviderError("Google account email is not verified")

    user = db.query(User).filter(User.email == profile.email).first()

    if user:
        if user.google_id is None:
            user.google_id = profile.sub
            user.is_verified = True
            db.commit()
            db.refresh(user)
            logger.info(f"Linked Google account to existing user {user.id}")
        return user

    user = User(
        name=profile.name or profile.email.split("@", 1)[0],
        email=profile.email,
        password_hash=placeholder_password_hash(),
        google_id=profile.sub,
        is_verified=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {user.id} from Google sign-in")
    return user


def get_identity_client() -> GoogleIdentityClient:
    """Dependency that provides the Google identity client."""
    return GoogleIdentityClient(get_settings())
