"""Identity providers: Google OAuth 2.0 for live mode, a fixed profile for demo mode."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from agenda_assistant.core.config import Settings
from agenda_assistant.core.errors import NotSignedInError
from agenda_assistant.features.auth import AuthOutcome
from agenda_assistant.features.google_services import DemoAccountClient, GoogleAccountClient
from agenda_assistant.features.models import UserProfile

logger = logging.getLogger(__name__)

USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"

DEMO_PROFILE = UserProfile(
    name="משתמש דוגמה",
    email="demo@example.com",
    picture="https://ui-avatars.com/api/?name=Demo+User&background=8e24aa&color=fff",
)


# Helper functions for token storage (simple JSON file for a local, single-user app)

def save_tokens(credentials: Credentials, token_path: Path) -> None:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_data = {
        'token': credentials.token,
        'refresh_token': credentials.refresh_token,
        'token_uri': credentials.token_uri,
        'client_id': credentials.client_id,
        'client_secret': credentials.client_secret,
        'scopes': credentials.scopes,
        'expiry': credentials.expiry.isoformat() if credentials.expiry else None,
    }
    try:
        with open(token_path, 'w') as f:
            json.dump(token_data, f)
        logger.info(f"Saved Google OAuth tokens to {token_path}")
    except IOError as e:
        logger.error(f"Error saving Google OAuth tokens to {token_path}: {e}", exc_info=True)


def _parse_expiry(value: Optional[str]) -> Optional[datetime]:
    # google-auth compares expiry against a naive UTC clock
    if value is None:
        return None
    expiry = datetime.fromisoformat(value)
    if expiry.tzinfo is not None:
        expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)
    return expiry


def load_tokens(token_path: Path) -> Optional[Credentials]:
    """Loads stored credentials, refreshing them when expired. None means the user must sign in."""
    if not token_path.exists():
        return None
    try:
        with open(token_path, 'r') as f:
            token_data = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error(f"Error loading or parsing Google OAuth tokens from {token_path}: {e}", exc_info=True)
        return None

    if not isinstance(token_data, dict) or \
            not all(k in token_data for k in ['token', 'token_uri', 'client_id', 'client_secret', 'scopes']):
        logger.warning(f"Token file {token_path} is missing required fields. Ignoring.")
        return None
    try:
        expiry = _parse_expiry(token_data.pop('expiry', None))
        creds = Credentials(**token_data, expiry=expiry)
    except (TypeError, ValueError) as e:
        logger.warning(f"Token file {token_path} could not be read as credentials: {e}. Ignoring.")
        return None
    if creds.expired and creds.refresh_token:
        try:
            logger.info("Google OAuth token expired, attempting refresh.")
            creds.refresh(GoogleAuthRequest())
            save_tokens(creds, token_path)
        except RefreshError as e:
            logger.error(f"Error refreshing Google OAuth token: {e}. User must re-authenticate.", exc_info=True)
            return None
    logger.info(f"Loaded Google OAuth tokens from {token_path}")
    return creds


def fetch_profile(credentials: Credentials) -> UserProfile:
    response = httpx.get(USERINFO_URL, headers={"Authorization": f"Bearer {credentials.token}"})
    response.raise_for_status()
    data = response.json()
    return UserProfile(name=data.get("name") or data.get("email") or "", email=data.get("email"), picture=data.get("picture"))


class GoogleIdentityProvider:
    """OAuth web flow with tokens persisted in a local JSON file."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._credentials: Optional[Credentials] = None
        self._profile: Optional[UserProfile] = None
        self._flow: Optional[Flow] = None

    def _new_flow(self) -> Flow:
        return Flow.from_client_secrets_file(
            str(self.settings.client_secret_path()),
            scopes=self.settings.google_scopes,
            redirect_uri=self.settings.GOOGLE_OAUTH_REDIRECT_URI
        )

    def initialize(self) -> AuthOutcome:
        client_secret_path = self.settings.client_secret_path()
        if not client_secret_path.exists():
            logger.error(f"Google client_secret.json not found at {client_secret_path}")
            return AuthOutcome.failed(f"Google OAuth client secret file not found: {client_secret_path}")

        creds = load_tokens(self.settings.token_path())
        if creds is None:
            return AuthOutcome.signed_out()
        try:
            profile = fetch_profile(creds)
        except httpx.HTTPError as e:
            logger.warning(f"Stored Google token could not load the user profile: {e}. Treating as signed out.")
            return AuthOutcome.signed_out()
        self._credentials = creds
        self._profile = profile
        return AuthOutcome.signed_in(profile)

    def sign_in_url(self) -> Optional[str]:
        self._flow = self._new_flow()
        authorization_url, _state = self._flow.authorization_url(
            access_type='offline', # Request refresh token for offline access
            prompt='consent'
        )
        logger.info("Generated Google OAuth consent URL.")
        return authorization_url

    def complete_sign_in(self, code: Optional[str] = None) -> UserProfile:
        if not code:
            raise NotSignedInError("OAuth callback did not include an authorization code")
        # Reuse the flow that produced the consent URL so its PKCE verifier matches.
        flow = self._flow or self._new_flow()
        self._flow = None
        try:
            flow.fetch_token(code=code)
            credentials = flow.credentials
            profile = fetch_profile(credentials)
        except Exception as e:
            logger.error(f"Error fetching Google OAuth token or profile: {e}", exc_info=True)
            raise NotSignedInError(f"Could not obtain token from Google: {e}",
                                   user_message="ההתחברות לחשבון Google נכשלה.") from e
        save_tokens(credentials, self.settings.token_path())
        self._credentials = credentials
        self._profile = profile
        logger.info(f"Signed in as {profile.email or profile.name}.")
        return profile

    def account_client(self) -> Optional[GoogleAccountClient]:
        if self._credentials is None:
            return None
        return GoogleAccountClient(self._credentials, timezone_name=self.settings.CALENDAR_TIMEZONE)

    def current_profile(self) -> Optional[UserProfile]:
        return self._profile

    def sign_out(self) -> None:
        if self._credentials is not None and self._credentials.token:
            try:
                httpx.post(REVOKE_URL, params={"token": self._credentials.token},
                           headers={"Content-Type": "application/x-www-form-urlencoded"})
            except httpx.HTTPError as e:
                logger.warning(f"Token revoke failed, signing out locally anyway: {e}")
        self.settings.token_path().unlink(missing_ok=True)
        self._credentials = None
        self._profile = None
        logger.info("Signed out of Google.")


class DemoIdentityProvider:
    """Auto-signs in a fixed demo user backed by `DemoAccountClient`."""

    def __init__(self, latency_seconds: float = 0.0):
        self._account = DemoAccountClient(latency_seconds=latency_seconds)
        self._profile: Optional[UserProfile] = None

    def initialize(self) -> AuthOutcome:
        logger.info("DEMO MODE: Auto-signing in with mock user.")
        self._profile = DEMO_PROFILE
        return AuthOutcome.signed_in(DEMO_PROFILE)

    def sign_in_url(self) -> Optional[str]:
        return None

    def complete_sign_in(self, code: Optional[str] = None) -> UserProfile:
        logger.info("DEMO MODE: Signing in mock user.")
        self._profile = DEMO_PROFILE
        return DEMO_PROFILE

    def account_client(self) -> Optional[DemoAccountClient]:
        return self._account if self._profile is not None else None

    def current_profile(self) -> Optional[UserProfile]:
        return self._profile

    def sign_out(self) -> None:
        logger.info("DEMO MODE: Signing out mock user.")
        self._profile = None


def build_identity_provider(settings: Settings, demo_mode: bool):
    if demo_mode:
        return DemoIdentityProvider(latency_seconds=settings.DEMO_LATENCY_SECONDS)
    return GoogleIdentityProvider(settings)
