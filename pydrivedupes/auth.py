"""OAuth authorization and token persistence for Google Drive."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .config import config
from .exceptions import DriveAuthenticationError, DriveConfigError
from .utils import DEFAULT_OAUTH_PORT

logger = logging.getLogger(__name__)

# If modifying these scopes, delete the previously saved token file
SCOPES = ["https://www.googleapis.com/auth/drive.metadata.readonly"]


def load_credentials(token_file: Path) -> Optional[Credentials]:
    """Load stored credentials, refreshing them if they have expired.

    Args:
        token_file: Path of the persisted token JSON

    Returns:
        Valid credentials, or None if no usable token is stored

    Raises:
        DriveAuthenticationError: If a refresh was attempted and rejected
    """
    if not token_file.exists():
        logger.debug(f"No token file at {token_file}")
        return None

    try:
        creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
    except ValueError as e:
        logger.warning(f"Ignoring malformed token file {token_file}: {e}")
        return None

    if creds.valid:
        return creds

    if creds.expired and creds.refresh_token:
        logger.debug("Access token expired, refreshing")
        try:
            creds.refresh(Request())
        except RefreshError as e:
            raise DriveAuthenticationError(
                f"Could not refresh access token: {e}. Run 'pydrivedupes init'."
            ) from e
        save_credentials(creds, token_file)
        return creds

    return None


def save_credentials(creds: Credentials, token_file: Path) -> None:
    """Persist credentials as JSON with owner-only permissions."""
    logger.info(f"Saving credential file to: {token_file}")
    token_file.parent.mkdir(parents=True, exist_ok=True)
    token_file.write_text(creds.to_json(), encoding="utf-8")
    try:
        token_file.chmod(0o600)
    except OSError:
        logger.debug(f"Could not set permissions on {token_file}")


def run_authorization_flow(
    credentials_file: Path, port: int = DEFAULT_OAUTH_PORT
) -> Credentials:
    """Authorize in the browser and return fresh credentials.

    A local server on ``port`` receives the authorization code.

    Args:
        credentials_file: OAuth client secrets JSON from Google Cloud Console
        port: Local redirect port

    Raises:
        DriveConfigError: If the client secrets file is missing or invalid
    """
    if not credentials_file.exists():
        raise DriveConfigError(
            f"Client secrets file not found: {credentials_file}. Download an "
            "OAuth 2.0 Client ID (Desktop app) from "
            "https://console.cloud.google.com/apis/credentials"
        )

    try:
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_file), SCOPES)
    except ValueError as e:
        raise DriveConfigError(f"Unable to parse client secret file: {e}") from e

    return flow.run_local_server(port=port)


def get_access_token(access_token: Optional[str] = None) -> str:
    """Return an access token from the option, environment or stored token.

    Args:
        access_token: Explicit token, used as-is when given

    Raises:
        DriveConfigError: If no token is available
    """
    token = access_token or config.access_token
    if token:
        return token

    creds = load_credentials(config.token_file)
    if creds is None or not creds.token:
        raise DriveConfigError(
            "Not authorized. Run 'pydrivedupes init' to authorize access."
        )
    return creds.token


def require_access_token(ctx: click.Context, out: Any) -> str:
    """Get an access token for a command or exit with an error.

    Args:
        ctx: Click context; ``ctx.obj['access_token']`` holds the global option
        out: Output formatter for error messages

    Returns:
        Access token string
    """
    try:
        return get_access_token(ctx.obj.get("access_token"))
    except (DriveConfigError, DriveAuthenticationError) as e:
        out.error(str(e))
        ctx.exit(1)
