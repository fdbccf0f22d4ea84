"""Dropbox-backed ``CloudService`` speaking the HTTP API v2 over ``requests``.

The remote folder is the app folder root (path ``""``). Only direct file
children are replicated; folders in the listing are skipped.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any
from urllib.parse import urlencode

import requests

from filenotes_sync.sync.errors import (
    AuthExpired,
    AuthMissing,
    ProviderUnavailable,
    TransferFailure,
)
from filenotes_sync.sync.local import FileSystemService
from filenotes_sync.sync.models import FileDescriptor, Side
from filenotes_sync.sync.settings import Settings

logger = logging.getLogger(__name__)

API_URL = "https://api.dropboxapi.com/2"
CONTENT_URL = "https://content.dropboxapi.com/2"
AUTHORIZE_URL = "https://www.dropbox.com/oauth2/authorize"
USER_AGENT = "filenotes-sync/1.0"


class DropboxService:
    """Cloud facade over a Dropbox app folder.

    The access token is read from the settings store. When the store has
    none, a token supplied through configuration is adopted and persisted,
    the same way a token freshly returned by the OAuth flow would be.

    Args:
        filesystem: Local service downloads are written through and
            uploads are read from.
        settings: Store holding the access token.
        access_token: Token from configuration, if any.
        app_key: App key used to build the authorization URL.
        timeout: Seconds to wait for each HTTP request.
    """

    def __init__(
        self,
        filesystem: FileSystemService,
        settings: Settings,
        access_token: str | None = None,
        app_key: str | None = None,
        timeout: int = 60,
    ) -> None:
        self.filesystem = filesystem
        self.settings = settings
        self.app_key = app_key
        self.timeout = timeout
        self._configured_token = access_token
        self._session: requests.Session | None = None

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------

    def _get_token(self) -> str | None:
        token = self.settings.get_dropbox_access_token()
        if token is None and self._configured_token:
            token = self._configured_token
            self.settings.set_dropbox_access_token(token)
            logger.debug("Stored configured Dropbox access token")
        return token

    def _get_session(self) -> requests.Session:
        if self._session is None:
            token = self._get_token()
            if not token:
                raise AuthMissing("No Dropbox access token; run login first")
            session = requests.Session()
            session.headers["Authorization"] = f"Bearer {token}"
            session.headers["User-Agent"] = USER_AGENT
            self._session = session
        return self._session

    def _post(self, url: str, **kwargs: Any) -> requests.Response:
        """POST to Dropbox, mapping transport and auth failures."""
        try:
            response = self._get_session().post(
                url, timeout=self.timeout, **kwargs
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise ProviderUnavailable(f"Dropbox unreachable: {exc}") from exc

        if response.status_code == 401:
            raise AuthExpired("Dropbox rejected the access token")
        if response.status_code == 429 or response.status_code >= 500:
            raise ProviderUnavailable(
                f"Dropbox returned HTTP {response.status_code}"
            )
        return response

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        return bool(self._get_token())

    def login(self) -> str | None:
        """Return the authorization URL to visit, or ``None`` if already signed in."""
        if self.is_authenticated():
            return None
        if not self.app_key:
            raise ValueError(
                "Dropbox app key not configured. Set DROPBOX_APP_KEY or 'dropbox.app_key'."
            )
        url = f"{AUTHORIZE_URL}?" + urlencode(
            {"client_id": self.app_key, "response_type": "code"}
        )
        logger.info("Dropbox authorization required: %s", url)
        return url

    def logout(self) -> None:
        self.settings.clear_dropbox_access_token()
        if self._session is not None:
            self._session.close()
            self._session = None
        logger.info("Logged out of Dropbox")

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def files(self) -> list[FileDescriptor]:
        response = self._post(
            f"{API_URL}/files/list_folder",
            json={"path": "", "recursive": False},
        )
        page = self._json_or_fail(response)
        entries = list(page.get("entries", []))

        while page.get("has_more"):
            response = self._post(
                f"{API_URL}/files/list_folder/continue",
                json={"cursor": page["cursor"]},
            )
            page = self._json_or_fail(response)
            entries.extend(page.get("entries", []))

        descriptors = [
            self._descriptor(entry)
            for entry in entries
            if entry.get(".tag") == "file"
        ]
        descriptors.sort(key=lambda d: d.name)
        logger.debug("Dropbox listing returned %d files", len(descriptors))
        return descriptors

    @staticmethod
    def _json_or_fail(response: requests.Response) -> dict:
        if not response.ok:
            raise ProviderUnavailable(
                f"Dropbox listing failed (HTTP {response.status_code}): {response.text}"
            )
        return response.json()

    @staticmethod
    def _descriptor(entry: dict) -> FileDescriptor:
        return FileDescriptor(
            name=entry["name"],
            size=int(entry.get("size", 0)),
            last_modified=parse_dropbox_time(entry["server_modified"]),
            path=entry.get("path_display") or f"/{entry['name']}",
            side=Side.REMOTE,
            handle=entry.get("path_lower") or f"/{entry['name'].lower()}",
        )

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def download(
        self, file: FileDescriptor, rename_to: str | None = None
    ) -> None:
        response = self._post(
            f"{CONTENT_URL}/files/download",
            headers={"Dropbox-API-Arg": _api_arg({"path": file.handle})},
        )
        self._check_transfer(file.name, response)
        self.filesystem.write(rename_to or file.name, response.content)

    def upload(self, file: FileDescriptor) -> None:
        data = self.filesystem.read(file.name)
        arg = {"path": f"/{file.name}", "mode": "overwrite", "mute": True}
        response = self._post(
            f"{CONTENT_URL}/files/upload",
            headers={
                "Dropbox-API-Arg": _api_arg(arg),
                "Content-Type": "application/octet-stream",
            },
            data=data,
        )
        self._check_transfer(file.name, response)

    def delete(self, file: FileDescriptor) -> None:
        if file.side == Side.LOCAL:
            self.filesystem.delete(file.name)
            return
        response = self._post(
            f"{API_URL}/files/delete_v2", json={"path": file.handle}
        )
        self._check_transfer(file.name, response)

    @staticmethod
    def _check_transfer(name: str, response: requests.Response) -> None:
        if not response.ok:
            raise TransferFailure(
                name, f"HTTP {response.status_code}: {response.text}"
            )


def _api_arg(arg: dict) -> str:
    # HTTP headers must stay ASCII; json.dumps escapes everything else
    return json.dumps(arg, ensure_ascii=True)


def parse_dropbox_time(value: str) -> datetime:
    """Parse Dropbox's ``2015-05-12T15:50:38Z`` timestamps as aware UTC datetimes."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
