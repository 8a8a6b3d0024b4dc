"""HTTP client for shared albums.

This module provides:
- AlbumClient: HTTP client for the link-sharing API of a photo service
- Asset, RemoteAlbum, AssetDownload: Data returned by the service
- RemoteError, TransientRemoteError: Remote failures

A single AlbumClient serves every album of a run: each call is addressed
with the album's own base URL and access key.
"""

from __future__ import annotations

import logging
import mimetypes
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any
from urllib.parse import unquote

import httpx

from albumsync.core.config import ShareReference
from albumsync.core.types import AlbumSyncError

logger = logging.getLogger(__name__)

# filename*=UTF-8''vacation%20photo.jpg
_EXTENDED_FILENAME_RE = re.compile(
    r"filename\*\s*=\s*([\w!#$%&+^`{}~.-]*)'[^']*'([^;\s]+)", re.IGNORECASE
)
_PLAIN_FILENAME_RE = re.compile(r'filename\s*=\s*"([^"]*)"|filename\s*=\s*([^;\s]+)', re.IGNORECASE)


class RemoteError(AlbumSyncError):
    """A remote call failed or returned an unusable response.

    Attributes:
        status_code: HTTP status, or None for transport and parse errors.
        body: Response body text, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransientRemoteError(RemoteError):
    """Remote failure that may succeed when retried (transport, 429, 5xx)."""


class LocalIOError(AlbumSyncError):
    """Staged file is missing or cannot be written or read."""


@dataclass(eq=False)
class Asset:
    """One media item of an album.

    Two assets are the same content iff their checksums are equal;
    every other field is payload carried through the transfer.
    """

    id: str
    checksum: str
    file_name: str | None
    device_asset_id: str
    device_id: str
    file_created_at: str
    file_modified_at: str
    local_path: Path | None = None
    content_type: str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return self.checksum == other.checksum

    def __hash__(self) -> int:
        return hash(self.checksum)

    @property
    def display_name(self) -> str:
        """Name used in reports."""
        return self.file_name or self.id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Asset:
        """Create from API response dictionary."""
        return cls(
            id=data["id"],
            checksum=data["checksum"],
            file_name=data.get("originalFileName") or None,
            device_asset_id=data["deviceAssetId"],
            device_id=data["deviceId"],
            file_created_at=data["fileCreatedAt"],
            file_modified_at=data["fileModifiedAt"],
        )


@dataclass
class RemoteAlbum:
    """Live view of one shared album."""

    id: str
    name: str
    reference: ShareReference
    assets: list[Asset] = field(default_factory=list)

    @property
    def base_url(self) -> str:
        return self.reference.base_url

    @property
    def key(self) -> str:
        return self.reference.key


@dataclass
class AssetDownload:
    """Original bytes of an asset."""

    content: bytes
    filename: str
    content_type: str | None = None


def _safe_name(name: str | None) -> str | None:
    """Strip directory parts from a server-provided filename."""
    if not name:
        return None
    name = PureWindowsPath(PurePosixPath(name).name).name.strip()
    if name in ("", ".", ".."):
        return None
    return name


def filename_from_content_disposition(header: str | None) -> str | None:
    """Extract a filename from a Content-Disposition header.

    The extended form (filename*=<charset>''<value>) wins over a plain
    filename parameter.

    Args:
        header: Header value, or None if absent.

    Returns:
        The decoded filename, or None if the header has none.
    """
    if not header:
        return None

    match = _EXTENDED_FILENAME_RE.search(header)
    if match:
        charset = match.group(1) or "utf-8"
        try:
            return _safe_name(unquote(match.group(2), encoding=charset, errors="strict"))
        except (LookupError, UnicodeDecodeError):
            logger.debug(f"Undecodable filename* parameter: {header!r}")

    match = _PLAIN_FILENAME_RE.search(header)
    if match:
        return _safe_name(match.group(1) if match.group(1) is not None else match.group(2))
    return None


def _media_type(content_type: str | None) -> str | None:
    """Media type of a Content-Type value, without parameters."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


def resolve_filename(
    asset: Asset,
    content_disposition: str | None = None,
    content_type: str | None = None,
) -> str:
    """Pick the staging filename of a downloaded asset.

    Order: the asset's recorded filename, the Content-Disposition header,
    then the asset id. A name without extension gets one derived from the
    response content type, so the destination can recognise the file.
    """
    name = (
        _safe_name(asset.file_name)
        or filename_from_content_disposition(content_disposition)
        or asset.id
    )
    media_type = _media_type(content_type)
    if not PurePosixPath(name).suffix and media_type and media_type != "application/octet-stream":
        extension = mimetypes.guess_extension(media_type)
        if extension:
            name += extension
    return name


class AlbumClient:
    """HTTP client for shared albums."""

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the album client.

        Args:
            timeout: Request timeout in seconds, None to wait indefinitely.
        """
        self._timeout = timeout
        self._client = httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> AlbumClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(
        self,
        method: str,
        reference: ShareReference,
        path: str,
        action: str,
        params: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and map failures to RemoteError.

        The access key travels in the query string and is kept out of
        every error message.
        """
        url = reference.api_url(path)
        query = {"key": reference.key, **(params or {})}
        logger.debug(f"{method} {url}")
        try:
            response = self._client.request(method, url, params=query, **kwargs)
        except httpx.HTTPError as e:
            raise TransientRemoteError(
                f"{action} failed: {type(e).__name__}: {e}"
            ) from e
        return self._handle_response(response, action)

    def _handle_response(self, response: httpx.Response, action: str) -> httpx.Response:
        """Raise RemoteError for any non-success status."""
        if response.is_success:
            return response

        body = response.text
        message = f"{action} failed with status {response.status_code}: {body}"
        if response.status_code == 429 or response.status_code >= 500:
            raise TransientRemoteError(message, response.status_code, body)
        raise RemoteError(message, response.status_code, body)

    def _json(self, response: httpx.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                f"{action}: response is not valid JSON: {response.text[:200]}",
                response.status_code,
                response.text,
            ) from e

    # === Albums ===

    def resolve(self, reference: ShareReference | str) -> RemoteAlbum:
        """Resolve a share reference into its album.

        Args:
            reference: Parsed reference or combined share link.

        Returns:
            RemoteAlbum with an empty asset list.

        Raises:
            ReferenceParseError: If a share link string cannot be parsed.
            RemoteError: If the call fails or the body cannot be parsed.
        """
        if isinstance(reference, str):
            reference = ShareReference.parse(reference)

        action = f"Resolving shared link of {reference.base_url}"
        response = self._request("GET", reference, "/shared-links/me", action)
        data = self._json(response, action)
        try:
            album = data["album"]
            album_id = album["id"]
            name = album.get("albumName") or album.get("name") or album_id
        except (KeyError, TypeError) as e:
            raise RemoteError(
                f"{action}: response has no album: {response.text[:200]}",
                response.status_code,
                response.text,
            ) from e

        logger.info(f"Resolved shared album '{name}' ({album_id}) on {reference.base_url}")
        return RemoteAlbum(id=album_id, name=name, reference=reference)

    def list_assets(self, album: RemoteAlbum) -> list[Asset]:
        """Fetch the current asset list of an album.

        The list replaces album.assets.

        Args:
            album: Album to list.

        Returns:
            The assets, in server order.

        Raises:
            RemoteError: If the call fails or the body cannot be parsed.
        """
        action = f"Listing assets of album '{album.name}'"
        response = self._request("GET", album.reference, f"/albums/{album.id}", action)
        data = self._json(response, action)
        try:
            assets = [Asset.from_dict(a) for a in data["assets"]]
        except (KeyError, TypeError) as e:
            raise RemoteError(
                f"{action}: malformed asset list ({type(e).__name__}: {e})",
                response.status_code,
                response.text[:200],
            ) from e

        album.assets = assets
        logger.debug(f"Album '{album.name}' has {len(assets)} assets")
        return assets

    # === Assets ===

    def download_asset(self, album: RemoteAlbum, asset: Asset) -> AssetDownload:
        """Download the original bytes of an asset.

        Args:
            album: Album holding the asset.
            asset: Asset to download.

        Returns:
            AssetDownload with content and resolved filename.

        Raises:
            RemoteError: If the call fails.
        """
        action = f"Download of '{asset.display_name}' from album '{album.name}'"
        response = self._request(
            "GET",
            album.reference,
            f"/assets/{asset.id}/original",
            action,
            params={"edited": "true"},
        )
        content_type = response.headers.get("content-type")
        filename = resolve_filename(
            asset, response.headers.get("content-disposition"), content_type
        )
        return AssetDownload(
            content=response.content,
            filename=filename,
            content_type=content_type,
        )

    def upload_asset(self, album: RemoteAlbum, asset: Asset) -> str:
        """Upload a staged asset and attach it to an album.

        Args:
            album: Destination album.
            asset: Asset whose local_path points at the staged file.

        Returns:
            Id of the asset in the destination service.

        Raises:
            LocalIOError: If the asset has no readable staged file.
            RemoteError: If the upload or the attach call fails.
        """
        if asset.local_path is None:
            raise LocalIOError(f"Asset '{asset.display_name}' was not downloaded")

        action = f"Upload of '{asset.display_name}' to album '{album.name}'"
        content_type = (
            _media_type(asset.content_type)
            or mimetypes.guess_type(asset.local_path.name)[0]
            or "application/octet-stream"
        )
        form = {
            "deviceId": asset.device_id,
            "deviceAssetId": asset.device_asset_id,
            "fileCreatedAt": asset.file_created_at,
            "fileModifiedAt": asset.file_modified_at,
        }
        try:
            with open(asset.local_path, "rb") as f:
                response = self._request(
                    "POST",
                    album.reference,
                    "/assets",
                    action,
                    data=form,
                    files={"assetData": (asset.local_path.name, f, content_type)},
                )
        except OSError as e:
            raise LocalIOError(
                f"Cannot read staged file {asset.local_path}: {e}"
            ) from e

        data = self._json(response, action)
        try:
            new_id = data["id"]
        except (KeyError, TypeError) as e:
            raise RemoteError(
                f"{action}: response has no asset id: {response.text[:200]}",
                response.status_code,
                response.text,
            ) from e

        if data.get("status") == "duplicate":
            logger.info(f"'{asset.display_name}' already exists on {album.base_url} as {new_id}")

        self.add_to_album(album, [new_id])
        return str(new_id)

    def add_to_album(self, album: RemoteAlbum, asset_ids: list[str]) -> None:
        """Attach uploaded assets to an album.

        Assets the album already contains are accepted.

        Raises:
            RemoteError: If the call fails or an asset is rejected.
        """
        action = f"Adding {len(asset_ids)} asset(s) to album '{album.name}'"
        response = self._request(
            "PUT",
            album.reference,
            f"/albums/{album.id}/assets",
            action,
            json={"ids": asset_ids},
        )
        if not response.content:
            return

        try:
            results = response.json()
        except ValueError:
            return
        if not isinstance(results, list):
            return

        rejected = [
            r for r in results
            if isinstance(r, dict) and r.get("success") is False and r.get("error") != "duplicate"
        ]
        if rejected:
            raise RemoteError(
                f"{action} failed: {response.text}",
                response.status_code,
                response.text,
            )
