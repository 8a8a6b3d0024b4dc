"""Shared fixtures: an in-memory album service and asset factories."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from albumsync.client.api import Asset, AssetDownload, RemoteAlbum, RemoteError
from albumsync.core.config import ShareReference

BASE_URL = "https://photos.example.com"


def make_asset(
    checksum: str,
    file_name: str | None = None,
    asset_id: str | None = None,
) -> Asset:
    """Create an Asset with plausible payload fields."""
    return Asset(
        id=asset_id or f"id-{checksum}",
        checksum=checksum,
        file_name=file_name if file_name is not None else f"{checksum}.jpg",
        device_asset_id=f"device-asset-{checksum}",
        device_id="camera",
        file_created_at="2024-06-01T10:00:00.000Z",
        file_modified_at="2024-06-01T10:00:00.000Z",
    )


class FakeAlbumService:
    """In-memory stand-in for AlbumClient.

    Albums are keyed by share key. Uploaded assets are added to the album
    so that later listings see them. Concurrency of downloads and uploads
    is recorded for bound checks.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.albums: dict[str, tuple[str, list[Asset]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_resolve: set[str] = set()
        self.fail_downloads: set[str] = set()
        self.fail_uploads: set[str] = set()
        self.staged_paths: list[Path] = []
        self.on_download: Callable[[RemoteAlbum, Asset], None] | None = None

        self._lock = threading.Lock()
        self._next_id = 0
        self.active_downloads = 0
        self.peak_downloads = 0
        self.active_uploads = 0
        self.peak_uploads = 0

    # Context manager, like AlbumClient
    def __enter__(self) -> FakeAlbumService:
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def add_album(self, key: str, name: str, assets: list[Asset]) -> ShareReference:
        self.albums[key] = (name, list(assets))
        return ShareReference(base_url=BASE_URL, key=key)

    def assets_of(self, key: str) -> list[Asset]:
        return self.albums[key][1]

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def _record(self, operation: str, detail: str) -> None:
        with self._lock:
            self.calls.append((operation, detail))

    def resolve(self, reference: ShareReference | str) -> RemoteAlbum:
        if isinstance(reference, str):
            reference = ShareReference.parse(reference)
        self._record("resolve", reference.key)
        if reference.key in self.fail_resolve or reference.key not in self.albums:
            raise RemoteError(
                "Resolving shared link failed with status 401: Invalid share key",
                401,
                "Invalid share key",
            )
        name, _ = self.albums[reference.key]
        return RemoteAlbum(id=f"album-{reference.key}", name=name, reference=reference)

    def list_assets(self, album: RemoteAlbum) -> list[Asset]:
        self._record("list", album.key)
        with self._lock:
            assets = list(self.albums[album.key][1])
        album.assets = assets
        return assets

    def download_asset(self, album: RemoteAlbum, asset: Asset) -> AssetDownload:
        self._record("download", asset.checksum)
        with self._lock:
            self.active_downloads += 1
            self.peak_downloads = max(self.peak_downloads, self.active_downloads)
        try:
            time.sleep(self.delay)
            if self.on_download:
                self.on_download(album, asset)
            if asset.checksum in self.fail_downloads:
                raise RemoteError(
                    f"Download of '{asset.display_name}' failed with status 404: Not found",
                    404,
                    "Not found",
                )
            return AssetDownload(
                content=f"bytes-{asset.checksum}".encode(),
                filename=asset.file_name or asset.id,
            )
        finally:
            with self._lock:
                self.active_downloads -= 1

    def upload_asset(self, album: RemoteAlbum, asset: Asset) -> str:
        self._record("upload", asset.checksum)
        with self._lock:
            self.active_uploads += 1
            self.peak_uploads = max(self.peak_uploads, self.active_uploads)
        try:
            assert asset.local_path is not None
            content = asset.local_path.read_bytes()
            assert content == f"bytes-{asset.checksum}".encode()
            time.sleep(self.delay)
            if asset.checksum in self.fail_uploads:
                raise RemoteError(
                    f"Upload of '{asset.display_name}' failed with status 500: boom",
                    500,
                    "boom",
                )
            with self._lock:
                self.staged_paths.append(asset.local_path)
                self._next_id += 1
                new_id = f"new-{self._next_id}"
                self.albums[album.key][1].append(
                    Asset(
                        id=new_id,
                        checksum=asset.checksum,
                        file_name=asset.local_path.name,
                        device_asset_id=asset.device_asset_id,
                        device_id=asset.device_id,
                        file_created_at=asset.file_created_at,
                        file_modified_at=asset.file_modified_at,
                    )
                )
            return new_id
        finally:
            with self._lock:
                self.active_uploads -= 1


@pytest.fixture
def service() -> FakeAlbumService:
    """In-memory album service."""
    return FakeAlbumService()


@pytest.fixture(name="make_asset")
def make_asset_fixture() -> Callable[..., Asset]:
    """Factory for assets: make_asset(checksum, file_name=None, asset_id=None)."""
    return make_asset


@pytest.fixture
def slow_service() -> FakeAlbumService:
    """In-memory album service whose transfers take a little time."""
    return FakeAlbumService(delay=0.02)
