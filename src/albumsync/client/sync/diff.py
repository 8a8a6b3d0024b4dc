"""Content-addressed diff between two album listings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from albumsync.client.api import Asset


def missing_assets(
    source_assets: Sequence[Asset],
    dest_assets: Iterable[Asset],
) -> list[Asset]:
    """Get the source assets whose content is absent from the destination.

    Only checksums are compared: filenames, device ids and timestamps are
    ignored. Source order is preserved and duplicate checksums on the
    source side are all kept.

    Args:
        source_assets: Assets of the album to copy from.
        dest_assets: Assets of the album to copy to.

    Returns:
        New list of the missing source assets.
    """
    present = {asset.checksum for asset in dest_assets}
    return [asset for asset in source_assets if asset.checksum not in present]
