"""Tests for the checksum diff."""

from __future__ import annotations

from albumsync.client.api import Asset
from albumsync.client.sync import missing_assets


class TestMissingAssets:
    """Tests for missing_assets()."""

    def test_scenario(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Should keep the source assets absent from the destination, in order."""
        source = [make_asset("c1"), make_asset("c2"), make_asset("c3")]
        dest = [make_asset("c2")]

        missing = missing_assets(source, dest)

        assert [a.checksum for a in missing] == ["c1", "c3"]
        assert missing[0] is source[0]
        assert missing[1] is source[2]

    def test_same_listing(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """diff(A, A) should be empty."""
        assets = [make_asset("c1"), make_asset("c2")]
        assert missing_assets(assets, assets) == []

    def test_empty_destination(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """diff(A, []) should equal A."""
        assets = [make_asset("c1"), make_asset("c2")]
        missing = missing_assets(assets, [])
        assert [a.id for a in missing] == [a.id for a in assets]
        assert missing is not assets

    def test_empty_source(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """diff([], B) should be empty."""
        assert missing_assets([], [make_asset("c1")]) == []

    def test_filename_collision_does_not_suppress(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Assets with the same name but different content are transferred."""
        source = [make_asset("c1", file_name="IMG_0001.jpg")]
        dest = [make_asset("c2", file_name="IMG_0001.jpg")]
        assert [a.checksum for a in missing_assets(source, dest)] == ["c1"]

    def test_checksum_collision_suppresses(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Assets with the same content are never transferred, whatever their metadata."""
        source = [make_asset("c1", file_name="beach.jpg", asset_id="src-1")]
        dest = [
            Asset(
                id="dst-9",
                checksum="c1",
                file_name="renamed.jpg",
                device_asset_id="other",
                device_id="phone",
                file_created_at="2020-01-01T00:00:00.000Z",
                file_modified_at="2021-01-01T00:00:00.000Z",
            )
        ]
        assert missing_assets(source, dest) == []

    def test_source_duplicates_kept(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Duplicate checksums on the source side are carried independently."""
        source = [
            make_asset("c1", asset_id="a"),
            make_asset("c1", asset_id="b"),
            make_asset("c2"),
        ]
        missing = missing_assets(source, [make_asset("c2")])
        assert [a.id for a in missing] == ["a", "b"]

    def test_accepts_any_iterable_destination(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Destination may be a generator."""
        source = [make_asset("c1"), make_asset("c2")]
        missing = missing_assets(source, (a for a in [make_asset("c1")]))
        assert [a.checksum for a in missing] == ["c2"]


class TestAssetIdentity:
    """Asset equality is content equality."""

    def test_equal_by_checksum(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Should compare and hash by checksum only."""
        a = make_asset("c1", file_name="a.jpg", asset_id="1")
        b = make_asset("c1", file_name="b.jpg", asset_id="2")
        assert a == b
        assert len({a, b}) == 1

    def test_different_checksum(self, make_asset) -> None:  # type: ignore[no-untyped-def]
        """Should never equate different checksums."""
        a = make_asset("c1", file_name="same.jpg", asset_id="1")
        b = make_asset("c2", file_name="same.jpg", asset_id="1")
        assert a != b
