"""Tests for paginated download of output assets."""

from datetime import timedelta
from typing import Optional

import pytest
import pytest_asyncio

from ams_moderation.errors import DownloadError, RemoteServiceError
from ams_moderation.models import BlobPage, ContainerPermission
from ams_moderation.services import ResultFetcher


class ScriptedContainer:
    """Container whose listing pages are keyed by the token that requests them."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.tokens: list[Optional[str]] = []
        self.downloads: list[str] = []
        self.closed = False

    async def list_page(self, continuation_token: Optional[str] = None) -> BlobPage:
        self.tokens.append(continuation_token)
        return self.pages[continuation_token]

    async def download_to_path(self, blob_name, path):
        self.downloads.append(blob_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(blob_name)

    async def upload(self, blob_name, data):
        raise AssertionError("read-only container")

    async def close(self):
        self.closed = True


class ScriptedStorage:
    def __init__(self, container: ScriptedContainer):
        self._container = container
        self.urls: list[str] = []

    def container(self, sas_url: str) -> ScriptedContainer:
        self.urls.append(sas_url)
        return self._container


@pytest_asyncio.fixture
async def output_asset(media):
    await media.create_or_update_asset("clip-output")
    return "clip-output"


@pytest.mark.asyncio
async def test_three_pages_by_cursor(media, store, clock, output_asset):
    """Cursors "a", "b", "" mean exactly three list calls and every object downloaded."""
    container = ScriptedContainer({
        None: BlobPage(names=["insights.json", "thumb-1.jpg"], continuation_token="a"),
        "a": BlobPage(names=["thumb-2.jpg"], continuation_token="b"),
        "b": BlobPage(names=["thumb-3.jpg", "transcript.vtt"], continuation_token=""),
    })
    fetcher = ResultFetcher(media, ScriptedStorage(container), clock=clock.now)

    written = await fetcher.download(output_asset, store)

    assert container.tokens == [None, "a", "b"]
    assert container.downloads == [
        "insights.json", "thumb-1.jpg", "thumb-2.jpg", "thumb-3.jpg", "transcript.vtt"
    ]
    assert [p.name for p in store.list_files(output_asset)] == sorted(container.downloads)
    assert written == 5
    assert container.closed


@pytest.mark.asyncio
async def test_read_only_time_boxed_sas(media, store, clock, output_asset):
    container = ScriptedContainer({None: BlobPage(names=[], continuation_token="")})
    fetcher = ResultFetcher(media, ScriptedStorage(container), sas_lifetime=timedelta(hours=1), clock=clock.now)

    await fetcher.download(output_asset, store)

    assert media.sas_requests == [
        (output_asset, ContainerPermission.READ, clock.now() + timedelta(hours=1))
    ]


@pytest.mark.asyncio
async def test_empty_container(media, blob_storage, store, output_asset):
    """An empty container takes one list call and leaves an empty directory."""
    written = await ResultFetcher(media, blob_storage).download(output_asset, store)

    assert written == 0
    assert blob_storage.list_calls == {media.assets[output_asset]: 1}
    assert store.asset_dir(output_asset).is_dir()


@pytest.mark.asyncio
async def test_many_objects_across_pages(media, blob_storage, store, output_asset):
    """List calls equal the number of pages; every object lands exactly once."""
    blob_storage.page_size = 100
    blobs = blob_storage.containers[media.assets[output_asset]]
    for i in range(2500):
        blobs[f"frames/frame-{i:05d}.jpg"] = str(i).encode()

    written = await ResultFetcher(media, blob_storage).download(output_asset, store)

    assert blob_storage.list_calls[media.assets[output_asset]] == 25
    assert written == 2500
    assert len(store.list_files(output_asset)) == 2500
    assert (store.asset_dir(output_asset) / "frames" / "frame-01234.jpg").read_bytes() == b"1234"


@pytest.mark.asyncio
async def test_single_transfer_failure_is_fatal(media, blob_storage, store, output_asset):
    blobs = blob_storage.containers[media.assets[output_asset]]
    blobs.update({"a.json": b"{}", "b.json": b"{}", "c.json": b"{}"})
    blob_storage.fail_downloads.add("b.json")

    with pytest.raises(DownloadError):
        await ResultFetcher(media, blob_storage).download(output_asset, store)

    # Partially populated directory is left behind
    assert [p.name for p in store.list_files(output_asset)] == ["a.json"]


@pytest.mark.asyncio
async def test_unsafe_blob_name_rejected(media, store, clock, output_asset):
    container = ScriptedContainer({None: BlobPage(names=["../escape.json"], continuation_token="")})

    with pytest.raises(DownloadError):
        await ResultFetcher(media, ScriptedStorage(container), clock=clock.now).download(output_asset, store)

    assert container.downloads == []


@pytest.mark.asyncio
async def test_missing_asset_sas_failure(media, blob_storage, store):
    with pytest.raises(RemoteServiceError):
        await ResultFetcher(media, blob_storage).download("no-such-output", store)
