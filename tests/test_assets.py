"""Tests for asset provisioning and upload."""

import io
from datetime import timedelta

import pytest

from ams_moderation.errors import AssetCreationError, UploadError
from ams_moderation.models import AssetRole, ContainerPermission
from ams_moderation.services import AssetProvisioner


@pytest.fixture
def provisioner(media, blob_storage, clock):
    return AssetProvisioner(media, blob_storage, sas_lifetime=timedelta(hours=4), clock=clock.now)


@pytest.mark.asyncio
async def test_free_name_is_used_as_is(provisioner, media):
    asset = await provisioner.create_output("clip-output")

    assert asset.name == "clip-output"
    assert asset.requested_name == "clip-output"
    assert asset.role == AssetRole.OUTPUT
    assert "clip-output" in media.assets


@pytest.mark.asyncio
async def test_collision_gets_unique_suffix(provisioner, media):
    """Every call for a taken name returns a new name that starts with it."""
    await media.create_or_update_asset("clip-output")

    names = {(await provisioner.create_output("clip-output")).name for _ in range(5)}

    assert len(names) == 5
    for name in names:
        assert name != "clip-output"
        assert name.startswith("clip-output-")
        # 128-bit hex token
        assert len(name) == len("clip-output-") + 32


@pytest.mark.asyncio
async def test_collision_is_logged(provisioner, media, caplog):
    await media.create_or_update_asset("clip-input")

    with caplog.at_level("WARNING"):
        asset = await provisioner.create_input("clip-input", b"data")

    assert "existing asset with name = clip-input" in caplog.text
    assert asset.name in caplog.text


@pytest.mark.asyncio
async def test_input_upload_uses_requested_blob_name(provisioner, media, blob_storage):
    """The blob keeps the file's name even when the asset name changed."""
    await media.create_or_update_asset("clip-input")

    asset = await provisioner.create_input("clip-input", io.BytesIO(b"video bytes"), blob_name="clip.mp4")

    blobs = blob_storage.containers[media.assets[asset.name]]
    assert blobs == {"clip.mp4": b"video bytes"}


@pytest.mark.asyncio
async def test_blob_name_defaults_to_base_name(provisioner, media, blob_storage):
    asset = await provisioner.create_input("clip-input", b"video bytes")

    assert blob_storage.containers[media.assets[asset.name]] == {"clip-input": b"video bytes"}


@pytest.mark.asyncio
async def test_input_sas_is_read_write_and_time_boxed(provisioner, media, clock):
    asset = await provisioner.create_input("clip-input", b"data")

    assert media.sas_requests == [
        (asset.name, ContainerPermission.READ_WRITE, clock.now() + timedelta(hours=4))
    ]


@pytest.mark.asyncio
async def test_output_asset_requests_no_credentials(provisioner, media):
    await provisioner.create_output("clip-output")

    assert media.sas_requests == []


@pytest.mark.asyncio
async def test_create_failure_raises_asset_creation_error(provisioner, media):
    media.fail_on.add("create_or_update_asset")

    with pytest.raises(AssetCreationError) as exc_info:
        await provisioner.create_output("clip-output")

    assert exc_info.value.operation == "create_or_update_asset"


@pytest.mark.asyncio
async def test_upload_failure_raises_upload_error(provisioner, blob_storage):
    blob_storage.fail_uploads = True

    with pytest.raises(UploadError):
        await provisioner.create_input("clip-input", b"data")


@pytest.mark.asyncio
async def test_sas_failure_raises_upload_error(provisioner, media):
    media.fail_on.add("list_container_sas")

    with pytest.raises(UploadError):
        await provisioner.create_input("clip-input", b"data")


class BrokenStream(io.RawIOBase):
    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError("connection reset while reading upload")


@pytest.mark.asyncio
async def test_unreadable_content_raises_upload_error(provisioner, media, blob_storage):
    with pytest.raises(UploadError) as exc_info:
        await provisioner.create_input("clip-input", BrokenStream(), blob_name="clip.mp4")

    assert "connection reset" in str(exc_info.value)
    # The asset exists but holds no blob
    assert blob_storage.containers[media.assets["clip-input"]] == {}
