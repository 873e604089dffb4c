"""
Tests for local object storage
"""

import pytest

from careerhub.services.storage import LocalObjectStorage, job_logo_path


def test_job_logo_path_keeps_only_basename():
    assert job_logo_path("job-1", "../../etc/logo.png") == "job-logos/job-1/logo.png"


@pytest.mark.asyncio
async def test_upload_and_delete(tmp_path):
    storage = LocalObjectStorage(str(tmp_path), "http://files.local/")

    url = await storage.upload("job-logos/j1/logo.png", b"data", "image/png")

    assert url == "http://files.local/job-logos/j1/logo.png"
    assert (tmp_path / "job-logos" / "j1" / "logo.png").read_bytes() == b"data"
    assert await storage.delete(url) is True
    assert await storage.delete(url) is False


@pytest.mark.asyncio
async def test_foreign_urls_are_not_deleted(tmp_path):
    storage = LocalObjectStorage(str(tmp_path), "http://files.local")

    assert storage.owns("https://cdn.example.com/logo.png") is False
    assert await storage.delete("https://cdn.example.com/logo.png") is False


@pytest.mark.asyncio
async def test_path_escaping_root_rejected(tmp_path):
    storage = LocalObjectStorage(str(tmp_path / "root"), "http://files.local")

    with pytest.raises(ValueError):
        await storage.upload("../outside.txt", b"x", "text/plain")
