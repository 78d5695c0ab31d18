"""Tests for the uploaded video store."""

import io
import os

import pytest
from fastapi import UploadFile

from storage import VideoStore


def upload(filename, content):
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest.fixture
def store(tmp_path):
    return VideoStore(str(tmp_path / "videos"))


class TestIsAllowed:

    @pytest.mark.parametrize("filename,content_type", [
        ("clip.mp4", "application/octet-stream"),
        ("clip.WEBM", None),
        ("clip.mkv", ""),
        ("clip.wmv", "application/octet-stream"),
        ("clip.ogg", "audio/ogg"),
        ("no-extension", "video/quicktime"),
    ])
    def test_accepts_video_type_or_extension(self, store, filename, content_type):
        assert store.is_allowed(filename, content_type)

    @pytest.mark.parametrize("filename,content_type", [
        ("notes.txt", "text/plain"),
        ("image.png", "image/png"),
        (None, None),
        ("mp4", "application/octet-stream"),
    ])
    def test_rejects_everything_else(self, store, filename, content_type):
        assert not store.is_allowed(filename, content_type)


class TestSave:

    def test_construction_does_not_touch_disk(self, tmp_path):
        target = tmp_path / "nested" / "videos"
        VideoStore(str(target))
        assert not target.exists()

    def test_ensure_directory(self, tmp_path):
        target = tmp_path / "nested" / "videos"
        store = VideoStore(str(target))
        store.ensure_directory()
        store.ensure_directory()
        assert target.is_dir()

    @pytest.mark.asyncio
    async def test_save_returns_addressable_path(self, store):
        path = await store.save(upload("movie.mp4", b"frames"))
        assert path.startswith("/videos/")
        assert path.endswith("-movie.mp4")
        name = path.rsplit("/", 1)[1]
        with open(os.path.join(store.directory, name), "rb") as f:
            assert f.read() == b"frames"

    @pytest.mark.asyncio
    async def test_save_streams_large_uploads(self, store, monkeypatch):
        monkeypatch.setattr("storage.CHUNK_SIZE", 4)
        content = b"0123456789" * 10
        path = await store.save(upload("big.webm", content))
        with open(os.path.join(store.directory, path.rsplit("/", 1)[1]), "rb") as f:
            assert f.read() == content

    @pytest.mark.asyncio
    async def test_save_strips_directories_from_filename(self, store):
        path = await store.save(upload("../../etc/movie.mp4", b"x"))
        name = path.rsplit("/", 1)[1]
        assert "/" not in name
        assert os.path.exists(os.path.join(store.directory, name))

    @pytest.mark.asyncio
    async def test_saves_get_distinct_names(self, store):
        first = await store.save(upload("a.mp4", b"1"))
        second = await store.save(upload("a.mp4", b"2"))
        assert first != second

    @pytest.mark.asyncio
    async def test_custom_prefix(self, tmp_path):
        store = VideoStore(str(tmp_path), url_prefix="/media/")
        assert (await store.save(upload("a.webm", b""))).startswith("/media/")


class TestMediaType:

    @pytest.mark.parametrize("path,expected", [
        ("a.mp4", "video/mp4"),
        ("a.WEBM", "video/webm"),
        ("a.ogg", "video/ogg"),
        ("a.mkv", "video/x-matroska"),
    ])
    def test_video_types(self, path, expected):
        assert VideoStore.media_type_for(path) == expected
