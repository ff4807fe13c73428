"""Tests for image localization (no network access required)."""

import asyncio
import hashlib
from pathlib import Path

import aiohttp

from blogimport.localizer import (
    ImageLocalizer,
    find_image_sources,
    find_static_root,
    image_filename,
)

from conftest import FakeResponse, FakeSession


def _localize(localizer, content):
    async def _run():
        async with localizer:
            return await localizer.localize(content)
    return asyncio.run(_run())


class TestFindImageSources:
    def test_remote_only_and_distinct(self):
        content = (
            '<img src="http://a.com/1.jpg"> <img alt="x" src="/local.png" />'
            '<img class="big" src="https://b.com/2.png"><img src="http://a.com/1.jpg">'
        )
        assert find_image_sources(content) == ["http://a.com/1.jpg", "https://b.com/2.png"]

    def test_ignores_links(self):
        assert find_image_sources('<a href="http://a.com/1.jpg">x</a>') == []


class TestImageFilename:
    def test_strips_query(self):
        assert image_filename("http://x.com/a/photo.jpg?w=200") == "photo.jpg"

    def test_decodes_escapes(self):
        assert image_filename("http://x.com/a/My%20Photo.jpg") == "My Photo.jpg"

    def test_extension_from_content_type(self):
        assert image_filename("http://x.com/a/pic", "image/png") == "pic.png"

    def test_existing_extension_kept(self):
        assert image_filename("http://x.com/a/pic.gif", "image/png") == "pic.gif"

    def test_non_image_content_type_ignored(self):
        assert image_filename("http://x.com/a/pic", "text/html; charset=utf-8") == "pic"

    def test_encoded_traversal_removed(self):
        assert image_filename("http://x.com/a/..%2F..%2Fevil.jpg") == "evil.jpg"

    def test_empty_segment(self):
        assert image_filename("http://x.com/", "image/jpeg") == "image.jpeg"


def test_find_static_root(tmp_path):
    img = tmp_path / "site" / "static" / "img"
    assert find_static_root(img) == tmp_path / "site" / "static"
    assert find_static_root(tmp_path / "elsewhere") == tmp_path / "elsewhere"


class TestLocalize:
    def test_rewrites_every_occurrence(self, tmp_path):
        static = tmp_path / "static" / "img"
        session = FakeSession({"http://a.com/x/photo.jpg": FakeResponse(body=b"one")})
        content = '<img src="http://a.com/x/photo.jpg"><p>and</p><img src="http://a.com/x/photo.jpg">'

        result = _localize(ImageLocalizer(static, session=session), content)

        assert "http://a.com/x/photo.jpg" not in result
        assert result.count('src="/img/photo.jpg"') == 2
        assert (static / "photo.jpg").read_bytes() == b"one"
        assert session.requested == ["http://a.com/x/photo.jpg"]

    def test_failed_download_left_untouched(self, tmp_path):
        static = tmp_path / "static"
        session = FakeSession({"http://a.com/ok.jpg": FakeResponse(body=b"ok")})
        content = '<img src="http://a.com/missing.jpg"><img src="http://a.com/ok.jpg">'

        result = _localize(ImageLocalizer(static, session=session), content)

        assert '<img src="http://a.com/missing.jpg">' in result
        assert '<img src="/ok.jpg">' in result
        assert not (static / "missing.jpg").exists()

    def test_network_error_is_not_fatal(self, tmp_path):
        class BrokenSession(FakeSession):
            def get(self, url):
                raise aiohttp.ClientConnectionError("connection refused")

        content = '<img src="http://a.com/x.jpg">'
        result = _localize(ImageLocalizer(tmp_path, session=BrokenSession()), content)
        assert result == content

    def test_same_name_different_images(self, tmp_path):
        static = tmp_path / "static"
        session = FakeSession({
            "http://a.com/photo.jpg": FakeResponse(body=b"first"),
            "http://b.com/photo.jpg": FakeResponse(body=b"second"),
        })
        localizer = ImageLocalizer(static, session=session)

        async def _run():
            async with localizer:
                one = await localizer.localize('<img src="http://a.com/photo.jpg">')
                two = await localizer.localize('<img src="http://b.com/photo.jpg">')
                return one, two

        one, two = asyncio.run(_run())
        prefix = hashlib.sha256(b"second").hexdigest()[:12]

        assert one == '<img src="/photo.jpg">'
        assert two == f'<img src="/{prefix}-photo.jpg">'
        assert (static / "photo.jpg").read_bytes() == b"first"
        assert (static / f"{prefix}-photo.jpg").read_bytes() == b"second"

    def test_concurrent_same_name(self, tmp_path):
        static = tmp_path / "static"
        session = FakeSession({
            "http://a.com/photo.jpg": FakeResponse(body=b"first"),
            "http://b.com/photo.jpg": FakeResponse(body=b"second"),
        })
        content = '<img src="http://a.com/photo.jpg"><img src="http://b.com/photo.jpg">'

        _localize(ImageLocalizer(static, session=session), content)

        saved = sorted(p.read_bytes() for p in static.iterdir())
        assert saved == [b"first", b"second"]

    def test_identical_image_reused(self, tmp_path):
        static = tmp_path / "static"
        (static).mkdir()
        (static / "photo.jpg").write_bytes(b"same")
        session = FakeSession({"http://a.com/photo.jpg": FakeResponse(body=b"same")})

        result = _localize(ImageLocalizer(static, session=session),
                           '<img src="http://a.com/photo.jpg">')

        assert result == '<img src="/photo.jpg">'
        assert [p.name for p in static.iterdir()] == ["photo.jpg"]

    def test_save_uses_async_file_io(self, tmp_path, monkeypatch):
        static = tmp_path / "static"
        static.mkdir()
        (static / "photo.jpg").write_bytes(b"other")
        (static / f"{hashlib.sha256(b'same').hexdigest()[:12]}-photo.jpg").write_bytes(b"same")

        def blocking(*args, **kwargs):
            raise AssertionError("blocking filesystem call in the event loop")

        for name in ("mkdir", "exists", "read_bytes"):
            monkeypatch.setattr(Path, name, blocking)
        session = FakeSession({"http://a.com/photo.jpg": FakeResponse(body=b"same")})

        result = _localize(ImageLocalizer(static, session=session),
                           '<img src="http://a.com/photo.jpg">')

        monkeypatch.undo()
        prefix = hashlib.sha256(b"same").hexdigest()[:12]
        assert result == f'<img src="/{prefix}-photo.jpg">'
        assert len(list(static.iterdir())) == 2

    def test_rerun_gives_same_names(self, tmp_path):
        static = tmp_path / "static"
        responses = {
            "http://a.com/photo.jpg": FakeResponse(body=b"first"),
            "http://b.com/photo.jpg": FakeResponse(body=b"second"),
        }
        content = '<img src="http://a.com/photo.jpg"> <img src="http://b.com/photo.jpg">'

        first = _localize(ImageLocalizer(static, session=FakeSession(responses)), content)
        second = _localize(ImageLocalizer(static, session=FakeSession(responses)), content)

        assert first == second
        assert len(list(static.iterdir())) == 2

    def test_longer_url_not_clobbered_by_prefix(self, tmp_path):
        static = tmp_path / "static"
        session = FakeSession({
            "http://a.com/p.jpg": FakeResponse(body=b"short"),
            "http://a.com/p.jpg?s=1600": FakeResponse(body=b"long"),
        })
        content = '<img src="http://a.com/p.jpg"><img src="http://a.com/p.jpg?s=1600">'

        result = _localize(ImageLocalizer(static, session=session), content)

        assert "http://a.com" not in result
        assert "?s=1600" not in result

    def test_extension_added_from_content_type(self, tmp_path):
        static = tmp_path / "static"
        session = FakeSession({
            "http://a.com/img/abc": FakeResponse(body=b"png", content_type="image/png"),
        })
        result = _localize(ImageLocalizer(static, session=session),
                           '<img src="http://a.com/img/abc">')
        assert result == '<img src="/abc.png">'
        assert (static / "abc.png").exists()
