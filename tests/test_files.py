"""Tests for create_file_server."""

from pathlib import Path

import pytest

from bough.controllers import create_file_server, create_router
from bough.errors import Forbidden, NotFound
from bough.testing import make_context, read_response, run_controller


@pytest.fixture
def media(tmp_path: Path) -> Path:
    root = tmp_path / "media"
    (root / "css").mkdir(parents=True)
    (root / "css" / "site.css").write_text("body { color: red; }")
    (root / "logo.png").write_bytes(b"\x89PNG")
    (root / "README").write_text("no extension")
    (tmp_path / "secret.txt").write_text("top secret")
    return root


class TestServing:
    @pytest.mark.asyncio
    async def test_serves_file(self, media: Path) -> None:
        router = create_router([(r"media/", create_file_server(media))])
        context = make_context("GET", "/media/css/site.css")
        assert await run_controller(router, context) is None

        response = read_response(context.response)
        assert response.status == 200
        assert response.content_type == "text/css"
        assert response.headers["content-length"] == str(len("body { color: red; }"))
        assert response.headers["cache-control"] == "public, max-age=3600"
        assert response.text == "body { color: red; }"

    @pytest.mark.asyncio
    async def test_binary_file(self, media: Path) -> None:
        context = make_context("GET", "/logo.png")
        await run_controller(create_file_server(media), context)
        response = read_response(context.response)
        assert response.content_type == "image/png"
        assert response.body == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_custom_cache_control(self, media: Path) -> None:
        context = make_context("GET", "/logo.png")
        await run_controller(create_file_server(media, cache_control="no-store"), context)
        assert read_response(context.response).headers["cache-control"] == "no-store"


class TestMisses:
    @pytest.mark.asyncio
    async def test_missing_file(self, media: Path) -> None:
        err = await run_controller(create_file_server(media), make_context("GET", "/nope.css"))
        assert isinstance(err, NotFound)

    @pytest.mark.asyncio
    async def test_no_extension(self, media: Path) -> None:
        err = await run_controller(create_file_server(media), make_context("GET", "/README"))
        assert isinstance(err, NotFound)

    @pytest.mark.asyncio
    async def test_directory_with_suffix(self, media: Path) -> None:
        (media / "dir.d").mkdir()
        err = await run_controller(create_file_server(media), make_context("GET", "/dir.d"))
        assert isinstance(err, NotFound)


class TestTraversal:
    @pytest.mark.asyncio
    async def test_dot_dot_segment(self, media: Path) -> None:
        err = await run_controller(create_file_server(media), make_context("GET", "/../secret.txt"))
        assert isinstance(err, Forbidden)

    @pytest.mark.asyncio
    async def test_symlink_out_of_root(self, media: Path) -> None:
        (media / "escape.txt").symlink_to(media.parent / "secret.txt")
        err = await run_controller(create_file_server(media), make_context("GET", "/escape.txt"))
        assert isinstance(err, Forbidden)
