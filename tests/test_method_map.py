"""Tests for create_method_map and the method filters."""

import asyncio

import pytest

from bough.controllers import (
    create_method_map,
    create_static_content,
    ensure_get,
    ensure_post,
    ensure_valid_method,
)
from bough.errors import Forbidden, MethodNotAllowed
from bough.testing import make_context, read_response, run_controller


async def _completions(controller, context) -> list[BaseException | None]:
    """Run *controller* with a bare recording callback and let children settle."""
    calls: list[BaseException | None] = []

    def record(err: BaseException | None = None) -> None:
        calls.append(err)

    controller(context, record)
    for _ in range(10):
        await asyncio.sleep(0)
    return calls


class TestMethodMap:
    @pytest.mark.asyncio
    async def test_dispatches_on_method(self) -> None:
        controller = create_method_map({
            "GET": create_static_content("get"),
            "POST": create_static_content("post"),
        })
        context = make_context("POST", "/")
        assert await run_controller(controller, context) is None
        assert read_response(context.response).text == "post"

    @pytest.mark.asyncio
    async def test_lowercase_keys(self) -> None:
        controller = create_method_map({"get": create_static_content("get")})
        assert await run_controller(controller, make_context("GET", "/")) is None

    @pytest.mark.asyncio
    async def test_default(self) -> None:
        controller = create_method_map(
            {"GET": create_static_content("get")},
            default=create_static_content("other"),
        )
        context = make_context("PUT", "/")
        await run_controller(controller, context)
        assert read_response(context.response).text == "other"

    @pytest.mark.asyncio
    async def test_unmapped_method(self) -> None:
        controller = create_method_map({"GET": create_static_content("get")})
        err = await run_controller(controller, make_context("POST", "/"))
        assert isinstance(err, MethodNotAllowed)
        assert err.headers == (("Allow", "GET"),)

    @pytest.mark.asyncio
    async def test_leaves_path_alone(self) -> None:
        seen: list[str] = []

        def view(context, done):
            seen.append(context.remaining_path)
            done()

        await run_controller(create_method_map({"GET": view}), make_context("GET", "/a/b"))
        assert seen == ["a/b"]


class TestDeferredHandler:
    @pytest.mark.asyncio
    async def test_error_forwarded_once(self) -> None:
        err = Forbidden()

        async def handler(context, done):
            await asyncio.sleep(0)
            done(err)

        calls = await _completions(create_method_map({"DELETE": handler}), make_context("DELETE", "/"))
        assert len(calls) == 1
        assert calls[0] is err

    @pytest.mark.asyncio
    async def test_default_success_forwarded_once(self) -> None:
        async def handler(context, done):
            await asyncio.sleep(0)
            done()

        controller = create_method_map({}, default=handler)
        assert await _completions(controller, make_context("PUT", "/")) == [None]


class TestFilters:
    @pytest.mark.asyncio
    async def test_valid_method_passes(self) -> None:
        controller = ensure_valid_method(["get", "head"], create_static_content("ok"))
        assert await run_controller(controller, make_context("HEAD", "/")) is None

    @pytest.mark.asyncio
    async def test_invalid_method_rejected(self) -> None:
        controller = ensure_valid_method(["GET", "HEAD"], create_static_content("ok"))
        err = await run_controller(controller, make_context("PATCH", "/"))
        assert isinstance(err, MethodNotAllowed)
        assert err.headers == (("Allow", "GET, HEAD"),)

    @pytest.mark.asyncio
    async def test_ensure_get(self) -> None:
        controller = ensure_get(create_static_content("ok"))
        assert await run_controller(controller, make_context("GET", "/")) is None
        assert isinstance(await run_controller(controller, make_context("POST", "/")), MethodNotAllowed)

    @pytest.mark.asyncio
    async def test_ensure_post(self) -> None:
        controller = ensure_post(create_static_content("ok"))
        assert await run_controller(controller, make_context("POST", "/")) is None
        assert isinstance(await run_controller(controller, make_context("GET", "/")), MethodNotAllowed)
