"""Tests for the completion protocol: Completion, call_controller, async_controller."""

import asyncio

import pytest

from bough._internal.invoke import call_controller
from bough.errors import CompletionError, NotFound
from bough.protocol import Completion, async_controller
from bough.testing import make_context, run_controller


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[BaseException | None] = []

    def __call__(self, err: BaseException | None = None) -> None:
        self.calls.append(err)


class TestCompletion:
    def test_forwards_once(self) -> None:
        recorder = _Recorder()
        completion = Completion(recorder, "leaf")
        completion()
        assert recorder.calls == [None]
        assert completion.called

    def test_second_call_raises(self) -> None:
        completion = Completion(_Recorder(), "leaf")
        completion()
        with pytest.raises(CompletionError, match="leaf"):
            completion(NotFound())

    def test_closed_ignores_calls(self) -> None:
        recorder = _Recorder()
        completion = Completion(recorder)
        completion.close()
        completion()
        completion()
        assert recorder.calls == []


class TestCallController:
    def test_sync_success(self) -> None:
        recorder = _Recorder()
        call_controller(lambda context, done: done(), make_context(), recorder)
        assert recorder.calls == [None]

    def test_sync_error(self) -> None:
        err = NotFound()
        recorder = _Recorder()
        call_controller(lambda context, done: done(err), make_context(), recorder)
        assert recorder.calls == [err]

    def test_raise_becomes_error(self) -> None:
        def broken(context, done):
            raise ValueError("boom")

        recorder = _Recorder()
        call_controller(broken, make_context(), recorder)
        assert len(recorder.calls) == 1
        assert isinstance(recorder.calls[0], ValueError)

    def test_raise_after_completion_propagates(self) -> None:
        def sloppy(context, done):
            done()
            raise ValueError("after")

        recorder = _Recorder()
        with pytest.raises(ValueError, match="after"):
            call_controller(sloppy, make_context(), recorder)
        assert recorder.calls == [None]

    def test_double_done_raises(self) -> None:
        def twice(context, done):
            done()
            done()

        with pytest.raises(CompletionError):
            call_controller(twice, make_context(), _Recorder())

    def test_reuses_completion(self) -> None:
        completion = Completion(_Recorder())
        assert call_controller(lambda context, done: done(), make_context(), completion) is completion

    @pytest.mark.asyncio
    async def test_deferred_completion(self) -> None:
        def later(context, done):
            asyncio.get_running_loop().call_soon(done)

        assert await run_controller(later, make_context()) is None

    @pytest.mark.asyncio
    async def test_coroutine_controller(self) -> None:
        async def coro(context, done):
            await asyncio.sleep(0)
            done(NotFound())

        err = await run_controller(coro, make_context())
        assert isinstance(err, NotFound)

    @pytest.mark.asyncio
    async def test_coroutine_raise_becomes_error(self) -> None:
        async def coro(context, done):
            await asyncio.sleep(0)
            raise KeyError("missing")

        err = await run_controller(coro, make_context())
        assert isinstance(err, KeyError)


class TestAsyncController:
    @pytest.mark.asyncio
    async def test_return_signals_success(self) -> None:
        @async_controller
        async def handler(context):
            context.response.end("ok")

        context = make_context()
        assert await run_controller(handler, context) is None
        assert context.response.finished

    @pytest.mark.asyncio
    async def test_raise_signals_error(self) -> None:
        @async_controller
        async def handler(context):
            raise NotFound()

        assert isinstance(await run_controller(handler, make_context()), NotFound)

    def test_keeps_name(self) -> None:
        @async_controller
        async def profile(context):
            pass

        assert profile.__name__ == "profile"
