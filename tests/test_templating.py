"""Tests for bough.templating and create_template_renderer."""

from pathlib import Path

import pytest

from bough.controllers import create_subtree_data, create_template_renderer
from bough.errors import NotFound
from bough.templating import TemplateRenderer
from bough.testing import make_context, read_response, run_controller

kida = pytest.importorskip("kida")


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    (tmp_path / "page.html").write_text("<h1>{{ title }}</h1><p>{{ user }}</p>")
    return tmp_path


@pytest.fixture
def renderer(template_dir: Path) -> TemplateRenderer:
    return TemplateRenderer(template_dir)


class TestTemplateRenderer:
    @pytest.mark.asyncio
    async def test_render(self, renderer: TemplateRenderer) -> None:
        html = await renderer.render("page.html", {"title": "Home", "user": "ada"})
        assert html == "<h1>Home</h1><p>ada</p>"

    @pytest.mark.asyncio
    async def test_autoescape(self, renderer: TemplateRenderer) -> None:
        html = await renderer.render("page.html", {"title": "<b>", "user": ""})
        assert "<b>" not in html

    @pytest.mark.asyncio
    async def test_cache_lifecycle(self, renderer: TemplateRenderer, template_dir: Path) -> None:
        await renderer.render("page.html", {"title": "a", "user": "b"})
        assert len(renderer) == 1

        (template_dir / "page.html").write_text("changed {{ title }}")
        assert await renderer.render("page.html", {"title": "x", "user": ""}) == "<h1>x</h1><p></p>"

        renderer.flush_cache()
        assert len(renderer) == 0
        assert await renderer.render("page.html", {"title": "x", "user": ""}) == "changed x"

    def test_missing_template(self, renderer: TemplateRenderer) -> None:
        with pytest.raises(NotFound):
            renderer.get("nope.html")

    def test_prepared_environment(self) -> None:
        env = kida.Environment(loader=kida.DictLoader({"hi.html": "hi {{ name }}"}))
        renderer = TemplateRenderer(env=env)
        assert renderer.get("hi.html").render({"name": "bob"}) == "hi bob"


class TestDefaultRenderer:
    def test_configure_default(self, template_dir: Path) -> None:
        TemplateRenderer.configure_default(template_dir)
        try:
            assert TemplateRenderer.default().template_dir == template_dir
            assert TemplateRenderer.default() is TemplateRenderer.default()
        finally:
            TemplateRenderer.configure_default("templates")


class TestTemplateController:
    @pytest.mark.asyncio
    async def test_renders_with_context_data(self, renderer: TemplateRenderer) -> None:
        page = create_template_renderer("page.html", {"title": "Home"}, renderer=renderer)
        context = make_context()
        controller = create_subtree_data({"user": "ada", "title": "shadowed"}, page)
        assert await run_controller(controller, context) is None

        response = read_response(context.response)
        assert response.status == 200
        assert response.content_type == "text/html"
        assert response.text == "<h1>Home</h1><p>ada</p>"

    @pytest.mark.asyncio
    async def test_missing_template_signals_not_found(self, renderer: TemplateRenderer) -> None:
        page = create_template_renderer("missing.html", renderer=renderer)
        context = make_context()
        err = await run_controller(page, context)
        assert isinstance(err, NotFound)
        assert not context.response.head_sent
