"""Basic: a typical small bough app.

Exposes three URL families:

/foo/       A template rendered with a set of static data merged in.
/bar/...    Fallback in action: the first controller answers when the
            magic word "sesame" appears anywhere below /bar/, otherwise
            the second asks for it.
/media/...  Files from the media directory next to this module.

Everything is a controller: the views, the router that maps URLs to
them, and the error handler at the top.

Run:
    python app.py
"""

from pathlib import Path

from bough import (
    App,
    AppConfig,
    NotFound,
    create_error_handler,
    create_fallback,
    create_file_server,
    create_router,
    create_static_content,
    create_template_renderer,
)

HERE = Path(__file__).parent

# -- Output controllers --

display_foo = create_template_renderer(
    "index.html",
    {"title": "Hello World", "items": ["a", "b", "c"]},
)


def open_sesame(context, done):
    if "sesame" not in context.remaining_path:
        done(NotFound())
        return
    context.response.set_status(200)
    context.response.add_headers({"Content-Type": "text/plain"})
    context.response.write("Opening...")
    context.response.end()
    done()


display_bar = create_fallback([
    open_sesame,
    create_static_content("What's the magic word?"),
])

# -- URLs --

router = create_router([
    (r"foo/$", display_foo),
    (r"bar/", display_bar),
    (r"media/", create_file_server(HERE / "media")),
])

# -- Entry point --

app = App(
    create_error_handler([500], router),
    AppConfig(port=8080, template_dir=HERE / "templates"),
)

if __name__ == "__main__":
    app.run()
