"""File serving controller.

Serves ``context.remaining_path`` from a directory on disk. Mount it
behind a router so the prefix has already been consumed::

    create_router([(r"media/", create_file_server("media"))])
"""

import mimetypes
from pathlib import Path

import anyio

from bough.context import Context
from bough.errors import Forbidden, NotFound
from bough.protocol import Controller, async_controller


def create_file_server(
    directory: str | Path,
    *,
    cache_control: str = "public, max-age=3600",
) -> Controller:
    """A controller that serves files below *directory*.

    Security: ``..`` segments and paths that resolve outside the
    directory (e.g. through symlinks) fail with ``Forbidden``. Paths
    without a file extension, directories, and missing files fail with
    ``NotFound`` so a surrounding fallback can try something else.
    """
    root = Path(directory).resolve()

    @async_controller
    async def file_server(context: Context) -> None:
        relative = context.remaining_path
        if ".." in relative.replace("\\", "/").split("/"):
            raise Forbidden()
        if not Path(relative).suffix:
            raise NotFound(message=f"No file extension in {relative!r}")

        file_path = (root / relative).resolve()
        if not file_path.is_relative_to(root):
            raise Forbidden()

        try:
            body = await anyio.Path(file_path).read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFound(message=f"No file at {relative!r}") from exc

        content_type, _ = mimetypes.guess_type(file_path.name)
        response = context.response
        response.set_status(200)
        response.add_headers(
            {
                "Content-Type": content_type or "application/octet-stream",
                "Content-Length": str(len(body)),
                "Cache-Control": cache_control,
            }
        )
        response.end(body)

    return file_server
