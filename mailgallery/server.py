"""HTTP server for browsing a gallery.

Pages are rendered on every request by calling the preview functions again.
The gallery itself is loaded once; edits to its module need a restart.

Routes (relative to the configured base path):
- ``/``: listing page.
- ``/<preview path>``: detail page.
- ``/<preview path>/preview.html``: the email's HTML body.
- ``/<preview path>/attachments/<index>[/<filename>]``: attachment bytes.

Key classes:
- GalleryApp: Maps request paths to responses; independent of sockets.
- GalleryServer: Serves a GalleryApp with ThreadingHTTPServer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import unquote, urlsplit

from markupsafe import escape

from .attachments import read_attachment_at
from .errors import NotFoundError
from .evaluator import resolve_metadata, resolve_preview
from .gallery import GallerySnapshot
from .models import Preview
from .templates import TemplateEngine

logger = logging.getLogger(__name__)

HTML = "text/html; charset=utf-8"


@dataclass
class Response:
    status: int
    content_type: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def html(cls, content: str, status: int = HTTPStatus.OK) -> Response:
        return cls(status, HTML, content.encode("utf-8"))

    @classmethod
    def error(cls, status: HTTPStatus, detail: str = "") -> Response:
        message = f"<h1>{status.value} {status.phrase}</h1>"
        if detail:
            message += f"<p>{escape(detail)}</p>"
        return cls.html(message, status)


class GalleryApp:
    """Request routing for a gallery.

    Attributes:
        gallery: Unevaluated gallery snapshot.
        engine: Template engine rendering the pages.
    """

    def __init__(self, gallery: GallerySnapshot, base_path: str = ""):
        self.gallery = gallery
        self.engine = TemplateEngine(base_path)

    def handle(self, raw_path: str) -> Response:
        """Return the response for a GET request to ``raw_path``."""
        path = urlsplit(raw_path).path
        base = self.engine.base_path
        if base:
            if path != base and not path.startswith(base + "/"):
                return Response.error(HTTPStatus.NOT_FOUND)
            path = path[len(base):]
        segments = [unquote(s) for s in path.split("/") if s]

        try:
            return self._route(segments)
        except NotFoundError as exc:
            return Response.error(HTTPStatus.NOT_FOUND, str(exc))
        except Exception as exc:
            logger.exception("Failed to render %s", raw_path)
            return Response.error(HTTPStatus.INTERNAL_SERVER_ERROR, f"{type(exc).__name__}: {exc}")

    def _route(self, segments: list[str]) -> Response:
        if not segments:
            return Response.html(self.engine.render_index(self._listing()))

        preview = self.gallery.find(segments[0])
        rest = segments[1:]
        if not rest:
            resolved = resolve_preview(preview)
            return Response.html(self.engine.render_preview(self._listing(resolved), resolved))
        if rest == ["preview.html"]:
            return Response.html(self.engine.render_body(resolve_preview(preview)))
        if rest[0] == "attachments" and len(rest) in (2, 3) and rest[1].isdigit():
            content = read_attachment_at(preview, int(rest[1]))
            headers = {}
            if content.filename:
                headers["Content-Disposition"] = f'inline; filename="{content.filename}"'
            return Response(HTTPStatus.OK, content.content_type, content.data, headers)
        raise NotFoundError(f"No page at {'/'.join(segments)!r}")

    def _listing(self, current: Preview | None = None) -> GallerySnapshot:
        """Return the gallery with details resolved for the navigation.

        A preview whose details fail to resolve is listed under its path, so
        it does not break the pages of other previews.
        """
        previews = []
        for preview in self.gallery.previews:
            if current is not None and preview.path == current.path:
                previews.append(current)
                continue
            try:
                previews.append(resolve_metadata(preview))
            except Exception:
                logger.warning(
                    "Listing %s by path: its details failed to resolve", preview.path, exc_info=True
                )
                previews.append(preview)
        return replace(self.gallery, previews=tuple(previews))


class _GalleryHandler(BaseHTTPRequestHandler):
    """HTTP request handler delegating to a GalleryApp.

    Attributes:
        app: The GalleryApp bound by GalleryServer.
    """

    app: GalleryApp

    def do_GET(self):
        self._send(self.app.handle(self.path))

    def do_HEAD(self):
        self._send(self.app.handle(self.path), include_body=False)

    def _send(self, response: Response, include_body: bool = True) -> None:
        self.send_response(response.status)
        self.send_header("Content-type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.end_headers()
        if include_body:
            self.wfile.write(response.body)

    def log_message(self, format, *args):  # noqa: A002 - signature from BaseHTTPRequestHandler
        logger.info("%s - %s", self.address_string(), format % args)


class GalleryServer:
    """Serve a gallery over HTTP.

    Attributes:
        app: Request routing for the gallery.
        host: Interface to bind.
        port: Port to listen on.
    """

    def __init__(
        self,
        gallery: GallerySnapshot,
        port: int = 4000,
        base_path: str = "",
        host: str = "127.0.0.1",
    ):
        self.app = GalleryApp(gallery, base_path)
        self.host = host
        self.port = port
        self._httpd: ThreadingHTTPServer | None = None

    def make_server(self) -> ThreadingHTTPServer:
        handler_cls = type("_BoundGalleryHandler", (_GalleryHandler,), {"app": self.app})
        return ThreadingHTTPServer((self.host, self.port), handler_cls)

    def start(self) -> None:  # pragma: no cover - integration path
        self._httpd = self.make_server()
        url = f"http://{self.host}:{self.port}{self.app.engine.url_for('')}"
        print(f"Serving {len(self.app.gallery.previews)} previews at {url}")
        try:
            self._httpd.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def stop(self) -> None:
        if self._httpd is not None:
            self._httpd.server_close()
            self._httpd = None
