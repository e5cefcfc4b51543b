"""Emulated ``http`` module: a server stub that never binds a socket."""

from __future__ import annotations

from typing import Any, Callable

from workbench.modules.base import BuiltinModule, OutputSink


class StubServer:
    """Server handle returned by ``http.createServer()``.

    Attributes:
        request_listener: Listener passed to createServer (never invoked)
        listening: Whether listen() has been called
        port: Port given to listen(), or None
        hostname: Host given to listen(), or None
    """

    def __init__(self, sink: OutputSink, request_listener: Callable[..., Any] | None = None) -> None:
        self._sink = sink
        self.request_listener = request_listener
        self.listening = False
        self.port: Any = None
        self.hostname: str | None = None

    def listen(
        self,
        port: Any,
        hostname: str | Callable[[], Any] | None = "localhost",
        callback: Callable[[], Any] | None = None,
    ) -> StubServer:
        """Pretend to listen: announce the address, then run ``callback``.

        A callable in the ``hostname`` slot is taken as the callback.
        """
        if callable(hostname):
            callback = hostname
            hostname = "localhost"
        if hostname is None:
            hostname = "localhost"

        self.listening = True
        self.port = port
        self.hostname = hostname
        self._sink("info", f"Server running at http://{hostname}:{port}/")
        if callback is not None:
            callback()
        return self

    def on(self, event: str, listener: Callable[..., Any]) -> StubServer:
        return self

    def close(self, callback: Callable[[], Any] | None = None) -> StubServer:
        self.listening = False
        if callback is not None:
            callback()
        return self


class HttpModule(BuiltinModule):
    name = "http"

    def __init__(self, sink: OutputSink) -> None:
        object.__setattr__(self, "_sink", sink)

    def createServer(self, request_listener: Callable[..., Any] | None = None) -> StubServer:  # noqa: N802
        return StubServer(self._sink, request_listener)
