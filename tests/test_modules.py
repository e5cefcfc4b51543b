"""Tests for the emulated built-in modules and the module registry."""

from __future__ import annotations

import asyncio

import pytest

from workbench.core.errors import InvalidURLError, ModuleResolutionError, UnsupportedBuiltinError
from workbench.modules import BuiltinModuleRegistry
from workbench.modules.base import pretty
from workbench.modules.buffer import BufferModule
from workbench.modules.fs import FsModule
from workbench.modules.http import HttpModule
from workbench.modules.path import PathModule
from workbench.modules.thirdparty import LodashModule
from workbench.modules.url import UrlModule
from workbench.modules.util import UtilModule, format


class TestPathModule:
    """Test string-based path utilities."""

    @pytest.fixture
    def path(self) -> PathModule:
        return PathModule("/workspace")

    def test_join(self, path):
        """Test join collapses separators and drops a trailing one."""
        assert path.join("/a", "b", "c") == "/a/b/c"
        assert path.join("/a/", "/b") == "/a/b"
        assert path.join("a", "b/") == "a/b"
        assert path.join("") == "/"

    def test_resolve(self, path):
        """Test resolve folds from the virtual working directory."""
        assert path.resolve("/a", "b") == "/a/b"
        assert path.resolve("/a", "/b") == "/b"
        assert path.resolve("src", "index.js") == "/workspace/src/index.js"
        assert path.resolve() == "/workspace"

    def test_dirname(self, path):
        """Test dirname drops the last segment."""
        assert path.dirname("/a/b/c.js") == "/a/b"
        assert path.dirname("/index.js") == "/"
        assert path.dirname("index.js") == "/"

    def test_basename(self, path):
        """Test basename with and without a suffix."""
        assert path.basename("/a/b/c.js") == "c.js"
        assert path.basename("/a/b/c.js", ".js") == "c"
        assert path.basename("/a/b/c.js", ".py") == "c.js"

    def test_extname(self, path):
        """Test extname of regular files, extensionless files and dotfiles."""
        assert path.extname("/a/b/c.js") == ".js"
        assert path.extname("/a/b/README") == ""
        assert path.extname("/a/archive.tar.gz") == ".gz"
        assert path.extname("/a/.gitignore") == ""

    def test_is_absolute_and_constants(self, path):
        """Test isAbsolute and the separator constants."""
        assert path.isAbsolute("/a") is True
        assert path.isAbsolute("a") is False
        assert path.sep == "/"
        assert path.delimiter == ":"

    def test_read_only(self, path):
        """Test scripts cannot replace module members."""
        with pytest.raises(AttributeError, match="read-only"):
            path.join = lambda *a: ""


class TestBufferModule:
    """Test Buffer conversions."""

    @pytest.fixture
    def buffer(self) -> BufferModule:
        return BufferModule()

    def test_from_string_encodings(self, buffer):
        """Test Buffer.from with text encodings."""
        assert buffer.from_("héllo") == bytearray("héllo".encode("utf-8"))
        assert buffer.from_("68656c6c6f", "hex") == bytearray(b"hello")
        assert buffer.from_("aGVsbG8=", "base64") == bytearray(b"hello")
        assert buffer.from_("é", "latin1") == bytearray(b"\xe9")

    def test_from_keyword_alias(self, buffer):
        """Test the ``from`` name resolves to the same function."""
        assert getattr(buffer, "from")("hi") == bytearray(b"hi")

    def test_from_iterable(self, buffer):
        """Test Buffer.from with a sequence of byte values."""
        assert buffer.from_([104, 105]) == bytearray(b"hi")

    def test_to_string(self, buffer):
        """Test toString in several encodings."""
        data = bytearray(b"hello")

        assert buffer.toString(data) == "hello"
        assert buffer.toString(data, "hex") == "68656c6c6f"
        assert buffer.toString(data, "base64") == "aGVsbG8="

    def test_unknown_encoding(self, buffer):
        """Test unknown encodings raise TypeError."""
        with pytest.raises(TypeError, match="Unknown encoding"):
            buffer.from_("x", "utf16-ish")

    def test_alloc(self, buffer):
        """Test alloc returns zero-filled buffers and rejects bad sizes."""
        assert buffer.alloc(3) == bytearray(3)
        with pytest.raises(ValueError):
            buffer.alloc(-1)

    def test_helpers(self, buffer):
        """Test isBuffer, byteLength and concat."""
        assert buffer.isBuffer(bytearray(b"a")) is True
        assert buffer.isBuffer("a") is False
        assert buffer.byteLength("é") == 2
        assert buffer.concat([b"a", bytearray(b"b")]) == bytearray(b"ab")
        assert buffer.Buffer is buffer


class TestUrlModule:
    """Test strict URL parsing."""

    @pytest.fixture
    def url(self) -> UrlModule:
        return UrlModule()

    def test_parse_components(self, url):
        """Test every component of a full URL."""
        parsed = url.parse("https://example.com:8443/api/items?limit=5#top")

        assert parsed.protocol == "https:"
        assert parsed.hostname == "example.com"
        assert parsed.port == "8443"
        assert parsed.host == "example.com:8443"
        assert parsed.pathname == "/api/items"
        assert parsed.search == "?limit=5"
        assert parsed.query == "limit=5"
        assert parsed.hash == "#top"

    def test_default_port_blank(self, url):
        """Test the scheme's default port is reported as empty."""
        parsed = url.parse("http://example.com:80")

        assert parsed.port == ""
        assert parsed.host == "example.com"
        assert parsed.pathname == "/"

    @pytest.mark.parametrize(
        "text",
        ["not a url", "example.com/path", "http://", "http://host:99999/", "", "https:///path"],
    )
    def test_malformed_rejected(self, url, text):
        """Test malformed input raises InvalidURLError."""
        with pytest.raises(InvalidURLError):
            url.parse(text)

    def test_error_is_value_error(self, url):
        """Test InvalidURLError is catchable as ValueError."""
        with pytest.raises(ValueError, match="Invalid URL"):
            url.parse("nope")

    def test_non_hierarchical_scheme(self, url):
        """Test schemes without an authority parse without a host."""
        parsed = url.parse("mailto:dev@example.com")

        assert parsed.protocol == "mailto:"
        assert parsed.hostname == ""


class TestUtilModule:
    """Test util.format and util.inspect."""

    def test_format_directives(self):
        """Test %s, %d and %j substitution."""
        assert format("%s has %d items", "cart", 3) == "cart has 3 items"
        assert format("data: %j", {"a": [1, 2]}) == 'data: {"a": [1, 2]}'

    def test_format_numbers(self):
        """Test %d conversion of non-integers."""
        assert format("%d", "42") == "42"
        assert format("%d", "abc") == "NaN"
        assert format("%d", True) == "1"
        assert format("%d", 1.5) == "1.5"
        assert format("%d", float("inf")) == "Infinity"

    def test_format_missing_and_extra_args(self):
        """Test unmatched directives stay and extra args are dropped."""
        assert format("%s and %s", "one") == "one and %s"
        assert format("%s", "a", "b") == "a"
        assert format("100%%") == "100%%"

    def test_format_circular_json(self):
        """Test %j of a circular structure."""
        data: dict = {}
        data["self"] = data

        assert format("%j", data) == "[Circular]"

    def test_module_methods(self):
        """Test the module object delegates to the same formatter."""
        util = UtilModule()

        assert util.format("%s!", "hi") == "hi!"
        assert util.inspect({"a": 1}) == '{\n  "a": 1\n}'
        assert util.inspect([1], depth=4) == "[\n    1\n]"


class TestFsModule:
    """Test the filesystem stub."""

    @pytest.fixture
    def fs(self, output) -> FsModule:
        return FsModule(output)

    @pytest.mark.parametrize("operation", ["readFileSync", "writeFileSync"])
    def test_sync_operations_unsupported(self, fs, operation):
        """Test synchronous calls raise UnsupportedBuiltinError."""
        args = ("/x",) if operation == "readFileSync" else ("/x", "data")
        with pytest.raises(UnsupportedBuiltinError, match=f"{operation} not implemented in sandbox environment"):
            getattr(fs, operation)(*args)

    def test_exists_sync_warns(self, fs, output):
        """Test existsSync answers False and warns."""
        assert fs.existsSync("/etc/passwd") is False
        assert output.records == [
            ("warn", "fs.existsSync(/etc/passwd) - returning false (not implemented)")
        ]

    @pytest.mark.asyncio
    async def test_read_file_callback_gets_error(self, fs):
        """Test readFile delivers the error to its callback on the next tick."""
        received = []
        fs.readFile("/x", "utf8", lambda err, *rest: received.append(err))

        assert received == []
        await asyncio.sleep(0)
        assert len(received) == 1
        assert isinstance(received[0], UnsupportedBuiltinError)
        assert "readFile not implemented" in str(received[0])

    @pytest.mark.asyncio
    async def test_write_file_callback_gets_error(self, fs):
        """Test writeFile delivers the error to its callback."""
        received = []
        fs.writeFile("/x", "data", received.append)

        await asyncio.sleep(0)
        assert "writeFile not implemented" in str(received[0])

    @pytest.mark.asyncio
    async def test_callback_required(self, fs):
        """Test the callback variants require a callback."""
        with pytest.raises(TypeError, match="callback"):
            fs.readFile("/x")


class TestHttpModule:
    """Test the server stub."""

    def test_listen_announces_and_calls_back(self, output):
        """Test listen() reports the address and runs the callback."""
        called = []
        server = HttpModule(output).createServer(lambda req, res: None)

        returned = server.listen(3000, lambda: called.append(True))

        assert returned is server
        assert called == [True]
        assert server.listening is True
        assert output.records == [("info", "Server running at http://localhost:3000/")]

    def test_listen_with_hostname(self, output):
        """Test an explicit hostname appears in the announcement."""
        HttpModule(output).createServer().listen(8080, "0.0.0.0")

        assert output.messages("info") == ["Server running at http://0.0.0.0:8080/"]

    def test_close(self, output):
        """Test close() stops listening."""
        server = HttpModule(output).createServer().listen(1)
        server.on("request", lambda *a: None).close()

        assert server.listening is False


class TestLodashModule:
    """Test the allow-listed third-party stand-in."""

    def test_collection_helpers(self):
        """Test map, filter and reduce."""
        lodash = LodashModule()

        assert lodash.map([1, 2], lambda x: x * 2) == [2, 4]
        assert lodash.filter([1, 2, 3], lambda x: x > 1) == [2, 3]
        assert lodash.reduce([1, 2, 3], lambda a, b: a + b) == 6
        assert lodash.reduce([], lambda a, b: a + b, 10) == 10


class TestRegistry:
    """Test module resolution."""

    @pytest.fixture
    def registry(self, output) -> BuiltinModuleRegistry:
        return BuiltinModuleRegistry(output)

    @pytest.mark.parametrize("name", ["fs", "path", "http", "url", "util", "buffer", "lodash"])
    def test_resolves_catalog(self, registry, name):
        """Test every catalog name resolves."""
        assert registry.resolve(name).name == name
        assert name in registry

    def test_node_prefix(self, registry):
        """Test ``node:``-prefixed built-ins resolve to the same object."""
        assert registry.resolve("node:path") is registry.resolve("path")
        assert "node:lodash" not in registry

    def test_unknown_module(self, registry):
        """Test unknown names raise ModuleResolutionError."""
        with pytest.raises(ModuleResolutionError, match="Cannot find module 'left-pad'") as excinfo:
            registry.resolve("left-pad")

        assert excinfo.value.module_name == "left-pad"
        assert isinstance(excinfo.value, ModuleNotFoundError)

    def test_require_is_bound(self, registry):
        """Test create_require() resolves through the registry."""
        require = registry.create_require()

        assert require("util") is registry.resolve("util")

    def test_catalog_immutable(self, registry):
        """Test the catalog mapping cannot be changed."""
        with pytest.raises(TypeError):
            registry.builtins["evil"] = object()

    def test_names(self, registry):
        """Test names lists built-ins then third-party modules."""
        assert registry.names == ("fs", "path", "http", "url", "util", "buffer", "lodash")

    def test_working_directory(self, output):
        """Test the path module resolves against the configured directory."""
        registry = BuiltinModuleRegistry(output, "/srv")

        assert registry.path.resolve("a") == "/srv/a"


def test_pretty_rendering():
    """Test console-style rendering of primitives and containers."""
    assert pretty("text") == "text"
    assert pretty(None) == "null"
    assert pretty(True) == "true"
    assert pretty(3) == "3"
    assert pretty([1, 2]) == "[\n  1,\n  2\n]"
    assert pretty(b"ab") == "[\n  97,\n  98\n]"
