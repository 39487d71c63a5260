"""End to end scenarios for the static handler, through the in-process bridge."""

from pathlib import Path

import pytest

from gzstatic import negotiation
from gzstatic.handler import StaticHandler, handle, static
from gzstatic.listing import LISTING_CONTENT_TYPE

from .conftest import INDEX, INDEX_GZ, make_request

GZIP = {"Accept-Encoding": "gzip, deflate"}

EMPTY_LISTING: bytes = b'<pre>\n<a href="../">..</a>\n</pre>\n'


class TestPrecompressed:
	def test_serves_gzip_sibling_when_accepted(self, client) -> None:
		res = client().request("/", headers=GZIP)
		assert res.status == 200
		assert res.body == INDEX_GZ
		assert res.header("Content-Encoding") == "gzip"
		assert res.header("Content-Type") == "text/html; charset=utf-8"
		assert res.header("Content-Length") == str(len(INDEX_GZ))

	def test_serves_plain_file_without_gzip(self, client) -> None:
		res = client().request("/")
		assert res.status == 200
		assert res.body == INDEX
		assert res.header("Content-Length") == "6"
		assert res.header("Content-Encoding") is None

	def test_gzip_must_be_accepted_explicitly(self, client) -> None:
		res = client().request("/style.css", headers={"Accept-Encoding": "br"})
		assert res.body == b"body{}"
		assert res.header("Content-Encoding") is None
		assert res.header("Content-Type") == "text/css; charset=utf-8"

	def test_registered_extension(self, client, site) -> None:
		res = client().request("/style.css", headers=GZIP)
		assert res.header("Content-Encoding") == "gzip"
		assert res.header("Content-Type") == "text/css; charset=utf-8"
		assert res.body == (site / "style.css.gz").read_bytes()

	def test_unregistered_extension_is_served_plain(self, client) -> None:
		res = client().request("/data.txt", headers=GZIP)
		assert res.status == 200
		assert res.body == b"plain text"
		assert res.header("Content-Encoding") is None
		assert res.header("Content-Type") == "text/plain"

	def test_extension_registered_at_startup(self, client, registry, site) -> None:
		registry.register(".txt")
		res = client().request("/data.txt", headers=GZIP)
		assert res.header("Content-Encoding") == "gzip"
		assert res.body == (site / "data.txt.gz").read_bytes()

	def test_missing_sibling_falls_back_to_plain(self, client, site) -> None:
		(site / "style.css.gz").unlink()
		res = client().request("/style.css", headers=GZIP)
		assert res.status == 200
		assert res.body == b"body{}"
		assert res.header("Content-Encoding") is None

	def test_sibling_directory_is_ignored(self, client, site) -> None:
		(site / "style.css.gz").unlink()
		(site / "style.css.gz").mkdir()
		res = client().request("/style.css", headers=GZIP)
		assert res.body == b"body{}"
		assert res.header("Content-Encoding") is None

	def test_explicit_gz_is_served_as_is(self, client, site) -> None:
		res = client().request("/archive.tar.gz", headers=GZIP)
		assert res.status == 200
		assert res.header("Content-Type") == "application/gzip"
		assert res.header("Content-Encoding") is None
		assert res.body == (site / "archive.tar.gz").read_bytes()

	def test_head_has_no_body(self, client) -> None:
		res = client().request("/", method="HEAD", headers=GZIP)
		assert res.status == 200
		assert res.body == b""
		assert res.header("Content-Length") == str(len(INDEX_GZ))
		assert res.header("Content-Encoding") == "gzip"


class TestRedirects:
	def test_index_is_canonicalized(self, client) -> None:
		res = client().request("/index.html")
		assert res.status == 301
		assert res.header("Location") == "/"
		assert res.body == b""

	def test_index_redirect_keeps_query(self, client) -> None:
		res = client().request("/dir/index.html?code=301&x")
		assert res.status == 301
		assert res.header("Location") == "/dir/?code=301&x"

	def test_index_redirect_without_file(self, client) -> None:
		res = client().request("/nowhere/index.html")
		assert res.status == 301
		assert res.header("Location") == "/nowhere/"

	def test_directory_redirect(self, client) -> None:
		res = client(directoryRedirect=True).request("/dir?code=301")
		assert res.status == 301
		assert res.header("Location") == "/dir/?code=301"

	def test_redirect_target_is_served(self, client) -> None:
		res = client(directoryRedirect=True).request("/dir/")
		assert res.status == 200
		assert res.body == INDEX

	def test_gzip_directory_index(self, client) -> None:
		bridge = client(directoryRedirect=True)
		res = bridge.request("/gz", headers=GZIP)
		assert res.status == 301
		assert res.header("Location") == "/gz/"
		res = bridge.request("/gz/", headers=GZIP)
		assert res.status == 200
		assert res.body == INDEX_GZ
		assert res.header("Content-Encoding") == "gzip"

	def test_no_redirect_without_flag(self, client) -> None:
		assert client().request("/dir").status == 404

	def test_redirect_precedes_empty_extension(self, client) -> None:
		res = client(directoryRedirect=True, ignoreEmptyExtension=True).request("/dir")
		assert res.status == 301

	def test_redirect_precedes_listing(self, client) -> None:
		res = client(directoryRedirect=True, directoryListing=True).request("/empty")
		assert res.status == 301
		assert res.header("Location") == "/empty/"


class TestForbidden:
	@pytest.mark.parametrize(
		"path",
		[
			"/../secret.html",
			"/dir/../../secret.html",
			"/%2e%2e/secret.html",
			"/dir/%2E%2E/index.css",
			"/a%00b.html",
			"/.env",
			"/_private.html",
			"/dir/.git",
		],
	)
	def test_forbidden(self, client, path: str) -> None:
		res = client(directoryListing=True).request(path, headers=GZIP)
		assert res.status == 403
		assert res.body == b""

	def test_hidden_directories_can_hold_an_index(self, client, site) -> None:
		(site / "_build").mkdir()
		(site / "_build" / "index.html").write_bytes(b"built")
		assert client().request("/_build/").body == b"built"


class TestNotHandled:
	def test_missing_file(self, client) -> None:
		assert client().request("/missing.css", headers=GZIP).status == 404

	def test_methods(self, site: Path) -> None:
		handler = static(site)
		for method in ("POST", "PUT", "DELETE", "OPTIONS"):
			assert handler(make_request("/", method=method)) is None

	def test_root_unset(self) -> None:
		assert StaticHandler(None)(make_request("/")) is None
		assert StaticHandler("")(make_request("/")) is None

	def test_extensionless(self, client) -> None:
		assert client().request("/notes").body == b"no extension"
		assert client(ignoreEmptyExtension=True).request("/notes").status == 404

	def test_directory_without_index(self, client) -> None:
		assert client().request("/empty/").status == 404


class TestListing:
	def test_empty_directory(self, client) -> None:
		res = client(directoryListing=True).request("/empty/")
		assert res.status == 200
		assert res.header("Content-Type") == LISTING_CONTENT_TYPE
		assert res.body == EMPTY_LISTING

	def test_directory_without_slash(self, client) -> None:
		res = client(directoryListing=True).request("/empty")
		assert res.status == 200
		assert res.body == EMPTY_LISTING

	def test_only_precompressed_index(self, client) -> None:
		res = client(directoryListing=True).request("/gz/")
		assert res.status == 200
		assert res.body == (
			b'<pre>\n<a href="../">..</a>\n'
			b'<a href="index.html.gz">index.html.gz</a>\n</pre>\n'
		)
		assert len(res.body) == 76

	def test_index_wins_over_listing(self, client) -> None:
		res = client(directoryListing=True).request("/gz/", headers=GZIP)
		assert res.body == INDEX_GZ
		assert res.header("Content-Encoding") == "gzip"


class TestFirstDesign:
	def test_handle_redirects_directories(self, site: Path) -> None:
		res = handle(make_request("/dir", query="a=1"), site)
		assert res is not None
		assert res.status == 301
		assert res.getHeader("Location") == "/dir/?a=1"

	def test_handle_does_not_list(self, site: Path) -> None:
		assert handle(make_request("/empty/"), site) is None


class TestHandles:
	"""Every file opened while negotiating is closed once the response is."""

	@pytest.fixture
	def opened(self, monkeypatch: pytest.MonkeyPatch) -> list:
		files: list = []

		def tracking(path, mode="r", *args, **kwargs):
			f = open(path, mode, *args, **kwargs)
			files.append(f)
			return f

		monkeypatch.setattr(negotiation, "open", tracking, raising=False)
		return files

	@pytest.mark.parametrize(
		"path,method,headers",
		[
			("/", "GET", GZIP),
			("/", "GET", {}),
			("/", "HEAD", GZIP),
			("/style.css", "GET", {"Range": "bytes=0-1"}),
			("/style.css", "GET", {"Range": "bytes=100-"}),
			("/style.css", "GET", {"If-Modified-Since": "Fri, 01 Jan 2100 00:00:00 GMT"}),
		],
	)
	def test_closed(self, client, opened: list, path, method, headers) -> None:
		client(directoryListing=True).request(path, method=method, headers=headers)
		assert opened
		assert all(_.closed for _ in opened)

	def test_closed_without_response(self, site: Path, opened: list) -> None:
		handler = static(site, directoryListing=True)
		res = handler(make_request("/", headers=GZIP))
		assert res is not None
		assert not opened[0].closed
		res.close()
		assert opened[0].closed


# EOF
