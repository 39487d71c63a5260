"""Shared fixtures: a small site with plain and precompressed files."""

import gzip
import io
from pathlib import Path

import pytest

from gzstatic.bridge import Bridge
from gzstatic.handler import static
from gzstatic.http.model import HTTPRequest
from gzstatic.registry import EncodingRegistry

INDEX: bytes = b"static"


def compressed(data: bytes, name: str) -> bytes:
	"""Compresses like the `gzip` command line does, keeping the name."""
	buffer = io.BytesIO()
	with gzip.GzipFile(filename=name, mode="wb", fileobj=buffer, mtime=0) as f:
		f.write(data)
	return buffer.getvalue()


INDEX_GZ: bytes = compressed(INDEX, "index.html")


def make_request(
	path: str = "/",
	*,
	method: str = "GET",
	query: str = "",
	headers: dict[str, str] | None = None,
) -> HTTPRequest:
	return HTTPRequest(method=method, path=path, query=query, headers=headers)


@pytest.fixture
def site(tmp_path: Path) -> Path:
	"""Creates the following tree:

	index.html, index.html.gz
	dir/index.html
	gz/index.html.gz
	empty/
	style.css, style.css.gz
	data.txt, data.txt.gz
	notes
	archive.tar.gz
	.env, _private.html
	"""
	root = tmp_path / "site"
	root.mkdir()
	(root / "index.html").write_bytes(INDEX)
	(root / "index.html.gz").write_bytes(INDEX_GZ)
	(root / "dir").mkdir()
	(root / "dir" / "index.html").write_bytes(INDEX)
	(root / "gz").mkdir()
	(root / "gz" / "index.html.gz").write_bytes(INDEX_GZ)
	(root / "empty").mkdir()
	(root / "style.css").write_bytes(b"body{}")
	(root / "style.css.gz").write_bytes(compressed(b"body{}", "style.css"))
	(root / "data.txt").write_bytes(b"plain text")
	(root / "data.txt.gz").write_bytes(compressed(b"plain text", "data.txt"))
	(root / "notes").write_bytes(b"no extension")
	(root / "archive.tar.gz").write_bytes(compressed(b"archive", "archive.tar"))
	(root / ".env").write_bytes(b"SECRET=1")
	(root / "_private.html").write_bytes(b"private")
	(tmp_path / "secret.html").write_bytes(b"outside of the root")
	return root


@pytest.fixture
def registry() -> EncodingRegistry:
	"""A registry with the default types, isolated from the process-wide one."""
	return EncodingRegistry()


@pytest.fixture
def client(site: Path, registry: EncodingRegistry):
	"""Returns a factory of bridges serving the site with the given flags."""

	def factory(**flags: bool) -> Bridge:
		return Bridge(static(site, registry=registry, **flags))

	return factory


# EOF
