from typing import NamedTuple
from urllib.parse import quote

INDEX_SUFFIX: str = "/index.html"

# Characters kept as is when re-encoding a path
SAFE: str = "/!$&'()*+,;=:@~"


class Redirect(NamedTuple):
	"""A permanent redirect to `location`."""

	location: str
	status: int = 301


def location(path: str, query: str = "") -> str:
	"""Returns the redirect location, re-encoding the (decoded) path and
	preserving the query verbatim."""
	# A leading `//` would make the location protocol-relative
	if path.startswith("//"):
		path = "/" + path.lstrip("/")
	url = quote(path, safe=SAFE, errors="surrogateescape")
	return f"{url}?{query}" if query else url


def indexRedirect(path: str, query: str = "") -> Redirect | None:
	"""Canonicalizes `…/index.html` to `…/`, before touching the filesystem."""
	if path.endswith(INDEX_SUFFIX):
		return Redirect(location(path[: -len(INDEX_SUFFIX)] + "/", query))
	return None


def directoryRedirect(path: str, query: str = "") -> Redirect | None:
	"""Canonicalizes a directory path to its trailing slash form. The caller
	is responsible for checking that the path is a directory."""
	if not path.endswith("/"):
		return Redirect(location(path + "/", query))
	return None


# EOF
