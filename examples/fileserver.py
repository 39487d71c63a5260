"""
Precompressed Static File Server Example

Serves the current directory, sending the `.gz` sibling of a file to clients
that accept gzip. Features shown:
- Registering extra extensions for precompressed lookup
- Directory listing and redirects
- Composing the static handler with a fallback handler

Usage:
    gzip -k index.html
    python fileserver.py

Test with:
    curl -i -H 'Accept-Encoding: gzip' http://localhost:8000/
    curl -i http://localhost:8000/
    curl -i http://localhost:8000/api/ping
"""

from gzstatic import HTTPRequest, HTTPResponse, register, run, static
from gzstatic.utils.logging import info

files = static(".", directoryListing=True, directoryRedirect=True)


def handler(request: HTTPRequest) -> HTTPResponse | None:
	"""Tries the files first, anything else falls through to a tiny API."""
	if (res := files(request)) is not None:
		return res
	elif request.path == "/api/ping":
		return request.respond("pong", "text/plain")
	else:
		return None


if __name__ == "__main__":
	register(".svg")
	register(".json")
	info("Serving files from current working directory")
	info("Test with: curl -i -H 'Accept-Encoding: gzip' http://localhost:8000/")
	run(handler)

# EOF
