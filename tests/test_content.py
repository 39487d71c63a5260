import io

import pytest

from gzstatic.http.content import parseRange, parseTimestamp, serveContent, timestamp

from .conftest import make_request

DATA: bytes = b"0123456789"
# Sun, 09 Sep 2001 01:46:40 GMT
MODIFIED: float = 1_000_000_000.0


def serve(headers: dict[str, str] | None = None, method: str = "GET", **kwargs):
	file = io.BytesIO(DATA)
	res = serveContent(
		make_request("/data.bin", method=method, headers=headers),
		kwargs.pop("name", "data.bin"),
		kwargs.pop("modified", MODIFIED),
		file,
		len(DATA),
		kwargs.pop("extra", None),
	)
	return res, file


def test_timestamp() -> None:
	assert timestamp(MODIFIED) == "Sun, 09 Sep 2001 01:46:40 GMT"
	assert timestamp(0) == "Thu, 01 Jan 1970 00:00:00 GMT"


def test_parse_timestamp() -> None:
	assert parseTimestamp("Sun, 09 Sep 2001 01:46:40 GMT") == int(MODIFIED)
	assert parseTimestamp(timestamp(1_234_567_890)) == 1_234_567_890
	for text in (None, "", "yesterday", "Sun, 09 Sep 2001 01:46 GMT", "Sun, 9 Foo 2001 01:46:40 GMT"):
		assert parseTimestamp(text) is None


@pytest.mark.parametrize(
	"text,expected",
	[
		("bytes=0-4", (0, 4)),
		("bytes=5-", (5, 9)),
		("bytes=-3", (7, 9)),
		("bytes=-30", (0, 9)),
		("bytes=8-100", (8, 9)),
		("bytes=10-", False),
		("bytes=20-", False),
		("bytes=20-5", None),
		("bytes=-0", False),
		("bytes=4-2", None),
		("bytes=0-1,4-5", None),
		("items=0-1", None),
		("bytes=a-b", None),
		(None, None),
	],
)
def test_parse_range(text: str | None, expected) -> None:
	assert parseRange(text, len(DATA)) == expected


def test_full_content() -> None:
	res, file = serve()
	assert res.status == 200
	assert res.read() == DATA
	assert res.getHeader("Content-Length") == "10"
	assert res.getHeader("Content-Type") == "application/octet-stream"
	assert res.getHeader("Last-Modified") == "Sun, 09 Sep 2001 01:46:40 GMT"
	assert res.getHeader("Accept-Ranges") == "bytes"
	assert not file.closed
	res.close()
	assert file.closed


def test_content_type() -> None:
	res, _ = serve(name="index.html")
	assert res.getHeader("Content-Type") == "text/html"
	res, _ = serve(extra={"content-type": "text/plain"})
	assert res.getHeader("Content-Type") == "text/plain"


def test_partial_content() -> None:
	res, _ = serve({"Range": "bytes=2-5"})
	assert res.status == 206
	assert res.read() == b"2345"
	assert res.getHeader("Content-Range") == "bytes 2-5/10"
	assert res.getHeader("Content-Length") == "4"


def test_suffix_range() -> None:
	res, _ = serve({"Range": "bytes=-2"})
	assert res.status == 206
	assert res.read() == b"89"


def test_unsatisfiable_range() -> None:
	res, file = serve({"Range": "bytes=20-"})
	assert res.status == 416
	assert res.getHeader("Content-Range") == "bytes */10"
	assert res.read() == b""
	assert file.closed


def test_not_modified() -> None:
	res, file = serve({"If-Modified-Since": "Sun, 09 Sep 2001 01:46:40 GMT"})
	assert res.status == 304
	assert res.getHeader("Content-Length") is None
	assert res.getHeader("Content-Type") is None
	assert res.getHeader("Last-Modified") == "Sun, 09 Sep 2001 01:46:40 GMT"
	assert file.closed


def test_modified() -> None:
	res, _ = serve({"If-Modified-Since": "Sat, 08 Sep 2001 01:46:40 GMT"})
	assert res.status == 200
	res, _ = serve({"If-Modified-Since": "not a date"})
	assert res.status == 200


def test_head() -> None:
	res, file = serve({"Range": "bytes=0-1"}, method="HEAD")
	assert res.status == 206
	assert res.body is None
	assert res.getHeader("Content-Length") == "2"
	assert file.closed


# EOF
