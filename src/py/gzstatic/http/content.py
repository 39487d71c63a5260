import mimetypes
import time
from calendar import timegm
from typing import BinaryIO, Literal

from ..utils.logging import LogLevel, debug, logged
from .model import HTTPBodyFile, HTTPRequest, HTTPResponse, headername

# --
# == Content serving
#
# Writes a file as a response, taking care of the caching headers and of
# (single) byte ranges. This is the only place where conditional and partial
# requests are handled.
#
# SEE: <http://www.w3.org/Protocols/rfc2616/rfc2616-sec14.html>
# SEE: <http://tools.ietf.org/html/rfc2616#section-10.2.7>

DAYS: list[str] = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTHS: list[str] = [
	"Jan",
	"Feb",
	"Mar",
	"Apr",
	"May",
	"Jun",
	"Jul",
	"Aug",
	"Sep",
	"Oct",
	"Nov",
	"Dec",
]

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

TRange = tuple[int, int] | Literal[False] | None


def timestamp(value: float) -> str:
	"""Formats the given time in HTTP cache format."""
	# NOTE: We have to do it here as we don't want to depend on the locale
	# FORMAT: Sat, 29 Oct 1994 19:43:31 GMT
	t = time.gmtime(value)
	return f"{DAYS[t.tm_wday]}, {t.tm_mday:02d} {MONTHS[t.tm_mon - 1]} {t.tm_year} {t.tm_hour:02d}:{t.tm_min:02d}:{t.tm_sec:02d} GMT"


def parseTimestamp(text: str | None) -> int | None:
	"""Parses an HTTP date as produced by `timestamp`, returning seconds since
	the epoch, or `None` when the date is malformed."""
	if not text:
		return None
	parts = text.strip().split()
	if len(parts) != 6 or parts[5] != "GMT" or parts[2] not in MONTHS:
		return None
	try:
		hour, minute, second = (int(_) for _ in parts[4].split(":"))
		return timegm(
			(
				int(parts[3]),
				MONTHS.index(parts[2]) + 1,
				int(parts[1]),
				hour,
				minute,
				second,
				0,
				0,
				0,
			)
		)
	except ValueError:
		return None


def parseRange(text: str | None, size: int) -> TRange:
	"""Parses a `Range` header against a content of `size` bytes. Returns an
	inclusive `(start, end)` pair, `False` when the range can't be satisfied
	and `None` when the range should be ignored (absent, malformed or
	multiple)."""
	if not text or size <= 0:
		return None
	text = text.strip()
	if not text.startswith("bytes="):
		return None
	ranges = text[6:].strip()
	if "," in ranges or "-" not in ranges:
		return None
	first, last = (_.strip() for _ in ranges.split("-", 1))
	try:
		if not first:
			# Suffix range, the last N bytes
			count = int(last)
			if count <= 0:
				return False
			return max(0, size - count), size - 1
		start = int(first)
		end = int(last) if last else size - 1
	except ValueError:
		return None
	# An open-ended range past the end can't be satisfied, an inverted one
	# is malformed
	if start < 0 or (last and end < start):
		return None
	elif start >= size:
		return False
	else:
		return start, min(end, size - 1)


def serveContent(
	request: HTTPRequest,
	name: str,
	modified: float,
	file: BinaryIO,
	size: int,
	headers: dict[str, str] | None = None,
) -> HTTPResponse:
	"""Creates a response for the given open `file`. The response owns the
	file from then on, and closes it once closed itself."""
	res_headers: dict[str, str] = {
		headername(k): v for k, v in (headers or {}).items()
	}
	if "Content-Type" not in res_headers:
		res_headers["Content-Type"] = (
			mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE
		)
	if modified > 0:
		res_headers["Last-Modified"] = timestamp(modified)
	res_headers["Accept-Ranges"] = "bytes"

	# Unchanged since the client last saw it, we can skip the body entirely
	since = parseTimestamp(request.header("If-Modified-Since"))
	if since is not None and modified > 0 and int(modified) <= since:
		file.close()
		del res_headers["Content-Type"]
		return request.respond(status=304, headers=res_headers)

	rng = parseRange(request.header("Range"), size)
	if rng is False:
		file.close()
		res_headers["Content-Range"] = f"bytes */{size}"
		return request.respond(status=416, headers=res_headers)

	status: int = 200
	start: int = 0
	length: int = size
	if rng:
		start, end = rng
		length = end - start + 1
		status = 206
		res_headers["Content-Range"] = f"bytes {start}-{end}/{size}"
	logged(LogLevel.Debug) and debug(
		"Serving content", Name=name, Status=status, Start=start, Length=length
	)

	if request.method == "HEAD":
		file.close()
		return request.respond(
			status=status, contentLength=length, headers=res_headers
		)
	else:
		return request.respond(
			HTTPBodyFile(file, start, length), status=status, headers=res_headers
		).onClose(lambda _: file.close())


# EOF
