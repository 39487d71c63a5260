from typing import Iterator
from urllib.parse import unquote

from .model import (
	HTTPAtom,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	headername,
)

EOL: bytes = b"\r\n"

# Lines longer than this are considered malformed
MAX_LINE: int = 65_536

# Requests with more header lines than this are considered malformed
MAX_HEADERS: int = 100


class LineParser:
	__slots__ = ["buffer", "line", "offset"]

	def __init__(self) -> None:
		self.buffer: bytearray = bytearray()
		self.line: bytes | None = None
		self.offset: int = 0

	def reset(self) -> "LineParser":
		self.buffer.clear()
		self.line = None
		self.offset = 0
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Returns the matching line and how many bytes were read in chunk from start. When line is None,
		then the whole chunk has been processed."""
		pos = len(self.buffer)
		self.buffer += chunk[start:]
		end = self.buffer.find(EOL, self.offset)
		if end == -1:
			self.offset = max(0, len(self.buffer) - len(EOL) + 1)
			return None, len(chunk) - start
		else:
			self.line = bytes(self.buffer[:end])
			self.buffer.clear()
			self.offset = 0
			return self.line, (end - pos) + len(EOL)

	@property
	def overflow(self) -> bool:
		return len(self.buffer) > MAX_LINE


def parseRequestLine(line: bytes) -> HTTPRequestLine | None:
	"""Parses `GET /path?query HTTP/1.1`, percent-decoding the path while
	keeping the query verbatim."""
	try:
		ln = line.decode("ascii")
	except UnicodeDecodeError:
		return None
	i = ln.find(" ")
	j = ln.rfind(" ")
	if i <= 0 or j <= i:
		return None
	target: list[str] = ln[i + 1 : j].split("?", 1)
	return HTTPRequestLine(
		ln[0:i].upper(),
		unquote(target[0], errors="surrogateescape"),
		target[1] if len(target) > 1 else "",
		ln[j + 1 :],
	)


class HTTPParser:
	"""A stateful, incremental HTTP request parser. Request bodies are
	consumed and dropped, as nothing here needs them."""

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.requestLine: HTTPRequestLine | None = None
		self.headers: dict[str, str] = {}
		self.headerCount: int = 0
		self.contentType: str | None = None
		self.contentLength: int | None = None
		# Bytes of body left to skip
		self.skipping: int = 0

	def reset(self) -> "HTTPParser":
		self.line.reset()
		self.requestLine = None
		self.headers = {}
		self.headerCount = 0
		self.contentType = None
		self.contentLength = None
		self.skipping = 0
		return self

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		size: int = len(chunk)
		offset: int = 0
		while offset < size:
			if self.skipping:
				read = min(self.skipping, size - offset)
				self.skipping -= read
				offset += read
				if not self.skipping:
					yield self.flush()
				continue
			ln, read = self.line.feed(chunk, offset)
			offset += read
			if ln is None:
				if self.line.overflow:
					self.reset()
					yield HTTPProcessingStatus.BadFormat
				continue
			elif self.requestLine is None:
				# Empty lines between pipelined requests are tolerated
				if not ln:
					continue
				line = parseRequestLine(ln)
				if line is None:
					self.reset()
					yield HTTPProcessingStatus.BadFormat
				else:
					self.requestLine = line
					yield line
			elif ln:
				self.headerCount += 1
				if self.headerCount > MAX_HEADERS:
					self.reset()
					yield HTTPProcessingStatus.BadFormat
				else:
					self.parseHeader(ln)
			else:
				yield HTTPHeaders(self.headers, self.contentType, self.contentLength)
				if self.contentLength:
					self.skipping = self.contentLength
					yield HTTPProcessingStatus.Body
				else:
					yield self.flush()

	def parseHeader(self, line: bytes) -> str | None:
		# Headers are expected to be in ASCII, we're lenient with Latin-1
		ln: str = line.decode("latin-1")
		i = ln.find(":")
		if i == -1:
			return None
		h = ln[:i].strip()
		v = ln[i + 1 :].strip()
		key = h.lower()
		if key == "content-length":
			try:
				self.contentLength = max(0, int(v))
			except ValueError:
				self.contentLength = None
		elif key == "content-type":
			self.contentType = v
		name: str = headername(h)
		self.headers[name] = v
		return name

	def flush(self) -> HTTPRequest:
		line = self.requestLine
		assert line is not None, "Request line must be parsed before flushing"
		res = HTTPRequest(
			method=line.method,
			path=line.path,
			query=line.query,
			headers=HTTPHeaders(self.headers, self.contentType, self.contentLength),
			protocol=line.protocol,
		)
		self.reset()
		return res


# EOF
