from typing import NamedTuple

from .http.model import HTTPProcessingStatus, HTTPRequest, HTTPResponse
from .http.parser import HTTPParser
from .server import THandler, hasBody


class BridgedResponse(NamedTuple):
	"""A response as seen by a client, with its body fully read."""

	status: int
	headers: dict[str, str]
	body: bytes

	def header(self, name: str) -> str | None:
		return self.headers.get(name.lower())


class Bridge:
	"""Runs a handler in-process, feeding it raw HTTP requests. This goes
	through the same parsing and response handling as the server, without
	the sockets."""

	def __init__(self, handler: THandler):
		self.handler: THandler = handler

	def process(self, request: HTTPRequest) -> BridgedResponse:
		res: HTTPResponse | None = self.handler(request)
		if res is None:
			res = request.notFound()
		try:
			body: bytes = res.read() if hasBody(request, res) else b""
		finally:
			res.close()
		return BridgedResponse(
			res.status,
			{k.lower(): v for k, v in res.headers.headers.items()},
			body,
		)

	def requestBytes(self, payload: bytes) -> list[BridgedResponse]:
		"""Processes all the requests in the payload, in order."""
		res: list[BridgedResponse] = []
		for atom in HTTPParser().feed(payload):
			if atom is HTTPProcessingStatus.BadFormat:
				raise ValueError(f"Malformed request: {payload!r}")
			elif isinstance(atom, HTTPRequest):
				res.append(self.process(atom))
		return res

	def request(
		self,
		path: str,
		*,
		method: str = "GET",
		headers: dict[str, str] | None = None,
	) -> BridgedResponse:
		"""Sends a single request, `path` being the raw (encoded) request
		target, including the query."""
		lines: list[str] = [f"{method} {path} HTTP/1.1", "Host: localhost"]
		lines += [f"{k}: {v}" for k, v in (headers or {}).items()]
		responses = self.requestBytes(
			("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")
		)
		if len(responses) != 1:
			raise ValueError(f"Expected one response, got {len(responses)}")
		return responses[0]


# EOF
