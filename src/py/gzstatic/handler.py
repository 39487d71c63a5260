from pathlib import Path

from .http.content import serveContent
from .http.model import HTTPRequest, HTTPResponse
from .listing import LISTING_CONTENT_TYPE, listing
from .negotiation import (
	Found,
	HandlerFlags,
	Listing,
	Negotiator,
	NotFound,
	TNegotiation,
)
from .redirect import Redirect
from .registry import REGISTRY, EncodingRegistry
from .resolver import Forbidden
from .utils.logging import LogLevel, debug, logged, warning


class StaticHandler:
	"""Serves the files under `root`, preferring precompressed `.gz` siblings
	when the client accepts gzip. Calling the handler with a request returns
	a response, or `None` when the request is not handled (the host then
	decides what to answer, typically a 404)."""

	def __init__(
		self,
		root: Path | str | None,
		flags: HandlerFlags = HandlerFlags(),
		registry: EncodingRegistry = REGISTRY,
	):
		self.negotiator: Negotiator = Negotiator(root, flags, registry)

	@property
	def root(self) -> Path | None:
		return self.negotiator.root

	@property
	def flags(self) -> HandlerFlags:
		return self.negotiator.flags

	def __call__(self, request: HTTPRequest) -> HTTPResponse | None:
		return self.respond(request, self.negotiator.negotiate(request))

	def respond(
		self, request: HTTPRequest, result: TNegotiation
	) -> HTTPResponse | None:
		if isinstance(result, Redirect):
			return request.redirect(result.location, permanent=True)
		elif isinstance(result, Forbidden):
			warning("Forbidden path", Path=request.path, Reason=result.reason)
			return request.forbidden()
		elif isinstance(result, NotFound):
			logged(LogLevel.Debug) and debug(
				"Not handled", Path=request.path, Reason=result.reason
			)
			return None
		elif isinstance(result, Listing):
			try:
				body = listing(result.entries)
			finally:
				result.close()
			return request.respondHTML(body, contentType=LISTING_CONTENT_TYPE)
		elif isinstance(result, Found):
			headers: dict[str, str] = {}
			if result.encoding:
				headers["Content-Encoding"] = result.encoding
			if result.contentType:
				headers["Content-Type"] = result.contentType
			try:
				return serveContent(
					request,
					result.target.name,
					result.modified,
					result.file,
					result.size,
					headers,
				)
			except BaseException:
				result.file.close()
				raise
		else:
			raise ValueError(f"Unsupported negotiation result: {result}")


def static(
	root: Path | str,
	*,
	ignoreEmptyExtension: bool = False,
	directoryListing: bool = False,
	directoryRedirect: bool = False,
	registry: EncodingRegistry = REGISTRY,
) -> StaticHandler:
	"""Creates a handler serving `root` with the given behaviour."""
	return StaticHandler(
		root,
		HandlerFlags(
			ignoreEmptyExtension=ignoreEmptyExtension,
			directoryListing=directoryListing,
			directoryRedirect=directoryRedirect,
		),
		registry,
	)


def handle(request: HTTPRequest, root: Path | str | None) -> HTTPResponse | None:
	"""Handles a single request, redirecting directories to their trailing
	slash form and never listing them."""
	return StaticHandler(root, HandlerFlags(directoryRedirect=True))(request)


# EOF
