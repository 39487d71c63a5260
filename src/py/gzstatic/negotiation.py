"""Decides, for a request, which file (if any) should be served and how.

Each step returns an explicit result: the caller gets either a file to
serve (`Found`), a directory to list (`Listing`), a `Redirect`, a
`Forbidden` rejection or `NotFound`, in which case nothing is written and the
host answers as it sees fit."""

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, NamedTuple, TypeAlias

from .http.model import HTTPRequest
from .redirect import Redirect, directoryRedirect, indexRedirect
from .registry import GZIP_EXTENSION, REGISTRY, EncodingRegistry
from .resolver import Forbidden, ResolvedTarget, resolve
from .utils.logging import LogLevel, debug, logged

GZIP: str = "gzip"

METHODS: frozenset[str] = frozenset(("GET", "HEAD"))


@dataclass(slots=True, frozen=True)
class HandlerFlags:
	"""Behaviour toggles, fixed for a handler.

	When both `directoryRedirect` and `directoryListing` are set, a directory
	requested without a trailing slash is redirected rather than listed. The
	redirect also takes precedence over `ignoreEmptyExtension`."""

	# Extensionless paths are never served
	ignoreEmptyExtension: bool = False
	# Directories (without an index) are listed
	directoryListing: bool = False
	# `/dir` is redirected to `/dir/`
	directoryRedirect: bool = False


class CandidateOpen(NamedTuple):
	"""An opened file or directory, along with its metadata. The handle is
	either a binary file or a directory scanner, both closeable."""

	handle: Any
	size: int
	modified: float
	isDirectory: bool
	encoding: str | None = None

	def close(self) -> None:
		self.handle.close()


class Found(NamedTuple):
	target: ResolvedTarget
	file: BinaryIO
	size: int
	modified: float
	encoding: str | None
	contentType: str | None


class Listing(NamedTuple):
	target: ResolvedTarget
	# As returned by `os.scandir`, to be closed by the caller
	entries: Any

	def close(self) -> None:
		self.entries.close()


class NotFound(NamedTuple):
	reason: str = "Not found"


TNegotiation: TypeAlias = Found | Listing | Redirect | Forbidden | NotFound


def acceptsGzip(request: HTTPRequest) -> bool:
	return GZIP in (request.header("Accept-Encoding") or "")


def probe(path: Path | str, encoding: str | None = None) -> CandidateOpen | None:
	"""Opens the file or directory at the given path, returning `None` when
	it can't be opened. Failures are final, there is no retry."""
	try:
		st = os.stat(path)
	except (OSError, ValueError):
		return None
	if stat.S_ISDIR(st.st_mode):
		try:
			return CandidateOpen(
				os.scandir(path), 0, st.st_mtime, True, encoding=encoding
			)
		except OSError:
			return None
	try:
		f: BinaryIO = open(path, "rb")
	except OSError:
		return None
	try:
		st = os.fstat(f.fileno())
	except OSError:
		f.close()
		return None
	return CandidateOpen(
		f, st.st_size, st.st_mtime, stat.S_ISDIR(st.st_mode), encoding=encoding
	)


class Negotiator:
	def __init__(
		self,
		root: Path | str | None,
		flags: HandlerFlags = HandlerFlags(),
		registry: EncodingRegistry = REGISTRY,
	):
		self.root: Path | None = Path(root).absolute() if root else None
		self.flags: HandlerFlags = flags
		self.registry: EncodingRegistry = registry

	def negotiate(self, request: HTTPRequest) -> TNegotiation:
		flags = self.flags
		if self.root is None or request.method not in METHODS:
			return NotFound("Method not supported")
		# The index canonicalization comes first, regardless of the filesystem
		if redirect := indexRedirect(request.path, request.query):
			return redirect
		target = resolve(request.path, self.root)
		if isinstance(target, Forbidden):
			return target
		if (
			flags.directoryRedirect
			and not target.isIndex
			and os.path.isdir(target.local)
			and (redirect := directoryRedirect(request.path, request.query))
		):
			return redirect
		if not target.extension and flags.ignoreEmptyExtension:
			return NotFound("Path has no extension")

		candidate: CandidateOpen | None = None
		# The precompressed sibling always goes first, when eligible
		if (
			target.extension != GZIP_EXTENSION
			and self.registry.isGzipEligible(target.extension)
			and acceptsGzip(request)
		):
			candidate = probe(f"{target.local}{GZIP_EXTENSION}", encoding=GZIP)
			if candidate and candidate.isDirectory:
				candidate.close()
				candidate = None
		if candidate is None:
			candidate = probe(target.local)
		if candidate is None and target.isIndex and flags.directoryListing:
			candidate = probe(target.directory)
		if candidate is None:
			return NotFound()
		logged(LogLevel.Debug) and debug(
			"Negotiated",
			Path=target.path,
			Directory=candidate.isDirectory,
			Encoding=candidate.encoding,
		)
		return self.select(request, target, candidate)

	def select(
		self, request: HTTPRequest, target: ResolvedTarget, candidate: CandidateOpen
	) -> TNegotiation:
		"""Turns an opened candidate into a result, taking ownership of it:
		the handle is either passed on in the result or closed."""
		if candidate.isDirectory:
			if self.flags.directoryRedirect and (
				redirect := directoryRedirect(request.path, request.query)
			):
				candidate.close()
				return redirect
			elif self.flags.directoryListing:
				return Listing(target, candidate.handle)
			else:
				candidate.close()
				return NotFound("Directory listing is disabled")
		return Found(
			target=target,
			file=candidate.handle,
			size=candidate.size,
			modified=candidate.modified,
			encoding=candidate.encoding,
			contentType=(
				self.registry.get(target.extension)
				if candidate.encoding == GZIP
				else self.registry.contentType(target.extension)
			),
		)


# EOF
