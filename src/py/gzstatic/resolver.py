import os
import posixpath
from pathlib import Path
from typing import NamedTuple

INDEX: str = "index.html"
INDEX_EXTENSION: str = ".html"


class Forbidden(NamedTuple):
	"""The request path is rejected, with the reason why."""

	reason: str


class ResolvedTarget(NamedTuple):
	"""The outcome of resolving a request path under a root."""

	# Normalized, root-relative path, always starting with `/`
	path: str
	# Absolute local path, guaranteed to be under the root
	local: Path
	name: str
	extension: str
	isIndex: bool = False

	@property
	def directory(self) -> Path:
		"""The directory of an index request, or the local path itself."""
		return self.local.parent if self.isIndex else self.local


def extension(name: str) -> str:
	"""Returns the extension of the basename, including the leading `.`,
	or an empty string."""
	i = name.rfind(".")
	return name[i:] if i >= 0 else ""


def isHidden(name: str) -> bool:
	return name.startswith(".") or name.startswith("_")


def resolve(path: str, root: Path | str) -> ResolvedTarget | Forbidden:
	"""Maps a (percent-decoded) URL path to a local path under `root`, or
	rejects it."""
	if "\x00" in path:
		return Forbidden("NUL byte in path")
	for sep in (os.sep, os.altsep):
		if sep and sep != "/" and sep in path:
			return Forbidden("Native separator in path")
	if ".." in path.split("/"):
		return Forbidden("Parent segment in path")
	is_index: bool = path.endswith("/")
	normalized: str = posixpath.normpath("/" + path)
	# `normpath` keeps a leading `//`
	normalized = "/" + normalized.lstrip("/")
	if is_index:
		normalized = posixpath.join(normalized, INDEX)
	name: str = posixpath.basename(normalized)
	if isHidden(name):
		return Forbidden("Hidden name")
	base: Path = Path(root).absolute()
	local: Path = base.joinpath(*(_ for _ in normalized.split("/") if _))
	if local != base and base not in local.parents:
		return Forbidden("Path escapes root")
	return ResolvedTarget(
		path=normalized,
		local=local,
		name=name,
		extension=INDEX_EXTENSION if is_index else extension(name),
		isIndex=is_index,
	)


# EOF
