"""Keeps track of the extensions for which precompressed (`.gz`) siblings
are looked up, along with the content type to serve them with."""

import mimetypes

from .utils.logging import info

GZIP_EXTENSION: str = ".gz"
GZIP_CONTENT_TYPE: str = "application/gzip"

DEFAULT_GZIP_TYPES: dict[str, str] = {
	".css": "text/css; charset=utf-8",
	".html": "text/html; charset=utf-8",
	".js": "application/x-javascript; charset=utf-8",
}

mimetypes.init()
mimetypes.add_type(GZIP_CONTENT_TYPE, GZIP_EXTENSION)


class RegistryError(ValueError):
	"""Raised when an extension can't be registered."""

	def __init__(self, message: str, extension: str):
		super().__init__(message)
		self.extension: str = extension


class UnknownExtension(RegistryError):
	"""The content type of the extension is unknown and no override was given."""


def normalizeExtension(extension: str) -> str:
	ext = extension.strip().lower()
	return ext if not ext or ext.startswith(".") else f".{ext}"


class EncodingRegistry:
	"""Maps extensions (like `.css`) to the content type of their
	precompressed siblings. Registered extensions are *gzip-eligible*.

	Registration replaces the mapping with an updated copy, so that requests
	being served concurrently always see a consistent snapshot."""

	def __init__(self, types: dict[str, str] | None = None):
		self.types: dict[str, str] = dict(
			DEFAULT_GZIP_TYPES if types is None else types
		)

	def register(self, extension: str, mimeType: str | None = None) -> str:
		"""Registers the given extension, using the system MIME database
		unless `mimeType` is given. Returns the registered MIME type."""
		ext = normalizeExtension(extension)
		if not ext or ext == ".":
			raise RegistryError("Extension is empty", extension)
		elif ext.count(".") > 1:
			# Requests only ever match the last suffix of a name
			raise RegistryError(
				f"Extension '{ext}' has more than one suffix", extension
			)
		elif ext == GZIP_EXTENSION:
			raise RegistryError(
				f"Extension '{GZIP_EXTENSION}' is an encoding, not a content type",
				extension,
			)
		content_type = mimeType or mimetypes.types_map.get(ext)
		if not content_type:
			raise UnknownExtension(
				f"No MIME type known for extension '{ext}', give one explicitly",
				extension,
			)
		self.types = self.types | {ext: content_type}
		info("Registered precompressed type", Extension=ext, Type=content_type)
		return content_type

	def get(self, extension: str) -> str | None:
		return self.types.get(extension.lower())

	def isGzipEligible(self, extension: str) -> bool:
		return extension.lower() in self.types

	def contentType(self, extension: str) -> str | None:
		"""Returns the content type to serve a file with the given extension,
		which is the registered one, or the one from the MIME database."""
		ext = extension.lower()
		if not ext:
			return None
		elif ext == GZIP_EXTENSION:
			return GZIP_CONTENT_TYPE
		else:
			return self.types.get(ext) or mimetypes.types_map.get(ext)

	def __contains__(self, extension: str) -> bool:
		return self.isGzipEligible(extension)


# The process-wide registry
REGISTRY: EncodingRegistry = EncodingRegistry()


def register(extension: str, mimeType: str | None = None) -> str:
	"""Registers an extension as gzip-eligible in the process-wide registry."""
	return REGISTRY.register(extension, mimeType)


# EOF
