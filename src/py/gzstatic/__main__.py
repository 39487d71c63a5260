import argparse
import sys

from . import config
from .handler import static
from .registry import RegistryError, register
from .server import run
from .utils.logging import error, info


def parser() -> argparse.ArgumentParser:
	res = argparse.ArgumentParser(
		prog="gzstatic",
		description="Serves static files, using precompressed .gz siblings when available",
	)
	res.add_argument("root", nargs="?", default=config.ROOT, help="Directory to serve")
	res.add_argument("--host", default=config.HOST)
	res.add_argument("--port", type=int, default=config.PORT)
	res.add_argument(
		"--listing",
		action=argparse.BooleanOptionalAction,
		default=config.LISTING,
		help="List directories without an index",
	)
	res.add_argument(
		"--redirect",
		action=argparse.BooleanOptionalAction,
		default=config.REDIRECT,
		help="Redirect directories to their trailing slash form",
	)
	res.add_argument(
		"--ignore-empty-ext",
		action=argparse.BooleanOptionalAction,
		default=config.IGNORE_EMPTY_EXT,
		help="Never serve paths without an extension",
	)
	res.add_argument(
		"--gzip",
		metavar="EXT",
		action="append",
		default=list(config.GZIP_TYPES),
		help="Extension (optionally EXT=MIME) to look up precompressed siblings for",
	)
	return res


def main(args: list[str] | None = None) -> int:
	options = parser().parse_args(args)
	for item in options.gzip:
		ext, _, mime = item.partition("=")
		try:
			register(ext, mime or None)
		except RegistryError as e:
			error(str(e), "REGISTRY", Extension=e.extension)
			return 1
	info("Serving static files", Root=options.root)
	run(
		static(
			options.root,
			ignoreEmptyExtension=options.ignore_empty_ext,
			directoryListing=options.listing,
			directoryRedirect=options.redirect,
		),
		host=options.host,
		port=options.port,
	)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
