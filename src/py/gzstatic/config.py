from os import getenv


def flag(name: str, default: bool = False) -> bool:
	value = getenv(name)
	return default if value is None else value.strip().lower() in ("1", "yes", "true", "on")


PORT: int = int(getenv("PORT", 8000))

# Served from a development machine, the files should be reachable from everywhere
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

ROOT: str = getenv("GZSTATIC_ROOT", ".")

LOG_REQUESTS: bool = flag("GZSTATIC_LOG_REQUESTS", True)

LISTING: bool = flag("GZSTATIC_LISTING")
REDIRECT: bool = flag("GZSTATIC_REDIRECT", True)
IGNORE_EMPTY_EXT: bool = flag("GZSTATIC_IGNORE_EMPTY_EXT")

# Extra extensions eligible for precompressed siblings, eg. `.svg,.json`
GZIP_TYPES: list[str] = [
	_.strip() for _ in getenv("GZSTATIC_GZIP_TYPES", "").split(",") if _.strip()
]

# EOF
