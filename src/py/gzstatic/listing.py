import os
from typing import Iterator
from urllib.parse import quote

from .utils.htmpl import H, Node, html
from .utils.logging import warning

# How many entries are read from the directory at once
LISTING_BATCH: int = 100

LISTING_CONTENT_TYPE: str = "text/html; charset=utf-8"

PARENT: str = ".."
PARENT_HREF: str = "../"


def batches(
	entries: Iterator[os.DirEntry[str]], size: int = LISTING_BATCH
) -> Iterator[list[os.DirEntry[str]]]:
	"""Reads the directory entries in batches, until the directory is exhausted
	or can't be read anymore. Entries read before a failure are kept."""
	batch: list[os.DirEntry[str]] = []
	while True:
		try:
			entry = next(entries, None)
		except OSError as e:
			warning("Directory enumeration failed", Error=str(e))
			break
		if entry is None:
			break
		batch.append(entry)
		if len(batch) == size:
			yield batch
			batch = []
	if batch:
		yield batch


def href(name: str) -> str:
	url = quote(name, safe="!$&'()*+,;=:@~", errors="surrogateescape")
	# A colon in the first segment would be read as a scheme
	return f"./{url}" if ":" in url else url


def displayName(name: str) -> str:
	return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def render(directories: list[str], files: list[str]) -> str:
	"""Renders the listing as a preformatted block, with the parent link
	first, then the directories and then the files."""
	items: list[Node | str] = ["\n", H.a(PARENT, href=PARENT_HREF), "\n"]
	for name in directories:
		items += [H.a(f"{displayName(name)}/", href=f"{href(name)}/"), "\n"]
	for name in files:
		items += [H.a(displayName(name), href=href(name)), "\n"]
	return "".join(html(H.pre(items))) + "\n"


def listing(entries: Iterator[os.DirEntry[str]]) -> str:
	"""Lists the immediate children of an open directory (as returned by
	`os.scandir`). Entries are kept in the order the filesystem gives them:
	there is no sorting."""
	directories: list[str] = []
	files: list[str] = []
	for batch in batches(entries):
		for entry in batch:
			try:
				if entry.is_dir():
					directories.append(entry.name)
				elif entry.is_file():
					files.append(entry.name)
			except OSError:
				# The entry vanished or can't be stat'ed
				continue
	return render(directories, files)


# EOF
