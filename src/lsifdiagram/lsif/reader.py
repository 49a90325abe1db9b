"""Reading newline-delimited LSIF dumps from files or standard input."""

from __future__ import annotations

import contextlib
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from lsifdiagram.errors import LsifParseError
from lsifdiagram.lsif.protocol import Record, parse_record

if TYPE_CHECKING:
	from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


def iter_records(lines: Iterable[str]) -> Iterator[Record]:
	"""
	Decode LSIF records from an iterable of JSON lines.

	Blank lines are skipped. Decoding stops at the first malformed line.

	Args:
	    lines: JSON lines, typically an open text stream

	Yields:
	    Typed vertex and edge records in input order

	Raises:
	    LsifParseError: If a line is not valid UTF-8, not valid JSON or not a valid record

	"""
	line_number = 0
	stream = iter(lines)
	while True:
		line_number += 1
		try:
			line = next(stream)
		except StopIteration:
			return
		except UnicodeDecodeError as e:
			msg = f"input is not valid UTF-8: {e.reason} at byte {e.start}"
			raise LsifParseError(msg, line_number) from e
		stripped = line.strip()
		if not stripped:
			continue
		try:
			stripped.encode("utf-8")
		except UnicodeEncodeError as e:
			msg = f"input is not valid UTF-8 at character {e.start + 1}"
			raise LsifParseError(msg, line_number) from e
		try:
			data = json.loads(stripped)
		except json.JSONDecodeError as e:
			msg = f"invalid JSON: {e.msg}"
			raise LsifParseError(msg, line_number) from e
		yield parse_record(data, line_number)


@contextlib.contextmanager
def open_input(source: Path | str) -> Iterator[TextIO]:
	"""
	Open an LSIF input source.

	Args:
	    source: A file path, or ``-`` for standard input

	Yields:
	    A text stream positioned at the first line

	"""
	if str(source) == STDIN_MARKER:
		logger.debug("Reading LSIF dump from standard input")
		yield sys.stdin
		return

	path = Path(source)
	logger.debug("Reading LSIF dump from %s", path)
	# Undecodable bytes become lone surrogates so the failing line can be reported
	with path.open(encoding="utf-8", errors="surrogateescape") as f:
		yield f


def read_records(source: Path | str) -> list[Record]:
	"""Read every record of an LSIF dump into memory."""
	with open_input(source) as stream:
		records = list(iter_records(stream))
	logger.info("Read %d LSIF records from %s", len(records), source)
	return records
