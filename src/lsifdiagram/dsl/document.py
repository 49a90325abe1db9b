"""Structured builder for DSL text."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote as percent_encode

INDENT = "  "
LINK_SAFE_CHARS = ":/?#[]@!$&()*+,;=%~"


def quote(value: str) -> str:
	"""Single-quote a string, escaping backslashes and quotes and folding newlines."""
	escaped = value.replace("\\", "\\\\").replace("'", "\\'")
	return "'" + " ".join(escaped.splitlines()) + "'"


def encode_link(uri: str) -> str:
	"""Percent-encode characters that cannot appear in an unquoted link, such as spaces and quotes."""
	return percent_encode(uri, safe=LINK_SAFE_CHARS)


@dataclass
class DslBlock:
	"""
	A header line with a braced body of lines and nested blocks.

	A block without a header is a document: its items are written without
	braces or indentation. A block with a header and no items is written as
	the bare header line.
	"""

	header: str | None = None
	items: list[DslBlock | str] = field(default_factory=list)

	def line(self, text: str) -> DslBlock:
		"""Append a line and return this block."""
		self.items.append(text)
		return self

	def block(self, header: str) -> DslBlock:
		"""Append a nested block and return it."""
		child = DslBlock(header)
		self.items.append(child)
		return child

	def _lines(self, depth: int) -> list[str]:
		pad = INDENT * depth
		if self.header is None:
			inner_depth = depth
			lines: list[str] = []
		elif not self.items:
			return [pad + self.header]
		else:
			inner_depth = depth + 1
			lines = [f"{pad}{self.header} {{"]

		for item in self.items:
			if isinstance(item, DslBlock):
				lines.extend(item._lines(inner_depth))
			elif item:
				lines.append(INDENT * inner_depth + item)
			else:
				lines.append("")

		if self.header is not None:
			lines.append(pad + "}")
		return lines

	def serialize(self) -> str:
		"""Render the block as text ending with a newline."""
		return "\n".join(self._lines(0)) + "\n"
