"""LSIF ingestion, indexing and symbol resolution."""

from .locator import RangeLocator, location_to_link, location_to_string
from .monikers import DEFAULT_UNIQUENESS_RANKS, MonikerResolver, UniquenessRanking
from .protocol import Document, Edge, EdgeLabel, Moniker, Position, Range, Vertex, parse_record
from .reader import iter_records, open_input, read_records
from .store import GraphStore

__all__ = [
	"DEFAULT_UNIQUENESS_RANKS",
	"Document",
	"Edge",
	"EdgeLabel",
	"GraphStore",
	"Moniker",
	"MonikerResolver",
	"Position",
	"Range",
	"RangeLocator",
	"UniquenessRanking",
	"Vertex",
	"iter_records",
	"location_to_link",
	"location_to_string",
	"open_input",
	"parse_record",
	"read_records",
]
