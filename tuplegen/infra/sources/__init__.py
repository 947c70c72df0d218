from tuplegen.infra.sources.file_sources import CsvColumnSequenceSource, LineFileSequenceSource
from tuplegen.infra.sources.http_source import HttpSequenceSource
from tuplegen.infra.sources.spec_parser import SourceSpecParser, describe_source

__all__ = [
    "CsvColumnSequenceSource",
    "LineFileSequenceSource",
    "HttpSequenceSource",
    "SourceSpecParser",
    "describe_source",
]
