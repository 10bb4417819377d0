"""Result persistence for finished generations."""

from .result_sink import ResultSink
from .result_store import ResultStore

__all__ = ["ResultSink", "ResultStore"]
