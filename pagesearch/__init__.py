"""Intelligent page search: keyword fan-out, LLM reranking and cited answers."""
__version__ = "0.1.0"
