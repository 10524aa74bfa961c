"""Job search and aggregation engine for field-service job corpora."""

__version__ = "0.1.0"
