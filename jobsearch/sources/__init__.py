"""Job corpus and user directory sources.

This module provides:
- JobCorpusSource / DirectorySource: read-only snapshot + change-notification contracts
- InMemoryJobCorpus / InMemoryDirectory: mutable implementations
- load_corpus_file: seed sources from a YAML or JSON fixture
"""

from .base import ChangeNotifier, DirectorySource, JobCorpusSource, SubscriptionHandle
from .exceptions import SourceError, SourceUnavailableError
from .fixtures import CorpusFixture, load_corpus_file
from .memory import InMemoryDirectory, InMemoryJobCorpus

__all__ = [
    "ChangeNotifier",
    "JobCorpusSource",
    "DirectorySource",
    "SubscriptionHandle",
    "InMemoryJobCorpus",
    "InMemoryDirectory",
    "CorpusFixture",
    "load_corpus_file",
    "SourceError",
    "SourceUnavailableError",
]
