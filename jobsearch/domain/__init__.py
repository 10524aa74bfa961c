"""Domain models for the job search engine."""

from .models import CreatorResolver, DirectoryUser, IndexEntry, Job, resolve_creator

__all__ = ["Job", "IndexEntry", "DirectoryUser", "CreatorResolver", "resolve_creator"]
