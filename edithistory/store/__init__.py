"""
Document Store Adapters

Implementations of the DocumentStore protocol. The host application
normally supplies its own; these cover plain directories of notes and
tests.
"""

from .filesystem import ARCHIVE_SUFFIX, FileSystemDocumentStore
from .memory import InMemoryDocumentStore

__all__ = ['ARCHIVE_SUFFIX', 'FileSystemDocumentStore', 'InMemoryDocumentStore']
