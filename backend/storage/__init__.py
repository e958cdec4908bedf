"""Record store access for cycle history, subscribers and the notification log."""

from storage.documents import (
    DocumentStore,
    GitHubDocumentStore,
    SupabaseDocumentStore,
)

__all__ = [
    "DocumentStore",
    "GitHubDocumentStore",
    "SupabaseDocumentStore",
]
