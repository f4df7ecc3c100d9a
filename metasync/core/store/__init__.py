from .base import MetadataStore
from .file_store import FileMetadataStore
from .memory import InMemoryMetadataStore
from .models import MetadataRecord

__all__ = [
    "MetadataStore",
    "MetadataRecord",
    "InMemoryMetadataStore",
    "FileMetadataStore",
]
