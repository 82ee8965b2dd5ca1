"""Repository layer for templates.

Provides the key/value persistence seam and typed template access.
"""

from documents.repository.memory_template_store import InMemoryTemplateStore
from documents.repository.sqlite_template_store import SQLiteTemplateStore
from documents.repository.template_repository import TemplateRepository
from documents.repository.template_store import TemplateStore

__all__ = [
    "InMemoryTemplateStore",
    "SQLiteTemplateStore",
    "TemplateRepository",
    "TemplateStore",
]
