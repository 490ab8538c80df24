from .base import DocumentStore
from .github import GitHubContentsStore
from .manager import StoreManager
from .memory import InMemoryDocumentStore
