"""Entity store and transaction coordinator."""

from wls.repo.errors import NoRecordError
from wls.repo.repository import Repository
from wls.repo.transaction import RepositoryTx

__all__ = ["NoRecordError", "Repository", "RepositoryTx"]
