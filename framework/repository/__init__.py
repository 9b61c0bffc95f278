"""
Repository pattern: data access abstraction, decouples service layer from database session.
"""

from .base import IRepository, Query, Repository
from .unit_of_work import TransactionState, UnitOfWork

__all__ = ["IRepository", "Query", "Repository", "TransactionState", "UnitOfWork"]
