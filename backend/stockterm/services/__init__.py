"""
StockTerm Services

Service layer containing the indicator engine.
Each service has a defined interface (contract) and implementation.
"""

from stockterm.services.base import BaseService, ServiceError

__all__ = ["BaseService", "ServiceError"]
