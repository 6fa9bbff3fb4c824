"""Bulk settlement for the mileage system."""

from mileage_batch.domain.types import BulkSettlementResult
from mileage_batch.orchestrator import BulkSettlementOrchestrator

__all__ = ["BulkSettlementOrchestrator", "BulkSettlementResult"]
