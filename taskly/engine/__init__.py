"""Reconciliation engine for taskly."""

from taskly.engine.threshold import is_due
from taskly.engine.guard import IdempotencyGuard
from taskly.engine.maintenance import MaintenanceTaskGenerator
from taskly.engine.asset_sync import InvoiceAssetSync
from taskly.engine.sheet_sync import GoogleSheetsTaskSync, GoogleSheetsTaskSource, normalize_rows
from taskly.engine.demo_client import DemoClientProvisioner

__all__ = [
    "is_due",
    "IdempotencyGuard",
    "MaintenanceTaskGenerator",
    "InvoiceAssetSync",
    "GoogleSheetsTaskSync",
    "GoogleSheetsTaskSource",
    "normalize_rows",
    "DemoClientProvisioner",
]
