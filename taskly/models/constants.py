"""Constants for taskly.

This module centralizes the magic values shared by the reconciliation jobs.
"""

from taskly.models.task import TaskPriority


# Task defaults
DEFAULT_PRIORITY = TaskPriority.MEDIUM
INITIAL_PROGRESS = 0

# Invoice items
ASSET_ITEM_TYPE = "asset"
PAID_INVOICE_STATUS = "paid"
ACTIVE_ASSET_STATUS = "active"
DEFAULT_ASSET_CODE_PREFIX = "HI-0901"
ASSET_CODE_DIGITS = 4

# Google Sheets
DEFAULT_SHEET_NAME = "ია"
SHEET_COLUMN_RANGE = "A:Z"
# Appended to a store value to build the branch project name ("<store> ფილიალი").
BRANCH_PROJECT_SUFFIX = "ფილიალი"

# Demo client
DEMO_CLIENT_EMAIL = "demo@demo.ge"
DEMO_CLIENT_NAME = "Demo Client"
CLIENT_ROLE = "client"

# Settings keys
MAINTENANCE_LAST_RUN_KEY = "maintenance_tasks_last_run"
ASSET_SYNC_LAST_RUN_KEY = "asset_sync_last_run"
SHEET_SYNC_LAST_RUN_KEY = "google_sheet_sync_last_run"
