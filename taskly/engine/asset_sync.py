"""Link invoice asset items to asset records.

Items of type 'asset' that have no asset yet are paired, in (sort_order, id)
order, with assets already created for the same invoice that no item points
at. Items left over get a freshly created asset, provided the invoice is paid,
approved and belongs to a workspace.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from taskly.database.asset_repository import AssetRepository, InvoiceRepository
from taskly.database.models import InvoiceDB, InvoiceItemDB
from taskly.database.settings_repository import SettingsStore
from taskly.database.workspace_repository import ProjectRepository
from taskly.i18n import Translator
from taskly.models.constants import (
    ACTIVE_ASSET_STATUS,
    ASSET_SYNC_LAST_RUN_KEY,
    DEFAULT_ASSET_CODE_PREFIX,
    PAID_INVOICE_STATUS,
)
from taskly.models.reconciliation import ReconciliationResult

load_dotenv()

logger = logging.getLogger(__name__)

ASSET_CODE_PREFIX = os.getenv("ASSET_CODE_PREFIX", DEFAULT_ASSET_CODE_PREFIX)
NOTES_KEY = "From invoice {number}"


def asset_name_for(item: InvoiceItemDB) -> str:
    return (item.asset_name or item.description or "").strip()


def can_create_assets(invoice: InvoiceDB) -> bool:
    return invoice.status == PAID_INVOICE_STATUS and invoice.approved_at is not None and bool(invoice.workspace_id)


class InvoiceAssetSync:
    def __init__(
        self,
        db: Session,
        *,
        translator: Optional[Translator] = None,
        settings: Optional[SettingsStore] = None,
        asset_code_prefix: str = ASSET_CODE_PREFIX,
    ):
        self.db = db
        self.invoices = InvoiceRepository(db)
        self.assets = AssetRepository(db)
        self.projects = ProjectRepository(db)
        self.translator = translator or Translator()
        self.settings = settings or SettingsStore(db)
        self.asset_code_prefix = asset_code_prefix

    def _create_asset_for(self, invoice: InvoiceDB, item: InvoiceItemDB, location: Optional[str]):
        return self.assets.create(
            workspace_id=invoice.workspace_id,
            project_id=invoice.project_id,
            invoice_id=invoice.id,
            asset_category_id=item.asset_category_id,
            name=asset_name_for(item),
            asset_code=self.assets.next_asset_code(invoice.workspace_id, self.asset_code_prefix),
            value=item.amount,
            location=location,
            purchase_date=invoice.invoice_date,
            status=ACTIVE_ASSET_STATUS,
            notes=self.translator.format(NOTES_KEY, {"number": invoice.invoice_number}),
        )

    def sync_invoice(self, invoice: InvoiceDB, items: List[InvoiceItemDB], result: ReconciliationResult) -> None:
        existing = self.assets.unlinked_for_invoice(invoice.id)
        paired = list(zip(items, existing))
        for item, asset in paired:
            self.invoices.link_item(item.id, asset.id)
            result.linked += 1

        remaining = items[len(paired):]
        if not remaining:
            return
        if not can_create_assets(invoice):
            logger.debug(f"Invoice {invoice.id}: not paid and approved, {len(remaining)} item(s) left unlinked")
            result.skipped += len(remaining)
            return

        location = None
        if invoice.project_id:
            project = self.projects.get(invoice.project_id)
            location = project.address if project else None

        for item in remaining:
            if not asset_name_for(item):
                result.skipped += 1
                continue
            asset = self._create_asset_for(invoice, item, location)
            self.invoices.link_item(item.id, asset.id)
            result.created += 1
            result.linked += 1

    def run(self) -> ReconciliationResult:
        result = ReconciliationResult()
        for invoice_id, items in self.invoices.unlinked_asset_items_by_invoice().items():
            try:
                invoice = self.invoices.get(invoice_id)
                if invoice is None:
                    result.skipped += len(items)
                    continue
                self.sync_invoice(invoice, items, result)
            except Exception as e:
                self.db.rollback()
                logger.warning(f"Invoice {invoice_id}: {type(e).__name__}: {str(e)[:200]}")
                result.add_error(f"Invoice {invoice_id}: {e}")

        self.settings.set(ASSET_SYNC_LAST_RUN_KEY, datetime.utcnow().isoformat())
        return result
