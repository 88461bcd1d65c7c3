"""Repositories for invoices, invoice items and assets."""

import logging
import re
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskly.database.models import AssetDB, InvoiceDB, InvoiceItemDB
from taskly.models.constants import ASSET_CODE_DIGITS, ASSET_ITEM_TYPE

logger = logging.getLogger(__name__)


class InvoiceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, invoice_id: int) -> Optional[InvoiceDB]:
        return self.db.query(InvoiceDB).filter(InvoiceDB.id == invoice_id).first()

    def unlinked_asset_items_by_invoice(self) -> Dict[int, List[InvoiceItemDB]]:
        """Asset-type items without an asset, grouped by invoice in (sort_order, id) order."""
        items = (
            self.db.query(InvoiceItemDB)
            .filter(InvoiceItemDB.type == ASSET_ITEM_TYPE, InvoiceItemDB.asset_id.is_(None))
            .order_by(InvoiceItemDB.invoice_id, InvoiceItemDB.sort_order, InvoiceItemDB.id)
            .all()
        )
        grouped: Dict[int, List[InvoiceItemDB]] = OrderedDict()
        for item in items:
            grouped.setdefault(item.invoice_id, []).append(item)
        return grouped

    def link_item(self, item_id: int, asset_id: int) -> None:
        item = self.db.query(InvoiceItemDB).filter(InvoiceItemDB.id == item_id).first()
        if item is None:
            raise ValueError(f"Invoice item {item_id} not found")
        item.asset_id = asset_id
        try:
            self.db.commit()
            logger.debug(f"Linked invoice item {item_id} to asset {asset_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to link invoice item {item_id}: {type(e).__name__}: {str(e)}")
            raise


class AssetRepository:
    def __init__(self, db: Session):
        self.db = db

    def unlinked_for_invoice(self, invoice_id: int) -> List[AssetDB]:
        """Assets created for an invoice that no invoice item points at yet, oldest first."""
        linked_ids = select(InvoiceItemDB.asset_id).where(InvoiceItemDB.asset_id.isnot(None))
        return (
            self.db.query(AssetDB)
            .filter(AssetDB.invoice_id == invoice_id, AssetDB.id.notin_(linked_ids))
            .order_by(AssetDB.id)
            .all()
        )

    def next_asset_code(self, workspace_id: int, prefix: str) -> str:
        """Next free code of the form <prefix>0001 within a workspace."""
        codes = (
            self.db.query(AssetDB.asset_code)
            .filter(AssetDB.workspace_id == workspace_id, AssetDB.asset_code.startswith(prefix, autoescape=True))
            .all()
        )
        pattern = re.compile(r"^" + re.escape(prefix) + r"(\d+)$")
        last = 0
        for (code,) in codes:
            match = pattern.match(code or "")
            if match:
                last = max(last, int(match.group(1)))
        return f"{prefix}{str(last + 1).zfill(ASSET_CODE_DIGITS)}"

    def create(
        self,
        *,
        workspace_id: int,
        name: str,
        asset_code: Optional[str] = None,
        project_id: Optional[int] = None,
        invoice_id: Optional[int] = None,
        asset_category_id: Optional[int] = None,
        value: Optional[Decimal] = None,
        location: Optional[str] = None,
        purchase_date: Optional[date] = None,
        status: str = "active",
        notes: Optional[str] = None,
    ) -> AssetDB:
        row = AssetDB(
            workspace_id=workspace_id,
            project_id=project_id,
            invoice_id=invoice_id,
            asset_category_id=asset_category_id,
            name=name,
            asset_code=asset_code,
            value=value,
            location=location,
            purchase_date=purchase_date,
            status=status,
            notes=notes,
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created asset {row.id} ({asset_code}) for invoice {invoice_id}")
            return row
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create asset for invoice {invoice_id}: {type(e).__name__}: {str(e)}")
            raise
