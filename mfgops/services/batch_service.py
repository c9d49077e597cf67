"""
Production batch service: CRUD with referential checks on batch lines.
Cost analysis and requirements live in batch_calculations / batch_requirements.
"""

from typing import List, Optional, Tuple

from mfgops.common.exceptions import ValidationError
from mfgops.logger_config import logger
from mfgops.models.batch import BatchStatus, ProductionBatch
from mfgops.schemas.batch import BatchItem
from mfgops.utils.text_utils import normalize_text
from mfgops.utils.unit_conversion import BATCH_FILL_UNITS


def get_batch_by_id(store, batch_id: str) -> Optional[ProductionBatch]:
    return store.get("production_batches", batch_id)


def get_all_batches(
    store,
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[ProductionBatch], int]:
    batches = store.get_all("production_batches")
    if status:
        batches = [b for b in batches if b.status == status]
    if search:
        term = normalize_text(search)
        batches = [b for b in batches if term in normalize_text(b.batch_name)]
    total = len(batches)
    return batches[skip:skip + limit], total


def validate_batch_items(store, items: List) -> List[dict]:
    """
    Every product and variant must exist, each variant must belong to its product,
    and quantities are totals in kg or L. Returns the items as plain dicts for the JSON column.
    """
    cleaned = []
    for raw in items:
        item = BatchItem.model_validate(raw)
        product = store.require("products", item.product_id)
        for line in item.variants:
            variant = store.require("product_variants", line.variant_id)
            if variant.product_id != product.id:
                raise ValidationError(f'Variant "{variant.name}" does not belong to product "{product.name}"')
            if line.fill_unit not in BATCH_FILL_UNITS:
                raise ValidationError("Batch fill unit must be kg or L")
        cleaned.append(item.model_dump(mode="json"))
    return cleaned


def create_batch(store, data: dict) -> ProductionBatch:
    if not (data.get("batch_name") or "").strip():
        raise ValidationError("Batch name is required")
    record = {**data, "batch_name": data["batch_name"].strip()}
    record["items"] = validate_batch_items(store, data.get("items") or [])
    batch_id = store.add("production_batches", record)
    logger.info(f"Production batch created: {batch_id} ({len(record['items'])} product(s))")
    return store.get("production_batches", batch_id)


def update_batch(store, batch_id: str, data: dict) -> ProductionBatch:
    batch = store.require("production_batches", batch_id)
    data = dict(data)
    if "batch_name" in data:
        if not (data["batch_name"] or "").strip():
            raise ValidationError("Batch name is required")
        data["batch_name"] = data["batch_name"].strip()
    if data.get("items") is not None:
        data["items"] = validate_batch_items(store, data["items"])
    else:
        data.pop("items", None)

    start = data.get("start_date", batch.start_date)
    end = data.get("end_date", batch.end_date)
    if start and end and end < start:
        raise ValidationError("End date cannot be before start date")

    batch = store.update("production_batches", batch_id, data)
    logger.info(f"Production batch updated: {batch_id}")
    return batch


def update_batch_status(store, batch_id: str, status: str) -> ProductionBatch:
    status = BatchStatus(status)
    batch = store.update("production_batches", batch_id, {"status": status})
    logger.info(f"Production batch {batch_id} status -> {status.value}")
    return batch


def delete_batch(store, batch_id: str) -> None:
    store.require("production_batches", batch_id)
    store.delete("production_batches", batch_id)
    logger.info(f"Production batch deleted: {batch_id}")
