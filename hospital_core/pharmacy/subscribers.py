# hospital_core/pharmacy/subscribers.py
import logging

from hospital_core.common.events import subscribe

logger = logging.getLogger(__name__)


@subscribe("medicine.low_stock")
def warn_low_stock(payload):
    logger.warning(
        "Medicine %s is low on stock (%s left, minimum %s)",
        payload.get("name"),
        payload.get("stock"),
        payload.get("min_stock"),
        extra={"medicine_id": payload.get("medicine_id")},
    )
