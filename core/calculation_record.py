"""
Calculation records and the hand-off to external storage.

The engine never writes history itself. A caller that wants to keep a
calculation builds a CalculationRecord (attaching its own timestamp and
technician) and passes it to a CalculationStore implementation; the store
only ever sees the plain JSON-compatible payload.
"""

from datetime import datetime
from typing import List, Optional
import logging

from core.interfaces import CalculationStore
from core.recommendation_engine import Readings, normalize_readings
from core.schemas import (
    CalculationRecord,
    ChemicalRecommendation,
    PoolProfile,
    TestReading,
)

logger = logging.getLogger(__name__)


def build_calculation_record(
    profile: PoolProfile,
    readings: Readings,
    recommendations: List[ChemicalRecommendation],
    timestamp: datetime,
    technician_id: Optional[str] = None,
) -> CalculationRecord:
    """
    Bundle one calculation for storage.

    Args:
        profile: Pool profile used for the calculation
        readings: Readings as passed to the engine (sequence or mapping)
        recommendations: Engine output
        timestamp: When the calculation was made (caller's clock)
        technician_id: Optional technician reference

    Returns:
        CalculationRecord with readings normalised to one entry per
        measured parameter; unmeasured parameters are left out
    """
    values = normalize_readings(readings)
    normalized = [
        TestReading(parameter_id=pid, value=value)
        for pid, value in values.items()
        if value is not None
    ]
    return CalculationRecord(
        pool_profile=profile,
        readings=normalized,
        recommendations=list(recommendations),
        timestamp=timestamp,
        technician_id=technician_id,
    )


def save_calculation(store: CalculationStore, record: CalculationRecord) -> Optional[str]:
    """
    Persist a record through an external store.

    Returns:
        Whatever identifier the store returns

    Raises:
        Any exception raised by the store, after logging it
    """
    payload = record.to_payload()
    try:
        record_id = store.save(payload)
    except Exception as e:
        logger.error(f"Failed to save calculation for client {record.pool_profile.client_id}: {e}")
        raise

    logger.info(
        f"Saved calculation {record_id} with "
        f"{len(payload['chemicalRecommendations'])} recommendation(s)"
    )
    return record_id
