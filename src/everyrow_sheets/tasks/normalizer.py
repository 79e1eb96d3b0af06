"""
Normalization of task results into flat record lists.

The everyrow service answers ``GET /tasks/{id}/result`` with one of three
shapes (see ``everyrow_sheets.tasks.models``). ``normalize_payload`` reduces
all of them to a list of records and never raises: a result it cannot read is
treated as "no records", and the orchestrator reports that to the user as an
empty result.

Operation-specific post-processing lives here too so the orchestrator can look
it up by operation kind.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from everyrow_sheets.tasks.models import (
    FlatListPayload,
    GroupedPayload,
    Record,
    ScalarPayload,
    decode_payload,
)

logger = logging.getLogger(__name__)

DEDUPE_METADATA_KEYS = ("selected", "equivalence_class_id", "equivalence_class_name")


def normalize_payload(raw: Any) -> List[Record]:
    """Flatten a raw result body into a list of records.

    Args:
        raw: Parsed JSON body of a task result (may be None)

    Returns:
        Records in result order; empty when the body is absent, empty, or
        unrecognised
    """
    payload = decode_payload(raw)

    if isinstance(payload, GroupedPayload):
        return [child for child in payload.children if child is not None]
    if isinstance(payload, FlatListPayload):
        return list(payload.records)
    if isinstance(payload, ScalarPayload):
        return [payload.record]

    if raw is None or raw == {} or (isinstance(raw, dict) and "data" in raw and raw["data"] is None):
        logger.debug("Task result carried no data")
    else:
        keys = sorted(raw) if isinstance(raw, dict) else []
        logger.warning(
            "Unrecognised task result shape (%s, keys=%s); treating as empty",
            type(raw).__name__, keys,
        )
    return []


def postprocess_screen(records: List[Record]) -> List[Record]:
    """Promote ``research.screening_result`` to a top-level ``reason`` column.

    A blank or missing screening result adds no ``reason``. The nested
    ``research`` payload itself is dropped from the output.
    """
    result = []
    for record in records:
        row = {key: value for key, value in record.items() if key != "research"}
        research = record.get("research")
        if isinstance(research, dict) and research.get("screening_result"):
            row["reason"] = research["screening_result"]
        result.append(row)
    return result


def postprocess_dedupe(records: List[Record]) -> List[Record]:
    """Keep one row per equivalence class and strip the dedupe bookkeeping keys.

    Only records flagged ``selected`` (exactly ``True``) survive.
    """
    return [
        {key: value for key, value in record.items() if key not in DEDUPE_METADATA_KEYS}
        for record in records
        if record.get("selected") is True
    ]


POSTPROCESSORS: Dict[str, Callable[[List[Record]], List[Record]]] = {
    "screen": postprocess_screen,
    "dedupe": postprocess_dedupe,
}


def normalize_result(raw: Any, operation: Optional[str] = None) -> List[Record]:
    """Normalize a raw result and apply the post-processing for ``operation``."""
    records = normalize_payload(raw)
    postprocess = POSTPROCESSORS.get(operation)
    if postprocess is not None:
        records = postprocess(records)
    return records
