import logging
from typing import Any, Dict, Optional

from services.dme.dme import ExtractionResult

logger = logging.getLogger("dme-payload")


def build_payload(
    device: str,
    ordering_provider: str,
    diagnosis: str,
    patient_name: str,
    dob: str,
    liters: Optional[str] = None,
    usage: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Assemble the outbound DME order record.

    Required keys are always present. ``liters`` and ``usage`` are left out
    of the record entirely when None; the receiving API does not accept nulls.
    """
    payload = {
        "device": device,
        "ordering_provider": ordering_provider,
        "diagnosis": diagnosis,
        "patient_name": patient_name,
        "dob": dob,
    }
    if liters is not None:
        payload["liters"] = liters
    if usage is not None:
        payload["usage"] = usage

    logger.info(f"[DME-PAYLOAD] keys={list(payload.keys())}")
    return payload


def payload_from_result(result: ExtractionResult) -> Dict[str, Any]:
    return build_payload(**result.model_dump())
