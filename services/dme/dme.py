import re
import logging
from typing import Dict, Iterator, Literal, Optional
from collections.abc import Mapping

from pydantic import BaseModel

logger = logging.getLogger("dme-extractor")

UNKNOWN = "Unknown"

# Checked in order, first hit wins
DEVICE_KEYWORDS = [
    ("cpap", "CPAP"),
    ("oxygen", "Oxygen Tank"),
    ("wheelchair", "Wheelchair"),
]

DeviceType = Literal["CPAP", "Oxygen Tank", "Wheelchair", "Unknown"]

LITERS_PATTERN = re.compile(r"(\d+(\.\d+)?) ?L", re.IGNORECASE)


class FieldMap(Mapping):
    """Note fields keyed case-insensitively; keys are lower-cased on insert and lookup."""

    def __init__(self, fields: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = {}
        self._labels: Dict[str, str] = {}
        for key, value in (fields or {}).items():
            self._set(key, value)

    def _set(self, key: str, value: str) -> None:
        norm = key.lower()
        self._data[norm] = value
        self._labels[norm] = key

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __contains__(self, key) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels.values())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FieldMap({dict(self.items())!r})"


class ExtractionResult(BaseModel):
    device: DeviceType
    ordering_provider: str
    diagnosis: str
    patient_name: str
    dob: str
    liters: Optional[str] = None
    usage: Optional[str] = None


def parse_fields(text: str) -> FieldMap:
    fields = FieldMap()
    for line in text.split("\n"):
        if not line.strip():
            continue
        parts = line.split(":", 1)
        if len(parts) == 2:
            # later duplicates overwrite earlier ones
            fields._set(parts[0].strip(), parts[1].strip())
    logger.info(f"[DME-PARSE] fields={len(fields)}")
    return fields


def get_value(fields: Optional[Mapping], key: str) -> Optional[str]:
    if fields is None:
        return None
    return fields.get(key)


def _order_text(fields) -> Optional[str]:
    prescription = get_value(fields, "Prescription")
    if prescription is not None:
        return prescription
    return get_value(fields, "Recommendation")


def extract_device_type(fields) -> str:
    text = _order_text(fields)
    if not text:
        return UNKNOWN

    lowered = text.lower()
    for keyword, device in DEVICE_KEYWORDS:
        if keyword in lowered:
            return device
    return UNKNOWN


def extract_ordering_provider(fields) -> str:
    provider = get_value(fields, "Ordering Physician")
    return provider if provider else UNKNOWN


def extract_oxygen_liters(fields) -> Optional[str]:
    text = _order_text(fields)
    if not text:
        return None

    match = LITERS_PATTERN.search(text)
    if match:
        return f"{match.group(1)} L"
    return None


def extract_oxygen_usage(fields) -> Optional[str]:
    usage_text = get_value(fields, "Usage")
    if not usage_text:
        return None

    lowered = usage_text.lower()
    has_sleep = "sleep" in lowered
    has_exertion = "exertion" in lowered

    if has_sleep and has_exertion:
        return "sleep and exertion"
    if has_sleep:
        return "sleep"
    if has_exertion:
        return "exertion"
    return None


def extract_diagnosis(fields) -> str:
    value = get_value(fields, "Diagnosis")
    return value if value is not None else UNKNOWN


def extract_patient_name(fields) -> str:
    value = get_value(fields, "Patient Name")
    return value if value is not None else UNKNOWN


def extract_date_of_birth(fields) -> str:
    value = get_value(fields, "DOB")
    return value if value is not None else UNKNOWN


def extract_fields(fields) -> ExtractionResult:
    result = ExtractionResult(
        device=extract_device_type(fields),
        ordering_provider=extract_ordering_provider(fields),
        diagnosis=extract_diagnosis(fields),
        patient_name=extract_patient_name(fields),
        dob=extract_date_of_birth(fields),
        liters=extract_oxygen_liters(fields),
        usage=extract_oxygen_usage(fields),
    )
    logger.info(f"[DME-EXTRACT-DEVICE] device={result.device} liters={result.liters} usage={result.usage}")
    logger.debug(
        f"[DME-EXTRACT-DEBUG] provider={result.ordering_provider} "
        f"patient={result.patient_name} diagnosis={result.diagnosis}"
    )
    return result
