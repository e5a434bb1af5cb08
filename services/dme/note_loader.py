import os
import json
import logging

from services.dme.errors import NoteNotFoundError, InvalidNoteFormatError

logger = logging.getLogger("dme-loader")


def unwrap_note(content: str) -> str:
    """Return the note body, unwrapping a {"data": "..."} envelope when present."""
    content = content.strip()
    if not (content.startswith("{") and '"data"' in content):
        return content

    try:
        envelope = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"[DME-LOAD-ERROR] Invalid JSON envelope: {e}")
        raise InvalidNoteFormatError("Invalid JSON format.") from e

    data = envelope.get("data") if isinstance(envelope, dict) else None
    if not isinstance(data, str):
        logger.error("[DME-LOAD-ERROR] JSON envelope has no string 'data' property")
        raise InvalidNoteFormatError("Invalid JSON format.")

    logger.info(f"[DME-LOAD-ENVELOPE] Unwrapped JSON envelope text_length={len(data)}")
    return data


def load_note(path) -> str:
    path = os.fspath(path)
    if not os.path.isfile(path):
        logger.error(f"[DME-LOAD-ERROR] path={path} File not found")
        raise NoteNotFoundError(path)

    logger.info(f"[DME-LOAD-START] path={path} Reading physician note")
    # BOM dropped, undecodable bytes become U+FFFD
    with open(path, "r", encoding="utf-8-sig", errors="replace") as f:
        content = f.read()

    text = unwrap_note(content)
    logger.info(f"[DME-LOAD-SUCCESS] path={path} text_length={len(text)}")
    return text
