import json
import time
import logging
from typing import Any, Dict, Optional

import requests

from services.dme.dme import parse_fields, extract_fields
from services.dme.errors import DmeExtractionError, TransportError, TransportTimeoutError
from services.dme.note_loader import load_note, unwrap_note
from services.dme.payload import payload_from_result
from utils.config import DEFAULT_TIMEOUT
from utils.metrics import (
    dme_notes_processed_total,
    dme_devices_extracted_total,
    dme_transport_requests_total,
    dme_transport_duration_seconds,
)

logger = logging.getLogger("dme-worker")


def post_payload(payload: Dict[str, Any], url: str, timeout: float = DEFAULT_TIMEOUT) -> requests.Response:
    """Send one DME order record. Single attempt; the caller decides what a failure means."""
    if payload is None:
        raise ValueError("payload cannot be None")
    if not url or not url.strip():
        raise ValueError("API URL cannot be null or empty")

    logger.debug(f"[DME-HTTP-PAYLOAD] payload={json.dumps(payload)}")
    logger.info(f"[DME-HTTP-START] url={url} timeout={timeout}")

    start_time = time.time()
    try:
        resp = requests.post(url, json=payload, timeout=timeout)
        logger.info(f"[DME-HTTP-RESPONSE] url={url} status={resp.status_code}")
        resp.raise_for_status()
    except requests.Timeout as e:
        dme_transport_requests_total.labels(status="timeout").inc()
        logger.error(f"[DME-HTTP-TIMEOUT] url={url} timeout={timeout} error={e}")
        raise TransportTimeoutError(f"API request timed out after {timeout}s: {e}") from e
    except requests.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        dme_transport_requests_total.labels(status="http_error").inc()
        logger.error(f"[DME-HTTP-ERROR] url={url} status={status_code} error={e}")
        raise TransportError(f"HTTP request failed: {e}", status_code=status_code) from e
    except requests.RequestException as e:
        dme_transport_requests_total.labels(status="connection_error").inc()
        logger.error(f"[DME-HTTP-ERROR] url={url} error={e}")
        raise TransportError(f"HTTP request failed: {e}") from e
    finally:
        dme_transport_duration_seconds.observe(time.time() - start_time)

    dme_transport_requests_total.labels(status="success").inc()
    logger.info(f"[DME-HTTP-SUCCESS] url={url} status={resp.status_code}")
    return resp


def extract_order_from_note(note: str) -> Dict[str, Any]:
    fields = parse_fields(note)
    result = extract_fields(fields)
    dme_devices_extracted_total.labels(device=result.device).inc()
    return payload_from_result(result)


def extract_order(text: str) -> Dict[str, Any]:
    """Note body (raw or JSON envelope) -> outbound order record."""
    return extract_order_from_note(unwrap_note(text))


def extract_order_from_file(path) -> Dict[str, Any]:
    return extract_order_from_note(load_note(path))


def process_note(path, api_url: str, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    logger.info(f"[DME-PROCESS-START] path={path}")
    try:
        payload = extract_order_from_file(path)
        logger.info(f"[DME-PROCESS-SEND] device={payload['device']} url={api_url}")
        post_payload(payload, api_url, timeout=timeout)
    except DmeExtractionError as e:
        dme_notes_processed_total.labels(status=e.kind).inc()
        raise
    except Exception:
        dme_notes_processed_total.labels(status="Unexpected").inc()
        raise

    dme_notes_processed_total.labels(status="success").inc()
    logger.info(f"[DME-PROCESS-SUCCESS] path={path} Successfully sent data to API")
    return payload


def send_order_text(text: str, api_url: Optional[str], timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    payload = extract_order(text)
    post_payload(payload, api_url, timeout=timeout)
    return payload
