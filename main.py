import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from api.dme import extract_order, send_order_text
from services.dme.errors import InvalidNoteFormatError, TransportError, TransportTimeoutError
from utils.config import load_settings, configure_logging
from utils.health import get_health, get_liveness, get_readiness, get_startup, mark_startup_complete
from utils.metrics import metrics_middleware, get_metrics

settings = load_settings()
configure_logging(settings.log_level)


class SuppressHealthAccessLogs(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not ("/health" in msg or "/metrics" in msg)


logging.getLogger("uvicorn.access").addFilter(SuppressHealthAccessLogs())

logger = logging.getLogger("MainAPI")

app = FastAPI(title="DME order extraction")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_metrics_middleware(request: Request, call_next):
    return await metrics_middleware(request, call_next)

# ==================== HEALTH & METRICS ====================
@app.get("/health")
async def health():
    """Overall health check endpoint"""
    return get_health()

@app.get("/health/liveness")
async def liveness():
    return get_liveness()

@app.get("/health/readiness")
async def readiness():
    return get_readiness()

@app.get("/health/startup")
async def startup():
    return get_startup()

@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(content=get_metrics(), media_type="text/plain")

# ==================== API ENDPOINTS ====================

class NoteRequest(BaseModel):
    text: str = Field(..., min_length=1)


class DmeOrderRequest(BaseModel):
    text: str = Field(..., min_length=1)
    apiUrl: Optional[str] = None


@app.post("/extract")
def extract_endpoint(req: NoteRequest):
    logger.info(f"[API-EXTRACT-START] endpoint=/extract text_length={len(req.text)}")
    try:
        payload = extract_order(req.text)
    except InvalidNoteFormatError as e:
        logger.error(f"[API-EXTRACT-ERROR] {e}")
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(f"[API-EXTRACT-SUCCESS] device={payload['device']}")
    return payload


@app.post("/dme_order")
def dme_order_endpoint(req: DmeOrderRequest):
    api_url = (req.apiUrl or "").strip() or settings.api_url
    logger.info(f"[API-DME-ORDER-START] endpoint=/dme_order url={api_url} text_length={len(req.text)}")
    try:
        payload = send_order_text(req.text, api_url, timeout=settings.request_timeout)
    except InvalidNoteFormatError as e:
        logger.error(f"[API-DME-ORDER-ERROR] {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except TransportTimeoutError as e:
        logger.error(f"[API-DME-ORDER-TIMEOUT] url={api_url} {e}")
        raise HTTPException(status_code=504, detail=str(e))
    except TransportError as e:
        logger.error(f"[API-DME-ORDER-ERROR] url={api_url} {e}")
        raise HTTPException(status_code=502, detail=str(e))

    logger.info(f"[API-DME-ORDER-SUCCESS] device={payload['device']} url={api_url}")
    return {"status": "sent", "payload": payload}

# ==================== STARTUP ====================

@app.on_event("startup")
async def startup_event():
    logger.info(f"[API-STARTUP] service={settings.service_name} apiUrl={settings.api_url}")
    mark_startup_complete()
