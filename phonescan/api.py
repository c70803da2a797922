"""
phonescan/api.py
─────────────────────────────────────────────────────────────────────────────
phonescan: dual-mode API layer

TWO USAGE MODES:
  1. Importable module:
         from phonescan.api import PhonescanAPI
         api = PhonescanAPI()
         messages = api.ingest_sms()

  2. FastAPI HTTP server:
         python -m phonescan.api                  # default: port 3000
         python -m phonescan.api --port 9000
         uvicorn phonescan.api:app --port 3000

ENDPOINTS:
  GET /device-name        - sanitized device model
  GET /sms                - ingest inbox + sent SMS, classify, store, return
  GET /sms-stats          - SMS count per address, busiest first
  GET /call-log           - ingest call log, store, return
  GET /contacts           - ingest contacts, store, return
  GET /search?keyword=    - substring search over SMS, calls, contacts
  GET /timeline-analysis  - per-day total / suspicious SMS counts
  GET /url-analysis       - SMS containing links
  GET /data-correlation   - call history for the 10 busiest SMS addresses
  GET /health             - status

Every request resolves the attached device and opens that device's store,
unless the API was built with a fixed db_path.

Collaborator failures (adb, store) surface as 500 with a generic message;
details go to the log only.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from phonescan import pipeline
from phonescan.aggregators.correlation import correlate, message_volume, parse_bound, timeline
from phonescan.config import load_config, timeline_start
from phonescan.providers.adb_provider import AdbProvider
from phonescan.providers.base import RawTextProvider
from phonescan.store.sqlite_store import SQLiteStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class PhonescanAPI:
    """
    Pure-Python API wrapper. No HTTP layer required; import and call directly.

    Usage:
        api = PhonescanAPI(provider=AdbProvider(), data_dir=Path("data"))
        contacts = api.ingest_contacts()
        messages = api.ingest_sms()
        top      = api.data_correlation()
    """

    def __init__(
        self,
        provider:  Optional[RawTextProvider] = None,
        data_dir:  Optional[Path]            = None,
        db_path:   Optional[Path]            = None,
        config:    Optional[Dict[str, Any]]  = None,
    ):
        self.config   = config if config is not None else load_config()
        self.provider = provider or AdbProvider(
            adb_path = self.config["adb_path"],
            timeout  = int(self.config["adb_timeout"]),
        )
        self.data_dir = Path(data_dir or self.config["data_dir"])
        self.db_path  = Path(db_path) if db_path else None

    # ── INTERNAL ──────────────────────────────────────────────────────────

    def _store(self) -> SQLiteStore:
        if self.db_path is not None:
            return SQLiteStore(self.db_path)
        return SQLiteStore.for_device(self.data_dir, self.device_name())

    # ── DEVICE ────────────────────────────────────────────────────────────

    def device_name(self) -> str:
        return self.provider.resolve_identifier()

    # ── INGESTION ─────────────────────────────────────────────────────────

    def ingest_sms(self) -> List[Dict[str, Any]]:
        messages = pipeline.ingest_sms(self.provider, self._store())
        return [m.to_document() for m in messages]

    def ingest_call_log(self) -> List[Dict[str, Any]]:
        records = pipeline.ingest_call_log(self.provider, self._store())
        return [r.to_document() for r in records]

    def ingest_contacts(self) -> List[Dict[str, Any]]:
        contacts = pipeline.ingest_contacts(self.provider, self._store())
        return [c.to_document() for c in contacts]

    # ── QUERIES ───────────────────────────────────────────────────────────

    def sms_stats(self) -> List[Dict[str, Any]]:
        return message_volume(self._store())

    def search(self, keyword: str) -> Dict[str, List[Dict[str, Any]]]:
        if not keyword:
            raise ValueError("Keyword is required")
        return pipeline.search(self._store(), keyword)

    def timeline(
        self,
        start: Optional[datetime] = None,
        end:   Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        return timeline(self._store(), start or timeline_start(self.config), end)

    def url_analysis(self) -> List[Dict[str, Any]]:
        return pipeline.url_analysis(self._store())

    def data_correlation(self) -> List[Dict[str, Any]]:
        return correlate(self._store(), top_n=int(self.config["correlation_top_n"]))


# ═══════════════════════════════════════════════════════════════════════════
# RESPONSE MODELS
# ═══════════════════════════════════════════════════════════════════════════

class ApiModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SmsOut(ApiModel):
    address:        Optional[str] = None
    date:           Optional[str] = None
    direction:      Optional[str] = None
    body:           Optional[str] = None
    is_suspicious:  bool = False
    category:       Optional[str] = None
    contact_name:   Optional[str] = None


class CallLogOut(ApiModel):
    number:     Optional[str] = None
    date:       Optional[str] = None
    duration:   Optional[str] = None
    direction:  Optional[str] = None


class ContactOut(ApiModel):
    display_name:   Optional[str] = None
    number:         Optional[str] = None


class VolumeOut(ApiModel):
    address:        Optional[str] = None
    total_messages: int


class TimelineOut(ApiModel):
    date:                   str
    total_messages:         int
    suspicious_messages:    int


class CorrelationOut(ApiModel):
    number:     Optional[str] = None
    sms_count:  int
    call_logs:  List[CallLogOut]


class SearchOut(ApiModel):
    sms:        List[SmsOut]
    call_log:   List[CallLogOut]
    contacts:   List[ContactOut]


class DeviceNameOut(ApiModel):
    device_name: str


class HealthOut(ApiModel):
    status:     str
    version:    str


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

def _parse_bound(value: Optional[str], name: str, end_of_day: bool = False) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parse_bound(value, end_of_day)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}")


def build_app(api: Optional[PhonescanAPI] = None) -> FastAPI:
    """Build the FastAPI application around a PhonescanAPI instance."""
    _api = api or PhonescanAPI()

    _app = FastAPI(
        title       = "phonescan API",
        description = "Android SMS, call log and contact ingestion with rule-based risk flags",
        version     = VERSION,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = ["*"],
        allow_methods     = ["GET", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    def _fail(action: str, exc: Exception):
        logger.error(f"Error {action}: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error {action}")

    @_app.get("/device-name", response_model=DeviceNameOut, summary="Sanitized device model")
    def device_name():
        try:
            return {"deviceName": _api.device_name()}
        except Exception as exc:
            _fail("fetching device name", exc)

    @_app.get("/sms", response_model=List[SmsOut], summary="Ingest SMS")
    def sms():
        """Inbox + sent SMS, classified and enriched with contact names."""
        try:
            return _api.ingest_sms()
        except Exception as exc:
            _fail("querying and saving SMS data", exc)

    @_app.get("/sms-stats", response_model=List[VolumeOut], summary="SMS volume per address")
    def sms_stats():
        try:
            return _api.sms_stats()
        except Exception as exc:
            _fail("aggregating SMS data", exc)

    @_app.get("/call-log", response_model=List[CallLogOut], summary="Ingest call log")
    def call_log():
        try:
            return _api.ingest_call_log()
        except Exception as exc:
            _fail("querying and saving call log data", exc)

    @_app.get("/contacts", response_model=List[ContactOut], summary="Ingest contacts")
    def contacts():
        try:
            return _api.ingest_contacts()
        except Exception as exc:
            _fail("querying and saving contacts data", exc)

    @_app.get("/search", response_model=SearchOut, summary="Search SMS, calls and contacts")
    def search(keyword: Optional[str] = Query(None, description="Case-insensitive substring")):
        if not keyword:
            raise HTTPException(status_code=400, detail="Keyword is required")
        try:
            return _api.search(keyword)
        except Exception as exc:
            _fail("searching data", exc)

    @_app.get("/timeline-analysis", response_model=List[TimelineOut], summary="Daily SMS / suspicious SMS counts")
    def timeline_analysis(
        start: Optional[str] = Query(None, description="ISO date, default from config"),
        end:   Optional[str] = Query(None, description="ISO date, default now"),
    ):
        start_dt = _parse_bound(start, "start")
        end_dt   = _parse_bound(end, "end", end_of_day=True)
        try:
            return _api.timeline(start_dt, end_dt)
        except Exception as exc:
            _fail("performing timeline analysis", exc)

    @_app.get("/url-analysis", response_model=List[SmsOut], summary="SMS containing links")
    def url_analysis():
        try:
            return _api.url_analysis()
        except Exception as exc:
            _fail("performing URL analysis", exc)

    @_app.get("/data-correlation", response_model=List[CorrelationOut], summary="Call history for busiest SMS addresses")
    def data_correlation():
        try:
            return _api.data_correlation()
        except Exception as exc:
            _fail("performing data correlation", exc)

    @_app.get("/health", response_model=HealthOut, summary="Health check")
    def health():
        return {"status": "ok", "version": VERSION}

    return _app


# Module-level app instance, used by uvicorn phonescan.api:app
# Building it reads config only; adb is not called until a request arrives.
app = build_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI ENTRYPOINT: python -m phonescan.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse

    import uvicorn

    config = load_config()

    parser = argparse.ArgumentParser(
        prog        = "phonescan.api",
        description = "phonescan API server",
    )
    parser.add_argument("--port", type=int, default=config["api_port"],
                        help=f"Port to bind (default: {config['api_port']})")
    parser.add_argument("--host", type=str, default=config["api_host"],
                        help=f"Host to bind (default: {config['api_host']})")
    parser.add_argument("--db",   type=str, default=None,
                        help="Fixed SQLite path (default: one file per device in data_dir)")
    args = parser.parse_args()

    logging.basicConfig(
        level  = logging.INFO,
        format = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    server_app = build_app(PhonescanAPI(db_path=Path(args.db) if args.db else None, config=config))
    print(f"Server running on http://{args.host}:{args.port}")
    uvicorn.run(server_app, host=args.host, port=args.port, log_level="info")
