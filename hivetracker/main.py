import logging
import time

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from hivetracker import llm, store
from hivetracker.analysis import (
    MIN_ENTRIES_FOR_ANALYSIS,
    available_engines,
    confidence_score,
    resolve_engine_name,
    run_analysis,
)
from hivetracker.analysis.local import analyze_entries
from hivetracker.config import settings
from hivetracker.export import (
    ExportError,
    ImportFormatError,
    backup_filename,
    csv_filename,
    export_csv,
    export_json,
    parse_backup,
)
from hivetracker.models import (
    BODY_AREAS,
    COMMON_TRIGGERS,
    AnalysisRequest,
    AnalysisResponse,
    Entry,
    EntryIn,
    ImportResponse,
    SetEngineRequest,
)
from hivetracker.report import DoctorReport, build_report, location_breakdown, severity_timeline, summarize

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def _attachment(content: str, filename: str, media_type: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


app = FastAPI(title="hivetracker", version="0.1.0")


@app.exception_handler(store.StoreError)
async def store_error_handler(request: Request, exc: store.StoreError):
    log.error("Entry store unreadable (%s %s): %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "entries": len(store.list_entries()),
        "llm_configured": llm.is_configured(),
    }


# ── Entries ──


@app.get("/api/entries", response_model=list[Entry])
async def api_list_entries():
    return store.list_entries()


@app.post("/api/entries", response_model=Entry, status_code=201)
async def api_add_entry(req: EntryIn):
    entry = Entry.model_validate(req.model_dump())
    try:
        return store.add_entry(entry)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@app.get("/api/entries/{entry_id}", response_model=Entry)
async def api_get_entry(entry_id: str):
    entry = store.get_entry(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


@app.delete("/api/entries/{entry_id}")
async def api_delete_entry(entry_id: str):
    if not store.delete_entry(entry_id):
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"ok": True}


@app.delete("/api/entries")
async def api_clear_entries():
    return {"removed": store.clear_entries()}


@app.get("/api/body-areas")
async def api_body_areas():
    return {"body_areas": BODY_AREAS, "common_triggers": COMMON_TRIGGERS}


# ── Analysis ──


@app.post("/api/analysis", response_model=AnalysisResponse)
async def api_analysis(req: AnalysisRequest | None = None):
    entries = store.list_entries()
    t0 = time.monotonic()
    try:
        result, used = await run_analysis(entries, engine=req.engine if req else None)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return AnalysisResponse(
        result=result,
        engine=used,
        confidence=confidence_score(len(entries)),
        ready=len(entries) >= MIN_ENTRIES_FOR_ANALYSIS,
        entry_count=len(entries),
        elapsed_s=round(time.monotonic() - t0, 2),
    )


@app.get("/api/stats")
async def api_stats():
    entries = store.list_entries()
    return {
        "summary": summarize(entries).model_dump(by_alias=True),
        "timeline": [p.model_dump(mode="json") for p in severity_timeline(entries)],
        "locations": [lc.model_dump() for lc in location_breakdown(entries)],
    }


@app.get("/api/report", response_model=DoctorReport)
async def api_report(analyze: bool = False):
    entries = store.list_entries()
    analysis = analyze_entries(entries) if analyze and entries else None
    return build_report(entries, analysis)


# ── Export / import ──


@app.get("/api/export/json")
async def api_export_json():
    return _attachment(export_json(store.list_entries()), backup_filename(), "application/json")


@app.get("/api/export/csv")
async def api_export_csv():
    try:
        content = export_csv(store.list_entries())
    except ExportError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _attachment(content, csv_filename(), "text/csv; charset=utf-8")


@app.post("/api/import", response_model=ImportResponse)
async def api_import(request: Request):
    try:
        entries = parse_backup(await request.body())
    except ImportFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    imported = store.import_entries(entries)
    return ImportResponse(imported=imported, total=len(store.list_entries()))


# ── Settings ──


@app.get("/api/settings")
async def get_settings():
    return {
        "engine": settings.analysis.engine,
        "resolved_engine": resolve_engine_name(),
        "available_engines": ["auto", *available_engines()],
        "llm_configured": llm.is_configured(),
        "deployment": settings.azure_openai.deployment,
    }


@app.put("/api/settings/engine")
async def set_engine(req: SetEngineRequest):
    try:
        resolve_engine_name(req.engine)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    settings.analysis.engine = req.engine.lower()
    log.info("Default analysis engine changed to: %s", settings.analysis.engine)
    return {"engine": settings.analysis.engine}
