from __future__ import annotations

import time

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import RISE_MAX, RISE_MIN, create_config_manager
from .dashboard import DashboardService
from .errors import NetworkError, ValidationError
from .models import (
    AnomalySection,
    ApiErrorPayload,
    CrowdingRequest,
    CrowdingRequestState,
    DashboardView,
    IndexSection,
    IndustrySelection,
)

config_manager = create_config_manager()
service = DashboardService.from_config(config_manager.get_config())

app = FastAPI(title="Anomaly board API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service() -> DashboardService:
    return service


def error_response(
    status_code: int,
    code: str,
    message: str,
    *,
    degraded: bool | None = None,
    degraded_reason: str | None = None,
) -> JSONResponse:
    payload = ApiErrorPayload(
        code=code,
        message=message,
        degraded=degraded,
        degraded_reason=degraded_reason,
        trace_id=str(time.time_ns()),
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    detail = exc.errors()[0].get("msg") if exc.errors() else "invalid request"
    return error_response(422, "VALIDATION_ERROR", str(detail))


@app.exception_handler(ValidationError)
def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
    return error_response(400, exc.code, exc.message)


@app.exception_handler(NetworkError)
def handle_network_error(_: Request, exc: NetworkError) -> JSONResponse:
    return error_response(502, exc.code, exc.message, degraded=True, degraded_reason="upstream")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/dashboard", response_model=DashboardView)
async def get_dashboard(
    refresh: bool = Query(default=False),
    svc: DashboardService = Depends(get_service),
) -> DashboardView:
    if refresh:
        return await svc.refresh()
    return svc.view()


@app.get("/api/index", response_model=IndexSection)
async def get_index(svc: DashboardService = Depends(get_service)) -> IndexSection:
    return await svc.load_index()


@app.get("/api/anomalies", response_model=AnomalySection)
async def get_anomalies(
    rise: int | None = Query(default=None, ge=RISE_MIN, le=RISE_MAX),
    svc: DashboardService = Depends(get_service),
) -> AnomalySection:
    return await svc.set_rise(svc.rise if rise is None else rise)


@app.get("/api/industries")
async def get_industries(svc: DashboardService = Depends(get_service)) -> dict[str, list[str]]:
    labels = await svc.load_industry_catalog()
    return {"options": labels, "selected": list(svc.selected_industries)}


@app.put("/api/industries/selection", response_model=IndustrySelection)
def put_industry_selection(
    payload: IndustrySelection,
    svc: DashboardService = Depends(get_service),
) -> IndustrySelection:
    return IndustrySelection(industries=svc.select_industries(payload.industries))


@app.post("/api/crowding", response_model=CrowdingRequestState)
async def post_crowding(
    payload: CrowdingRequest,
    svc: DashboardService = Depends(get_service),
) -> CrowdingRequestState:
    task = svc.trigger_crowding(payload.date, payload.industries)
    if payload.wait:
        await task
    return svc.crowding_state(payload.date)


@app.get("/api/crowding/{date}", response_model=CrowdingRequestState)
def get_crowding(date: str, svc: DashboardService = Depends(get_service)) -> CrowdingRequestState:
    return svc.crowding_state(date)
