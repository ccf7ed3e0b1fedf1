#!/usr/bin/env python3
"""
HTTP API

FastAPI application exposing the raw datasets and every report. Report
endpoints live under ``/api/mcp/<domain>/<report>`` and answer with
``{"success": true, "tool": "<report name>", ...}``; failures answer with
``{"success": false, "error": "..."}``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..analysis import remittance, rewards, spending
from ..cache import TieredCache
from ..core.config import Config, get_config
from ..core.json_utils import to_jsonable
from ..core.periods import MAX_YEAR, MIN_YEAR, month_filter_period, resolve_period
from ..data.filters import select_filters
from ..data.service import DataService, Dataset, UnknownDatasetError
from ..travel import analytics as travel
from ..travel.models import TripNotFoundError
from ..workbook.loader import WorkbookError

logger = logging.getLogger(__name__)


def tool_response(tool: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Wrap a report in the success envelope."""
    return {"success": True, "tool": tool, **to_jsonable(payload)}


def get_service(request: Request) -> DataService:
    """Dependency returning the application's dataset service."""
    return request.app.state.service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app(config: Config | None = None, service: DataService | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Configuration (default: global configuration)
        service: Prebuilt dataset service; when omitted one is created with
                 the configured cache, which is opened on startup and closed
                 on shutdown
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cache = None
        if service is None:
            cache = TieredCache.from_config(config.cache)
            cache.open()
            app.state.service = DataService(config, cache)
        else:
            app.state.service = service
        logger.info("API started")
        yield
        if cache is not None:
            cache.close()

    app = FastAPI(
        title="Spendsight API",
        description="Spending, travel, remittance and rewards analytics over banking exports",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(TripNotFoundError)
    async def trip_not_found(request: Request, exc: TripNotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(UnknownDatasetError)
    async def unknown_dataset(request: Request, exc: UnknownDatasetError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(WorkbookError)
    async def workbook_error(request: Request, exc: WorkbookError) -> JSONResponse:
        logger.error("Workbook read failed: %s", exc)
        return _error(500, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}" for error in exc.errors()
        )
        return _error(400, problems)

    # ---- Housekeeping ----

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "version": __version__, "timestamp": datetime.now().isoformat()}

    @app.get("/api/sheets")
    def sheets(service: DataService = Depends(get_service)) -> dict[str, Any]:
        return {"success": True, "workbooks": service.sheet_info()}

    @app.get("/api/period")
    def period(token: str | None = None) -> dict[str, Any]:
        return {"success": True, "period": resolve_period(token).to_dict()}

    @app.post("/api/cache/clear")
    def clear_cache(service: DataService = Depends(get_service)) -> dict[str, Any]:
        service.refresh()
        return {"success": True, "message": "Cache cleared"}

    # ---- Spending ----

    @app.get("/api/mcp/spend/summary")
    def spend_summary(period: str | None = None, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = spending.spend_summary(
            service.rows(Dataset.TRANSACTIONS), service.rows(Dataset.TRAVELBUDDY), resolve_period(period)
        )
        return tool_response("spend_summary", result)

    @app.get("/api/mcp/spend/by-category")
    def spend_by_category(period: str | None = None, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = spending.spend_by_category(service.rows(Dataset.TRANSACTIONS), resolve_period(period))
        return tool_response("spend_by_category", result)

    @app.get("/api/mcp/spend/top-merchants")
    def top_merchants(
        period: str | None = None,
        limit: int = Query(10, ge=1),
        service: DataService = Depends(get_service),
    ) -> dict[str, Any]:
        result = spending.top_merchants(service.rows(Dataset.TRANSACTIONS), resolve_period(period), limit=limit)
        return tool_response("top_merchants", result)

    @app.get("/api/mcp/spend/search")
    def search_transactions(
        query: str,
        period: str | None = None,
        limit: int = Query(5, ge=1),
        offset: int = Query(0, ge=0),
        service: DataService = Depends(get_service),
    ) -> dict[str, Any]:
        result = spending.search_transactions(
            service.rows(Dataset.TRANSACTIONS), query, resolve_period(period), limit=limit, offset=offset
        )
        return tool_response("search_transactions", result)

    @app.get("/api/mcp/spend/daily")
    def daily_spend(period: str = "week", service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = spending.daily_spend(service.rows(Dataset.TRANSACTIONS), resolve_period(period))
        return tool_response("daily_spend", result)

    @app.get("/api/mcp/spend/unusual")
    def unusual_spend(period: str | None = None, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = spending.unusual_spend(service.rows(Dataset.TRANSACTIONS), resolve_period(period))
        return tool_response("unusual_spend", result)

    # ---- Travel ----

    @app.get("/api/mcp/travel/trips")
    def trips(period: str | None = None, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = travel.list_trips(
            service.rows(Dataset.TRAVELBUDDY), resolve_period(period), settings=service.config.travel
        )
        return tool_response("travel_trips", result)

    @app.get("/api/mcp/travel/trip-spend")
    def trip_spend(trip_id: str, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = travel.trip_spend(service.rows(Dataset.TRAVELBUDDY), trip_id, settings=service.config.travel)
        return tool_response("trip_spend", result)

    @app.get("/api/mcp/travel/load-vs-spend")
    def load_vs_spend(trip_id: str, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = travel.load_vs_spend(service.rows(Dataset.TRAVELBUDDY), trip_id, settings=service.config.travel)
        return tool_response("load_vs_spend", result)

    @app.get("/api/mcp/travel/compare")
    def compare_trips(
        trip_id_1: str, trip_id_2: str, service: DataService = Depends(get_service)
    ) -> dict[str, Any]:
        result = travel.compare_trips(
            service.rows(Dataset.TRAVELBUDDY), trip_id_1, trip_id_2, settings=service.config.travel
        )
        return tool_response("compare_trips", result)

    @app.get("/api/mcp/travel/currency-mix")
    def currency_mix(trip_id: str, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = travel.currency_mix(service.rows(Dataset.TRAVELBUDDY), trip_id, settings=service.config.travel)
        return tool_response("currency_mix", result)

    # ---- Remittance ----

    @app.get("/api/mcp/remittance/summary")
    def remittance_summary(
        year: int | None = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
        month: int | None = Query(None, ge=1, le=12),
        service: DataService = Depends(get_service),
    ) -> dict[str, Any]:
        result = remittance.remittance_summary(service.rows(Dataset.REMITTANCE), year=year, month=month)
        return tool_response("remittance_summary", result)

    @app.get("/api/mcp/remittance/recipient")
    def recipient_stats(recipient_name: str, service: DataService = Depends(get_service)) -> dict[str, Any]:
        result = remittance.recipient_stats(service.rows(Dataset.REMITTANCE), recipient_name)
        return tool_response("recipient_stats", result)

    @app.get("/api/mcp/remittance/trend")
    def remittance_trend(
        years: int = Query(3, ge=1, le=remittance.MAX_TREND_YEARS), service: DataService = Depends(get_service)
    ) -> dict[str, Any]:
        result = remittance.remittance_trend(service.rows(Dataset.REMITTANCE), years=years)
        return tool_response("remittance_trend", result)

    @app.get("/api/mcp/remittance/search")
    def search_remittances(
        query: str,
        limit: int = Query(5, ge=1),
        offset: int = Query(0, ge=0),
        service: DataService = Depends(get_service),
    ) -> dict[str, Any]:
        result = remittance.search_remittances(service.rows(Dataset.REMITTANCE), query, limit=limit, offset=offset)
        return tool_response("search_remittances", result)

    @app.get("/api/mcp/remittance/fx-rate")
    def fx_rate(currency: str) -> dict[str, Any]:
        return tool_response("fx_rate", remittance.fx_rate(currency))

    # ---- Rewards ----

    @app.get("/api/mcp/rewards/summary")
    def rewards_summary(
        type: str | None = None, period: str | None = None, service: DataService = Depends(get_service)
    ) -> dict[str, Any]:
        result = rewards.rewards_summary(service.sheets(Dataset.REWARDS), type, resolve_period(period))
        return tool_response("rewards_summary", result)

    @app.get("/api/mcp/rewards/activity")
    def rewards_activity(
        type: str | None = None, period: str | None = None, service: DataService = Depends(get_service)
    ) -> dict[str, Any]:
        result = rewards.rewards_activity(service.sheets(Dataset.REWARDS), type, resolve_period(period))
        return tool_response("rewards_activity", result)

    @app.get("/api/mcp/rewards/best-strategy")
    def best_strategy(category: str | None = None) -> dict[str, Any]:
        return tool_response("rewards_strategy", rewards.best_strategy(category))

    # ---- Raw datasets ----

    @app.get("/api/all")
    def all_datasets(service: DataService = Depends(get_service)) -> dict[str, Any]:
        data = service.all_datasets()
        return {
            "success": True,
            "datasets": list(data),
            "total_records": sum(len(rows) for sheets in data.values() for rows in sheets.values()),
            "data": to_jsonable(data),
        }

    @app.get("/api/{dataset}")
    def dataset_rows(
        request: Request,
        dataset: str,
        month: int | None = Query(None, ge=1, le=12),
        year: int | None = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
        all: bool = False,
        sheet: str | None = None,
        type: str | None = None,
        service: DataService = Depends(get_service),
    ) -> dict[str, Any]:
        """Rows of one dataset; ``type`` is an alias of ``sheet``, other known fields filter rows."""
        selected = month_filter_period(month, year, all)
        filters = select_filters(Dataset.parse(dataset), request.query_params)
        listing = service.listing(dataset, selected, sheet=sheet or type, filters=filters)
        return {
            "success": True,
            "month": None if all else selected.start.month,
            "year": None if all else selected.start.year,
            **to_jsonable(listing),
        }

    return app
