"""
FastAPI gateway for the Crypto Neural Scanner.

Endpoints:
  GET  /health               — liveness check
  GET  /tickers              — filtered + sorted scanner rows
  GET  /tickers/{symbol}     — one 24h snapshot
  GET  /favorites            — favorite symbols
  POST /favorites/{symbol}   — toggle a favorite
  GET  /selection            — selected symbol + trend analysis
  PUT  /selection            — change the selected symbol
  POST /analysis/refresh     — re-run the trend analysis
  GET  /live, PUT /live      — streaming feed on/off
  GET  /docs                 — Swagger UI (auto-generated)
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from api.schemas import (
    FavoritesResponse, HealthResponse, LiveRequest, LiveResponse,
    RefreshResponse, SelectionResponse, SelectRequest, TickersResponse,
)
from dashboard.service import DashboardService
from libs.domain_models import FilterType
from libs.logger import setup_logger

VERSION = "0.1.0"

for _pkg in ("api", "agents", "dashboard", "libs", "market_data", "scanner"):
    setup_logger(_pkg)


def create_app(service: Optional[DashboardService] = None) -> FastAPI:
    """Build the app. Pass `service` to run against prepared collaborators."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = service or DashboardService()
        app.state.service = svc
        await svc.startup()
        try:
            yield
        finally:
            await svc.shutdown()

    app = FastAPI(
        title="Crypto Neural Scanner",
        description=(
            "Live Binance USDT-M futures scanner with favorites, strong entry/exit "
            "filters and an LLM trend read for the selected pair. No trade execution."
        ),
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _svc(request: Request) -> DashboardService:
        return request.app.state.service

    # ── Routes ───────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health(request: Request):
        """Liveness check — returns service status."""
        svc = _svc(request)
        return HealthResponse(
            status="ok",
            version=VERSION,
            symbols=len(svc.state.tickers),
            live=svc.state.is_live,
            services={
                "gemini": "configured" if os.getenv("GEMINI_API_KEY") else "missing_key",
                "stream": "connected" if svc.reconciler.running else "disconnected",
            },
        )

    @app.get("/tickers", response_model=TickersResponse, tags=["Scanner"])
    async def list_tickers(
        request: Request,
        search: str = Query("", description="Case-insensitive symbol substring"),
        filter: FilterType = Query(FilterType.ALL, description="all | entrada-forte | saida-forte"),
    ):
        """
        Scanner table: favorites first, then 24h quote volume descending.
        'entrada-forte' keeps pairs up more than 2.5%, 'saida-forte' down more than 2.5%.
        """
        svc = _svc(request)
        rows = svc.rows(search=search, filter_type=filter)
        return TickersResponse(count=len(rows), last_update=svc.state.last_update, tickers=rows)

    @app.get("/tickers/{symbol}", tags=["Scanner"])
    async def get_ticker(request: Request, symbol: str):
        snapshot = _svc(request).state.get(symbol.upper())
        if snapshot is None:
            raise HTTPException(status_code=404, detail=f"Unknown symbol: {symbol}")
        return snapshot.model_dump()

    @app.get("/favorites", response_model=FavoritesResponse, tags=["Favorites"])
    async def list_favorites(request: Request):
        return FavoritesResponse(favorites=_svc(request).favorites.symbols)

    @app.post("/favorites/{symbol}", response_model=FavoritesResponse, tags=["Favorites"])
    async def toggle_favorite(request: Request, symbol: str):
        svc = _svc(request)
        is_favorite = svc.toggle_favorite(symbol)
        return FavoritesResponse(
            favorites=svc.favorites.symbols, symbol=symbol.upper(), is_favorite=is_favorite,
        )

    @app.get("/selection", response_model=SelectionResponse, tags=["Analysis"])
    async def get_selection(request: Request):
        return _svc(request).selection_view()

    @app.put("/selection", response_model=SelectionResponse, tags=["Analysis"])
    async def set_selection(request: Request, body: SelectRequest):
        """Select a pair. A new selection clears the previous analysis and starts a fresh one."""
        symbol = body.symbol.strip()
        if not symbol:
            raise HTTPException(status_code=422, detail="Symbol cannot be empty")
        svc = _svc(request)
        svc.select(symbol)
        return svc.selection_view()

    @app.post("/analysis/refresh", response_model=RefreshResponse, tags=["Analysis"])
    async def refresh_analysis(request: Request):
        """Re-run the trend analysis for the selected pair unless one is already running."""
        return RefreshResponse(started=_svc(request).reanalyze())

    @app.get("/live", response_model=LiveResponse, tags=["Live"])
    async def get_live(request: Request):
        svc = _svc(request)
        return LiveResponse(
            enabled=svc.state.is_live, connected=svc.reconciler.running,
            last_update=svc.state.last_update,
        )

    @app.put("/live", response_model=LiveResponse, tags=["Live"])
    async def set_live(request: Request, body: LiveRequest):
        svc = _svc(request)
        await svc.set_live(body.enabled)
        return LiveResponse(
            enabled=svc.state.is_live, connected=svc.reconciler.running,
            last_update=svc.state.last_update,
        )

    return app


app = create_app()


# ── Dev runner ───────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=True,
    )
