import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Query

from stockcast.schemas import (
    PredictRequest, PredictionResponse,
    StockInfoResponse, MarketOverviewResponse, ComparisonResponse,
    SeriesUploadResponse
)
from stockcast.config.settings import settings
from stockcast.services import (
    ForecasterService, SeriesUploadService, StockDataRepository, get_repository,
    InvalidSeriesError, MarketDataError, SymbolNotFoundError
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============== Health ==============

@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


# ============== Market Data ==============

@router.get("/symbols", response_model=List[str])
async def list_symbols(repository: StockDataRepository = Depends(get_repository)):
    """List all symbols with bundled history."""
    try:
        return repository.list_symbols()
    except MarketDataError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/stocks/{symbol}", response_model=StockInfoResponse)
async def get_stock(symbol: str, repository: StockDataRepository = Depends(get_repository)):
    """Get a stock's snapshot and price/volume history."""
    try:
        return repository.get_stock(symbol)
    except SymbolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MarketDataError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/market-overview", response_model=MarketOverviewResponse)
async def market_overview(repository: StockDataRepository = Depends(get_repository)):
    """Current price, daily change and volume for every symbol."""
    try:
        return repository.market_overview()
    except MarketDataError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/compare", response_model=ComparisonResponse)
async def compare_stocks(
    symbols: Optional[str] = Query(None, description="Comma separated, e.g. AAPL,MSFT"),
    repository: StockDataRepository = Depends(get_repository)
):
    """Percent change from first day for several symbols."""
    requested = symbols.split(",") if symbols else None
    try:
        return repository.compare(requested)
    except SymbolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MarketDataError as e:
        raise HTTPException(status_code=503, detail=str(e))


# ============== Predictions ==============

@router.get("/predict/{symbol}", response_model=PredictionResponse)
async def predict_symbol(
    symbol: str,
    period: Optional[int] = Query(None, ge=1, le=250, description="Moving average period"),
    repository: StockDataRepository = Depends(get_repository)
):
    """
    Run all four prediction methods over a stored symbol's history.
    """
    service = ForecasterService(repository)
    try:
        return service.forecast_symbol(symbol, period=period)
    except SymbolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MarketDataError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except InvalidSeriesError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/predict", response_model=PredictionResponse)
async def predict(
    request: PredictRequest,
    repository: StockDataRepository = Depends(get_repository)
):
    """
    Run all four prediction methods.

    An explicit series in the body wins; otherwise the symbol (or the
    default symbol) is looked up in the market data store.
    """
    service = ForecasterService(repository)
    try:
        if request.series:
            return service.forecast_series(
                request.series,
                symbol=request.symbol,
                period=request.period
            )
        return service.forecast_symbol(request.symbol or settings.DEFAULT_SYMBOL, period=request.period)
    except SymbolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MarketDataError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except InvalidSeriesError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/upload-series", response_model=SeriesUploadResponse)
async def upload_series(
    file: UploadFile = File(...),
    period: Optional[int] = Query(None, ge=1, le=250),
    repository: StockDataRepository = Depends(get_repository)
):
    """
    Upload a CSV price series and predict from it.

    Required columns: date, price, volume (common aliases such as
    close/adj_close, vol/shares and timestamp are detected).
    """
    if not file.filename or not file.filename.lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="File must be a CSV")

    content = await file.read()
    try:
        content_str = content.decode('utf-8-sig')
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded")

    parsed = SeriesUploadService().parse_csv(content_str)
    prediction = None
    if parsed.success:
        prediction = ForecasterService(repository).forecast_series(
            parsed.observations,
            period=period
        )
    else:
        logger.info(f"Series upload rejected: {parsed.errors[:1]}")

    return SeriesUploadResponse(
        success=parsed.success,
        rows_processed=parsed.rows_processed,
        rows_failed=parsed.rows_failed,
        errors=parsed.errors,
        column_mapping=parsed.column_mapping,
        prediction=prediction
    )
