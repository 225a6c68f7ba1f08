import logging
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel

from ..engine import price, reconcile, ConfigImportError, DuplicateItemError
from ..engine import rate_config
from ..engine.coerce import to_quantity
from ..engine.models import QuoteRequest
from ..services.quote_session import QuoteSession
from .state import get_session

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Haul Quote API",
    description="Pricing and quote export for the bulky-waste carry-down service",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models for API
class ItemModel(BaseModel):
    """One rate table item."""
    id: str
    label: str
    unitPrice: float = 0
    unitLabel: str = "pc"


class ConfigUpdate(BaseModel):
    """Partial update of rates and business info."""
    bizName: Optional[str] = None
    bizPhone: Optional[str] = None
    bizEmail: Optional[str] = None
    baseFee: Optional[float] = None
    baseDistanceKm: Optional[float] = None
    extraPerKm: Optional[float] = None
    noElevatorPerFloor: Optional[float] = None
    weekendRateMultiplierAdd: Optional[float] = None
    helperFee: Optional[float] = None


class ImportRequest(BaseModel):
    text: str


class QuoteInput(BaseModel):
    """Customer inputs; omitted fields keep their current value."""
    distanceKm: Optional[float] = None
    floors: Optional[float] = None
    hasElevator: Optional[bool] = None
    helpers: Optional[float] = None
    weekend: Optional[bool] = None
    quantities: Optional[Dict[str, float]] = None


# API field → session field
REQUEST_FIELDS = {
    'distanceKm': 'distance_km',
    'floors': 'floors',
    'hasElevator': 'has_elevator',
    'helpers': 'helpers',
    'weekend': 'weekend',
    'quantities': 'quantities',
}

CONFIG_FIELDS = dict(rate_config.TEXT_FIELDS)
CONFIG_FIELDS.update({key: attr for key, (attr, _) in rate_config.NUMERIC_FIELDS.items()})


def _request_dict(req: QuoteRequest) -> dict:
    return {
        "distanceKm": req.distance_km,
        "floors": req.floors,
        "hasElevator": req.has_elevator,
        "helpers": req.helpers,
        "weekend": req.weekend,
        "quantities": req.quantities,
    }


def _quote_payload(session: QuoteSession) -> dict:
    return {
        "request": _request_dict(session.request),
        "breakdown": session.breakdown.to_dict(),
        "trace": [step.__dict__ for step in session.trace()],
    }


@app.get("/")
async def root():
    return {"status": "online", "message": "Haul Quote API Active"}


@app.get("/config")
async def get_config(session: QuoteSession = Depends(get_session)):
    return rate_config.to_dict(session.config)


@app.put("/config")
async def replace_config(body: dict, session: QuoteSession = Depends(get_session)):
    """Replace the whole rate table with a JSON object in the export format."""
    try:
        new_cfg = rate_config.from_dict(body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    session.replace_config(new_cfg)
    return rate_config.to_dict(session.config)


@app.patch("/config")
async def update_config(body: ConfigUpdate, session: QuoteSession = Depends(get_session)):
    changes = {
        CONFIG_FIELDS[key]: value
        for key, value in body.model_dump(exclude_none=True).items()
    }
    session.update_config(**changes)
    return rate_config.to_dict(session.config)


@app.put("/config/items")
async def set_items(items: List[ItemModel], session: QuoteSession = Depends(get_session)):
    new_items = [rate_config.item_from_dict(item.model_dump()) for item in items]
    try:
        session.set_items(new_items)
    except DuplicateItemError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return rate_config.to_dict(session.config)


@app.get("/config/export")
async def export_config(session: QuoteSession = Depends(get_session)):
    return {"text": session.export_config()}


@app.post("/config/import")
async def import_config(body: ImportRequest, session: QuoteSession = Depends(get_session)):
    try:
        session.import_config(body.text)
    except ConfigImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return rate_config.to_dict(session.config)


@app.post("/config/reset")
async def reset_config(session: QuoteSession = Depends(get_session)):
    session.reset_config()
    return rate_config.to_dict(session.config)


@app.get("/quote")
async def get_quote(session: QuoteSession = Depends(get_session)):
    return _quote_payload(session)


@app.put("/quote")
async def update_quote(body: QuoteInput, session: QuoteSession = Depends(get_session)):
    changes = {
        REQUEST_FIELDS[key]: value
        for key, value in body.model_dump(exclude_none=True).items()
    }
    session.update_request(**changes)
    return _quote_payload(session)


@app.post("/quote/price")
async def price_quote(body: QuoteInput, session: QuoteSession = Depends(get_session)):
    """Price an ad-hoc request against the current rate table without touching the session."""
    defaults = QuoteRequest()
    req = QuoteRequest(
        distance_km=body.distanceKm if body.distanceKm is not None else defaults.distance_km,
        floors=body.floors if body.floors is not None else defaults.floors,
        has_elevator=body.hasElevator if body.hasElevator is not None else defaults.has_elevator,
        helpers=body.helpers if body.helpers is not None else defaults.helpers,
        weekend=body.weekend if body.weekend is not None else defaults.weekend,
        quantities={item_id: to_quantity(qty) for item_id, qty in (body.quantities or {}).items()},
    )
    req = reconcile(req, session.config.items)
    return {
        "request": _request_dict(req),
        "breakdown": price(session.config, req).to_dict(),
    }


@app.get("/quote/text", response_class=PlainTextResponse)
async def quote_text(session: QuoteSession = Depends(get_session)):
    return session.quote_text()


@app.get("/quote/pdf")
async def quote_pdf(session: QuoteSession = Depends(get_session)):
    try:
        pdf_bytes = session.quote_pdf()
    except Exception as e:
        logger.exception("PDF generation failed")
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="quote.pdf"'},
    )
