"""
Quote export - plain-text summary, PDF document and item table.

All three consume an already computed QuoteBreakdown together with the
request and rate table it was computed from; nothing here prices anything.
Uses fpdf2 (pure Python, no system dependencies) for the PDF.
"""
from datetime import datetime
from typing import Optional

import pandas as pd
from fpdf import FPDF

from ..config.settings import get_settings, Settings
from ..engine.coerce import to_number, to_quantity
from ..engine.models import RateConfig, QuoteRequest, QuoteBreakdown


def format_amount(amount, unit: str = "won") -> str:
    """Format a number as `1,234,567 won`."""
    return f"{to_number(amount):,} {unit}"


def _yes_no(flag: bool, yes: str = "yes", no: str = "no") -> str:
    return yes if flag else no


def _safe(text: str) -> str:
    """Replace characters the built-in PDF fonts (latin-1) cannot render."""
    if not text:
        return ""
    return (
        text
        .replace("•", "-")
        .replace("—", " - ")
        .replace("–", "-")
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


def quoted_items(cfg: RateConfig, req: QuoteRequest) -> list[tuple]:
    """(item, quantity) pairs in display order, zero quantities left out."""
    pairs = []
    for item in cfg.items:
        qty = to_quantity(req.quantities.get(item.id, 0))
        if qty > 0:
            pairs.append((item, qty))
    return pairs


def _input_lines(req: QuoteRequest) -> list[tuple[str, str]]:
    return [
        ("Distance (round trip)", f"{to_number(req.distance_km)}km"),
        ("Floors", f"{to_number(req.floors)} / elevator: {_yes_no(req.has_elevator)}"),
        ("Helpers", f"{to_number(req.helpers)}"),
        ("Weekend/night", _yes_no(req.weekend, "applied", "not applied")),
    ]


def build_quote_text(cfg: RateConfig, req: QuoteRequest, breakdown: QuoteBreakdown,
                     now: Optional[datetime] = None, settings: Optional[Settings] = None) -> str:
    """
    Multi-line quote summary for copying or sharing.

    Business lines appear only when filled in. Items with a zero quantity
    are left out; the total and the sticker-fee disclaimer always close it.
    """
    settings = settings or get_settings()
    now = now or datetime.now()

    line = lambda k, v: f"{k}: {v}"

    lines = [
        f"[{settings.quote_title}]",
        line("Date", now.strftime("%Y-%m-%d %H:%M")),
    ]
    if cfg.biz_name:
        lines.append(line("Business", cfg.biz_name))
    if cfg.biz_phone:
        lines.append(line("Phone", cfg.biz_phone))
    if cfg.biz_email:
        lines.append(line("Email", cfg.biz_email))

    lines.append("")
    lines.extend(line(k, v) for k, v in _input_lines(req))
    lines.append("")

    items = quoted_items(cfg, req)
    if items:
        lines.append("Items:")
        lines.extend(f"{item.label} {qty} {item.unit_label}" for item, qty in items)
    else:
        lines.append("Items: none")

    lines.append("")
    lines.append(line("Estimated total", format_amount(breakdown.total, settings.currency_unit)))
    lines.append(f"({settings.disclaimer})")
    return "\n".join(lines)


def items_frame(cfg: RateConfig, req: QuoteRequest, include_zero: bool = False) -> pd.DataFrame:
    """Item table for display and CSV download."""
    rows = []
    for item in cfg.items:
        qty = to_quantity(req.quantities.get(item.id, 0))
        if qty == 0 and not include_zero:
            continue
        rows.append({
            'Item': item.label,
            'Unit': item.unit_label,
            'Unit Price': item.unit_price,
            'Quantity': qty,
            'Amount': qty * item.unit_price,
        })
    return pd.DataFrame(rows, columns=['Item', 'Unit', 'Unit Price', 'Quantity', 'Amount'])


class QuotePDF(FPDF):
    """Quote document with the business name in the footer."""

    def __init__(self, biz_line: str = ""):
        super().__init__()
        self.biz_line = biz_line
        self.set_auto_page_break(auto=True, margin=20)

    def footer(self):
        if not self.biz_line:
            return
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.cell(0, 10, _safe(self.biz_line), align="C")


def generate_quote_pdf(cfg: RateConfig, req: QuoteRequest, breakdown: QuoteBreakdown,
                       now: Optional[datetime] = None, settings: Optional[Settings] = None) -> bytes:
    """Render the quote as a one-page PDF and return its bytes."""
    settings = settings or get_settings()
    now = now or datetime.now()
    unit = settings.currency_unit

    biz_line = "  -  ".join(part for part in (cfg.biz_name, cfg.biz_phone, cfg.biz_email) if part)

    pdf = QuotePDF(biz_line=biz_line)
    pdf.add_page()

    def write(text: str, height: float = 7):
        pdf.cell(0, height, _safe(text), new_x="LMARGIN", new_y="NEXT")

    pdf.set_font("Helvetica", "B", 16)
    write(settings.quote_title, 10)
    pdf.set_font("Helvetica", "", 11)
    if biz_line:
        write(biz_line, 8)
    write(f"Issued: {now.strftime('%Y-%m-%d %H:%M')}", 10)

    for label, value in _input_lines(req):
        write(f"{label}: {value}")
    pdf.ln(3)

    pdf.set_font("Helvetica", "B", 11)
    write("Items")
    pdf.set_font("Helvetica", "", 11)
    items = quoted_items(cfg, req)
    for item, qty in items:
        write(f"- {item.label}: {qty} {item.unit_label}  ({format_amount(qty * item.unit_price, unit)})", 6)
    if not items:
        write("- none", 6)
    pdf.ln(4)

    charges = [
        ("Base fee", breakdown.base_fee),
        ("Items", breakdown.items_subtotal),
        ("Distance surcharge", breakdown.distance_surcharge),
        ("Floor surcharge (no elevator)", breakdown.floor_surcharge),
        ("Helpers", breakdown.helper_surcharge),
    ]
    for label, amount in charges:
        write(f"{label}: {format_amount(amount, unit)}", 6)
    if breakdown.weekend_multiplier != 1:
        write(f"Weekend/night multiplier: x {breakdown.weekend_multiplier:.2f}", 6)
    pdf.ln(2)

    pdf.set_font("Helvetica", "B", 12)
    write(f"Estimated total: {format_amount(breakdown.total, unit)}", 8)
    pdf.set_font("Helvetica", "", 10)
    write(settings.disclaimer)

    return bytes(pdf.output())
