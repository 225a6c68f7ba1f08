"""
Streamlit UI for the bulky-waste carry-down quote calculator.

Features:
- Customer inputs: distance, floors/elevator, helpers, weekend, item counts
- Live price breakdown with pricing trace
- Quote text (copyable), PDF and CSV downloads
- Operator settings: business info, rates, item editor, export/import/reset
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from haul_quote.engine import ConfigImportError, DuplicateItemError, LineItem
from haul_quote.engine import rate_config
from haul_quote.engine.coerce import to_non_negative, to_text
from haul_quote.api.state import create_session
from haul_quote.services.quote_export import items_frame, format_amount
from haul_quote.config.settings import get_settings


st.set_page_config(
    page_title="Bulky Waste Carry-Down Quote",
    layout="wide",
)


try:
    settings = get_settings()
    if 'session' not in st.session_state:
        st.session_state.session = create_session()
        st.session_state.cfg_rev = 0
    session = st.session_state.session
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


def bump_config_revision():
    """Force operator widgets to pick up a replaced rate table."""
    st.session_state.cfg_rev += 1


def items_from_frame(df: pd.DataFrame, existing: list[LineItem]) -> list[LineItem]:
    """Turn the edited item grid back into LineItems; blank ids get fresh ones."""
    items = []
    for _, row in df.iterrows():
        label = to_text(row.get('Label')) if pd.notna(row.get('Label')) else ''
        if not label.strip():
            continue
        item_id = row.get('ID')
        if pd.isna(item_id) or not str(item_id).strip():
            item_id = rate_config.new_item_id(existing + items)
        unit_label = row.get('Unit')
        items.append(LineItem(
            id=str(item_id).strip(),
            label=label,
            unit_price=int(to_non_negative(row.get('Unit Price'))),
            unit_label=str(unit_label) if pd.notna(unit_label) and str(unit_label).strip() else 'pc',
        ))
    return items


cfg = session.config
unit = settings.currency_unit
rev = st.session_state.cfg_rev

st.title("Bulky Waste Carry-Down Quote")
st.caption(f"{settings.disclaimer} | {datetime.now().strftime('%Y-%m-%d')}")

col1, col2 = st.columns([1.6, 1.4], gap="large")

# ============================================================================
# CUSTOMER INPUTS
# ============================================================================
with col1:
    st.subheader("Customer Inputs")

    with st.container(border=True):
        distance_km = st.number_input("Distance (round trip, km)", min_value=0.0, value=float(session.request.distance_km), step=1.0, key="distance_km")
        st.caption(f"{cfg.base_distance_km} km included, {format_amount(cfg.extra_per_km, unit)} per extra km")

        c1, c2 = st.columns(2)
        with c1:
            floors = st.number_input("Floors", min_value=0, value=int(session.request.floors), step=1, key="floors")
        with c2:
            has_elevator = st.toggle("Elevator available", value=session.request.has_elevator, key="has_elevator")

        helpers = st.number_input("Helpers", min_value=0, value=int(session.request.helpers), step=1, key="helpers")
        weekend = st.toggle("Weekend / night", value=session.request.weekend, key="weekend")

    st.markdown("##### Items")
    quantities = {}
    grid = st.columns(2)
    for idx, item in enumerate(cfg.items):
        with grid[idx % 2]:
            quantities[item.id] = st.number_input(
                f"{item.label} ({format_amount(item.unit_price, unit)} / {item.unit_label})",
                min_value=0,
                value=int(session.request.quantity(item.id)),
                step=1,
                key=f"qty_{rev}_{item.id}",
            )

    session.update_request(
        distance_km=distance_km,
        floors=floors,
        has_elevator=has_elevator,
        helpers=helpers,
        weekend=weekend,
        quantities=quantities,
    )

# ============================================================================
# PRICE PANEL
# ============================================================================
with col2:
    st.subheader("Estimated Price")
    breakdown = session.breakdown

    with st.container(border=True):
        m1, m2 = st.columns(2)
        m1.metric("Base fee", format_amount(breakdown.base_fee, unit))
        m2.metric("Items", format_amount(breakdown.items_subtotal, unit))
        m3, m4 = st.columns(2)
        m3.metric("Distance", format_amount(breakdown.distance_surcharge, unit))
        m4.metric("Floors (no elevator)", format_amount(breakdown.floor_surcharge, unit))
        m5, m6 = st.columns(2)
        m5.metric("Helpers", format_amount(breakdown.helper_surcharge, unit))
        m6.metric("Weekend/night", f"× {breakdown.weekend_multiplier:.2f}")

        st.divider()
        st.metric("Customer total", format_amount(breakdown.total, unit))

    with st.expander("🔍 Pricing Details"):
        for step in session.trace():
            if step.value:
                st.caption(f"**{step.step}**: {step.description} = `{step.value}`")
            else:
                st.caption(f"**{step.step}**: {step.description}")

    quote_text = session.quote_text()
    st.markdown("##### Quote text")
    st.code(quote_text, language=None)

    b1, b2, b3 = st.columns(3)
    with b1:
        st.download_button(
            "📄 PDF",
            data=session.quote_pdf(),
            file_name="quote.pdf",
            mime="application/pdf",
            use_container_width=True,
        )
    with b2:
        st.download_button(
            "📥 CSV",
            data=items_frame(cfg, session.request).to_csv(index=False),
            file_name="quote_items.csv",
            mime="text/csv",
            use_container_width=True,
        )
    with b3:
        st.download_button(
            "📋 Text",
            data=quote_text,
            file_name="quote.txt",
            mime="text/plain",
            use_container_width=True,
        )

    selected = items_frame(cfg, session.request)
    if not selected.empty:
        st.dataframe(selected, use_container_width=True, hide_index=True)


# ============================================================================
# OPERATOR SETTINGS
# ============================================================================
st.divider()
with st.expander("⚙️ Operator Settings", expanded=False):
    st.markdown("##### Business info")
    i1, i2, i3 = st.columns(3)
    biz_name = i1.text_input("Business name", value=cfg.biz_name, key=f"biz_name_{rev}")
    biz_phone = i2.text_input("Phone", value=cfg.biz_phone, key=f"biz_phone_{rev}")
    biz_email = i3.text_input("Email", value=cfg.biz_email, key=f"biz_email_{rev}")

    st.markdown("##### Rates")
    r1, r2, r3 = st.columns(3)
    rates = {
        'base_fee': r1.number_input("Base fee", min_value=0.0, value=float(cfg.base_fee), step=1000.0, key=f"base_fee_{rev}"),
        'base_distance_km': r2.number_input("Included distance (km)", min_value=0.0, value=float(cfg.base_distance_km), step=1.0, key=f"base_km_{rev}"),
        'extra_per_km': r3.number_input("Per extra km", min_value=0.0, value=float(cfg.extra_per_km), step=100.0, key=f"extra_km_{rev}"),
        'no_elevator_per_floor': r1.number_input("Per floor without elevator", min_value=0.0, value=float(cfg.no_elevator_per_floor), step=1000.0, key=f"floor_{rev}"),
        'weekend_rate': r2.number_input("Weekend/night rate (e.g. 0.2)", min_value=0.0, value=float(cfg.weekend_rate), step=0.05, key=f"weekend_{rev}"),
        'helper_fee': r3.number_input("Fee per helper", min_value=0.0, value=float(cfg.helper_fee), step=1000.0, key=f"helper_{rev}"),
    }

    changed = {
        name: value for name, value in rates.items()
        if to_non_negative(value) != getattr(cfg, name)
    }
    for name, value in (('biz_name', biz_name), ('biz_phone', biz_phone), ('biz_email', biz_email)):
        if value != getattr(cfg, name):
            changed[name] = value
    if changed:
        session.update_config(**changed)
        st.rerun()

    st.markdown("##### Item prices")
    editor_df = pd.DataFrame([{
        'ID': item.id,
        'Label': item.label,
        'Unit': item.unit_label,
        'Unit Price': item.unit_price,
    } for item in cfg.items], columns=['ID', 'Label', 'Unit', 'Unit Price'])

    edited_df = st.data_editor(
        editor_df,
        use_container_width=True,
        num_rows="dynamic",
        column_config={
            "ID": st.column_config.TextColumn("ID", disabled=True),
            "Label": st.column_config.TextColumn("Label"),
            "Unit": st.column_config.TextColumn("Unit"),
            "Unit Price": st.column_config.NumberColumn("Unit Price", min_value=0, step=1000),
        },
        hide_index=True,
        key=f"items_editor_{rev}",
    )

    if st.button("💾 Apply item prices", type="primary"):
        try:
            session.set_items(items_from_frame(edited_df, cfg.items))
            bump_config_revision()
            st.rerun()
        except DuplicateItemError as e:
            st.error(str(e))

    st.markdown("##### Export / import")
    e1, e2 = st.columns(2)
    with e1:
        st.caption("Copy the rate table below or download it.")
        export_text = session.export_config()
        st.code(export_text, language="json")
        st.download_button("📤 Export settings", data=export_text, file_name="haul_cfg.json", mime="application/json")
    with e2:
        import_text = st.text_area("Paste settings JSON", height=200, key=f"import_{rev}")
        if st.button("📥 Import settings"):
            try:
                session.import_config(import_text)
                bump_config_revision()
                st.rerun()
            except ConfigImportError as e:
                st.error(f"Import failed: {e}")

        if st.button("↩️ Restore defaults"):
            session.reset_config()
            bump_config_revision()
            st.rerun()
