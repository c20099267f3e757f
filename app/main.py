"""
Streamlit Frontend for FlowTrack

A deliberately thin page over LedgerFlow. All rules (required fields,
ordering, persistence) live in the ledger; this module only collects
form input and renders what comes back.
"""

import asyncio
from datetime import date
from decimal import Decimal, InvalidOperation

import streamlit as st

from flowtrack.config import get_settings, validate_all_settings
from flowtrack.models.transaction import (
    ALL_TYPES,
    PaymentDirection,
    StockDirection,
    SubmissionResult,
    TransactionType,
)
from flowtrack.orchestrator import LedgerFlow, create_app_components


st.set_page_config(
    page_title="FlowTrack",
    page_icon="📦",
    layout="centered",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_flow() -> LedgerFlow:
    """Get or create the ledger flow (cached for the session)."""
    return run_async(create_app_components())


def main():
    """Main application entry point."""
    flow = get_flow()

    st.sidebar.title("📦 FlowTrack")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📥 Stock Movement", "💵 Payment", "📜 History", "⚙️ Settings"],
        index=0,
    )

    if flow.store.has_unsaved_changes:
        st.sidebar.warning("Changes may not be saved.")

    if page == "📥 Stock Movement":
        render_stock_page(flow)
    elif page == "💵 Payment":
        render_payment_page(flow)
    elif page == "📜 History":
        render_history_page(flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def show_submission(flow: LedgerFlow, result: SubmissionResult):
    if result.success and result.saved:
        st.success(result.message)
    elif result.success:
        st.warning(result.message)
    else:
        st.error(result.message)
    if result.validation.issues:
        st.text(flow.summarize_validation(result))


def render_stock_page(flow: LedgerFlow):
    """Render the stock in / stock out form."""
    st.title("📥 Stock Movement")

    with st.form("stock_form", clear_on_submit=True):
        direction = st.radio(
            "Direction",
            options=list(StockDirection),
            format_func=lambda d: d.transaction_type.label,
            horizontal=True,
        )
        name = st.text_input("Name", help="Supplier or recipient")
        item = st.text_input("Item")
        quantity = st.number_input("Quantity", min_value=0, step=1, value=0)
        notes = st.text_area("Notes")
        when = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        result = run_async(flow.submit_stock_movement(
            name=name,
            item=item or None,
            quantity=int(quantity) if quantity else None,
            direction=direction,
            date=when,
            notes=notes,
        ))
        show_submission(flow, result)


def render_payment_page(flow: LedgerFlow):
    """Render the income / expense form."""
    st.title("💵 Payment")
    currency = get_settings().app.currency_symbol

    with st.form("payment_form", clear_on_submit=True):
        direction = st.radio(
            "Type",
            options=list(PaymentDirection),
            format_func=lambda d: d.transaction_type.label,
            horizontal=True,
        )
        name = st.text_input("Name", help="Source of income or what the expense was for")
        amount_text = st.text_input(f"Amount ({currency})")
        when = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            amount = Decimal(amount_text) if amount_text.strip() else None
        except InvalidOperation:
            st.error("Amount must be a number.")
            return
        result = run_async(flow.submit_payment(
            name=name,
            amount=amount,
            direction=direction,
            date=when,
        ))
        show_submission(flow, result)


def render_history_page(flow: LedgerFlow):
    """Render the filtered transaction history with delete buttons."""
    st.title("📜 History")
    currency = get_settings().app.currency_symbol

    type_filter = st.selectbox(
        "Filter",
        options=[ALL_TYPES] + list(TransactionType),
        format_func=lambda f: "All" if f == ALL_TYPES else f.label,
    )

    transactions = flow.request_history(type_filter)
    if not transactions:
        st.info("No transactions found")
        return

    for tx in transactions:
        tx_type = tx.transaction_type
        with st.container(border=True):
            col1, col2 = st.columns([6, 1])
            with col1:
                st.caption(f"{tx_type.label} · {tx.date:%b %d, %Y}")
                st.markdown(f"**{tx.name}**")
                if tx_type.is_stock:
                    st.write(f"{tx.item} × {tx.quantity}")
                else:
                    sign = "+" if tx_type is TransactionType.INCOME else "-"
                    st.write(f"{sign}{currency}{tx.amount:,.2f}")
                if tx.notes:
                    st.caption(tx.notes)
            with col2:
                if st.button("🗑️", key=f"delete-{tx.id}", help="Delete"):
                    # A failed write shows up as the sidebar warning after rerun
                    run_async(flow.request_deletion(tx.id))
                    st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    status = validate_all_settings()
    for name, key in [("Storage", "storage"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} settings loaded")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    storage = get_settings().storage
    st.markdown("### Storage")
    st.write(f"Backend: `{storage.backend}`")
    st.write(f"File: `{storage.path}`")
    st.markdown(
        "Override with `FLOWTRACK_STORAGE_PATH` / `FLOWTRACK_STORAGE_BACKEND` "
        "in the environment or a `.env` file."
    )


if __name__ == "__main__":
    main()
