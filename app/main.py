"""
Streamlit Frontend for License Calculator

Two pages share one Store:
1. Calculator: search the price list, pick an item, enter a quantity and
   read off the annual cost
2. Manage Licenses: edit the price list itself (add, edit, remove with
   confirmation, reorder, CSV import/export)

DESIGN PRINCIPLES:
1. Edits are saved automatically; there is no "Save" button
2. Rows without a name are never written to storage
3. Clear error messages when storage or an import fails

Streamlit reruns the script on every interaction, so there is no quiet
period to wait for: each rerun applies its search or edit immediately and
the components are driven by a ManualScheduler that is never advanced.
"""

import asyncio

import streamlit as st

from license_calculator.config import get_settings, validate_all_settings
from license_calculator.models.item import DisplayMode, MatchState, ReorderRow, SaveStatus
from license_calculator.orchestrator import ItemManager, create_app_components
from license_calculator.pricing import display_mode
from license_calculator.search import NavKey, SearchConsole
from license_calculator.services.storage import StorageError
from license_calculator.services.transfer import TransferError
from license_calculator.state import ManualScheduler


# Page configuration
st.set_page_config(
    page_title="License Calculator",
    page_icon="🧮",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .quote-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    store, manager, console, audit_logger = create_app_components(
        scheduler=ManualScheduler(),
    )
    try:
        run_async(manager.load())
    except StorageError as e:
        st.error(f"Could not load the price list: {e}")
    return store, manager, console, audit_logger


def save_now(manager: ItemManager) -> None:
    """Run the pending autosave cycle and surface its outcome."""
    outcome = run_async(manager.autosave.flush())
    if outcome.status == SaveStatus.FAILED:
        st.error(f"Changes could not be saved: {outcome.error_message}")


def main():
    """Main application entry point."""
    _, manager, console, audit_logger = get_components()

    st.sidebar.title("🧮 License Calculator")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🔍 Calculator", "📝 Manage Licenses", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Type part of a license name
        2. Pick it from the list
        3. Enter how many seats you need

        Prices are monthly; totals are per year.
        """
    )

    if page == "🔍 Calculator":
        render_calculator_page(console)
    elif page == "📝 Manage Licenses":
        render_manage_page(manager, audit_logger)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_calculator_page(console: SearchConsole):
    """Render the search / select / quote page."""
    st.title("🔍 Calculator")
    app_settings = get_settings().app

    query = st.text_input(
        "Search licenses",
        value=console.query,
        placeholder="e.g. adobe pro",
        disabled=not console.loaded,
        help="Words can be in any order",
    )
    if query != console.query:
        console.search_now(query)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        if st.button("▼ Down"):
            console.handle_key(NavKey.DOWN.value)
    with col2:
        if st.button("▲ Up"):
            console.handle_key(NavKey.UP.value)
    with col3:
        if st.button("↵ Select"):
            if console.handle_key(NavKey.ENTER.value) is not None:
                st.rerun()
    with col4:
        if st.button("✕ Close"):
            console.handle_key(NavKey.ESCAPE.value)
            st.rerun()

    result = console.result
    if result.state == MatchState.EMPTY:
        st.button(app_settings.no_match_text, disabled=True, key="no-match")
    elif result.state == MatchState.MATCHES:
        for position, item in enumerate(result.items):
            label = item.name
            if position == console.active_index:
                label = f"▶ {label}"
            if st.button(label, key=f"match-{result.keys[position]}"):
                console.select(position)
                st.rerun()

    st.markdown("---")

    selected = console.selected_item
    if selected is None:
        st.info("Pick a license to calculate its annual cost.")
        return

    st.subheader(selected.name)
    quantity = st.text_input("Quantity", value=console.quantity, placeholder="Seats")
    quote = console.set_quantity(quantity)

    if quote.mode == DisplayMode.BLANK:
        # Price-less items are informational; their link needs no quantity.
        if display_mode(selected) == DisplayMode.LINK_ONLY:
            st.markdown(f"[Pricing source]({selected.source_url})")
        return

    if quote.show_breakdown:
        st.markdown(f"""
        <div class="quote-box">
            <p>{quote.breakdown}</p>
            <p class="big-number">{app_settings.currency_symbol}{quote.total:,}</p>
        </div>
        """, unsafe_allow_html=True)
        if quote.clipboard_text:
            st.code(quote.clipboard_text, language=None)

    if quote.show_link:
        st.markdown(f"[Pricing source]({quote.source_url})")


def render_manage_page(manager: ItemManager, audit_logger):
    """Render the price list editor."""
    st.title("📝 Manage Licenses")
    st.markdown("Changes are saved automatically.")

    entries = manager.store.entries()
    validation = manager.validate()

    # Removal confirmation
    if "removal_name" in st.session_state and manager.pending_removal:
        st.warning(f"Remove {st.session_state.removal_name}?")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Remove", type="primary"):
                run_async(manager.confirm_removal())
                save_now(manager)
                del st.session_state["removal_name"]
                st.rerun()
        with col2:
            if st.button("Cancel"):
                manager.cancel_removal()
                del st.session_state["removal_name"]
                st.rerun()

    for index, (key, item) in enumerate(entries):
        col1, col2, col3, col4, col5, col6 = st.columns([4, 2, 4, 1, 1, 1])

        with col1:
            st.text_input(
                "Name", value=item.name, key=f"name-{key}",
                on_change=apply_row_edit, args=(manager, key),
            )
        with col2:
            st.text_input(
                "Price", value=item.display_price, key=f"price-{key}",
                on_change=apply_row_edit, args=(manager, key),
            )
        with col3:
            st.text_input(
                "Source URL", value=item.source_url, key=f"url-{key}",
                on_change=apply_row_edit, args=(manager, key),
            )

        for issue in validation.issues_for(index):
            if issue.severity == "warning":
                st.caption(f"⚠️ {issue.message}")

        with col4:
            if st.button("▲", key=f"up-{key}", disabled=index == 0):
                move_row(manager, index, index - 1)
        with col5:
            if st.button("▼", key=f"down-{key}", disabled=index == len(entries) - 1):
                move_row(manager, index, index + 1)
        with col6:
            if st.button("🗑", key=f"remove-{key}"):
                st.session_state.removal_name = manager.request_removal(index)
                st.rerun()

    if validation.has_errors:
        st.info(manager.validation_summary())

    if st.button("➕ Add License"):
        run_async(manager.add_blank())
        save_now(manager)
        st.rerun()

    st.markdown("---")
    st.subheader("Import / Export")

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "⬇️ Export CSV",
            data=run_async(manager.export_csv()),
            file_name="licenses.csv",
            mime="text/csv",
        )
    with col2:
        uploaded = st.file_uploader("Import CSV (replaces the list)", type=["csv"])
        if uploaded and st.button("⬆️ Import", type="primary"):
            try:
                items = run_async(manager.import_csv(uploaded.getvalue().decode("utf-8")))
                save_now(manager)
                st.success(f"Imported {len(items)} licenses.")
            except TransferError as e:
                st.error(f"Import failed: {e}")
            except StorageError as e:
                run_async(audit_logger.log_error("import_save_failed", str(e)))
                st.error(f"Imported, but could not save: {e}")

    with st.expander("🕑 Recent activity"):
        if audit_logger.storage is not None:
            events = run_async(audit_logger.storage.get_recent_events(limit=20))
            for event in events:
                st.markdown(
                    f"`{event.timestamp:%H:%M:%S}` {event.event_type.value.replace('_', ' ')}"
                )


def apply_row_edit(manager: ItemManager, key: str) -> None:
    """Widget callback: push the row's current field values into the Store."""
    manager.edit_by_key(
        key,
        name=st.session_state[f"name-{key}"],
        price=st.session_state[f"price-{key}"],
        source_url=st.session_state[f"url-{key}"],
    )
    save_now(manager)


def move_row(manager: ItemManager, source: int, target: int) -> None:
    """Move one row and hand the new order to the reconciler."""
    rows = [
        ReorderRow(key=key, name=item.name, price=item.price, source_url=item.source_url)
        for key, item in manager.store.entries()
    ]
    rows.insert(target, rows.pop(source))
    try:
        run_async(manager.reorder(rows))
    except StorageError as e:
        st.error(f"New order could not be saved: {e}")
    save_now(manager)
    st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()

    for name, key in [("Storage", "storage"), ("Google Sheets", "google_sheets"), ("App", "app")]:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    if status.get("storage"):
        storage = get_settings().storage
        st.markdown(f"**Storage backend:** `{storage.backend}`")
        if storage.backend == "json":
            st.markdown(f"**File:** `{storage.json_path}`")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
