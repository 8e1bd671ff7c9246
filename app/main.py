"""
Streamlit Frontend for SubTrackr

DESIGN PRINCIPLES:
1. Totals and renewals are always visible at the top
2. Adding a subscription is one short form
3. Backups are a single download / upload
4. A rejected backup says why and changes nothing

All ledger changes go through the SubscriptionManager. This module only
renders what the manager returns.
"""

import asyncio
import html

import streamlit as st

from subtrackr.backup import InvalidBackup
from subtrackr.config import validate_all_settings
from subtrackr.manager import SubscriptionManager, create_manager
from subtrackr.models.subscription import (
    CATEGORY_DISPLAY,
    BillingCycle,
    Category,
    DueLabel,
    Subscription,
    SubscriptionInput,
    Urgency,
)
from subtrackr.validation import SubscriptionValidator


# Page configuration
st.set_page_config(
    page_title="SubTrackr",
    page_icon="💳",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .renewal-overdue {
        padding: 10px 16px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 6px 0;
    }
    .renewal-today {
        padding: 10px 16px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 6px 0;
    }
    .renewal-normal {
        padding: 10px 16px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 6px 0;
    }
</style>
""", unsafe_allow_html=True)


URGENCY_STYLE = {
    Urgency.OVERDUE: "renewal-overdue",
    Urgency.TODAY: "renewal-today",
    Urgency.NORMAL: "renewal-normal",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_manager() -> SubscriptionManager:
    """Create the manager and load the saved ledger (once per server)."""
    manager = create_manager()
    run_async(manager.load())
    return manager


def category_text(subscription: Subscription) -> str:
    category = subscription.known_category
    if category is None:
        return f"📦 {subscription.category or 'Uncategorised'}"
    label, icon = CATEGORY_DISPLAY[category]
    return f"{icon} {label}"


def renewal_html(subscription: Subscription, label: DueLabel) -> str:
    """One upcoming-renewal row. Stored fields are escaped; they may come from a backup."""
    return f"""
    <div class="{URGENCY_STYLE[label.urgency]}">
        <strong>{html.escape(str(subscription.name))}</strong> · {html.escape(str(subscription.next_billing))} · {label.text}
    </div>
    """


def main():
    """Main application entry point."""
    try:
        manager = get_manager()
    except Exception as e:
        st.error(f"Failed to initialize storage: {e}")
        st.stop()

    st.sidebar.title(f"💳 {manager.settings.app_name}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💾 Backup", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(manager)
    elif page == "💾 Backup":
        render_backup_page(manager)
    elif page == "⚙️ Settings":
        render_settings_page(manager)


def render_dashboard_page(manager: SubscriptionManager):
    """Summary, upcoming renewals, the add form and the subscription list."""
    st.title("📊 Subscriptions")

    summary = manager.get_summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("Monthly", f"${summary.monthly_total}")
    col2.metric("Yearly", f"${summary.yearly_total}")
    col3.metric("Active subscriptions", summary.subscription_count)

    st.markdown("### ⏰ Upcoming renewals")
    upcoming = manager.get_upcoming_renewals()
    if not upcoming:
        st.info(
            f"Nothing renews in the next {manager.settings.renewal_horizon_days} days."
        )
    for subscription in upcoming:
        label = manager.get_due_label(subscription.next_billing)
        st.markdown(renewal_html(subscription, label), unsafe_allow_html=True)

    st.markdown("---")
    render_add_form(manager)

    st.markdown("---")
    render_subscription_list(manager)


def render_add_form(manager: SubscriptionManager):
    st.markdown("### ➕ Add subscription")

    with st.form("add_subscription", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Service name", placeholder="e.g., Netflix")
            cost = st.text_input("Cost", placeholder="e.g., 15.49")
            billing_cycle = st.selectbox(
                "Billing cycle",
                options=list(BillingCycle),
                format_func=lambda c: c.value.title(),
            )
        with col2:
            next_billing = st.date_input("Next billing date", value=None)
            category = st.selectbox(
                "Category",
                options=list(Category),
                format_func=lambda c: " ".join(reversed(CATEGORY_DISPLAY[c])),
            )

        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        payload = SubscriptionInput(
            name=name,
            cost=cost,
            billing_cycle=billing_cycle,
            next_billing=next_billing,
            category=category,
        )
        added = manager.add_subscription(payload)
        if added is None:
            validator = SubscriptionValidator()
            result = validator.validate(payload.model_dump(by_alias=True))
            st.warning(
                "Please fill in the name, cost and next billing date.\n\n"
                + validator.get_user_friendly_summary(result)
            )
        else:
            st.rerun()


def render_subscription_list(manager: SubscriptionManager):
    st.markdown("### 📋 All subscriptions")

    subscriptions = manager.list_subscriptions()
    if not subscriptions:
        st.info("No subscriptions yet. Add your first one above.")
        return

    for subscription in subscriptions:
        col1, col2, col3, col4 = st.columns([3, 2, 3, 1])
        with col1:
            st.markdown(f"**{subscription.name}**")
            st.caption(category_text(subscription))
        with col2:
            st.markdown(f"${subscription.cost} / {subscription.billing_cycle}")
            st.caption(f"${manager.get_annual_equivalent(subscription)} per year")
        with col3:
            label = manager.get_due_label(subscription.next_billing)
            st.markdown(subscription.next_billing or "No date")
            if label is not None:
                st.caption(label.text)
        with col4:
            if st.button("🗑️", key=f"delete-{subscription.id}", help="Delete"):
                manager.delete_subscription(subscription.id)
                st.rerun()


def render_backup_page(manager: SubscriptionManager):
    """Download and restore backups."""
    st.title("💾 Backup")

    st.markdown("### Export")
    st.download_button(
        "⬇️ Download backup",
        data=manager.export_data(),
        file_name=manager.backup_filename,
        mime="application/json",
    )

    st.markdown("---")
    st.markdown("### Import")
    st.warning("Importing replaces every subscription currently in the list.")

    uploaded_file = st.file_uploader("Choose a backup file", type=["json"])
    if uploaded_file and st.button("⬆️ Restore backup", type="primary"):
        try:
            records = manager.import_data(uploaded_file.getvalue())
        except InvalidBackup as e:
            st.error(f"This backup could not be imported: {e}")
            for problem in e.problems:
                st.markdown(f"- {problem}")
        else:
            st.success(f"✅ Imported {len(records)} subscription(s).")


def render_settings_page(manager: SubscriptionManager):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name, key in [("Application", "app"), ("Google Sheets (Storage)", "google_sheets")]:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    settings = manager.settings
    st.markdown("### Current settings")
    st.markdown(f"**Storage backend:** {settings.storage_backend}")
    st.markdown(f"**Renewal horizon:** {settings.renewal_horizon_days} days")
    st.markdown(f"**Strict backup import:** {'on' if settings.strict_import else 'off'}")

    st.markdown("---")
    st.markdown(
        "To change these, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
