"""
Streamlit Frontend for Pocket Ledger

A thin view over the ledger store. Pages only read store state and call
store commands; all validation and bookkeeping happens in the store.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before deleting anything
3. Clear error messages in simple language
4. Visual feedback for all operations
"""

from datetime import date, datetime

import streamlit as st

from pocketledger.config import validate_all_settings
from pocketledger.models.ledger import (
    MONTH_ABBREVIATIONS,
    Theme,
    TransactionType,
    WalletType,
    categories_for,
    get_category,
)
from pocketledger.orchestrator import create_ledger_store
from pocketledger.ports import Confirmer, NotificationKind, Notifier
from pocketledger.queries import LedgerQueries
from pocketledger.store import LedgerStore


# Page configuration
st.set_page_config(
    page_title="Pocket Ledger",
    page_icon="🐱",
    layout="wide",
    initial_sidebar_state="expanded",
)


class StreamlitNotifier(Notifier):
    """Shows store notifications as toasts."""

    ICONS = {
        NotificationKind.SUCCESS: "✅",
        NotificationKind.ERROR: "❌",
        NotificationKind.INFO: "ℹ️",
    }

    def notify(self, kind: NotificationKind, message: str) -> None:
        st.toast(message, icon=self.ICONS.get(NotificationKind(kind), "ℹ️"))


class SessionConfirmer(Confirmer):
    """
    Confirms an action only if the user pressed the confirmation button
    in this run. The flag is consumed on read.
    """

    def confirm(self, message: str) -> bool:
        return bool(st.session_state.pop("action_confirmed", False))


@st.cache_resource
def get_store() -> LedgerStore:
    """Get or create the ledger store (cached per process)."""
    return create_ledger_store(
        notifier=StreamlitNotifier(),
        confirmer=SessionConfirmer(),
    )


def money(amount: float) -> str:
    return f"${amount:,.2f}"


def category_label(category_id: str) -> str:
    category = get_category(category_id)
    return f"{category.icon} {category.name}" if category else category_id


def main():
    """Main application entry point."""
    store = get_store()

    st.sidebar.title("🐱 Pocket Ledger")
    st.sidebar.markdown("---")

    wallets = store.wallets
    wallet_ids = [w.id for w in wallets]
    active = store.active_wallet_id
    selected = st.sidebar.selectbox(
        "Active wallet",
        options=wallet_ids,
        index=wallet_ids.index(active) if active in wallet_ids else 0,
        format_func=lambda wid: next(w.name for w in wallets if w.id == wid),
    )
    if selected != active:
        store.set_active_wallet(selected)

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🏠 Dashboard",
            "➕ Add Transaction",
            "📜 History",
            "👛 Wallets",
            "🎯 Savings",
            "📊 Analytics",
            "🕒 Analytics History",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    theme_label = "🌙 Dark mode" if store.theme == Theme.LIGHT else "☀️ Light mode"
    if st.sidebar.button(theme_label):
        store.toggle_theme()
        st.rerun()

    if store.dirty_collections:
        st.sidebar.warning("Some changes are not saved yet.")
        if st.sidebar.button("🔄 Retry saving"):
            store.flush()
            st.rerun()

    queries = LedgerQueries.from_store(store)

    # Route to appropriate page
    if page == "🏠 Dashboard":
        render_dashboard(store, queries)
    elif page == "➕ Add Transaction":
        render_add_transaction(store)
    elif page == "📜 History":
        render_history(store, queries)
    elif page == "👛 Wallets":
        render_wallets(store)
    elif page == "🎯 Savings":
        render_savings(store)
    elif page == "📊 Analytics":
        render_analytics(store, queries)
    elif page == "🕒 Analytics History":
        render_analytics_history(store)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_dashboard(store: LedgerStore, queries: LedgerQueries):
    wallet = store.active_wallet
    summary = queries.dashboard(store.active_wallet_id)

    st.title(f"🏠 {wallet.name if wallet else 'No wallet selected'}")
    if wallet:
        st.metric("Balance", money(wallet.balance))
    st.caption(f"All-time net: {money(summary.all_time_net)}")

    period = f"{MONTH_ABBREVIATIONS[summary.period_month - 1]} {summary.period_year}"
    st.markdown(f"### {period}")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Monthly Income", money(summary.monthly_income))
    col2.metric("Monthly Expenses", money(summary.monthly_expenses))
    col3.metric("Monthly Savings", money(summary.monthly_savings))
    col4.metric("Current Month Net", money(summary.monthly_net))

    st.metric("Total Saved", money(summary.total_saved))

    st.markdown("### Recent transactions")
    recent = queries.recent_transactions(store.active_wallet_id)
    if not recent:
        st.info("No transactions yet. Add your first one from the sidebar.")
    for tx in recent:
        render_transaction_row(store, tx, allow_delete=False)


def render_transaction_row(store: LedgerStore, tx, allow_delete: bool = True):
    col1, col2, col3 = st.columns([4, 2, 1])
    sign = {"expense": "-", "income": "+"}.get(tx.type.value, "")
    with col1:
        st.markdown(f"**{tx.display_title}** · {category_label(tx.category)}")
        if tx.note:
            st.caption(tx.note)
    with col2:
        st.markdown(f"{sign}{money(tx.amount)}  \n{tx.date:%d %b %Y}")
    with col3:
        if allow_delete and st.button("🗑️", key=f"del-{tx.id}"):
            store.delete_transaction(tx.id)
            st.rerun()


def render_add_transaction(store: LedgerStore):
    st.title("➕ Add Transaction")

    tx_type = st.radio(
        "Type",
        options=list(TransactionType),
        format_func=lambda t: t.value.title(),
        horizontal=True,
    )
    options = categories_for(tx_type)

    with st.form("add-transaction", clear_on_submit=True):
        amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
        category = st.selectbox(
            "Category *",
            options=[c.id for c in options],
            format_func=category_label,
        )
        title = st.text_input("Title (optional)")
        note = st.text_area("Note (optional)")
        tx_date = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        tx = store.add_transaction(
            tx_type,
            amount,
            category=category,
            title=title,
            note=note,
            date=datetime.combine(tx_date, datetime.now().time()),
        )
        if tx is not None:
            if tx.type == TransactionType.SAVINGS:
                st.success("Great job saving! 🎉")
            else:
                st.success("Transaction added!")


def render_history(store: LedgerStore, queries: LedgerQueries):
    st.title("📜 History")

    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        month = st.selectbox(
            "Month",
            options=list(range(1, 13)),
            index=today.month - 1,
            format_func=lambda m: MONTH_ABBREVIATIONS[m - 1],
        )
    with col2:
        year = st.number_input("Year", value=today.year, step=1)

    transactions = queries.transactions_for_month(store.active_wallet_id, int(year), month)
    if not transactions:
        st.info("No transactions in this month.")
    for tx in transactions:
        render_transaction_row(store, tx)


def render_wallets(store: LedgerStore):
    st.title("👛 Wallets")

    for wallet in store.wallets:
        label = "👥 Shared" if wallet.is_shared else "👤 Personal"
        st.markdown(f"**{wallet.name}** · {label} · {money(wallet.balance)}")
        if wallet.members:
            st.caption(", ".join(wallet.members))

    st.markdown("---")
    st.subheader("New wallet")
    with st.form("new-wallet", clear_on_submit=True):
        name = st.text_input("Name *")
        wallet_type = st.selectbox(
            "Type",
            options=list(WalletType),
            format_func=lambda t: t.value.title(),
        )
        members = st.text_input("Members (comma separated, shared wallets only)")
        submitted = st.form_submit_button("Create", type="primary")

    if submitted:
        wallet = store.create_wallet(
            name,
            wallet_type,
            members=[m for m in members.split(",")],
        )
        if wallet is not None:
            st.rerun()


def render_savings(store: LedgerStore):
    st.title("🎯 Savings")

    for goal in store.savings_goals:
        with st.container(border=True):
            st.markdown(f"### {goal.title}")
            st.progress(goal.progress, text=f"{money(goal.current_amount)} of {money(goal.target_amount)}")
            if goal.deadline:
                st.caption(f"Deadline: {goal.deadline:%d %B %Y}")
            if goal.overflow > 0:
                st.caption(f"Over target by {money(goal.overflow)}")
            for member in goal.members:
                planned = f" (planned {money(member.allocation)})" if member.allocation else ""
                st.markdown(f"- {member.name}: {money(member.contribution or 0)}{planned}")

            col1, col2, col3 = st.columns([2, 2, 1])
            with col1:
                contributor = st.text_input("Your name", key=f"who-{goal.id}")
            with col2:
                amount = st.number_input("Amount", min_value=0.0, step=1.0, key=f"amt-{goal.id}")
            with col3:
                if st.button("Add", key=f"add-{goal.id}"):
                    if store.contribute(goal.id, amount, contributor) is not None:
                        st.rerun()

            if st.session_state.get("pending_goal_delete") == goal.id:
                st.warning("Are you sure you want to delete this saving goal?")
                yes, no = st.columns(2)
                if yes.button("Yes, delete", key=f"yes-{goal.id}"):
                    st.session_state.action_confirmed = True
                    st.session_state.pending_goal_delete = None
                    store.delete_goal(goal.id)
                    st.rerun()
                if no.button("Cancel", key=f"no-{goal.id}"):
                    st.session_state.pending_goal_delete = None
                    store.delete_goal(goal.id)  # declined: recorded, nothing removed
                    st.rerun()
            elif st.button("🗑️ Delete goal", key=f"del-{goal.id}"):
                st.session_state.pending_goal_delete = goal.id
                st.rerun()

    st.markdown("---")
    st.subheader("New saving")
    with st.form("new-goal", clear_on_submit=True):
        title = st.text_input("Saving name *")
        target = st.number_input("Target amount *", min_value=0.0, step=1.0)
        has_deadline = st.checkbox("Set a deadline")
        deadline = st.date_input("Deadline", value=date.today())
        members = st.text_area("Members, one per line as 'name' or 'name: planned amount'")
        submitted = st.form_submit_button("Create", type="primary")

    if submitted:
        seeded = []
        for line in members.splitlines():
            name, _, planned = line.partition(":")
            try:
                allocation = float(planned) if planned.strip() else None
            except ValueError:
                allocation = None
            seeded.append({"name": name, "allocation": allocation})
        goal = store.create_goal(
            title,
            target,
            deadline=deadline if has_deadline else None,
            members=seeded,
        )
        if goal is not None:
            st.rerun()


def render_analytics(store: LedgerStore, queries: LedgerQueries):
    st.title("📊 Analytics")

    st.subheader("Spending by category")
    breakdown = queries.category_breakdown(store.active_wallet_id)
    if not breakdown:
        st.info("No expenses yet.")
    for item in breakdown:
        st.markdown(
            f"{item.category.icon} **{item.category.name}** · "
            f"{money(item.total)} ({item.percentage:.0f}%)"
        )
        st.progress(item.percentage / 100)

    st.subheader(f"{store.settings.trend_months}-Month Trend")
    trend = queries.monthly_trend(store.active_wallet_id)
    st.bar_chart({f"{m.label} {m.year}": m.total for m in trend})


def render_analytics_history(store: LedgerStore):
    st.title("🕒 Analytics History")

    store.recompute_analytics()
    years = store.analytics_years()
    if not years:
        st.info("No analytics saved yet.")
    else:
        selected = st.selectbox("Year", options=[None] + years, format_func=lambda y: "All Years" if y is None else str(y))
        for year in ([selected] if selected else years):
            months = store.get_analytics(year).get(year, [0.0] * 12)
            st.markdown(f"### {year} · total {money(sum(months))}")
            st.bar_chart(dict(zip(MONTH_ABBREVIATIONS, months)))

    st.markdown("---")
    st.subheader("Archive a closed year")
    year = st.number_input("Year", value=date.today().year - 1, step=1)
    if st.button("Archive"):
        if store.archive_year(int(year)):
            st.success(f"{int(year)} archived")
        else:
            st.info(f"{int(year)} was not archived")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("Ledger", "ledger"),
        ("Google Sheets (Storage)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
