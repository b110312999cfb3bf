"""
app.py
Streamlit membership & payments desk.
Run: streamlit run app.py
"""

from __future__ import annotations

from datetime import date, timedelta
import pandas as pd
import streamlit as st

import lifecycle
import stats
import utils
from config import settings
from db import Store
from errors import CoreError
from models import MEMBER_TYPES, PAYMENT_METHODS
from repository import Repository

st.set_page_config(page_title="Membership Desk", layout="wide")


@st.cache_resource
def get_repo() -> Repository:
    repo = Repository(Store())
    utils.insert_sample_data(repo)
    return repo


def members_frame(pairs) -> pd.DataFrame:
    rows = []
    for m, ms in pairs:
        rows.append({
            "id": m.id,
            "name": m.full_name,
            "phone": m.phone,
            "type": m.member_type,
            "active": m.is_active,
            "joined": m.join_date.isoformat(),
            "membership": ms.status if ms else "pending",
            "monthly": utils.format_currency(ms.monthly_amount) if ms else "",
            "renewal_date": ms.renewal_date.isoformat() if ms else "",
        })
    return pd.DataFrame(rows)


def dashboard_page(repo: Repository):
    st.header("📊 Dashboard")

    if "week_ref" not in st.session_state:
        st.session_state.week_ref = date.today()

    c1, c2, c3 = st.columns([1, 1, 1])
    with c1:
        if st.button("◀ Previous week"):
            st.session_state.week_ref -= timedelta(weeks=1)
            st.rerun()
    with c2:
        if st.button("This week"):
            st.session_state.week_ref = date.today()
            st.rerun()
    with c3:
        if st.button("Next week ▶"):
            st.session_state.week_ref += timedelta(weeks=1)
            st.rerun()

    ws = stats.get_weekly_stats(repo, st.session_state.week_ref)
    st.caption(f"Week: {utils.format_date(ws.week_start)} - {utils.format_date(ws.week_end)}")

    r1 = st.columns(5)
    r1[0].metric("Total members", ws.total_members)
    r1[1].metric("Active members", ws.active_members)
    r1[2].metric("Inactive members", ws.inactive_members)
    r1[3].metric("Fulltime", ws.fulltime_members)
    r1[4].metric("One time", ws.onetime_members)
    r2 = st.columns(5)
    r2[0].metric("Active memberships", ws.active_memberships)
    r2[1].metric("Expired memberships", ws.expired_memberships)
    r2[2].metric("Renewals due this week", ws.pending_renewals)
    r2[3].metric("New members this week", ws.new_members)
    r2[4].metric("Revenue this week", utils.format_currency(ws.total_revenue))

    st.divider()

    st.subheader("Members")
    status_filter = st.selectbox("Membership status", ["all", "active", "expired", "pending"])
    df = members_frame(repo.get_members_with_memberships())
    if not df.empty and status_filter != "all":
        df = df[df["membership"] == status_filter]
    if df.empty:
        st.caption("No members match this filter.")
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)


def member_form(repo: Repository, existing=None):
    if existing:
        st.subheader(f"✏️ Edit Member ({existing.full_name})")
    else:
        st.subheader("➕ Add Member")

    col1, col2, col3 = st.columns(3)
    with col1:
        first_name = st.text_input("First name", value=(existing.first_name if existing else ""))
        last_name = st.text_input("Last name", value=(existing.last_name if existing else ""))
        email = st.text_input("Email (optional)", value=(existing.email if existing else ""))
        phone = st.text_input("Phone", value=(existing.phone if existing else ""))
    with col2:
        dob = st.text_input("Date of birth (YYYY-MM-DD)", value=(existing.date_of_birth if existing else ""))
        address = st.text_input("Address", value=(existing.address if existing else ""))
        member_type = st.selectbox(
            "Member type",
            options=list(MEMBER_TYPES),
            index=(MEMBER_TYPES.index(existing.member_type) if existing else 0),
        )
    with col3:
        ec = existing.emergency_contact if existing else None
        ec_name = st.text_input("Emergency contact name", value=(ec.name if ec else ""))
        ec_phone = st.text_input("Emergency contact phone", value=(ec.phone if ec else ""))
        ec_rel = st.text_input("Relationship", value=(ec.relationship if ec else ""))

    data = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "phone": phone,
        "date_of_birth": dob,
        "address": address,
        "member_type": member_type,
        "emergency_contact": {"name": ec_name, "phone": ec_phone, "relationship": ec_rel},
    }

    if st.button("Save", type="primary"):
        try:
            if existing:
                repo.update_member(existing.id, **data)
                st.success("Member updated.")
                st.session_state.edit_member_id = None
            else:
                repo.add_member(data)
                st.success("Member added.")
            st.rerun()
        except CoreError as e:
            st.error(str(e))


def members_page(repo: Repository):
    st.header("👥 Members")

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (name/phone)")
        type_filter = st.selectbox("Member type", ["All", *MEMBER_TYPES])
        active_filter = st.selectbox("Status", ["All", "active", "inactive"])

    members = repo.search_members(
        search,
        member_type=None if type_filter == "All" else type_filter,
        is_active=None if active_filter == "All" else active_filter == "active",
    )
    pairs = [(m, repo.get_membership_by_member_id(m.id)) for m in members]
    df = members_frame(pairs)
    if df.empty:
        st.caption("No members match your search criteria.")
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)

    st.divider()

    colA, colB = st.columns([1, 2])
    with colA:
        st.subheader("Select member")
        labels = {f"{m.full_name} ({m.phone})": m.id for m in members}
        chosen = st.selectbox("Member", options=["(none)"] + list(labels.keys()))

    with colB:
        if chosen != "(none)":
            member_id = labels[chosen]
            m = repo.get_member(member_id)
            membership = repo.get_membership_by_member_id(member_id)
            st.subheader("Member actions")
            c1, c2, c3, c4 = st.columns(4)
            with c1:
                if st.button("Edit"):
                    st.session_state.edit_member_id = member_id
                    st.rerun()
            with c2:
                if m.is_active:
                    if st.button("Deactivate"):
                        repo.deactivate_member(member_id)
                        st.rerun()
                elif st.button("Reactivate"):
                    repo.reactivate_member(member_id)
                    st.rerun()
            with c3:
                if membership is None:
                    amount = st.text_input("Monthly amount", value=str(int(settings.SAMPLE_MONTHLY_AMOUNT)))
                    if st.button("Create membership"):
                        try:
                            repo.create_membership(member_id, float(amount))
                            st.success("Membership created.")
                            st.rerun()
                        except ValueError:
                            st.error("Amount must be numeric.")
                        except CoreError as e:
                            st.error(str(e))
                else:
                    st.caption(f"Membership {membership.status}, renews {utils.format_date(membership.renewal_date)}")
            with c4:
                delete_confirm = st.checkbox("Confirm delete", value=False, key="del_confirm")
                if st.button("Delete", type="secondary", disabled=not delete_confirm):
                    repo.delete_member(member_id)
                    st.success("Member deleted.")
                    st.rerun()

    st.divider()

    if st.session_state.get("edit_member_id"):
        existing = repo.get_member(st.session_state.edit_member_id)
        if existing:
            member_form(repo, existing=existing)
        if st.button("Cancel edit"):
            st.session_state.edit_member_id = None
            st.rerun()
    else:
        member_form(repo, existing=None)


def payments_page(repo: Repository):
    st.header("💳 Payments")

    pairs = [(m, ms) for m, ms in repo.get_members_with_memberships() if ms is not None]
    if not pairs:
        st.info("No memberships yet. Create a membership for a member first.")
        return

    options = {f"{m.full_name} ({m.phone}) - {ms.status}": (m, ms) for m, ms in pairs}
    chosen_label = st.selectbox("Member", list(options.keys()))
    member, membership = options[chosen_label]
    st.write(
        f"Monthly: **{utils.format_currency(membership.monthly_amount)}** | "
        f"Renewal: **{utils.format_date(membership.renewal_date)}** | Status: **{membership.status}**"
    )

    st.subheader("Record payment")
    c1, c2, c3 = st.columns([1, 1, 2])
    with c1:
        amount = st.text_input("Amount", value=str(membership.monthly_amount))
    with c2:
        method = st.selectbox("Method", list(PAYMENT_METHODS))
    with c3:
        notes = st.text_input("Notes", value="")

    if st.button("Record payment", type="primary"):
        errors = utils.validate_payment_inputs(amount, method)
        if errors:
            for e in errors:
                st.error(e)
        else:
            try:
                lifecycle.record_payment(repo, membership.id, member.id, float(amount), method, notes)
                st.success("Payment recorded and membership renewed.")
                st.rerun()
            except CoreError as e:
                st.error(str(e))

    st.divider()

    st.subheader("Payment history")
    payments = sorted(repo.get_payments_by_member_id(member.id), key=lambda p: p.payment_date, reverse=True)
    if payments:
        st.dataframe(pd.DataFrame([p.to_record() for p in payments]), use_container_width=True, hide_index=True)
    else:
        st.caption("No payments for this member yet.")


def reports_page(repo: Repository):
    st.header("🧾 Reports")

    st.subheader("Export members to CSV")
    members = repo.get_members()
    if members:
        st.download_button(
            "Download members.csv",
            data=utils.members_to_csv_bytes(members),
            file_name="members.csv",
            mime="text/csv",
        )
    else:
        st.caption("No members to export.")

    st.divider()

    st.subheader("Export payments to CSV")
    payments = repo.get_payments()
    if payments:
        st.download_button(
            "Download payments.csv",
            data=utils.payments_to_csv_bytes(payments),
            file_name="payments.csv",
            mime="text/csv",
        )
    else:
        st.caption("No payments to export.")

    st.divider()

    st.subheader("Revenue summary by month")
    st.dataframe(stats.revenue_by_month(repo), use_container_width=True, hide_index=True)


def run():
    repo = get_repo()

    st.sidebar.title("⛪ Membership Desk")
    pages = ["Dashboard", "Members", "Payments", "Reports"]
    if "page" not in st.session_state:
        st.session_state.page = "Dashboard"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.session_state.page == "Dashboard":
        dashboard_page(repo)
    elif st.session_state.page == "Members":
        members_page(repo)
    elif st.session_state.page == "Payments":
        payments_page(repo)
    elif st.session_state.page == "Reports":
        reports_page(repo)


if __name__ == "__main__":
    run()
