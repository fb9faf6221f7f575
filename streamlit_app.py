from datetime import date, datetime

import altair as alt
import streamlit as st
from streamlit.errors import StreamlitSecretNotFoundError

from glucotrack.analytics import compute_stats, filter_readings, readings_to_dataframe, status_breakdown
from glucotrack.config import MissingCredentialError, Settings, load_settings
from glucotrack.db import KeyValueStore, get_chat_id, set_chat_id
from glucotrack.exporters import (
    build_pdf_report,
    readings_to_csv_bytes,
    readings_to_excel_bytes,
    report_filename,
)
from glucotrack.formatting import FILTER_LABELS, format_date, format_time, range_label
from glucotrack.logging_config import configure_logging
from glucotrack.models import DateRange, FilterRange, GlucoseStatus, ReadingType
from glucotrack.notifications import TelegramNotifier
from glucotrack.store import ReadingStore, create_reading
from glucotrack.validation import validate_chat_id, validate_glucose_value

st.set_page_config(page_title="GlucoTrack", layout="wide")

STATUS_COLORS = {
    GlucoseStatus.LOW.value: "#ef4444",
    GlucoseStatus.NORMAL.value: "#10b981",
    GlucoseStatus.ELEVATED.value: "#f59e0b",
    GlucoseStatus.HIGH.value: "#dc2626",
}


def load_app_settings() -> Settings:
    try:
        secrets = dict(st.secrets)
    except StreamlitSecretNotFoundError:
        secrets = None
    return load_settings(secrets)


def get_store(kv: KeyValueStore) -> ReadingStore:
    if "reading_store" not in st.session_state:
        store = ReadingStore(kv)
        store.load()
        store.subscribe(lambda _: store.save())
        st.session_state["reading_store"] = store
    return st.session_state["reading_store"]


def build_notifier(settings: Settings, kv: KeyValueStore) -> TelegramNotifier | None:
    try:
        return TelegramNotifier.from_settings(settings, lambda: get_chat_id(kv))
    except MissingCredentialError:
        return None


settings = load_app_settings()
configure_logging(settings.log_level)
kv = KeyValueStore(settings.db_path)
store = get_store(kv)
notifier = build_notifier(settings, kv)

st.title("GlucoTrack")
st.caption("Log your glucose readings, review trends and share a report with your doctor.")

with st.sidebar:
    st.header("Settings")
    if notifier is None:
        st.info(
            "Telegram notifications are off: set TELEGRAM_BOT_TOKEN in the environment "
            "or in Streamlit secrets to enable them."
        )
    with st.form("settings_form"):
        chat_id = st.text_input(
            "Telegram Chat ID",
            value=get_chat_id(kv) or "",
            help="Stored locally and used to send a message for every new reading.",
        )
        saved = st.form_submit_button("Save settings")

    if saved:
        if chat_id.strip():
            valid_chat, chat_message = validate_chat_id(chat_id)
            if not valid_chat:
                st.error(chat_message)
            else:
                set_chat_id(kv, chat_id)
                st.success("Settings saved.")
        else:
            set_chat_id(kv, "")
            st.success("Chat ID cleared. Notifications will not be sent.")

    if notifier is not None and st.button("Send test message"):
        if notifier.send_test_message(get_chat_id(kv) or ""):
            st.success("Test message delivered.")
        else:
            st.error("Test message failed. Check the chat ID and that you started a chat with the bot.")

tab_history, tab_add = st.tabs(["History", "Add reading"])

with tab_add:
    with st.form("reading_form", clear_on_submit=True):
        col_date, col_time = st.columns(2)
        reading_date = col_date.date_input("Date", value=date.today())
        reading_time = col_time.time_input("Time", value=datetime.now().time().replace(second=0, microsecond=0))
        raw_value = st.text_input("Glucose level (mg/dL)", placeholder="e.g. 95")
        reading_type = st.radio(
            "Reading type",
            [t.value for t in ReadingType],
            horizontal=True,
        )
        submitted = st.form_submit_button("Save reading")

    if submitted:
        valid, message = validate_glucose_value(raw_value)
        if not valid:
            st.error(message)
        else:
            reading = create_reading(
                reading_date.isoformat(),
                reading_time.strftime("%H:%M"),
                int(float(raw_value)),
                ReadingType(reading_type),
            )
            store.add(reading)
            if notifier is not None:
                notifier.notify_reading_in_background(reading)
            st.success("Reading saved.")

with tab_history:
    col_filter, col_export = st.columns([3, 2])
    with col_filter:
        selected_label = st.radio(
            "Range",
            list(FILTER_LABELS.values()),
            index=1,
            horizontal=True,
        )
    selected_filter = next(key for key, label in FILTER_LABELS.items() if label == selected_label)

    custom_range = None
    if selected_filter is FilterRange.CUSTOM:
        default_range = DateRange.last_days(7)
        col_from, col_to = st.columns(2)
        start = col_from.date_input("From", value=default_range.start)
        end = col_to.date_input("To", value=default_range.end)
        custom_range = DateRange(start=start, end=end)

    filtered = filter_readings(store.readings, selected_filter, custom_range)
    stats = compute_stats(filtered)
    label = range_label(selected_filter, custom_range)

    with col_export:
        st.download_button(
            "Export report (PDF)",
            data=build_pdf_report(filtered, stats, label),
            file_name=report_filename(),
            mime="application/pdf",
        )
        st.download_button(
            "Download CSV",
            data=readings_to_csv_bytes(filtered),
            file_name="glucose_readings.csv",
            mime="text/csv",
        )
        st.download_button(
            "Download Excel",
            data=readings_to_excel_bytes(filtered),
            file_name="glucose_readings.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    m1, m2, m3 = st.columns(3)
    m1.metric("Average Glucose", f"{stats.avg} mg/dL")
    m2.metric("Lowest Reading", f"{stats.min} mg/dL")
    m3.metric("Highest Reading", f"{stats.max} mg/dL")

    st.subheader(f"History ({stats.count})")

    if stats.count == 0:
        st.info("No readings found. Add a new reading to get started.")
    else:
        breakdown = status_breakdown(filtered)
        st.caption(" | ".join(f"{status.value}: {count}" for status, count in breakdown.items()))

        chart_df = readings_to_dataframe(filtered).sort_values("recorded_at")
        base = alt.Chart(chart_df).encode(x=alt.X("recorded_at:T", title="Date/time"))
        line = base.mark_line(color="#94a3b8").encode(y=alt.Y("value:Q", title="Glucose (mg/dL)"))
        points = base.mark_circle(size=70).encode(
            y="value:Q",
            color=alt.Color(
                "status:N",
                scale=alt.Scale(domain=list(STATUS_COLORS.keys()), range=list(STATUS_COLORS.values())),
            ),
            tooltip=["date", "time", "type", "value", "status"],
        )
        st.altair_chart((line + points).properties(height=320), use_container_width=True)

        table_df = readings_to_dataframe(filtered)
        table_df["date"] = table_df["date"].map(format_date)
        table_df["time"] = table_df["time"].map(format_time)
        st.dataframe(
            table_df[["date", "time", "type", "value", "status"]].rename(
                columns={"date": "Date", "time": "Time", "type": "Type", "value": "Glucose (mg/dL)", "status": "Status"}
            ),
            use_container_width=True,
            hide_index=True,
        )

        st.markdown("**Delete reading**")
        delete_options = {
            f"{format_date(r.date)} {format_time(r.time)} | {r.value} mg/dL | {r.type.value} | {r.id[:6]}": r.id
            for r in filtered
        }
        delete_label = st.selectbox("Select reading", list(delete_options.keys()))
        confirmed = st.checkbox("Yes, I want to delete this reading.")
        if st.button("Delete", type="secondary"):
            if not confirmed:
                st.warning("Confirm the deletion first.")
            elif store.delete(delete_options[delete_label]):
                st.success("Reading deleted.")
                st.rerun()

st.markdown(
    """
    <div style="background-color: #f3f4f6; padding: 16px; border-radius: 8px; margin-top: 20px;">
        <p><strong>Note:</strong> Status labels are simplified visual guidance, not a diagnosis.
        Contact your doctor about values that worry you.</p>
    </div>
    """,
    unsafe_allow_html=True,
)
