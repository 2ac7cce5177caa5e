# ui/streamlit_app.py
import os
from typing import Dict

import requests
import streamlit as st

from app.core.models import SEVERITY_ORDER
from app.pipeline.report_view import summarize_report

# Avoid requiring .streamlit/secrets.toml; use env var or default
API_BASE = os.getenv("API_BASE", "http://localhost:8000")

st.set_page_config(page_title="Incident Aggregator", layout="wide")
st.title("Incidents by identity")


def load_report() -> Dict:
    r = requests.get(f"{API_BASE}/", timeout=60)
    r.raise_for_status()
    return r.json()


def section_totals(report: Dict):
    st.subheader("Totals")
    cols = st.columns(len(SEVERITY_ORDER) + 1)
    cols[0].metric("Identities", len(report))
    for col, level in zip(cols[1:], SEVERITY_ORDER):
        col.metric(level.capitalize(), sum(levels[level]["count"] for levels in report.values()))


def section_identities(report: Dict):
    st.subheader("Identities")
    rows = summarize_report(report)
    st.dataframe(rows, use_container_width=True)

    for row in rows:
        identity = row["identity"]
        with st.expander(f"#{identity} ({row['total']} incidents, {row['critical']} critical)"):
            for level in reversed(SEVERITY_ORDER):
                bucket = report[identity][level]
                if bucket["count"]:
                    st.markdown(f"**{level}** ({bucket['count']})")
                    st.json(bucket["incidents"], expanded=False)


try:
    data = load_report()
except Exception as e:
    st.error(f"Failed to load report from {API_BASE}: {e}")
else:
    section_totals(data)
    st.divider()
    section_identities(data)
