import asyncio
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from insightforge.catalog import CATALOG, GROUPS, SUB_METHODS, methods_in
from insightforge.charts import build_chart
from insightforge.dataset import from_frame, read_table
from insightforge.dispatcher import AnalysisDispatcher
from insightforge.errors import AnalysisError

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_dispatcher() -> AnalysisDispatcher:
    if "dispatcher" not in st.session_state:
        st.session_state["dispatcher"] = AnalysisDispatcher()
    return st.session_state["dispatcher"]


def run_analysis(group: str, method: str, sub_method: Optional[str], dataset):
    dispatcher = get_dispatcher()

    # each script run gets its own event loop, so the HTTP client is closed before it ends
    async def _run():
        try:
            return await dispatcher.run_analysis(group, method, sub_method, dataset=dataset)
        finally:
            await dispatcher.close()

    return asyncio.run(_run())


# ---------- UI setup ----------
st.set_page_config(page_title="InsightForge", layout="wide")
inject_base_styles()
st.title("InsightForge")
st.caption("Visualize your data, forge your own path.")

with st.sidebar:
    st.markdown("### Dataset")
    uploaded = st.file_uploader("CSV or XLSX file", type=["csv", "xlsx", "xls"])
    dataset_id = st.text_input("Dataset ID (as registered with the analytics service)", "")
    st.markdown("---")
    st.markdown("### Analysis")
    group = st.selectbox("Group", options=list(GROUPS), format_func=lambda g: g.capitalize())
    method = st.selectbox("Method", options=methods_in(group), format_func=lambda m: CATALOG[m].label)
    sub_method = None
    if CATALOG[method].requirements.needs_sub_method:
        sub_method = st.radio("Correlation method", options=list(SUB_METHODS), horizontal=True)
    run_clicked = st.button("Run analysis", type="primary")

if uploaded is None:
    st.info("Upload a dataset to begin.")
    st.stop()

try:
    frame: pd.DataFrame = read_table(uploaded.getvalue(), uploaded.name)
except Exception as exc:
    st.error(f"Could not read {uploaded.name}: {exc}")
    st.stop()

dataset = from_frame(frame, dataset_id or uploaded.name)

with card("Dataset preview"):
    st.markdown(f"<span class='chip'>{len(dataset.rows)} rows</span> <span class='chip'>{len(dataset.columns)} columns</span>", unsafe_allow_html=True)
    st.dataframe(frame.head(50), use_container_width=True, hide_index=True)

if run_clicked:
    if not dataset_id:
        st.warning("Enter the dataset ID known to the analytics service.")
    else:
        try:
            with st.spinner(f"Running {CATALOG[method].label}..."):
                run_analysis(group, method, sub_method, dataset)
        except AnalysisError as exc:
            st.error(str(exc))

state = get_dispatcher().state
with card("Result"):
    if state is None:
        st.info("No analysis yet.")
    else:
        model = state.to_model()
        try:
            st.altair_chart(build_chart(model, state.archetype), use_container_width=True)
        except AnalysisError as exc:
            st.error(str(exc))
        with st.expander("Chart data", expanded=False):
            st.json(model.to_dict())
