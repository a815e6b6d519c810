import altair as alt
import numpy as np
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Dict, List, Optional

from tabnest.collection import Collection, create_collection
from tabnest.config import normalize_options
from tabnest.hierarchy import build_page_trees
from tabnest.items import ContentItem, TabGroupNode
from tabnest.pagination import page_label
from tabnest.serialize import CloseTab, OpenTab, RenderPayload, heading_level, serialize
from tabnest.signature import RowFilter

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: Optional[str]):
    container = st.container()
    if title:
        container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def render_page_header(title: str, breadcrumb: str, chips: List[str]):
    inject_base_styles()
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )
    st.markdown(
        "<div class='chip-row'>" + "".join(f"<span class='chip'>{c}</span>" for c in chips) + "</div>",
        unsafe_allow_html=True,
    )


# ---------- demo content ----------
@st.cache_data
def load_demo_data(seed: int = 7) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    n = 400
    return pd.DataFrame(
        {
            "wave": rng.integers(1, 3, n),
            "age_group": rng.choice(["18-30", "31-50", "51+"], n),
            "gender": rng.choice(["Female", "Male"], n),
            "q1": rng.integers(1, 6, n),
            "q2": rng.integers(1, 6, n),
        }
    )


def build_demo_collection() -> Collection:
    intro = create_collection().add_text(
        "Survey results per wave.",
        "Each wave tab nests its own breakdowns; the trend page follows after the page break.",
    )

    waves = create_collection(labels={"sis": "Information Skills", "age": "By Age", "gender": "By Gender"}, type="bar")
    for wave in (1, 2):
        waves.add(x_var="q1", title=f"Q1 answers, wave {wave}", tab_path="sis", filter=RowFilter(f"wave == {wave}"), title_tabset=f"Wave {wave}")

    breakdowns = create_collection(type="stacked", x_var="q1")
    for wave in (1, 2):
        breakdowns.add(stack_var="age_group", title=f"Q1 by age, wave {wave}", tab_path="sis/age/q1", filter=RowFilter(f"wave == {wave}"))
        breakdowns.add(stack_var="gender", title=f"Q1 by gender, wave {wave}", tab_path="sis/gender/q1", filter=RowFilter(f"wave == {wave}"))
    breakdowns.set_labels({"q1": "Question 1"})

    trend = create_collection(labels={"trend": "Trend"}, type="line")
    trend.add(x_var="wave", y_var="q1", title="Mean Q1 per wave", tab_path="trend", title_tabset="Q1")
    trend.add(x_var="wave", y_var="q2", title="Mean Q2 per wave", tab_path="trend", title_tabset="Q2")

    doc = intro + waves + breakdowns
    doc.add_pagination()
    return doc + trend


def build_chart(payload: Dict, df: pd.DataFrame) -> alt.Chart:
    kind = payload.get("type")
    x_var = payload.get("x_var")
    if kind == "line":
        y_var = payload.get("y_var")
        agg = df.groupby(x_var)[y_var].mean().reset_index()
        return (
            alt.Chart(agg)
            .mark_line(point=True)
            .encode(x=alt.X(f"{x_var}:O", title=x_var), y=alt.Y(f"{y_var}:Q", title=f"Mean {y_var}"))
        )
    if kind == "stacked":
        stack_var = payload.get("stack_var")
        return (
            alt.Chart(df)
            .mark_bar()
            .encode(
                x=alt.X(f"{x_var}:O", title=x_var),
                y=alt.Y("count():Q", stack="normalize", axis=alt.Axis(format=".0%"), title="Share"),
                color=alt.Color(f"{stack_var}:N", title=stack_var),
            )
        )
    return alt.Chart(df).mark_bar().encode(x=alt.X(f"{x_var}:O", title=x_var), y=alt.Y("count():Q", title="Responses"))


def render_payload(item: ContentItem, df: pd.DataFrame):
    payload = item.payload if isinstance(item.payload, dict) else {}
    if payload.get("type") == "text":
        st.markdown(payload.get("content", ""))
        return
    data = item.filter.apply(df) if isinstance(item.filter, RowFilter) else df
    with card(payload.get("title")):
        if data.empty:
            st.info("No rows match this filter.")
        else:
            st.altair_chart(build_chart(payload, data), use_container_width=True)


# ---------- tree renderers ----------
def tab_label(child, group_label: str) -> str:
    if isinstance(child, TabGroupNode):
        return child.label
    return child.title_tabset or (child.title if child.is_leaf else None) or group_label


def render_tabs(children: List, df: pd.DataFrame, group_label: str):
    tabs = st.tabs([tab_label(child, group_label) for child in children])
    for tab, child in zip(tabs, children):
        with tab:
            render_node(child, df, group_label)


def render_node(child, df: pd.DataFrame, group_label: str):
    if isinstance(child, TabGroupNode):
        render_tabs(child.children, df, child.label)
    elif child.is_container:
        render_tabs(child.nested_children, df, child.title_tabset or group_label)
    else:
        render_payload(child, df)


def render_tree(tree: TabGroupNode, df: pd.DataFrame):
    for child in tree.children:
        if isinstance(child, TabGroupNode):
            st.subheader(child.label)
        render_node(child, df, tree.label)


def render_outline(tree: TabGroupNode, df: pd.DataFrame, options):
    for event in serialize(tree):
        if isinstance(event, OpenTab):
            st.markdown(f"{'#' * heading_level(event.depth, options)} {event.label}")
        elif isinstance(event, RenderPayload):
            render_payload(event.item, df)
        elif isinstance(event, CloseTab):
            continue


# ---------- UI setup ----------
st.set_page_config(page_title="Tabnest Preview", layout="wide")
inject_base_styles()
st.title("Tabnest Layout Preview")
st.caption("Nested tabs and pages built from a flat list of content items.")

df = load_demo_data()
collection = build_demo_collection()

with st.sidebar:
    st.markdown("### Layout")
    view = st.radio("View", ["Tabs", "Outline"], index=0)
    with st.expander("Advanced settings", expanded=False):
        base_level = st.slider("Base heading level", min_value=1, max_value=4, value=2)
        policy = st.selectbox("Unmatched branch policy", ["shared", "earliest"])

options = normalize_options({"base_heading_level": base_level, "unresolved_policy": policy})
page_trees = build_page_trees(collection, options)

with st.sidebar:
    st.markdown("---")
    page_idx = st.radio(
        "Page",
        list(range(len(page_trees))),
        format_func=lambda i: page_label(page_trees[i][0], options.pagination_separator),
    )

section, builder = page_trees[page_idx]
render_page_header(
    f"Page {page_label(section, options.pagination_separator)}",
    "Home / Preview",
    [f"Items: {len(section.items)}", f"Unresolved: {len(builder.unresolved)}", f"View: {view}"],
)
for record in builder.unresolved:
    st.warning(f"Item #{record.item_index} ({'/'.join(record.tab_path)}) placed by '{record.policy}' fallback")

if view == "Tabs":
    render_tree(builder.root, df)
else:
    render_outline(builder.root, df, options)
