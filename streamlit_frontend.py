from __future__ import annotations
import logging

import streamlit as st
from streamlit.logger import get_logger

from config import (
    DEFAULT_REGION,
    DEFAULT_USER_COUNT,
    LOG_LEVEL,
    MAX_USER_COUNT,
    MIN_USER_COUNT,
    POLL_INTERVAL_SECONDS,
    REGIONS,
)
from charts import (
    chart_data,
    pie_chart,
    progress_rows,
    surname_length_frame,
)
from models import QueryParameters
from randomuser_request import RandomUserClient
from stats_controller import StatsController, StatsView

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = get_logger(__name__)

# =============== Config ===============
st.set_page_config(page_title="Random User Statistics", layout="wide")


# =============== Helper functions ===============


def get_controller() -> StatsController:
    """One controller per browser session, started on first use."""
    if "controller" not in st.session_state:
        controller = StatsController(
            RandomUserClient(),
            parameters=QueryParameters(count=DEFAULT_USER_COUNT, region=DEFAULT_REGION),
        )
        controller.start()
        st.session_state.controller = controller
        logger.info("Created stats controller for new session")
    return st.session_state.controller


def render_distribution(title: str, table, chart_title: str):
    st.subheader(title)
    if not table:
        st.info("No data to display.")
        return
    for label, fraction, badge in progress_rows(table):
        st.progress(fraction, text=f"{label}: {badge}")
    fig = pie_chart(chart_data(table), chart_title)
    if fig is not None:
        st.plotly_chart(fig, use_container_width=True)


def render_surname_lengths(counts):
    st.subheader("Last Name Length Counts")
    if not counts:
        st.info("No data to display.")
        return
    st.dataframe(surname_length_frame(counts), use_container_width=True, hide_index=True)


def render_stats(view: StatsView):
    if view.error:
        st.error(view.error)

    if view.loading or not view.has_data:
        if not view.error:
            st.info("Fetching user data...")
        return

    snapshot = view.snapshot
    st.metric(
        "Total Users",
        len(view.records),
        help=f"From {view.source_parameters.region} nationality",
    )

    c1, c2 = st.columns(2, gap="large")
    with c1:
        render_distribution(
            "Gender Distribution", snapshot.gender_distribution, "Gender Distribution"
        )
    with c2:
        render_distribution(
            "Age Distribution", snapshot.age_bracket_distribution, "Age Distribution"
        )
    c3, c4 = st.columns(2, gap="large")
    with c3:
        render_surname_lengths(snapshot.surname_length_counts)
    with c4:
        render_distribution(
            "Top 10 States",
            snapshot.top_region_distribution,
            "Top States Distribution",
        )


# =============== Main App =================
st.title("Random User Statistics")
controller = get_controller()

c1, c2 = st.columns(2, gap="large")
with c1:
    user_count = st.number_input(
        f"Number of Users ({MIN_USER_COUNT}-{MAX_USER_COUNT})",
        value=controller.parameters.count,
        step=1,
        help="Data updates automatically as you type",
    )
with c2:
    current_region = controller.parameters.region
    nationality = st.selectbox(
        "Nationality",
        options=REGIONS,
        index=REGIONS.index(current_region) if current_region in REGIONS else 0,
        help="Country code",
    )

if int(user_count) != controller.parameters.count or nationality != current_region:
    controller.update_parameters(count=int(user_count), region=nationality)

st.divider()


@st.fragment(run_every=POLL_INTERVAL_SECONDS)
def stats_panel():
    render_stats(controller.view)


stats_panel()
