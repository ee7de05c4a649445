"""
Plan Type Detector Application
Streamlit front end for classifying pharmacy benefit cards, one at a time
or from an uploaded CSV.
"""

import logging
from datetime import datetime

import streamlit as st
import pandas as pd
import plotly.express as px

from plan_classifier import (
    ClassificationEngine,
    ReferenceStore,
    CLASSIFIER_CONFIG,
    SOURCE_CONFIG,
)
from plan_classifier.batch import classify_dataframe, read_cards_csv, summarize_results
from plan_classifier.reference.refresh import (
    load_cached_reference_data,
    refresh_reference_data,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)

# Page configuration
st.set_page_config(
    page_title="Plan Type Detector",
    page_icon="💊",
    layout="centered",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine() -> ClassificationEngine:
    """One engine per server process, warm-started from the disk cache."""
    engine = ClassificationEngine(ReferenceStore())
    load_cached_reference_data(engine.store)
    return engine


def main():
    """Main application entry point."""
    engine = get_engine()

    st.title("💊 Plan Type Detector")
    st.markdown("Detect **Medicare Part D**, **State Medicaid** or **Commercial** coverage from a pharmacy card")

    # Sidebar: reference data status
    with st.sidebar:
        render_reference_sidebar(engine)

    tab1, tab2, tab3 = st.tabs(["🔎 Single Card", "📤 Batch Upload", "ℹ️ Help"])

    with tab1:
        render_single_card_tab(engine)

    with tab2:
        render_batch_tab(engine)

    with tab3:
        render_help_tab()


def render_reference_sidebar(engine: ClassificationEngine):
    """Show loaded reference tables and the refresh control."""
    st.header("📚 Reference Data")

    snapshot = engine.store.snapshot
    for source_id, counts in snapshot.source_counts().items():
        description = SOURCE_CONFIG["sources"][source_id]["description"]
        if counts["loaded"]:
            st.success(f"**{description}**: {counts['pairs']:,} pairs, {counts['bins']:,} BINs")
        else:
            st.warning(f"**{description}**: not loaded")

    if st.button("🔄 Refresh Reference Data", use_container_width=True):
        with st.spinner("Downloading reference files..."):
            report = refresh_reference_data(engine.store)
        if report.failed:
            st.error(f"Failed to load: {', '.join(report.failed)}. Previous tables kept.")
        else:
            st.success("Reference data refreshed")
        st.rerun()


def render_single_card_tab(engine: ClassificationEngine):
    """Render the single card form."""
    with st.form("card_form"):
        col1, col2 = st.columns(2)
        with col1:
            member_id = st.text_input("Member ID", placeholder="Member ID")
            bin_value = st.text_input("BIN", placeholder="BIN")
        with col2:
            group = st.text_input("Group Number", placeholder="Group Number")
            pcn = st.text_input("PCN", placeholder="PCN")

        submitted = st.form_submit_button("Classify", type="primary", use_container_width=True)

    if not submitted:
        return

    result = engine.classify({
        "memberId": member_id,
        "group": group,
        "bin": bin_value,
        "pcn": pcn,
    })

    if result.confidence:
        st.metric(result.plan, f"{result.confidence * 100:.0f}%", help=f"Matched by {result.stage} stage")
    else:
        st.warning(f"**{result.plan}**")

    if result.scores:
        with st.expander("Heuristic scores", expanded=False):
            st.json(result.scores)


def render_batch_tab(engine: ClassificationEngine):
    """Render the CSV batch upload tab."""
    st.markdown("""
    Upload a CSV with any of the columns **memberId**, **group**, **bin**, **pcn**.
    Missing columns are treated as blank.
    """)

    uploaded = st.file_uploader("Choose a CSV file", type=["csv"])
    if uploaded is None:
        return

    try:
        cards_df = read_cards_csv(uploaded)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        st.error(f"Could not read CSV: {e}")
        return

    results_df = classify_dataframe(engine, cards_df)
    summary = summarize_results(results_df)

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Cards", summary["total"])
    with col2:
        st.metric("Average Confidence", f"{summary['average_confidence'] * 100:.0f}%")

    if summary["plans"]:
        fig = px.bar(
            x=list(summary["plans"].keys()),
            y=list(summary["plans"].values()),
            labels={"x": "Plan", "y": "Cards"},
            title="Plan Distribution",
            color_discrete_sequence=["#1f77b4"]
        )
        st.plotly_chart(fig, use_container_width=True)

    st.dataframe(results_df, use_container_width=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    st.download_button(
        "📥 Download Results (CSV)",
        data=results_df.to_csv(index=False).encode("utf-8"),
        file_name=f"plan_classification_{timestamp}.csv",
        mime="text/csv",
    )


def render_help_tab():
    """Render the help tab."""
    threshold = CLASSIFIER_CONFIG["heuristic"]["min_score"]
    st.header("ℹ️ How classification works")
    st.markdown(f"""
    1. **Exact lookup**: BIN + PCN found in the CMS Part D crosswalk or the State
       Medicaid list (99%), then BIN alone (90%), then known commercial BINs (90%).
    2. **Heuristics**: PCN and group keywords, member ID shape and BIN membership
       are scored per plan type. The best plan is reported if it scores at least
       {threshold:.0%}.
    3. Otherwise the card is flagged **{CLASSIFIER_CONFIG['unknown_plan']}**.

    Fields are matched case-insensitively with all spaces removed.
    """)


if __name__ == "__main__":
    main()
