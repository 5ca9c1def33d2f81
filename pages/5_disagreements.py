"""Step 5: Disagreement Explorer."""

import streamlit as st
import pandas as pd

from mkappa.disagreement_analyzer import (
    compute_rater_disagreement_profile,
    disagreement_summary,
    filter_disagreements,
)
from mkappa.models import AnalysisConfig, disagreements_to_dataframe

st.set_page_config(page_title="Disagreements - Mezzich's Kappa Calculator", layout="wide")

st.title("Step 5: Explore Disagreements")

if not st.session_state.app_state.get('analysis_complete'):
    st.warning("Please run the analysis on the Analysis page first.")
    st.stop()

rater_data = st.session_state.app_state['rater_data']
result = st.session_state.app_state['result']
disagreements = st.session_state.app_state['disagreements']
config = AnalysisConfig.from_dict(st.session_state.app_state.get('config', {}))

st.markdown(f"""
Understanding **where** raters disagree is just as important as knowing **how much** they disagree.

**Found {len(disagreements)} segments with disagreement** out of {result.segment_count}.
""")

with st.expander("Understanding Disagreement Types"):
    st.markdown("""
    | Type | Description |
    |------|-------------|
    | **Disjoint** | No two raters who coded the segment share any code |
    | **Partial** | Raters share some codes but not all |
    | **Missing** | Partial agreement, and at least one rater did not code the segment |

    **Severity** is 1 minus the segment's proportional agreement.
    """)

st.markdown("---")

st.subheader("Disagreement by Rater Pair")
pair_summary = disagreement_summary(rater_data)
st.dataframe(
    pair_summary.style.background_gradient(subset=['pct_disagreements'], cmap='Reds'),
    use_container_width=True,
    hide_index=True,
)

st.subheader("Rater Disagreement Profile")
st.dataframe(compute_rater_disagreement_profile(rater_data), use_container_width=True, hide_index=True)

st.markdown("---")

st.subheader("Detailed Disagreement Explorer")

col1, col2, col3 = st.columns(3)

with col1:
    selected_rater = st.selectbox(
        "Filter by Rater",
        options=["All"] + list(rater_data.rater_names),
    )

with col2:
    selected_type = st.selectbox(
        "Filter by Type",
        options=["All", "disjoint", "partial", "missing"],
    )

with col3:
    min_severity = st.slider(
        "Minimum Severity",
        min_value=0.0,
        max_value=1.0,
        value=config.min_severity,
        step=0.1,
    )
    st.session_state.app_state['config']['min_severity'] = min_severity

filtered = filter_disagreements(
    disagreements,
    rater=selected_rater if selected_rater != "All" else None,
    disagreement_type=selected_type if selected_type != "All" else None,
    min_severity=min_severity,
)

st.markdown(f"**Showing {len(filtered)} of {len(disagreements)} disagreements**")

if filtered:
    rows = []
    for d in filtered:
        row = {
            "Segment": d.segment + 1,
            "Type": d.disagreement_type,
            "Agreement": f"{d.agreement:.2f}",
            "Severity": f"{d.severity:.2f}",
        }
        for rater in rater_data.rater_names:
            row[rater] = ", ".join(d.rater_codes.get(rater, ())) or "-"
        rows.append(row)

    df = pd.DataFrame(rows)

    def highlight_unscored(row):
        return [
            "background-color: #f0f0f0" if col in rater_data.rater_names and row[col] == "-" else ""
            for col in row.index
        ]

    st.dataframe(df.style.apply(highlight_unscored, axis=1), use_container_width=True, hide_index=True)

    st.markdown("---")
    st.subheader("Analyze Specific Disagreement")

    selected_segment = st.selectbox(
        "Select a segment to analyze:",
        options=[d.segment + 1 for d in filtered[:50]],  # Limit to first 50
    )

    if selected_segment and st.session_state.app_state.get('llm_client'):
        selected = next((d for d in filtered if d.segment + 1 == selected_segment), None)

        if selected and st.button("Analyze This Disagreement"):
            with st.spinner("Analyzing..."):
                from mkappa.llm_client import analyze_disagreement

                analysis = analyze_disagreement(
                    st.session_state.app_state['llm_client'],
                    selected.segment + 1,
                    selected.rater_codes,
                    selected.agreement,
                )

                st.markdown("### Analysis")
                st.markdown(analysis)

else:
    st.info("No disagreements match the current filters.")

st.markdown("---")
st.subheader("Export Disagreements")

if filtered:
    st.download_button(
        "Download as CSV",
        disagreements_to_dataframe(filtered).to_csv(index=False),
        file_name="disagreements.csv",
        mime="text/csv",
    )
