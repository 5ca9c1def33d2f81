"""Step 6: Results Dashboard."""

import streamlit as st
import pandas as pd

from mkappa.disagreement_analyzer import code_frequency_table
from mkappa.mezzich import interpret_kappa
from mkappa.models import impact_to_dataframe, pairwise_to_dataframe
from visualization.charts import (
    color_by_kappa,
    plot_code_frequency,
    plot_kappa_interval,
    plot_pairwise_heatmap,
    plot_rater_impact,
    plot_segment_agreement,
)

st.set_page_config(page_title="Results - Mezzich's Kappa Calculator", layout="wide")

st.title("Step 6: Results Dashboard")

if not st.session_state.app_state.get('analysis_complete'):
    st.warning("Please run the analysis on the Analysis page first.")
    st.stop()

rater_data = st.session_state.app_state['rater_data']
result = st.session_state.app_state['result']
pairwise = st.session_state.app_state['pairwise_results']
rater_impact = st.session_state.app_state['rater_impact']
sig = result.significance

tab1, tab2, tab3, tab4 = st.tabs([
    "Overview",
    "Segments",
    "Pairwise Analysis",
    "Rater Performance",
])

with tab1:
    st.header("Reliability Overview")

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        interp, color = interpret_kappa(result.kappa.kappa)
        st.metric("Mezzich's Kappa", f"{result.kappa.kappa:.3f}")
        st.markdown(f"**Status:** :{color}[{interp}]")

    with col2:
        st.metric("Standard Error", f"{result.kappa.std_error:.4f}")

    with col3:
        st.metric("p-value", f"{sig.p_value:.4g}", help=f"t({sig.degrees_of_freedom}) = {sig.t_statistic:.3f}")

    with col4:
        st.metric("Observed / Expected", f"{result.summary.observed_agreement:.3f} / {result.summary.expected_agreement:.3f}")

    st.plotly_chart(plot_kappa_interval(result), use_container_width=True)

    if st.session_state.app_state.get('llm_client'):
        with st.expander("AI Summary", expanded=True):
            if 'overview_interpretation' not in st.session_state:
                from mkappa.llm_client import explain_kappa_value

                st.session_state['overview_interpretation'] = explain_kappa_value(
                    st.session_state.app_state['llm_client'],
                    result.kappa.kappa,
                    sig.p_value,
                    sig.confidence_interval,
                    result.n_raters,
                    result.segment_count,
                )

            st.markdown(st.session_state['overview_interpretation'])

    st.subheader("Code Usage by Rater")
    st.plotly_chart(plot_code_frequency(code_frequency_table(rater_data)), use_container_width=True)

with tab2:
    st.header("Segment Agreement")

    st.plotly_chart(plot_segment_agreement(result), use_container_width=True)

    segments_df = result.segments_to_dataframe()
    styled = segments_df.style.map(
        lambda x: color_by_kappa(x) if isinstance(x, (int, float)) and not pd.isna(x) else "",
        subset=["proportional_agreement"],
    )
    st.dataframe(styled, use_container_width=True, hide_index=True)

with tab3:
    st.header("Pairwise Rater Analysis")

    st.plotly_chart(plot_pairwise_heatmap(pairwise), use_container_width=True)

    pairwise_df = pd.DataFrame([{
        "Rater A": p.rater_a,
        "Rater B": p.rater_b,
        "Mean Agreement": f"{p.mean_agreement:.3f}" if p.mean_agreement is not None else "n/a",
        "Shared Segments": p.shared_segments,
    } for p in pairwise])

    st.dataframe(pairwise_df, use_container_width=True, hide_index=True)

with tab4:
    st.header("Rater Performance")

    if not rater_impact:
        st.info("Rater impact needs at least three raters.")
    else:
        st.markdown("""
        Kappa recomputed with each rater left out.
        **Positive delta** = removing this rater improves agreement (they may need additional training).
        **Negative delta** = removing this rater lowers agreement.
        """)

        st.plotly_chart(plot_rater_impact(rater_impact), use_container_width=True)

        impact_df = pd.DataFrame([{
            "Rater": r.rater,
            "Kappa Without": f"{r.kappa_without:.3f}" if r.kappa_without is not None else "n/a",
            "Delta": f"{r.delta:+.3f}" if r.delta is not None else "n/a",
            "Note": r.error,
        } for r in rater_impact])

        st.dataframe(impact_df, use_container_width=True, hide_index=True)

st.markdown("---")
st.subheader("Export Results")

col1, col2, col3 = st.columns(3)

with col1:
    st.download_button(
        "Download Segment Results (CSV)",
        result.segments_to_dataframe().to_csv(index=False),
        file_name="segment_agreement.csv",
        mime="text/csv",
    )

with col2:
    st.download_button(
        "Download Pairwise Results (CSV)",
        pairwise_to_dataframe(pairwise).to_csv(index=False),
        file_name="pairwise_agreement.csv",
        mime="text/csv",
    )

with col3:
    if rater_impact:
        st.download_button(
            "Download Rater Impact (CSV)",
            impact_to_dataframe(rater_impact).to_csv(index=False),
            file_name="rater_impact.csv",
            mime="text/csv",
        )
