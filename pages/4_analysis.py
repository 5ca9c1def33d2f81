"""Step 4: Run Analysis."""

import streamlit as st
import pandas as pd

from mkappa.errors import MezzichKappaError
from mkappa.mezzich import interpret_kappa
from mkappa.report import render_failure

st.set_page_config(page_title="Run Analysis - Mezzich's Kappa Calculator", layout="wide")

st.title("Step 4: Run Reliability Analysis")

if not st.session_state.app_state.get('rater_data'):
    st.warning("Please save your configuration on the Configure Codes page first.")
    st.stop()

rater_data = st.session_state.app_state['rater_data']
confidence_level = st.session_state.app_state['config'].get('confidence_level', 0.95)

st.markdown(f"""
Ready to compute Mezzich's Kappa for your data:

- **{rater_data.n_raters} raters**: {', '.join(rater_data.rater_names)}
- **{rater_data.n_segments} segments**
- **{confidence_level:.0%} confidence interval**
""")

with st.expander("What will be calculated?"):
    st.markdown("""
    **Primary Statistics:**
    - **Segment agreement** - mean proportional agreement over every pair of raters who both coded the segment
    - **Observed agreement (Po)** - mean segment agreement
    - **Expected agreement (Pc)** - total agreement divided by the number of coding schemes
    - **Mezzich's Kappa** - (Po - Pc) / (1 - Pc), with its standard error

    **Significance:**
    - **t-test** of kappa against zero with segments - 1 degrees of freedom
    - **Confidence interval** for kappa

    **Rater Analysis:**
    - **Pairwise agreement** between each pair of raters
    - **Rater impact** - kappa with each rater left out (3+ raters)
    - **Disagreement detection** - segments where raters applied different codes
    """)

st.markdown("---")

if st.button("Run Complete Analysis", type="primary", use_container_width=True):
    progress_bar = st.progress(0)
    status_text = st.empty()

    from mkappa.agreement import compute_pairwise_rater_agreement
    from mkappa.disagreement_analyzer import find_disagreements
    from mkappa.mezzich import compute_mezzich_kappa, compute_rater_impact

    try:
        status_text.text("Computing Mezzich's Kappa...")
        result = compute_mezzich_kappa(rater_data, confidence_level)
    except MezzichKappaError as e:
        st.session_state.app_state['analysis_complete'] = False
        st.session_state.app_state['analysis_error'] = str(e)
        st.error(render_failure(e))
        st.stop()

    st.session_state.app_state['result'] = result
    st.session_state.app_state['analysis_error'] = None
    progress_bar.progress(40)

    status_text.text("Computing pairwise rater agreement...")
    st.session_state.app_state['pairwise_results'] = compute_pairwise_rater_agreement(rater_data)
    progress_bar.progress(60)

    status_text.text("Analyzing rater impact...")
    st.session_state.app_state['rater_impact'] = compute_rater_impact(rater_data, result.kappa.kappa)
    progress_bar.progress(80)

    status_text.text("Identifying disagreements...")
    st.session_state.app_state['disagreements'] = find_disagreements(rater_data, result.summary)
    progress_bar.progress(100)

    st.session_state.app_state['analysis_complete'] = True
    st.session_state.app_state['current_step'] = max(st.session_state.app_state.get('current_step', 1), 4)

    status_text.text("Analysis complete!")
    st.success("All reliability statistics computed successfully!")

if st.session_state.app_state.get('analysis_complete'):
    st.markdown("---")
    st.header("Quick Results Summary")

    result = st.session_state.app_state['result']
    sig = result.significance
    disagreements = st.session_state.app_state['disagreements']

    col1, col2, col3, col4 = st.columns(4)

    with col1:
        interp, color = interpret_kappa(result.kappa.kappa)
        st.metric(
            "Mezzich's Kappa",
            f"{result.kappa.kappa:.3f}",
            help=f"Standard error {result.kappa.std_error:.4f}",
        )
        st.markdown(f":{color}[{interp}]")

    with col2:
        st.metric(
            f"t({sig.degrees_of_freedom})",
            f"{sig.t_statistic:.3f}",
            help=f"Two-tailed p = {sig.p_value:.4g}",
        )

    with col3:
        st.metric(
            f"{sig.confidence_level:.0%} CI",
            f"{sig.ci_lower:.3f} to {sig.ci_upper:.3f}",
        )

    with col4:
        st.metric(
            "Segments with Disagreement",
            f"{len(disagreements)}/{result.segment_count}",
        )

    if st.session_state.app_state.get('llm_client'):
        with st.expander("AI Interpretation", expanded=True):
            if st.button("Generate Interpretation"):
                with st.spinner("Generating interpretation..."):
                    from mkappa.mezzich import results_summary

                    summary = results_summary(
                        result,
                        st.session_state.app_state['pairwise_results'],
                        st.session_state.app_state['rater_impact'],
                    )

                    response = st.session_state.app_state['llm_client'].call_with_context(
                        "Provide a brief interpretation of these reliability results. "
                        "Highlight key findings, areas of concern, and recommendations.",
                        summary,
                        system_prompt="educational_companion",
                    )

                    st.markdown(response)

    st.subheader("Agreement Statistics")

    df = pd.DataFrame([
        {"Statistic": "Segments analyzed", "Value": str(result.segment_count)},
        {"Statistic": "Coding schemes", "Value": str(result.summary.coding_scheme_count)},
        {"Statistic": "Total proportional agreement", "Value": f"{result.summary.total_proportional_agreement:.6f}"},
        {"Statistic": "Observed agreement (Po)", "Value": f"{result.summary.observed_agreement:.6f}"},
        {"Statistic": "Expected agreement (Pc)", "Value": f"{result.summary.expected_agreement:.6f}"},
        {"Statistic": "Standard error", "Value": f"{result.kappa.std_error:.6f}"},
        {"Statistic": "p-value", "Value": f"{sig.p_value:.6g}"},
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.info("Navigate to **5. Disagreements** to explore segments, or **6. Results** for the full dashboard.")
