"""Step 3: Code Labels & Analysis Settings."""

import streamlit as st
import pandas as pd

from mkappa.data_transformer import transform_to_rater_data
from mkappa.disagreement_analyzer import code_frequency_table
from mkappa.errors import MezzichKappaError
from mkappa.models import AnalysisConfig
from mkappa.report import render_failure

st.set_page_config(page_title="Configure Codes - Mezzich's Kappa Calculator", layout="wide")

st.title("Step 3: Configure Codes")

if len(st.session_state.app_state.get('rater_files', {})) < 2:
    st.warning("Please upload at least two rater files on the Data Upload page first.")
    st.stop()

rater_files = st.session_state.app_state['rater_files']
config_values = st.session_state.app_state.get('config', {})

st.markdown("""
Check the code labels detected from your files and choose the confidence level for
the kappa interval.
""")

# Load once with detected labels to show what the files contain
try:
    detected = transform_to_rater_data(rater_files)
except MezzichKappaError as e:
    st.error(render_failure(e))
    st.stop()

col1, col2, col3 = st.columns(3)
with col1:
    st.metric("Raters", detected.n_raters)
with col2:
    st.metric("Segments", detected.n_segments)
with col3:
    lengths = {name: len(r) for name, r in zip(detected.rater_names, detected.raters)}
    st.metric("Shortest File (rows)", min(lengths.values()))

if len(set(lengths.values())) > 1:
    st.warning(
        "Raters supplied different numbers of segments: "
        + ", ".join(f"{name}: {n}" for name, n in lengths.items())
        + ". Missing rows are treated as unscored."
    )

st.markdown("---")
st.subheader("1. Code Labels")

if detected.code_labels:
    st.success(f"Header row detected with {len(detected.code_labels)} code labels.")
    default_labels = "\n".join(detected.code_labels)
else:
    st.info("No header row found. Codes will be shown as c1, c2, ... unless you name them below.")
    default_labels = "\n".join(config_values.get('code_labels') or [])

labels_text = st.text_area(
    "Code labels (one per line, in column order)",
    value=default_labels,
    height=200,
    help="Leave empty to use numbered labels",
)
code_labels = [line.strip() for line in labels_text.splitlines() if line.strip()] or None

st.subheader("2. Confidence Level")

confidence_level = st.select_slider(
    "Confidence level for the kappa interval",
    options=[0.80, 0.90, 0.95, 0.98, 0.99],
    value=config_values.get('confidence_level', 0.95),
    format_func=lambda x: f"{x:.0%}",
)

st.markdown("---")

if st.button("Save Configuration", type="primary", use_container_width=True):
    try:
        config = AnalysisConfig(confidence_level=confidence_level, code_labels=code_labels)
        rater_data = transform_to_rater_data(rater_files, config)
    except MezzichKappaError as e:
        st.error(render_failure(e))
        st.stop()

    st.session_state.app_state['config'] = {
        'confidence_level': config.confidence_level,
        'code_labels': config.code_labels,
    }
    st.session_state.app_state['rater_data'] = rater_data
    st.session_state.app_state['analysis_complete'] = False
    st.session_state.app_state['current_step'] = max(st.session_state.app_state.get('current_step', 1), 3)
    st.success("Configuration saved!")

rater_data = st.session_state.app_state.get('rater_data')
if rater_data:
    st.subheader("Code Usage")
    freq = code_frequency_table(rater_data)
    st.dataframe(freq, use_container_width=True)

    st.subheader("Segment Preview")
    preview = pd.DataFrame([
        {"Segment": seg + 1, **{
            name: ", ".join(rater_data.labels_for(r, seg))
            for r, name in enumerate(rater_data.rater_names)
        }}
        for seg in range(min(10, rater_data.n_segments))
    ])
    st.dataframe(preview, use_container_width=True, hide_index=True)

    st.info("Navigate to **4. Run Analysis** to continue.")
