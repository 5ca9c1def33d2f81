"""Step 2: Data Upload & Preview."""

import streamlit as st

from mkappa.data_transformer import default_rater_names, preview_dataframe
from mkappa.errors import DataLoadError

st.set_page_config(page_title="Data Upload - Mezzich's Kappa Calculator", layout="wide")

st.title("Step 2: Upload Your Data")

st.markdown("""
Upload **one file per rater** (CSV or XLSX). Every file must describe the same segments
in the same order.
""")

with st.expander("Data Format Guide"):
    st.markdown("""
    Each rater's file is a code-presence table:

    - **Rows** = segments (passages, turns, images...), in the same order for every rater
    - **Columns** = codes, in the same order for every rater
    - **Cells** = `1` if the rater applied the code to the segment, `0` (or blank) otherwise
    - An optional **header row** with code names is detected automatically
      (a row whose first cell contains letters)

    | Praise | Criticism | Question |
    |--------|-----------|----------|
    | 1 | 0 | 0 |
    | 1 | 0 | 1 |
    | 0 | 0 | 0 |

    A row of all zeros, or an empty line, means the rater did not code that segment. Rows may
    be shorter than the header; missing cells count as 0. Files with fewer rows
    than the others are treated as unscored for the missing segments.
    """)

st.markdown("---")
st.subheader("Upload Rater Files")

uploaded_files = st.file_uploader(
    "Upload CSV or XLSX files (one per rater)",
    type=['xlsx', 'xls', 'csv'],
    accept_multiple_files=True,
    help="Upload one file for each rater. Files should have the same columns.",
)

if uploaded_files:
    if len(uploaded_files) < 2:
        st.warning("Upload at least two rater files to measure agreement.")

    st.success(f"Uploaded {len(uploaded_files)} files")

    st.subheader("Name Your Raters")

    rater_files = {}
    duplicate_names = []
    default_names = default_rater_names(uploaded_files)
    for i, (file, default_name) in enumerate(zip(uploaded_files, default_names)):
        col1, col2 = st.columns([1, 3])
        with col1:
            rater_name = st.text_input(
                f"Rater name for {file.name}",
                value=default_name,
                key=f"rater_name_{i}",
            )
        with col2:
            try:
                df, _ = preview_dataframe(file, n_rows=4)
                st.dataframe(df, use_container_width=True, height=160)
            except DataLoadError as e:
                st.error(str(e))

        if rater_name in rater_files:
            duplicate_names.append(rater_name)
        else:
            rater_files[rater_name] = file

    if duplicate_names:
        st.error(
            f"Rater names must be unique ({', '.join(sorted(set(duplicate_names)))} is used more "
            "than once). Rename the raters above before continuing."
        )
        st.stop()

    signature = tuple((name, f.name, f.size) for name, f in rater_files.items())
    if signature != st.session_state.app_state.get('upload_signature'):
        # New files invalidate any earlier analysis
        st.session_state.app_state['upload_signature'] = signature
        st.session_state.app_state['rater_files'] = rater_files
        st.session_state.app_state['rater_data'] = None
        st.session_state.app_state['analysis_complete'] = False

st.markdown("---")
if len(st.session_state.app_state.get('rater_files', {})) >= 2:
    st.session_state.app_state['current_step'] = max(st.session_state.app_state.get('current_step', 1), 2)
    st.info("Data uploaded! Navigate to **3. Configure Codes** to continue.")
