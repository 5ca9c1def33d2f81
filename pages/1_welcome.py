"""Step 1: Welcome & API Key Setup."""

import streamlit as st

st.set_page_config(page_title="Welcome - Mezzich's Kappa Calculator", layout="wide")

st.title("Welcome to the Mezzich's Kappa Calculator")

st.markdown("""
This educational platform helps you calculate and understand **Mezzich's Kappa**, an
inter-rater reliability statistic for studies where **several raters** may apply
**one or more codes** to each segment of data.

## When do I need Mezzich's Kappa?

Cohen's and Fleiss' Kappa assume each rater assigns exactly one category per unit.
Qualitative coding rarely works that way: a passage of an interview can be tagged with
several themes at once. Mezzich's Kappa handles this by:

- Comparing the **sets of codes** two raters applied to a segment
  (codes in common ÷ all codes either rater applied)
- Averaging that proportional agreement over **every pair of raters**
- Correcting for **chance agreement** implied by the total volume of coding

## What you get

- **Kappa** with its **standard error**
- A **t-test** of kappa against zero (t, degrees of freedom, p-value)
- A **confidence interval** for kappa
- **Per-segment** agreement, so you can find the passages raters read differently
""")

with st.expander("Learn More: Interpreting Kappa Values"):
    st.markdown("""
    | Kappa | Interpretation |
    |-------|----------------|
    | κ > 0.80 | **Almost perfect** agreement |
    | 0.60 < κ ≤ 0.80 | **Substantial** agreement |
    | 0.40 < κ ≤ 0.60 | **Moderate** agreement |
    | 0.20 < κ ≤ 0.40 | **Fair** agreement |
    | 0 ≤ κ ≤ 0.20 | **Slight** agreement |
    | κ < 0 | **Poor** agreement (below chance) |

    *Bands from Landis & Koch (1977). Method from Mezzich et al. (1981),
    J Psych Res 16:29-39.*
    """)


state = st.session_state.app_state

st.header("Optional: Claude Explanations")

st.markdown("""
With an Anthropic API key the app can explain your kappa in plain language, discuss
individual disagreements and draft a report. The key lives only in this browser
session. Every statistic is computed without it.
""")

api_key = st.text_input(
    "Anthropic API Key",
    type="password",
    value=state.get('api_key') or '',
    help="Create a key at https://console.anthropic.com/",
)


def continue_to_upload(client=None, key=None):
    state['api_key'] = key
    state['llm_client'] = client
    state['current_step'] = max(state.get('current_step', 1), 2)


col1, col2 = st.columns(2)

with col1:
    if st.button("Use this key", type="primary"):
        key = api_key.strip()
        if not key:
            st.warning("Paste a key first, or continue without one.")
        else:
            from mkappa.llm_client import LLMClient

            try:
                client = LLMClient(key)
                # One tiny request proves the key works
                client.call("Reply with the single word: ready", max_tokens=10)
            except Exception as e:
                st.error(f"The key was rejected: {e}")
            else:
                continue_to_upload(client, key)
                st.success("Key accepted. Open **2. Data Upload** in the sidebar.")

with col2:
    if st.button("Continue without Claude", type="secondary"):
        continue_to_upload()
        st.success("Explanations are off. Open **2. Data Upload** in the sidebar.")

st.markdown("---")
st.subheader("Session")

rater_data = state.get('rater_data')
checklist = [
    (
        bool(state.get('api_key')),
        "Claude explanations enabled",
        "Claude explanations off (optional)",
    ),
    (
        rater_data is not None,
        f"{rater_data.n_raters} raters, {rater_data.n_segments} segments loaded" if rater_data else "",
        "No rater files loaded",
    ),
    (
        bool(state.get('analysis_complete')),
        "Kappa computed",
        "Analysis not run yet",
    ),
]

for done, done_text, pending_text in checklist:
    if done:
        st.success(f"✅ {done_text}")
    else:
        st.info(f"⬜ {pending_text}")
