"""
Mezzich's Kappa Calculator
Streamlit entry point: session defaults, step tracker and the sidebar assistant.
"""

import streamlit as st

from mkappa.models import DEFAULT_CONFIDENCE_LEVEL

st.set_page_config(
    page_title="Mezzich's Kappa Calculator",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

STEPS = [
    ("Welcome", "Enter an Anthropic API key (optional) and read how Mezzich's Kappa works"),
    ("Data Upload", "Upload one code-presence table per rater"),
    ("Configure Codes", "Check the code labels and pick the confidence level"),
    ("Run Analysis", "Compute kappa, its standard error and the t-test"),
    ("Disagreements", "Inspect the segments where code sets differ"),
    ("Results", "Charts for segments, rater pairs and code usage"),
    ("Report", "Download the CSV report or a written summary"),
]

CHAT_EXCHANGES_SHOWN = 3


def default_state():
    """Fresh per-session state shared by every page."""
    return {
        'api_key': None,
        'llm_client': None,

        # Uploads and the RaterData built from them
        'rater_files': {},
        'rater_data': None,
        'config': {'confidence_level': DEFAULT_CONFIDENCE_LEVEL},

        # Outputs of the Run Analysis page
        'result': None,
        'pairwise_results': None,
        'rater_impact': None,
        'disagreements': [],
        'analysis_error': None,
        'analysis_complete': False,

        'generated_report': None,
        'chat_history': [],
        'current_step': 1,
    }


if 'app_state' not in st.session_state:
    st.session_state.app_state = default_state()

st.session_state.setdefault('chat_input_key', 0)


def render_sidebar_chat():
    """Sidebar question box backed by the chat assistant prompt."""
    state = st.session_state.app_state

    st.sidebar.markdown("---")
    st.sidebar.subheader("Ask Claude")

    if state['api_key'] is None:
        st.sidebar.info("Add an API key on the Welcome page to ask questions here.")
        return

    question = st.sidebar.text_input(
        "Question about kappa, codes or raters:",
        key=f"chat_input_{st.session_state.chat_input_key}",
        placeholder="e.g., Why is Pc so much lower than Po?"
    )

    if st.sidebar.button("Ask", key="ask_button") and question.strip():
        from mkappa.llm_client import get_chat_response

        with st.sidebar.spinner("Thinking..."):
            answer = get_chat_response(state['llm_client'], question, state['chat_history'])

        state['chat_history'].extend([
            {'role': 'user', 'content': question},
            {'role': 'assistant', 'content': answer},
        ])
        # A new widget key empties the text box
        st.session_state.chat_input_key += 1
        st.rerun()

    history = state['chat_history']
    if history:
        st.sidebar.markdown("**Recent Q&A:**")
        pairs = list(zip(history[::2], history[1::2]))[-CHAT_EXCHANGES_SHOWN:]
        for asked, answered in reversed(pairs):
            with st.sidebar.expander(f"Q: {asked['content'][:50]}...", expanded=False):
                st.markdown(f"**Q:** {asked['content']}")
                st.markdown(f"**A:** {answered['content']}")


def render_progress_indicator():
    """Mark finished, current and upcoming steps in the sidebar."""
    st.sidebar.markdown("## Progress")

    current = st.session_state.app_state['current_step']
    for number, (name, _) in enumerate(STEPS, start=1):
        label = f"{number}. {name}"
        if number < current:
            st.sidebar.markdown(f"✅ {label}")
        elif number == current:
            st.sidebar.markdown(f"**➡️ {label}**")
        else:
            st.sidebar.markdown(f"⬜ {label}")


st.title("📊 Mezzich's Kappa Calculator")
st.markdown("""
Agreement statistics for studies where **several raters** may tag each segment
with **more than one code**.

Pairs of raters are compared by the overlap of their code sets, averaged over
every pair and segment, corrected for chance, and tested against zero with a
t-test.
""")

st.markdown("### Steps")
st.markdown("\n".join(
    f"{number}. **{name}**: {description}"
    for number, (name, description) in enumerate(STEPS, start=1)
))
st.markdown("---\n*Use the pages in the sidebar to move between steps.*")

render_progress_indicator()
render_sidebar_chat()
