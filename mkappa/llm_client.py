"""Claude integration for explaining Mezzich's Kappa results.

Every calculation in the package works without this module; it only turns
computed numbers into prose.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from anthropic import Anthropic


MODEL_ID = "claude-opus-4-5-20251101"
MAX_TOKENS = 4096
REPORT_MAX_TOKENS = 8192


SYSTEM_PROMPTS = {
    "educational_companion": """You teach researchers how to read Mezzich's Kappa, the
agreement statistic for several raters who may each apply several codes to a segment.
When you explain a result:
1. Say in plain words how strong the agreement is
2. Tie the numbers back to observed agreement (Po) and chance agreement (Pc)
3. Cite Mezzich et al. (1981) where the method matters
4. End with concrete next steps for the coding team

Assume a graduate-level reader. Keep it short.""",

    "disagreement_analyst": """You look at one segment where raters chose different code sets.
Describe:
1. Which codes were shared, which were added and which were missed
2. Likely causes, such as overlapping code definitions or an ambiguous passage
3. How much the segment pulls proportional agreement down
4. A codebook or training change that would prevent it

Stay constructive.""",

    "report_generator": """You write the reliability section of a research report.
The statistic is Mezzich's Kappa for multiple raters and multiple codes per segment.
Cover the kappa estimate with its standard error, t-test and confidence interval,
segment-level agreement, rater pairs that stand out, and recommendations.
Use the Landis & Koch (1977) bands when labelling strength.
Write Markdown with headed sections and tables.""",

    "chat_assistant": """You answer short questions about inter-rater reliability for
multi-code qualitative data: Mezzich's Kappa, proportional (set overlap) agreement,
chance-expected agreement, t-tests and confidence intervals on kappa, and rater
training. Give an example when it helps.""",
}


def _resolve_system(system_prompt: str) -> str:
    """Map a role name to its prompt; any other string is used as-is."""
    return SYSTEM_PROMPTS.get(system_prompt, system_prompt)


class LLMClient:
    """Thin wrapper over the Anthropic Messages API."""

    def __init__(self, api_key: str):
        self.client = Anthropic(api_key=api_key)
        self.model = MODEL_ID

    def _complete(self, messages: List[Dict[str, str]], system_prompt: str, max_tokens: int) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=_resolve_system(system_prompt),
            messages=messages,
        )
        return response.content[0].text

    def call(
        self,
        prompt: str,
        system_prompt: str = "educational_companion",
        max_tokens: int = MAX_TOKENS,
    ) -> str:
        """Single-turn completion.

        Args:
            prompt: User message
            system_prompt: Role name from SYSTEM_PROMPTS, or a literal system prompt
            max_tokens: Response token limit

        Returns:
            Response text
        """
        return self._complete([{"role": "user", "content": prompt}], system_prompt, max_tokens)

    def call_with_context(
        self,
        prompt: str,
        context: str,
        system_prompt: str = "educational_companion",
        max_tokens: int = MAX_TOKENS,
    ) -> str:
        """Single-turn completion with computed results placed ahead of the task."""
        full_prompt = f"Context:\n{context}\n\nTask:\n{prompt}"
        return self.call(full_prompt, system_prompt=system_prompt, max_tokens=max_tokens)

    def chat(
        self,
        messages: List[Dict[str, str]],
        system_prompt: str = "chat_assistant",
        max_tokens: int = MAX_TOKENS,
    ) -> str:
        """Multi-turn completion over {"role", "content"} messages."""
        return self._complete(messages, system_prompt, max_tokens)


def get_chat_response(
    client: Optional[LLMClient],
    question: str,
    history: List[Dict[str, str]],
) -> str:
    """Answer a sidebar question, leaving the stored history untouched."""
    if client is None:
        return "Add an Anthropic API key on the Welcome page to use the assistant."

    return client.chat(history + [{"role": "user", "content": question}])


def explain_kappa_value(
    client: LLMClient,
    kappa: float,
    p_value: float,
    ci: Tuple[float, float],
    n_raters: int,
    n_segments: int,
) -> str:
    """Plain-language reading of one kappa estimate."""
    prompt = f"""Interpret this Mezzich's Kappa result.

Raters: {n_raters}
Segments: {n_segments}
Kappa: {kappa:.3f}
p-value: {p_value:.4g}
Confidence interval: {ci[0]:.3f} to {ci[1]:.3f}

Say how strong the agreement is, what it means for the study, and what to
change if it is too low."""

    return client.call(prompt, system_prompt="educational_companion")


def analyze_disagreement(
    client: LLMClient,
    segment: int,
    rater_codes: Dict[str, Sequence[str]],
    agreement: float,
) -> str:
    """Explain why raters' code sets differ on one segment.

    Args:
        client: LLMClient instance
        segment: 1-based segment number
        rater_codes: Rater name -> code labels applied (empty if not scored)
        agreement: Segment proportional agreement

    Returns:
        Analysis text
    """
    codes = "\n".join(
        f"  - {rater}: {', '.join(labels) if labels else '(not scored)'}"
        for rater, labels in rater_codes.items()
    )

    prompt = f"""Segment {segment} has proportional agreement {agreement:.3f}.

Codes applied:
{codes}

Explain the disagreement and how to avoid it in future coding rounds."""

    return client.call(prompt, system_prompt="disagreement_analyst")


def generate_report(
    client: LLMClient,
    results_summary: str,
    study_metadata: Dict[str, str],
) -> str:
    """Draft a Markdown reliability report from the text summary of a run."""
    metadata = "\n".join(f"- {key}: {value}" for key, value in study_metadata.items())

    prompt = f"""Write an inter-rater reliability report.

Study:
{metadata}

Computed results:
{results_summary}

Sections: Executive Summary; Method (Mezzich's Kappa for several raters and
multiple codes per segment); Kappa and Significance; Segment Agreement;
Rater Pairs; Recommendations; Conclusion."""

    return client.call(prompt, system_prompt="report_generator", max_tokens=REPORT_MAX_TOKENS)
