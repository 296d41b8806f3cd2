"""LLM prompts for the decision tracker."""

SYSTEM_PROMPT = (
    "You are a helpful decision-making assistant. Always respond with valid JSON only."
)

PROS_CONS_PROMPT = """Generate pros and cons for this decision: "{title}"{context}

Please provide exactly 3-5 pros and 3-5 cons in JSON format:
{{
  "pros": ["pro 1", "pro 2", "pro 3"],
  "cons": ["con 1", "con 2", "con 3"]
}}

Make the pros and cons specific, helpful, and relevant to the decision. Keep each point concise but meaningful."""

ADDITIONAL_CONTEXT = "\n\nAdditional context: {description}"

WEB_SEARCH_SYSTEM_PROMPT = """You are a research assistant helping someone think through a personal decision.
Summarize what the web says about the question in a few short paragraphs.
Focus on practical considerations, trade-offs, costs and common experiences."""

RESEARCH_QUERY = "{title} pros cons considerations"


def build_pros_cons_prompt(title, description=None):
    context = ADDITIONAL_CONTEXT.format(description=description) if description else ""
    return PROS_CONS_PROMPT.format(title=title, context=context)


def build_research_query(title):
    return RESEARCH_QUERY.format(title=title.strip())
