import json
import logging

from openai import APIStatusError, AsyncOpenAI
from openinference.semconv.trace import SpanAttributes
from opentelemetry import trace
from pydantic import ValidationError

from decision_tracker.errors import (
    ConfigurationError,
    InvalidModelOutputError,
    UpstreamError,
)
from decision_tracker.models import ProsConsResponse, WebSearchResponse
from decision_tracker.prompts import (
    PROS_CONS_PROMPT,
    SYSTEM_PROMPT,
    WEB_SEARCH_SYSTEM_PROMPT,
    build_pros_cons_prompt,
)

logger = logging.getLogger(__name__)

PPLX_BASE_URL = "https://api.perplexity.ai"
TEMPERATURE = 0.7
MAX_TOKENS = 1000


def openai_client(settings):
    if not settings.openai_api_key:
        raise ConfigurationError("OpenAI API key not configured")
    return AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)


def perplexity_client(settings):
    if not settings.pplx_api_key:
        raise ConfigurationError("Perplexity API key not configured")
    return AsyncOpenAI(
        api_key=settings.pplx_api_key, base_url=PPLX_BASE_URL, max_retries=0
    )


def _status_text(error: APIStatusError):
    return error.response.reason_phrase or str(error.status_code)


def parse_pros_cons(content):
    """
    Parse the model's completion text into a pros/cons dict.

    The parsed object is returned unchanged; validation only rejects replies
    that are not JSON or lack two string lists named ``pros`` and ``cons``.
    """
    try:
        parsed = json.loads(content)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidModelOutputError(f"Invalid JSON from model: {e}") from e
    try:
        ProsConsResponse.model_validate(parsed, strict=True)
    except ValidationError as e:
        raise InvalidModelOutputError(
            f"Model output is not a pros/cons object: {e.error_count()} error(s)"
        ) from e
    return parsed


async def generate_pros_cons(client, title, description=None, model="gpt-4o-mini"):
    """
    Ask the model for 3-5 pros and 3-5 cons for a decision.

    Returns:
    {
        "pros": list[str],
        "cons": list[str]
    }
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("openai_generate_pros_cons") as span:
        prompt = build_pros_cons_prompt(title, description)
        span.set_attribute(SpanAttributes.OPENINFERENCE_SPAN_KIND, "LLM")
        span.set_attribute(SpanAttributes.LLM_PROMPT_TEMPLATE, PROS_CONS_PROMPT)
        span.set_attribute(
            SpanAttributes.LLM_PROMPT_TEMPLATE_VARIABLES,
            str({"title": title, "description": description}),
        )
        span.set_attribute(SpanAttributes.INPUT_VALUE, prompt)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except APIStatusError as e:
            raise UpstreamError(f"OpenAI API error: {_status_text(e)}") from e

        content = response.choices[0].message.content
        span.set_attribute(SpanAttributes.OUTPUT_VALUE, str(content))
    return parse_pros_cons(content)


async def perplexity_web_search(client, query, model="sonar"):
    """
    Search the web for a query using Perplexity.
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("perplexity_web_search") as span:
        span.set_attribute(SpanAttributes.OPENINFERENCE_SPAN_KIND, "LLM")
        span.set_attribute(SpanAttributes.INPUT_VALUE, query)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": WEB_SEARCH_SYSTEM_PROMPT},
                    {"role": "user", "content": query},
                ],
                extra_body={"return_related_questions": True},
            )
        except APIStatusError as e:
            raise UpstreamError(f"Perplexity API error: {_status_text(e)}") from e

        content = response.choices[0].message.content or ""
        related_questions = getattr(response, "related_questions", None) or []
        span.set_attribute(SpanAttributes.OUTPUT_VALUE, content)
    return WebSearchResponse(
        content=content, related_questions=[str(q) for q in related_questions]
    )
