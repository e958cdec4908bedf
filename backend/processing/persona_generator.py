"""
Persona-styled notification text generation.

Each notification is written as a chat message from a fictional character
whose name is the push title. The text comes from a local LLM via Ollama with
structured output, and is then checked against the format rules in
config/persona_rules.py:

- Title must be 1-3 capitalized words and must not name the recipient or a forbidden name
- Body is collapsed to one line, cut to BODY_MAX_LENGTH and must carry an emoji

Any failure along the way (service down, empty or malformed reply, invalid
title, empty body) yields the canned message for the notification type, so a
valid message is always produced. Results are memoized per type in a cache
owned by the caller, so one run makes at most one LLM call per type.
"""

import re
import time
from datetime import date, timedelta
from typing import Any

from ollama import Client
from pydantic import ValidationError

from config.persona_rules import (
    BODY_MAX_LENGTH,
    DEFAULT_EMOJI,
    ELLIPSIS,
    EMOJI_PATTERN,
    FALLBACK_MESSAGES,
    FORBIDDEN_TITLE_SUBSTRINGS,
    TITLE_MAX_LENGTH,
    TITLE_PATTERN,
)
from models import CycleStats, DayClassification, NotificationType, PersonaMessage, PersonaReply
from models.types import MessageCache
from shared.utils import days_word, format_human_date

MAX_LLM_RETRIES = 3  # Maximum retry attempts for failed LLM calls
LLM_TIMEOUT_SECONDS = 60.0
DEFAULT_RECIPIENT_NAME = "Nastia"

TITLE_REGEX = re.compile(TITLE_PATTERN)
EMOJI_REGEX = re.compile(EMOJI_PATTERN)
CODE_FENCE_REGEX = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

SYSTEM_PROMPT = (
    "You write short, sarcastic but caring push notifications for a cycle tracking app. "
    'Always answer with a JSON object only: {"title": "...", "body": "..."}. No explanations.'
)

# Ollama calls can hang; a client-level timeout turns that into a failed attempt.
ollama_client = Client(timeout=LLM_TIMEOUT_SECONDS)


def call_llm(
    model: str,
    prompt: str,
    schema: dict[str, object],
    temperature: float = 0.9,
    max_retries: int = MAX_LLM_RETRIES,
    client: Client | None = None,
) -> str:
    """
    Call Ollama with structured output and exponential backoff retry logic.

    Retries with exponential backoff (1s, 2s) on failure and rejects empty
    responses.

    Args:
        model: Ollama model name (e.g., "llama3.1:8b")
        prompt: Prompt text to send to the LLM
        schema: Pydantic model JSON schema for structured output format
        temperature: Sampling temperature (higher = more varied personas)
        max_retries: Maximum retry attempts on failure (default: MAX_LLM_RETRIES)
        client: Ollama client (default: module-level ollama_client)

    Returns:
        Raw response text from the LLM

    Raises:
        Exception: If all retry attempts fail or LLM returns empty response
    """
    llm = client or ollama_client

    for attempt in range(max_retries):
        try:
            response = llm.chat(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                format=schema,
                options={
                    "temperature": temperature,
                },
            )
            content = response.message.content

            if not content or content.strip() == "":
                raise ValueError("LLM returned empty response")

            return content

        except Exception as e:
            if attempt < max_retries - 1:
                wait_time = 2**attempt
                print(
                    f"  ⚠ Attempt {attempt + 1} failed: {e}. Retrying in {wait_time}s..."
                )
                time.sleep(wait_time)
            else:
                raise Exception(f"LLM call failed after {max_retries} attempts: {e}")

    # This should never be reached due to the raise above, but mypy needs it
    raise Exception("Unreachable code: all retry attempts exhausted")


def build_message_context(
    today: date, stats: CycleStats, classification: DayClassification
) -> dict[str, Any]:
    """
    Collect the numbers and human-readable dates a prompt can refer to.

    Metadata from the classification wins over values recomputed from stats.
    """
    metadata = classification.metadata

    predicted = stats.next_period_date
    if metadata.get("predicted_date"):
        predicted = date.fromisoformat(metadata["predicted_date"])

    days_until_period = metadata.get("days_until_period", (predicted - today).days)
    days_until_ovulation = metadata.get(
        "days_until_ovulation", (stats.ovulation_date - today).days
    )
    days_past_prediction = metadata.get(
        "days_past_prediction", max(0, -days_until_period)
    )
    days_since_start = metadata.get(
        "days_since_period_start", (today - stats.last_start).days
    )

    return {
        "today_human": format_human_date(today),
        "period_human": format_human_date(predicted),
        "days_until_period": days_until_period,
        "days_until_period_word": days_word(days_until_period),
        "days_until_ovulation": days_until_ovulation,
        "days_until_ovulation_word": days_word(days_until_ovulation),
        "days_past_prediction": days_past_prediction,
        "days_past_prediction_word": days_word(days_past_prediction),
        "days_since_period_start": days_since_start,
        "period_start_human": format_human_date(today - timedelta(days=days_since_start)),
    }


def build_prompt(
    notification_type: NotificationType,
    context: dict[str, Any],
    recipient_name: str = DEFAULT_RECIPIENT_NAME,
) -> str:
    """Build the type-specific instruction for one notification."""
    base = f"""You are {recipient_name}'s best friend with a sharp but supportive sense of humor.
Task: write a push notification for a menstrual cycle calendar.
Format:
- Title of 1-3 words: ONLY the name of a fictional character (first name, surname or both), each word capitalized, no emoji. Invent a new playful character tied to the theme (fertility, hormones, protection, cozy days). Never address {recipient_name} in the title and never use the names Igor, Konstantin or Stas. Examples (do not copy): "Ludmila Fertile", "Fyodor Fruitful", "Martha Contraceptova".
- Body of AT MOST {BODY_MAX_LENGTH} characters including emoji, written by that character as a chat message to {recipient_name}. A complete sentence with humor and 1-2 emoji.

Today: {context['today_human']}. Predicted period start: {context['period_human']}."""

    if notification_type == NotificationType.FERTILE_WINDOW:
        situation = (
            f"Fertile window, {abs(context['days_until_ovulation'])} "
            f"{context['days_until_ovulation_word']} until ovulation. Warn about the risk with humor."
        )
    elif notification_type == NotificationType.OVULATION_DAY:
        situation = "Ovulation is today. Point out peak fertility sarcastically."
    elif notification_type == NotificationType.PERIOD_FORECAST:
        situation = (
            f"Period expected in {abs(context['days_until_period'])} "
            f"{context['days_until_period_word']}. Remind her PMS is coming and vary the advice "
            "(heating pad, chocolate, patience, supplies, rest, blanket, series)."
        )
    elif notification_type == NotificationType.PERIOD_START:
        situation = (
            f"The forecast says {context['period_human']}, which is today. "
            "Ask her to check whether it started and log it."
        )
    elif notification_type == NotificationType.PERIOD_WAITING:
        situation = (
            f"Period is {context['days_past_prediction']} {context['days_past_prediction_word']} late. "
            "Be supportive with a sarcastic edge."
        )
    elif notification_type == NotificationType.PERIOD_DELAY_WARNING:
        situation = (
            f"Period is {context['days_past_prediction']} {context['days_past_prediction_word']} late. "
            "Hint, with sarcasm, that a pregnancy test would not hurt."
        )
    elif notification_type == NotificationType.PERIOD_CONFIRMED_DAY0:
        situation = "She logged the start of her period today. Support her with humor."
    else:
        day_number = context["days_since_period_start"] + 1
        situation = (
            f"Day {day_number} of her period (started {context['period_start_human']}). "
            "Support her and say it will get easier soon."
        )

    return f"""{base}
Situation: {situation} At most {BODY_MAX_LENGTH} characters!

Return STRICTLY JSON: {{"title": "character name", "body": "notification text"}}"""


def parse_persona_reply(raw: str) -> PersonaReply:
    """
    Parse an LLM reply into title/body, tolerating markdown code fences.

    Raises:
        ValueError: If the reply is empty, not JSON, or misses a field
    """
    clean = CODE_FENCE_REGEX.sub("", raw or "").replace("```", "").strip()
    if not clean:
        raise ValueError("LLM reply is empty")
    try:
        return PersonaReply.model_validate_json(clean)
    except ValidationError as e:
        raise ValueError(f"LLM reply is not a valid persona message: {e}") from e


def is_valid_persona_title(
    title: str | None, recipient_name: str = DEFAULT_RECIPIENT_NAME
) -> bool:
    """
    Check a title against the persona name rules.

    Rejects titles that don't match TITLE_PATTERN, are longer than
    TITLE_MAX_LENGTH, start with or contain the recipient's name, or contain a
    forbidden name.
    """
    if not title:
        return False
    trimmed = title.strip()
    if len(trimmed) > TITLE_MAX_LENGTH or not TITLE_REGEX.match(trimmed):
        return False

    lowered = trimmed.lower()
    forbidden = list(FORBIDDEN_TITLE_SUBSTRINGS)
    if recipient_name:
        forbidden.append(recipient_name.lower())
    return not any(name in lowered for name in forbidden)


def truncate_with_ellipsis(text: str, limit: int = BODY_MAX_LENGTH) -> str:
    trimmed = (text or "").strip()
    if len(trimmed) <= limit:
        return trimmed
    return f"{trimmed[: max(0, limit - len(ELLIPSIS))].rstrip()}{ELLIPSIS}"


def normalize_body(text: str, limit: int = BODY_MAX_LENGTH) -> str:
    """
    Collapse a body to one line within the character budget, with an emoji.

    When the truncated text has no emoji left, room is made for DEFAULT_EMOJI
    so the result still fits the budget.

    Returns:
        Normalized body ("" if the input has no visible text)
    """
    single_line = " ".join((text or "").split())
    if not single_line:
        return ""

    truncated = truncate_with_ellipsis(single_line, limit)
    if EMOJI_REGEX.search(truncated):
        return truncated

    suffix = f" {DEFAULT_EMOJI}"
    return f"{truncate_with_ellipsis(single_line, limit - len(suffix))}{suffix}"


def fallback_message(notification_type: NotificationType | str) -> PersonaMessage:
    """Canned message for a notification type."""
    key = NotificationType(notification_type).value
    return PersonaMessage(**FALLBACK_MESSAGES[key])


def _generate_with_llm(
    notification_type: NotificationType,
    context: dict[str, Any],
    model: str,
    recipient_name: str,
) -> PersonaMessage:
    prompt = build_prompt(notification_type, context, recipient_name)
    raw = call_llm(model, prompt, PersonaReply.model_json_schema())
    reply = parse_persona_reply(raw)

    title = reply.title.strip()
    if not is_valid_persona_title(title, recipient_name):
        raise ValueError(f'Generated title does not meet persona format: "{title}"')

    body = normalize_body(reply.body)
    if not body:
        raise ValueError("Generated body is empty")

    return PersonaMessage(title=title, body=body)


def generate_message(
    notification_type: NotificationType,
    context: dict[str, Any],
    cache: MessageCache,
    model: str | None = None,
    recipient_name: str = DEFAULT_RECIPIENT_NAME,
) -> PersonaMessage:
    """
    Get the persona message for a notification type, generating it at most once per cache.

    Args:
        notification_type: Today's notification type
        context: Values from build_message_context()
        cache: Per-run memo table, type -> PersonaMessage
        model: Ollama model name, or None to skip the LLM and use canned text
        recipient_name: Name the persona addresses (forbidden in titles)

    Returns:
        Validated PersonaMessage (canned fallback on any failure)
    """
    key = NotificationType(notification_type).value
    if key in cache:
        return cache[key]

    if not model:
        message = fallback_message(notification_type)
        cache[key] = message
        return message

    try:
        print(f"  → Generating {key} message...")
        message = _generate_with_llm(
            NotificationType(notification_type), context, model, recipient_name
        )
        print(f"  ✓ Generated: {message.title}: {message.body}")
    except Exception as e:
        print(f"  ✗ Falling back to canned text for {key}: {e}")
        message = fallback_message(notification_type)

    cache[key] = message
    return message
