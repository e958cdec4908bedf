# This module defines the format rules for persona notification text as
# module-level constants. Generated titles and bodies are validated against
# these; anything that fails is replaced by the canned message for its type.

# Title: a fictional character's name, 1-3 capitalized words.
TITLE_PATTERN = r"^[A-Z][A-Za-z'-]*(?:\s[A-Z][A-Za-z'-]*){0,2}$"
TITLE_MAX_LENGTH = 40

# Substrings that may not appear in a title (case-insensitive). The
# recipient's own name is added at validation time.
FORBIDDEN_TITLE_SUBSTRINGS = [
    "igor",
    "konstantin",
    "stas",
]

# Body: one line with at least one emoji.
BODY_MAX_LENGTH = 120
ELLIPSIS = "…"
DEFAULT_EMOJI = "🛡️"
EMOJI_PATTERN = (
    "["
    "\U0001F300-\U0001FAFF"
    "\U0001F004-\U0001F9FF"
    "☀-➿"
    "]"
)

# Canned messages, keyed by notification type. Each one satisfies the rules
# above and is sent verbatim when generation fails.
FALLBACK_MESSAGES = {
    "fertile_window": {
        "title": "Ludmila Fertile",
        "body": "Risk zone, babe: no protection, no fun. Condoms on combat duty! 💋🛡️",
    },
    "ovulation_day": {
        "title": "Fyodor Fruitful",
        "body": "Ovulation day! Guard up like it's a war zone, this is not a drill! 🔥",
    },
    "period_forecast": {
        "title": "Zoya Premenstrual",
        "body": "A couple of days until the storm: stock up on chocolate, a heating pad and patience! 🙄🍫",
    },
    "period_start": {
        "title": "Veronika Checkpoint",
        "body": "Day X by the forecast: check in with yourself and log it if it started! 👀",
    },
    "period_confirmed_day0": {
        "title": "Tamara Blanket",
        "body": "And we're off! Blanket, heating pad, favorite show, zero heroics today! 🛋️💜",
    },
    "period_confirmed_day1": {
        "title": "Sonya Hotwater",
        "body": "Day two: heating pad on the belly, chocolate in the mouth, everyone else can wait! 🔥🍫",
    },
    "period_confirmed_day2": {
        "title": "Inga Ironclad",
        "body": "Day three: drink water, save your nerves, it gets easier from here, hang in there! 💪✨",
    },
    "period_waiting": {
        "title": "Glasha Patient",
        "body": "Running late: listen to your body, it knows what it's doing! 🤔",
    },
    "period_delay_warning": {
        "title": "Rimma Anxious",
        "body": "The delay is dragging on. Maybe time for a test? Spare your nerves! 😬🧪",
    },
}
