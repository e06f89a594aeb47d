"""Constants for core module."""

from pathlib import Path

# --- Hosted services --- #
GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
DEFAULT_MODEL: str = "llama-3.3-70b-versatile"
MURF_BASE_URL: str = "https://api.murf.ai/v1"

# --- I/O --- #
OUTPUT_FPATH: Path = Path("output")
CONFIGS_FPATH: Path = Path(__file__).parent.parent.parent / "configs"
SUGGESTIONS_CONFIG_FPATH: Path = CONFIGS_FPATH / "suggestions.yml"
PROGRESS_FPATH: Path = OUTPUT_FPATH / "progress.json"

# --- Progress --- #
PROGRESS_KEY: str = "historica-progress"
POINTS_PER_CORRECT: int = 10
PERFECT_BONUS: int = 10

# --- Quiz --- #
QUIZ_LENGTH: int = 5
OPTIONS_PER_QUESTION: int = 4
HISTORIAN_THRESHOLD: int = 3

# (id, name, description, icon)
BADGE_DEFINITIONS: dict[str, tuple[str, str, str]] = {
    "learner": ("Curious Learner", "Completed your first quiz", "📚"),
    "historian": ("Historian", "Scored 3 or more correct answers", "🏛️"),
    "master": ("Time Master", "Perfect score on a quiz", "⭐"),
}

# --- Completion sampling profiles: (temperature, max_tokens) --- #
COMPLETION_PROFILES: dict[str, tuple[float, int]] = {
    "chat": (0.7, 256),
    "gender": (0.1, 20),
    "language": (0.2, 60),
    "quiz": (0.3, 1200),
    "translate": (0.1, 256),
    "reflection": (0.7, 300),
    "summary": (0.3, 400),
}
LONG_COMPLETION_WARN_SECONDS: float = 20.0
LARGE_PROMPT_WARN_BYTES: int = 64 * 1024

# --- Languages --- #
AUTO_LANGUAGE: str = "auto"
DEFAULT_LANGUAGE: str = "en"
DEFAULT_LANGUAGE_NAME: str = "English"
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "nl": "Dutch",
    "pl": "Polish",
    "tr": "Turkish",
    "sv": "Swedish",
    "da": "Danish",
    "fi": "Finnish",
    "no": "Norwegian",
}
DEFAULT_LOCALE: str = "en-US"
LOCALES: dict[str, str] = {
    "en": "en-US",
    "hi": "hi-IN",
    "es": "es-ES",
    "fr": "fr-FR",
    "de": "de-DE",
    "it": "it-IT",
    "ar": "ar-SA",
    "zh": "zh-CN",
    "ja": "ja-JP",
    "pt": "pt-PT",
    "ru": "ru-RU",
    "ko": "ko-KR",
    "nl": "nl-NL",
    "pl": "pl-PL",
    "tr": "tr-TR",
    "sv": "sv-SE",
    "da": "da-DK",
    "fi": "fi-FI",
    "no": "no-NO",
}

# --- Speech --- #
DEFAULT_GENDER: str = "male"
HOSTED_VOICES: dict[str, list[str]] = {
    "male": [
        "en-US-ken",
        "en-US-marcus",
        "en-US-wayne",
        "en-US-terrell",
        "en-GB-clint",
    ],
    "female": [
        "en-US-natalie",
        "en-US-aria",
        "en-US-ruby",
        "en-US-liv",
        "en-GB-hazel",
    ],
}
AUDIO_MIME_TYPE: str = "audio/mpeg"
NATIVE_SPEECH_RATE: float = 0.9
NATIVE_VOICE_VENDOR_HINT: str = "google"
DISFLUENCY_GATE: float = 0.1
# checked in order, the first one whose own roll fires is used
DISFLUENCIES: tuple[tuple[str, float], ...] = (
    ("*cough* ", 0.35),
    ("*chuckles* ", 0.33),
    ("*thoughtful pause* ", 0.32),
)

# --- Debate --- #
DEBATE_PACING_SECONDS: float = 0.8
SYSTEM_SPEAKER: str = "System"

# --- Messages --- #
GREETING_TEMPLATE: str = (
    "Greetings! I am {figure}. I am pleased to share knowledge about my era and"
    " expertise. What would you like to know?"
)
INTRODUCTION_TEMPLATE: str = (
    "Greetings! I am {new_figure}. I have joined this fascinating discussion."
    " {figure}, it is an honor to converse with you!"
)
DEBATE_ACTIVATED_TEMPLATE: str = (
    "🌟 Cross-Era Debate Mode Activated! {figure} and {new_figure} are now in"
    " conversation. They can debate, agree, or discuss with each other based on"
    " your prompts!"
)
APOLOGY_MSG: str = (
    "I apologize, but I cannot continue this conversation at the moment."
)
QUIZ_FAILED_MSG: str = "Failed to generate quiz. Please try again."

# --- Add-member suggestions (used when configs/suggestions.yml is missing) --- #
MAX_SUGGESTIONS: int = 6
DEFAULT_SUGGESTIONS: dict[str, list[str]] = {
    "default": [
        "Socrates",
        "Plato",
        "Aristotle",
        "Sun Tzu",
        "Marcus Aurelius",
        "Confucius",
    ],
    "scientists": [
        "Albert Einstein",
        "Isaac Newton",
        "Marie Curie",
        "Nikola Tesla",
        "Stephen Hawking",
        "Charles Darwin",
    ],
    "leaders": [
        "Julius Caesar",
        "Cleopatra",
        "Napoleon Bonaparte",
        "Winston Churchill",
        "Mahatma Gandhi",
        "Nelson Mandela",
    ],
    "artists": [
        "Leonardo da Vinci",
        "Vincent van Gogh",
        "Pablo Picasso",
        "Michelangelo",
        "Frida Kahlo",
        "Mozart",
    ],
    "writers": [
        "William Shakespeare",
        "Jane Austen",
        "Mark Twain",
        "Edgar Allan Poe",
        "Maya Angelou",
        "Oscar Wilde",
    ],
    "innovators": [
        "Steve Jobs",
        "Elon Musk",
        "Thomas Edison",
        "Henry Ford",
        "Benjamin Franklin",
        "Ada Lovelace",
    ],
}
