"""
Static constants for the trainer.

No runtime configuration here - see babushka.config for settings that can be
overridden from the environment.
"""

# Durable storage key holding the custom unit mapping.
STORAGE_KEY_CUSTOM: str = "babushka_custom_store_v2"

# Unit shown on start-up and after the active custom unit is deleted.
DEFAULT_UNIT_ID: str = "alphabet"

# Custom units are numbered after the ten built-in units.
CUSTOM_UNIT_NUMBER_START: int = 11
DEFAULT_CUSTOM_ICON: str = "📂"

# Unit id prefixes for user-created and imported units.
CUSTOM_ID_PREFIX: str = "custom"
SHARED_ID_PREFIX: str = "shared"
SHARED_NAME_PREFIX: str = "Shared: "

# Query parameter carrying a share payload.
SHARE_QUERY_PARAM: str = "deck"

# Pause between clearing the flip and moving to the next card.
DEFAULT_NAV_DELAY_MS: int = 150

# Context word used by the assistant when no card is showing.
DEFAULT_CONTEXT_WORD: str = "Russian"

# Number of cards requested per generated unit.
GENERATED_DECK_SIZE: int = 20

# Gemini TTS output format (signed 16-bit little-endian mono PCM).
TTS_SAMPLE_RATE: int = 24000
TTS_SAMPLE_WIDTH: int = 2
TTS_CHANNELS: int = 1

# --- User-facing messages ---
MSG_ASK_TIRED = "I'm a bit tired today, dearie. Ask me again later!"
MSG_ASK_ERROR = (
    "The samovar is boiling over! I can't talk right now. (Error connection)"
)
MSG_ASK_NO_KEY = (
    "Babushka cannot hear you, dearie. "
    "Set GEMINI_API_KEY so she can answer."
)
MSG_GENERATION_FAILED = "Babushka had trouble thinking of that topic. Try again!"
MSG_CREDENTIAL_MISSING = (
    "Babushka needs an API key to write new units. "
    "Set GEMINI_API_KEY and try again."
)
MSG_SHARE_COPIED = "Link copied! Send it to your girlfriend! ❤️"
MSG_SHARE_RECEIVED = (
    "Babushka received a shared gift for you! Check your collection."
)
MSG_BUILTIN_DELETE = "Babushka keeps the starter units forever, dearie."
MSG_EMPTY_UNIT = "No cards here, dearie."
