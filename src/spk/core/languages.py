"""Practice language codes.

Codes are BCP 47 tags as stored on a cut plan ("en-GB", "pt-BR", "zh-TW").
Speech-to-text APIs only take the primary subtag, and some report the
detected language by English name, so both directions are mapped here.
"""

from __future__ import annotations

AUTO = "auto"

# fmt: off
PRACTICE_LANGUAGES: dict[str, str] = {
    "en-US": "English (US)",      "en-CA": "English (Canada)",  "en-GB": "English (UK)",
    "es": "Spanish",              "pl": "Polish",               "de": "German",
    "fr": "French",               "it": "Italian",              "uk": "Ukrainian",
    "ru": "Russian",              "pt": "Portuguese",           "pt-BR": "Portuguese (Brazil)",
    "ja": "Japanese",             "ko": "Korean",               "zh": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
}

# Primary subtags speech-to-text backends accept, keyed by the English name
# some of them report back.
BASE_LANGUAGES: dict[str, str] = {
    "arabic": "ar",     "chinese": "zh",    "danish": "da",     "dutch": "nl",
    "english": "en",    "finnish": "fi",    "french": "fr",     "german": "de",
    "greek": "el",      "hebrew": "he",     "hindi": "hi",      "italian": "it",
    "japanese": "ja",   "korean": "ko",     "norwegian": "no",  "polish": "pl",
    "portuguese": "pt", "russian": "ru",    "spanish": "es",    "swedish": "sv",
    "turkish": "tr",    "ukrainian": "uk",
}
# fmt: on


def normalize_language(code: str | None) -> str | None:
    """Canonical stored form of a language choice; ``auto`` and blanks become None."""
    if code is None:
        return None
    code = code.strip().replace("_", "-")
    if not code or code.lower() == AUTO:
        return None
    primary, _, region = code.partition("-")
    primary = primary.lower()
    if not region:
        return primary
    # Script subtags are title case, regions upper case.
    return f"{primary}-{region.title() if len(region) == 4 else region.upper()}"


def base_language(code: str | None) -> str | None:
    """Primary subtag to send to a speech-to-text backend."""
    code = normalize_language(code)
    return code.partition("-")[0] if code else None


def detected_language(reported: str | None) -> str | None:
    """Map a backend's reported language (code or English name) to a code."""
    if not reported:
        return None
    key = reported.strip().lower()
    return BASE_LANGUAGES.get(key) or normalize_language(key)


def language_label(code: str | None) -> str:
    code = normalize_language(code)
    if code is None:
        return "Auto (detected)"
    return PRACTICE_LANGUAGES.get(code, code)


def validate_language(code: str) -> str:
    """Validate a language choice and return its stored form (``auto`` allowed).

    Raises:
        ValueError: If the code is not a plausible language tag.
    """
    stripped = code.strip()
    if stripped.lower() == AUTO:
        return AUTO
    normalized = normalize_language(stripped)
    primary = base_language(normalized) or ""
    if not (2 <= len(primary) <= 3 and primary.isalpha()):
        raise ValueError(
            f"Unsupported language: '{code}'. Use 'auto' or a code such as "
            f"{', '.join(list(PRACTICE_LANGUAGES)[:4])}."
        )
    return normalized
