"""
Target-language resolution and script statistics.

The language of a quiz is decided by the subject first and the medium of
instruction second: a Kannada language paper taught in an English-medium
school is still examined in Kannada.
"""
import enum
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class Language(str, enum.Enum):
    KANNADA = "kannada"
    HINDI = "hindi"
    ENGLISH = "english"


# Unicode blocks, inclusive
KANNADA_BLOCK: Tuple[int, int] = (0x0C80, 0x0CFF)
DEVANAGARI_BLOCK: Tuple[int, int] = (0x0900, 0x097F)
# Latin-1 Supplement through Latin Extended-B: what broken font maps produce
MOJIBAKE_BLOCK: Tuple[int, int] = (0x0080, 0x024F)

KANNADA_MARKERS = ("kannada", "ಕನ್ನಡ", "कन्नड़")
HINDI_MARKERS = ("hindi", "ಹಿಂದಿ", "हिंदी", "हिन्दी")
ENGLISH_MARKERS = ("english", "ಇಂಗ್ಲೀಷ", "ಇಂಗ್ಲಿಷ್", "ಆಂಗ್ಲ", "अंग्रेज़ी", "अंग्रेजी")

MATH_SCIENCE_MARKERS = (
    "math", "science", "physics", "chemistry", "biology",
    "ಗಣಿತ", "ವಿಜ್ಞಾನ", "ಭೌತ", "ರಸಾಯನ", "ಜೀವಶಾಸ್ತ್ರ",
    "गणित", "विज्ञान", "भौतिक", "रसायन", "जीव विज्ञान",
)
# Social studies share the "science" word but get no formula allowance
SOCIAL_SCIENCE_MARKERS = ("social", "ಸಮಾಜ", "सामाजिक")

ENGLISH_MEDIUMS = ("english", "english medium")


def _contains_marker(text: str, markers: Tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def resolve_language(subject_name: str, medium: str, subject_name_alt: Optional[str] = None) -> Language:
    """
    Resolve the target language for a subject.

    First match wins: Kannada subject, Hindi subject, English subject, then
    the medium (English medium gives English, anything else Kannada).

    Args:
        subject_name: Subject display name, in any script
        medium: Medium of instruction, e.g. "English medium"
        subject_name_alt: The subject's name in its other script, if known

    Returns:
        The resolved Language
    """
    names = " ".join(n for n in (subject_name, subject_name_alt) if n)

    if _contains_marker(names, KANNADA_MARKERS):
        language, reason = Language.KANNADA, "Kannada subject"
    elif _contains_marker(names, HINDI_MARKERS):
        language, reason = Language.HINDI, "Hindi subject"
    elif _contains_marker(names, ENGLISH_MARKERS):
        language, reason = Language.ENGLISH, "English subject"
    elif (medium or "").strip().lower() in ENGLISH_MEDIUMS:
        language, reason = Language.ENGLISH, "English medium"
    else:
        language, reason = Language.KANNADA, "non-English medium"

    logger.info(f"Resolved language {language.value} for subject={subject_name!r} medium={medium!r} ({reason})")
    return language


def is_math_science_subject(subject_name: str, subject_name_alt: Optional[str] = None) -> bool:
    names = " ".join(n for n in (subject_name, subject_name_alt) if n)
    if _contains_marker(names, SOCIAL_SCIENCE_MARKERS):
        return False
    return _contains_marker(names, MATH_SCIENCE_MARKERS)


def script_block(language: Language) -> Optional[Tuple[int, int]]:
    """Unicode block of the language's script, None for Latin."""
    if language is Language.KANNADA:
        return KANNADA_BLOCK
    if language is Language.HINDI:
        return DEVANAGARI_BLOCK
    if language is Language.ENGLISH:
        return None
    raise ValueError(f"Unknown language: {language}")


def count_in_block(text: str, block: Tuple[int, int]) -> int:
    low, high = block
    return sum(1 for ch in text if low <= ord(ch) <= high)


def count_ascii_letters(text: str) -> int:
    return sum(1 for ch in text if ("a" <= ch <= "z") or ("A" <= ch <= "Z"))


def count_non_ascii(text: str) -> int:
    return sum(1 for ch in text if ord(ch) > 127)


def significant_chars(text: str) -> str:
    """Text without whitespace; ratios are computed over this."""
    return "".join(text.split())
