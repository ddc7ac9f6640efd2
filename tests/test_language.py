import pytest

from language import Language, is_math_science_subject, resolve_language


def test_kannada_subject_overrides_english_medium():
    assert resolve_language("KANNADA II LANGUAGE", "English medium") is Language.KANNADA


def test_kannada_script_subject_name():
    assert resolve_language("ಕನ್ನಡ", "English medium") is Language.KANNADA


def test_hindi_subject_in_kannada_medium():
    assert resolve_language("HINDI III LANGUAGE", "Kannada medium") is Language.HINDI
    assert resolve_language("ಹಿಂದಿ", "Kannada medium") is Language.HINDI


def test_english_subject_in_kannada_medium():
    assert resolve_language("ಇಂಗ್ಲೀಷ", "Kannada medium") is Language.ENGLISH
    assert resolve_language("English I Language", "Kannada medium") is Language.ENGLISH


@pytest.mark.parametrize("medium", ["English medium", "English", " english medium "])
def test_english_medium_fallback(medium):
    assert resolve_language("Mathematics", medium) is Language.ENGLISH


@pytest.mark.parametrize("medium", ["Kannada medium", "Kannada", "", None])
def test_other_mediums_fall_back_to_kannada(medium):
    assert resolve_language("ಗಣಿತ", medium) is Language.KANNADA


def test_alternate_name_is_considered():
    assert resolve_language("ಪ್ರಥಮ ಭಾಷೆ", "English medium", subject_name_alt="Kannada First Language") is Language.KANNADA


def test_kannada_marker_wins_over_hindi_marker():
    assert resolve_language("Kannada and Hindi", "English medium") is Language.KANNADA


def test_math_science_detection():
    assert is_math_science_subject("Mathematics")
    assert is_math_science_subject("ವಿಜ್ಞಾನ")
    assert is_math_science_subject("Physics", "ಭೌತಶಾಸ್ತ್ರ")
    assert not is_math_science_subject("History")
    assert not is_math_science_subject("ಕನ್ನಡ")


@pytest.mark.parametrize("name, alt", [
    ("Social Science", None),
    ("ಸಮಾಜ ವಿಜ್ಞಾನ", None),
    ("Social", "सामाजिक विज्ञान"),
    ("ಸಮಾಜ ವಿಜ್ಞಾನ", "Social Science"),
])
def test_social_science_is_not_math_science(name, alt):
    assert not is_math_science_subject(name, alt)
