from app.utils import clean_text, escape_like, parse_rating, parse_year, unique


def test_clean_text_treats_placeholders_as_missing():
    assert clean_text("  Drama ") == "Drama"
    assert clean_text("N/A") is None
    assert clean_text(None) is None


def test_parse_year_uses_first_four_characters():
    assert parse_year("2010") == 2010
    assert parse_year("2008–2013") == 2008
    assert parse_year("N/A") is None
    assert parse_year("99") is None
    assert parse_year("abcd-2010") is None


def test_parse_rating_is_best_effort():
    assert parse_rating("8.8") == 8.8
    assert parse_rating("N/A") is None
    assert parse_rating("eight") is None


def test_unique_keeps_first_occurrence():
    assert unique(["Dune", "Heat", "Dune"]) == ["Dune", "Heat"]


def test_escape_like_escapes_wildcards():
    assert escape_like("100%_a\\") == "100\\%\\_a\\\\"
