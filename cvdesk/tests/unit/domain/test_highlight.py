from cvdesk.domain.entities import SearchResult
from cvdesk.domain.highlight import highlight_segments, match_spans, matched_terms


def test_match_spans_case_insensitive_and_merged() -> None:
    text = "Senior JavaScript developer"

    assert match_spans(text, ["java", "script"]) == [(7, 17)]
    assert match_spans(text, ["SENIOR"]) == [(0, 6)]
    assert match_spans(text, ["go"]) == []


def test_overlapping_terms_form_inclusive_union() -> None:
    assert match_spans("reactjs", ["react", "actjs"]) == [(0, 7)]


def test_highlight_segments_keeps_original_case() -> None:
    segments = highlight_segments("Python and python", ["PYTHON"])

    assert segments == [("Python", True), (" and ", False), ("python", True)]
    assert "".join(fragment for fragment, _ in segments) == "Python and python"


def test_highlight_segments_without_terms() -> None:
    assert highlight_segments("N/A", []) == [("N/A", False)]
    assert highlight_segments("", ["x"]) == []


def test_matched_terms_prefers_backend_list() -> None:
    result = SearchResult(contact_id="1", full_text="python sql", matched_keywords=("python",))

    assert matched_terms(result, ["python", "sql"]) == ("python",)


def test_matched_terms_computed_from_text() -> None:
    result = SearchResult(contact_id="1", name="Ann", job_title="Data Engineer", full_text="Spark, SQL")

    assert matched_terms(result, ["sql", "engineer", "java"]) == ("sql", "engineer")
