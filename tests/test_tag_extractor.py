from domain.models.protocol import Fragment
from domain.protocol.tag_extractor import extract_fragments, find_all_tags, find_tag


def test_plain_text_has_no_fragments():
    assert extract_fragments("Just a plain answer.") == []
    assert extract_fragments("") == []


def test_partial_angle_brackets_have_no_fragments():
    assert extract_fragments("a < b and c > d") == []
    assert extract_fragments("<3 and 4>") == []
    assert extract_fragments("</orphan>") == []


def test_fragments_in_document_order():
    assert extract_fragments("<a>x</a><b>y</b>") == [
        Fragment(tag_name="a", content="x"),
        Fragment(tag_name="b", content="y"),
    ]


def test_nested_tags_stay_in_outer_content():
    assert extract_fragments("<outer><inner>z</inner></outer>") == [
        Fragment(tag_name="outer", content="<inner>z</inner>"),
    ]


def test_same_name_nesting_closes_at_first_candidate():
    assert extract_fragments("<a><a>x</a></a>") == [Fragment(tag_name="a", content="<a>x")]


def test_attributes_are_ignored():
    fragments = extract_fragments('<read_file path="x.txt" mode="r">body</read_file>')

    assert fragments == [Fragment(tag_name="read_file", content="body")]


def test_unclosed_tag_is_dropped():
    assert extract_fragments("<a>never closed") == []
    assert extract_fragments("<a>x <b>y</b> trailing") == [Fragment(tag_name="b", content="y")]


def test_content_spans_lines_and_keeps_whitespace():
    text = "Intro\n<thinking>\nline one\nline two\n</thinking>\nOutro"

    assert extract_fragments(text) == [
        Fragment(tag_name="thinking", content="\nline one\nline two\n"),
    ]


def test_tag_names_allow_dots_and_dashes():
    fragments = extract_fragments("<mcp.tool-1>ok</mcp.tool-1>")

    assert [f.tag_name for f in fragments] == ["mcp.tool-1"]


def test_extracting_decoded_content_is_a_no_op():
    [fragment] = extract_fragments("<attempt_completion>All done</attempt_completion>")

    assert extract_fragments(fragment.content) == []


def test_find_tag_returns_first_match():
    text = "<question>First?</question><question>Second?</question>"

    assert find_tag(text, "question") == "First?"
    assert find_all_tags(text, "question") == ["First?", "Second?"]


def test_find_tag_does_not_match_longer_names():
    assert find_tag("<questions>no</questions>", "question") is None
    assert find_tag('<question lang="en">yes</question>', "question") == "yes"
