import pytest

from models import Piece
from piece_parser import decode, fmt_decoded_items, parse_pieces


def test_text_blob_accepts_mixed_separators():
    pieces, decoded, err = parse_pieces("2 3\n3x2\n4×1\n1,4*2\n")
    assert err is None
    assert pieces == [Piece(3, 2), Piece(3, 2), Piece(4, 1), Piece(4, 1), Piece(4, 1)]
    assert decoded == [("3x2", 2), ("4x1", 3)]


def test_text_header_must_match():
    pieces, decoded, err = parse_pieces("3\n2 2\n2 2\n")
    assert pieces == []
    assert "header declares 3" in err

    pieces, _, err = parse_pieces("2\n2 2\n2 2\n")
    assert err is None
    assert len(pieces) == 2


@pytest.mark.parametrize("text", ["2 2\nwat\n", "0 2\n", "2 2*0\n"])
def test_text_rejects_bad_lines(text):
    pieces, _, err = parse_pieces(text)
    assert pieces == []
    assert err.startswith("line ")


def test_json_pairs_and_counted_items():
    like = {"pieces": [[2, 2], {"major": 1, "minor": 3, "count": 2}, ["5", "2"]]}
    pieces, decoded, err = parse_pieces(like)
    assert err is None
    assert pieces == [Piece(2, 2), Piece(3, 1), Piece(3, 1), Piece(5, 2)]
    assert decoded == [("2x2", 1), ("3x1", 2), ("5x2", 1)]


def test_json_bad_entry_reports_it():
    pieces, _, err = parse_pieces({"pieces": [[2, 2], [1, 2, 3]]})
    assert pieces == []
    assert "bad piece entry" in err


@pytest.mark.parametrize("entry", [
    [2.7, 1],
    [True, 3],
    [2, "1.5"],
    {"major": "4.9", "minor": 2},
    {"major": 4, "minor": 2, "count": 1.0},
    [-2, 3],
])
def test_json_rejects_non_integer_dimensions(entry):
    pieces, decoded, err = parse_pieces({"pieces": [[2, 2], entry]})
    assert pieces == []
    assert decoded == []
    assert err == f"bad piece entry: {entry!r}"


def test_form_textarea_arrives_as_list():
    pieces, _, err = parse_pieces({"pieces": ["2 2\n2 2"]})
    assert err is None
    assert pieces == [Piece(2, 2), Piece(2, 2)]


@pytest.mark.parametrize("like", [None, "", {}, {"pieces": ""}, {"other": "2 2"}, "\n\n"])
def test_nothing_to_parse(like):
    pieces, decoded, err = parse_pieces(like)
    assert pieces == []
    assert decoded == []
    assert err == "nothing parsed from request"


def test_decoded_items_sorted_numerically():
    decoded = decode([Piece(10, 1), Piece(2, 1), Piece(2, 1)])
    assert fmt_decoded_items(decoded) == [("2x1", 2), ("10x1", 1)]
