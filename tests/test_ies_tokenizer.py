import pytest

from luxweb.errors import MalformedHeader, MalformedNumber, TruncatedData, UnknownDialect
from luxweb.models.photometry import KeywordLine
from luxweb.models.tilt import TiltMode
from luxweb.parser.ies_dialect import IesDialect, detect_dialect, layout_for
from luxweb.parser.ies_tokenizer import TokenStream, NumericToken, split_values, tokenize_ies


@pytest.mark.parametrize(
    "first_line, expected",
    [
        ("IESNA:LM-63-2002", IesDialect.LM63_2002),
        ("IESNA:LM-63-1995", IesDialect.LM63_1995),
        ("IESNA91", IesDialect.IESNA91),
        ("  iesna:lm-63-2002  ", IesDialect.LM63_2002),
        ("\ufeffIESNA:LM-63-2002", IesDialect.LM63_2002),
        ("Acme Lighting test report", IesDialect.LM63_1986),
        ("TILT=NONE", IesDialect.LM63_1986),
        (None, IesDialect.LM63_1986),
    ],
)
def test_detect_dialect(first_line, expected):
    assert detect_dialect(first_line) == expected


@pytest.mark.parametrize("first_line", ["IESNA:LM-63-2019", "IESNA:LM-63-1991", "IESNA99"])
def test_unknown_signature_raises(first_line):
    with pytest.raises(UnknownDialect) as exc:
        detect_dialect(first_line, line_no=1)
    assert exc.value.line_no == 1


def test_dialect_layouts():
    assert not layout_for(IesDialect.LM63_1986).uses_keywords
    assert layout_for(IesDialect.LM63_2002).recognises("nearfield")
    assert not layout_for(IesDialect.IESNA91).recognises("NEARFIELD")
    assert layout_for(IesDialect.LM63_1995).recognises("LAMPPOSITION")
    assert not layout_for(IesDialect.IESNA91).recognises("LAMPPOSITION")
    assert layout_for(IesDialect.LM63_2002).header_fields[11] == "future_use"
    assert layout_for(IesDialect.LM63_1995).header_fields[11] == "ballast_lamp_photometric_factor"
    assert not layout_for(IesDialect.LM63_1986).tilt_has_geometry
    assert layout_for(IesDialect.IESNA91).tilt_has_geometry
    for dialect in IesDialect:
        assert len(layout_for(dialect).header_fields) == 13


def test_tokenize_keywords_and_more_continuations():
    text = """IESNA:LM-63-2002
[TEST] T1
[LUMINAIRE] first part
[MORE] second part
[X_CUSTOM] opaque
TILT=NONE
1 -1 1 3 1 1 2 0 0 0
1 1 10
0 90 180
0
100 200 100
"""
    tokens = tokenize_ies(text)
    assert tokens.dialect == IesDialect.LM63_2002
    assert tokens.signature_line == "IESNA:LM-63-2002"
    assert tokens.keyword_lines == (
        KeywordLine("TEST", "T1"),
        KeywordLine("LUMINAIRE", "first part", ("second part",)),
        KeywordLine("X_CUSTOM", "opaque"),
    )
    assert tokens.keyword_lines[1].full_value == "first part second part"
    assert tokens.tilt.mode == TiltMode.NONE
    assert tokens.tilt_line_no == 6
    assert len(tokens.numbers) == 20
    assert tokens.numbers[0].line_no == 7
    assert tokens.numbers[-1].line_no == 11


def test_tokenize_1986_label_lines():
    text = "Report 12\nWall washer\nTILT=NONE\n1 1000 1 1 1 1 1 0 0 0\n1 1 10\n0\n0\n5\n"
    tokens = tokenize_ies(text)
    assert tokens.dialect == IesDialect.LM63_1986
    assert tokens.signature_line is None
    assert tokens.label_lines == ("Report 12", "Wall washer")
    assert tokens.keyword_lines == ()


def test_missing_tilt_line_raises_malformed_header():
    text = "IESNA:LM-63-2002\n[TEST] T1\n1 -1 1 3 1 1 2 0 0 0\n"
    with pytest.raises(MalformedHeader):
        tokenize_ies(text)


def test_missing_tilt_in_1986_raises_malformed_header():
    with pytest.raises(MalformedHeader):
        tokenize_ies("Some label\nAnother label\n")


def test_non_keyword_line_before_tilt_raises():
    text = "IESNA:LM-63-1995\n[TEST] T1\nfree text here\nTILT=NONE\n"
    with pytest.raises(MalformedHeader) as exc:
        tokenize_ies(text)
    assert exc.value.line_no == 3
    assert exc.value.snippet == "free text here"


def test_more_without_keyword_raises():
    with pytest.raises(MalformedHeader):
        tokenize_ies("IESNA:LM-63-2002\n[MORE] orphan\nTILT=NONE\n")


def test_empty_text_and_empty_tilt_value():
    with pytest.raises(MalformedHeader):
        tokenize_ies("   \n\n")
    with pytest.raises(MalformedHeader):
        tokenize_ies("IESNA:LM-63-2002\nTILT=\n")


def test_tilt_include_with_geometry():
    text = "IESNA:LM-63-2002\nTILT=INCLUDE\n1\n3\n0 45 90\n1 0.8 0.6\n1 -1 1\n"
    tokens = tokenize_ies(text)
    assert tokens.tilt.mode == TiltMode.INCLUDE
    assert tokens.tilt.lamp_to_luminaire_geometry == 1
    assert tokens.tilt.data.angles_deg == (0.0, 45.0, 90.0)
    assert tokens.tilt.data.factors == (1.0, 0.8, 0.6)
    assert [t.text for t in tokens.numbers] == ["1", "-1", "1"]


def test_tilt_include_without_geometry_in_lm63_1986():
    text = "Acme 1986 report\nTILT=INCLUDE\n3\n0 45 90\n1 0.8 0.6\n7\n"
    tokens = tokenize_ies(text)
    assert tokens.dialect == IesDialect.LM63_1986
    assert tokens.tilt.lamp_to_luminaire_geometry is None
    assert tokens.tilt.data.angles_deg == (0.0, 45.0, 90.0)
    assert [t.text for t in tokens.numbers] == ["7"]


def test_lm63_1986_single_tilt_pair():
    text = "Acme 1986 report\nTILT=INCLUDE\n1\n0\n1\n1 -1 1\n"
    tokens = tokenize_ies(text)
    assert tokens.tilt.lamp_to_luminaire_geometry is None
    assert tokens.tilt.data.angles_deg == (0.0,)
    assert tokens.tilt.data.factors == (1.0,)
    assert [t.text for t in tokens.numbers] == ["1", "-1", "1"]


def test_later_dialects_read_geometry_even_on_a_shared_line():
    text = "IESNA:LM-63-1995\nTILT=INCLUDE\n2 3\n0 45 90\n1 0.8 0.6\n7\n"
    tokens = tokenize_ies(text)
    assert tokens.tilt.lamp_to_luminaire_geometry == 2
    assert tokens.tilt.data.factors == (1.0, 0.8, 0.6)
    assert [t.text for t in tokens.numbers] == ["7"]


def test_header_values_on_the_last_tilt_factor_line_are_kept():
    text = "IESNA:LM-63-2002\nTILT=INCLUDE\n1\n3\n0 45 90\n1 0.9 0.8 1 -1 1 3 1 1 2 0 0 0\n1 1 10\n"
    tokens = tokenize_ies(text)
    assert tokens.tilt.data.factors == (1.0, 0.9, 0.8)
    assert [t.text for t in tokens.numbers][:4] == ["1", "-1", "1", "3"]
    assert tokens.numbers[0].line_no == 6
    assert len(tokens.numbers) == 13


def test_tilt_include_invalid_payload():
    with pytest.raises(MalformedHeader):
        tokenize_ies("IESNA:LM-63-2002\nTILT=INCLUDE\n1\n3\n0 90 45\n1 0.8 0.6\n")
    with pytest.raises(TruncatedData):
        tokenize_ies("IESNA:LM-63-2002\nTILT=INCLUDE\n1\n3\n0 45 90\n1 0.8\n")
    with pytest.raises(MalformedHeader):
        tokenize_ies("IESNA:LM-63-2002\nTILT=INCLUDE\n")


def test_tilt_file_reference_is_surfaced_unresolved():
    tokens = tokenize_ies("IESNA:LM-63-2002\nTILT=lamp_tilt.dat\n1 2 3\n")
    assert tokens.tilt.mode == TiltMode.FILE
    assert tokens.tilt.file_reference == "lamp_tilt.dat"
    assert not tokens.tilt.is_resolved


def test_split_values_accepts_commas():
    assert split_values(" 1,2 , 3\t4 ") == ["1", "2", "3", "4"]


def test_token_stream_truncation_and_bad_numbers():
    stream = TokenStream([NumericToken("1", 5), NumericToken("x", 5)])
    assert stream.take_floats(1, "values") == [1.0]
    with pytest.raises(MalformedNumber):
        stream.take_floats(1, "values")
    with pytest.raises(TruncatedData) as exc:
        stream.take(1, "values")
    assert exc.value.line_no == 5
