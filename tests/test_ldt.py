from pathlib import Path

import numpy as np
import pytest

from luxweb.errors import (
    FieldCountMismatch,
    MalformedHeader,
    MalformedNumber,
    NonMonotonicAngles,
    TruncatedData,
    UnsupportedPhotometricType,
)
from luxweb.models.opening import OpeningShape
from luxweb.models.photometry import SourceFormat
from luxweb.models.web import make_web
from luxweb.parser.ies_parser import parse_ies_text
from luxweb.parser.ldt_parser import parse_ldt_record, parse_ldt_text
from luxweb.photometry.symmetry import LdtSymmetry
from luxweb.writer.ldt_writer import LdtWriteOptions, write_ldt

FIXTURES = Path(__file__).parent / "fixtures"
C12 = list(range(0, 360, 30))
G3 = [0, 45, 90]


def ldt_document(symmetry, c_angles, g_angles, stored_rows, conversion="1", lorl="90", n_sets=1):
    lines = [
        "Acme",
        "1",
        str(symmetry),
        str(len(c_angles)),
        "30",
        str(len(g_angles)),
        "45",
        "R-1",
        "Test luminaire",
        "TL-1",
        "test.ldt",
        "2024-01-01",
    ]
    lines += ["600", "600", "80", "600", "600", "0", "0", "0", "0", "100", lorl, conversion, "0"]
    lines.append(str(n_sets))
    lines += [str(i + 1) for i in range(n_sets)]
    lines += [f"LED {i}" for i in range(n_sets)]
    lines += [str(1000 * (i + 1)) for i in range(n_sets)]
    lines += ["3000"] * n_sets
    lines += ["1A"] * n_sets
    lines += [str(10 * (i + 1)) for i in range(n_sets)]
    lines += ["0.5"] * 10
    lines += [f"{c:g}" for c in c_angles]
    lines += [f"{g:g}" for g in g_angles]
    for row in stored_rows:
        lines += [f"{v:g}" for v in row]
    return "\n".join(lines) + "\n"


def _stored(n):
    return [[100 + 10 * i, 50 + i, i] for i in range(n)]


def test_fixture_parses_quarter_symmetry():
    text = (FIXTURES / "ldt" / "panel_sym4.ldt").read_text(encoding="utf-8")
    record = parse_ldt_record(text)
    assert record.symmetry == LdtSymmetry.C0_C180_C90_C270
    assert record.stored_intensities.shape == (7, 7)
    web = parse_ldt_text(text)
    assert web.shape == (24, 7)
    assert web.intensity_at(0, 0) == 320.0
    assert web.intensity_at(75, 120) == 15.5
    assert web.intensity_at(105, 120) == 15.5  # mirrored C75
    assert web.intensity_at(255, 120) == 15.5  # C255 == C75
    meta = web.metadata
    assert meta.source_format == SourceFormat.LDT
    assert meta.ldt.company == "Acme Lighting GmbH"
    assert meta.ldt.lorl_percent == 85.5
    assert meta.ldt.direct_ratios[-1] == 0.86
    assert meta.keywords["MANUFAC"] == "Acme Lighting GmbH"
    assert meta.width == pytest.approx(0.6)
    lamp = meta.lamps[0]
    assert (lamp.num_lamps, lamp.lamp_type, lamp.total_flux_lm, lamp.wattage) == (1, "LED 840", 3400.0, 32.0)
    assert (lamp.color_temperature, lamp.color_rendering) == ("4000", "1B")


def test_fixture_round_trips_byte_exact():
    text = (FIXTURES / "ldt" / "panel_sym4.ldt").read_text(encoding="utf-8")
    assert write_ldt(parse_ldt_text(text)) == text


def test_symmetry_none_reads_every_plane():
    web = parse_ldt_text(ldt_document(0, C12, G3, _stored(12)))
    assert np.array_equal(web.intensities, np.array(_stored(12), dtype=float))


def test_symmetry_vertical_axis_replicates_plane():
    web = parse_ldt_text(ldt_document(1, C12, G3, _stored(1)))
    assert web.shape == (12, 3)
    assert np.array_equal(web.intensities, np.repeat([[100.0, 50.0, 0.0]], 12, axis=0))


def test_symmetry_vertical_axis_with_single_c_angle():
    web = parse_ldt_text(ldt_document(1, [0], G3, _stored(1)))
    assert web.grid.is_single_plane
    assert web.intensity_at(200, 45) == 50.0


def test_symmetry_c0_c180():
    stored = _stored(7)
    web = parse_ldt_text(ldt_document(2, C12, G3, stored))
    assert web.intensities[7].tolist() == stored[5]  # C210 == C150
    assert web.intensities[6].tolist() == stored[6]


def test_symmetry_c90_c270():
    stored = _stored(7)  # C270 .. C330, C0 .. C90
    web = parse_ldt_text(ldt_document(3, C12, G3, stored))
    assert web.intensities[0].tolist() == stored[3]
    assert web.intensities[4].tolist() == stored[5]  # C120 == C60
    assert web.intensities[9].tolist() == stored[0]


def test_symmetry_c0_c180_c90_c270():
    stored = _stored(4)
    web = parse_ldt_text(ldt_document(4, C12, G3, stored))
    assert web.intensities[4].tolist() == stored[2]
    assert web.intensities[6].tolist() == stored[0]
    assert web.intensities[11].tolist() == stored[1]


@pytest.mark.parametrize("symmetry", [0, 1, 2, 3, 4])
def test_written_symmetry_matches_source(symmetry):
    n_stored = {0: 12, 1: 1, 2: 7, 3: 7, 4: 4}[symmetry]
    text = ldt_document(symmetry, C12, G3, _stored(n_stored))
    web = parse_ldt_text(text)
    out = write_ldt(web)
    assert out.splitlines()[2] == str(symmetry)
    assert parse_ldt_text(out) == web


def test_conversion_factor_scales_intensities():
    text = ldt_document(1, C12, G3, _stored(1), conversion="2.5")
    web = parse_ldt_text(text)
    assert web.intensity_at(0, 0) == 250.0
    assert write_ldt(web) == text


def test_lamp_sets_are_parameter_major():
    web = parse_ldt_text(ldt_document(1, C12, G3, _stored(1), n_sets=2))
    first, second = web.metadata.lamps
    assert (first.num_lamps, first.lamp_type, first.total_flux_lm, first.wattage) == (1, "LED 0", 1000.0, 10.0)
    assert (second.num_lamps, second.lamp_type, second.total_flux_lm, second.wattage) == (2, "LED 1", 2000.0, 20.0)
    assert web.metadata.rated_lumens == 3000.0


def test_decimal_comma_is_accepted():
    web = parse_ldt_text(ldt_document(1, C12, G3, _stored(1), lorl="85,5"))
    assert web.metadata.ldt.lorl_percent == 85.5


def test_two_values_on_a_scalar_line_raise_field_count_mismatch():
    lines = ldt_document(1, C12, G3, _stored(1)).splitlines()
    lines[3] = "12 30"
    with pytest.raises(FieldCountMismatch) as exc:
        parse_ldt_text("\n".join(lines) + "\n")
    assert exc.value.line_no == 4


def test_blank_scalar_line_raises_field_count_mismatch():
    lines = ldt_document(1, C12, G3, _stored(1)).splitlines()
    lines[21] = ""
    with pytest.raises(FieldCountMismatch):
        parse_ldt_text("\n".join(lines) + "\n")


def test_non_numeric_scalar_raises():
    lines = ldt_document(1, C12, G3, _stored(1)).splitlines()
    lines[22] = "high"
    with pytest.raises(MalformedNumber):
        parse_ldt_text("\n".join(lines) + "\n")


def test_short_file_raises_truncated():
    with pytest.raises(TruncatedData):
        parse_ldt_text("Acme\n1\n1\n")


def test_missing_intensities_raise_truncated():
    text = ldt_document(0, C12, G3, _stored(11))
    with pytest.raises(TruncatedData):
        parse_ldt_text(text)


def test_invalid_symmetry_and_plane_counts():
    with pytest.raises(MalformedHeader):
        parse_ldt_text(ldt_document(5, C12, G3, _stored(12)))
    with pytest.raises(MalformedHeader):
        parse_ldt_text(ldt_document(4, [0, 60, 120, 180, 240, 300], G3, _stored(2)))


def test_non_monotonic_c_angles():
    with pytest.raises(NonMonotonicAngles):
        parse_ldt_text(ldt_document(1, [0, 60, 30], G3, _stored(1)))


def test_full_circle_web_round_trips():
    values = np.arange(4 * 5, dtype=float).reshape(4, 5) * 3.5 + 0.125
    web = make_web([0, 90, 180, 270], [0, 30, 60, 90, 180], values)
    text = write_ldt(web)
    assert text.splitlines()[2] == "0"
    assert parse_ldt_text(text) == web


def test_single_plane_web_round_trips():
    web = make_web([0], [0, 90, 180], [[100, 200, 100]])
    text = write_ldt(web)
    lines = text.splitlines()
    assert lines[2:4] == ["1", "1"]
    assert parse_ldt_text(text) == web


def test_ies_half_grid_keeps_its_own_planes():
    ies = parse_ies_text((FIXTURES / "ies" / "downlight_lm63_2002.ies").read_text(encoding="utf-8"))
    text = write_ldt(ies)
    lines = text.splitlines()
    assert lines[0] == "Acme Lighting"
    assert lines[2:4] == ["0", "3"]
    web = parse_ldt_text(text)
    assert web.grid.horizontal_deg == (0.0, 90.0, 180.0)
    assert web == ies


@pytest.mark.parametrize(
    "c_angles",
    [
        [0, 45, 90],
        [0, 90, 180],
        [90, 180, 270],
        [0, 120, 240, 360],
        [0, 90, 180, 270, 360],
    ],
)
def test_partial_and_closed_grids_round_trip(c_angles):
    g_angles = [0, 45, 90, 135, 180]
    values = np.array([[200.0 - g + (c % 180) / 10.0 for g in g_angles] for c in c_angles])
    web = make_web(c_angles, g_angles, values)
    text = write_ldt(web)
    lines = text.splitlines()
    assert lines[2:4] == ["0", str(len(c_angles))]
    back = parse_ldt_text(text)
    assert back.grid.horizontal_deg == tuple(float(c) for c in c_angles)
    assert back == web


def test_closed_grid_with_identical_planes_round_trips():
    web = make_web([0, 180, 360], [0, 90], [[10, 5], [10, 5], [10, 5]])
    back = parse_ldt_text(write_ldt(web))
    assert back.grid.horizontal_deg == (0.0, 180.0, 360.0)
    assert back == web


def test_round_ies_opening_becomes_circular_area():
    web = make_web([0], [0, 90], [[10, 5]], width=-0.2, length=-0.2)
    back = parse_ldt_text(write_ldt(web))
    assert back.metadata.ldt.luminous_width_mm == 0.0
    assert back.metadata.ldt.luminous_length_mm == pytest.approx(200.0)
    assert back.metadata.luminous_opening.shape == OpeningShape.CIRCULAR
    assert back.metadata.luminous_opening.diameter == pytest.approx(0.2)


def test_line_ending_option():
    web = make_web([0], [0, 90], [[10, 5]])
    text = write_ldt(web, options=LdtWriteOptions(line_ending="\r\n"))
    assert text.endswith("5\r\n")
    assert parse_ldt_text(text) == web


def test_only_type_c_can_be_written():
    web = make_web([-90, 0, 90], [-90, 0, 90], np.ones((3, 3)), photometric_type="A")
    with pytest.raises(UnsupportedPhotometricType):
        write_ldt(web)
