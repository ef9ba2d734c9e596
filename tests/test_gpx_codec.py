import datetime as dt

import pytest

from gpxstat.errors import GpxDecodeError
from gpxstat.formats.gpx import (
    DEFAULT_CREATOR,
    XML_DECLARATION,
    decode,
    encode,
    format_time_utc,
    parse_time_utc,
    read_gpx,
    write_gpx,
)
from gpxstat.model.gpx import Gpx, Metadata
from gpxstat.model.point import Point
from gpxstat.model.track import Track, TrackSegment
from gpxstat.model.waypoint import Waypoint

from conftest import MERIDIAN_STEP_KM, utc


# ---------------------------
# Decode
# ---------------------------
def test_decode_manhattan_scenario(nyc_xml):
    gpx = decode(nyc_xml)
    assert len(gpx.tracks) == 1
    assert len(gpx.tracks[0].segments) == 1
    assert gpx.tracks[0].segments[0].point_count() == 2
    assert gpx.total_distance_km() == pytest.approx(5.42, abs=0.02)
    assert gpx.elevation_range() == (10.0, 15.0)
    assert gpx.total_elevation_gain() == 5.0
    assert gpx.total_elevation_loss() == 0.0


def test_decode_empty_document():
    gpx = decode("<gpx></gpx>")
    assert gpx.tracks == [] and gpx.waypoints == []
    assert gpx.metadata is None
    assert gpx.total_distance_km() == 0.0
    assert gpx.elevation_range() is None
    assert gpx.total_elevation_gain() is None
    assert gpx.total_elevation_loss() is None
    assert gpx.total_duration_seconds() is None
    assert gpx.average_speed_kmh() is None


def test_decode_sample_file(sample_gpx_text):
    gpx = decode(sample_gpx_text)

    assert gpx.version == "1.1"
    assert gpx.creator == "Garmin eTrex 32x"
    assert gpx.date() == "2024-07-11T07:58:12Z"
    assert gpx.track_names() == ["Morning Hike"]
    assert gpx.total_segments() == 2
    assert gpx.total_points() == 5

    wpt = gpx.waypoints[0]
    assert wpt == Waypoint(46.05, 7.51, name="Hut", elevation=2000.0, time=utc(12))

    stats = gpx.statistics()
    assert stats.total_distance_km == pytest.approx(3 * MERIDIAN_STEP_KM, abs=1e-6)
    assert stats.elevation_range == (1000.0, 1200.0)
    assert stats.elevation_gain == pytest.approx(50.0)
    assert stats.elevation_loss == pytest.approx(70.0)
    assert stats.duration_seconds == 5400
    assert stats.average_speed_kmh == pytest.approx(2 * MERIDIAN_STEP_KM, abs=1e-6)


def test_decode_point_fields():
    gpx = decode(
        '<gpx><trk><name>  Lunch loop </name><trkseg>'
        '<trkpt lat=" 1.5 " lon="-2.25"><ele>3.5</ele><time>2024-07-11T10:00:00.250Z</time></trkpt>'
        '<trkpt lat="1.6" lon="-2.3"/>'
        '</trkseg></trk></gpx>'
    )
    p0, p1 = gpx.tracks[0].segments[0].points
    assert gpx.tracks[0].name == "  Lunch loop "
    assert p0 == Point(1.5, -2.25, 3.5, utc(10).replace(microsecond=250000))
    assert p1 == Point(1.6, -2.3)


def test_decode_ignores_unmodelled_elements():
    gpx = decode(
        '<gpx><rte><rtept lat="1" lon="2"/></rte>'
        '<trk><desc>x</desc><extensions><hr>120</hr></extensions><trkseg>'
        '<trkpt lat="1" lon="2"><extensions><cad>80</cad></extensions></trkpt>'
        '</trkseg></trk></gpx>'
    )
    assert len(gpx.tracks) == 1
    assert gpx.total_points() == 1
    assert gpx.waypoints == []


def test_decode_empty_leaf_elements_are_absent():
    gpx = decode('<gpx><trk><name/><trkseg><trkpt lat="1" lon="2"><ele></ele><time> </time></trkpt></trkseg></trk></gpx>')
    trk = gpx.tracks[0]
    assert trk.name is None
    assert trk.display_name() == "Unnamed Track"
    assert trk.segments[0].points[0] == Point(1.0, 2.0)


def test_decode_metadata_variants():
    assert decode("<gpx><trk/></gpx>").metadata is None

    gpx = decode("<gpx><metadata></metadata></gpx>")
    assert gpx.metadata == Metadata(time=None)
    assert gpx.date() is None

    # Kept verbatim, not parsed
    gpx = decode("<gpx><metadata><time>11/07/2024 17:16</time></metadata></gpx>")
    assert gpx.date() == "11/07/2024 17:16"

    gpx = decode("<gpx><metadata><time> 2024-07-11 </time></metadata></gpx>")
    assert gpx.date() == " 2024-07-11 "
    assert decode(gpx.to_xml()).date() == " 2024-07-11 "


def test_decode_track_without_segments():
    gpx = decode("<gpx><trk><name>Test</name></trk></gpx>")
    assert len(gpx.tracks) == 1
    assert gpx.tracks[0].name == "Test"
    assert gpx.tracks[0].segments == []


def test_decode_accepts_bytes():
    gpx = decode(b'<?xml version="1.0" encoding="UTF-8"?>\n<gpx><wpt lat="1" lon="2"><name>Caf\xc3\xa9</name></wpt></gpx>')
    assert gpx.waypoint_names() == ["Café"]


@pytest.mark.parametrize(
    "text",
    [
        "not valid xml at all",
        "",
        "<gpx><trk><invalid></trk></gpx>",
        "<gpx><trk>",
    ],
)
def test_decode_malformed_xml(text):
    with pytest.raises(GpxDecodeError) as excinfo:
        decode(text)
    err = excinfo.value
    assert str(err)
    assert err.reason.startswith("malformed XML")
    assert err.line is not None


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("<kml><Document/></kml>", "expected root element <gpx>"),
        ('<gpx><trk><trkseg><trkpt lon="2"/></trkseg></trk></gpx>', "missing required attribute 'lat'"),
        ('<gpx><wpt lat="1"/></gpx>', "missing required attribute 'lon'"),
        ('<gpx><trk><trkseg><trkpt lat="north" lon="2"/></trkseg></trk></gpx>', "invalid attribute 'lat'"),
        ('<gpx><trk><trkseg><trkpt lat="1" lon="2"><ele>high</ele></trkpt></trkseg></trk></gpx>', "invalid element 'ele'"),
        ('<gpx><wpt lat="1" lon="2"><time>yesterday</time></wpt></gpx>', "invalid element 'time'"),
        ('<gpx><trk><trkseg><trkpt lat="1" lon="2"><time>0001-01-01T00:30:00+01:00</time></trkpt></trkseg></trk></gpx>',
         "invalid element 'time'"),
        ('<gpx><wpt lat="1" lon="2"><time>9999-12-31T23:59:59-01:00</time></wpt></gpx>', "out of range"),
    ],
)
def test_decode_shape_errors(text, fragment):
    with pytest.raises(GpxDecodeError, match=fragment):
        decode(text)


def test_decode_error_after_valid_content_yields_nothing():
    # The second track is broken; no partial document comes back
    text = (
        '<gpx><trk><trkseg><trkpt lat="1" lon="2"/></trkseg></trk>'
        '<trk><trkseg><trkpt lat="1"/></trkseg></trk></gpx>'
    )
    result = None
    with pytest.raises(GpxDecodeError):
        result = decode(text)
    assert result is None


def test_from_xml_classmethod(nyc_xml):
    assert Gpx.from_xml(nyc_xml).total_points() == 2
    with pytest.raises(GpxDecodeError):
        Gpx.from_xml("invalid xml")


# ---------------------------
# Encode
# ---------------------------
def build_document() -> Gpx:
    gpx = Gpx(metadata=Metadata(time="2024-07-11T17:16:43Z"))
    gpx.add_waypoint(Waypoint(40.7589, -73.9851, name="Test Waypoint", elevation=15.0))
    gpx.add_track(Track(name="Test Track", segments=[
        TrackSegment([
            Point(40.7128, -74.0060, 10.5, utc(10)),
            Point(40.7589, -73.9851, None, utc(10, 30).replace(microsecond=500000)),
        ]),
        TrackSegment([Point(41.0, -74.0)]),
    ]))
    gpx.add_track(Track())
    return gpx


def test_encode_header_and_root_attributes():
    xml = encode(build_document())
    assert xml.startswith(XML_DECLARATION + "\n")
    assert "<gpx " in xml
    assert 'version="1.1"' in xml
    assert f'creator="{DEFAULT_CREATOR}"' in xml
    assert 'xmlns="http://www.topografix.com/GPX/1/1"' in xml
    assert "Test Track" in xml
    assert 'lat="40.7128"' in xml
    assert 'lon="-74.006"' in xml


def test_encode_omits_absent_fields():
    gpx = Gpx()
    gpx.add_track(Track(segments=[TrackSegment([Point(1.0, 2.0)])]))
    gpx.add_waypoint(Waypoint(3.0, 4.0))
    xml = encode(gpx)
    for tag in ("<ele", "<time", "<name", "<metadata"):
        assert tag not in xml


def test_encode_metadata_without_time():
    xml = encode(Gpx(metadata=Metadata()))
    assert "<metadata" in xml
    assert "<time" not in xml
    assert decode(xml).metadata == Metadata()


def test_encode_keeps_decoded_root_attributes():
    xml = encode(decode('<gpx version="1.0" creator="StravaGPX"></gpx>'))
    assert 'version="1.0"' in xml
    assert 'creator="StravaGPX"' in xml


def test_encode_children_in_schema_order():
    xml = encode(build_document())
    assert xml.index("<metadata") < xml.index("<wpt") < xml.index("<trk")


def test_encode_compact_output():
    xml = encode(build_document(), pretty=False)
    header, body = xml.split("\n", 1)
    assert header == XML_DECLARATION
    assert "\n" not in body


def test_to_xml_and_str():
    gpx = build_document()
    assert gpx.to_xml() == encode(gpx)
    assert str(gpx) == encode(gpx)


# ---------------------------
# Round trip
# ---------------------------
def test_round_trip_preserves_shape_and_distance():
    original = build_document()
    again = decode(encode(original))

    assert len(again.tracks) == len(original.tracks)
    assert len(again.waypoints) == len(original.waypoints)
    assert again.total_segments() == original.total_segments()
    assert again.total_points() == original.total_points()
    assert again.total_distance_km() == pytest.approx(original.total_distance_km())


def test_round_trip_preserves_values():
    original = build_document()
    again = decode(original.to_xml(pretty=False))

    assert again.tracks == original.tracks
    assert again.waypoints == original.waypoints
    assert again.metadata == original.metadata
    assert again.statistics() == original.statistics()


def test_round_trip_of_sample_file(sample_gpx_text):
    original = decode(sample_gpx_text)
    again = decode(encode(original))
    assert again == original


# ---------------------------
# Time helpers
# ---------------------------
@pytest.mark.parametrize(
    "text, expected",
    [
        ("2026-01-02T21:14:44Z", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44.123Z", dt.datetime(2026, 1, 2, 21, 14, 44, 123000, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44+00:00", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("2026-01-02T23:14:44+02:00", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44.12Z", dt.datetime(2026, 1, 2, 21, 14, 44, 120000, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44.1234567Z", dt.datetime(2026, 1, 2, 21, 14, 44, 123456, tzinfo=dt.timezone.utc)),
    ],
)
def test_parse_time_utc(text, expected):
    parsed = parse_time_utc(text)
    assert parsed == expected
    assert parsed.utcoffset() == dt.timedelta(0)


def test_format_time_utc():
    assert format_time_utc(utc(10, 5, 7)) == "2024-07-11T10:05:07Z"
    assert format_time_utc(utc(10).replace(microsecond=250000)) == "2024-07-11T10:00:00.250000Z"
    assert format_time_utc(dt.datetime(2024, 7, 11, 10)) == "2024-07-11T10:00:00Z"


# ---------------------------
# Files
# ---------------------------
def test_read_gpx(sample_gpx_path):
    gpx = read_gpx(sample_gpx_path)
    assert gpx.total_points() == 5


def test_write_then_read(tmp_path):
    out = tmp_path / "nested" / "dir" / "out.gpx"
    write_gpx(build_document(), out)

    content = out.read_text(encoding="utf-8")
    assert content.startswith(XML_DECLARATION)
    assert "Test Track" in content
    assert read_gpx(out).total_points() == 3


def test_read_gpx_annotates_errors_with_path(tmp_path):
    bad = tmp_path / "bad.gpx"
    bad.write_text("<gpx><trk>", encoding="utf-8")
    with pytest.raises(GpxDecodeError) as excinfo:
        read_gpx(bad)
    assert excinfo.value.path == bad
    assert str(bad) in str(excinfo.value)


def test_read_gpx_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_gpx(tmp_path / "missing.gpx")


def test_parse_time_utc_out_of_range_is_value_error():
    with pytest.raises(ValueError, match="out of range"):
        parse_time_utc("0001-01-01T00:30:00+01:00")


def test_decode_keeps_names_verbatim():
    gpx = decode('<gpx><wpt lat="1" lon="2"><name> Hut </name></wpt></gpx>')
    assert gpx.waypoint_names() == [" Hut "]
    assert decode(gpx.to_xml()).waypoints == gpx.waypoints
