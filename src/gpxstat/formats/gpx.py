# gpxstat/formats/gpx.py
"""
GPX codec for gpxstat

This module is intentionally format-focused:
- mapping between XML elements/attributes and the document model
- GPX time parsing and formatting
- safely reading and writing GPX files

The attribute-vs-element layout of every entity lives in one declarative
table per entity (POINT_FIELDS, WAYPOINT_FIELDS), and both decode() and
encode() are driven by those tables so the two directions stay symmetric.

Decoding is all-or-nothing: it either returns a complete Gpx or raises
GpxDecodeError. It never hands back an empty or partial document.
"""

from __future__ import annotations

import datetime as _dt
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
from xml.etree import ElementTree as ET

from gpxstat.errors import GpxDecodeError
from gpxstat.model.gpx import Gpx, Metadata
from gpxstat.model.point import Point
from gpxstat.model.track import Track, TrackSegment
from gpxstat.model.waypoint import Waypoint
from gpxstat.util.paths import ensure_dir

# GPX 1.1 default namespace
GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
DEFAULT_VERSION = "1.1"
DEFAULT_CREATOR = "gpxstat"

ATTRIBUTE = "attribute"
ELEMENT = "element"

# Seconds with a fractional part, e.g. ":44.12"
_FRACTION_RE = re.compile(r"(:\d{2})\.(\d+)")


def _local(tag: str) -> str:
    """
    Strip the namespace from an ElementTree tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    and files in the wild come both with and without the GPX namespace.
    """
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if _local(child.tag) == name]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    """
    Element text exactly as written; an empty, blank or missing element
    reads as absent.
    """
    if elem is None or elem.text is None or not elem.text.strip():
        return None
    return elem.text


# ---------------------------
# Time handling
# ---------------------------
def parse_time_utc(text: str) -> _dt.datetime:
    """
    Parse an ISO-8601 timestamp found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"

    Naive timestamps are taken as UTC. Fractional seconds of any length are
    accepted and kept to microsecond precision.

    Raises:
      ValueError (also when the instant falls outside datetime's range
      once shifted to UTC)
    """
    s = text.strip()
    # GPX times commonly use Z for UTC.
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"

    # fromisoformat() before 3.11 only takes 3 or 6 fraction digits
    s = _FRACTION_RE.sub(lambda m: f"{m.group(1)}.{(m.group(2) + '000000')[:6]}", s, count=1)

    dt = _dt.datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)
    try:
        return dt.astimezone(_dt.timezone.utc)
    except OverflowError as e:
        raise ValueError(f"time out of range in UTC: {text.strip()!r}") from e


def format_time_utc(dt: _dt.datetime) -> str:
    """
    Format a datetime as GPX time (UTC with Z).

    Fractional seconds are written only when present.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)
    return dt.astimezone(_dt.timezone.utc).isoformat().replace("+00:00", "Z")


def _format_float(value: float) -> str:
    # Shortest repr that reads back to the same float.
    return repr(float(value))


# ---------------------------
# Field mapping tables
# ---------------------------
@dataclass(frozen=True)
class Field:
    """
    One model attribute and its place in the XML.

      attr      model attribute name
      xml_name  XML attribute or child element name
      kind      ATTRIBUTE or ELEMENT
      parse     text -> value (may raise ValueError)
      render    value -> text
    """
    attr: str
    xml_name: str
    kind: str
    parse: Callable[[str], Any]
    render: Callable[[Any], str]
    required: bool = False


_LAT = Field("lat", "lat", ATTRIBUTE, float, _format_float, required=True)
_LON = Field("lon", "lon", ATTRIBUTE, float, _format_float, required=True)
_ELE = Field("elevation", "ele", ELEMENT, float, _format_float)
_TIME = Field("time", "time", ELEMENT, parse_time_utc, format_time_utc)
_NAME = Field("name", "name", ELEMENT, str, str)

# Element order follows the GPX 1.1 wptType sequence (ele, time, ..., name).
POINT_FIELDS = (_LAT, _LON, _ELE, _TIME)
WAYPOINT_FIELDS = (_LAT, _LON, _ELE, _TIME, _NAME)


def _decode_fields(elem: ET.Element, fields: tuple[Field, ...]) -> dict[str, Any]:
    tag = _local(elem.tag)
    values: dict[str, Any] = {}

    for f in fields:
        if f.kind == ATTRIBUTE:
            raw = elem.get(f.xml_name)
            raw = raw.strip() if raw is not None else None
        else:
            raw = _text(_child(elem, f.xml_name))

        if not raw:
            if f.required:
                raise GpxDecodeError(f"<{tag}> is missing required {f.kind} '{f.xml_name}'")
            continue

        try:
            values[f.attr] = f.parse(raw)
        except ValueError as e:
            raise GpxDecodeError(f"<{tag}> has invalid {f.kind} '{f.xml_name}': {raw!r} ({e})") from e

    return values


def _encode_fields(obj: Any, fields: tuple[Field, ...], elem: ET.Element) -> None:
    for f in fields:
        value = getattr(obj, f.attr)
        if value is None:
            continue
        if f.kind == ATTRIBUTE:
            elem.set(f.xml_name, f.render(value))
        else:
            ET.SubElement(elem, f.xml_name).text = f.render(value)


# ---------------------------
# Decode
# ---------------------------
def _decode_track(trk: ET.Element) -> Track:
    track = Track(name=_text(_child(trk, "name")))
    for seg in _children(trk, "trkseg"):
        track.add_segment(TrackSegment(
            points=[Point(**_decode_fields(pt, POINT_FIELDS)) for pt in _children(seg, "trkpt")]
        ))
    return track


def decode(text: str | bytes) -> Gpx:
    """
    Decode GPX XML text into a Gpx document.

    Raises:
      GpxDecodeError
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        line, column = e.position
        raise GpxDecodeError(f"malformed XML: {e}", line=line, column=column) from e

    if _local(root.tag) != "gpx":
        raise GpxDecodeError(f"expected root element <gpx>, found <{_local(root.tag)}>")

    metadata = None
    md = _child(root, "metadata")
    if md is not None:
        metadata = Metadata(time=_text(_child(md, "time")))

    return Gpx(
        tracks=[_decode_track(trk) for trk in _children(root, "trk")],
        waypoints=[Waypoint(**_decode_fields(wpt, WAYPOINT_FIELDS)) for wpt in _children(root, "wpt")],
        metadata=metadata,
        version=root.get("version"),
        creator=root.get("creator"),
    )


# ---------------------------
# Encode
# ---------------------------
def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Controls .text/.tail
    explicitly so no blank lines sneak in.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else ""

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


def to_element(gpx: Gpx) -> ET.Element:
    """Build the <gpx> element tree for a document."""
    root = ET.Element("gpx", {
        "version": gpx.version or DEFAULT_VERSION,
        "creator": gpx.creator or DEFAULT_CREATOR,
        "xmlns": GPX_NAMESPACE,
    })

    if gpx.metadata is not None:
        md = ET.SubElement(root, "metadata")
        if gpx.metadata.time is not None:
            ET.SubElement(md, "time").text = gpx.metadata.time

    for wpt in gpx.waypoints:
        _encode_fields(wpt, WAYPOINT_FIELDS, ET.SubElement(root, "wpt"))

    for track in gpx.tracks:
        trk = ET.SubElement(root, "trk")
        if track.name is not None:
            ET.SubElement(trk, "name").text = track.name
        for segment in track.segments:
            seg = ET.SubElement(trk, "trkseg")
            for point in segment.points:
                _encode_fields(point, POINT_FIELDS, ET.SubElement(seg, "trkpt"))

    return root


def encode(gpx: Gpx, *, pretty: bool = True) -> str:
    """
    Encode a document as GPX XML text, starting with the XML declaration.

    Fields that are None are left out entirely.
    """
    root = to_element(gpx)
    if pretty:
        _indent(root)
    return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}"


# ---------------------------
# Files
# ---------------------------
def read_gpx(path: Path) -> Gpx:
    """
    Read and decode a GPX file.

    Raises:
      GpxDecodeError (annotated with the path), OSError
    """
    path = Path(path)
    try:
        return decode(path.read_bytes())
    except GpxDecodeError as e:
        raise e.with_path(path) from e


def write_gpx(gpx: Gpx, out_path: Path, *, pretty: bool = True) -> None:
    """
    Write a document to disk as UTF-8, creating parent directories.
    """
    out_path = Path(out_path)
    ensure_dir(out_path.parent)
    out_path.write_text(encode(gpx, pretty=pretty) + "\n", encoding="utf-8")
