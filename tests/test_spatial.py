"""Test spatial analysis of zine pages.

Tests cover:
1. Rectangle geometry (overlap, edge distance, IoU, direction)
2. Directional weighting classes and their ordering
3. Text validity filtering
4. Nearby-text resolution for an anchor image
5. Page layout analysis
6. Tolerant document loading
7. Configuration loading and validation
"""
from __future__ import annotations

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from zinebook.cleaner import TextValidityFilter, is_valid_text_content
from zinebook.config import EngineConfig, SpatialConfig, config_from_dict, load_config
from zinebook.document import parse_document, parse_element
from zinebook.geometry import area, distance, iou, overlaps, relative_direction
from zinebook.layout import PageLayoutAnalyzer, analyze_page_layout, element_to_rectangle
from zinebook.resolver import NearbyTextResolver
from zinebook.types import Element, Rectangle
from zinebook.weighting import DirectionalWeighting

REPO_ROOT = Path(__file__).resolve().parents[1]


def image(x, y, w, h, id="img") -> Rectangle:
    return Rectangle(x, y, w, h, kind="image", id=id)


def text(x, y, w, h, content="Caption", id="txt") -> Rectangle:
    return Rectangle(x, y, w, h, content=content, kind="text", id=id)


# ═══════════════════════════════════════════════════════════════════════════════
# TEST FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def workspace_dir() -> Path:
    """Create temporary workspace."""
    tmp = tempfile.mkdtemp()
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def anchor() -> Rectangle:
    return image(100, 100, 200, 150, id="anchor")


# ═══════════════════════════════════════════════════════════════════════════════
# GEOMETRY TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestGeometry:
    def test_rectangle_properties(self):
        r = Rectangle(10, 20, 100, 50)
        assert r.x1 == 110
        assert r.y1 == 70
        assert r.center == (60.0, 45.0)
        assert area(r) == 5000

    def test_negative_size_is_degenerate(self):
        r = Rectangle(0, 0, -5, -1)
        assert r.width == 0
        assert r.height == 0
        assert area(r) == 0

    def test_touching_edges_do_not_overlap(self):
        assert not overlaps(Rectangle(0, 0, 10, 10), Rectangle(10, 0, 10, 10))
        assert overlaps(Rectangle(0, 0, 10, 10), Rectangle(5, 5, 10, 10))

    def test_overlap_is_symmetric(self):
        a, b = Rectangle(0, 0, 10, 10), Rectangle(5, 5, 10, 10)
        assert overlaps(a, b) == overlaps(b, a)

    def test_edge_distance(self):
        a = Rectangle(0, 0, 10, 10)
        b = Rectangle(13, 14, 5, 5)
        assert distance(a, b) == pytest.approx(5.0)
        assert distance(b, a) == pytest.approx(5.0)

    def test_distance_zero_when_overlapping(self):
        assert distance(Rectangle(0, 0, 10, 10), Rectangle(5, 5, 10, 10)) == 0.0

    def test_iou(self):
        box = Rectangle(0, 0, 100, 100)
        assert iou(box, box) == 1.0
        assert iou(box, Rectangle(200, 200, 10, 10)) == 0.0
        assert iou(Rectangle(0, 0, 0, 0), Rectangle(0, 0, 0, 0)) == 0.0

    def test_relative_direction(self, anchor):
        assert relative_direction(anchor, text(120, 260, 160, 30)) == "below"
        assert relative_direction(anchor, text(150, 20, 100, 30)) == "above"
        assert relative_direction(anchor, text(320, 160, 100, 30)) == "right"
        assert relative_direction(anchor, text(0, 160, 50, 30)) == "left"
        assert relative_direction(anchor, text(150, 150, 50, 20)) == "overlapping"


# ═══════════════════════════════════════════════════════════════════════════════
# WEIGHTING TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestDirectionalWeighting:
    def test_classes(self, anchor):
        w = DirectionalWeighting()
        assert w.classify(anchor, text(150, 150, 50, 20)) == "overlap"
        assert w.classify(anchor, text(120, 260, 160, 30)) == "below"
        assert w.classify(anchor, text(320, 160, 100, 30)) == "side"
        assert w.classify(anchor, text(150, 20, 100, 30)) == "above"
        assert w.classify(anchor, text(350, 260, 100, 30)) == "diagonal"

    def test_weights_strictly_ordered(self):
        w = DirectionalWeighting()
        order = ["overlap", "below", "side", "above", "diagonal"]
        weights = [w.weight_for(c) for c in order]
        assert weights == sorted(weights)
        assert len(set(weights)) == len(weights)

    def test_below_beats_above_at_equal_distance(self, anchor):
        w = DirectionalWeighting()
        _, below = w.weighted_distance(anchor, text(150, 260, 100, 30))
        _, above = w.weighted_distance(anchor, text(150, 60, 100, 30))
        assert below < above

    def test_weighted_distance(self, anchor):
        raw, weighted = DirectionalWeighting().weighted_distance(anchor, text(120, 260, 160, 30))
        assert raw == pytest.approx(10.0)
        assert weighted == pytest.approx(6.0)


# ═══════════════════════════════════════════════════════════════════════════════
# TEXT VALIDITY TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestTextValidity:
    @pytest.mark.parametrize(
        "value",
        ["", "   ", "\n\t", "クリックして編集", "テキストを入力", "Lorem ipsum dolor sit amet", "Placeholder", "...", None, 42],
    )
    def test_invalid(self, value):
        assert not is_valid_text_content(value)

    @pytest.mark.parametrize("value", ["Hello", "  夜市の灯り  ", "Edit the world"])
    def test_valid(self, value):
        assert is_valid_text_content(value)

    def test_custom_patterns(self):
        f = TextValidityFilter(boilerplate_patterns=[r"^todo"])
        assert not f.is_valid("TODO: write this")
        assert f.is_valid("Lorem ipsum")


# ═══════════════════════════════════════════════════════════════════════════════
# RESOLVER TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestNearbyTextResolver:
    def test_caption_below(self, anchor):
        rel = NearbyTextResolver().find_best(anchor, [text(120, 260, 160, 30, "A caption")])
        assert rel is not None
        assert rel.direction == "below"
        assert rel.distance == pytest.approx(10.0)
        assert rel.weighted_distance == pytest.approx(6.0)
        assert rel.confidence > 0.8

    def test_search_radius_is_clamped(self):
        r = NearbyTextResolver()
        assert r.search_radius(image(0, 0, 10, 10)) == 120.0
        assert r.search_radius(image(0, 0, 1000, 1000)) == 220.0
        assert r.search_radius(image(0, 0, 300, 250)) == pytest.approx(150.0)

    def test_empty_candidates(self, anchor):
        r = NearbyTextResolver()
        assert r.find_all(anchor, []) == []
        assert r.find_best(anchor, []) is None

    def test_out_of_range_and_boilerplate_excluded(self, anchor):
        r = NearbyTextResolver()
        far = text(900, 900, 50, 20, "Far away")
        placeholder = text(120, 260, 160, 30, "クリックして編集")
        assert r.find_all(anchor, [far, placeholder]) == []

    def test_ranked_by_weighted_distance(self, anchor):
        side = text(320, 160, 100, 30, "Beside", id="side")
        below = text(120, 260, 160, 30, "Below", id="below")
        ranked = NearbyTextResolver().find_all(anchor, [side, below])
        assert [rel.element.id for rel in ranked] == ["below", "side"]
        assert ranked[0].weighted_distance <= ranked[1].weighted_distance

    def test_confidence_in_unit_range(self, anchor):
        r = NearbyTextResolver()
        for t in [text(150, 150, 50, 20), text(120, 260, 160, 30), text(320, 160, 100, 30), text(150, 20, 100, 30)]:
            rel = r.relate(anchor, t)
            assert rel is not None
            assert 0.0 <= rel.confidence <= 1.0

    def test_count_nearby_images(self):
        a = image(0, 0, 100, 100, id="a")
        b = image(150, 0, 100, 100, id="b")
        c = image(900, 900, 100, 100, id="c")
        assert NearbyTextResolver().count_nearby_images(a, [a, b, c]) == 1


# ═══════════════════════════════════════════════════════════════════════════════
# LAYOUT TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestPageLayoutAnalyzer:
    def test_partition_and_pairs(self, anchor):
        other = image(800, 500, 100, 100, id="other")
        caption = text(120, 260, 160, 30, "A caption", id="cap")
        layout = analyze_page_layout([anchor, caption, other])

        assert layout.images == (anchor, other)
        assert layout.text_elements == (caption,)
        assert len(layout.image_text_pairs) == 2
        assert layout.image_text_pairs[0].primary_text.element.id == "cap"
        assert layout.image_text_pairs[1].primary_text is None

    def test_to_dict(self, anchor):
        layout = PageLayoutAnalyzer().analyze([anchor, text(120, 260, 160, 30, "A caption", id="cap")])
        out = layout.to_dict()
        assert out["images"] == 1
        assert out["pairs"][0]["image_id"] == "anchor"
        assert out["pairs"][0]["primary_text_id"] == "cap"
        json.dumps(out)

    def test_empty_page(self):
        layout = analyze_page_layout([])
        assert layout.images == ()
        assert layout.image_text_pairs == ()

    def test_element_to_rectangle(self):
        img = Element(id="i", kind="image", width=10, height=10, caption="Moon")
        shape = Element(id="s", kind="shape")
        assert element_to_rectangle(img).content == "Moon"
        assert element_to_rectangle(shape) is None


# ═══════════════════════════════════════════════════════════════════════════════
# DOCUMENT LOADING TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestDocumentLoading:
    def test_malformed_geometry_coerced(self):
        el = parse_element({"type": "image", "x": "abc", "y": None, "width": -10, "height": float("nan"), "altText": "Alt"}, page_id="p", index=0)
        assert (el.x, el.y, el.width, el.height) == (0.0, 0.0, 0.0, 0.0)
        assert el.alt == "Alt"
        assert el.id.startswith("el_")

    def test_missing_pages_and_elements(self):
        doc = parse_document({"pages": [{}, "bogus"]})
        assert doc.id == "zine"
        assert [p.id for p in doc.pages] == ["page_001", "page_002"]
        assert all(p.elements == () for p in doc.pages)
        assert parse_document(None).pages == ()


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIG TESTS
# ═══════════════════════════════════════════════════════════════════════════════

class TestConfig:
    def test_default_json_matches_defaults(self):
        assert load_config(REPO_ROOT / "config" / "default.json") == EngineConfig()
        assert load_config(None) == EngineConfig()

    def test_unknown_keys_ignored(self):
        cfg = config_from_dict({"spatial": {"weight_below": 0.5, "bogus": 1}})
        assert cfg.spatial.weight_below == 0.5

    def test_misordered_weights_rejected(self):
        with pytest.raises(ValueError):
            config_from_dict({"spatial": {"weight_below": 2.0}})
        with pytest.raises(ValueError):
            SpatialConfig(radius_min=300, radius_max=200).validate()

    def test_numeric_strings_coerced(self):
        cfg = config_from_dict({"pagination": {"chars_per_page": "600", "line_height": "2.5"}})
        assert cfg.pagination.chars_per_page == 600
        assert isinstance(cfg.pagination.chars_per_page, int)
        assert cfg.pagination.line_height == 2.5

    @pytest.mark.parametrize(
        "data",
        [
            {"pagination": {"chars_per_page": "many"}},
            {"pagination": {"chars_per_page": 1.5}},
            {"pagination": {"chars_per_page": True}},
            {"pagination": {"chars_per_page": None}},
            {"pagination": {"line_height": "nan"}},
            {"pagination": {"font_paths": [1]}},
            {"pagination": {"font_paths": "font.ttf"}},
            {"spatial": {"weight_below": [1.0]}},
        ],
    )
    def test_wrong_types_rejected(self, data):
        with pytest.raises(ValueError):
            config_from_dict(data)

    def test_non_positive_budget_rejected(self, workspace_dir):
        p = workspace_dir / "bad.json"
        p.write_text(json.dumps({"pagination": {"chars_per_page": 0}}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(p)
