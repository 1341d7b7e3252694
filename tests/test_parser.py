import json

import pytest

from videosgo.parser import (
    PlayGroup,
    extract_episode_name,
    extract_url,
    filter_m3u8,
    format_play_links,
    parse_episode_links,
    parse_play_groups,
    parse_play_url_from_jsonb,
    to_jsonb_array,
)


def test_parse_play_groups_pairs_names_and_links():
    groups = parse_play_groups(
        " zuida $$$feifan",
        "ep1$http://a/1.m3u8# ep2$http://a/2.m3u8 $$$http://b/1.m3u8",
    )
    assert groups == [
        PlayGroup("zuida", ["ep1$http://a/1.m3u8", "ep2$http://a/2.m3u8"]),
        PlayGroup("feifan", ["http://b/1.m3u8"]),
    ]


@pytest.mark.parametrize("play_from,play_url", [("", "x"), ("a", ""), ("", "")])
def test_parse_play_groups_empty_inputs(play_from, play_url):
    assert parse_play_groups(play_from, play_url) == []


def test_parse_play_groups_skips_blank_and_unpaired():
    groups = parse_play_groups("a$$$ $$$c$$$d", "x#y$$$z$$$ # $$$w$$$extra")
    assert [g.group_name for g in groups] == ["a", "d"]
    assert groups[1].links == ["w"]


def test_filter_m3u8_case_insensitive_and_drops_empty():
    groups = [
        PlayGroup("one", ["http://a/x.M3U8", "http://a/y.mp4"]),
        PlayGroup("two", ["http://a/z.mp4"]),
    ]
    assert filter_m3u8(groups) == [PlayGroup("one", ["http://a/x.M3U8"])]


def test_jsonb_round_trip():
    groups = [PlayGroup("最大资源", ["第1集$http://a/1.m3u8"]), PlayGroup("b", [])]
    assert parse_play_url_from_jsonb(to_jsonb_array(groups)) == groups


def test_jsonb_format_is_compact_object():
    encoded = to_jsonb_array([PlayGroup("g", ["u"])])
    assert len(encoded) == 1
    assert " " not in encoded[0]
    assert json.loads(encoded[0]) == {"group_name": "g", "links": ["u"]}


def test_jsonb_escapes_html_characters():
    encoded = to_jsonb_array([PlayGroup("<a&b>", [])])[0]
    assert "<" not in encoded and ">" not in encoded and "&" not in encoded
    assert parse_play_url_from_jsonb([encoded])[0].group_name == "<a&b>"


def test_parse_jsonb_skips_invalid_items():
    items = ["not json", "[1, 2]", '{"group_name": 5}', '{"group_name": "ok", "links": ["l"]}']
    assert parse_play_url_from_jsonb(items) == [PlayGroup("ok", ["l"])]


def test_parse_jsonb_missing_fields_default_empty():
    assert parse_play_url_from_jsonb(["{}"]) == [PlayGroup("", [])]


def test_extract_episode_name_and_url():
    assert extract_episode_name("第1集$http://a/1.m3u8") == "第1集"
    assert extract_url("第1集$http://a/1.m3u8") == "http://a/1.m3u8"


def test_extract_without_separator():
    assert extract_episode_name("http://a/1.m3u8") == ""
    assert extract_url("http://a/1.m3u8") == "http://a/1.m3u8"


def test_extract_url_takes_second_part_only():
    assert extract_url("n$u$v") == "u"


def test_parse_episode_links_uses_default_group():
    groups = parse_episode_links("01$u1# #02$u2")
    assert groups == [PlayGroup("默认", ["01$u1", "02$u2"])]


@pytest.mark.parametrize("text", ["", " # "])
def test_parse_episode_links_empty(text):
    assert parse_episode_links(text) == []


def test_format_play_links_names_and_fallback():
    formatted = format_play_links([PlayGroup("g", ["ep$u1", "u2"])])
    assert formatted == {
        "g": [
            {"name": "ep", "url": "u1"},
            {"name": "第2集", "url": "u2"},
        ]
    }


def test_format_play_links_empty_name_falls_back():
    formatted = format_play_links([PlayGroup("g", ["$u1"])])
    assert formatted["g"] == [{"name": "第1集", "url": "u1"}]