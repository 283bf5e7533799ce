import json
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from image_api_engine.engine.request import build_body, build_request, build_url
from image_api_engine.engine.values import seed_values
from image_api_engine.parser.base import ApiConfigContent
from image_api_engine.parser.loader import load_config_file

FIXTURES = Path(__file__).parent / "fixtures"


def _content(parameters: list[dict], link: str = "https://api.example.com/img", func: str = "GET") -> ApiConfigContent:
    return ApiConfigContent(
        friendly_name="Test",
        link=link,
        func=func,
        parameters=parameters,
        response={"image": {"content_type": "URL"}},
    )


class TestQueryRequests:
    def test_positional_only_has_no_query(self):
        content = _content([
            {"name": "", "type": "string", "value": "cats"},
            {"name": None, "type": "integer", "value": 3},
        ])
        url = build_url(content, {0: "cats", 1: 3})
        assert url == "https://api.example.com/img/cats/3"
        assert "?" not in url

    def test_named_only_has_one_question_mark(self):
        content = _content([
            {"name": "q", "type": "string", "value": ""},
            {"name": "n", "type": "integer", "value": 1},
        ])
        url = build_url(content, {0: "sunset", 1: 4})
        assert url.count("?") == 1
        assert parse_qs(urlparse(url).query) == {"q": ["sunset"], "n": ["4"]}

    def test_positional_and_named(self):
        content = _content([
            {"name": "", "type": "enum", "value": ["pc", "mobile"]},
            {"name": "size", "type": "string", "value": "large"},
        ])
        assert build_url(content, {0: "mobile", 1: "large"}) == "https://api.example.com/img/mobile?size=large"

    def test_trailing_slash_and_question_mark_are_stripped(self):
        content = _content([{"name": "a", "type": "string", "value": "1"}], link="https://api.example.com/img/?")
        # "/" is stripped before "?", so a trailing "/?" keeps its slash
        assert build_url(content, {0: "1"}) == "https://api.example.com/img/?a=1"

        content = _content([{"name": "a", "type": "string", "value": "1"}], link="https://api.example.com/img?")
        assert build_url(content, {0: "1"}) == "https://api.example.com/img?a=1"

        content = _content([], link="https://api.example.com/img/")
        assert build_url(content, {}) == "https://api.example.com/img"

    def test_missing_and_none_values_are_skipped(self):
        content = _content([
            {"name": "a", "type": "string", "value": "x"},
            {"name": "b", "type": "string", "value": "y"},
            {"name": "", "type": "string", "value": "z"},
        ])
        assert build_url(content, {0: None}) == "https://api.example.com/img"

    def test_list_joined_with_split_str(self):
        content = _content([{"name": "tag", "type": "list", "value": [], "split_str": ","}])
        url = build_url(content, {0: ["a", "b"]})
        assert parse_qs(urlparse(url).query) == {"tag": ["a,b"]}

    def test_list_default_separator(self):
        content = _content([{"name": "tag", "type": "list", "value": []}])
        assert build_url(content, {0: ["a", "b"]}) == "https://api.example.com/img?tag=a%7Cb"

    def test_positional_list_is_comma_joined(self):
        content = _content([{"name": "", "type": "list", "value": [], "split_str": ";"}])
        assert build_url(content, {0: ["a", "b"]}) == "https://api.example.com/img/a,b"

        content = _content([{"name": "", "type": "list", "value": []}])
        assert build_url(content, {0: ["a", "b"]}) == "https://api.example.com/img/a,b"

    def test_booleans_are_lowercase(self):
        content = _content([{"name": "r18", "type": "boolean", "value": False}])
        assert build_url(content, {0: False}) == "https://api.example.com/img?r18=false"

    def test_reserved_characters_are_encoded(self):
        content = _content([{"name": "q", "type": "string", "value": ""}])
        assert build_url(content, {0: "a b&c=d/é"}) == "https://api.example.com/img?q=a+b%26c%3Dd%2F%C3%A9"

    def test_head_uses_query(self):
        content = _content([{"name": "q", "type": "string", "value": ""}], func="head")
        request = build_request(content, {0: "x"})
        assert request.method == "HEAD"
        assert request.url.endswith("?q=x")
        assert request.body is None

    def test_fixture_get_request(self):
        config = load_config_file(FIXTURES / "anime.api.json")
        request = build_request(config.content, seed_values(config.content))
        assert request.method == "GET"
        parsed = urlparse(request.url)
        assert parsed.path == "/api/landscape"
        assert parse_qs(parsed.query, keep_blank_values=True) == {
            "num": ["1"],
            "r18": ["false"],
            "tag": ["girl,sky"],
            "keyword": [""],
            "format": ["json"],
        }


class TestBodyRequests:
    def test_post_body_keeps_lists(self):
        config = load_config_file(FIXTURES / "draw.api.json")
        request = build_request(config.content, seed_values(config.content))
        assert request.method == "POST"
        assert request.url == "https://draw.example.com/v1/generate"
        assert request.headers == {"Content-Type": "application/json"}
        assert json.loads(request.body) == {"prompt": "a cat", "styles": ["anime", "flat"]}

    def test_missing_values_are_omitted_and_none_kept(self):
        content = _content(
            [
                {"name": "a", "type": "string", "value": "x"},
                {"name": "b", "type": "string", "value": "y"},
            ],
            func="put",
        )
        assert build_body(content, {1: None}) == {"b": None}

    def test_link_is_not_modified(self):
        content = _content([], link="https://api.example.com/img/", func="post")
        request = build_request(content, {})
        assert request.url == "https://api.example.com/img/"
        assert request.body == "{}"
