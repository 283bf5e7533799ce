import base64
import json

from image_api_engine.engine.extract import extract_images
from image_api_engine.parser.base import ImageDescriptor


def _desc(content_type: str, path: str | None = None) -> ImageDescriptor:
    return ImageDescriptor(content_type=content_type, path=path)


def _json(data) -> bytes:
    return json.dumps(data).encode("utf-8")


class TestUrlExtraction:
    def test_path_to_list(self):
        body = _json({"data": {"list": ["http://a", "http://b"]}})
        assert extract_images(_desc("URL", "data.list"), {}, body) == ["http://a", "http://b"]

    def test_path_to_single_value(self):
        body = _json({"data": {"url": "http://a"}})
        assert extract_images(_desc("URL", "data.url"), {}, body) == ["http://a"]

    def test_wildcard_path_is_flattened(self):
        body = _json({"data": [{"urls": {"original": "http://a"}}, {"urls": {"original": "http://b"}}]})
        assert extract_images(_desc("URL", "data[*].urls.original"), {}, body) == ["http://a", "http://b"]

    def test_unresolved_path_is_empty(self):
        assert extract_images(_desc("URL", "data.missing"), {}, _json({"data": {}})) == []

    def test_falsy_entries_dropped(self):
        body = _json({"items": [{"url": "http://a"}, {"url": ""}, {"x": 1}]})
        assert extract_images(_desc("URL", "items[*].url"), {}, body) == ["http://a"]

    def test_no_path_list_body(self):
        assert extract_images(_desc("URL"), {}, _json(["http://a", "http://b"])) == ["http://a", "http://b"]

    def test_no_path_string_body(self):
        assert extract_images(_desc("URL"), {}, _json("http://a")) == ["http://a"]

    def test_non_string_entries_coerced(self):
        assert extract_images(_desc("URL", "ids"), {}, _json({"ids": [1, 2]})) == ["1", "2"]

    def test_floats_and_booleans_use_json_spelling(self):
        assert extract_images(_desc("URL", "ids"), {}, _json({"ids": [1.0, 2.5]})) == ["1", "2.5"]
        assert extract_images(_desc("URL"), {}, _json([True])) == ["true"]

    def test_plain_text_fallback(self):
        body = b"http://a/1.jpg\nnot-a-link, https://b/2.png\n\n  ftp://c/3.jpg http://d/4.jpg"
        assert extract_images(_desc("URL", "data.list"), {}, body) == [
            "http://a/1.jpg",
            "https://b/2.png",
            "http://d/4.jpg",
        ]

    def test_malformed_json_falls_back(self):
        body = b'{"broken": \nhttp://a/1.jpg,"http://quoted"'
        assert extract_images(_desc("URL"), {}, body) == ["http://a/1.jpg"]

    def test_invalid_utf8_is_empty(self):
        assert extract_images(_desc("URL"), {}, b"\xff\xfe\xfa") == []


class TestBase64Extraction:
    def test_whole_body(self):
        assert extract_images(_desc("BASE64"), {}, b"Zm9v") == ["data:image/png;base64,Zm9v"]

    def test_whole_body_strips_whitespace(self):
        assert extract_images(_desc("BASE64"), {}, b"Zm9v\n") == ["data:image/png;base64,Zm9v"]

    def test_path_with_wildcard(self):
        body = _json({"images": ["Zm9v", "YmFy"]})
        assert extract_images(_desc("BASE64", "images[*]"), {}, body) == [
            "data:image/png;base64,Zm9v",
            "data:image/png;base64,YmFy",
        ]

    def test_path_single_value(self):
        body = _json({"result": {"image": "Zm9v"}})
        assert extract_images(_desc("BASE64", "result.image"), {}, body) == ["data:image/png;base64,Zm9v"]

    def test_empty_resolution(self):
        assert extract_images(_desc("BASE64", "images"), {}, _json({"images": []})) == []
        assert extract_images(_desc("BASE64", "missing"), {}, _json({})) == []

    def test_empty_body(self):
        assert extract_images(_desc("BASE64"), {}, b"") == []

    def test_path_with_non_json_body_is_empty(self):
        assert extract_images(_desc("BASE64", "images"), {}, b"Zm9v") == []


class TestBinaryExtraction:
    def test_uses_content_type_header(self):
        raw = b"\x89PNG\r\n"
        result = extract_images(_desc("BINARY"), {"Content-Type": "image/png; charset=binary"}, raw)
        assert result == ["data:image/png;base64," + base64.b64encode(raw).decode("ascii")]

    def test_defaults_to_jpeg(self):
        result = extract_images(_desc("BINARY"), {}, b"\xff\xd8\xff")
        assert result == ["data:image/jpeg;base64,/9j/"]

    def test_path_is_ignored(self):
        result = extract_images(_desc("BINARY", "data.url"), {"content-type": "image/webp"}, b"abc")
        assert result == ["data:image/webp;base64,YWJj"]
