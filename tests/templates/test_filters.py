"""Tests for template filters."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from jinja2 import Environment

from vaulty.shared.domain.exceptions import TemplateRenderError
from vaulty.templates.engine import wrap_filter
from vaulty.templates.filters import (
    FILTERS,
    base64_decode,
    base64_encode,
    decode_uri_component,
    decrypt,
    encode_uri_component,
    encrypt,
    format_date,
    hash_value,
    key_value,
)


@pytest.fixture
def env():
    environment = Environment(keep_trailing_newline=True)
    for name, func in FILTERS.items():
        environment.filters[name] = wrap_filter(name, func)
    return environment


def render(env, source, **data):
    return env.from_string(source).render(data)


class TestKeyValue:
    def test_flattens_mapping(self):
        assert key_value({"A": "1", "B": "2"}) == "A=1\nB=2"

    def test_non_string_values(self):
        assert key_value({"on": True, "n": None, "list": [1, 2], "num": 3}) == "on=true\nn=null\nlist=[1, 2]\nnum=3"

    def test_rejects_non_mapping(self, env):
        with pytest.raises(TemplateRenderError, match="^keyValue filter: expected a mapping, got str$"):
            render(env, "{{ 'x' | keyValue }}")


class TestEncoding:
    def test_uri_component(self, env):
        assert render(env, "{{ v | encodeURIComponent }}", v="a b&c/d?é") == "a%20b%26c%2Fd%3F%C3%A9"
        assert render(env, "{{ v | decodeURIComponent }}", v="a%20b%26c") == "a b&c"

    def test_uri_component_keeps_unreserved(self, env):
        assert render(env, "{{ v | encodeURIComponent }}", v="A-z_0.9!~*'()") == "A-z_0.9!~*'()"

    def test_base64(self, env):
        assert render(env, "{{ 'hello' | base64encode }}") == "aGVsbG8="
        assert render(env, "{{ 'aGVsbG8=' | base64decode }}") == "hello"

    def test_invalid_base64_names_the_filter(self, env):
        with pytest.raises(TemplateRenderError) as exc_info:
            render(env, "{{ 'x' | base64decode }}")

        assert str(exc_info.value).startswith("base64decode filter: ")
        assert exc_info.value.context == {"filter": "base64decode"}

    @pytest.mark.parametrize("value", ["%zz", "100%", "%a", "a%2"])
    def test_malformed_escape_names_the_filter(self, env, value):
        with pytest.raises(TemplateRenderError, match="^decodeURIComponent filter: URI malformed"):
            render(env, "{{ v | decodeURIComponent }}", v=value)

    def test_escape_that_is_not_utf8(self, env):
        with pytest.raises(TemplateRenderError, match="^decodeURIComponent filter: "):
            render(env, "{{ '%FF' | decodeURIComponent }}")


ROUND_TRIP_SAMPLES = ["", "%", "%25", "100%", "🔑 clé", "\x00\x07\t\r\n\x7f", ";,/?:@&=+$#[]", "a b+c"]


class TestRoundTrip:
    @pytest.mark.parametrize("value", ROUND_TRIP_SAMPLES)
    def test_uri_component_samples(self, value):
        assert decode_uri_component(encode_uri_component(value)) == value

    @pytest.mark.parametrize("value", ROUND_TRIP_SAMPLES)
    def test_base64_samples(self, value):
        assert base64_decode(base64_encode(value)) == value

    @given(st.text())
    def test_uri_component_any_text(self, value):
        assert decode_uri_component(encode_uri_component(value)) == value

    @given(st.text())
    def test_base64_any_text(self, value):
        assert base64_decode(base64_encode(value)) == value


class TestHash:
    def test_defaults_to_sha256(self):
        assert hash_value("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_other_algorithm(self, env):
        assert render(env, "{{ 'abc' | hash('md5') }}") == "900150983cd24fb0d6963f7d28e17f72"

    def test_unknown_algorithm(self, env):
        with pytest.raises(TemplateRenderError, match="^hash filter: "):
            render(env, "{{ 'abc' | hash('nope') }}")


class TestCipher:
    def test_round_trip_with_keyword_options(self, env):
        encrypted = render(env, "{{ 'p@ss' | encrypt(secret='k') }}")

        assert encrypted != "p@ss"
        assert len(encrypted) == 32
        assert render(env, "{{ v | decrypt(secret='k') }}", v=encrypted) == "p@ss"

    def test_mapping_options(self):
        options = {"secret": "k", "iv": "00" * 16}

        assert decrypt(encrypt("value", options), options) == "value"
        assert encrypt("value", options) != encrypt("value", secret="k")

    def test_unsupported_algorithm(self, env):
        with pytest.raises(TemplateRenderError, match="Unsupported algorithm: des"):
            render(env, "{{ 'x' | encrypt(secret='k', algorithm='des') }}")


class TestFormatDate:
    def test_default_format(self):
        assert format_date("2024-03-05T07:08:09Z") == "2024-03-05 07:08:09"

    def test_epoch_milliseconds(self):
        assert format_date(0) == "1970-01-01 00:00:00"

    def test_names_and_escapes(self):
        assert format_date("2024-03-05T15:08:09.250Z", "dddd, MMMM D [at] h:mm A (SSS)") == (
            "Tuesday, March 5 at 3:08 PM (250)"
        )

    def test_offset(self):
        assert format_date("2024-03-05T07:08:09+02:30", "Z ZZ") == "+02:30 +0230"

    def test_invalid_date(self, env):
        with pytest.raises(TemplateRenderError, match="^formatDate filter: Invalid date: soon$"):
            render(env, "{{ 'soon' | formatDate }}")


class TestSerialization:
    def test_json(self, env):
        assert render(env, "{{ v | json }}", v={"a": 1}) == '{\n  "a": 1\n}'
        assert render(env, "{{ v | json(None) }}", v={"a": 1}) == '{"a": 1}'

    def test_yaml(self, env):
        assert render(env, "{{ v | yaml }}", v={"b": 1, "a": [1]}) == "b: 1\na:\n- 1\n"
