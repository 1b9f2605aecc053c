"""Tests for the coerce_json_param helper in types.py."""

from __future__ import annotations

import pytest

from motion_studio_mcp.types import coerce_json_param


class TestCoerceJsonParam:
    def test_storyboard_string_to_dict(self):
        assert coerce_json_param('{"scenes": []}', dict) == {"scenes": []}

    def test_keyframes_string_to_list(self):
        assert coerce_json_param('[{"at": 0}]', list) == [{"at": 0}]

    @pytest.mark.parametrize("value", [{"scenes": []}, [{"at": 0}], None])
    def test_native_values_pass_through(self, value):
        assert coerce_json_param(value, dict) is value

    def test_wrong_shape_returns_original(self):
        assert coerce_json_param("[1, 2]", dict) == "[1, 2]"
        assert coerce_json_param('{"a": 1}', list) == '{"a": 1}'

    def test_invalid_json_returns_original(self):
        assert coerce_json_param("{not json}", dict) == "{not json}"
