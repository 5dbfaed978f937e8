"""Tests for cleaning JSON model output."""

import json

from openapi_directory.utils.json_utils import clean_json_string


def test_valid_json():
    content = '''{
        "detailed_description": "Test description",
        "use_cases": ["case1", "case2"]
    }'''

    result = json.loads(clean_json_string(content))

    assert result["detailed_description"] == "Test description"
    assert len(result["use_cases"]) == 2


def test_code_fence():
    assert json.loads(clean_json_string('```json\n{"a": 1}\n```')) == {"a": 1}


def test_surrounding_prose_and_trailing_commas():
    content = 'Here you go: {"shortlist": ["name", "tag",],} Hope it helps'

    assert json.loads(clean_json_string(content)) == {"shortlist": ["name", "tag"]}


def test_single_quotes():
    content = '''{
        'detailed_description': 'Test description',
        'use_cases': ['case1', 'case2']
    }'''

    result = json.loads(clean_json_string(content))

    assert result["detailed_description"] == "Test description"


def test_unquoted_keys():
    content = '''{
        detailed_description: "Test description",
        use_cases: ["case1", "case2"]
    }'''

    result = json.loads(clean_json_string(content))

    assert result["use_cases"] == ["case1", "case2"]


def test_invalid_content_returns_empty_object():
    assert clean_json_string("{invalid json}") == "{}"
    assert clean_json_string("") == "{}"
