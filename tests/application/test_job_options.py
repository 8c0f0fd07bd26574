"""Tests for job options parsing and expansion."""

import pytest

from core.application.services.job_options import (
    build_job_options,
    expand_variables,
    parse_properties,
)
from core.domain.exceptions import NotifierConfigurationError


@pytest.mark.parametrize("text", [None, "", "   \n\n", "# only a comment\n! and another"])
def test_empty_text_gives_no_options(text):
    assert parse_properties(text) == {}


def test_separators():
    text = "a=1\nb:2\nc 3\nd = 4\ne\n"
    assert parse_properties(text) == {"a": "1", "b": "2", "c": "3", "d": "4", "e": ""}


def test_value_keeps_inner_spaces_and_separators():
    assert parse_properties("url=http://host:8080/path?x=y") == {"url": "http://host:8080/path?x=y"}
    assert parse_properties("message=hello big world") == {"message": "hello big world"}


def test_line_continuation():
    text = "list=one,\\\n    two,\\\n    three\nnext=1"
    assert parse_properties(text) == {"list": "one,two,three", "next": "1"}


def test_escaped_backslash_is_not_a_continuation():
    assert parse_properties("path=C:\\\\\nother=x") == {"path": "C:\\\\", "other": "x"}


def test_escaped_separator_in_key():
    assert parse_properties("a\\=b=c") == {"a=b": "c"}


def test_last_duplicate_wins():
    assert parse_properties("a=1\na=2") == {"a": "2"}


def test_missing_key_is_a_configuration_error():
    with pytest.raises(NotifierConfigurationError):
        parse_properties("=orphan value")


def test_expand_variables():
    variables = {"BUILD_NUMBER": "42", "JOB_NAME": "my-project"}
    values = {"a": "$BUILD_NUMBER", "b": "${JOB_NAME}-rc", "c": "$MISSING", "d": "plain"}

    assert expand_variables(values, variables) == {
        "a": "42",
        "b": "my-project-rc",
        "c": "$MISSING",
        "d": "plain",
    }


def test_build_job_options_preserves_order():
    options = build_job_options("z=1\ny=$N\nx=3", {"N": "2"})

    assert list(options.items()) == [("z", "1"), ("y", "2"), ("x", "3")]
