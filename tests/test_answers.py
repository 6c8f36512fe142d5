"""
Unit tests for questionnaire_validation.answers module.

Tests for the Answer variants and the read-only ResponseSet view.
"""

import pandas as pd
import pytest

from questionnaire_validation import Answer, AnswerKind, QuestionKind, QuestionSchema, ResponseSet


class TestAnswerFromRaw:
    """Tests for Answer.from_raw()."""

    @pytest.mark.parametrize("raw", [None, "", [], (), float("nan"), pd.NA])
    def test_from_raw_when_value_empty_then_empty_kind(self, raw):
        answer = Answer.from_raw(raw)

        assert answer.kind == AnswerKind.EMPTY
        assert answer.is_empty is True

    def test_from_raw_when_list_then_options_as_text(self):
        answer = Answer.from_raw(["X", 2, True])

        assert answer.kind == AnswerKind.OPTIONS
        assert answer.value == ("X", "2", "true")

    def test_from_raw_when_single_choice_kind_then_option(self):
        answer = Answer.from_raw(3.0, QuestionKind.SELECT)

        assert answer.kind == AnswerKind.OPTION
        assert answer.value == "3"

    def test_from_raw_when_number_without_kind_then_number(self):
        answer = Answer.from_raw(4)

        assert answer.kind == AnswerKind.NUMBER
        assert answer.as_number() == 4.0
        assert answer.as_text() == "4"

    def test_from_raw_when_bool_then_text_not_number(self):
        answer = Answer.from_raw(False)

        assert answer.kind == AnswerKind.TEXT
        assert answer.value == "false"
        assert answer.is_empty is False

    def test_from_raw_when_whitespace_then_text(self):
        assert Answer.from_raw(" ").kind == AnswerKind.TEXT

    def test_from_raw_when_mapping_then_text(self):
        answer = Answer.from_raw({"a": 1})

        assert answer.kind == AnswerKind.TEXT
        assert answer.as_number() is None


class TestAnswerConversions:
    """Tests for as_text() / as_number()."""

    @pytest.mark.parametrize("raw,expected", [("12", 12.0), (" 1.5 ", 1.5), ("1e3", 1000.0)])
    def test_as_number_when_numeric_text_then_parsed(self, raw, expected):
        assert Answer.from_raw(raw).as_number() == expected

    @pytest.mark.parametrize("raw", ["twelve", "nan", ["1"]])
    def test_as_number_when_not_numeric_then_none(self, raw):
        assert Answer.from_raw(raw).as_number() is None

    def test_as_number_when_int_beyond_float_range_then_exact(self):
        answer = Answer.from_raw(10 ** 400, QuestionKind.NUMBER)

        assert answer.kind == AnswerKind.NUMBER
        assert answer.as_number() == 10 ** 400

    def test_as_text_when_options_then_joined(self):
        assert Answer.from_raw(["A", "B"]).as_text() == "A,B"


class TestResponseSet:
    """Tests for the ResponseSet view."""

    @pytest.fixture
    def question(self):
        return QuestionSchema(id="q1", number="1.1", text="Name", kind="text", required=True)

    def test_answer_when_category_missing_then_empty(self, question):
        responses = ResponseSet({})

        assert responses.answer("c1", question).is_empty

    def test_category_when_value_not_mapping_then_empty_mapping(self):
        responses = ResponseSet({"c1": ["q1"]})

        assert responses.category("c1") == {}
        assert responses.raw_category("c1") == ["q1"]

    def test_init_when_raw_not_mapping_then_empty_view(self, question):
        responses = ResponseSet("garbage")

        assert list(responses.category_ids()) == []
        assert responses.is_answered("c1", question) is False

    def test_count_answered_when_mixed_then_counts_non_empty(self):
        # Arrange
        questions = [QuestionSchema(id=f"q{i}", kind="text") for i in range(4)]
        responses = ResponseSet({"c1": {"q0": "a", "q1": "", "q2": None, "q3": ["x"]}})

        # Act
        answered, total = responses.count_answered("c1", questions)

        # Assert
        assert (answered, total) == (2, 4)

    def test_answer_when_question_has_no_id_then_empty(self):
        responses = ResponseSet({"c1": {None: "value"}})

        assert responses.answer("c1", QuestionSchema()).is_empty
