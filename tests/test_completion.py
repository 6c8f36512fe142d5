"""
Unit tests for questionnaire_validation.completion module.

Tests for required-question completion metrics, the submission gate and
the display-only progress table.
"""

import pandas as pd
import pytest

from questionnaire_validation import (
    ErrorCode,
    compute_completion,
    validate_completion,
    compute_progress,
    completion_table,
)
from questionnaire_validation.completion import PROGRESS_COLUMNS


class TestComputeCompletion:
    """Tests for compute_completion()."""

    def test_compute_completion_when_all_required_answered_then_100(self, schema_doc, complete_responses):
        status = compute_completion(complete_responses, schema_doc)

        assert status.overall_completion == 100
        assert dict(status.category_completions) == {"c1": 100.0, "c2": 100.0}
        assert status.required_questions_answered == 2
        assert status.total_required_questions == 2

    def test_compute_completion_when_category_has_no_required_questions_then_100(
        self, make_schema, make_category, make_question
    ):
        # Arrange
        schema = make_schema([
            make_category("c1", "Optional", [
                make_question("q1", "1.1", "Anything else?", "c1", "c1-sub"),
            ]),
        ])

        # Act
        status = compute_completion({}, schema)

        # Assert
        assert status.overall_completion == 100
        assert status.category_completions["c1"] == 100
        assert status.total_required_questions == 0

    def test_compute_completion_when_categories_differ_in_size_then_overall_is_global_ratio(
        self, make_schema, make_category, make_question
    ):
        """One of four required answered is 25%, not the 50% average of 100 and 0."""
        # Arrange
        schema = make_schema([
            make_category("small", "Small", [
                make_question("s1", "1.1", "One", "small", "small-sub", required=True),
            ]),
            make_category("large", "Large", [
                make_question(f"l{i}", f"2.{i}", "Many", "large", "large-sub", required=True)
                for i in range(3)
            ]),
        ])

        # Act
        status = compute_completion({"small": {"s1": "yes"}}, schema)

        # Assert
        assert status.category_completions["small"] == 100
        assert status.category_completions["large"] == 0
        assert status.overall_completion == 25

    @pytest.mark.parametrize("responses", [
        {},
        {"c1": {"q1": "a"}},
        {"c1": {"q1": "a"}, "c2": {"q5": "b"}},
        {"c1": "broken", "c2": {"q5": None}},
        {"c1": {"q1": [], "q2": "A", "q3": ["X"]}, "unknown": {"x": 1}},
    ])
    def test_compute_completion_when_any_responses_then_within_bounds(self, schema_doc, responses):
        status = compute_completion(responses, schema_doc)

        assert 0 <= status.overall_completion <= 100
        assert all(0 <= value <= 100 for value in status.category_completions.values())
        assert status.required_questions_answered <= status.total_required_questions
        if status.required_questions_answered == status.total_required_questions:
            assert status.overall_completion == 100

    def test_compute_completion_when_result_built_then_category_map_read_only(self, schema_doc):
        status = compute_completion({}, schema_doc)

        with pytest.raises(TypeError):
            status.category_completions["c1"] = 100


class TestValidateCompletion:
    """Tests for validate_completion()."""

    def test_validate_completion_when_both_required_answered_then_valid(self, schema_doc, complete_responses):
        result = validate_completion(complete_responses, schema_doc)

        assert result.is_valid is True
        assert result.errors == ()
        assert result.warnings == ()
        assert result.completion_status.overall_completion == 100

    def test_validate_completion_when_one_of_two_answered_then_single_blocking_error(
        self, schema_doc, partial_responses
    ):
        # Act
        result = validate_completion(partial_responses, schema_doc)

        # Assert
        assert result.is_valid is False
        assert [e.code for e in result.errors] == [ErrorCode.INCOMPLETE_REQUIRED_QUESTIONS]
        assert result.errors[0].message == (
            "1 required questions not answered: 2.1 - Describe your infrastructure"
        )
        assert result.completion_status.overall_completion == 50

    def test_validate_completion_when_category_incomplete_then_category_and_assessment_warnings(
        self, schema_doc, partial_responses
    ):
        result = validate_completion(partial_responses, schema_doc)

        assert [w.code for w in result.warnings] == [
            ErrorCode.INCOMPLETE_CATEGORY,
            ErrorCode.INCOMPLETE_ASSESSMENT,
        ]
        assert result.warnings[0].category == "c2"
        assert result.warnings[0].message == (
            'Category "Technical" is 0.0% complete (0/1 required questions answered)'
        )
        assert "50.0%" in result.warnings[1].message

    def test_validate_completion_when_more_than_three_missing_then_message_truncated(
        self, make_schema, make_category, make_question
    ):
        # Arrange
        schema = make_schema([make_category("c1", "Long", [
            make_question(f"q{i}", f"1.{i}", f"Question {i}", "c1", "c1-sub", required=True)
            for i in range(1, 6)
        ])])

        # Act
        result = validate_completion({}, schema)

        # Assert
        assert result.errors[0].message == (
            "5 required questions not answered: "
            "1.1 - Question 1, 1.2 - Question 2, 1.3 - Question 3..."
        )

    def test_validate_completion_when_no_required_questions_then_valid(
        self, make_schema, make_category, make_question
    ):
        schema = make_schema([make_category("c1", "Optional", [
            make_question("q1", "1.1", "Notes", "c1", "c1-sub"),
        ])])

        result = validate_completion({}, schema)

        assert result.is_valid is True
        assert result.completion_status.overall_completion == 100

    def test_validate_completion_when_format_errors_present_then_not_reported(
        self, schema_doc, complete_responses
    ):
        """Completion only gates on required answers; formats belong to response validation."""
        complete_responses["c1"]["q2"] = "C"

        result = validate_completion(complete_responses, schema_doc)

        assert result.is_valid is True

    def test_validate_completion_when_called_twice_then_identical_results(self, schema_doc, partial_responses):
        first = validate_completion(partial_responses, schema_doc)
        second = validate_completion(partial_responses, schema_doc)

        assert first.to_dict() == second.to_dict()


class TestProgress:
    """Tests for the display-only progress counters."""

    def test_compute_progress_when_optional_answered_then_progress_differs_from_completion(
        self, schema_doc
    ):
        # Arrange
        responses = {"c1": {"q2": "A", "q3": ["X"]}}

        # Act
        business, technical = compute_progress(responses, schema_doc)

        # Assert
        assert business.completion == 0
        assert business.progress == 50
        assert business.status == "partial"
        assert technical.status == "not_started"

    def test_compute_progress_when_required_answered_then_completed(self, schema_doc, complete_responses):
        business, technical = compute_progress(complete_responses, schema_doc)

        assert business.status == "completed"
        assert business.progress == 25
        assert technical.status == "completed"
        assert technical.progress == 100

    def test_completion_table_when_built_then_one_row_per_category_in_order(
        self, schema_doc, partial_responses
    ):
        # Act
        df = completion_table(partial_responses, schema_doc)

        # Assert
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == PROGRESS_COLUMNS
        assert df["categoryId"].tolist() == ["c1", "c2"]
        assert df["status"].tolist() == ["completed", "not_started"]
        assert df["requiredTotal"].sum() == 2

    def test_completion_table_when_schema_has_no_categories_then_empty_frame(self):
        df = completion_table({}, {"version": "1.0"})

        assert df.empty
        assert list(df.columns) == PROGRESS_COLUMNS
