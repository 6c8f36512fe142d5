import copy
import sys
from pathlib import Path

import pytest

# Add the repository root to sys.path so the packages and main.py import
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())


def _question(qid, number, text, category, subcategory, kind="text", required=False, options=None):
    question = {
        "id": qid,
        "number": number,
        "text": text,
        "type": kind,
        "required": required,
        "category": category,
        "subcategory": subcategory,
    }
    if options is not None:
        question["options"] = options
    return question


def _category(cid, title, questions, subcategory_id=None):
    subcategory_id = subcategory_id or f"{cid}-sub"
    return {
        "id": cid,
        "title": title,
        "totalQuestions": len(questions),
        "subcategories": [
            {
                "id": subcategory_id,
                "title": f"{title} details",
                "questionCount": len(questions),
                "questions": questions,
            }
        ],
    }


def _schema(categories, kind="EXPLORATORY", version="1.0"):
    return {"version": version, "assessmentType": kind, "categories": categories}


# Common test fixtures
@pytest.fixture
def make_question():
    """Build a question document."""
    return _question


@pytest.fixture
def make_category():
    """Build a category document with one subcategory and consistent counts."""
    return _category


@pytest.fixture
def make_schema():
    """Wrap category documents in a questionnaire document."""
    return _schema


@pytest.fixture
def schema_doc():
    """
    Two categories, two required questions in total.

    c1 (Business): q1 required text, q2 select A/B, q3 checkbox X/Y/Z, q4 number
    c2 (Technical): q5 required textarea
    """
    business = [
        _question("q1", "1.1", "Company name", "c1", "c1-sub", required=True),
        _question("q2", "1.2", "Preferred plan", "c1", "c1-sub", kind="select", options=["A", "B"]),
        _question("q3", "1.3", "Regions", "c1", "c1-sub", kind="checkbox", options=["X", "Y", "Z"]),
        _question("q4", "1.4", "Team size", "c1", "c1-sub", kind="number"),
    ]
    technical = [
        _question("q5", "2.1", "Describe your infrastructure", "c2", "c2-sub",
                  kind="textarea", required=True),
    ]
    return _schema([
        _category("c1", "Business", business),
        _category("c2", "Technical", technical),
    ])


@pytest.fixture
def complete_responses():
    """Answers every required question of schema_doc."""
    return {
        "c1": {"q1": "Acme Ltd"},
        "c2": {"q5": "Kubernetes on two regions"},
    }


@pytest.fixture
def partial_responses(complete_responses):
    """Answers one of the two required questions of schema_doc."""
    responses = copy.deepcopy(complete_responses)
    del responses["c2"]
    return responses
