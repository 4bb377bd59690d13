from career_advise import ORGANIZATION_ENTITY, QUESTION_TYPE_ENTITY, CareerAdvise
from dialogs.state import Intent, Organization

from conftest import advise


def test_top_intent_defaults_to_none_with_min_score():
    result = advise("hmm", {"Greeting": 0.3, "Finish": 0.5})
    assert result.top_intent(0.8) == (Intent.NONE, 0.8)
    assert CareerAdvise(text="").top_intent() == (Intent.NONE, 0.0)


def test_top_intent_requires_strictly_greater_score():
    result = advise("bye", {"Finish": 0.8})
    assert result.top_intent(0.8) == (Intent.NONE, 0.8)
    assert result.top_intent(0.79) == (Intent.FINISH, 0.8)


def test_top_intent_picks_highest_score():
    result = advise("hello", {"None": 0.1, "Greeting": 0.92, "CareerQuestionType": 0.4})
    assert result.top_intent() == (Intent.GREETING, 0.92)


def test_unknown_intents_are_ignored():
    result = CareerAdvise.from_prediction("x", {"intents": {"Weather": {"score": 0.99}, "Greeting": {"score": 0.2}}})
    assert result.top_intent() == (Intent.GREETING, 0.2)


def test_organization_single_value_is_case_insensitive():
    assert advise("q", {}, organization="kpmg").organization == Organization.KPMG
    assert advise("q", {}, organization="DELOITTE").organization == Organization.DELOITTE


def test_organization_falls_back_to_not_supported():
    assert advise("q", {}).organization == Organization.NOT_SUPPORTED
    assert advise("q", {}, organization="Google").organization == Organization.NOT_SUPPORTED

    two_values = CareerAdvise(text="q", entities={ORGANIZATION_ENTITY: [["EY", "PWC"]]})
    assert two_values.organization == Organization.NOT_SUPPORTED

    malformed = CareerAdvise(text="q", entities={ORGANIZATION_ENTITY: "KPMG"})
    assert malformed.organization == Organization.NOT_SUPPORTED

    empty = CareerAdvise(text="q", entities={ORGANIZATION_ENTITY: []})
    assert empty.organization == Organization.NOT_SUPPORTED


def test_question_type_extraction():
    assert advise("q", {}, question_type="interviews").question_type == "interviews"
    assert CareerAdvise(text="q").question_type is None
    assert CareerAdvise(text="q", entities={QUESTION_TYPE_ENTITY: [["offer", "starting"]]}).question_type is None
    assert CareerAdvise(text="q", entities={QUESTION_TYPE_ENTITY: [None]}).question_type is None


def test_classification_bundles_derived_fields():
    result = advise("EY interviews", {"CareerQuestionType": 0.9}, organization="EY", question_type="interviews")
    classification = result.classification(0.5)
    assert classification.intent == Intent.CAREER_QUESTION_TYPE
    assert classification.score == 0.9
    assert classification.organization == Organization.EY
    assert classification.question_type == "interviews"
