import pytest

from config import BotSettings
from dialogs.state import Intent, Organization
from knowledge_base import QnAKnowledgeBase, QueryResult, create_kpmg_knowledge_base
from recognizer import CareerAdviseRecognizer, RecognizerNotConfiguredError, normalize_host


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({"method": "GET", "url": url, "params": params, "timeout": timeout})
        return FakeResponse(self.payload)

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"method": "POST", "url": url, "json": json, "headers": headers, "timeout": timeout})
        return FakeResponse(self.payload)


def test_normalize_host_adds_scheme_once():
    assert normalize_host("westus.api.cognitive.microsoft.com") == "https://westus.api.cognitive.microsoft.com"
    assert normalize_host("HTTPS://westus.example.com/") == "HTTPS://westus.example.com"


@pytest.mark.parametrize(
    "app_id,api_key,host",
    [("", "key", "host"), ("app", "", "host"), ("app", "key", "")],
)
def test_recognizer_requires_all_credentials(app_id, api_key, host):
    recognizer = CareerAdviseRecognizer(app_id, api_key, host)
    assert recognizer.is_configured is False
    with pytest.raises(RecognizerNotConfiguredError):
        recognizer.recognize("hello")


def test_recognizer_calls_prediction_endpoint():
    session = FakeSession(
        {
            "query": "Interviews at kpmg",
            "prediction": {
                "topIntent": "CareerQuestionType",
                "intents": {
                    "CareerQuestionType": {"score": 0.97},
                    "Greeting": {"score": 0.01},
                    "Cancel": {"score": 0.5},
                },
                "entities": {
                    "CareerQuestion_Organization": [["KPMG"]],
                    "CareerQuestion_Type": [["interviews"]],
                },
            },
        }
    )
    recognizer = CareerAdviseRecognizer("app-1", "secret", "westus.api.cognitive.microsoft.com", session=session)

    result = recognizer.classify("Interviews at kpmg")

    request = session.requests[0]
    assert request["url"] == (
        "https://westus.api.cognitive.microsoft.com/luis/prediction/v3.0/apps/app-1/slots/production/predict"
    )
    assert request["params"]["subscription-key"] == "secret"
    assert request["params"]["query"] == "Interviews at kpmg"
    assert result.intent == Intent.CAREER_QUESTION_TYPE
    assert result.organization == Organization.KPMG
    assert result.question_type == "interviews"


def test_recognizer_from_settings():
    settings = BotSettings(luis_app_id="a", luis_api_key="k", luis_api_host_name="h.example.com", luis_slot="staging")
    recognizer = CareerAdviseRecognizer.from_settings(settings)
    assert recognizer.is_configured
    assert recognizer.endpoint == "https://h.example.com"
    assert recognizer.slot == "staging"


def test_knowledge_base_attaches_category_filter():
    session = FakeSession({"answers": []})
    kb = QnAKnowledgeBase("kb-1", "endpoint-key", "kpmg-qna.azurewebsites.net/qnamaker", session=session)

    kb.query("How long is the interview?", top=3, score_threshold=0.5, category="interviews")

    request = session.requests[0]
    assert request["url"] == "https://kpmg-qna.azurewebsites.net/qnamaker/knowledgebases/kb-1/generateAnswer"
    assert request["headers"] == {"Authorization": "EndpointKey endpoint-key"}
    assert request["json"] == {
        "question": "How long is the interview?",
        "top": 3,
        "scoreThreshold": 50.0,
        "strictFilters": [{"name": "type", "value": "interviews"}],
    }


def test_knowledge_base_without_category_sends_no_filter():
    session = FakeSession({"answers": []})
    kb = QnAKnowledgeBase("kb-1", "endpoint-key", "https://host", session=session)
    kb.query("anything")
    assert "strictFilters" not in session.requests[0]["json"]


def test_knowledge_base_orders_and_thresholds_answers():
    session = FakeSession(
        {
            "answers": [
                {"answer": "Second", "score": 61.0},
                {"answer": "No good match found in KB.", "score": 0.0},
                {"answer": "First", "score": 88.5},
                {"answer": "Weak", "score": 20.0},
            ]
        }
    )
    kb = QnAKnowledgeBase("kb-1", "endpoint-key", "https://host", session=session)

    results = kb.query("question")

    assert [r.answer for r in results] == ["First", "Second"]
    assert results[0] == QueryResult("First", 0.885)


def test_knowledge_base_requires_credentials():
    with pytest.raises(ValueError):
        QnAKnowledgeBase("", "key", "host")


def test_factory_returns_none_when_unconfigured():
    assert create_kpmg_knowledge_base(BotSettings()) is None
    assert create_kpmg_knowledge_base(BotSettings(kpmg_qna_knowledgebase_id="kb", kpmg_qna_endpoint_key="k")) is None

    kb = create_kpmg_knowledge_base(
        BotSettings(
            kpmg_qna_knowledgebase_id="kb",
            kpmg_qna_endpoint_key="k",
            kpmg_qna_endpoint_host_name="host.example.com",
        )
    )
    assert isinstance(kb, QnAKnowledgeBase)
    assert kb.host == "https://host.example.com"


def test_knowledge_base_tolerates_null_answers():
    kb = QnAKnowledgeBase("kb-1", "endpoint-key", "https://host", session=FakeSession({"answers": None}))
    assert kb.query("question") == []

    kb = QnAKnowledgeBase("kb-1", "endpoint-key", "https://host", session=FakeSession(["unexpected"]))
    assert kb.query("question") == []


def test_recognizer_tolerates_non_object_body():
    recognizer = CareerAdviseRecognizer("app-1", "secret", "host", session=FakeSession(None))

    result = recognizer.recognize("hello")

    assert result.text == "hello"
    assert result.top_intent() == (Intent.NONE, 0.0)
    assert result.organization == Organization.NOT_SUPPORTED
