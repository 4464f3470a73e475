"""Legal-tools suggestions against a fake Bedrock client."""

import json

import pytest
from botocore.exceptions import ClientError

from courtbell.services.ai_service import LegalToolsService
from courtbell.utils.exceptions import AIServiceError
from conftest import FakeBedrockClient


def test_suggest_parses_bare_json(bedrock):
    service = LegalToolsService(bedrock_client=bedrock, model_id="test-model")

    suggestions = service.suggest("Tenant refuses to vacate after notice period")

    assert suggestions.suggested_statutes == ["Transfer of Property Act, 1882 s.106"]
    assert suggestions.suggested_templates == ["Eviction notice"]
    [call] = bedrock.calls
    assert call["modelId"] == "test-model"
    assert call["body"]["anthropic_version"] == "bedrock-2023-05-31"
    assert "Tenant refuses to vacate" in call["body"]["messages"][0]["content"]


def test_suggest_parses_fenced_json_with_snake_case_keys():
    reply = "Here you go:\n```json\n" + json.dumps({
        "suggested_statutes": ["Negotiable Instruments Act, 1881 s.138"],
        "suggested_case_law": [],
        "suggested_templates": ["Complaint under s.138", "  "],
    }) + "\n```"
    service = LegalToolsService(bedrock_client=FakeBedrockClient(reply=reply))

    suggestions = service.suggest("Cheque bounced")

    assert suggestions.suggested_statutes == ["Negotiable Instruments Act, 1881 s.138"]
    assert suggestions.suggested_case_law == []
    assert suggestions.suggested_templates == ["Complaint under s.138"]


def test_serialized_with_camel_case_keys(bedrock):
    suggestions = LegalToolsService(bedrock_client=bedrock).suggest("Eviction")

    assert set(suggestions.model_dump(by_alias=True)) == {
        "suggestedStatutes", "suggestedCaseLaw", "suggestedTemplates",
    }


def test_empty_details_are_rejected_before_calling_bedrock(bedrock):
    service = LegalToolsService(bedrock_client=bedrock)

    with pytest.raises(ValueError):
        service.suggest("   ")
    assert bedrock.calls == []


def test_bedrock_failure_raises_service_error():
    error = ClientError({"Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"}}, "InvokeModel")
    service = LegalToolsService(bedrock_client=FakeBedrockClient(error=error))

    with pytest.raises(AIServiceError) as excinfo:
        service.suggest("Eviction")

    assert excinfo.value.status_code == 503


def test_reply_without_json_raises_service_error():
    service = LegalToolsService(bedrock_client=FakeBedrockClient(reply="I cannot help with that."))

    with pytest.raises(AIServiceError):
        service.suggest("Eviction")
