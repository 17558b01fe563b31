"""
Tests for the operator assistant and its keyword fallback.
"""

import json

import httpx
import pytest

from customs_tracker.services.assistant_service import (
    AssistantService,
    ERROR_HELP_ANSWER,
    EXPORT_PROCESS_ANSWER,
    GENERAL_ANSWER,
    SCAN_HELP_ANSWER,
    match_keywords
)

NLP_URL = "https://nlp.example.com/query"


@pytest.mark.parametrize("query, expected", [
    ("¿Cuál es el proceso de exportación?", EXPORT_PROCESS_ANSWER),
    ("Tengo un problema con el paso 2", ERROR_HELP_ANSWER),
    ("ERROR al guardar", ERROR_HELP_ANSWER),
    ("No puedo escanear", SCAN_HELP_ANSWER),
    ("El código está dañado", SCAN_HELP_ANSWER),
    ("Hola", GENERAL_ANSWER),
])
def test_match_keywords(query, expected):
    assert match_keywords(query) is expected


@pytest.mark.asyncio
async def test_keyword_answer_is_logged(store):
    assistant = AssistantService(store)

    answer = await assistant.answer("operator-1", "no puedo escanear")

    assert answer.intent == "scan_help"
    logs = store.rows("assistant_logs")
    assert len(logs) == 1
    assert logs[0].detected_intent == "scan_help"
    assert logs[0].confidence == 0.95


@pytest.mark.asyncio
async def test_remote_answer(store):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "intent": "process_inquiry",
            "confidence": 0.8,
            "answer": "Revise la factura",
            "stepId": "step-2"
        })

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    assistant = AssistantService(store, service_url=NLP_URL, api_key="nlp-key", http_client=client)

    answer = await assistant.answer("operator-1", "¿qué reviso?", context="step-2")

    assert seen["auth"] == "Bearer nlp-key"
    assert seen["body"] == {"query": "¿qué reviso?", "context": "step-2"}
    assert answer.step_id == "step-2"
    assert answer.to_dict()["stepId"] == "step-2"
    await client.aclose()


@pytest.mark.asyncio
async def test_remote_failure_falls_back_to_keywords(store):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    assistant = AssistantService(store, service_url=NLP_URL, api_key="nlp-key", http_client=client)

    answer = await assistant.answer("operator-1", "hay un error")

    assert answer is ERROR_HELP_ANSWER
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    ["scan_help", 0.9],
    "scan_help",
    None,
])
async def test_non_object_reply_falls_back_to_keywords(store, body):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)))
    assistant = AssistantService(store, service_url=NLP_URL, api_key="nlp-key", http_client=client)

    answer = await assistant.answer("operator-1", "hay un error")

    assert answer is ERROR_HELP_ANSWER
    await client.aclose()


@pytest.mark.asyncio
async def test_log_failure_does_not_fail_answer(store):
    store.fail_on.add("insert_assistant_log")

    answer = await AssistantService(store).answer("operator-1", "hola")

    assert answer is GENERAL_ANSWER
