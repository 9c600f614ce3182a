from unittest.mock import MagicMock

import pytest
import requests

from codearena.business.services.submission import summarize_results
from codearena.data.repositories import judge as judge_module
from codearena.data.repositories.judge import JudgeClient, get_language_id, normalize_language
from codearena.data.schemas import SubmissionStatus
from codearena.errors import BadRequestException, ExternalServiceException
from tests.conftest import judge_result

CASES = [{"input": "1", "output": "1"}, {"input": "2", "output": "2"}, {"input": "3", "output": "3"}]


def json_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


# Test verdict aggregation
def test_summarize_all_accepted():
    results = [judge_result(case) for case in CASES]
    results[1]["time"] = "0.125"
    results[2]["memory"] = 4096

    verdict = summarize_results(results)

    assert verdict.status == SubmissionStatus.ACCEPTED
    assert verdict.accepted
    assert verdict.passed == verdict.total == 3
    assert verdict.runtime == 0.145
    assert verdict.memory == 4096
    assert verdict.error_message is None


def test_summarize_first_failure_decides_status():
    results = [judge_result(CASES[0], 3), judge_result(CASES[1], 4), judge_result(CASES[2], 11)]

    verdict = summarize_results(results)

    assert verdict.status == SubmissionStatus.WRONG
    assert verdict.passed == 1
    assert verdict.total == 3
    assert verdict.error_message == "Wrong Answer"
    assert len(verdict.results) == 3


def test_summarize_runtime_error_prefers_stderr():
    verdict = summarize_results([judge_result(CASES[0], 11)])

    assert verdict.status == SubmissionStatus.ERROR
    assert verdict.error_message == "Traceback: boom"


def test_summarize_compile_error_uses_compiler_output():
    verdict = summarize_results([judge_result(CASES[0], 6)])

    assert verdict.status == SubmissionStatus.ERROR
    assert verdict.error_message == "error: expected ';'"


def test_summarize_stop_at_first_failure():
    results = [judge_result(CASES[0], 4), judge_result(CASES[1], 3), judge_result(CASES[2], 3)]

    verdict = summarize_results(results, stop_at_first_failure=True)

    assert verdict.passed == 0
    assert len(verdict.results) == 1
    assert verdict.total == 3


def test_summarize_missing_time_and_memory():
    result = judge_result(CASES[0])
    result["time"] = None
    result["memory"] = None

    verdict = summarize_results([result])

    assert verdict.runtime == 0.0
    assert verdict.memory == 0


# Test language mapping
@pytest.mark.parametrize(
    "language, language_id",
    [("cpp", 54), ("C++", 54), ("java", 62), ("javascript", 63), ("js", 63), (" Python ", 71)],
)
def test_language_ids(language, language_id):
    assert get_language_id(language) == language_id


def test_unsupported_language():
    with pytest.raises(BadRequestException) as exc_info:
        get_language_id("rust")

    assert exc_info.value.detail == "Unsupported language: rust"


def test_normalize_language():
    assert normalize_language("CPP") == "c++"
    assert normalize_language("Java") == "java"


# Test the judge client
def test_judge_run_polls_until_done(monkeypatch):
    post = MagicMock(return_value=json_response([{"token": "a"}, {"token": "b"}]))
    pending = {"submissions": [{"status": {"id": 1}}, {"status": {"id": 2}}]}
    done = {"submissions": [judge_result(CASES[0]), judge_result(CASES[1], 4)]}
    get = MagicMock(side_effect=[json_response(pending), json_response(done)])
    sleep = MagicMock()
    monkeypatch.setattr(judge_module.requests, "post", post)
    monkeypatch.setattr(judge_module.requests, "get", get)
    monkeypatch.setattr(judge_module.time, "sleep", sleep)

    client = JudgeClient("https://judge.test/", api_key="key", api_host="judge.test", poll_interval=0.5)
    results = client.run("print(input())", 71, CASES[:2])

    assert [r["status"]["id"] for r in results] == [3, 4]
    submissions = post.call_args.kwargs["json"]["submissions"]
    assert submissions[0] == {
        "source_code": "print(input())",
        "language_id": 71,
        "stdin": "1",
        "expected_output": "1",
    }
    assert post.call_args.args[0] == "https://judge.test/submissions/batch"
    assert post.call_args.kwargs["headers"]["X-RapidAPI-Key"] == "key"
    assert get.call_args.kwargs["params"]["tokens"] == "a,b"
    assert get.call_count == 2
    sleep.assert_called_once_with(0.5)


def test_judge_times_out(monkeypatch):
    monkeypatch.setattr(
        judge_module.requests, "post", MagicMock(return_value=json_response([{"token": "a"}]))
    )
    monkeypatch.setattr(
        judge_module.requests,
        "get",
        MagicMock(return_value=json_response({"submissions": [{"status": {"id": 2}}]})),
    )

    client = JudgeClient("https://judge.test", timeout=0, poll_interval=0)

    with pytest.raises(ExternalServiceException) as exc_info:
        client.run("print(1)", 71, CASES[:1])
    assert exc_info.value.detail == "Judge timed out"


def test_judge_unreachable(monkeypatch):
    monkeypatch.setattr(
        judge_module.requests,
        "post",
        MagicMock(side_effect=requests.ConnectionError("connection refused")),
    )

    client = JudgeClient("https://judge.test")

    with pytest.raises(ExternalServiceException) as exc_info:
        client.run("print(1)", 71, CASES[:1])
    assert exc_info.value.detail == "Judge service unavailable"


def test_judge_rejects_batch(monkeypatch):
    monkeypatch.setattr(
        judge_module.requests,
        "post",
        MagicMock(return_value=json_response([{"source_code": ["can't be blank"]}])),
    )

    client = JudgeClient("https://judge.test")

    with pytest.raises(ExternalServiceException):
        client.submit_batch([{"source_code": ""}])
