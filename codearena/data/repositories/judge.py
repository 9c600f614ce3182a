import time
from typing import Any, Dict, List, Optional

import requests

from codearena.config import Config, logger
from codearena.errors import BadRequestException, ExternalServiceException

judge_logger = logger.getChild("judge")

LANGUAGE_IDS: Dict[str, int] = {
    "c++": 54,
    "java": 62,
    "javascript": 63,
    "js": 63,
    "python": 71,
}

# Judge0 status ids still waiting for a worker
PENDING_STATUS_IDS = (1, 2)

RESULT_FIELDS = (
    "token,stdin,expected_output,stdout,stderr,compile_output,message,"
    "status,time,memory"
)


def normalize_language(language: str) -> str:
    normalized = language.strip().lower()
    return "c++" if normalized == "cpp" else normalized


def get_language_id(language: str) -> int:
    language_id = LANGUAGE_IDS.get(normalize_language(language))
    if language_id is None:
        raise BadRequestException(detail=f"Unsupported language: {language}")
    return language_id


class JudgeClient:
    """Blocking Judge0 client. Callers in async code go through the threadpool."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        api_host: str = "",
        timeout: float = 30,
        poll_interval: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["X-RapidAPI-Key"] = api_key
        if api_host:
            self.headers["X-RapidAPI-Host"] = api_host
        self.timeout = timeout
        self.poll_interval = poll_interval

    def submit_batch(self, submissions: List[Dict[str, Any]]) -> List[str]:
        try:
            response = requests.post(
                f"{self.base_url}/submissions/batch",
                headers=self.headers,
                params={"base64_encoded": "false"},
                json={"submissions": submissions},
                timeout=10,
            )
            response.raise_for_status()
            tokens = [item.get("token") for item in response.json()]
        except (requests.RequestException, ValueError) as e:
            judge_logger.error(f"Error submitting batch to judge: {str(e)}")
            raise ExternalServiceException(detail="Judge service unavailable")

        if not tokens or any(token is None for token in tokens):
            judge_logger.error(f"Judge rejected batch submission: {tokens}")
            raise ExternalServiceException(detail="Judge rejected the submission")
        return tokens

    def get_batch(self, tokens: List[str]) -> List[Dict[str, Any]]:
        try:
            response = requests.get(
                f"{self.base_url}/submissions/batch",
                headers=self.headers,
                params={
                    "tokens": ",".join(tokens),
                    "base64_encoded": "false",
                    "fields": RESULT_FIELDS,
                },
                timeout=10,
            )
            response.raise_for_status()
            return response.json().get("submissions", [])
        except (requests.RequestException, ValueError) as e:
            judge_logger.error(f"Error fetching judge results: {str(e)}")
            raise ExternalServiceException(detail="Judge service unavailable")

    def wait_for_results(self, tokens: List[str]) -> List[Dict[str, Any]]:
        """Poll until no result is queued or processing, or the timeout passes."""
        deadline = time.monotonic() + self.timeout
        while True:
            results = self.get_batch(tokens)
            if len(results) == len(tokens) and not any(
                _status_id(result) in PENDING_STATUS_IDS for result in results
            ):
                return results
            if time.monotonic() >= deadline:
                judge_logger.warning(
                    f"Judge results not ready after {self.timeout}s for {len(tokens)} tokens"
                )
                raise ExternalServiceException(detail="Judge timed out")
            time.sleep(self.poll_interval)

    def run(
        self, source_code: str, language_id: int, cases: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Run the code once per case and return the judge results in case order."""
        submissions = [
            {
                "source_code": source_code,
                "language_id": language_id,
                "stdin": case.get("input", ""),
                "expected_output": case.get("output", ""),
            }
            for case in cases
        ]
        judge_logger.info(
            f"Submitting {len(submissions)} cases to judge (language {language_id})"
        )
        tokens = self.submit_batch(submissions)
        return self.wait_for_results(tokens)


def _status_id(result: Dict[str, Any]) -> Optional[int]:
    status = result.get("status") or {}
    return status.get("id")


judge_client = JudgeClient(
    base_url=Config.JUDGE0_API_URL,
    api_key=Config.JUDGE0_API_KEY,
    api_host=Config.JUDGE0_API_HOST,
    timeout=Config.JUDGE_TIMEOUT,
    poll_interval=Config.JUDGE_POLL_INTERVAL,
)


def get_judge_client() -> JudgeClient:
    return judge_client
