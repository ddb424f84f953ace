import logging
import threading

import requests

from errors import SubmissionError, SubmissionInProgress
from normalizer import normalize_image

logger = logging.getLogger(__name__)


class AnalysisSubmitter:
    """정규화된 스크린샷을 /api/analyze 로 보내고 reportId를 받는다.

    인스턴스당 동시에 1개 요청만 허용한다. 진행 중에 다시 호출하면
    SubmissionInProgress 를 던진다 (이전 요청은 취소하지 않음).
    """

    def __init__(self, base_url: str, session=None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self._in_flight = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._in_flight.locked()

    def report_url(self, report_id: str) -> str:
        return f"{self.base_url}/results/{report_id}"

    def submit(self, image_data_url: str) -> str:
        if not self._in_flight.acquire(blocking=False):
            raise SubmissionInProgress("An analysis is already running")
        try:
            return self._post(image_data_url)
        finally:
            self._in_flight.release()

    def submit_file(self, source) -> str:
        return self.submit(normalize_image(source))

    def _post(self, image_data_url: str) -> str:
        try:
            resp = self.session.post(
                f"{self.base_url}/api/analyze",
                json={"imageDataUrl": image_data_url},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"분석 요청 전송 실패: {e}")
            raise SubmissionError(str(e) or "Network error") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not resp.ok:
            raise SubmissionError(data.get("error") or "Analysis failed")

        report_id = data.get("reportId")
        if not report_id:
            raise SubmissionError("Analysis failed")
        return report_id
