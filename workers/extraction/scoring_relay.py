"""
Scoring Relay.

Forwards the extracted feature vector to the external prediction service.
Best effort: failures are logged and never reach the caller.
"""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Dict, Optional

import requests

from backend.core.config import get_settings

logger = logging.getLogger(__name__)


class ScoringRelay:
    """
    Fire-and-forget POST of {"features": [...]} to the scoring service.

    Usage:
        relay = ScoringRelay(url="http://scoring/predict")
        relay.dispatch({"features": [13.5, 0, ...]})
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        session: Optional[requests.Session] = None,
        executor: Optional[Executor] = None,
    ):
        scoring_settings = get_settings().scoring
        self.url = url or scoring_settings.url
        self.timeout = timeout or scoring_settings.timeout
        self.enabled = scoring_settings.enabled if enabled is None else enabled
        self.session = session or requests.Session()
        self._executor = executor

    @property
    def executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="scoring-relay")
        return self._executor

    def send(self, payload: Dict[str, Any]) -> bool:
        """
        POST the payload synchronously.

        Returns:
            True if the service answered 2xx with a JSON body, False otherwise
        """
        if not self.enabled:
            logger.debug("Scoring relay disabled, not sending")
            return False

        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.HTTPError as e:
            logger.warning(f"Scoring service returned an error: {e}")
            return False
        except requests.exceptions.JSONDecodeError as e:
            logger.warning(f"Scoring service returned malformed JSON: {e}")
            return False
        except requests.exceptions.RequestException as e:
            logger.warning(f"Scoring service unreachable at {self.url}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected scoring relay failure: {e}", exc_info=True)
            return False

        logger.info(f"Scoring service response: {body}")
        return True

    def dispatch(self, payload: Dict[str, Any]) -> Optional[Future]:
        """Send in the background. The returned future never raises."""
        if not self.enabled:
            return None
        try:
            return self.executor.submit(self.send, payload)
        except RuntimeError as e:
            # Executor already shut down (process exiting)
            logger.warning(f"Could not dispatch scoring request: {e}")
            return None

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
