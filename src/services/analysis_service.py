# coding: utf-8
"""
Analysis Service - quota-gated calls to the external analysis provider

Flow for one analysis:
1. Quota check (QuotaExceededError, the provider is never called)
2. Credential check (MissingCredentialError)
3. Provider call with timeout and retries on transient failures
4. Result normalised into a HistoryEntry
5. Ledger updated: usage recorded, history appended for VIP

Provider failures are classified into AnalysisError subclasses and never
touch ledger state.
"""
import asyncio
import logging  # Needed for tenacity before_sleep_log level constants
from typing import Any, Dict, Optional, Protocol

from loguru import logger
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config.config import (
    ANALYSIS_API_KEY,
    ANALYSIS_RETRY_ATTEMPTS,
    ANALYSIS_RETRY_WAIT_SECONDS,
    ANALYSIS_TIMEOUT_SECONDS,
)
from src.core.exceptions import (
    AnalysisError,
    EmptyResultError,
    InvalidCredentialError,
    MissingCredentialError,
    NetworkError,
    RateLimitedError,
    ServiceUnavailableError,
    UnknownAnalysisError,
)
from src.ledger.context import LedgerContext
from src.ledger.models import HistoryEntry
from src.utils.dates import now_ms

# Transient failures worth another attempt
RETRYABLE_ERRORS = (RateLimitedError, NetworkError, ServiceUnavailableError)


class AnalysisProvider(Protocol):
    """External analysis provider contract"""

    async def analyze(self, pair: str, timeframe: str, image: Optional[str] = None) -> Dict[str, Any]:
        """
        Returns:
            {signal, entry_price, stop_loss, take_profit[3], risk_reward_ratio,
             confidence, confluences[], reasoning, indicators}
        """
        ...


def classify_provider_error(error: BaseException) -> AnalysisError:
    """
    Map a raw provider exception to the analysis error taxonomy

    Uses the HTTP-like `status` attribute when present, then the message.
    """
    if isinstance(error, AnalysisError):
        return error

    message = str(error).lower()
    status = getattr(error, "status", None) or getattr(error, "status_code", None)

    if "api key" in message or status in (400, 401, 403):
        return InvalidCredentialError(str(error), status=status)
    if status == 429 or "quota" in message or "limit" in message:
        return RateLimitedError(str(error), status=status)
    if isinstance(status, int) and status >= 500:
        return ServiceUnavailableError(str(error), status=status)
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return NetworkError(str(error) or "timeout", status=status)
    return UnknownAnalysisError(str(error), status=status)


class AnalysisService:
    """
    Runs analyses for the current caller of a LedgerContext

    Usage:
        >>> service = AnalysisService(ledger, provider)
        >>> try:
        ...     entry = await service.analyze("EUR/USD", "H1")
        ... except QuotaExceededError as e:
        ...     redirect("login" if e.requires_login else "upgrade")
        ... except AnalysisError as e:
        ...     toast(e.user_message)
    """

    def __init__(
        self,
        ledger: LedgerContext,
        provider: AnalysisProvider,
        api_key: str = ANALYSIS_API_KEY,
        timeout: float = ANALYSIS_TIMEOUT_SECONDS,
        retry_attempts: int = ANALYSIS_RETRY_ATTEMPTS,
        retry_wait: float = ANALYSIS_RETRY_WAIT_SECONDS,
    ):
        self.ledger = ledger
        self.provider = provider
        self.api_key = api_key
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait = retry_wait

    async def _call_provider(self, pair: str, timeframe: str, image: Optional[str]) -> Dict[str, Any]:
        try:
            return await asyncio.wait_for(
                self.provider.analyze(pair, timeframe, image),
                timeout=self.timeout,
            )
        except Exception as e:
            raise classify_provider_error(e) from e

    async def _call_with_retries(self, pair: str, timeframe: str, image: Optional[str]) -> Dict[str, Any]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, min=self.retry_wait, max=self.retry_wait * 5),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._call_provider(pair, timeframe, image)

    @staticmethod
    def build_entry(
        pair: str,
        timeframe: str,
        data: Dict[str, Any],
        image: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> HistoryEntry:
        """
        Normalise a provider result into a HistoryEntry

        Missing optional fields get neutral defaults (take profits 0,
        risk:reward 1:2, neutral indicators).

        Raises:
            EmptyResultError: If the provider returned nothing
            UnknownAnalysisError: If required fields are missing or invalid
        """
        if not data:
            raise EmptyResultError()

        payload = {k: v for k, v in data.items() if v is not None}
        payload.update(
            pair=pair,
            timeframe=timeframe,
            timestamp=timestamp if timestamp is not None else now_ms(),
        )
        if image:
            payload.setdefault("image_url", image)

        try:
            return HistoryEntry.model_validate(payload)
        except ValidationError as e:
            raise UnknownAnalysisError(f"Malformed analysis result: {e.error_count()} errors") from e

    async def analyze(self, pair: str, timeframe: str, image: Optional[str] = None) -> HistoryEntry:
        """
        Run one analysis and account for it in the ledger

        Raises:
            QuotaExceededError: Daily quota used (provider not called)
            AnalysisError: Provider failure (ledger untouched)
        """
        self.ledger.ensure_quota()

        if not self.api_key:
            raise MissingCredentialError()

        try:
            data = await self._call_with_retries(pair, timeframe, image)
            entry = self.build_entry(pair, timeframe, data, image=image)
        except AnalysisError as e:
            logger.warning(f"Analysis failed for {pair} {timeframe}: {e.code} ({e})")
            raise

        self.ledger.record_analysis(entry)
        logger.info(f"Analysis completed: {pair} {timeframe} {entry.signal.value} ({entry.confidence}%)")
        return entry
