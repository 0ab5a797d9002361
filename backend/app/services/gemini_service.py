"""
Kavin's Catalog Backend — Google Gemini Service Implementation
================================================================

What:  Concrete LLM service writing catalog descriptions with Google Gemini.
How:   Builds a Portuguese copywriting prompt from the product details and
       sends it to the configured Gemini model, with retry and circuit breaker.
Who:   Instantiated once at import time; used by ProductFormService.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient failures
    2. Circuit breaker so a Gemini outage fails fast instead of piling up requests
    3. Per-call request timeout
"""

import logging
import time
import uuid
from typing import Optional

import google.generativeai as genai
from starlette.concurrency import run_in_threadpool
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from app.config import settings
from app.exceptions import LLMServiceError, CircuitBreakerOpenError
from app.schemas.product import DescriptionRequest
from app.services.llm_base import LLMService

logger = logging.getLogger(__name__)

UNAVAILABLE_DESCRIPTION = "Descrição indisponível no momento."


def reply_text(response) -> str:
    """
    Text of the first candidate, or "" when the model returned nothing.

    `response.text` raises ValueError for a reply without parts (empty or
    blocked by the safety filters), so the parts are read directly.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(part.text for part in parts if getattr(part, "text", "")).strip()


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker around the Gemini API.

    State Machine:
        CLOSED
            → On failure: increment failure_count
            → When failure_count >= threshold: OPEN
        OPEN
            → Every call raises CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: HALF_OPEN
        HALF_OPEN
            → One request goes through
            → Success: CLOSED; failure: OPEN again

    Not thread-safe: the counters live in one uvicorn worker process.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        True when a call may proceed.

        Raises:
            CircuitBreakerOpenError if the circuit is OPEN and still recovering.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

class GeminiService(LLMService):
    """
    Gemini-backed product copywriter.

    Error Handling Chain:
        API call fails → tenacity retries (N attempts with backoff)
        → All retries fail → circuit breaker failure + LLMServiceError
        → Threshold reached → later calls rejected instantly until recovery
    """

    DESCRIPTION_PROMPT = """Você é um especialista em marketing de moda de alto padrão da marca Kavin's.
Escreva uma descrição atraente, sofisticada e vendedora para um catálogo de roupas.

Detalhes do produto:
- Nome: {name}
- Referência: {reference}
- Categoria: {category}
- Tecido/Material: {fabric}
- Cores disponíveis: {colors}

A descrição deve ter no máximo 2 parágrafos curtos. Use emojis moderadamente.
Foque na qualidade do tecido ({fabric}), conforto e caimento da peça."""

    def __init__(self):
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiService initialized with model=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            settings.gemini_model,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    def build_prompt(self, request: DescriptionRequest) -> str:
        return self.DESCRIPTION_PROMPT.format(
            name=request.name,
            reference=request.reference,
            category=request.category,
            fabric=request.fabric,
            colors=", ".join(request.colors),
        )

    async def generate_product_description(self, request: DescriptionRequest) -> str:
        """
        Flow:
            1. Check circuit breaker → may raise CircuitBreakerOpenError
            2. Send the prompt with retry logic
            3. Record success/failure in the circuit breaker
            4. Return the text, or the "unavailable" sentence for an empty reply
        """
        request_id = str(uuid.uuid4())[:8]

        self.circuit_breaker.can_execute()

        logger.info(
            "[%s] Generating description for %s (%s)",
            request_id,
            request.name,
            request.reference or "no reference",
        )

        try:
            text = await self._call_gemini_with_retry(self.build_prompt(request), request_id)
            self.circuit_breaker.record_success()
        except CircuitBreakerOpenError:
            raise
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Gemini error: %s",
                request_id,
                str(e),
                exc_info=True,
            )
            raise LLMServiceError(
                message="Could not generate the description automatically. Please try again.",
                context={"request_id": request_id, "error_type": type(e).__name__},
            )

        return text or UNAVAILABLE_DESCRIPTION

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.retry_max_attempts),
        # wait = min(max_wait, min_wait * 2^attempt) + random(0, 1)
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, prompt: str, request_id: str) -> str:
        start_time = time.time()

        try:
            response = await self.model.generate_content_async(
                prompt,
                request_options={"timeout": 60},
            )
            duration_ms = (time.time() - start_time) * 1000
            text = reply_text(response)

            logger.info(
                "[%s] Gemini description completed in %.0fms, %d chars",
                request_id,
                duration_ms,
                len(text),
            )
            return text

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
            )
            raise

    async def health_check(self) -> bool:
        """Lists models (no token cost) to verify the key and connectivity."""
        def _call():
            return [m.name for m in genai.list_models()]

        try:
            model_names = await run_in_threadpool(_call)
            target = f"models/{settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


# Holds the circuit breaker state shared by every request
gemini_service = GeminiService()
