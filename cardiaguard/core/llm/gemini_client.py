"""
Gemini API Client

Async wrapper around Google Gemini (via LangChain) used by the heart
analysis capability. Failures are raised as AnalysisError subclasses so
the orchestrator can surface them to the consumer.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from datetime import datetime

from langchain_google_genai import ChatGoogleGenerativeAI

from cardiaguard.config import settings
from cardiaguard.utils import (
    AnalysisConfigurationError,
    AnalysisError,
    get_logger,
)

logger = get_logger(__name__)


@dataclass
class GeminiConfig:
    """Configuration for Gemini client."""
    api_key: Optional[str] = field(default_factory=lambda: settings.gemini_api_key)
    model: str = field(default_factory=lambda: settings.gemini_model)
    temperature: float = field(default_factory=lambda: settings.temperature)

    max_output_tokens: int = 2048
    top_p: float = 0.8
    top_k: int = 40

    # Structured Output
    response_mime_type: Optional[str] = None
    response_schema: Optional[Dict[str, Any]] = None

    request_timeout_seconds: float = field(
        default_factory=lambda: settings.request_timeout_seconds
    )
    max_retries: int = 0


@dataclass
class GeminiResponse:
    """Structured response from Gemini."""
    text: str
    model: str
    finish_reason: str = "STOP"
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "model": self.model,
            "finish_reason": self.finish_reason,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "latency_ms": round(self.latency_ms, 2),
        }


class GeminiClient:
    """
    Client for Google Gemini API.

    Without an API key the client stays unavailable and every request
    raises AnalysisConfigurationError.
    """

    def __init__(self, config: Optional[GeminiConfig] = None):
        """
        Initialize Gemini client.

        Args:
            config: Optional configuration, uses defaults if not provided
        """
        self.config = config or GeminiConfig()
        self._llm = None
        self._request_count = 0
        self._last_request_time = None
        self._init_error: Optional[str] = None

        self._initialize()

    def _initialize(self):
        """Initialize the Gemini model using LangChain."""
        if not self.config.api_key:
            self._init_error = "No Gemini API key configured (set GEMINI_API_KEY)"
            logger.warning(self._init_error)
            return

        try:
            self._llm = ChatGoogleGenerativeAI(
                model=self._model_name,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
                top_p=self.config.top_p,
                top_k=self.config.top_k,
                timeout=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
                google_api_key=self.config.api_key,
                response_mime_type=self.config.response_mime_type,
                response_schema=self.config.response_schema
            )
            logger.info(f"LangChain Gemini client initialized with model: {self._model_name}")

        except Exception as e:
            self._init_error = f"Failed to initialize Gemini: {e}"
            logger.error(self._init_error)
            self._llm = None

    @property
    def is_available(self) -> bool:
        """Check if Gemini is available for use."""
        return self._llm is not None

    @property
    def _model_name(self) -> str:
        """Resolve model name whether config.model is an enum or a plain string."""
        m = self.config.model
        return m.value if hasattr(m, "value") else str(m)

    async def generate_async(
        self,
        prompt: str,
        system_instruction: Optional[str] = None
    ) -> GeminiResponse:
        """
        Generate a response using LangChain's ainvoke.

        Raises:
            AnalysisConfigurationError: client has no usable model
            AnalysisError: the remote call failed
        """
        if not self.is_available:
            raise AnalysisConfigurationError(self._init_error or "Gemini client unavailable")

        start_time = datetime.now()
        full_prompt = f"{system_instruction}\n\n{prompt}" if system_instruction else prompt

        try:
            response = await self._llm.ainvoke(full_prompt)
        except Exception as e:
            logger.error(f"Async Gemini generation failed: {e}")
            raise AnalysisError(str(e), details={"model": self._model_name}) from e

        latency = (datetime.now() - start_time).total_seconds() * 1000
        text = response.content if hasattr(response, "content") else str(response)
        if isinstance(text, list):
            # Multi-part content blocks
            text = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in text
            )

        prompt_tokens = 0
        completion_tokens = 0
        usage = getattr(response, "usage_metadata", None)
        if usage:
            prompt_tokens = usage.get("input_tokens", 0)
            completion_tokens = usage.get("output_tokens", 0)

        self._request_count += 1
        self._last_request_time = datetime.now()

        return GeminiResponse(
            text=text,
            model=self._model_name,
            finish_reason="STOP",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            "is_available": self.is_available,
            "model": self._model_name,
            "request_count": self._request_count,
            "last_request": self._last_request_time.isoformat() if self._last_request_time else None
        }
