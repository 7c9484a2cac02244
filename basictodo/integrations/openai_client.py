"""OpenAI-compatible chat completion client for BasicTodo.

Wraps the `openai` SDK for one-shot function-calling requests. Works against
OpenAI directly or any compatible gateway (e.g. OpenRouter) via OPENAI_BASE_URL.
"""

import os
import logging
from typing import Any, Dict, List, Optional
from openai import OpenAI, APIError, APIConnectionError, APITimeoutError
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Model used for the task assistant
ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "gpt-4o-mini")
ASSISTANT_TIMEOUT_SEC = float(os.getenv("ASSISTANT_TIMEOUT_SEC", "30"))
ASSISTANT_TEMPERATURE = 0.7
ASSISTANT_MAX_TOKENS = 1000


class UpstreamModelError(Exception):
    """The language model call failed or returned nothing usable."""


class RawToolCall(BaseModel):
    """A tool call exactly as the model returned it (arguments still a JSON string)."""

    id: str
    name: str
    arguments: str = ""


class ModelReply(BaseModel):
    """Text content plus any tool calls of the first choice."""

    content: Optional[str] = None
    tool_calls: List[RawToolCall] = Field(default_factory=list)


class OpenAIClient:
    """Client for OpenAI-compatible chat completions."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the client.

        Args:
            api_key: API key. If None, reads from OPENAI_API_KEY environment variable.
            base_url: Gateway URL. If None, reads OPENAI_BASE_URL (SDK default when unset).
            model: Model name. Defaults to ASSISTANT_MODEL.
            timeout: Request timeout in seconds. Defaults to ASSISTANT_TIMEOUT_SEC.

        Note:
            Without an API key the client still initializes, and every call raises
            UpstreamModelError so the assistant can degrade gracefully.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL") or None
        self.model = model or ASSISTANT_MODEL
        self.timeout = timeout if timeout is not None else ASSISTANT_TIMEOUT_SEC
        self.client = None

        if self.api_key:
            self.client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        else:
            logger.warning("OPENAI_API_KEY not found in environment. The task assistant will not be available.")

    def complete(self, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None) -> ModelReply:
        """Send one chat completion request and return the first choice.

        Args:
            messages: OpenAI-format chat messages (system first)
            tools: Function tool descriptors the model may call

        Returns:
            ModelReply with the reply text and raw tool calls

        Raises:
            UpstreamModelError: If the client is not configured, the call fails,
                times out, or the response has no choices
        """
        if not self.client:
            raise UpstreamModelError("Model client is not configured")

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": ASSISTANT_TEMPERATURE,
            "max_tokens": ASSISTANT_MAX_TOKENS,
        }
        if tools:
            request["tools"] = tools
            request["tool_choice"] = "auto"

        try:
            response = self.client.chat.completions.create(**request)
        except APITimeoutError as e:
            logger.warning(f"Model request timed out after {self.timeout}s")
            raise UpstreamModelError("Model request timed out") from e
        except APIConnectionError as e:
            logger.error("Could not reach the model provider")
            raise UpstreamModelError("Could not reach the model provider") from e
        except APIError as e:
            error_code = getattr(e, 'code', None)
            status_code = getattr(e, 'status_code', None)

            if error_code == 'insufficient_quota':
                logger.warning("Model API quota insufficient. Please check billing for the provider account.")
            elif status_code == 429:
                logger.warning("Model API rate limit exceeded. Please wait before retrying.")
            else:
                logger.error(f"Model API error: {status_code or 'unknown'} ({error_code or 'unknown'})")
            # Don't log full error message as it might contain sensitive info
            raise UpstreamModelError(f"Model API error: {status_code or 'unknown'}") from e

        if not response.choices:
            raise UpstreamModelError("No response from AI model")

        message = response.choices[0].message
        tool_calls = [
            RawToolCall(
                # Some gateways omit call ids; results still need one to correlate.
                id=call.id or f"call_{index}",
                name=call.function.name or "",
                arguments=call.function.arguments or "",
            )
            for index, call in enumerate(message.tool_calls or [])
            if getattr(call, "function", None) is not None
        ]
        logger.debug(f"Model replied with {len(tool_calls)} tool call(s)")
        return ModelReply(content=message.content, tool_calls=tool_calls)
