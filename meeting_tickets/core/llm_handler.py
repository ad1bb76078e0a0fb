"""
Centralized LLM Handler for ticket extraction requests.

This module provides a unified interface for making chat completion requests
with error handling, reasoning model fallback, and a direct HTTP path for
project-scoped keys.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import config, get_client
from .debug_log import get_debug_logger

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant that creates actionable tickets from meeting transcriptions only when tasks are clearly assigned."


class ReasoningModelError(Exception):
    """Raised when reasoning model parameter adjustment fails."""

    pass


class LLMHandlerError(Exception):
    """Base exception for LLM Handler errors."""

    pass


def is_reasoning_model_error(exception: Exception) -> bool:
    """
    Check if the exception indicates the model only accepts reasoning model parameters.

    Detects error code 400 with:
    - type: 'invalid_request_error'
    - code: 'unsupported_value' or 'unsupported_parameter'
    - param: 'temperature' or 'max_tokens'

    Args:
        exception: Exception from LLM API call

    Returns:
        True if this is a reasoning model error that needs parameter adjustment
    """
    return _is_reasoning_error_body(getattr(exception, "status_code", None), getattr(exception, "body", None))


def _is_reasoning_error_body(status_code: Optional[int], error_data: Any) -> bool:
    if status_code != 400 or not isinstance(error_data, dict):
        return False

    # The client library sometimes unwraps the "error" envelope already
    error_info = error_data.get("error", error_data)
    if not isinstance(error_info, dict):
        return False

    error_type = str(error_info.get("type") or "").lower()
    error_code = str(error_info.get("code") or "").lower()
    error_param = str(error_info.get("param") or "").lower()

    return (
        error_type == "invalid_request_error"
        and error_code in ("unsupported_value", "unsupported_parameter")
        and error_param in ("temperature", "max_tokens")
    )


def is_reasoning_http_error(exception: Exception) -> bool:
    """Same check as is_reasoning_model_error, for a failed plain HTTP request."""
    response = getattr(exception, "response", None)
    if not isinstance(exception, requests.HTTPError) or response is None:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return _is_reasoning_error_body(response.status_code, body)


def adjust_llm_params_for_reasoning_model(original_params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Adjust LLM request parameters for reasoning model compatibility.

    Args:
        original_params: Original parameters dict

    Returns:
        Adjusted parameters dict suitable for reasoning model
    """
    adjusted_params = original_params.copy()

    for param in ("temperature", "max_tokens"):
        adjusted_params.pop(param, None)

    if "max_tokens" in original_params:
        adjusted_params["max_completion_tokens"] = original_params["max_tokens"]

    logger.info(f"Adjusted parameters for reasoning model: {sorted(adjusted_params)}")
    return adjusted_params


def make_llm_request_with_reasoning_fallback(client: Any, original_params: Dict[str, Any]) -> Any:
    """
    Make LLM request with automatic fallback to reasoning model parameters.

    Args:
        client: OpenAI client instance
        original_params: Original request parameters

    Returns:
        Response from successful LLM call

    Raises:
        ReasoningModelError: If the retry with adjusted parameters fails
    """
    try:
        return client.chat.completions.create(**original_params)

    except Exception as e:
        if not is_reasoning_model_error(e):
            raise

        logger.info("Detected reasoning model error, adjusting parameters for ticket extraction")
        adjusted_params = adjust_llm_params_for_reasoning_model(original_params)

        try:
            return client.chat.completions.create(**adjusted_params)
        except Exception as retry_error:
            raise ReasoningModelError(f"Failed to make LLM request even after adjusting for reasoning model: {retry_error}") from e


def _content_from_response(response: Any) -> Optional[str]:
    """Pull the first choice's message content out of a client object or a raw JSON dict."""
    if isinstance(response, dict):
        choices = response.get("choices") or []
        if not choices:
            return None
        return (choices[0].get("message") or {}).get("content")

    choices = getattr(response, "choices", None)
    if not choices:
        return None
    return choices[0].message.content


class LLMHandler:
    """
    Handles ticket extraction requests against the chat completions API.
    """

    def __init__(self, client: Optional[Any] = None):
        """
        Initialize LLM Handler.

        Args:
            client: OpenAI client; the shared configured client is used when omitted
        """
        self.client = client if client is not None else get_client()
        self.debug_logger = get_debug_logger()

    def build_messages(self, transcript: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._create_ticket_user_prompt(transcript)},
        ]

    def build_request_params(self, transcript: str) -> Dict[str, Any]:
        """Build the chat completion parameters for the configured model."""
        request_params: Dict[str, Any] = {
            "model": config.llm_model,
            "messages": self.build_messages(transcript),
        }

        if config.is_reasoning_model:
            request_params["max_completion_tokens"] = config.max_tokens
        else:
            request_params["max_tokens"] = config.max_tokens

        return request_params

    def make_ticket_request(self, transcript: str) -> str:
        """
        Ask the model for the tickets assigned in a meeting transcript.

        Args:
            transcript: Meeting transcript

        Returns:
            Stripped message content of the first choice

        Raises:
            LLMHandlerError: If the request fails or the response has no content
        """
        request_params = self.build_request_params(transcript)

        try:
            if config.is_project_key:
                response = self._request_with_direct_fallback(request_params)
            else:
                self.debug_logger.log_llm_request(request_params["messages"], "client")
                response = make_llm_request_with_reasoning_fallback(self.client, request_params)
        except LLMHandlerError:
            raise
        except Exception as e:
            self.debug_logger.log_error(e, "ticket_extraction")
            raise LLMHandlerError(f"Ticket extraction request failed: {e}") from e

        try:
            content = _content_from_response(response)
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise LLMHandlerError(f"Unexpected response format from ticket extraction model: {e}") from e

        if content is None:
            raise LLMHandlerError("Empty response from ticket extraction model")

        self.debug_logger.log_llm_response(content, transcript)
        return content.strip()

    def _request_with_direct_fallback(self, request_params: Dict[str, Any]) -> Any:
        """
        One direct POST, then at most one client call.

        The client call carries reasoning model parameters when the direct
        call was rejected for using max_tokens or temperature.
        """
        try:
            self.debug_logger.log_llm_request(request_params["messages"], "direct")
            return self._post_chat_completion(request_params)
        except Exception as e:
            logger.warning(f"Direct API call failed, falling back to standard client: {e}")
            self.debug_logger.log_error(e, "ticket_extraction_direct")
            if is_reasoning_http_error(e):
                request_params = adjust_llm_params_for_reasoning_model(request_params)

        self.debug_logger.log_llm_request(request_params["messages"], "client")
        return self.client.chat.completions.create(**request_params)

    def _post_chat_completion(self, request_params: Dict[str, Any]) -> Dict[str, Any]:
        """Send the chat completion as a plain JSON request."""
        resp = requests.post(
            f"{config.api_base}/chat/completions",
            json=request_params,
            headers={
                "Authorization": f"Bearer {config.openai_api_key}",
                "Content-Type": "application/json",
            },
            timeout=config.openai_timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict) or not data.get("choices"):
            raise LLMHandlerError("Invalid response format from API")
        return data

    def _create_ticket_user_prompt(self, transcript: str) -> str:
        """Create user prompt for ticket extraction requests."""
        return f"""
You are an AI assistant for technical teams. Analyze this meeting transcription and extract actionable tickets only if clear tasks were assigned.
Format each ticket as: "TO DO [Name]: Task description"
Identify names of people who were assigned tasks in the meeting.
If no clear tasks or assignments were detected, respond with "NO_TICKETS_NEEDED".

Meeting transcription:
{transcript}

Respond with just the tickets, one per line, or "NO_TICKETS_NEEDED" if no clear tasks were assigned.
"""
