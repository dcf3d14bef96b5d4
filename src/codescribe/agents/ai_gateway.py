# Copyright 2025-present CodeScribe Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Chat model gateway for documentation generation.

Wraps a LangChain chat model behind `generate(system, user) -> str` and maps
provider failures onto the AI error hierarchy so per-file failures can be
reported with a meaningful kind.
"""

import re
from typing import Any, Optional
from loguru import logger

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from codescribe.agents.llm import create_chat_model
from codescribe.errors import AIProviderError, AIRateLimitError, AISafetyBlockError


SAFETY_FINISH_REASONS = frozenset([
    'SAFETY', 'PROHIBITED_CONTENT', 'BLOCKLIST', 'RECITATION', 'SPII', 'CONTENT_FILTER',
])

_RATE_LIMIT_MARKERS = ('rate limit', 'ratelimit', 'quota', 'resource exhausted', 'resource_exhausted', 'too many requests')
_SAFETY_MARKERS = ('safety', 'content_filter', 'content filter', 'prohibited_content', 'blocked')

_FENCE_RE = re.compile(r'^\s*```[\w-]*[ \t]*\n(.*?)\n?```\s*$', re.DOTALL)


def _status_code(error: Exception) -> Optional[int]:
    for attr in ('status_code', 'code', 'status'):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, 'response', None)
    value = getattr(response, 'status_code', None)
    return value if isinstance(value, int) else None


def classify_error(error: Exception) -> AIProviderError:
    """Map an exception raised by a chat model to the AI error hierarchy"""
    if isinstance(error, AIProviderError):
        return error

    name = type(error).__name__.lower()
    text = str(error)
    lowered = text.lower()

    if _status_code(error) == 429 or 'ratelimit' in name or 'resourceexhausted' in name \
            or any(m in lowered for m in _RATE_LIMIT_MARKERS):
        return AIRateLimitError(text or type(error).__name__)
    if any(m in lowered for m in _SAFETY_MARKERS):
        return AISafetyBlockError(text)
    return AIProviderError(f"{type(error).__name__}: {text}" if text else type(error).__name__)


def extract_text(content: Any) -> str:
    """Flatten message content, which may be a string or a list of content blocks"""
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get('type') == 'text':
            parts.append(block.get('text', ''))
    return ''.join(parts)


def clean_generated_doc(text: str) -> str:
    """Strip a code fence wrapped around the whole document, if any"""
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1).strip()
    return text + '\n'


class AIGateway:
    """Generate documentation text with a chat model"""

    def __init__(self, chat_model: Optional[BaseChatModel] = None):
        self._chat_model = chat_model

    @property
    def chat_model(self) -> BaseChatModel:
        # Built lazily so runs that stop early never need model credentials
        if self._chat_model is None:
            self._chat_model = create_chat_model()
        return self._chat_model

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one system + user prompt pair and return the response text.

        Raises:
            AIRateLimitError: Rate limited or out of quota
            AISafetyBlockError: Prompt or response blocked by safety filters
            AIProviderError: Any other provider failure, including empty output
        """
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
        try:
            response = self.chat_model.invoke(messages)
        except Exception as e:
            error = classify_error(e)
            logger.error(f"AI generation failed ({error.kind}): {e}")
            raise error from e

        metadata = getattr(response, 'response_metadata', None) or {}
        finish_reason = str(metadata.get('finish_reason') or '').upper()
        if finish_reason in SAFETY_FINISH_REASONS:
            raise AISafetyBlockError(f"Response blocked by safety filters (finish reason {finish_reason})")

        block_reason = (metadata.get('prompt_feedback') or {}).get('block_reason')
        if block_reason:
            raise AISafetyBlockError(f"Prompt blocked by safety filters: {block_reason}")

        text = extract_text(getattr(response, 'content', ''))
        if not text.strip():
            raise AIProviderError("Empty response from AI provider")

        usage = getattr(response, 'usage_metadata', None) or {}
        if usage:
            logger.debug(f"AI usage: input={usage.get('input_tokens')} output={usage.get('output_tokens')}")
        return text
