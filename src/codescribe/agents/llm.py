"""
LLM utilities using LangChain's init_chat_model
"""
import os
from typing import Optional
from loguru import logger

from langchain_core.language_models import BaseChatModel
from langchain.chat_models import init_chat_model

from codescribe import config


def set_api_key(api_key: str, model_name: str, model_provider: Optional[str] = None):
    """
    Set API key based on model provider

    Args:
        api_key: API key for the model provider
        model_name: Model name to determine the provider
        model_provider: Explicit provider, checked before the model name
    """
    hint = f"{model_provider or ''} {model_name}".lower()

    if 'google' in hint or 'gemini' in hint:
        os.environ['GOOGLE_API_KEY'] = api_key
        logger.debug("Set GOOGLE_API_KEY")
    elif 'anthropic' in hint or 'claude' in hint:
        os.environ['ANTHROPIC_API_KEY'] = api_key
        logger.debug("Set ANTHROPIC_API_KEY")
    elif 'openai' in hint or 'gpt' in hint:
        os.environ['OPENAI_API_KEY'] = api_key
        logger.debug("Set OPENAI_API_KEY")
    else:
        logger.warning(f"Unknown provider for model {model_name}, API key may not be set correctly")


def create_chat_model(
    model: Optional[str] = None,
    model_provider: Optional[str] = None,
    api_key: Optional[str] = None,
    api_url: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    **kwargs
) -> BaseChatModel:
    """
    Create a chat model using LangChain's init_chat_model

    Args:
        model: Model name (e.g., 'gemini-2.0-flash', 'gpt-4o-mini')
        model_provider: Provider name (e.g., 'google_genai', 'openai')
        api_key: API key for the model provider
        api_url: Custom API URL if needed
        temperature: Temperature for generation (0.0-1.0)
        max_tokens: Maximum tokens to generate
        **kwargs: Additional parameters for the model

    Returns:
        Initialized chat model instance
    """
    model_name = model or config.LLM_MODEL
    model_provider = model_provider or config.LLM_PROVIDER or None
    api_key = api_key or config.LLM_API_KEY
    api_url = api_url or config.LLM_URL or None
    temperature = temperature if temperature is not None else config.LLM_TEMPERATURE
    max_tokens = max_tokens if max_tokens is not None else config.LLM_MAX_TOKENS

    if api_key:
        set_api_key(api_key, model_name, model_provider)

    # Failed generations are reported per file, never retried within a run
    kwargs.setdefault('max_retries', 0)

    try:
        if api_url is not None:
            kwargs['base_url'] = api_url
        chat_model = init_chat_model(
            model_name,
            model_provider=model_provider,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )
        logger.info(f"Initialized chat model: {model_name} ({model_provider or 'inferred provider'})")
        return chat_model
    except Exception as e:
        logger.error(f"Failed to initialize chat model {model_name}: {e}")
        raise
