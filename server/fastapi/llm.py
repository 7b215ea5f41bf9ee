from functools import lru_cache

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from config import Settings


@lru_cache
def build_llm(settings: Settings) -> BaseChatModel:
    """Create the chat model for the configured provider.

    Callers must check ``settings.api_key`` first; the provider SDKs reject
    a missing key at construction time.
    """
    if settings.llm_provider == "openai":
        return ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            temperature=settings.llm_temperature,
            max_retries=settings.llm_max_retries,
        )
    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.gemini_api_key,
        temperature=settings.llm_temperature,
        max_retries=settings.llm_max_retries,
    )
