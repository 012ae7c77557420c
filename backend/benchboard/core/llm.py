# backend/benchboard/core/llm.py
"""
Gemini LLM handle (LangChain wrapper).
- Uses ChatGoogleGenerativeAI with the configured model, temperature=0
- Reads API key via core.config.get_gemini_api_key(); missing key fails fast
- Built on demand and handed to GeminiMatcher; nothing is created at import time
"""

from __future__ import annotations

from typing import Optional

from langchain_google_genai import ChatGoogleGenerativeAI

from .config import DEFAULT_OPTIONS, get_gemini_api_key, get_gemini_model


def build_llm(api_key: Optional[str] = None, model: Optional[str] = None) -> ChatGoogleGenerativeAI:
    return ChatGoogleGenerativeAI(
        model=model or get_gemini_model(),
        temperature=DEFAULT_OPTIONS["temperature"],
        api_key=api_key or get_gemini_api_key(),
    )

__all__ = ["build_llm"]
