"""
Serviço de LLM: geração de texto para classificação de intenção,
respostas de produto e reescrita "humana" de templates.

Dois provedores:
- groq (nuvem, padrão)
- ollama (local, via HTTP /api/generate)

Qualquer falha (chave ausente, timeout, resposta vazia) vira GenerationError.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

import requests
from groq import Groq

from vitrine import settings


class GenerationError(Exception):
    """Falha ao gerar texto (provedor fora, timeout, chave ausente)."""


# Cliente Groq (singleton)
_groq_client = None
_generator = None


def _get_groq_client() -> Groq:
    """Retorna cliente Groq (singleton)."""
    global _groq_client
    if _groq_client is None:
        if not settings.GROQ_API_KEY:
            raise GenerationError("GROQ_API_KEY não encontrada no .env")
        _groq_client = Groq(
            api_key=settings.GROQ_API_KEY,
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
            max_retries=0,
        )
    return _groq_client


def _redact_text(text: str) -> str:
    """Reduz risco de PII em logs."""
    if not text:
        return ""
    t = text
    t = re.sub(r"\b[\w\.-]+@[\w\.-]+\.\w+\b", "[email]", t)
    t = re.sub(r"\b\d{6,}\b", "[num]", t)
    t = re.sub(r"\b\d{2,3}\s*\d{4,5}-?\d{4}\b", "[phone]", t)
    t = re.sub(r"\s+", " ", t).strip()
    if len(t) > 120:
        t = t[:117] + "..."
    return t


def _format_context(context: Optional[Dict[str, Any]]) -> str:
    if not context:
        return ""
    return json.dumps(context, ensure_ascii=False, default=str)


class GroqGenerator:
    def __init__(self, model: str = settings.GROQ_MODEL, temperature: float = 0.2, max_tokens: int = 300):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, system_prompt: str, user_text: str, context: Optional[Dict[str, Any]] = None) -> str:
        user_content = user_text
        ctx = _format_context(context)
        if ctx:
            user_content = f"CONTEXTO:\n{ctx}\n\nMENSAGEM:\n{user_text}"

        client = _get_groq_client()
        logging.info("llm_generate provider=groq model=%s msg=%s", self.model, _redact_text(user_text))
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logging.info("llm_generate error=%s", str(e)[:200])
            raise GenerationError(str(e)) from e

        raw = response.choices[0].message.content if response.choices else ""
        if not raw or not raw.strip():
            raise GenerationError("resposta vazia do provedor")
        return raw.strip()


class OllamaGenerator:
    def __init__(
        self,
        base_url: str = settings.OLLAMA_BASE_URL,
        model: str = settings.OLLAMA_MODEL,
        timeout: float = settings.GENERATION_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    def _build_prompt(self, system_prompt: str, user_text: str, context: Optional[Dict[str, Any]]) -> str:
        parts = [f"SYSTEM:\n{system_prompt}"]
        ctx = _format_context(context)
        if ctx:
            parts.append(f"\nCONTEXTO:\n{ctx}")
        parts.append(f"\nUSUÁRIO:\n{user_text}")
        parts.append("\nASSISTENTE:\n")
        return "\n".join(parts)

    def generate(self, system_prompt: str, user_text: str, context: Optional[Dict[str, Any]] = None) -> str:
        payload = {
            "model": self.model,
            "prompt": self._build_prompt(system_prompt, user_text, context),
            "stream": False,
            "options": {"temperature": 0.4, "num_predict": 180},
        }
        logging.info("llm_generate provider=ollama model=%s msg=%s", self.model, _redact_text(user_text))
        try:
            resp = requests.post(f"{self.base_url}/api/generate", json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logging.info("llm_generate error=%s", str(e)[:200])
            raise GenerationError(str(e)) from e

        raw = data.get("response") if isinstance(data, dict) else None
        if not raw or not str(raw).strip():
            raise GenerationError("resposta vazia do ollama")
        return str(raw).strip()


def build_generator(provider: Optional[str] = None):
    provider = (provider or settings.LLM_PROVIDER).lower()
    if provider == "ollama":
        return OllamaGenerator()
    if provider != "groq":
        logging.warning("LLM_PROVIDER desconhecido (%s), usando groq", provider)
    return GroqGenerator()


def get_generator():
    """Gerador configurado (singleton)."""
    global _generator
    if _generator is None:
        _generator = build_generator()
    return _generator
