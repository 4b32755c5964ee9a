import pytest
import requests

from vitrine import llm_service, settings
from vitrine.llm_service import GenerationError, GroqGenerator, OllamaGenerator


class _FakeResp:
    def __init__(self, content: str):
        self.choices = [type("C", (), {"message": type("M", (), {"content": content})()})()]


class _FakeGroq:
    def __init__(self, content: str = "", error: Exception = None):
        self._content = content
        self._error = error
        self.kwargs = None
        self.chat = type("Chat", (), {"completions": self})()

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self._error:
            raise self._error
        return _FakeResp(self._content)


def _mock_groq(monkeypatch, fake):
    monkeypatch.setattr(llm_service, "_get_groq_client", lambda: fake)


def test_groq_envia_system_e_usuario_com_contexto(monkeypatch):
    fake = _FakeGroq("  Tenho sim.  ")
    _mock_groq(monkeypatch, fake)

    out = GroqGenerator(model="modelo-x").generate("SYS", "tem tamanho 40?", {"nome": "Calça"})

    assert out == "Tenho sim."
    assert fake.kwargs["model"] == "modelo-x"
    messages = fake.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": "SYS"}
    assert "CONTEXTO" in messages[1]["content"]
    assert "tem tamanho 40?" in messages[1]["content"]


def test_groq_resposta_vazia_vira_erro(monkeypatch):
    _mock_groq(monkeypatch, _FakeGroq("   "))
    with pytest.raises(GenerationError):
        GroqGenerator().generate("SYS", "oi")


def test_groq_excecao_do_sdk_vira_erro(monkeypatch):
    _mock_groq(monkeypatch, _FakeGroq(error=RuntimeError("timeout")))
    with pytest.raises(GenerationError):
        GroqGenerator().generate("SYS", "oi")


def test_groq_sem_chave_vira_erro(monkeypatch):
    monkeypatch.setattr(llm_service, "_groq_client", None)
    monkeypatch.setattr(settings, "GROQ_API_KEY", "")
    with pytest.raises(GenerationError):
        llm_service._get_groq_client()


class _FakeHttpResponse:
    def __init__(self, data, status=200):
        self._data = data
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        return self._data


def test_ollama_monta_prompt_e_le_response(monkeypatch):
    captured = {}

    def fake_post(url, json=None, timeout=None):
        captured.update(url=url, json=json, timeout=timeout)
        return _FakeHttpResponse({"response": " Custa R$ 10,00. "})

    monkeypatch.setattr(llm_service.requests, "post", fake_post)

    out = OllamaGenerator(base_url="http://ollama:11434/", model="gemma:7b", timeout=5).generate(
        "SYS", "quanto custa?", {"preco": "R$ 10,00"}
    )

    assert out == "Custa R$ 10,00."
    assert captured["url"] == "http://ollama:11434/api/generate"
    assert captured["timeout"] == 5
    assert captured["json"]["stream"] is False
    prompt = captured["json"]["prompt"]
    assert prompt.startswith("SYSTEM:\nSYS")
    assert "CONTEXTO:" in prompt
    assert prompt.rstrip().endswith("ASSISTENTE:")


@pytest.mark.parametrize(
    "behavior",
    [
        requests.Timeout("lento"),
        _FakeHttpResponse({}, status=500),
        _FakeHttpResponse({"response": ""}),
    ],
)
def test_ollama_falhas_viram_erro(monkeypatch, behavior):
    def fake_post(url, json=None, timeout=None):
        if isinstance(behavior, Exception):
            raise behavior
        return behavior

    monkeypatch.setattr(llm_service.requests, "post", fake_post)
    with pytest.raises(GenerationError):
        OllamaGenerator().generate("SYS", "oi")


def test_build_generator_por_provedor():
    assert isinstance(llm_service.build_generator("ollama"), OllamaGenerator)
    assert isinstance(llm_service.build_generator("groq"), GroqGenerator)


def test_redact_text_remove_pii():
    out = llm_service._redact_text("meu email é ana@x.com e cpf 12345678900")
    assert "ana@x.com" not in out
    assert "12345678900" not in out
    assert len(llm_service._redact_text("a" * 300)) == 120
