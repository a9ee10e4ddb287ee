import os

from llama_index.llms.openai import OpenAI

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_PREDICT_MODEL = "gpt-4o"


class AssistantError(RuntimeError):
    """The language model could not produce an answer."""


def get_llm(model: str | None = None, temperature: float = 0.3) -> OpenAI:
    # relies on OPENAI_API_KEY in env
    return OpenAI(model=model or DEFAULT_CHAT_MODEL, temperature=temperature)


def chat_model() -> str:
    return os.getenv("ASSISTANT_CHAT_MODEL", DEFAULT_CHAT_MODEL)


def predict_model() -> str:
    return os.getenv("ASSISTANT_PREDICT_MODEL", DEFAULT_PREDICT_MODEL)
