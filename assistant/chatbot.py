from __future__ import annotations

import logging

from assistant import llm as llm_factory
from assistant.llm import AssistantError
from tracking.errors import ValidationError

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "Remember, I'm not a doctor. Please consult a healthcare professional "
    "for a real diagnosis."
)

PROMPT = (
    "You are HealthWise, a friendly and empathetic health assistant. Help the user "
    "understand potential causes for the symptoms they describe.\n"
    "You are not a doctor. End your answer with a short, friendly reminder to "
    "consult a healthcare professional for a real diagnosis.\n\n"
    "User's symptoms: {symptoms}\n"
)


def _with_disclaimer(text: str) -> str:
    text = text.strip()
    if "healthcare professional" in text.lower()[-300:]:
        return text
    return f"{text}\n\n{DISCLAIMER}"


def analyze_symptoms(symptoms: str) -> str:
    """
    Describe potential causes for free-text ``symptoms`` in a conversational tone.

    The reply always ends with a reminder to see a healthcare professional; if the
    model leaves it out, it is appended here.

    Raises:
        ValidationError: ``symptoms`` is blank.
        AssistantError: the language model call failed or returned nothing.
    """
    if not symptoms or not symptoms.strip():
        raise ValidationError("symptoms", "Please describe your symptoms.")

    try:
        llm = llm_factory.get_llm(llm_factory.chat_model(), temperature=0.5)
        response = llm.complete(PROMPT.format(symptoms=symptoms.strip()))
    except Exception as exc:
        logger.exception("Symptom analysis failed")
        raise AssistantError("The assistant could not analyse your symptoms right now.") from exc

    text = getattr(response, "text", None) or ""
    if not text.strip():
        raise AssistantError("The assistant returned an empty answer.")
    return _with_disclaimer(text)
