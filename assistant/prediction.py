from __future__ import annotations

import logging

from llama_index.core.prompts import PromptTemplate

from assistant import llm as llm_factory
from assistant.llm import AssistantError
from assistant.schemas import DiseasePrediction
from tracking.errors import ValidationError

logger = logging.getLogger(__name__)

PREDICT_PROMPT = PromptTemplate(
    "You are a health assistant that suggests possible diseases for the symptoms "
    "a user reports.\n"
    "Analyse the symptoms and list the possible diseases, give a confidence level "
    "for the prediction (low, medium or high), and recommend next steps the user "
    "should take.\n\n"
    "Symptoms: {symptoms}\n"
)


def predict_disease(symptoms: str) -> DiseasePrediction:
    """Predict possible diseases for a comma-separated list of symptoms."""
    if not symptoms or not symptoms.strip():
        raise ValidationError("symptoms", "Please list at least one symptom.")

    try:
        llm = llm_factory.get_llm(llm_factory.predict_model(), temperature=0.1)
        result = llm.structured_predict(DiseasePrediction, PREDICT_PROMPT, symptoms=symptoms.strip())
    except Exception as exc:
        logger.exception("Disease prediction failed")
        raise AssistantError("Could not generate a prediction right now.") from exc

    if not isinstance(result, DiseasePrediction):
        # Some LLM wrappers hand back a plain mapping.
        try:
            result = DiseasePrediction.model_validate(result)
        except Exception as exc:
            logger.warning("Prediction had an unexpected shape: %r", result)
            raise AssistantError("The assistant returned an unusable prediction.") from exc
    return result
