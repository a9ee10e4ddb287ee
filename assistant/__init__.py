"""AI helpers for the HealthWise assistant."""

__all__ = ["analyze_symptoms", "predict_disease"]


def analyze_symptoms(*args, **kwargs):
    from .chatbot import analyze_symptoms as _impl
    return _impl(*args, **kwargs)


def predict_disease(*args, **kwargs):
    from .prediction import predict_disease as _impl
    return _impl(*args, **kwargs)
