"""Template expansion for factoid values."""

from factbot.formatter.pipeline import FormatContext, TemplatePipeline, TemplatePlugin
from factbot.formatter.plugins import ChoicePlugin, IdentifierPlugin, default_pipeline

__all__ = [
    "ChoicePlugin",
    "FormatContext",
    "IdentifierPlugin",
    "TemplatePipeline",
    "TemplatePlugin",
    "default_pipeline",
]
