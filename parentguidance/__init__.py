"""ParentGuidance backend: structured parenting guidance from LLM output."""

__version__ = "0.1.0"
