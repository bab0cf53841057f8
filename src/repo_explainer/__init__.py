"""repo-explainer - AI explanations for code snippets and whole repositories."""

__version__ = "0.3.0"
