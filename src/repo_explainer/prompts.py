"""Prompt templates for repository analysis and snippet explanation.

Builders are pure string formatting; nothing here talks to the network.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert software developer tasked with analyzing a codebase and "
    "explaining it clearly. Provide detailed, actionable information about the "
    "repository structure, its primary features, and how to use the application."
)

MANUAL_SYSTEM_PROMPT = (
    "You are a technical writer creating clear, comprehensive user documentation. "
    "Create a user manual that explains how to use the application, its features, "
    "and common workflows."
)

GENERATION_SYSTEM_PROMPT = (
    "You are a skilled programmer who writes clean, efficient and well-documented code."
)

DETAIL_LEVELS = ("basic", "standard", "advanced")


def build_structure(paths: Iterable[str]) -> dict[str, Any]:
    """Nest sorted paths into dicts; files map to ``True``."""
    structure: dict[str, Any] = {}
    for path in sorted(paths):
        *dirs, name = path.split("/")
        node = structure
        for part in dirs:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node.setdefault(name, True)
    return structure


def _render(node: Mapping[str, Any], depth: int, lines: list[str]) -> None:
    indent = "  " * depth
    for name, child in node.items():
        if child is True:
            lines.append(f"{indent}- {name}")
        else:
            lines.append(f"{indent}+ {name}/")
            _render(child, depth + 1, lines)


def render_structure(paths: Iterable[str]) -> str:
    """Indented tree of the repository: ``+ dir/`` and ``- file`` lines."""
    lines: list[str] = []
    _render(build_structure(paths), 0, lines)
    return "".join(f"{line}\n" for line in lines)


def build_analysis_prompt(repo_name: str, structure: str, selected_files: Mapping[str, str]) -> str:
    """Prompt for the technical analysis of a repository."""
    file_blocks = "\n\n".join(
        f"--- {path} ---\n```\n{content}\n```\n" for path, content in selected_files.items()
    )
    return f"""
I need you to analyze a codebase for the repository "{repo_name}".
Here's the repository structure:

```
{structure}
```

I'm providing the contents of key files to help with the analysis.
Please analyze these files and the repository structure to:

1. Identify what type of application this is (web app, mobile app, API, etc.)
2. Determine the primary programming languages and frameworks used
3. Describe the main features and functionality
4. Explain the architecture and key components
5. Note any important configuration or deployment requirements

Here are the selected files:

{file_blocks}

Please provide a comprehensive technical analysis of this codebase.
"""


def build_manual_prompt(repo_name: str, structure: str, analysis: str) -> str:
    """Prompt for a user manual derived from a finished technical analysis."""
    return f"""
Based on this technical analysis of the repository "{repo_name}":

{analysis}

Please create a comprehensive user manual that includes:

1. Installation and setup instructions
2. A quickstart guide for first-time users
3. Detailed explanations of all features and how to use them
4. Common use cases and workflows
5. Troubleshooting tips for common issues

The manual should be well-structured with clear headings and be written in a way that's accessible to users who may not be technical experts.
Use markdown formatting to create a professional-looking document.
"""


_EXPLAIN_SYSTEM = {
    "basic": (
        "You are a programming teacher for beginners. Your explanations avoid technical "
        "jargon and focus on simple concepts. Use analogies and everyday examples to explain code."
    ),
    "standard": (
        "You are a helpful assistant that explains code in plain English for intermediate "
        "programmers. Your explanations balance technical accuracy with clear explanations."
    ),
    "advanced": (
        "You are a senior software engineer conducting a detailed code review. Your "
        "explanations are thorough, technical, and cover implementation details, "
        "optimizations, and best practices."
    ),
}

_EXPLAIN_INSTRUCTIONS = {
    "basic": """
Explain this in simple terms that a complete beginner would understand.
- Avoid technical jargon completely.
- Use everyday analogies and relatable examples.
- Don't assume any prior programming knowledge.
- Focus only on what the code does in plain language.
- Keep the explanation concise and to the point.
- Don't include time/space complexity analysis.

Your explanation should ONLY include:
1. What the code does in very simple terms
2. A basic explanation of how it works using everyday analogies
3. An example of when this code might be used in real life

Format your explanation using simple language a non-programmer could understand.
""",
    "standard": """
Provide a balanced explanation with enough technical details for intermediate programmers. Include both conceptual understanding and some implementation details.

Your explanation should include:
1. What the code does
2. How it works step by step
3. Any important patterns or techniques used
4. Basic time and space complexity considerations
5. Common edge cases or limitations
6. Possible improvements

Format your explanation using Markdown with clear sections.
""",
    "advanced": """
Provide a comprehensive technical analysis of this code:
- Include detailed time and space complexity analysis with Big O notation
- Thoroughly examine edge cases and potential failure points
- Suggest specific optimizations with code examples
- Evaluate the code against industry best practices
- Highlight any potential security vulnerabilities or performance bottlenecks
- Include references to relevant design patterns or algorithms

Your advanced analysis MUST include all of these sections:
1. High-level overview of the code's purpose
2. Detailed algorithmic analysis with time/space complexity
3. Comprehensive edge case examination
4. Code quality assessment
5. Specific refactoring suggestions with code examples
6. Performance optimization opportunities
7. Technical debt identification

Format your explanation with clear section headers and technical details.
""",
}


def explanation_prompt(code: str, language: str, detail_level: str = "standard") -> tuple[str, str, float]:
    """Return ``(system, prompt, temperature)`` for explaining a code snippet."""
    if detail_level not in DETAIL_LEVELS:
        raise ValueError(f"Unknown detail level: {detail_level}")
    if language == "auto":
        intro = "Please detect the programming language and explain the following code:"
        fence = ""
    else:
        intro = f"Please explain the following {language} code:"
        fence = language
    prompt = f"""
{intro}

```{fence}
{code}
```
{_EXPLAIN_INSTRUCTIONS[detail_level]}"""
    temperature = 0.7 if detail_level == "basic" else 0.3
    return _EXPLAIN_SYSTEM[detail_level], prompt, temperature


def generation_prompt(description: str, language: str) -> str:
    """Prompt for writing code from a natural-language description."""
    return f"""
Please write {language} code based on this description:

Description: {description}

Write clean, efficient, and well-commented {language} code that implements this functionality.
The code should be production-ready and follow best practices for {language}.

Format your response with just the code in a code block.
"""
