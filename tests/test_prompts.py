"""Tests for prompt assembly."""

import pytest

from repo_explainer.prompts import (
    build_analysis_prompt,
    build_manual_prompt,
    build_structure,
    explanation_prompt,
    generation_prompt,
    render_structure,
)


class TestStructure:
    def test_build_structure_nests_directories(self):
        assert build_structure(["a/b.js", "a/c.js", "d.js"]) == {
            "a": {"b.js": True, "c.js": True},
            "d.js": True,
        }

    def test_render_structure(self):
        assert render_structure(["a/b.js", "a/c.js", "d.js"]) == (
            "+ a/\n"
            "  - b.js\n"
            "  - c.js\n"
            "- d.js\n"
        )

    def test_render_sorts_input_once(self):
        rendered = render_structure(["src/z.py", "README.md", "src/lib/a.py"])
        assert rendered == (
            "- README.md\n"
            "+ src/\n"
            "  + lib/\n"
            "    - a.py\n"
            "  - z.py\n"
        )

    def test_empty(self):
        assert render_structure([]) == ""


class TestRepositoryPrompts:
    def test_analysis_prompt_embeds_everything(self):
        prompt = build_analysis_prompt(
            "demo",
            "- main.py\n",
            {"main.py": "print('hi')", "README.md": "# Demo"},
        )
        assert 'repository "demo"' in prompt
        assert "```\n- main.py\n\n```" in prompt
        assert "--- main.py ---\n```\nprint('hi')\n```" in prompt
        assert "--- README.md ---\n```\n# Demo\n```" in prompt
        assert "Identify what type of application this is" in prompt
        assert "deployment requirements" in prompt

    def test_manual_prompt_embeds_analysis(self):
        prompt = build_manual_prompt("demo", "- main.py\n", "It is a CLI tool.")
        assert 'repository "demo"' in prompt
        assert "It is a CLI tool." in prompt
        for section in ("Installation", "quickstart", "features", "workflows", "Troubleshooting"):
            assert section in prompt


class TestExplanationPrompt:
    def test_auto_language(self):
        system, prompt, temperature = explanation_prompt("x = 1", "auto")
        assert "detect the programming language" in prompt
        assert "```\nx = 1\n```" in prompt
        assert temperature == 0.3
        assert "intermediate programmers" in system

    def test_explicit_language_fences_code(self):
        _, prompt, _ = explanation_prompt("x = 1", "python", "advanced")
        assert "following python code" in prompt
        assert "```python\nx = 1\n```" in prompt
        assert "Technical debt identification" in prompt

    def test_basic_uses_warmer_temperature(self):
        system, prompt, temperature = explanation_prompt("x = 1", "python", "basic")
        assert temperature == 0.7
        assert "beginners" in system
        assert "analogies" in prompt

    def test_unknown_detail_level(self):
        with pytest.raises(ValueError):
            explanation_prompt("x = 1", "python", "expert")


def test_generation_prompt():
    prompt = generation_prompt("reverse a string", "go")
    assert "Please write go code" in prompt
    assert "Description: reverse a string" in prompt
