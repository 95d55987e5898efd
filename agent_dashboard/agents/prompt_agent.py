"""
Prompt template agent: fills a named template and sends it to the LLM.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from agent_dashboard.agents.ai_agent import AIAgent
from agent_dashboard.errors import InvalidInput

TEMPLATE_SYSTEM_PROMPT = (
    "You are a helpful assistant specialized in the requested task. "
    "Provide high-quality, detailed responses."
)


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    template: str
    variables: Sequence[str]


BUILTIN_TEMPLATES: Dict[str, PromptTemplate] = {
    "summarize": PromptTemplate(
        name="Summarization",
        template="Summarize the following text in a concise manner:\n\n{text}\n\nSummary:",
        variables=("text",),
    ),
    "analyze": PromptTemplate(
        name="Analysis",
        template="Analyze the following content and provide key insights:\n\n{content}\n\nAnalysis:",
        variables=("content",),
    ),
    "translate": PromptTemplate(
        name="Translation",
        template="Translate the following text to {language}:\n\n{text}\n\nTranslation:",
        variables=("text", "language"),
    ),
    "codeReview": PromptTemplate(
        name="Code Review",
        template=(
            "Review the following code and provide feedback on:\n"
            "1. Code quality\n2. Best practices\n3. Potential improvements\n\n"
            "Code:\n{code}\n\nReview:"
        ),
        variables=("code",),
    ),
    "brainstorm": PromptTemplate(
        name="Brainstorming",
        template="Generate creative ideas for the following topic:\n\n{topic}\n\nProvide at least 5 innovative ideas.",
        variables=("topic",),
    ),
    "explain": PromptTemplate(
        name="Explanation",
        template=(
            "Explain the following concept in simple terms that a beginner can understand:\n\n"
            "{concept}\n\nExplanation:"
        ),
        variables=("concept",),
    ),
}


class PromptAgent:
    def __init__(self, ai_agent: AIAgent, templates: Mapping[str, PromptTemplate] | None = None) -> None:
        self.ai_agent = ai_agent
        self.templates: Dict[str, PromptTemplate] = dict(BUILTIN_TEMPLATES if templates is None else templates)

    def list_templates(self) -> List[str]:
        return list(self.templates)

    def get_template(self, template_name: str) -> PromptTemplate | None:
        return self.templates.get(template_name)

    def add_template(self, name: str, template: str, variables: Sequence[str]) -> PromptTemplate:
        if not name or not template:
            raise InvalidInput("Template name and text are required")
        created = PromptTemplate(name=name, template=template, variables=tuple(variables))
        self.templates[name] = created
        return created

    def format_prompt(self, template_name: str, variables: Mapping[str, str]) -> str:
        template = self.templates.get(template_name)
        if template is None:
            raise InvalidInput(f'Template "{template_name}" not found')

        prompt = template.template
        for variable in template.variables:
            if variable not in variables:
                raise InvalidInput(f"Missing variable: {variable}")
            prompt = prompt.replace("{" + variable + "}", str(variables[variable]))
        return prompt

    async def run(self, template_name: str, variables: Mapping[str, str]) -> str:
        prompt = self.format_prompt(template_name, variables)
        return await self.ai_agent.chat_with_system_prompt(TEMPLATE_SYSTEM_PROMPT, prompt)


__all__ = ["PromptAgent", "PromptTemplate", "BUILTIN_TEMPLATES"]
