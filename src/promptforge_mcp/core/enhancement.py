#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2025 PromptForge Contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Prompt enhancement engine for PromptForge.

Applies a pattern's enhancements, in order, to an accumulating prompt
buffer, then runs the optional chain-of-thought and output-format stages.
Every change that actually alters the text is reported as a Modification.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .patterns import Enhancement, EnhancementKind, Pattern

logger = logging.getLogger(__name__)

# Recognized request-context keys and their labels, in render order
CONTEXT_LABELS: dict[str, str] = {
    "company": "Company",
    "industry": "Industry",
    "audience": "Target Audience",
    "tone": "Tone",
    "goals": "Goals",
}

DEFAULT_DESCRIPTIONS: dict[EnhancementKind, str] = {
    EnhancementKind.ROLE: "Added expert role context",
    EnhancementKind.CONTEXT: "Added business context",
    EnhancementKind.FORMAT: "Added output structure guidance",
    EnhancementKind.CONSTRAINT: "Added quality constraints",
}

OUTPUT_FORMATS: dict[str, str] = {
    "json": "Format your entire response as valid JSON.",
    "xml": "Format your entire response as well-formed XML.",
    "markdown": "Format your response in Markdown with clear headings.",
    "html": "Format your response as semantic HTML.",
    "list": "Present your response as a concise bulleted list.",
    "table": "Present your response as a table with clearly labeled columns.",
    "code": "Respond with code only, in a single fenced code block.",
}

COT_PREAMBLE = "Let's approach this step by step."
COT_POSTAMBLE = (
    "Before answering, work through the problem systematically:\n"
    "1. Identify the core question and constraints\n"
    "2. Reason through each step and state your assumptions\n"
    "3. Check the reasoning for gaps or errors\n"
    "Then give your final answer."
)

_ROLE_MARKER = "you are"


@dataclass(frozen=True)
class Modification:
    """One entry in the modification audit trail"""

    type: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "description": self.description}


@dataclass
class EnhancementOutcome:
    optimized: str
    modifications: list[Modification] = field(default_factory=list)


@dataclass
class _PromptBuffer:
    """
    Prompt under construction.

    Sections render as: lead blocks, the request, guidance blocks, then
    constraints. The request is labelled "Request:" once anything other
    than role text surrounds it.
    """

    request: str
    lead: list[str] = field(default_factory=list)
    guidance: list[str] = field(default_factory=list)
    constraints: list[str] = field(default_factory=list)
    labelled: bool = False

    def render(self) -> str:
        request = f"Request: {self.request}" if self.labelled else self.request
        return "\n\n".join([*self.lead, request, *self.guidance, *self.constraints])


class EnhancementEngine:
    """Deterministically applies pattern enhancements to a prompt"""

    def apply(
        self,
        prompt: str,
        pattern: Pattern,
        request_context: Mapping[str, Any] | None = None,
        chain_of_thought: bool = False,
        desired_format: str | None = None,
    ) -> EnhancementOutcome:
        """
        Build the optimized prompt.

        Args:
            prompt: The original prompt
            pattern: Pattern whose enhancements are replayed in order
            request_context: Optional caller context (company, industry, ...)
            chain_of_thought: Wrap the result with step-by-step reasoning guidance
            desired_format: One of OUTPUT_FORMATS; unknown values are ignored

        Returns:
            EnhancementOutcome with the final text and the modifications applied
        """
        buffer = _PromptBuffer(request=prompt)
        modifications: list[Modification] = []

        for enhancement in pattern.enhancements:
            if self._apply_one(buffer, enhancement, request_context):
                modifications.append(self._describe(enhancement))
            else:
                logger.debug(f"Enhancement '{enhancement.type}' skipped for {pattern.domain}")

        optimized = buffer.render()

        if chain_of_thought:
            optimized = self.add_chain_of_thought(optimized)
            modifications.append(
                Modification("chain_of_thought", "Added step-by-step reasoning structure")
            )

        instruction = self.format_instruction(desired_format)
        if instruction:
            optimized = f"{optimized}\n\n{instruction}"
            modifications.append(
                Modification("output_format", f"Requested {desired_format.lower()} output")
            )

        return EnhancementOutcome(optimized=optimized, modifications=modifications)

    def _apply_one(
        self,
        buffer: _PromptBuffer,
        enhancement: Enhancement,
        request_context: Mapping[str, Any] | None,
    ) -> bool:
        """Apply one enhancement; returns False when it left the text unchanged"""
        kind = enhancement.kind

        if kind is EnhancementKind.ROLE:
            if _ROLE_MARKER in buffer.render().lower():
                return False
            buffer.lead.insert(0, enhancement.value)
            return True

        if kind is EnhancementKind.CONTEXT:
            block = self.render_context(request_context)
            if not block:
                return False
            buffer.lead.append(block)
            buffer.labelled = True
            return True

        if kind is EnhancementKind.CONSTRAINT:
            buffer.constraints.append(enhancement.value)
            buffer.labelled = True
            return True

        # FORMAT and every unrecognized type append trailing guidance
        buffer.guidance.append(enhancement.value)
        buffer.labelled = True
        return True

    @staticmethod
    def render_context(request_context: Mapping[str, Any] | None) -> str:
        """Render recognized context keys as a labelled block, or '' if none are present"""
        if not request_context:
            return ""
        lines = [
            f"{label}: {request_context[key]}"
            for key, label in CONTEXT_LABELS.items()
            if request_context.get(key) not in (None, "")
        ]
        if not lines:
            return ""
        return "Context:\n" + "\n".join(lines)

    @staticmethod
    def add_chain_of_thought(text: str) -> str:
        return f"{COT_PREAMBLE}\n\n{text}\n\n{COT_POSTAMBLE}"

    @staticmethod
    def format_instruction(desired_format: str | None) -> str | None:
        if not desired_format:
            return None
        return OUTPUT_FORMATS.get(desired_format.lower())

    @staticmethod
    def _describe(enhancement: Enhancement) -> Modification:
        description = enhancement.reason or DEFAULT_DESCRIPTIONS.get(
            enhancement.kind, f"Applied {enhancement.type} enhancement"
        )
        return Modification(enhancement.type, description)
