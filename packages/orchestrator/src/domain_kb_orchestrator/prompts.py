"""Prompt templates for answer synthesis."""

from __future__ import annotations

from typing import Optional

SYSTEM_PROMPT = (
    "You are a domain expert assistant. Provide accurate, specific answers "
    "and say clearly when you do not know."
)

NO_KB_CONTENT = "No knowledge base content available"

GROUNDED_PROMPT_TEMPLATE = """Answer the following question based on the provided knowledge base content.

Question: {question}

Knowledge Base Content:
{kb_content}

Instructions:
- Answer the specific question asked, using information from the knowledge base
- If the answer is directly available in the knowledge base, provide it clearly
- If the knowledge base does not contain relevant information for this question, say so clearly
- Be direct and specific; do not give broad overviews unless asked"""

FALLBACK_PROMPT_TEMPLATE = """Answer the following question concisely.

Question: {question}"""


def format_grounded_prompt(question: str, snippet: Optional[str]) -> str:
    """Primary prompt embedding the KB snippet (or a placeholder)."""
    return GROUNDED_PROMPT_TEMPLATE.format(
        question=question,
        kb_content=snippet if snippet else NO_KB_CONTENT,
    )


def format_fallback_prompt(question: str) -> str:
    """Reduced prompt used once after the primary call fails."""
    return FALLBACK_PROMPT_TEMPLATE.format(question=question)
