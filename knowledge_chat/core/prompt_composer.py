"""
System prompt composition.

The system instruction is modelled as typed parts rendered in a fixed order:
language directive, base instruction, context, context footer, closing
directive. The language directive is stated first and repeated last.

Dependencies: None (pure domain layer)
System role: Prompt assembly for the completion call
"""

from dataclasses import dataclass

LANGUAGE_DIRECTIVE = (
    "LANGUAGE RULE #1 (MANDATORY - READ THIS FIRST):\n"
    "YOU MUST respond in the EXACT SAME LANGUAGE as the user's LAST message.\n"
    "- User writes in Russian -> You respond in Russian\n"
    "- User writes in English -> You respond in English\n"
    "IGNORE the language of ALL previous messages. ONLY match the CURRENT message language."
)

CLOSING_DIRECTIVE = (
    "REMINDER - LANGUAGE RULE (CRITICAL):\n"
    "Match your response language to the user's CURRENT message language ONLY. "
    "This is mandatory."
)

DEFAULT_INSTRUCTION = (
    "You are a helpful AI assistant.\n\n"
    "CONTENT RULES:\n"
    "1. ALWAYS answer ONLY based on the knowledge base provided\n"
    "2. For general questions - give a BRIEF overview (2-3 sentences) using ONLY "
    "information from the knowledge base\n"
    "3. If specific information exists in the knowledge base - use it with exact details\n"
    "4. If information is not in the knowledge base - honestly say so and suggest "
    "contacting support\n"
    "5. DO NOT use general knowledge - ONLY the knowledge base provided"
)

NO_CONTEXT_INSTRUCTION = (
    "You are a helpful AI assistant.\n\n"
    "Unfortunately, there is no information in the knowledge base for the user's question. "
    "Tell the user honestly that you do not have this information. "
    "DO NOT answer from general knowledge.\n\n"
    "Please suggest contacting support for more information."
)

CONTEXT_FOOTER = "THE KNOWLEDGE BASE ABOVE IS THE ONLY SOURCE OF INFORMATION!"


@dataclass(frozen=True)
class SystemPrompt:
    """Typed parts of a system instruction."""

    language_directive: str
    base_instruction: str
    context: str = ""
    context_footer: str = ""
    closing_directive: str = ""

    def render(self) -> str:
        """Join the non-empty parts with blank lines, in declaration order."""
        parts = (
            self.language_directive,
            self.base_instruction,
            self.context,
            self.context_footer,
            self.closing_directive,
        )
        return "\n\n".join(part.strip() for part in parts if part and part.strip())


def build_system_prompt(context: str, custom_prompt: str | None = None) -> SystemPrompt:
    """
    Choose the parts of the system instruction.

    A client's custom prompt replaces the default instruction but still gets
    the retrieved context and both language directives. Without a custom
    prompt, the default instruction restricts answers to the context, or
    tells the model to admit the gap when there is none.

    Args:
        context: Paraphrased context block (may be empty)
        custom_prompt: Client-specific base instruction, if configured

    Returns:
        SystemPrompt ready to render
    """
    has_context = bool(context and context.strip())

    if custom_prompt and custom_prompt.strip():
        base_instruction = custom_prompt
        footer = ""
    elif has_context:
        base_instruction = DEFAULT_INSTRUCTION
        footer = CONTEXT_FOOTER
    else:
        base_instruction = NO_CONTEXT_INSTRUCTION
        footer = ""

    return SystemPrompt(
        language_directive=LANGUAGE_DIRECTIVE,
        base_instruction=base_instruction,
        context=context if has_context else "",
        context_footer=footer,
        closing_directive=CLOSING_DIRECTIVE,
    )


def compose_system_prompt(context: str, custom_prompt: str | None = None) -> str:
    """Build and render the system instruction in one call."""
    return build_system_prompt(context, custom_prompt).render()
