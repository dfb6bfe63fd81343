"""
Prompt templates for the decision assistant.

Each builder returns a plain string. Structured-extraction prompts describe
the task only; ``BaseLLMClient.extract_structured`` appends the JSON schema.
"""

from __future__ import annotations

from typing import Optional, Sequence

from decision_journal.models.ai import ExtractedDeepOption
from decision_journal.models.decision import Decision, Option
from decision_journal.taxonomy.decision_taxonomy import DecisionType


def extract_options_prompt(user_input: str) -> str:
    return f"""Extract decision information from this text: "{user_input}"

Identify the main decision to be made and create a structured representation with these elements:
1. A clear, concise title for the decision
2. The most appropriate category
3. Each option being considered (minimum 2 options)
4. For EACH option, identify at least one pro and at least one con
5. Any contextual factors mentioned

IMPORTANT INSTRUCTIONS:
- Extract 2-4 distinct options maximum (do not create more)
- Always include at least one pro and one con for EVERY option
- If pros/cons aren't explicitly stated, infer reasonable ones based on the context
- Keep option text brief and clear (under 10 words when possible)
- For ambiguous input, make reasonable inferences but don't invent specific details
- If the user mentions their preference, include it as a pro for that option"""


def recommendation_prompt(
    title: str,
    options: Sequence[Option],
    context_factors: Sequence[str] = (),
    gut_feeling: Optional[str] = None,
) -> str:
    lines = [f"Help me decide: {title}", "", "Options:"]
    for i, option in enumerate(options, start=1):
        lines.append(f"{i}. {option.text}")
        if option.pros:
            lines.append(f"   Pros: {', '.join(option.pros)}")
        if option.cons:
            lines.append(f"   Cons: {', '.join(option.cons)}")
    if context_factors:
        lines += ["", f"Contextual factors: {', '.join(context_factors)}"]
    if gut_feeling:
        lines += ["", f"My gut feeling: {gut_feeling}"]
    lines += [
        "",
        "Please recommend the best option and explain your reasoning in a concise way. "
        "If there's a clear choice that aligns with my values or gut feeling, emphasize that.",
    ]
    return "\n".join(lines)


def recommendation_extraction_prompt(analysis: str, option_texts: Sequence[str]) -> str:
    numbered = "\n".join(f"{i}. {text}" for i, text in enumerate(option_texts, start=1))
    return f"""Based on this analysis, extract just the recommended option and reasoning:

{analysis}

Be very concise. The recommended_option MUST match one of these options exactly (copy and paste, don't paraphrase):
{numbered}

Return ONLY one of these exact option texts as the recommendation."""


def deep_extraction_prompt(user_input: str) -> str:
    return f"""You are helping someone think through an important life decision. Extract structured decision information from their description.

User's input: "{user_input}"

IMPORTANT INSTRUCTIONS:
1. Extract or infer the main decision being considered
2. Identify 2-4 distinct options (if only one is mentioned, suggest logical alternatives)
3. For each option, provide at least 2 pros and 2 cons
4. Identify personal values mentioned or implied (e.g., family, career growth, security, freedom, health)
5. Estimate values alignment for each option based on the context (0-100)
6. Identify any stakeholders (people affected)
7. Note any cognitive biases that might be influencing the decision (e.g., sunk cost fallacy, status quo bias)
8. Capture the emotional context if mentioned

Be thorough but realistic. Don't invent specific details that weren't mentioned, but do make reasonable inferences based on the context."""


def deep_analysis_prompt(
    title: str,
    options: Sequence[ExtractedDeepOption],
    personal_values: Sequence[str],
    emotional_context: Optional[str] = None,
    stakeholders: Sequence[str] = (),
    potential_biases: Sequence[str] = (),
) -> str:
    options_text = "\n\n".join(
        f"Option {i}: {o.text}\n"
        f"  Pros: {', '.join(o.pros)}\n"
        f"  Cons: {', '.join(o.cons)}\n"
        f"  Values Alignment: {o.values_alignment:g}%"
        for i, o in enumerate(options, start=1)
    )
    context = []
    if emotional_context:
        context.append(f"EMOTIONAL CONTEXT: {emotional_context}")
    if stakeholders:
        context.append(f"STAKEHOLDERS AFFECTED: {', '.join(stakeholders)}")
    if potential_biases:
        context.append(f"POTENTIAL BIASES TO CONSIDER: {', '.join(potential_biases)}")
    context_text = "\n\n".join(context)

    return f"""You are a thoughtful decision coach helping someone with an important life decision.

DECISION: {title}

OPTIONS:
{options_text}

PERSONAL VALUES: {', '.join(personal_values)}

{context_text}

Please provide a comprehensive analysis with:

1. RECOMMENDATION: Which option do you recommend and why? (Be clear and direct)

2. REASONING: A detailed explanation (2-3 paragraphs) of why this option best aligns with their values and circumstances. Consider the pros/cons, values alignment, and stakeholder impact.

3. KEY_INSIGHTS: 3-4 important insights they should consider (bullet points)

4. CAUTIONARY_NOTES: 2-3 things to watch out for or potential pitfalls (bullet points)

5. NEXT_STEPS: 3-4 concrete actions they can take to move forward with this decision (bullet points)

Format your response exactly as:
RECOMMENDATION: [option name]
REASONING: [detailed analysis]
KEY_INSIGHTS:
- [insight 1]
- [insight 2]
- [insight 3]
CAUTIONARY_NOTES:
- [note 1]
- [note 2]
NEXT_STEPS:
- [step 1]
- [step 2]
- [step 3]"""


def follow_up_questions_prompt(title: str, option_texts: Sequence[str], current_context: str) -> str:
    return f"""You are helping someone think through an important decision.

Decision: {title}
Options: {', '.join(option_texts)}
Current context: {current_context}

Generate 3-4 thoughtful follow-up questions that would help them think more deeply about this decision. Questions should:
- Help uncover hidden assumptions
- Explore values and priorities
- Consider long-term consequences
- Address potential blind spots

Format as a numbered list."""


def reflection_prompts_prompt(decision: Decision) -> str:
    count = 3 if decision.type == DecisionType.QUICK else 5
    lines = [
        f"Decision title: {decision.title}",
        f"Category: {decision.category}",
        f"Description: {decision.description or 'Not provided'}",
    ]
    if decision.type == DecisionType.QUICK:
        lines.append("Type: Quick Decision")
        if decision.options:
            lines.append("Options considered:")
            for i, option in enumerate(decision.options, start=1):
                suffix = " (Selected)" if option.selected else ""
                lines.append(f"{i}. {option.text}{suffix}")
        if decision.recommendation:
            lines.append(f"Recommendation: {decision.recommendation}")
    else:
        lines.append("Type: Deep Decision")
    decision_context = "\n".join(lines)

    return f"""Create {count} thoughtful reflection prompts for a user who has made the following decision:

{decision_context}

Generate questions that will help them critically evaluate their decision process, outcomes, and learnings.
The prompts should be conversational, personal, and thought-provoking.
For quick decisions, focus on immediate outcomes and gut reactions.
Avoid generic questions - tailor them to this specific decision."""


def learnings_prompt(reflection_text: str, decision_category: str) -> str:
    return f"""Analyze this reflection on a {decision_category} decision and extract learnings:

"{reflection_text}"

Determine the person's satisfaction level, whether they would repeat the decision, and extract 1-3 key learnings.
Each learning should be categorized as an insight, preference, pattern, or improvement.
Also extract any notes about how they might improve similar decisions in the future.
Be faithful to what's actually in the text - don't invent details that aren't there."""


def insights_prompt(reflection_text: str, decision_title: str, decision_category: str) -> str:
    return f"""As a decision coach, read this reflection on a {decision_category} decision titled "{decision_title}" and provide 2-3 insightful observations that might help the person learn from this experience:

"{reflection_text}"

Your insights should be conversational, supportive, and focus on patterns, blind spots, or perspectives they might not have considered.
Each insight should be 1-2 sentences, written in second person ("you").
Don't repeat what they already know - add value by bringing new perspectives."""
