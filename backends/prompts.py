from __future__ import annotations  # Prompt construction for answering and judging turns

from textwrap import dedent
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from agents.age_profile import length_budget, profile_for
from agents.types import AgeBand, HistoryTurn

MAX_PROMPT_INTERESTS = 3

ANSWER_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{instructions}"),
        MessagesPlaceholder("history", optional=True),
        ("human", "{age_context}Question: {question}"),
    ]
)

EVALUATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{instructions}"),
        ("human", "{context}"),
    ]
)

EVALUATION_GUIDANCE = dedent(
    """
    ALWAYS say understood:true unless the reply is complete gibberish or has nothing to do with the conversation.
    ANY genuine attempt counts as success. Keep feedback to 1-2 short, warm words.
    Respond only with valid JSON: {"understood": true or false, "feedback": "...", "suggestion": null or "..."}
    """
).strip()


def coerce_history(history: Iterable[Any] | None) -> List[HistoryTurn]:
    """Accept HistoryTurn models or plain ``{"user", "ai"}`` mappings."""

    turns: List[HistoryTurn] = []
    for item in history or []:
        if isinstance(item, HistoryTurn):
            turns.append(item)
        elif isinstance(item, Mapping):
            turns.append(HistoryTurn(user=str(item.get("user", "")), ai=str(item.get("ai", ""))))
        else:
            raise TypeError("History turns must be HistoryTurn or mappings with user/ai keys")
    return turns


def system_instructions(
    band: AgeBand,
    *,
    is_first_turn: bool,
    turn_index: int = 0,
    interests: Sequence[str] = (),
) -> str:
    profile = profile_for(band)
    budget = length_budget(band, is_first_turn)
    picked = [item for item in interests if item][:MAX_PROMPT_INTERESTS]
    interest_line = ""
    if picked:
        interest_line = f"Child's interests: {', '.join(picked)}. Connect to these when relevant.\n\n"
    continuity = ""
    if turn_index > 0:
        continuity = f"You are {turn_index} exchange(s) into this conversation; build on what was already discussed.\n\n"

    return (
        f"You are an engaging conversationalist helping a {band} child (age {profile.age_range}) "
        "learn through curiosity.\n\n"
        f"{interest_line}{continuity}"
        "YOUR PERSONALITY:\n"
        f"- {profile.voice}\n"
        f"- {profile.style}\n"
        f"- {profile.engagement}\n"
        f"- Good topics to draw on: {profile.examples}\n\n"
        "CONVERSATION GOALS:\n"
        "1. Answer their question in an age-appropriate, engaging way\n"
        "2. Spark curiosity with interesting connections or facts\n"
        "3. End with ONE clear follow-up question that:\n"
        "   - Relates directly to what you just explained\n"
        "   - Has a reasonably clear answer (not too abstract)\n"
        "   - Encourages them to think and respond\n"
        "   - Shows you're building on the conversation\n\n"
        "FOLLOW-UP QUESTION STYLE FOR THIS AGE:\n"
        f"{profile.question_guidelines}\n"
        f'Example: "{profile.sample_follow_up}" ({profile.follow_up_examples})\n\n'
        "CRITICAL RULES:\n"
        f"- {budget.instruction}\n"
        "- Be enthusiastic and positive\n"
        "- Use age-appropriate vocabulary\n"
        "- Make learning feel like discovery, not a lesson\n"
        "- Your follow-up question should flow naturally from your explanation\n\n"
        "Remember: The child will answer your follow-up question next, so make it engaging "
        "and connected to what you just discussed!"
    )


def answer_messages(
    question: str,
    band: AgeBand,
    *,
    is_first_turn: bool,
    turn_index: int = 0,
    interests: Sequence[str] = (),
    history: Iterable[Any] | None = None,
    age: int | None = None,
) -> List[Dict[str, str]]:
    transcript: List[BaseMessage] = []
    for turn in coerce_history(history):
        transcript.append(HumanMessage(content=turn.user))
        transcript.append(AIMessage(content=turn.ai))
    prompt = ANSWER_PROMPT.format_messages(
        instructions=system_instructions(
            band,
            is_first_turn=is_first_turn,
            turn_index=turn_index,
            interests=interests,
        ),
        history=transcript,
        age_context=f"The child is {age} years old. " if age is not None else "",
        question=question.strip(),
    )
    return [message_dict(message) for message in prompt]


def evaluation_context(
    follow_up_question: str | None,
    prior_answer: str,
    child_reply: str,
    history: Iterable[Any] | None = None,
) -> str:
    lines = [
        "EVALUATION CONTEXT:",
        f'Your full response: "{prior_answer.strip()}"',
        f'Your follow-up question was: "{(follow_up_question or "Could not extract question").strip()}"',
        f'Child\'s response: "{child_reply.strip()}"',
    ]
    turns = coerce_history(history)
    if turns:
        lines.append("")
        lines.append("FULL CONVERSATION HISTORY:")
        for index, turn in enumerate(turns, start=1):
            lines.append(f'{index}. Child: "{turn.user}"')
            lines.append(f'   AI: "{turn.ai}"')
    lines.extend(
        [
            "",
            "TASK: Evaluate if the child engaged meaningfully with your follow-up question.",
            "",
            "IMPORTANT: The child's response should be evaluated as an answer to YOUR FOLLOW-UP QUESTION, "
            "not as a new question.",
            "",
            'EXAMPLE: If you asked "What would you ask plants?" and the child responds "do humans move really fast", '
            "that's a PERFECT answer (they're saying they'd ask plants about how humans move fast). "
            "Answers about something closely related to the follow-up also count.",
            "",
            "ALWAYS be generous - if it's even remotely related, say yes.",
        ]
    )
    return "\n".join(lines)


def evaluation_messages(
    follow_up_question: str | None,
    prior_answer: str,
    child_reply: str,
    history: Iterable[Any] | None = None,
) -> List[Dict[str, str]]:
    prompt = EVALUATION_PROMPT.format_messages(
        instructions=EVALUATION_GUIDANCE,
        context=evaluation_context(follow_up_question, prior_answer, child_reply, history),
    )
    return [message_dict(message) for message in prompt]


def message_dict(message: BaseMessage) -> Dict[str, str]:  # Map LangChain BaseMessage to role/content dict
    role = message.type
    if role == "human":
        role = "user"
    elif role == "ai":
        role = "assistant"
    content = message.content
    if not isinstance(content, str):
        content = str(content)
    return {"role": role, "content": content}


__all__ = [
    "ANSWER_PROMPT",
    "EVALUATION_GUIDANCE",
    "EVALUATION_PROMPT",
    "MAX_PROMPT_INTERESTS",
    "answer_messages",
    "coerce_history",
    "evaluation_context",
    "evaluation_messages",
    "message_dict",
    "system_instructions",
]
