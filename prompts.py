"""Conversation prompts sent to the video companion.

Edit wording here without touching the routes. ``build_conversation_prompt``
covers general and memory-focused calls; ``build_checkin_prompt`` covers the
emotional check-in flow.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------

COMPANION_INTRO = (
    "You are a gentle, cheerful, and familiar AI companion helping {name} with "
    "Alzheimer's recall beautiful life memories. Offer emotional support and ask "
    "reflective, lighthearted questions. "
)

CHECKIN_INTRO = (
    "You are a gentle, cheerful, and familiar AI companion conducting an emotional "
    "check-in with {name}, who has Alzheimer's. Offer emotional support and ask "
    "reflective, lighthearted questions. "
)

CONVERSATION_CLOSING = (
    "Please speak warmly and naturally, as if you're a caring family member who knows "
    "them well. Ask gentle questions about their day, their feelings, and help them "
    "recall happy memories. Be patient, encouraging, and emotionally supportive."
)

CHECKIN_CLOSING = (
    "Remember to be emotionally supportive, non-judgmental, and create a safe space for "
    "them to share their feelings. Use open-ended questions, validate their emotions, and "
    "offer gentle encouragement. If they seem reluctant to talk about something, don't "
    "push - simply let them know you're there for them."
)

# ---------------------------------------------------------------------------
# Emotional check-in guidance
# ---------------------------------------------------------------------------

FOCUS_GUIDANCE = {
    "mood": "Ask open-ended questions about how they're feeling today, what's on their mind, and if anything is bothering them.",
    "sleep": "Gently inquire about their sleep quality, whether they slept well, and if they feel rested.",
    "energy": "Ask about their energy levels, whether they feel tired or energetic, and how they're feeling physically.",
    "appetite": "Check in about their interest in food, whether they've been eating well, and if they've enjoyed their meals.",
    "social": "Ask about connections with family and friends, recent visits or calls, and how they're feeling about social interactions.",
    "activities": "Inquire about their daily activities, hobbies they've enjoyed, and things that have brought them joy recently.",
    "comfort": "Gently ask about any physical discomfort, pain, or how they're feeling in their body.",
    "memory": "Check in about their mental clarity, if they've been remembering things well, and how they're feeling cognitively.",
}

URGENCY_GUIDANCE = {
    "gentle": "Please be extra patient and sensitive in your approach. Take your time with questions and allow for pauses. ",
    "watch_closely": "Please be particularly attentive to their responses and emotional state. Watch for any signs of distress or concerning changes. ",
    "normal": "Maintain a warm, caring tone throughout the conversation. ",
}


def _profile_context(patient: dict) -> str:
    text = ""
    traits = patient.get("personality_traits") or []
    if traits:
        text += f"They are known for being {', '.join(traits)}. "

    relationships = patient.get("family_relationships") or {}
    family = ", ".join(f"{name} is their {relation}" for relation, name in relationships.items())
    if family:
        text += f"Important family members include: {family}. "
    return text


def _memory_anchor(memory: dict) -> str:
    return memory.get("location") or str(memory.get("date_taken") or "")


def build_conversation_prompt(
    patient: dict,
    memories: list[dict],
    selected_memory: dict | None = None,
) -> str:
    """Prompt for a general or memory-focused conversation."""
    prompt = COMPANION_INTRO.format(name=patient.get("preferred_name", "your friend"))
    prompt += _profile_context(patient)

    if selected_memory:
        prompt += f"Today's conversation should focus on a special memory from {selected_memory.get('date_taken')}"
        if selected_memory.get("location"):
            prompt += f" at {selected_memory['location']}"
        prompt += f". {selected_memory.get('caption') or 'This was a meaningful moment in their life.'}"
        people = selected_memory.get("people_involved") or []
        if people:
            prompt += f" People who were there included: {', '.join(people)}."

    anchors = [a for a in (_memory_anchor(m) for m in (memories or [])[:3]) if a]
    if anchors:
        prompt += f" Other cherished memories include moments from {', '.join(anchors)}."

    return f"{prompt} {CONVERSATION_CLOSING}"


def build_checkin_prompt(patient: dict, checkin: dict, memories: list[dict]) -> str:
    """Prompt for an emotional check-in.

    ``checkin`` carries focus_areas, custom_message and urgency_level.
    """
    prompt = CHECKIN_INTRO.format(name=patient.get("preferred_name", "your friend"))
    prompt += _profile_context(patient)

    urgency = checkin.get("urgency_level") or "normal"
    prompt += URGENCY_GUIDANCE.get(urgency, URGENCY_GUIDANCE["normal"])

    focus_areas = checkin.get("focus_areas") or []
    prompt += f"Today's check-in should gently explore these areas: {', '.join(focus_areas)}. "

    custom = (checkin.get("custom_message") or "").strip()
    if custom:
        prompt += (
            f'The caregiver has shared this important context: "{custom}". '
            "Please weave this information naturally into your conversation. "
        )

    guidance = " ".join(FOCUS_GUIDANCE[a] for a in focus_areas if a in FOCUS_GUIDANCE)
    if guidance:
        prompt += f"Conversation guidance: {guidance} "

    anchors = [a for a in (_memory_anchor(m) for m in (memories or [])[:2]) if a]
    if anchors:
        prompt += (
            f"You can reference their cherished memories from {' and '.join(anchors)} "
            "to help them feel comfortable and connected. "
        )

    return prompt + CHECKIN_CLOSING
