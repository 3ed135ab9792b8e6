"""
Prompt templates and canonical phrases.

This module contains all the prompt templates used by the pipeline, keeping
them separate from the business logic for easier maintenance and editing.
The phrase sets the session state machine matches against live here too, so
transition logic never depends on free-form prompt wording.
"""

from typing import Dict, Optional

from ..config import InterviewLevel, Tone, LEVEL_INSTRUCTIONS, TONE_INSTRUCTIONS


# =============================================================================
# CANONICAL PHRASES
# =============================================================================

# Interviewer utterances that end the session (substring containment)
TERMINATION_PHRASES = (
    "면접을 종료하겠습니다",
    "This concludes the interview",
)

# Submitted by the UI when the per-turn timer runs out
TIME_EXCEEDED_MARKER = "(time exceeded)"

# Stands in for an empty answer when the transcript is sent to the model
NO_ANSWER_PLACEHOLDER = "(no answer)"

# Whole-answer silence markers (compared after trim + lowercase)
SILENCE_EXACT = frozenset({"", "pass", "패스", "...", "…", "모름", "skip"})

# Phrase markers (substring containment after lowercase)
SILENCE_CONTAINS = (
    "모르겠습니다",
    "모르겠어요",
    "기억안남",
    "기억 안 남",
    "시간 초과",
    "don't know",
    "dont know",
    "no idea",
    "can't remember",
    TIME_EXCEEDED_MARKER,
)


def termination_phrase(language: str) -> str:
    """The phrase the interviewer is instructed to use when it is satisfied."""
    return TERMINATION_PHRASES[0] if language.lower().startswith("ko") else TERMINATION_PHRASES[1]


def _lang_key(language: str) -> str:
    return "ko" if language.lower().startswith("ko") else "en"


class InterviewPrompts:
    """Collection of all pipeline prompts."""

    @staticmethod
    def analysis_prompt(
        level: InterviewLevel,
        tone: Tone,
        time_limit_seconds: Optional[int],
        talent_ideal: str,
        jd_context: str,
        doc_type: str,
        candidate_document: str,
        code_context: str,
        language: str,
    ) -> str:
        """Fact-check prompt comparing candidate claims with code evidence."""
        time_limit_rule = (
            f'**TIME LIMIT MODE**: Every generated question MUST begin by stating that it must be answered within {time_limit_seconds} seconds.'
            if time_limit_seconds else ""
        )
        return f"""
You are a strict Technical Lead Interviewer (FactCheck AI).
Analyze the Candidate's Documents against the Codebase and Job Description (JD).

**STRICT LANGUAGE RULE**: Output strictly in **{language}** (except code identifiers).

**Configuration**:
1. **Target Level**: {level.value}
2. **Level Instruction**: {LEVEL_INSTRUCTIONS[level]}
3. **Writing Style**: {TONE_INSTRUCTIONS[tone]} The style affects wording only. It must never change any score.
4. {time_limit_rule}

**Context**:
- **Company Ideal**: {talent_ideal or "Not specified"}
- **Job Description**: {jd_context}
- **Candidate Document**: {doc_type}

**TASK 1: Evaluate Metrics (0-100)**:
Score based on the quality and depth of the code evidence, not by counting suspicions.
1. **architecture**: System design, directory structure, separation of concerns.
2. **codeQuality**: Clean code, naming, modularity, dead code presence.
3. **problemSolving**: Logic complexity, algorithm usage, edge case handling.
4. **techProficiency**: Depth of library/framework usage beyond boilerplate.
5. **projectCompleteness**: Runnable state, README quality, tests, CI/CD.
6. **consistency**: Does the code actually contain what the document claims?
7. **growthPotential**: Modern practices, challenging attempts, learning evidence.

**TASK 2: Fact Check Items**:
- Identify specific claims in the candidate document.
- Assign a verdict: VERIFIED, EXAGGERATED, MISSING or UNCERTAIN.
- For each claim write a pressure question grounded in missing evidence or exaggeration.

**TASK 3: Summary**:
- **jdAnalysis**: Narrative summary of the company's core requirements. If the JD is missing or unreadable, say that standard {level.value} expectations were applied instead. Never summarize the candidate document here.
- **alignmentAnalysis**: Fact check, exaggeration, code evidence, stack consistency, depth vs level, job fit.
- **practicalTips**: 3 expected questions, 3 improvements, 3 answer tips.

**ML/Research Repositories**: If the code is ML (PyTorch, TensorFlow, sklearn), check model definitions, the training loop, data pipeline, visible hyperparameters and whether imported libraries are justified.

[Context: Job Description (Requirements)]
{jd_context}

[Context: Candidate Document (Claims)]
{candidate_document}

[Context: Codebase Implementation (Evidence)]
(Note: Pay close attention to comments and documentation in the code to understand intent)
{code_context}
        """.strip()

    @staticmethod
    def jd_context(jd_type: str, job_description: str, level: InterviewLevel) -> str:
        """Describe the JD for the analysis prompt."""
        if jd_type == "url":
            return (f"[JD URL]: {job_description}\n(Warning: If you cannot access this URL, assume standard "
                    f"requirements for a '{level.value}' role. DO NOT summarize the Candidate Document as the JD.)")
        if jd_type == "text":
            return job_description or "Not provided."
        return "Provided as an attached file."

    @staticmethod
    def interviewer_system_prompt(
        topic: str,
        resume_claim: str,
        code_observation: str,
        verdict: str,
        level: InterviewLevel,
        time_limit_seconds: Optional[int],
        tone: Tone,
        language: str,
    ) -> str:
        """System prompt for one interviewer turn."""
        time_limit = f"{time_limit_seconds} seconds" if time_limit_seconds else "None"
        time_rule = (
            f"A {time_limit_seconds}s time limit is active. If the answer is long-winded, remind them that real "
            f"interviews are timed and ask for the core point only."
            if time_limit_seconds else "No time limit is active."
        )
        return f"""
You are a sharp, skeptical Technical Interviewer.
The candidate is answering your question about: "{resume_claim}".

**Context**:
- Topic: {topic}
- Code Reality: {code_observation}
- Verdict: {verdict}
- Candidate Level: {level.value}
- Time Limit: {time_limit}
- Style: {TONE_INSTRUCTIONS[tone]}

**Rules**:
1. **Language**: Respond strictly in {language}.
2. **Level Adjustment**: For intern/junior be encouraging but verify basics. For mid3/mid5 be critical and ask for architectural reasons and trade-offs.
3. **Time Limit**: {time_rule}
4. **Flow**:
   - If the explanation matches the code, acknowledge it and end with exactly: "{termination_phrase(language)}"
   - If it is vague, press for concrete details.
   - Ask one question at a time.
        """.strip()

    @staticmethod
    def feedback_prompt(
        topic: str,
        level: InterviewLevel,
        tone: Tone,
        transcript: str,
        language: str,
    ) -> str:
        """Prompt for the post-interview feedback report."""
        return f"""
Analyze the interview transcript and generate a detailed Feedback Report.

**Target Level**: {level.value}
**Writing Style**: {TONE_INSTRUCTIONS[tone]} The style affects wording only. It must never change any score.

**Rules**:
1. **Language**: {language} only.
2. **Scoring**: Score the whole transcript holistically.
   - logicScore (0-5): Was the reasoning sound and consistent with the code?
   - solutionScore (0-5): Were concrete solutions, trade-offs and alternatives offered?
   - defenseScore (0-10): logicScore + solutionScore.
   - Turns where the candidate stayed silent, passed or ran out of time earn nothing.
3. **Evaluation Criteria**:
   - Did they answer within the expectations of a {level.value}?
   - Did they prove their contribution?
4. **Lists**: 3 items each for positiveFeedback, constructiveFeedback and actionItems.

**Context**:
- Topic: {topic}
- Conversation:
{transcript}
        """.strip()

    @staticmethod
    def fallback_messages() -> Dict[str, Dict[str, Dict[Tone, str]]]:
        """Canned interviewer replies used when the candidate gives no content."""
        return {
            "time_exceeded": {
                "ko": {
                    Tone.NEUTRAL: "시간이 종료되었습니다. 다음 질문으로 넘어가겠습니다.",
                    Tone.DIRECT: "시간이 종료되었습니다. 아쉽지만, 다음 질문에서 만회해봅시다! 다음 질문으로 넘어가겠습니다.",
                    Tone.ANALYTICAL: "시간이 종료되었습니다. 실전에서는 시간 관리도 실력입니다. 집중하세요. 다음 질문으로 넘어가겠습니다.",
                },
                "en": {
                    Tone.NEUTRAL: "Time is up. Let's move on to the next question.",
                    Tone.DIRECT: "Time is up. No worries, make up for it on the next one! Moving on.",
                    Tone.ANALYTICAL: "Time is up. In a real interview, time management is part of the skill. Stay focused. Moving on.",
                },
            },
            "voluntary": {
                "ko": {
                    Tone.NEUTRAL: "괜찮습니다. 다른 질문을 드려볼까요?",
                    Tone.DIRECT: "괜찮습니다. 긴장하지 말고 편하게 이야기해보세요. 다른 질문을 드려볼까요?",
                    Tone.ANALYTICAL: "괜찮습니다. 답변이 어렵다면 솔직하게 말하고 다음으로 넘어가도 좋습니다. 다른 질문을 드려볼까요?",
                },
                "en": {
                    Tone.NEUTRAL: "That's fine. Shall I try a different question?",
                    Tone.DIRECT: "That's okay, relax and just talk it through. Shall I try a different question?",
                    Tone.ANALYTICAL: "That's fine. If it's hard to answer, say so honestly and we can move on. Shall I try a different question?",
                },
            },
        }

    @staticmethod
    def silence_response(time_exceeded: bool, tone: Tone, language: str) -> str:
        """Deterministic interviewer reply to a silence/refusal marker."""
        kind = "time_exceeded" if time_exceeded else "voluntary"
        return InterviewPrompts.fallback_messages()[kind][_lang_key(language)][tone]


def is_silence(text: str) -> bool:
    """Whether a submission carries no technical content."""
    normalized = (text or "").strip().lower()
    if normalized in SILENCE_EXACT:
        return True
    return any(marker in normalized for marker in SILENCE_CONTAINS)


def is_termination(text: str) -> bool:
    """Whether an interviewer turn contains a termination phrase."""
    return any(phrase in (text or "") for phrase in TERMINATION_PHRASES)
