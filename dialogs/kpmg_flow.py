from __future__ import annotations

from typing import Any, Optional, Tuple

from localization import StringResource

from .cards import CardRenderer, CardTemplate
from .messages import Send, card_activity, message_activity
from .state import (
    KB_SCORE_THRESHOLD,
    KB_TOP,
    KPMG_ANSWER_MIN_INTENT_SCORE,
    PIVOT_ORGANIZATIONS,
    QUESTION_TYPE_CHOICES,
    QUESTION_TYPES,
    DialogId,
    DialogState,
    FrameState,
    Intent,
    PromptKind,
)
from .waterfall import StepContext


class KpmgCareerDialog:
    """Question and answer loop for KPMG careers.

    The user picks a question category once; each answered question restarts
    the dialog with that category so only the question is asked again.
    """

    dialog_id = DialogId.KPMG.value

    def __init__(
        self,
        recognizer: Any,
        knowledge_base: Any,
        strings: StringResource,
        cards: CardRenderer,
    ) -> None:
        self.recognizer = recognizer
        self.knowledge_base = knowledge_base
        self.strings = strings
        self.cards = cards

    @property
    def classifier_ready(self) -> bool:
        return self.recognizer is not None and self.recognizer.is_configured

    def recognize_question_type(self, text: str, send: Send) -> Tuple[bool, Optional[str]]:
        if self.classifier_ready:
            value = (self.recognizer.classify(text).question_type or "").lower()
            if value in QUESTION_TYPES:
                return True, value
            return False, None

        value = QUESTION_TYPE_CHOICES.get((text or "").strip().lower())
        return value is not None, value

    def question_type_step(self, state: DialogState) -> DialogState:
        ctx = StepContext(state, self.dialog_id)
        ctx.enter(FrameState.AWAITING_QUESTION_TYPE)

        if ctx.options is None:
            return ctx.prompt(
                PromptKind.QUESTION_TYPE,
                card_activity(self.cards.render(CardTemplate.KPMG_CAREER)),
                retry=card_activity(self.cards.render(CardTemplate.KPMG_CAREER_RETRY)),
            )
        return ctx.next(ctx.options)

    def store_question_type_step(self, state: DialogState) -> DialogState:
        ctx = StepContext(state, self.dialog_id)
        question_type = str(ctx.result or "")
        if not question_type:
            return ctx.replace_dialog(self.dialog_id, None)

        ctx.enter(FrameState.AWAITING_QUESTION)
        ctx.values["question_type"] = question_type
        ctx.member.question_type = question_type
        return ctx.prompt(
            PromptKind.QUESTION,
            message_activity(self.strings.prompt_question),
            retry=message_activity(self.strings.reprompt_question),
        )

    def answer_step(self, state: DialogState) -> DialogState:
        ctx = StepContext(state, self.dialog_id)
        question = str(ctx.result or "")
        ctx.send_typing()

        if self.classifier_ready:
            advice = self.recognizer.classify(question, KPMG_ANSWER_MIN_INTENT_SCORE)
            intent = advice.intent

            if intent == Intent.FINISH:
                return ctx.end_dialog()

            if intent == Intent.CAREER_QUESTION_TYPE:
                organization = advice.organization
                if organization in PIVOT_ORGANIZATIONS:
                    return ctx.end_dialog(organization.value)

                if advice.question_type is None:
                    ctx.values.pop("question_type", None)
                else:
                    ctx.values["question_type"] = advice.question_type

        question_type = ctx.values.get("question_type")
        ctx.member.question_type = question_type

        answer = None
        if self.knowledge_base is not None:
            results = self.knowledge_base.query(
                question,
                top=KB_TOP,
                score_threshold=KB_SCORE_THRESHOLD,
                category=question_type,
            )
            if results:
                answer = results[0].answer

        ctx.send_text(answer if answer is not None else self.strings.error_help_not_found)
        return ctx.replace_dialog(self.dialog_id, question_type)
