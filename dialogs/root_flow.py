from __future__ import annotations

from typing import Any, Optional, Tuple

from localization import StringResource

from .cards import CardRenderer, CardTemplate
from .messages import Send, card_activity, message_activity, typing_activity
from .state import (
    SUPPORTED_ORGANIZATIONS,
    DialogId,
    DialogState,
    FrameState,
    Intent,
    Organization,
    PromptKind,
)
from .waterfall import StepContext


class RootDialog:
    """Top level menu: greet, pick an organization, delegate, resume."""

    dialog_id = DialogId.ROOT.value

    def __init__(self, recognizer: Any, strings: StringResource, cards: CardRenderer) -> None:
        self.recognizer = recognizer
        self.strings = strings
        self.cards = cards

    @property
    def classifier_ready(self) -> bool:
        return self.recognizer is not None and self.recognizer.is_configured

    def recognize_menu_choice(self, text: str, send: Send) -> Tuple[bool, Optional[str]]:
        if self.classifier_ready:
            send(typing_activity())
            value = self.recognizer.classify(text).organization
        else:
            value = Organization.parse(text)

        if value in SUPPORTED_ORGANIZATIONS:
            return True, value.value
        return False, None

    def _run_prompt(self, ctx: StepContext) -> DialogState:
        return ctx.prompt(
            PromptKind.MENU,
            card_activity(self.cards.render(CardTemplate.MENU)),
            retry=card_activity(self.cards.render(CardTemplate.MENU_RETRY)),
        )

    def _greet(self, ctx: StepContext) -> None:
        ctx.send_text(self.strings.response_greeting(ctx.user_name))
        ctx.member.was_greeted = True

    def menu_step(self, state: DialogState) -> DialogState:
        ctx = StepContext(state, self.dialog_id)
        ctx.enter(FrameState.AWAITING_MENU_CHOICE)

        if not self.classifier_ready:
            if not ctx.member.was_greeted:
                self._greet(ctx)
            return self._run_prompt(ctx)

        # Restarted with an organization handed back by a finished step.
        if ctx.options is not None:
            seeded = Organization.parse(ctx.options)
            if seeded in SUPPORTED_ORGANIZATIONS:
                ctx.member.company = seeded
                return ctx.next(seeded.value)
            return self._run_prompt(ctx)

        ctx.send_typing()
        advice = self.recognizer.classify(ctx.text)
        intent = advice.intent

        if intent == Intent.GREETING:
            if ctx.member.was_greeted:
                ctx.send_text(self.strings.response_welcome)
            else:
                self._greet(ctx)
            return self._run_prompt(ctx)

        if intent == Intent.CAREER_QUESTION_TYPE:
            organization = advice.organization
            ctx.values["organization"] = organization.value
            ctx.values["question_type"] = advice.question_type
            if organization == Organization.NOT_SUPPORTED:
                return self._run_prompt(ctx)
            return ctx.next(organization.value)

        ctx.send_text(self.strings.error_help_not_found)
        ctx.send_text(self.strings.response_end)
        return ctx.end_dialog()

    def delegate_step(self, state: DialogState) -> DialogState:
        ctx = StepContext(state, self.dialog_id)
        ctx.enter(FrameState.DELEGATED)
        choice = Organization.parse(ctx.result)

        if choice == Organization.KPMG:
            ctx.member.company = choice
            return ctx.begin_dialog(DialogId.KPMG.value, ctx.values.get("question_type"))

        if choice == Organization.EY:
            ctx.member.company = choice
            return ctx.prompt(PromptKind.TEXT, message_activity(self.strings.prompt_organization_placeholder))

        ctx.send_text(self.strings.error_unsupported_organization)
        return ctx.replace_dialog(self.dialog_id, Organization.NOT_SUPPORTED.value)

    def resume_step(self, state: DialogState) -> DialogState:
        ctx = StepContext(state, self.dialog_id)
        if ctx.result is not None and str(ctx.result) != "":
            return ctx.replace_dialog(self.dialog_id, str(ctx.result))

        ctx.member.company = Organization.NOT_SUPPORTED
        ctx.member.question_type = None
        ctx.send_text(self.strings.response_end)
        return ctx.end_dialog()
