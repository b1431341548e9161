"""Generative models: single-turn and multi-turn content generation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from gemwire._http import GEMINI_FLASH, GEMINI_PRO, GENERATE_CONTENT
from gemwire.base import ModelClient
from gemwire.errors import ConfigurationError
from gemwire.models import Content, Response, SafetySetting, SystemInstruction
from gemwire.payload import Payload, assemble
from gemwire.tools import Tool, ToolConfig, declared_names

if TYPE_CHECKING:
    from gemwire.result import Outcome

ChatTurn = tuple[str, str] | Content


class GenerativeModel(ModelClient):
    """A text-generation model.

    Optional settings start unset and are sent only once assigned. They apply
    to every subsequent call until changed:

        model = GenerativeModel()
        model.system_instruction = "Answer in one sentence."
        model.tools = [tool(get_weather)]
        reply = await model.single_shot("What's the weather in Oslo?")
        if reply is not None:
            print(reply.text or reply.function_calls)

    Every verb returns ``None`` when the call fails; the reason is reported
    to the log sink. Use ``dispatch`` for a typed ``Outcome`` instead.
    """

    default_model = GEMINI_FLASH

    #: Per-category thresholds. Only ``SUPPORTED_HARM_CATEGORIES`` are accepted.
    safety_settings: list[SafetySetting] | None = None
    system_instruction: SystemInstruction | str | None = None
    #: ``[]`` is sent as an explicit empty list; ``None`` omits the key.
    tools: list[Tool] | None = None
    tool_config: ToolConfig | None = None

    def build_request(self, contents: Content | Sequence[Content]) -> Payload:
        """Assemble the body that would be sent for *contents*."""
        instruction = self.system_instruction
        if isinstance(instruction, str):
            instruction = SystemInstruction.from_text(instruction)

        self._warn_on_suspect_settings()
        return assemble(
            contents,
            safety_settings=self.safety_settings,
            system_instruction=instruction,
            tool_config=self.tool_config,
            tools=self.tools,
        )

    async def dispatch(self, contents: Content | Sequence[Content]) -> Outcome[Response]:
        """Send pre-built contents and return a typed outcome."""
        payload = self.build_request(contents)
        return await self.executor.dispatch(GENERATE_CONTENT, payload, Response)

    async def generate(self, contents: Content | Sequence[Content]) -> Response | None:
        """Send pre-built contents (one ``Content`` or a list of turns)."""
        payload = self.build_request(contents)
        return await self.executor.send(GENERATE_CONTENT, payload, Response)

    async def single_shot(self, text: str) -> Response | None:
        """Send one user prompt. The quickest way to query the model."""
        return await self.generate(Content.from_text(text, role="user"))

    async def chat(self, turns: Sequence[ChatTurn]) -> Response | None:
        """Send a conversation.

        Args:
            turns: Chronological ``(role, text)`` pairs or ``Content`` turns.
                Roles are sent exactly as given (``"user"`` or ``"model"``).
        """
        return await self.generate(_to_contents(turns))

    def _warn_on_suspect_settings(self) -> None:
        sink = self.executor.sink
        for setting in self.safety_settings or ():
            sink.assert_(
                setting.is_supported,
                f"{setting.category.value} is not accepted by Gemini models",
            )
        if self.tool_config is not None and self.tool_config.allowed_function_names:
            declared = set(declared_names(self.tools or ()))
            for name in self.tool_config.allowed_function_names:
                if name not in declared:
                    sink.warning(f"allowed function {name!r} is not declared in tools")


def _to_contents(turns: Sequence[ChatTurn]) -> list[Content]:
    if isinstance(turns, (str, bytes)) or not isinstance(turns, Sequence):
        raise ConfigurationError(
            "turns must be a sequence of (role, text) pairs or Content",
            hint="Pass [('user', 'Hi'), ('model', 'Hello!'), ('user', 'How are you?')].",
        )
    if not turns:
        raise ConfigurationError(
            "chat requires at least one turn",
            hint="Use single_shot() for a single prompt.",
        )

    contents: list[Content] = []
    for i, turn in enumerate(turns):
        if isinstance(turn, Content):
            contents.append(turn)
            continue
        if not (isinstance(turn, tuple) and len(turn) == 2):
            raise ConfigurationError(
                f"turns[{i}] must be a (role, text) pair or Content, "
                f"got {type(turn).__name__}"
            )
        role, text = turn
        if not isinstance(role, str) or not role:
            raise ConfigurationError(f"turns[{i}] has an empty role")
        contents.append(Content.from_text(text, role=role))
    return contents


class GeminiFlash(GenerativeModel):
    """Gemini 1.5 Flash."""

    default_model = GEMINI_FLASH


class GeminiPro(GenerativeModel):
    """Gemini 1.5 Pro."""

    default_model = GEMINI_PRO
