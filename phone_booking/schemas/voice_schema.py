"""Abstract voice-control document returned by the dialog engine each turn."""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class GatherInput(str, Enum):
    SPEECH = "speech"
    DTMF = "dtmf"


class Say(BaseModel):
    kind: Literal["say"] = "say"
    text: str


class Gather(BaseModel):
    """Speak ``prompt`` then listen for the next speech or keypad input."""

    kind: Literal["gather"] = "gather"
    prompt: str
    input: GatherInput = GatherInput.SPEECH
    num_digits: Optional[int] = None


class Dial(BaseModel):
    kind: Literal["dial"] = "dial"
    number: str


class Hangup(BaseModel):
    kind: Literal["hangup"] = "hangup"


VoiceAction = Union[Say, Gather, Dial, Hangup]


class VoiceResponse(BaseModel):
    """Ordered actions for the voice gateway."""

    actions: list[VoiceAction] = Field(default_factory=list)

    def say(self, text: str) -> "VoiceResponse":
        self.actions.append(Say(text=text))
        return self

    def gather_speech(self, prompt: str) -> "VoiceResponse":
        self.actions.append(Gather(prompt=prompt))
        return self

    def gather_digit(self, prompt: str) -> "VoiceResponse":
        self.actions.append(Gather(prompt=prompt, input=GatherInput.DTMF, num_digits=1))
        return self

    def dial(self, number: str) -> "VoiceResponse":
        self.actions.append(Dial(number=number))
        return self

    def hangup(self) -> "VoiceResponse":
        self.actions.append(Hangup())
        return self

    @property
    def spoken_text(self) -> str:
        """Everything the caller hears, in order."""
        parts = []
        for action in self.actions:
            if isinstance(action, Say):
                parts.append(action.text)
            elif isinstance(action, Gather):
                parts.append(action.prompt)
        return " ".join(parts)

    @property
    def is_transfer(self) -> bool:
        return any(isinstance(action, Dial) for action in self.actions)

    @property
    def ends_call(self) -> bool:
        return any(isinstance(action, Hangup) for action in self.actions)

    @property
    def expects(self) -> Optional[GatherInput]:
        """Input type the next turn will carry, if the call continues."""
        for action in reversed(self.actions):
            if isinstance(action, Gather):
                return action.input
        return None
