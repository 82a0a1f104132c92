"""The demo tools: a counter and a message log.

Each tool declares its arguments as a pydantic model. The model's JSON schema
is what ``tools/list`` publishes as ``inputSchema``, and the same model
validates ``tools/call`` arguments before the handler runs.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Annotated, Any, Callable, Dict, List, Optional, Type, Union

from pydantic import (
    AllowInfNan,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    WithJsonSchema,
)

from simple_mcp.errors import InvalidParams
from simple_mcp.state import ServerState, StateStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# JSON has a single number type; keep ints as ints so "5" never renders as "5.0".
# inf and nan cannot be written back out as JSON, so they never get in.
JsonNumber = Annotated[
    Union[StrictInt, Annotated[StrictFloat, AllowInfNan(False)]],
    WithJsonSchema({"type": "number"}),
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Format as ``2026-10-18T09:15:02.123Z``."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_finite(value: Union[int, float]) -> bool:
    return isinstance(value, int) or math.isfinite(value)


def text_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")


class NoArguments(ToolArguments):
    pass


class AddToCounterArguments(ToolArguments):
    amount: JsonNumber = Field(description="The number to add to the counter")


class SendMessageArguments(ToolArguments):
    message: StrictStr = Field(description="The message to store")


class ToolDescriptor:
    """A registered tool. ``handler`` receives the validated arguments model."""

    def __init__(
        self,
        name: str,
        title: str,
        description: str,
        arguments: Type[ToolArguments],
        handler: Callable[[Any], Dict[str, Any]],
    ):
        self.name = name
        self.title = title
        self.description = description
        self.arguments = arguments
        self.handler = handler

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.arguments.model_json_schema()

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def validate(self, raw: Optional[Dict[str, Any]]) -> ToolArguments:
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise InvalidParams(f"Invalid arguments for tool {self.name}: expected an object")
        try:
            return self.arguments.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}" for err in e.errors()
            )
            raise InvalidParams(f"Invalid arguments for tool {self.name}: {problems}") from e


class CounterTools:
    """Handlers for the five demo tools, bound to one ``StateStore``."""

    def __init__(self, store: StateStore, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def add_to_counter(self, args: AddToCounterArguments) -> Dict[str, Any]:
        amount = args.amount

        def add(state: ServerState) -> ServerState:
            old = state.counter
            try:
                new = old + amount
            except OverflowError:
                new = math.inf
            if not is_finite(new):
                raise InvalidParams(
                    f"Adding {format_number(amount)} to {format_number(old)} overflows the counter"
                )
            line = f"Added {format_number(amount)}: {format_number(old)} → {format_number(new)}"
            return state.with_message(line, counter=new)

        state = self.store.mutate(add)
        logger.info("add_to_counter amount=%s counter=%s", amount, state.counter)
        return text_result(
            f"Successfully added {format_number(amount)} to counter. New value: {format_number(state.counter)}"
        )

    def reset_counter(self, args: NoArguments) -> Dict[str, Any]:
        self.store.mutate(lambda state: state.with_message("Counter reset to 0", counter=0))
        return text_result("Counter has been reset to 0")

    def get_time(self, args: NoArguments) -> Dict[str, Any]:
        now = iso_timestamp(self.clock())
        self.store.mutate(lambda state: state.with_message(f"Time requested: {now}"))
        return text_result(f"Current server time: {now}")

    def send_message(self, args: SendMessageArguments) -> Dict[str, Any]:
        stamped = f"[{iso_timestamp(self.clock())}] {args.message}"
        self.store.mutate(lambda state: state.with_message(stamped))
        return text_result(f"Message stored: {stamped}")

    def get_message_count(self, args: NoArguments) -> Dict[str, Any]:
        count = len(self.store.read().messages)
        return text_result(f"Total messages stored: {count}")


def build_tool_registry(store: StateStore, clock: Clock = utc_now) -> Dict[str, ToolDescriptor]:
    tools = CounterTools(store, clock)
    descriptors: List[ToolDescriptor] = [
        ToolDescriptor(
            "add_to_counter",
            "Add to counter",
            "Add a number to the counter",
            AddToCounterArguments,
            tools.add_to_counter,
        ),
        ToolDescriptor(
            "reset_counter",
            "Reset counter",
            "Reset the counter to zero",
            NoArguments,
            tools.reset_counter,
        ),
        ToolDescriptor(
            "get_time",
            "Get time",
            "Get the current server time",
            NoArguments,
            tools.get_time,
        ),
        ToolDescriptor(
            "send_message",
            "Send message",
            "Send a message to be stored in the server",
            SendMessageArguments,
            tools.send_message,
        ),
        ToolDescriptor(
            "get_message_count",
            "Get message count",
            "Get the total number of messages stored",
            NoArguments,
            tools.get_message_count,
        ),
    ]
    return {d.name: d for d in descriptors}
