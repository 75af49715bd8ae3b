"""
Pydantic schemas for extraction instructions.

Instruction: one unit of extraction, either a CSS selector (optionally with
             filters and nested fields) or a caller function.
PageInstructions: the block / entity / last_page layout used by PageFetcher.

Callers usually build instructions from plain mappings (JSON, YAML, dicts in
code); parse_instruction() and parse_instructions() turn those into models and
report every problem as a ConfigurationError before any document is touched.

Example, a list of posts with a computed field:

    {
        "selector": ".post",
        "data": {
            "vote_up": {"selector": ".vote-up"},
            "vote_down": {"selector": ".vote-down"},
            "vote_diff": {
                "type": "function",
                "function": lambda info, name, document, instruction:
                    int(info["vote_up"]) - int(info["vote_down"]),
            },
        },
    }
"""

from collections.abc import Mapping
from enum import Enum
from importlib import import_module
from typing import Any, Callable, Literal, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError


class Filter(str, Enum):
    """Post-processing rules applied to a matched node."""
    NODE_TEXT = "node_text"   # serialized markup of the node
    NODE = "node"             # the node handle itself
    NO_STRIP = "no_strip"     # keep surrounding whitespace of the text


# --- Caller function signatures ---

class FieldFunction(Protocol):
    """Computes a field from the fields collected before it."""

    def __call__(self, record: dict, name: str, document: Any,
                 instruction: "FunctionInstruction") -> Any: ...


class NodeFunction(Protocol):
    """Locates nodes (blocks, entity nodes) or decides last_page."""

    def __call__(self, document: Any, instruction: "FunctionInstruction") -> Any: ...


def import_function(path: str) -> Callable:
    """
    Resolve a "package.module:attribute" path to a callable.

    JSON configuration cannot carry Python callables, so function
    instructions loaded from files name them by import path instead.
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"function path must look like 'module:attribute', got '{path}'")
    try:
        target = import_module(module_name)
    except ImportError as e:
        raise ValueError(f"cannot import module '{module_name}': {e}") from e
    for part in attribute.split("."):
        if not hasattr(target, part):
            raise ValueError(f"'{module_name}' has no attribute '{attribute}'")
        target = getattr(target, part)
    if not callable(target):
        raise ValueError(f"'{path}' is not callable")
    return target


# --- Instruction variants ---

class BaseInstruction(BaseModel):
    """Options shared by every instruction kind."""

    # Extra keys are kept: caller functions receive the instruction and may
    # read their own options from it.
    model_config = ConfigDict(frozen=True, extra="allow")

    allow_empty: bool = False   # no match counts as one absent node
    merge: bool = False         # all matches go into grouping index 0
    data: Optional[dict[str, "Instruction"]] = None  # ordered sub-fields

    @field_validator("data", mode="before")
    @classmethod
    def _parse_data(cls, value):
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise ValueError("data must map field names to instructions")
        return {str(name): parse_instruction(item) for name, item in value.items()}

    @property
    def is_function(self) -> bool:
        return self.type == "function"


class SelectorInstruction(BaseInstruction):
    """Locate nodes with a CSS selector and turn them into values."""
    # "instruction" is the spelling used by older configuration files
    type: Literal["selector", "instruction"] = "selector"
    selector: str
    filters: frozenset[Filter] = frozenset()
    attribute: Optional[str] = None   # read an attribute instead of text
    plenty: bool = False              # nested data: one sub-record per match

    @field_validator("selector")
    @classmethod
    def _selector_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("selector must be a non-empty string")
        return value

    @field_validator("filters", mode="before")
    @classmethod
    def _coerce_filters(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, (str, Filter)):
            return [value]
        return value

    @model_validator(mode="after")
    def _check_filters(self) -> "SelectorInstruction":
        if Filter.NODE in self.filters and Filter.NODE_TEXT in self.filters:
            raise ValueError("filters 'node' and 'node_text' cannot be combined")
        return self


class FunctionInstruction(BaseInstruction):
    """Delegate to a caller function (see FieldFunction / NodeFunction)."""
    type: Literal["function"] = "function"
    function: Callable[..., Any]

    @field_validator("function", mode="before")
    @classmethod
    def _resolve_import_path(cls, value):
        if isinstance(value, str):
            return import_function(value)
        return value


Instruction = Union[SelectorInstruction, FunctionInstruction]

SelectorInstruction.model_rebuild()
FunctionInstruction.model_rebuild()

INSTRUCTION_TYPES = {
    "selector": SelectorInstruction,
    "instruction": SelectorInstruction,
    "function": FunctionInstruction,
}


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "instruction"
    return f"{location}: {first.get('msg')}"


def parse_instruction(config: Union[Instruction, Mapping]) -> Instruction:
    """
    Turn a mapping into an instruction model.

    Models pass through untouched. A mapping without "type" is a selector
    instruction.

    Raises:
        ConfigurationError: for non-mappings, unknown types and invalid fields
    """
    if isinstance(config, BaseInstruction):
        return config
    if not isinstance(config, Mapping):
        raise ConfigurationError("Instruction must be a mapping.", instruction=config)

    kind = config.get("type", "selector")
    model = INSTRUCTION_TYPES.get(kind)
    if model is None:
        raise ConfigurationError(
            f"Unknown instruction type '{kind}'.",
            instruction=config,
            details={"allowed": sorted(INSTRUCTION_TYPES)}
        )

    try:
        return model.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid {kind} instruction: {_describe(e)}",
            instruction=config,
            details={"errors": e.errors(include_url=False, include_context=False)}
        ) from e


def parse_instructions(config) -> list[Instruction]:
    """
    Turn an instruction list (or one instruction) into a list of models.

    A single instruction is wrapped into a one-element list.

    Raises:
        ConfigurationError: when nothing is given or the value is not a list
    """
    if config is None:
        raise ConfigurationError("Instructions are not set.")
    if isinstance(config, (BaseInstruction, Mapping)):
        return [parse_instruction(config)]
    if not isinstance(config, (list, tuple)):
        raise ConfigurationError("Instructions must be a list.", instruction=config)
    return [parse_instruction(item) for item in config]


# --- Page layout ---

class PageInstructions(BaseModel):
    """Where the entities of a page live and how to spot the last page."""
    model_config = ConfigDict(frozen=True)

    block: Optional[Instruction] = None
    entity: Optional[list[Instruction]] = None
    last_page: Optional[Instruction] = None

    @field_validator("block", "last_page", mode="before")
    @classmethod
    def _parse_single(cls, value):
        return None if value is None else parse_instruction(value)

    @field_validator("entity", mode="before")
    @classmethod
    def _parse_entity(cls, value):
        return None if value is None else parse_instructions(value)

    @classmethod
    def from_config(cls, config) -> "PageInstructions":
        """Build from a mapping; models pass through."""
        if isinstance(config, cls):
            return config
        if not isinstance(config, Mapping):
            raise ConfigurationError("Page instructions must be a mapping.", instruction=config)
        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid page instructions: {_describe(e)}",
                instruction=config,
                details={"errors": e.errors(include_url=False, include_context=False)}
            ) from e
