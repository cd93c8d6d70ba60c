"""Module-level types described by the schema tests."""

from __future__ import annotations

import datetime
import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import (
    Annotated,
    Generic,
    Literal,
    NewType,
    NotRequired,
    Optional,
    Protocol,
    TypedDict,
    TypeVar,
)

import annotated_types
from pydantic import BaseModel, Field

from types_to_jsonschema import EMBED, Tags

T = TypeVar("T")

Score = NewType("Score", int)

type Labels = list[str]
type JSONTree = dict[str, JSONTree] | str


@dataclass
class Node:
    ID: int
    Children: list[Optional[Node]]


class Holder:
    @dataclass
    class Node:
        Label: str


@dataclass
class Tree:
    Left: Optional[Tree]
    Size: Optional[int]
    Names: Optional[list[str]]


@dataclass
class Optionals:
    A: int
    B: int = field(default=0, metadata={"json": "B,omitempty"})


@dataclass
class Inner:
    Val: float


@dataclass
class Outer:
    inner: Annotated[Inner, EMBED]
    Name: str


@dataclass
class Box(Generic[T]):
    Value: T


@dataclass
class Crate:
    Ints: Box[int]
    Strs: Box[str]


class Shape(Protocol):
    def area(self) -> float: ...


@dataclass
class Circle:
    Radius: float

    def area(self) -> float:
        return 3.14159 * self.Radius**2


@dataclass
class Rectangle:
    Width: float
    Height: float

    def area(self) -> float:
        return self.Width * self.Height


@dataclass
class Drawing:
    Main: Shape
    Backup: Optional[Shape]


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Level(enum.IntEnum):
    LOW = 1
    HIGH = 2


class Status:
    @classmethod
    def string_values(cls) -> list[str]:
        return ["pending", "done", "active"]


class Raw:
    @classmethod
    def json_values(cls) -> list[str]:
        return ["1", '"x"']


@dataclass
class Palette:
    Primary: Color
    Levels: list[Level]
    Mode: Literal["fast", "slow"]


@dataclass
class Scored:
    Value: Annotated[Score, Tags(description="B", max=10)]


@dataclass
class Defaults:
    Name: Annotated[str, Tags(default="bob")]
    Count: Annotated[int, Tags(default="3", min=1, max=10)]
    Ratio: Annotated[float, Tags(example="0.5", examples="[0.1, 0.9]")]
    Kind: Annotated[Color, Tags(default="green")]


@dataclass
class BadDefault:
    Child: Node
    Count: Annotated[int, Tags(default="abc")]


@dataclass
class Limits:
    Arr: Annotated[tuple[float, float], Tags({"item-min": 0})]
    Names: Annotated[list[str], Tags({"item-pattern": "^a"}, min=1)]
    Label: Annotated[str, annotated_types.MaxLen(5)]
    Renamed: int = field(metadata={"json": "renamed"})
    AsText: Annotated[int, Tags(json="as_text,string")] = 0
    Hidden: int = field(default=0, metadata={"json": "-"})
    _private: int = 0


@dataclass
class Mixed:
    Value: int | str
    Lookup: dict[str, Node]
    Words: Labels
    Doc: JSONTree


@dataclass
class WithCallback:
    Callback: Callable[[], None]


@dataclass
class Event:
    At: datetime.datetime
    On: datetime.date


class Settings(BaseModel):
    host: str = Field(description="Host name")
    port: int = Field(default=8080, ge=1, le=65535)
    alias_field: str = Field(alias="aliasField")
    secret: str = Field(default="", exclude=True)


class Movie(TypedDict):
    title: str
    year: NotRequired[int]
