"""Data models for image API configurations.

Every config fetched from the catalog or read from disk is validated
into these models before it reaches the request builder.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_SPLIT_STR = "|"


class BaseParameter(BaseModel):
    """Fields shared by every parameter type."""

    name: str | None = None  # empty / None -> positional (URL path segment)
    friendly_name: str = ""
    enable: bool = True

    @property
    def is_positional(self) -> bool:
        return not self.name


class IntegerParameter(BaseParameter):
    type: Literal["integer"]
    value: int | float | None = None
    min_value: int | float | None = None
    max_value: int | float | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> "IntegerParameter":
        if self.min_value is not None and self.max_value is not None:
            if self.min_value > self.max_value:
                raise ValueError(f"min_value {self.min_value} is greater than max_value {self.max_value}")
        return self


class BooleanParameter(BaseParameter):
    type: Literal["boolean"]
    value: bool | None = None


class EnumParameter(BaseParameter):
    type: Literal["enum"]
    value: list[Any] = Field(min_length=1)  # the choices
    friendly_value: list[str] | None = None  # display labels for the choices

    @model_validator(mode="after")
    def check_labels(self) -> "EnumParameter":
        if self.friendly_value is not None and len(self.friendly_value) != len(self.value):
            raise ValueError("friendly_value must have one label per enum value")
        return self

    def labels(self) -> list[str]:
        """Display label for each choice, falling back to the raw value."""
        return list(self.friendly_value or [str(v) for v in self.value])


class StringParameter(BaseParameter):
    type: Literal["string"]
    value: str | None = None


class ListParameter(BaseParameter):
    type: Literal["list"]
    value: list[str] = []
    split_str: str | None = None

    @property
    def separator(self) -> str:
        return self.split_str or DEFAULT_SPLIT_STR


Parameter = Annotated[
    Union[IntegerParameter, BooleanParameter, EnumParameter, StringParameter, ListParameter],
    Field(discriminator="type"),
]


class ImageDescriptor(BaseModel):
    """Where and how image data sits in an API response."""

    content_type: Literal["URL", "BASE64", "BINARY"]
    path: str | None = None  # path expression; None -> whole body


class ResponseDescriptor(BaseModel):
    image: ImageDescriptor


class ApiConfigContent(BaseModel):
    """The body of a `<name>.api.json` file."""

    friendly_name: str
    intro: str = ""
    icon: str | None = None
    link: str
    func: str  # HTTP method, case-insensitive
    parameters: list[Parameter] = []
    response: ResponseDescriptor

    @field_validator("link")
    @classmethod
    def check_link(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("link must not be empty")
        return value.strip()

    @field_validator("func")
    @classmethod
    def check_func(cls, value: str) -> str:
        if not value.strip().isalpha():
            raise ValueError(f"invalid HTTP method: {value!r}")
        return value.strip()

    @property
    def method(self) -> str:
        return self.func.upper()


class ApiConfig(BaseModel):
    """A validated config together with its catalog identity."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    content: ApiConfigContent
