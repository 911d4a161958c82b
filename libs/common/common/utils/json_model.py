from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_snake


class JsonModel(BaseModel):
    """API model serialized with camelCase keys, accepting either casing on input.

    The admin UI posts camelCase paywall fields while server-side callers use
    the snake_case attribute names; both validate to the same model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(
        self,
        by_alias: bool | None = None,
        include: set[str] | dict[str, Any] | None = None,
        exclude: set[str] | dict[str, Any] | None = None,
        mode: Literal["json", "python"] = "python",
    ) -> dict[str, Any]:
        """Dump without None values; JSON mode always uses the camelCase aliases."""
        return self.model_dump(
            exclude_none=True,
            by_alias=by_alias or (mode == "json"),
            include=include,
            exclude=exclude,
            mode=mode,
        )


class JsonSnakeCaseModel(JsonModel):
    """For configuration objects whose keys stay snake_case, such as DBConfig."""

    model_config = ConfigDict(alias_generator=to_snake, populate_by_name=True, extra="ignore")
