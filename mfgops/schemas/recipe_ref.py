from typing import Literal

from pydantic import BaseModel


class RecipeRef(BaseModel):
    """Which ingredient source a product uses: an original recipe or a recipe variant."""

    kind: Literal["recipe", "variant"]
    id: str
