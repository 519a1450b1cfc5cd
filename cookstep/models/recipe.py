"""Recipe Pydantic models."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Ingredient(BaseModel):
    """Single ingredient model."""

    name: str = Field(..., description="Ingredient name")
    quantity: Optional[float] = Field(
        None, description="Numeric amount; null for indeterminate amounts ('to taste', 'a pinch')"
    )
    unit: Optional[str] = Field(None, description="Unit of measurement (e.g., 'cup', 'tbsp', 'pinch of')")
    preparation: Optional[str] = Field(None, description="Preparation notes (e.g., 'finely chopped')")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ingredient name must not be empty")
        return value


class Nutrition(BaseModel):
    """Nutritional information, kept as the text the page published."""

    calories: str = Field("", description="Calories per serving")
    proteinContent: str = Field("", description="Protein per serving")
    fatContent: str = Field("", description="Fat per serving")
    carbohydrateContent: str = Field("", description="Carbohydrates per serving")


class Recipe(BaseModel):
    """Canonical recipe returned by the extract endpoint."""

    name: str = Field("", description="Recipe title")
    description: str = Field("", description="Short description")
    image: str = Field("", description="Main image URL")
    source: Optional[str] = Field(None, description="Source URL")

    ingredients: List[str] = Field(
        default_factory=list, description="Ingredient lines, rescaled when servings were requested"
    )
    parsedIngredients: List[Ingredient] = Field(
        default_factory=list, description="Ingredient lines parsed into name/quantity/unit/preparation"
    )
    instructions: List[str] = Field(default_factory=list, description="Instruction steps as text")

    totalTime: str = Field("", description="Total time as published (usually ISO-8601 duration)")
    cookTime: str = Field("", description="Cook time as published")
    prepTime: str = Field("", description="Prep time as published")
    yieldText: str = Field("", description="Yield text, or '<n> servings' when rescaled")
    originalServings: int = Field(1, ge=1, description="Servings parsed from the published yield")
    scaledServings: int = Field(1, ge=1, description="Servings the ingredient amounts refer to")

    category: str = Field("", description="Recipe category")
    cuisine: str = Field("", description="Cuisine")
    keywords: List[str] = Field(default_factory=list, description="Keywords / tags")
    nutrition: Nutrition = Field(default_factory=Nutrition, description="Nutritional information")

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Classic Pancakes",
                "description": "Fluffy weekend pancakes.",
                "image": "https://example.com/pancakes.jpg",
                "source": "https://example.com/recipes/pancakes",
                "ingredients": ["3.00 cups flour", "4.00 eggs"],
                "parsedIngredients": [
                    {"name": "flour", "quantity": 3.0, "unit": "cups", "preparation": None},
                    {"name": "eggs", "quantity": 4.0, "unit": None, "preparation": None},
                ],
                "instructions": ["Whisk the eggs.", "Fold in the flour."],
                "totalTime": "PT30M",
                "cookTime": "PT15M",
                "prepTime": "PT15M",
                "yieldText": "4 servings",
                "originalServings": 2,
                "scaledServings": 4,
                "category": "Breakfast",
                "cuisine": "American",
                "keywords": ["pancakes", "breakfast"],
                "nutrition": {
                    "calories": "350 kcal",
                    "proteinContent": "",
                    "fatContent": "",
                    "carbohydrateContent": "",
                },
            }
        }
    }


class ExtractRecipeRequest(BaseModel):
    """Request body for the extract endpoint."""

    url: str = Field(..., description="Public recipe page URL")
    servings: Optional[int] = Field(None, ge=1, description="Target servings; omit to keep the original amounts")
