"""Shared API dependencies."""

from cookstep.services.instruction_service import InstructionDecomposer
from cookstep.services.recipe_extractor import RecipeExtractor


def get_recipe_extractor() -> RecipeExtractor:
    """Get recipe extractor service instance."""
    return RecipeExtractor()


def get_instruction_decomposer() -> InstructionDecomposer:
    """Get instruction decomposer service instance."""
    return InstructionDecomposer()
