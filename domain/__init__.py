"""Describes the Pantrypal domain.

Two orchestrators sit between the screens and the outside world.

- `recipes.RecipeRepository` mirrors TheMealDB into the local cache and
  picks the recipe of the day.
- `chat.ChatSession` and `generative.SuggestionSession` talk to the language
  model, the former keeping conversations in the local cache.

Everything they depend on (the cache, TheMealDB, the model) is passed in,
so tests can fake any of it.
"""
