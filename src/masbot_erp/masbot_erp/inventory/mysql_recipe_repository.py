from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Ingredient, Recipe
from .repository import RecipeRepository


class MySQLRecipeRepository(RecipeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, where: str, params: tuple) -> list[Recipe]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, name FROM recipes WHERE {where} ORDER BY name", params)
            recipes = fetchall(cur)
            cur.execute("SELECT recipe_id, name, quantity, unit FROM recipe_ingredients ORDER BY recipe_id, line_no")
            ingredients: dict[int, list[Ingredient]] = {}
            for r in fetchall(cur):
                ingredients.setdefault(int(r["recipe_id"]), []).append(
                    Ingredient(name=r["name"], quantity=Decimal(str(r["quantity"])), unit=r["unit"])
                )
            return [
                Recipe(id=int(r["id"]), name=r["name"], ingredients=tuple(ingredients.get(int(r["id"]), [])))
                for r in recipes
            ]

    def list_all(self) -> Sequence[Recipe]:
        return self._load("1=1", ())

    def get(self, recipe_id: int) -> Optional[Recipe]:
        found = self._load("id=%s", (int(recipe_id),))
        return found[0] if found else None

    def create(self, recipe: Recipe) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO recipes(name) VALUES (%s)", (recipe.name,))
            recipe_id = int(cur.lastrowid)
            for line_no, ing in enumerate(recipe.ingredients, start=1):
                cur.execute(
                    "INSERT INTO recipe_ingredients(recipe_id, line_no, name, quantity, unit) VALUES (%s,%s,%s,%s,%s)",
                    (recipe_id, line_no, ing.name, str(ing.quantity), ing.unit),
                )
            return recipe_id

    def delete(self, recipe_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM recipe_ingredients WHERE recipe_id=%s", (int(recipe_id),))
            cur.execute("DELETE FROM recipes WHERE id=%s", (int(recipe_id),))
            return cur.rowcount > 0
