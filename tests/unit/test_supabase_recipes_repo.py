from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from receitas.app.domain.errors import IndexBuildingError, StoreReadError, StoreWriteError
from receitas.app.domain.models import Ingredient, Instruction, Memory, Occasion, SubStep, Unit
from receitas.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository, to_json_value


def api_error(code: str, message: str) -> APIError:
    return APIError({"message": message, "code": code, "hint": None, "details": None})


def recipe_row(recipe_id: str, user_id: str = "u1", **overrides) -> dict:
    row = {
        "id": recipe_id,
        "user_id": user_id,
        "title": "Bolo de Chocolate",
        "description": "Fofo",
        "ingredients": [{"name": "Farinha", "quantity": "200", "unit": "g"}],
        "instructions": [{"step": "Misturar", "sub_step": "Bolo"}],
        "memories": [],
        "image_url": None,
        "occasion": "Doces",
        "difficulty": None,
        "preparation_time": None,
        "secret_message": None,
        "rating": None,
        "schema_version": 2,
        "created_at": "2024-01-15T10:00:00Z",
    }
    row.update(overrides)
    return row


class TestToJsonValue:
    def test_serializes_dataclasses_and_enums(self) -> None:
        value = [Instruction("Cobrir", SubStep.COBERTURA)]
        assert to_json_value(value) == [{"step": "Cobrir", "sub_step": "Cobertura"}]
        assert to_json_value(Occasion.DOCES) == "Doces"


class TestCreate:
    def test_insert_stamps_owner_and_strips_blank_rows(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": "new-id"}]
        )
        repo = SupabaseRecipeRepository(client)

        recipe_id = repo.create(
            {
                "title": "Bolo",
                "ingredients": [Ingredient("Ovos", "3", Unit.UNIDADE), Ingredient()],
                "instructions": [Instruction(), Instruction("Bater")],
                "memories": [Memory()],
                "occasion": Occasion.DOCES,
            },
            "u1",
        )

        assert recipe_id == "new-id"
        client.table.assert_called_with("recipes")
        row = client.table.return_value.insert.call_args[0][0]
        assert row["user_id"] == "u1"
        assert row["ingredients"] == [{"name": "Ovos", "quantity": "3", "unit": "unidade"}]
        assert row["instructions"] == [{"step": "Bater", "sub_step": "Bolo"}]
        assert row["memories"] == []
        assert row["occasion"] == "Doces"
        assert "created_at" not in row

    def test_failure_raises_store_write_error(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.side_effect = api_error(
            "42501", "permission denied"
        )
        repo = SupabaseRecipeRepository(client)

        with pytest.raises(StoreWriteError):
            repo.create({"title": "Bolo"}, "u1")

    def test_network_failure_raises_store_write_error(self) -> None:
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.side_effect = httpx.ConnectError(
            "offline"
        )
        repo = SupabaseRecipeRepository(client)

        with pytest.raises(StoreWriteError):
            repo.create({"title": "Bolo"}, "u1")


class TestGet:
    def _select(self, client: MagicMock) -> MagicMock:
        return client.table.return_value.select.return_value.eq.return_value.limit.return_value

    def test_returns_recipe(self) -> None:
        client = MagicMock()
        self._select(client).execute.return_value = MagicMock(data=[recipe_row("r1")])
        repo = SupabaseRecipeRepository(client)

        recipe = repo.get("r1")

        assert recipe is not None
        assert recipe.id == "r1"
        assert recipe.occasion == Occasion.DOCES
        assert recipe.ingredients == [Ingredient("Farinha", "200", Unit.GRAMA)]
        assert recipe.created_at is not None and recipe.created_at.year == 2024

    def test_missing_returns_none(self) -> None:
        client = MagicMock()
        self._select(client).execute.return_value = MagicMock(data=[])
        repo = SupabaseRecipeRepository(client)

        assert repo.get("missing") is None

    def test_malformed_id_returns_none(self) -> None:
        client = MagicMock()
        self._select(client).execute.side_effect = api_error(
            "22P02", 'invalid input syntax for type uuid: "abc"'
        )
        repo = SupabaseRecipeRepository(client)

        assert repo.get("abc") is None

    def test_legacy_row_is_migrated(self) -> None:
        client = MagicMock()
        legacy = {
            "id": "r1",
            "user_id": "u1",
            "title": "Salada",
            "ingredients": ["Alface"],
            "instructions": ["Lavar"],
            "memories": ["Piquenique"],
            "occasion": "Dia a Dia",
            "rating": 0,
        }
        self._select(client).execute.return_value = MagicMock(data=[legacy])
        repo = SupabaseRecipeRepository(client)

        recipe = repo.get("r1")

        assert recipe.ingredients == [Ingredient("Alface", "", None)]
        assert recipe.instructions == [Instruction("Lavar", SubStep.OUTROS)]
        assert recipe.memories == [Memory("Piquenique", None)]
        assert recipe.rating is None


class TestList:
    def _query(self, client: MagicMock) -> MagicMock:
        return client.table.return_value.select.return_value.eq.return_value.order.return_value

    def test_queries_owner_newest_first(self) -> None:
        client = MagicMock()
        self._query(client).execute.return_value = MagicMock(
            data=[recipe_row("r2"), recipe_row("r1")]
        )
        repo = SupabaseRecipeRepository(client)

        recipes = repo.list("u1")

        assert [r.id for r in recipes] == ["r2", "r1"]
        client.table.return_value.select.return_value.eq.assert_called_with("user_id", "u1")
        client.table.return_value.select.return_value.eq.return_value.order.assert_called_with(
            "created_at", desc=True
        )

    def test_never_returns_foreign_recipes(self) -> None:
        client = MagicMock()
        self._query(client).execute.return_value = MagicMock(
            data=[recipe_row("r1"), recipe_row("r2", user_id="someone-else")]
        )
        repo = SupabaseRecipeRepository(client)

        recipes = repo.list("u1")

        assert [r.id for r in recipes] == ["r1"]
        assert all(r.user_id == "u1" for r in recipes)

    def test_index_not_ready_raises_index_building_error(self) -> None:
        client = MagicMock()
        self._query(client).execute.side_effect = api_error(
            "55000", "index recipes_user_id_created_at_idx is not ready"
        )
        repo = SupabaseRecipeRepository(client)

        with pytest.raises(IndexBuildingError):
            repo.list("u1")

    def test_index_building_message_is_detected(self) -> None:
        client = MagicMock()
        self._query(client).execute.side_effect = api_error(
            "XX000", "The query requires an index. That index is currently building"
        )
        repo = SupabaseRecipeRepository(client)

        with pytest.raises(IndexBuildingError):
            repo.list("u1")

    def test_other_failures_are_generic_read_errors(self) -> None:
        client = MagicMock()
        self._query(client).execute.side_effect = api_error("42501", "permission denied")
        repo = SupabaseRecipeRepository(client)

        with pytest.raises(StoreReadError) as exc_info:
            repo.list("u1")

        assert not isinstance(exc_info.value, IndexBuildingError)


class TestUpdateAndDelete:
    def test_update_overwrites_named_fields(self) -> None:
        client = MagicMock()
        repo = SupabaseRecipeRepository(client)

        repo.update("r1", {"title": "Novo", "user_id": "intruder", "memories": [Memory("Oi")]})

        row = client.table.return_value.update.call_args[0][0]
        assert row == {"title": "Novo", "memories": [{"text": "Oi", "image_url": None}]}
        client.table.return_value.update.return_value.eq.assert_called_with("id", "r1")

    def test_update_failure(self) -> None:
        client = MagicMock()
        client.table.return_value.update.return_value.eq.return_value.execute.side_effect = (
            api_error("42501", "permission denied")
        )
        repo = SupabaseRecipeRepository(client)

        with pytest.raises(StoreWriteError):
            repo.update("r1", {"title": "Novo"})

    def test_delete(self) -> None:
        client = MagicMock()
        repo = SupabaseRecipeRepository(client)

        repo.delete("r1")

        client.table.return_value.delete.return_value.eq.assert_called_with("id", "r1")


class TestMigrateLegacyDocuments:
    def test_rewrites_only_legacy_rows(self) -> None:
        client = MagicMock()
        page = client.table.return_value.select.return_value.order.return_value.range.return_value
        page.execute.return_value = MagicMock(
            data=[recipe_row("r1"), {"id": "r2", "user_id": "u1", "ingredients": ["Sal"]}]
        )
        repo = SupabaseRecipeRepository(client)

        count = repo.migrate_legacy_documents(page_size=10)

        assert count == 1
        row = client.table.return_value.update.call_args[0][0]
        assert row["ingredients"] == [{"name": "Sal", "quantity": "", "unit": None}]
        assert row["schema_version"] == 2
        client.table.return_value.update.return_value.eq.assert_called_with("id", "r2")

    def test_dry_run_writes_nothing(self) -> None:
        client = MagicMock()
        page = client.table.return_value.select.return_value.order.return_value.range.return_value
        page.execute.return_value = MagicMock(data=[{"id": "r2", "ingredients": ["Sal"]}])
        repo = SupabaseRecipeRepository(client)

        assert repo.migrate_legacy_documents(dry_run=True) == 1
        client.table.return_value.update.assert_not_called()

    def test_walks_every_page(self) -> None:
        client = MagicMock()
        ranged = client.table.return_value.select.return_value.order.return_value.range
        ranged.return_value.execute.side_effect = [
            MagicMock(data=[{"id": "r1", "ingredients": ["Sal"]}, recipe_row("r2")]),
            MagicMock(data=[{"id": "r3", "instructions": ["Mexer"]}]),
        ]
        repo = SupabaseRecipeRepository(client)

        count = repo.migrate_legacy_documents(page_size=2)

        assert count == 2
        assert [c.args for c in ranged.call_args_list] == [(0, 1), (2, 3)]
        updated_ids = [
            c.args for c in client.table.return_value.update.return_value.eq.call_args_list
        ]
        assert updated_ids == [("id", "r1"), ("id", "r3")]
