"""End-to-end tests of the HTTP API on an in-memory database."""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from dispensa.results import OperationResult
from dispensa.routers.common import raise_for_result


def create_recipe(client: TestClient, name: str, ingredients: list[dict], tags: str = "") -> int:
    response = client.post(
        "/api/v1/recipes/", json={"name": name, "tags": tags, "ingredients": ingredients}
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestRaiseForResult:
    """Tests for the status to HTTP error mapping."""

    @pytest.mark.parametrize(
        "result,status_code",
        [
            (OperationResult.not_found("missing"), 404),
            (OperationResult.fetch_failed("down"), 502),
            (OperationResult.duplicate("again"), 409),
            (OperationResult.invalid("bad"), 422),
        ],
    )
    def test_failures(self, result, status_code):
        with pytest.raises(HTTPException) as exc_info:
            raise_for_result(result)
        assert exc_info.value.status_code == status_code
        assert exc_info.value.detail == result.message

    def test_success_passes_through(self):
        result = OperationResult.success({"id": 1})
        assert raise_for_result(result) is result


class TestPantryApi:
    """Tests for /api/v1/pantry."""

    def test_add_list_adjust_delete(self, client):
        response = client.post("/api/v1/pantry/", json={"name": "Uova", "quantity": 6})
        assert response.status_code == 201
        item = response.json()
        assert item == {"id": item["id"], "name": "uova", "quantity": 6.0, "unit": "pz"}

        client.post("/api/v1/pantry/", json={"name": "farina", "quantity": 1, "unit": "kg"})
        listing = client.get("/api/v1/pantry/").json()
        assert [i["name"] for i in listing["items"]] == ["farina", "uova"]

        adjusted = client.patch(f"/api/v1/pantry/{item['id']}", json={"delta": -2}).json()
        assert adjusted["item"]["quantity"] == 4
        assert adjusted["removed"] is False

        removed = client.patch(f"/api/v1/pantry/{item['id']}", json={"delta": -10}).json()
        assert removed == {"item": None, "removed": True}

        assert client.delete(f"/api/v1/pantry/{item['id']}").status_code == 404

    def test_negative_quantity_rejected(self, client):
        response = client.post("/api/v1/pantry/", json={"name": "uova", "quantity": -1})
        assert response.status_code == 422

    def test_zero_quantity_rejected(self, client):
        response = client.post("/api/v1/pantry/", json={"name": "uova", "quantity": 0})
        assert response.status_code == 422
        assert client.get("/api/v1/pantry/").json()["items"] == []

    def test_ingredient_names(self, client):
        client.post("/api/v1/pantry/", json={"name": "Basilico", "quantity": 1, "unit": "mazzetto"})
        assert client.get("/api/v1/pantry/ingredients").json() == {"names": ["basilico"]}


class TestRecipesApi:
    """Tests for /api/v1/recipes."""

    def test_create_get_list_delete(self, client):
        recipe_id = create_recipe(
            client,
            "Frittata",
            [{"name": "uova", "quantity": 4}, {"name": "parmigiano", "quantity": 50, "unit": "g"}],
            tags="veloci,secondi",
        )

        detail = client.get(f"/api/v1/recipes/{recipe_id}").json()
        assert detail["tags"] == ["veloci", "secondi"]
        assert detail["ingredients"][1] == {"name": "parmigiano", "quantity": 50.0, "unit": "g"}

        listing = client.get("/api/v1/recipes/", params={"search": "parmig"}).json()
        assert [r["name"] for r in listing["recipes"]] == ["Frittata"]
        assert listing["total_pages"] == 1

        assert client.delete(f"/api/v1/recipes/{recipe_id}").status_code == 204
        assert client.get(f"/api/v1/recipes/{recipe_id}").status_code == 404

    def test_unknown_sort_rejected(self, client):
        assert client.get("/api/v1/recipes/", params={"sort": "random"}).status_code == 422


class TestPlanningFlow:
    """Plan a week, shop for it and cook it through the API."""

    def test_plan_shop_cook(self, client):
        client.post("/api/v1/pantry/", json={"name": "farina", "quantity": 500, "unit": "g"})
        recipe_id = create_recipe(
            client,
            "Pane",
            [
                {"name": "Farina 00", "quantity": 1, "unit": "kg"},
                {"name": "lievito", "quantity": 1, "unit": "bustina"},
                {"name": "acqua", "quantity": 600, "unit": "ml"},
            ],
        )

        response = client.post(
            "/api/v1/weekly-plan/",
            json={"day": "Sabato", "meal_type": "Pranzo", "recipe_id": recipe_id},
        )
        assert response.status_code == 201
        entry_id = response.json()["id"]

        plan = client.get("/api/v1/weekly-plan/").json()
        assert plan["total"] == 1
        assert plan["grid"]["Sabato"]["Pranzo"][0]["recipe_name"] == "Pane"

        shopping = client.get("/api/v1/shopping-list/").json()
        assert {i["name"]: i["needed_formatted"] for i in shopping["items"]} == {
            "farina 00": "500 g",
            "lievito": "1 bustina",
        }

        restock = client.post("/api/v1/shopping-list/restock").json()
        assert restock["total"] == 2
        assert client.get("/api/v1/shopping-list/").json()["items"] == []

        inspiration = client.get("/api/v1/inspiration/", params={"filter": "ready"}).json()
        assert [r["recipe_name"] for r in inspiration["recipes"]] == ["Pane"]

        dashboard = client.get("/api/v1/dashboard/").json()
        assert dashboard["next_meal"]["recipe_name"] == "Pane"

        # "farina 00" is not looked up in a row named plain "farina" when cooking
        cooked = client.post(f"/api/v1/weekly-plan/{entry_id}/cooked").json()
        assert cooked == {"deducted": 1, "removed": 1}
        pantry = client.get("/api/v1/pantry/").json()["items"]
        assert [(i["name"], i["quantity"]) for i in pantry] == [("farina", 1000.0)]
        assert client.post(f"/api/v1/weekly-plan/{entry_id}/cooked").status_code == 404

    def test_invalid_day(self, client):
        recipe_id = create_recipe(client, "Frittata", [])
        response = client.post(
            "/api/v1/weekly-plan/",
            json={"day": "Funday", "meal_type": "Cena", "recipe_id": recipe_id},
        )
        assert response.status_code == 422

    def test_move_entry(self, client):
        recipe_id = create_recipe(client, "Frittata", [])
        entry_id = client.post(
            "/api/v1/weekly-plan/",
            json={"day": "Lunedì", "meal_type": "Cena", "recipe_id": recipe_id},
        ).json()["id"]

        response = client.patch(
            f"/api/v1/weekly-plan/{entry_id}", json={"day": "Venerdì", "meal_type": "Colazione"}
        )

        assert response.status_code == 200
        grid = client.get("/api/v1/weekly-plan/").json()["grid"]
        assert grid["Venerdì"]["Colazione"][0]["id"] == entry_id

    def test_availability_of_missing_recipe(self, client):
        assert client.get("/api/v1/inspiration/9999").status_code == 404
