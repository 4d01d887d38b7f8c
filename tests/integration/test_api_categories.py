# tests/integration/test_api_categories.py
from fastapi.testclient import TestClient


def test_categories_lists_parents_and_subs(client: TestClient) -> None:
    response = client.get("/api/categories")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 6
    assert data[0] == {"parent_category_id": 1, "name": "Air Conditioning", "short_name": None, "sub_category_id": None}
    assert {"parent_category_id": 2, "name": "Drainage", "short_name": "drainer", "sub_category_id": 202} in data
