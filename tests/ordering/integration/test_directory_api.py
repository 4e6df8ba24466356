UNKNOWN_ID = "0b9e1f3a-5c7d-4e2f-8a6b-9c0d1e2f3a4b"


class TestUserEndpoints:
    def test_register_and_fetch(self, client):
        response = client.post("/users", json={"name": "Meera Iyer", "email": "Meera@example.com"})
        assert response.status_code == 201
        user = response.json()
        assert user["email"] == "meera@example.com"
        assert user["user_type"] == "customer"

        fetched = client.get(f"/users/{user['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Meera Iyer"

    def test_duplicate_email(self, client):
        client.post("/users", json={"name": "Meera", "email": "meera@example.com"})
        response = client.post("/users", json={"name": "Meera", "email": "meera@example.com"})
        assert response.status_code == 400
        assert response.json()["code"] == "user_already_exists"

    def test_admin_cannot_self_register(self, client):
        response = client.post("/users", json={"name": "Root", "email": "root@example.com", "user_type": "admin"})
        assert response.status_code == 422

    def test_unknown_user(self, client):
        assert client.get(f"/users/{UNKNOWN_ID}").status_code == 404


class TestShopEndpoints:
    def test_shop_menu(self, client, catalog):
        response = client.get(f"/shops/{catalog['shop_id']}/food-items")
        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == ["Chicken Biryani", "Paneer Tikka"]

    def test_add_food_item(self, client, catalog):
        response = client.post(
            f"/shops/{catalog['other_shop_id']}/food-items",
            json={"name": "Onion Uttapam", "price": 60.0},
        )
        assert response.status_code == 201
        assert response.json()["shop_id"] == catalog["other_shop_id"]

    def test_register_shop_for_unknown_owner(self, client):
        response = client.post("/shops", json={"name": "Ghost Kitchen", "owner_id": UNKNOWN_ID})
        assert response.status_code == 400
        assert response.json()["code"] == "customer_not_found"

    def test_list_shops_by_owner(self, client, catalog):
        response = client.get("/shops", params={"owner_id": catalog["owner_id"]})
        assert response.status_code == 200
        assert [shop["name"] for shop in response.json()] == ["Dosa Corner", "Spice Route"]
        assert {shop["owner_id"] for shop in response.json()} == {catalog["owner_id"]}

    def test_owner_without_shops(self, client, catalog):
        response = client.get("/shops", params={"owner_id": catalog["customer_id"]})
        assert response.status_code == 200
        assert response.json() == []

    def test_list_shops_for_unknown_owner(self, client):
        assert client.get("/shops", params={"owner_id": UNKNOWN_ID}).status_code == 404

    def test_list_shops_requires_owner(self, client):
        assert client.get("/shops").status_code == 422
