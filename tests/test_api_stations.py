"""
Tests for the station (SPBU) endpoints - stations, station services, fuel prices
"""
import uuid

import pytest

from tests.conftest import auth_headers


STATION_BODY = {
    "name": "SPBU 31.128.02",
    "address": "Jl. Gatot Subroto Kav. 5, Jakarta",
    "latitude": -6.23,
    "longitude": 106.82,
    "pump_count": 8,
    "queue_count": 2,
}


class TestStationCrud:

    @pytest.mark.integration
    async def test_admin_creates_station(self, test_client, admin_user, brand_factory):
        brand = await brand_factory()

        response = await test_client.post(
            "/spbu", json={**STATION_BODY, "brand_id": str(brand.id)}, headers=auth_headers(admin_user)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "SPBU 31.128.02"
        assert data["brand_id"] == str(brand.id)
        assert data["pump_count"] == 8

    @pytest.mark.integration
    async def test_create_with_unknown_brand(self, test_client, admin_user):
        response = await test_client.post(
            "/spbu", json={**STATION_BODY, "brand_id": str(uuid.uuid4())}, headers=auth_headers(admin_user)
        )
        assert response.status_code == 404

    @pytest.mark.integration
    async def test_user_cannot_create(self, test_client, sample_user):
        response = await test_client.post("/spbu", json=STATION_BODY, headers=auth_headers(sample_user))
        assert response.status_code == 403

    @pytest.mark.integration
    @pytest.mark.parametrize("override", [{"latitude": 91}, {"longitude": -181}, {"pump_count": -1}, {"name": "  "}])
    async def test_invalid_payload(self, test_client, admin_user, override):
        response = await test_client.post(
            "/spbu", json={**STATION_BODY, **override}, headers=auth_headers(admin_user)
        )
        assert response.status_code == 400

    @pytest.mark.integration
    async def test_list_and_get_are_public(self, test_client, sample_station):
        listed = await test_client.get("/spbu")
        fetched = await test_client.get(f"/spbu/{sample_station.id}")

        assert listed.status_code == 200
        assert [s["id"] for s in listed.json()] == [str(sample_station.id)]
        assert fetched.json()["name"] == sample_station.name

    @pytest.mark.integration
    async def test_get_unknown(self, test_client):
        response = await test_client.get(f"/spbu/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["details"]["resource"] == "SPBU"

    @pytest.mark.integration
    async def test_get_malformed_id(self, test_client):
        response = await test_client.get("/spbu/not-a-uuid")
        assert response.status_code == 400

    @pytest.mark.integration
    async def test_update_replaces_fields(self, test_client, admin_user, sample_station):
        response = await test_client.put(
            f"/spbu/{sample_station.id}",
            json={**STATION_BODY, "name": "SPBU Renamed", "queue_count": 5},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "SPBU Renamed"
        assert response.json()["queue_count"] == 5

    @pytest.mark.integration
    async def test_delete(self, test_client, admin_user, station_factory):
        station = await station_factory(name="SPBU To Delete")

        response = await test_client.delete(f"/spbu/{station.id}", headers=auth_headers(admin_user))

        assert response.status_code == 204
        assert (await test_client.get(f"/spbu/{station.id}")).status_code == 404

    @pytest.mark.integration
    async def test_delete_with_transactions_conflicts(
        self, test_client, admin_user, sample_user, sample_station, transaction_factory
    ):
        await transaction_factory(sample_user.id, sample_station.id)

        response = await test_client.delete(f"/spbu/{sample_station.id}", headers=auth_headers(admin_user))

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ERR_1003"
        still_there = await test_client.get(f"/spbu/{sample_station.id}")
        assert still_there.status_code == 200

    @pytest.mark.integration
    async def test_delete_removes_wishlist_entries(self, test_client, admin_user, sample_user, station_factory):
        station = await station_factory(name="SPBU Favorit")
        saved = await test_client.post(
            "/wishlist", json={"spbu_id": str(station.id)}, headers=auth_headers(sample_user)
        )
        assert saved.status_code == 201

        response = await test_client.delete(f"/spbu/{station.id}", headers=auth_headers(admin_user))

        assert response.status_code == 204
        wishlist = await test_client.get("/wishlist", headers=auth_headers(sample_user))
        assert wishlist.json() == []


class TestStationServices:

    @pytest.mark.integration
    async def test_add_twice_conflicts(self, test_client, admin_user, sample_station, service_factory):
        service = await service_factory(name="ATM")
        headers = auth_headers(admin_user)
        url = f"/spbu/{sample_station.id}/services"

        first = await test_client.post(url, json={"service_id": str(service.id)}, headers=headers)
        second = await test_client.post(url, json={"service_id": str(service.id)}, headers=headers)

        assert first.status_code == 201
        assert first.json() == {"message": "Service added to SPBU"}
        assert second.status_code == 409

        listed = await test_client.get(url)
        assert [s["name"] for s in listed.json()] == ["ATM"]

    @pytest.mark.integration
    async def test_add_unknown_service(self, test_client, admin_user, sample_station):
        response = await test_client.post(
            f"/spbu/{sample_station.id}/services",
            json={"service_id": str(uuid.uuid4())},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 404

    @pytest.mark.integration
    async def test_add_to_unknown_station(self, test_client, admin_user, service_factory):
        service = await service_factory()
        response = await test_client.post(
            f"/spbu/{uuid.uuid4()}/services",
            json={"service_id": str(service.id)},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 404

    @pytest.mark.integration
    async def test_remove(self, test_client, admin_user, sample_station, service_factory):
        service = await service_factory()
        headers = auth_headers(admin_user)
        await test_client.post(
            f"/spbu/{sample_station.id}/services", json={"service_id": str(service.id)}, headers=headers
        )

        removed = await test_client.delete(f"/spbu/{sample_station.id}/services/{service.id}", headers=headers)
        again = await test_client.delete(f"/spbu/{sample_station.id}/services/{service.id}", headers=headers)

        assert removed.status_code == 204
        assert again.status_code == 404
        assert (await test_client.get(f"/spbu/{sample_station.id}/services")).json() == []


class TestFuelPrices:

    @pytest.mark.integration
    async def test_list_prices_as_strings(self, test_client, sample_station):
        response = await test_client.get(f"/spbu/{sample_station.id}/fuel-prices")

        assert response.status_code == 200
        prices = {p["fuel_type"]: p["price"] for p in response.json()}
        assert prices == {"Pertalite": "10000.00", "Pertamax": "12950.50"}

    @pytest.mark.integration
    async def test_set_new_and_existing_price(self, test_client, admin_user, sample_station):
        headers = auth_headers(admin_user)
        url = f"/spbu/{sample_station.id}/fuel-prices"

        added = await test_client.put(url, json={"fuel_type": "Solar", "price": "6800.00"}, headers=headers)
        changed = await test_client.put(url, json={"fuel_type": "Pertalite", "price": "10500.00"}, headers=headers)

        assert added.status_code == 200
        assert added.json()["price"] == "6800.00"
        assert changed.json()["price"] == "10500.00"

        prices = {p["fuel_type"]: p["price"] for p in (await test_client.get(url)).json()}
        assert prices == {"Pertalite": "10500.00", "Pertamax": "12950.50", "Solar": "6800.00"}

    @pytest.mark.integration
    @pytest.mark.parametrize("price", ["0", "-100", "abc", "1E+200", "0.0000000000001"])
    async def test_invalid_price(self, test_client, admin_user, sample_station, price):
        response = await test_client.put(
            f"/spbu/{sample_station.id}/fuel-prices",
            json={"fuel_type": "Solar", "price": price},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 400

    @pytest.mark.integration
    async def test_user_cannot_set_price(self, test_client, sample_user, sample_station):
        response = await test_client.put(
            f"/spbu/{sample_station.id}/fuel-prices",
            json={"fuel_type": "Solar", "price": "6800.00"},
            headers=auth_headers(sample_user),
        )
        assert response.status_code == 403

    @pytest.mark.integration
    async def test_with_prices_listing(self, test_client, sample_station, station_factory):
        await station_factory(name="SPBU Tanpa Harga")

        response = await test_client.get("/spbu/with-prices")

        assert response.status_code == 200
        by_name = {s["name"]: s for s in response.json()}
        assert by_name["SPBU Tanpa Harga"]["fuel_prices"] == []
        priced = by_name[sample_station.name]["fuel_prices"]
        assert [(p["fuel_type"], p["price"]) for p in priced] == [
            ("Pertalite", "10000.00"),
            ("Pertamax", "12950.50"),
        ]
