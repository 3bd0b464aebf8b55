from datetime import datetime

from app.models.enums import PaymentStatus


class TestListGrounds:
    def test_lists_grounds_with_relations(self, client, grounds):
        response = client.get("/api/grounds/")

        assert response.status_code == 200
        by_name = {g["name"]: g for g in response.json()}
        assert set(by_name) == {"G1", "G2", "Mega_Ground"}
        assert by_name["Mega_Ground"]["related_grounds"] == ["G1", "G2"]
        assert by_name["G1"]["related_grounds"] == ["Mega_Ground"]
        assert by_name["G1"]["pricing"]["Weekend_first_half"] == 1100


class TestAvailability:
    def test_hourly_slots(self, client, grounds, create_booking):
        create_booking(grounds["Mega_Ground"], datetime(2024, 6, 15, 7))
        create_booking(grounds["G1"], datetime(2024, 6, 15, 9), status=PaymentStatus.FAILED)

        response = client.get(
            f"/api/grounds/{grounds['G2'].id}/availability", params={"date": "2024-06-15"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["groundName"] == "G2"
        assert body["date"] == "2024-06-15"
        assert len(body["slots"]) == 24
        booked = [s["startHour"] for s in body["slots"] if s["isBooked"]]
        assert booked == [7]
        assert body["slots"][7]["price"] == 1100
        assert body["slots"][20]["price"] == 1300

    def test_bad_date(self, client, grounds):
        response = client.get(
            f"/api/grounds/{grounds['G1'].id}/availability", params={"date": "June 15"}
        )

        assert response.status_code == 400

    def test_unknown_ground(self, client, grounds):
        response = client.get("/api/grounds/999/availability", params={"date": "2024-06-15"})

        assert response.status_code == 404


def test_root(client):
    assert client.get("/").json() == {"message": "Backend running successfully"}
