from flask import url_for


class TestTransactionCreate:
    def test_create_success(self, client, transaction_data):
        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 201
        result = response.get_json()
        assert result["amount"] == "2500.00"
        assert result["type"] == "INCOME"
        assert result["status"] == "PENDING"
        assert result["is_recurring"] is False
        assert result["case_id"] == transaction_data["case_id"]

    def test_create_recurring(self, client, transaction_data):
        transaction_data.update(
            {
                "is_recurring": True,
                "recurrence_frequency": "BIMONTHLY",
                "recurrence_count": 6,
                "recurrence_end_date": "2025-03-10",
            }
        )

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 201
        result = response.get_json()
        assert result["recurrence_frequency"] == "BIMONTHLY"
        assert result["recurrence_count"] == 6
        assert result["recurrence_original_id"] is None

    def test_create_recurring_without_frequency(self, client, transaction_data):
        transaction_data["is_recurring"] = True

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 400
        assert "recurrence_frequency" in response.get_json()["error"]

    def test_create_end_date_before_due_date(self, client, transaction_data):
        transaction_data.update(
            {
                "is_recurring": True,
                "recurrence_frequency": "MONTHLY",
                "recurrence_end_date": "2024-01-01",
            }
        )

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 400
        assert "recurrence_end_date" in response.get_json()["error"]

    def test_create_invalid_count(self, client, transaction_data):
        transaction_data.update(
            {
                "is_recurring": True,
                "recurrence_frequency": "MONTHLY",
                "recurrence_count": 0,
            }
        )

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 400
        assert "recurrence_count" in response.get_json()["error"]

    def test_create_invalid_amount(self, client, transaction_data):
        transaction_data["amount"] = "-10.00"

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 400
        assert "amount" in response.get_json()["error"]

    def test_create_unknown_frequency(self, client, transaction_data):
        transaction_data.update(
            {"is_recurring": True, "recurrence_frequency": "WEEKLY"}
        )

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 400
        assert "recurrence_frequency" in response.get_json()["error"]

    def test_create_paid_requires_payment_date(self, client, transaction_data):
        transaction_data["status"] = "PAID"

        response = client.post(
            url_for("transaction.transactions"), json=transaction_data
        )

        assert response.status_code == 400
        assert "payment_date" in response.get_json()["error"]

    def test_create_missing_fields(self, client):
        response = client.post(url_for("transaction.transactions"), json={})

        assert response.status_code == 400
        errors = response.get_json()["error"]
        for name in ("user_id", "type", "description", "amount", "due_date"):
            assert name in errors
