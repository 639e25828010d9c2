WALLET = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


class TestSyncWallet:
    def test_saves_lowercased(self, client):
        response = client.post("/api/profile/sync-wallet", json={"fid": 7, "wallet_address": WALLET, "username": "dave"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["profile"]["wallet_address"] == WALLET.lower()
        assert body["profile"]["username"] == "dave"

    def test_enables_bill_creation(self, client):
        from tests.web.conftest import bill_payload

        client.post("/api/profile/sync-wallet", json={"fid": 1, "wallet_address": WALLET})
        response = client.post("/api/bills", json=bill_payload())

        assert response.status_code == 201
        assert response.json()["bill"]["creator_wallet_address"] == WALLET.lower()

    def test_invalid_address(self, client):
        response = client.post("/api/profile/sync-wallet", json={"fid": 7, "wallet_address": "0x123"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"

    def test_missing_fields(self, client):
        response = client.post("/api/profile/sync-wallet", json={"fid": 7})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_failed"
