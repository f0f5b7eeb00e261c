class TestKioskRoutes:
    """Public kiosk flow: caller-asserted teacher id, no login"""

    def test_borrow_and_return_without_login(self, client, published):
        borrowed = client.post("/api/kiosk/borrow", json={"keyId": "K01", "teacherId": "T002", "purpose": "exam prep"})

        assert borrowed.status_code == 201
        assert borrowed.json()["teacherName"] == "Ben Reyes"
        assert borrowed.json()["purpose"] == "exam prep"

        keys = {k["keyId"]: k["status"] for k in client.get("/api/kiosk/keys").json()}
        assert keys["K01"] == "Borrowed"

        returned = client.post("/api/kiosk/return", json={"keyId": "K01", "teacherId": "T002"})

        assert returned.status_code == 200
        assert returned.json()["returnDate"] is not None
        assert [c[0] for c in published] == ["borrowed", "returned"]

    def test_return_must_match_borrower_on_record(self, client):
        client.post("/api/kiosk/borrow", json={"keyId": "K01", "teacherId": "T001"})

        response = client.post("/api/kiosk/return", json={"keyId": "K01", "teacherId": "T002"})

        assert response.status_code == 409
        assert response.json()["code"] == "not_borrowed_by_caller"

    def test_unknown_teacher(self, client):
        response = client.post("/api/kiosk/borrow", json={"keyId": "K01", "teacherId": "T999"})

        assert response.status_code == 404
        assert response.json()["code"] == "teacher_not_found"

    def test_admin_id_is_not_a_teacher(self, client):
        response = client.post("/api/kiosk/borrow", json={"keyId": "K01", "teacherId": "ADMIN"})

        assert response.status_code == 404

    def test_teacher_id_required(self, client):
        response = client.post("/api/kiosk/borrow", json={"keyId": "K01"})

        assert response.status_code == 422

    def test_active_list(self, client, teacher_headers):
        client.post("/api/borrow", json={"keyId": "K02"}, headers=teacher_headers)

        active = client.get("/api/kiosk/active").json()

        assert len(active) == 1
        assert active[0]["keyId"] == "K02"
        assert active[0]["teacherName"] == "Ana Cruz"
        assert active[0]["isOverdue"] is False

    def test_kiosk_and_login_flows_share_one_ledger(self, client, teacher_headers):
        client.post("/api/kiosk/borrow", json={"keyId": "K01", "teacherId": "T001"})

        response = client.post("/api/return", json={"keyId": "K01"}, headers=teacher_headers)

        assert response.status_code == 200
