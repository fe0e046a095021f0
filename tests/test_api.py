"""tests/test_api.py"""
from unittest.mock import AsyncMock, patch

import pytest

from lotobonheur.api.app import create_app
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.errors import UpstreamStoreError

ADMIN_HEADERS = {"Authorization": "Bearer good-token"}


@pytest.fixture
def client():
    app = create_app(cache=TTLCache())
    app.config["TESTING"] = True
    return app.test_client()


class TestPublicRoutes:
    @patch("lotobonheur.api.app.generate_predictions", new_callable=AsyncMock)
    def test_predictions(self, mock_generate, client):
        mock_generate.return_value = {"drawName": "Reveil", "predictions": [], "dataQuality": {}}

        resp = client.post("/api/predictions", json={"drawName": " Reveil ", "analysisDepth": 100, "explain": False})

        assert resp.status_code == 200
        assert resp.get_json()["drawName"] == "Reveil"
        args, kwargs = mock_generate.call_args
        assert args == ("Reveil",)
        assert kwargs["limit"] == 100
        assert kwargs["explain"] is False
        assert kwargs["paired_draw_name"] is None

    @pytest.mark.parametrize("body", [
        {"drawName": "Bad$Name"},
        {"drawName": ""},
        {"drawName": "x" * 51},
        {"drawName": "Reveil", "analysisDepth": 5},
        {},
    ])
    def test_predictions_validation(self, client, body):
        resp = client.post("/api/predictions", json=body)
        assert resp.status_code == 400
        payload = resp.get_json()
        assert payload["reason"] == "validation_error"
        assert payload["details"]

    def test_predictions_requires_json(self, client):
        resp = client.post("/api/predictions", data="not json", content_type="text/plain")
        assert resp.status_code == 400
        assert resp.get_json()["reason"] == "invalid_json"

    @patch("lotobonheur.pipeline.prediction_generator.db")
    def test_store_failure_is_generic_500(self, mock_db, client):
        mock_db.fetch_history.side_effect = UpstreamStoreError("fetch_history", "connection refused")

        resp = client.post("/api/patterns", json={"drawName": "Reveil"})

        assert resp.status_code == 500
        assert "connection refused" not in resp.get_data(as_text=True)

    @patch("lotobonheur.pipeline.prediction_generator.db")
    def test_patterns(self, mock_db, client):
        mock_db.fetch_history.return_value = [
            {"draw_name": "Reveil", "draw_date": f"2025-03-{10 - i:02d}", "winning_numbers": [1, 2, 3, 40 + i, 50 + i]}
            for i in range(6)
        ]

        resp = client.post("/api/patterns", json={"drawName": "Reveil"})

        payload = resp.get_json()
        assert resp.status_code == 200
        assert payload["historySize"] == 6
        assert len(payload["suggestedNumbers"]) == 5
        assert any(p["type"] == "pair" for p in payload["patterns"])

    @patch("lotobonheur.api.app.run_backtests")
    def test_backtests(self, mock_run, client):
        mock_run.return_value = []
        resp = client.post("/api/backtests", json={"drawName": "Reveil", "algorithm": "arima", "windowSize": 30})
        assert resp.status_code == 200
        assert resp.get_json()["results"] == []
        assert mock_run.call_args.kwargs["window_size"] == 30

    @patch("lotobonheur.api.app.select_best_algorithm")
    def test_best_algorithm(self, mock_select, client):
        mock_select.return_value = {"success": False, "recommendation": None}
        resp = client.post("/api/best-algorithm", json={"drawName": "Reveil"})
        assert resp.status_code == 200
        assert resp.get_json()["success"] is False

    def test_unknown_route_is_json_404(self, client):
        resp = client.post("/api/nowhere", json={})
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    @patch("lotobonheur.api.app.select_best_algorithm")
    def test_unexpected_error_is_generic(self, mock_select, client):
        mock_select.side_effect = KeyError("secret-column")
        resp = client.post("/api/best-algorithm", json={"drawName": "Reveil"})
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Erreur interne du serveur"}


class TestAdminRoutes:
    def test_missing_token(self, client):
        resp = client.post("/api/admin/train", json={})
        assert resp.status_code == 401

    @patch("lotobonheur.api.auth.db")
    def test_invalid_token(self, mock_db, client):
        mock_db.get_user_for_token.return_value = None
        resp = client.post("/api/admin/train", json={}, headers=ADMIN_HEADERS)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Unauthorized - Invalid token"

    @patch("lotobonheur.api.auth.db")
    def test_non_admin_forbidden(self, mock_db, client):
        mock_db.get_user_for_token.return_value = {"id": "user-1", "email": "a@b.c"}
        mock_db.user_has_role.return_value = False
        resp = client.post("/api/admin/train", json={}, headers=ADMIN_HEADERS)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Forbidden - Admin role required"
        mock_db.user_has_role.assert_called_once_with("user-1", "admin")

    @patch("lotobonheur.api.app.train_algorithms")
    @patch("lotobonheur.api.auth.db")
    def test_admin_can_train(self, mock_db, mock_train, client):
        mock_db.get_user_for_token.return_value = {"id": "admin-1", "email": None}
        mock_db.user_has_role.return_value = True
        mock_train.return_value = {"success": True, "trained": 0}

        resp = client.post("/api/admin/train", json={"drawName": "Reveil"}, headers=ADMIN_HEADERS)

        assert resp.status_code == 200
        assert resp.get_json()["success"] is True
        assert mock_train.call_args.args == ("Reveil",)
        mock_db.get_user_for_token.assert_called_once_with("good-token")

    @patch("lotobonheur.api.auth.db")
    def test_rollback_requires_confirmation(self, mock_db, client):
        mock_db.get_user_for_token.return_value = {"id": "admin-1", "email": None}
        mock_db.user_has_role.return_value = True

        resp = client.post("/api/admin/rollback", json={"trainingDate": "2025-03-10T12:00:00+00:00"}, headers=ADMIN_HEADERS)

        assert resp.status_code == 400
        assert resp.get_json()["reason"] == "confirmation_required"

    @patch("lotobonheur.api.app.evaluate_predictions")
    @patch("lotobonheur.api.auth.db")
    def test_admin_can_evaluate(self, mock_db, mock_evaluate, client):
        mock_db.get_user_for_token.return_value = {"id": "admin-1", "email": None}
        mock_db.user_has_role.return_value = True
        mock_evaluate.return_value = {"success": True, "evaluated": 3}

        resp = client.post("/api/admin/evaluate", json={}, headers=ADMIN_HEADERS)

        assert resp.status_code == 200
        assert resp.get_json()["evaluated"] == 3
        mock_evaluate.assert_called_once_with(None)
