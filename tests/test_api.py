"""Tests for the REST API: import lifecycle, downloads and live intake."""

import io
import zipfile
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.config import APIConfig
from src.api.dependencies import get_manager, get_pipeline
from src.live_intake.config import IntakeConfig
from src.live_intake.pipeline import LiveIntakePipeline
from src.live_intake.scheduler import IntakeScheduler

PREFIX = "/api/v1"

SAMPLE_CSV = (
    "trade_id,currency_pair,side,quantity,price,trade_date,counterparty,book\n"
    "T1,EUR/USD,BUY,15000,1.0850,2026-10-19,BANK_A,TRADING\n"
    "T2,EUR/USD,SELL,10000,1.0860,2026-10-19,BANK_B,HEDGE\n"
    "T3,USD/JPY,BUY,20000,149.50,2026-10-19,BANK_A,TRADING\n"
    "T4,USD/JPY,SELL,8000,149.60,2026-10-19,BANK_C,CLIENT\n"
    "T5,GBP/USD,BUY,25000,1.2650,2026-10-19,BANK_A,TRADING\n"
)


@pytest.fixture
def scheduler():
    return MagicMock(spec=IntakeScheduler)


@pytest.fixture
def pipeline(manager, scheduler):
    return LiveIntakePipeline(manager, config=IntakeConfig(), scheduler=scheduler)


@pytest.fixture
def app(manager, pipeline):
    app = create_app(APIConfig())
    app.dependency_overrides[get_manager] = lambda: manager
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    return app


@pytest.fixture
def client(app):
    # No context manager: the lifespan (real DB, real timers) stays off.
    return TestClient(app)


def _upload(client, csv_text=SAMPLE_CSV, import_name=None):
    data = {"import_name": import_name} if import_name else {}
    return client.post(
        f"{PREFIX}/imports/upload",
        files={"file": ("trades.csv", csv_text.encode("utf-8"), "text/csv")},
        data=data,
    )


def _imported(client, **kwargs):
    response = _upload(client, **kwargs)
    assert response.status_code == 201
    return response.json()["id"]


def _consolidate(client, import_id, criteria="CURRENCY_PAIR"):
    return client.post(f"{PREFIX}/imports/{import_id}/consolidate", json={"criteria": criteria})


class TestHealth:
    """Tests for the health endpoint."""

    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["components"] == {"database": "ok", "live_intake": "idle"}

    def test_degraded_when_database_fails(self, client, manager):
        with patch.object(manager, "check_database", side_effect=RuntimeError("down")):
            body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert body["components"]["database"] == "error: down"

    def test_reports_running_intake(self, client, pipeline):
        pipeline.reconfigure(IntakeConfig(enabled=True))
        assert client.get("/health").json()["components"]["live_intake"] == "running"

    def test_request_id_header(self, client):
        assert "x-request-id" in client.get("/health").headers


class TestUpload:
    """Tests for CSV upload."""

    def test_upload_creates_import(self, client):
        response = _upload(client, import_name="morning")
        assert response.status_code == 201
        body = response.json()
        assert body["import_name"] == "morning"
        assert body["status"] == "IMPORTED"
        assert body["original_trade_count"] == 5
        assert body["current_trade_count"] == 5
        assert len(body["trades"]) == 5

    def test_upload_generates_name(self, client):
        assert _upload(client).json()["import_name"]

    def test_duplicate_name_rejected(self, client):
        _imported(client, import_name="dup")
        response = _upload(client, import_name="dup")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_malformed_row_rejected(self, client):
        bad = "trade_id,currency_pair,side,quantity,price,trade_date\nT1,EUR/USD,HOLD,1,1.0,2026-10-19\n"
        response = _upload(client, csv_text=bad)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CSV_ROW"
        assert client.get(f"{PREFIX}/imports").json() == []

    def test_missing_file(self, client):
        assert client.post(f"{PREFIX}/imports/upload").status_code == 422


class TestImportLifecycle:
    """Tests for consolidate, generate and push over HTTP."""

    def test_full_flow(self, client):
        import_id = _imported(client)

        consolidated = _consolidate(client, import_id).json()
        assert consolidated["status"] == "CONSOLIDATED"
        assert consolidated["consolidation_criteria"] == "CURRENCY_PAIR"
        assert consolidated["current_trade_count"] == 3

        generated = client.post(f"{PREFIX}/imports/{import_id}/generate-documents").json()
        assert generated["status"] == "DOCUMENTS_GENERATED"
        assert generated["documents_generated"] is True
        assert len(generated["documents"]) == 3

        pushed = client.post(f"{PREFIX}/imports/{import_id}/push").json()
        assert pushed["status"] == "PUSHED"
        assert pushed["pushed"] is True
        assert pushed["pushed_at"] is not None

    def test_trades_views(self, client):
        import_id = _imported(client)
        _consolidate(client, import_id)

        originals = client.get(f"{PREFIX}/imports/{import_id}/trades/original").json()
        consolidated = client.get(f"{PREFIX}/imports/{import_id}/trades/consolidated").json()
        assert len(originals) == 5
        assert all(t["is_original"] for t in originals)
        assert len(consolidated) == 3
        assert not any(t["is_original"] for t in consolidated)

    def test_unknown_criteria(self, client):
        import_id = _imported(client)
        response = _consolidate(client, import_id, criteria="REGION")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CRITERIA"

    def test_generate_before_consolidate(self, client):
        import_id = _imported(client)
        response = client.post(f"{PREFIX}/imports/{import_id}/generate-documents")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_STATE"

    def test_push_before_documents(self, client):
        import_id = _imported(client)
        _consolidate(client, import_id)
        assert client.post(f"{PREFIX}/imports/{import_id}/push").status_code == 409

    def test_push_twice(self, client):
        import_id = _imported(client)
        _consolidate(client, import_id)
        client.post(f"{PREFIX}/imports/{import_id}/generate-documents")
        client.post(f"{PREFIX}/imports/{import_id}/push")
        assert client.post(f"{PREFIX}/imports/{import_id}/push").status_code == 409

    def test_unknown_import(self, client):
        response = client.get(f"{PREFIX}/imports/999")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "IMPORT_NOT_FOUND"
        assert "request_id" in error


class TestListAndDelete:
    """Tests for listing, deleting and clearing imports."""

    def test_list_filtered_by_status(self, client):
        first = _imported(client, import_name="a")
        _imported(client, import_name="b")
        _consolidate(client, first)

        consolidated = client.get(f"{PREFIX}/imports", params={"status": "CONSOLIDATED"}).json()
        assert [i["import_name"] for i in consolidated] == ["a"]
        assert len(client.get(f"{PREFIX}/imports").json()) == 2

    def test_list_unknown_status(self, client):
        assert client.get(f"{PREFIX}/imports", params={"status": "LOST"}).status_code == 400

    def test_delete(self, client):
        import_id = _imported(client)
        response = client.delete(f"{PREFIX}/imports/{import_id}")
        assert response.status_code == 204
        assert client.get(f"{PREFIX}/imports/{import_id}").status_code == 404

    def test_delete_unknown(self, client):
        assert client.delete(f"{PREFIX}/imports/12").status_code == 404

    def test_clear_all(self, client):
        _imported(client, import_name="a")
        _imported(client, import_name="b")
        response = client.delete(f"{PREFIX}/imports/clear-all")
        assert response.status_code == 200
        assert response.json() == {"message": "All imports cleared"}
        assert client.get(f"{PREFIX}/imports").json() == []


class TestDownloads:
    """Tests for single document and archive downloads."""

    def _documented(self, client):
        import_id = _imported(client, import_name="dl")
        _consolidate(client, import_id)
        return client.post(f"{PREFIX}/imports/{import_id}/generate-documents").json()

    def test_download_document(self, client):
        document = self._documented(client)["documents"][0]
        response = client.get(f"{PREFIX}/imports/documents/{document['id']}/download")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert document["filename"] in response.headers["content-disposition"]
        assert b"<TradeConfirmation>" in response.content

    def test_download_unknown_document(self, client):
        response = client.get(f"{PREFIX}/imports/documents/77/download")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "DOCUMENT_NOT_FOUND"

    def test_download_all(self, client):
        view = self._documented(client)
        response = client.get(f"{PREFIX}/imports/{view['id']}/documents/download-all")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert f"import-{view['id']}-documents.zip" in response.headers["content-disposition"]

        archive = zipfile.ZipFile(io.BytesIO(response.content))
        assert len(archive.namelist()) == 3
        for doc in view["documents"]:
            stem = doc["filename"].rsplit(".", 1)[0]
            assert f"{stem}_{doc['id']}.xml" in archive.namelist()

    def test_download_all_without_documents(self, client):
        import_id = _imported(client)
        assert client.get(f"{PREFIX}/imports/{import_id}/documents/download-all").status_code == 404


class TestLiveTrades:
    """Tests for live trade submission and intake configuration."""

    def _submit(self, client, **overrides):
        payload = {
            "currency_pair": "EUR/USD",
            "side": "buy",
            "counterparty": "BANK_A",
            "book": "TRADING",
            "quantity": 1000,
            "price": "1.1",
        }
        payload.update(overrides)
        return client.post(f"{PREFIX}/live-trades/submit", json=payload)

    def test_submit_assigns_id_and_timestamp(self, client):
        response = self._submit(client)
        assert response.status_code == 200
        body = response.json()
        assert body["trade_id"] == "LIVE-1"
        assert body["side"] == "BUY"
        assert body["timestamp"] is not None

    def test_submit_keeps_given_id(self, client):
        assert self._submit(client, trade_id="EXT-9").json()["trade_id"] == "EXT-9"

    def test_submit_unknown_side(self, client):
        response = self._submit(client, side="HOLD")
        assert response.status_code == 400
        assert client.get(f"{PREFIX}/live-trades/pending-count").json() == {"pending": 0}

    def test_submit_negative_quantity(self, client):
        assert self._submit(client, quantity=-5).status_code == 422

    def test_pending(self, client):
        self._submit(client)
        self._submit(client, currency_pair="USD/JPY")
        assert client.get(f"{PREFIX}/live-trades/pending-count").json() == {"pending": 2}
        pending = client.get(f"{PREFIX}/live-trades/pending").json()
        assert [t["trade_id"] for t in pending] == ["LIVE-1", "LIVE-2"]

    def test_process_nets_by_currency_pair(self, client):
        self._submit(client, side="BUY", quantity=1000)
        self._submit(client, side="SELL", quantity=400)
        self._submit(client, currency_pair="USD/JPY", quantity=50)

        body = client.post(f"{PREFIX}/live-trades/process").json()
        assert body["status"] == "CONSOLIDATED"
        assert body["consolidation_criteria"] == "CURRENCY_PAIR"
        assert body["original_trade_count"] == 3
        assert body["current_trade_count"] == 2
        assert client.get(f"{PREFIX}/live-trades/pending-count").json() == {"pending": 0}

    def test_process_nothing_pending(self, client):
        response = client.post(f"{PREFIX}/live-trades/process")
        assert response.status_code == 200
        assert response.json() is None

    def test_get_config(self, client):
        assert client.get(f"{PREFIX}/live-trades/config").json() == IntakeConfig().to_dict()

    def test_update_config_is_partial(self, client, scheduler):
        response = client.put(
            f"{PREFIX}/live-trades/config", json={"enabled": True, "trades_per_second": 5}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["enabled"] is True
        assert body["trades_per_second"] == 5
        assert body["grouping_interval_seconds"] == IntakeConfig().grouping_interval_seconds
        scheduler.replace.assert_called_once()

    def test_update_config_rejects_non_positive(self, client, scheduler):
        response = client.put(f"{PREFIX}/live-trades/config", json={"grouping_interval_seconds": 0})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CONFIG"
        scheduler.replace.assert_not_called()
        assert client.get(f"{PREFIX}/live-trades/config").json()["grouping_interval_seconds"] == 10
