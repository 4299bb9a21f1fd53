"""Tests for API endpoints."""
import pytest
from io import BytesIO
from uuid import uuid4
from unittest.mock import AsyncMock

from openpyxl import load_workbook

from app.models.generation import GeneratedChallenge, GeneratedChallenges


def _answer_all(client, workshop_id, level):
    survey = client.post(f"/api/v1/workshops/{workshop_id}/survey/generate").json()
    answers = [{"question_id": q["id"], "maturity_level": level} for q in survey["questions"]]
    return client.put(
        f"/api/v1/workshops/{workshop_id}/survey/responses",
        json={"respondent": "CFO", "answers": answers},
    )


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check_all_healthy(self, client, mock_snowflake, mock_redis):
        """Test health check returns 200 when all dependencies healthy."""
        mock_snowflake.health_check = AsyncMock(return_value=(True, None))
        mock_redis.health_check = AsyncMock(return_value=(True, None))

        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["dependencies"]["snowflake"] == "healthy"
        assert "s3" not in data["dependencies"]

    def test_health_check_degraded(self, client, mock_snowflake, mock_redis):
        """Test health check returns 503 when any dependency unhealthy."""
        mock_snowflake.health_check = AsyncMock(return_value=(False, "Connection failed"))
        mock_redis.health_check = AsyncMock(return_value=(True, None))

        response = client.get("/api/v1/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"


class TestWorkshopEndpoints:
    """Tests for workshop lifecycle endpoints."""

    def test_create_workshop(self, client, sample_workshop_data):
        response = client.post("/api/v1/workshops", json=sample_workshop_data)

        assert response.status_code == 201
        data = response.json()
        assert data["company_name"] == "Acme Corp"
        assert data["status"] == "draft"
        assert data["workflow_maps"] == []
        assert data["synthesis"] is None

    def test_create_workshop_blank_company(self, client):
        response = client.post("/api/v1/workshops", json={"company_name": "   "})
        assert response.status_code == 422

    def test_get_workshop_not_found(self, client):
        response = client.get(f"/api/v1/workshops/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    def test_get_workshop_is_cached(self, client, workshop_id, fake_redis):
        client.get(f"/api/v1/workshops/{workshop_id}")
        assert fake_redis.exists(f"workshop:{workshop_id}")

    def test_mutation_invalidates_cache(self, client, workshop_id, fake_redis):
        client.get(f"/api/v1/workshops/{workshop_id}")
        client.patch(f"/api/v1/workshops/{workshop_id}/status", json={"status": "in_progress"})

        assert not fake_redis.exists(f"workshop:{workshop_id}")
        assert client.get(f"/api/v1/workshops/{workshop_id}").json()["status"] == "in_progress"

    def test_list_workshops_with_status_filter(self, client, sample_workshop_data):
        first = client.post("/api/v1/workshops", json=sample_workshop_data).json()
        client.post("/api/v1/workshops", json={"company_name": "Globex"})
        client.patch(f"/api/v1/workshops/{first['id']}/status", json={"status": "in_progress"})

        all_items = client.get("/api/v1/workshops").json()
        drafts = client.get("/api/v1/workshops", params={"status": "draft"}).json()

        assert all_items["total"] == 2
        assert drafts["total"] == 1
        assert drafts["items"][0]["company_name"] == "Globex"
        assert drafts["total_pages"] == 1

    def test_invalid_status_transition(self, client, workshop_id):
        response = client.patch(
            f"/api/v1/workshops/{workshop_id}/status", json={"status": "completed"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "invalid_transition"

    def test_busy_workshop_returns_409(self, client, workshop_id, fake_redis):
        fake_redis.set(f"workshop-lock:{workshop_id}", "held-elsewhere", ex=60)
        client.app.state.pipeline.settings = client.app.state.pipeline.settings.model_copy(
            update={"workshop_lock_wait": 0.1}
        )

        response = client.patch(
            f"/api/v1/workshops/{workshop_id}/status", json={"status": "in_progress"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "workshop_busy"


class TestImportAndReconcile:
    """Tests for source import and reconciliation."""

    def test_import_research_by_id(self, client, workshop_id):
        response = client.post(
            f"/api/v1/workshops/{workshop_id}/import/research", json={"report_id": "rpt-1"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "research_app"
        assert data["source_id"] == "rpt-1"
        assert data["use_case_count"] == 2

    def test_import_cognition_inline(self, client, workshop_id, cognition_payload):
        response = client.post(
            f"/api/v1/workshops/{workshop_id}/import/cognition", json={"data": cognition_payload}
        )

        assert response.status_code == 200
        assert response.json()["use_case_count"] == 2
        workshop = client.get(f"/api/v1/workshops/{workshop_id}").json()
        assert workshop["cognition_two_data"]["id"] == "an-1"

    def test_import_upstream_failure(self, client, workshop_id):
        response = client.post(
            f"/api/v1/workshops/{workshop_id}/import/research", json={"report_id": "missing"}
        )

        assert response.status_code == 502
        assert response.json()["error_code"] == "upstream_fetch_failure"
        workshop = client.get(f"/api/v1/workshops/{workshop_id}").json()
        assert workshop["research_app_data"] is None

    def test_import_requires_id_or_data(self, client, workshop_id):
        response = client.post(f"/api/v1/workshops/{workshop_id}/import/research", json={})
        assert response.status_code == 422

    def test_reconcile_without_imports(self, client, workshop_id):
        response = client.post(f"/api/v1/workshops/{workshop_id}/reconcile")

        assert response.status_code == 400
        assert response.json()["error_code"] == "validation_input_missing"

    def test_reconcile_merges_sources(self, client, reconciled_workshop_id):
        use_cases = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/use-cases").json()

        assert [uc["id"] for uc in use_cases] == ["UC-001", "UC-002", "UC-003"]
        invoice = use_cases[0]
        assert invoice["title"] == "Invoice Processing Automation"
        assert set(invoice["sources"]) == {"research_app", "cognition_two"}
        assert invoice["cost_savings"] == 500000.0
        assert invoice["agentic_pattern"] == "orchestrator"
        # research effort 2 -> 4.0, cognition risk 6 -> averaged
        assert invoice["complexity"] == 5.0
        assert invoice["provenance"]["complexity"] == "merged"
        assert use_cases[1]["revenue_impact"] == 1_200_000.0
        assert use_cases[2]["sources"] == ["cognition_two"]

    def test_reconcile_response_counts(self, client, workshop_id, research_payload, cognition_payload):
        client.post(f"/api/v1/workshops/{workshop_id}/import/research", json={"data": research_payload})
        client.post(f"/api/v1/workshops/{workshop_id}/import/cognition", json={"data": cognition_payload})

        data = client.post(f"/api/v1/workshops/{workshop_id}/reconcile").json()

        assert data["use_case_count"] == 3
        assert data["matched_count"] == 1
        assert data["research_only_count"] == 1
        assert data["cognition_only_count"] == 1
        assert any(c["field"] == "complexity" for c in data["conflicts"])

    def test_reconcile_starts_workshop(self, client, reconciled_workshop_id):
        workshop = client.get(f"/api/v1/workshops/{reconciled_workshop_id}").json()
        assert workshop["status"] == "in_progress"

    def test_update_use_case_rescores(self, client, reconciled_workshop_id):
        before = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/use-cases").json()[0]

        response = client.patch(
            f"/api/v1/workshops/{reconciled_workshop_id}/use-cases/UC-001",
            json={"cost_savings": 5_000_000},
        )

        assert response.status_code == 200
        assert response.json()["cost_savings"] == 5_000_000
        assert response.json()["value_score"] > before["value_score"]

    def test_update_unknown_use_case(self, client, reconciled_workshop_id):
        response = client.patch(
            f"/api/v1/workshops/{reconciled_workshop_id}/use-cases/UC-999",
            json={"title": "Renamed"},
        )
        assert response.status_code == 404


class TestSurveyEndpoints:
    """Tests for readiness survey endpoints."""

    def test_generate_requires_use_cases(self, client, workshop_id):
        response = client.post(f"/api/v1/workshops/{workshop_id}/survey/generate")
        assert response.status_code == 400

    def test_generate_demo_survey(self, client, reconciled_workshop_id):
        response = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/survey/generate")

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "demo"
        assert len(data["questions"]) == 12
        assert {q["dimension"] for q in data["questions"]} == {
            "data", "process", "organizational", "technical"
        }

    def test_submit_responses(self, client, reconciled_workshop_id):
        response = _answer_all(client, reconciled_workshop_id, 4)

        assert response.status_code == 200
        assert response.json()["overall"] == 4.0
        state = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/survey").json()
        assert state["readiness_scores"]["data"] == 4.0

    def test_submit_unknown_question(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/survey/generate")

        response = client.put(
            f"/api/v1/workshops/{reconciled_workshop_id}/survey/responses",
            json={"answers": [{"question_id": "X-001", "maturity_level": 3}]},
        )
        assert response.status_code == 400

    def test_submit_clears_downstream_results(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate")
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/prioritize")

        _answer_all(client, reconciled_workshop_id, 2)

        workshop = client.get(f"/api/v1/workshops/{reconciled_workshop_id}").json()
        assert workshop["validation_results"] is None
        assert workshop["prioritization_matrix"] is None


class TestChallengeEndpoints:
    """Tests for the challenge log."""

    def test_run_heuristic_challenges(self, client, reconciled_workshop_id):
        response = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/challenge")

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "demo"
        assert data["total_challenges"] == len(data["entries"]) > 0
        assert all(e["status"] == "pending" for e in data["entries"])

    def test_batches_append(self, client, reconciled_workshop_id):
        first = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/challenge").json()
        reviewed = first["entries"][0]
        client.put(
            f"/api/v1/workshops/{reconciled_workshop_id}/challenge/{reviewed['id']}",
            json={"status": "accepted", "responded_by": "CFO"},
        )
        second = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/challenge").json()

        everything = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/challenges").json()
        only_second = client.get(
            f"/api/v1/workshops/{reconciled_workshop_id}/challenges",
            params={"batch_id": second["batch_id"]},
        ).json()

        assert first["batch_id"] != second["batch_id"]
        assert len(everything) == first["total_challenges"] + second["total_challenges"]
        assert len(only_second) == second["total_challenges"]
        [kept] = [e for e in everything if e["id"] == reviewed["id"]]
        assert kept["status"] == "accepted"
        assert kept["responded_by"] == "CFO"
        assert all(e["status"] == "pending" for e in only_second)

    def test_resolve_once(self, client, reconciled_workshop_id):
        entry = client.post(
            f"/api/v1/workshops/{reconciled_workshop_id}/challenge"
        ).json()["entries"][0]
        url = f"/api/v1/workshops/{reconciled_workshop_id}/challenge/{entry['id']}"

        first = client.put(url, json={"status": "accepted", "responded_by": "CFO"})
        second = client.put(url, json={"status": "rejected", "responded_by": "COO"})

        assert first.status_code == 200
        assert first.json()["status"] == "accepted"
        assert first.json()["responded_at"] is not None
        assert second.status_code == 409
        assert second.json()["error_code"] == "already_resolved"
        stored = client.get(
            f"/api/v1/workshops/{reconciled_workshop_id}/challenges",
            params={"status": "accepted"},
        ).json()
        assert [e["responded_by"] for e in stored] == ["CFO"]

    def test_resolve_unknown_entry(self, client, reconciled_workshop_id):
        response = client.put(
            f"/api/v1/workshops/{reconciled_workshop_id}/challenge/{uuid4()}",
            json={"status": "accepted", "responded_by": "CFO"},
        )
        assert response.status_code == 404

    def test_resolve_rejects_pending_status(self, client, reconciled_workshop_id):
        response = client.put(
            f"/api/v1/workshops/{reconciled_workshop_id}/challenge/{uuid4()}",
            json={"status": "pending", "responded_by": "CFO"},
        )
        assert response.status_code == 422

    def test_live_challenges_use_generated_candidates(self, client, reconciled_workshop_id):
        pipeline = client.app.state.pipeline
        pipeline.generator._client = object()
        pipeline.generator.generate_json = AsyncMock(return_value=GeneratedChallenges(challenges=[
            GeneratedChallenge(use_case_id="UC-001", challenge_type="benefit",
                               field_name="cost_savings", original_value=500000,
                               challenged_value=200000, evidence="Benchmarks show 40%"),
            GeneratedChallenge(use_case_id="UC-404", challenge_type="kpi"),
        ]))

        data = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/challenge").json()

        assert data["mode"] == "live"
        assert [e["use_case_id"] for e in data["entries"]] == ["UC-001"]
        assert data["entries"][0]["severity"] == "high"


class TestScoringEndpoints:
    """Tests for validation and prioritization."""

    def test_validate_requires_use_cases(self, client, workshop_id):
        response = client.post(f"/api/v1/workshops/{workshop_id}/validate")
        assert response.status_code == 400

    def test_validate_discounts_benefits(self, client, reconciled_workshop_id):
        data = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate").json()

        assert data["total_original_value"] == 650000.0 + 1_200_000.0
        assert 0 < data["total_validated_value"] < data["total_original_value"]
        assert 0 < data["overall_discount"] < 1
        assert all("no_readiness_survey" in r["risk_flags"] for r in data["results"])

    def test_validate_is_repeatable(self, client, reconciled_workshop_id):
        first = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate").json()
        second = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate").json()

        assert first["total_validated_value"] == second["total_validated_value"]
        assert first["overall_discount"] == second["overall_discount"]

    def test_validate_clears_snapshot(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/prioritize")
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate")

        workshop = client.get(f"/api/v1/workshops/{reconciled_workshop_id}").json()
        assert workshop["prioritization_matrix"] is None
        assert workshop["validation_results"] is not None

    def test_prioritize_and_matrix(self, client, reconciled_workshop_id):
        snapshot = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/prioritize").json()
        live = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/matrix").json()

        assert len(snapshot["assignments"]) == 3
        assert sum(snapshot["quadrant_counts"].values()) == 3
        assert sum(snapshot["track_counts"].values()) == 3
        assert [a["quadrant"] for a in live["assignments"]] == [
            a["quadrant"] for a in snapshot["assignments"]
        ]

    def test_matrix_uses_validated_benefit(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate")
        matrix = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/matrix").json()

        assert {a["benefit_basis"] for a in matrix["assignments"]} == {"validated"}


class TestWorkflowEndpoints:
    """Tests for workflow maps and data lineage."""

    def test_generate_fallback_workflows(self, client, reconciled_workshop_id):
        data = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/workflows").json()

        assert data["mode"] == "demo"
        assert len(data["workflow_maps"]) == 3
        assert len(data["data_lineage"]) == 3
        invoice = data["workflow_maps"][0]
        assert [s["name"] for s in invoice["current_state"]] == [
            "Receive invoice", "Key into ERP", "Match PO"
        ]
        assert invoice["current_state"][0]["pain_point"] == "Manual keying"

    def test_get_workflow(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/workflows")

        found = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/workflows/UC-002")
        missing = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/workflows/UC-999")

        assert found.status_code == 200
        assert found.json()["use_case_title"] == "Demand Forecasting"
        assert missing.status_code == 404

    def test_lineage_empty_before_workflows(self, client, reconciled_workshop_id):
        response = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/data-lineage")
        assert response.json() == []


class TestSynthesisEndpoints:
    """Tests for synthesis, export and chat."""

    def test_synthesize_completes_workshop(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/validate")
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/prioritize")

        data = client.post(f"/api/v1/workshops/{reconciled_workshop_id}/synthesize").json()

        assert data["mode"] == "demo"
        assert data["executive_summary"].startswith("Acme Corp reviewed 3 AI use cases")
        assert data["roadmap"]["thirty_day"]
        workshop = client.get(f"/api/v1/workshops/{reconciled_workshop_id}").json()
        assert workshop["status"] == "completed"
        assert workshop["synthesis"]["total_estimated_value"] == data["total_estimated_value"]

    def test_export_xlsx(self, client, reconciled_workshop_id):
        client.post(f"/api/v1/workshops/{reconciled_workshop_id}/challenge")

        response = client.get(f"/api/v1/workshops/{reconciled_workshop_id}/export/xlsx")

        assert response.status_code == 200
        assert "attachment; filename=AI_Catalyst_Acme_Corp_" in response.headers["content-disposition"]
        wb = load_workbook(BytesIO(response.content))
        assert "Use Cases" in wb.sheetnames
        assert "Challenges" in wb.sheetnames

    def test_chat_demo_reply(self, client, reconciled_workshop_id):
        response = client.post(
            f"/api/v1/workshops/{reconciled_workshop_id}/chat",
            json={"message": "Which use case should we start with?"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "demo"
        assert "3 use case(s)" in data["reply"]

    def test_chat_unknown_workshop(self, client):
        response = client.post(f"/api/v1/workshops/{uuid4()}/chat", json={"message": "hi"})
        assert response.status_code == 404
