"""Tests for the HTML pages and the JSON API."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from code_mentor.config.schema import MentorConfig
from code_mentor.models.request import RequestKind
from code_mentor.web.app import create_app
from code_mentor.web.views import (
    NO_BUGS_MESSAGE,
    NO_IMPROVEMENTS_MESSAGE,
    NO_VARIABLES_MESSAGE,
    UPLOAD_REJECTED_MESSAGE,
)

CODE = "def average(nums):\n    return sum(nums) / len(nums)\n"


@pytest.fixture
def client(config: MentorConfig, fake_llm) -> TestClient:
    """Test client for an app backed by the fake provider."""
    return TestClient(create_app(config, llm=fake_llm))


def _no_bugs_reply(analysis_reply: str) -> str:
    data = json.loads(analysis_reply)
    data["bugs"] = []
    data["improvements"] = []
    return json.dumps(data)


class TestSessionCookie:
    """Test session tracking."""

    def test_sets_http_only_cookie(self, client: TestClient) -> None:
        """Test that the first request creates a session cookie."""
        response = client.get("/")

        cookie = response.headers["set-cookie"]
        assert "code_mentor_session=" in cookie
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()

    def test_sessions_are_isolated(self, config: MentorConfig, fake_llm) -> None:
        """Test that two browsers get separate workspaces."""
        app = create_app(config, llm=fake_llm)
        alice = TestClient(app)
        bob = TestClient(app)

        alice.post("/api/analyze", json={"code": CODE})

        assert bob.get("/api/state").json()["analysis"]["status"] == "idle"
        assert alice.get("/api/state").json()["analysis"]["status"] == "success"


class TestPages:
    """Test the server-rendered pages."""

    def test_index_is_rtl_hebrew(self, client: TestClient) -> None:
        """Test the empty workspace."""
        response = client.get("/")

        assert response.status_code == 200
        assert 'dir="rtl"' in response.text
        assert "עורך הקוד" in response.text

    def test_analyze_redirects_and_renders(self, client: TestClient) -> None:
        """Test POST-redirect-GET for analyze and the critical bug entry."""
        response = client.post("/analyze", data={"code": CODE}, follow_redirects=False)

        assert response.status_code == 303

        page = client.get("/").text
        assert "סיכום כללי (Python)" in page
        assert "חלוקה באפס כאשר הרשימה ריקה" in page
        assert 'class="badge critical">קריטי<' in page
        assert "שורה 5:" in page
        assert NO_BUGS_MESSAGE not in page

    def test_bug_without_line_has_no_line_label(self, client: TestClient) -> None:
        """Test that line labels appear only for bugs with a line."""
        client.post("/analyze", data={"code": CODE})

        page = client.get("/").text

        assert page.count("שורה ") == 1

    def test_no_bugs_message(self, config: MentorConfig, llm_factory, analysis_reply: str) -> None:
        """Test that an empty bug list renders the no-defects message."""
        llm = llm_factory({RequestKind.ANALYZE: _no_bugs_reply(analysis_reply)})
        client = TestClient(create_app(config, llm=llm))

        client.post("/analyze", data={"code": CODE})
        page = client.get("/").text

        assert NO_BUGS_MESSAGE in page
        assert NO_IMPROVEMENTS_MESSAGE in page
        assert 'class="bug"' not in page

    def test_analysis_error_panel(self, config: MentorConfig, llm_factory) -> None:
        """Test that a malformed reply shows the generic error message."""
        llm = llm_factory({RequestKind.ANALYZE: "{broken"})
        client = TestClient(create_app(config, llm=llm))

        client.post("/analyze", data={"code": CODE})
        page = client.get("/").text

        assert "אירעה שגיאה בניתוח הקוד. אנא נסה שנית." in page
        assert "broken" not in page
        assert "סיכום כללי" not in page

    def test_missing_key_message(self, llm_factory) -> None:
        """Test that a missing credential surfaces the shared message."""
        client = TestClient(create_app(MentorConfig(), llm=llm_factory(has_key=False)))

        client.post("/trace", data={"code": CODE})

        assert "ANTHROPIC_API_KEY" in client.get("/").text

    def test_empty_code_is_noop(self, client: TestClient, fake_llm) -> None:
        """Test that submitting empty code sends nothing."""
        response = client.post("/analyze", data={"code": "   "}, follow_redirects=False)

        assert response.status_code == 303
        assert fake_llm.requests == []

    def test_trace_navigation(self, client: TestClient) -> None:
        """Test stepping through a trace and the final output panel."""
        client.post("/trace", data={"code": CODE})

        page = client.get("/").text
        assert "צעד 1 מתוך 3" in page
        assert "total = 0" in page
        assert 'id="final-output"' not in page

        client.post("/trace/next")
        client.post("/trace/next")
        page = client.get("/").text
        assert "צעד 3 מתוך 3" in page
        assert NO_VARIABLES_MESSAGE in page
        assert 'id="final-output"' in page
        assert "סיום" in page

        client.post("/trace/next")
        assert "צעד 3 מתוך 3" in client.get("/").text

        client.post("/trace/previous")
        page = client.get("/").text
        assert "צעד 2 מתוך 3" in page
        assert 'id="final-output"' not in page

        client.post("/trace/reset")
        assert "צעד 1 מתוך 3" in client.get("/").text

    def test_close_trace(self, client: TestClient) -> None:
        """Test dismissing the trace panel."""
        client.post("/trace", data={"code": CODE})

        client.post("/trace/close")

        assert 'id="trace"' not in client.get("/").text

    def test_step_without_trace_is_noop(self, client: TestClient) -> None:
        """Test that stepping with no trace just redirects."""
        response = client.post("/trace/next", follow_redirects=False)

        assert response.status_code == 303

    def test_unknown_step_action(self, client: TestClient) -> None:
        """Test that unknown actions are rejected by validation."""
        assert client.post("/trace/skip").status_code == 422

    def test_refine_updates_corrected_code(self, client: TestClient) -> None:
        """Test the refine loop through the page."""
        client.post("/analyze", data={"code": CODE})

        client.post("/refine", data={"instruction": "הוסף הערות"})
        page = client.get("/").text

        assert "מחזיר 0" in page
        assert "נוספה הערת הסבר לטיפול ברשימה ריקה." in page

    def test_refine_failure_is_inline(
        self, config: MentorConfig, llm_factory, analysis_reply: str
    ) -> None:
        """Test that a refine failure keeps the code and stays in the refine panel."""
        llm = llm_factory({RequestKind.ANALYZE: analysis_reply, RequestKind.REFINE: "nope"})
        client = TestClient(create_app(config, llm=llm))
        client.post("/analyze", data={"code": CODE})

        client.post("/refine", data={"instruction": "rename"})
        page = client.get("/").text

        assert 'id="refine-error"' in page
        assert 'value="rename"' in page
        assert 'id="error"' not in page

    def test_upload(self, client: TestClient) -> None:
        """Test loading a file into the editor."""
        response = client.post(
            "/upload",
            files={"file": ("main.py", b"print('hi')\n", "text/x-python")},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert "print(&#39;hi&#39;)" in client.get("/").text

    def test_upload_rejected(self, client: TestClient) -> None:
        """Test that unsupported files re-render with 400."""
        response = client.post("/upload", files={"file": ("notes.txt", b"x", "text/plain")})

        assert response.status_code == 400
        assert UPLOAD_REJECTED_MESSAGE in response.text

    def test_upload_too_large(self, config: MentorConfig, fake_llm) -> None:
        """Test that files over the size limit are rejected and not loaded."""
        config.uploads.max_bytes = 16
        client = TestClient(create_app(config, llm=fake_llm))

        big = {"file": ("big.py", b"x" * 4096, "text/plain")}
        response = client.post("/upload", files=big)

        assert response.status_code == 400
        assert client.get("/api/state").json()["code"] == ""

    def test_clear(self, client: TestClient) -> None:
        """Test resetting the workspace."""
        client.post("/analyze", data={"code": CODE})

        client.post("/clear")

        state = client.get("/api/state").json()
        assert state["code"] == ""
        assert state["analysis"]["status"] == "idle"


class TestApi:
    """Test the JSON API."""

    def test_initial_state(self, client: TestClient) -> None:
        """Test the empty state document."""
        state = client.get("/api/state").json()

        assert state["analysis"] == {"status": "idle", "data": None, "error": None}
        assert state["trace"]["currentStepIndex"] is None
        assert state["refine"]["currentCode"] == ""
        assert not state["busy"]

    def test_analyze(self, client: TestClient, analysis_reply: str) -> None:
        """Test that analysis data uses the wire shape."""
        response = client.post("/api/analyze", json={"code": CODE})

        assert response.status_code == 200
        data = response.json()["analysis"]["data"]
        expected = json.loads(analysis_reply)
        assert data["correctedCode"] == expected["correctedCode"]
        assert data["bugs"][0] == expected["bugs"][0]
        assert response.json()["refine"]["currentCode"] == expected["correctedCode"]

    def test_analyze_empty_code(self, client: TestClient) -> None:
        """Test that empty input is a 400."""
        assert client.post("/api/analyze", json={"code": ""}).status_code == 400

    def test_analysis_failure_is_state_not_status(self, config: MentorConfig, llm_factory) -> None:
        """Test that model failures are reported in the state document."""
        client = TestClient(create_app(config, llm=llm_factory({RequestKind.ANALYZE: None})))

        response = client.post("/api/analyze", json={"code": CODE})

        assert response.status_code == 200
        analysis = response.json()["analysis"]
        assert analysis["status"] == "error"
        assert analysis["data"] is None
        assert analysis["error"]

    def test_trace_and_step(self, client: TestClient) -> None:
        """Test trace stepping through the API."""
        client.post("/api/trace", json={"code": CODE})

        client.post("/api/trace/next")
        state = client.post("/api/trace/next").json()["trace"]

        assert state["currentStepIndex"] == 2
        assert state["isLast"]
        assert state["showFinalOutput"]
        assert state["data"]["finalOutput"] == "2.0"

    def test_step_without_trace_is_conflict(self, client: TestClient) -> None:
        """Test that stepping with no trace is a 409."""
        assert client.post("/api/trace/next").status_code == 409

    def test_delete_trace(self, client: TestClient) -> None:
        """Test closing the trace."""
        client.post("/api/trace", json={"code": CODE})

        state = client.delete("/api/trace").json()["trace"]

        assert state["status"] == "idle"
        assert state["data"] is None

    def test_refine_without_analysis_is_conflict(self, client: TestClient) -> None:
        """Test that refine needs corrected code."""
        response = client.post("/api/refine", json={"instruction": "x"})

        assert response.status_code == 409

    def test_refine_empty_instruction(self, client: TestClient) -> None:
        """Test that a blank instruction is a 400."""
        client.post("/api/analyze", json={"code": CODE})

        assert client.post("/api/refine", json={"instruction": " "}).status_code == 400

    def test_refine(self, client: TestClient) -> None:
        """Test refine through the API."""
        client.post("/api/analyze", json={"code": CODE})

        refine = client.post("/api/refine", json={"instruction": "add comments"}).json()["refine"]

        assert "מחזיר 0" in refine["currentCode"]
        assert refine["explanation"]
        assert refine["error"] is None

    def test_upload(self, client: TestClient) -> None:
        """Test uploading through the API."""
        response = client.post("/api/upload", files={"file": ("a.js", b"let x = 1;", "text/plain")})

        assert response.status_code == 200
        assert response.json()["code"] == "let x = 1;"

    def test_upload_rejected(self, client: TestClient) -> None:
        """Test that unsupported files are a 400."""
        response = client.post("/api/upload", files={"file": ("a.exe", b"MZ", "text/plain")})

        assert response.status_code == 400

    def test_upload_too_large(self, config: MentorConfig, fake_llm) -> None:
        """Test that the size limit applies to the API as well."""
        config.uploads.max_bytes = 16
        client = TestClient(create_app(config, llm=fake_llm))

        big = {"file": ("big.py", b"x" * 4096, "text/plain")}
        response = client.post("/api/upload", files=big)

        assert response.status_code == 400
        assert "File too large" in response.json()["detail"]

    def test_health(self, client: TestClient) -> None:
        """Test the health endpoint with a configured key."""
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_without_key(self, fake_llm) -> None:
        """Test that a missing key reports unhealthy."""
        client = TestClient(create_app(MentorConfig(), llm=fake_llm))

        response = client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["healthy"] is False
