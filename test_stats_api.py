import json


JOB_DESCRIPTION = (
	"We are hiring a backend engineer to build Python services on FastAPI, own PostgreSQL "
	"schemas, and mentor junior developers across the platform team."
)


def _questions_reply():
	return json.dumps({
		"behavioral": [{"text": "Tell me about a time you owned an outage.", "confidence": "Likely"}],
		"technical": [{"text": "How does connection pooling work?", "confidence": "Likely"}],
		"company": [],
	})


def test_stats_for_new_user(client):
	resp = client.get("/api/stats", headers={"X-User-ID": "alice"})
	assert resp.status_code == 200
	assert resp.json() == {
		"totalQuestions": 0,
		"totalAnswers": 0,
		"savedSessions": 0,
		"daysActive": 0,
		"firstActivity": None,
		"lastActivity": None,
		"recentActivity": [],
	}


def test_generation_and_sessions_update_stats(client, gateway):
	headers = {"X-User-ID": "alice"}
	gateway.replies.append(_questions_reply())
	client.post(
		"/api/generate-questions",
		json={"jobDescription": JOB_DESCRIPTION, "role": "Backend Engineer"},
		headers=headers,
	)
	gateway.replies.append(json.dumps({"answers": [{"question": "Q1", "full": "F", "concise": "C", "keyPoints": ["k"]}]}))
	client.post(
		"/api/generate-answers",
		json={"jobDescription": JOB_DESCRIPTION, "role": "Backend Engineer", "questions": ["Q1"]},
		headers=headers,
	)
	saved = client.post("/api/sessions", json={
		"title": "Loop",
		"jobDescription": JOB_DESCRIPTION,
		"role": "Backend Engineer",
		"questions": [{"text": "Q1", "category": "technical"}],
	}, headers=headers).json()
	client.get("/api/sessions", params={"sessionId": saved["sessionId"]}, headers=headers)

	body = client.get("/api/stats", headers=headers).json()
	assert body["totalQuestions"] == 2
	assert body["totalAnswers"] == 1
	assert body["savedSessions"] == 1
	assert body["daysActive"] == 1
	assert [a["type"] for a in body["recentActivity"]] == [
		"session_loaded",
		"session_saved",
		"answers_generated",
		"questions_generated",
	]
	assert body["recentActivity"][0]["details"] == "Loaded session: Backend Engineer at Company"
	assert body["recentActivity"][3]["details"] == "Generated 2 questions for Backend Engineer role"

	other = client.get("/api/stats", headers={"X-User-ID": "bob"}).json()
	assert other["totalQuestions"] == 0


def test_failed_generation_is_not_counted(client, gateway):
	gateway.replies.append('{"behavioral": [')
	resp = client.post("/api/generate-questions", json={"jobDescription": JOB_DESCRIPTION, "role": "Engineer"})
	assert resp.status_code == 500
	assert client.get("/api/stats").json()["recentActivity"] == []
