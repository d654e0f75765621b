import pytest

from conftest import (
    ScriptedClient,
    quality_master_reply,
    quality_reply,
    review_master_reply,
    review_reply,
)
from gigqa.config import ServiceConfig
from gigqa.errors import ModelInvocationError
from gigqa.models import QualityCheckResult, SubmissionStatus, TextWork
from gigqa.service import MarketplaceService
from gigqa.storage import InMemorySubmissionStore, QualityRecord

JOB_ID = "42"
FREELANCER = "0xfreelancer"


def _service(client, store=None):
    return MarketplaceService(client, store or InMemorySubmissionStore(), ServiceConfig(), resolver=TextWork)


def _submitted(poem_job, quality=8):
    store = InMemorySubmissionStore()
    client = ScriptedClient([quality_reply(quality), quality_master_reply()])
    resp = _service(client, store).submit_work(JOB_ID, FREELANCER, "ocean poem", poem_job)
    assert resp.body["success"] is True
    return store


def test_submit_work_creates_pending_submission(poem_job):
    store = InMemorySubmissionStore()
    client = ScriptedClient([quality_reply(8), quality_master_reply()])

    resp = _service(client, store).submit_work(JOB_ID, FREELANCER, "ocean poem", poem_job)

    assert resp.status_code == 200
    assert resp.body["message"] == "Work submitted successfully and is pending review!"
    assert resp.body["qualityScore"] == 8
    assert resp.body["feedback"] == {"positive": ["Clear imagery"], "negative": ["One line too long"]}
    submission = store.get_submission(JOB_ID, FREELANCER)
    assert submission.status is SubmissionStatus.PENDING
    assert store.latest_quality_record(JOB_ID, FREELANCER).result.quality == 8


def test_low_quality_work_is_bounced(poem_job):
    store = InMemorySubmissionStore()
    client = ScriptedClient([quality_reply(7), quality_master_reply()])

    resp = _service(client, store).submit_work(JOB_ID, FREELANCER, "weak poem", poem_job)

    assert resp.status_code == 400
    assert resp.body["success"] is False
    assert resp.body["qualityScore"] == 7
    assert store.get_submission(JOB_ID, FREELANCER) is None


def test_upstream_failure_is_a_generic_internal_error(poem_job):
    client = ScriptedClient([ModelInvocationError("upstream 502 from provider xyz")])

    resp = _service(client).submit_work(JOB_ID, FREELANCER, "poem", poem_job)

    assert resp.status_code == 500
    assert resp.body == {"success": False, "message": "Internal Server Error"}


def test_approve(poem_job):
    store = _submitted(poem_job)

    resp = _service(ScriptedClient(), store).employer_action(JOB_ID, FREELANCER, "approve", poem_job)

    assert resp.body == {"success": True, "message": "Work approved successfully!"}
    assert store.get_submission(JOB_ID, FREELANCER).status is SubmissionStatus.APPROVED


def test_vague_rejection_is_vetoed(poem_job):
    store = _submitted(poem_job)
    client = ScriptedClient([review_reply(3, 5, 2), review_master_reply()])

    resp = _service(client, store).employer_action(
        JOB_ID, FREELANCER, "reject", poem_job, rejection_reason="I don't like it",
    )

    assert resp.body["success"] is False
    assert resp.body["action"] == "cannot_reject"
    assert resp.body["canReject"] is False
    assert "(Review Score: 3.0/10)" in resp.body["message"]
    submission = store.get_submission(JOB_ID, FREELANCER)
    assert submission.status is SubmissionStatus.PENDING
    assert submission.rejection_reason is None


def test_rejection_requests_revision_then_resubmission(poem_job):
    store = _submitted(poem_job)
    client = ScriptedClient([
        review_reply(7, 8, 4), review_master_reply(["Nine lines, not ten"]),
        quality_reply(9), quality_master_reply(),
    ])
    service = _service(client, store)

    resp = service.employer_action(JOB_ID, FREELANCER, "reject", poem_job, rejection_reason="Only nine lines")

    assert resp.body["success"] is True
    assert resp.body["action"] == "revision_requested"
    assert resp.body["retriesLeft"] == 1
    assert resp.body["reviewResult"]["criticalConsideration"] == ["Nine lines, not ten"]
    # the review sees the stored quality result
    assert '"quality": 8' in client.prompts[0]
    assert store.get_submission(JOB_ID, FREELANCER).status is SubmissionStatus.REVISION_REQUESTED

    resp = service.submit_work(JOB_ID, FREELANCER, "ten line poem", poem_job)

    submission = store.get_submission(JOB_ID, FREELANCER)
    assert resp.body["success"] is True
    assert submission.status is SubmissionStatus.PENDING
    assert submission.retry_count == 1
    assert submission.work == "ten line poem"


def test_final_rejection_after_retries_exhausted(poem_job):
    store = _submitted(poem_job)
    store.get_submission(JOB_ID, FREELANCER).retry_count = 2
    client = ScriptedClient([review_reply(6, 7, 3), review_master_reply()])

    resp = _service(client, store).employer_action(JOB_ID, FREELANCER, "reject", poem_job, rejection_reason="Still wrong")

    assert resp.body["action"] == "final_rejection"
    assert resp.body["message"] == "Work rejected - maximum retries exceeded"
    assert "retriesLeft" not in resp.body
    assert store.get_submission(JOB_ID, FREELANCER).status is SubmissionStatus.REJECTED


def test_reassignment_recommended(poem_job):
    store = _submitted(poem_job)
    client = ScriptedClient([review_reply(9, 2, 8), review_master_reply()])

    resp = _service(client, store).employer_action(JOB_ID, FREELANCER, "reject", poem_job, rejection_reason="Off topic")

    assert resp.body["action"] == "reassign_recommended"
    assert store.get_submission(JOB_ID, FREELANCER).status is SubmissionStatus.REJECTED


def test_review_failure_leaves_submission_untouched(poem_job):
    store = _submitted(poem_job)
    client = ScriptedClient([ModelInvocationError("timeout")])

    resp = _service(client, store).employer_action(JOB_ID, FREELANCER, "reject", poem_job, rejection_reason="Bad")

    assert resp.status_code == 500
    assert resp.body["message"] == "Internal Server Error"
    submission = store.get_submission(JOB_ID, FREELANCER)
    assert submission.status is SubmissionStatus.PENDING
    assert submission.review_score is None


@pytest.mark.parametrize("action,reason,status,message", [
    ("reject", None, 400, "Rejection reason is required"),
    ("archive", None, 400, "Invalid action"),
])
def test_employer_action_bad_requests(poem_job, action, reason, status, message):
    store = _submitted(poem_job)
    resp = _service(ScriptedClient(), store).employer_action(
        JOB_ID, FREELANCER, action, poem_job, rejection_reason=reason,
    )
    assert resp.status_code == status
    assert resp.body == {"success": False, "message": message}


def test_employer_action_unknown_submission(poem_job):
    resp = _service(ScriptedClient()).employer_action(JOB_ID, "0xnobody", "approve", poem_job)
    assert resp.status_code == 404
    assert resp.body["message"] == "Work submission not found"


def test_resubmitting_approved_work_is_a_conflict(poem_job):
    store = _submitted(poem_job)
    service = _service(ScriptedClient(), store)
    service.employer_action(JOB_ID, FREELANCER, "approve", poem_job)

    resp = service.submit_work(JOB_ID, FREELANCER, "another poem", poem_job)

    assert resp.status_code == 409
    assert store.get_submission(JOB_ID, FREELANCER).status is SubmissionStatus.APPROVED


def test_list_submissions(poem_job):
    store = _submitted(poem_job)
    service = _service(ScriptedClient(), store)

    resp = service.list_submissions(JOB_ID)
    assert resp.body["success"] is True
    assert [s["freelancerAddress"] for s in resp.body["submissions"]] == [FREELANCER]
    assert resp.body["submissions"][0]["status"] == "pending"

    assert service.list_submissions(JOB_ID, "0xother").body["submissions"] == []
    assert service.list_submissions(None).status_code == 400


def test_extract_job():
    client = ScriptedClient([
        'Here are the details: {"title": "Poem", "description": "A nature poem", '
        '"requirements": ["10 lines"], "instructions": ["Must rhyme"]}'
    ])

    resp = _service(client).extract_job("Need a 10 line rhyming nature poem")

    assert resp.body == {
        "title": "Poem",
        "description": "A nature poem",
        "requirements": ["10 lines"],
        "instructions": ["Must rhyme"],
    }
    assert "Need a 10 line rhyming nature poem" in client.prompts[0]


def test_extract_job_failure():
    resp = _service(ScriptedClient(["no idea"])).extract_job("???")
    assert resp.status_code == 500
    assert resp.body == {"error": "Failed to extract job details"}


def test_gig_image_prompt_mentions_job():
    client = ScriptedClient()
    png = _service(client).gig_image("Logo design", "A fox logo for a coffee shop")
    assert png.startswith(b"\x89PNG")
    assert "Title: Logo design" in client.image_prompts[0]


def test_review_uses_the_disputed_freelancers_own_quality_result(poem_job):
    store = _submitted(poem_job, quality=9)
    other = ScriptedClient([quality_reply(3, negative=("Not a poem",)), quality_master_reply(negative=("Not a poem",))])
    bounced = _service(other, store).submit_work(JOB_ID, "0xother", "grocery list", poem_job)
    assert bounced.status_code == 400
    preview = ScriptedClient([quality_reply(2), quality_master_reply()])
    _service(preview, store).check_quality(JOB_ID, "draft", poem_job)

    client = ScriptedClient([review_reply(7, 8, 4), review_master_reply()])
    _service(client, store).employer_action(JOB_ID, FREELANCER, "reject", poem_job, rejection_reason="Too short")

    assert '"quality": 9' in client.prompts[0]
    assert "Not a poem" not in client.prompts[0]


def test_quality_record_lookup_matches_freelancer_and_work():
    store = InMemorySubmissionStore()
    result = QualityCheckResult(8.0, [], [])
    store.add_quality_record(QualityRecord(JOB_ID, FREELANCER, "first draft", result))
    store.add_quality_record(QualityRecord(JOB_ID, FREELANCER, "second draft", QualityCheckResult(5.0, [], [])))
    store.add_quality_record(QualityRecord(JOB_ID, None, "first draft", QualityCheckResult(1.0, [], [])))

    assert store.latest_quality_record(JOB_ID, FREELANCER).result.quality == 5.0
    assert store.latest_quality_record(JOB_ID, FREELANCER, work="first draft").result is result
    assert store.latest_quality_record(JOB_ID, "0xother") is None
