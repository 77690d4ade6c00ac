"""Tests for legacy field migration and diagnostics."""

import pytest

from campuslink.services.migration_service import (
    MIGRATIONS,
    diagnose_requests,
    plan_document,
    rename_fields,
    run_migration,
)


@pytest.fixture
def requests_collection(mongo_db):
    collection = mongo_db["mentor_requests"]
    collection.insert_many([
        {"from_user_id": 1, "to_user_id": 2, "message": "legacy", "status": "pending"},
        {"sender_id": 3, "receiver_id": 1, "message": "current", "status": "pending"},
        {"from_user_id": 1, "to_user_id": 4, "sender_id": 1, "receiver_id": 4, "status": "accepted"},
        {"message": "orphan", "status": "pending"},
    ])
    return collection


class TestPlanDocument:

    def test_copies_missing_fields(self):
        update = plan_document({"from_user_id": 1, "to_user_id": 2}, MIGRATIONS["mentor_requests"])
        assert update == {"$set": {"sender_id": 1, "receiver_id": 2}}

    def test_drop_old(self):
        update = plan_document(
            {"skills_offered": ["Guitar"], "skills_have": ["Guitar"]},
            MIGRATIONS["profiles"],
            keep_old=False
        )
        assert update == {"$unset": {"skills_offered": ""}}

    def test_nothing_to_do(self):
        doc = {"from_user_id": 1, "sender_id": 1}
        assert plan_document(doc, {"from_user_id": "sender_id"}) is None


class TestRenameFields:

    def test_report_buckets(self, requests_collection):
        report = rename_fields(requests_collection, MIGRATIONS["mentor_requests"])

        assert report == {"checked": 4, "migrated": 1, "skipped": 2, "unexpected": 1}
        migrated = requests_collection.find_one({"message": "legacy"})
        assert migrated["sender_id"] == 1
        assert migrated["receiver_id"] == 2
        assert migrated["from_user_id"] == 1

    def test_dry_run_writes_nothing(self, requests_collection):
        report = rename_fields(requests_collection, MIGRATIONS["mentor_requests"], dry_run=True)

        assert report["migrated"] == 1
        assert "sender_id" not in requests_collection.find_one({"message": "legacy"})

    def test_drop_old_fields(self, requests_collection):
        rename_fields(requests_collection, MIGRATIONS["mentor_requests"], keep_old=False)

        assert requests_collection.count_documents({"from_user_id": {"$exists": True}}) == 0
        assert requests_collection.count_documents({"sender_id": 1}) == 2

    def test_second_run_is_noop(self, requests_collection):
        rename_fields(requests_collection, MIGRATIONS["mentor_requests"])
        report = rename_fields(requests_collection, MIGRATIONS["mentor_requests"])
        assert report["migrated"] == 0
        assert report["skipped"] == 3

    def test_run_migration_by_name(self, mongo_db):
        mongo_db["profiles"].insert_one({"user_id": 9, "skills_offered": ["Chess"], "skills_wanted": ["Go"]})

        report = run_migration("profiles")

        assert report["migrated"] == 1
        profile = mongo_db["profiles"].find_one({"user_id": 9})
        assert profile["skills_have"] == ["Chess"]
        assert profile["skills_to_learn"] == ["Go"]

    def test_unknown_migration(self):
        with pytest.raises(KeyError):
            run_migration("chats")


class TestDiagnoseRequests:

    def test_counts_both_naming_schemes(self, requests_collection):
        report = diagnose_requests(1, sample_size=2)

        assert report["sent"] == {"sender_id": 1, "from_user_id": 2}
        assert report["received"] == {"receiver_id": 1, "to_user_id": 0}
        assert report["total_requests"] == 4
        assert len(report["sample"]) == 2
        assert "from_user_id" in report["sample"][0]["fields"]
