"""Tests for the KYC decision trail."""

import logging
from uuid import uuid4

from core.audit import REVIEW_ACTION, KYCAuditLogger


class TestLogAction:
    """Writes are best-effort."""

    def test_inserts_entry(self, db):
        audit = KYCAuditLogger(db)
        merchant_id = uuid4()
        staff_id = uuid4()

        assert audit.log_action(merchant_id, "verified", "Looks good", staff_id) is True

        query, params = db.execute.call_args.args
        assert "INSERT INTO support_kyc_actions" in query
        assert params[1] == staff_id
        assert params[2] == merchant_id
        assert params[3] == REVIEW_ACTION
        assert params[4] == "verified"
        assert params[5] == "Looks good"

    def test_staff_id_optional(self, db):
        """Admins reviewing outside the support portal have no staff id."""
        KYCAuditLogger(db).log_action(uuid4(), "rejected")

        params = db.execute.call_args.args[1]
        assert params[1] is None

    def test_write_failure_returns_false(self, db, caplog):
        db.execute.side_effect = RuntimeError("relation does not exist")
        audit = KYCAuditLogger(db)

        with caplog.at_level(logging.ERROR, logger="core.audit"):
            assert audit.log_action(uuid4(), "verified") is False

        assert "Failed to write KYC audit entry" in caplog.text
