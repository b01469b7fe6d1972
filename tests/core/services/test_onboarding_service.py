"""Tests for OnboardingService."""

from unittest.mock import Mock, call
from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.models import (
    DocumentInput,
    OnboardingStatus,
    OnboardingSubmission,
    ProductsInput,
)
from core.services.merchant_service import MerchantService
from core.services.onboarding_service import OnboardingService, document_rows


@pytest.fixture
def merchants(merchant):
    service = Mock(spec=MerchantService)
    service.require.return_value = merchant.model_copy(update={"onboarding_status": OnboardingStatus.PENDING})
    service.get_kyc.return_value = None
    service.get_bank_details.return_value = None
    service.list_documents.return_value = []
    service.list_products.return_value = []
    return service


@pytest.fixture
def onboarding(db, merchants):
    return OnboardingService(db, merchants)


def _documents():
    return {
        "panCard": DocumentInput(path="m/pan.jpg", file={"name": "pan.jpg", "size": 100, "type": "image/jpeg"}),
        "aadhaarCard": DocumentInput(path="m/aadhaar.jpg", file={"name": "  "}),
        "cancelledCheque": DocumentInput(path=None, file={"name": "cheque.jpg"}),
        "selfie": DocumentInput(path="m/selfie.jpg", file={"name": "selfie.jpg"}),
    }


def _queries(db):
    return [c.args[0] for c in db.execute.call_args_list]


class TestDocumentRows:

    def test_filters_incomplete_entries(self):
        rows = document_rows(uuid4(), _documents())

        assert len(rows) == 1
        assert rows[0]["document_type"] == "pan_card"
        assert rows[0]["file_name"] == "pan.jpg"
        assert rows[0]["mime_type"] == "image/jpeg"


class TestSaveDocuments:

    def test_replaces_existing_rows(self, onboarding, db):
        merchant_id = uuid4()

        assert onboarding.save_documents(merchant_id, _documents()) == 1

        queries = _queries(db)
        assert "DELETE FROM merchant_documents" in queries[0]
        assert "INSERT INTO merchant_documents" in queries[1]

    def test_all_rows_in_one_insert(self, onboarding, db):
        documents = _documents()
        documents["businessProof"] = DocumentInput(path="m/gst.pdf", file={"name": "gst.pdf", "type": "application/pdf"})

        assert onboarding.save_documents(uuid4(), documents) == 2

        assert db.execute.call_count == 2
        query, params = db.execute.call_args_list[1].args
        assert query.count("(%s, %s, %s, %s, %s, %s, %s, %s, %s)") == 2
        assert len(params) == 18
        assert {params[2], params[11]} == {"pan_card", "business_proof"}

    def test_nothing_valid_deletes_nothing(self, onboarding, db):
        assert onboarding.save_documents(uuid4(), {"selfie": DocumentInput(path="x")}) == 0
        db.execute.assert_not_called()


class TestSaveSteps:

    def test_unknown_step(self, onboarding):
        with pytest.raises(ValueError, match="Unknown onboarding step"):
            onboarding.save_step(uuid4(), "payment", {})

    def test_bank_details_upserted(self, onboarding, db, merchant):
        onboarding.save_step(merchant.id, "bank-details", {
            "accountNumber": "1234567890", "ifscCode": "hdfc0001234",
        })

        query, params = db.execute.call_args_list[0].args
        assert "ON CONFLICT (merchant_id)" in query
        assert params[2] == "HDFC0001234"

    def test_pending_moves_to_in_progress(self, onboarding, merchants, merchant):
        onboarding.save_step(merchant.id, "kyc", {"isVideoCompleted": True})

        merchants.set_onboarding_status.assert_called_once_with(merchant.id, OnboardingStatus.IN_PROGRESS)

    def test_in_progress_not_touched(self, onboarding, merchants, merchant):
        merchants.require.return_value = merchant.model_copy(
            update={"onboarding_status": OnboardingStatus.IN_PROGRESS}
        )

        onboarding.save_step(merchant.id, "kyc", {"isVideoCompleted": True})

        merchants.set_onboarding_status.assert_not_called()

    def test_profile_maps_field_names(self, onboarding, merchants, merchant):
        onboarding.save_step(merchant.id, "profile", {"fullName": "Anand", "panNumber": "ABCDE1234F"})

        merchants.update.assert_called_once_with(
            merchant.id, {"full_name": "Anand", "pan_number": "ABCDE1234F"}
        )

    def test_invalid_payload(self, onboarding, merchants, merchant):
        with pytest.raises(ValueError, match="Invalid bank-details payload") as exc_info:
            onboarding.save_step(merchant.id, "bank-details", {"accountNumber": "1"})

        assert not isinstance(exc_info.value, ValidationError)
        merchants.require.assert_not_called()

    def test_returns_state(self, onboarding, merchant):
        state = onboarding.save_step(merchant.id, "products", {"selectedProducts": []})

        assert set(state) == {"profile", "bankDetails", "documents", "kyc", "products"}


class TestSaveProducts:

    def test_default_settlement(self, onboarding, db):
        assert onboarding.save_products(uuid4(), ProductsInput(selectedProducts=["upi", "pos"])) == 2

        insert_params = db.execute.call_args_list[1].args[1]
        assert insert_params[3] == "next_day"

    def test_all_products_in_one_insert(self, onboarding, db):
        onboarding.save_products(uuid4(), ProductsInput(selectedProducts=["upi", "pos", "soundbox"]))

        assert db.execute.call_count == 2
        query, params = db.execute.call_args_list[1].args
        assert query.count("(%s, %s, %s, %s, %s)") == 3
        assert params[2::5] == ("upi", "pos", "soundbox")

    def test_no_selection_keeps_existing(self, onboarding, db):
        assert onboarding.save_products(uuid4(), ProductsInput()) == 0
        db.execute.assert_not_called()


class TestSubmit:

    def _submission(self, merchant_id):
        return OnboardingSubmission(
            merchantProfileId=merchant_id,
            fullName="Anand Traders",
            bankDetails={"accountNumber": "1234567890", "ifscCode": "HDFC0001234"},
            documents=_documents(),
            kycData={"isVideoCompleted": True, "locationVerified": True, "latitude": 12.9, "longitude": 77.6},
            selectedProducts=["upi"],
        )

    def test_runs_steps_in_order(self, onboarding, db, merchants, merchant):
        result = onboarding.submit(self._submission(merchant.id))

        queries = _queries(db)
        assert "merchant_bank_details" in queries[0]
        assert "DELETE FROM merchant_documents" in queries[1]
        assert "INSERT INTO merchant_kyc" in queries[3]
        assert "DELETE FROM merchant_products" in queries[4]
        merchants.set_onboarding_status.assert_called_once_with(merchant.id, OnboardingStatus.SUBMITTED)
        assert result == {
            "merchantProfileId": str(merchant.id),
            "onboardingStatus": "submitted",
            "documents": 1,
            "products": 1,
        }

    def test_unknown_merchant_writes_nothing(self, onboarding, db, merchants):
        merchants.require.side_effect = ValueError("Merchant x not found")

        with pytest.raises(ValueError, match="not found"):
            onboarding.submit(self._submission(uuid4()))

        db.execute.assert_not_called()

    def test_fails_fast_without_rollback(self, onboarding, db, merchants, merchant):
        """A failure in a later step leaves earlier writes in place."""
        db.execute.side_effect = [None, RuntimeError("connection lost")]

        with pytest.raises(RuntimeError):
            onboarding.submit(self._submission(merchant.id))

        assert len(db.execute.call_args_list) == 2
        merchants.set_onboarding_status.assert_not_called()
