"""Tests for BankService."""

from unittest.mock import Mock
from uuid import uuid4

import pytest

from core.models import OnboardingStatus
from core.services.bank_service import BankService
from core.services.merchant_service import MerchantService


@pytest.fixture
def merchants(merchant):
    service = Mock(spec=MerchantService)
    service.get_by_id.return_value = merchant.model_copy(
        update={"onboarding_status": OnboardingStatus.PENDING_BANK_APPROVAL}
    )
    service.update.side_effect = lambda merchant_id, fields: merchant.model_copy(update=fields)
    return service


@pytest.fixture
def bank_service(merchants):
    return BankService(merchants)


class TestQueue:

    def test_pending_ordered_by_update(self, bank_service, merchants):
        merchants.list_by_status.return_value = []

        bank_service.list_pending()

        merchants.list_by_status.assert_called_once_with(
            OnboardingStatus.PENDING_BANK_APPROVAL, order_by="updated_at"
        )

    def test_unknown_application(self, bank_service, merchants):
        merchants.get_by_id.return_value = None

        with pytest.raises(ValueError, match="Application .* not found"):
            bank_service.get_application(uuid4())


class TestDecide:

    def test_approve(self, bank_service, merchants, merchant):
        profile = bank_service.decide(merchant.id, "approve", "Verified with branch")

        fields = merchants.update.call_args.args[1]
        assert fields["onboarding_status"] == OnboardingStatus.APPROVED
        assert fields["bank_approved_at"] is not None
        assert fields["bank_decision_notes"] == "Verified with branch"
        assert profile.onboarding_status == OnboardingStatus.APPROVED

    def test_reject(self, bank_service, merchants, merchant):
        bank_service.decide(merchant.id, "reject", "Account mismatch")

        fields = merchants.update.call_args.args[1]
        assert fields["onboarding_status"] == OnboardingStatus.BANK_REJECTED
        assert fields["bank_approved_at"] is None

    def test_invalid_decision_writes_nothing(self, bank_service, merchants, merchant):
        with pytest.raises(ValueError, match="approve or reject"):
            bank_service.decide(merchant.id, "hold")

        merchants.update.assert_not_called()

    def test_unknown_application_writes_nothing(self, bank_service, merchants):
        merchants.get_by_id.return_value = None

        with pytest.raises(ValueError, match="not found"):
            bank_service.decide(uuid4(), "approve")

        merchants.update.assert_not_called()
