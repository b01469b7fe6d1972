"""
Distributor portal operations.

Distributors create merchant accounts on behalf of their merchants, submit
onboarding bundles for them, assign products and keep per-distributor
payout and Aadhaar configuration.
"""

import logging
from typing import Any
from uuid import UUID, uuid4

from auth.exceptions import PermissionDeniedError
from auth.service import AuthService
from auth.types import Role
from clients.postgres_client import PostgresClient
from core.models import (
    AssignProductRequest, CreateMerchantRequest, EntityType, MerchantProduct,
    MerchantProfile, OnboardingStatus, OnboardingSubmission,
)
from core.services.merchant_service import MerchantService
from core.services.onboarding_service import DEFAULT_SETTLEMENT_TYPE, OnboardingService
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

CONFIG_TYPES = ("payout", "aadhaar")

ENTITY_TYPE_ALIASES = {
    "sole_proprietor": EntityType.PROPRIETORSHIP,
    "sole_proprietorship": EntityType.PROPRIETORSHIP,
    "proprietor": EntityType.PROPRIETORSHIP,
    "sole": EntityType.PROPRIETORSHIP,
    "private_limited": EntityType.PVT_LTD_LLP,
    "pvt_ltd": EntityType.PVT_LTD_LLP,
    "government": EntityType.GOVERNMENT_PSU,
    "psu": EntityType.GOVERNMENT_PSU,
}


class InvalidEntityTypeError(ValueError):
    code = "VALIDATION_ERROR"


def normalize_entity_type(value: str | None) -> EntityType:
    """
    Map free-text entity types onto the stored values.

    Blank input means proprietorship. Spaces and hyphens are treated as
    underscores, so "Pvt Ltd" and "pvt-ltd" both become pvt_ltd_llp.

    Raises:
        InvalidEntityTypeError: If the value matches nothing known
    """
    raw = (value or "").strip().lower()
    if not raw:
        return EntityType.PROPRIETORSHIP

    munged = "_".join(raw.replace("-", " ").split())
    try:
        return EntityType(munged)
    except ValueError:
        pass

    if munged in ENTITY_TYPE_ALIASES:
        return ENTITY_TYPE_ALIASES[munged]

    allowed = ", ".join(e.value for e in EntityType)
    raise InvalidEntityTypeError(f"Invalid entityType '{value}'. Allowed: {allowed}")


class DistributorService:
    """Service for distributor-initiated merchant management."""

    def __init__(
        self,
        postgres: PostgresClient,
        merchants: MerchantService,
        onboarding: OnboardingService,
        auth_service: AuthService,
    ):
        self.postgres = postgres
        self.merchants = merchants
        self.onboarding = onboarding
        self.auth_service = auth_service

    def _owned_merchant(self, distributor_id: UUID, merchant_id: UUID) -> MerchantProfile:
        """
        Raises:
            ValueError: If merchant not found
            PermissionDeniedError: If the merchant belongs to another distributor
        """
        merchant = self.merchants.require(merchant_id)
        if merchant.distributor_id != distributor_id:
            raise PermissionDeniedError("Merchant does not belong to you")
        return merchant

    def create_merchant(self, distributor_id: UUID, data: CreateMerchantRequest) -> dict[str, Any]:
        """
        Create a merchant user, its role row and a pending profile linked to the distributor.

        The user is deleted again if the profile cannot be created.

        Raises:
            PermissionDeniedError: distributorId is not the caller
            InvalidEntityTypeError: Unknown entity type
            WeakPasswordError / UserAlreadyExistsError: From account creation
        """
        if data.distributorId != distributor_id:
            raise PermissionDeniedError("distributorId must match your own account")

        entity_type = normalize_entity_type(data.entityType)

        user = self.auth_service.create_role_user(
            data.fullName, data.email, data.password, Role.MERCHANT
        )

        try:
            row = self.postgres.execute_returning(
                """
                INSERT INTO merchant_profiles (
                    id, user_id, full_name, mobile_number, email, distributor_id,
                    business_name, entity_type, pan_number, gst_number,
                    onboarding_status, created_at, updated_at
                ) VALUES (
                    %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s,
                    %s, %s, %s
                )
                RETURNING *
                """,
                (
                    uuid4(), user.id, data.fullName, data.mobileNumber, user.email, distributor_id,
                    data.businessName, entity_type.value, data.panNumber, data.gstNumber,
                    OnboardingStatus.PENDING.value, now_utc(), now_utc()
                )
            )[0]
        except Exception:
            logger.error(f"Failed to create merchant profile for {user.email}, removing user {user.id}")
            self.auth_service.remove_user(user.id)
            raise

        profile = MerchantProfile.model_validate(row)
        logger.info(f"Distributor {distributor_id} created merchant user={user.id} profile={profile.id}")
        return {
            "merchantUserId": str(user.id),
            "merchantProfileId": str(profile.id),
            "email": user.email,
            "message": "Merchant account created successfully",
        }

    def submit_onboarding(self, distributor_id: UUID, submission: OnboardingSubmission) -> dict[str, Any]:
        """Submit an onboarding bundle for one of the distributor's merchants."""
        self._owned_merchant(distributor_id, submission.merchantProfileId)
        return self.onboarding.submit(submission)

    def list_merchants(self, distributor_id: UUID) -> list[MerchantProfile]:
        return self.merchants.list_for_distributor(distributor_id)

    def assign_product(self, distributor_id: UUID, data: AssignProductRequest) -> dict[str, Any]:
        """
        Assign a product to one of the distributor's merchants or to the distributor.

        Raises:
            ValueError: Missing merchantId, unknown assignTo, or merchant not found
            PermissionDeniedError: Merchant belongs to another distributor
        """
        settlement_type = data.settlementType or DEFAULT_SETTLEMENT_TYPE
        now = now_utc()

        if data.assignTo == "merchant":
            if data.merchantId is None:
                raise ValueError("merchantId is required when assignTo=merchant")
            self._owned_merchant(distributor_id, data.merchantId)

            row = self.postgres.execute_returning(
                """
                INSERT INTO merchant_products (
                    id, merchant_id, product_type, settlement_type, status, created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING *
                """,
                (uuid4(), data.merchantId, data.productType, settlement_type, "pending", now, now)
            )[0]
            product = MerchantProduct.model_validate(row)
            logger.info(f"Product {data.productType} assigned to merchant {data.merchantId}")
            return {"message": "Product assigned to merchant", "product": product.model_dump(mode="json")}

        if data.assignTo == "distributor":
            self.postgres.execute(
                """
                INSERT INTO distributor_products (
                    id, distributor_id, product_type, settlement_type, status, created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (uuid4(), distributor_id, data.productType, settlement_type, "active", now, now)
            )
            logger.info(f"Product {data.productType} assigned to distributor {distributor_id}")
            return {"message": "Product assigned to distributor"}

        raise ValueError(f"Invalid assignTo value '{data.assignTo}'")

    def get_configs(self, distributor_id: UUID) -> dict[str, Any]:
        """All saved configs keyed by config_type."""
        rows = self.postgres.execute(
            "SELECT config_type, config_data FROM distributor_configs WHERE distributor_id = %s",
            (distributor_id,)
        )
        return {row["config_type"]: row["config_data"] for row in rows}

    def get_config(self, distributor_id: UUID, config_type: str) -> dict[str, Any]:
        """
        Raises:
            ValueError: Unknown config type, or nothing saved yet
        """
        _check_config_type(config_type)
        row = self.postgres.execute_single(
            """
            SELECT config_data FROM distributor_configs
            WHERE distributor_id = %s AND config_type = %s
            """,
            (distributor_id, config_type)
        )
        if row is None:
            raise ValueError(f"{config_type.capitalize()} config not found")
        return row["config_data"]

    def save_config(self, distributor_id: UUID, config_type: str, config_data: dict[str, Any]) -> dict[str, Any]:
        """Upsert one config on (distributor_id, config_type)."""
        _check_config_type(config_type)
        row = self.postgres.execute_returning(
            """
            INSERT INTO distributor_configs (distributor_id, config_type, config_data, updated_at)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (distributor_id, config_type) DO UPDATE SET
                config_data = EXCLUDED.config_data,
                updated_at = EXCLUDED.updated_at
            RETURNING config_data
            """,
            (distributor_id, config_type, config_data, now_utc())
        )[0]
        logger.info(f"Saved {config_type} config for distributor {distributor_id}")
        return row["config_data"]


def _check_config_type(config_type: str) -> None:
    if config_type not in CONFIG_TYPES:
        raise ValueError(f"Unknown config type '{config_type}'. Expected one of: {', '.join(CONFIG_TYPES)}")
