"""Manager service orchestrating provisioning, profile maintenance, and listing."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum

from .contracts import (
    DuplicateAccountError,
    EditManagerInput,
    IdentityResult,
    ImageUpload,
    NewManagerRecord,
    ProvisioningRequest,
    UpdateProfileInput,
)
from .manager import ManagerAccount
from .messages import onboarding_request_email, welcome_email
from .pagination import InvalidPageSize, Page, paginate
from .ports import AccountStore, CredentialGenerator, IdentityRegistrar, ImageStore, Notifier
from .results import ErrorKind, Result
from ..metrics import COMPENSATING_DELETES, PROVISIONING_OUTCOMES

logger = logging.getLogger(__name__)

MANAGER_SORT_KEYS = (
    lambda manager: manager.company_name.casefold(),
    lambda manager: manager.business_email.casefold(),
)


class ProvisioningStage(str, Enum):
    duplicate_check = "duplicate_check"
    domain_record_created = "domain_record_created"
    identity_registered = "identity_registered"
    notification_sent = "notification_sent"
    done = "done"
    done_with_warning = "done_with_warning"
    domain_record_deleted = "domain_record_deleted"
    failed = "failed"


class ManagerService:
    """Manager account workflows backed by injected stores and gateways."""

    def __init__(
        self,
        accounts: AccountStore,
        identities: IdentityRegistrar,
        notifier: Notifier,
        credentials: CredentialGenerator,
        *,
        images: ImageStore | None = None,
        admin_email: str | None = None,
    ) -> None:
        """Store the collaborators used by every workflow."""
        self._accounts = accounts
        self._identities = identities
        self._notifier = notifier
        self._credentials = credentials
        self._images = images
        self._admin_email = admin_email

    def create_manager(self, request: ProvisioningRequest) -> Result[ManagerAccount]:
        """Provision a manager account, its sign-in identity, and the welcome email.

        The domain record is committed before the identity is registered so the
        identity can be bound to the assigned ``manager_id``. When registration
        fails the record is deleted again, so no account outlives a missing
        identity. A failed welcome email is not compensated: the result is a
        partial success carrying the mail error in ``details``.
        """
        existing = self._accounts.find_by_email(request.business_email)
        if len(existing) > 0:
            logger.info("manager provisioning rejected, email already registered")
            return self._finish(
                ProvisioningStage.duplicate_check,
                Result.failure(ErrorKind.conflict, "Manager with this email already exist."),
            )

        credential = self._credentials.generate(request.business_email, request.company_name)

        try:
            account = self._accounts.create(
                NewManagerRecord(
                    business_email=request.business_email,
                    company_name=request.company_name,
                    company_description=request.company_description,
                )
            )
        except DuplicateAccountError:
            logger.info("manager provisioning lost a duplicate-email race")
            return self._finish(
                ProvisioningStage.duplicate_check,
                Result.failure(ErrorKind.conflict, "Manager with this email already exist."),
            )
        except Exception as exc:
            logger.exception("manager record could not be created")
            return self._finish(
                ProvisioningStage.failed,
                Result.failure(
                    ErrorKind.upstream_failure, "Unable to create manager record.", (str(exc),)
                ),
            )
        self._log_stage(account, ProvisioningStage.domain_record_created)

        identity = self._register_identity(account, credential)
        if not identity.succeeded:
            return self._compensate(account, identity)
        self._log_stage(account, ProvisioningStage.identity_registered)

        subject, body = welcome_email(account.business_email, credential)
        try:
            self._notifier.send_html_email(account.business_email, subject, body)
        except Exception as exc:
            logger.warning(
                "welcome email for manager %s could not be sent: %s", account.manager_id, exc
            )
            return self._finish(
                ProvisioningStage.done_with_warning,
                Result.partial_success(
                    account, f"{identity.message}. Unable to Send Email", (str(exc),)
                ),
            )

        self._log_stage(account, ProvisioningStage.notification_sent)
        logger.info("manager %s provisioned", account.manager_id)
        return self._finish(ProvisioningStage.done, Result.success(account, identity.message))

    def _register_identity(self, account: ManagerAccount, credential: str) -> IdentityResult:
        try:
            return self._identities.register_manager_identity(
                account.manager_id, account.business_email, credential
            )
        except Exception as exc:
            logger.exception("identity registrar raised for manager %s", account.manager_id)
            return IdentityResult(succeeded=False, message=str(exc) or "Identity registration failed.")

    def _compensate(
        self, account: ManagerAccount, identity: IdentityResult
    ) -> Result[ManagerAccount]:
        """Delete the domain record left behind by a failed identity registration."""
        logger.warning(
            "identity registration failed for manager %s, deleting record: %s",
            account.manager_id,
            identity.message,
        )
        try:
            self._accounts.delete(account)
        except Exception as exc:
            COMPENSATING_DELETES.labels(result="error").inc()
            logger.exception("compensating delete failed, manager %s is orphaned", account.manager_id)
            return self._finish(
                ProvisioningStage.failed,
                Result.failure(
                    ErrorKind.upstream_failure,
                    identity.message,
                    (f"orphaned manager record {account.manager_id}: {exc}",),
                ),
            )
        COMPENSATING_DELETES.labels(result="deleted").inc()
        self._log_stage(account, ProvisioningStage.domain_record_deleted)
        return self._finish(
            ProvisioningStage.failed, Result.failure(ErrorKind.upstream_failure, identity.message)
        )

    def _log_stage(self, account: ManagerAccount, stage: ProvisioningStage) -> None:
        logger.debug("manager %s reached stage %s", account.manager_id, stage.value)

    def _finish(self, stage: ProvisioningStage, result: Result[ManagerAccount]) -> Result[ManagerAccount]:
        PROVISIONING_OUTCOMES.labels(stage=stage.value).inc()
        return result

    def get_manager(self, manager_id: str) -> Result[ManagerAccount]:
        """Retrieve a manager account by identifier."""
        account = self._accounts.get_by_id(manager_id)
        if account is None:
            logger.warning("manager %s not found", manager_id)
            return Result.failure(ErrorKind.not_found, "Manager not found")
        return Result.success(account, "Manager retrieved successfully")

    def edit_manager(self, manager_id: str, payload: EditManagerInput) -> Result[ManagerAccount]:
        """Apply company details to an existing manager record."""
        account = self._accounts.get_by_id(manager_id)
        if account is None:
            logger.warning("manager %s not found", manager_id)
            return Result.failure(ErrorKind.not_found, "Manager not found.")

        account.company_name = payload.company_name
        account.company_description = payload.company_description
        account.company_address = payload.company_address
        account.business_phone = payload.business_phone
        account.state = payload.state
        account.updated_at = datetime.now(timezone.utc)
        updated = self._accounts.update(account)
        logger.info("manager %s updated", manager_id)
        return Result.success(updated, "Successfully updated a Manager")

    def update_profile(
        self,
        manager_id: str,
        payload: UpdateProfileInput,
        image: ImageUpload | None = None,
    ) -> Result[ManagerAccount]:
        """Update contact details and, optionally, the profile image.

        Parameters
        ----------
        manager_id:
            Identifier of the manager to update.
        payload:
            Replacement values for the business email, company name, state,
            phone, and address.
        image:
            Optional image to upload; the record is left untouched when the
            upload does not produce a URL.
        """
        account = self._accounts.get_by_id(manager_id)
        if account is None:
            return Result.failure(ErrorKind.not_found, "Manager not found.")

        if payload.business_email.lower() != account.business_email.lower():
            clashes = [
                other
                for other in self._accounts.find_by_email(payload.business_email)
                if other.manager_id != manager_id
            ]
            if clashes:
                return Result.failure(ErrorKind.conflict, "Manager with this email already exist.")

        image_url = account.image_url
        if image is not None:
            image_url = self._upload_image(manager_id, image)
            if image_url is None:
                return Result.failure(
                    ErrorKind.upstream_failure,
                    f"Failed to upload image for manager with ID {manager_id}.",
                )

        changed = replace(
            account,
            image_url=image_url,
            business_email=payload.business_email,
            company_name=payload.company_name,
            state=payload.state,
            business_phone=payload.business_phone,
            company_address=payload.company_address,
            updated_at=datetime.now(timezone.utc),
        )
        try:
            updated = self._accounts.update(changed)
        except DuplicateAccountError:
            if image is not None:
                self._discard_image(image_url)
            return Result.failure(ErrorKind.conflict, "Manager with this email already exist.")
        return Result.success(updated, "Manager updated successfully.")

    def _discard_image(self, url: str) -> None:
        try:
            self._images.discard(url)
        except Exception:
            logger.exception("uploaded image %s could not be discarded", url)

    def _upload_image(self, manager_id: str, image: ImageUpload) -> str | None:
        if self._images is None:
            logger.warning("image upload requested for manager %s but no image store is configured", manager_id)
            return None
        try:
            url = self._images.upload(manager_id, image)
        except Exception:
            logger.exception("image upload failed for manager %s", manager_id)
            return None
        if url is None:
            logger.warning("image store returned no URL for manager %s", manager_id)
        return url

    def activate_manager(self, manager_id: str) -> Result[ManagerAccount]:
        return self._set_active(manager_id, True)

    def deactivate_manager(self, manager_id: str) -> Result[ManagerAccount]:
        return self._set_active(manager_id, False)

    def _set_active(self, manager_id: str, active: bool) -> Result[ManagerAccount]:
        verb = "activated" if active else "deactivated"
        if not manager_id or not manager_id.strip():
            return Result.failure(ErrorKind.invalid_argument, "Manager Id must be provided")
        account = self._accounts.get_by_id(manager_id)
        if account is None:
            return Result.failure(ErrorKind.not_found, "Manager not found")
        account.is_active = active
        account.updated_at = datetime.now(timezone.utc)
        updated = self._accounts.update(account)
        logger.info("manager %s %s", manager_id, verb)
        return Result.success(updated, f"Manager with Id {manager_id} has been {verb} successfully")

    def list_managers(self, page: int, per_page: int) -> Result[Page[ManagerAccount]]:
        """Return one page of managers ordered by company name, then business email."""
        try:
            paged = paginate(self._accounts.get_all(), per_page, page, MANAGER_SORT_KEYS)
        except InvalidPageSize as exc:
            return Result.failure(exc.kind, str(exc))
        return Result.success(paged, "Operation successful")

    def send_onboarding_request(self, request: ProvisioningRequest) -> Result[bool]:
        """Forward a prospective manager's details to the platform administrator."""
        if not self._admin_email:
            return Result.failure(ErrorKind.upstream_failure, "No administrator address is configured.")
        subject, body = onboarding_request_email(request)
        try:
            self._notifier.send_html_email(self._admin_email, subject, body)
        except Exception as exc:
            logger.error("onboarding request could not be forwarded to admin: %s", exc)
            return Result.failure(
                ErrorKind.upstream_failure, "Unable to send manager information to admin", (str(exc),)
            )
        return Result.success(True, "Manager information sent to admin successfully")
