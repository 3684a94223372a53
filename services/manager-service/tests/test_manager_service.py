from __future__ import annotations

import pytest

from app.domain.contracts import (
    EditManagerInput,
    ImageUpload,
    ProvisioningRequest,
    UpdateProfileInput,
)
from app.domain.results import ErrorKind


def profile(email: str = "new@co.com", company: str = "Acme Ltd") -> UpdateProfileInput:
    return UpdateProfileInput(
        business_email=email,
        company_name=company,
        state="Lagos",
        business_phone="+2348000000000",
        company_address="1 Marina Road",
    )


def png() -> ImageUpload:
    return ImageUpload(content=b"\x89PNG....", content_type="image/png")


def test_get_manager(service, accounts):
    account = accounts.seed("a@co.com", "Acme")
    assert service.get_manager(account.manager_id).value is account
    assert service.get_manager("missing").error.kind is ErrorKind.not_found


def test_edit_manager_maps_company_fields(service, accounts):
    account = accounts.seed("a@co.com", "Acme")

    result = service.edit_manager(
        account.manager_id,
        EditManagerInput(
            company_name="Acme Holdings",
            company_description="Holding company",
            company_address="2 Broad Street",
            business_phone="555-0100",
            state="Lagos",
        ),
    )

    assert result.ok
    updated = result.value
    assert updated.company_name == "Acme Holdings"
    assert updated.company_description == "Holding company"
    assert updated.company_address == "2 Broad Street"
    assert updated.business_phone == "555-0100"
    assert updated.state == "Lagos"
    assert updated.updated_at is not None
    assert accounts.update_calls == 1


def test_edit_unknown_manager_is_not_found(service, accounts):
    result = service.edit_manager("missing", EditManagerInput(company_name="X"))
    assert result.error.kind is ErrorKind.not_found
    assert accounts.update_calls == 0


def test_update_profile_without_image(service, accounts, images):
    account = accounts.seed("a@co.com", "Acme")

    result = service.update_profile(account.manager_id, profile())

    assert result.ok
    assert result.value.business_email == "new@co.com"
    assert result.value.company_name == "Acme Ltd"
    assert result.value.company_address == "1 Marina Road"
    assert result.value.image_url is None
    assert images.uploads == []


def test_update_profile_with_image_stores_url(service, accounts, images):
    account = accounts.seed("a@co.com", "Acme")

    result = service.update_profile(account.manager_id, profile(), png())

    assert result.value.image_url == images.url
    assert images.uploads[0][0] == account.manager_id


@pytest.mark.parametrize("failure", ["none", "raise"])
def test_failed_image_upload_leaves_record_unchanged(service, accounts, images, failure):
    account = accounts.seed("a@co.com", "Acme")
    if failure == "none":
        images.url = None
    else:
        images.error = OSError("bucket unavailable")

    result = service.update_profile(account.manager_id, profile(), png())

    assert result.error.kind is ErrorKind.upstream_failure
    assert account.manager_id in result.message
    stored = accounts.get_by_id(account.manager_id)
    assert stored.business_email == "a@co.com"
    assert stored.company_name == "Acme"
    assert accounts.update_calls == 0


def test_update_profile_rejects_email_of_another_manager(service, accounts):
    account = accounts.seed("a@co.com", "Acme")
    accounts.seed("taken@co.com", "Other")

    result = service.update_profile(account.manager_id, profile(email="TAKEN@co.com"))

    assert result.error.kind is ErrorKind.conflict
    assert accounts.update_calls == 0


def test_update_profile_keeps_own_email_with_new_case(service, accounts):
    account = accounts.seed("a@co.com", "Acme")
    result = service.update_profile(account.manager_id, profile(email="A@co.com"))
    assert result.ok


def test_update_profile_unknown_manager(service):
    assert service.update_profile("missing", profile()).error.kind is ErrorKind.not_found


def test_activate_and_deactivate(service, accounts):
    account = accounts.seed("a@co.com", "Acme")

    deactivated = service.deactivate_manager(account.manager_id)
    assert deactivated.ok
    assert deactivated.value.is_active is False
    assert deactivated.message == f"Manager with Id {account.manager_id} has been deactivated successfully"

    activated = service.activate_manager(account.manager_id)
    assert activated.value.is_active is True


@pytest.mark.parametrize("operation", ["activate_manager", "deactivate_manager"])
def test_activation_of_unknown_manager_is_not_found(service, operation):
    result = getattr(service, operation)("missing")
    assert result.error.kind is ErrorKind.not_found


def test_deactivate_requires_an_identifier(service):
    assert service.deactivate_manager("").error.kind is ErrorKind.invalid_argument
    assert service.deactivate_manager("   ").error.kind is ErrorKind.invalid_argument


def test_list_managers_orders_by_company_then_email(service, accounts):
    accounts.seed("z@globex.com", "Globex")
    accounts.seed("b@acme.com", "Acme")
    accounts.seed("a@acme.com", "Acme")
    accounts.seed("x@initech.com", "Initech")

    result = service.list_managers(page=1, per_page=3)

    assert result.ok
    page = result.value
    assert [(m.company_name, m.business_email) for m in page.data] == [
        ("Acme", "a@acme.com"),
        ("Acme", "b@acme.com"),
        ("Globex", "z@globex.com"),
    ]
    assert page.total_count == 4
    assert page.total_page_count == 2


def test_list_managers_rejects_non_positive_page_size(service):
    result = service.list_managers(page=1, per_page=0)
    assert result.error.kind is ErrorKind.invalid_argument


def test_provisioned_manager_lands_in_alphabetical_position(service, accounts):
    accounts.seed("ops@zenith.com", "Zenith")
    accounts.seed("hello@beta.com", "Beta")
    accounts.seed("team@aardvark.com", "Aardvark")

    created = service.create_manager(
        ProvisioningRequest(business_email="a@co.com", company_name="Acme")
    )
    assert created.ok

    page = service.list_managers(page=1, per_page=10).value
    assert [m.company_name for m in page.data] == ["Aardvark", "Acme", "Beta", "Zenith"]
    assert page.data[1].manager_id == created.value.manager_id


def test_onboarding_request_is_sent_to_admin(service, notifier):
    result = service.send_onboarding_request(
        ProvisioningRequest(
            business_email="lead@co.com", company_name="Acme", company_description="We track bugs"
        )
    )

    assert result.ok
    [(to_address, subject, body)] = notifier.sent
    assert to_address == "admin@example.com"
    assert subject == "Manager Information"
    assert "lead@co.com" in body and "We track bugs" in body


def test_onboarding_request_mail_failure(service, notifier):
    notifier.error = OSError("connection refused")
    result = service.send_onboarding_request(
        ProvisioningRequest(business_email="lead@co.com", company_name="Acme")
    )
    assert result.error.kind is ErrorKind.upstream_failure
    assert result.details == ("connection refused",)


def test_list_managers_ignores_case_when_ordering(service, accounts):
    accounts.seed("ops@zenith.com", "Zenith")
    accounts.seed("hello@beta.com", "Beta")
    service.create_manager(ProvisioningRequest(business_email="a@co.com", company_name="acme"))

    page = service.list_managers(page=1, per_page=10).value

    assert [m.company_name for m in page.data] == ["acme", "Beta", "Zenith"]


def test_list_managers_orders_email_ties_without_case(service, accounts):
    accounts.seed("Bob@acme.com", "Acme")
    accounts.seed("alice@acme.com", "Acme")

    page = service.list_managers(page=1, per_page=10).value

    assert [m.business_email for m in page.data] == ["alice@acme.com", "Bob@acme.com"]


def test_update_profile_race_discards_upload_and_keeps_record(service, accounts, images):
    from app.domain.contracts import DuplicateAccountError

    account = accounts.seed("a@co.com", "Acme")
    accounts.update_error = DuplicateAccountError("new@co.com")

    result = service.update_profile(account.manager_id, profile(), png())

    assert result.error.kind is ErrorKind.conflict
    assert images.discarded == [images.url]
    assert account.business_email == "a@co.com"
    assert account.company_name == "Acme"
    assert account.image_url is None
    assert account.updated_at is None


def test_update_profile_race_without_image_discards_nothing(service, accounts, images):
    from app.domain.contracts import DuplicateAccountError

    account = accounts.seed("a@co.com", "Acme")
    accounts.update_error = DuplicateAccountError("new@co.com")

    result = service.update_profile(account.manager_id, profile())

    assert result.error.kind is ErrorKind.conflict
    assert images.discarded == []
    assert account.business_email == "a@co.com"
