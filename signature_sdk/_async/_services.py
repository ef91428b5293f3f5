from __future__ import annotations

import logging
import typing as tp

import anyio

from .._exceptions import ApiError
from ._http import AsyncApiTransport, QueryParams

__all__ = (
    "AsyncApiTokenService",
    "AsyncApprovalService",
    "AsyncAuthenticationService",
    "AsyncDigitalSignatureService",
    "AsyncDocumentService",
    "AsyncDocumentTemplateService",
    "AsyncEnvelopeService",
    "AsyncEventService",
    "AsyncNotificationService",
    "AsyncOrganizationService",
    "AsyncOrganizationSettingsService",
    "AsyncPublicVerificationService",
    "AsyncReceiptService",
    "AsyncSectorService",
    "AsyncSignatureFieldService",
    "AsyncSignerService",
    "AsyncUserService",
    "AsyncWebhookService",
)

logger = logging.getLogger("signature_sdk.services")

Body = tp.Any
FileContent = tp.Union[bytes, tp.IO[bytes]]

VALIDATION_FINAL_STATUSES = ("VERIFIED", "REJECTED")


def _file(name: str, content: FileContent, content_type: tp.Optional[str] = None) -> tp.Tuple[tp.Any, ...]:
    if content_type is None:
        return (name, content)
    return (name, content, content_type)


def _form(**fields: tp.Any) -> tp.Dict[str, str]:
    form = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        form[key] = str(value)
    return form


class _Service:
    def __init__(self, http: AsyncApiTransport) -> None:
        self._http = http


class AsyncEnvelopeService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/envelopes", data)

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/envelopes", params=filters)

    async def find_by_id(self, envelope_id: str, include: tp.Optional[str] = None) -> Body:
        return await self._http.get(f"/api/v1/envelopes/{envelope_id}", params={"include": include})

    async def get_audit_trail(self, envelope_id: str) -> Body:
        return await self._http.get(f"/api/v1/envelopes/{envelope_id}/audit-trail")

    async def update(self, envelope_id: str, data: Body) -> Body:
        return await self._http.put(f"/api/v1/envelopes/{envelope_id}", data)

    async def delete(self, envelope_id: str) -> None:
        await self._http.delete(f"/api/v1/envelopes/{envelope_id}")

    async def activate(self, envelope_id: str) -> Body:
        return await self._http.post(f"/api/v1/envelopes/{envelope_id}/activate")

    async def cancel(self, envelope_id: str, reason: tp.Optional[str] = None) -> Body:
        return await self._http.post(f"/api/v1/envelopes/{envelope_id}/cancel", {"reason": reason})

    async def notify(self, envelope_id: str) -> Body:
        return await self._http.post(f"/api/v1/envelopes/{envelope_id}/notify")

    async def generate_zip(self, envelope_id: str) -> Body:
        return await self._http.post(f"/api/v1/envelopes/{envelope_id}/generate-zip")

    async def get_zip_status(self, envelope_id: str, job_id: str) -> Body:
        return await self._http.get(f"/api/v1/envelopes/{envelope_id}/zip-status/{job_id}")

    async def delete_zip_job(self, envelope_id: str, job_id: str) -> None:
        await self._http.delete(f"/api/v1/envelopes/{envelope_id}/zip-jobs/{job_id}")

    async def create_from_templates(self, data: Body) -> Body:
        return await self._http.post("/api/v1/envelopes/from-templates", data)

    async def get_job_status(self, job_id: str) -> Body:
        return await self._http.get(f"/api/v1/envelopes/jobs/{job_id}")

    async def cancel_job(self, job_id: str) -> None:
        await self._http.delete(f"/api/v1/envelopes/jobs/{job_id}")


class AsyncDocumentService(_Service):
    async def upload(
        self,
        envelope_id: str,
        content: FileContent,
        name: str,
        content_type: tp.Optional[str] = None,
        description: tp.Optional[str] = None,
    ) -> Body:
        return await self._http.post(
            f"/api/v1/envelopes/{envelope_id}/documents",
            files={"file": _file(name, content, content_type)},
            data=_form(description=description),
        )

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/documents", params=filters)

    async def find_by_id(self, document_id: str) -> Body:
        return await self._http.get(f"/api/v1/documents/{document_id}")

    async def download(self, document_id: str) -> bytes:
        return await self._http.get(f"/api/v1/documents/{document_id}/download", raw=True)

    async def delete(self, document_id: str) -> None:
        await self._http.delete(f"/api/v1/documents/{document_id}")

    async def create_from_template(self, envelope_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/envelopes/{envelope_id}/documents/from-template", data)

    async def preview(self, document_id: str, options: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get(f"/api/v1/documents/{document_id}/preview", params=options)

    async def get_pages_metadata(self, document_id: str) -> Body:
        return await self._http.get(f"/api/v1/documents/{document_id}/pages")

    async def add_signature_field(self, document_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/documents/{document_id}/fields", data)

    async def convert_coordinates(self, data: Body) -> Body:
        return await self._http.post("/api/v1/documents/convert-coordinates", data)


class AsyncSignerService(_Service):
    async def create(self, envelope_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/envelopes/{envelope_id}/signers", data)

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/signers", params=filters)

    async def find_by_envelope(self, envelope_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get(f"/api/v1/envelopes/{envelope_id}/signers", params=filters)

    async def find_by_id(self, signer_id: str) -> Body:
        return await self._http.get(f"/api/v1/signers/{signer_id}")

    async def update(self, signer_id: str, data: Body) -> Body:
        return await self._http.put(f"/api/v1/signers/{signer_id}", data)

    async def delete(self, signer_id: str) -> None:
        await self._http.delete(f"/api/v1/signers/{signer_id}")

    async def notify(self, envelope_id: str) -> None:
        await self._http.post(f"/api/v1/envelopes/{envelope_id}/notify")

    async def get_signing_url(self, signer_id: str) -> Body:
        return await self._http.get(f"/api/v1/signers/{signer_id}/signing-url")

    async def refresh_signer_token(self, refresh_token: str) -> Body:
        return await self._http.post("/api/v1/signers/refresh-token", {"refreshToken": refresh_token})

    async def revoke_signer_token(self, refresh_token: str) -> Body:
        return await self._http.post("/api/v1/signers/revoke-token", {"refreshToken": refresh_token})

    async def start_authentication(self, signer_id: str) -> Body:
        return await self._http.post(f"/api/v1/signers/{signer_id}/authenticate/start")

    async def add_qualification_requirement(self, document_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/documents/{document_id}/qualification-requirements", data)

    async def upload_signature(self, signer_id: str, content: FileContent) -> Body:
        return await self._http.post(
            f"/api/v1/signers/{signer_id}/signature",
            files={"file": _file("signature.png", content, "image/png")},
        )

    async def delete_signature(self, signer_id: str) -> None:
        await self._http.delete(f"/api/v1/signers/{signer_id}/signature")

    async def upload_initial(self, signer_id: str, content: FileContent) -> Body:
        return await self._http.post(
            f"/api/v1/signers/{signer_id}/initial",
            files={"file": _file("initial.png", content, "image/png")},
        )

    async def delete_initial(self, signer_id: str) -> None:
        await self._http.delete(f"/api/v1/signers/{signer_id}/initial")

    async def get_signing_session(self) -> Body:
        return await self._http.get("/api/v1/signing-session")


class AsyncSignatureFieldService(_Service):
    async def create(self, document_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/documents/{document_id}/signature-fields", data)

    async def find_by_document(self, document_id: str) -> Body:
        return await self._http.get(f"/api/v1/documents/{document_id}/fields")

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/signature-fields", params=filters)

    async def find_by_id(self, field_id: str) -> Body:
        return await self._http.get(f"/api/v1/signature-fields/{field_id}")

    async def update(self, field_id: str, data: Body) -> Body:
        return await self._http.put(f"/api/v1/signature-fields/{field_id}", data)

    async def sign(self, field_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/signature-fields/{field_id}/sign", data)

    async def delete(self, field_id: str) -> None:
        await self._http.delete(f"/api/v1/signature-fields/{field_id}")

    async def create_stamp_group(self, document_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/documents/{document_id}/stamp-fields", data)

    async def create_initial_fields(self, document_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/documents/{document_id}/initial-fields", data)


class AsyncDocumentTemplateService(_Service):
    async def upload_and_extract(
        self,
        content: FileContent,
        name: str = "template.docx",
        content_type: tp.Optional[str] = None,
    ) -> Body:
        return await self._http.post(
            "/api/v1/document-templates/upload-and-extract",
            files={"file": _file(name, content, content_type)},
        )

    async def configure(self, template_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/document-templates/{template_id}/configure", data)

    async def generate_document(self, template_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/document-templates/{template_id}/generate-document", data)

    async def find_all(self) -> Body:
        return await self._http.get("/api/v1/document-templates")

    async def find_by_id(self, template_id: str) -> Body:
        return await self._http.get(f"/api/v1/document-templates/{template_id}")

    async def update(self, template_id: str, data: Body) -> Body:
        return await self._http.patch(f"/api/v1/document-templates/{template_id}", data)

    async def delete(self, template_id: str) -> None:
        await self._http.delete(f"/api/v1/document-templates/{template_id}")


class AsyncNotificationService(_Service):
    async def create_template(self, data: Body) -> Body:
        return await self._http.post("/api/v1/notification-templates", data)

    async def list_templates(self, channel: tp.Optional[str] = None, name: tp.Optional[str] = None) -> Body:
        return await self._http.get("/api/v1/notification-templates", params={"channel": channel, "name": name})

    async def find_template_by_id(self, template_id: str) -> Body:
        return await self._http.get(f"/api/v1/notification-templates/{template_id}")

    async def preview_template(self, template_id: str, variables: Body) -> Body:
        return await self._http.post(f"/api/v1/notification-templates/{template_id}/preview", variables)

    async def delete_template(self, template_id: str) -> None:
        await self._http.delete(f"/api/v1/notification-templates/{template_id}")

    async def get_history_by_envelope(self, envelope_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get(f"/api/v1/notifications/history/envelope/{envelope_id}", params=filters)

    async def get_history_by_signer(self, signer_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get(f"/api/v1/notifications/history/signer/{signer_id}", params=filters)

    async def get_failed_notifications(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/notifications/history/failed", params=filters)

    async def retry(self, notification_id: str) -> None:
        await self._http.post(f"/api/v1/notifications/{notification_id}/retry")


class AsyncAuthenticationService(_Service):
    """Signer authentication requirements: tokens, identity documents, IP and location."""

    async def create(self, signer_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/signers/{signer_id}/authentication-requirements", data)

    async def send_token(self, requirement_id: str) -> Body:
        return await self._http.post(f"/api/v1/authentication-requirements/{requirement_id}/send-token")

    async def verify_token(self, requirement_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/authentication-requirements/{requirement_id}/verify-token", data)

    async def upload_document(
        self,
        requirement_id: str,
        content: FileContent,
        name: str = "document.jpg",
        content_type: tp.Optional[str] = None,
        document_type: tp.Optional[str] = None,
        document_part: tp.Optional[str] = None,
    ) -> Body:
        return await self._http.post(
            f"/api/v1/authentication-requirements/{requirement_id}/upload-document",
            files={"file": _file(name, content, content_type)},
            data=_form(documentType=document_type, documentPart=document_part),
        )

    async def get_validation_progress(self, requirement_id: str) -> Body:
        return await self._http.get(f"/api/v1/authentication-requirements/{requirement_id}/validation-progress")

    async def poll_validation_progress(
        self,
        requirement_id: str,
        interval: float = 2.0,
        timeout: float = 60.0,
        on_progress: tp.Optional[tp.Callable[[Body], None]] = None,
    ) -> Body:
        """
        Poll the validation progress of an uploaded document until it is
        ``VERIFIED`` or ``REJECTED``.

        :param requirement_id: Authentication requirement the document was uploaded to
        :type requirement_id: str
        :param interval: Seconds between two polls, defaults to 2.0
        :type interval: float, optional
        :param timeout: Seconds to wait for a final status, defaults to 60.0
        :type timeout: float, optional
        :param on_progress: Called with every progress report, defaults to None
        :type on_progress: tp.Optional[tp.Callable[[Body], None]], optional
        :raises TimeoutError: When no final status is reported within `timeout`
        :return: The final progress report
        """
        with anyio.fail_after(timeout):
            while True:
                progress = await self.get_validation_progress(requirement_id)
                if on_progress is not None:
                    on_progress(progress)
                if isinstance(progress, dict) and progress.get("status") in VALIDATION_FINAL_STATUSES:
                    return progress
                await anyio.sleep(interval)

    async def record_ip_location(self, requirement_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/authentication-requirements/{requirement_id}/record-ip-location", data)

    async def get_status(self, signer_id: str) -> Body:
        return await self._http.get(f"/api/v1/signers/{signer_id}/authentication-status")

    async def find_by_signer(self, signer_id: str) -> Body:
        return await self._http.get(f"/api/v1/signers/{signer_id}/authentication-requirements")

    async def delete(self, requirement_id: str) -> None:
        await self._http.delete(f"/api/v1/authentication-requirements/{requirement_id}")

    async def reuse_document(self, signer_id: str, method: str) -> Body:
        return await self._http.post(f"/api/v1/signers/{signer_id}/authentication/reuse-document", {"method": method})


class AsyncPublicVerificationService(_Service):
    async def verify(self, document_hash: str) -> Body:
        return await self._http.get(f"/api/v1/public/verify/{document_hash}")

    async def verify_by_token(self, token: str) -> Body:
        return await self._http.get(f"/api/v1/v/{token}")

    async def download(self, document_hash: str) -> Body:
        return await self._http.get(f"/api/v1/public/download/{document_hash}")

    async def can_download(self, document_hash: str) -> bool:
        """Whether the signed document behind `document_hash` may be downloaded publicly."""
        try:
            verification = await self.verify(document_hash)
        except ApiError as exc:
            logger.debug(f"Verification of {document_hash} failed: {exc.message}")
            return False
        return isinstance(verification, dict) and bool(verification.get("allowPublicDownload"))


class AsyncDigitalSignatureService(_Service):
    """PAdES signing certificates of the organization."""

    async def upload_certificate(
        self,
        content: FileContent,
        password: str,
        name: str = "certificate.p12",
        password_hint: tp.Optional[str] = None,
        certificate_type: tp.Optional[str] = None,
        store_password: tp.Optional[bool] = None,
    ) -> Body:
        return await self._http.post(
            "/digital-signatures/certificates",
            files={"certificate": _file(name, content, "application/x-pkcs12")},
            data=_form(
                password=password,
                passwordHint=password_hint,
                certificateType=certificate_type,
                storePassword=store_password,
            ),
        )

    async def list_certificates(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/digital-signatures/certificates", params=filters)

    async def get_certificate(self, certificate_id: str) -> Body:
        return await self._http.get(f"/digital-signatures/certificates/{certificate_id}")

    async def get_certificate_stats(self) -> Body:
        return await self._http.get("/digital-signatures/certificates/stats")

    async def activate_certificate(self, certificate_id: str) -> None:
        await self._http.patch(f"/digital-signatures/certificates/{certificate_id}/activate")

    async def deactivate_certificate(self, certificate_id: str) -> None:
        await self._http.patch(f"/digital-signatures/certificates/{certificate_id}/deactivate")

    async def revoke_certificate(self, certificate_id: str, reason: tp.Optional[str] = None) -> None:
        payload = {"reason": reason} if reason else {}
        await self._http.patch(f"/digital-signatures/certificates/{certificate_id}/revoke", payload)

    async def delete_certificate(self, certificate_id: str) -> None:
        await self._http.delete(f"/digital-signatures/certificates/{certificate_id}")


class AsyncUserService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/users", data)

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/users", params=filters)

    async def get_current_user(self) -> Body:
        return await self._http.get("/api/v1/users/me")

    async def find_one(self, user_id: str) -> Body:
        return await self._http.get(f"/api/v1/users/{user_id}")

    async def update(self, user_id: str, data: Body) -> Body:
        return await self._http.patch(f"/api/v1/users/{user_id}", data)

    async def remove(self, user_id: str) -> Body:
        return await self._http.delete(f"/api/v1/users/{user_id}")


class AsyncApiTokenService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/api-tokens", data)

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/api-tokens", params=filters)

    async def find_one(self, token_id: str) -> Body:
        return await self._http.get(f"/api/v1/api-tokens/{token_id}")

    async def update(self, token_id: str, data: Body) -> Body:
        return await self._http.patch(f"/api/v1/api-tokens/{token_id}", data)

    async def revoke(self, token_id: str) -> Body:
        return await self._http.post(f"/api/v1/api-tokens/{token_id}/revoke")

    async def activate(self, token_id: str) -> Body:
        return await self._http.post(f"/api/v1/api-tokens/{token_id}/activate")

    async def remove(self, token_id: str) -> Body:
        return await self._http.delete(f"/api/v1/api-tokens/{token_id}")


class AsyncOrganizationService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/organizations", data)

    async def get_my_organization(self) -> Body:
        return await self._http.get("/api/v1/organizations/me")

    async def update_my_organization(self, data: Body) -> Body:
        return await self._http.patch("/api/v1/organizations/me", data)

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/organizations", params=filters)

    async def find_one(self, organization_id: str) -> Body:
        return await self._http.get(f"/api/v1/organizations/{organization_id}")

    async def find_one_with_stats(self, organization_id: str) -> Body:
        return await self._http.get(f"/api/v1/organizations/{organization_id}/stats")

    async def update(self, organization_id: str, data: Body) -> Body:
        return await self._http.patch(f"/api/v1/organizations/{organization_id}", data)

    async def remove(self, organization_id: str) -> Body:
        return await self._http.delete(f"/api/v1/organizations/{organization_id}")

    async def add_member(self, organization_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/organizations/{organization_id}/members", data)

    async def update_member_role(self, organization_id: str, user_id: str, role: str) -> Body:
        return await self._http.patch(
            f"/api/v1/organizations/{organization_id}/members/{user_id}/role",
            {"role": role},
        )

    async def remove_member(self, organization_id: str, user_id: str) -> Body:
        return await self._http.delete(f"/api/v1/organizations/{organization_id}/members/{user_id}")


class AsyncOrganizationSettingsService(_Service):
    """Organization wide signing settings, letterhead and logo."""

    async def get(self) -> Body:
        return await self._http.get("/api/v1/organization-settings")

    async def update(self, data: Body) -> Body:
        return await self._http.put("/api/v1/organization-settings", data)

    async def upload_letterhead(
        self,
        content: FileContent,
        use_letterhead: tp.Optional[bool] = None,
        opacity: tp.Optional[float] = None,
        position: tp.Optional[str] = None,
        apply_to_pages: tp.Optional[str] = None,
    ) -> Body:
        return await self._http.post(
            "/api/v1/organization-settings/letterhead",
            files={"letterhead": _file("letterhead.png", content, "image/png")},
            data=_form(useLetterhead=use_letterhead, opacity=opacity, position=position, applyToPages=apply_to_pages),
        )

    async def download_letterhead(self) -> bytes:
        return await self._http.get("/api/v1/organization-settings/letterhead", raw=True)

    async def delete_letterhead(self) -> None:
        await self._http.delete("/api/v1/organization-settings/letterhead")

    async def has_letterhead(self) -> bool:
        try:
            settings = await self.get()
        except ApiError:
            return False
        return bool(settings.get("letterheadImageUrl"))

    async def upload_logo(
        self,
        content: FileContent,
        name: str = "logo.png",
        content_type: tp.Optional[str] = None,
        use_as_stamp: tp.Optional[bool] = None,
    ) -> Body:
        return await self._http.post(
            "/api/v1/organization-settings/logo",
            files={"logo": _file(name, content, content_type)},
            data=_form(useAsStamp=use_as_stamp),
        )

    async def download_logo(self) -> bytes:
        return await self._http.get("/api/v1/organization-settings/logo", raw=True)

    async def delete_logo(self) -> None:
        await self._http.delete("/api/v1/organization-settings/logo")

    async def has_logo(self) -> bool:
        try:
            settings = await self.get()
        except ApiError:
            return False
        return bool(settings.get("organizationLogoUrl"))

    async def get_pades_config(self) -> tp.Dict[str, tp.Any]:
        settings = await self.get()
        return {
            "signatureStrategy": settings.get("signatureStrategy"),
            "defaultCertificateId": settings.get("defaultCertificateId"),
            "requirePadesForAll": settings.get("requirePadesForAll"),
            "padesAutoApply": settings.get("padesAutoApply"),
        }

    async def set_signature_strategy(self, strategy: str) -> Body:
        return await self.update({"signatureStrategy": strategy})

    async def get_authentication_level(self) -> tp.Optional[str]:
        settings = await self.get()
        return settings.get("defaultAuthLevel")

    async def set_authentication_level(self, level: str) -> Body:
        return await self.update({"defaultAuthLevel": level})


class AsyncWebhookService(_Service):
    """Event observers notified by the platform over HTTP."""

    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/event-observers", data)

    async def find_all(self) -> Body:
        return await self._http.get("/api/v1/event-observers")

    async def find_by_id(self, observer_id: str) -> Body:
        return await self._http.get(f"/api/v1/event-observers/{observer_id}")

    async def update(self, observer_id: str, data: Body) -> Body:
        return await self._http.patch(f"/api/v1/event-observers/{observer_id}", data)

    async def delete(self, observer_id: str) -> None:
        await self._http.delete(f"/api/v1/event-observers/{observer_id}")

    async def activate(self, observer_id: str) -> Body:
        return await self.update(observer_id, {"isActive": True})

    async def deactivate(self, observer_id: str) -> Body:
        return await self.update(observer_id, {"isActive": False})


class AsyncEventService(_Service):
    """Audit log of envelope, document and signer events."""

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/events", params=filters)

    async def find_by_envelope(self, envelope_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get(f"/api/v1/envelopes/{envelope_id}/events", params=filters)

    async def find_by_id(self, event_id: str) -> Body:
        return await self._http.get(f"/api/v1/events/{event_id}")

    async def get_stats(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/events/stats", params=filters)

    async def get_activity_summary(self, date: str) -> Body:
        return await self._http.get(f"/api/v1/events/activity/{date}")

    async def find_by_document(self, document_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self.find_all({**(filters or {}), "documentId": document_id})

    async def find_by_signer(self, signer_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self.find_all({**(filters or {}), "signerId": signer_id})

    async def find_by_template(self, template_id: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self.find_all({**(filters or {}), "templateId": template_id})

    async def search(self, term: str, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self.find_all({**(filters or {}), "search": term})


class AsyncApprovalService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/approval", data)

    async def send_tokens(self, envelope_id: str) -> Body:
        return await self._http.post(f"/api/v1/approval/{envelope_id}/send-tokens")

    async def set_mode(self, envelope_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/approval/{envelope_id}/set-mode", data)

    async def validate_token(self, data: Body) -> Body:
        return await self._http.post("/api/v1/public/approval/validate-token", data)

    async def get_info(self, envelope_id: str) -> Body:
        return await self._http.get(f"/api/v1/public/approval/{envelope_id}")

    async def decide(self, envelope_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/public/approval/{envelope_id}/decide", data)

    async def download_document(self, envelope_id: str, document_id: str) -> bytes:
        return await self._http.get(
            f"/api/v1/public/approval/{envelope_id}/download",
            params={"documentId": document_id},
            raw=True,
        )

    async def get_history(self, envelope_id: str) -> Body:
        return await self._http.get(f"/api/v1/public/approval/{envelope_id}/history")


class AsyncReceiptService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/receipt", data)

    async def send_tokens(self, envelope_id: str) -> Body:
        return await self._http.post(f"/api/v1/receipt/{envelope_id}/send-tokens")

    async def validate_token(self, data: Body) -> Body:
        return await self._http.post("/api/v1/public/receipt/validate-token", data)

    async def get_info(self, envelope_id: str, token: str) -> Body:
        return await self._http.get(f"/api/v1/public/receipt/{envelope_id}", params={"token": token})

    async def confirm(self, envelope_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/public/receipt/{envelope_id}/confirm", data)

    async def download_document(self, envelope_id: str, token: str) -> bytes:
        return await self._http.get(
            f"/api/v1/public/receipt/{envelope_id}/download",
            params={"token": token},
            raw=True,
        )

    async def get_history(self, envelope_id: str, token: str) -> Body:
        return await self._http.get(f"/api/v1/public/receipt/{envelope_id}/history", params={"token": token})


class AsyncSectorService(_Service):
    async def create(self, data: Body) -> Body:
        return await self._http.post("/api/v1/sectors", data)

    async def find_all(self, filters: tp.Optional[QueryParams] = None) -> Body:
        return await self._http.get("/api/v1/sectors", params=filters)

    async def find_one(self, sector_id: str) -> Body:
        return await self._http.get(f"/api/v1/sectors/{sector_id}")

    async def update(self, sector_id: str, data: Body) -> Body:
        return await self._http.patch(f"/api/v1/sectors/{sector_id}", data)

    async def remove(self, sector_id: str) -> None:
        await self._http.delete(f"/api/v1/sectors/{sector_id}")

    async def get_tree(self) -> Body:
        return await self._http.get("/api/v1/sectors/tree")

    async def get_children(self, sector_id: str) -> Body:
        return await self._http.get(f"/api/v1/sectors/{sector_id}/children")

    async def get_users(self, sector_id: str) -> Body:
        return await self._http.get(f"/api/v1/sectors/{sector_id}/users")

    async def add_user(self, sector_id: str, data: Body) -> Body:
        return await self._http.post(f"/api/v1/sectors/{sector_id}/users", data)

    async def remove_user(self, sector_id: str, user_id: str) -> None:
        await self._http.delete(f"/api/v1/sectors/{sector_id}/users/{user_id}")

    async def get_user_sectors(self, user_id: str) -> Body:
        return await self._http.get(f"/api/v1/sectors/users/{user_id}")
