"""Custom profile attribute fields and per-user values."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from demokit.domain.ports import RemoteServiceError

from .context import PhaseResult
from .records import AttributePayload, RecordType, UserAttributeRecord, UserProfileRecord
from .source import iter_custom_records

if TYPE_CHECKING:
    from demokit.domain.model import CustomProfileField
    from demokit.domain.ports import DirectoryService, ProfileAttributeService

    from .context import PipelineContext

log = getLogger(__name__)


def build_field_definition(attribute: AttributePayload) -> dict[str, Any]:
    """Translate an attribute record into the server's field payload.

    Only configured extended settings are sent under ``attrs``.
    """

    definition: dict[str, Any] = {
        "name": attribute.name,
        "display_name": attribute.display_name or attribute.name,
        "type": attribute.type,
    }
    options = [option.model_dump(exclude_none=True) for option in attribute.options]
    attrs: dict[str, Any] = {}
    if attribute.ldap:
        attrs["ldap"] = attribute.ldap
    if attribute.saml:
        attrs["saml"] = attribute.saml
    if options:
        attrs["options"] = options
    if attribute.sort_order > 0:
        attrs["sort_order"] = attribute.sort_order
    if attribute.value_type:
        attrs["value_type"] = attribute.value_type
    if attribute.visibility:
        attrs["visibility"] = attribute.visibility
    if attrs:
        definition["attrs"] = attrs
    return definition


@dataclass(slots=True)
class UserAttributePhase:
    """Ensure custom profile fields exist, then fill in user values."""

    profiles: ProfileAttributeService
    directory: DirectoryService
    name: str = "user-attributes"

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        attributes = [
            record.attribute
            for record in iter_custom_records(
                context.source_path, RecordType.USER_ATTRIBUTE, UserAttributeRecord
            )
        ]
        profiles = list(
            iter_custom_records(context.source_path, RecordType.USER_PROFILE, UserProfileRecord)
        )
        if not attributes and not profiles:
            log.info("No user attributes to process")
            return result

        fields = {field.name: field for field in self.profiles.list_profile_fields()}
        for attribute in attributes:
            self._ensure_field(attribute, fields, result)
        for profile in profiles:
            self._apply_profile(profile, fields, result)

        log.info(
            "User attributes finished: processed=%d, skipped=%d, errors=%d",
            result.processed,
            result.skipped,
            result.errors,
        )
        return result

    def _ensure_field(
        self,
        attribute: AttributePayload,
        fields: dict[str, CustomProfileField],
        result: PhaseResult,
    ) -> None:
        if attribute.name in fields:
            log.debug("Profile field %s already exists", attribute.name)
            result.skipped += 1
            return
        try:
            created = self.profiles.create_profile_field(build_field_definition(attribute))
        except RemoteServiceError as exc:
            if exc.indicates_existing:
                result.skipped += 1
                return
            log.warning("Failed to create profile field %s: %s", attribute.name, exc)
            result.errors += 1
            return
        log.info("Created profile field %s", created.name)
        fields[created.name] = created
        result.processed += 1

    def _apply_profile(
        self,
        profile: UserProfileRecord,
        fields: dict[str, CustomProfileField],
        result: PhaseResult,
    ) -> None:
        values: dict[str, str] = {}
        for name, value in profile.attributes.items():
            field = fields.get(name)
            if field is None:
                log.warning("Unknown profile attribute %s for %s", name, profile.user)
                result.errors += 1
                continue
            values[field.id] = value
        if not values:
            return

        try:
            user = self.directory.get_user_by_username(profile.user)
            self.profiles.update_user_profile_attributes(user.id, values)
        except RemoteServiceError as exc:
            log.warning("Failed to set profile attributes for %s: %s", profile.user, exc)
            result.errors += 1
            return
        result.processed += 1
