"""
Record upload service — write confirmed import rows to Supabase.

Checks the uploader's role and tenant, then upserts each record by
(school_id, tenant_id). There is no unique constraint on that pair, so the
upsert is a lookup followed by an update or an insert.
"""

from datetime import datetime
from typing import Optional
import structlog

from config import get_supabase_client
from config.import_fields import UPLOAD_ROLES
from models.field_mapping import UploadSummary
from models.trespass_record import TrespassRecordCreate
from exceptions import (
    ProfileNotFoundError,
    TenantMissingError,
    UploadPermissionError,
    RecordUploadError,
    DatabaseError,
)

logger = structlog.get_logger(__name__)


class RecordUploadService:
    """
    Tenant-scoped trespass record writes.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "trespass_records"
        self.profiles_table = "user_profiles"

    # ===================
    # AUTHORIZATION
    # ===================

    def get_profile(self, user_id: str) -> dict:
        """
        Load role and tenant ids for a user.

        Raises:
            ProfileNotFoundError: No profile row for the user
        """
        logger.debug("getting_user_profile", user_id=user_id)

        try:
            result = (
                self.db.table(self.profiles_table)
                .select("role, tenant_id, active_tenant_id")
                .eq("id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_user_profile_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProfileNotFoundError(user_id)

        return result.data[0]

    def resolve_tenant(self, user_id: str) -> str:
        """
        Tenant the user's uploads are written into.

        Master admins who switched tenants write into active_tenant_id,
        everyone else into their own tenant_id.

        Raises:
            ProfileNotFoundError: No profile row for the user
            TenantMissingError: Profile has neither tenant id
            UploadPermissionError: Role may not create records
        """
        profile = self.get_profile(user_id)

        tenant_id: Optional[str] = profile.get("active_tenant_id") or profile.get("tenant_id")
        if not tenant_id:
            raise TenantMissingError(user_id)

        role = profile.get("role")
        if role not in UPLOAD_ROLES:
            logger.warning("upload_not_permitted", user_id=user_id, role=role)
            raise UploadPermissionError(role, UPLOAD_ROLES)

        return tenant_id

    # ===================
    # WRITE OPERATIONS
    # ===================

    def _find_existing_id(self, school_id: str, tenant_id: str) -> Optional[str]:
        result = (
            self.db.table(self.table)
            .select("id")
            .is_("deleted_at", "null")
            .eq("school_id", school_id)
            .eq("tenant_id", tenant_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return result.data[0]["id"]

    def upload_records(
        self,
        user_id: str,
        records: list[TrespassRecordCreate],
    ) -> UploadSummary:
        """
        Upsert records into the uploader's tenant.

        Records that fail do not stop the others; once all were attempted,
        any failure is raised with the list of messages.

        Args:
            user_id: Acting user from the identity provider
            records: Validated record payloads

        Returns:
            UploadSummary with inserted and updated counts

        Raises:
            ProfileNotFoundError, TenantMissingError, UploadPermissionError
            RecordUploadError: At least one record failed to write
        """
        tenant_id = self.resolve_tenant(user_id)

        logger.info(
            "upserting_records",
            count=len(records),
            user_id=user_id,
            tenant_id=tenant_id
        )

        summary = UploadSummary()
        errors: list[str] = []

        for record in records:
            row = {
                "user_id": user_id,
                "tenant_id": tenant_id,
                **record.model_dump(),
            }

            try:
                existing_id = self._find_existing_id(record.school_id, tenant_id)

                if existing_id:
                    (
                        self.db.table(self.table)
                        .update({**row, "updated_at": datetime.utcnow().isoformat()})
                        .eq("id", existing_id)
                        .execute()
                    )
                    summary.updated += 1
                else:
                    self.db.table(self.table).insert(row).execute()
                    summary.inserted += 1

            except Exception as e:
                errors.append(
                    f"{record.first_name} {record.last_name} ({record.school_id}): {e}"
                )

        if errors:
            logger.error(
                "record_upsert_errors",
                failed=len(errors),
                inserted=summary.inserted,
                updated=summary.updated,
                first_error=errors[0]
            )
            raise RecordUploadError(errors, summary.inserted, summary.updated)

        logger.info(
            "records_upserted",
            inserted=summary.inserted,
            updated=summary.updated,
            total=summary.count
        )

        return summary


# Singleton instance
_record_upload_service: Optional[RecordUploadService] = None


def get_record_upload_service() -> RecordUploadService:
    """Get or create RecordUploadService instance."""
    global _record_upload_service
    if _record_upload_service is None:
        _record_upload_service = RecordUploadService()
    return _record_upload_service
