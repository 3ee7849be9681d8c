"""
Trespass record import catalog.

The fixed, ordered list of fields an uploaded spreadsheet can populate.
Catalog order is the tie-break order used by the header mapper.
"""

from models.field_mapping import FieldDefinition


# =============================================================================
# TRESPASS RECORD FIELDS
# =============================================================================
# Required fields first; an import cannot be confirmed until all five are mapped.

TRESPASS_RECORD_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition(key="first_name", label="First Name", required=True),
    FieldDefinition(key="last_name", label="Last Name", required=True),
    FieldDefinition(key="school_id", label="School ID", required=True),
    FieldDefinition(key="expiration_date", label="Expiration Date", required=True),
    FieldDefinition(key="trespassed_from", label="Trespassed From", required=True),
    FieldDefinition(key="aka", label="Also Known As (AKA)"),
    FieldDefinition(key="date_of_birth", label="Date of Birth"),
    FieldDefinition(key="incident_date", label="Incident Date"),
    FieldDefinition(key="incident_location", label="Incident Location"),
    FieldDefinition(key="description", label="Description"),
    FieldDefinition(key="status", label="Status"),
    FieldDefinition(key="is_current_student", label="Is Current Student"),
    FieldDefinition(key="affiliation", label="Affiliation"),
    FieldDefinition(key="current_school", label="Current School"),
    FieldDefinition(key="guardian_first_name", label="Guardian First Name"),
    FieldDefinition(key="guardian_last_name", label="Guardian Last Name"),
    FieldDefinition(key="guardian_phone", label="Guardian Phone"),
    FieldDefinition(key="school_contact", label="School Contact"),
    FieldDefinition(key="notes", label="Notes"),
    FieldDefinition(key="photo", label="Photo"),
)

REQUIRED_FIELD_KEYS = tuple(f.key for f in TRESPASS_RECORD_FIELDS if f.required)


# =============================================================================
# TEMPLATE SAMPLE ROW
# =============================================================================
# One example value per field, written under the header line of the template.

TEMPLATE_SAMPLE_ROW = {
    "first_name": "John",
    "last_name": "Doe",
    "school_id": "12345",
    "expiration_date": "2026-10-15",
    "trespassed_from": "All district properties",
    "aka": "Big John",
    "date_of_birth": "1995-05-20",
    "incident_date": "2025-10-10",
    "incident_location": "North High School",
    "description": "Unauthorized entry after school hours",
    "status": "active",
    "is_current_student": "false",
    "affiliation": "Little Timmy",
    "current_school": "North High School",
    "guardian_first_name": "Jane",
    "guardian_last_name": "Doe",
    "guardian_phone": "555-1234",
    "school_contact": "Dr Brown",
    "notes": "First offense, cooperative",
    "photo": "https://example.com/photo.jpg",
}

TEMPLATE_FILENAME = "trespass_records_template.csv"


# =============================================================================
# UPLOAD PERMISSIONS
# =============================================================================

UPLOAD_ROLES = ("campus_admin", "district_admin", "master_admin")

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")
