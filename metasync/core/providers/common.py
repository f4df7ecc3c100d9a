from __future__ import annotations

from typing import List

from metasync.core.descriptors import builders as b
from metasync.core.descriptors.models import MetadataRecordDescriptor

from .base import MetadataProvider

GP_DEFAULT_LOCATION = "kenyaemr.defaultLocation"

# Encounter types
ENCOUNTER_CONSULTATION = "465a92f2-baf8-42e9-9612-53064be868e8"
ENCOUNTER_LAB_RESULTS = "17a381d1-7e29-406a-b782-aa903b963c28"
ENCOUNTER_REGISTRATION = "de1f9d67-b73e-4e1b-90d0-036166fc6995"
ENCOUNTER_TRIAGE = "d1059fb9-a079-4feb-a749-eedd709ae542"

# Forms
FORM_CLINICAL_ENCOUNTER = "e958f902-64df-4819-afd4-7fb061f59308"
FORM_LAB_RESULTS = "7e603909-9ed5-4d0c-a688-26ecb05d8b6e"
FORM_OBSTETRIC_HISTORY = "8e4e1abf-7c08-4ba8-b6d8-19a9f1ccb6c9"
FORM_OTHER_MEDICATIONS = "d4ff8ad1-19f8-484f-9395-04c755de9a47"
FORM_PROGRESS_NOTE = "0038a296-62f8-4099-80e5-c9ea7590c157"
FORM_SURGICAL_AND_MEDICAL_HISTORY = "4f3c9bd8-c117-4a5e-a7eb-12a627c29de6"
FORM_TRIAGE = "37f6bd8d-586a-4169-95fa-5781f987fe62"

GLOBAL_PROPERTY_DEFAULT_LOCATION = "8f80f3f7-bdc0-46f5-8f50-54dea2fcbb01"

LOCATION_ATTRIBUTE_MASTER_FACILITY_CODE = "8a845a89-6aa5-4111-81d3-0af31c45c002"

# Patient identifier types
IDENTIFIER_NATIONAL_ID = "49af6cdc-7968-4abb-bf46-de10d7f4859f"
IDENTIFIER_OLD_ID = "8d79403a-c2cc-11de-8d13-0010c6dffd0f"
IDENTIFIER_OPENMRS_ID = "dfacd928-0370-4315-99d7-6ec1c9f7ae76"
IDENTIFIER_PATIENT_CLINIC_NUMBER = "b4d66522-11fc-45c7-83e3-39a1af21ae0d"

# Person attribute types
PERSON_NEXT_OF_KIN_ADDRESS = "7cf22bec-d90a-46ad-9f48-035952261294"
PERSON_NEXT_OF_KIN_CONTACT = "342a1d39-c541-4b29-8818-930916f4c2dc"
PERSON_NEXT_OF_KIN_NAME = "830bef6d-b01f-449d-9f8d-ac0fede8dbd3"
PERSON_NEXT_OF_KIN_RELATIONSHIP = "d0aa9fd1-2ac5-45d8-9c5e-4317c622c8f5"
PERSON_SUBCHIEF_NAME = "40fa0c9c-7415-43ff-a4eb-c7c73d7b1a7a"
PERSON_TELEPHONE_CONTACT = "b2c38640-2603-4629-aebd-3b54f33f1e3a"

VISIT_ATTRIBUTE_SOURCE_FORM = "8bfab185-6947-4958-b7ab-dfafae1a3e3d"

VISIT_TYPE_OUTPATIENT = "3371a4d4-f66f-4454-a86d-92c7b3da990c"

# Core records referenced by key but owned by the host platform (never installed here)
LOCATION_UNKNOWN = "8d6c993e-c2cc-11de-8d13-0010c6dffd0f"
ORDER_TYPE_DRUG = "131168f4-15f5-102d-96e4-000c29c2a5d7"
PROVIDER_UNKNOWN = "ae01b8ff-a4cc-4012-bcf7-72359e852e14"


class CommonMetadataProvider(MetadataProvider):
    name = "common"

    def descriptors(self) -> List[MetadataRecordDescriptor]:
        return [
            b.encounter_type("Consultation", "Collection of clinical data during the main consultation", ENCOUNTER_CONSULTATION),
            b.encounter_type("Lab Results", "Collection of laboratory results", ENCOUNTER_LAB_RESULTS),
            b.encounter_type("Registration", "Initial data collection for a patient, not specific to any program", ENCOUNTER_REGISTRATION),
            b.encounter_type("Triage", "Collection of limited data prior to a more thorough examination", ENCOUNTER_TRIAGE),

            b.form("Clinical Encounter", None, ENCOUNTER_CONSULTATION, "1", FORM_CLINICAL_ENCOUNTER),
            b.form("Lab Results", None, ENCOUNTER_LAB_RESULTS, "1", FORM_LAB_RESULTS),
            b.form("Obstetric History", None, ENCOUNTER_REGISTRATION, "1", FORM_OBSTETRIC_HISTORY),
            b.form("Other Medications", "Recording of non-regimen medications", ENCOUNTER_CONSULTATION, "1", FORM_OTHER_MEDICATIONS),
            b.form("Progress Note", "For additional information - mostly complaints and examination findings.", ENCOUNTER_CONSULTATION, "1", FORM_PROGRESS_NOTE),
            b.form("Surgical and Medical History", None, ENCOUNTER_REGISTRATION, "1", FORM_SURGICAL_AND_MEDICAL_HISTORY),
            b.form("Triage", None, ENCOUNTER_TRIAGE, "1", FORM_TRIAGE),

            b.global_property(GP_DEFAULT_LOCATION, "The facility for which this installation is configured",
                              "location", None, None, GLOBAL_PROPERTY_DEFAULT_LOCATION),

            b.location_attribute_type("Master Facility Code", "Unique facility code allocated by the Ministry of Health",
                                      "regex_validated_text", r"\d{5}", 0, 1, LOCATION_ATTRIBUTE_MASTER_FACILITY_CODE),

            b.patient_identifier_type("Old Identification Number", "Identifier given out prior to OpenMRS",
                                      None, None, None,
                                      None, False, IDENTIFIER_OLD_ID),
            b.patient_identifier_type("OpenMRS ID", "Medical Record Number generated by OpenMRS for every patient",
                                      None, None, "luhn_mod25",
                                      b.LOCATION_REQUIRED, True, IDENTIFIER_OPENMRS_ID),
            b.patient_identifier_type("Patient Clinic Number", "Assigned to the patient at a clinic service (not globally unique)",
                                      r".{1,15}", "At most 15 characters long", None,
                                      b.LOCATION_REQUIRED, False, IDENTIFIER_PATIENT_CLINIC_NUMBER),
            b.patient_identifier_type("National ID", "Kenyan national identity card number",
                                      r"\d{5,10}", "Between 5 and 10 consecutive digits", None,
                                      b.LOCATION_NOT_USED, False, IDENTIFIER_NATIONAL_ID),

            b.person_attribute_type("Telephone contact", "Telephone number the patient can be contacted at",
                                    "string", None, False, 1.0, PERSON_TELEPHONE_CONTACT),
            b.person_attribute_type("Subchief name", "Name of subchief or chief of patient's area",
                                    "string", None, False, 2.0, PERSON_SUBCHIEF_NAME),
            b.person_attribute_type("Next of kin name", "Name of patient's next of kin",
                                    "string", None, False, 3.0, PERSON_NEXT_OF_KIN_NAME),
            b.person_attribute_type("Next of kin relationship", "Next of kin relationship to the patient",
                                    "string", None, False, 3.1, PERSON_NEXT_OF_KIN_RELATIONSHIP),
            b.person_attribute_type("Next of kin contact", "Telephone contact of patient's next of kin",
                                    "string", None, False, 3.2, PERSON_NEXT_OF_KIN_CONTACT),
            b.person_attribute_type("Next of kin address", "Address of patient's next of kin",
                                    "string", None, False, 3.3, PERSON_NEXT_OF_KIN_ADDRESS),

            b.visit_attribute_type("Source form", "The form whose submission created the visit",
                                   "form", None, 0, 1, VISIT_ATTRIBUTE_SOURCE_FORM),

            b.visit_type("Outpatient", "Visit where the patient is not admitted to the hospital", VISIT_TYPE_OUTPATIENT),
        ]
