import unittest

from sqlmodel import Session

from app.models import VisaRequirementImportItem, VisaRequirementUpdate, VisaStatus
from app.services.visa import (
    import_visa_requirements,
    primary_visa_status,
    update_visa_requirement,
    visa_stats,
)


class PrimaryStatusTests(unittest.TestCase):
    def test_easiest_method_wins(self):
        self.assertEqual(
            primary_visa_status(["embassy", "evisa", "visa-free"]), VisaStatus.VISA_FREE
        )
        self.assertEqual(primary_visa_status(["embassy", "evisa"]), VisaStatus.ETA)
        self.assertEqual(primary_visa_status(["visa-on-arrival"]), VisaStatus.VISA_ON_ARRIVAL)

    def test_no_methods_means_visa_required(self):
        self.assertEqual(primary_visa_status([]), VisaStatus.VISA_REQUIRED)
        self.assertEqual(primary_visa_status(None), VisaStatus.VISA_REQUIRED)


def test_update_defaults_application_method(db: Session) -> None:
    requirement = update_visa_requirement(
        db, VisaRequirementUpdate(country_code="gb", country_name="Birleşik Krallık")
    )
    assert requirement.country_code == "GB"
    assert requirement.visa_status == VisaStatus.VISA_REQUIRED
    assert requirement.application_method == "embassy"
    assert requirement.available_methods == []


def test_import_counts_and_stats(db: Session) -> None:
    items = [
        VisaRequirementImportItem(country_code="AZ", visa_status=VisaStatus.VISA_FREE),
        VisaRequirementImportItem(country_code="IN", visa_status=VisaStatus.EVISA),
    ]
    result = import_visa_requirements(db, items, data_source="passport-index")
    assert result["stats"] == {"total": 2, "imported": 2, "updated": 0, "errors": 0}
    assert result["error_details"] == []

    result = import_visa_requirements(db, items[:1])
    assert result["stats"]["updated"] == 1

    stats = visa_stats(db)
    assert stats["total"] == 2
    assert stats["by_status"]["visa-free"] == 1
    assert stats["by_status"]["evisa"] == 1
    assert stats["by_status"]["visa-required"] == 0
