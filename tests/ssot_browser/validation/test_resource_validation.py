from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ssot_browser.config.model import ResourceConfig
from ssot_browser.core.record_store import RecordStore
from ssot_browser.validation import ValidationError, validate_resource, warn_on_invalid_resource


def _cfg():
    return ResourceConfig.from_raw(
        {
            "key": "mediaPlan",
            "facets": [{"name": "campaign", "column": "CAMPAIGN_ID"}],
            "edit_scopes": [
                {
                    "scope": "BY_COMPOUND_KEY",
                    "governed_column": "PLACMENT",
                    "key_columns": ["CAMPAIGN_ID", "PLACMENT"],
                    "payload_fields": ["CAMPAIGN_ID", "PLACMENT", "NOTES"],
                }
            ],
        },
        source_path=Path("mediaPlan.json"),
        index=0,
    )


def test_matching_columns_pass():
    store = RecordStore.from_rows("mediaPlan", [{"CAMPAIGN_ID": "C-1", "PLACMENT": "P-1", "NOTES": ""}])

    validate_resource(_cfg(), store)


def test_empty_dataset_is_not_checked():
    validate_resource(_cfg(), RecordStore.empty("mediaPlan"))


def test_missing_columns_are_reported_by_code():
    store = RecordStore.from_rows("mediaPlan", [{"CAMPAIGN": "C-1", "PLACEMENT": "P-1"}])

    with pytest.raises(ValidationError) as excinfo:
        validate_resource(_cfg(), store)

    error = excinfo.value
    assert error.resource == "mediaPlan"
    assert [(i.code, i.column) for i in error.issues] == [
        ("FACET_COLUMN", "CAMPAIGN_ID"),
        ("SCOPE_GOVERNED_COLUMN", "PLACMENT"),
        ("SCOPE_KEY_COLUMN", "CAMPAIGN_ID"),
        ("SCOPE_KEY_COLUMN", "PLACMENT"),
        ("SCOPE_PAYLOAD_FIELD", "NOTES"),
    ]
    assert error.missing_columns == ["CAMPAIGN_ID", "NOTES", "PLACMENT"]


def test_warn_on_invalid_resource_logs_instead_of_raising(caplog):
    store = RecordStore.from_rows("mediaPlan", [{"CAMPAIGN_ID": "C-1", "PLACMENT": "P-1"}])
    logger = logging.getLogger("test.validation")

    with caplog.at_level(logging.WARNING, logger="test.validation"):
        ok = warn_on_invalid_resource(_cfg(), store, logger)

    assert ok is False
    assert "SCOPE_PAYLOAD_FIELD" in caplog.text
